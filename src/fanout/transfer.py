import logging

import fanout.constants as C
from fanout.deadline import DeadlineRunner
from fanout.errors import DeadlineExceeded, OperationError
from fanout.ledger import LedgerClient
from fanout.models import Batch, ControllingAccount, TransferResult, TransferSummary
from fanout.store import BatchStore

log = logging.getLogger("fanout.transfer")


class TransferPipeline:
    """Fund each record in turn from one controlling account.

    Payments from a single account share its sequence number, so they go out
    strictly one at a time. A failed or timed-out payment is never resubmitted:
    it may have landed anyway, and the reconciler will find out.
    """

    def __init__(
        self,
        ledger: LedgerClient,
        store: BatchStore,
        *,
        timeout: float = C.TRANSFER_TIMEOUT,
        runner: DeadlineRunner | None = None,
    ):
        self.ledger = ledger
        self.store = store
        self.timeout = timeout
        self.runner = runner or DeadlineRunner()

    async def transfer(self, source: ControllingAccount, destination: str, amount: float) -> str:
        """Submit one payment and wait for validation. Returns the transaction hash."""
        log.info("Preparing payment of %s XRP from %s to %s", amount, source.address, destination)
        log.debug("Submitting with a %ss timeout", self.timeout)
        return await self.runner.run_with_deadline(
            self.ledger.transfer(source, destination, amount),
            self.timeout,
            label=f"payment to {destination}",
        )

    async def run(self, source: ControllingAccount, batch: Batch, amount: float) -> TransferSummary:
        summary = TransferSummary()
        for record in batch:
            log.info("Transferring %s XRP to account %s (%s)...", amount, record.index, record.address)
            try:
                tx_hash = await self.transfer(source, record.address, amount)
            except DeadlineExceeded as e:
                result = TransferResult(record.index, record.address, C.TransferOutcome.TIMED_OUT, reason=str(e))
                self._report_failure(result)
            except OperationError as e:
                result = TransferResult(record.index, record.address, C.TransferOutcome.FAILED, reason=str(e))
                self._report_failure(result)
            else:
                record.mark_transferred(amount)
                result = TransferResult(record.index, record.address, C.TransferOutcome.CONFIRMED, tx_hash=tx_hash)
                log.info("Transfer confirmed. Hash: %s", tx_hash)
            summary.results.append(result)

            saved = self.store.checkpoint(batch)
            log.info("%s %s (%s)", "Updated" if saved else "Could not update", self.store.path, result.outcome.lower())
        return summary

    def _report_failure(self, result: TransferResult) -> None:
        if result.outcome == C.TransferOutcome.TIMED_OUT:
            log.error("Transfer to account %s timed out: %s", result.index, result.reason)
        else:
            log.error("Transfer to account %s failed: %s", result.index, result.reason)
        log.warning(
            "The payment may still have been applied on the ledger; check %s before sending again.",
            self.ledger.explorer_url(result.address),
        )
