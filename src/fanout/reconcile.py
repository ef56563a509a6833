import logging

import fanout.constants as C
from fanout.deadline import DeadlineRunner
from fanout.errors import DeadlineExceeded, OperationError
from fanout.ledger import LedgerClient
from fanout.models import BalanceObservation, Batch, ReconcileReport
from fanout.store import BatchStore

log = logging.getLogger("fanout.reconcile")


class BalanceReconciler:
    """Correct recorded transfer status from observed balances.

    A positive balance on a record marked unsuccessful means the payment landed
    after we stopped waiting for it. The record then takes the observed balance
    as its amount, which also counts any funds that arrived from elsewhere.
    Nothing here ever marks a record unsuccessful.
    """

    def __init__(
        self,
        ledger: LedgerClient,
        store: BatchStore,
        *,
        timeout: float = C.BALANCE_TIMEOUT,
        runner: DeadlineRunner | None = None,
    ):
        self.ledger = ledger
        self.store = store
        self.timeout = timeout
        self.runner = runner or DeadlineRunner()

    async def balance_of(self, address: str) -> float:
        """Current balance in XRP, or UNKNOWN_BALANCE if it could not be read in time."""
        try:
            return await self.runner.run_with_deadline(
                self.ledger.get_balance(address), self.timeout, label=f"balance of {address}"
            )
        except (DeadlineExceeded, OperationError) as e:
            log.error("Could not read the balance of %s: %s", address, e)
            return C.UNKNOWN_BALANCE

    async def reconcile(self, batch: Batch) -> ReconcileReport:
        log.info("=== Checking balances of the generated accounts ===")
        report = ReconcileReport()
        for record in batch:
            url = self.ledger.explorer_url(record.address)
            log.info("Account %s (%s): %s", record.index, record.address, url)

            balance = await self.balance_of(record.address)
            obs = BalanceObservation(record.index, record.address, balance, url)
            if not obs.verified:
                log.warning("Balance unverifiable, check it in the explorer: %s", url)
            else:
                log.info("Current balance: %s XRP", balance)
                if balance > 0 and not record.transfer_success:
                    log.info("Funds detected on account %s, marking its transfer successful", record.index)
                    record.mark_transferred(balance)
                    obs.corrected = True
            report.observations.append(obs)

        self.store.checkpoint(batch)

        if not report.any_verified:
            log.warning("No balance could be verified through the API. Use the explorer links above.")
        else:
            log.info(
                "Balances verified for %s of %s accounts, %s record(s) corrected.",
                len(report.observations) - len(report.unverified),
                len(report.observations),
                len(report.corrected),
            )
        return report
