import asyncio
import logging

import fanout.constants as C
from fanout import accounts
from fanout.deadline import DeadlineRunner
from fanout.errors import ConfigError, DeadlineExceeded, OperationError
from fanout.ledger import LedgerClient
from fanout.models import Batch, ControllingAccount, ReconcileReport, TransferSummary
from fanout.prompts import Operator
from fanout.reconcile import BalanceReconciler
from fanout.store import BatchStore
from fanout.transfer import TransferPipeline

log = logging.getLogger("fanout.distributor")

PROBABLE_CAUSES = (
    "Insufficient balance on the funding account",
    "Connection problems with the ledger RPC endpoint",
    "The funding account does not exist on this network",
    "Rate limiting on a public endpoint",
    "The payment was submitted but its validation could not be confirmed",
)


class GlobalDeadlineExceeded(Exception):
    """The transfer phase as a whole ran out of time."""


class Distributor:
    def __init__(self, config: dict, ledger: LedgerClient, store: BatchStore, operator: Operator):
        self.config = config
        self.ledger = ledger
        self.store = store
        self.operator = operator
        to = config["timeout"]
        self.global_timeout = float(to["global"])
        self.balance_timeout = float(to["balance"])
        self.faucet_timeout = float(to["faucet"])
        self.minimum_balance = float(config["funding"]["minimum_balance"])
        self.explorer_pause = float(config["output"]["explorer_pause"])
        self.runner = DeadlineRunner()
        self.pipeline = TransferPipeline(ledger, store, timeout=float(to["transfer"]), runner=self.runner)
        self.reconciler = BalanceReconciler(ledger, store, timeout=self.balance_timeout, runner=self.runner)
        self.batch: Batch = []

    async def controlling_balance(self, source: ControllingAccount) -> float | None:
        try:
            return await self.runner.run_with_deadline(
                self.ledger.get_balance(source.address), self.balance_timeout, label="funding account balance"
            )
        except (DeadlineExceeded, OperationError) as e:
            log.warning("Could not read the funding account balance: %s", e)
            return None

    async def ensure_funded(self, source: ControllingAccount) -> float | None:
        """Top up the funding account from the faucet when it is below the minimum. Never fatal."""
        balance = await self.controlling_balance(source)
        if balance is None:
            return None
        log.info("Funding account balance: %s XRP", balance)
        if balance >= self.minimum_balance:
            return balance

        log.warning("Funding account is below %s XRP, requesting faucet credit...", self.minimum_balance)
        try:
            balance = await self.runner.run_with_deadline(
                self.ledger.request_faucet(source.address), self.faucet_timeout, label="faucet credit"
            )
        except (DeadlineExceeded, OperationError) as e:
            log.error("Faucet credit failed: %s", e)
            log.warning("Could not get faucet funds. Transfers may fail for lack of balance.")
            return balance
        log.info("Faucet credit received. New funding account balance: %s XRP", balance)
        return balance

    async def distribute(self, source: ControllingAccount, count: int, amount: float) -> TransferSummary:
        """Generate `count` accounts and fund each with `amount` XRP.

        Raises GlobalDeadlineExceeded when the transfer phase outlives the
        global deadline; the batch is checkpointed before it propagates.
        """
        log.info("Creating %s accounts...", count)
        self.batch = accounts.generate_batch(self.ledger, count)
        self.store.checkpoint(self.batch)
        log.info("Accounts created and saved to %s", self.store.path)

        log.info("Transferring %s XRP to each account...", amount)
        deadline = asyncio.timeout(self.global_timeout)
        try:
            async with deadline:
                return await self.pipeline.run(source, self.batch, amount)
        except TimeoutError:
            if not deadline.expired():
                raise
            log.error("Global transfer deadline of %ss exceeded!", self.global_timeout)
            log.error("Stopping. Accounts created so far are saved in %s.", self.store.path)
            self.store.checkpoint(self.batch)
            if n := self.runner.abandoned_count:
                log.debug("%s in-flight operation(s) abandoned", n)
            raise GlobalDeadlineExceeded(self.global_timeout) from None

    def report(self, summary: TransferSummary) -> None:
        log.info("=== Transfer summary ===")
        if summary.confirmed:
            log.info("%s of %s transfers confirmed.", summary.confirmed, summary.attempted)
            return
        log.warning("No transfer was confirmed.")
        log.warning("IMPORTANT: despite the errors above, the payments may have been applied on the ledger.")
        log.warning("Check the new accounts in the explorer before sending again. Possible causes:")
        for i, cause in enumerate(PROBABLE_CAUSES, 1):
            log.warning("%s. %s", i, cause)

    async def open_explorer(self, batch: Batch) -> None:
        for n, record in enumerate(batch):
            url = self.ledger.explorer_url(record.address)
            log.info("Opening explorer for account %s (%s)...", record.index, record.address)
            if not self.operator.open_url(url):
                log.warning("Could not open a browser. Visit it manually: %s", url)
            if n < len(batch) - 1:
                await asyncio.sleep(self.explorer_pause)

    async def reconcile(self, batch: Batch) -> ReconcileReport:
        return await self.reconciler.reconcile(batch)

    async def reconcile_file(self) -> ReconcileReport:
        """Re-check a batch saved by an earlier run."""
        if not self.store.path.is_file():
            raise ConfigError(f"no saved batch at {self.store.path}")
        self.batch = self.store.load()
        log.info("Loaded %s accounts from %s", len(self.batch), self.store.path)
        return await self.reconcile(self.batch)

    async def run(self) -> int:
        log.info("=== XRP Ledger account fan-out ===")
        try:
            request = self.operator.distribution_request()
            source = self.ledger.load_account(request.secret)
        except ConfigError as e:
            log.error("%s", e)
            return C.ExitCode.BAD_INPUT
        log.info("Funding account loaded: %s", source.address)

        await self.ensure_funded(source)

        try:
            summary = await self.distribute(source, request.count, request.amount)
        except GlobalDeadlineExceeded:
            return C.ExitCode.GLOBAL_TIMEOUT
        self.report(summary)
        log.info("All %s accounts were created and saved to %s.", len(self.batch), self.store.path)

        if self.operator.wants_verification():
            await self.reconcile(self.batch)
        if self.operator.wants_explorer():
            await self.open_explorer(self.batch)

        log.info("IMPORTANT: connection errors and rate limiting are common on public endpoints.")
        log.info("Payments may have been applied even when errors were reported; check the accounts in the explorer.")
        log.info("Done.")
        return C.ExitCode.OK
