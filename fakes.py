"""In-memory stand-ins for the ledger, the operator and the on-disk store."""

import asyncio
import copy

from fanout.config import DEFAULTS
from fanout.errors import ConfigError, OperationError
from fanout.models import ControllingAccount, GeneratedAccount
from fanout.prompts import parse_request
from fanout.store import BatchStore, dumps

SOURCE = "rSource"
HANG = 3600


def fast_config(timeouts: dict | None = None) -> dict:
    cfg = copy.deepcopy(DEFAULTS)
    cfg["timeout"].update({"transfer": 0.2, "balance": 0.2, "global": 5, "faucet": 0.2, "faucet_poll": 0.01})
    cfg["timeout"].update(timeouts or {})
    cfg["output"]["explorer_pause"] = 0
    return cfg


class FakeLedger:
    """A ledger where every account balance is a dict entry.

    Transfer calls are numbered from 1 in submission order. `hang` names the
    calls that never settle, `late` the ones that settle after `late_delay`,
    `fail` the ones the ledger rejects.
    """

    def __init__(
        self,
        *,
        source_balance: float = 0.0,
        hang: set[int] = frozenset(),
        fail: set[int] = frozenset(),
        late: set[int] = frozenset(),
        late_delay: float = 0.1,
        faucet_error: Exception | None = None,
        faucet_amount: float = 2.0,
        unreadable: set[str] = frozenset(),
        events: list | None = None,
    ):
        self.balances: dict[str, float] = {SOURCE: source_balance}
        self.hang = hang
        self.fail = fail
        self.late = late
        self.late_delay = late_delay
        self.faucet_error = faucet_error
        self.faucet_amount = faucet_amount
        self.unreadable = set(unreadable)
        self.events = events if events is not None else []
        self.transfers = 0
        self.created = 0

    def new_account(self) -> GeneratedAccount:
        self.created += 1
        return GeneratedAccount(address=f"rNew{self.created}", secret=f"sNew{self.created}")

    def load_account(self, secret: str) -> ControllingAccount:
        if secret != "sSource":
            raise ConfigError("not a valid account seed")
        return ControllingAccount(address=SOURCE, secret=secret)

    async def get_balance(self, address: str) -> float:
        self.events.append(("balance", address))
        if address in self.unreadable:
            raise OperationError(f"balance query for {address} failed")
        await asyncio.sleep(0)
        return self.balances.get(address, 0.0)

    async def request_faucet(self, address: str) -> float:
        self.events.append(("faucet", address))
        await asyncio.sleep(0)
        if self.faucet_error is not None:
            raise self.faucet_error
        self.balances[address] = self.balances.get(address, 0.0) + self.faucet_amount
        return self.balances[address]

    async def transfer(self, source: ControllingAccount, destination: str, amount: float) -> str:
        self.transfers += 1
        n = self.transfers
        self.events.append(("transfer", destination))
        await asyncio.sleep(0)
        if n in self.hang:
            await asyncio.sleep(HANG)
        if n in self.late:
            await asyncio.sleep(self.late_delay)
        if n in self.fail:
            raise OperationError(f"payment to {destination} not applied: tecNO_DST_INSUF_XRP")
        if self.balances.get(source.address, 0.0) < amount:
            raise OperationError(f"payment to {destination} not applied: tecUNFUNDED_PAYMENT")
        self.balances[source.address] -= amount
        self.balances[destination] = self.balances.get(destination, 0.0) + amount
        return f"HASH{n}"

    def explorer_url(self, address: str) -> str:
        return f"https://explorer.test/accounts/{address}"


class RecordingStore(BatchStore):
    """BatchStore that also logs every successful save, with the snapshot written."""

    def __init__(self, path, events: list):
        super().__init__(path)
        self.events = events
        self.snapshots: list[str] = []

    def save(self, batch) -> None:
        super().save(batch)
        self.snapshots.append(dumps(batch))
        self.events.append(("save", len(batch)))


class ScriptedOperator:
    def __init__(self, *, secret="sSource", count=3, amount=0.4, verify=False, open_explorer=False, browser_ok=True):
        self.secret = secret
        self.count = count
        self.amount = amount
        self.verify = verify
        self.open_explorer = open_explorer
        self.browser_ok = browser_ok
        self.opened: list[str] = []

    def distribution_request(self):
        return parse_request(self.secret, self.count, self.amount)

    def wants_verification(self) -> bool:
        return self.verify

    def wants_explorer(self) -> bool:
        return self.open_explorer

    def open_url(self, url: str) -> bool:
        self.opened.append(url)
        return self.browser_ok
