"""Account records and the batch they form."""

from dataclasses import dataclass, field
from typing import Any

import fanout.constants as C


@dataclass(slots=True)
class GeneratedAccount:
    address: str
    secret: str = field(repr=False)


@dataclass(slots=True)
class ControllingAccount:
    """The funding account. Lives only as long as the process."""

    address: str
    secret: str = field(repr=False)


@dataclass(slots=True)
class AccountRecord:
    """One generated account and what we know about its funding.

    `amount` is in XRP and only goes positive together with `transfer_success`,
    either from a confirmed transfer or from a reconciled balance.
    """

    index: int
    address: str
    secret: str = field(repr=False)
    amount: float = 0
    transfer_success: bool = False

    def mark_transferred(self, amount: float) -> None:
        self.amount = amount
        self.transfer_success = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "address": self.address,
            "secret": self.secret,
            "amount": self.amount,
            "transferSuccess": self.transfer_success,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "AccountRecord":
        return cls(
            index=int(d["index"]),
            address=d["address"],
            secret=d["secret"],
            amount=d.get("amount", 0),
            transfer_success=bool(d.get("transferSuccess", False)),
        )


Batch = list[AccountRecord]


@dataclass(slots=True)
class TransferResult:
    index: int
    address: str
    outcome: C.TransferOutcome
    tx_hash: str | None = None
    reason: str | None = None


@dataclass(slots=True)
class TransferSummary:
    results: list[TransferResult] = field(default_factory=list)

    @property
    def confirmed(self) -> int:
        return sum(1 for r in self.results if r.outcome == C.TransferOutcome.CONFIRMED)

    @property
    def attempted(self) -> int:
        return len(self.results)


@dataclass(slots=True)
class BalanceObservation:
    index: int
    address: str
    balance: float
    explorer_url: str
    corrected: bool = False

    @property
    def verified(self) -> bool:
        return self.balance >= 0


@dataclass(slots=True)
class ReconcileReport:
    observations: list[BalanceObservation] = field(default_factory=list)

    @property
    def corrected(self) -> list[BalanceObservation]:
        return [o for o in self.observations if o.corrected]

    @property
    def unverified(self) -> list[BalanceObservation]:
        return [o for o in self.observations if not o.verified]

    @property
    def any_verified(self) -> bool:
        return any(o.verified for o in self.observations)
