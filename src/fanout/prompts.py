"""Operator input: the controlling seed, how many accounts, how much each, and two yes/no follow-ups.

Values given on the command line are used as-is; anything missing is prompted for.
"""

import logging
import webbrowser
from collections.abc import Callable
from decimal import Decimal
from typing import Protocol

from pydantic import BaseModel, Field, PositiveInt, ValidationError, field_validator

from fanout.errors import ConfigError

log = logging.getLogger("fanout.prompts")

YES = {"y", "yes"}


class DistributionRequest(BaseModel):
    secret: str = Field(min_length=1, repr=False)
    count: PositiveInt
    amount: float = Field(gt=0, allow_inf_nan=False)

    @field_validator("amount")
    @classmethod
    def _whole_drops(cls, v: float) -> float:
        if Decimal(repr(v)).as_tuple().exponent < -6:
            raise ValueError("amount cannot be finer than 0.000001 XRP (one drop)")
        return v


def parse_request(secret, count, amount) -> DistributionRequest:
    """Validate raw operator input. Raises ConfigError naming the first bad field."""
    try:
        return DistributionRequest(secret=secret or "", count=count, amount=amount)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(p) for p in err["loc"]) or "input"
        if field == "secret":
            raise ConfigError(f"invalid secret: {err['msg']}") from e
        raise ConfigError(f"invalid {field}: {err['msg']} (got {err.get('input')!r})") from e


def is_yes(answer: str | None) -> bool:
    return (answer or "").strip().lower() in YES


class Operator(Protocol):
    def distribution_request(self) -> DistributionRequest: ...
    def wants_verification(self) -> bool: ...
    def wants_explorer(self) -> bool: ...
    def open_url(self, url: str) -> bool: ...


class PromptOperator:
    """Line-based prompts on the terminal, skipped for anything preset."""

    def __init__(
        self,
        *,
        secret: str | None = None,
        count: int | str | None = None,
        amount: float | str | None = None,
        verify: bool | None = None,
        open_explorer: bool | None = None,
        ask: Callable[[str], str] = input,
    ):
        self.secret = secret
        self.count = count
        self.amount = amount
        self.verify = verify
        self.open_explorer = open_explorer
        self.ask = ask

    def _prompt(self, question: str) -> str:
        try:
            return self.ask(question).strip()
        except EOFError as e:
            raise ConfigError("input closed before all values were given") from e

    def distribution_request(self) -> DistributionRequest:
        secret = self.secret if self.secret is not None else self._prompt("Seed of the funding account: ")
        count = self.count if self.count is not None else self._prompt("How many accounts do you want to create? ")
        amount = self.amount if self.amount is not None else self._prompt("How much XRP should each account receive? ")
        return parse_request(secret, count, amount)

    def _confirm(self, question: str) -> bool:
        try:
            return is_yes(self.ask(question))
        except EOFError:
            return False

    def wants_verification(self) -> bool:
        if self.verify is not None:
            return self.verify
        return self._confirm("\nCheck the current balance of the new accounts? (y/n): ")

    def wants_explorer(self) -> bool:
        if self.open_explorer is not None:
            return self.open_explorer
        return self._confirm("\nOpen the explorer for the new accounts? (y/n): ")

    def open_url(self, url: str) -> bool:
        try:
            return webbrowser.open(url)
        except webbrowser.Error as e:
            log.debug("webbrowser failed for %s: %s", url, e)
            return False
