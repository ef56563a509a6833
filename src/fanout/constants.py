from enum import IntEnum, StrEnum
from typing import Final

# Per-operation and whole-run deadlines, in seconds
TRANSFER_TIMEOUT: Final = 30.0
BALANCE_TIMEOUT: Final = 10.0
GLOBAL_TRANSFER_TIMEOUT: Final = 60.0
FAUCET_TIMEOUT: Final = 60.0
FAUCET_POLL_INTERVAL: Final = 1.0

MINIMUM_FUNDING_BALANCE: Final = 0.1  # XRP
UNKNOWN_BALANCE: Final = -1.0
EXPLORER_PAUSE: Final = 1.0

DEFAULT_OUTPUT: Final = "wallets.json"
TESTNET_RPC: Final = "https://s.altnet.rippletest.net:51234"
TESTNET_FAUCET: Final = "https://faucet.altnet.rippletest.net/accounts"
TESTNET_EXPLORER: Final = "https://testnet.xrpl.org/accounts/{address}"


class ExitCode(IntEnum):
    OK = 0
    GLOBAL_TIMEOUT = 1
    BAD_INPUT = 2


class TransferOutcome(StrEnum):
    CONFIRMED = "CONFIRMED"
    TIMED_OUT = "TIMED_OUT"
    FAILED    = "FAILED"


__all__ = [
    "BALANCE_TIMEOUT",
    "DEFAULT_OUTPUT",
    "EXPLORER_PAUSE",
    "FAUCET_POLL_INTERVAL",
    "FAUCET_TIMEOUT",
    "GLOBAL_TRANSFER_TIMEOUT",
    "MINIMUM_FUNDING_BALANCE",
    "TESTNET_EXPLORER",
    "TESTNET_FAUCET",
    "TESTNET_RPC",
    "TRANSFER_TIMEOUT",
    "UNKNOWN_BALANCE",

    ######
    "ExitCode",
    "TransferOutcome",
]
