"""Fund a batch of freshly generated XRP Ledger accounts from one funding account."""

__version__ = "0.1.0"
