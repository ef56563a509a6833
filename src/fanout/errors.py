"""Failure taxonomy for a distribution run.

DeadlineExceeded and OperationError are per-operation and recoverable: the
caller records the failure and moves on. ConfigError aborts the run before
anything is persisted. PersistenceError means the on-disk snapshot may lag the
in-memory batch.
"""


class FanoutError(Exception):
    pass


class DeadlineExceeded(FanoutError, TimeoutError):
    """The operation did not settle in time. It may still complete on the ledger."""

    def __init__(self, label: str, timeout: float) -> None:
        self.label = label
        self.timeout = timeout
        super().__init__(f"{label} exceeded its {timeout:g}s deadline")


class OperationError(FanoutError):
    """The ledger (or the path to it) rejected the operation."""


class ConfigError(FanoutError):
    """Invalid operator input or configuration."""


class PersistenceError(FanoutError):
    """A batch snapshot could not be written or read back."""

    def __init__(self, path, cause: Exception) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"could not access {path}: {cause}")
