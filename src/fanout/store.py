"""Whole-batch JSON snapshots on disk.

Every checkpoint rewrites the entire file; there is no diff log and no merge.
The newest snapshot is the recovery point after a crash.
"""

import json
import logging
import os
from pathlib import Path

from fanout.errors import PersistenceError
from fanout.models import AccountRecord, Batch

log = logging.getLogger("fanout.store")


def dumps(batch: Batch) -> str:
    return json.dumps([r.to_dict() for r in batch], indent=2) + "\n"


class BatchStore:
    """Persistent store for one distribution batch."""

    def __init__(self, path: str | Path = "wallets.json") -> None:
        self.path = Path(path)
        self.writes = 0

    def save(self, batch: Batch) -> None:
        """Replace the snapshot with `batch`. Raises PersistenceError."""
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            if self.path.parent != Path():
                self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(dumps(batch), encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as e:
            raise PersistenceError(self.path, e) from e
        self.writes += 1
        log.debug("Saved %s records to %s", len(batch), self.path)

    def checkpoint(self, batch: Batch) -> bool:
        """Save, downgrading a write failure to a warning. The in-memory batch stays authoritative."""
        try:
            self.save(batch)
        except PersistenceError as e:
            log.warning("Checkpoint failed, on-disk state may be stale: %s", e)
            return False
        return True

    def load(self) -> Batch:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return [AccountRecord.from_dict(d) for d in data]
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise PersistenceError(self.path, e) from e
