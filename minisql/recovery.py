"""Log records, checkpoints and the recovery manager's state."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

from minisql.config import INVALID_LSN


class LogRecType(Enum):
    INVALID = auto()
    INSERT = auto()
    DELETE = auto()
    UPDATE = auto()
    BEGIN = auto()
    COMMIT = auto()
    ABORT = auto()


@dataclass
class LogRec:
    """One log record, chained to the previous record of its transaction."""

    type: LogRecType = LogRecType.INVALID
    lsn: int = INVALID_LSN
    prev_lsn: int = INVALID_LSN


@dataclass
class CheckPoint:
    """Snapshot of active transactions and persisted key/value data."""

    checkpoint_lsn: int = INVALID_LSN
    active_txns: dict[int, int] = field(default_factory=dict)
    persist_data: dict[str, int] = field(default_factory=dict)

    def add_active_txn(self, txn_id: int, last_lsn: int) -> None:
        self.active_txns[txn_id] = last_lsn

    def add_data(self, key: str, val: int) -> None:
        """Record a value; a key already present keeps its first value."""
        self.persist_data.setdefault(key, val)


class RecoveryManager:
    """Holds the log records and key/value data that recovery works on."""

    def __init__(self) -> None:
        self._log_recs: dict[int, LogRec] = {}
        self.persist_lsn = INVALID_LSN
        self.active_txns: dict[int, int] = {}
        self._data: dict[str, int] = {}

    def append_log_rec(self, log_rec: LogRec) -> None:
        """Add a record keyed by its LSN; an LSN already present is kept."""
        self._log_recs.setdefault(log_rec.lsn, log_rec)

    def log_records(self) -> list[LogRec]:
        """All records in LSN order."""
        return [self._log_recs[lsn] for lsn in sorted(self._log_recs)]

    @property
    def database(self) -> dict[str, int]:
        """The live key/value data."""
        return self._data