"""Transaction state used by locking and two-phase locking."""

from __future__ import annotations

import threading
from enum import Enum, auto

from minisql.config import INVALID_TXN_ID
from minisql.rowid import RowId


class IsolationLevel(Enum):
    READ_UNCOMMITTED = auto()
    READ_COMMITTED = auto()
    REPEATED_READ = auto()


class AbortReason(Enum):
    LOCK_ON_SHRINKING = auto()
    UNLOCK_ON_SHRINKING = auto()
    UPGRADE_CONFLICT = auto()
    DEADLOCK = auto()
    LOCK_SHARED_ON_READ_UNCOMMITTED = auto()


class TxnState(Enum):
    GROWING = auto()
    SHRINKING = auto()
    COMMITTED = auto()
    ABORTED = auto()


class TxnAbortError(Exception):
    """Raised when a transaction has to be aborted."""

    def __init__(self, txn_id: int, abort_reason: AbortReason) -> None:
        self.txn_id = txn_id
        self.abort_reason = abort_reason
        super().__init__(f"transaction {txn_id} aborted: {abort_reason.name}")


class Txn:
    """A transaction and the row locks it holds."""

    def __init__(
        self,
        txn_id: int = INVALID_TXN_ID,
        iso_level: IsolationLevel = IsolationLevel.REPEATED_READ,
    ) -> None:
        self.txn_id = txn_id
        self.iso_level = iso_level
        self.state = TxnState.GROWING
        self.thread_id = threading.get_ident()
        self.shared_lock_set: set[RowId] = set()
        self.exclusive_lock_set: set[RowId] = set()

    def __copy__(self):
        raise TypeError("transactions cannot be copied")

    def __deepcopy__(self, memo):
        raise TypeError("transactions cannot be copied")

    def __repr__(self) -> str:
        return f"Txn(id={self.txn_id}, state={self.state.name})"