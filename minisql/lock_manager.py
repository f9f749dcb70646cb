"""Row lock bookkeeping and the waits-for graph used for deadlock detection."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum, auto

from minisql.config import INVALID_TXN_ID
from minisql.rowid import RowId


class LockMode(Enum):
    NONE = auto()
    SHARED = auto()
    EXCLUSIVE = auto()


@dataclass
class LockRequest:
    """A lock request made by one transaction."""

    txn_id: int
    lock_mode: LockMode = LockMode.SHARED
    granted: LockMode = LockMode.NONE


class LockRequestQueue:
    """Lock requests on one row, newest first, indexed by transaction id."""

    def __init__(self) -> None:
        self._requests: dict[int, LockRequest] = {}
        self.cv = threading.Condition()
        self.is_writing = False
        self.is_upgrading = False
        self.sharing_cnt = 0

    @property
    def requests(self) -> list[LockRequest]:
        """All pending and granted requests, most recent first."""
        return list(reversed(self._requests.values()))

    def emplace_lock_request(self, txn_id: int, lock_mode: LockMode) -> LockRequest:
        """Queue a request; a transaction may have only one request per row."""
        if txn_id in self._requests:
            raise ValueError(f"transaction {txn_id} already has a request on this row")
        request = LockRequest(txn_id, lock_mode)
        self._requests[txn_id] = request
        return request

    def erase_lock_request(self, txn_id: int) -> bool:
        """Drop a transaction's request; False if it has none."""
        return self._requests.pop(txn_id, None) is not None

    def get_lock_request(self, txn_id: int) -> LockRequest:
        """The request of a transaction; KeyError if it has none."""
        return self._requests[txn_id]

    def __len__(self) -> int:
        return len(self._requests)

    def __contains__(self, txn_id: object) -> bool:
        return txn_id in self._requests


class LockManager:
    """Holds the lock table and a waits-for graph between transactions."""

    def __init__(self) -> None:
        self.lock_table: dict[RowId, LockRequestQueue] = {}
        self._latch = threading.Lock()
        self._waits_for: dict[int, set[int]] = {}
        self.revisited_node = INVALID_TXN_ID
        self.cycle_detection_enabled = False
        self.cycle_detection_interval = timedelta(milliseconds=100)
        self.txn_manager = None

    def add_edge(self, t1: int, t2: int) -> None:
        """Record that ``t1`` waits for ``t2``."""
        with self._latch:
            self._waits_for.setdefault(t1, set()).add(t2)

    def remove_edge(self, t1: int, t2: int) -> None:
        with self._latch:
            targets = self._waits_for.get(t1)
            if targets is None:
                return
            targets.discard(t2)
            if not targets:
                del self._waits_for[t1]

    def has_cycle(self) -> int | None:
        """Youngest transaction id in the first cycle found, or None.

        The search starts from the lowest transaction id and follows
        neighbours in ascending order, so the result is deterministic.
        """
        with self._latch:
            visited: set[int] = set()
            for start in sorted(self._waits_for):
                if start in visited:
                    continue
                found = self._dfs(start, visited, [], set())
                if found is not None:
                    self.revisited_node = found
                    return found
            self.revisited_node = INVALID_TXN_ID
            return None

    def _dfs(self, node: int, visited: set[int], path: list[int], on_path: set[int]) -> int | None:
        visited.add(node)
        path.append(node)
        on_path.add(node)
        for following in sorted(self._waits_for.get(node, ())):
            if following in on_path:
                return max(path[path.index(following):])
            if following not in visited:
                found = self._dfs(following, visited, path, on_path)
                if found is not None:
                    return found
        path.pop()
        on_path.discard(node)
        return None

    def delete_node(self, txn_id: int) -> None:
        """Remove a transaction and every edge touching it."""
        with self._latch:
            self._waits_for.pop(txn_id, None)
            for source in list(self._waits_for):
                targets = self._waits_for[source]
                targets.discard(txn_id)
                if not targets:
                    del self._waits_for[source]

    def edge_list(self) -> list[tuple[int, int]]:
        """Every edge of the waits-for graph, sorted."""
        with self._latch:
            return sorted((t1, t2) for t1, targets in self._waits_for.items() for t2 in targets)

    def enable_cycle_detection(self, interval: timedelta) -> None:
        self.cycle_detection_enabled = True
        self.cycle_detection_interval = interval

    def disable_cycle_detection(self) -> None:
        self.cycle_detection_enabled = False