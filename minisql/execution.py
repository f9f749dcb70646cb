"""Execution context and the base class of row-at-a-time executors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterator

from minisql.rowid import RowId


@dataclass(eq=False)
class ExecuteContext:
    """Transaction, catalog and buffer pool an executor runs with."""

    transaction: Any
    catalog: Any
    bpm: Any


class AbstractExecutor(ABC):
    """Volcano-style executor: ``init`` once, then ``next`` until it yields None."""

    def __init__(self, exec_ctx: ExecuteContext) -> None:
        self.exec_ctx = exec_ctx

    @abstractmethod
    def init(self) -> None:
        """Prepare the executor; must be called before :meth:`next`."""

    @abstractmethod
    def next(self) -> tuple[Any, RowId] | None:
        """The next ``(row, rid)`` pair, or None when there are no more rows."""

    @abstractmethod
    def output_schema(self) -> Any:
        """Schema of the rows this executor produces."""

    def __iter__(self) -> Iterator[tuple[Any, RowId]]:
        self.init()
        while (item := self.next()) is not None:
            yield item