"""Query plan nodes consumed by the executors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum, auto
from typing import Any, Iterable, Mapping, Sequence


class PlanType(Enum):
    SEQ_SCAN = auto()
    INDEX_SCAN = auto()
    INSERT = auto()
    UPDATE = auto()
    DELETE = auto()
    VALUES = auto()
    AGGREGATION = auto()
    LIMIT = auto()
    DISTINCT = auto()
    NESTED_LOOP_JOIN = auto()


class PlanNode(ABC):
    """A node of a plan tree with an output schema and ordered children."""

    def __init__(self, output_schema: Any, children: Iterable["PlanNode"] = ()) -> None:
        self.output_schema = output_schema
        self.children: tuple[PlanNode, ...] = tuple(children)

    @property
    @abstractmethod
    def plan_type(self) -> PlanType:
        """The kind of this plan node."""

    def child_at(self, child_idx: int) -> "PlanNode":
        return self.children[child_idx]

    def _only_child(self, kind: str) -> "PlanNode":
        if len(self.children) != 1:
            raise ValueError(f"{kind} should have exactly one child plan")
        return self.children[0]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(children={len(self.children)})"


class SeqScanPlanNode(PlanNode):
    """Sequential scan of a table with an optional filter predicate."""

    def __init__(self, output_schema: Any, table_name: str, filter_predicate: Any = None) -> None:
        super().__init__(output_schema)
        self.table_name = table_name
        self.filter_predicate = filter_predicate

    @property
    def plan_type(self) -> PlanType:
        return PlanType.SEQ_SCAN


class IndexScanPlanNode(PlanNode):
    """Scan of a table through its indexes with an optional filter predicate."""

    def __init__(
        self,
        output_schema: Any,
        table_name: str,
        indexes: Sequence[Any],
        need_filter: bool,
        filter_predicate: Any = None,
    ) -> None:
        super().__init__(output_schema)
        self.table_name = table_name
        self.indexes = list(indexes)
        self.need_filter = need_filter
        self.filter_predicate = filter_predicate

    @property
    def plan_type(self) -> PlanType:
        return PlanType.INDEX_SCAN


class InsertPlanNode(PlanNode):
    """Insert into a table the rows produced by the child plan."""

    def __init__(self, output_schema: Any, child: PlanNode, table_name: str) -> None:
        super().__init__(output_schema, (child,))
        self.table_name = table_name

    @property
    def plan_type(self) -> PlanType:
        return PlanType.INSERT

    def child_plan(self) -> PlanNode:
        return self._only_child("insert")


class DeletePlanNode(PlanNode):
    """Delete from a table the rows produced by the child plan."""

    def __init__(self, output_schema: Any, child: PlanNode, table_name: str) -> None:
        super().__init__(output_schema, (child,))
        self.table_name = table_name

    @property
    def plan_type(self) -> PlanType:
        return PlanType.DELETE

    def child_plan(self) -> PlanNode:
        return self._only_child("delete")


class UpdatePlanNode(PlanNode):
    """Update the rows produced by the child plan; maps column index to expression."""

    def __init__(
        self,
        output_schema: Any,
        child: PlanNode,
        table_name: str,
        update_attrs: Mapping[int, Any],
    ) -> None:
        super().__init__(output_schema, (child,))
        self.table_name = table_name
        self.update_attrs = dict(update_attrs)

    @property
    def plan_type(self) -> PlanType:
        return PlanType.UPDATE

    def child_plan(self) -> PlanNode:
        return self._only_child("update")


class ValuesPlanNode(PlanNode):
    """Literal rows, as in ``INSERT INTO t VALUES (0, 1), (1, 2)``."""

    def __init__(self, output_schema: Any, values: Iterable[Sequence[Any]]) -> None:
        super().__init__(output_schema)
        self.values = [list(row) for row in values]

    @property
    def plan_type(self) -> PlanType:
        return PlanType.VALUES