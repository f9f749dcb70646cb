"""Row identifiers: a page id paired with a slot number."""

from __future__ import annotations

from dataclasses import dataclass

from minisql.config import INVALID_PAGE_ID

_INT32_MIN = -(1 << 31)
_INT32_MAX = (1 << 31) - 1
_UINT32_MASK = 0xFFFFFFFF


@dataclass(frozen=True)
class RowId:
    """Location of a row: ``| page_id (32 bit) | slot_num (32 bit) |``."""

    page_id: int = INVALID_PAGE_ID
    slot_num: int = 0

    def __post_init__(self) -> None:
        if not _INT32_MIN <= self.page_id <= _INT32_MAX:
            raise ValueError(f"page id out of range: {self.page_id}")
        if not 0 <= self.slot_num <= _UINT32_MASK:
            raise ValueError(f"slot number out of range: {self.slot_num}")

    def to_int(self) -> int:
        """Pack into a signed 64-bit integer."""
        return (self.page_id << 32) | self.slot_num

    @classmethod
    def from_int(cls, value: int) -> "RowId":
        """Unpack a value produced by :meth:`to_int`."""
        page = (value >> 32) & _UINT32_MASK
        if page > _INT32_MAX:
            page -= 1 << 32
        return cls(page, value & _UINT32_MASK)

    def is_valid(self) -> bool:
        return self != INVALID_ROWID


INVALID_ROWID = RowId(INVALID_PAGE_ID, 0)