"""Slotted table page storing variable-length tuples.

Layout::

    | page id (4) | LSN (4) | prev page id (4) | next page id (4) | free space pointer (4) |
    | tuple count (4) | tuple 1 offset (4) | tuple 1 size (4) | ... free space ... | tuples |
"""

from __future__ import annotations

import struct

from minisql.config import INVALID_PAGE_ID, PAGE_SIZE
from minisql.page import Page
from minisql.rowid import RowId

_INT32 = struct.Struct("<i")
_UINT32 = struct.Struct("<I")


class TablePage:
    """View over a :class:`Page` interpreting it as a slotted tuple page."""

    DELETE_MASK = 1 << 31
    SIZE_TABLE_PAGE_HEADER = 24
    SIZE_TUPLE = 8
    OFFSET_PREV_PAGE_ID = 8
    OFFSET_NEXT_PAGE_ID = 12
    OFFSET_FREE_SPACE = 16
    OFFSET_TUPLE_COUNT = 20
    OFFSET_TUPLE_OFFSET = 24
    OFFSET_TUPLE_SIZE = 28
    SIZE_MAX_ROW = PAGE_SIZE - SIZE_TABLE_PAGE_HEADER - SIZE_TUPLE

    def __init__(self, page: Page) -> None:
        self.page = page

    @property
    def _buf(self) -> bytearray:
        return self.page.data

    def init(self, page_id: int, prev_id: int) -> None:
        """Format the page as an empty table page."""
        _INT32.pack_into(self._buf, 0, page_id)
        self.prev_page_id = prev_id
        self.next_page_id = INVALID_PAGE_ID
        self._free_space_pointer = PAGE_SIZE
        self._tuple_count = 0

    @property
    def table_page_id(self) -> int:
        return _INT32.unpack_from(self._buf, 0)[0]

    @property
    def prev_page_id(self) -> int:
        return _INT32.unpack_from(self._buf, self.OFFSET_PREV_PAGE_ID)[0]

    @prev_page_id.setter
    def prev_page_id(self, value: int) -> None:
        _INT32.pack_into(self._buf, self.OFFSET_PREV_PAGE_ID, value)

    @property
    def next_page_id(self) -> int:
        return _INT32.unpack_from(self._buf, self.OFFSET_NEXT_PAGE_ID)[0]

    @next_page_id.setter
    def next_page_id(self, value: int) -> None:
        _INT32.pack_into(self._buf, self.OFFSET_NEXT_PAGE_ID, value)

    @property
    def _free_space_pointer(self) -> int:
        return _UINT32.unpack_from(self._buf, self.OFFSET_FREE_SPACE)[0]

    @_free_space_pointer.setter
    def _free_space_pointer(self, value: int) -> None:
        _UINT32.pack_into(self._buf, self.OFFSET_FREE_SPACE, value)

    @property
    def _tuple_count(self) -> int:
        return _UINT32.unpack_from(self._buf, self.OFFSET_TUPLE_COUNT)[0]

    @_tuple_count.setter
    def _tuple_count(self, value: int) -> None:
        _UINT32.pack_into(self._buf, self.OFFSET_TUPLE_COUNT, value)

    @property
    def free_space_remaining(self) -> int:
        return self._free_space_pointer - self.SIZE_TABLE_PAGE_HEADER - self.SIZE_TUPLE * self._tuple_count

    def _offset_at(self, slot: int) -> int:
        return _UINT32.unpack_from(self._buf, self.OFFSET_TUPLE_OFFSET + self.SIZE_TUPLE * slot)[0]

    def _set_offset_at(self, slot: int, offset: int) -> None:
        _UINT32.pack_into(self._buf, self.OFFSET_TUPLE_OFFSET + self.SIZE_TUPLE * slot, offset)

    def _size_at(self, slot: int) -> int:
        return _UINT32.unpack_from(self._buf, self.OFFSET_TUPLE_SIZE + self.SIZE_TUPLE * slot)[0]

    def _set_size_at(self, slot: int, size: int) -> None:
        _UINT32.pack_into(self._buf, self.OFFSET_TUPLE_SIZE + self.SIZE_TUPLE * slot, size)

    @classmethod
    def _is_deleted(cls, tuple_size: int) -> bool:
        return bool(tuple_size & cls.DELETE_MASK) or tuple_size == 0

    def _check_slot(self, rid: RowId) -> int:
        if rid.slot_num >= self._tuple_count:
            raise ValueError(f"no such slot on page {self.table_page_id}: {rid.slot_num}")
        return rid.slot_num

    def insert_tuple(self, data: bytes) -> RowId | None:
        """Store a tuple; return its row id, or None if it does not fit."""
        size = len(data)
        if size == 0:
            raise ValueError("cannot insert an empty tuple")
        if self.free_space_remaining < size:
            return None
        count = self._tuple_count
        slot = next((i for i in range(count) if self._size_at(i) == 0), count)
        if slot == count and self.free_space_remaining < size + self.SIZE_TUPLE:
            return None
        free = self._free_space_pointer - size
        self._free_space_pointer = free
        self._buf[free:free + size] = data
        self._set_offset_at(slot, free)
        self._set_size_at(slot, size)
        if slot == count:
            self._tuple_count = count + 1
        return RowId(self.table_page_id, slot)

    def mark_delete(self, rid: RowId) -> bool:
        """Flag a tuple as deleted; False if it is missing or already flagged."""
        slot = rid.slot_num
        if slot >= self._tuple_count:
            return False
        size = self._size_at(slot)
        if self._is_deleted(size):
            return False
        self._set_size_at(slot, size | self.DELETE_MASK)
        return True

    def update_tuple(self, data: bytes, rid: RowId) -> bool:
        """Replace a tuple in place; False if it is missing, deleted or does not fit."""
        new_size = len(data)
        if new_size == 0:
            raise ValueError("cannot store an empty tuple")
        slot = rid.slot_num
        if slot >= self._tuple_count:
            return False
        tuple_size = self._size_at(slot)
        if self._is_deleted(tuple_size):
            return False
        if self.free_space_remaining + tuple_size < new_size:
            return False
        tuple_offset = self._offset_at(slot)
        free = self._free_space_pointer
        delta = tuple_size - new_size
        self._buf[free + delta:tuple_offset + delta] = self._buf[free:tuple_offset]
        self._free_space_pointer = free + delta
        start = tuple_offset + delta
        self._buf[start:start + new_size] = data
        self._set_size_at(slot, new_size)
        limit = tuple_offset + tuple_size
        for i in range(self._tuple_count):
            offset_i = self._offset_at(i)
            if self._size_at(i) > 0 and offset_i < limit:
                self._set_offset_at(i, offset_i + delta)
        return True

    def apply_delete(self, rid: RowId) -> None:
        """Remove a tuple for good, compacting the tuple area."""
        slot = self._check_slot(rid)
        tuple_size = self._size_at(slot) & ~self.DELETE_MASK
        if tuple_size == 0:
            return
        tuple_offset = self._offset_at(slot)
        free = self._free_space_pointer
        self._buf[free + tuple_size:tuple_offset + tuple_size] = self._buf[free:tuple_offset]
        self._buf[free:free + tuple_size] = bytes(tuple_size)
        self._free_space_pointer = free + tuple_size
        self._set_size_at(slot, 0)
        self._set_offset_at(slot, 0)
        for i in range(self._tuple_count):
            offset_i = self._offset_at(i)
            if self._size_at(i) != 0 and offset_i < tuple_offset:
                self._set_offset_at(i, offset_i + tuple_size)

    def rollback_delete(self, rid: RowId) -> None:
        """Clear the delete flag of a tuple."""
        slot = self._check_slot(rid)
        size = self._size_at(slot)
        if size & self.DELETE_MASK:
            self._set_size_at(slot, size & ~self.DELETE_MASK)

    def get_tuple(self, rid: RowId) -> bytes | None:
        """Bytes of a live tuple, or None if it is missing or deleted."""
        slot = rid.slot_num
        if slot >= self._tuple_count:
            return None
        size = self._size_at(slot)
        if self._is_deleted(size):
            return None
        offset = self._offset_at(slot)
        return bytes(self._buf[offset:offset + size])

    def _first_live_from(self, start: int) -> RowId | None:
        for slot in range(start, self._tuple_count):
            if not self._is_deleted(self._size_at(slot)):
                return RowId(self.table_page_id, slot)
        return None

    def first_tuple_rid(self) -> RowId | None:
        return self._first_live_from(0)

    def next_tuple_rid(self, rid: RowId) -> RowId | None:
        return self._first_live_from(rid.slot_num + 1)