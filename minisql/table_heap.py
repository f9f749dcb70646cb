"""Table heap: a doubly linked chain of table pages, and its iterator."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from minisql.buffer_pool_manager import BufferPoolManager
from minisql.config import INVALID_PAGE_ID, DatabaseError, DbErr
from minisql.rowid import INVALID_ROWID, RowId
from minisql.table_page import TablePage


class TableHeap:
    """Stores tuples across a linked list of table pages in the buffer pool."""

    def __init__(self, buffer_pool_manager: BufferPoolManager, first_page_id: int | None = None) -> None:
        self._bpm = buffer_pool_manager
        if first_page_id is None:
            page = self._bpm.new_page()
            TablePage(page).init(page.page_id, INVALID_PAGE_ID)
            self._bpm.unpin_page(page.page_id, True)
            first_page_id = page.page_id
        self._first_page_id = first_page_id

    @property
    def first_page_id(self) -> int:
        return self._first_page_id

    @contextmanager
    def _fetch(self, page_id: int, dirty: bool = False) -> Iterator[TablePage]:
        page = self._bpm.fetch_page(page_id)
        try:
            yield TablePage(page)
        finally:
            self._bpm.unpin_page(page_id, dirty)

    def _page_ids(self) -> list[int]:
        ids = []
        page_id = self._first_page_id
        while page_id != INVALID_PAGE_ID:
            ids.append(page_id)
            with self._fetch(page_id) as table_page:
                page_id = table_page.next_page_id
        return ids

    def insert_tuple(self, data: bytes) -> RowId:
        """Store a tuple in the first page with room, growing the chain if needed."""
        if not data:
            raise ValueError("cannot insert an empty tuple")
        if len(data) >= TablePage.SIZE_MAX_ROW:
            raise ValueError(f"tuple of {len(data)} bytes is too large for a page")
        last = INVALID_PAGE_ID
        page_id = self._first_page_id
        while page_id != INVALID_PAGE_ID:
            page = self._bpm.fetch_page(page_id)
            table_page = TablePage(page)
            with page.write_latch():
                rid = table_page.insert_tuple(data)
            next_id = table_page.next_page_id
            self._bpm.unpin_page(page_id, rid is not None)
            if rid is not None:
                return rid
            last = page_id
            page_id = next_id

        page = self._bpm.new_page()
        new_id = page.page_id
        try:
            new_table_page = TablePage(page)
            new_table_page.init(new_id, last)
            if last != INVALID_PAGE_ID:
                with self._fetch(last, dirty=True) as last_page:
                    with last_page.page.write_latch():
                        last_page.next_page_id = new_id
            else:
                self._first_page_id = new_id
            with page.write_latch():
                rid = new_table_page.insert_tuple(data)
        finally:
            self._bpm.unpin_page(new_id, True)
        if rid is None:
            raise DatabaseError(DbErr.FAILED, "tuple does not fit in a fresh page")
        return rid

    def mark_delete(self, rid: RowId) -> bool:
        """Flag a tuple as deleted; the space is reclaimed by :meth:`apply_delete`."""
        with self._fetch(rid.page_id, dirty=True) as table_page:
            with table_page.page.write_latch():
                return table_page.mark_delete(rid)

    def update_tuple(self, data: bytes, rid: RowId) -> RowId:
        """Replace a tuple and return where it now lives.

        If it no longer fits in its page, the old tuple is marked deleted and
        the new one inserted elsewhere.
        """
        if not data:
            raise ValueError("cannot store an empty tuple")
        if len(data) >= TablePage.SIZE_MAX_ROW:
            raise ValueError(f"tuple of {len(data)} bytes is too large for a page")
        with self._fetch(rid.page_id, dirty=True) as table_page:
            with table_page.page.read_latch():
                old = table_page.get_tuple(rid)
            if old is None:
                raise KeyError(rid)
            with table_page.page.write_latch():
                updated = table_page.update_tuple(data, rid)
        if updated:
            return rid
        if not self.mark_delete(rid):
            raise KeyError(rid)
        return self.insert_tuple(data)

    def apply_delete(self, rid: RowId) -> None:
        """Remove a tuple for good."""
        with self._fetch(rid.page_id, dirty=True) as table_page:
            with table_page.page.write_latch():
                table_page.apply_delete(rid)

    def rollback_delete(self, rid: RowId) -> None:
        """Undo a :meth:`mark_delete`."""
        with self._fetch(rid.page_id, dirty=True) as table_page:
            with table_page.page.write_latch():
                table_page.rollback_delete(rid)

    def get_tuple(self, rid: RowId) -> bytes | None:
        """Bytes of a live tuple, or None if it is missing or deleted."""
        if not rid.is_valid():
            return None
        with self._fetch(rid.page_id) as table_page:
            with table_page.page.read_latch():
                return table_page.get_tuple(rid)

    def free_table_heap(self) -> None:
        """Release every page of the heap, first to last."""
        for page_id in self._page_ids():
            self._bpm.delete_page(page_id)

    def delete_table(self) -> None:
        """Release every page of the heap, last to first."""
        for page_id in reversed(self._page_ids()):
            self._bpm.delete_page(page_id)

    def begin(self) -> "TableIterator":
        page_id = self._first_page_id
        while page_id != INVALID_PAGE_ID:
            with self._fetch(page_id) as table_page:
                first = table_page.first_tuple_rid()
                next_id = table_page.next_page_id
            if first is not None:
                return TableIterator(self, first)
            page_id = next_id
        return self.end()

    def end(self) -> "TableIterator":
        return TableIterator(self, INVALID_ROWID)

    def __iter__(self) -> "TableIterator":
        return self.begin()


class TableIterator:
    """Cursor over the live tuples of a heap, yielding ``(rid, data)`` pairs."""

    def __init__(self, table_heap: TableHeap, rid: RowId = INVALID_ROWID) -> None:
        self._heap = table_heap
        self._rid = INVALID_ROWID
        self._row: bytes | None = None
        self._move_to(rid)

    def _move_to(self, rid: RowId) -> None:
        self._rid = rid
        if not rid.is_valid():
            self._row = None
            return
        row = self._heap.get_tuple(rid)
        if row is None:
            raise KeyError(rid)
        self._row = row

    @property
    def rid(self) -> RowId:
        return self._rid

    @property
    def row(self) -> bytes | None:
        return self._row

    def advance(self) -> "TableIterator":
        """Move to the next live tuple, or to the end."""
        if not self._rid.is_valid():
            return self
        heap = self._heap
        with heap._fetch(self._rid.page_id) as table_page:
            following = table_page.next_tuple_rid(self._rid)
            next_page = table_page.next_page_id
        while following is None and next_page != INVALID_PAGE_ID:
            with heap._fetch(next_page) as table_page:
                following = table_page.first_tuple_rid()
                next_page = table_page.next_page_id
        self._move_to(following if following is not None else INVALID_ROWID)
        return self

    def __iter__(self) -> "TableIterator":
        return self

    def __next__(self) -> tuple[RowId, bytes]:
        if not self._rid.is_valid():
            raise StopIteration
        item = (self._rid, self._row)
        self.advance()
        return item

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TableIterator):
            return NotImplemented
        return self._heap is other._heap and self._rid == other._rid

    __hash__ = None