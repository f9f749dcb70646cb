import pytest

from minisql.buffer_pool_manager import BufferPoolManager
from minisql.config import INVALID_PAGE_ID
from minisql.disk_manager import DiskManager
from minisql.rowid import INVALID_ROWID
from minisql.table_heap import TableHeap
from minisql.table_page import TablePage


@pytest.fixture
def bpm(tmp_path):
    with DiskManager(tmp_path / "heap.db") as disk:
        yield BufferPoolManager(32, disk)


def _rows(count, size=500):
    return [bytes([i % 250 + 1]) * size for i in range(count)]


def test_insert_and_get(bpm):
    heap = TableHeap(bpm)
    rid = heap.insert_tuple(b"row data")
    assert rid.page_id == heap.first_page_id
    assert heap.get_tuple(rid) == b"row data"
    assert bpm.check_all_unpinned()


def test_iteration_spans_pages(bpm):
    heap = TableHeap(bpm)
    rows = _rows(30)
    rids = [heap.insert_tuple(r) for r in rows]
    assert len({rid.page_id for rid in rids}) > 1
    assert [data for _, data in heap] == rows
    assert [rid for rid, _ in heap] == rids
    assert bpm.check_all_unpinned()


def test_too_large_rejected(bpm):
    heap = TableHeap(bpm)
    with pytest.raises(ValueError):
        heap.insert_tuple(b"x" * TablePage.SIZE_MAX_ROW)
    with pytest.raises(ValueError):
        heap.insert_tuple(b"")


def test_mark_delete_and_rollback(bpm):
    heap = TableHeap(bpm)
    rows = _rows(5, 20)
    rids = [heap.insert_tuple(r) for r in rows]
    assert heap.mark_delete(rids[2]) is True
    assert heap.get_tuple(rids[2]) is None
    assert [d for _, d in heap] == rows[:2] + rows[3:]
    heap.rollback_delete(rids[2])
    assert [d for _, d in heap] == rows


def test_apply_delete(bpm):
    heap = TableHeap(bpm)
    a = heap.insert_tuple(b"alpha")
    b = heap.insert_tuple(b"beta")
    heap.mark_delete(a)
    heap.apply_delete(a)
    assert heap.get_tuple(a) is None
    assert [d for _, d in heap] == [b"beta"]
    assert heap.get_tuple(b) == b"beta"


def test_update_in_place_keeps_rid(bpm):
    heap = TableHeap(bpm)
    rid = heap.insert_tuple(b"original")
    assert heap.update_tuple(b"changed value", rid) == rid
    assert heap.get_tuple(rid) == b"changed value"


def test_update_moves_when_page_full(bpm):
    heap = TableHeap(bpm)
    rows = _rows(8)
    rids = [heap.insert_tuple(r) for r in rows]
    assert {rid.page_id for rid in rids} == {heap.first_page_id}
    bigger = b"B" * 600
    new_rid = heap.update_tuple(bigger, rids[0])
    assert new_rid.page_id != heap.first_page_id
    assert heap.get_tuple(rids[0]) is None
    assert heap.get_tuple(new_rid) == bigger
    assert [d for _, d in heap] == rows[1:] + [bigger]
    assert bpm.check_all_unpinned()


def test_update_missing_raises(bpm):
    heap = TableHeap(bpm)
    rid = heap.insert_tuple(b"gone")
    heap.mark_delete(rid)
    with pytest.raises(KeyError):
        heap.update_tuple(b"new", rid)


def test_reopen_with_first_page(bpm):
    heap = TableHeap(bpm)
    rows = _rows(12, 300)
    for r in rows:
        heap.insert_tuple(r)
    reopened = TableHeap(bpm, heap.first_page_id)
    assert reopened.first_page_id == heap.first_page_id
    assert [d for _, d in reopened] == rows


def test_begin_end(bpm):
    heap = TableHeap(bpm)
    assert heap.begin() == heap.end()
    assert heap.end().rid == INVALID_ROWID
    rid = heap.insert_tuple(b"only")
    it = heap.begin()
    assert it != heap.end()
    assert it.rid == rid
    assert it.row == b"only"
    it.advance()
    assert it == heap.end()
    it.advance()
    assert it == heap.end()
    assert list(it) == []


def test_empty_chain_heap(bpm):
    heap = TableHeap(bpm, INVALID_PAGE_ID)
    assert list(heap) == []
    rid = heap.insert_tuple(b"first")
    assert heap.first_page_id == rid.page_id
    assert [d for _, d in heap] == [b"first"]


def test_delete_table_frees_pages(bpm):
    heap = TableHeap(bpm)
    rids = [heap.insert_tuple(r) for r in _rows(20)]
    pages = sorted({rid.page_id for rid in rids})
    heap.delete_table()
    assert all(bpm.is_page_free(p) for p in pages)


def test_free_table_heap_frees_pages(bpm):
    heap = TableHeap(bpm)
    rids = [heap.insert_tuple(r) for r in _rows(20)]
    pages = sorted({rid.page_id for rid in rids})
    heap.free_table_heap()
    assert all(bpm.is_page_free(p) for p in pages)