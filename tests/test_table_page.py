import struct

import pytest

from minisql.config import INVALID_PAGE_ID
from minisql.page import Page
from minisql.rowid import RowId
from minisql.table_page import TablePage


@pytest.fixture
def table_page():
    tp = TablePage(Page())
    tp.init(3, INVALID_PAGE_ID)
    return tp


def test_init_sets_header(table_page):
    assert table_page.table_page_id == 3
    assert table_page.prev_page_id == INVALID_PAGE_ID
    assert table_page.next_page_id == INVALID_PAGE_ID
    assert struct.unpack_from("<i", table_page.page.data, 0)[0] == 3
    assert table_page.first_tuple_rid() is None


def test_next_page_id_setter(table_page):
    table_page.next_page_id = 9
    assert table_page.next_page_id == 9
    assert table_page.prev_page_id == INVALID_PAGE_ID


def test_insert_and_get(table_page):
    rid = table_page.insert_tuple(b"hello")
    assert rid == RowId(3, 0)
    assert table_page.get_tuple(rid) == b"hello"
    second = table_page.insert_tuple(b"world!")
    assert second.slot_num == rid.slot_num + 1
    assert table_page.get_tuple(second) == b"world!"
    assert table_page.get_tuple(rid) == b"hello"


def test_empty_tuple_rejected(table_page):
    with pytest.raises(ValueError):
        table_page.insert_tuple(b"")


def test_get_missing_slot(table_page):
    assert table_page.get_tuple(RowId(3, 5)) is None


def test_iteration_over_slots(table_page):
    rids = [table_page.insert_tuple(bytes([i + 1]) * 10) for i in range(4)]
    found = []
    rid = table_page.first_tuple_rid()
    while rid is not None:
        found.append(rid)
        rid = table_page.next_tuple_rid(rid)
    assert found == rids


def test_mark_delete_and_rollback(table_page):
    rid = table_page.insert_tuple(b"abc")
    assert table_page.mark_delete(rid) is True
    assert table_page.get_tuple(rid) is None
    assert table_page.mark_delete(rid) is False
    assert table_page.first_tuple_rid() is None
    table_page.rollback_delete(rid)
    assert table_page.get_tuple(rid) == b"abc"


def test_apply_delete_frees_slot_and_space(table_page):
    before = table_page.free_space_remaining
    a = table_page.insert_tuple(b"aaaa")
    b = table_page.insert_tuple(b"bbbbbbbb")
    table_page.mark_delete(a)
    table_page.apply_delete(a)
    assert table_page.get_tuple(a) is None
    assert table_page.get_tuple(b) == b"bbbbbbbb"
    reused = table_page.insert_tuple(b"cc")
    assert reused == a
    assert table_page.get_tuple(reused) == b"cc"
    table_page.apply_delete(reused)
    table_page.apply_delete(b)
    assert table_page.free_space_remaining == before - 2 * TablePage.SIZE_TUPLE


def test_apply_delete_bad_slot(table_page):
    with pytest.raises(ValueError):
        table_page.apply_delete(RowId(3, 0))


def test_update_shrinks_and_grows(table_page):
    a = table_page.insert_tuple(b"first-tuple")
    b = table_page.insert_tuple(b"second")
    c = table_page.insert_tuple(b"third-one")
    assert table_page.update_tuple(b"x", b) is True
    assert table_page.get_tuple(b) == b"x"
    assert table_page.update_tuple(b"a much longer replacement value", b) is True
    assert table_page.get_tuple(a) == b"first-tuple"
    assert table_page.get_tuple(b) == b"a much longer replacement value"
    assert table_page.get_tuple(c) == b"third-one"


def test_update_deleted_fails(table_page):
    rid = table_page.insert_tuple(b"abc")
    table_page.mark_delete(rid)
    assert table_page.update_tuple(b"def", rid) is False


def test_full_page(table_page):
    big = b"z" * TablePage.SIZE_MAX_ROW
    rid = table_page.insert_tuple(big)
    assert rid is not None
    assert table_page.free_space_remaining == 0
    assert table_page.insert_tuple(b"q") is None
    assert table_page.update_tuple(big + b"!", rid) is False
    assert table_page.get_tuple(rid) == big


def test_too_large_tuple(table_page):
    assert table_page.insert_tuple(b"z" * (TablePage.SIZE_MAX_ROW + 1)) is None