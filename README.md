# minisql

The storage core of a small relational database engine. It is written in
pure Python and has no third-party dependencies.

## What it provides

- `minisql.disk_manager.DiskManager` manages one database file. The file is
  split into `PAGE_SIZE` (4096-byte) pages that are grouped into extents. A
  bitmap page in front of each extent records which of its pages are in use.
  Logical page ids are mapped onto physical pages behind the meta page and the
  bitmaps. The class is also a context manager. `close()` writes the meta page
  and then closes the file.
- `minisql.bitmap_page.BitmapPage` is the allocation bitmap. It can be turned
  into page bytes and read back.
- `minisql.buffer_pool_manager.BufferPoolManager` keeps a fixed number of page
  frames in memory. Its methods are:
  - `fetch_page`
  - `new_page`
  - `unpin_page`
  - `flush_page`
  - `delete_page`
  - `is_page_free`
  - `check_all_unpinned`

  Dirty pages are written to disk when they are evicted or flushed.
- `minisql.replacer` provides two eviction policies:
  - `LRUReplacer`, which the buffer pool uses
  - `ClockReplacer`, a second-chance clock policy
- `minisql.page.Page` is a page frame. It holds the page id, the pin count, a
  dirty flag, an LSN, and read/write latch context managers. The latches are
  built on `minisql.rwlatch.ReaderWriterLatch`.
- `minisql.table_page.TablePage` is a slotted page for variable-length tuples
  of raw bytes. Its operations are:
  - insert
  - mark-delete
  - update in place
  - apply delete with compaction
  - rollback of a delete
- `minisql.table_heap.TableHeap` is a linked chain of table pages. It offers:
  - `insert_tuple`
  - `get_tuple`
  - `update_tuple`, which moves the tuple to another page when it no longer
    fits
  - `mark_delete`
  - `apply_delete`
  - `rollback_delete`
  - `free_table_heap`
  - `delete_table`

  Iterating a heap, or calling `begin()`, yields `(RowId, bytes)` pairs for
  every live tuple. `TableIterator` is the cursor behind this.
- Supporting pieces:
  - `minisql.rowid.RowId`, a page id and a slot number that pack into one
    64-bit integer.
  - `minisql.txn.Txn`, together with `IsolationLevel`, `TxnState`,
    `AbortReason` and `TxnAbortError`.
  - `minisql.lock_manager.LockManager`. It keeps a lock table of
    `LockRequestQueue`s and a waits-for graph with these methods:
    - `add_edge`
    - `remove_edge`
    - `delete_node`
    - `edge_list`
    - `has_cycle`, which returns the youngest transaction in the first cycle
      it finds
  - `minisql.index_roots_page.IndexRootsPage`, which maps index ids to root
    page ids and can be serialised to a page.
  - `minisql.catalog_meta.CatalogMeta`, which maps table and index ids to their
    meta pages and hands out the next free ids.
  - `minisql.recovery`, with these types:
    - `LogRec` and `LogRecType`
    - `CheckPoint`
    - `RecoveryManager`, which stores log records in LSN order along with a
      key/value database
  - `minisql.result_writer.ResultWriter`, which prints results as a bordered
    text table with a summary line.
  - `minisql.plans`, the plan node classes:
    - `SeqScanPlanNode`
    - `IndexScanPlanNode`
    - `InsertPlanNode`
    - `DeletePlanNode`
    - `UpdatePlanNode`
    - `ValuesPlanNode`
  - `minisql.execution`, with `ExecuteContext` and the `AbstractExecutor` base
    class.

## Installing

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Example

```python
from minisql.disk_manager import DiskManager
from minisql.buffer_pool_manager import BufferPoolManager
from minisql.table_heap import TableHeap

with DiskManager("data/example.db") as disk:
    bpm = BufferPoolManager(64, disk)
    heap = TableHeap(bpm, None)
    rid = heap.insert_tuple(b"hello")
    print(heap.get_tuple(rid))          # b'hello'
    for row_id, data in heap:
        print(row_id, data)
    bpm.flush_page(heap.first_page_id)  # write the page to the file
```

Pass the first page id of an existing heap in place of `None` to open that
heap again.

## Errors

There are two kinds of failure.

- **Resource exhaustion** raises `minisql.config.DatabaseError`, and its `code`
  attribute holds a `minisql.config.DbErr`. This happens when the database
  file is full or when every buffer frame is pinned.
- **Invalid arguments** raise `ValueError`, and a row that does not exist
  raises `KeyError`. Examples are a negative page id and a tuple that is empty
  or too large for a page.

Lookups that may legitimately find nothing return `None` instead of raising.
Two examples are `get_tuple` and `IndexRootsPage.get_root_id`.

## What it does not do

This package is storage only.

- There is no SQL parser and no command-line shell.
- No concrete executors are included; only the base class and the plan nodes
  are.
- There are no B+ tree indexes, and there is no catalog manager that creates
  tables.
- Tuples are plain bytes. There are no schemas or typed fields.
- `LockManager` keeps the lock table and the waits-for graph, but it does not
  grant or wait for locks.
- `RecoveryManager` stores log records and data, but it performs no redo or
  undo.
- The buffer pool does not flush everything when the disk manager closes.
  Flush the pages you want persisted first.