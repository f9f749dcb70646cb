"""Buffer pool caching disk pages in a fixed number of frames."""

from __future__ import annotations

import threading
from collections import deque

from minisql.config import INVALID_PAGE_ID, DatabaseError, DbErr
from minisql.disk_manager import DiskManager
from minisql.page import Page
from minisql.replacer import LRUReplacer


class BufferPoolManager:
    """Keeps pages in memory frames, evicting unpinned ones in LRU order."""

    def __init__(self, pool_size: int, disk_manager: DiskManager) -> None:
        if pool_size <= 0:
            raise ValueError(f"pool size must be positive: {pool_size}")
        self.pool_size = pool_size
        self._disk = disk_manager
        self._pages = [Page() for _ in range(pool_size)]
        self._page_table: dict[int, int] = {}
        self._replacer = LRUReplacer(pool_size)
        self._free_list: deque[int] = deque(range(pool_size))
        self._latch = threading.RLock()

    def fetch_page(self, page_id: int) -> Page:
        """Return the page pinned in memory, reading it from disk if needed."""
        if page_id < 0:
            raise ValueError(f"invalid page id: {page_id}")
        with self._latch:
            frame = self._page_table.get(page_id)
            if frame is not None:
                page = self._pages[frame]
                page.pin_count += 1
                self._replacer.pin(frame)
                return page
            frame = self._acquire_frame()
            page = self._pages[frame]
            page.data[:] = self._disk.read_page(page_id)
            page.page_id = page_id
            page.pin_count = 1
            page.is_dirty = False
            self._page_table[page_id] = frame
            self._replacer.pin(frame)
            return page

    def unpin_page(self, page_id: int, is_dirty: bool) -> bool:
        """Drop one pin; False if the page is not resident or not pinned."""
        with self._latch:
            frame = self._page_table.get(page_id)
            if frame is None:
                return False
            page = self._pages[frame]
            if page.pin_count <= 0:
                return False
            page.is_dirty = page.is_dirty or is_dirty
            page.pin_count -= 1
            if page.pin_count == 0:
                self._replacer.unpin(frame)
            return True

    def flush_page(self, page_id: int) -> bool:
        """Write a resident page to disk; False if it is not resident."""
        with self._latch:
            frame = self._page_table.get(page_id)
            if frame is None:
                return False
            page = self._pages[frame]
            self._disk.write_page(page_id, bytes(page.data))
            page.is_dirty = False
            return True

    def new_page(self) -> Page:
        """Allocate a page on disk and return it zeroed and pinned."""
        with self._latch:
            frame = self._acquire_frame()
            try:
                page_id = self._disk.allocate_page()
            except Exception:
                self._free_list.append(frame)
                raise
            page = self._pages[frame]
            page.reset_memory()
            page.page_id = page_id
            page.pin_count = 1
            page.is_dirty = True
            self._page_table[page_id] = frame
            self._replacer.pin(frame)
            return page

    def delete_page(self, page_id: int) -> bool:
        """Drop a page from the pool and free it on disk; False if pinned."""
        with self._latch:
            frame = self._page_table.get(page_id)
            if frame is not None:
                page = self._pages[frame]
                if page.pin_count > 0:
                    return False
                del self._page_table[page_id]
                self._replacer.pin(frame)
                page.reset_memory()
                page.page_id = INVALID_PAGE_ID
                page.is_dirty = False
                page.pin_count = 0
                self._free_list.append(frame)
            self._disk.deallocate_page(page_id)
            return True

    def is_page_free(self, page_id: int) -> bool:
        with self._latch:
            return self._disk.is_page_free(page_id)

    def check_all_unpinned(self) -> bool:
        with self._latch:
            return all(page.pin_count == 0 for page in self._pages)

    def _acquire_frame(self) -> int:
        if self._free_list:
            return self._free_list.popleft()
        frame = self._replacer.victim()
        if frame is None:
            raise DatabaseError(DbErr.FAILED, "all buffer pool frames are pinned")
        page = self._pages[frame]
        if page.is_dirty:
            self._disk.write_page(page.page_id, bytes(page.data))
        del self._page_table[page.page_id]
        page.reset_memory()
        page.page_id = INVALID_PAGE_ID
        page.is_dirty = False
        page.pin_count = 0
        return frame