"""In-memory frame holding one disk page plus buffer-pool bookkeeping."""

from __future__ import annotations

import struct
from contextlib import contextmanager
from typing import Iterator

from minisql.config import INVALID_PAGE_ID, PAGE_SIZE
from minisql.rwlatch import ReaderWriterLatch

_LSN = struct.Struct("<i")


class Page:
    """A page buffer with id, pin count, dirty flag and latch."""

    SIZE_PAGE_HEADER = 8
    OFFSET_PAGE_START = 0
    OFFSET_LSN = 4

    def __init__(self) -> None:
        self.data = bytearray(PAGE_SIZE)
        self.page_id = INVALID_PAGE_ID
        self.pin_count = 0
        self.is_dirty = False
        self._latch = ReaderWriterLatch()

    def reset_memory(self) -> None:
        """Zero the page contents."""
        self.data[:] = bytes(PAGE_SIZE)

    @property
    def lsn(self) -> int:
        return _LSN.unpack_from(self.data, self.OFFSET_LSN)[0]

    @lsn.setter
    def lsn(self, value: int) -> None:
        _LSN.pack_into(self.data, self.OFFSET_LSN, value)

    @contextmanager
    def read_latch(self) -> Iterator["Page"]:
        with self._latch.read():
            yield self

    @contextmanager
    def write_latch(self) -> Iterator["Page"]:
        with self._latch.write():
            yield self