"""Paged database file with extent bitmaps mapping logical to physical pages."""

from __future__ import annotations

import os
import struct
import threading
from dataclasses import dataclass, field
from pathlib import Path

from minisql.bitmap_page import BitmapPage
from minisql.config import PAGE_SIZE, META_PAGE_ID, DatabaseError, DbErr

_META_HEADER = struct.Struct("<II")
_UINT32 = struct.Struct("<I")

BITMAP_SIZE = BitmapPage(PAGE_SIZE).max_supported_size
MAX_EXTENTS = (PAGE_SIZE - _META_HEADER.size) // _UINT32.size
MAX_VALID_PAGE_ID = MAX_EXTENTS * BITMAP_SIZE


@dataclass
class DiskFileMetaPage:
    """Header of the database file: allocation counters per extent.

    Layout: ``| allocated (4) | extents (4) | used pages of extent i (4) ... |``.
    """

    num_allocated_pages: int = 0
    extent_used_pages: list[int] = field(default_factory=list)

    @property
    def num_extents(self) -> int:
        return len(self.extent_used_pages)

    def extent_used_page(self, extent_id: int) -> int:
        """Used pages of an extent, or 0 for an extent that does not exist."""
        if not 0 <= extent_id < self.num_extents:
            return 0
        return self.extent_used_pages[extent_id]

    def to_bytes(self) -> bytes:
        buf = bytearray(PAGE_SIZE)
        _META_HEADER.pack_into(buf, 0, self.num_allocated_pages, self.num_extents)
        struct.pack_into(f"<{self.num_extents}I", buf, _META_HEADER.size, *self.extent_used_pages)
        return bytes(buf)

    @classmethod
    def from_bytes(cls, data: bytes) -> "DiskFileMetaPage":
        allocated, extents = _META_HEADER.unpack_from(data, 0)
        if extents > MAX_EXTENTS:
            raise ValueError(f"corrupt meta page: {extents} extents")
        used = list(struct.unpack_from(f"<{extents}I", data, _META_HEADER.size))
        return cls(allocated, used)


def _bitmap_address(extent_index: int) -> int:
    return META_PAGE_ID + 1 + extent_index * (1 + BITMAP_SIZE)


def _map_page_id(logical_page_id: int) -> int:
    extent_index, offset = divmod(logical_page_id, BITMAP_SIZE)
    return _bitmap_address(extent_index) + 1 + offset


def _check_page_id(logical_page_id: int) -> None:
    if logical_page_id < 0:
        raise ValueError(f"invalid page id: {logical_page_id}")


class DiskManager:
    """Reads, writes, allocates and frees pages of one database file.

    Layout: ``| meta | bitmap 1 | page 1 .. page N | bitmap 2 | page N+1 .. |``.
    """

    def __init__(self, db_file: str | os.PathLike) -> None:
        self.file_name = os.fspath(db_file)
        self._latch = threading.RLock()
        self.closed = False
        try:
            self._io = open(self.file_name, "r+b")
        except FileNotFoundError:
            path = Path(self.file_name)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.touch()
            self._io = open(self.file_name, "r+b")
        self._meta = DiskFileMetaPage.from_bytes(self._read_physical_page(META_PAGE_ID))

    @property
    def meta_data(self) -> DiskFileMetaPage:
        """The in-memory meta page (for inspection)."""
        return self._meta

    def read_page(self, logical_page_id: int) -> bytes:
        _check_page_id(logical_page_id)
        with self._latch:
            return self._read_physical_page(_map_page_id(logical_page_id))

    def write_page(self, logical_page_id: int, page_data: bytes) -> None:
        _check_page_id(logical_page_id)
        with self._latch:
            self._write_physical_page(_map_page_id(logical_page_id), page_data)

    def allocate_page(self) -> int:
        """Allocate the lowest free logical page and return its id."""
        with self._latch:
            meta = self._meta
            if meta.num_allocated_pages >= MAX_VALID_PAGE_ID:
                raise DatabaseError(DbErr.FAILED, "database file is full")
            for extent_index, used in enumerate(meta.extent_used_pages):
                if used >= BITMAP_SIZE:
                    continue
                address = _bitmap_address(extent_index)
                bitmap = BitmapPage.from_bytes(self._read_physical_page(address))
                offset = bitmap.allocate_page()
                if offset is None:
                    continue
                self._write_physical_page(address, bitmap.to_bytes())
                meta.num_allocated_pages += 1
                meta.extent_used_pages[extent_index] += 1
                self._write_meta()
                return extent_index * BITMAP_SIZE + offset

            new_index = meta.num_extents
            if new_index >= MAX_EXTENTS:
                raise DatabaseError(DbErr.FAILED, "database file is full")
            address = _bitmap_address(new_index)
            self._zero_extent(address)
            bitmap = BitmapPage(PAGE_SIZE)
            offset = bitmap.allocate_page()
            self._write_physical_page(address, bitmap.to_bytes())
            meta.extent_used_pages.append(1)
            meta.num_allocated_pages += 1
            self._write_meta()
            return new_index * BITMAP_SIZE + offset

    def deallocate_page(self, logical_page_id: int) -> None:
        """Free a page; freeing a page that is not allocated does nothing."""
        _check_page_id(logical_page_id)
        with self._latch:
            extent_index, offset = divmod(logical_page_id, BITMAP_SIZE)
            if extent_index >= self._meta.num_extents:
                return
            address = _bitmap_address(extent_index)
            bitmap = BitmapPage.from_bytes(self._read_physical_page(address))
            if bitmap.deallocate_page(offset):
                self._meta.num_allocated_pages -= 1
                self._meta.extent_used_pages[extent_index] -= 1
                self._write_meta()
                self._write_physical_page(address, bitmap.to_bytes())

    def is_page_free(self, logical_page_id: int) -> bool:
        """Whether a page is free; pages of extents not yet created count as used."""
        _check_page_id(logical_page_id)
        with self._latch:
            if self._meta.num_extents == 0:
                return True
            extent_index, offset = divmod(logical_page_id, BITMAP_SIZE)
            if extent_index >= self._meta.num_extents:
                return False
            bitmap = BitmapPage.from_bytes(self._read_physical_page(_bitmap_address(extent_index)))
            return bitmap.is_page_free(offset)

    def close(self) -> None:
        """Write the meta page and close the file."""
        with self._latch:
            if self.closed:
                return
            self._write_meta()
            self._io.close()
            self.closed = True

    def __enter__(self) -> "DiskManager":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _file_size(self) -> int:
        return os.fstat(self._io.fileno()).st_size

    def _write_meta(self) -> None:
        self._write_physical_page(META_PAGE_ID, self._meta.to_bytes())

    def _read_physical_page(self, physical_page_id: int) -> bytes:
        offset = physical_page_id * PAGE_SIZE
        if offset >= self._file_size():
            return bytes(PAGE_SIZE)
        self._io.seek(offset)
        data = self._io.read(PAGE_SIZE)
        return data.ljust(PAGE_SIZE, b"\0")

    def _write_physical_page(self, physical_page_id: int, page_data: bytes) -> None:
        if len(page_data) != PAGE_SIZE:
            raise ValueError(f"page data must be {PAGE_SIZE} bytes, got {len(page_data)}")
        self._io.seek(physical_page_id * PAGE_SIZE)
        self._io.write(page_data)
        self._io.flush()

    def _zero_extent(self, bitmap_address: int) -> None:
        """Clear whatever a new extent covers inside the existing file."""
        start = bitmap_address * PAGE_SIZE
        end = min(self._file_size(), (bitmap_address + 1 + BITMAP_SIZE) * PAGE_SIZE)
        if end <= start:
            return
        self._io.seek(start)
        for chunk_start in range(start, end, PAGE_SIZE):
            self._io.write(bytes(min(PAGE_SIZE, end - chunk_start)))
        self._io.flush()