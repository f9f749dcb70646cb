"""Bitmap page recording which pages of an extent are in use."""

from __future__ import annotations

import struct

from minisql.config import PAGE_SIZE

_HEADER = struct.Struct("<II")


class BitmapPage:
    """Header ``| allocated (4) | next free (4) |`` followed by the bitmap."""

    def __init__(self, page_size: int = PAGE_SIZE) -> None:
        if page_size <= _HEADER.size:
            raise ValueError(f"page size too small for a bitmap page: {page_size}")
        self.page_size = page_size
        self.page_allocated = 0
        self.next_free_page = 0
        self._bytes = bytearray(page_size - _HEADER.size)

    @property
    def max_supported_size(self) -> int:
        """Number of pages one bitmap can track."""
        return 8 * len(self._bytes)

    def allocate_page(self) -> int | None:
        """Mark the lowest free page used; return its offset, or None when full."""
        if self.page_allocated >= self.max_supported_size:
            return None
        offset = self.next_free_page
        if not self.is_page_free(offset):
            offset = self._find_free(0)
            if offset is None:
                return None
        self._bytes[offset // 8] |= 1 << (offset % 8)
        self.page_allocated += 1
        following = self._find_free(offset + 1)
        self.next_free_page = self.max_supported_size if following is None else following
        return offset

    def deallocate_page(self, page_offset: int) -> bool:
        """Mark a page free; False if it was already free or out of range."""
        if not 0 <= page_offset < self.max_supported_size or self.is_page_free(page_offset):
            return False
        self._bytes[page_offset // 8] &= ~(1 << (page_offset % 8)) & 0xFF
        self.page_allocated -= 1
        self.next_free_page = min(self.next_free_page, page_offset)
        return True

    def is_page_free(self, page_offset: int) -> bool:
        if not 0 <= page_offset < self.max_supported_size:
            return False
        return not self._bytes[page_offset // 8] & (1 << (page_offset % 8))

    def _find_free(self, start: int) -> int | None:
        if start >= self.max_supported_size:
            return None
        first = start // 8
        for byte_index, byte in enumerate(self._bytes[first:], start=first):
            if byte == 0xFF:
                continue
            for bit in range(8):
                offset = byte_index * 8 + bit
                if offset >= start and not byte & (1 << bit):
                    return offset
        return None

    def to_bytes(self) -> bytes:
        return _HEADER.pack(self.page_allocated, self.next_free_page) + bytes(self._bytes)

    @classmethod
    def from_bytes(cls, data: bytes) -> "BitmapPage":
        page = cls(len(data))
        page.page_allocated, page.next_free_page = _HEADER.unpack_from(data, 0)
        page._bytes[:] = data[_HEADER.size:]
        if not page.is_page_free(page.next_free_page):
            found = page._find_free(0)
            page.next_free_page = page.max_supported_size if found is None else found
        return page