"""Page mapping index ids to the root pages of their B+ trees."""

from __future__ import annotations

import struct

from minisql.config import PAGE_SIZE

_COUNT = struct.Struct("<i")
_ENTRY = struct.Struct("<Ii")


class IndexRootsPage:
    """Format: ``| count (4) | index id (4) | root id (4) | ... |``."""

    MAX_INDEX_COUNT = (PAGE_SIZE - _COUNT.size) // _ENTRY.size

    def __init__(self) -> None:
        self._roots: dict[int, int] = {}

    def insert(self, index_id: int, root_id: int) -> bool:
        """Add an entry; False if the page is full or the index is present."""
        if len(self._roots) >= self.MAX_INDEX_COUNT or index_id in self._roots:
            return False
        self._roots[index_id] = root_id
        return True

    def delete(self, index_id: int) -> bool:
        if index_id not in self._roots:
            return False
        del self._roots[index_id]
        return True

    def update(self, index_id: int, root_id: int) -> bool:
        if index_id not in self._roots:
            return False
        self._roots[index_id] = root_id
        return True

    def get_root_id(self, index_id: int) -> int | None:
        """Root page id of an index, or None if it has no entry."""
        return self._roots.get(index_id)

    @property
    def index_count(self) -> int:
        return len(self._roots)

    def to_bytes(self) -> bytes:
        buf = bytearray(PAGE_SIZE)
        _COUNT.pack_into(buf, 0, len(self._roots))
        for slot, (index_id, root_id) in enumerate(self._roots.items()):
            _ENTRY.pack_into(buf, _COUNT.size + slot * _ENTRY.size, index_id, root_id)
        return bytes(buf)

    @classmethod
    def from_bytes(cls, data: bytes) -> "IndexRootsPage":
        (count,) = _COUNT.unpack_from(data, 0)
        if not 0 <= count <= cls.MAX_INDEX_COUNT:
            raise ValueError(f"corrupt index roots page: count {count}")
        page = cls()
        for slot in range(count):
            index_id, root_id = _ENTRY.unpack_from(data, _COUNT.size + slot * _ENTRY.size)
            page._roots[index_id] = root_id
        return page