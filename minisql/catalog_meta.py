"""Catalog metadata: where the meta pages of tables and indexes live."""

from __future__ import annotations

from typing import Protocol


class _PageDeleter(Protocol):
    def delete_page(self, page_id: int) -> bool: ...


class CatalogMeta:
    """Maps table ids and index ids to the pages holding their metadata."""

    CATALOG_METADATA_MAGIC_NUM = 89849

    def __init__(self) -> None:
        self.table_meta_pages: dict[int, int] = {}
        self.index_meta_pages: dict[int, int] = {}

    def next_table_id(self) -> int:
        """One past the largest table id in use, or 0 when there is none."""
        return max(self.table_meta_pages) + 1 if self.table_meta_pages else 0

    def next_index_id(self) -> int:
        """One past the largest index id in use, or 0 when there is none."""
        return max(self.index_meta_pages) + 1 if self.index_meta_pages else 0

    def delete_index_meta_page(self, bpm: _PageDeleter, index_id: int) -> bool:
        """Forget an index and free its meta page; False if the index is unknown."""
        page_id = self.index_meta_pages.get(index_id)
        if page_id is None:
            return False
        bpm.delete_page(page_id)
        del self.index_meta_pages[index_id]
        return True

    def __repr__(self) -> str:
        return (
            f"CatalogMeta(tables={self.table_meta_pages!r}, "
            f"indexes={self.index_meta_pages!r})"
        )