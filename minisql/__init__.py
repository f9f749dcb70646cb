"""Storage layer of a small relational database engine: disk pages, buffer pool, table heaps and supporting structures."""

__version__ = "2022.7.0"