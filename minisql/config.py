"""Engine-wide constants and error codes."""

from __future__ import annotations

from enum import IntEnum

INVALID_PAGE_ID = -1
INVALID_FRAME_ID = -1
INVALID_TXN_ID = -1
INVALID_LSN = -1

META_PAGE_ID = 0
CATALOG_META_PAGE_ID = 0
INDEX_ROOTS_PAGE_ID = 1

PAGE_SIZE = 4096
DEFAULT_BUFFER_POOL_SIZE = 20480

FIELD_NULL_LEN = 0xFFFFFFFF
VARCHAR_MAX_LEN = PAGE_SIZE // 2


class DbErr(IntEnum):
    """Result codes reported by the database layers."""

    SUCCESS = 0
    FAILED = 1
    ALREADY_EXIST = 2
    NOT_EXIST = 3
    TABLE_ALREADY_EXIST = 4
    TABLE_NOT_EXIST = 5
    INDEX_ALREADY_EXIST = 6
    INDEX_NOT_FOUND = 7
    COLUMN_NAME_NOT_EXIST = 8
    KEY_NOT_FOUND = 9
    QUIT = 10


class DatabaseError(Exception):
    """An error carrying one of the :class:`DbErr` codes."""

    def __init__(self, code: DbErr | int, message: str | None = None) -> None:
        self.code = DbErr(code)
        self.message = message if message is not None else self.code.name
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"DatabaseError({self.code.name}, {self.message!r})"