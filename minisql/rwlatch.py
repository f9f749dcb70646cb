"""A reader-writer latch giving writers priority once they arrive."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator


class ReaderWriterLatch:
    """Many readers or one writer; a waiting writer blocks new readers."""

    MAX_READERS = 0xFFFFFFFF

    def __init__(self) -> None:
        self._mutex = threading.Lock()
        self._writer = threading.Condition(self._mutex)
        self._reader = threading.Condition(self._mutex)
        self._reader_count = 0
        self._writer_entered = False

    def w_lock(self) -> None:
        with self._mutex:
            while self._writer_entered:
                self._reader.wait()
            self._writer_entered = True
            while self._reader_count > 0:
                self._writer.wait()

    def w_unlock(self) -> None:
        with self._mutex:
            self._writer_entered = False
            self._reader.notify_all()

    def r_lock(self) -> None:
        with self._mutex:
            while self._writer_entered or self._reader_count == self.MAX_READERS:
                self._reader.wait()
            self._reader_count += 1

    def r_unlock(self) -> None:
        with self._mutex:
            if self._reader_count == 0:
                raise RuntimeError("read latch released without being held")
            self._reader_count -= 1
            if self._writer_entered:
                if self._reader_count == 0:
                    self._writer.notify()
            elif self._reader_count == self.MAX_READERS - 1:
                self._reader.notify()

    @contextmanager
    def read(self) -> Iterator[None]:
        self.r_lock()
        try:
            yield
        finally:
            self.r_unlock()

    @contextmanager
    def write(self) -> Iterator[None]:
        self.w_lock()
        try:
            yield
        finally:
            self.w_unlock()