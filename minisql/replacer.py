"""Page replacement policies for the buffer pool."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections import OrderedDict


class Replacer(ABC):
    """Tracks unpinned frames and chooses which one to evict."""

    @abstractmethod
    def victim(self) -> int | None:
        """Remove and return the frame to evict, or None if there is none."""

    @abstractmethod
    def pin(self, frame_id: int) -> None:
        """Stop tracking a frame so it cannot be evicted."""

    @abstractmethod
    def unpin(self, frame_id: int) -> None:
        """Make a frame eligible for eviction."""

    @abstractmethod
    def size(self) -> int:
        """Number of frames that can be evicted."""

    def __len__(self) -> int:
        return self.size()


class LRUReplacer(Replacer):
    """Evicts the frame unpinned longest ago."""

    def __init__(self, num_pages: int) -> None:
        self.max_capacity = num_pages
        self._frames: OrderedDict[int, None] = OrderedDict()
        self._latch = threading.RLock()

    def victim(self) -> int | None:
        with self._latch:
            if not self._frames:
                return None
            frame_id, _ = self._frames.popitem(last=False)
            return frame_id

    def pin(self, frame_id: int) -> None:
        with self._latch:
            self._frames.pop(frame_id, None)

    def unpin(self, frame_id: int) -> None:
        with self._latch:
            if frame_id in self._frames or len(self._frames) >= self.max_capacity:
                return
            self._frames[frame_id] = None

    def size(self) -> int:
        with self._latch:
            return len(self._frames)


class ClockReplacer(Replacer):
    """Second-chance clock: a referenced frame is skipped once before eviction."""

    def __init__(self, num_pages: int) -> None:
        self.capacity = num_pages
        self._frames: list[int] = []
        self._referenced: dict[int, bool] = {}
        self._hand = 0
        self._latch = threading.RLock()

    def victim(self) -> int | None:
        with self._latch:
            if not self._frames:
                return None
            while True:
                if self._hand >= len(self._frames):
                    self._hand = 0
                frame_id = self._frames[self._hand]
                if self._referenced[frame_id]:
                    self._referenced[frame_id] = False
                    self._hand += 1
                else:
                    self._frames.pop(self._hand)
                    del self._referenced[frame_id]
                    return frame_id

    def pin(self, frame_id: int) -> None:
        with self._latch:
            if frame_id not in self._referenced:
                return
            position = self._frames.index(frame_id)
            self._frames.pop(position)
            del self._referenced[frame_id]
            if position < self._hand:
                self._hand -= 1

    def unpin(self, frame_id: int) -> None:
        with self._latch:
            if frame_id in self._referenced:
                self._referenced[frame_id] = True
                return
            if len(self._frames) >= self.capacity:
                return
            self._frames.append(frame_id)
            self._referenced[frame_id] = True

    def size(self) -> int:
        with self._latch:
            return len(self._frames)