import pytest

from minisql.replacer import ClockReplacer, LRUReplacer, Replacer


def test_lru_sample_sequence():
    lru = LRUReplacer(7)
    for frame in range(1, 7):
        lru.unpin(frame)
    lru.unpin(1)
    assert lru.size() == 6
    assert [lru.victim() for _ in range(3)] == [1, 2, 3]
    lru.pin(3)
    lru.pin(4)
    assert lru.size() == 2
    lru.unpin(4)
    assert [lru.victim() for _ in range(3)] == [5, 6, 4]
    assert lru.victim() is None


def test_lru_respects_capacity():
    lru = LRUReplacer(2)
    for frame in (1, 2, 3):
        lru.unpin(frame)
    assert len(lru) == 2
    assert [lru.victim(), lru.victim()] == [1, 2]


def test_clock_gives_second_chance():
    clock = ClockReplacer(7)
    for frame in range(1, 7):
        clock.unpin(frame)
    assert clock.size() == 6
    assert clock.victim() == 1
    assert clock.victim() == 2
    clock.pin(3)
    assert clock.size() == 3
    clock.unpin(4)
    assert [clock.victim() for _ in range(3)] == [5, 6, 4]
    assert clock.victim() is None


def test_clock_respects_capacity_and_pin():
    clock = ClockReplacer(2)
    for frame in (1, 2, 3):
        clock.unpin(frame)
    assert len(clock) == 2
    clock.pin(1)
    assert clock.victim() == 2
    assert clock.size() == 0


@pytest.mark.parametrize("cls", [LRUReplacer, ClockReplacer])
def test_pinning_unknown_frame_is_harmless(cls):
    replacer = cls(3)
    replacer.unpin(1)
    replacer.pin(9)
    assert replacer.size() == 1
    assert replacer.victim() == 1


def test_replacer_is_abstract():
    with pytest.raises(TypeError):
        Replacer()