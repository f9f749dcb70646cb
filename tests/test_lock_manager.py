from datetime import timedelta

import pytest

from minisql.lock_manager import LockManager, LockMode, LockRequest, LockRequestQueue


def test_lock_request_defaults_to_nothing_granted():
    request = LockRequest(3, LockMode.EXCLUSIVE)
    assert request.granted is LockMode.NONE
    assert request.lock_mode is LockMode.EXCLUSIVE


def test_queue_orders_newest_first():
    queue = LockRequestQueue()
    queue.emplace_lock_request(1, LockMode.SHARED)
    queue.emplace_lock_request(2, LockMode.EXCLUSIVE)
    assert [r.txn_id for r in queue.requests] == [2, 1]
    assert len(queue) == 2


def test_queue_rejects_duplicate_request():
    queue = LockRequestQueue()
    queue.emplace_lock_request(1, LockMode.SHARED)
    with pytest.raises(ValueError):
        queue.emplace_lock_request(1, LockMode.EXCLUSIVE)


def test_queue_get_and_erase():
    queue = LockRequestQueue()
    queue.emplace_lock_request(5, LockMode.SHARED)
    assert queue.get_lock_request(5).lock_mode is LockMode.SHARED
    assert queue.erase_lock_request(5) is True
    assert queue.erase_lock_request(5) is False
    assert 5 not in queue
    with pytest.raises(KeyError):
        queue.get_lock_request(5)


def test_queue_flags_start_clear():
    queue = LockRequestQueue()
    assert (queue.is_writing, queue.is_upgrading, queue.sharing_cnt) == (False, False, 0)


def test_edges_added_and_removed():
    manager = LockManager()
    manager.add_edge(0, 1)
    manager.add_edge(1, 2)
    manager.add_edge(0, 1)
    assert manager.edge_list() == [(0, 1), (1, 2)]
    manager.remove_edge(0, 1)
    assert manager.edge_list() == [(1, 2)]
    manager.remove_edge(7, 8)
    assert manager.edge_list() == [(1, 2)]


def test_no_cycle_in_chain():
    manager = LockManager()
    manager.add_edge(0, 1)
    manager.add_edge(1, 2)
    assert manager.has_cycle() is None


def test_cycle_reports_youngest():
    manager = LockManager()
    manager.add_edge(0, 1)
    manager.add_edge(1, 2)
    manager.add_edge(2, 0)
    assert manager.has_cycle() == 2


def test_first_cycle_found_is_from_lowest_start():
    manager = LockManager()
    manager.add_edge(2, 3)
    manager.add_edge(3, 2)
    manager.add_edge(0, 1)
    manager.add_edge(1, 0)
    assert manager.has_cycle() == 1


def test_cycle_reachable_through_tail():
    manager = LockManager()
    manager.add_edge(0, 4)
    manager.add_edge(4, 6)
    manager.add_edge(6, 4)
    victim = manager.has_cycle()
    assert victim == 6
    assert victim != 0


def test_deleting_victim_breaks_cycle():
    manager = LockManager()
    manager.add_edge(0, 1)
    manager.add_edge(1, 2)
    manager.add_edge(2, 0)
    victim = manager.has_cycle()
    manager.delete_node(victim)
    assert all(victim not in edge for edge in manager.edge_list())
    assert manager.has_cycle() is None
    assert manager.edge_list() == [(0, 1)]


def test_cycle_detection_toggle():
    manager = LockManager()
    assert manager.cycle_detection_enabled is False
    interval = timedelta(milliseconds=50)
    manager.enable_cycle_detection(interval)
    assert manager.cycle_detection_enabled is True
    assert manager.cycle_detection_interval == interval
    manager.disable_cycle_detection()
    assert manager.cycle_detection_enabled is False