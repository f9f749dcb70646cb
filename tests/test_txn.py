import copy
import threading

import pytest

from minisql.config import INVALID_TXN_ID
from minisql.rowid import RowId
from minisql.txn import AbortReason, IsolationLevel, Txn, TxnAbortError, TxnState


def test_defaults():
    txn = Txn()
    assert txn.txn_id == INVALID_TXN_ID
    assert txn.iso_level is IsolationLevel.REPEATED_READ
    assert txn.state is TxnState.GROWING
    assert txn.thread_id == threading.get_ident()


def test_lock_sets_are_per_transaction():
    a, b = Txn(1), Txn(2, IsolationLevel.READ_COMMITTED)
    a.shared_lock_set.add(RowId(0, 1))
    a.exclusive_lock_set.add(RowId(0, 2))
    assert b.shared_lock_set == set()
    assert a.shared_lock_set == {RowId(0, 1)}
    assert b.iso_level is IsolationLevel.READ_COMMITTED


def test_state_can_change():
    txn = Txn(3)
    txn.state = TxnState.SHRINKING
    assert txn.state is TxnState.SHRINKING


def test_copy_refused():
    with pytest.raises(TypeError):
        copy.copy(Txn(4))
    with pytest.raises(TypeError):
        copy.deepcopy(Txn(4))


def test_abort_error_attributes():
    err = TxnAbortError(7, AbortReason.DEADLOCK)
    assert err.txn_id == 7
    assert err.abort_reason is AbortReason.DEADLOCK
    assert "DEADLOCK" in str(err)
    with pytest.raises(TxnAbortError) as info:
        raise err
    assert info.value is err