"""
Shared fixtures: lock rows shaped like pg_locks output and the
deadlock scenarios used across the suite.
"""

import pytest


def lock_row(session_id, mode, granted, relation=None, **fields):
    """Build one pg_locks row; omitted object columns are NULL."""
    row = {
        'gp_segment_id': -1,
        'locktype': 'relation' if relation is not None else None,
        'database': 16384 if relation is not None else None,
        'relation': relation,
        'page': None,
        'tuple': None,
        'virtualxid': None,
        'transactionid': None,
        'classid': None,
        'objid': None,
        'objsubid': None,
        'mode': mode,
        'granted': granted,
        'mppsessionid': session_id,
    }
    row.update(fields)
    return row


@pytest.fixture
def no_deadlock_rows():
    """Scenario A: session 20 waits on session 10, nothing waits on 20."""
    return [
        lock_row(10, 'ShareLock', True, relation=500),
        lock_row(20, 'ExclusiveLock', False, relation=500),
    ]


@pytest.fixture
def two_session_rows():
    """Scenario B: sessions 10 and 20 each hold what the other wants."""
    return [
        lock_row(10, 'ShareLock', True, relation=500),
        lock_row(10, 'ShareUpdateExclusiveLock', False, relation=600),
        lock_row(20, 'ShareUpdateExclusiveLock', True, relation=600),
        lock_row(20, 'ExclusiveLock', False, relation=500),
    ]


@pytest.fixture
def three_session_rows():
    """Scenario C: 100 -> 200 -> 300 -> 100 through three relations."""
    return [
        lock_row(100, 'AccessExclusiveLock', True, relation=1),
        lock_row(200, 'AccessExclusiveLock', True, relation=2),
        lock_row(300, 'AccessExclusiveLock', True, relation=3),
        lock_row(100, 'AccessShareLock', False, relation=2),
        lock_row(200, 'AccessShareLock', False, relation=3),
        lock_row(300, 'AccessShareLock', False, relation=1),
    ]


@pytest.fixture
def lock_row_factory():
    return lock_row
