"""
Snapshot partitioning: split pg_locks rows into granted and waiting sets.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Set, Tuple

from .exceptions import MalformedRow
from .lock_modes import LockMode
from .lockable_object import LockableObject

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ('mode', 'granted', 'mppsessionid')

GrantedTable = Dict[LockableObject, Dict[LockMode, Set[int]]]
WaitingTable = Dict[int, List[Tuple[LockableObject, LockMode]]]


@dataclass(frozen=True)
class LockRequest:
    """One lock row: a session holding or waiting for a mode on an object."""
    obj: LockableObject
    mode: LockMode
    session_id: int
    granted: bool

    @classmethod
    def from_row(cls, row: Mapping[str, Any], row_index: int = None) -> "LockRequest":
        """
        Validate the required columns of a lock row and build the request.

        Raises:
            MalformedRow: If mode, granted or mppsessionid is NULL or ill-typed
            UnknownLockMode: If mode is not in the conflict table
        """
        if not isinstance(row, Mapping):
            raise MalformedRow('row', row_index, row)

        for name in REQUIRED_FIELDS:
            if row.get(name) is None:
                raise MalformedRow(name, row_index)

        granted = row['granted']
        if not isinstance(granted, bool):
            raise MalformedRow('granted', row_index, granted)

        session_id = row['mppsessionid']
        if isinstance(session_id, bool) or not isinstance(session_id, int):
            raise MalformedRow('mppsessionid', row_index, session_id)

        mode = row['mode']
        if not isinstance(mode, str):
            raise MalformedRow('mode', row_index, mode)

        return cls(
            obj=LockableObject.from_row(row, row_index),
            mode=LockMode.parse(mode),
            session_id=session_id,
            granted=granted,
        )


@dataclass
class LockSnapshot:
    """Granted locks indexed by object and mode, waiting locks by session."""
    granted: GrantedTable = field(default_factory=dict)
    waiting: WaitingTable = field(default_factory=dict)

    def holders(self, obj: LockableObject, mode: LockMode) -> Set[int]:
        return self.granted.get(obj, {}).get(mode, set())

    @property
    def waiting_count(self) -> int:
        return sum(len(locks) for locks in self.waiting.values())


def partition_snapshot(rows: Iterable[Mapping[str, Any]]) -> LockSnapshot:
    """
    Partition raw lock rows into granted and waiting tables.

    All rows are validated as they are read, so a malformed row or an unknown
    mode aborts before any graph is built.

    Args:
        rows: Iterable of pg_locks rows

    Returns:
        LockSnapshot with ``granted`` and ``waiting`` tables
    """
    granted: GrantedTable = defaultdict(lambda: defaultdict(set))
    waiting: WaitingTable = defaultdict(list)
    row_count = 0

    for index, row in enumerate(rows):
        request = LockRequest.from_row(row, index)
        if request.granted:
            granted[request.obj][request.mode].add(request.session_id)
        else:
            waiting[request.session_id].append((request.obj, request.mode))
        row_count += 1

    snapshot = LockSnapshot(
        granted={obj: dict(modes) for obj, modes in granted.items()},
        waiting=dict(waiting),
    )
    logger.debug(
        f"Partitioned {row_count} lock rows: {len(snapshot.granted)} granted objects, "
        f"{snapshot.waiting_count} waiting requests from {len(snapshot.waiting)} sessions"
    )
    return snapshot
