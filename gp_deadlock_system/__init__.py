"""
Greenplum Session Deadlock Detector

Builds a wait-for graph of database sessions from a pg_locks snapshot, finds
the sessions caught in lock cycles and proposes which ones to cancel.
"""

from .core import (
    CONFLICT_TABLE,
    DeadlockDetectionError,
    DeadlockDetector,
    DeadlockResult,
    LockableObject,
    LockMode,
    MalformedRow,
    SourceUnavailable,
    UnknownLockMode,
    WaitForGraph,
    build_wait_for_graph,
    conflicts_with,
    partition_snapshot,
    reduce_graph,
    select_kill_set,
)
from .config.detection_config import DetectionConfig

__version__ = "1.0.0"

__all__ = [
    # Core classes
    'CONFLICT_TABLE',
    'LockMode',
    'LockableObject',
    'WaitForGraph',
    'DeadlockDetector',
    'DeadlockResult',

    # Pipeline stages
    'conflicts_with',
    'partition_snapshot',
    'build_wait_for_graph',
    'reduce_graph',
    'select_kill_set',

    # Errors
    'DeadlockDetectionError',
    'MalformedRow',
    'UnknownLockMode',
    'SourceUnavailable',

    # Configuration
    'DetectionConfig',
]
