"""Core lock analysis: conflict table, snapshot partitioning, wait-for graph and reduction."""

from .exceptions import (
    ConfigurationError,
    DeadlockDetectionError,
    MalformedRow,
    SourceUnavailable,
    UnknownLockMode,
    ValidationError,
)
from .lock_modes import CONFLICT_TABLE, LockMode, conflicts_with
from .lockable_object import LockableObject
from .snapshot import LockRequest, LockSnapshot, partition_snapshot
from .wait_for_graph import Edge, Vertex, WaitForGraph, build_wait_for_graph
from .graph_analyzer import GraphAnalyzer, reduce_graph, select_kill_set
from .detector import DeadlockDetector, DeadlockResult, remediation_statement

__all__ = [
    'ConfigurationError', 'DeadlockDetectionError', 'MalformedRow',
    'SourceUnavailable', 'UnknownLockMode', 'ValidationError',
    'CONFLICT_TABLE', 'LockMode', 'conflicts_with',
    'LockableObject',
    'LockRequest', 'LockSnapshot', 'partition_snapshot',
    'Edge', 'Vertex', 'WaitForGraph', 'build_wait_for_graph',
    'GraphAnalyzer', 'reduce_graph', 'select_kill_set',
    'DeadlockDetector', 'DeadlockResult', 'remediation_statement',
]
