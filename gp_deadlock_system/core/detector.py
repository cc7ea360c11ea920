"""Detection pipeline: snapshot rows in, kill set and remediation SQL out."""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .graph_analyzer import GraphAnalyzer, reduce_graph, select_kill_set
from .snapshot import partition_snapshot
from .wait_for_graph import Edge, WaitForGraph, build_wait_for_graph

logger = logging.getLogger(__name__)

DEFAULT_REMEDIATION_TEMPLATE = (
    "SELECT pg_cancel_backend(procpid) FROM pg_stat_activity WHERE sess_id IN ({sessions});"
)


@dataclass
class DeadlockResult:
    """Standard result format for one detection run"""
    deadlock_found: bool
    edges: List[Edge] = field(default_factory=list)
    kill_sessions: List[int] = field(default_factory=list)
    statement: str = ""
    cycles: List[List[int]] = field(default_factory=list)
    stats: Dict[str, Any] = field(default_factory=dict)
    reduced_graph: Optional[WaitForGraph] = None

    @property
    def report_lines(self) -> List[str]:
        return [str(edge) for edge in self.edges]

    @property
    def session_list(self) -> str:
        return ",".join(str(session_id) for session_id in self.kill_sessions)


def remediation_statement(sessions: List[int], template: str = DEFAULT_REMEDIATION_TEMPLATE) -> str:
    """SQL that cancels the backends of the given sessions, in the given order."""
    return template.format(sessions=",".join(str(session_id) for session_id in sessions))


class DeadlockDetector:
    """
    Runs the full analysis over one lock snapshot:
    partition -> build graph -> reduce -> select kill set.
    """

    def __init__(self, remediation_template: str = DEFAULT_REMEDIATION_TEMPLATE):
        self.remediation_template = remediation_template

    def detect(self, rows: Iterable[Mapping[str, Any]]) -> DeadlockResult:
        """
        Analyze a lock snapshot.

        Args:
            rows: pg_locks rows (mode, granted and mppsessionid are required)

        Returns:
            DeadlockResult; ``deadlock_found`` is False when the reduced graph is empty

        Raises:
            MalformedRow: If a row lacks a required column
            UnknownLockMode: If a row reports a mode outside the conflict table
        """
        start_time = time.time()

        snapshot = partition_snapshot(rows)
        graph = build_wait_for_graph(snapshot)
        stats = {
            'granted_objects': len(snapshot.granted),
            'waiting_sessions': len(snapshot.waiting),
            'sessions': len(graph.vertices),
            'edges': len(graph.edges),
        }

        removed = reduce_graph(graph)
        stats['pruned_sessions'] = removed
        stats['deadlocked_sessions'] = len(graph.vertices)
        logger.debug(f"Reduction removed {removed} sessions, {len(graph.vertices)} remain")

        if graph.is_empty():
            stats['elapsed_seconds'] = time.time() - start_time
            return DeadlockResult(deadlock_found=False, stats=stats, reduced_graph=graph)

        edges = list(graph.iter_edges())
        analyzer = GraphAnalyzer(graph)
        cycles = analyzer.detect_cycles()
        stats['deadlock_groups'] = len(analyzer.find_deadlocked_components())
        reduced = graph.copy()
        kill_sessions = select_kill_set(graph)
        stats['elapsed_seconds'] = time.time() - start_time

        return DeadlockResult(
            deadlock_found=True,
            edges=edges,
            kill_sessions=kill_sessions,
            statement=remediation_statement(kill_sessions, self.remediation_template),
            cycles=cycles,
            stats=stats,
            reduced_graph=reduced,
        )
