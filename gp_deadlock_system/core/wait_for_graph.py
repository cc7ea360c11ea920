"""
Wait-for graph of database sessions.

Vertices are keyed by session id and edges by an integer id. Adjacency is kept
as sets of edge ids on each vertex, so removing a vertex never leaves dangling
references behind.
"""

import itertools
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, Set

from .lock_modes import LockMode, conflicts_with
from .lockable_object import LockableObject
from .snapshot import LockSnapshot

logger = logging.getLogger(__name__)


@dataclass
class Vertex:
    session_id: int
    seq: int
    edges_in: Set[int] = field(default_factory=set)
    edges_out: Set[int] = field(default_factory=set)

    @property
    def in_degree(self) -> int:
        return len(self.edges_in)

    @property
    def out_degree(self) -> int:
        return len(self.edges_out)


@dataclass(frozen=True)
class Edge:
    """Session ``waiter`` waits for ``wait_mode`` on ``obj`` held by ``holder`` in ``held_mode``."""
    edge_id: int
    waiter: int
    holder: int
    wait_mode: LockMode
    held_mode: LockMode
    obj: LockableObject

    def __str__(self) -> str:
        return (
            f"Session {self.waiter} waits for {self.wait_mode} on {self.obj}; "
            f"blocked by Session {self.holder}(granted {self.held_mode});"
        )


class WaitForGraph:
    """Directed graph where an edge A -> B means session A waits for session B."""

    def __init__(self):
        self.vertices: Dict[int, Vertex] = {}
        self.edges: Dict[int, Edge] = {}
        self._edge_ids = itertools.count()
        self._vertex_seq = itertools.count()

    def __len__(self) -> int:
        return len(self.vertices)

    def __contains__(self, session_id: int) -> bool:
        return session_id in self.vertices

    def is_empty(self) -> bool:
        return not self.vertices

    def get_or_create_vertex(self, session_id: int) -> Vertex:
        vertex = self.vertices.get(session_id)
        if vertex is None:
            vertex = Vertex(session_id=session_id, seq=next(self._vertex_seq))
            self.vertices[session_id] = vertex
        return vertex

    def add_edge(self, waiter: int, holder: int, wait_mode: LockMode,
                 held_mode: LockMode, obj: LockableObject) -> Edge:
        """Add a new edge. Edges are never merged, even between the same sessions."""
        if waiter == holder:
            raise ValueError(f"Session {waiter} cannot wait for itself")
        from_vertex = self.get_or_create_vertex(waiter)
        to_vertex = self.get_or_create_vertex(holder)
        edge = Edge(
            edge_id=next(self._edge_ids),
            waiter=waiter,
            holder=holder,
            wait_mode=wait_mode,
            held_mode=held_mode,
            obj=obj,
        )
        self.edges[edge.edge_id] = edge
        from_vertex.edges_out.add(edge.edge_id)
        to_vertex.edges_in.add(edge.edge_id)
        return edge

    def remove_vertex(self, session_id: int) -> Vertex:
        """Remove a session and strip all of its edges from its neighbours."""
        vertex = self.vertices.pop(session_id)
        for edge_id in vertex.edges_in:
            edge = self.edges.pop(edge_id)
            source = self.vertices.get(edge.waiter)
            if source is not None:
                source.edges_out.discard(edge_id)
        for edge_id in vertex.edges_out:
            edge = self.edges.pop(edge_id)
            target = self.vertices.get(edge.holder)
            if target is not None:
                target.edges_in.discard(edge_id)
        return vertex

    def max_session_vertex(self) -> Vertex:
        return self.vertices[max(self.vertices)]

    def iter_edges(self) -> Iterator[Edge]:
        """Edges grouped by waiter in vertex creation order, then by edge id."""
        for vertex in sorted(self.vertices.values(), key=lambda v: v.seq):
            for edge_id in sorted(vertex.edges_out):
                yield self.edges[edge_id]

    def copy(self) -> "WaitForGraph":
        """Independent copy; edges are immutable and shared."""
        clone = WaitForGraph()
        clone.vertices = {
            session_id: Vertex(vertex.session_id, vertex.seq, set(vertex.edges_in), set(vertex.edges_out))
            for session_id, vertex in self.vertices.items()
        }
        clone.edges = dict(self.edges)
        clone._edge_ids = itertools.count(max(self.edges, default=-1) + 1)
        clone._vertex_seq = itertools.count(max((v.seq for v in self.vertices.values()), default=-1) + 1)
        return clone

    def check_consistency(self) -> bool:
        """True when every edge is registered on both endpoints and nowhere else."""
        for edge_id, edge in self.edges.items():
            source = self.vertices.get(edge.waiter)
            target = self.vertices.get(edge.holder)
            if source is None or target is None:
                return False
            if edge_id not in source.edges_out or edge_id not in target.edges_in:
                return False
        for vertex in self.vertices.values():
            for edge_id in vertex.edges_out:
                if edge_id not in self.edges or self.edges[edge_id].waiter != vertex.session_id:
                    return False
            for edge_id in vertex.edges_in:
                if edge_id not in self.edges or self.edges[edge_id].holder != vertex.session_id:
                    return False
        return True


def build_wait_for_graph(snapshot: LockSnapshot) -> WaitForGraph:
    """
    Build the wait-for graph from a partitioned snapshot.

    For each waiting request (obj, mode) of session S, every session T != S that
    holds a conflicting mode on the same obj gets an edge S -> T.

    Args:
        snapshot: Partitioned lock snapshot

    Returns:
        WaitForGraph with one edge per (waiter, holder, held mode, object)
    """
    graph = WaitForGraph()

    for session_id, locks in snapshot.waiting.items():
        for obj, mode in locks:
            for conflict_mode in conflicts_with(mode):
                for holder in sorted(snapshot.holders(obj, conflict_mode)):
                    if holder == session_id:
                        continue
                    graph.add_edge(session_id, holder, mode, conflict_mode, obj)

    logger.debug(f"Built wait-for graph with {len(graph.vertices)} sessions and {len(graph.edges)} edges")
    return graph
