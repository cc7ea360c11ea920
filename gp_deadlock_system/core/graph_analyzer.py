"""
Reduction, kill-set selection and networkx views of the wait-for graph.
"""

import logging
from typing import Dict, Iterator, List, Tuple

import networkx as nx

from .wait_for_graph import WaitForGraph

logger = logging.getLogger(__name__)


def reduce_graph(graph: WaitForGraph) -> int:
    """
    Strip every session that cannot be part of a cycle.

    A session with no incoming or no outgoing edge is removed, and passes are
    repeated until one removes nothing. What remains is the union of all
    directed cycles; an empty graph means there is no deadlock.

    Args:
        graph: Wait-for graph, modified in place

    Returns:
        Number of removed sessions
    """
    removed = 0
    graph_changed = True
    while graph_changed:
        graph_changed = False
        for session_id in list(graph.vertices):
            if session_id not in graph:
                continue
            vertex = graph.vertices[session_id]
            if not vertex.edges_in or not vertex.edges_out:
                graph.remove_vertex(session_id)
                removed += 1
                graph_changed = True
    return removed


def select_kill_set(graph: WaitForGraph) -> List[int]:
    """
    Pick sessions to terminate until no cycle is left.

    Repeatedly removes the session with the largest id and re-reduces the graph.
    The result is sufficient to break every cycle, not minimal. The graph is
    emptied; pass a copy to keep the reduced graph.

    Args:
        graph: Reduced wait-for graph

    Returns:
        Session ids in the order they were chosen
    """
    sessions = []
    while not graph.is_empty():
        vertex = graph.max_session_vertex()
        graph.remove_vertex(vertex.session_id)
        sessions.append(vertex.session_id)
        collapsed = reduce_graph(graph)
        logger.debug(f"Selected session {vertex.session_id}; {collapsed} sessions left the cycle set")
    return sessions


class GraphAnalyzer:
    """networkx-backed views of a wait-for graph, used for reporting"""

    def __init__(self, graph: WaitForGraph):
        self.graph = graph
        self.nx_graph = self._build_networkx_graph()

    def _build_networkx_graph(self) -> nx.MultiDiGraph:
        """Build NetworkX multigraph keyed by session id"""
        G = nx.MultiDiGraph()

        for vertex in sorted(self.graph.vertices.values(), key=lambda v: v.seq):
            G.add_node(vertex.session_id, seq=vertex.seq, label=str(vertex.session_id))

        for edge in self.graph.iter_edges():
            G.add_edge(
                edge.waiter,
                edge.holder,
                key=edge.edge_id,
                wait_mode=edge.wait_mode.value,
                held_mode=edge.held_mode.value,
                obj=edge.obj.describe(),
            )

        return G

    def edge_pairs(self) -> Iterator[Tuple[int, int, Dict[str, str]]]:
        """Yield (from session, to session, labels) for every edge"""
        for waiter, holder, data in self.nx_graph.edges(data=True):
            yield waiter, holder, {
                'from_label': self.nx_graph.nodes[waiter]['label'],
                'to_label': self.nx_graph.nodes[holder]['label'],
                'wait_mode': data['wait_mode'],
                'held_mode': data['held_mode'],
                'object': data['obj'],
            }

    def detect_cycles(self) -> List[List[int]]:
        """Elementary session cycles, each rotated to start at its smallest id"""
        simple = nx.DiGraph(self.nx_graph)
        cycles = []
        for cycle in nx.simple_cycles(simple):
            start = cycle.index(min(cycle))
            cycles.append(cycle[start:] + cycle[:start])
        return sorted(cycles)

    def find_deadlocked_components(self) -> List[List[int]]:
        """Strongly connected groups of more than one session"""
        sccs = nx.strongly_connected_components(self.nx_graph)
        return sorted(sorted(scc) for scc in sccs if len(scc) > 1)

    def to_dot(self, graph_name: str = "G") -> str:
        """
        Render the graph as Graphviz DOT.

        Nodes are named by their sequence number and labelled with the quoted
        session id; parallel edges are drawn once per lock conflict.
        """
        lines = [f"digraph {graph_name} {{"]
        for session_id, data in self.nx_graph.nodes(data=True):
            lines.append(f'\t{data["seq"]} [ label="{data["label"]}" ];')
        for waiter, holder in self.nx_graph.edges():
            lines.append(f"\t{self.nx_graph.nodes[waiter]['seq']}->{self.nx_graph.nodes[holder]['seq']};")
        lines.append("}")
        return "\n".join(lines) + "\n"
