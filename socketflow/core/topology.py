"""Graph topology helpers: socket lookup, dependency graph and ordering.

Node A depends on node B when a connection runs from one of B's output
sockets to one of A's input sockets. Connections that reference unknown
sockets (or sockets of nodes outside the given list) are ignored.
"""

from __future__ import annotations

import heapq
import logging
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from .models import Connection, Node, Socket, SocketDirection

logger = logging.getLogger(__name__)

# Maps node id -> ids of the nodes it depends on (in first-seen order).
DependencyGraph = Dict[int, List[int]]


def find_node_by_id(node_id: int, nodes: Iterable[Node]) -> Optional[Node]:
    for node in nodes:
        if node.id == node_id:
            return node
    return None


def find_socket_by_id(socket_id: int, nodes: Iterable[Node]) -> Optional[Socket]:
    for node in nodes:
        for socket in node.sockets:
            if socket.id == socket_id:
                return socket
    return None


def get_node_by_socket_id(socket_id: int, nodes: Iterable[Node]) -> Optional[Node]:
    """Return the node owning `socket_id`."""
    for node in nodes:
        if any(s.id == socket_id for s in node.sockets):
            return node
    return None


def _socket_index(nodes: Iterable[Node]) -> Dict[int, Socket]:
    index: Dict[int, Socket] = {}
    for node in nodes:
        for socket in node.sockets:
            index[socket.id] = socket
    return index


def _resolve_edge(conn: Connection, sockets: Dict[int, Socket], node_ids: Set[int]) -> Optional[Tuple[int, int]]:
    src = sockets.get(conn.fromSocket)
    dst = sockets.get(conn.toSocket)
    if src is None or dst is None:
        return None
    if src.type != SocketDirection.OUTPUT or dst.type != SocketDirection.INPUT:
        return None
    if src.nodeId not in node_ids or dst.nodeId not in node_ids:
        return None
    return src.nodeId, dst.nodeId


def build_execution_graph(nodes: Sequence[Node], connections: Iterable[Connection]) -> List[Tuple[int, int]]:
    """Return resolvable connections as `(from_node_id, to_node_id)` pairs."""
    sockets = _socket_index(nodes)
    node_ids = {n.id for n in nodes}
    edges: List[Tuple[int, int]] = []
    for conn in connections:
        edge = _resolve_edge(conn, sockets, node_ids)
        if edge is not None:
            edges.append(edge)
    return edges


def build_dependency_graph(nodes: Sequence[Node], connections: Iterable[Connection]) -> DependencyGraph:
    graph: DependencyGraph = {n.id: [] for n in nodes}
    for source_id, target_id in build_execution_graph(nodes, connections):
        deps = graph[target_id]
        if source_id not in deps:
            deps.append(source_id)
    return graph


def find_end_nodes(nodes: Sequence[Node], connections: Iterable[Connection]) -> List[Node]:
    """Nodes none of whose output sockets feed a connection."""
    used = {c.fromSocket for c in connections}
    return [n for n in nodes if all(s.id not in used for s in n.output_sockets())]


class _Cycle(Exception):
    def __init__(self, path: List[int]):
        self.path = path


def _find_cycle(nodes: Sequence[Node], graph: DependencyGraph) -> None:
    """Three-state depth-first walk; raises `_Cycle` with the offending path."""
    visited: Set[int] = set()
    visiting: List[int] = []

    def _dfs(node_id: int) -> None:
        if node_id in visited:
            return
        if node_id in visiting:
            start = visiting.index(node_id)
            raise _Cycle(visiting[start:] + [node_id])
        visiting.append(node_id)
        for dep in graph.get(node_id, []):
            _dfs(dep)
        visiting.pop()
        visited.add(node_id)

    for node in nodes:
        _dfs(node.id)


def _dependency_order(nodes: Sequence[Node], graph: DependencyGraph) -> List[int]:
    """Dependency order that always emits the earliest-listed ready node.

    Nodes without a constraint between them keep their relative list order.
    Raises `_Cycle` with the offending path.
    """
    _find_cycle(nodes, graph)

    position = {n.id: i for i, n in enumerate(nodes)}
    pending = {node_id: len(deps) for node_id, deps in graph.items()}
    dependents: Dict[int, List[int]] = {n.id: [] for n in nodes}
    for node_id, deps in graph.items():
        for dep in deps:
            dependents[dep].append(node_id)

    ready = [position[node_id] for node_id, count in pending.items() if count == 0]
    heapq.heapify(ready)
    order: List[int] = []
    while ready:
        node_id = nodes[heapq.heappop(ready)].id
        order.append(node_id)
        for dependent in dependents[node_id]:
            pending[dependent] -= 1
            if pending[dependent] == 0:
                heapq.heappush(ready, position[dependent])
    return order


def detect_cycle(nodes: Sequence[Node], connections: Iterable[Connection]) -> Optional[List[int]]:
    """Return the node ids of one dependency cycle (first id repeated last), or None."""
    try:
        _find_cycle(nodes, build_dependency_graph(nodes, connections))
    except _Cycle as cycle:
        return cycle.path
    return None


def topological_sort(nodes: Sequence[Node], connections: Iterable[Connection]) -> List[Node]:
    """Order nodes so every node comes after its upstream dependencies.

    If the graph contains a cycle there is no dependency order; nodes are
    returned left-to-right by x position instead (ties keep list order) and a
    warning is logged.
    """
    nodes = list(nodes)
    graph = build_dependency_graph(nodes, connections)
    try:
        order = _dependency_order(nodes, graph)
    except _Cycle as cycle:
        path = " -> ".join(str(i) for i in cycle.path)
        logger.warning(
            f"Cycle detected in node graph ({path})! Falling back to left-to-right (x-position) ordering."
        )
        return sorted(nodes, key=lambda n: n.position.x)

    by_id = {n.id: n for n in nodes}
    sorted_nodes = [by_id[i] for i in order]
    logger.debug("Topological sort order: " + " -> ".join(f"{n.title} ({n.id})" for n in sorted_nodes))
    return sorted_nodes
