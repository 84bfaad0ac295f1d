from __future__ import annotations

import logging
from typing import List

from socketflow.core.models import Connection, Node, Position, Socket
from socketflow.core.topology import (
    build_dependency_graph,
    build_execution_graph,
    detect_cycle,
    find_end_nodes,
    find_socket_by_id,
    get_node_by_socket_id,
    topological_sort,
)


def _node(node_id: int, x: float = 0, *, inputs: int = 1, outputs: int = 1) -> Node:
    sockets: List[Socket] = []
    for k in range(1, inputs + outputs + 1):
        direction = "input" if k <= inputs else "output"
        sockets.append(Socket(id=node_id * 100 + k, title=f"s{k}", type=direction, nodeId=node_id))
    return Node(id=node_id, title=f"N{node_id}", nodeType="Test", position=Position(x=x, y=0), sockets=sockets)


def _connect(src: Node, dst: Node, inp: int = 0) -> Connection:
    return Connection(fromSocket=src.output_sockets()[0].id, toSocket=dst.input_sockets()[inp].id)


def _ids(nodes: List[Node]) -> List[int]:
    return [n.id for n in nodes]


def test_sort_places_dependencies_first() -> None:
    a, b, c = _node(1), _node(2), _node(3)

    ordered = topological_sort([c, b, a], [_connect(a, b), _connect(b, c)])

    assert _ids(ordered) == [1, 2, 3]


def test_sort_diamond_respects_every_edge() -> None:
    a, b, c = _node(1), _node(2), _node(3)
    d = _node(4, inputs=2)
    connections = [_connect(a, b), _connect(a, c), _connect(b, d, 0), _connect(c, d, 1)]

    order = _ids(topological_sort([d, c, b, a], connections))

    assert sorted(order) == [1, 2, 3, 4]
    for src, dst in [(1, 2), (1, 3), (2, 4), (3, 4)]:
        assert order.index(src) < order.index(dst)


def test_sort_without_connections_keeps_input_order() -> None:
    nodes = [_node(3, x=50), _node(1, x=10), _node(2, x=0)]

    assert _ids(topological_sort(nodes, [])) == [3, 1, 2]


def test_sort_is_deterministic() -> None:
    a, b, c, d = _node(1), _node(2), _node(3), _node(4)
    nodes = [d, a, c, b]
    connections = [_connect(a, c), _connect(b, d)]

    first = _ids(topological_sort(nodes, connections))
    assert first == [1, 3, 2, 4]
    assert all(_ids(topological_sort(nodes, connections)) == first for _ in range(5))


def test_sort_keeps_unrelated_node_ahead_of_late_listed_dependency() -> None:
    a, b, c = _node(1), _node(2), _node(3)

    ordered = topological_sort([c, a, b], [_connect(b, c)])

    assert _ids(ordered) == [1, 2, 3]


def test_sort_keeps_independent_nodes_between_consumer_and_producer_in_place() -> None:
    consumer, producer = _node(5), _node(4)
    x, y, z = _node(1), _node(2), _node(3)

    ordered = topological_sort([consumer, x, y, z, producer], [_connect(producer, consumer)])

    assert _ids(ordered) == [1, 2, 3, 4, 5]


def test_cycle_falls_back_to_x_position_with_single_warning(caplog) -> None:
    a, b, c = _node(1, x=300), _node(2, x=100), _node(3, x=200)
    connections = [_connect(a, b), _connect(b, a)]

    with caplog.at_level(logging.WARNING, logger="socketflow.core.topology"):
        ordered = topological_sort([a, b, c], connections)

    assert _ids(ordered) == [2, 3, 1]
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "Cycle detected" in warnings[0].getMessage()


def test_cycle_fallback_keeps_list_order_on_equal_x() -> None:
    a, b = _node(1, x=10), _node(2, x=10)

    assert _ids(topological_sort([b, a], [_connect(a, b), _connect(b, a)])) == [2, 1]


def test_dangling_connections_are_ignored() -> None:
    a, b = _node(1), _node(2)
    connections = [
        Connection(fromSocket=999, toSocket=b.input_sockets()[0].id),
        Connection(fromSocket=a.output_sockets()[0].id, toSocket=888),
        _connect(b, a),
    ]

    assert _ids(topological_sort([a, b], connections)) == [2, 1]
    assert build_execution_graph([a, b], connections) == [(2, 1)]


def test_reversed_connection_direction_is_ignored() -> None:
    a, b = _node(1), _node(2)
    backwards = Connection(fromSocket=b.input_sockets()[0].id, toSocket=a.output_sockets()[0].id)

    assert build_dependency_graph([a, b], [backwards]) == {1: [], 2: []}


def test_dependency_graph_lists_each_upstream_once() -> None:
    a = _node(1)
    b = _node(2, inputs=2)

    graph = build_dependency_graph([a, b], [_connect(a, b, 0), _connect(a, b, 1)])

    assert graph == {1: [], 2: [1]}


def test_detect_cycle_reports_path() -> None:
    a, b, c = _node(1), _node(2), _node(3)

    assert detect_cycle([a, b, c], [_connect(a, b), _connect(b, c)]) is None
    assert detect_cycle([a, b], [_connect(a, b), _connect(b, a)]) == [1, 2, 1]


def test_find_end_nodes_returns_nodes_with_unused_outputs() -> None:
    a, b, c = _node(1), _node(2), _node(3)

    ends = find_end_nodes([a, b, c], [_connect(a, b)])

    assert _ids(ends) == [2, 3]


def test_socket_lookups() -> None:
    a, b = _node(1), _node(2)

    assert find_socket_by_id(202, [a, b]).nodeId == 2
    assert find_socket_by_id(5, [a, b]) is None
    assert get_node_by_socket_id(101, [a, b]) is a
    assert get_node_by_socket_id(5, [a, b]) is None
