from __future__ import annotations

import pytest

from socketflow.core.factory import MAX_SOCKETS_PER_NODE, create_node, socket_id
from socketflow.core.models import ConfigParameter, Node, Position, Socket
from socketflow.errors import SocketLimitError


def _process(ctx) -> None:
    return None


def _template(sockets: int = 3) -> Node:
    return Node(
        id=0,
        category="Test",
        title="Sample",
        nodeType="Sample",
        nodeValue=["a", "b"],
        width=300,
        height=200,
        selected=True,
        processing=True,
        sockets=[
            Socket(id=k, title=f"S{k}", type="input" if k < sockets else "output", nodeId=0, dataType="number")
            for k in range(1, sockets + 1)
        ],
        configParameters=[
            ConfigParameter(parameterName="Mode", parameterType="string", defaultValue="fast", paramValue="slow"),
            ConfigParameter(parameterName="Limit", parameterType="number", defaultValue=3),
        ],
        process=_process,
    )


def test_socket_ids_follow_node_id() -> None:
    node = create_node(7, Position(x=1, y=2), _template())

    assert [s.id for s in node.sockets] == [701, 702, 703]
    assert all(s.nodeId == 7 for s in node.sockets)
    assert [s.title for s in node.sockets] == ["S1", "S2", "S3"]
    assert [s.dataType for s in node.sockets] == ["number"] * 3
    assert socket_id(7, 2) == 702


def test_instance_copies_layout_and_resets_flags() -> None:
    node = create_node(3, Position(x=15, y=25), _template())

    assert node.id == 3
    assert (node.position.x, node.position.y) == (15, 25)
    assert (node.width, node.height) == (300, 200)
    assert node.selected is False
    assert node.processing is False
    assert node.process is _process
    assert node.nodeType == "Sample"


def test_params_reset_to_defaults_unless_duplicating() -> None:
    template = _template()

    fresh = create_node(1, Position(), template)
    copied = create_node(2, Position(), template, duplicate=True)

    assert [p.paramValue for p in fresh.configParameters] == ["fast", 3]
    assert [p.paramValue for p in copied.configParameters] == ["slow", None]


def test_instance_is_deep_copied() -> None:
    template = _template()
    node = create_node(1, Position(), template)

    node.nodeValue.append("c")
    node.configParameters[0].defaultValue = "changed"
    node.sockets[0].title = "changed"

    assert template.nodeValue == ["a", "b"]
    assert template.configParameters[0].defaultValue == "fast"
    assert template.sockets[0].title == "S1"


def test_nodes_without_params_stay_without_params() -> None:
    template = _template()
    template.configParameters = None

    assert create_node(1, Position(), template).configParameters is None


def test_socket_limit() -> None:
    assert create_node(1, Position(), _template(MAX_SOCKETS_PER_NODE)).sockets[-1].id == 199

    with pytest.raises(SocketLimitError):
        create_node(1, Position(), _template(MAX_SOCKETS_PER_NODE + 1))


def test_builtin_templates_instantiate(registry) -> None:
    for node_type in registry.list_nodes():
        node = registry.create_node(node_type, 12)
        assert all(s.id // 100 == 12 for s in node.sockets)
        assert node.process is not None
