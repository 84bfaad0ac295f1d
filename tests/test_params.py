from __future__ import annotations

import pytest

from socketflow.core.models import ConfigParameter, Node
from socketflow.core.params import (
    get_config_parameter,
    get_config_parameters,
    get_param_value,
    set_config_parameter,
)
from socketflow.errors import InvalidParameterValueError


def _node(with_params: bool = True) -> Node:
    params = [
        ConfigParameter(parameterName="Delay (ms)", parameterType="number", defaultValue=1000),
        ConfigParameter(parameterName="Label", parameterType="string"),
    ]
    return Node(id=1, title="Node", nodeType="Test", configParameters=params if with_params else None)


def test_set_and_get_param_value() -> None:
    node = _node()

    assert get_param_value(node, "Delay (ms)") == 1000
    set_config_parameter(node, "Delay (ms)", 250)
    assert get_param_value(node, "Delay (ms)") == 250
    assert get_config_parameter(node, "Delay (ms)").paramValue == 250


@pytest.mark.parametrize("value", ["text", 3, 2.5, True, None])
def test_accepted_value_types(value) -> None:
    node = _node()

    set_config_parameter(node, "Label", value)

    assert get_config_parameter(node, "Label").paramValue == value


@pytest.mark.parametrize("value", [{"a": 1}, [1, 2], object()])
def test_invalid_value_raises_and_leaves_node_unchanged(value) -> None:
    node = _node()
    set_config_parameter(node, "Label", "before")

    with pytest.raises(InvalidParameterValueError) as exc:
        set_config_parameter(node, "Label", value)

    assert exc.value.parameter_name == "Label"
    assert isinstance(exc.value, TypeError)
    assert get_config_parameter(node, "Label").paramValue == "before"


def test_unknown_parameter_is_a_no_op() -> None:
    node = _node()
    before = node.model_dump()

    set_config_parameter(node, "Missing", 1)
    set_config_parameter(node, "label", 1)
    set_config_parameter(node, "Missing", {"not": "validated"})

    assert node.model_dump() == before


def test_node_without_parameters() -> None:
    node = _node(with_params=False)

    set_config_parameter(node, "Label", "x")

    assert node.configParameters is None
    assert get_config_parameters(node) == []
    assert get_config_parameter(node, "Label") is None
    assert get_param_value(node, "Label", "fallback") == "fallback"


def test_param_value_falls_back_through_default() -> None:
    node = _node()

    assert get_param_value(node, "Label", "fallback") == "fallback"
    set_config_parameter(node, "Label", "set")
    assert get_param_value(node, "Label", "fallback") == "set"
