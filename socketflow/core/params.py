"""Config parameter accessors.

Free functions over a node record; nodes do not carry accessor methods.
"""

from __future__ import annotations

from typing import Any, List, Optional

from ..errors import InvalidParameterValueError
from .models import ConfigParameter, Node


def is_param_value(value: Any) -> bool:
    """Return True if `value` may be stored as a parameter value."""
    return value is None or isinstance(value, (str, int, float, bool))


def get_config_parameters(node: Node) -> List[ConfigParameter]:
    return list(node.configParameters or [])


def get_config_parameter(node: Node, parameter_name: str) -> Optional[ConfigParameter]:
    """Find a parameter by exact (case-sensitive) name."""
    for param in node.configParameters or []:
        if param.parameterName == parameter_name:
            return param
    return None


def set_config_parameter(node: Node, parameter_name: str, value: Any) -> None:
    """Set a parameter's `paramValue`.

    Unknown parameters (or nodes without parameters) are ignored. For a known
    parameter, values other than str/int/float/bool/None raise
    `InvalidParameterValueError` and leave the node untouched.
    """
    param = get_config_parameter(node, parameter_name)
    if param is None:
        return
    if not is_param_value(value):
        raise InvalidParameterValueError(parameter_name, value)
    param.paramValue = value


def get_param_value(node: Node, parameter_name: str, fallback: Any = None) -> Any:
    """Effective value: `paramValue`, else `defaultValue`, else `fallback`."""
    param = get_config_parameter(node, parameter_name)
    if param is None:
        return fallback
    if param.paramValue is not None:
        return param.paramValue
    if param.defaultValue is not None:
        return param.defaultValue
    return fallback
