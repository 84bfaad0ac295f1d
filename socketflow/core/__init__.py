"""Graph data model, template registry, topology and execution engine."""

from .executor import ExecutionCache, ExecutionContext, execute_node, extract_socket_value
from .factory import create_node, socket_id
from .models import (
    ConfigParameter,
    Connection,
    DataType,
    Node,
    ParameterType,
    Position,
    Socket,
    SocketDirection,
    ValueSource,
)
from .params import get_config_parameter, get_config_parameters, get_param_value, set_config_parameter
from .registry import NodeRegistry
from .topology import (
    build_dependency_graph,
    build_execution_graph,
    detect_cycle,
    find_end_nodes,
    find_node_by_id,
    find_socket_by_id,
    get_node_by_socket_id,
    topological_sort,
)
from .views import TemplateView

__all__ = [
    "ConfigParameter",
    "Connection",
    "DataType",
    "ExecutionCache",
    "ExecutionContext",
    "Node",
    "NodeRegistry",
    "ParameterType",
    "Position",
    "Socket",
    "SocketDirection",
    "TemplateView",
    "ValueSource",
    "build_dependency_graph",
    "build_execution_graph",
    "create_node",
    "detect_cycle",
    "execute_node",
    "extract_socket_value",
    "find_end_nodes",
    "find_node_by_id",
    "find_socket_by_id",
    "get_config_parameter",
    "get_config_parameters",
    "get_node_by_socket_id",
    "get_param_value",
    "set_config_parameter",
    "socket_id",
    "topological_sort",
]
