"""socketflow - node graph data model, ordering and lazy async execution.

Example:
    >>> from socketflow import NodeRegistry, FlowRunner, register_builtin_nodes
    >>> registry = register_builtin_nodes(NodeRegistry())
    >>> a = registry.create_node("Number", 1)
    >>> b = registry.create_node("Number", 2)
    >>> add = registry.create_node("Add", 3)
"""

from .core import (
    ConfigParameter,
    Connection,
    ExecutionContext,
    Node,
    NodeRegistry,
    Position,
    Socket,
    create_node,
    execute_node,
    find_end_nodes,
    get_param_value,
    set_config_parameter,
    topological_sort,
)
from .document import FlowDocument, bind_capabilities, load_flow_document, save_flow_document
from .errors import (
    ExecutionCycleError,
    FlowAlreadyRunningError,
    FlowDocumentError,
    InvalidParameterValueError,
    MissingCapabilityError,
    NoEndNodesError,
    SocketFlowError,
    SocketLimitError,
    TemplateMutationError,
    UnknownNodeTypeError,
)
from .nodes import register_builtin_nodes
from .runner import FlowExecutionOptions, FlowExecutionResult, FlowRunner, execute_flow

__version__ = "0.1.0"

__all__ = [
    "ConfigParameter",
    "Connection",
    "ExecutionContext",
    "ExecutionCycleError",
    "FlowAlreadyRunningError",
    "FlowDocument",
    "FlowDocumentError",
    "FlowExecutionOptions",
    "FlowExecutionResult",
    "FlowRunner",
    "InvalidParameterValueError",
    "MissingCapabilityError",
    "NoEndNodesError",
    "Node",
    "NodeRegistry",
    "Position",
    "Socket",
    "SocketFlowError",
    "SocketLimitError",
    "TemplateMutationError",
    "UnknownNodeTypeError",
    "bind_capabilities",
    "create_node",
    "execute_flow",
    "execute_node",
    "find_end_nodes",
    "get_param_value",
    "load_flow_document",
    "register_builtin_nodes",
    "save_flow_document",
    "set_config_parameter",
    "topological_sort",
]
