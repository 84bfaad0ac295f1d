"""Error taxonomy for socketflow.

Validation errors (bad parameter values, missing capabilities) are raised
immediately. Cycle detection is not an error: the topology resolver logs a
warning and degrades to position ordering. Failures raised by a node's
`process` propagate unchanged to every awaiting consumer.
"""

from __future__ import annotations

from typing import Any, List, Optional


class SocketFlowError(Exception):
    """Base class for all socketflow errors."""


class MissingCapabilityError(SocketFlowError, RuntimeError):
    """A node was executed but has no `process` capability attached."""

    def __init__(self, node_type: str, node_id: int):
        self.node_type = node_type
        self.node_id = node_id
        super().__init__(f"Node {node_type} (ID: {node_id}) does not have a process function")


class ExecutionCycleError(SocketFlowError, RuntimeError):
    """A node's execution (transitively) waited on its own result."""

    def __init__(self, node_ids: List[int]):
        self.node_ids = list(node_ids)
        path = " -> ".join(str(i) for i in self.node_ids)
        super().__init__(f"Cycle detected while executing nodes: {path}")


class InvalidParameterValueError(SocketFlowError, TypeError):
    """A config parameter was given a value outside str/number/bool/None."""

    def __init__(self, parameter_name: str, value: Any):
        self.parameter_name = parameter_name
        self.value = value
        super().__init__(
            f"Invalid value for parameter '{parameter_name}': expected string, number, boolean or None, "
            f"got {type(value).__name__}"
        )


class TemplateMutationError(SocketFlowError, TypeError):
    """Registered node templates are read-only."""

    def __init__(self, node_type: str, what: Optional[str] = None):
        self.node_type = node_type
        detail = f" ({what})" if what else ""
        super().__init__(f"Template '{node_type}' is read-only{detail}; instantiate it with create_node()")


class UnknownNodeTypeError(SocketFlowError, KeyError):
    def __init__(self, node_type: str):
        self.node_type = node_type
        super().__init__(node_type)

    def __str__(self) -> str:
        return f"Unknown node type: {self.node_type}"


class SocketLimitError(SocketFlowError, ValueError):
    """The `id * 100 + k` socket scheme cannot represent more than 99 sockets per node."""


class FlowAlreadyRunningError(SocketFlowError, RuntimeError):
    def __init__(self) -> None:
        super().__init__("Flow is already executing")


class NoEndNodesError(SocketFlowError, ValueError):
    def __init__(self) -> None:
        super().__init__("No end nodes found. Your flow needs at least one node with unused outputs.")


class FlowDocumentError(SocketFlowError, ValueError):
    """A flow document could not be parsed or validated."""
