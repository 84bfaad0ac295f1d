"""Pydantic models for the socketflow node graph.

Field names follow the JSON layout of saved flows (`nodeType`, `fromSocket`,
`paramValue`, ...) so documents exported by the canvas editor validate
directly into these models.

A node's `process` capability is attached by composition and excluded from
serialization: a `Node` stays a plain data record that can be dumped and
reloaded, and capabilities are re-bound from the registry on load.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from pydantic import BaseModel, Field
from pydantic.json_schema import SkipJsonSchema


# Values a config parameter may hold.
ParamValue = Union[bool, int, float, str]

# `process(context) -> value` where value may be awaitable.
ProcessFn = Callable[[Any], Any]


class SocketDirection(str, Enum):
    INPUT = "input"
    OUTPUT = "output"


class DataType(str, Enum):
    """Known socket data types (documents may carry others)."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    JSON = "json"
    HTML = "html"
    EMBEDDING = "embedding"
    URL = "url"
    UNKNOWN = "unknown"


class ParameterType(str, Enum):
    STRING = "string"
    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"


class ValueSource(str, Enum):
    USER_INPUT = "UserInput"
    ENV = "Env"
    DEFAULT = "Default"
    RUNTIME_VAULT = "RuntimeVault"


class Position(BaseModel):
    """2D position on canvas."""

    x: float = 0
    y: float = 0


class Socket(BaseModel):
    """A typed connection point on a node."""

    id: int
    title: str
    type: SocketDirection
    nodeId: int
    dataType: str = DataType.UNKNOWN.value


class SourceOption(BaseModel):
    key: str
    label: str


class ConfigParameter(BaseModel):
    """A user-facing configuration value of a node."""

    parameterName: str
    parameterType: ParameterType
    defaultValue: Optional[ParamValue] = None
    valueSource: ValueSource = ValueSource.USER_INPUT
    description: str = ""
    paramValue: Optional[ParamValue] = None
    # Editor hints
    UIConfigurable: bool = False
    sourceList: Optional[List[SourceOption]] = None
    isNodeBodyContent: bool = False


class Node(BaseModel):
    """A unit of computation in the graph."""

    id: int
    category: str = ""
    title: str
    nodeType: str
    nodeValue: Any = None
    position: Position = Field(default_factory=Position)
    width: float = 240
    height: float = 180
    sockets: List[Socket] = Field(default_factory=list)
    selected: bool = False
    processing: bool = False
    result: Any = None
    configParameters: Optional[List[ConfigParameter]] = None
    process: SkipJsonSchema[Optional[ProcessFn]] = Field(default=None, exclude=True, repr=False)

    def input_sockets(self) -> List[Socket]:
        return [s for s in self.sockets if s.type == SocketDirection.INPUT]

    def output_sockets(self) -> List[Socket]:
        return [s for s in self.sockets if s.type == SocketDirection.OUTPUT]

    def get_socket(self, socket_id: int) -> Optional[Socket]:
        for socket in self.sockets:
            if socket.id == socket_id:
                return socket
        return None


class Connection(BaseModel):
    """A directed edge from an output socket to an input socket.

    Sockets are referenced by id only; a connection may point at sockets that
    no longer exist while a graph is being edited.
    """

    fromSocket: int
    toSocket: int
    label: Optional[str] = None


# Maps socket id -> value for nodes with more than one output.
MultiOutput = Dict[int, Any]
