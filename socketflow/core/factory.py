"""Node instantiation from templates.

Socket ids are derived as `node_id * 100 + k`, where `k` is the 1-based
position of the socket in the template's socket list. This keeps ids unique
per graph without a global counter, as long as node ids are unique and a
node has at most 99 sockets.
"""

from __future__ import annotations

import copy
from typing import Union

from ..errors import SocketLimitError
from .models import Node, Position, Socket
from .views import TemplateView, unwrap_template

SOCKET_STRIDE = 100
MAX_SOCKETS_PER_NODE = SOCKET_STRIDE - 1


def socket_id(node_id: int, offset: int) -> int:
    """Socket id for the `offset`-th (1-based) socket of node `node_id`."""
    return node_id * SOCKET_STRIDE + offset


def create_node(
    id: int,
    position: Position,
    template: Union[Node, TemplateView],
    duplicate: bool = False,
) -> Node:
    """Create a new node instance from `template`.

    Args:
        id: Unique id for the new node.
        position: Canvas position of the new node.
        template: Registered template (view) or any node to clone.
        duplicate: Keep the template's current `paramValue`s instead of
            resetting them to their defaults.
    """
    source = unwrap_template(template)
    if len(source.sockets) > MAX_SOCKETS_PER_NODE:
        raise SocketLimitError(
            f"Node type '{source.nodeType}' has {len(source.sockets)} sockets; at most "
            f"{MAX_SOCKETS_PER_NODE} are supported"
        )

    sockets = [
        Socket(
            id=socket_id(id, offset),
            title=s.title,
            type=s.type,
            nodeId=id,
            dataType=s.dataType,
        )
        for offset, s in enumerate(source.sockets, start=1)
    ]

    params = None
    if source.configParameters is not None:
        params = [p.model_copy(deep=True) for p in source.configParameters]
        if not duplicate:
            for p in params:
                p.paramValue = p.defaultValue

    return Node(
        id=id,
        category=source.category,
        title=source.title,
        nodeType=source.nodeType,
        nodeValue=copy.deepcopy(source.nodeValue),
        position=Position(x=position.x, y=position.y),
        width=source.width,
        height=source.height,
        sockets=sockets,
        selected=False,
        processing=False,
        configParameters=params,
        process=source.process,
    )
