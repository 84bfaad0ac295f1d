"""Node template registry.

The registry is a plain object constructed by the application's setup phase
and passed to whatever creates node instances; there is no module-level
instance.

Templates are stored as private deep copies and handed out as read-only
views (`TemplateView`). Instances are produced with `create_node`, which
always deep-copies.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Union

from ..errors import UnknownNodeTypeError
from .factory import create_node
from .models import Node, Position
from .views import TemplateView, unwrap_template

logger = logging.getLogger(__name__)


class NodeRegistry:
    """Catalog of node templates (one per `nodeType`) and known categories."""

    def __init__(self) -> None:
        self._nodes: Dict[str, Node] = {}
        self._categories: List[str] = []

    def register_node(self, node: Union[Node, TemplateView]) -> None:
        """Store a template under its `nodeType`, replacing any previous one."""
        template = unwrap_template(node).model_copy(deep=True)
        if template.nodeType in self._nodes:
            logger.debug(f"Replacing template for node type '{template.nodeType}'")
        self._nodes[template.nodeType] = template

    def register_categories(self, categories: Iterable[str]) -> None:
        """Add categories, keeping first-seen order and dropping duplicates."""
        for category in categories:
            if category not in self._categories:
                self._categories.append(category)

    def get_node(self, node_type: str) -> Optional[TemplateView]:
        template = self._nodes.get(node_type)
        if template is None:
            return None
        return TemplateView(template, node_type)

    def list_node_details(self) -> List[TemplateView]:
        return [TemplateView(t, node_type) for node_type, t in self._nodes.items()]

    def list_nodes(self) -> List[str]:
        return list(self._nodes.keys())

    def list_categories(self) -> List[str]:
        return list(self._categories)

    def list_node_types_by_category(self, category: str) -> Dict[str, str]:
        """Return {nodeType: title} for every template in `category`."""
        return {node_type: t.title for node_type, t in self._nodes.items() if t.category == category}

    def create_node(
        self,
        node_type: str,
        id: int,
        position: Optional[Position] = None,
        *,
        duplicate: bool = False,
    ) -> Node:
        """Instantiate the template registered for `node_type`."""
        template = self._nodes.get(node_type)
        if template is None:
            raise UnknownNodeTypeError(node_type)
        return create_node(id, position or Position(), template, duplicate=duplicate)

    def __contains__(self, node_type: object) -> bool:
        return node_type in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)
