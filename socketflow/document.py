"""Flow documents: the JSON form of a graph.

A document carries nodes and connections only. `process` capabilities are
not serialized; after loading, `bind_capabilities` re-attaches them from a
registry by `nodeType`.
"""

from __future__ import annotations

import json
import logging
import uuid
from pathlib import Path
from typing import List, Sequence, Union

from pydantic import BaseModel, Field, ValidationError

from .core.models import Connection, Node
from .core.registry import NodeRegistry
from .errors import FlowDocumentError

logger = logging.getLogger(__name__)


class FlowDocument(BaseModel):
    """A saved graph."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4())[:8])
    name: str = ""
    description: str = ""
    nodes: List[Node] = Field(default_factory=list)
    connections: List[Connection] = Field(default_factory=list)


def load_flow_document(source: Union[str, Path, bytes]) -> FlowDocument:
    """Load a document from a path, or from JSON text/bytes.

    Raises:
        FlowDocumentError: unreadable file, invalid JSON or invalid shape.
    """
    if isinstance(source, Path) or (isinstance(source, str) and not source.lstrip().startswith("{")):
        path = Path(source)
        try:
            raw: Union[str, bytes] = path.read_text(encoding="utf-8")
        except OSError as e:
            raise FlowDocumentError(f"Cannot read flow document {path}: {e}") from e
    else:
        raw = source

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise FlowDocumentError(f"Flow document is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise FlowDocumentError("Flow document must be a JSON object")

    try:
        return FlowDocument.model_validate(data)
    except ValidationError as e:
        raise FlowDocumentError(f"Invalid flow document: {e}") from e


def dump_flow_document(document: FlowDocument, *, indent: int = 2) -> str:
    return document.model_dump_json(indent=indent)


def save_flow_document(document: FlowDocument, path: Union[str, Path]) -> Path:
    p = Path(path)
    p.write_text(dump_flow_document(document) + "\n", encoding="utf-8")
    logger.info(f"Saved flow '{document.name}' ({document.id}) to {p}")
    return p


def bind_capabilities(nodes: Sequence[Node], registry: NodeRegistry) -> List[str]:
    """Attach the registered `process` to every node that lacks one.

    Returns the node types that have no registered template (their nodes
    stay without a capability and fail if executed).
    """
    missing: List[str] = []
    for node in nodes:
        if node.process is not None:
            continue
        template = registry.get_node(node.nodeType)
        if template is None:
            if node.nodeType not in missing:
                missing.append(node.nodeType)
            continue
        node.process = template.process

    for node_type in missing:
        logger.warning(f"No registered template for node type '{node_type}'")
    return missing
