"""Web backend request/response models.

Graph records are the portable models from `socketflow.core.models`; the
backend only adds the envelopes its routes exchange.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from socketflow.document import FlowDocument
from socketflow.runner import FlowExecutionResult


class NodeCatalog(BaseModel):
    categories: List[str] = Field(default_factory=list)
    nodeTypes: Dict[str, Dict[str, str]] = Field(default_factory=dict)


class FlowOrderResult(BaseModel):
    order: List[int] = Field(default_factory=list)
    # Node ids of a dependency cycle (first id repeated last) when the order
    # fell back to x-position sorting.
    cycle: Optional[List[int]] = None


class FlowRunRequest(BaseModel):
    """Request to execute a flow document."""

    document: FlowDocument
    # Execute only this node; all end nodes when omitted.
    nodeId: Optional[int] = None


class FlowRunResult(BaseModel):
    """Result of a flow execution."""

    success: bool
    results: List[FlowExecutionResult] = Field(default_factory=list)
    error: Optional[str] = None


__all__ = [
    "FlowDocument",
    "FlowExecutionResult",
    "FlowOrderResult",
    "FlowRunRequest",
    "FlowRunResult",
    "NodeCatalog",
]
