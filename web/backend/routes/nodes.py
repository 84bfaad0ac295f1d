"""Node catalog routes."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from socketflow.core.registry import NodeRegistry

from ..models import NodeCatalog

router = APIRouter(prefix="/nodes", tags=["nodes"])


def get_registry(request: Request) -> NodeRegistry:
    """The registry the app was created with."""
    return request.app.state.registry


@router.get("", response_model=NodeCatalog)
async def list_node_types(category: Optional[str] = None, registry: NodeRegistry = Depends(get_registry)):
    """List registered node types grouped by category."""
    categories = registry.list_categories()
    if category is not None:
        if category not in categories:
            raise HTTPException(status_code=404, detail=f"Category '{category}' not found")
        categories = [category]
    return NodeCatalog(
        categories=categories,
        nodeTypes={c: registry.list_node_types_by_category(c) for c in categories},
    )


@router.get("/{node_type}")
async def get_node_template(node_type: str, registry: NodeRegistry = Depends(get_registry)):
    """Return a fresh instance of a node type (id 0) for the editor palette."""
    if node_type not in registry:
        raise HTTPException(status_code=404, detail=f"Node type '{node_type}' not found")
    return registry.create_node(node_type, 0).model_dump()
