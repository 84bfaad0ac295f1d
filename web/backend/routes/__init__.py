"""Backend API routes."""

from .flows import router as flows_router
from .nodes import router as nodes_router

__all__ = ["flows_router", "nodes_router"]
