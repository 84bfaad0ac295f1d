"""socketflow backend - FastAPI application."""

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from socketflow.cli import build_registry
from socketflow.core.registry import NodeRegistry

from .routes import flows_router, nodes_router


def create_app(registry: Optional[NodeRegistry] = None) -> FastAPI:
    """Build the app around `registry` (the built-in catalog by default)."""
    app = FastAPI(
        title="socketflow",
        description="Node graph ordering and execution API",
        version="0.1.0",
    )
    app.state.registry = registry if registry is not None else build_registry()

    # Configure CORS for the canvas editor dev server
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(nodes_router, prefix="/api")
    app.include_router(flows_router, prefix="/api")

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "socketflow", "nodeTypes": len(app.state.registry)}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "web.backend.main:app",
        host="127.0.0.1",
        port=8080,
        reload=True,
    )
