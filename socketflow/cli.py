"""Command-line interface for socketflow.

Commands:
- nodes: list registered node types
- order: print a flow's node ids in dependency order
- run: execute one node or every end node of a flow document
- serve: run the HTTP backend (FastAPI)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any, Dict, List, Optional

from .config import get_settings
from .core.executor import execute_node
from .core.registry import NodeRegistry
from .core.topology import find_node_by_id, topological_sort
from .document import FlowDocument, bind_capabilities, load_flow_document
from .errors import SocketFlowError
from .nodes.builtins import register_builtin_nodes
from .observability import configure_logging
from .runner import FlowRunner


def build_registry() -> NodeRegistry:
    return register_builtin_nodes(NodeRegistry())


def _build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    p = argparse.ArgumentParser(prog="socketflow", add_help=True)
    p.add_argument("--log-level", default=settings.log_level, help="Log level (default: %(default)s)")
    p.add_argument("--log-format", default=settings.log_format, choices=["auto", "human", "json"])
    sub = p.add_subparsers(dest="command")

    nodes = sub.add_parser("nodes", help="List registered node types (JSON)")
    nodes.add_argument("--category", default=None, help="Only list node types of this category")

    order = sub.add_parser("order", help="Print node ids in dependency order")
    order.add_argument("flow", help="Path to a flow document (JSON)")

    run = sub.add_parser("run", help="Execute a flow document")
    run.add_argument("flow", help="Path to a flow document (JSON)")
    run.add_argument("--node", type=int, default=None, help="Execute only this node id (default: all end nodes)")

    serve = sub.add_parser("serve", help="Run the HTTP backend (FastAPI)")
    serve.add_argument("--host", default=settings.host)
    serve.add_argument("--port", type=int, default=settings.port)
    serve.add_argument("--reload", action="store_true", help="Enable auto-reload (dev)")
    serve.add_argument("--log-level", default=argparse.SUPPRESS, help="Log level for the server")

    return p


def _write_json(payload: Any) -> None:
    sys.stdout.write(json.dumps(payload, indent=2, ensure_ascii=False, default=str) + "\n")


def _load(path: str, registry: NodeRegistry) -> FlowDocument:
    doc = load_flow_document(path)
    bind_capabilities(doc.nodes, registry)
    return doc


def _run_single(doc: FlowDocument, node_id: int) -> int:
    node = find_node_by_id(node_id, doc.nodes)
    if node is None:
        sys.stderr.write(f"Node {node_id} not found in flow '{doc.name or doc.id}'\n")
        return 2
    try:
        value = asyncio.run(execute_node(node, doc.nodes, doc.connections))
    except Exception as e:
        _write_json({"nodeId": node.id, "title": node.title, "result": None, "error": str(e)})
        return 1
    _write_json({"nodeId": node.id, "title": node.title, "result": FlowRunner.to_node_value(value), "error": ""})
    return 0


def main(args: Optional[List[str]] = None) -> int:
    if args is None:
        args = sys.argv[1:]

    parser = _build_parser()
    ns = parser.parse_args(args)
    configure_logging(level=ns.log_level, format=ns.log_format)

    if ns.command == "nodes":
        registry = build_registry()
        categories = [ns.category] if ns.category else registry.list_categories()
        payload: Dict[str, Any] = {
            "categories": categories,
            "nodeTypes": {c: registry.list_node_types_by_category(c) for c in categories},
        }
        _write_json(payload)
        return 0

    if ns.command in ("order", "run"):
        registry = build_registry()
        try:
            doc = _load(ns.flow, registry)
        except SocketFlowError as e:
            sys.stderr.write(f"{e}\n")
            return 2

        if ns.command == "order":
            _write_json([n.id for n in topological_sort(doc.nodes, doc.connections)])
            return 0

        if ns.node is not None:
            return _run_single(doc, ns.node)

        try:
            results = FlowRunner(doc.nodes, doc.connections).run()
        except SocketFlowError as e:
            sys.stderr.write(f"{e}\n")
            return 2
        _write_json([r.model_dump() for r in results])
        return 1 if any(r.error for r in results) else 0

    if ns.command == "serve":
        try:
            import uvicorn  # type: ignore
        except Exception:
            sys.stderr.write(
                "Server dependencies are not installed.\n"
                "Install with: pip install uvicorn\n"
            )
            return 2

        uvicorn.run(
            "web.backend.main:app",
            host=str(ns.host),
            port=int(ns.port),
            reload=bool(ns.reload),
            log_level=str(ns.log_level).lower(),
        )
        return 0

    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
