"""Flow ordering and execution routes."""

from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends

from socketflow.core.executor import execute_node
from socketflow.core.registry import NodeRegistry
from socketflow.core.topology import detect_cycle, find_node_by_id, topological_sort
from socketflow.document import FlowDocument, bind_capabilities
from socketflow.errors import SocketFlowError
from socketflow.runner import FlowExecutionResult, FlowRunner

from ..models import FlowOrderResult, FlowRunRequest, FlowRunResult
from .nodes import get_registry

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/flows", tags=["flows"])


@router.post("/order", response_model=FlowOrderResult)
async def order_flow(document: FlowDocument):
    """Return node ids in execution (dependency) order."""
    ordered = topological_sort(document.nodes, document.connections)
    return FlowOrderResult(
        order=[n.id for n in ordered],
        cycle=detect_cycle(document.nodes, document.connections),
    )


@router.post("/run", response_model=FlowRunResult)
async def run_flow(request: FlowRunRequest, registry: NodeRegistry = Depends(get_registry)):
    """Execute a flow document and return per-node results."""
    document = request.document
    missing = bind_capabilities(document.nodes, registry)
    if missing:
        logger.info(f"Flow '{document.name or document.id}' uses unregistered node types: {missing}")

    if request.nodeId is not None:
        node = find_node_by_id(request.nodeId, document.nodes)
        if node is None:
            return FlowRunResult(success=False, error=f"Node {request.nodeId} not found")

        started = time.perf_counter()
        try:
            value = await execute_node(node, document.nodes, document.connections)
        except Exception as e:
            logger.error(f"Error executing node {node.id}: {e}")
            result = FlowExecutionResult(
                nodeId=node.id,
                title=node.title,
                error=str(e),
                executionTime=(time.perf_counter() - started) * 1000,
            )
            return FlowRunResult(success=False, results=[result], error=str(e))
        result = FlowExecutionResult(
            nodeId=node.id,
            title=node.title,
            result=FlowRunner.to_node_value(value),
            executionTime=(time.perf_counter() - started) * 1000,
        )
        return FlowRunResult(success=True, results=[result])

    try:
        results = await FlowRunner(document.nodes, document.connections).execute()
    except SocketFlowError as e:
        return FlowRunResult(success=False, error=str(e))

    failed = [r for r in results if r.error]
    return FlowRunResult(
        success=not failed,
        results=results,
        error=f"{len(failed)} node(s) failed" if failed else None,
    )
