"""FlowRunner - executes every end node of a graph with one shared cache."""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel

from .core.executor import ExecutionCache, execute_node
from .core.models import Connection, Node
from .core.topology import build_execution_graph, find_end_nodes
from .errors import FlowAlreadyRunningError, NoEndNodesError
from .observability import run_context

logger = logging.getLogger(__name__)


class FlowExecutionResult(BaseModel):
    """Outcome of one end node."""

    nodeId: int
    title: str
    result: Optional[Any] = None
    error: str = ""
    executionTime: float = 0.0  # milliseconds


class FlowExecutionStatus(BaseModel):
    isExecuting: bool = False
    progress: int = 0
    total: int = 0


@dataclass
class FlowExecutionOptions:
    """Optional progress callbacks for `FlowRunner.execute`."""

    on_progress: Optional[Callable[[int, int], None]] = None
    on_node_start: Optional[Callable[[int, str], None]] = None
    on_node_complete: Optional[Callable[[int, str, Any], None]] = None
    on_node_error: Optional[Callable[[int, str, str], None]] = None
    on_complete: Optional[Callable[[List[FlowExecutionResult]], None]] = None
    on_error: Optional[Callable[[str], None]] = None


class _ObservedCache(ExecutionCache):
    """Execution cache that reports every node task as it is registered."""

    def __init__(self, on_register: Callable[[int, "asyncio.Future[Any]"], None]):
        super().__init__()
        self._on_register = on_register

    def __setitem__(self, key: int, value: "asyncio.Future[Any]") -> None:
        super().__setitem__(key, value)
        self._on_register(key, value)


class FlowRunner:
    """Runs a whole graph by executing its end nodes.

    End nodes are nodes none of whose outputs are connected. They are started
    concurrently over a single execution cache, so each upstream node runs
    once no matter how many end nodes depend on it.

    Example:
        >>> runner = FlowRunner(nodes, connections)
        >>> results = runner.run()
        >>> [r.result for r in results]
    """

    def __init__(self, nodes: Sequence[Node], connections: Sequence[Connection]):
        self.nodes: List[Node] = list(nodes)
        self.connections: List[Connection] = list(connections)
        self._status = FlowExecutionStatus()
        self._cancelled = False
        self._run_id: Optional[str] = None

    @property
    def run_id(self) -> Optional[str]:
        """Id of the current (or last) run."""
        return self._run_id

    @staticmethod
    def to_node_value(value: Any) -> Any:
        """Keep JSON-friendly values; anything else becomes None."""
        if isinstance(value, (str, int, float, bool, list, dict)):
            return value
        return None

    async def execute(self, options: Optional[FlowExecutionOptions] = None) -> List[FlowExecutionResult]:
        """Execute the flow.

        Failures of individual end nodes are reported in their result's
        `error` field; only setup problems (no end nodes, a run already in
        progress) raise.
        """
        options = options or FlowExecutionOptions()
        if self._status.isExecuting:
            raise FlowAlreadyRunningError()

        self._cancelled = False
        self._status = FlowExecutionStatus(isExecuting=True)
        self._run_id = uuid.uuid4().hex
        token = run_context.set({**(run_context.get() or {}), "run_id": self._run_id})

        try:
            end_nodes = find_end_nodes(self.nodes, self.connections)
            if not end_nodes:
                raise NoEndNodesError()
            logger.info(f"Found {len(end_nodes)} end nodes to execute")

            graph_nodes = {node_id for edge in build_execution_graph(self.nodes, self.connections) for node_id in edge}
            self._status.total = len(graph_nodes) or len(end_nodes)
            _notify(options.on_progress, self._status.progress, self._status.total)

            node_results: Dict[int, Any] = {}

            def on_register(node_id: int, task: "asyncio.Future[Any]") -> None:
                task.add_done_callback(partial(self._on_settled, node_id, options, node_results))

            cache = _ObservedCache(on_register)
            results = list(await asyncio.gather(*(self._run_end_node(n, cache, options) for n in end_nodes)))

            self.nodes = self._apply_results(node_results, results)
            self._status = FlowExecutionStatus()
            _notify(options.on_complete, results)
            return results
        except Exception as e:
            self._status = FlowExecutionStatus()
            _notify(options.on_error, str(e))
            raise
        finally:
            run_context.reset(token)

    def run(self, options: Optional[FlowExecutionOptions] = None) -> List[FlowExecutionResult]:
        """Synchronous wrapper around `execute` for non-async callers."""
        return asyncio.run(self.execute(options))

    async def _run_end_node(
        self,
        node: Node,
        cache: _ObservedCache,
        options: FlowExecutionOptions,
    ) -> FlowExecutionResult:
        if self._cancelled:
            return FlowExecutionResult(nodeId=node.id, title=node.title, error="Execution cancelled")

        started = time.perf_counter()
        try:
            _notify(options.on_node_start, node.id, node.title)
            value = await execute_node(node, self.nodes, self.connections, cache)
        except Exception as e:
            logger.error(f"Error executing node {node.id}: {e}")
            return FlowExecutionResult(
                nodeId=node.id,
                title=node.title,
                error=str(e),
                executionTime=(time.perf_counter() - started) * 1000,
            )
        return FlowExecutionResult(
            nodeId=node.id,
            title=node.title,
            result=self.to_node_value(value),
            executionTime=(time.perf_counter() - started) * 1000,
        )

    def _on_settled(
        self,
        node_id: int,
        options: FlowExecutionOptions,
        node_results: Dict[int, Any],
        task: "asyncio.Future[Any]",
    ) -> None:
        if self._cancelled or task.cancelled():
            return

        self._status.progress += 1
        _notify(options.on_progress, self._status.progress, self._status.total)

        node = next((n for n in self.nodes if n.id == node_id), None)
        error = task.exception()
        if error is None:
            node_results[node_id] = task.result()
            if node is not None:
                _notify(options.on_node_complete, node.id, node.title, task.result())
        elif node is not None:
            _notify(options.on_node_error, node.id, node.title, str(error))

    def _apply_results(self, node_results: Dict[int, Any], results: List[FlowExecutionResult]) -> List[Node]:
        errors = {r.nodeId: r.error for r in results if r.error}
        updated: List[Node] = []
        for node in self.nodes:
            if node.id in node_results:
                updated.append(node.model_copy(update={"processing": False, "result": node_results[node.id]}))
            elif node.id in errors:
                updated.append(node.model_copy(update={"processing": False, "result": f"Error: {errors[node.id]}"}))
            else:
                updated.append(node)
        return updated

    def get_status(self) -> FlowExecutionStatus:
        return self._status.model_copy()

    def cancel(self) -> None:
        """Stop starting new end nodes; work already in flight is not interrupted.

        The runner stays busy until the current `execute` call returns.
        """
        self._cancelled = True

    def get_nodes(self) -> List[Node]:
        """Nodes with `result` filled in by the last run."""
        return self.nodes

    def __repr__(self) -> str:
        status = "running" if self._status.isExecuting else "idle"
        return f"FlowRunner(nodes={len(self.nodes)}, connections={len(self.connections)}, status={status!r})"


def _notify(callback: Optional[Callable[..., None]], *args: Any) -> None:
    if callback is not None:
        callback(*args)


async def execute_flow(
    nodes: Sequence[Node],
    connections: Sequence[Connection],
    options: Optional[FlowExecutionOptions] = None,
) -> List[FlowExecutionResult]:
    return await FlowRunner(nodes, connections).execute(options)


async def execute_flow_with_results(
    nodes: Sequence[Node],
    connections: Sequence[Connection],
    options: Optional[FlowExecutionOptions] = None,
) -> Tuple[List[FlowExecutionResult], List[Node]]:
    """Execute a flow and also return the nodes updated with their results."""
    runner = FlowRunner(nodes, connections)
    results = await runner.execute(options)
    return results, runner.get_nodes()
