"""Lazy, memoized asynchronous node execution.

`execute_node` evaluates one node, pulling upstream values on demand through
`ExecutionContext.get_input_value`. Every node started for a request is
recorded in an execution cache (node id -> task) *before* it is awaited, so a
node shared by several downstream consumers runs once per cache even when
those consumers await it concurrently.

The cache is per-request state: pass the same `ExecutionCache` to several
`execute_node` calls to share results between them, or omit it to get a
fresh one. It is only touched between awaits, which is sufficient on a single
event loop.

The cache also records which node task is waiting on which, so that a
dependency cycle that is actually pulled at run time fails with
`ExecutionCycleError` instead of waiting forever. A plain dict works as a
cache too; its wait records then only cover the call it was passed to.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Set

from ..errors import ExecutionCycleError, MissingCapabilityError
from .models import Connection, Node, ProcessFn
from .topology import find_node_by_id, find_socket_by_id

logger = logging.getLogger(__name__)


class _WaitGraph:
    """Which node task is currently awaiting which, within one request."""

    def __init__(self) -> None:
        self.waiting_on: Dict["asyncio.Future[Any]", Set["asyncio.Future[Any]"]] = {}
        self.task_node: Dict["asyncio.Future[Any]", int] = {}

    def chain(self, start: "asyncio.Future[Any]", target: "asyncio.Future[Any]") -> Optional[List[int]]:
        """Node ids from `start` to `target` along current waits, if connected."""
        stack = [(start, [self.task_node.get(start, -1)])]
        seen: Set[int] = set()
        while stack:
            task, path = stack.pop()
            if task is target:
                return path
            if id(task) in seen:
                continue
            seen.add(id(task))
            for upstream in self.waiting_on.get(task, ()):
                stack.append((upstream, path + [self.task_node.get(upstream, -1)]))
        return None


class ExecutionCache(Dict[int, "asyncio.Future[Any]"]):
    """Node id -> task of one execution request, plus its wait graph."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.waits = _WaitGraph()


CacheMapping = MutableMapping[int, "asyncio.Future[Any]"]


@dataclass(frozen=True)
class ExecutionContext:
    """What a node's `process` capability sees while it runs."""

    node: Node
    get_input_value: Callable[[int], Awaitable[Any]]


def extract_socket_value(result: Any, from_socket: int, upstream: Node) -> Any:
    """Pick the value for `from_socket` out of an upstream node's result.

    A mapping keyed by the upstream node's output socket ids (as ints or
    decimal strings, e.g. after a JSON round trip) is a multi-output result;
    anything else is the single value of a one-output node.
    """
    if isinstance(result, Mapping):
        output_ids = {s.id for s in upstream.output_sockets()}
        keyed = {k: v for k, v in result.items() if _as_socket_id(k) in output_ids}
        if keyed:
            for key, value in keyed.items():
                if _as_socket_id(key) == from_socket:
                    return value
            return None
    return result


def _as_socket_id(key: Any) -> Optional[int]:
    if isinstance(key, bool):
        return None
    if isinstance(key, int):
        return key
    if isinstance(key, str):
        digits = key.strip()
        if digits.startswith("-"):
            digits = digits[1:]
        if digits.isascii() and digits.isdecimal():
            return int(key)
    return None


async def execute_node(
    node: Node,
    all_nodes: Sequence[Node],
    all_connections: Sequence[Connection],
    cache: Optional[CacheMapping] = None,
) -> Any:
    """Execute `node`, resolving upstream dependencies through `cache`.

    Args:
        node: The node to evaluate.
        all_nodes: Every node of the graph (used to resolve sockets).
        all_connections: Every connection of the graph.
        cache: Shared execution cache; a new one is used when omitted.

    Returns:
        The node's value: a scalar, or a {socket_id: value} mapping for
        multi-output nodes.

    Raises:
        MissingCapabilityError: `node` has no `process` capability.
        ExecutionCycleError: a node (transitively) pulled its own output.
        Exception: whatever the node's (or an upstream node's) `process`
            raised, unchanged.
    """
    execution_cache: CacheMapping = ExecutionCache() if cache is None else cache
    waits = execution_cache.waits if isinstance(execution_cache, ExecutionCache) else _WaitGraph()
    return await _node_task(node, all_nodes, all_connections, execution_cache, waits)


def _node_task(
    node: Node,
    all_nodes: Sequence[Node],
    all_connections: Sequence[Connection],
    cache: CacheMapping,
    waits: _WaitGraph,
) -> "asyncio.Future[Any]":
    """Return the cached task for `node`, starting it if needed."""
    cached = cache.get(node.id)
    if cached is not None:
        logger.debug(f"Waiting for cached result for node {node.id} ({node.title})")
        return cached

    process = node.process
    if process is None:
        raise MissingCapabilityError(node.nodeType, node.id)

    logger.debug(f"Starting execution of node {node.id} ({node.title})")
    task = asyncio.ensure_future(_run_process(node, process, all_nodes, all_connections, cache, waits))
    cache[node.id] = task
    waits.task_node[task] = node.id
    return task


async def _run_process(
    node: Node,
    process: ProcessFn,
    all_nodes: Sequence[Node],
    all_connections: Sequence[Connection],
    cache: CacheMapping,
    waits: _WaitGraph,
) -> Any:
    async def get_input_value(input_socket_id: int) -> Any:
        incoming = next((c for c in all_connections if c.toSocket == input_socket_id), None)
        if incoming is None:
            return None

        from_socket = find_socket_by_id(incoming.fromSocket, all_nodes)
        if from_socket is None:
            return None
        from_node = find_node_by_id(from_socket.nodeId, all_nodes)
        if from_node is None:
            return None

        upstream = _node_task(from_node, all_nodes, all_connections, cache, waits)
        owner = cache.get(node.id)
        if owner is None:
            result = await upstream
        else:
            chain = waits.chain(upstream, owner)
            if chain is not None:
                raise ExecutionCycleError([node.id] + chain)
            pending = waits.waiting_on.setdefault(owner, set())
            pending.add(upstream)
            try:
                result = await upstream
            finally:
                pending.discard(upstream)
        return extract_socket_value(result, incoming.fromSocket, from_node)

    result = process(ExecutionContext(node=node, get_input_value=get_input_value))
    if inspect.isawaitable(result):
        result = await result
    logger.debug(f"Completed execution of node {node.id} ({node.title})")
    return result
