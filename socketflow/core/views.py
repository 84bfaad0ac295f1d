"""Read-only views over registered node templates."""

from __future__ import annotations

import inspect
from types import MappingProxyType
from typing import Any, Union

from pydantic import BaseModel

from ..errors import TemplateMutationError
from .models import Node


class TemplateView:
    """Read-only proxy over a registered template (or any part of it).

    Attribute reads are forwarded; nested models come back as views, lists as
    tuples and dicts as mapping proxies. Any assignment or deletion raises
    `TemplateMutationError`.
    """

    __slots__ = ("_target", "_node_type")

    def __init__(self, target: BaseModel, node_type: str):
        object.__setattr__(self, "_target", target)
        object.__setattr__(self, "_node_type", node_type)

    def __getattr__(self, name: str) -> Any:
        value = getattr(self._target, name)
        if inspect.ismethod(value) and value.__self__ is self._target:
            method = value
            node_type = self._node_type

            def _frozen_call(*args: Any, **kwargs: Any) -> Any:
                return freeze(method(*args, **kwargs), node_type)

            return _frozen_call
        return freeze(value, self._node_type)

    def __setattr__(self, name: str, value: Any) -> None:
        raise TemplateMutationError(self._node_type, f"cannot set '{name}'")

    def __delattr__(self, name: str) -> None:
        raise TemplateMutationError(self._node_type, f"cannot delete '{name}'")

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TemplateView):
            other = other._target
        return self._target == other

    def __hash__(self) -> int:
        return id(self._target)

    def __repr__(self) -> str:
        return f"TemplateView({self._target!r})"


def freeze(value: Any, node_type: str) -> Any:
    if isinstance(value, BaseModel):
        return TemplateView(value, node_type)
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v, node_type) for v in value)
    if isinstance(value, dict):
        return MappingProxyType({k: freeze(v, node_type) for k, v in value.items()})
    return value


def unwrap_template(template: Union[Node, TemplateView]) -> Node:
    """Return the node behind a template view; plain nodes pass through."""
    if isinstance(template, TemplateView):
        return template._target  # type: ignore[return-value]
    return template
