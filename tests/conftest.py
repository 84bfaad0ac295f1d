"""socketflow test bootstrap.

Puts the repository root on `sys.path` so `socketflow` and `web.backend`
import from the working tree when the package is not installed.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


def _prepend_sys_path(path: Path) -> None:
    p = str(path)
    if p and p not in sys.path:
        sys.path.insert(0, p)


HERE = Path(__file__).resolve()
REPO_ROOT = HERE.parents[1]

_prepend_sys_path(REPO_ROOT)


@pytest.fixture
def registry():
    """A registry holding the built-in node catalog."""
    from socketflow.core.registry import NodeRegistry
    from socketflow.nodes.builtins import register_builtin_nodes

    return register_builtin_nodes(NodeRegistry())
