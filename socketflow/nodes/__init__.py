"""Node catalogs shipped with socketflow."""

from .builtins import CATEGORIES, builtin_templates, register_builtin_nodes

__all__ = ["CATEGORIES", "builtin_templates", "register_builtin_nodes"]
