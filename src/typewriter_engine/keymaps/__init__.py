"""Declarative keymap registry and default bindings."""

from .models import ActionRef, Binding, WhenClause, normalize_token
from .registry import KeymapConflictError, KeymapRegistry, RegistryStats, ResolutionMatch
from .defaults import (
    DEFAULT_ACTIONS,
    DEFAULT_BINDINGS,
    TYPE_ACTION_ID,
    load_default_keymaps,
)

__all__ = [
    "ActionRef",
    "Binding",
    "WhenClause",
    "normalize_token",
    "KeymapRegistry",
    "KeymapConflictError",
    "RegistryStats",
    "ResolutionMatch",
    "DEFAULT_ACTIONS",
    "DEFAULT_BINDINGS",
    "TYPE_ACTION_ID",
    "load_default_keymaps",
]
