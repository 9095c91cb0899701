"""Typewriter verbs reused by keymaps and adapters."""

from .archive import refresh_notes, send_page
from .core import (
    backspace,
    carriage_return,
    ink_accent,
    ink_default,
    noop_action,
    toggle_ink,
    type_character,
)

__all__ = [
    "type_character",
    "backspace",
    "carriage_return",
    "toggle_ink",
    "ink_default",
    "ink_accent",
    "noop_action",
    "send_page",
    "refresh_notes",
]
