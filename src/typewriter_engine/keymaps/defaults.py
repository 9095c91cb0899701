"""Built-in keymap: the typewriter's physical controls."""

from __future__ import annotations

from typing import Iterable

from typewriter_engine.actions import archive as archive_actions
from typewriter_engine.actions import core as core_actions

from .models import ActionRef, Binding, WhenClause
from .registry import KeymapRegistry

DEFAULT_ACTIONS: tuple[ActionRef, ...] = (
    ActionRef(
        id="typewriter.type",
        handler=core_actions.type_character,
        description="Strike a character",
    ),
    ActionRef(
        id="typewriter.backspace",
        handler=core_actions.backspace,
        description="Back up one unit",
    ),
    ActionRef(
        id="typewriter.return",
        handler=core_actions.carriage_return,
        description="Carriage return / line feed",
    ),
    ActionRef(
        id="ink.toggle",
        handler=core_actions.toggle_ink,
        description="Switch between default and accent ribbon",
    ),
    ActionRef(
        id="ink.default",
        handler=core_actions.ink_default,
        description="Default ribbon",
    ),
    ActionRef(
        id="ink.accent",
        handler=core_actions.ink_accent,
        description="Accent ribbon",
    ),
    ActionRef(
        id="archive.send",
        handler=archive_actions.send_page,
        description="Send the page to the notes wall",
    ),
    ActionRef(
        id="archive.refresh",
        handler=archive_actions.refresh_notes,
        description="Reload the notes wall",
    ),
    ActionRef(
        id="core.noop",
        handler=core_actions.noop_action,
        description="Swallow the key",
    ),
)

DEFAULT_BINDINGS: tuple[Binding, ...] = (
    Binding(
        id="typewriter.backspace",
        token="backspace",
        action_id="typewriter.backspace",
        description="Back up one unit",
    ),
    Binding(
        id="typewriter.return",
        token="enter",
        action_id="typewriter.return",
        description="Carriage return",
    ),
    Binding(
        id="ink.toggle",
        token="ctrl+r",
        action_id="ink.toggle",
        description="Toggle ink ribbon",
    ),
    Binding(
        id="ink.default",
        token="ctrl+b",
        action_id="ink.default",
        description="Default ink",
    ),
    Binding(
        id="ink.accent",
        token="ctrl+e",
        action_id="ink.accent",
        description="Accent ink",
    ),
    Binding(
        id="archive.send",
        token="ctrl+s",
        action_id="archive.send",
        description="Send page",
        when=(WhenClause("page_has_text"),),
    ),
    Binding(
        id="archive.send.blank",
        token="ctrl+s",
        action_id="core.noop",
        description="Nothing to send yet",
        when=(WhenClause.parse("!page_has_text"),),
    ),
    Binding(
        id="archive.refresh",
        token="f5",
        action_id="archive.refresh",
        description="Reload notes",
    ),
)

TYPE_ACTION_ID = "typewriter.type"


def load_default_keymaps(
    registry: KeymapRegistry,
    *,
    actions: Iterable[ActionRef] = DEFAULT_ACTIONS,
    bindings: Iterable[Binding] = DEFAULT_BINDINGS,
) -> KeymapRegistry:
    for action in actions:
        registry.register_action(action, replace=True)
    for binding in bindings:
        registry.register_binding(binding, replace=True)
    return registry


__all__ = [
    "DEFAULT_ACTIONS",
    "DEFAULT_BINDINGS",
    "TYPE_ACTION_ID",
    "load_default_keymaps",
]
