"""Typing verbs bound to keys: type, backspace, return, ink toggle."""

from __future__ import annotations

from typewriter_engine.buffer import InkStyle
from typewriter_engine.session.context import KeyInput, SessionContext, SessionResult


def _after_mutation(context: SessionContext, label: str) -> SessionResult:
    context.scroll.reset()
    context.flags["page_has_text"] = not context.buffer.is_blank
    context.bus.emit("buffer.changed", context.buffer.snapshot())
    return SessionResult(consumed=True, message=label)


def type_character(context: SessionContext, key: KeyInput) -> SessionResult:
    char = key.printable
    if char is None:
        return SessionResult(consumed=False, status="miss", message="unprintable")
    lines_before = context.buffer.line_count
    context.buffer.append_character(char)
    if context.buffer.line_count > lines_before:
        context.feedback.carriage_return()
        context.bus.emit("carriage.wrapped", context.buffer.caret)
    context.feedback.key_press()
    return _after_mutation(context, "type")


def backspace(context: SessionContext, key: KeyInput) -> SessionResult:
    del key
    version = context.buffer.version
    style = context.buffer.style
    context.buffer.backspace()
    if context.buffer.version == version:
        if context.buffer.style != style:
            context.bus.emit("ink.changed", context.buffer.style)
            return SessionResult(consumed=True, message="ink_reverted")
        return SessionResult(consumed=True, status="noop")
    context.feedback.key_press()
    return _after_mutation(context, "backspace")


def carriage_return(context: SessionContext, key: KeyInput) -> SessionResult:
    del key
    context.buffer.append_line_break()
    context.feedback.carriage_return()
    return _after_mutation(context, "return")


def toggle_ink(context: SessionContext, key: KeyInput) -> SessionResult:
    del key
    style = context.buffer.toggle_style()
    context.bus.emit("ink.changed", style)
    return SessionResult(consumed=True, message=f"ink_{style.value}")


def ink_default(context: SessionContext, key: KeyInput) -> SessionResult:
    del key
    style = context.buffer.set_style(InkStyle.DEFAULT)
    context.bus.emit("ink.changed", style)
    return SessionResult(consumed=True, message=f"ink_{style.value}")


def ink_accent(context: SessionContext, key: KeyInput) -> SessionResult:
    del key
    style = context.buffer.set_style(InkStyle.ACCENT)
    context.bus.emit("ink.changed", style)
    return SessionResult(consumed=True, message=f"ink_{style.value}")


def noop_action(context: SessionContext, key: KeyInput) -> SessionResult:
    del context, key
    return SessionResult(consumed=True, status="noop")


__all__ = [
    "type_character",
    "backspace",
    "carriage_return",
    "toggle_ink",
    "ink_default",
    "ink_accent",
    "noop_action",
]
