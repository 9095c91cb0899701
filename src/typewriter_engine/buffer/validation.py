"""Validation helpers shared across buffer services."""

from __future__ import annotations

from .units import LINE_BREAK_CHARS


class BufferValidationError(ValueError):
    """Raised when a caller hands the buffer something it cannot type."""

    def __init__(self, message: str, *, value: object | None = None) -> None:
        super().__init__(message)
        self.value = value


def ensure_typable(char: str) -> str:
    if not isinstance(char, str) or len(char) != 1:
        raise BufferValidationError("Expected a single character", value=char)
    if char in LINE_BREAK_CHARS:
        raise BufferValidationError(
            "Line breaks go through append_line_break", value=char
        )
    return char
