"""UI-agnostic virtual typewriter engine."""

__all__ = [
    "actions",
    "adapters",
    "archive",
    "buffer",
    "config",
    "keymaps",
    "presentation",
    "runtime",
    "session",
]

__version__ = "0.1.0"
