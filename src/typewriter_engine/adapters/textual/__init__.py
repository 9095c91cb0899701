"""Textual host adapter; the runnable app lives in ``.app``."""

from .controller import TextualTypewriterAdapter, TextualUIHooks

__all__ = ["TextualTypewriterAdapter", "TextualUIHooks"]
