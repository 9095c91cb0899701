"""Paper scroll offset, independent of the buffer."""

from __future__ import annotations

from dataclasses import dataclass

SCROLL_LIMIT = 500.0
SCROLL_FACTOR = 0.5


@dataclass(slots=True)
class PaperScroll:
    """Clamped scroll offset that snaps back to zero when typing resumes."""

    offset: float = 0.0
    limit: float = SCROLL_LIMIT
    factor: float = SCROLL_FACTOR

    def scroll(self, delta: float) -> float:
        self.offset = max(-self.limit, min(self.limit, self.offset + delta * self.factor))
        return self.offset

    def reset(self) -> bool:
        """Snap back; returns whether anything moved."""

        moved = self.offset != 0.0
        self.offset = 0.0
        return moved

    @property
    def is_scrolled(self) -> bool:
        return self.offset != 0.0
