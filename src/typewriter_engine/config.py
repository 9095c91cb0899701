"""Typewriter configuration resolved from ``TYPEWRITER_*`` environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

ENV_PREFIX = "TYPEWRITER_"
DEFAULT_ARCHIVE_URL = "http://127.0.0.1:8799"
DEFAULT_CACHE_FILE = Path.home() / ".typewriter" / "notes-cache.json"


@dataclass(frozen=True)
class PaperConfig:
    """Physical sheet geometry; ``columns_per_line`` is derived from it."""

    paper_width: int = 450
    side_padding: int = 45
    char_width: int = 12
    line_height: int = 24
    initial_carriage_offset: int = 100
    columns_override: Optional[int] = None

    @property
    def content_width(self) -> int:
        return self.paper_width - self.side_padding * 2

    @property
    def columns_per_line(self) -> int:
        if self.columns_override is not None:
            return self.columns_override
        return max(1, self.content_width // self.char_width)


@dataclass(frozen=True)
class ArchiveConfig:
    base_url: Optional[str] = DEFAULT_ARCHIVE_URL
    token: Optional[str] = None
    timeout: float = 5.0
    cache_path: Path = DEFAULT_CACHE_FILE
    cache_key: str = "typewriter-notes"


@dataclass(frozen=True)
class TypewriterConfig:
    paper: PaperConfig = field(default_factory=PaperConfig)
    archive: ArchiveConfig = field(default_factory=ArchiveConfig)


def _env(environ: Mapping[str, str], name: str) -> Optional[str]:
    value = environ.get(f"{ENV_PREFIX}{name}")
    if value is None or not value.strip():
        return None
    return value.strip()


def _env_int(environ: Mapping[str, str], name: str, fallback: int) -> int:
    value = _env(environ, name)
    if value is None:
        return fallback
    try:
        return int(value)
    except ValueError:
        return fallback


def _env_float(environ: Mapping[str, str], name: str, fallback: float) -> float:
    value = _env(environ, name)
    if value is None:
        return fallback
    try:
        return float(value)
    except ValueError:
        return fallback


def load_config(environ: Optional[Mapping[str, str]] = None) -> TypewriterConfig:
    """Build a config from the environment; bad numbers fall back to defaults.

    ``TYPEWRITER_ARCHIVE_URL=off`` disables the remote archive entirely.
    """

    env = os.environ if environ is None else environ
    defaults = PaperConfig()
    columns = _env_int(env, "COLUMNS", 0)
    paper = PaperConfig(
        paper_width=_env_int(env, "PAPER_WIDTH", defaults.paper_width),
        side_padding=_env_int(env, "PAPER_PADDING", defaults.side_padding),
        char_width=_env_int(env, "CHAR_WIDTH", defaults.char_width),
        line_height=_env_int(env, "LINE_HEIGHT", defaults.line_height),
        initial_carriage_offset=_env_int(
            env, "CARRIAGE_OFFSET", defaults.initial_carriage_offset
        ),
        columns_override=columns if columns > 0 else None,
    )

    url = _env(env, "ARCHIVE_URL")
    if url is None:
        base_url: Optional[str] = DEFAULT_ARCHIVE_URL
    elif url.lower() in {"off", "none", "disabled"}:
        base_url = None
    else:
        base_url = url.rstrip("/")
    cache = _env(env, "CACHE_FILE")
    archive = ArchiveConfig(
        base_url=base_url,
        token=_env(env, "ARCHIVE_TOKEN"),
        timeout=_env_float(env, "ARCHIVE_TIMEOUT", ArchiveConfig.timeout),
        cache_path=Path(cache).expanduser() if cache else DEFAULT_CACHE_FILE,
        cache_key=_env(env, "CACHE_KEY") or ArchiveConfig.cache_key,
    )
    return TypewriterConfig(paper=paper, archive=archive)


__all__ = [
    "ENV_PREFIX",
    "DEFAULT_ARCHIVE_URL",
    "DEFAULT_CACHE_FILE",
    "PaperConfig",
    "ArchiveConfig",
    "TypewriterConfig",
    "load_config",
]
