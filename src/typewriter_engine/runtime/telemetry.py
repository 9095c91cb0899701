"""Telemetry for the typewriter, built on telelog.

Each layer logs through its own logger, ``typewriter_engine.<component>``
(``buffer``, ``keymaps``, ``session``, ``archive``, ``server``, ``app``).
Events are routed by the prefix of their name, so ``archive.remote_failed``
lands on the archive logger without the caller naming it.

``configure(...)`` -- pick a preset or adopt an explicit ``telelog.Config``
``component_logger(component)`` -- cached logger for one layer
``record_event(name, ...)`` -- one structured ``event::<name>`` line
``span(name, component, ...)`` -- profiled block that logs its metadata on exit
"""

from __future__ import annotations

import os
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, MutableMapping, Optional, Tuple, cast

import telelog  # type: ignore[import]

tl = cast(Any, telelog)

ENV_PREFIX = "TYPEWRITER_"
ROOT_LOGGER = "typewriter_engine"
APP_LOG_FILE = "typewriter.log"

_LOGGER_CACHE: MutableMapping[str, Any] = {}
_ACTIVE_CONFIG: Optional[Any] = None


def _env(name: str) -> Optional[str]:
    return os.getenv(f"{ENV_PREFIX}{name}")


def _env_flag(name: str, default: bool) -> bool:
    raw = _env(name)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "on"}


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    return repr(value) if isinstance(value, (dict, list, tuple, set)) else str(value)


def _format_pairs(data: Dict[str, Any]) -> list[tuple[str, str]]:
    return [(str(key), _stringify(value)) for key, value in data.items()]


def _build_preset_config(preset: str) -> Any:
    """``development`` logs everything to the console; ``app`` keeps the
    terminal clear for the Textual UI and writes to a file instead."""

    config = tl.Config()
    key = preset.lower()
    if key == "development":
        config.with_min_level("DEBUG")
        config.with_console_output(True)
        config.with_colored_output(True)
    elif key == "app":
        config.with_min_level((_env("LOG_LEVEL") or "INFO").upper())
        config.with_console_output(False)
        config.with_file_output(_env("LOG_FILE") or APP_LOG_FILE)
        config.with_json_format(_env_flag("LOG_JSON", False))
    else:
        raise ValueError(f"Unknown preset '{preset}'.")
    config.with_profiling(True)
    return config


def _build_default_config() -> Any:
    config = tl.Config()
    config.with_min_level((_env("LOG_LEVEL") or "INFO").upper())

    console = not _env_flag("DISABLE_CONSOLE", False)
    config.with_console_output(console)
    if console:
        config.with_colored_output(not _env_flag("NO_COLOR", False))

    if _env_flag("LOG_JSON", False):
        config.with_json_format(True)

    log_file = _env("LOG_FILE")
    if log_file:
        config.with_file_output(log_file)

    config.with_profiling(True)
    return config


def configure(*, config: Optional[Any] = None, preset: Optional[str] = None) -> None:
    """Replace the active configuration and drop cached loggers.

    ``config`` and ``preset`` are mutually exclusive; with neither, the
    ``TYPEWRITER_*`` environment is read again.
    """

    global _ACTIVE_CONFIG
    if config and preset:
        raise ValueError("Provide either `config` or `preset`, not both.")

    if preset:
        config = _build_preset_config(preset)
    elif config is None:
        config = _build_default_config()
    else:
        config.with_profiling(True)

    _ACTIVE_CONFIG = config
    _LOGGER_CACHE.clear()


def _ensure_config() -> Any:
    global _ACTIVE_CONFIG
    if _ACTIVE_CONFIG is None:
        _ACTIVE_CONFIG = _build_default_config()
    return _ACTIVE_CONFIG


def get_logger(name: Optional[str] = None) -> Any:
    logger_name = name or ROOT_LOGGER
    if logger_name not in _LOGGER_CACHE:
        _LOGGER_CACHE[logger_name] = tl.Logger.with_config(
            logger_name, _ensure_config()
        )
    return _LOGGER_CACHE[logger_name]


def component_logger(component: Optional[str]) -> Any:
    if not component:
        return get_logger(ROOT_LOGGER)
    return get_logger(f"{ROOT_LOGGER}.{component}")


def _resolve_level_method(logger: Any, level: Any) -> Tuple[Any, bool]:
    name = str(level).lower()
    with_attr = getattr(logger, f"{name}_with", None)
    if with_attr is not None:
        return with_attr, True

    attr = getattr(logger, name, None)
    if attr is None:
        raise ValueError(f"Unsupported log level '{level}'.")
    return attr, False


def _emit(logger: Any, level: str, message: str, payload: Dict[str, Any]) -> None:
    method, accepts_data = _resolve_level_method(logger, level)
    if accepts_data:
        method(message, _format_pairs(payload))
    else:
        method(f"{message} {payload}")


def record_event(
    name: str,
    *,
    level: str = "info",
    data: Optional[Dict[str, Any]] = None,
    logger_name: Optional[str] = None,
) -> None:
    """Emit ``event::<name>``; the logger defaults to the name's prefix."""

    if logger_name is not None:
        log = get_logger(logger_name)
    else:
        component, dot, _ = name.partition(".")
        log = component_logger(component if dot else None)
    _emit(log, level, f"event::{name}", {"event": name, **(data or {})})


@dataclass
class SpanHandle:
    """Collects metadata while a span runs; it is logged when the span ends."""

    logger: Any
    span_name: str
    component: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    failed: bool = False

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _stringify(value)

    def _payload(self, **extra: Any) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"span": self.span_name, **self.metadata}
        if self.component:
            payload["component"] = self.component
        payload.update({key: _stringify(val) for key, val in extra.items()})
        return payload

    def fail(self, reason: str) -> None:
        self.failed = True
        _emit(self.logger, "error", "span::fail", self._payload(reason=reason))

    def finish(self) -> None:
        if not self.failed:
            _emit(self.logger, "debug", "span::end", self._payload())


@contextmanager
def span(
    name: str,
    *,
    component: Optional[str] = None,
    logger_name: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Iterator[SpanHandle]:
    """Profile a block on the component's logger.

    ``metadata`` is attached as logger context for the duration of the block
    and, together with anything added through the handle, written out in a
    single ``span::end`` line (or ``span::fail`` when the block raises).
    """

    log = get_logger(logger_name) if logger_name else component_logger(component)

    context_keys = []
    handle = SpanHandle(logger=log, span_name=name, component=component)
    for key, value in (metadata or {}).items():
        handle.add_metadata(key, value)
        log.add_context(key, handle.metadata[key])
        context_keys.append(key)

    with ExitStack() as stack:
        if component:
            stack.enter_context(log.track_component(component))
        stack.enter_context(log.profile(name))
        try:
            yield handle
        except Exception as exc:
            handle.fail(str(exc))
            raise
        finally:
            handle.finish()
            for key in context_keys:
                log.remove_context(key)


configure()
