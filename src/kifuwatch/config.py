"""Watcher configuration and YAML loader."""

from __future__ import annotations

import codecs
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any
from urllib.parse import quote, urljoin

import yaml

from kifuwatch.core.game_list import DEFAULT_WINDOW_SPAN_MS
from kifuwatch.core.models import GameIdentity
from kifuwatch.core.notation import parse_game_log

MODES = ("multi", "single", "direct")

LogParser = Callable[[str], list[GameIdentity]]


@dataclass
class WatchConfig:
    """All recognised watcher options.

    URL templates take a ``{game_id}`` placeholder and are resolved against
    ``base_url``.
    """

    # Sources
    base_url: str = ""
    record_url_template: str = "{game_id}.csa"
    list_url: str = ""
    canonical_url_template: str | None = None
    list_log_parser: LogParser = field(default=parse_game_log, repr=False)
    encoding: str = "utf-8"

    # Polling
    throttle_ms: int = 8500
    retry_delay_ms: int = 10000
    window_span_ms: int = DEFAULT_WINDOW_SPAN_MS

    # Board selection
    mode: str = "multi"
    game_id: str = ""
    game_name: str = ""
    start_ply: int | None = None

    def __post_init__(self) -> None:
        if self.mode not in MODES:
            raise ValueError(f"Unknown mode: {self.mode!r}")
        for name in ("throttle_ms", "retry_delay_ms", "window_span_ms"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")
        if "{game_id}" not in self.record_url_template:
            raise ValueError("record_url_template must contain {game_id}")
        try:
            codecs.lookup(self.encoding)
        except LookupError:
            raise ValueError(f"Unknown encoding: {self.encoding!r}") from None

    def _resolve(self, template: str, game_id: str) -> str:
        url = template.format(game_id=quote(game_id, safe="+-._"))
        return urljoin(self.base_url, url) if self.base_url else url

    def record_url(self, game_id: str) -> str:
        return self._resolve(self.record_url_template, game_id)

    def canonical_url(self, game_id: str) -> str:
        """Link to the original record, defaulting to the fetched URL."""
        template = self.canonical_url_template or self.record_url_template
        return self._resolve(template, game_id)

    def resolved_list_url(self) -> str:
        if not self.list_url:
            return ""
        return urljoin(self.base_url, self.list_url) if self.base_url else self.list_url


_LOADABLE = {f.name for f in fields(WatchConfig) if f.name != "list_log_parser"}


def config_from_mapping(raw: Mapping[str, Any]) -> WatchConfig:
    """Build a :class:`WatchConfig` from plain values (YAML, CLI)."""
    unknown = sorted(set(raw) - _LOADABLE)
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(unknown)}")
    return WatchConfig(**{k: v for k, v in raw.items() if v is not None})


def load_config(path: Path) -> WatchConfig:
    """Load watcher config from a YAML file with a top-level ``watch`` table."""
    with open(path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    section = raw.get("watch", raw)
    if not isinstance(section, dict):
        raise ValueError(f"Invalid config in {path}")
    return config_from_mapping(section)
