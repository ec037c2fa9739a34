"""Mutable per-board session state."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, auto

from kifuwatch.core.models import GameIdentity, RawRecord


class SessionPhase(IntEnum):
    """Lifecycle of a board session. ``STALE`` is terminal."""

    EMPTY = auto()
    LOADING = auto()
    DISPLAYED = auto()
    STALE = auto()


@dataclass
class SessionState:
    """Everything a board session remembers between fetch cycles."""

    identity: GameIdentity | None = None
    last_fetch_ms: float | None = None
    last_record: RawRecord | None = None
    selected_ply: int = 0
    max_ply: int = 0
    polling_enabled: bool = True
    reached_terminal: bool = False

    @property
    def is_following_live_edge(self) -> bool:
        return self.selected_ply == self.max_ply
