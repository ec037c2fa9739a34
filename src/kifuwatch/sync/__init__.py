"""Synchronization layer: fetch scheduling, board sessions, board sets.

Quick start::

    from kifuwatch.config import WatchConfig
    from kifuwatch.core import GameIdentity
    from kifuwatch.sync import BoardSession, QtRecordSource

    session = BoardSession(WatchConfig(), source=QtRecordSource(), render=print)
    session.assign(GameIdentity.from_id(game_id))
"""

from kifuwatch.sync.boards import BoardSet, GameSelector, SessionFactory
from kifuwatch.sync.errors import ContentParseFailure, FetchError, NetworkFailure
from kifuwatch.sync.scheduler import (
    FetchDecision,
    FetchOutcome,
    FetchScheduler,
    monotonic_ms,
)
from kifuwatch.sync.session import BoardModel, BoardSession, RenderCallback
from kifuwatch.sync.source import QtRecordSource, RecordSource
from kifuwatch.sync.state import SessionPhase, SessionState

__all__ = [
    # Errors
    "ContentParseFailure",
    "FetchError",
    "NetworkFailure",
    # Scheduling
    "FetchDecision",
    "FetchOutcome",
    "FetchScheduler",
    "monotonic_ms",
    # Sessions
    "BoardModel",
    "BoardSession",
    "RenderCallback",
    "SessionPhase",
    "SessionState",
    # Board management
    "BoardSet",
    "GameSelector",
    "SessionFactory",
    # Sources
    "QtRecordSource",
    "RecordSource",
]
