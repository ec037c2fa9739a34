"""Game-list driven board management for multi-board and single-board views."""

from __future__ import annotations

import logging
from collections.abc import Callable

from kifuwatch.config import WatchConfig
from kifuwatch.core.game_list import ListOrder, find_identity, merge_history, reconcile
from kifuwatch.core.models import GameIdentity
from kifuwatch.sync.scheduler import FetchDecision
from kifuwatch.sync.session import BoardSession
from kifuwatch.sync.source import RecordSource

_LOGGER = logging.getLogger(__name__)

SessionFactory = Callable[[GameIdentity], BoardSession]


class _ListLoader:
    """Issues list requests; only the latest response is applied."""

    __slots__ = ("_config", "_source", "_request_id")

    def __init__(self, config: WatchConfig, source: RecordSource) -> None:
        self._config = config
        self._source = source
        self._request_id = 0

    def load(self, on_entries: Callable[[list[GameIdentity]], None]) -> bool:
        url = self._config.resolved_list_url()
        if not url:
            _LOGGER.warning("No list URL configured; nothing to refresh")
            return False
        self._request_id += 1
        request_id = self._request_id

        def on_success(text: str) -> None:
            if request_id != self._request_id:
                return
            on_entries(self._config.list_log_parser(text))

        def on_failure(exc: Exception) -> None:
            if request_id != self._request_id:
                return
            _LOGGER.warning("Game list refresh from %s failed: %s", url, exc)

        self._source.get(url, on_success, on_failure)
        return True


class BoardSet:
    """Multi-board view over the games of the current time window.

    Each refresh recomputes the window from scratch. Boards whose game is
    still inside it are reassigned and reloaded, boards that fell out are
    retired, and new games get a fresh board. Boards are ordered most
    recent first.
    """

    __slots__ = (
        "_config",
        "_loader",
        "_session_factory",
        "_on_boards_changed",
        "_boards",
        "_window",
    )

    def __init__(
        self,
        config: WatchConfig,
        *,
        source: RecordSource,
        session_factory: SessionFactory,
        on_boards_changed: Callable[[tuple[BoardSession, ...]], None] | None = None,
    ) -> None:
        self._config = config
        self._loader = _ListLoader(config, source)
        self._session_factory = session_factory
        self._on_boards_changed = on_boards_changed
        self._boards: list[BoardSession] = []
        self._window: tuple[GameIdentity, ...] = ()

    @property
    def boards(self) -> tuple[BoardSession, ...]:
        return tuple(self._boards)

    @property
    def window(self) -> tuple[GameIdentity, ...]:
        return self._window

    def refresh(self) -> bool:
        """Reload the game list and rebuild the boards from it."""
        return self._loader.load(self.apply_entries)

    def apply_entries(self, entries: list[GameIdentity]) -> None:
        window = reconcile(
            entries,
            order=ListOrder.DESCENDING,
            span_ms=self._config.window_span_ms,
        )
        self.apply_window(window)

    def apply_window(self, window: tuple[GameIdentity, ...]) -> None:
        if not window:
            _LOGGER.info("Game list is empty; keeping current boards")
            return

        by_id = {identity.game_id: identity for identity in window}
        kept: dict[str, BoardSession] = {}
        for board in self._boards:
            identity = board.identity
            if identity is not None and identity.game_id in by_id and identity.game_id not in kept:
                board.assign(by_id[identity.game_id])
                kept[identity.game_id] = board
            else:
                board.disable()

        for identity in window:
            if identity.game_id in kept:
                continue
            board = self._session_factory(identity)
            board.assign(identity)
            kept[identity.game_id] = board
            _LOGGER.info("Watching %s", identity.display_name)

        self._boards = [kept[identity.game_id] for identity in window]
        self._window = window
        if self._on_boards_changed is not None:
            self._on_boards_changed(self.boards)

    def shutdown(self) -> None:
        for board in self._boards:
            board.disable()
        self._boards = []
        self._window = ()


class GameSelector:
    """Single-board view with an accumulated chronological game history."""

    __slots__ = ("_loader", "_session", "_on_history_changed", "_history")

    def __init__(
        self,
        config: WatchConfig,
        *,
        source: RecordSource,
        session: BoardSession,
        on_history_changed: Callable[[tuple[GameIdentity, ...]], None] | None = None,
    ) -> None:
        self._loader = _ListLoader(config, source)
        self._session = session
        self._on_history_changed = on_history_changed
        self._history: tuple[GameIdentity, ...] = ()

    @property
    def history(self) -> tuple[GameIdentity, ...]:
        return self._history

    @property
    def session(self) -> BoardSession:
        return self._session

    def refresh(self, requested_id: str = "") -> bool:
        """Reload the list, then show *requested_id* or the latest game."""
        return self._loader.load(
            lambda entries: self.apply_entries(entries, requested_id=requested_id)
        )

    def apply_entries(
        self, entries: list[GameIdentity], *, requested_id: str = ""
    ) -> None:
        self._history = merge_history(self._history, entries)
        if self._on_history_changed is not None:
            self._on_history_changed(self._history)
        if requested_id:
            self.select(requested_id)
        elif self._history:
            self.select(self._history[-1].game_id)

    def select(self, game_id: str) -> FetchDecision:
        """Switch the board to *game_id*, named from history when known."""
        identity = find_identity(self._history, game_id) or GameIdentity.from_id(game_id)
        return self._session.assign(identity)
