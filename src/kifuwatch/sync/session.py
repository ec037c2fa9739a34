"""BoardSession: the controller of one watched board.

Coordinates: SessionState, FetchScheduler, record derivation.
Rendering is delegated to an injected ``render`` callback; viewer
navigation comes back through :meth:`BoardSession.select_ply`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace

from PyQt6.QtCore import QObject

from kifuwatch.config import WatchConfig
from kifuwatch.core.annotations import scan_comments
from kifuwatch.core.derive import derive_views, last_remaining_text
from kifuwatch.core.models import (
    DerivedMoveView,
    GameIdentity,
    ParsedRecord,
    RawRecord,
    Side,
    TimeControlSpec,
)
from kifuwatch.core.notation import parse_csa
from kifuwatch.core.timecontrol import parse_game_id
from kifuwatch.sync.scheduler import (
    Clock,
    FetchDecision,
    FetchScheduler,
    RecordParser,
)
from kifuwatch.sync.source import RecordSource
from kifuwatch.sync.state import SessionPhase, SessionState

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BoardModel:
    """Everything a renderer needs to draw one board."""

    identity: GameIdentity
    time_control: TimeControlSpec
    moves: tuple[DerivedMoveView, ...]
    selected_ply: int
    max_ply: int
    is_terminal: bool
    remaining_black: str = ""
    remaining_white: str = ""
    canonical_url: str = ""
    header: dict[str, str] = field(default_factory=dict)
    end_lines: tuple[str, ...] = ()
    text: str = ""

    @property
    def selected_move(self) -> DerivedMoveView | None:
        if 0 <= self.selected_ply < len(self.moves):
            return self.moves[self.selected_ply]
        return None

    @property
    def scores(self) -> list[int | None]:
        return [view.score for view in self.moves]


RenderCallback = Callable[[BoardModel], None]


class BoardSession:
    """Keeps one board in sync with its remote record.

    Re-renders only when the content changed, and keeps the viewer's
    position: a viewer sitting on the last move follows new moves, a viewer
    reviewing earlier moves stays where they are.
    """

    __slots__ = (
        "_config",
        "_render",
        "_state",
        "_phase",
        "_model",
        "_initial_ply",
        "_scheduler",
    )

    def __init__(
        self,
        config: WatchConfig,
        *,
        source: RecordSource,
        render: RenderCallback,
        parse_record: RecordParser = parse_csa,
        clock: Clock | None = None,
        initial_ply: int | None = None,
        parent: QObject | None = None,
    ) -> None:
        self._config = config
        self._render = render
        self._state = SessionState()
        self._phase = SessionPhase.EMPTY
        self._model: BoardModel | None = None
        self._initial_ply = initial_ply
        self._scheduler = FetchScheduler(
            state=self._state,
            source=source,
            record_url=config.record_url,
            on_update=self._on_record_updated,
            on_unchanged=self._on_record_unchanged,
            parse_record=parse_record,
            throttle_ms=config.throttle_ms,
            retry_delay_ms=config.retry_delay_ms,
            clock=clock,
            parent=parent,
        )

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def identity(self) -> GameIdentity | None:
        return self._state.identity

    @property
    def model(self) -> BoardModel | None:
        return self._model

    @property
    def scheduler(self) -> FetchScheduler:
        return self._scheduler

    @property
    def is_stale(self) -> bool:
        return self._phase == SessionPhase.STALE

    # ── Public API ───────────────────────────────────────────────────────

    def assign(self, identity: GameIdentity) -> FetchDecision:
        """Show *identity* on this board and load it immediately."""
        if self.is_stale:
            return FetchDecision.DISABLED
        current = self._state.identity
        if current is None or current.game_id != identity.game_id:
            self._state.reached_terminal = False
        self._state.identity = identity
        self._phase = SessionPhase.LOADING
        return self._scheduler.fetch(identity, force=True)

    def reload(self) -> FetchDecision:
        """Force a fetch of the current game, bypassing the throttle."""
        if self.is_stale:
            return FetchDecision.DISABLED
        if self._state.identity is None:
            return FetchDecision.INVALID
        self._phase = SessionPhase.LOADING
        return self._scheduler.fetch(self._state.identity, force=True)

    def disable(self) -> None:
        """Retire the board; no fetch or render happens afterwards."""
        if self.is_stale:
            return
        self._phase = SessionPhase.STALE
        self._state.polling_enabled = False
        self._scheduler.shutdown()
        if self._state.identity is not None:
            _LOGGER.info("Board for %s retired", self._state.identity.game_id)

    def select_ply(self, ply: int) -> None:
        """Viewer moved to *ply*; remember it and redraw."""
        if self.is_stale:
            return
        ply = min(max(ply, 0), self._state.max_ply)
        if ply == self._state.selected_ply:
            return
        self._state.selected_ply = ply
        if self._model is not None:
            self._model = replace(self._model, selected_ply=ply)
            self._render(self._model)

    # ── Scheduler callbacks ──────────────────────────────────────────────

    def _on_record_updated(
        self, raw: RawRecord, record: ParsedRecord, identity_changed: bool
    ) -> None:
        if self.is_stale:
            return

        new_max = record.max_ply
        ply = self._choose_ply(new_max, identity_changed)
        self._state.selected_ply = ply
        self._state.max_ply = new_max

        spec = parse_game_id(raw.identity.game_id)
        views = derive_views(record, spec)
        end_lines = tuple(
            line for move in record.moves for line in scan_comments(move.comments).end_lines
        )
        self._model = BoardModel(
            identity=raw.identity,
            time_control=spec,
            moves=views,
            selected_ply=ply,
            max_ply=new_max,
            is_terminal=self._state.reached_terminal,
            remaining_black=last_remaining_text(views, Side.BLACK),
            remaining_white=last_remaining_text(views, Side.WHITE),
            canonical_url=self._config.canonical_url(raw.identity.game_id),
            header=dict(record.header),
            end_lines=end_lines,
            text=raw.text,
        )
        self._phase = SessionPhase.DISPLAYED
        _LOGGER.debug(
            "Rendering %s at ply %d/%d", raw.identity.game_id, ply, new_max
        )
        self._render(self._model)

    def _on_record_unchanged(self) -> None:
        if self._model is not None and self._phase == SessionPhase.LOADING:
            self._phase = SessionPhase.DISPLAYED

    def _choose_ply(self, new_max: int, identity_changed: bool) -> int:
        if self._initial_ply is not None:
            ply = self._initial_ply
            self._initial_ply = None
            return min(max(ply, 0), new_max)
        if identity_changed or self._model is None:
            return new_max
        # A viewer parked on any earlier ply, ply 0 included, keeps it.
        if self._state.is_following_live_edge:
            return new_max
        return min(self._state.selected_ply, new_max)
