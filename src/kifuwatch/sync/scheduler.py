"""Per-board fetch scheduling: throttling, no-op detection and retries."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from enum import Enum

from PyQt6.QtCore import QObject, QTimer

from kifuwatch.core.annotations import record_is_terminal
from kifuwatch.core.models import GameIdentity, ParsedRecord, RawRecord
from kifuwatch.core.notation import parse_csa
from kifuwatch.core.timecontrol import is_valid_game_id
from kifuwatch.sync.errors import ContentParseFailure, FetchError, NetworkFailure
from kifuwatch.sync.source import RecordSource
from kifuwatch.sync.state import SessionState

_LOGGER = logging.getLogger(__name__)

UpdateCallback = Callable[[RawRecord, ParsedRecord, bool], None]  # raw, record, identity changed
RecordParser = Callable[[str], ParsedRecord]
Clock = Callable[[], float]


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class FetchDecision(Enum):
    """Immediate answer to :meth:`FetchScheduler.fetch`."""

    REQUESTED = "requested"
    DISABLED = "disabled"
    INVALID = "invalid"
    THROTTLED = "throttled"
    IN_FLIGHT = "in_flight"


class FetchOutcome(Enum):
    """How a completed request was handled."""

    UPDATED = "updated"
    UNCHANGED = "unchanged"
    RETRY_SCHEDULED = "retry_scheduled"
    STALE = "stale"


class FetchScheduler:
    """Owns the poll timer and request bookkeeping of one board.

    Requests are numbered; only the most recent one may touch the session
    state, so a forced reload always wins over a background poll that was
    already in flight. Failures never reach the caller: they are logged and
    retried after ``retry_delay_ms``. Polling stops for good once the record
    carries an end marker or :meth:`shutdown` is called.
    """

    __slots__ = (
        "__weakref__",
        "_state",
        "_source",
        "_record_url",
        "_on_update",
        "_on_unchanged",
        "_parse_record",
        "_throttle_ms",
        "_retry_delay_ms",
        "_clock",
        "_retry_timer",
        "_request_id",
        "_pending_request",
        "_pending_game_id",
        "_last_outcome",
        "_is_shut_down",
    )

    def __init__(
        self,
        *,
        state: SessionState,
        source: RecordSource,
        record_url: Callable[[str], str],
        on_update: UpdateCallback,
        on_unchanged: Callable[[], None] | None = None,
        parse_record: RecordParser = parse_csa,
        throttle_ms: int = 8500,
        retry_delay_ms: int = 10000,
        clock: Clock | None = None,
        parent: QObject | None = None,
    ) -> None:
        self._state = state
        self._source = source
        self._record_url = record_url
        self._on_update = on_update
        self._on_unchanged = on_unchanged
        self._parse_record = parse_record
        self._throttle_ms = throttle_ms
        self._retry_delay_ms = retry_delay_ms
        self._clock = clock or monotonic_ms

        self._retry_timer = QTimer(parent)
        self._retry_timer.setSingleShot(True)
        self._retry_timer.timeout.connect(self._on_retry_timeout)

        self._request_id = 0
        self._pending_request: int | None = None
        self._pending_game_id = ""
        self._last_outcome: FetchOutcome | None = None
        self._is_shut_down = False

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def is_enabled(self) -> bool:
        return not self._is_shut_down and self._state.polling_enabled

    @property
    def is_retry_pending(self) -> bool:
        return self._retry_timer.isActive()

    @property
    def is_request_pending(self) -> bool:
        return self._pending_request is not None

    @property
    def last_outcome(self) -> FetchOutcome | None:
        return self._last_outcome

    @property
    def retry_delay_ms(self) -> int:
        return self._retry_delay_ms

    # ── Public API ───────────────────────────────────────────────────────

    def fetch(
        self, identity: GameIdentity | None = None, *, force: bool = False
    ) -> FetchDecision:
        """Start a fetch cycle for *identity* (defaults to the session's)."""
        if not self.is_enabled:
            return FetchDecision.DISABLED

        identity = identity or self._state.identity
        if identity is None or not is_valid_game_id(identity.game_id):
            return FetchDecision.INVALID

        if not force:
            last = self._state.last_record
            last_fetch = self._state.last_fetch_ms
            if (
                last is not None
                and last_fetch is not None
                and last.identity.game_id == identity.game_id
                and self._clock() - last_fetch < self._throttle_ms
            ):
                _LOGGER.debug("Fetch of %s throttled", identity.game_id)
                return FetchDecision.THROTTLED
            if (
                self._pending_request is not None
                and self._pending_game_id == identity.game_id
            ):
                return FetchDecision.IN_FLIGHT

        # A new request makes any scheduled wake-up and older request moot.
        self._retry_timer.stop()
        self._request_id += 1
        request_id = self._request_id
        self._pending_request = request_id
        self._pending_game_id = identity.game_id

        url = self._record_url(identity.game_id)
        _LOGGER.debug("Fetching %s (request %d, force=%s)", url, request_id, force)
        self._source.get(
            url,
            lambda text: self._on_fetched(request_id, identity, force, text),
            lambda exc: self._on_failed(request_id, identity, exc),
        )
        return FetchDecision.REQUESTED

    def shutdown(self) -> None:
        """Stop polling; late responses and timer wake-ups become no-ops."""
        self._is_shut_down = True
        self._retry_timer.stop()
        self._pending_request = None

    # ── Completion handlers ──────────────────────────────────────────────

    def _on_fetched(
        self, request_id: int, identity: GameIdentity, forced: bool, text: str
    ) -> FetchOutcome | None:
        if self._is_shut_down:
            return None
        if request_id != self._pending_request:
            _LOGGER.debug("Discarding superseded response %d", request_id)
            self._last_outcome = FetchOutcome.STALE
            return self._last_outcome
        self._pending_request = None

        now = self._clock()
        last = self._state.last_record
        same_identity = last is not None and last.identity.game_id == identity.game_id

        if not forced and same_identity and last is not None and last.text == text:
            self._state.last_fetch_ms = now
            if not self._state.reached_terminal:
                self._schedule_retry()
            self._last_outcome = FetchOutcome.UNCHANGED
            if self._on_unchanged is not None:
                self._on_unchanged()
            return self._last_outcome

        try:
            record = self._parse_record(text)
        except ContentParseFailure as exc:
            return self._handle_failure(identity, exc)
        except ValueError as exc:
            return self._handle_failure(identity, ContentParseFailure(str(exc)))

        raw = RawRecord(identity=identity, text=text)
        terminal = record_is_terminal(record.moves)
        self._state.last_record = raw
        self._state.last_fetch_ms = now
        self._state.reached_terminal = terminal

        if terminal:
            _LOGGER.info("Game %s finished; polling stopped", identity.game_id)
        else:
            self._schedule_retry()

        self._last_outcome = FetchOutcome.UPDATED
        self._on_update(raw, record, not same_identity)
        return self._last_outcome

    def _on_failed(
        self, request_id: int, identity: GameIdentity, exc: Exception
    ) -> FetchOutcome | None:
        if self._is_shut_down:
            return None
        if request_id != self._pending_request:
            self._last_outcome = FetchOutcome.STALE
            return self._last_outcome
        self._pending_request = None
        if not isinstance(exc, FetchError):
            exc = NetworkFailure(str(exc))
        return self._handle_failure(identity, exc)

    def _handle_failure(self, identity: GameIdentity, exc: FetchError) -> FetchOutcome:
        _LOGGER.warning(
            "Fetch of %s failed (%s: %s); retrying in %d ms",
            identity.game_id,
            type(exc).__name__,
            exc,
            self._retry_delay_ms,
        )
        self._schedule_retry()
        self._last_outcome = FetchOutcome.RETRY_SCHEDULED
        return self._last_outcome

    # ── Timer ────────────────────────────────────────────────────────────

    def _schedule_retry(self) -> None:
        self._retry_timer.start(self._retry_delay_ms)

    def _on_retry_timeout(self) -> None:
        if not self.is_enabled:
            return
        if self.fetch(force=False) == FetchDecision.THROTTLED:
            # Wake again once the throttle window has passed.
            last_fetch = self._state.last_fetch_ms or 0.0
            wait = self._throttle_ms - (self._clock() - last_fetch)
            self._retry_timer.start(max(int(wait), 1))
