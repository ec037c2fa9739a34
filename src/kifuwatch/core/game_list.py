"""Game list reconciliation: dedup, timestamp ordering and time windows."""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import datetime
from enum import Enum

from kifuwatch.core.models import GameIdentity

DEFAULT_WINDOW_SPAN_MS = 2_400_000

_TIMESTAMP_RE = re.compile(r"(\d{14})$")


class ListOrder(Enum):
    """Sort policy: chronological history or most-recent-first views."""

    ASCENDING = "ascending"
    DESCENDING = "descending"


def game_id_timestamp(game_id: str) -> datetime | None:
    """Start time encoded in the trailing ``YYYYMMDDHHMMSS`` of *game_id*."""
    match = _TIMESTAMP_RE.search(game_id)
    if match is None:
        return None
    try:
        return datetime.strptime(match.group(1), "%Y%m%d%H%M%S")
    except ValueError:
        return None


def dedupe_last(entries: Iterable[GameIdentity]) -> list[GameIdentity]:
    """Keep one entry per id, taking the last occurrence.

    Later log lines may carry a corrected display name, so the last entry
    replaces earlier ones. Position follows the first appearance of the id.
    """
    latest: dict[str, GameIdentity] = {}
    for entry in entries:
        latest[entry.game_id] = entry
    return list(latest.values())


def _sort_key(entry: GameIdentity) -> tuple[datetime, str]:
    return (game_id_timestamp(entry.game_id) or datetime.min, entry.game_id)


def reconcile(
    entries: Iterable[GameIdentity],
    *,
    order: ListOrder = ListOrder.ASCENDING,
    span_ms: int | None = None,
) -> tuple[GameIdentity, ...]:
    """Dedupe, sort and optionally window a raw game list.

    With *span_ms* set, only games that started within *span_ms* of the most
    recent game are kept; ids without a readable timestamp are dropped from
    windowed output. The result is idempotent under repeated application.
    """
    unique = sorted(
        dedupe_last(entries),
        key=_sort_key,
        reverse=order is ListOrder.DESCENDING,
    )
    if span_ms is None:
        return tuple(unique)

    stamped = [
        (entry, ts)
        for entry in unique
        if (ts := game_id_timestamp(entry.game_id)) is not None
    ]
    if not stamped:
        return ()
    reference = max(ts for _, ts in stamped)
    return tuple(
        entry
        for entry, ts in stamped
        if (reference - ts).total_seconds() * 1000 <= span_ms
    )


def merge_history(
    previous: Iterable[GameIdentity], fresh: Iterable[GameIdentity]
) -> tuple[GameIdentity, ...]:
    """Fold a freshly parsed list into the accumulated chronological history."""
    return reconcile([*previous, *fresh], order=ListOrder.ASCENDING)


def find_identity(
    entries: Iterable[GameIdentity], game_id: str
) -> GameIdentity | None:
    for entry in entries:
        if entry.game_id == game_id:
            return entry
    return None
