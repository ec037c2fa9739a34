"""Time control parsing from game ids and remaining-time arithmetic."""

from __future__ import annotations

import re

from kifuwatch.core.models import MoveTimeEntry, TimeControlSpec

_TIME_CONTROL_RE = re.compile(r"^(?:[\w.-]+\+)+?[\w.-]+-(\d+)-(\d+)(F)?\+")
_GAME_ID_RE = re.compile(r"^(?:[\w.-]+\+){4}\d+$")
_FRAGMENT_RE = re.compile(r"^#?(?:.*/)?((?:[\w.-]+\+){4}\d+)")


def parse_game_id(game_id: str) -> TimeControlSpec:
    """Read the time control embedded in *game_id*.

    ``room+name-600-10F+...`` is 600 seconds with a 10 second Fischer
    increment, ``room+name-600-10+...`` is 600 seconds with 10 seconds of
    byoyomi. Ids that do not match degrade to :meth:`TimeControlSpec.none`.
    """
    match = _TIME_CONTROL_RE.match(game_id)
    if match is None:
        return TimeControlSpec.none()
    base = int(match.group(1))
    extra = int(match.group(2))
    if match.group(3) == "F":
        return TimeControlSpec(base=base, increment=extra, byoyomi=0)
    return TimeControlSpec(base=base, increment=0, byoyomi=extra)


def is_valid_game_id(game_id: str) -> bool:
    """Return True for ids of the form ``a+b+c+d+<digits>``."""
    return _GAME_ID_RE.match(game_id) is not None


def extract_game_id(fragment: str) -> str:
    """Pull a game id out of a URL fragment such as ``#view/<id>``."""
    match = _FRAGMENT_RE.match(fragment)
    return match.group(1) if match else ""


def remaining_seconds(
    move_index: int, elapsed: MoveTimeEntry, spec: TimeControlSpec
) -> int:
    """Remaining clock time of the mover after *move_index*.

    The result can be negative; callers clamp when formatting.
    """
    limit = spec.base + spec.increment * (max(move_index - 1, 0) // 2)
    remaining = max(limit - elapsed.elapsed_total, -elapsed.elapsed_this_move)
    return remaining + spec.byoyomi


def format_clock(seconds: int) -> str:
    """Format seconds as ``h:mm:ss``, or ``m:ss`` under one hour."""
    seconds = max(int(seconds), 0)
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_remaining(
    move_index: int, elapsed: MoveTimeEntry, spec: TimeControlSpec
) -> str:
    return format_clock(max(remaining_seconds(move_index, elapsed, spec), 0))


def time_fraction(
    move_index: int, elapsed: MoveTimeEntry, spec: TimeControlSpec
) -> float | None:
    """Remaining time relative to the base allowance, for time-bar overlays."""
    if spec.base <= 0:
        return None
    return remaining_seconds(move_index, elapsed, spec) / spec.base
