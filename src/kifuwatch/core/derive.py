"""Per-move view derivation from a parsed record."""

from __future__ import annotations

from kifuwatch.core.annotations import scan_comments
from kifuwatch.core.models import DerivedMoveView, ParsedRecord, Side, TimeControlSpec
from kifuwatch.core.timecontrol import (
    format_clock,
    format_remaining,
    remaining_seconds,
    time_fraction,
)


def _time_summary(ply: int, record: ParsedRecord, spec: TimeControlSpec) -> str:
    entry = record.moves[ply].time
    if entry is None:
        return ""
    return (
        f"{format_clock(entry.elapsed_this_move)} / "
        f"total {format_clock(entry.elapsed_total)} / "
        f"left {format_remaining(ply, entry, spec)}"
    )


def derive_views(
    record: ParsedRecord, spec: TimeControlSpec
) -> tuple[DerivedMoveView, ...]:
    """Compute score, remaining time and comment text for every move."""
    views: list[DerivedMoveView] = []
    for ply, move in enumerate(record.moves):
        annotations = scan_comments(move.comments)
        heading = " ".join(
            part
            for part in (
                f"{ply}{move.label}" if ply else "",
                _time_summary(ply, record, spec),
            )
            if part
        )
        lines = [heading] if heading else []
        lines.extend(annotations.texts)

        if move.time is not None:
            remaining: int | None = remaining_seconds(ply, move.time, spec)
            remaining_text = format_remaining(ply, move.time, spec)
            fraction = time_fraction(ply, move.time, spec)
        else:
            remaining, remaining_text, fraction = None, "", None

        views.append(
            DerivedMoveView(
                ply=ply,
                label=move.label,
                score=annotations.score,
                remaining_seconds=remaining,
                remaining_text=remaining_text,
                time_fraction=fraction,
                comment_text="\n".join(lines),
            )
        )
    return tuple(views)


def last_remaining_text(views: tuple[DerivedMoveView, ...], side: Side) -> str:
    """Most recent remaining-time label for *side*, or ``""``."""
    for view in reversed(views):
        if view.ply > 0 and Side.of_ply(view.ply) == side and view.remaining_text:
            return view.remaining_text
    return ""
