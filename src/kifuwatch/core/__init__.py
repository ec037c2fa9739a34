"""Core layer: pure record, time-control and game-list logic, no Qt.

Quick start::

    from kifuwatch.core import parse_csa, parse_game_id, derive_views

    record = parse_csa(text)
    spec = parse_game_id(game_id)
    views = derive_views(record, spec)
"""

from kifuwatch.core.annotations import (
    END_MARKER_PREFIX,
    Annotation,
    EndMarker,
    MoveAnnotations,
    Other,
    Score,
    classify_comment,
    record_is_terminal,
    scan_comments,
)
from kifuwatch.core.derive import derive_views, last_remaining_text
from kifuwatch.core.game_list import (
    DEFAULT_WINDOW_SPAN_MS,
    ListOrder,
    dedupe_last,
    find_identity,
    game_id_timestamp,
    merge_history,
    reconcile,
)
from kifuwatch.core.models import (
    DerivedMoveView,
    GameIdentity,
    MoveTimeEntry,
    ParsedRecord,
    RawRecord,
    RecordMove,
    Side,
    TimeControlSpec,
)
from kifuwatch.core.notation import RecordParseError, parse_csa, parse_game_log
from kifuwatch.core.timecontrol import (
    extract_game_id,
    format_clock,
    format_remaining,
    is_valid_game_id,
    parse_game_id,
    remaining_seconds,
    time_fraction,
)

__all__ = [
    # Models
    "DerivedMoveView",
    "GameIdentity",
    "MoveTimeEntry",
    "ParsedRecord",
    "RawRecord",
    "RecordMove",
    "Side",
    "TimeControlSpec",
    # Annotations
    "Annotation",
    "END_MARKER_PREFIX",
    "EndMarker",
    "MoveAnnotations",
    "Other",
    "Score",
    "classify_comment",
    "record_is_terminal",
    "scan_comments",
    # Time control
    "extract_game_id",
    "format_clock",
    "format_remaining",
    "is_valid_game_id",
    "parse_game_id",
    "remaining_seconds",
    "time_fraction",
    # Game list
    "DEFAULT_WINDOW_SPAN_MS",
    "ListOrder",
    "dedupe_last",
    "find_identity",
    "game_id_timestamp",
    "merge_history",
    "reconcile",
    # Derivation / notation
    "RecordParseError",
    "derive_views",
    "last_remaining_text",
    "parse_csa",
    "parse_game_log",
]
