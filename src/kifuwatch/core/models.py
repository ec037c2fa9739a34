"""Value types shared by the record, time-control and list layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum


class Side(IntEnum):
    """Player to move. Black (sente) moves on odd plies."""

    BLACK = 0
    WHITE = 1

    @classmethod
    def of_ply(cls, ply: int) -> Side:
        """Side that made the move at *ply* (ply 0 is the initial position)."""
        return cls.BLACK if ply % 2 == 1 else cls.WHITE

    @property
    def mark(self) -> str:
        return "☗" if self == Side.BLACK else "☖"


@dataclass(frozen=True, slots=True)
class GameIdentity:
    """Identity of one watched game.

    Replaced wholesale on reassignment; the name may be corrected by later
    log entries while the id stays the same.
    """

    game_id: str
    game_name: str = ""

    @classmethod
    def from_id(cls, game_id: str) -> GameIdentity:
        return cls(game_id=game_id, game_name=game_id)

    @property
    def display_name(self) -> str:
        return self.game_name or self.game_id


@dataclass(frozen=True, slots=True)
class TimeControlSpec:
    """Time control read from a game id.

    Ids carry either an ``increment`` (Fischer) or ``byoyomi``, never both;
    both zero means the time control is unknown.
    """

    base: int = 0
    increment: int = 0
    byoyomi: int = 0

    def __post_init__(self) -> None:
        if self.base < 0 or self.increment < 0 or self.byoyomi < 0:
            raise ValueError("Time control values must be non-negative")

    @classmethod
    def none(cls) -> TimeControlSpec:
        return cls(0, 0, 0)

    @property
    def is_unknown(self) -> bool:
        return self.increment == 0 and self.byoyomi == 0

    @property
    def is_fischer(self) -> bool:
        return self.increment > 0

    def __str__(self) -> str:
        if self.increment:
            return f"{self.base}s+{self.increment}s/move"
        if self.byoyomi:
            return f"{self.base}s+{self.byoyomi}s byoyomi"
        return f"{self.base}s"


@dataclass(frozen=True, slots=True)
class MoveTimeEntry:
    """Seconds spent on one move and the mover's running total."""

    elapsed_this_move: int
    elapsed_total: int


@dataclass(slots=True)
class RecordMove:
    """A single entry of a parsed game record.

    Index 0 of :attr:`ParsedRecord.moves` is the initial position; it has no
    label but may carry comments.
    """

    label: str = ""
    time: MoveTimeEntry | None = None
    comments: list[str] = field(default_factory=list)
    special: bool = False


@dataclass(slots=True)
class ParsedRecord:
    """Structured record produced by a record parser."""

    header: dict[str, str] = field(default_factory=dict)
    moves: list[RecordMove] = field(default_factory=lambda: [RecordMove()])

    @property
    def max_ply(self) -> int:
        return max(len(self.moves) - 1, 0)

    @property
    def last_is_special(self) -> bool:
        return len(self.moves) > 1 and self.moves[-1].special


@dataclass(frozen=True, slots=True)
class RawRecord:
    """Fetched record text together with the game it belongs to.

    Two fetches produce equal ``RawRecord`` values exactly when nothing
    changed, which is how no-op polls are detected.
    """

    identity: GameIdentity
    text: str


@dataclass(frozen=True, slots=True)
class DerivedMoveView:
    """Per-move values derived from the current record content."""

    ply: int
    label: str
    score: int | None
    remaining_seconds: int | None
    remaining_text: str
    time_fraction: float | None
    comment_text: str
