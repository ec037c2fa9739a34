"""Classification of move comment lines.

Engine evaluations arrive as ``** <score> ...`` comments and the end of a
game as a ``$END_TIME:`` comment; every other line is free text.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TypeAlias

from kifuwatch.core.models import RecordMove

END_MARKER_PREFIX = "$END_TIME:"
_SCORE_RE = re.compile(r"^\*\* (-?\d+)")


@dataclass(frozen=True, slots=True)
class Score:
    value: int


@dataclass(frozen=True, slots=True)
class EndMarker:
    text: str


@dataclass(frozen=True, slots=True)
class Other:
    text: str


Annotation: TypeAlias = Score | EndMarker | Other


@dataclass(frozen=True, slots=True)
class MoveAnnotations:
    """Result of scanning all comments of one move."""

    score: int | None = None
    is_terminal: bool = False
    texts: tuple[str, ...] = ()
    end_lines: tuple[str, ...] = ()


def classify_comment(line: str) -> Annotation:
    match = _SCORE_RE.match(line)
    if match is not None:
        return Score(int(match.group(1)))
    if line.startswith(END_MARKER_PREFIX):
        return EndMarker(line)
    return Other(line)


def scan_comments(lines: Iterable[str]) -> MoveAnnotations:
    """Fold a move's comment lines into score, terminal flag and free text.

    The last score line wins; without any score line the score is ``None``.
    """
    score: int | None = None
    is_terminal = False
    texts: list[str] = []
    end_lines: list[str] = []
    for line in lines:
        annotation = classify_comment(line)
        if isinstance(annotation, Score):
            score = annotation.value
        elif isinstance(annotation, EndMarker):
            is_terminal = True
            end_lines.append(annotation.text)
        else:
            texts.append(annotation.text)
    return MoveAnnotations(
        score=score,
        is_terminal=is_terminal,
        texts=tuple(texts),
        end_lines=tuple(end_lines),
    )


def record_is_terminal(moves: Iterable[RecordMove]) -> bool:
    """True once any move carries an end marker."""
    return any(
        line.startswith(END_MARKER_PREFIX) for move in moves for line in move.comments
    )
