"""CSA record parsing.

Only what the synchronizer consumes is extracted: header values, the move
list, per-move times and comment lines.
"""

from __future__ import annotations

import re

from kifuwatch.core.models import MoveTimeEntry, ParsedRecord, RecordMove, Side

_MOVE_RE = re.compile(r"^([+-])(\d{2})(\d{2})([A-Z]{2})$")
_TIME_RE = re.compile(r"^T(\d+)(?:\.\d+)?$")
_PLAYER_RE = re.compile(r"^N([+-])(.*)$")

_PIECE_NAMES = {
    "FU": "歩",
    "KY": "香",
    "KE": "桂",
    "GI": "銀",
    "KI": "金",
    "KA": "角",
    "HI": "飛",
    "OU": "玉",
    "TO": "と",
    "NY": "成香",
    "NK": "成桂",
    "NG": "成銀",
    "UM": "馬",
    "RY": "龍",
}
_SPECIAL_NAMES = {
    "%TORYO": "投了",
    "%CHUDAN": "中断",
    "%SENNICHITE": "千日手",
    "%TIME_UP": "切れ負け",
    "%ILLEGAL_MOVE": "反則負け",
    "%+ILLEGAL_ACTION": "先手反則",
    "%-ILLEGAL_ACTION": "後手反則",
    "%JISHOGI": "持将棋",
    "%KACHI": "入玉宣言",
    "%HIKIWAKE": "引き分け",
    "%MATTA": "待った",
    "%TSUMI": "詰み",
    "%FUZUMI": "不詰",
    "%ERROR": "エラー",
}


class RecordParseError(ValueError):
    """Raised for move or time lines that are not valid CSA."""


def _statements(text: str) -> list[str]:
    statements: list[str] = []
    for raw_line in text.splitlines():
        line = raw_line.rstrip("\r")
        if line.startswith("'"):
            # Comments may contain commas; never split them.
            statements.append(line)
            continue
        statements.extend(part.strip() for part in line.split(","))
    return statements


def move_label(token: str) -> str:
    """Readable label for a CSA move such as ``+7776FU`` (``☗76歩(77)``)."""
    match = _MOVE_RE.match(token)
    if match is None:
        return _SPECIAL_NAMES.get(token, token)
    sign, origin, dest, piece = match.groups()
    mark = Side.BLACK.mark if sign == "+" else Side.WHITE.mark
    name = _PIECE_NAMES.get(piece, piece)
    if origin == "00":
        return f"{mark}{dest}{name}打"
    return f"{mark}{dest}{name}({origin})"


def parse_csa(text: str) -> ParsedRecord:
    """Parse a CSA V2 record into a :class:`ParsedRecord`.

    Raises:
        RecordParseError: On a malformed move or time statement.
    """
    record = ParsedRecord()
    totals = {Side.BLACK: 0, Side.WHITE: 0}

    for line in _statements(text):
        if not line:
            continue

        if line.startswith("'"):
            record.moves[-1].comments.append(line[1:])
            continue

        if line.startswith("$"):
            key, _, value = line[1:].partition(":")
            record.header[key] = value
            continue

        player = _PLAYER_RE.match(line)
        if player is not None:
            key = "先手" if player.group(1) == "+" else "後手"
            record.header[key] = player.group(2)
            continue

        if line.startswith("%"):
            record.moves.append(
                RecordMove(label=move_label(line), special=True)
            )
            continue

        if line[0] in "+-" and len(line) > 1:
            if _MOVE_RE.match(line) is None:
                raise RecordParseError(f"Invalid CSA move: {line}")
            record.moves.append(RecordMove(label=move_label(line)))
            continue

        if line.startswith("T"):
            match = _TIME_RE.match(line)
            if match is None:
                raise RecordParseError(f"Invalid CSA time: {line}")
            ply = len(record.moves) - 1
            if ply == 0:
                continue
            side = Side.of_ply(ply)
            spent = int(match.group(1))
            totals[side] += spent
            record.moves[-1].time = MoveTimeEntry(
                elapsed_this_move=spent, elapsed_total=totals[side]
            )
            continue

        # Version, initial position and side-to-move lines carry nothing
        # the synchronizer uses.

    return record
