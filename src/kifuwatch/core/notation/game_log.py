"""Extract game identities from server log text."""

from __future__ import annotations

import re

from kifuwatch.core.models import GameIdentity

_LOG_GAME_ID_RE = re.compile(r"(?<![\w.+-])((?:[\w.-]+\+){4}\d{14})(?![\w])")


def game_name_from_id(game_id: str) -> str:
    """``room+tc+alice+bob+20230101120000`` becomes ``alice vs bob``."""
    parts = game_id.split("+")
    if len(parts) != 5:
        return game_id
    return f"{parts[2]} vs {parts[3]}"


def parse_game_log(log: str) -> list[GameIdentity]:
    """Find every game id mentioned in *log*, in order of appearance.

    Duplicates are kept; reconciliation decides which entry survives.
    """
    return [
        GameIdentity(game_id=match.group(1), game_name=game_name_from_id(match.group(1)))
        for match in _LOG_GAME_ID_RE.finditer(log)
    ]
