"""Notation package: CSA record and server log parsing."""

from kifuwatch.core.notation.csa import RecordParseError, move_label, parse_csa
from kifuwatch.core.notation.game_log import game_name_from_id, parse_game_log

__all__ = [
    "RecordParseError",
    "game_name_from_id",
    "move_label",
    "parse_csa",
    "parse_game_log",
]
