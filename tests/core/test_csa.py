"""Tests for CSA record and game log parsing."""

import pytest

from kifuwatch.core.models import MoveTimeEntry
from kifuwatch.core.notation import (
    RecordParseError,
    game_name_from_id,
    move_label,
    parse_csa,
    parse_game_log,
)

SAMPLE_CSA = """V2.2
N+alice
N-bob
$EVENT:wdoor+floodgate-300-10F+alice+bob+20230101120000
$START_TIME:2023/01/01 12:00:00
P1-KY-KE-GI-KI-OU-KI-GI-KE-KY
+
'opening comment
+7776FU
T3
'** 30 -3334FU
-3334FU
T5
'** -12
'nice
+8822UM,T10
-3122GI
T2
%TORYO
T1
'summary:toryo:alice win:bob lose
'$END_TIME:2023/01/01 12:05:00
"""


class TestParseCsa:
    def test_header(self) -> None:
        record = parse_csa(SAMPLE_CSA)
        assert record.header["EVENT"].startswith("wdoor+floodgate")
        assert record.header["START_TIME"] == "2023/01/01 12:00:00"
        assert record.header["先手"] == "alice"
        assert record.header["後手"] == "bob"

    def test_moves_and_initial_comments(self) -> None:
        record = parse_csa(SAMPLE_CSA)
        assert len(record.moves) == 6
        assert record.moves[0].label == ""
        assert record.moves[0].comments == ["opening comment"]
        assert record.moves[1].label == "☗76歩(77)"
        assert record.moves[4].label == "☖22銀(31)"
        assert record.max_ply == 5

    def test_special_move(self) -> None:
        record = parse_csa(SAMPLE_CSA)
        assert record.moves[5].special
        assert record.moves[5].label == "投了"
        assert record.last_is_special

    def test_times_accumulate_per_side(self) -> None:
        record = parse_csa(SAMPLE_CSA)
        assert record.moves[1].time == MoveTimeEntry(3, 3)
        assert record.moves[2].time == MoveTimeEntry(5, 5)
        assert record.moves[3].time == MoveTimeEntry(10, 13)
        assert record.moves[4].time == MoveTimeEntry(2, 7)
        assert record.moves[5].time == MoveTimeEntry(1, 14)

    def test_comments_attach_to_preceding_move(self) -> None:
        record = parse_csa(SAMPLE_CSA)
        assert record.moves[1].comments == ["** 30 -3334FU"]
        assert record.moves[2].comments == ["** -12", "nice"]
        assert record.moves[5].comments[-1] == "$END_TIME:2023/01/01 12:05:00"

    def test_comment_with_comma_is_not_split(self) -> None:
        record = parse_csa("+\n+7776FU\n'a, b\n")
        assert record.moves[1].comments == ["a, b"]

    def test_move_without_time(self) -> None:
        record = parse_csa("+\n+7776FU\n")
        assert record.moves[1].time is None

    def test_empty_text(self) -> None:
        record = parse_csa("")
        assert record.max_ply == 0

    @pytest.mark.parametrize("bad", ["+77FU", "-3334", "Tx", "T-1"])
    def test_malformed_lines(self, bad: str) -> None:
        with pytest.raises(RecordParseError):
            parse_csa(f"+\n+7776FU\n{bad}\n")


class TestMoveLabel:
    def test_drop(self) -> None:
        assert move_label("-0055KA") == "☖55角打"

    def test_unknown_special_passes_through(self) -> None:
        assert move_label("%SOMETHING") == "%SOMETHING"


class TestGameLog:
    def test_extracts_ids_in_order(self) -> None:
        log = (
            "2023-01-01 start wdoor+floodgate-300-10F+alice+bob+20230101120000\n"
            "2023-01-01 start wdoor+floodgate-600-10+carol+dave+20230101123000\n"
            "2023-01-01 end wdoor+floodgate-300-10F+alice+bob+20230101120000\n"
        )
        entries = parse_game_log(log)
        assert [e.game_name for e in entries] == [
            "alice vs bob",
            "carol vs dave",
            "alice vs bob",
        ]

    def test_ignores_partial_ids(self) -> None:
        assert parse_game_log("x+y+20230101120000 and nothing else") == []

    def test_name_fallback(self) -> None:
        assert game_name_from_id("weird") == "weird"
