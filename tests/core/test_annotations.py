"""Tests for move comment classification."""

from kifuwatch.core.annotations import (
    EndMarker,
    Other,
    Score,
    classify_comment,
    record_is_terminal,
    scan_comments,
)
from kifuwatch.core.models import RecordMove


class TestClassifyComment:
    def test_score(self) -> None:
        assert classify_comment("** 120 +2726FU -8485FU") == Score(120)

    def test_negative_score(self) -> None:
        assert classify_comment("** -35") == Score(-35)

    def test_end_marker(self) -> None:
        line = "$END_TIME:2023/01/01 12:34:56"
        assert classify_comment(line) == EndMarker(line)

    def test_other(self) -> None:
        assert classify_comment("nice move") == Other("nice move")

    def test_score_needs_exact_prefix(self) -> None:
        assert classify_comment("**120") == Other("**120")
        assert classify_comment(" ** 120") == Other(" ** 120")

    def test_end_marker_needs_exact_prefix(self) -> None:
        assert isinstance(classify_comment(" $END_TIME:x"), Other)
        assert isinstance(classify_comment("$END_TIME x"), Other)


class TestScanComments:
    def test_no_lines(self) -> None:
        result = scan_comments([])
        assert result.score is None
        assert not result.is_terminal
        assert result.texts == ()

    def test_last_score_wins(self) -> None:
        result = scan_comments(["** 10", "between", "** -40 pv"])
        assert result.score == -40
        assert result.texts == ("between",)

    def test_non_matching_lines_keep_score(self) -> None:
        result = scan_comments(["** 7", "text after"])
        assert result.score == 7

    def test_terminal(self) -> None:
        result = scan_comments(["summary:toryo", "$END_TIME:2023/01/01 12:00:00"])
        assert result.is_terminal
        assert result.end_lines == ("$END_TIME:2023/01/01 12:00:00",)
        assert result.texts == ("summary:toryo",)

    def test_other_lines_verbatim(self) -> None:
        result = scan_comments(["  spaced  ", ""])
        assert result.texts == ("  spaced  ", "")


class TestRecordIsTerminal:
    def test_open_record(self) -> None:
        moves = [RecordMove(), RecordMove(label="x", comments=["** 5"])]
        assert not record_is_terminal(moves)

    def test_marker_on_any_move(self) -> None:
        moves = [
            RecordMove(),
            RecordMove(label="x", comments=["$END_TIME:2023/01/01"]),
            RecordMove(label="y"),
        ]
        assert record_is_terminal(moves)
