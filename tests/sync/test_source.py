"""Tests for reply handling in QtRecordSource."""

from __future__ import annotations

from PyQt6.QtCore import QByteArray
from PyQt6.QtNetwork import QNetworkReply

from kifuwatch.sync.errors import ContentParseFailure, NetworkFailure
from kifuwatch.sync.source import QtRecordSource

URL = "http://host/game.csa"


class _Reply:
    def __init__(
        self,
        payload: bytes = b"",
        error: QNetworkReply.NetworkError = QNetworkReply.NetworkError.NoError,
    ) -> None:
        self._payload = payload
        self._error = error
        self.deleted = False

    def error(self) -> QNetworkReply.NetworkError:
        return self._error

    def errorString(self) -> str:
        return "connection refused"

    def readAll(self) -> QByteArray:
        return QByteArray(self._payload)

    def deleteLater(self) -> None:
        self.deleted = True


def _finish(source: QtRecordSource, reply: _Reply):
    texts: list[str] = []
    failures: list[Exception] = []
    source._on_finished(reply, URL, texts.append, failures.append)
    return texts, failures


class TestOnFinished:
    def test_decodes_with_configured_encoding(self) -> None:
        source = QtRecordSource(encoding="shift_jis")
        reply = _Reply("N+先手\n".encode("shift_jis"))

        texts, failures = _finish(source, reply)

        assert texts == ["N+先手\n"]
        assert failures == []
        assert reply.deleted

    def test_undecodable_body_is_a_content_failure(self) -> None:
        source = QtRecordSource()

        texts, failures = _finish(source, _Reply(b"\xff\xfe\x80"))

        assert texts == []
        assert len(failures) == 1
        assert isinstance(failures[0], ContentParseFailure)

    def test_network_error(self) -> None:
        source = QtRecordSource()
        reply = _Reply(error=QNetworkReply.NetworkError.ConnectionRefusedError)

        texts, failures = _finish(source, reply)

        assert texts == []
        assert isinstance(failures[0], NetworkFailure)
        assert "connection refused" in str(failures[0])
