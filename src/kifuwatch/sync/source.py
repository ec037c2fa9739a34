"""HTTP text sources for records and game lists."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtNetwork import QNetworkAccessManager, QNetworkReply, QNetworkRequest

from kifuwatch.sync.errors import ContentParseFailure, NetworkFailure

_LOGGER = logging.getLogger(__name__)

SuccessCallback = Callable[[str], None]
FailureCallback = Callable[[Exception], None]


class RecordSource(Protocol):
    """Minimal text-fetching interface used by schedulers and board sets.

    Exactly one of the callbacks is invoked per request, possibly before
    :meth:`get` returns.
    """

    def get(
        self,
        url: str,
        on_success: SuccessCallback,
        on_failure: FailureCallback,
    ) -> object: ...


class QtRecordSource(QObject):
    """Fetches text over HTTP with :class:`QNetworkAccessManager`.

    Runs on the Qt event loop; callbacks are delivered from ``finished``.
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        encoding: str = "utf-8",
        timeout_ms: int = 15000,
    ) -> None:
        super().__init__(parent)
        self._manager = QNetworkAccessManager(self)
        self._encoding = encoding
        self._timeout_ms = timeout_ms

    def get(
        self,
        url: str,
        on_success: SuccessCallback,
        on_failure: FailureCallback,
    ) -> QNetworkReply:
        request = QNetworkRequest(QUrl(url))
        request.setTransferTimeout(self._timeout_ms)
        request.setAttribute(
            QNetworkRequest.Attribute.CacheLoadControlAttribute,
            QNetworkRequest.CacheLoadControl.AlwaysNetwork,
        )
        reply = self._manager.get(request)
        reply.finished.connect(
            lambda: self._on_finished(reply, url, on_success, on_failure)
        )
        return reply

    def _on_finished(
        self,
        reply: QNetworkReply,
        url: str,
        on_success: SuccessCallback,
        on_failure: FailureCallback,
    ) -> None:
        reply.deleteLater()
        if reply.error() != QNetworkReply.NetworkError.NoError:
            _LOGGER.debug("GET %s failed: %s", url, reply.errorString())
            on_failure(NetworkFailure(f"{url}: {reply.errorString()}"))
            return
        try:
            text = bytes(reply.readAll().data()).decode(self._encoding)
        except UnicodeDecodeError as exc:
            on_failure(ContentParseFailure(f"{url}: {exc}"))
            return
        on_success(text)
