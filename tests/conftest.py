"""Shared pytest fixtures used across the test suite."""

from __future__ import annotations

import os
import sys
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

# Linux CI runners are often headless. Force an offscreen backend only there.
if (
    sys.platform.startswith("linux")
    and "QT_QPA_PLATFORM" not in os.environ
    and "DISPLAY" not in os.environ
    and "WAYLAND_DISPLAY" not in os.environ
):
    os.environ["QT_QPA_PLATFORM"] = "offscreen"


def _is_sync_test(request: pytest.FixtureRequest) -> bool:
    return "sync" in Path(str(request.node.fspath)).parts


@pytest.fixture(scope="session")
def qapp() -> Iterator[object]:
    """Provide a singleton QCoreApplication so QTimer has an event dispatcher."""
    from PyQt6.QtCore import QCoreApplication

    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    yield app


@pytest.fixture(autouse=True)
def _sync_tests_use_qapp(request: pytest.FixtureRequest) -> Iterator[None]:
    """Timers in the sync layer need a Qt application; core tests do not."""
    if _is_sync_test(request):
        request.getfixturevalue("qapp")
    yield


class StubSource:
    """Record source answering from a canned mapping of URL to text.

    Responses are delivered synchronously unless ``deferred`` is set, in
    which case they queue up in ``pending`` until ``deliver`` is called.
    """

    def __init__(self, responses: dict[str, str] | None = None) -> None:
        self.responses: dict[str, str | Exception] = dict(responses or {})
        self.requests: list[str] = []
        self.deferred = False
        self.pending: list[tuple[str, Callable[[str], None], Callable[[Exception], None]]] = []

    def get(
        self,
        url: str,
        on_success: Callable[[str], None],
        on_failure: Callable[[Exception], None],
    ) -> object:
        self.requests.append(url)
        if self.deferred:
            self.pending.append((url, on_success, on_failure))
            return object()
        self._answer(url, on_success, on_failure)
        return object()

    def deliver(self, index: int = 0) -> None:
        url, on_success, on_failure = self.pending.pop(index)
        self._answer(url, on_success, on_failure)

    def _answer(
        self,
        url: str,
        on_success: Callable[[str], None],
        on_failure: Callable[[Exception], None],
    ) -> None:
        response = self.responses.get(url)
        if response is None:
            on_failure(ConnectionError(f"no response for {url}"))
        elif isinstance(response, Exception):
            on_failure(response)
        else:
            on_success(response)


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture
def stub_source() -> StubSource:
    return StubSource()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()
