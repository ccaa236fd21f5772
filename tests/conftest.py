"""Shared fixtures for price oracle tests."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from price_oracle.errors import RequestConstructionError
from price_oracle.feeds.tradeogre import history_path, ticker_path

NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


class FakeTransport:
    """In-memory transport: fills each prepared buffer with a canned body."""

    def __init__(
        self,
        responses: dict[str, bytes] | None = None,
        succeed: bool = True,
        refuse: tuple[str, ...] = (),
    ) -> None:
        self.responses = responses or {}
        self.succeed = succeed
        self.refuse = refuse
        self.prepared: list[tuple[str, int, str]] = []
        self.executions = 0
        self._buffers: list[tuple[str, bytearray]] = []

    def prepare(self, host: str, port: int, path: str) -> bytearray:
        if path in self.refuse:
            raise RequestConstructionError(f"refused {path}")
        self.prepared.append((host, port, path))
        body = bytearray()
        self._buffers.append((path, body))
        return body

    def execute_all(self) -> bool:
        self.executions += 1
        for path, body in self._buffers:
            body[:] = self.responses.get(path, b"")
        self._buffers = []
        return self.succeed


def encode(document: object) -> bytes:
    return json.dumps(document).encode()


@pytest.fixture
def now():
    return lambda: NOW


@pytest.fixture
def make_transport():
    def _make(history: object, ticker: object, **kwargs: object) -> FakeTransport:
        responses = {}
        if history is not None:
            responses[history_path()] = history if isinstance(history, bytes) else encode(history)
        if ticker is not None:
            responses[ticker_path()] = ticker if isinstance(ticker, bytes) else encode(ticker)
        return FakeTransport(responses, **kwargs)

    return _make
