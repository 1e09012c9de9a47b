"""Shared fixtures for qbo tests."""

import json

import pytest


class FakeTransport:
    """Stands in for QBOClient.get: records calls and replays canned payloads."""

    def __init__(self, handler):
        self._handler = handler
        self.calls: list[tuple[str, dict | None]] = []

    def get(self, path, params=None):
        self.calls.append((path, params))
        return self._handler(path, params)


@pytest.fixture
def fake_transport():
    """Factory fixture: `fake_transport(handler)` -> FakeTransport."""

    return FakeTransport


@pytest.fixture
def tokens_path(tmp_path):
    path = tmp_path / "tokens.json"
    path.write_text(
        json.dumps(
            {
                "environment": "sandbox",
                "realm_id": "123",
                "access_token": "ok",
                "refresh_token": "refresh",
                "id_token": None,
            }
        )
    )
    return path
