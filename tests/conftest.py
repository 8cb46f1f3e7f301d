from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Optional

import pytest


def pytest_configure() -> None:
    """
    Keep a `src/` layout while allowing `pytest` to run without requiring an editable install.
    """

    project_root = Path(__file__).resolve().parents[1]
    src_path = project_root / "src"
    sys.path.insert(0, str(src_path))


class FakeHTTP:
    """Stands in for `ProviderHTTPClient`: records calls, replays canned payloads or raises."""

    def __init__(self, responses: Optional[list[Any]] = None, *, error: Optional[Exception] = None) -> None:
        self.responses = list(responses or [])
        self.error = error
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.closed = False

    def _next(self, url: str, params: Any) -> Any:
        self.calls.append((url, dict(params or {})))
        if self.error is not None:
            raise self.error
        return self.responses.pop(0)

    def get_json(self, url: str, *, params=None, headers=None):  # type: ignore[no-untyped-def]
        return self._next(url, params)

    def get_bytes(self, url: str, *, params=None, headers=None):  # type: ignore[no-untyped-def]
        return self._next(url, params)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_http():
    return FakeHTTP


@pytest.fixture
def config(monkeypatch, tmp_path):
    from gbakaguides.config.loader import load_config

    monkeypatch.setenv("GBAKAGUIDES_ENV", "test")
    monkeypatch.setenv("MAPBOX_TOKEN", "pk.test-token")
    monkeypatch.delenv("GBAKAGUIDES_CONFIG_PATH", raising=False)
    monkeypatch.delenv("GBAKAGUIDES_CORS_ORIGINS", raising=False)
    monkeypatch.delenv("GBAKAGUIDES_PORT", raising=False)
    monkeypatch.delenv("PORT", raising=False)
    return load_config(env_file=None, base_dir=tmp_path)
