from __future__ import annotations

from typing import Any

import pytest
import requests

from gbakaguides.providers.base import ProviderError, ProviderHTTPClient, redact


class _Response:
    def __init__(self, status_code: int, *, json_data: Any = None, content: bytes = b"", text: str = "") -> None:
        self.status_code = status_code
        self._json = json_data
        self.content = content
        self.text = text

    def json(self) -> Any:
        if self._json is None:
            raise ValueError("not json")
        return self._json


class _Session:
    def __init__(self, response: Any = None, error: Exception | None = None) -> None:
        self.headers: dict[str, str] = {}
        self.response = response
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def get(self, url, *, params=None, headers=None, timeout=None):  # type: ignore[no-untyped-def]
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response

    def close(self) -> None:
        pass


def _client(session: _Session) -> ProviderHTTPClient:
    return ProviderHTTPClient(
        provider="mapbox",
        timeout_s=4.0,
        user_agent="gbakaguides-test",
        secrets=("pk.secret",),
        session=session,  # type: ignore[arg-type]
    )


def test_get_json_uses_timeout_and_user_agent() -> None:
    session = _Session(_Response(200, json_data={"ok": True}))
    client = _client(session)

    assert client.get_json("https://api.mapbox.com/x", params={"access_token": "pk.secret"}) == {"ok": True}
    assert session.headers["User-Agent"] == "gbakaguides-test"
    assert session.calls[0]["timeout"] == 4.0
    assert session.calls[0]["headers"]["Accept"] == "application/json"


def test_get_bytes_returns_content_unchanged() -> None:
    session = _Session(_Response(200, content=b"\x89PNG\r\n"))
    assert _client(session).get_bytes("https://tile/1/2/3.png") == b"\x89PNG\r\n"


def test_http_error_keeps_status_and_hides_token() -> None:
    session = _Session(_Response(401, text="Not Authorized - Invalid Token pk.secret"))
    client = _client(session)

    with pytest.raises(ProviderError) as excinfo:
        client.get_json("https://api.mapbox.com/x", params={"access_token": "pk.secret"})

    assert excinfo.value.status_code == 401
    assert excinfo.value.provider == "mapbox"
    assert "pk.secret" not in str(excinfo.value)
    assert "access_token=***" in str(excinfo.value)


def test_network_errors_become_provider_errors_without_token() -> None:
    error = requests.ConnectionError("Max retries exceeded with url: /x?access_token=pk.secret")
    client = _client(_Session(error=error))

    with pytest.raises(ProviderError) as excinfo:
        client.get_bytes("https://api.mapbox.com/x", params={"access_token": "pk.secret"})

    assert excinfo.value.status_code is None
    assert "pk.secret" not in str(excinfo.value)
    assert excinfo.value.__cause__ is None


def test_timeout_is_reported() -> None:
    client = _client(_Session(error=requests.Timeout("read timed out")))
    with pytest.raises(ProviderError, match="timed out after 4.0s"):
        client.get_json("https://nominatim.openstreetmap.org/search", params={"q": "Plateau"})


def test_non_json_payload_is_a_provider_error() -> None:
    client = _client(_Session(_Response(200, text="<html>")))
    with pytest.raises(ProviderError, match="non-JSON"):
        client.get_json("https://nominatim.openstreetmap.org/search")


def test_redact_ignores_empty_secrets() -> None:
    assert redact("token=abc", [None, "", "abc"]) == "token=***"
