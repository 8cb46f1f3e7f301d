from __future__ import annotations

# `logging` reports each upstream call (with redacted URLs) so operators can trace proxy traffic.
import logging
# Typing helpers keep the client interface explicit while payloads stay plain JSON dicts.
from typing import Any, Iterable, Mapping, MutableMapping, Optional

# `requests` performs the upstream HTTP calls; one `Session` per provider reuses connections.
import requests


logger = logging.getLogger(__name__)

REDACTED = "***"


# Base error for anything that goes wrong while talking to an upstream provider.
class ProviderError(RuntimeError):
    """
    Raised when an upstream provider call fails (network, non-2xx, malformed payload).

    `status_code` is the upstream HTTP status when one was received.
    """

    def __init__(self, message: str, *, provider: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class NoRouteError(ProviderError):
    """The directions provider answered, but found no route between the two points."""


def redact(text: str, secrets: Iterable[Optional[str]]) -> str:
    for secret in secrets:
        if secret:
            text = text.replace(secret, REDACTED)
    return text


# `ProviderHTTPClient` is the single place where upstream HTTP happens.
class ProviderHTTPClient:
    """
    Minimal HTTP client shared by the provider adapters.

    - One `requests.Session` per provider (keep-alive, stable User-Agent).
    - Every call carries an explicit timeout; there are no retries.
    - Secrets (access tokens) are scrubbed from every error message and log line.
    """

    def __init__(
        self,
        *,
        provider: str,
        timeout_s: float,
        user_agent: str,
        secrets: Iterable[Optional[str]] = (),
        session: Optional[requests.Session] = None,
    ) -> None:
        # Provider name is carried into errors so the service can tell which upstream failed.
        self.provider = provider
        # A single timeout value bounds tail latency for every request to this provider.
        self._timeout_s = timeout_s
        # Secrets are stored only to scrub them; they are never logged.
        self._secrets = tuple(s for s in secrets if s)
        # Sessions can be injected so tests never touch the network.
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": user_agent})

    def _redact(self, text: str) -> str:
        return redact(text, self._secrets)

    def _describe(self, url: str, params: Optional[Mapping[str, Any]]) -> str:
        # Build a loggable request description; `PreparedRequest` renders params the way requests sends them.
        prepared = requests.Request("GET", url, params=params).prepare()
        return self._redact(prepared.url or url)

    def _get(
        self,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> requests.Response:
        described = self._describe(url, params)
        logger.info("%s GET %s", self.provider, described)

        req_headers: MutableMapping[str, str] = {}
        if headers:
            req_headers.update(headers)

        try:
            resp = self._session.get(url, params=params, headers=req_headers, timeout=self._timeout_s)
        # `from None` drops the original exception, whose text may embed the tokenised URL.
        except requests.Timeout:
            raise ProviderError(
                f"{self.provider} request timed out after {self._timeout_s}s: {described}",
                provider=self.provider,
            ) from None
        except requests.RequestException as exc:
            raise ProviderError(
                f"{self.provider} request failed: {self._redact(str(exc))}",
                provider=self.provider,
            ) from None

        # Treat any 4xx/5xx as an error; the body is truncated and scrubbed before it reaches a message.
        if resp.status_code >= 400:
            raise ProviderError(
                f"{self.provider} request failed ({resp.status_code}) url={described} "
                f"body={self._redact(resp.text[:300])}",
                provider=self.provider,
                status_code=resp.status_code,
            )
        return resp

    def get_json(
        self,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        resp = self._get(url, params=params, headers={"Accept": "application/json", **(headers or {})})
        try:
            return resp.json()
        except ValueError:
            raise ProviderError(
                f"{self.provider} returned a non-JSON payload ({resp.status_code})",
                provider=self.provider,
                status_code=resp.status_code,
            ) from None

    def get_bytes(
        self,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> bytes:
        return self._get(url, params=params, headers=headers).content

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "ProviderHTTPClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
