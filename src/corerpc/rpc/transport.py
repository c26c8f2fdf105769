"""HTTP transport for the node's JSON-RPC interface."""

from __future__ import annotations

import logging
from typing import Protocol

import httpx

from .errors import MalformedResponseError, TransportError
from .types import MethodCall, ResponseEnvelope

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class Transport(Protocol):
    """Sends one call and returns the node's classified response."""

    def send(self, call: MethodCall) -> ResponseEnvelope: ...

    def close(self) -> None: ...


class HTTPTransport:
    """JSON-RPC over HTTP POST, one call per request, as bitcoind serves it."""

    def __init__(
        self,
        url: str,
        *,
        user: str | None = None,
        password: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.Client | None = None,
    ) -> None:
        self.url = url
        self._owns_client = client is None
        self._auth = httpx.BasicAuth(user, password or "") if user is not None else None
        self._client = client or httpx.Client(timeout=timeout)

    def send(self, call: MethodCall) -> ResponseEnvelope:
        try:
            if self._auth is None:
                response = self._client.post(self.url, json=call.to_payload())
            else:
                response = self._client.post(self.url, json=call.to_payload(), auth=self._auth)
        except httpx.TimeoutException as exc:
            raise TransportError(call.method, f"timed out: {exc}") from exc
        except httpx.HTTPError as exc:
            raise TransportError(call.method, exc) from exc

        if response.status_code in (401, 403):
            raise TransportError(call.method, f"HTTP {response.status_code}: check rpc credentials")

        # bitcoind reports RPC errors with 404/500 and a JSON-RPC body.
        try:
            payload = response.json()
        except ValueError as exc:
            if response.is_success:
                raise MalformedResponseError(call.method, "response body is not valid JSON") from exc
            raise TransportError(
                call.method, f"HTTP {response.status_code} {response.reason_phrase}"
            ) from exc

        if not response.is_success and not (isinstance(payload, dict) and ("error" in payload or "result" in payload)):
            raise TransportError(call.method, f"HTTP {response.status_code} {response.reason_phrase}")

        logger.debug("HTTP %s for %s (id=%s)", response.status_code, call.method, call.id)
        return ResponseEnvelope.from_payload(call.method, payload)

    def close(self) -> None:
        """Dispose the underlying HTTP client if owned by this instance."""

        if self._owns_client:
            self._client.close()


__all__ = ["DEFAULT_TIMEOUT", "HTTPTransport", "Transport"]
