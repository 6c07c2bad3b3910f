"""
httpwrap_sdk.tier0_core.transport
──────────────────────────────────
The transport seam: the one collaborator that actually puts bytes on the
wire. The dispatcher only needs ``execute(request) -> response``; TLS,
proxies, pooling, timeouts and redirect policy are configured here, at
construction time, and never by the dispatcher.

Minimal stack: httpx (sync Client)
Tests:         MockTransport (in-memory, counts closes)
"""
from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Iterable, Protocol, runtime_checkable

import httpx

from httpwrap_sdk.tier0_core.config import ClientConfig, get_config
from httpwrap_sdk.tier0_core.errors import ConfigurationError


# ── Domain model ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class TransportRequest:
    """A fully built request. ``body`` is None for GET/DELETE."""
    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | None = None


# ── Protocols ────────────────────────────────────────────────────────────────

@runtime_checkable
class TransportResponse(Protocol):
    """What the dispatcher needs from a response: a status and a closable body."""

    @property
    def status_code(self) -> int: ...

    def read(self) -> bytes: ...

    def close(self) -> None: ...


@runtime_checkable
class Transport(Protocol):
    def execute(self, request: TransportRequest) -> TransportResponse: ...


# ── httpx transport (production) ─────────────────────────────────────────────

class HttpxTransport:
    """
    Transport backed by ``httpx.Client``. Responses are sent with
    ``stream=True`` so the body stays unread until the dispatcher has
    classified the status. httpx.Client is safe to share across threads.

    Usage::

        with HttpxTransport.from_config() as transport:
            client = HttpWrapper(transport)
            client.get("https://api.example.com/items")
    """

    def __init__(self, client: httpx.Client | None = None, **client_kwargs: Any) -> None:
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(**client_kwargs)

    @classmethod
    def from_config(cls, config: ClientConfig | None = None) -> "HttpxTransport":
        config = config or get_config()
        if config.timeout <= 0:
            raise ConfigurationError(
                f"invalid client configuration: timeout must be positive, got {config.timeout!r}"
            )
        return cls(
            timeout=config.timeout,
            verify=config.verify_tls,
            follow_redirects=config.follow_redirects,
        )

    def execute(self, request: TransportRequest) -> httpx.Response:
        outgoing = self._client.build_request(
            request.method,
            request.url,
            headers=request.headers,
            content=request.body,
        )
        return self._client.send(outgoing, stream=True)

    def close(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpxTransport":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


# ── Mock transport (tests) ───────────────────────────────────────────────────

class MockResponse:
    """
    In-memory response. Counts ``close()`` calls so tests can assert the
    body was released exactly once. If ``read_error`` is set, ``read()``
    raises it instead of returning the body.
    """

    def __init__(
        self,
        status_code: int = 200,
        body: bytes = b"",
        *,
        read_error: BaseException | None = None,
    ) -> None:
        self._status_code = status_code
        self._body = body
        self._read_error = read_error
        self.read_count = 0
        self.close_count = 0

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def closed(self) -> bool:
        return self.close_count > 0

    def read(self) -> bytes:
        if self.closed:
            raise RuntimeError("read from a closed response body")
        self.read_count += 1
        if self._read_error is not None:
            raise self._read_error
        return self._body

    def close(self) -> None:
        self.close_count += 1


class MockTransport:
    """
    Records every request and replays queued outcomes in order. Each queued
    item is either a MockResponse to return or an exception to raise.
    """

    def __init__(self, outcomes: Iterable[MockResponse | BaseException] = ()) -> None:
        self._outcomes: deque[MockResponse | BaseException] = deque(outcomes)
        self._lock = threading.Lock()
        self.requests: list[TransportRequest] = []
        self.responses: list[MockResponse] = []

    def enqueue(self, outcome: MockResponse | BaseException) -> None:
        with self._lock:
            self._outcomes.append(outcome)

    def execute(self, request: TransportRequest) -> MockResponse:
        with self._lock:
            self.requests.append(request)
            if not self._outcomes:
                raise AssertionError(f"MockTransport has no outcome queued for {request.method} {request.url}")
            outcome = self._outcomes.popleft()
            if isinstance(outcome, BaseException):
                raise outcome
            self.responses.append(outcome)
            return outcome

    @property
    def last_request(self) -> TransportRequest:
        return self.requests[-1]


__all__ = [
    "TransportRequest", "TransportResponse", "Transport",
    "HttpxTransport", "MockResponse", "MockTransport",
]
