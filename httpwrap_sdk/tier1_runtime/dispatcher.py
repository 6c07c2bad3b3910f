"""
httpwrap_sdk.tier1_runtime.dispatcher
──────────────────────────────────────
Request dispatcher: GET/POST/PUT/DELETE over an injected transport.

Every call follows the same path: build the request, execute it, classify
the status, then read the body. The response body is released exactly
once on every exit path; on a rejected status it is never read.

Failures surface as ClientError subclasses, by stage:
  RequestBuildError   → bad URL, method, header or body (caller bug)
  RequestFailedError  → transport raised (DNS, refused, timeout, TLS)
  StatusError         → status outside 200/201/204, see tier0_core.http
  BodyReadError       → status accepted but the body could not be read
"""
from __future__ import annotations

from collections.abc import Mapping
from contextlib import closing
from typing import Protocol, runtime_checkable

import httpx

from httpwrap_sdk.tier0_core.errors import (
    BodyReadError,
    RequestBuildError,
    RequestFailedError,
)
from httpwrap_sdk.tier0_core.http import classify_status
from httpwrap_sdk.tier0_core.logging import bound_context, get_logger
from httpwrap_sdk.tier0_core.redact import redact_headers, scrub_string
from httpwrap_sdk.tier0_core.transport import (
    HttpxTransport,
    Transport,
    TransportRequest,
)

METHODS: frozenset[str] = frozenset({"GET", "POST", "PUT", "DELETE"})
_BODYLESS: frozenset[str] = frozenset({"GET", "DELETE"})


# ── Capability set ───────────────────────────────────────────────────────────

@runtime_checkable
class HttpClient(Protocol):
    """The four-verb surface callers depend on; swap in a double for tests."""

    def get(self, url: str, headers: Mapping[str, str] | None = None) -> bytes: ...

    def post(
        self, url: str, body: bytes = b"", headers: Mapping[str, str] | None = None
    ) -> bytes: ...

    def put(
        self, url: str, body: bytes = b"", headers: Mapping[str, str] | None = None
    ) -> bytes: ...

    def delete(self, url: str, headers: Mapping[str, str] | None = None) -> bytes: ...


# ── Request building ─────────────────────────────────────────────────────────

def build_request(
    method: str,
    url: str,
    body: bytes | bytearray | memoryview | None = None,
    headers: Mapping[str, str] | None = None,
) -> TransportRequest:
    """
    Validate inputs and assemble a TransportRequest.

    Headers are copied onto a fresh dict, single-valued: names are folded
    case-insensitively, as on the wire, and a name set twice keeps the last
    value under the last spelling. GET and DELETE never carry a body.
    """
    if method not in METHODS:
        raise RequestBuildError(
            f"client: could not create request: unsupported method {method!r}",
            method=method,
            url=url,
        )

    def fail(reason: str) -> RequestBuildError:
        return RequestBuildError(
            f"client: could not create {method} request: {reason}",
            method=method,
            url=url,
        )

    if not isinstance(url, str) or not url:
        raise fail("url must be a non-empty string")
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as exc:
        raise fail(f"invalid url: {exc}") from exc
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise fail(f"url must be an absolute http(s) url, got {url!r}")

    folded = httpx.Headers()
    for key, value in (headers or {}).items():
        if not isinstance(key, str) or not isinstance(value, str):
            raise fail(f"header {key!r} must map str to str")
        folded[key] = value
    applied = {
        key.decode(folded.encoding): value.decode(folded.encoding)
        for key, value in folded.raw
    }

    if method in _BODYLESS:
        payload = None
    elif body is None:
        payload = b""
    elif isinstance(body, (bytes, bytearray, memoryview)):
        payload = bytes(body)
    else:
        raise fail(f"body must be bytes, got {type(body).__name__}")

    return TransportRequest(method=method, url=url, headers=applied, body=payload)


# ── Dispatcher ───────────────────────────────────────────────────────────────

class HttpWrapper:
    """
    Thin synchronous client over a Transport. Holds no per-call state, so
    one instance may be shared across threads when the transport allows it.

    Usage::

        client = HttpWrapper(HttpxTransport.from_config())
        data = client.get("https://api.example.com/items", {"Accept": "application/json"})
    """

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    @property
    def transport(self) -> Transport:
        return self._transport

    def get(self, url: str, headers: Mapping[str, str] | None = None) -> bytes:
        return self._perform("GET", url, None, headers)

    def post(
        self, url: str, body: bytes = b"", headers: Mapping[str, str] | None = None
    ) -> bytes:
        return self._perform("POST", url, body, headers)

    def put(
        self, url: str, body: bytes = b"", headers: Mapping[str, str] | None = None
    ) -> bytes:
        return self._perform("PUT", url, body, headers)

    def delete(self, url: str, headers: Mapping[str, str] | None = None) -> bytes:
        return self._perform("DELETE", url, None, headers)

    def _perform(
        self,
        method: str,
        url: str,
        body: bytes | None,
        headers: Mapping[str, str] | None,
    ) -> bytes:
        request = build_request(method, url, body, headers)
        log = get_logger(__name__)

        with bound_context(method=method, url=scrub_string(url)):
            log.debug("http.request.start", headers=redact_headers(request.headers))

            try:
                response = self._transport.execute(request)
            except Exception as exc:
                log.warning("http.request.failed", error=str(exc))
                raise RequestFailedError(
                    f"client: failed to perform {method} request: {exc}",
                    method=method,
                    url=url,
                ) from exc

            with closing(response):
                outcome = classify_status(response.status_code)
                if not outcome.ok:
                    log.warning(
                        "http.response.rejected",
                        status=outcome.status_code,
                        category=outcome.category.value,
                    )
                    raise outcome.to_error(method=method, url=url)

                try:
                    data = response.read()
                except Exception as exc:
                    log.warning("http.response.read_failed", error=str(exc))
                    raise BodyReadError(
                        f"client: failed to read response body: {exc}",
                        method=method,
                        url=url,
                        status_code=outcome.status_code,
                    ) from exc

            log.debug("http.response.ok", status=outcome.status_code, size=len(data))
        return data


def new_http_wrapper(transport: Transport | None = None) -> HttpWrapper:
    """Return an HttpWrapper; builds an HttpxTransport from config when none is given."""
    return HttpWrapper(transport if transport is not None else HttpxTransport.from_config())


__all__ = ["HttpClient", "HttpWrapper", "METHODS", "build_request", "new_http_wrapper"]
