"""
httpwrap_sdk.tier0_core.errors
───────────────────────────────
Client error taxonomy. Every failure raised by the dispatcher is a
ClientError carrying the verb, the URL and the stage that failed
(build, transport, classify, read), so callers can branch on the class
without parsing messages. Raising a ClientError reports it to the
configured error backend, if any.

Minimal stack: Sentry OSS + OTel error signals
Select via:    HTTPWRAP_ERROR_BACKEND=sentry|otel|none
"""
from __future__ import annotations

import os
from typing import Any

from httpwrap_sdk.tier0_core.redact import scrub_string


# ── Base error ────────────────────────────────────────────────────────────────

class ClientError(Exception):
    """
    Base class for all client errors. Every error has:
    - code: stable machine-readable string (snake_case)
    - stage: which step of the call failed
    - method / url: the request being performed, when known
    - detail: human-readable message (also the str() of the error)

    Credentials in the URL or message (query tokens, bearer values) are
    scrubbed before they are stored.
    """

    code: str = "client_error"
    stage: str = "unknown"
    retryable: bool = False

    def __init__(
        self,
        detail: str,
        *,
        method: str | None = None,
        url: str | None = None,
        code: str | None = None,
        **metadata: Any,
    ) -> None:
        self.code = code or self.__class__.code
        self.detail = scrub_string(detail)
        self.method = method
        self.url = scrub_string(url) if url else url
        self.metadata = metadata
        super().__init__(self.detail)
        _capture(self)

    def __reduce__(self) -> tuple:
        # Rebuild from state; re-running __init__ would re-capture the error.
        return _rebuild, (self.__class__, self.__dict__.copy())

    def to_dict(self) -> dict:
        d: dict[str, Any] = {
            "error": {
                "code": self.code,
                "stage": self.stage,
                "message": self.detail,
            }
        }
        if self.method:
            d["error"]["method"] = self.method
        if self.url:
            d["error"]["url"] = self.url
        return d


# ── Build / transport / read ──────────────────────────────────────────────────

class RequestBuildError(ClientError):
    """Malformed URL, unsupported method or invalid header/body. A caller bug."""
    code = "request_build_failed"
    stage = "build"


class RequestFailedError(ClientError):
    """Transport could not complete the exchange (DNS, refused, timeout, TLS)."""
    code = "request_failed"
    stage = "transport"
    retryable = True


class BodyReadError(ClientError):
    """Status was accepted but the response body could not be fully read."""
    code = "body_read_failed"
    stage = "read"
    retryable = True


class ConfigurationError(ClientError):
    """Invalid client settings detected at startup."""
    code = "configuration_error"
    stage = "config"


# ── Status classification ─────────────────────────────────────────────────────

class StatusError(ClientError):
    """
    The remote service answered with a status outside the success allow-list.
    Subclasses fix ``category`` and the expected status; ``status_code``
    always holds the code actually received.
    """

    code = "unexpected_status"
    stage = "classify"
    category: str = "unexpected status code"

    def __init__(
        self,
        status_code: int,
        *,
        method: str | None = None,
        url: str | None = None,
        **metadata: Any,
    ) -> None:
        self.status_code = status_code
        super().__init__(
            self._message(status_code),
            method=method,
            url=url,
            **metadata,
        )

    def _message(self, status_code: int) -> str:
        return f"client: {self.category} ({status_code})"

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["error"]["status_code"] = self.status_code
        return d


class BadRequestError(StatusError):
    code = "bad_request"
    category = "bad request"


class UnauthorizedError(StatusError):
    code = "unauthorized"
    category = "unauthorized"


class ForbiddenError(StatusError):
    code = "forbidden"
    category = "forbidden"


class NotFoundError(StatusError):
    code = "not_found"
    category = "not found"


class TooManyRequestsError(StatusError):
    code = "too_many_requests"
    category = "too many requests"
    retryable = True


class ServiceUnavailableError(StatusError):
    code = "service_unavailable"
    category = "service unavailable"
    retryable = True


class UnexpectedStatusError(StatusError):
    """Any status not in the classification table; message carries the raw code."""

    def _message(self, status_code: int) -> str:
        return f"client: unexpected status code: {status_code}"


def _rebuild(cls: type[ClientError], state: dict[str, Any]) -> ClientError:
    error = cls.__new__(cls)
    Exception.__init__(error, state["detail"])
    error.__dict__.update(state)
    return error


# ── Error capture backend ─────────────────────────────────────────────────────

def _capture(error: ClientError) -> None:
    """Send error to configured backend. Called automatically by ClientError.__init__."""
    backend = os.getenv("HTTPWRAP_ERROR_BACKEND", "none").lower()
    if backend == "none":
        return
    if backend == "sentry":
        _capture_sentry(error)
    elif backend == "otel":
        _capture_otel(error)


def _capture_sentry(error: ClientError) -> None:
    try:
        import sentry_sdk
    except ImportError:
        return
    sentry_sdk.capture_message(
        str(error),
        level="warning" if error.retryable else "error",
        extras={"code": error.code, "stage": error.stage, **error.metadata},
    )


def _capture_otel(error: ClientError) -> None:
    try:
        from opentelemetry import trace
    except ImportError:
        return
    span = trace.get_current_span()
    span.record_exception(error)
    span.set_status(trace.StatusCode.ERROR, str(error))


def configure_sentry(dsn: str, **kwargs: Any) -> None:
    """Initialize Sentry — call once at application startup."""
    import sentry_sdk
    sentry_sdk.init(dsn=dsn, **kwargs)
    os.environ["HTTPWRAP_ERROR_BACKEND"] = "sentry"


__all__ = [
    "ClientError", "RequestBuildError", "RequestFailedError", "BodyReadError",
    "ConfigurationError", "StatusError", "BadRequestError", "UnauthorizedError",
    "ForbiddenError", "NotFoundError", "TooManyRequestsError",
    "ServiceUnavailableError", "UnexpectedStatusError", "configure_sentry",
]
