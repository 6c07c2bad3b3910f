"""
httpwrap_sdk.tier0_core.http
─────────────────────────────
HTTP primitives: standard status codes and the status classifier.

Only 200, 201 and 204 count as success. Six well-known failure codes map
to their own category; every other code (other 2xx, redirects, remaining
4xx/5xx) is "unexpected status code" and keeps the raw value for
diagnosis. Redirects are not followed here.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from httpwrap_sdk.tier0_core.errors import (
    BadRequestError,
    ForbiddenError,
    NotFoundError,
    ServiceUnavailableError,
    StatusError,
    TooManyRequestsError,
    UnauthorizedError,
    UnexpectedStatusError,
)


# ── Status code constants ──────────────────────────────────────────────────

class HTTP:
    """Status codes the classifier distinguishes."""

    # 2xx
    OK = 200
    CREATED = 201
    NO_CONTENT = 204

    # 4xx
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    TOO_MANY_REQUESTS = 429

    # 5xx
    SERVICE_UNAVAILABLE = 503


class StatusCategory(str, Enum):
    """Failure categories a response status can fall into."""

    BAD_REQUEST = "bad request"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not found"
    TOO_MANY_REQUESTS = "too many requests"
    SERVICE_UNAVAILABLE = "service unavailable"
    UNEXPECTED = "unexpected status code"


# ── Classification tables ─────────────────────────────────────────────────

SUCCESS_CODES: frozenset[int] = frozenset({HTTP.OK, HTTP.CREATED, HTTP.NO_CONTENT})

_FAILURES: dict[int, StatusCategory] = {
    HTTP.BAD_REQUEST: StatusCategory.BAD_REQUEST,
    HTTP.UNAUTHORIZED: StatusCategory.UNAUTHORIZED,
    HTTP.FORBIDDEN: StatusCategory.FORBIDDEN,
    HTTP.NOT_FOUND: StatusCategory.NOT_FOUND,
    HTTP.TOO_MANY_REQUESTS: StatusCategory.TOO_MANY_REQUESTS,
    HTTP.SERVICE_UNAVAILABLE: StatusCategory.SERVICE_UNAVAILABLE,
}

_ERRORS: dict[StatusCategory, type[StatusError]] = {
    StatusCategory.BAD_REQUEST: BadRequestError,
    StatusCategory.UNAUTHORIZED: UnauthorizedError,
    StatusCategory.FORBIDDEN: ForbiddenError,
    StatusCategory.NOT_FOUND: NotFoundError,
    StatusCategory.TOO_MANY_REQUESTS: TooManyRequestsError,
    StatusCategory.SERVICE_UNAVAILABLE: ServiceUnavailableError,
    StatusCategory.UNEXPECTED: UnexpectedStatusError,
}


# ── Outcome ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Outcome:
    """Verdict for one status code. ``category`` is None on success."""
    status_code: int
    category: StatusCategory | None = None

    @property
    def ok(self) -> bool:
        return self.category is None

    def to_error(
        self, *, method: str | None = None, url: str | None = None
    ) -> StatusError | None:
        """Build the typed error for a failed outcome; None on success."""
        if self.category is None:
            return None
        return _ERRORS[self.category](self.status_code, method=method, url=url)


# ── Public API ────────────────────────────────────────────────────────────

def classify_status(status_code: int) -> Outcome:
    """Map a numeric status code to an Outcome. Defined for every integer."""
    if status_code in SUCCESS_CODES:
        return Outcome(status_code)
    return Outcome(status_code, _FAILURES.get(status_code, StatusCategory.UNEXPECTED))


def check_status(
    status_code: int, *, method: str | None = None, url: str | None = None
) -> None:
    """Raise the matching StatusError unless *status_code* is a success."""
    error = classify_status(status_code).to_error(method=method, url=url)
    if error is not None:
        raise error


__all__ = [
    "HTTP", "StatusCategory", "Outcome", "SUCCESS_CODES",
    "classify_status", "check_status",
]
