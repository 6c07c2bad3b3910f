"""
httpwrap_sdk.tier0_core.redact
───────────────────────────────
Secret redaction for log output. Outbound requests routinely carry
credentials in headers (Authorization, Cookie, API keys); anything the
dispatcher logs about a request passes through here first.
"""
from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

# ── Default redacted key names (case-insensitive) ─────────────────────────

_SENSITIVE_KEYS: frozenset[str] = frozenset({
    "password", "passwd", "secret", "token", "api_key", "apikey",
    "access_token", "refresh_token", "private_key", "client_secret",
    "authorization", "proxy-authorization", "x-api-key", "x-auth-token",
    "cookie", "set-cookie", "session",
})

# ── Regex patterns for inline scrubbing ───────────────────────────────────

_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    # Bearer tokens
    (re.compile(r"Bearer\s+[A-Za-z0-9\-._~+/]+=*", re.I), "Bearer [REDACTED]"),
    # Basic auth
    (re.compile(r"Basic\s+[A-Za-z0-9+/=]+", re.I), "Basic [REDACTED]"),
    # Credentials in query strings
    (re.compile(
        r"(password|secret|token|api[_-]?key)=[^\s&\"']+",
        re.I,
    ), r"\1=[REDACTED]"),
]

REDACTED = "[REDACTED]"


# ── Public API ─────────────────────────────────────────────────────────────

def redact_dict(
    data: Mapping[str, Any],
    sensitive_keys: frozenset[str] | None = None,
    *,
    deep: bool = True,
) -> dict[str, Any]:
    """
    Return a copy of *data* with sensitive key values replaced by REDACTED.
    If *deep* is True, recurse into nested mappings.
    """
    keys = sensitive_keys if sensitive_keys is not None else _SENSITIVE_KEYS
    result: dict[str, Any] = {}
    for k, v in data.items():
        if k.lower() in keys:
            result[k] = REDACTED
        elif deep and isinstance(v, Mapping):
            result[k] = redact_dict(v, keys, deep=True)
        else:
            result[k] = v
    return result


def redact_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Copy of a header set that is safe to log."""
    return redact_dict(headers, deep=False)


def scrub_string(text: str) -> str:
    """Apply regex-based scrubbing to an arbitrary string (URLs, messages)."""
    for pattern, replacement in _PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def structlog_redact_processor(
    logger: Any,
    method: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """
    structlog processor that redacts sensitive keys from the event dict.
    Add to the structlog processor chain before any serialisation step.
    """
    return redact_dict(event_dict)


__all__ = [
    "REDACTED",
    "redact_dict",
    "redact_headers",
    "scrub_string",
    "structlog_redact_processor",
]
