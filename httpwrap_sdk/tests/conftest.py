"""
httpwrap_sdk test configuration.

All tests run against in-memory transports by default — no network required.
"""
from __future__ import annotations

import os

import pytest

# ── Pin settings for all tests ─────────────────────────────────────────────
# These must be set before any httpwrap_sdk modules are imported.

os.environ.setdefault("HTTPWRAP_LOG_LEVEL", "DEBUG")
os.environ.setdefault("HTTPWRAP_LOG_FORMAT", "console")
os.environ["HTTPWRAP_ERROR_BACKEND"] = "none"


# ── Fixtures ───────────────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def reset_config():
    """Each test sees a freshly loaded config, so monkeypatched env applies."""
    from httpwrap_sdk.tier0_core.config import _reset_config

    _reset_config()
    yield
    _reset_config()


@pytest.fixture
def mock_transport():
    """Return an empty MockTransport; queue outcomes with .enqueue()."""
    from httpwrap_sdk.tier0_core.transport import MockTransport
    return MockTransport()


@pytest.fixture
def client(mock_transport):
    """Return an HttpWrapper over the mock transport."""
    from httpwrap_sdk.tier1_runtime.dispatcher import HttpWrapper
    return HttpWrapper(mock_transport)
