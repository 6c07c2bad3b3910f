"""
httpwrap_sdk
────────────
Stable top-level exports. Import from here, not from sub-modules directly.
Every name exported here is part of the public API and subject to semver.
"""
from httpwrap_sdk.tier0_core.logging import get_logger, bind_context, clear_context, bound_context
from httpwrap_sdk.tier0_core.errors import (
    ClientError,
    RequestBuildError,
    RequestFailedError,
    BodyReadError,
    ConfigurationError,
    StatusError,
    BadRequestError,
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    TooManyRequestsError,
    ServiceUnavailableError,
    UnexpectedStatusError,
)
from httpwrap_sdk.tier0_core.config import get_config, ClientConfig
from httpwrap_sdk.tier0_core.http import HTTP, Outcome, StatusCategory, classify_status, check_status
from httpwrap_sdk.tier0_core.transport import (
    Transport,
    TransportRequest,
    TransportResponse,
    HttpxTransport,
)

from httpwrap_sdk.tier1_runtime.dispatcher import HttpClient, HttpWrapper, new_http_wrapper

__version__ = "0.1.0"
__all__ = [
    # logging
    "get_logger", "bind_context", "clear_context", "bound_context",
    # errors
    "ClientError", "RequestBuildError", "RequestFailedError", "BodyReadError",
    "ConfigurationError", "StatusError", "BadRequestError", "UnauthorizedError",
    "ForbiddenError", "NotFoundError", "TooManyRequestsError",
    "ServiceUnavailableError", "UnexpectedStatusError",
    # config
    "get_config", "ClientConfig",
    # http
    "HTTP", "Outcome", "StatusCategory", "classify_status", "check_status",
    # transport
    "Transport", "TransportRequest", "TransportResponse", "HttpxTransport",
    # dispatcher
    "HttpClient", "HttpWrapper", "new_http_wrapper",
]
