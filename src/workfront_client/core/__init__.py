"""Core transport surface for workfront-client (no domain operations)."""

from .client import WorkfrontClient
from .config import ConnectionConfig, api_base_path, load_env_config
from .errors import (
    SessionRequiredError,
    WorkfrontAPIError,
    WorkfrontClientError,
    WorkfrontDownloadError,
    WorkfrontModelValidationError,
    WorkfrontParseError,
    WorkfrontStatusError,
    WorkfrontStreamError,
    WorkfrontTransportError,
    WorkfrontUploadError,
    is_authentication_error,
)
from .metadata import MetadataCache
from .models import LoginSession, UploadHandle
from .request import PendingRequest, build_request
from .sessions import EmailAliases, InMemorySessionStore, SessionManager, SessionStore
from .timeouts import ESOCKETTIMEDOUT, ETIMEDOUT, TimeoutGuard

__all__ = [
    # Client
    "WorkfrontClient",
    "PendingRequest",
    "build_request",
    "TimeoutGuard",
    "ETIMEDOUT",
    "ESOCKETTIMEDOUT",
    # Config
    "ConnectionConfig",
    "api_base_path",
    "load_env_config",
    # Exceptions
    "WorkfrontClientError",
    "WorkfrontTransportError",
    "WorkfrontStreamError",
    "WorkfrontParseError",
    "WorkfrontAPIError",
    "WorkfrontStatusError",
    "WorkfrontModelValidationError",
    "WorkfrontUploadError",
    "WorkfrontDownloadError",
    "SessionRequiredError",
    "is_authentication_error",
    # Sessions
    "LoginSession",
    "UploadHandle",
    "SessionStore",
    "InMemorySessionStore",
    "EmailAliases",
    "SessionManager",
    "MetadataCache",
]
