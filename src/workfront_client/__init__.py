"""workfront_client package exports."""

from .core.client import WorkfrontClient
from .core.config import ConnectionConfig, load_env_config
from .core.errors import (
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
)
from .core.logging import setup_logging
from .core.models import LoginSession, UploadHandle
from .core.sessions import InMemorySessionStore, SessionStore
from .workfront import Workfront

__all__ = [
    # Client
    "Workfront",
    "WorkfrontClient",
    "ConnectionConfig",
    "load_env_config",
    "setup_logging",
    # Sessions
    "LoginSession",
    "UploadHandle",
    "SessionStore",
    "InMemorySessionStore",
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
]
