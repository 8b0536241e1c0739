from __future__ import annotations

from typing import Any, Dict, Optional

AUTHENTICATION_EXCEPTION_CLASS = "com.attask.common.AuthenticationException"


class WorkfrontClientError(Exception):
    """Base error for client failures."""


class WorkfrontTransportError(WorkfrontClientError):
    """Socket, connect or timeout failure before a response was decoded."""

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        host: Optional[str] = None,
        address: Optional[str] = None,
    ):
        super().__init__(message)
        self.code = code
        self.host = host
        self.address = address


class WorkfrontStreamError(WorkfrontClientError):
    pass


class WorkfrontParseError(WorkfrontClientError):
    """
    Response body was not JSON. The only argument is the raw body text,
    so ``str(exc)`` is exactly what the server sent.
    """

    def __init__(self, body: str, *, status_code: Optional[int] = None):
        super().__init__(body)
        self.body = body
        self.status_code = status_code


class WorkfrontAPIError(WorkfrontClientError):
    """Envelope carrying an ``error`` field. ``payload`` is the parsed body verbatim."""

    def __init__(self, payload: Dict[str, Any], *, status_code: int):
        self.payload = payload
        self.status_code = status_code
        super().__init__(f"{status_code}: {self.error_message or 'request failed'}")

    def _error_field(self, key: str) -> Optional[Any]:
        err = self.payload.get("error")
        if isinstance(err, dict) and key in err:
            return err.get(key)
        return self.payload.get(key)

    @property
    def error_class(self) -> Optional[str]:
        return self._error_field("class")

    @property
    def error_message(self) -> Optional[str]:
        message = self._error_field("message")
        if message is None and isinstance(self.payload.get("error"), str):
            return self.payload["error"]
        return message


class WorkfrontStatusError(WorkfrontAPIError):
    """Non-200 status with a body that looks like success (e.g. proxy answering for a down backend)."""


class WorkfrontModelValidationError(WorkfrontClientError):
    pass


class WorkfrontUploadError(WorkfrontClientError):
    pass


class WorkfrontDownloadError(WorkfrontClientError):
    def __init__(self, *, status_code: int, reason: str):
        super().__init__(
            f"Download failed! Response code: {status_code}, message: {reason}"
        )
        self.status_code = status_code
        self.reason = reason


class SessionRequiredError(WorkfrontClientError):
    """Operation needs a logged-in session and none is set."""


def is_authentication_error(exc: BaseException) -> bool:
    return (
        isinstance(exc, WorkfrontAPIError)
        and exc.error_class == AUTHENTICATION_EXCEPTION_CLASS
    )


__all__ = [
    "AUTHENTICATION_EXCEPTION_CLASS",
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
]
