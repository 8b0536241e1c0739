"""
Connect and idle-socket timeouts for a single outbound request.

httpcore enforces the per-phase timeouts we put in the request's
``timeout`` extension; the guard follows the connection lifecycle through
the ``trace`` extension to know which phase a failure belongs to and which
address the host resolved to.
"""

from __future__ import annotations

import asyncio
import enum
import logging
import socket
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from .config import DEFAULT_TIMEOUT_MS
from .errors import WorkfrontTransportError

ETIMEDOUT = "ETIMEDOUT"
ESOCKETTIMEDOUT = "ESOCKETTIMEDOUT"

GUARD_EXTENSION = "workfront.timeout_guard"

TraceHook = Callable[[str, Dict[str, Any]], Optional[Awaitable[None]]]

log = logging.getLogger("workfront_client.client")


class GuardState(str, enum.Enum):
    ARMED_CONNECT = "armed-connect"
    CONNECTED = "connected-armed-idle"
    CLEARED = "cleared"


def _format_address(server_addr: Any) -> Optional[str]:
    if isinstance(server_addr, tuple) and server_addr:
        return str(server_addr[0])
    if server_addr:
        return str(server_addr)
    return None


class TimeoutGuard:
    def __init__(
        self,
        request: httpx.Request,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        *,
        inner_trace: Optional[TraceHook] = None,
    ):
        self.host = request.url.host
        self.timeout_ms = timeout_ms
        self.remote_address: Optional[str] = None
        self.state = GuardState.ARMED_CONNECT
        self._inner_trace = inner_trace

    @classmethod
    def apply_to_request(
        cls, request: httpx.Request, timeout_ms: int = DEFAULT_TIMEOUT_MS
    ) -> "TimeoutGuard":
        """Install a guard on `request`. A second call returns the installed guard untouched."""
        existing = request.extensions.get(GUARD_EXTENSION)
        if isinstance(existing, cls):
            return existing

        guard = cls(request, timeout_ms, inner_trace=request.extensions.get("trace"))
        seconds = timeout_ms / 1000
        request.extensions["timeout"] = {
            "connect": seconds,
            "read": seconds,
            "write": seconds,
            "pool": seconds,
        }
        request.extensions["trace"] = guard.trace
        request.extensions[GUARD_EXTENSION] = guard
        return guard

    async def trace(self, event_name: str, info: Dict[str, Any]) -> None:
        if event_name == "connection.connect_tcp.started":
            await self._lookup(info.get("host"), info.get("port"))
        elif event_name == "connection.connect_tcp.complete":
            stream = info.get("return_value")
            if stream is not None:
                self.remote_address = _format_address(
                    stream.get_extra_info("server_addr")
                )
            self._connected()
        elif event_name.startswith(("http11.", "http2.")):
            # Pooled connection: no connect phase, already usable.
            self._connected()

        if self._inner_trace is not None:
            result = self._inner_trace(event_name, info)
            if result is not None:
                await result

    async def _lookup(self, host: Any, port: Any) -> None:
        """Record the address `host` resolves to before the connect attempt starts."""
        if isinstance(host, bytes):
            host = host.decode("ascii")
        if not host:
            return
        loop = asyncio.get_running_loop()
        try:
            infos = await asyncio.wait_for(
                loop.getaddrinfo(host, port, type=socket.SOCK_STREAM),
                self.timeout_ms / 1000,
            )
        except (OSError, asyncio.TimeoutError) as exc:
            # The connect attempt reports the failure itself.
            log.debug(
                "wf.lookup_failed",
                extra={"host": host, "error_type": type(exc).__name__},
            )
            return
        if infos:
            self.remote_address = _format_address(infos[0][4])

    def _connected(self) -> None:
        if self.state is GuardState.ARMED_CONNECT:
            self.state = GuardState.CONNECTED

    def clear(self) -> None:
        self.state = GuardState.CLEARED

    def fail(self, exc: httpx.TransportError) -> WorkfrontTransportError:
        """Translate an httpx transport failure; the guard ends in the cleared state."""
        self.clear()
        if isinstance(exc, (httpx.ConnectTimeout, httpx.PoolTimeout)):
            code = ETIMEDOUT
            message = (
                f"Connection timed out on request to host: {self.host}, "
                f"address: {self.remote_address}"
            )
        elif isinstance(exc, httpx.TimeoutException):
            code = ESOCKETTIMEDOUT
            message = (
                f"Socket timed out on request to host: {self.host}, "
                f"address: {self.remote_address}"
            )
        else:
            code = None
            message = f"Transport error on request to host: {self.host}: {exc}"

        log.debug(
            "wf.transport_error",
            extra={"code": code, "host": self.host, "error_type": type(exc).__name__},
        )
        return WorkfrontTransportError(
            message, code=code, host=self.host, address=self.remote_address
        )


__all__ = [
    "ETIMEDOUT",
    "ESOCKETTIMEDOUT",
    "GUARD_EXTENSION",
    "GuardState",
    "TimeoutGuard",
]
