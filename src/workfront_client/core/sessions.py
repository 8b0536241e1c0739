"""
Per-user session lifecycle: log in, run a unit of work, log out.

Every cycle runs on a freshly created client so that stamping a session
header never leaks into a client another coroutine is using.
"""

from __future__ import annotations

import asyncio
import logging
from typing import (
    Awaitable,
    Callable,
    Dict,
    Mapping,
    Optional,
    Protocol,
    TypeVar,
    runtime_checkable,
)

from .client import WorkfrontClient
from .errors import (
    WorkfrontAPIError,
    WorkfrontClientError,
    is_authentication_error,
)
from .models import LoginSession
from .observability import log_event

T = TypeVar("T")

ClientFactory = Callable[[], WorkfrontClient]
UnitOfWork = Callable[[WorkfrontClient, LoginSession], Awaitable[T]]

DEFAULT_MAX_LOGIN_ATTEMPTS = 3
DEFAULT_SESSION_LOGIN_DELAY = 2.0


@runtime_checkable
class SessionStore(Protocol):
    def get_session(self, email: str) -> Optional[LoginSession]: ...

    def set_session(self, email: str, session: LoginSession) -> None: ...


class InMemorySessionStore:
    """Dict-backed session store keyed by lowercased email."""

    def __init__(self) -> None:
        self._sessions: Dict[str, LoginSession] = {}

    def get_session(self, email: str) -> Optional[LoginSession]:
        return self._sessions.get(email.lower())

    def set_session(self, email: str, session: LoginSession) -> None:
        self._sessions[email.lower()] = session

    def get_sessions(self) -> Dict[str, LoginSession]:
        return dict(self._sessions)


class EmailAliases:
    """Forward alias mapping with reverse lookup. Keys and values are compared lowercased."""

    def __init__(self, forward: Optional[Mapping[str, str]] = None):
        self.forward: Dict[str, str] = {
            k.lower(): v.lower() for k, v in (forward or {}).items()
        }
        self.reverse: Dict[str, str] = {v: k for k, v in self.forward.items()}

    def resolve(self, email: str) -> Optional[str]:
        key = email.lower()
        return self.forward.get(key) or self.reverse.get(key)

    def __bool__(self) -> bool:
        return bool(self.forward)


class SessionManager:
    def __init__(
        self,
        client_factory: ClientFactory,
        *,
        aliases: Optional[EmailAliases] = None,
        max_login_attempts: int = DEFAULT_MAX_LOGIN_ATTEMPTS,
        session_login_delay: float = DEFAULT_SESSION_LOGIN_DELAY,
        logger: Optional[logging.Logger] = None,
    ):
        self.client_factory = client_factory
        self.aliases = aliases or EmailAliases()
        self.max_login_attempts = max(1, max_login_attempts)
        self.session_login_delay = session_login_delay
        self.log = logger or logging.getLogger("workfront_client.sessions")

    async def _login_on(
        self, client: WorkfrontClient, email: str, *, allow_alias: bool
    ) -> LoginSession:
        try:
            session = await client.login(email)
        except WorkfrontAPIError as exc:
            alias = self.aliases.resolve(email) if allow_alias else None
            if not alias:
                raise
            log_event(
                "wf_login_alias",
                self.log,
                user=email,
                alias=alias,
                error_type=type(exc).__name__,
            )
            session = await client.login(alias)
        log_event("wf_login", self.log, user=email, user_id=session.user_id)
        return session

    async def login(
        self,
        email: str,
        *,
        wait_delay: Optional[float] = None,
        allow_alias: bool = True,
    ) -> LoginSession:
        """
        Log in as `email` on a fresh client and return the session.
        With `wait_delay` (seconds) the result is held back that long after a
        successful login.
        """
        client = self.client_factory()
        try:
            session = await self._login_on(client, email, allow_alias=allow_alias)
        finally:
            await client.aclose()
        if wait_delay:
            self.log.debug(
                "wf.login.delay", extra={"user": email, "duration_ms": int(wait_delay * 1000)}
            )
            await asyncio.sleep(wait_delay)
        return session

    async def logout(self, session: LoginSession) -> None:
        client = self.client_factory()
        client.api_key = None
        client.session_id = session.session_id
        try:
            await client.logout()
        finally:
            await client.aclose()
        log_event("wf_logout", self.log, user_id=session.user_id)

    async def run_with_session(
        self, email: str, work: UnitOfWork[T], session: LoginSession
    ) -> T:
        """Run `work` on a fresh client bound to an existing session (no API key)."""
        client = self.client_factory()
        client.api_key = None
        client.session_id = session.session_id
        self.log.debug("wf.run_with_session", extra={"user": email})
        try:
            return await work(client, session)
        except WorkfrontClientError as exc:
            log_event(
                "wf_run_failed",
                self.log,
                level=logging.WARNING,
                user=email,
                error_type=type(exc).__name__,
            )
            raise
        finally:
            await client.aclose()

    async def run_as_user(
        self,
        email: str,
        work: UnitOfWork[T],
        *,
        sessions: Optional[SessionStore] = None,
    ) -> T:
        """
        Run `work(client, session)` as the user `email`.

        With a session store a cached session is reused; otherwise the user is
        logged in, the session stored, and the work run, retrying the whole
        cycle on authentication errors up to `max_login_attempts` times.
        Without a store the login and logout bracket the work and logout
        failures are logged, never raised.
        """
        if sessions is None:
            return await self._run_session_less(email, work)

        cached = sessions.get_session(email)
        if cached is not None:
            log_event("wf_session_reused", self.log, user=email, user_id=cached.user_id)
            return await self.run_with_session(email, work, cached)

        attempt = 1
        while True:
            try:
                session = await self.login(
                    email,
                    wait_delay=self.session_login_delay,
                    allow_alias=attempt == 1,
                )
                sessions.set_session(email, session)
                return await self.run_with_session(email, work, session)
            except WorkfrontAPIError as exc:
                if not is_authentication_error(exc) or attempt >= self.max_login_attempts:
                    raise
                attempt += 1
                log_event(
                    "wf_login_retry",
                    self.log,
                    level=logging.WARNING,
                    user=email,
                    attempt=attempt,
                )

    async def _run_session_less(self, email: str, work: UnitOfWork[T]) -> T:
        client = self.client_factory()
        try:
            session = await self._login_on(client, email, allow_alias=True)
            client.api_key = None
            try:
                return await work(client, session)
            finally:
                await self._quiet_logout(client, email)
        finally:
            await client.aclose()

    async def _quiet_logout(self, client: WorkfrontClient, email: str) -> None:
        try:
            await client.logout()
        except Exception as exc:
            log_event(
                "wf_logout_failed",
                self.log,
                level=logging.WARNING,
                user=email,
                error_type=type(exc).__name__,
            )
        else:
            log_event("wf_logout", self.log, user=email)


__all__ = [
    "SessionStore",
    "InMemorySessionStore",
    "EmailAliases",
    "SessionManager",
    "DEFAULT_MAX_LOGIN_ATTEMPTS",
    "DEFAULT_SESSION_LOGIN_DELAY",
]
