import logging
from typing import Optional, TypeVar

import httpx

from .core.client import WorkfrontClient
from .core.config import ConnectionConfig, load_env_config
from .core.metadata import MetadataCache
from .core.models import LoginSession
from .core.sessions import (
    DEFAULT_SESSION_LOGIN_DELAY,
    EmailAliases,
    SessionManager,
    SessionStore,
    UnitOfWork,
)

T = TypeVar("T")


class Workfront:
    """
    Entry point for one Workfront instance.
    - Owns the connection pool, the metadata cache and the default API-key client
    - Hands out fresh clients for anything that logs in
    - Domain operations in `workfront_client.tools` take this object as `client`
    """

    def __init__(
        self,
        config: ConnectionConfig,
        *,
        http: Optional[httpx.AsyncClient] = None,
        metadata_cache: Optional[MetadataCache] = None,
        logger: Optional[logging.Logger] = None,
        session_login_delay: float = DEFAULT_SESSION_LOGIN_DELAY,
    ):
        self.config = config
        self.log = logger or logging.getLogger("workfront_client.client")
        self.metadata_cache = (
            metadata_cache if metadata_cache is not None else MetadataCache()
        )

        self._owns_http = http is None
        self.http = http or httpx.AsyncClient(base_url=config.url)

        self.api = WorkfrontClient(
            config=config,
            http=self.http,
            metadata_cache=self.metadata_cache,
            logger=self.log,
        )
        self.sessions = SessionManager(
            self.new_client,
            aliases=EmailAliases(config.email_aliases),
            session_login_delay=session_login_delay,
        )

    @classmethod
    def from_env(cls, **kwargs) -> "Workfront":
        return cls(load_env_config(), **kwargs)

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    async def __aenter__(self) -> "Workfront":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    def set_api_key(self, api_key: Optional[str]) -> None:
        self.api.api_key = api_key

    def new_client(self) -> WorkfrontClient:
        """Fresh client on the shared pool carrying the current API key."""
        client = WorkfrontClient(
            config=self.config,
            http=self.http,
            metadata_cache=self.metadata_cache,
            logger=self.log,
        )
        client.api_key = self.api.api_key
        return client

    async def login(self, email: str, wait_delay: Optional[float] = None) -> LoginSession:
        return await self.sessions.login(email, wait_delay=wait_delay)

    async def logout(self, session: LoginSession) -> None:
        await self.sessions.logout(session)

    async def run_with_session(
        self, email: str, work: UnitOfWork[T], session: LoginSession
    ) -> T:
        return await self.sessions.run_with_session(email, work, session)

    async def run_as_user(
        self,
        email: str,
        work: UnitOfWork[T],
        *,
        sessions: Optional[SessionStore] = None,
    ) -> T:
        return await self.sessions.run_as_user(email, work, sessions=sessions)


__all__ = ["Workfront"]
