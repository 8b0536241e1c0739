import json
import logging
import mimetypes
import os
import time
from typing import (
    IO,
    Any,
    Awaitable,
    Dict,
    Mapping,
    Optional,
    Sequence,
    Union,
)

import httpx
from pydantic import ValidationError

from .config import ConnectionConfig
from .decoder import decode_response
from .errors import (
    SessionRequiredError,
    WorkfrontClientError,
    WorkfrontDownloadError,
    WorkfrontModelValidationError,
    WorkfrontUploadError,
)
from .metadata import MetadataCache
from .models import LoginSession, UploadHandle
from .observability import log_event
from .request import (
    DELETE,
    GET,
    POST,
    PUT,
    Fields,
    PendingRequest,
    as_id_list,
    build_request,
)
from .timeouts import TimeoutGuard

SESSION_HEADER = "sessionID"
API_KEY_PARAM = "apiKey"
UPLOAD_FIELD = "uploadedFile"

UploadContent = Union[bytes, IO[bytes]]


class WorkfrontClient:
    """
    One client instance: a request template (headers) plus a default
    parameter bag (API key) on top of a shared httpx connection pool.

    Instances are cheap and meant to be created per logical operation.
    Logging in mutates the session header, so an instance must not be
    shared between concurrent "as user" calls; the pool can be.
    """

    def __init__(
        self,
        *,
        config: ConnectionConfig,
        http: Optional[httpx.AsyncClient] = None,
        metadata_cache: Optional[MetadataCache] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config
        self.base_path = config.base_path
        self.always_use_get = config.always_use_get
        self.timeout_ms = config.timeout_ms
        self.metadata_cache = (
            metadata_cache if metadata_cache is not None else MetadataCache()
        )
        self.log = logger or logging.getLogger("workfront_client.client")

        self.headers: Dict[str, str] = {}
        self.params: Dict[str, Any] = {}
        if config.api_key:
            self.params[API_KEY_PARAM] = config.api_key

        self._owns_http = http is None
        self.http = http or httpx.AsyncClient(base_url=config.url)

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    async def __aenter__(self) -> "WorkfrontClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    # --- Identity -------------------------------------------------------- #

    @property
    def api_key(self) -> Optional[str]:
        return self.params.get(API_KEY_PARAM)

    @api_key.setter
    def api_key(self, value: Optional[str]) -> None:
        if value:
            self.params[API_KEY_PARAM] = value
        else:
            self.params.pop(API_KEY_PARAM, None)

    @property
    def session_id(self) -> Optional[str]:
        return self.headers.get(SESSION_HEADER)

    @session_id.setter
    def session_id(self, value: Optional[str]) -> None:
        if value:
            self.headers[SESSION_HEADER] = value
        else:
            self.headers.pop(SESSION_HEADER, None)

    # --- Core request ---------------------------------------------------- #

    def build(
        self,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        fields: Fields = None,
        method: str = GET,
    ) -> PendingRequest:
        return build_request(
            base_path=self.base_path,
            path=path,
            params=params,
            fields=fields,
            method=method,
            default_params=self.params,
            headers=self.headers,
            always_use_get=self.always_use_get,
        )

    async def request(
        self,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        fields: Fields = None,
        method: str = GET,
    ) -> Any:
        """
        Core request method.
        - Raises WorkfrontTransportError on connect/socket timeouts and other transport errors
        - Raises WorkfrontParseError (raw text) if the body isn't JSON
        - Raises WorkfrontAPIError / WorkfrontStatusError on error envelopes or non-200
        - Returns the envelope's `data` on success
        """
        pending = self.build(path, params, fields, method)
        request = self.http.build_request(
            pending.method, pending.path, headers=pending.headers, content=pending.body
        )
        return await self._dispatch(request, method=method, path=pending.path)

    async def _dispatch(self, request: httpx.Request, *, method: str, path: str) -> Any:
        guard = TimeoutGuard.apply_to_request(request, self.timeout_ms)
        start = time.perf_counter()
        status: Any = "exception"
        try:
            response = await self.http.send(request, stream=True)
            status = response.status_code
            try:
                data = await decode_response(response)
            finally:
                await response.aclose()
        except httpx.TransportError as exc:
            self._log_call(method, path, status, start, exc)
            raise guard.fail(exc) from exc
        except WorkfrontClientError as exc:
            self._log_call(method, path, status, start, exc)
            raise
        finally:
            guard.clear()
        self._log_call(method, path, status, start)
        return data

    def _log_call(
        self,
        method: str,
        path: str,
        status: Any,
        start: float,
        exc: Optional[BaseException] = None,
    ) -> None:
        fields: Dict[str, Any] = {
            "method": method,
            "path": path.split("?", 1)[0],
            "status": status,
            "duration_ms": int((time.perf_counter() - start) * 1000),
        }
        if exc is not None:
            fields["error_type"] = type(exc).__name__
        log_event("wf_call", **fields)

    # --- Session --------------------------------------------------------- #

    async def login(self, username: str, password: Optional[str] = None) -> LoginSession:
        """
        Log in as `username`. The password is optional: with an API key in the
        parameter bag the server issues a session for any user.
        """
        self.log.debug("wf.login", extra={"user": username})
        params: Dict[str, Any] = {"username": username}
        if password:
            params["password"] = password
        if self.api_key:
            params[API_KEY_PARAM] = self.api_key

        data = await self.request("login", params, None, POST)
        try:
            session = LoginSession.model_validate(data)
        except ValidationError as exc:
            raise WorkfrontModelValidationError(
                f"Login response did not contain a session: {exc}"
            ) from exc
        self.session_id = session.session_id
        return session

    async def logout(self) -> Any:
        result = await self.request("logout", None, None, GET)
        self.session_id = None
        return result

    async def get_api_key(self, username: str, password: str) -> str:
        data = await self.request(
            "user",
            {"action": "getApiKey", "username": username, "password": password},
            None,
            PUT,
        )
        key = data.get("result") if isinstance(data, dict) else None
        self.api_key = key
        return key

    async def clear_api_key(self) -> Any:
        return await self.request("user", {"action": "clearApiKey"}, None, PUT)

    # --- CRUD ------------------------------------------------------------ #

    async def create(
        self,
        obj_code: str,
        params: Mapping[str, Any],
        fields: Fields = None,
        *,
        as_updates: bool = False,
    ) -> Any:
        """Create an object. `as_updates` sends the fields JSON-encoded in one `updates` parameter."""
        if as_updates:
            params = {"updates": json.dumps(dict(params))}
        return await self.request(obj_code, params, fields, POST)

    async def edit(
        self,
        obj_code: str,
        obj_id: str,
        updates: Mapping[str, Any],
        fields: Fields = None,
    ) -> Any:
        params = {"updates": json.dumps(dict(updates))}
        return await self.request(f"{obj_code}/{obj_id}", params, fields, PUT)

    async def copy(
        self,
        obj_code: str,
        obj_id: str,
        updates: Optional[Mapping[str, Any]] = None,
        fields: Fields = None,
    ) -> Any:
        params: Dict[str, Any] = {"copySourceID": obj_id}
        if updates:
            params["updates"] = json.dumps(dict(updates))
        return await self.request(obj_code, params, fields, POST)

    async def get(
        self,
        obj_code: str,
        obj_ids: Union[str, Sequence[str]],
        fields: Fields = None,
    ) -> Any:
        ids = as_id_list(obj_ids)
        params: Optional[Dict[str, Any]] = None
        if len(ids) == 1:
            endpoint = ids[0] if ids[0].startswith("/") else f"{obj_code}/{ids[0]}"
        else:
            endpoint = obj_code
            params = {"id": ids}
        return await self.request(endpoint, params, fields, GET)

    async def search(
        self,
        obj_code: str,
        query: Optional[Mapping[str, Any]] = None,
        fields: Fields = None,
    ) -> Any:
        return await self.request(f"{obj_code}/search", query, fields, GET)

    async def count(self, obj_code: str, query: Optional[Mapping[str, Any]] = None) -> int:
        data = await self.request(f"{obj_code}/count", query, None, GET)
        return int(data["count"]) if isinstance(data, dict) else int(data or 0)

    async def execute(
        self,
        obj_code: str,
        obj_id: Optional[str],
        action: str,
        action_args: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        args = dict(action_args or {})
        if obj_id:
            endpoint = f"{obj_code}/{obj_id}/{action}"
        else:
            endpoint = obj_code
            args["action"] = action
        return await self.request(endpoint, args, None, PUT)

    async def named_query(
        self,
        obj_code: str,
        query: str,
        query_args: Optional[Mapping[str, Any]] = None,
        fields: Fields = None,
    ) -> Any:
        return await self.request(f"{obj_code}/{query}", query_args, fields, GET)

    async def report(self, obj_code: str, query: Mapping[str, Any]) -> Any:
        return await self.request(f"{obj_code}/report", query, None, GET)

    async def remove(self, obj_code: str, obj_id: str, force: bool = False) -> Any:
        params = {"force": True} if force else None
        return await self.request(f"{obj_code}/{obj_id}", params, None, DELETE)

    async def share(
        self, obj_code: str, obj_id: str, user_id: str, core_action: str
    ) -> Any:
        """Give a user `core_action` (VIEW, LIMITED_EDIT, DELETE, ...) on an object."""
        params = {
            "accessorID": user_id,
            "accessorObjCode": "USER",
            "coreAction": core_action,
        }
        return await self.request(f"{obj_code}/{obj_id}/share", params, [], PUT)

    async def metadata(self, obj_code: Optional[str] = None, use_cache: bool = False) -> Any:
        if use_cache:
            cached = self.metadata_cache.get(obj_code)
            if cached is not None:
                return cached
        endpoint = f"{obj_code}/metadata" if obj_code else "/metadata"
        data = await self.request(endpoint, None, [], GET)
        self.metadata_cache.set(obj_code, data)
        return data

    # --- Binary transfer ------------------------------------------------- #

    async def upload(
        self,
        content: UploadContent,
        *,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> UploadHandle:
        """
        Upload binary content as multipart/form-data and return its handle.
        - Always POST, also in always-GET mode.
        - The server rejects chunked uploads, so the exact length must be
          known up front; otherwise WorkfrontUploadError before sending.
        """
        if filename is None:
            name = getattr(content, "name", None)
            filename = os.path.basename(name) if isinstance(name, str) else "file"
        ctype = (
            content_type or mimetypes.guess_type(filename)[0] or "application/octet-stream"
        )

        params: Dict[str, Any] = {}
        if self.api_key:
            params[API_KEY_PARAM] = self.api_key
        headers: Dict[str, str] = {}
        if self.session_id:
            headers[SESSION_HEADER] = self.session_id

        path = f"{self.base_path}/upload"
        try:
            request = self.http.build_request(
                POST,
                path,
                params=params or None,
                headers=headers,
                files={UPLOAD_FIELD: (filename, content, ctype)},
            )
        except (OSError, ValueError, TypeError) as exc:
            raise WorkfrontUploadError(f"Unable to read upload content: {exc}") from exc

        if "Content-Length" not in request.headers:
            raise WorkfrontUploadError(
                "Unable to compute multipart content length; "
                "provide bytes or a seekable file."
            )
        self.log.debug(
            "wf.upload",
            extra={
                "path": path,
                "file_name": filename,
                "content_length": request.headers["Content-Length"],
            },
        )

        data = await self._dispatch(request, method=POST, path=path)
        try:
            return UploadHandle.model_validate(data)
        except ValidationError as exc:
            raise WorkfrontModelValidationError(
                f"Upload response did not contain a handle: {exc}"
            ) from exc

    def download(self, download_url: str, output: IO[bytes]) -> Awaitable[None]:
        """
        Stream a document into `output`, following redirects.

        Needs a logged-in session (the API key alone is not accepted for
        downloads); without one SessionRequiredError is raised right here,
        before anything is awaited.
        """
        session_id = self.session_id
        if not session_id:
            raise SessionRequiredError("Session ID is missing!")
        return self._download(download_url, output, session_id)

    async def _download(self, download_url: str, output: IO[bytes], session_id: str) -> None:
        request = self.http.build_request(
            GET, download_url, headers={SESSION_HEADER: session_id}
        )
        guard = TimeoutGuard.apply_to_request(request, self.timeout_ms)
        self.log.debug("wf.download", extra={"path": download_url})
        start = time.perf_counter()
        try:
            response = await self.http.send(request, stream=True, follow_redirects=True)
            try:
                if response.status_code != 200:
                    raise WorkfrontDownloadError(
                        status_code=response.status_code,
                        reason=response.reason_phrase,
                    )
                async for chunk in response.aiter_bytes():
                    output.write(chunk)
                flush = getattr(output, "flush", None)
                if callable(flush):
                    flush()
            finally:
                await response.aclose()
        except httpx.TransportError as exc:
            self._log_call(GET, download_url, "exception", start, exc)
            raise guard.fail(exc) from exc
        finally:
            guard.clear()
        self._log_call(GET, download_url, 200, start)


__all__ = [
    "WorkfrontClient",
    "SESSION_HEADER",
    "API_KEY_PARAM",
    "UPLOAD_FIELD",
]
