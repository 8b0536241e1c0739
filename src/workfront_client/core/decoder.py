from __future__ import annotations

import json
import logging
import zlib
from typing import Any, Optional

import httpx

from .errors import (
    WorkfrontAPIError,
    WorkfrontParseError,
    WorkfrontStatusError,
    WorkfrontStreamError,
)

log = logging.getLogger("workfront_client.client")


def _decompressor(content_encoding: str) -> Optional[Any]:
    if content_encoding == "gzip":
        return zlib.decompressobj(16 + zlib.MAX_WBITS)
    if content_encoding == "deflate":
        return zlib.decompressobj()
    return None


async def read_body(response: httpx.Response) -> str:
    """
    Buffer the whole body, inflating gzip/deflate by hand from the raw stream.
    Network errors while reading propagate untouched.
    """
    encoding = response.headers.get("content-encoding", "").strip().lower()
    decoder = _decompressor(encoding)

    chunks: list[bytes] = []
    try:
        async for chunk in response.aiter_raw():
            chunks.append(decoder.decompress(chunk) if decoder else chunk)
        if decoder:
            chunks.append(decoder.flush())
    except zlib.error as exc:
        log.debug("wf.response.stream_error", extra={"status": response.status_code})
        raise WorkfrontStreamError(
            f"Failed to decode {encoding} response body: {exc}"
        ) from exc

    return b"".join(chunks).decode("utf-8", errors="replace")


def classify(status_code: int, body: str) -> Any:
    """
    Map a buffered body onto the envelope convention.
    - not JSON             -> WorkfrontParseError(raw text)
    - has "error"          -> WorkfrontAPIError(full body), whatever the status
    - status != 200        -> WorkfrontStatusError(full body)
    - otherwise            -> body["data"]
    """
    try:
        payload = json.loads(body)
    except ValueError as exc:
        raise WorkfrontParseError(body, status_code=status_code) from exc

    if isinstance(payload, dict) and payload.get("error"):
        raise WorkfrontAPIError(payload, status_code=status_code)
    if status_code != 200:
        raise WorkfrontStatusError(
            payload if isinstance(payload, dict) else {"data": payload},
            status_code=status_code,
        )
    if isinstance(payload, dict):
        return payload.get("data")
    return None


async def decode_response(response: httpx.Response) -> Any:
    body = await read_body(response)
    log.debug(
        "wf.response",
        extra={
            "status": response.status_code,
            "content_encoding": response.headers.get("content-encoding"),
            "body": body,
        },
    )
    return classify(response.status_code, body)


__all__ = ["decode_response", "read_body", "classify"]
