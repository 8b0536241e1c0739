"""Turns a logical API call into a concrete request descriptor."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Union
from urllib.parse import urlencode

GET = "GET"
PUT = "PUT"
POST = "POST"
DELETE = "DELETE"

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

Fields = Optional[Union[str, Sequence[str]]]

log = logging.getLogger("workfront_client.client")


@dataclass(frozen=True)
class PendingRequest:
    """One HTTP exchange worth of method, path (with query), headers and body."""

    method: str
    path: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge two mappings into a new dict.

    Nested mappings are merged key by key; any other value in `override`
    replaces the one in `base`.
    """
    result = dict(base)
    for key, value in override.items():
        current = result.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            result[key] = deep_merge(current, value)
        elif isinstance(value, Mapping):
            result[key] = deep_merge({}, value)
        else:
            result[key] = value
    return result


def request_has_body(method: str) -> bool:
    # PUT is query-style for this API, like GET.
    return method not in (GET, PUT)


def normalize_fields(fields: Fields) -> list[str]:
    if not fields:
        return []
    if isinstance(fields, str):
        return [fields]
    return [f for f in fields if f]


def _encode_value(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Mapping):
        return json.dumps(value)
    if isinstance(value, (list, tuple)):
        return [_encode_value(v) for v in value]
    return value


def encode_params(params: Mapping[str, Any]) -> str:
    """Query-string encode params; sequences repeat the key (``id=a&id=b``)."""
    return urlencode(
        [(key, _encode_value(value)) for key, value in params.items()],
        doseq=True,
    )


def build_request(
    *,
    base_path: str,
    path: str,
    params: Any = None,
    fields: Fields = None,
    method: str = GET,
    default_params: Optional[Mapping[str, Any]] = None,
    headers: Optional[Mapping[str, str]] = None,
    always_use_get: bool = False,
) -> PendingRequest:
    """
    Resolve path, parameters and method placement for one API call.

    - `path` starting with "/" is appended to `base_path` verbatim, anything
      else is joined with "/".
    - `default_params` (API key and friends) are deep-merged under the
      explicit `params`; explicit values win on conflicts.
    - In always-GET mode the intended method travels as the `method`
      parameter and the HTTP method is GET.
    - Body-carrying methods send params form-encoded; GET and PUT put
      them in the query string.

    Logs the resolved descriptor at DEBUG. Nothing is redacted.
    """
    method = method.upper()
    if not isinstance(params, Mapping):
        params = {}
    merged = deep_merge(default_params or {}, params)

    http_method = method
    if always_use_get:
        merged["method"] = method
        http_method = GET

    if path.startswith("/"):
        full_path = base_path + path
    else:
        full_path = base_path + "/" + path

    field_list = normalize_fields(fields)
    if field_list:
        merged["fields"] = ",".join(field_list)

    req_headers: Dict[str, str] = dict(headers or {})
    body: Optional[bytes] = None
    encoded = encode_params(merged)
    if encoded:
        if not always_use_get and request_has_body(http_method):
            body = encoded.encode("utf-8")
            req_headers["Content-Type"] = FORM_CONTENT_TYPE
            req_headers["Content-Length"] = str(len(body))
        else:
            full_path += "?" + encoded

    pending = PendingRequest(
        method=http_method, path=full_path, headers=req_headers, body=body
    )
    log.debug(
        "wf.request",
        extra={
            "method": pending.method,
            "path": pending.path,
            "headers": pending.headers,
            "body": encoded if body is not None else None,
        },
    )
    return pending


def as_id_list(obj_ids: Union[str, Iterable[str]]) -> list[str]:
    if isinstance(obj_ids, str):
        return [obj_ids]
    return list(obj_ids)


__all__ = [
    "GET",
    "PUT",
    "POST",
    "DELETE",
    "FORM_CONTENT_TYPE",
    "PendingRequest",
    "build_request",
    "deep_merge",
    "encode_params",
    "normalize_fields",
    "request_has_body",
    "as_id_list",
]
