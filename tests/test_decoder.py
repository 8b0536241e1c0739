import gzip
import json
import zlib

import httpx
import pytest
from workfront_client.core.decoder import classify, decode_response
from workfront_client.core.errors import (
    WorkfrontAPIError,
    WorkfrontParseError,
    WorkfrontStatusError,
    WorkfrontStreamError,
)


def _response(status: int, raw: bytes, encoding: str | None = None) -> httpx.Response:
    headers = {"Content-Encoding": encoding} if encoding else {}
    return httpx.Response(status, headers=headers, stream=httpx.ByteStream(raw))


@pytest.mark.asyncio
async def test_success_resolves_to_data():
    body = json.dumps({"data": {"ID": "123", "name": "x"}}).encode()
    assert await decode_response(_response(200, body)) == {"ID": "123", "name": "x"}


@pytest.mark.asyncio
async def test_gzip_body_is_inflated():
    body = gzip.compress(b'{"data":{"ID":"123"}}')
    assert await decode_response(_response(200, body, "gzip")) == {"ID": "123"}


@pytest.mark.asyncio
async def test_deflate_body_is_inflated():
    body = zlib.compress(b'{"data":[1,2]}')
    assert await decode_response(_response(200, body, "deflate")) == [1, 2]


@pytest.mark.asyncio
async def test_corrupt_gzip_raises_stream_error():
    with pytest.raises(WorkfrontStreamError):
        await decode_response(_response(200, b"not gzip at all", "gzip"))


@pytest.mark.asyncio
async def test_error_envelope_with_200_rejects_with_full_body():
    payload = {"error": "boom", "class": "X"}
    with pytest.raises(WorkfrontAPIError) as exc:
        await decode_response(_response(200, json.dumps(payload).encode()))

    assert exc.value.payload == payload
    assert exc.value.status_code == 200
    assert exc.value.error_class == "X"
    assert exc.value.error_message == "boom"


@pytest.mark.asyncio
async def test_non_200_without_error_is_rejected():
    with pytest.raises(WorkfrontStatusError) as exc:
        await decode_response(_response(501, b'{"data":{}}'))

    assert exc.value.status_code == 501
    assert exc.value.payload == {"data": {}}


@pytest.mark.asyncio
async def test_non_json_rejects_with_raw_text():
    with pytest.raises(WorkfrontParseError) as exc:
        await decode_response(_response(502, b"<html>Bad Gateway</html>"))

    # Raw text, unlike the structured payload on WorkfrontAPIError.
    assert str(exc.value) == "<html>Bad Gateway</html>"
    assert exc.value.body == "<html>Bad Gateway</html>"
    assert not hasattr(exc.value, "payload")


def test_nested_error_fields_are_exposed():
    payload = {
        "error": {
            "class": "com.attask.common.AuthenticationException",
            "message": "You are not currently logged in",
        }
    }
    with pytest.raises(WorkfrontAPIError) as exc:
        classify(401, json.dumps(payload))

    assert exc.value.error_class == "com.attask.common.AuthenticationException"
    assert exc.value.error_message == "You are not currently logged in"


def test_success_without_data_key_is_none():
    assert classify(200, '{"other": 1}') is None
    assert classify(200, "[1, 2]") is None
