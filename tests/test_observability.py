import logging

import httpx
import pytest
import respx
from workfront_client.core.client import WorkfrontClient
from workfront_client.core.config import ConnectionConfig
from workfront_client.core.errors import WorkfrontClientError
from workfront_client.core.logging import LogfmtFormatter, setup_logging
from workfront_client.core.observability import log_event


def test_log_event_puts_fields_in_extra(caplog):
    caplog.set_level(logging.INFO, logger="workfront_client.observability")

    log_event("wf_login", user="jane@example.com", user_id="u1")

    record = next(r for r in caplog.records if r.getMessage() == "wf_login")
    assert record.event == "wf_login"
    assert record.user == "jane@example.com"
    assert record.user_id == "u1"


def test_log_event_drops_reserved_keys(caplog):
    caplog.set_level(logging.WARNING, logger="workfront_client.observability")

    log_event("wf_logout_failed", level=logging.WARNING, name="clash", user="x")

    record = next(r for r in caplog.records if r.getMessage() == "wf_logout_failed")
    assert record.levelno == logging.WARNING
    assert record.name == "workfront_client.observability"
    assert record.user == "x"


def test_logfmt_formatter_renders_known_fields():
    record = logging.LogRecord(
        "workfront_client.client", logging.INFO, __file__, 1, "wf_call", None, None
    )
    record.method = "GET"
    record.path = "/attask/api/v7.0/PROJ/1"
    record.status = 200
    record.error_type = None

    line = LogfmtFormatter().format(record)

    assert line.startswith("level=info logger=workfront_client.client event=wf_call")
    assert "method=GET" in line
    assert "status=200" in line
    assert "error_type" not in line


def test_logfmt_formatter_renders_request_descriptor():
    record = logging.LogRecord(
        "workfront_client.client", logging.DEBUG, __file__, 1, "wf.request", None, None
    )
    record.method = "POST"
    record.headers = {"sessionID": "s1"}
    record.body = "name=x"

    line = LogfmtFormatter().format(record)

    assert "headers=\"{'sessionID': 's1'}\"" in line
    assert "body=\"name=x\"" in line


def test_setup_logging_is_idempotent():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        setup_logging("debug")
        setup_logging("debug")
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, LogfmtFormatter)
        assert root.level == logging.DEBUG
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


@pytest.mark.asyncio
@respx.mock
async def test_wf_call_logged_on_exception(caplog):
    caplog.set_level(logging.INFO, logger="workfront_client.observability")
    respx.get(host="wf.example.com", path="/attask/api/v7.0/PROJ/1").mock(
        side_effect=httpx.ConnectTimeout("boom")
    )
    client = WorkfrontClient(config=ConnectionConfig(url="https://wf.example.com"))
    with pytest.raises(WorkfrontClientError):
        await client.get("PROJ", "1")
    await client.aclose()

    record = next(r for r in caplog.records if r.getMessage() == "wf_call")
    assert record.status == "exception"
    assert record.error_type == "ConnectTimeout"
    assert record.path == "/attask/api/v7.0/PROJ/1"


@pytest.mark.asyncio
@respx.mock
async def test_response_is_logged_at_debug(caplog):
    caplog.set_level(logging.DEBUG, logger="workfront_client.client")
    respx.get(host="wf.example.com", path="/attask/api/v7.0/PROJ/1").mock(
        return_value=httpx.Response(200, json={"data": {"ID": "1"}})
    )
    client = WorkfrontClient(config=ConnectionConfig(url="https://wf.example.com"))
    async with client:
        await client.get("PROJ", "1")

    record = next(r for r in caplog.records if r.getMessage() == "wf.response")
    assert record.status == 200
    assert '"ID": "1"' in record.body or '"ID":"1"' in record.body
