import logging
import sys

import httpx
import pytest
import respx
from simplyrestful_client import SimplyRESTfulClient
from simplyrestful_client.core.logging import PACKAGE_LOGGER, LogfmtFormatter, setup_logging
from simplyrestful_client.core.observability import log_event
from simplyrestful_client.errors import (
    SimplyRESTfulError,
    TransportError,
    WebApplicationError,
    from_status,
)

MEDIA_TYPE = "application/x.testresource-v1+json"
OBSERVABILITY_LOGGER = "simplyrestful_client.observability"


def _client(**kwargs) -> SimplyRESTfulClient:
    client = SimplyRESTfulClient("https://example.com/", MEDIA_TYPE, **kwargs)
    client.set_resource_uri_template("https://example.com/things/{id}")
    return client


@pytest.mark.asyncio
@respx.mock
async def test_client_logs_success(caplog):
    caplog.set_level(logging.INFO, logger=OBSERVABILITY_LOGGER)
    route = respx.get("https://example.com/things/1").mock(
        return_value=httpx.Response(200, json={"ok": True})
    )
    client = _client(request_id="rid-success")
    try:
        await client.read("https://example.com/things/1")
    finally:
        await client.aclose()

    assert route.called
    record = next(r for r in caplog.records if r.getMessage() == "op_call")
    assert record.request_id == "rid-success"
    assert record.operation == "read"
    assert record.method == "GET"
    assert record.status == 200
    assert record.endpoint == "https://example.com/things/1"
    assert record.duration_ms >= 0


@pytest.mark.asyncio
@respx.mock
async def test_client_logs_exception(caplog):
    caplog.set_level(logging.INFO, logger=OBSERVABILITY_LOGGER)
    respx.delete("https://example.com/things/2").mock(
        side_effect=httpx.ConnectTimeout("boom")
    )
    client = _client(request_id="rid-fail")
    with pytest.raises(TransportError):
        await client.delete_with_uuid("2")
    await client.aclose()

    record = next(r for r in caplog.records if r.getMessage() == "op_call")
    assert record.request_id == "rid-fail"
    assert record.operation == "delete"
    assert record.status == "exception"
    assert record.error_type == "ConnectTimeout"


@pytest.mark.asyncio
@respx.mock
async def test_discovery_logs_resolved_template(caplog):
    caplog.set_level(logging.INFO, logger=OBSERVABILITY_LOGGER)
    respx.get("https://example.com/").mock(
        return_value=httpx.Response(
            200, json={"describedBy": {"href": "https://example.com/openapi.json"}}
        )
    )
    respx.get("https://example.com/openapi.json").mock(
        return_value=httpx.Response(
            200,
            json={
                "paths": {
                    "/things/{id}": {
                        "get": {"responses": {"200": {"content": {MEDIA_TYPE: {}}}}}
                    }
                }
            },
        )
    )

    async with SimplyRESTfulClient("https://example.com/", MEDIA_TYPE) as client:
        await client.discover_api()

    record = next(r for r in caplog.records if r.getMessage() == "api_discovered")
    assert record.uri_template == "https://example.com/things/{id}"
    assert record.media_type == MEDIA_TYPE


def test_log_event_drops_reserved_keys(caplog):
    caplog.set_level(logging.INFO, logger=OBSERVABILITY_LOGGER)
    log_event("custom", name="clash", operation="list")

    record = next(r for r in caplog.records if r.getMessage() == "custom")
    assert record.operation == "list"
    assert record.name == OBSERVABILITY_LOGGER


def test_logfmt_formatter_renders_extra_fields():
    record = logging.LogRecord(
        "simplyrestful_client.observability",
        logging.INFO,
        __file__,
        1,
        "op_call",
        None,
        None,
    )
    record.operation = "list"
    record.endpoint = "/things/?query=a b"
    record.status = 200

    line = LogfmtFormatter().format(record)
    assert line.startswith("level=info logger=simplyrestful_client.observability")
    assert "event=op_call" in line
    assert "operation=list" in line
    assert 'endpoint="/things/?query=a b"' in line
    assert "status=200" in line


def _record(msg="op_call", exc_info=None):
    return logging.LogRecord(
        "simplyrestful_client.client", logging.ERROR, __file__, 1, msg, None, exc_info
    )


def test_logfmt_formatter_adds_api_error_status_and_reason():
    try:
        raise from_status(404, cause=SimplyRESTfulError("gone"))
    except WebApplicationError:
        record = _record("read failed", exc_info=sys.exc_info())

    line = LogfmtFormatter().format(record)
    assert 'event="read failed"' in line
    assert "exc_type=NotFoundError" in line
    assert "status=404" in line
    assert 'reason="Not Found"' in line


def test_logfmt_formatter_prefers_record_status_over_error_status():
    try:
        raise from_status(500)
    except WebApplicationError:
        record = _record(exc_info=sys.exc_info())
    record.status = "exception"

    line = LogfmtFormatter().format(record)
    assert "status=exception" in line
    assert "status=500" not in line


def test_logfmt_formatter_escapes_multiline_values():
    record = _record()
    record.endpoint = "line one\nline two"

    line = LogfmtFormatter().format(record)
    assert "\n" not in line
    assert 'endpoint="line one\\nline two"' in line


def test_setup_logging_configures_package_logger_only():
    root = logging.getLogger()
    package = logging.getLogger(PACKAGE_LOGGER)
    root_handlers = list(root.handlers)
    saved = list(package.handlers), package.level, package.propagate
    try:
        setup_logging("debug")
        setup_logging("debug")
        assert len(package.handlers) == 1
        assert isinstance(package.handlers[0].formatter, LogfmtFormatter)
        assert package.level == logging.DEBUG
        assert package.propagate is False
        assert root.handlers == root_handlers
    finally:
        for h in list(package.handlers):
            package.removeHandler(h)
        for h in saved[0]:
            package.addHandler(h)
        package.setLevel(saved[1])
        package.propagate = saved[2]
