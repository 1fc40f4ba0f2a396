"""Tests for structured JSON logging and the default trace hook."""

import json
import logging
from unittest.mock import patch

from beanstalk_provider.logger import JsonFormatter, get_logger
from beanstalk_provider.transport import TraceEvent, log_trace


def test_formatter_lifts_extra_fields():
    record = logging.LogRecord("BeanstalkProvider", logging.INFO, __file__, 1, "hello", None, None)
    record.component = "transport"
    record.body = b"raw-bytes"

    data = json.loads(JsonFormatter().format(record))

    assert data["message"] == "hello"
    assert data["level"] == "INFO"
    assert data["component"] == "transport"
    assert data["body"] == "b'raw-bytes'"


def test_component_logger_passes_resource_id():
    log = get_logger("repository")
    with patch.object(log.logger, "info") as info:
        log.info("Created repository", resource_id="42", name="demo")

    info.assert_called_once_with(
        "Created repository",
        extra={"component": "repository", "resource_id": "42", "name": "demo"},
    )


def test_log_trace_decodes_body():
    with patch("beanstalk_provider.transport.log") as log:
        log_trace(TraceEvent("response", "GET", "https://x/api/a.json", body=b'{"a": 1}', status=200))

    _, kwargs = log.debug.call_args
    assert kwargs["body"] == '{"a": 1}'
    assert kwargs["status"] == 200
    assert kwargs["url"] == "https://x/api/a.json"


def test_log_trace_masks_credentials():
    body = json.dumps({"integration": {
        "type": "JiraIntegration",
        "service_login": "bot",
        "service_password": "hunter2",
        "service_url": "https://jira.example.com",
    }}).encode("utf-8")

    with patch("beanstalk_provider.transport.log") as log:
        log_trace(TraceEvent("request", "POST", "https://x/api/a.json", body=body))

    traced = log.debug.call_args.kwargs["body"]
    assert "hunter2" not in traced
    assert "bot" not in traced
    assert json.loads(traced)["integration"]["service_url"] == "https://jira.example.com"


def test_log_trace_keeps_non_json_body():
    with patch("beanstalk_provider.transport.log") as log:
        log_trace(TraceEvent("response", "GET", "https://x/api/a.json", body=b"<html>", status=500))

    assert log.debug.call_args.kwargs["body"] == "<html>"


def test_formatter_skips_record_internals():
    record = logging.LogRecord("BeanstalkProvider", logging.INFO, __file__, 1, "hi", None, None)

    data = json.loads(JsonFormatter().format(record))

    assert set(data) == {"timestamp", "level", "message", "module"}
