from __future__ import annotations

import io
import json
from typing import Iterator

import pytest
import structlog

from lark_webhook.logging import configure_logging, resolve_level


@pytest.fixture()
def reset_structlog() -> Iterator[None]:
    yield
    structlog.reset_defaults()


@pytest.mark.parametrize(
    ("environ", "expected"),
    [({}, "WARNING"), ({"RUNNER_DEBUG": "1"}, "DEBUG"), ({"RUNNER_DEBUG": "0"}, "WARNING")],
)
def test_resolve_level(environ: dict[str, str], expected: str) -> None:
    assert resolve_level("warning", environ) == expected


@pytest.mark.usefixtures("reset_structlog")
def test_json_format_writes_one_object_per_line() -> None:
    stream = io.StringIO()
    configure_logging("INFO", log_format="json", stream=stream)
    logger = structlog.get_logger("test").bind(component="test")

    logger.debug("hidden")
    logger.info("webhook_response", status_code=200)

    lines = stream.getvalue().splitlines()
    assert len(lines) == 1
    record = json.loads(lines[0])
    assert record["event"] == "webhook_response"
    assert record["status_code"] == 200
    assert record["component"] == "test"
    assert record["level"] == "info"
    assert "timestamp" in record


@pytest.mark.usefixtures("reset_structlog")
def test_console_format_is_plain_text() -> None:
    stream = io.StringIO()
    configure_logging("DEBUG", stream=stream)

    structlog.get_logger("test").debug("building_body", variables=2)

    output = stream.getvalue()
    assert "building_body" in output
    assert "variables=2" in output
    assert "\x1b[" not in output
