from __future__ import annotations

import pytest

from lark_webhook.config import load_inputs
from lark_webhook.errors import InputError


@pytest.mark.usefixtures("required_inputs")
def test_defaults() -> None:
    inputs = load_inputs()

    assert inputs.webhook_url == "https://open.example.test/hook/abc"
    assert inputs.webhook_secret is None
    assert inputs.variables is None
    assert inputs.dry_run is False
    assert inputs.fail_on_http_error is True
    assert inputs.timeout_ms == 10000


@pytest.mark.usefixtures("required_inputs")
@pytest.mark.parametrize(
    ("raw", "expected"),
    [("", 10000), ("   ", 10000), ("2500", 2500), (" 1500ms ", 1500), ("abc", None), ("0", None), ("-5", None)],
)
def test_request_timeout_parsing(monkeypatch: pytest.MonkeyPatch, raw: str, expected: int | None) -> None:
    monkeypatch.setenv("INPUT_REQUEST_TIMEOUT_MS", raw)

    assert load_inputs().timeout_ms == expected


@pytest.mark.usefixtures("required_inputs")
@pytest.mark.parametrize(("raw", "expected"), [("true", True), ("TRUE", True), ("False", False)])
def test_boolean_inputs(monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool) -> None:
    monkeypatch.setenv("INPUT_DRY_RUN", raw)
    monkeypatch.setenv("INPUT_FAIL_ON_HTTP_ERROR", raw)

    inputs = load_inputs()

    assert inputs.dry_run is expected
    assert inputs.fail_on_http_error is expected


@pytest.mark.usefixtures("required_inputs")
def test_invalid_boolean_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INPUT_DRY_RUN", "yes")

    with pytest.raises(InputError, match="dry_run"):
        load_inputs()


def test_missing_required_input(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INPUT_MESSAGE_TEMPLATE", "{}")
    monkeypatch.setenv("INPUT_WEBHOOK_URL", "   ")

    with pytest.raises(InputError, match="Input required and not supplied: webhook_url"):
        load_inputs()


@pytest.mark.usefixtures("required_inputs")
def test_overrides_win_over_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INPUT_VARIABLES", "who=env")

    inputs = load_inputs(variables="who=cli", dry_run=True)

    assert inputs.variables == "who=cli"
    assert inputs.dry_run is True


@pytest.mark.usefixtures("required_inputs")
def test_log_format_input(monkeypatch: pytest.MonkeyPatch) -> None:
    assert load_inputs().log_format == "console"

    monkeypatch.setenv("INPUT_LOG_FORMAT", "json")
    assert load_inputs().log_format == "json"

    monkeypatch.setenv("INPUT_LOG_FORMAT", "xml")
    with pytest.raises(InputError, match="log_format"):
        load_inputs()
