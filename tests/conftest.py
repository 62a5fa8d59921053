from __future__ import annotations

import os

import pytest


@pytest.fixture(autouse=True)
def clean_action_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep INPUT_* and GITHUB_OUTPUT from the outer environment out of tests."""

    for name in list(os.environ):
        if name.upper().startswith("INPUT_") or name == "GITHUB_OUTPUT":
            monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def required_inputs(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INPUT_WEBHOOK_URL", "https://open.example.test/hook/abc")
    monkeypatch.setenv("INPUT_MESSAGE_TEMPLATE", '{"msg_type":"text","content":{"text":"Hello {{jstr who}}"}}')
