"""Action inputs, read from the environment the Actions runner provides."""

from __future__ import annotations

import re
from typing import Any, Literal

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from lark_webhook.errors import InputError

DEFAULT_REQUEST_TIMEOUT_MS = "10000"
REQUIRED_INPUTS = ("webhook_url", "message_template")

_TRUE_VALUES = frozenset({"true", "True", "TRUE"})
_FALSE_VALUES = frozenset({"false", "False", "FALSE"})
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class ActionInputs(BaseSettings):
    """Inputs of the action (``INPUT_<NAME>`` environment variables)."""

    model_config = SettingsConfigDict(
        env_prefix="INPUT_",
        case_sensitive=False,
        env_ignore_empty=True,
        extra="ignore",
    )

    webhook_url: str = ""
    message_template: str = ""
    webhook_secret: str | None = None
    variables: str | None = None
    request_timeout_ms: str | None = DEFAULT_REQUEST_TIMEOUT_MS
    dry_run: bool = Field(default=False, description="Render and validate only, do not send")
    fail_on_http_error: bool = Field(default=True, description="Fail the step on non-2xx responses")
    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"

    @field_validator("*", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("dry_run", "fail_on_http_error", mode="before")
    @classmethod
    def _yaml_boolean(cls, value: Any) -> Any:
        """Accept only the YAML 1.2 core schema boolean spellings."""

        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            value = value.strip()
        if value in _TRUE_VALUES:
            return True
        if value in _FALSE_VALUES:
            return False
        raise ValueError("Support boolean input list: `true | True | TRUE | false | False | FALSE`")

    @field_validator("request_timeout_ms")
    @classmethod
    def _default_timeout(cls, value: str | None) -> str:
        return value or DEFAULT_REQUEST_TIMEOUT_MS

    @property
    def timeout_ms(self) -> int | None:
        """Request timeout in milliseconds, ``None`` when unset or unusable."""

        if not self.request_timeout_ms:
            return None
        match = _LEADING_INT.match(self.request_timeout_ms)
        if match is None:
            return None
        value = int(match.group(1))
        return value if value > 0 else None


def _describe(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        name = ".".join(str(part) for part in error["loc"])
        problems.append(f"Invalid value for input {name}: {error['msg']}")
    return "; ".join(problems)


def load_inputs(**overrides: Any) -> ActionInputs:
    """Read and check the action inputs; ``overrides`` win over the environment."""

    try:
        inputs = ActionInputs(**overrides)
    except ValidationError as exc:
        raise InputError(_describe(exc)) from exc

    for name in REQUIRED_INPUTS:
        if not getattr(inputs, name):
            raise InputError(f"Input required and not supplied: {name}")
    return inputs
