"""Workflow command and output-file helpers for GitHub Actions steps."""

from __future__ import annotations

import json
import os
import sys
import uuid
from typing import Any, Mapping, TextIO


def to_command_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value)


def escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class ActionsIO:
    """Report results of a step to the Actions runner.

    Outputs are appended to the file named by ``$GITHUB_OUTPUT``; outside a
    runner the legacy ``::set-output`` command is printed instead.
    """

    def __init__(self, *, environ: Mapping[str, str] | None = None, stream: TextIO | None = None) -> None:
        self._environ = os.environ if environ is None else environ
        self._stream = stream
        self.exit_code = 0
        self.outputs: dict[str, str] = {}

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdout

    def _issue(self, command: str, message: str) -> None:
        print(f"::{command}::{escape_data(message)}", file=self.stream, flush=True)

    def info(self, message: str) -> None:
        print(message, file=self.stream, flush=True)

    def debug(self, message: str) -> None:
        self._issue("debug", message)

    def error(self, message: str) -> None:
        self._issue("error", message)

    def set_output(self, name: str, value: Any) -> None:
        text = to_command_value(value)
        self.outputs[name] = text
        output_path = self._environ.get("GITHUB_OUTPUT")
        if not output_path:
            print(f"::set-output name={name}::{escape_data(text)}", file=self.stream, flush=True)
            return

        delimiter = f"ghadelimiter_{uuid.uuid4()}"
        if delimiter in name or delimiter in text:
            raise ValueError(f"Unexpected input: value should not contain the delimiter {delimiter!r}")
        with open(output_path, "a", encoding="utf-8") as handle:
            handle.write(f"{name}<<{delimiter}\n{text}\n{delimiter}\n")

    def set_failed(self, message: str) -> None:
        """Mark the step failed; the process should exit with ``exit_code``."""

        self.exit_code = 1
        self.error(message)
