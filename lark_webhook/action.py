"""Entry-point for the "send Lark message" action step."""

from __future__ import annotations

import argparse
import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Sequence

import httpx

from lark_webhook.actions_io import ActionsIO
from lark_webhook.client import send_lark_webhook
from lark_webhook.config import ActionInputs, load_inputs
from lark_webhook.errors import HttpStatusError, InputError, LarkWebhookError
from lark_webhook.logging import configure_logging, get_logger, resolve_level
from lark_webhook.signing import ensure_signable, is_secret_set
from lark_webhook.templating import build_body_from_template

DRY_RUN_RESPONSE_TEXT = "dry_run"


@dataclass(frozen=True, slots=True)
class ActionResult:
    """Values reported as the step outputs."""

    ok: bool
    status: int
    response_text: str


def _set_outputs(io: ActionsIO, result: ActionResult) -> None:
    io.set_output("ok", result.ok)
    io.set_output("status", result.status)
    io.set_output("response_text", result.response_text)


async def run(
    inputs: ActionInputs,
    *,
    io: ActionsIO | None = None,
    client: httpx.AsyncClient | None = None,
) -> ActionResult | None:
    """Render, validate and send the message described by ``inputs``.

    Errors are reported through ``io.set_failed`` and ``None`` is returned.
    A non-2xx response still sets the outputs before failing the step.
    """

    io = io or ActionsIO()
    logger = get_logger(__name__).bind(component="action")
    try:
        logger.debug("building_body")
        built = build_body_from_template(inputs.message_template, inputs.variables)

        if inputs.dry_run:
            if is_secret_set(inputs.webhook_secret):
                ensure_signable(built.body)
            io.info("[dry_run] Skipping webhook call. Interpolated JSON:")
            io.info(built.interpolated)
            result = ActionResult(ok=True, status=0, response_text=DRY_RUN_RESPONSE_TEXT)
            _set_outputs(io, result)
            return result

        logger.debug("sending_webhook", timeout_ms=inputs.timeout_ms)
        response = await send_lark_webhook(
            inputs.webhook_url,
            inputs.webhook_secret,
            built.body,
            timeout_ms=inputs.timeout_ms,
            client=client,
        )
        result = ActionResult(ok=response.ok, status=response.status, response_text=response.text())
        _set_outputs(io, result)

        if not result.ok and inputs.fail_on_http_error:
            raise HttpStatusError(result.status, result.response_text)
        return result
    except LarkWebhookError as exc:
        logger.error("action_failed", error_type=type(exc).__name__, error=str(exc))
        io.set_failed(str(exc))
        return None


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lark-webhook",
        description="Render a JSON message template and post it to a Lark webhook. "
        "Inputs are read from INPUT_* environment variables.",
    )
    parser.add_argument("--dry-run", action="store_true", help="Render and validate only, do not send")
    parser.add_argument("--template-file", type=Path, help="Read message_template from this file")
    parser.add_argument("--variables-file", type=Path, help="Read variables from this file")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    io = ActionsIO()

    overrides: dict[str, Any] = {}
    if args.dry_run:
        overrides["dry_run"] = True
    try:
        if args.template_file:
            overrides["message_template"] = args.template_file.read_text(encoding="utf-8")
        if args.variables_file:
            overrides["variables"] = args.variables_file.read_text(encoding="utf-8")
        inputs = load_inputs(**overrides)
    except (InputError, OSError) as exc:
        io.set_failed(str(exc))
        return io.exit_code

    configure_logging(resolve_level(inputs.log_level), log_format=inputs.log_format)
    logger = get_logger(__name__)
    try:
        asyncio.run(run(inputs, io=io))
    except Exception as exc:
        logger.exception("action_crashed")
        io.set_failed(str(exc))
    return io.exit_code
