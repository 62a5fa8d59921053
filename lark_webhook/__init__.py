"""Lark webhook: render a JSON message template and post it to a Lark bot."""

from __future__ import annotations

from .client import LarkWebhookClient, WebhookResponse, send_lark_webhook
from .errors import (
    HttpStatusError,
    InputError,
    LarkWebhookError,
    SigningPreconditionError,
    TemplateRenderError,
    TransportError,
)
from .signing import augment, generate_signature
from .templating import BuildResult, build_body_from_template, render, validate
from .variables import parse_variables

__all__ = [
    "BuildResult",
    "HttpStatusError",
    "InputError",
    "LarkWebhookClient",
    "LarkWebhookError",
    "SigningPreconditionError",
    "TemplateRenderError",
    "TransportError",
    "WebhookResponse",
    "augment",
    "build_body_from_template",
    "generate_signature",
    "parse_variables",
    "render",
    "send_lark_webhook",
    "validate",
]
