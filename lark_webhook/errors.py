"""Exception hierarchy for the webhook action.

Every fatal condition is raised as a subclass of :class:`LarkWebhookError` so
the action runner can turn it into a single failure message.
"""

from __future__ import annotations


class LarkWebhookError(Exception):
    """Base class for errors that fail the action run."""


class InputError(LarkWebhookError):
    """A required action input is missing or an input has an invalid value."""


class TemplateRenderError(LarkWebhookError):
    """The message template did not render to valid JSON."""

    def __init__(self, message: str, *, content: str | None = None) -> None:
        super().__init__(message)
        self.content = content


class SigningPreconditionError(LarkWebhookError):
    """Signing was requested for a body that is not a JSON object."""


class TransportError(LarkWebhookError):
    """The webhook request did not complete (network failure or timeout)."""


class HttpStatusError(LarkWebhookError):
    """The webhook answered with a non-2xx status."""

    def __init__(self, status: int, text: str) -> None:
        super().__init__(f"Lark webhook failed with status {status}: {text}")
        self.status = status
        self.text = text
