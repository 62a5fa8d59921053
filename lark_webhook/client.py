"""HTTP client for posting messages to a Lark custom bot webhook."""

from __future__ import annotations

import asyncio
import json
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Callable

import httpx

from lark_webhook.errors import TransportError
from lark_webhook.logging import get_logger
from lark_webhook.signing import augment
from lark_webhook.variables import JSONValue

CONTENT_TYPE = "application/json; charset=utf-8"


@dataclass(slots=True)
class WebhookResponse:
    """Outcome of a webhook request."""

    status: int
    ok: bool
    _response: httpx.Response = field(repr=False)

    def text(self) -> str:
        """Return the response body decoded as text."""

        return self._response.text

    @classmethod
    def from_httpx(cls, response: httpx.Response) -> "WebhookResponse":
        return cls(
            status=response.status_code,
            ok=200 <= response.status_code < 300,
            _response=response,
        )


class LarkWebhookClient:
    """Sign and POST JSON bodies to a webhook URL, one attempt per call.

    An ``httpx.AsyncClient`` may be injected; otherwise ``lifecycle`` opens one
    for the duration of the context.
    """

    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._client = client
        self._clock = clock
        self._logger = get_logger(__name__).bind(component="lark_webhook_client")

    @asynccontextmanager
    async def lifecycle(self) -> AsyncIterator["LarkWebhookClient"]:
        """Ensure an AsyncClient is available for the duration of the context."""

        if self._client is not None:
            yield self
            return

        async with httpx.AsyncClient() as client:
            self._client = client
            try:
                yield self
            finally:
                self._client = None

    async def send(
        self,
        url: str,
        secret: str | None,
        body: JSONValue,
        *,
        timeout_ms: int | None = None,
    ) -> WebhookResponse:
        """Sign ``body`` when ``secret`` is set and POST it to ``url``.

        With a positive ``timeout_ms`` the request is cancelled once that many
        milliseconds pass; cancellation and network failures raise
        :class:`TransportError`.
        """

        if self._client is None:
            raise RuntimeError("LarkWebhookClient.lifecycle must be entered before sending")

        signed_body = augment(body, secret, int(self._clock()))
        payload = json.dumps(signed_body, ensure_ascii=False)
        self._logger.debug("webhook_request", body=payload, timeout_ms=timeout_ms)

        has_deadline = bool(timeout_ms and timeout_ms > 0)
        request_kwargs: dict[str, Any] = {
            "content": payload.encode("utf-8"),
            "headers": {"Content-Type": CONTENT_TYPE},
        }
        if has_deadline:
            # the deadline below bounds the whole request instead
            request_kwargs["timeout"] = None

        request = self._client.post(url, **request_kwargs)
        try:
            if has_deadline:
                response = await asyncio.wait_for(request, timeout=timeout_ms / 1000)
            else:
                response = await request
        except asyncio.TimeoutError as exc:
            raise TransportError(f"Lark webhook request timed out after {timeout_ms} ms") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransportError(f"Lark webhook request failed: {type(exc).__name__}: {exc}") from exc

        self._logger.info("webhook_response", status_code=response.status_code)
        return WebhookResponse.from_httpx(response)


async def send_lark_webhook(
    url: str,
    secret: str | None,
    body: JSONValue,
    *,
    timeout_ms: int | None = None,
    client: httpx.AsyncClient | None = None,
) -> WebhookResponse:
    """Send one webhook message with a short-lived client."""

    webhook_client = LarkWebhookClient(client=client)
    async with webhook_client.lifecycle():
        return await webhook_client.send(url, secret, body, timeout_ms=timeout_ms)
