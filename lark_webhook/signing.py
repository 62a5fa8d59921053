"""Lark/Feishu custom bot request signing.

The bot verifies ``sign`` by computing HMAC-SHA256 with the key
``f"{timestamp}\\n{secret}"`` over an empty message and comparing the base64
digest. ``timestamp`` must be sent as a string of Unix seconds and both fields
sit at the top level of the JSON body.
"""

from __future__ import annotations

import base64
import hashlib
import hmac

from lark_webhook.errors import SigningPreconditionError
from lark_webhook.variables import JSONValue


def is_secret_set(secret: str | None) -> bool:
    return bool(secret and secret.strip())


def generate_signature(secret: str, timestamp: int) -> str:
    """Return the base64 ``sign`` value for ``secret`` at ``timestamp``."""

    key = f"{timestamp}\n{secret}".encode("utf-8")
    digest = hmac.new(key, b"", hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def ensure_signable(body: JSONValue) -> dict:
    """Raise unless ``body`` is a JSON object that can carry signing fields."""

    if not isinstance(body, dict):
        raise SigningPreconditionError(
            "Signing requires the message_template to be a JSON object to add timestamp and sign fields."
        )
    return body


def augment(body: JSONValue, secret: str | None, now_seconds: int) -> JSONValue:
    """Return ``body`` with ``timestamp`` and ``sign`` added when a secret is set.

    Without a secret the body is returned untouched. The input mapping is not
    modified; injected fields replace any fields of the same name.
    """

    if not is_secret_set(secret):
        return body
    signable = ensure_signable(body)
    return {
        **signable,
        "timestamp": str(now_seconds),
        "sign": generate_signature(secret, now_seconds),
    }
