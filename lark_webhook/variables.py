"""Parse the ``variables`` action input into a mapping of typed values.

Two input formats are accepted:

* a JSON object, used as-is;
* newline separated ``key=value`` or ``key: value`` lines. Blank lines and
  ``#`` comments are ignored and each value is coerced to the closest JSON
  type (booleans, ``null``, numbers, inline JSON, else the raw string).

Lines that do not look like a key/value pair are skipped rather than
reported.
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Union

from lark_webhook.logging import get_logger

JSONValue = Union[str, int, float, bool, None, List[Any], Dict[str, Any]]
Variables = Dict[str, JSONValue]

_LINE_BREAK = re.compile(r"\r?\n")
_KEY_VALUE = re.compile(r"^(.*?)\s*([=:])\s*(.*)$")
_NUMBER = re.compile(r"^-?\d+(?:\.\d+)?$")

_LOGGER = get_logger(__name__)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Unexpected token {name} in JSON")


def loads_json(text: str) -> JSONValue:
    """Strict ``json.loads``: ``NaN`` and ``Infinity`` are not JSON."""

    return json.loads(text, parse_constant=_reject_constant)


def coerce_value(raw: str) -> JSONValue:
    """Coerce a raw ``key=value`` value into a JSON value."""

    if raw == "true":
        return True
    if raw == "false":
        return False
    if raw == "null":
        return None
    if _NUMBER.match(raw):
        return float(raw) if "." in raw else int(raw)
    try:
        return loads_json(raw)
    except ValueError:
        return raw


def parse_variables(text: str | None) -> Variables:
    """Return the variable mapping described by ``text``.

    Empty or blank input yields an empty mapping. Later duplicate keys
    overwrite earlier ones.
    """

    if not text or not text.strip():
        return {}

    try:
        decoded = loads_json(text)
    except ValueError:
        pass
    else:
        if isinstance(decoded, dict):
            return decoded
    _LOGGER.debug("variables_parsed_as_lines")

    variables: Variables = {}
    for line in _LINE_BREAK.split(text):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        match = _KEY_VALUE.match(line)
        if match is None:
            _LOGGER.debug("variables_line_skipped", line=line)
            continue
        key = match.group(1).strip()
        variables[key] = coerce_value(match.group(3).strip())
    return variables
