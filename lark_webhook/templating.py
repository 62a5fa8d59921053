"""Render JSON message templates with Jinja2.

Templates are plain JSON with ``{{ ... }}`` placeholders. Autoescaping is off
because HTML escaping corrupts JSON; two helpers keep the output valid
instead:

``json``
    the value's JSON text, for use outside string quotes
    (``"elements": {{ json(items) }}``).
``jstr``
    the escaped contents of the value as a JSON string, for use inside
    quotes (``"text": "Hello {{ jstr(who) }}"``).

Both are available as globals and as filters, and the Handlebars call form
(``{{jstr who}}``) is accepted as well. ``{% %}`` and ``{# #}`` are not
markup here; JSON text containing them renders unchanged.
"""

from __future__ import annotations

import json
import math
import re
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from jinja2 import ChainableUndefined, Environment, TemplateError, Undefined, pass_context
from jinja2.runtime import Context
from jinja2.ext import Extension

from lark_webhook.errors import TemplateRenderError
from lark_webhook.logging import get_logger
from lark_webhook.variables import JSONValue, Variables, loads_json, parse_variables

_LOGGER = get_logger(__name__)

HELPER_NAMES = ("json", "jstr")


@dataclass(frozen=True, slots=True)
class BuildResult:
    """The parsed webhook body and the text it was parsed from."""

    body: JSONValue
    interpolated: str


def _dumps(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def to_json(value: Any) -> str:
    """JSON text of ``value``; undefined variables become ``null``."""

    if isinstance(value, Undefined):
        return "null"
    return _dumps(value)


def to_json_string_contents(value: Any) -> str:
    """Escaped contents of ``value`` as a JSON string, without the quotes.

    Non-string values are embedded as their JSON text.
    """

    if isinstance(value, Undefined):
        return ""
    if not isinstance(value, str):
        value = _dumps(value)
    return _dumps(value)[1:-1]


def format_number(value: int | float) -> str:
    """Format a number the way JavaScript's ``String(number)`` does."""

    if isinstance(value, int) or not math.isfinite(value):
        return str(value)
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    text = repr(value)
    if "e" not in text:
        return text
    mantissa, exponent = text.split("e")
    power = int(exponent)
    if -7 < power < 21:
        return format(Decimal(text), "f")
    return f"{mantissa}e{'+' if power > 0 else '-'}{abs(power)}"


def _finalize(value: Any) -> Any:
    """Project a plain ``{{ value }}`` to the text JSON templates expect."""

    if isinstance(value, Undefined) or value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    if isinstance(value, (list, dict)):
        return _dumps(value)
    return value


@pass_context
def lookup_variable(context: Context, name: str) -> Any:
    """Resolve a top-level variable whose name is not a Jinja identifier."""

    return context.resolve(name)


def path_expression(path: str) -> str:
    """Turn ``run-id.sha`` into ``lookup_variable('run-id').sha``.

    Segments containing ``-`` become subscripts; the rest stay attribute
    lookups.
    """

    head, *rest = path.split(".")
    expression = f"lookup_variable({head!r})" if "-" in head else head
    for segment in rest:
        expression += f"[{segment!r}]" if "-" in segment else f".{segment}"
    return expression


class PlaceholderExtension(Extension):
    """Rewrite Handlebars-style placeholders into Jinja2 expressions.

    ``{{jstr who}}`` becomes ``{{ jstr(who) }}`` and paths with ``-`` in a
    segment (``{{ run-id }}``) become lookups instead of subtraction.
    """

    _PLACEHOLDER = re.compile(
        r"\{\{\s*(?:(" + "|".join(HELPER_NAMES) + r")\s+)?"
        r"([A-Za-z_][\w-]*(?:\.[\w-]+)*)\s*\}\}"
    )

    def _rewrite(self, match: re.Match) -> str:
        helper, path = match.group(1), match.group(2)
        if helper is None and "-" not in path:
            return match.group(0)
        expression = path_expression(path)
        if helper is not None:
            expression = f"{helper}({expression})"
        return "{{ " + expression + " }}"

    def preprocess(self, source: str, name: str | None, filename: str | None = None) -> str:
        return self._PLACEHOLDER.sub(self._rewrite, source)


class JSONTemplateEnvironment(Environment):
    """Jinja2 environment for JSON payload templates.

    Only ``{{ }}`` is markup. Block and comment delimiters start with a NUL
    character, which a JSON document cannot contain unescaped, so ``{%`` and
    ``{#`` stay literal text. Dotted paths look up mapping keys before
    attributes so ``{{ data.items }}`` reads the ``items`` key rather than
    ``dict.items``.
    """

    def __init__(self) -> None:
        super().__init__(
            block_start_string="\x00{%",
            block_end_string="%}\x00",
            comment_start_string="\x00{#",
            comment_end_string="#}\x00",
            line_statement_prefix=None,
            line_comment_prefix=None,
            autoescape=False,
            undefined=ChainableUndefined,
            finalize=_finalize,
            keep_trailing_newline=True,
            extensions=[PlaceholderExtension],
        )
        self.globals.update(json=to_json, jstr=to_json_string_contents, lookup_variable=lookup_variable)
        self.filters.update(json=to_json, jstr=to_json_string_contents)

    def getattr(self, obj: Any, attribute: str) -> Any:
        if isinstance(obj, Mapping):
            try:
                return obj[attribute]
            except KeyError:
                return self.undefined(obj=obj, name=attribute)
        return super().getattr(obj, attribute)


def render(template: str, variables: Variables) -> str:
    """Render ``template`` against ``variables`` in a fresh environment."""

    environment = JSONTemplateEnvironment()
    try:
        return environment.from_string(template).render(variables)
    except TemplateError as exc:
        raise TemplateRenderError(f"message_template could not be rendered. Error: {exc}") from exc


def validate(text: str) -> JSONValue:
    """Parse rendered text as JSON, keeping the text in the error on failure."""

    try:
        return loads_json(text)
    except ValueError as exc:
        raise TemplateRenderError(
            f"Interpolated message_template is not valid JSON. Error: {exc}. Content: {text}",
            content=text,
        ) from exc


def build_body_from_template(template: str, variables_input: str | None = None) -> BuildResult:
    """Build the webhook body from a template and the raw ``variables`` input."""

    variables = parse_variables(variables_input)
    _LOGGER.debug("template_render", variable_names=sorted(variables))
    interpolated = render(template, variables)
    return BuildResult(body=validate(interpolated), interpolated=interpolated)
