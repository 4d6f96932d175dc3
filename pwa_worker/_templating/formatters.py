"""Formatting utilities that turn Python values into script literals."""

from __future__ import annotations

import json
from decimal import Decimal
from typing import Any, Mapping

from .errors import TemplateApplicationError

__all__ = [
    "comment_text",
    "json_literal",
    "quoted_literal",
    "raw_literal",
    "stringify",
]

_QUOTE_ESCAPES: Mapping[str, str] = {
    "\\": "\\\\",
    "'": "\\'",
    "\n": "\\n",
    "\r": "\\r",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def json_literal(value: Any) -> str:
    """Encode ``value`` as compact JSON, which is also a valid script literal."""

    try:
        return json.dumps(value, separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        raise TemplateApplicationError(
            f"Value of type '{type(value).__name__}' cannot be encoded as JSON"
        ) from exc


def quoted_literal(value: Any) -> str:
    """Wrap ``value`` in single quotes, escaping characters that would end the string."""

    if value is None:
        raise TemplateApplicationError("quote requires a value")
    text = stringify(value)
    return "'" + "".join(_QUOTE_ESCAPES.get(char, char) for char in text) + "'"


def comment_text(value: Any) -> str:
    """Return ``value`` as text that cannot terminate a ``/* ... */`` block."""

    return stringify(value).replace("*/", "*\\/")


def raw_literal(value: Any) -> str:
    """Emit ``value`` verbatim.

    Integers keep every digit and floats use their shortest round-trip form.
    Any other value is inserted as-is, so callers are responsible for what
    they pass in.
    """

    return stringify(value)


def stringify(value: Any) -> str:
    """Serialise primitives to template-friendly strings."""

    match value:
        case None:
            return "null"
        case bool() as boolean:
            return "true" if boolean else "false"
        case int():
            return str(int(value))
        case float():
            return repr(float(value))
        case Decimal():
            return str(value)

    return str(value)
