# src/logtiming/templates.py
"""Message template parsing and rendering.

Operation events are described by message templates with named holes rather
than pre-formatted strings, so the sink can keep each value as a structured
property as well as render readable text:

    template = MessageTemplate.parse("Saved {Count} rows in {Elapsed:0.0} ms")
    template.render([12, 3.14159])   # "Saved 12 rows in 3.1 ms"
    template.bind([12, 3.14159])     # {"Count": 12, "Elapsed": 3.14159}

Syntax:
- ``{Name}`` binds the next positional argument to ``Name``
- ``{Name:format}`` applies a format when rendering; fixed-point patterns made
  of ``0``/``#`` (``0.0``, ``0.##``) are understood, anything else goes to
  Python's format()
- ``{Name,width}`` right-aligns (negative width left-aligns)
- ``{@Name}`` / ``{$Name}`` are accepted; the prefix is ignored
- ``{{`` and ``}}`` are literal braces

Malformed holes are kept as literal text. Rendering never raises.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

__all__ = [
    "MessageTemplate",
    "PropertyToken",
    "TextToken",
    "format_value",
]

_TOKEN_PATTERN = re.compile(
    r"\{\{|\}\}|\{(?P<prefix>[@$]?)(?P<name>[A-Za-z0-9_]+)(?:,(?P<alignment>-?\d+))?(?::(?P<format>[^{}]*))?\}"
)
_FIXED_POINT_PATTERN = re.compile(r"^[0#]+(?:\.(?P<fraction>[0#]+))?$")


@dataclass(frozen=True, slots=True)
class TextToken:
    """Literal run of template text."""

    text: str


@dataclass(frozen=True, slots=True)
class PropertyToken:
    """Named hole bound to the positional argument at ``index``."""

    name: str
    index: int
    raw: str
    format: str | None = None
    alignment: int | None = None


def _format_fixed_point(value: float, fraction: str) -> str:
    max_decimals = len(fraction)
    min_decimals = len(fraction.rstrip("#"))
    text = f"{value:.{max_decimals}f}"
    if max_decimals > min_decimals:
        integral, _, decimals = text.partition(".")
        decimals = decimals.rstrip("0")
        decimals = decimals.ljust(min_decimals, "0")
        text = f"{integral}.{decimals}" if decimals else integral
    return text


def format_value(value: Any, fmt: str | None = None) -> str:
    """Render a single property value.

    Numbers honour fixed-point patterns such as ``0.0``. Other format strings
    are handed to format(); a format the value does not understand falls back
    to str(value) so an event is never lost to a formatting mistake.
    """
    if fmt is None or fmt == "":
        return str(value)

    match = _FIXED_POINT_PATTERN.match(fmt)
    if match is not None:
        if isinstance(value, int | float) and not isinstance(value, bool):
            return _format_fixed_point(float(value), match.group("fraction") or "")
        return str(value)

    try:
        return format(value, fmt)
    except (TypeError, ValueError):
        return str(value)


@dataclass(frozen=True, slots=True)
class MessageTemplate:
    """Parsed message template.

    Use MessageTemplate.parse() rather than the constructor; parsed templates
    are cached because operation templates are typically string literals that
    are rendered many times.
    """

    text: str
    tokens: tuple[TextToken | PropertyToken, ...]

    @staticmethod
    def parse(text: str) -> MessageTemplate:
        return _parse(text)

    @property
    def properties(self) -> tuple[PropertyToken, ...]:
        return tuple(token for token in self.tokens if isinstance(token, PropertyToken))

    def bind(self, args: Sequence[Any]) -> dict[str, Any]:
        """Map property names to their positional argument values.

        Holes without a matching argument are omitted.
        """
        bound: dict[str, Any] = {}
        for token in self.properties:
            if token.index < len(args):
                bound[token.name] = args[token.index]
        return bound

    def render(self, args: Sequence[Any]) -> str:
        parts: list[str] = []
        for token in self.tokens:
            if isinstance(token, TextToken):
                parts.append(token.text)
                continue
            if token.index >= len(args):
                parts.append(token.raw)
                continue
            rendered = format_value(args[token.index], token.format)
            if token.alignment is not None:
                if token.alignment >= 0:
                    rendered = rendered.rjust(token.alignment)
                else:
                    rendered = rendered.ljust(-token.alignment)
            parts.append(rendered)
        return "".join(parts)


@lru_cache(maxsize=1024)
def _parse(text: str) -> MessageTemplate:
    tokens: list[TextToken | PropertyToken] = []
    literal: list[str] = []
    position = 0
    index = 0

    for match in _TOKEN_PATTERN.finditer(text):
        literal.append(text[position : match.start()])
        position = match.end()

        matched = match.group(0)
        if matched == "{{":
            literal.append("{")
            continue
        if matched == "}}":
            literal.append("}")
            continue

        if literal:
            tokens.append(TextToken("".join(literal)))
            literal = []

        alignment = match.group("alignment")
        tokens.append(
            PropertyToken(
                name=match.group("name"),
                index=index,
                raw=matched,
                format=match.group("format"),
                alignment=int(alignment) if alignment is not None else None,
            )
        )
        index += 1

    literal.append(text[position:])
    tail = "".join(literal)
    if tail:
        tokens.append(TextToken(tail))

    return MessageTemplate(text=text, tokens=tuple(tokens))
