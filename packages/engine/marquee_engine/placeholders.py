"""Format-string parsing and placeholder substitution.

A format string is literal text interleaved with ``{name}`` or
``{name:modifier}`` placeholders; ``{{`` and ``}}`` stand for literal braces.
It is parsed once into an immutable token tuple and rendered on every tick.
Rendering is a single pass over the tokens, so field values are never parsed
again and a title containing ``{artist}`` shows up verbatim.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from wcwidth import wcswidth

from .errors import FormatSyntaxError
from .icons import IconSets
from .models import FIELDS, FieldKind, FormatToken, Literal, Placeholder, StatusSnapshot
from .timefmt import DEFAULT_TIME_SPEC, format_duration, validate_time_spec

DEFAULT_PLACEHOLDER = "N/A"


def _placeholder(body: str, fmt: str, offset: int) -> Placeholder:
    name, sep, modifier = body.partition(":")
    if name not in FIELDS:
        raise FormatSyntaxError(f"unknown placeholder {name!r}", fmt, offset)
    if not sep:
        return Placeholder(name)
    if not modifier:
        raise FormatSyntaxError(f"empty modifier for {name!r}", fmt, offset)

    if FIELDS[name][1] is FieldKind.TIME:
        try:
            return Placeholder(name, time_spec=validate_time_spec(modifier))
        except FormatSyntaxError as exc:
            raise FormatSyntaxError(f"bad time spec {modifier!r} for {name!r}: {exc.args[0]}", fmt, offset) from exc

    if not (modifier.isascii() and modifier.isdigit()):
        raise FormatSyntaxError(f"padding for {name!r} must be a non-negative integer, got {modifier!r}", fmt, offset)
    return Placeholder(name, pad=int(modifier))


def parse_format(fmt: str) -> tuple[FormatToken, ...]:
    tokens: list[FormatToken] = []
    literal: list[str] = []
    i = 0
    n = len(fmt)
    while i < n:
        ch = fmt[i]
        if ch == "{":
            if fmt.startswith("{{", i):
                literal.append("{")
                i += 2
                continue
            end = fmt.find("}", i + 1)
            if end < 0 or "{" in fmt[i + 1 : end]:
                raise FormatSyntaxError("unmatched '{'", fmt, i)
            if literal:
                tokens.append(Literal("".join(literal)))
                literal = []
            tokens.append(_placeholder(fmt[i + 1 : end], fmt, i))
            i = end + 1
        elif ch == "}":
            if fmt.startswith("}}", i):
                literal.append("}")
                i += 2
                continue
            raise FormatSyntaxError("unmatched '}'", fmt, i)
        else:
            literal.append(ch)
            i += 1
    if literal:
        tokens.append(Literal("".join(literal)))
    return tuple(tokens)


def format_tokens(tokens: tuple[FormatToken, ...]) -> str:
    """Inverse of :func:`parse_format` for canonical format strings."""
    out: list[str] = []
    for token in tokens:
        if isinstance(token, Literal):
            out.append(token.text.replace("{", "{{").replace("}", "}}"))
        elif token.time_spec is not None:
            out.append(f"{{{token.name}:{token.time_spec}}}")
        elif token.pad is not None:
            out.append(f"{{{token.name}:{token.pad}}}")
        else:
            out.append(f"{{{token.name}}}")
    return "".join(out)


def display_width(text: str) -> int:
    width = wcswidth(text)
    return width if width >= 0 else len(text)


def pad_left(text: str, columns: int) -> str:
    missing = columns - display_width(text)
    return " " * missing + text if missing > 0 else text


def _value_text(token: Placeholder, snapshot: StatusSnapshot | None, icons: IconSets, default: str) -> str:
    value = getattr(snapshot, token.attribute) if snapshot is not None else None
    if value is None:
        return default

    kind = token.kind
    if kind is FieldKind.TIME:
        return format_duration(value, token.time_spec or DEFAULT_TIME_SPEC)
    if kind is FieldKind.STATE_ICON:
        return icons.state.for_state(value)
    if kind is FieldKind.TOGGLE_ICON:
        return icons.toggle_for(token.attribute).for_flag(bool(value))
    return str(value)


def render(
    tokens: tuple[FormatToken, ...],
    snapshot: StatusSnapshot | None,
    icons: IconSets | None = None,
    default_placeholder: str = DEFAULT_PLACEHOLDER,
) -> str:
    icons = icons or IconSets()
    parts: list[str] = []
    for token in tokens:
        if isinstance(token, Literal):
            parts.append(token.text)
            continue
        text = _value_text(token, snapshot, icons, default_placeholder)
        if token.pad:
            text = pad_left(text, token.pad)
        parts.append(text)
    return "".join(parts)


@dataclass(frozen=True)
class Template:
    """A parsed format string bundled with the icons and default it renders with."""

    tokens: tuple[FormatToken, ...]
    icons: IconSets = field(default_factory=IconSets)
    default_placeholder: str = DEFAULT_PLACEHOLDER

    @classmethod
    def parse(
        cls,
        fmt: str,
        icons: IconSets | None = None,
        default_placeholder: str = DEFAULT_PLACEHOLDER,
    ) -> Template:
        return cls(parse_format(fmt), icons or IconSets(), default_placeholder)

    @property
    def is_constant(self) -> bool:
        return all(isinstance(t, Literal) for t in self.tokens)

    def render(self, snapshot: StatusSnapshot | None) -> str:
        return render(self.tokens, snapshot, self.icons, self.default_placeholder)

    def __str__(self) -> str:
        return format_tokens(self.tokens)
