"""Scrolling window engine, placeholder renderer and fragment composition."""

from .errors import FormatSyntaxError, IconConfigError, MarqueeError, StateLoadError, StateStoreError
from .fragment import Fragment, FragmentTick, apply_replacements, compose, content_digest, replace_newline
from .icons import IconSet, IconSetKind, IconSets
from .models import FIELDS, FieldKind, FormatToken, Literal, Placeholder, PlaybackState, StatusSnapshot, WindowConfig
from .placeholders import DEFAULT_PLACEHOLDER, Template, format_tokens, parse_format, render
from .timefmt import DEFAULT_TIME_SPEC, format_duration
from .window import advance

__all__ = [
    "DEFAULT_PLACEHOLDER",
    "DEFAULT_TIME_SPEC",
    "FIELDS",
    "FieldKind",
    "FormatSyntaxError",
    "FormatToken",
    "Fragment",
    "FragmentTick",
    "IconConfigError",
    "IconSet",
    "IconSetKind",
    "IconSets",
    "Literal",
    "MarqueeError",
    "Placeholder",
    "PlaybackState",
    "StateLoadError",
    "StateStoreError",
    "StatusSnapshot",
    "Template",
    "WindowConfig",
    "advance",
    "apply_replacements",
    "compose",
    "content_digest",
    "format_duration",
    "format_tokens",
    "parse_format",
    "render",
    "replace_newline",
]
