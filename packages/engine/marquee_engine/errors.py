"""Error taxonomy shared by the engine, the state store and the CLI."""

from __future__ import annotations


class MarqueeError(Exception):
    """Base class for every error raised on purpose by marquee."""


class FormatSyntaxError(MarqueeError, ValueError):
    """Malformed format string: unmatched brace, unknown field or bad modifier."""

    def __init__(self, message: str, fmt: str | None = None, offset: int | None = None) -> None:
        super().__init__(message)
        self.fmt = fmt
        self.offset = offset

    def __str__(self) -> str:
        base = super().__str__()
        if self.fmt is None:
            return base
        if self.offset is None:
            return f"{base} in format {self.fmt!r}"
        return f"{base} in format {self.fmt!r} at offset {self.offset}"


class IconConfigError(MarqueeError, ValueError):
    """An icon set has the wrong number of glyphs."""


class StateLoadError(MarqueeError):
    """Persisted state could not be read. Always recovered as position 0."""


class StateStoreError(MarqueeError, OSError):
    """Persisted state could not be written."""
