"""Content sources feeding marquee fragments."""

from .text import CommandSource, FileSource, SourceError, StdinSource, StringSource, TextSource

try:  # pragma: no cover - optional at import time for minimal test environments
    from .mpd_source import MpdSource, parse_address, snapshot_from_mpd
except Exception:  # pragma: no cover
    MpdSource = None  # type: ignore[assignment]
    parse_address = None  # type: ignore[assignment]
    snapshot_from_mpd = None  # type: ignore[assignment]

__all__ = [
    "CommandSource",
    "FileSource",
    "SourceError",
    "StdinSource",
    "StringSource",
    "TextSource",
]

if MpdSource is not None:
    __all__ += ["MpdSource", "parse_address", "snapshot_from_mpd"]
