"""Typed engine models: window config, format tokens and the status snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum


@dataclass(frozen=True)
class WindowConfig:
    width: int = 32
    separator: str = ""
    dont_repeat: bool = True
    reset_on_change: bool = False
    right: bool = False

    def __post_init__(self) -> None:
        if self.width < 1:
            raise ValueError(f"window width must be at least 1, got {self.width}")


class PlaybackState(str, Enum):
    PLAY = "play"
    PAUSE = "pause"
    STOP = "stop"


@dataclass(frozen=True)
class StatusSnapshot:
    """Player status at one instant. Every field is optional."""

    artist: str | None = None
    title: str | None = None
    album: str | None = None
    album_artist: str | None = None
    date: str | None = None
    filename: str | None = None
    elapsed: timedelta | None = None
    duration: timedelta | None = None
    state: PlaybackState | None = None
    queue_length: int | None = None
    song_position: int | None = None
    volume: int | None = None
    random: bool | None = None
    repeat: bool | None = None
    single: bool | None = None
    consume: bool | None = None


class FieldKind(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    TIME = "time"
    STATE_ICON = "state_icon"
    TOGGLE_ICON = "toggle_icon"


# Placeholder name -> (snapshot attribute, kind).
FIELDS: dict[str, tuple[str, FieldKind]] = {
    "albumArtist": ("album_artist", FieldKind.TEXT),
    "album": ("album", FieldKind.TEXT),
    "artist": ("artist", FieldKind.TEXT),
    "consumeIcon": ("consume", FieldKind.TOGGLE_ICON),
    "date": ("date", FieldKind.TEXT),
    "elapsedTime": ("elapsed", FieldKind.TIME),
    "filename": ("filename", FieldKind.TEXT),
    "queueLength": ("queue_length", FieldKind.NUMBER),
    "randomIcon": ("random", FieldKind.TOGGLE_ICON),
    "repeatIcon": ("repeat", FieldKind.TOGGLE_ICON),
    "singleIcon": ("single", FieldKind.TOGGLE_ICON),
    "songPosition": ("song_position", FieldKind.NUMBER),
    "stateIcon": ("state", FieldKind.STATE_ICON),
    "title": ("title", FieldKind.TEXT),
    "totalTime": ("duration", FieldKind.TIME),
    "volume": ("volume", FieldKind.NUMBER),
}


@dataclass(frozen=True)
class Literal:
    text: str


@dataclass(frozen=True)
class Placeholder:
    name: str
    pad: int | None = None
    time_spec: str | None = None

    @property
    def attribute(self) -> str:
        return FIELDS[self.name][0]

    @property
    def kind(self) -> FieldKind:
        return FIELDS[self.name][1]


FormatToken = Literal | Placeholder
