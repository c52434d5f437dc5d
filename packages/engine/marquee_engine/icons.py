"""Icon sets selected by player state, validated once at construction."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from .errors import IconConfigError
from .models import PlaybackState


class IconSetKind(str, Enum):
    STATUS = "status"
    TOGGLE = "toggle"


def _glyphs(spec: str | Iterable[str]) -> tuple[str, ...]:
    # A plain string is split into code points; lists come from the config file.
    if isinstance(spec, str):
        return tuple(spec)
    return tuple(str(g) for g in spec)


@dataclass(frozen=True)
class IconSet:
    kind: IconSetKind
    glyphs: tuple[str, ...]

    @classmethod
    def status(cls, spec: str | Iterable[str]) -> IconSet:
        glyphs = _glyphs(spec)
        if len(glyphs) != 3:
            raise IconConfigError(
                f"status icon set needs exactly 3 glyphs (play, pause, stop), got {len(glyphs)}: {glyphs!r}"
            )
        return cls(IconSetKind.STATUS, glyphs)

    @classmethod
    def toggle(cls, spec: str | Iterable[str]) -> IconSet:
        glyphs = _glyphs(spec)
        if len(glyphs) not in (1, 2):
            raise IconConfigError(
                f"toggle icon set needs 1 or 2 glyphs (enabled, optional disabled), got {len(glyphs)}: {glyphs!r}"
            )
        return cls(IconSetKind.TOGGLE, glyphs)

    def for_state(self, state: PlaybackState) -> str:
        if self.kind is not IconSetKind.STATUS:
            raise TypeError("for_state() needs a status icon set")
        index = {PlaybackState.PLAY: 0, PlaybackState.PAUSE: 1, PlaybackState.STOP: 2}[state]
        return self.glyphs[index]

    def for_flag(self, enabled: bool) -> str:
        if self.kind is not IconSetKind.TOGGLE:
            raise TypeError("for_flag() needs a toggle icon set")
        if enabled:
            return self.glyphs[0]
        return self.glyphs[1] if len(self.glyphs) > 1 else ""


@dataclass(frozen=True)
class IconSets:
    state: IconSet = field(default_factory=lambda: IconSet.status("▶⏸⏹"))
    repeat: IconSet = field(default_factory=lambda: IconSet.toggle("R"))
    random: IconSet = field(default_factory=lambda: IconSet.toggle("Z"))
    single: IconSet = field(default_factory=lambda: IconSet.toggle("S"))
    consume: IconSet = field(default_factory=lambda: IconSet.toggle("C"))

    @classmethod
    def from_specs(
        cls,
        state: str | Iterable[str] | None = None,
        repeat: str | Iterable[str] | None = None,
        random: str | Iterable[str] | None = None,
        single: str | Iterable[str] | None = None,
        consume: str | Iterable[str] | None = None,
    ) -> IconSets:
        defaults = cls()
        return cls(
            state=IconSet.status(state) if state is not None else defaults.state,
            repeat=IconSet.toggle(repeat) if repeat is not None else defaults.repeat,
            random=IconSet.toggle(random) if random is not None else defaults.random,
            single=IconSet.toggle(single) if single is not None else defaults.single,
            consume=IconSet.toggle(consume) if consume is not None else defaults.consume,
        )

    def toggle_for(self, attribute: str) -> IconSet:
        return {
            "repeat": self.repeat,
            "random": self.random,
            "single": self.single,
            "consume": self.consume,
        }[attribute]
