"""Fragments: independently configured windows composed into one line."""

from __future__ import annotations

import hashlib
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from .models import StatusSnapshot, WindowConfig
from .placeholders import Template
from .window import advance


def replace_newline(text: str, replacement: str) -> str:
    return text.replace("\n", replacement)


def apply_replacements(text: str, pairs: Sequence[tuple[str, str]]) -> str:
    """Apply ordered ``(needle, replacement)`` pairs in one left-to-right pass.

    At each index the first matching needle wins and the replacement is never
    scanned again, so ``&`` -> ``&amp;`` does not turn into ``&amp;amp;``.
    """
    pairs = [(needle, repl) for needle, repl in pairs if needle]
    if not pairs or not text:
        return text

    out: list[str] = []
    i = 0
    n = len(text)
    while i < n:
        for needle, repl in pairs:
            if text.startswith(needle, i):
                out.append(repl)
                i += len(needle)
                break
        else:
            out.append(text[i])
            i += 1
    return "".join(out)


def content_digest(content: str) -> str:
    return hashlib.sha1(content.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class FragmentTick:
    text: str
    position: int
    digest: str | None = None


@dataclass(frozen=True)
class Fragment:
    window: WindowConfig = field(default_factory=WindowConfig)
    newline: str = ""
    replacements: tuple[tuple[str, str], ...] = ()
    template: Template | None = None

    @property
    def window_config(self) -> WindowConfig:
        # The separator gets the same newline substitution as the content.
        if "\n" not in self.window.separator:
            return self.window
        return WindowConfig(
            width=self.window.width,
            separator=replace_newline(self.window.separator, self.newline),
            dont_repeat=self.window.dont_repeat,
            reset_on_change=self.window.reset_on_change,
            right=self.window.right,
        )

    def prepare(self, reading: str | StatusSnapshot | None) -> str:
        """Turn a source reading into the pre-window content string."""
        if isinstance(reading, StatusSnapshot) or reading is None:
            if self.template is None:
                raise TypeError("a status snapshot needs a templated fragment")
            text = self.template.render(reading)
        else:
            text = reading
        return replace_newline(text, self.newline)

    def advance(self, content: str, position: int, previous_digest: str | None = None) -> FragmentTick:
        digest = None
        if self.window.reset_on_change:
            digest = content_digest(content)
            if digest != previous_digest:
                position = 0
        visible, next_position = advance(content, position, self.window_config)
        return FragmentTick(apply_replacements(visible, self.replacements), next_position, digest)


def compose(parts: Iterable[str], prefix: str = "", suffix: str = "", between: str = "") -> str:
    return f"{prefix}{between.join(parts)}{suffix}"
