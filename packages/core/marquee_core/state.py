"""Persisted scroll positions, one line per fragment, replaced atomically."""

from __future__ import annotations

import contextlib
import logging
import os
import re
import tempfile
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path

from marquee_engine.errors import StateLoadError, StateStoreError


logger = logging.getLogger("marquee.state")

_DIGEST_RE = re.compile(r"^[0-9a-f]{40}$")


@dataclass(frozen=True)
class SavedPosition:
    position: int = 0
    digest: str | None = None

    def to_line(self) -> str:
        if self.digest:
            return f"{self.position}:{self.digest}"
        return str(self.position)

    @classmethod
    def from_line(cls, line: str) -> SavedPosition:
        head, sep, digest = line.strip().partition(":")
        if not (head.isascii() and head.isdigit()):
            raise StateLoadError(f"not a position: {line.strip()!r}")
        digest = digest.strip().lower()
        return cls(position=int(head), digest=digest if sep and _DIGEST_RE.match(digest) else None)


class StateSession:
    """Positions loaded for one invocation; written back when the session ends."""

    def __init__(self, entries: list[SavedPosition]) -> None:
        self.entries = list(entries)
        self.dirty = False

    def get(self, index: int) -> SavedPosition:
        if 0 <= index < len(self.entries):
            return self.entries[index]
        return SavedPosition()

    def set(self, index: int, entry: SavedPosition) -> None:
        while len(self.entries) <= index:
            self.entries.append(SavedPosition())
        self.entries[index] = entry
        self.dirty = True


class StateStore:
    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read(self) -> list[SavedPosition]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except (OSError, UnicodeDecodeError) as exc:
            raise StateLoadError(f"cannot read state file {self.path}: {exc}") from exc

        entries: list[SavedPosition] = []
        for line_no, line in enumerate(text.splitlines(), start=1):
            try:
                entries.append(SavedPosition.from_line(line))
            except StateLoadError as exc:
                logger.debug(f"state line {line_no} reset to 0: {exc}", extra={"event": "state_line_invalid"})
                entries.append(SavedPosition())
        return entries

    def load(self) -> list[SavedPosition]:
        try:
            return self._read()
        except StateLoadError as exc:
            logger.debug(str(exc), extra={"event": "state_load_failed"})
            return []

    def load_position(self, index: int = 0) -> int:
        entries = self.load()
        return entries[index].position if index < len(entries) else 0

    def store(self, entries: Sequence[SavedPosition | int]) -> None:
        rows = [e if isinstance(e, SavedPosition) else SavedPosition(int(e)) for e in entries]
        for row in rows:
            if row.position < 0:
                raise ValueError(f"scroll position must be non-negative, got {row.position}")
        payload = "".join(f"{row.to_line()}\n" for row in rows)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(payload)
                    fh.flush()
                    os.fsync(fh.fileno())
                os.replace(tmp, self.path)
            except BaseException:
                with contextlib.suppress(OSError):
                    os.unlink(tmp)
                raise
        except OSError as exc:
            raise StateStoreError(f"cannot write state file {self.path}: {exc}") from exc

    def store_position(self, position: int) -> None:
        self.store([position])

    @contextlib.contextmanager
    def session(self, persist_on_error: bool = True) -> Iterator[StateSession]:
        session = StateSession(self.load())
        try:
            yield session
        except BaseException:
            if persist_on_error and session.dirty:
                try:
                    self.store(session.entries)
                except StateStoreError as exc:
                    logger.warning(str(exc), extra={"event": "state_store_failed"})
            raise
        if session.dirty:
            self.store(session.entries)
