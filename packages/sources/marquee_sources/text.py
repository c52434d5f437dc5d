"""Plain text sources: literal strings, files, stdin and command output."""

from __future__ import annotations

import logging
import subprocess
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import TextIO

from marquee_engine.errors import MarqueeError
from marquee_engine.models import StatusSnapshot


logger = logging.getLogger("marquee.sources")


class SourceError(MarqueeError):
    """Content could not be acquired from a source."""


class TextSource:
    """Base source. ``fetch`` returns text, or a snapshot for templated sources."""

    name = "source"
    dynamic = False

    def fetch(self) -> str | StatusSnapshot:
        raise NotImplementedError

    def close(self) -> None:
        return None

    def describe(self) -> str:
        return self.name


class StringSource(TextSource):
    name = "string"

    def __init__(self, text: str) -> None:
        self.text = text

    def fetch(self) -> str:
        return self.text


class FileSource(TextSource):
    """Whole file read once, at construction."""

    name = "file"

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()
        try:
            self.text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise SourceError(f"cannot read {self.path}: {exc}") from exc

    def fetch(self) -> str:
        return self.text

    def describe(self) -> str:
        return f"file:{self.path}"


class StdinSource(TextSource):
    name = "stdin"

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream
        self._text: str | None = None

    def fetch(self) -> str:
        if self._text is None:
            stream = self._stream if self._stream is not None else sys.stdin
            try:
                self._text = stream.read()
            except (OSError, UnicodeDecodeError) as exc:
                raise SourceError(f"cannot read stdin: {exc}") from exc
        return self._text


class CommandSource(TextSource):
    """Runs a command on every fetch and uses its stdout."""

    name = "cmd"
    dynamic = True

    def __init__(self, argv: Sequence[str], timeout_s: float | None = 10.0) -> None:
        if not argv:
            raise SourceError("--cmd needs at least one argument")
        self.argv = list(argv)
        self.timeout_s = timeout_s

    def fetch(self) -> str:
        try:
            proc = subprocess.run(
                self.argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                check=False,
                timeout=self.timeout_s,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise SourceError(f"cannot run {self.argv[0]!r}: {exc}") from exc
        if proc.returncode != 0:
            logger.warning(
                f"command {self.argv[0]!r} exited with status {proc.returncode}",
                extra={"event": "cmd_nonzero_exit"},
            )
        return proc.stdout.decode("utf-8", errors="replace")

    def describe(self) -> str:
        return "cmd:" + " ".join(self.argv)
