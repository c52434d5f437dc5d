"""Line emitters for terminals and waybar custom modules."""

from __future__ import annotations

import json
import sys
from typing import TextIO

from .models import TickOutput


class Emitter:
    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def render(self, output: TickOutput) -> str:
        raise NotImplementedError

    def emit(self, output: TickOutput) -> None:
        self.stream.write(self.render(output))
        self.stream.flush()

    def finish(self) -> None:
        return None


class TerminalEmitter(Emitter):
    """Rewrites one terminal line with ``\\r``, or prints one line per tick."""

    def __init__(self, stream: TextIO | None = None, newline: bool = False) -> None:
        super().__init__(stream)
        self.newline = newline
        self._dirty = False

    def render(self, output: TickOutput) -> str:
        if self.newline:
            return f"{output.text}\n"
        return f"\r{output.text}"

    def emit(self, output: TickOutput) -> None:
        super().emit(output)
        self._dirty = not self.newline

    def finish(self) -> None:
        if self._dirty:
            self.stream.write("\n")
            self.stream.flush()
            self._dirty = False


class WaybarEmitter(Emitter):
    """One JSON record per line, as read by waybar's ``return-type: json``."""

    def render(self, output: TickOutput) -> str:
        record = {"text": output.text}
        if output.tooltip is not None:
            record["tooltip"] = output.tooltip
        return json.dumps(record, ensure_ascii=False) + "\n"


def build_emitter(json_mode: bool, newline: bool = False, stream: TextIO | None = None) -> Emitter:
    if json_mode:
        return WaybarEmitter(stream)
    return TerminalEmitter(stream, newline=newline)
