"""Output emitters for rendered marquee lines."""

from .emitters import Emitter, TerminalEmitter, WaybarEmitter, build_emitter
from .models import TickOutput

__all__ = [
    "Emitter",
    "TerminalEmitter",
    "TickOutput",
    "WaybarEmitter",
    "build_emitter",
]
