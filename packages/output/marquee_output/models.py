"""Typed output models."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TickOutput:
    text: str
    tooltip: str | None = None
