"""Sliding window over content wrapped with a separator."""

from __future__ import annotations

from .models import WindowConfig


def is_static(content: str, config: WindowConfig) -> bool:
    return config.dont_repeat and len(content) <= config.width


def effective_content(content: str, config: WindowConfig) -> str:
    if is_static(content, config):
        return content
    return content + config.separator


def advance(content: str, position: int, config: WindowConfig) -> tuple[str, int]:
    """Return the visible slice at ``position`` and the position of the next tick.

    Stateless: reset-on-change handling belongs to the caller.
    """
    if not content:
        return "", 0
    if is_static(content, config):
        return content, position

    effective = content + config.separator
    length = len(effective)
    start = position % length

    # Run from start to the end, then whole copies, then the leftover head.
    visible = effective[start : start + config.width]
    remainder = config.width - len(visible)
    if remainder > 0:
        copies, leftover = divmod(remainder, length)
        visible += effective * copies + effective[:leftover]

    step = -1 if config.right else 1
    return visible, (start + step) % length
