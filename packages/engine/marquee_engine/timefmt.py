"""Duration rendering with a small strftime-like subset (%H, %M, %S, %%)."""

from __future__ import annotations

from datetime import timedelta

from .errors import FormatSyntaxError

DEFAULT_TIME_SPEC = "%M:%S"
SUPPORTED_DIRECTIVES = frozenset("HMS%")


def validate_time_spec(spec: str) -> str:
    i = 0
    while i < len(spec):
        if spec[i] == "%":
            if i + 1 >= len(spec):
                raise FormatSyntaxError("dangling '%' in time spec", spec, i)
            directive = spec[i + 1]
            if directive not in SUPPORTED_DIRECTIVES:
                raise FormatSyntaxError(f"unsupported time directive '%{directive}'", spec, i)
            i += 2
        else:
            i += 1
    return spec


def format_duration(value: timedelta, spec: str = DEFAULT_TIME_SPEC) -> str:
    """Render ``value`` using ``spec``.

    Durations are not wall-clock instants: without ``%H`` the ``%M`` directive
    carries the total number of minutes, so 3665 seconds render as ``61:05``
    with the default spec.
    """
    total = max(int(value.total_seconds()), 0)
    hours, rest = divmod(total, 3600)
    with_hours = "%H" in spec.replace("%%", "")
    minutes = rest // 60 if with_hours else total // 60
    seconds = total % 60

    out: list[str] = []
    i = 0
    while i < len(spec):
        ch = spec[i]
        if ch != "%" or i + 1 >= len(spec):
            out.append(ch)
            i += 1
            continue
        directive = spec[i + 1]
        if directive == "H":
            out.append(f"{hours:02d}")
        elif directive == "M":
            out.append(f"{minutes:02d}")
        elif directive == "S":
            out.append(f"{seconds:02d}")
        elif directive == "%":
            out.append("%")
        else:
            out.append(spec[i : i + 2])
        i += 2
    return "".join(out)
