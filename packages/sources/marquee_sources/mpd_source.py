"""MPD status source built on python-mpd2."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import timedelta
from typing import Any

from mpd import CommandError, ConnectionError as MPDConnectionError, MPDClient

from marquee_engine.models import PlaybackState, StatusSnapshot

from .text import SourceError, TextSource


logger = logging.getLogger("marquee.sources.mpd")

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 6600


def _text(value: Any) -> str | None:
    if value is None:
        return None
    # Multi-valued tags come back as lists.
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value) if value else None
    return str(value)


def _int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _seconds(value: Any) -> timedelta | None:
    try:
        return timedelta(seconds=float(value))
    except (TypeError, ValueError):
        return None


def _flag(value: Any) -> bool | None:
    if value is None:
        return None
    # single/consume may also report "oneshot".
    return str(value) != "0"


def snapshot_from_mpd(status: Mapping[str, Any], song: Mapping[str, Any] | None) -> StatusSnapshot:
    """Build a snapshot from the ``status`` and ``currentsong`` replies."""
    song = song or {}

    elapsed = _seconds(status.get("elapsed"))
    duration = _seconds(status.get("duration"))
    if (elapsed is None or duration is None) and "time" in status:
        head, _, tail = str(status["time"]).partition(":")
        if elapsed is None:
            elapsed = _seconds(head)
        if duration is None:
            duration = _seconds(tail)

    try:
        state = PlaybackState(str(status.get("state", "")))
    except ValueError:
        state = None

    volume = _int(status.get("volume"))
    if volume is not None and volume < 0:
        volume = None

    return StatusSnapshot(
        artist=_text(song.get("artist")),
        title=_text(song.get("title")),
        album=_text(song.get("album")),
        album_artist=_text(song.get("albumartist")),
        date=_text(song.get("date")),
        filename=_text(song.get("file")),
        elapsed=elapsed if song else None,
        duration=duration if song else None,
        state=state,
        queue_length=_int(status.get("playlistlength")),
        song_position=_int(status.get("song")),
        volume=volume,
        random=_flag(status.get("random")),
        repeat=_flag(status.get("repeat")),
        single=_flag(status.get("single")),
        consume=_flag(status.get("consume")),
    )


def parse_address(value: str | None) -> tuple[str, int]:
    """Split ``host[:port]``; unix socket paths keep port 0."""
    if not value:
        return DEFAULT_HOST, DEFAULT_PORT
    if value.startswith("/") or value.startswith("@"):
        return value, 0
    if value.startswith("["):
        host, _, rest = value[1:].partition("]")
        port = rest[1:] if rest.startswith(":") else ""
    elif value.count(":") == 1:
        host, _, port = value.partition(":")
    else:
        host, port = value, ""
    if port and not port.isdigit():
        raise ValueError(f"invalid MPD port in {value!r}")
    return host or DEFAULT_HOST, int(port) if port else DEFAULT_PORT


class MpdSource(TextSource):
    """Polls MPD once per fetch; reconnects once when the connection drops."""

    name = "mpd"
    dynamic = True

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        password: str | None = None,
        timeout_s: float = 5.0,
        client_factory: Callable[[], Any] = MPDClient,
    ) -> None:
        self.host = host
        self.port = port
        self.password = password
        self.timeout_s = timeout_s
        self._client_factory = client_factory
        self._client: Any | None = None

    def _connect(self) -> Any:
        client = self._client_factory()
        client.timeout = self.timeout_s
        if self.port:
            client.connect(self.host, self.port)
        else:
            client.connect(self.host)
        if self.password:
            client.password(self.password)
        logger.debug(f"connected to mpd at {self.describe()}", extra={"event": "mpd_connected"})
        return client

    def _drop(self) -> None:
        client, self._client = self._client, None
        if client is None:
            return
        try:
            client.disconnect()
        except (MPDConnectionError, OSError):
            pass

    def poll(self) -> StatusSnapshot:
        last_error: Exception | None = None
        for attempt in (1, 2):
            try:
                if self._client is None:
                    self._client = self._connect()
                return snapshot_from_mpd(self._client.status(), self._client.currentsong())
            except CommandError as exc:
                self._drop()
                raise SourceError(f"mpd at {self.describe()} rejected a command: {exc}") from exc
            except (MPDConnectionError, OSError) as exc:
                last_error = exc
                self._drop()
                logger.debug(
                    f"mpd connection lost (attempt {attempt}): {exc}",
                    extra={"event": "mpd_connection_lost"},
                )
        raise SourceError(f"cannot reach mpd at {self.describe()}: {last_error}")

    def fetch(self) -> StatusSnapshot:
        return self.poll()

    def close(self) -> None:
        self._drop()

    def describe(self) -> str:
        return f"{self.host}:{self.port}" if self.port else self.host
