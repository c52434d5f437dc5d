"""Persistent settings schema and load/save helpers."""

from __future__ import annotations

import json
import logging
import os
import platform
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any


logger = logging.getLogger("marquee.config")

CONFIG_VERSION = 2


@dataclass
class WindowSettings:
    width: int = 32
    separator: str = ""
    newline: str = ""
    repeat: bool = False
    reset_on_change: bool = False


@dataclass
class MpdSettings:
    host: str = "localhost"
    port: int = 6600
    password: str | None = None
    timeout_s: float = 5.0


@dataclass
class IconSettings:
    status: str = "▶⏸⏹"
    repeat: str = "R"
    random: str = "Z"
    single: str = "S"
    consume: str = "C"


@dataclass
class FormatSettings:
    running: str = "{artist} - {title}"
    default_placeholder: str = "N/A"
    prefix: str = ""
    suffix: str = ""
    between: str = ""
    tooltip: str | None = None


@dataclass
class RunSettings:
    tick_ms: int = 1000
    newline: bool = False


@dataclass
class StateSettings:
    path: str | None = None
    persist_on_error: bool = True


@dataclass
class DiagnosticsSettings:
    keep_log_files: int = 7
    verbose: bool = False


@dataclass
class PerformanceSettings:
    cpu_percent_max: float = 5.0
    rss_mb_max: float = 100.0
    sample_every: int = 30


@dataclass
class AppConfig:
    config_version: int = CONFIG_VERSION
    window: WindowSettings = field(default_factory=WindowSettings)
    mpd: MpdSettings = field(default_factory=MpdSettings)
    icons: IconSettings = field(default_factory=IconSettings)
    format: FormatSettings = field(default_factory=FormatSettings)
    run: RunSettings = field(default_factory=RunSettings)
    state: StateSettings = field(default_factory=StateSettings)
    diagnostics: DiagnosticsSettings = field(default_factory=DiagnosticsSettings)
    performance: PerformanceSettings = field(default_factory=PerformanceSettings)


DEFAULT_CONFIG = AppConfig()


def config_root() -> Path:
    system = platform.system()
    if system == "Windows":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        return base / "Marquee"
    if system == "Darwin":
        return Path.home() / "Library" / "Application Support" / "Marquee"
    base = os.environ.get("XDG_CONFIG_HOME")
    return (Path(base) if base else Path.home() / ".config") / "marquee"


def config_path() -> Path:
    return config_root() / "config.json"


def state_path(cfg: AppConfig) -> Path:
    if cfg.state.path:
        return Path(cfg.state.path).expanduser()
    return config_root() / "state"


def _merge(dataclass_type, raw: dict[str, Any]):
    defaults = dataclass_type()  # type: ignore[misc]
    if not isinstance(raw, dict):
        return defaults
    for k, v in raw.items():
        if hasattr(defaults, k):
            setattr(defaults, k, v)
    return defaults


def _normalize_window(cfg: AppConfig) -> None:
    cfg.window.width = max(1, int(cfg.window.width))
    cfg.window.separator = str(cfg.window.separator)
    cfg.window.newline = str(cfg.window.newline)


def _normalize_mpd(cfg: AppConfig) -> None:
    cfg.mpd.host = os.environ.get("MPD_HOST", cfg.mpd.host)
    env_port = os.environ.get("MPD_PORT")
    if env_port is not None:
        try:
            cfg.mpd.port = int(env_port)
        except ValueError:
            logger.warning(
                f"ignoring MPD_PORT={env_port!r}, using port {cfg.mpd.port}",
                extra={"event": "mpd_port_invalid"},
            )
    # MPD_HOST may carry a password as "secret@host".
    if "@" in cfg.mpd.host and not cfg.mpd.host.startswith("@"):
        password, _, host = cfg.mpd.host.rpartition("@")
        cfg.mpd.password = cfg.mpd.password or password
        cfg.mpd.host = host
    cfg.mpd.timeout_s = float(max(0.5, cfg.mpd.timeout_s))


def _normalize_run(cfg: AppConfig) -> None:
    cfg.run.tick_ms = max(50, min(60_000, int(cfg.run.tick_ms)))


def _normalize_performance(cfg: AppConfig) -> None:
    cfg.performance.cpu_percent_max = float(max(0.5, cfg.performance.cpu_percent_max))
    cfg.performance.rss_mb_max = float(max(16.0, cfg.performance.rss_mb_max))
    cfg.performance.sample_every = max(1, int(cfg.performance.sample_every))


def _migrate(raw: dict[str, Any]) -> dict[str, Any]:
    version = int(raw.get("config_version", 1))
    data = dict(raw)

    if version < 2:
        # v1 kept the running format and tick interval at the top level.
        if isinstance(data.get("format"), str):
            fmt = {"running": data["format"]}
        else:
            fmt = dict(data.get("format", {}) or {})
        if "default_placeholder" in data:
            fmt.setdefault("default_placeholder", data.pop("default_placeholder"))
        data["format"] = fmt
        run = dict(data.get("run", {}) or {})
        if "tick_ms" in data:
            run.setdefault("tick_ms", data.pop("tick_ms"))
        data["run"] = run
        data.setdefault("performance", {})
        data["config_version"] = 2

    return data


def load_config(path: Path | None = None) -> AppConfig:
    path = path or config_path()
    if not path.exists():
        cfg = AppConfig()
        _normalize_mpd(cfg)
        return cfg

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except Exception:
        cfg = AppConfig()
        _normalize_mpd(cfg)
        return cfg

    data = _migrate(raw if isinstance(raw, dict) else {})
    cfg = AppConfig(
        config_version=int(data.get("config_version", CONFIG_VERSION)),
        window=_merge(WindowSettings, data.get("window", {})),
        mpd=_merge(MpdSettings, data.get("mpd", {})),
        icons=_merge(IconSettings, data.get("icons", {})),
        format=_merge(FormatSettings, data.get("format", {})),
        run=_merge(RunSettings, data.get("run", {})),
        state=_merge(StateSettings, data.get("state", {})),
        diagnostics=_merge(DiagnosticsSettings, data.get("diagnostics", {})),
        performance=_merge(PerformanceSettings, data.get("performance", {})),
    )

    _normalize_window(cfg)
    _normalize_mpd(cfg)
    _normalize_run(cfg)
    _normalize_performance(cfg)
    return cfg


def save_config(cfg: AppConfig, path: Path | None = None) -> Path:
    cfg.config_version = CONFIG_VERSION
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(cfg), indent=2, sort_keys=True, ensure_ascii=False), encoding="utf-8")
    return path
