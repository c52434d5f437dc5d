"""CLI entrypoint: build fragments from the command line and run them."""

from __future__ import annotations

import argparse
import re
import shlex
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TextIO

from marquee_core import (
    AppConfig,
    Lane,
    PerformanceController,
    PerformanceTargets,
    StateStore,
    TickController,
    load_config,
    state_path,
)
from marquee_core.logging_setup import configure_logging, get_logger, install_crash_hooks
from marquee_engine import Fragment, IconSets, MarqueeError, Template, WindowConfig
from marquee_output import build_emitter
from marquee_sources import CommandSource, FileSource, SourceError, StdinSource, StringSource, TextSource


SUBCOMMANDS = ("run", "iter")
SOURCE_DESTS = ("string", "file", "stdin", "cmd", "mpd")

_VALUE_OPTIONS = frozenset(
    {
        "-w", "--window", "-s", "--separator", "-e", "--replacements", "--format",
        "-S", "--string", "-f", "--file", "--config", "--prefix", "--suffix", "--between",
        "--tooltip", "--status-icons", "--repeat-icons", "--random-icons", "--single-icons",
        "--consume-icons", "-D", "--default-placeholder",
    }
)
_OPTIONAL_VALUE_OPTIONS = {"--mpd": "--mpd", "-n": "--newline", "--newline": "--newline"}

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h)?\s*$", re.IGNORECASE)
_DURATION_SCALE = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def parse_duration(text: str) -> float:
    """Parse ``500ms``, ``1s``, ``1.5s``, ``2m`` or a bare number of seconds."""
    m = _DURATION_RE.match(text)
    if not m:
        raise argparse.ArgumentTypeError(f"invalid duration {text!r}")
    seconds = float(m.group(1)) * _DURATION_SCALE[(m.group(2) or "s").lower()]
    if seconds <= 0:
        raise argparse.ArgumentTypeError("duration must be positive")
    return seconds


def parse_width(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid window size {text!r}") from None
    if value < 1:
        raise argparse.ArgumentTypeError("window size must be at least 1")
    return value


def parse_replacements(text: str) -> list[tuple[str, str]]:
    """``src=dest[,src=dest...]``; an empty value clears the list."""
    if not text:
        return []
    pairs = []
    for item in text.split(","):
        if "=" not in item:
            raise argparse.ArgumentTypeError("key-value pair must have at least one '=' sign")
        src, _, dest = item.partition("=")
        pairs.append((src, dest))
    return pairs


class _FragmentToken(argparse.Action):
    """Records sources and fragment options in command-line order."""

    def __call__(self, parser, namespace, values, option_string=None):
        tokens = list(getattr(namespace, "fragment_tokens", None) or [])
        tokens.append((self.dest, self.const if self.nargs == 0 or values is None else values))
        setattr(namespace, "fragment_tokens", tokens)


@dataclass
class FragmentArgs:
    kind: str
    value: Any
    options: dict[str, Any] = field(default_factory=dict)


def group_fragments(tokens: list[tuple[str, Any]]) -> list[FragmentArgs]:
    """Options after a source configure it; leading options go to the first one."""
    groups: list[FragmentArgs] = []
    leading: dict[str, Any] = {}
    for dest, value in tokens:
        if dest in SOURCE_DESTS:
            groups.append(FragmentArgs(kind=dest, value=value, options=leading if not groups else {}))
            leading = {}
        elif groups:
            groups[-1].options[dest] = value
        else:
            leading[dest] = value
    return groups


def normalize_argv(argv: list[str]) -> list[str]:
    """Rewrite the arguments argparse cannot express on its own.

    ``--cmd ARGS... ;`` becomes one shell-quoted value, and the optional
    values of ``--mpd`` and ``-n/--newline`` are made explicit so a following
    subcommand name is never taken as their value.
    """
    out: list[str] = []
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg in SUBCOMMANDS:
            out += argv[i:]
            break
        if arg in _VALUE_OPTIONS and i + 1 < len(argv):
            out += [arg, argv[i + 1]]
            i += 2
            continue
        if arg == "--cmd":
            try:
                end = argv.index(";", i + 1)
            except ValueError:
                raise SystemExit("marquee: error: --cmd arguments must be terminated with ';'") from None
            out += ["--cmd", shlex.join(argv[i + 1 : end])]
            i = end + 1
            continue
        if arg in _OPTIONAL_VALUE_OPTIONS:
            following = argv[i + 1] if i + 1 < len(argv) else None
            if following is None or following in SUBCOMMANDS or (following.startswith("-") and following != "-"):
                out.append(f"{_OPTIONAL_VALUE_OPTIONS[arg]}=")
                i += 1
                continue
            out += [arg, following]
            i += 2
            continue
        out.append(arg)
        i += 1
    return out


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="marquee",
        description="Run text through a fixed-width window in a terminal or a waybar module",
    )
    parser.set_defaults(fragment_tokens=None)
    parser.add_argument("--config", default=None, help="Path to config.json")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging on stderr")
    parser.add_argument("--no-log-file", action="store_true", help="Do not write the JSON log file")
    parser.add_argument("--json", action="store_true", help="Print waybar JSON records instead of plain text")
    parser.add_argument("--prefix", default=None, help="Format string printed before the running text")
    parser.add_argument("--suffix", default=None, help="Format string printed after the running text")
    parser.add_argument("--between", default=None, help="String printed between fragments")
    parser.add_argument("--tooltip", default=None, help="Format string for the waybar tooltip")

    frag = parser.add_argument_group("Fragment options (apply to the preceding source)")
    frag.add_argument("-w", "--window", type=parse_width, action=_FragmentToken, help="Window size")
    frag.add_argument("-s", "--separator", action=_FragmentToken, help="String to print between content")
    frag.add_argument(
        "-n",
        "--newline",
        nargs="?",
        const="",
        action=_FragmentToken,
        help="String to replace newlines with; write -n=VALUE when VALUE starts with '-'",
    )
    frag.add_argument(
        "-r", "--repeat", nargs=0, const=True, action=_FragmentToken, help="Repeat contents if it fits in the window"
    )
    frag.add_argument("-R", "--right", nargs=0, const=True, action=_FragmentToken, help="Run text to the right")
    frag.add_argument(
        "--reset-on-change",
        dest="reset_on_change",
        nargs=0,
        const=True,
        action=_FragmentToken,
        help="Restart scrolling when the content changes",
    )
    frag.add_argument(
        "-e",
        "--replacements",
        type=parse_replacements,
        action=_FragmentToken,
        help="Replacements as 'src=dest', comma separated. Useful for escaping special characters.",
    )
    frag.add_argument("--format", action=_FragmentToken, help="Format string of an --mpd fragment")

    sources = parser.add_argument_group("Sources")
    sources.add_argument("-S", "--string", action=_FragmentToken, help="Use a string as contents")
    sources.add_argument("-f", "--file", action=_FragmentToken, help="Pull contents from a file (read whole)")
    sources.add_argument("--stdin", nargs=0, const=True, action=_FragmentToken, help="Pull contents from stdin")
    sources.add_argument(
        "--cmd", action=_FragmentToken, help="Execute a command and use its output (terminate with ';')"
    )
    sources.add_argument(
        "--mpd", action=_FragmentToken, metavar="HOST:PORT", help="Display MPD status [default from config]"
    )

    mpd = parser.add_argument_group("MPD options")
    mpd.add_argument("--status-icons", default=None, help="Play, pause and stop icons")
    mpd.add_argument("--repeat-icons", default=None, help="Repeat on[/off] icons")
    mpd.add_argument("--random-icons", default=None, help="Random on[/off] icons")
    mpd.add_argument("--single-icons", default=None, help="Single on[/off] icons")
    mpd.add_argument("--consume-icons", default=None, help="Consume on[/off] icons")
    mpd.add_argument("-D", "--default-placeholder", default=None, help="Placeholder for missing values")

    sub = parser.add_subparsers(dest="command", required=True)

    run_cmd = sub.add_parser("run", help="Run text continuously")
    run_cmd.add_argument("-d", "--duration", type=parse_duration, default=None, help="Tick duration, e.g. 1s, 250ms")
    run_cmd.add_argument("--newline", action="store_true", help="Print each iteration on its own line")
    run_cmd.add_argument("--ticks", type=int, default=None, help="Stop after this many ticks")
    run_cmd.set_defaults(func=cmd_run)

    iter_cmd = sub.add_parser("iter", help="Print one tick and persist the scroll position")
    iter_cmd.add_argument("--state", default=None, help="State file path")
    iter_cmd.add_argument(
        "--no-persist-on-error",
        action="store_true",
        help="Leave the state file untouched when the tick fails",
    )
    iter_cmd.set_defaults(func=cmd_iter)

    return parser


def _build_source(group: FragmentArgs, cfg: AppConfig, stdin: TextIO | None) -> TextSource:
    if group.kind == "string":
        return StringSource(group.value)
    if group.kind == "file":
        return FileSource(group.value)
    if group.kind == "stdin":
        return StdinSource(stdin)
    if group.kind == "cmd":
        return CommandSource(shlex.split(group.value))

    from marquee_sources.mpd_source import MpdSource, parse_address

    if group.value:
        try:
            host, port = parse_address(group.value)
        except ValueError as exc:
            raise SourceError(str(exc)) from exc
    else:
        host, port = cfg.mpd.host, cfg.mpd.port
    return MpdSource(host=host, port=port, password=cfg.mpd.password, timeout_s=cfg.mpd.timeout_s)


def _pick(cli_value: Any, cfg_value: Any) -> Any:
    return cli_value if cli_value is not None else cfg_value


def build_icons(args: argparse.Namespace, cfg: AppConfig) -> IconSets:
    return IconSets.from_specs(
        state=_pick(args.status_icons, cfg.icons.status),
        repeat=_pick(args.repeat_icons, cfg.icons.repeat),
        random=_pick(args.random_icons, cfg.icons.random),
        single=_pick(args.single_icons, cfg.icons.single),
        consume=_pick(args.consume_icons, cfg.icons.consume),
    )


def build_lanes(
    args: argparse.Namespace,
    cfg: AppConfig,
    icons: IconSets,
    stdin: TextIO | None = None,
) -> list[Lane]:
    groups = group_fragments(args.fragment_tokens or [])
    if not groups:
        raise MarqueeError("at least one source is required (--string, --file, --stdin, --cmd or --mpd)")
    default = _pick(args.default_placeholder, cfg.format.default_placeholder)

    lanes: list[Lane] = []
    for index, group in enumerate(groups):
        opts = group.options
        template = None
        if group.kind == "mpd":
            template = Template.parse(opts.get("format", cfg.format.running), icons, default)
        elif "format" in opts:
            raise MarqueeError(f"--format only applies to --mpd fragments (fragment {index + 1} is {group.kind})")

        if "window" in opts:
            width = opts["window"]
        elif group.kind == "string":
            width = max(1, len(group.value))
        else:
            width = cfg.window.width

        window = WindowConfig(
            width=width,
            separator=opts.get("separator", cfg.window.separator),
            dont_repeat=not opts.get("repeat", cfg.window.repeat),
            reset_on_change=opts.get("reset_on_change", cfg.window.reset_on_change),
            right=opts.get("right", False),
        )
        fragment = Fragment(
            window=window,
            newline=opts.get("newline", cfg.window.newline),
            replacements=tuple(opts.get("replacements", ())),
            template=template,
        )
        lanes.append(Lane(fragment=fragment, source=_build_source(group, cfg, stdin), label=f"{index + 1}:{group.kind}"))
    return lanes


def build_controller(args: argparse.Namespace, cfg: AppConfig, stdin: TextIO | None = None) -> TickController:
    icons = build_icons(args, cfg)
    default = _pick(args.default_placeholder, cfg.format.default_placeholder)

    def _template(cli_value: str | None, cfg_value: str | None) -> Template | None:
        fmt = _pick(cli_value, cfg_value)
        return Template.parse(fmt, icons, default) if fmt else None

    # Parse every format string before any source is opened.
    prefix = _template(args.prefix, cfg.format.prefix)
    suffix = _template(args.suffix, cfg.format.suffix)
    tooltip = _template(args.tooltip, cfg.format.tooltip)

    lanes = build_lanes(args, cfg, icons, stdin)
    return TickController(
        lanes,
        prefix=prefix,
        suffix=suffix,
        between=_pick(args.between, cfg.format.between),
        tooltip=tooltip,
        replacements=output_replacements(lanes),
    )


def output_replacements(lanes: list[Lane]) -> tuple[tuple[str, str], ...]:
    """Mapping for prefix, suffix and tooltip: the first templated fragment's, else the first non-empty one."""
    templated = next((lane for lane in lanes if lane.fragment.template is not None), None)
    if templated is not None:
        return templated.fragment.replacements
    return next((lane.fragment.replacements for lane in lanes if lane.fragment.replacements), ())


def cmd_run(args: argparse.Namespace, cfg: AppConfig, controller: TickController) -> int:
    if not args.no_log_file:
        install_crash_hooks()
    tick_s = args.duration if args.duration is not None else cfg.run.tick_ms / 1000
    emitter = build_emitter(args.json, newline=args.newline or cfg.run.newline)
    perf = PerformanceController(
        PerformanceTargets(
            cpu_percent_max=cfg.performance.cpu_percent_max,
            rss_mb_max=cfg.performance.rss_mb_max,
        )
    )
    controller.run(
        emitter,
        tick_s=tick_s,
        max_ticks=args.ticks,
        performance=perf,
        sample_every=cfg.performance.sample_every,
    )
    return 0


def cmd_iter(args: argparse.Namespace, cfg: AppConfig, controller: TickController) -> int:
    path = Path(args.state).expanduser() if args.state else state_path(cfg)
    persist_on_error = cfg.state.persist_on_error and not args.no_persist_on_error
    emitter = build_emitter(args.json, newline=True)
    controller.run_once(StateStore(path), emitter, persist_on_error=persist_on_error)
    return 0


def main(argv: list[str] | None = None, stdin: TextIO | None = None) -> int:
    args_in = list(sys.argv[1:] if argv is None else argv)
    parser = build_parser()
    args = parser.parse_args(normalize_argv(args_in))

    cfg = load_config(Path(args.config).expanduser() if args.config else None)
    configure_logging(
        keep_files=cfg.diagnostics.keep_log_files,
        verbose=args.verbose or cfg.diagnostics.verbose,
        log_file=not args.no_log_file,
    )
    logger = get_logger()

    try:
        controller = build_controller(args, cfg, stdin)
    except SourceError as exc:
        print(f"marquee: error: {exc}", file=sys.stderr)
        return 1
    except MarqueeError as exc:
        print(f"marquee: error: {exc}", file=sys.stderr)
        return 2

    try:
        return int(args.func(args, cfg, controller))
    except SourceError as exc:
        logger.error(str(exc), extra={"event": "source_failed"})
        return 1
    except KeyboardInterrupt:
        return 0
    finally:
        controller.close()


if __name__ == "__main__":
    raise SystemExit(main())
