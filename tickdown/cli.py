import argparse
import logging
import shutil
import sys
from datetime import datetime
from typing import Dict, Optional

from . import __version__
from .config import EndBehavior, RenderOptions, build_options, load_config
from .errors import ConfigurationError, SurfaceInitError
from .glyphs import GLYPH_HEIGHT, build_glyph_table
from .logging_setup import configure_logging, install_crash_hooks
from .loop import ExitStatus, RunLoop, select_strategy
from .render import Renderer
from .signals import CancelToken, InputListener
from .surface import CursesSurface, MemorySurface, Surface
from .timecalc import local_now, parse_clock_target, parse_duration

EXIT_SURFACE_ERROR = 1

log = logging.getLogger(__name__)


def _headless_snapshot(options: RenderOptions, now: datetime) -> str:
    columns = shutil.get_terminal_size((80, 24)).columns
    surface = MemorySurface(columns, GLYPH_HEIGHT)
    value = select_strategy(options, now).compute_value(now)
    Renderer(build_glyph_table()).paint(surface, options, value)
    return surface.to_text()


def _resolve_options(args: argparse.Namespace, config: Dict, now: datetime) -> RenderOptions:
    duration = parse_duration(args.duration) if args.duration is not None else None
    target = parse_clock_target(args.target, now) if args.target is not None else None
    return build_options(
        config,
        now,
        show_seconds=args.seconds,
        count_up=args.count_up,
        end_behavior=args.end,
        duration=duration,
        target=target,
        color=args.color,
    )


def _run_interactive(options: RenderOptions, surface: Optional[Surface] = None) -> int:
    surface = surface or CursesSurface()
    try:
        surface.init()
    except SurfaceInitError as exc:
        print(f"tickdown: {exc}", file=sys.stderr)
        return EXIT_SURFACE_ERROR

    cancel = CancelToken()
    listener = InputListener(surface, cancel)
    listener.start()
    try:
        strategy = select_strategy(options, local_now())
        loop = RunLoop(surface, Renderer(build_glyph_table()), options, strategy, cancel)
        status = loop.run()
    except KeyboardInterrupt:
        status = ExitStatus.INTERRUPTED
    finally:
        listener.stop()
        surface.finalize()
    log.info("exit status %s", status.name.lower())
    return int(status)


def build_parser() -> argparse.ArgumentParser:
    epilog = (
        "Without a duration, -t or -u the current time of day is shown. "
        "Controls: Esc, q or Ctrl-C quit."
    )
    parser = argparse.ArgumentParser(
        prog="tickdown",
        description="Full-screen terminal countdown, stopwatch and clock",
        epilog=epilog,
    )
    parser.add_argument("duration", nargs="?", help="countdown length, e.g. 10s, 5m30s, 1.5h")
    parser.add_argument("-s", "--seconds", action="store_true", default=None, help="show seconds")
    parser.add_argument("-u", "--count-up", action="store_true", help="count up from zero")
    end = parser.add_mutually_exclusive_group()
    end.add_argument("-b", "--blink", dest="end", action="store_const", const=EndBehavior.BLINK, help="blink when time is up")
    end.add_argument("-f", "--freeze", dest="end", action="store_const", const=EndBehavior.FREEZE, help="freeze when time is up")
    parser.add_argument("-t", "--target", metavar="HH:MM", help="count down to a time of day")
    parser.add_argument("-c", "--color", metavar="COLOR", help="digit color (default: blue)")
    parser.add_argument("--headless", action="store_true", help="print a single frame and exit")
    parser.add_argument("--log-file", metavar="PATH", help="write a JSON log to PATH")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    parser.add_argument("--version", action="version", version=f"tickdown {__version__}")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO, args.log_file)

    now = local_now()
    try:
        options = _resolve_options(args, load_config(), now)
    except ConfigurationError as exc:
        parser.error(str(exc))
    log.info("options resolved: %s", options)

    if args.headless:
        print(_headless_snapshot(options, now))
        return int(ExitStatus.COMPLETED)

    install_crash_hooks()
    return _run_interactive(options)


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
