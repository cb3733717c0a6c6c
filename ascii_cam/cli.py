#!/usr/bin/env python3
# ascii_cam/cli.py
"""
Entry point for ascii-cam.
Loads configuration, opens the capture source and runs the chosen display.
"""

import argparse
import logging
import os
import random
import sys
from typing import List, Optional, Sequence

from ascii_cam.capture import CaptureError, FrameSource, open_source
from ascii_cam.config import Config, ConfigError, SessionSettings
from ascii_cam.logging_conf import setup_logging
from ascii_cam.rendering.colors import ColorMode
from ascii_cam.rendering.palettes import Charset
from ascii_cam.rendering.renderer import Renderer
from ascii_cam.session import EventQueue, Session, SessionState
from ascii_cam.ui.stream import StreamDisplay
from ascii_cam.version import version_info

log = logging.getLogger(__name__)


def _choices(enum_cls) -> List[str]:
    return [m.value for m in enum_cls]


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="ascii-cam",
        description="Render a camera, video or image as live colored ASCII art.",
    )
    ap.add_argument("source", nargs="?", default=None,
                    help="Camera index, video file or image file (default: from config, camera 0)")
    ap.add_argument("-w", "--width", type=int, default=None, help="Output width in characters (>= 10)")
    ap.add_argument("--charset", choices=_choices(Charset), default=None, help="Glyph ramp")
    ap.add_argument("--mode", choices=_choices(ColorMode), default=None, help="Color mode")
    ap.add_argument("--flip", action="store_true", default=None, help="Mirror the image horizontally")
    ap.add_argument("--invert", action="store_true", default=None, help="Reverse the glyph ramp")
    ap.add_argument("--window", action="store_true", help="Open a window instead of using the terminal")
    ap.add_argument("--no-ui", action="store_true", help="Start with the status bar hidden")
    ap.add_argument("--no-loop", action="store_true", help="Do not rewind video files at end of stream")
    ap.add_argument("--once", action="store_true", help="Print a single frame to stdout and exit")
    ap.add_argument("--config", default=None, help="Path to a JSON config file")
    ap.add_argument("--log-level", default=None, help="Override the configured log level")
    ap.add_argument("--seed", type=int, default=None, help="Seed for glitch mode randomness")
    ap.add_argument("--version", action="version", version=version_info())
    return ap


def settings_from_args(cfg: Config, args: argparse.Namespace) -> SessionSettings:
    return SessionSettings.from_config(
        cfg,
        charset=Charset(args.charset) if args.charset else None,
        mode=ColorMode(args.mode) if args.mode else None,
        width=args.width,
        device_or_path=args.source,
        flip=args.flip,
        invert_charset=args.invert,
        run_in_terminal=False if args.window else None,
        show_ui=False if args.no_ui else None,
        loop=False if args.no_loop else None,
    ).validate()


def run_once(settings: SessionSettings, source: FrameSource, renderer: Renderer, stream=None) -> int:
    """Render the first available frame as plain truecolor text."""
    state = SessionState.from_settings(settings)
    state.show_ui = False
    display = StreamDisplay(stream or sys.stdout, home_cursor=False)
    session = Session(source, display, EventQueue(), state, renderer=renderer,
                      poll_timeout=0.0, loop_at_end=False)
    # A camera may hand out a few empty frames while warming up.
    for _ in range(30):
        session.step()
        if session.frames_presented:
            break
    display.close()
    if not session.frames_presented:
        log.error("No frame received from %s", settings.device_or_path)
        return 1
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = Config.load(args.config)

    try:
        settings = settings_from_args(cfg, args)
    except ConfigError as e:
        print(f"ascii-cam: invalid settings: {e}", file=sys.stderr)
        return 2

    fullscreen = not args.once
    setup_logging(cfg, args.log_level, fullscreen=fullscreen)

    if fullscreen and settings.run_in_terminal and os.name == "nt" and not sys.stdout.isatty():
        print("No Windows console detected. Run from cmd, PowerShell, or Windows Terminal.")
        return 1

    renderer = Renderer(random.Random(args.seed))
    try:
        source = open_source(settings.device_or_path)
    except CaptureError as e:
        print(f"ascii-cam: {e}", file=sys.stderr)
        return 1

    try:
        if args.once:
            return run_once(settings, source, renderer)
        if settings.run_in_terminal:
            from ascii_cam.ui.app import AsciiCamApp
            AsciiCamApp(cfg, settings, source, renderer).run()
        else:
            from ascii_cam.ui.window import run_window
            run_window(cfg, settings, source, renderer)
    except CaptureError as e:
        print(f"ascii-cam: {e}", file=sys.stderr)
        return 1
    finally:
        source.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
