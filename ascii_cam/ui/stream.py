#!/usr/bin/env python3
# ascii_cam/ui/stream.py
"""
Plain truecolor backend: writes each grid as SGR escapes to a text stream,
moving the cursor back to the origin before every frame.
"""

from __future__ import annotations

import sys
from typing import Optional, TextIO

from ascii_cam.rendering.renderer import ANSI_RESET, RenderGrid, to_ansi
from ascii_cam.session import StatusOverlay, format_overlay

CURSOR_HOME = "\x1b[H"
CLEAR_SCREEN = "\x1b[2J"


class StreamDisplay:
    def __init__(self, stream: Optional[TextIO] = None, home_cursor: bool = True):
        self.stream = stream or sys.stdout
        self.home_cursor = home_cursor
        self.frames = 0
        self._cleared = False

    def present(self, grid: RenderGrid, overlay: Optional[StatusOverlay]) -> None:
        parts = []
        if self.home_cursor:
            if not self._cleared:
                parts.append(CLEAR_SCREEN)
                self._cleared = True
            parts.append(CURSOR_HOME)
        parts.append(to_ansi(grid))
        parts.append("\n")
        if overlay is not None:
            parts.append(format_overlay(overlay) + ANSI_RESET + "\n")
        self.stream.write("".join(parts))
        self.stream.flush()
        self.frames += 1

    def close(self) -> None:
        self.stream.write(ANSI_RESET)
        self.stream.flush()
