#!/usr/bin/env python3
# ascii_cam/ui/frame_control.py
"""prompt_toolkit UIControl that shows the latest rendered frame."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import List, Optional, Tuple

from prompt_toolkit.application import get_app_or_none
from prompt_toolkit.layout.controls import UIContent, UIControl

from ascii_cam.rendering.renderer import FrameFrag, RenderGrid, to_fragments
from ascii_cam.session import StatusOverlay


@dataclass
class Frame:
    width: int
    height: int
    lines_frag: FrameFrag


class FrameControl(UIControl):
    """
    Display backend for the TUI. present() is called from the session
    thread; create_content() runs on the prompt_toolkit event loop.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._frame: Optional[Frame] = None
        self._overlay: Optional[StatusOverlay] = None
        self._closed = False
        self._app = None

    def bind_app(self, app) -> None:
        """Remember the Application to repaint; falls back to the current app."""
        self._app = app

    # -------- Display interface --------

    def present(self, grid: RenderGrid, overlay: Optional[StatusOverlay]) -> None:
        lines = to_fragments(grid)
        frame = Frame(len(grid[0]) if grid else 0, len(grid), lines)
        with self._lock:
            self._frame = frame
            self._overlay = overlay
        self._invalidate()

    def close(self) -> None:
        with self._lock:
            self._closed = True
        self._invalidate()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def overlay(self) -> Optional[StatusOverlay]:
        with self._lock:
            return self._overlay

    def latest(self) -> Optional[Frame]:
        with self._lock:
            return self._frame

    def _invalidate(self) -> None:
        app = self._app or get_app_or_none()
        if app:
            app.invalidate()

    # -------- UIControl interface --------

    def is_focusable(self) -> bool:
        return True

    def preferred_width(self, max_available_width: int) -> int:
        return max_available_width

    def preferred_height(
        self,
        width: int,
        max_available_height: int,
        wrap_lines: bool,
        get_line_prefix,
    ) -> int:
        return max_available_height

    def create_content(self, width: int, height: int) -> UIContent:
        width = max(1, int(width))
        height = max(1, int(height))
        frame = self.latest()
        if frame is None:
            return self._blank_content(width, height)

        lines_frag = self._crop_lines(frame, width)
        blank = [("", " " * width)]
        return UIContent(
            get_line=lambda i: lines_frag[i] if 0 <= i < len(lines_frag) else blank,
            line_count=max(height, len(lines_frag)),
        )

    # -------- helpers --------

    @staticmethod
    def _blank_content(width: int, height: int) -> UIContent:
        empty_line = [("", " " * width)]
        return UIContent(get_line=lambda i: empty_line, line_count=height)

    @staticmethod
    def _crop_lines(frame: Frame, width: int) -> List[List[Tuple[str, str]]]:
        """Cut rows wider than the window instead of letting them wrap."""
        if frame.width <= width:
            return frame.lines_frag
        out = []
        for line in frame.lines_frag:
            kept, used = [], 0
            for style, text in line:
                if used >= width:
                    break
                piece = text[: width - used]
                kept.append((style, piece))
                used += len(piece)
            out.append(kept)
        return out
