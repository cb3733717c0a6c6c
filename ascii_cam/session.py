#!/usr/bin/env python3
# ascii_cam/session.py
"""
Interactive session loop.

One iteration per incoming frame:
  1. poll for at most one input event (bounded wait)
  2. apply it to SessionState
  3. read the next frame, rewinding once at end of stream
  4. render and hand the grid to the display
  5. advance the frame counter

Rendering always reads an immutable RenderSettings snapshot taken under the
state lock, so input handled on another thread cannot tear a frame.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Protocol

import numpy as np

from ascii_cam.capture import CaptureError, FrameSource
from ascii_cam.config import MAX_WIDTH, MIN_WIDTH, SessionSettings
from ascii_cam.rendering.colors import RAINBOW_PERIOD, ColorMode, next_mode
from ascii_cam.rendering.palettes import Charset, next_charset
from ascii_cam.rendering.renderer import Renderer, RenderGrid, RenderSettings

log = logging.getLogger(__name__)

__all__ = [
    "COUNTER_MODULUS",
    "WIDTH_STEP",
    "Display",
    "EventQueue",
    "InputEvent",
    "Session",
    "SessionState",
    "StatusOverlay",
    "format_overlay",
]

WIDTH_STEP = 2
# Largest multiple of RAINBOW_PERIOD below 2**32; rainbow hue keeps its 5 degree step across the wrap.
COUNTER_MODULUS = 2 ** 32 - (2 ** 32 % RAINBOW_PERIOD)


class InputEvent(Enum):
    QUIT = "quit"
    NEXT_MODE = "next_mode"
    NEXT_CHARSET = "next_charset"
    WIDEN = "widen"
    NARROW = "narrow"
    FLIP = "flip"
    TOGGLE_UI = "toggle_ui"


@dataclass(frozen=True)
class StatusOverlay:
    mode: ColorMode
    charset: Charset
    width: int
    fps: float = 0.0


def format_overlay(overlay: StatusOverlay) -> str:
    return (
        f" mode={overlay.mode.value} charset={overlay.charset.value} "
        f"width={overlay.width} fps={overlay.fps:.1f}"
    )


class Display(Protocol):
    def present(self, grid: RenderGrid, overlay: Optional[StatusOverlay]) -> None: ...

    def close(self) -> None: ...


class EventQueue:
    """Thread-safe hand-off of decoded input events to the session loop."""

    def __init__(self):
        self._q: queue.Queue = queue.Queue()

    def push(self, event: InputEvent) -> None:
        self._q.put_nowait(event)

    def poll(self, timeout: float = 0.0) -> Optional[InputEvent]:
        try:
            if timeout <= 0:
                return self._q.get_nowait()
            return self._q.get(timeout=timeout)
        except queue.Empty:
            return None


@dataclass
class SessionState:
    """Mutable runtime state for one run; only the session loop writes it."""
    charset: Charset = Charset.DEFAULT
    mode: ColorMode = ColorMode.STANDARD
    width: int = 100
    flip: bool = False
    invert_charset: bool = False
    show_ui: bool = True
    frame_counter: int = 0
    running: bool = True

    # Internal lock for multi-thread reads
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    @classmethod
    def from_settings(cls, settings: SessionSettings) -> "SessionState":
        return cls(
            charset=settings.charset,
            mode=settings.mode,
            width=settings.width,
            flip=settings.flip,
            invert_charset=settings.invert_charset,
            show_ui=settings.show_ui,
        )

    def apply(self, event: InputEvent) -> None:
        with self._lock:
            if event is InputEvent.QUIT:
                self.running = False
            elif event is InputEvent.NEXT_MODE:
                self.mode = next_mode(self.mode)
            elif event is InputEvent.NEXT_CHARSET:
                self.charset = next_charset(self.charset)
            elif event is InputEvent.WIDEN:
                self.width = min(MAX_WIDTH, self.width + WIDTH_STEP)
            elif event is InputEvent.NARROW:
                self.width = max(MIN_WIDTH, self.width - WIDTH_STEP)
            elif event is InputEvent.FLIP:
                self.flip = not self.flip
            elif event is InputEvent.TOGGLE_UI:
                self.show_ui = not self.show_ui
        log.debug("%s -> mode=%s charset=%s width=%d", event.value, self.mode.value, self.charset.value, self.width)

    def advance(self) -> None:
        with self._lock:
            self.frame_counter = (self.frame_counter + 1) % COUNTER_MODULUS

    def snapshot(self) -> RenderSettings:
        """Return a frozen copy used by one render pass."""
        with self._lock:
            return RenderSettings(
                charset=self.charset,
                mode=self.mode,
                width=self.width,
                invert_charset=self.invert_charset,
                flip=self.flip,
                frame_counter=self.frame_counter,
            )

    def overlay(self, fps: float = 0.0) -> Optional[StatusOverlay]:
        with self._lock:
            if not self.show_ui:
                return None
            return StatusOverlay(self.mode, self.charset, self.width, fps)


def _is_empty(frame) -> bool:
    return frame is None or np.asarray(frame).size == 0


class Session:
    """Drives capture -> render -> display until quit or capture failure."""

    def __init__(
        self,
        source: FrameSource,
        display: Display,
        events: EventQueue,
        state: SessionState,
        renderer: Optional[Renderer] = None,
        poll_timeout: float = 0.001,
        loop_at_end: bool = True,
        max_frames: Optional[int] = None,
    ):
        self.source = source
        self.display = display
        self.events = events
        self.state = state
        self.renderer = renderer or Renderer()
        self.poll_timeout = poll_timeout
        self.loop_at_end = loop_at_end
        self.max_frames = max_frames
        self.frames_presented = 0
        self.fps = 0.0
        self._last_present: Optional[float] = None

    def _acquire(self, flip: bool):
        if not self.source.is_open():
            raise CaptureError("capture source is no longer open")
        frame = self.source.next_frame(flip)
        if _is_empty(frame) and self.loop_at_end:
            log.info("End of stream, rewinding")
            self.source.seek_to_start()
            frame = self.source.next_frame(flip)
        return None if _is_empty(frame) else frame

    def _tick_fps(self) -> None:
        now = time.monotonic()
        if self._last_present is not None:
            dt = now - self._last_present
            if dt > 0:
                inst = 1.0 / dt
                self.fps = inst if self.fps == 0.0 else 0.9 * self.fps + 0.1 * inst
        self._last_present = now

    def step(self) -> bool:
        """Run one iteration. Returns False once the session should end."""
        event = self.events.poll(self.poll_timeout)
        if event is not None:
            self.state.apply(event)
        if not self.state.running:
            return False

        settings = self.state.snapshot()
        frame = self._acquire(settings.flip)
        if frame is None:
            return True

        grid = self.renderer.render(frame, settings)
        if grid:
            self._tick_fps()
            self.display.present(grid, self.state.overlay(self.fps))
            self.frames_presented += 1
        self.state.advance()
        return True

    def stop(self) -> None:
        self.events.push(InputEvent.QUIT)

    def run(self) -> None:
        """Loop until quit; the display is closed on every exit path."""
        log.info("Session started")
        try:
            while self.step():
                if self.max_frames is not None and self.frames_presented >= self.max_frames:
                    break
        except CaptureError:
            log.error("Capture failed, ending session", exc_info=True)
            raise
        finally:
            self.display.close()
            log.info("Session ended after %d frames", self.frames_presented)
