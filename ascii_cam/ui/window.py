#!/usr/bin/env python3
# ascii_cam/ui/window.py
"""
Windowed backend: a tkinter Text widget laid out as colored glyph runs.

Tk must stay on the main thread, so the session runs on a worker thread and
hands grids over through a one-slot queue that the Tk loop drains with
after(). Keys are decoded into InputEvents the same way as in the TUI.
"""

from __future__ import annotations

import logging
import queue
import threading
import tkinter as tk
from typing import Dict, Optional, Tuple

from ascii_cam.capture import CaptureError, FrameSource
from ascii_cam.config import Config, SessionSettings
from ascii_cam.rendering.renderer import RenderGrid, Renderer
from ascii_cam.session import (
    EventQueue,
    InputEvent,
    Session,
    SessionState,
    StatusOverlay,
    format_overlay,
)

log = logging.getLogger(__name__)

KEYMAP = {
    "m": InputEvent.NEXT_MODE,
    "c": InputEvent.NEXT_CHARSET,
    "plus": InputEvent.WIDEN,
    "equal": InputEvent.WIDEN,
    "minus": InputEvent.NARROW,
    "f": InputEvent.FLIP,
    "u": InputEvent.TOGGLE_UI,
    "q": InputEvent.QUIT,
    "Escape": InputEvent.QUIT,
}

DRAIN_MS = 10
MAX_TAGS = 4096


class WindowDisplay:
    def __init__(self, events: EventQueue, title: str = "ascii-cam", font_size: int = 8):
        self.events = events
        self.root = tk.Tk()
        self.root.title(title)
        self.root.configure(bg="black")
        self.text = tk.Text(
            self.root,
            bg="black",
            fg="white",
            font=("Courier", font_size),
            wrap="none",
            borderwidth=0,
            highlightthickness=0,
        )
        self.status = tk.Label(self.root, anchor="w", bg="#303030", fg="#cccccc", font=("Courier", 10))
        self.text.pack(fill="both", expand=True)
        self.status.pack(fill="x")

        self._pending: "queue.Queue[Tuple[RenderGrid, Optional[StatusOverlay]]]" = queue.Queue(maxsize=1)
        self._closed = threading.Event()
        self._tags: Dict[Tuple[int, int, int], str] = {}

        self.root.bind("<Key>", self._on_key)
        self.root.protocol("WM_DELETE_WINDOW", self._on_close)

    # -------- Display interface (session thread) --------

    def present(self, grid: RenderGrid, overlay: Optional[StatusOverlay]) -> None:
        # Keep only the newest frame; a slow window never backs up the session.
        try:
            self._pending.get_nowait()
        except queue.Empty:
            pass
        self._pending.put_nowait((grid, overlay))

    def close(self) -> None:
        self._closed.set()

    # -------- Tk thread --------

    def _on_key(self, event) -> None:
        action = KEYMAP.get(event.keysym) or KEYMAP.get(event.char)
        if action is not None:
            self.events.push(action)

    def _on_close(self) -> None:
        self.events.push(InputEvent.QUIT)
        self._closed.set()

    def _tag_for(self, color: Tuple[int, int, int]) -> str:
        tag = self._tags.get(color)
        if tag is None:
            if len(self._tags) >= MAX_TAGS:
                self.text.tag_delete(*self._tags.values())
                self._tags.clear()
            tag = "c%02x%02x%02x" % color
            self.text.tag_configure(tag, foreground="#%02x%02x%02x" % color)
            self._tags[color] = tag
        return tag

    def _draw(self, grid: RenderGrid, overlay: Optional[StatusOverlay]) -> None:
        self.text.configure(state="normal")
        self.text.delete("1.0", "end")
        for y, cells in enumerate(grid):
            run, run_color = [], None
            for cell in cells:
                if cell.color != run_color and run:
                    self.text.insert("end", "".join(run), self._tag_for(run_color))
                    run = []
                run_color = cell.color
                run.append(cell.glyph)
            if run:
                self.text.insert("end", "".join(run), self._tag_for(run_color))
            if y < len(grid) - 1:
                self.text.insert("end", "\n")
        self.text.configure(state="disabled")
        self.status.configure(text=format_overlay(overlay) if overlay is not None else "")

    def _drain(self) -> None:
        try:
            grid, overlay = self._pending.get_nowait()
        except queue.Empty:
            pass
        else:
            self._draw(grid, overlay)
        if self._closed.is_set():
            self.root.quit()
            return
        self.root.after(DRAIN_MS, self._drain)

    def mainloop(self) -> None:
        self.root.after(DRAIN_MS, self._drain)
        self.root.mainloop()

    def destroy(self) -> None:
        try:
            self.root.destroy()
        except tk.TclError:
            pass


def run_window(
    cfg: Config,
    settings: SessionSettings,
    source: FrameSource,
    renderer: Optional[Renderer] = None,
) -> None:
    """Run the session against a Tk window until it is closed."""
    events = EventQueue()
    display = WindowDisplay(events, font_size=cfg["ui"]["font_size"])
    session = Session(
        source,
        display,
        events,
        SessionState.from_settings(settings),
        renderer=renderer,
        poll_timeout=cfg["ui"]["poll_ms"] / 1000.0,
        loop_at_end=settings.loop,
    )
    errors = []

    def _worker():
        try:
            session.run()
        except CaptureError as e:
            errors.append(e)

    thread = threading.Thread(target=_worker, name="ascii-cam-session", daemon=True)
    thread.start()
    try:
        display.mainloop()
    finally:
        session.stop()
        thread.join(timeout=1.0)
        display.destroy()
    if errors:
        raise errors[0]
