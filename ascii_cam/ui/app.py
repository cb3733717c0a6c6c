#!/usr/bin/env python3
# ascii_cam/ui/app.py
"""Compose the prompt_toolkit application for the live ASCII view."""

from __future__ import annotations

import logging
import threading
from typing import Optional

from prompt_toolkit.application import Application
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.layout import HSplit, Layout, Window

from ascii_cam.capture import CaptureError, FrameSource
from ascii_cam.config import Config, SessionSettings
from ascii_cam.rendering.renderer import Renderer
from ascii_cam.session import EventQueue, InputEvent, Session, SessionState
from ascii_cam.styles import make_style
from ascii_cam.ui.frame_control import FrameControl
from ascii_cam.ui.helppane import HelpPane
from ascii_cam.ui.statusbar import StatusBar

log = logging.getLogger(__name__)

# key -> event; "+" and "=" share a key cap on most layouts
KEYMAP = {
    "m": InputEvent.NEXT_MODE,
    "c": InputEvent.NEXT_CHARSET,
    "+": InputEvent.WIDEN,
    "=": InputEvent.WIDEN,
    "-": InputEvent.NARROW,
    "f": InputEvent.FLIP,
    "u": InputEvent.TOGGLE_UI,
}


class AsciiCamApp:
    def __init__(
        self,
        cfg: Config,
        settings: SessionSettings,
        source: FrameSource,
        renderer: Optional[Renderer] = None,
    ):
        self.cfg = cfg
        self.events = EventQueue()
        self.state = SessionState.from_settings(settings)
        self.frame_control = FrameControl()
        self.session = Session(
            source,
            self.frame_control,
            self.events,
            self.state,
            renderer=renderer,
            poll_timeout=cfg["ui"]["poll_ms"] / 1000.0,
            loop_at_end=settings.loop,
        )
        self.status = StatusBar(self.frame_control)
        self.help_pane = HelpPane()
        self._error: Optional[BaseException] = None
        self._thread: Optional[threading.Thread] = None
        self._finished = threading.Event()

        self.frame_window = Window(
            content=self.frame_control,
            dont_extend_width=False,
            wrap_lines=False,
            style="class:frame",
        )
        self.root = HSplit([
            self.frame_window,
            self.status,        # hidden while the overlay is off
            self.help_pane,     # hidden until toggled
        ])

        self.kb = self._build_key_bindings()
        self.app = Application(
            layout=Layout(self.root, focused_element=self.frame_window),
            key_bindings=self.kb,
            full_screen=True,
            style=make_style(cfg),
        )
        self.frame_control.bind_app(self.app)

    def _build_key_bindings(self):
        kb = KeyBindings()

        def _push(event_type: InputEvent):
            def _(event):
                self.events.push(event_type)
            return _

        for key, event_type in KEYMAP.items():
            kb.add(key)(_push(event_type))

        @kb.add("q")
        @kb.add("c-c")
        def _(event):
            self.events.push(InputEvent.QUIT)
            event.app.exit()

        @kb.add("h")
        def _(event):
            self.help_pane.toggle()
            event.app.invalidate()

        return kb

    # -------- session thread --------

    def _session_worker(self) -> None:
        try:
            self.session.run()
        except CaptureError as e:
            self._error = e
        finally:
            self._request_exit()

    def _request_exit(self) -> None:
        # The worker can finish before the event loop is up; wait for it.
        while not self._finished.is_set():
            loop = self.app.loop
            if loop is not None and self.app.is_running:
                loop.call_soon_threadsafe(self._exit_if_running)
                return
            self._finished.wait(0.01)

    def _exit_if_running(self) -> None:
        if self.app.is_running and not self.app.is_done:
            self.app.exit()

    def run(self) -> None:
        """Run until quit. Re-raises a capture failure from the session thread."""
        self._thread = threading.Thread(target=self._session_worker, name="ascii-cam-session", daemon=True)
        self.app.pre_run_callables.append(self._thread.start)
        try:
            self.app.run()
        finally:
            self._finished.set()
            self.session.stop()
            if self._thread.is_alive():
                self._thread.join(timeout=1.0)
        if self._error is not None:
            raise self._error
