#!/usr/bin/env python3
# ascii_cam/ui/statusbar.py

from __future__ import annotations
from prompt_toolkit.filters import Condition
from prompt_toolkit.layout import ConditionalContainer
from prompt_toolkit.widgets import Label

from ascii_cam.session import format_overlay
from ascii_cam.ui.frame_control import FrameControl


class StatusBar:
    """Mode, charset, width and fps; hidden while the overlay is off."""

    def __init__(self, control: FrameControl):
        self.control = control
        self.label = Label(self._text, style="class:status")
        self.container = ConditionalContainer(
            self.label,
            filter=Condition(lambda: self.control.overlay is not None),
        )

    def __pt_container__(self):
        return self.container

    def _text(self) -> str:
        overlay = self.control.overlay
        if overlay is None:
            return ""
        return format_overlay(overlay) + "   h: help  q: quit"
