#!/usr/bin/env python3
# ascii_cam/ui/helppane.py

from __future__ import annotations

from prompt_toolkit.filters import Condition
from prompt_toolkit.layout import ConditionalContainer
from prompt_toolkit.widgets import Frame, TextArea

_HELP_TEXT = (
    "Key Bindings:\n"
    "  m         Next color mode\n"
    "  c         Next charset\n"
    "  + / -     Widen / narrow output\n"
    "  f         Mirror horizontally\n"
    "  u         Toggle status bar\n"
    "  h         Toggle this help\n"
    "  q         Quit\n"
)


class HelpPane:
    def __init__(self):
        self._visible = False
        self.text_area = TextArea(
            text=_HELP_TEXT,
            style="class:help",
            read_only=True,
            focusable=False,
        )
        self.frame = Frame(self.text_area, title="Help", style="class:help")
        self.container = ConditionalContainer(self.frame, filter=Condition(lambda: self._visible))

    def __pt_container__(self):
        return self.container

    def toggle(self) -> None:
        self._visible = not self._visible

    @property
    def visible(self) -> bool:
        return self._visible
