#!/usr/bin/env python3
# ascii_cam/styles.py
"""
Style definitions for the ascii-cam TUI.
Provides light, dark, and auto themes for prompt_toolkit.
"""

import os

from prompt_toolkit.styles import Style
from ascii_cam.config import Config

def make_style(cfg: Config) -> Style:
    theme = cfg["ui"].get("theme", "auto")

    base_dark = {
        "frame": "bg:#000000",
        "status": "bg:#303030 #cccccc",
        "help": "bg:#202020 #dddddd",
    }
    base_light = {
        "frame": "bg:#000000",
        "status": "bg:#cccccc #000000",
        "help": "bg:#eeeeee #000000",
    }

    if theme == "light":
        return Style.from_dict(base_light)
    if theme == "dark":
        return Style.from_dict(base_dark)

    # Auto-detect via environment
    if os.getenv("TERM_THEME", "").lower() == "light":
        return Style.from_dict(base_light)
    return Style.from_dict(base_dark)
