#!/usr/bin/env python3
# ascii_cam/config.py
"""
Config loader and defaults for ascii-cam.

Goals:
- Single JSON file per user, read-only at runtime.
- Deep-merge of user config over defaults.
- Basic validation with sane fallbacks.
- One validated SessionSettings struct handed to the session.

Usage:
    from ascii_cam.config import Config, SessionSettings
    cfg = Config.load()                 # ~/.config/ascii_cam/ascii_cam.json or OS-specific
    settings = SessionSettings.from_config(cfg, width=120).validate()
"""

from __future__ import annotations

import copy
import json
import logging
import os
import platform
import shutil
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple

from ascii_cam.rendering.colors import ColorMode
from ascii_cam.rendering.palettes import Charset, get_chars

log = logging.getLogger(__name__)

MIN_WIDTH = 10
MAX_WIDTH = 500

# ----------------------------
# Defaults
# ----------------------------

DEFAULT_CONFIG: Dict[str, Any] = {
    "capture": {
        "source": "0",                    # camera index, image path or video path
        "loop": True,                     # rewind video files at end of stream
    },
    "render": {
        "charset": "default",             # retro | default | light | detailed | testing
        "mode": "standard",               # see ColorMode
        "width": 100,                     # output columns, 10..500
        "flip": False,                    # mirror horizontally
        "invert_charset": False,
    },
    "ui": {
        "show_ui": True,                  # status bar visible at start
        "run_in_terminal": True,          # False opens a window instead
        "theme": "auto",                  # auto | light | dark
        "poll_ms": 1,                     # input poll per frame
        "font_size": 8,                   # window backend only
    },
    "logging": {
        "level": "INFO",
        "file": None,                     # path or None
        "rotate_bytes": 5 * 1024 * 1024,
        "rotate_keep": 3,
    },
}

# ----------------------------
# Helpers
# ----------------------------

def _os_config_home() -> str:
    """Return per-OS config base directory."""
    if platform.system() == "Windows":
        base = os.environ.get("APPDATA") or os.path.expanduser("~\\AppData\\Roaming")
        return os.path.join(base, "AsciiCam")
    # macOS: ~/Library/Application Support/AsciiCam
    if platform.system() == "Darwin":
        return os.path.join(os.path.expanduser("~/Library/Application Support"), "AsciiCam")
    # Linux and others: ~/.config/ascii_cam
    return os.path.join(os.path.expanduser("~/.config"), "ascii_cam")

def _default_config_path() -> str:
    """Resolve default config path, honoring ASCII_CAM_CONFIG env override."""
    env = os.environ.get("ASCII_CAM_CONFIG")
    if env:
        return os.path.expanduser(env)
    return os.path.join(_os_config_home(), "ascii_cam.json")

def _deep_merge(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    """Return deep-merged copy of dicts: values in b override a."""
    out = dict(a)
    for k, v in b.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out

def _coerce_int(v: Any, default: int, minmax: Optional[Tuple[int, int]] = None) -> int:
    try:
        x = int(v)
    except (TypeError, ValueError):
        return int(default)
    if minmax:
        lo, hi = minmax
        if x < lo: x = lo
        if x > hi: x = hi
    return x

def _coerce_bool(v: Any, default: bool) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, str):
        s = v.strip().lower()
        if s in ("1", "true", "yes", "on"): return True
        if s in ("0", "false", "no", "off"): return False
    return default

def _coerce_choice(v: Any, enum_cls, default: str) -> str:
    try:
        return enum_cls(str(v).strip().lower()).value
    except ValueError:
        return default

# ----------------------------
# Validation
# ----------------------------

def _validate(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Return validated copy with fallbacks applied."""
    c = _deep_merge(copy.deepcopy(DEFAULT_CONFIG), cfg or {})

    # capture
    cap = c["capture"]
    cap["source"] = str(cap.get("source") if cap.get("source") is not None else DEFAULT_CONFIG["capture"]["source"])
    cap["loop"] = _coerce_bool(cap.get("loop"), DEFAULT_CONFIG["capture"]["loop"])

    # render
    r = c["render"]
    r["charset"] = _coerce_choice(r.get("charset"), Charset, DEFAULT_CONFIG["render"]["charset"])
    r["mode"] = _coerce_choice(r.get("mode"), ColorMode, DEFAULT_CONFIG["render"]["mode"])
    # Narrow widths are kept as-is; SessionSettings.validate() rejects them.
    r["width"] = min(_coerce_int(r.get("width"), DEFAULT_CONFIG["render"]["width"]), MAX_WIDTH)
    for key in ("flip", "invert_charset"):
        r[key] = _coerce_bool(r.get(key), DEFAULT_CONFIG["render"][key])

    # ui
    ui = c["ui"]
    for key in ("show_ui", "run_in_terminal"):
        ui[key] = _coerce_bool(ui.get(key), DEFAULT_CONFIG["ui"][key])
    if ui.get("theme") not in ("auto", "light", "dark"):
        ui["theme"] = DEFAULT_CONFIG["ui"]["theme"]
    ui["poll_ms"] = _coerce_int(ui.get("poll_ms"), DEFAULT_CONFIG["ui"]["poll_ms"], (0, 100))
    ui["font_size"] = _coerce_int(ui.get("font_size"), DEFAULT_CONFIG["ui"]["font_size"], (4, 32))

    # logging
    lg = c["logging"]
    if str(lg.get("level", "")).upper() not in ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"):
        lg["level"] = DEFAULT_CONFIG["logging"]["level"]
    lg["level"] = str(lg["level"]).upper()
    lf = lg.get("file")
    lg["file"] = str(lf) if lf else None
    lg["rotate_bytes"] = _coerce_int(lg.get("rotate_bytes"), DEFAULT_CONFIG["logging"]["rotate_bytes"], (256 * 1024, 50 * 1024 * 1024))
    lg["rotate_keep"]  = _coerce_int(lg.get("rotate_keep"), DEFAULT_CONFIG["logging"]["rotate_keep"], (0, 50))

    return c

# ----------------------------
# Public API
# ----------------------------

class ConfigError(ValueError):
    """Invalid settings; raised before a session starts."""


@dataclass
class Config:
    """Thin wrapper around a nested dict with load/merge."""
    data: Dict[str, Any] = field(default_factory=lambda: _validate({}))
    path: str = field(default_factory=_default_config_path)

    # --- Mapping-style access
    def __getitem__(self, k: str) -> Any:
        return self.data[k]

    def __setitem__(self, k: str, v: Any) -> None:
        self.data[k] = v

    def get(self, k: str, default: Any = None) -> Any:
        return self.data.get(k, default)

    # --- Ops
    @classmethod
    def load(cls, path: Optional[str] = None) -> "Config":
        cfg_path = os.path.expanduser(path) if path else _default_config_path()
        if not os.path.exists(cfg_path):
            return cls(_validate(DEFAULT_CONFIG), cfg_path)

        try:
            with open(cfg_path, "r", encoding="utf-8") as f:
                user_cfg = json.load(f)
            if not isinstance(user_cfg, dict):
                raise ValueError("top level must be an object")
        except (OSError, ValueError) as e:
            # Corrupt file. Keep a copy and fall back to defaults.
            log.warning("Ignoring unreadable config %s: %s", cfg_path, e)
            try:
                shutil.copyfile(cfg_path, cfg_path + ".corrupt.bak")
            except OSError:
                pass
            user_cfg = {}

        return cls(_validate(_deep_merge(DEFAULT_CONFIG, user_cfg)), cfg_path)

    def update(self, partial: Dict[str, Any]) -> None:
        """Deep-merge a partial config then validate."""
        merged = _deep_merge(self.data, partial)
        self.data = _validate(merged)


@dataclass(frozen=True)
class SessionSettings:
    """Validated start-up settings for one interactive run."""
    charset: Charset = Charset.DEFAULT
    mode: ColorMode = ColorMode.STANDARD
    width: int = 100
    device_or_path: str = "0"
    flip: bool = False
    invert_charset: bool = False
    run_in_terminal: bool = True
    show_ui: bool = True
    loop: bool = True

    @classmethod
    def from_config(cls, cfg: Config, **overrides: Any) -> "SessionSettings":
        """Build from a loaded Config; keyword overrides win when not None."""
        r, ui = cfg["render"], cfg["ui"]
        base = cls(
            charset=Charset(r["charset"]),
            mode=ColorMode(r["mode"]),
            width=int(r["width"]),
            device_or_path=str(cfg["capture"]["source"]),
            flip=bool(r["flip"]),
            invert_charset=bool(r["invert_charset"]),
            run_in_terminal=bool(ui["run_in_terminal"]),
            show_ui=bool(ui["show_ui"]),
            loop=bool(cfg["capture"]["loop"]),
        )
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(base, **changes)

    def validate(self) -> "SessionSettings":
        try:
            charset = Charset(self.charset)
            mode = ColorMode(self.mode)
        except ValueError as e:
            raise ConfigError(str(e)) from e
        if not isinstance(self.width, int) or self.width < MIN_WIDTH:
            raise ConfigError(f"width must be an integer >= {MIN_WIDTH}, got {self.width!r}")
        if not get_chars(charset):
            raise ConfigError(f"charset {charset.value!r} has no glyphs")
        if not str(self.device_or_path).strip():
            raise ConfigError("no capture source given")
        return replace(self, charset=charset, mode=mode, width=min(self.width, MAX_WIDTH))


__all__ = [
    "Config",
    "ConfigError",
    "DEFAULT_CONFIG",
    "MAX_WIDTH",
    "MIN_WIDTH",
    "SessionSettings",
    "_default_config_path",
]
