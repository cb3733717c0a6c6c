#!/usr/bin/env python3
# ascii_cam/logging_conf.py
"""
Central logging setup for ascii-cam.
Supports console and optional rotating file logs.
"""

import logging
from logging.handlers import RotatingFileHandler
from ascii_cam.config import Config

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def setup_logging(cfg: Config, level_override: str = None, fullscreen: bool = False) -> None:
    level_name = (level_override or cfg["logging"].get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)
    log_file = cfg["logging"].get("file")

    # Console lines would tear a full-screen display; keep only warnings there.
    console_level = max(level, logging.WARNING) if fullscreen and not log_file else level
    logging.basicConfig(level=console_level, format=LOG_FORMAT)

    if log_file:
        handler = RotatingFileHandler(
            log_file,
            maxBytes=int(cfg["logging"].get("rotate_bytes", 5 * 1024 * 1024)),
            backupCount=int(cfg["logging"].get("rotate_keep", 3)),
            encoding="utf-8",
        )
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.setLevel(level)
        root = logging.getLogger()
        root.addHandler(handler)
        root.setLevel(min(root.level, level))
        if fullscreen:
            for h in root.handlers:
                if h is not handler and isinstance(h, logging.StreamHandler) and not isinstance(h, RotatingFileHandler):
                    h.setLevel(logging.WARNING)
