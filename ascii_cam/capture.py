#!/usr/bin/env python3
# ascii_cam/capture.py
"""
Frame sources.

Every source hands out RGB frames as (H, W, 3) uint8 arrays. An empty array
means "no data this tick" (end of a file, a dropped camera frame); the
session decides whether to loop. Unrecoverable failures raise CaptureError.

- CameraSource / VideoFileSource: OpenCV VideoCapture
- StillImageSource: a Pillow-decoded image returned on every call
- ArraySource: frames already in memory
"""

from __future__ import annotations

import logging
import os
from typing import Iterable, List, Optional, Protocol

import cv2
import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from ascii_cam.rendering.sampler import as_pixels

log = logging.getLogger(__name__)

__all__ = [
    "CaptureError",
    "FrameSource",
    "CameraSource",
    "VideoFileSource",
    "StillImageSource",
    "ArraySource",
    "open_source",
]

IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg", ".bmp", ".gif", ".webp", ".tif", ".tiff")


def _empty() -> np.ndarray:
    return np.zeros((0, 0, 3), dtype=np.uint8)


class CaptureError(RuntimeError):
    """The capture device or file cannot deliver frames any more."""


class FrameSource(Protocol):
    def next_frame(self, flip: bool = False) -> np.ndarray: ...

    def is_open(self) -> bool: ...

    def seek_to_start(self) -> None: ...

    def close(self) -> None: ...


class _OpenCVSource:
    """Shared VideoCapture plumbing for cameras and video files."""

    label = "capture"

    def __init__(self, cap: "cv2.VideoCapture", name: str):
        self._cap = cap
        self.name = name
        if not self._cap.isOpened():
            self._cap.release()
            raise CaptureError(f"unable to open {self.label} {name}")
        log.info("Opened %s %s", self.label, name)

    def next_frame(self, flip: bool = False) -> np.ndarray:
        if not self.is_open():
            raise CaptureError(f"{self.label} {self.name} is closed")
        ok, frame = self._cap.read()
        if not ok or frame is None or frame.size == 0:
            return _empty()
        if flip:
            frame = cv2.flip(frame, 1)
        if frame.ndim == 2:
            return cv2.cvtColor(frame, cv2.COLOR_GRAY2RGB)
        return cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)

    def is_open(self) -> bool:
        return self._cap is not None and self._cap.isOpened()

    def seek_to_start(self) -> None:
        if self.is_open():
            self._cap.set(cv2.CAP_PROP_POS_FRAMES, 0)

    def close(self) -> None:
        if self._cap is not None:
            self._cap.release()
            log.info("Released %s %s", self.label, self.name)
            self._cap = None


class CameraSource(_OpenCVSource):
    label = "camera"

    def __init__(self, device_index: int = 0):
        super().__init__(cv2.VideoCapture(int(device_index)), f"#{device_index}")


class VideoFileSource(_OpenCVSource):
    label = "video"

    def __init__(self, path: str):
        if not os.path.exists(path):
            raise CaptureError(f"video file not found: {path}")
        super().__init__(cv2.VideoCapture(str(path)), path)


class StillImageSource:
    """Decodes an image once and serves it on every tick."""

    def __init__(self, path: str):
        try:
            with Image.open(path) as img:
                self._image = img.convert("RGB")
        except (OSError, UnidentifiedImageError) as e:
            raise CaptureError(f"unable to decode image {path}: {e}") from e
        self._frame = np.asarray(self._image, dtype=np.uint8)
        self._mirrored: Optional[np.ndarray] = None
        self._open = True
        log.info("Loaded image %s (%dx%d)", path, self._image.width, self._image.height)

    def next_frame(self, flip: bool = False) -> np.ndarray:
        if not self._open:
            raise CaptureError("image source is closed")
        if not flip:
            return self._frame
        if self._mirrored is None:
            self._mirrored = np.asarray(ImageOps.mirror(self._image), dtype=np.uint8)
        return self._mirrored

    def is_open(self) -> bool:
        return self._open

    def seek_to_start(self) -> None:
        pass

    def close(self) -> None:
        self._open = False


class ArraySource:
    """
    Plays a list of in-memory frames once; empty after the last frame until
    seek_to_start() rewinds.
    """

    def __init__(self, frames: Iterable):
        self._frames: List[np.ndarray] = [as_pixels(f) for f in frames]
        self._pos = 0
        self._open = True

    def next_frame(self, flip: bool = False) -> np.ndarray:
        if not self._open:
            raise CaptureError("array source is closed")
        if self._pos >= len(self._frames):
            return _empty()
        frame = self._frames[self._pos]
        self._pos += 1
        return frame[:, ::-1] if flip else frame

    def is_open(self) -> bool:
        return self._open

    def seek_to_start(self) -> None:
        self._pos = 0

    def close(self) -> None:
        self._open = False


def open_source(device_or_path: str) -> FrameSource:
    """Camera index ("0", "1", ...), still image, or video file."""
    target = str(device_or_path).strip()
    if target.isdigit():
        return CameraSource(int(target))
    if target.lower().endswith(IMAGE_SUFFIXES):
        return StillImageSource(target)
    return VideoFileSource(target)
