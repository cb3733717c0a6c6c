#!/usr/bin/env python3
# ascii_cam/rendering/sampler.py
"""
Block sampler.

Partitions an RGB(A) pixel buffer into non-overlapping rectangular blocks
and reduces each block to one mean color plus its Rec. 601 luminance.

Blocks are twice as tall as they are wide so the character grid keeps the
source aspect ratio in a terminal where cells are about 1:2.
Trailing partial blocks at the right and bottom edges are clipped, never
padded.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np
from PIL import Image

__all__ = [
    "ASPECT",
    "LUMA_WEIGHTS",
    "BlockSize",
    "BlockSample",
    "SampleGrid",
    "as_pixels",
    "compute_block_size",
    "luminance",
    "sample_block",
    "sample_frame",
]

ASPECT = 0.5
LUMA_WEIGHTS: Tuple[float, float, float] = (0.299, 0.587, 0.114)


@dataclass(frozen=True)
class BlockSize:
    width: int
    height: int

    def __post_init__(self):
        if self.width < 1 or self.height < 1:
            raise ValueError(f"block size must be at least 1x1, got {self.width}x{self.height}")


@dataclass(frozen=True)
class BlockSample:
    luminance: float
    r: int
    g: int
    b: int


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def luminance(r: float, g: float, b: float) -> float:
    """Perceptual brightness in [0, 255] from 8-bit channels."""
    wr, wg, wb = LUMA_WEIGHTS
    return min(255.0, wr * r + wg * g + wb * b)


def compute_block_size(source_width: int, target_width: int) -> BlockSize:
    """Block dimensions that shrink source_width pixels to target_width columns."""
    if target_width < 1:
        raise ValueError(f"target width must be positive, got {target_width}")
    block_w = max(1, _round_half_up(source_width / target_width))
    block_h = max(1, _round_half_up(block_w / ASPECT))
    return BlockSize(block_w, block_h)


def as_pixels(buffer) -> np.ndarray:
    """
    Normalize a frame to an (H, W, 3) uint8 array.
    Accepts numpy arrays (RGB, RGBA or single channel) and Pillow images.
    Anything without pixels comes back as a (0, 0, 3) array.
    """
    if buffer is None:
        return np.zeros((0, 0, 3), dtype=np.uint8)
    if isinstance(buffer, Image.Image):
        buffer = np.asarray(buffer.convert("RGB"), dtype=np.uint8)
    arr = np.asarray(buffer)
    if arr.size == 0:
        return np.zeros((0, 0, 3), dtype=np.uint8)
    if arr.ndim == 2:
        arr = np.repeat(arr[..., None], 3, axis=2)
    if arr.ndim != 3 or arr.shape[2] < 3:
        raise ValueError(f"unsupported pixel buffer shape {arr.shape}")
    if arr.dtype != np.uint8:
        arr = np.clip(arr, 0, 255).astype(np.uint8)
    return arr[..., :3]


def sample_block(buffer, x0: int, y0: int, block_w: int, block_h: int) -> BlockSample:
    """Mean color and luminance of one block, clipped to the buffer bounds."""
    arr = as_pixels(buffer)
    img_h, img_w = arr.shape[:2]
    x_end = min(x0 + block_w, img_w)
    y_end = min(y0 + block_h, img_h)
    region = arr[y0:y_end, x0:x_end]
    count = region.shape[0] * region.shape[1]
    if count == 0:
        raise ValueError(f"block at ({x0}, {y0}) lies outside a {img_w}x{img_h} buffer")

    sums = region.reshape(-1, 3).sum(axis=0, dtype=np.int64)
    r, g, b = (int(s) // count for s in sums)
    return BlockSample(luminance(r, g, b), r, g, b)


@dataclass(frozen=True)
class SampleGrid:
    """Row-major grid of block samples backed by numpy arrays."""
    rgb: np.ndarray          # (rows, cols, 3) uint8
    lum: np.ndarray          # (rows, cols) float64

    @classmethod
    def empty(cls) -> "SampleGrid":
        return cls(np.zeros((0, 0, 3), dtype=np.uint8), np.zeros((0, 0), dtype=np.float64))

    @property
    def rows(self) -> int:
        return int(self.lum.shape[0])

    @property
    def cols(self) -> int:
        return int(self.lum.shape[1]) if self.lum.ndim == 2 else 0

    def is_empty(self) -> bool:
        return self.rows == 0 or self.cols == 0

    def sample(self, x: int, y: int) -> BlockSample:
        r, g, b = (int(c) for c in self.rgb[y, x])
        return BlockSample(float(self.lum[y, x]), r, g, b)


def sample_frame(buffer, block_size: BlockSize) -> SampleGrid:
    """
    Sample a whole frame in block_size steps, left-to-right, top-to-bottom.
    Equivalent to calling sample_block on every block, done in one pass with
    np.add.reduceat.
    """
    arr = as_pixels(buffer)
    img_h, img_w = arr.shape[:2]
    if img_h == 0 or img_w == 0:
        return SampleGrid.empty()

    ys = np.arange(0, img_h, block_size.height)
    xs = np.arange(0, img_w, block_size.width)

    sums = np.add.reduceat(arr.astype(np.int64), ys, axis=0)
    sums = np.add.reduceat(sums, xs, axis=1)

    heights = np.diff(np.append(ys, img_h))
    widths = np.diff(np.append(xs, img_w))
    counts = np.outer(heights, widths)

    means = sums // counts[..., None]
    rgb = means.astype(np.uint8)

    wr, wg, wb = LUMA_WEIGHTS
    lum = wr * means[..., 0] + wg * means[..., 1] + wb * means[..., 2]
    lum = np.minimum(lum.astype(np.float64), 255.0)
    return SampleGrid(rgb, lum)
