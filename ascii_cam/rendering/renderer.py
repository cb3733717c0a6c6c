#!/usr/bin/env python3
# ascii_cam/rendering/renderer.py
"""
Frame renderer and grid output adapters.

- render_frame(buffer, settings, rng) -> RenderGrid of (glyph, RGB) cells
- Renderer keeps the random source used by glitch mode between frames
- to_fragments() converts a grid to prompt_toolkit style runs ("fg:#RRGGBB")
- to_ansi() converts a grid to truecolor SGR escapes

A RenderGrid is a tuple of rows, each a tuple of RenderCell, so a frame
handed to a display backend can never be mutated by the next render.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ascii_cam.rendering.colors import RGB, ColorMode, color_for
from ascii_cam.rendering.glyphs import map_luminance_array
from ascii_cam.rendering.palettes import Charset, get_chars
from ascii_cam.rendering.sampler import as_pixels, compute_block_size, sample_frame

StyleRun = Tuple[str, str]                # (style, text)
LineFrag = List[StyleRun]                 # one terminal row as runs
FrameFrag = List[LineFrag]                # full terminal frame as rows

__all__ = [
    "GLITCH_GLYPH_PROBABILITY",
    "RenderCell",
    "RenderGrid",
    "RenderSettings",
    "Renderer",
    "render_frame",
    "to_fragments",
    "to_ansi",
    "StyleRun",
    "LineFrag",
    "FrameFrag",
]

GLITCH_GLYPH_PROBABILITY = 0.02


@dataclass(frozen=True)
class RenderCell:
    glyph: str
    color: RGB


RenderGrid = Tuple[Tuple[RenderCell, ...], ...]


@dataclass(frozen=True)
class RenderSettings:
    """Immutable snapshot of everything one render pass reads."""
    charset: Charset = Charset.DEFAULT
    mode: ColorMode = ColorMode.STANDARD
    width: int = 100
    invert_charset: bool = False
    flip: bool = False
    frame_counter: int = 0

    @property
    def glyphs(self) -> str:
        return get_chars(self.charset, self.invert_charset)


def render_frame(buffer, settings: RenderSettings, rng: random.Random) -> RenderGrid:
    """
    Render one frame. Returns () when there is nothing to draw: an empty
    buffer or a non-positive target width.
    """
    arr = as_pixels(buffer)
    img_h, img_w = arr.shape[:2]
    if img_w == 0 or img_h == 0 or settings.width < 1:
        return ()

    samples = sample_frame(arr, compute_block_size(img_w, settings.width))
    if samples.is_empty():
        return ()

    glyphs = settings.glyphs
    if not glyphs:
        raise ValueError(f"charset {settings.charset!r} has no glyphs")
    idx = map_luminance_array(samples.lum, len(glyphs))
    mode = ColorMode(settings.mode)
    glitch = mode is ColorMode.GLITCH
    counter = settings.frame_counter

    rows = []
    for y in range(samples.rows):
        row = []
        for x in range(samples.cols):
            sample = samples.sample(x, y)
            color = color_for(sample, mode, x, y, counter, rng)
            glyph = glyphs[idx[y, x]]
            if glitch and rng.random() < GLITCH_GLYPH_PROBABILITY:
                glyph = rng.choice(glyphs)
            row.append(RenderCell(glyph, color))
        rows.append(tuple(row))
    return tuple(rows)


class Renderer:
    """Holds the random source so glitch output is reproducible when seeded."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def render(self, buffer, settings: RenderSettings) -> RenderGrid:
        return render_frame(buffer, settings, self.rng)


# -------------------------
# Output adapters
# -------------------------

def _rgb_to_style(r: int, g: int, b: int) -> str:
    # prompt_toolkit accepts "fg:#RRGGBB"
    return f"fg:#{r:02x}{g:02x}{b:02x}"


def to_fragments(grid: RenderGrid) -> FrameFrag:
    """Grid rows as prompt_toolkit fragments with runs of equal style merged."""
    frame: FrameFrag = []
    for cells in grid:
        line: LineFrag = []
        run_style = None
        run_text: List[str] = []
        for cell in cells:
            style = _rgb_to_style(*cell.color)
            if style != run_style and run_text:
                line.append((run_style, "".join(run_text)))
                run_text = []
            run_style = style
            run_text.append(cell.glyph)
        if run_text:
            line.append((run_style, "".join(run_text)))
        frame.append(line if line else [("", "")])
    return frame


ANSI_RESET = "\x1b[0m"


def to_ansi(grid: RenderGrid) -> str:
    """Grid as truecolor text; a color escape is only emitted when it changes."""
    lines = []
    for cells in grid:
        parts = []
        last = None
        for cell in cells:
            if cell.color != last:
                parts.append("\x1b[38;2;%d;%d;%dm" % cell.color)
                last = cell.color
            parts.append(cell.glyph)
        parts.append(ANSI_RESET)
        lines.append("".join(parts))
    return "\n".join(lines)
