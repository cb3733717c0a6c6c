#!/usr/bin/env python3
# ascii_cam/rendering/palettes.py
"""
Character palettes ("charsets") for the ASCII renderer.

Each charset is ordered from sparse to dense visual weight so that a darker
block maps to an earlier glyph. Detailed ships in the opposite order and
renders as a negative. The cycle order is the declaration order.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, TypeVar

__all__ = [
    "Charset",
    "get_chars",
    "next_charset",
    "next_member",
]

E = TypeVar("E", bound=Enum)


class Charset(str, Enum):
    RETRO = "retro"
    DEFAULT = "default"
    LIGHT = "light"
    DETAILED = "detailed"
    TESTING = "testing"


_GLYPHS: Dict[Charset, str] = {
    Charset.RETRO: " ░▒▓█",
    Charset.DEFAULT: " .:-=+*#%@",
    Charset.LIGHT: " .`'\",:;Il!i><~+_-?][}{1)(|\\/tfjrxnuvczXYUJCLQ0OZmwqpdbkhao*#MW&8%B@$",
    Charset.DETAILED: "$@B%8&WM#*oahkbdpqwmZO0QLCJUYXzcvunxrjft/\\|()1{}[]?-_+~<>i!lI;:,\"^`'. ",
    Charset.TESTING: "0O|",
}


def get_chars(charset: Charset, invert: bool = False) -> str:
    """Return the glyph ramp for a charset, reversed when invert is set."""
    glyphs = _GLYPHS[Charset(charset)]
    return glyphs[::-1] if invert else glyphs


def next_member(member: E) -> E:
    """Step to the next member of an Enum, wrapping after the last one."""
    members = list(type(member))
    return members[(members.index(member) + 1) % len(members)]


def next_charset(charset: Charset) -> Charset:
    return next_member(Charset(charset))
