#!/usr/bin/env python3
"""
Text style value objects.

A TextStyle captures everything that affects how a block of text is measured
and rasterised. Layouts are compiled from a style and cached by the widget
until one of its inputs changes.
"""

from dataclasses import dataclass, replace
from enum import Enum


class FontStyle(str, Enum):
    """Font style variants."""

    NORMAL = "normal"
    BOLD = "bold"
    ITALIC = "italic"
    BOLD_ITALIC = "bold_italic"

    @property
    def bold(self) -> bool:
        return self in (FontStyle.BOLD, FontStyle.BOLD_ITALIC)

    @property
    def italic(self) -> bool:
        return self in (FontStyle.ITALIC, FontStyle.BOLD_ITALIC)


class TextWidthMode(str, Enum):
    """How the primary text block width is chosen."""

    WRAP = "wrap"  # natural text width, capped at the circle's usable width
    MATCH = "match"  # always the circle's usable width


@dataclass(frozen=True)
class Shadow:
    """Drop shadow drawn under the text. A radius of 0 disables it."""

    color: tuple[int, int, int, int] = (0, 0, 0, 0)
    radius: float = 0.0
    dx: float = 0.0
    dy: float = 0.0

    @property
    def enabled(self) -> bool:
        return self.radius > 0 and self.color[3] > 0


@dataclass(frozen=True)
class TextStyle:
    """Resolved paint parameters for one text block."""

    size: float = 14.0
    color: tuple[int, int, int, int] = (255, 255, 255, 255)
    font_family: str | None = None
    font_style: FontStyle = FontStyle.NORMAL
    letter_spacing: float = 0.0  # in ems
    shadow: Shadow = Shadow()

    def with_size(self, size: float) -> "TextStyle":
        """Return a copy of this style at a different size."""
        return replace(self, size=size)

    @property
    def spacing_px(self) -> float:
        """Extra space between glyphs in pixels."""
        return self.letter_spacing * self.size
