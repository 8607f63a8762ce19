#!/usr/bin/env python3
"""
Text layout engine for the loader overlay.

Turns a string plus a TextStyle into a compiled TextLayout: the wrapped lines
and their pre-rendered surfaces. Compiling is the expensive part, so layouts
are cached in a LayoutCache and only rebuilt while their dirty flag is set.

Public API:
    - measure_text(text, style, size): width of the widest line in pixels
    - auto_fit_text_size(text, style, max_width, min_size): binary-searched size
    - wrap_text(text, fits): greedy word wrap
    - build_layout(text, style, width): compile a centered multi-line block
    - place_text_block(...): vertical placement of primary + subtitle
    - LayoutCache: dirty-flag cache for the primary and subtitle layouts
"""

import math
from collections.abc import Callable
from dataclasses import dataclass, field

import pygame
from PIL import Image, ImageFilter

from .fonts import get_font
from .text_style import TextStyle

# Fraction of the circle diameter usable by text
TEXT_WIDTH_RATIO = 0.85

MeasureFn = Callable[[str, TextStyle, float], float]


def _font_for(style: TextStyle, size: float | None = None) -> pygame.font.Font:
    return get_font(
        int(style.size if size is None else size),
        style.font_family,
        bold=style.font_style.bold,
        italic=style.font_style.italic,
    )


def _line_width(font: pygame.font.Font, line: str, spacing_px: float) -> float:
    if not line:
        return 0.0
    if spacing_px == 0:
        return float(font.size(line)[0])
    advance = sum(font.size(ch)[0] for ch in line)
    return float(max(0.0, advance + spacing_px * (len(line) - 1)))


def measure_text(text: str, style: TextStyle, size: float | None = None) -> float:
    """Measure the widest line of ``text`` in pixels.

    Args:
        text: Text to measure (explicit newlines start new lines)
        style: Text style providing font and letter spacing
        size: Size override (defaults to style.size)

    Returns:
        Width in pixels
    """
    size = style.size if size is None else size
    font = _font_for(style, size)
    spacing_px = style.letter_spacing * size
    return max(_line_width(font, line, spacing_px) for line in text.split("\n"))


def max_text_width(circle_radius: float) -> int:
    """Usable text width inside a circle of the given radius."""
    return max(0, int(circle_radius * 2 * TEXT_WIDTH_RATIO))


def auto_fit_text_size(
    text: str,
    style: TextStyle,
    max_width: float,
    min_size: float,
    measure: MeasureFn = measure_text,
) -> float:
    """Binary search for the largest text size that fits within ``max_width``.

    The search runs over [min_size, style.size] and stops once the interval
    is at most 1 pixel wide. The lower bound is returned, so the result
    fits whenever min_size fits.

    Args:
        text: Text to fit
        style: Style at its configured (maximum) size
        max_width: Available width in pixels
        min_size: Smallest acceptable size
        measure: Width function (text, style, size) -> pixels

    Returns:
        The fitted size
    """
    hi = style.size
    lo = min_size

    while hi - lo > 1:
        mid = (hi + lo) / 2
        if measure(text, style, mid) <= max_width:
            lo = mid
        else:
            hi = mid
    return lo


def wrap_text(text: str, fits: Callable[[str], bool]) -> list[str]:
    """Greedy word wrap.

    Explicit newlines are kept. Words that do not fit on a line of their own
    are broken between characters.

    Args:
        text: Text to wrap
        fits: Predicate telling whether a candidate line fits

    Returns:
        List of lines (at least one)
    """
    lines: list[str] = []
    for paragraph in text.split("\n"):
        current = ""
        for word in paragraph.split(" "):
            candidate = f"{current} {word}" if current else word
            if fits(candidate):
                current = candidate
                continue
            if current:
                lines.append(current)
                if fits(word):
                    current = word
                    continue
            # Break words wider than the line
            current = ""
            for ch in word:
                if current and not fits(current + ch):
                    lines.append(current)
                    current = ch
                else:
                    current += ch
        lines.append(current)
    return lines


@dataclass
class TextLayout:
    """A compiled, centered multi-line text block."""

    lines: list[str]
    width: int
    line_height: int
    surfaces: list[pygame.Surface] = field(default_factory=list, repr=False)

    @property
    def height(self) -> int:
        return self.line_height * len(self.lines)

    def draw(self, target: pygame.Surface, center_x: float, top: float):
        """Blit every line centered on ``center_x``, starting at ``top``."""
        y = top
        for surface in self.surfaces:
            # Line surfaces may carry shadow padding; center them on the line box
            pad_y = (surface.get_height() - self.line_height) / 2
            target.blit(
                surface,
                (round(center_x - surface.get_width() / 2), round(y - pad_y)),
            )
            y += self.line_height


def _render_line(font: pygame.font.Font, line: str, style: TextStyle) -> pygame.Surface:
    rgb = style.color[:3]
    spacing_px = style.spacing_px
    if spacing_px == 0 or len(line) < 2:
        surface = font.render(line, True, rgb)
    else:
        width = max(1, math.ceil(_line_width(font, line, spacing_px)))
        surface = pygame.Surface((width, font.get_height()), pygame.SRCALPHA)
        x = 0.0
        for ch in line:
            glyph = font.render(ch, True, rgb)
            surface.blit(glyph, (round(x), 0))
            x += glyph.get_width() + spacing_px
    if style.color[3] < 255:
        surface.set_alpha(style.color[3])
    return surface


def _with_shadow(text_surface: pygame.Surface, style: TextStyle) -> pygame.Surface:
    shadow = style.shadow
    blur_pad = math.ceil(shadow.radius) * 2
    pad_x = blur_pad + math.ceil(abs(shadow.dx))
    pad_y = blur_pad + math.ceil(abs(shadow.dy))
    w, h = text_surface.get_size()
    size = (w + 2 * pad_x, h + 2 * pad_y)

    # Blur the glyph coverage only, then tint it with the shadow color
    raw = pygame.image.tobytes(text_surface, "RGBA")
    coverage = Image.frombytes("RGBA", (w, h), raw).getchannel("A")
    mask = Image.new("L", size, 0)
    mask.paste(coverage, (pad_x + round(shadow.dx), pad_y + round(shadow.dy)))
    mask = mask.filter(ImageFilter.GaussianBlur(shadow.radius))
    r, g, b, a = shadow.color
    if a < 255:
        mask = mask.point(lambda v: v * a // 255)
    tinted = Image.new("RGBA", size, (r, g, b, 0))
    tinted.putalpha(mask)

    combined = pygame.image.frombytes(tinted.tobytes(), size, "RGBA")
    combined.blit(text_surface, (pad_x, pad_y))
    return combined


def build_layout(text: str, style: TextStyle, width: int) -> TextLayout | None:
    """Compile ``text`` into a centered block no wider than ``width``.

    Args:
        text: Text to lay out
        style: Resolved text style
        width: Layout width in pixels

    Returns:
        TextLayout, or None when the width leaves no room for text
    """
    if width <= 0:
        return None

    font = _font_for(style)
    spacing_px = style.spacing_px

    def fits(candidate: str) -> bool:
        return _line_width(font, candidate, spacing_px) <= width

    lines = wrap_text(text, fits)
    surfaces = []
    for line in lines:
        surface = _render_line(font, line, style)
        if style.shadow.enabled and surface.get_width() > 0:
            surface = _with_shadow(surface, style)
        surfaces.append(surface)

    return TextLayout(
        lines=lines,
        width=width,
        line_height=font.get_linesize(),
        surfaces=surfaces,
    )


def place_text_block(
    center: tuple[float, float],
    primary: TextLayout,
    subtitle: TextLayout | None,
    offset: tuple[float, float] = (0.0, 0.0),
    subtitle_offset_y: float = 0.0,
) -> tuple[float, float, float | None]:
    """Compute where the text block goes.

    The block (primary, gap, subtitle) is vertically centered on ``center``
    and then shifted by ``offset``.

    Returns:
        (center_x, primary_top, subtitle_top or None)
    """
    center_x, center_y = center
    if subtitle is not None:
        total_height = primary.height + subtitle_offset_y + subtitle.height
    else:
        total_height = primary.height
    primary_top = center_y - total_height / 2 + offset[1]
    subtitle_top = None
    if subtitle is not None:
        subtitle_top = primary_top + primary.height + subtitle_offset_y
    return center_x + offset[0], primary_top, subtitle_top


class LayoutCache:
    """Primary and subtitle layouts guarded by dirty flags.

    A cached layout is only handed out after its flag has been cleared by a
    rebuild, so stale geometry cannot be read.
    """

    def __init__(self):
        self._primary: TextLayout | None = None
        self._subtitle: TextLayout | None = None
        self.primary_dirty = True
        self.subtitle_dirty = True

    def invalidate(self, primary: bool = True, subtitle: bool = True):
        """Mark layouts for rebuild on the next render pass."""
        if primary:
            self.primary_dirty = True
        if subtitle:
            self.subtitle_dirty = True

    def clear(self):
        """Drop both layouts and mark them dirty."""
        self._primary = None
        self._subtitle = None
        self.invalidate()

    def primary(self, build: Callable[[], TextLayout | None]) -> TextLayout | None:
        """Return the primary layout, rebuilding it first if dirty."""
        if self.primary_dirty:
            self._primary = build()
            self.primary_dirty = False
        return self._primary

    def subtitle(self, build: Callable[[], TextLayout | None]) -> TextLayout | None:
        """Return the subtitle layout, rebuilding it first if dirty."""
        if self.subtitle_dirty:
            self._subtitle = build()
            self.subtitle_dirty = False
        return self._subtitle
