#!/usr/bin/env python3
"""
Font loading and caching.

Resolves a (family, size, style) triple to a pygame Font with sane fallbacks:
- None family -> pygame's bundled default font
- path to a TTF/OTF file -> that file
- anything else -> system font lookup (pygame falls back to its default
  font for unknown names)

Fonts are cached with @lru_cache and must be treated as read-only by callers.
"""

from functools import lru_cache
from pathlib import Path

import pygame

from waveloader.core.logging_utils import setup_logger

logger = setup_logger(__name__)

_FONT_FILE_SUFFIXES = (".ttf", ".otf", ".ttc")


def _ensure_font_init():
    if not pygame.font.get_init():
        pygame.font.init()


def _default_font(size: int, bold: bool, italic: bool) -> pygame.font.Font:
    font = pygame.font.Font(None, size)
    font.set_bold(bold)
    font.set_italic(italic)
    return font


@lru_cache(maxsize=128)
def get_font(
    size: int = 14,
    family: str | None = None,
    *,
    bold: bool = False,
    italic: bool = False,
) -> pygame.font.Font:
    """Centralized font getter with caching.

    Args:
        size: Font size in pixels (values below 1 are raised to 1)
        family: Font family name, path to a font file, or None for default
        bold: Use bold variant
        italic: Use italic variant

    Returns:
        pygame.Font object
    """
    _ensure_font_init()
    size = max(1, int(size))

    if not family:
        return _default_font(size, bold, italic)

    if family.lower().endswith(_FONT_FILE_SUFFIXES):
        font_path = Path(family)
        if font_path.exists():
            try:
                font = pygame.font.Font(str(font_path), size)
                font.set_bold(bold)
                font.set_italic(italic)
                return font
            except (OSError, pygame.error) as e:
                logger.warning(f"Failed to load font file {family}: {e}")
        else:
            logger.warning(f"Font file not found: {family}")
        return _default_font(size, bold, italic)

    try:
        return pygame.font.SysFont(family, size, bold=bold, italic=italic)
    except (OSError, pygame.error) as e:
        logger.warning(f"Failed to load system font {family}: {e}")
        return _default_font(size, bold, italic)


def clear_font_cache():
    """Drop all cached fonts (e.g. after pygame.font.quit())."""
    get_font.cache_clear()
