#!/usr/bin/env python3
"""Color utilities for loader rendering."""

import pygame

RGBA = tuple[int, int, int, int]

TRANSPARENT: RGBA = (0, 0, 0, 0)


def to_rgba(color, default: RGBA = TRANSPARENT) -> RGBA:
    """Normalise a color to an RGBA tuple.

    Accepts RGB/RGBA sequences, pygame.Color, hex strings ("#rrggbb",
    "#rrggbbaa") and named colors. None and unparseable values yield
    ``default``.

    Example:
        >>> to_rgba("#3f51b5")
        (63, 81, 181, 255)
    """
    if color is None:
        return default
    if isinstance(color, (tuple, list)):
        if len(color) == 3:
            return (*(_channel(c) for c in color), 255)
        if len(color) == 4:
            return tuple(_channel(c) for c in color)
        return default
    try:
        c = pygame.Color(color)
    except (ValueError, TypeError):
        return default
    return (c.r, c.g, c.b, c.a)


def adjust_alpha(color: RGBA, factor: float) -> RGBA:
    """Scale the alpha channel of a color.

    Args:
        color: RGBA color tuple
        factor: Alpha multiplier (0.0 = transparent, 1.0 = original alpha)

    Returns:
        RGBA color with adjusted alpha

    Example:
        >>> adjust_alpha((255, 0, 0, 255), 0.5)
        (255, 0, 0, 128)
    """
    r, g, b, a = color
    return (r, g, b, _channel(int(a * factor + 0.5)))


def _channel(value) -> int:
    return max(0, min(255, int(value)))


__all__ = ["RGBA", "TRANSPARENT", "to_rgba", "adjust_alpha"]
