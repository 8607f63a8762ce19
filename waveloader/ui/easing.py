#!/usr/bin/env python3
"""Easing functions for loader animations."""

from collections.abc import Callable

Easing = Callable[[float], float]


def linear(t: float) -> float:
    """Constant velocity."""
    return t


def decelerate(t: float) -> float:
    """Quadratic easing out - starts fast and slows down to zero velocity.

    Args:
        t: Progress from 0.0 to 1.0

    Returns:
        Eased value from 0.0 to 1.0
    """
    return 1 - (1 - t) * (1 - t)
