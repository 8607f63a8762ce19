#!/usr/bin/env python3
"""Loader UI components.

Example:
    from waveloader.ui.components import WaveLoader

    loader = WaveLoader({"show_progress_text": True}, size=(200, 200))
    loader.on_activate()
    loader.set_progress(40)

    # per frame
    loader.update(dt)
    rect = loader.draw(screen, x=100, y=100)
"""

# ============================================================================
# WIDGETS
# ============================================================================
from .wave_loader import (
    WaveLoader,
    draw_wave_loader,
)

__all__ = [
    "WaveLoader",
    "draw_wave_loader",
]
