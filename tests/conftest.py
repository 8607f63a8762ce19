"""Pytest configuration."""

import os
import sys
from pathlib import Path

# Headless SDL for surface and font work
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pygame  # noqa: E402
import pytest  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def pygame_session():
    """Initialize pygame once for the whole test session."""
    from waveloader.ui.fonts import clear_font_cache

    pygame.init()
    yield
    clear_font_cache()
    pygame.quit()


@pytest.fixture
def red_image():
    """Opaque red 120x80 surface."""
    surface = pygame.Surface((120, 80), pygame.SRCALPHA)
    surface.fill((255, 0, 0, 255))
    return surface


@pytest.fixture
def loader():
    """200x200 loader with an opaque blue wave and no text."""
    from waveloader.ui.components.wave_loader import WaveLoader

    return WaveLoader({"wave_color": "#0000ff"}, size=(200, 200))
