"""WaveLoader - circular wave-fill progress widget for pygame."""

from waveloader.__version__ import __version__
from waveloader.core.config_loader import load_config
from waveloader.core.config_schema import LoaderConfig
from waveloader.ui.components.wave_loader import WaveLoader
from waveloader.ui.text_style import FontStyle, TextWidthMode

__all__ = [
    "WaveLoader",
    "LoaderConfig",
    "load_config",
    "FontStyle",
    "TextWidthMode",
    "__version__",
]
