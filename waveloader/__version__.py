"""Version information for WaveLoader."""

__version__ = "1.0.0"
__version_info__ = tuple(int(x) for x in __version__.split("."))

# Version history
# 1.0.0 - Circular wave loader widget: image clip, two-layer wave, progress/subtitle text
