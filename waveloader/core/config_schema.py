"""Loader configuration schema validation using Pydantic."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from waveloader.ui.text_style import FontStyle, TextWidthMode

# Largest supported wave amplitude, as a fraction of the widget height
MAX_AMPLITUDE_RATIO = 0.05

ColorValue = str | list[int] | tuple[int, ...]


class LoaderConfig(BaseModel):
    """Construction options for a WaveLoader.

    Every field maps 1:1 to a setter on the widget. Colors stay in their raw
    form here and are normalised by the widget.
    """

    model_config = ConfigDict(extra="forbid")

    # Loader
    progress: int = 0
    border: bool = True
    border_width: float = Field(default=10.0, ge=0)
    wave_color: ColorValue = "#000000"
    wave_amplitude: float = MAX_AMPLITUDE_RATIO
    wave_enabled: bool = True
    wave_speed: int = Field(default=1000, gt=0)

    # Primary text
    text: str | None = None
    text_size: float = Field(default=14.0, ge=0)
    text_color: ColorValue = "#ffffff"
    text_font_family: str | None = None
    text_style: FontStyle = FontStyle.NORMAL
    text_letter_spacing: float = 0.0
    text_offset_x: float = 0.0
    text_offset_y: float = 0.0
    text_width_mode: TextWidthMode = TextWidthMode.WRAP

    # Text shadow
    text_shadow_color: ColorValue = (0, 0, 0, 0)
    text_shadow_radius: float = Field(default=0.0, ge=0)
    text_shadow_dx: float = 0.0
    text_shadow_dy: float = 0.0

    # Progress text
    show_progress_text: bool = False
    progress_text_format: str = "%d%%"

    # Subtitle
    subtitle_text: str | None = None
    subtitle_text_size: float = Field(default=12.0, ge=0)
    subtitle_text_color: ColorValue = "#ffffff"
    subtitle_font_family: str | None = None
    subtitle_text_style: FontStyle = FontStyle.NORMAL
    subtitle_offset_y: float = 0.0

    # Auto-size
    auto_size_text: bool = False
    auto_size_min_text_size: float = Field(default=8.0, ge=0)

    @field_validator("wave_amplitude")
    @classmethod
    def clamp_amplitude(cls, v):
        """Clamp amplitude into [0, MAX_AMPLITUDE_RATIO]."""
        return min(max(v, 0.0), MAX_AMPLITUDE_RATIO)

    @field_validator("wave_color", "text_color", "text_shadow_color", "subtitle_text_color")
    @classmethod
    def validate_color(cls, v):
        """Validate list colors are RGB or RGBA."""
        if isinstance(v, (list, tuple)):
            if len(v) not in (3, 4):
                raise ValueError("Color lists must have 3 or 4 components")
            return tuple(int(c) for c in v)
        return v


def validate_config(config_dict: dict[str, Any]) -> LoaderConfig:
    """Validate configuration dictionary.

    Args:
        config_dict: Raw configuration dictionary from YAML

    Returns:
        Validated LoaderConfig object

    Raises:
        ValidationError: If configuration is invalid
    """
    return LoaderConfig(**config_dict)


def config_to_dict(config: LoaderConfig) -> dict[str, Any]:
    """Convert LoaderConfig back to dictionary.

    Args:
        config: Validated LoaderConfig object

    Returns:
        Configuration dictionary
    """
    return config.model_dump(mode="json")
