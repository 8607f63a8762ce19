#!/usr/bin/env python3
"""
WaveLoader - a circular fillable loader with wave animation and text overlay.

Displays a circular image filled with an animated wave that represents
progress, with optional primary text and subtitle centered on top.

Frame contract (driven by the host):
    loader.update(dt)        # advance animations, dt in seconds
    if loader.needs_redraw:
        loader.draw(screen, x, y)

Lifecycle signals from the host start and stop the wave loop:
    on_activate() / on_deactivate() / on_visibility_change(visible)

Example:
    loader = WaveLoader({"wave_color": "#3f51b5", "show_progress_text": True},
                        size=(200, 200))
    loader.on_activate()
    loader.set_progress(80)
"""

import logging
import math
from collections.abc import Callable, Mapping
from typing import Any

import pygame

from waveloader.core.config_schema import MAX_AMPLITUDE_RATIO, LoaderConfig, validate_config
from waveloader.core.logging_utils import log_event, setup_logger

from ..animator import (
    DEFAULT_FILL_DURATION_MS,
    AnimatorState,
    FillLevelAnimator,
    FillLevelTween,
    WaveShiftLoop,
    WaveShiftTween,
)
from ..colors import RGBA, to_rgba
from ..image_pipeline import ImagePipeline, ImageSource, circle_mask
from ..text_layout import (
    LayoutCache,
    TextLayout,
    auto_fit_text_size,
    build_layout,
    max_text_width,
    measure_text,
    place_text_block,
)
from ..text_style import FontStyle, Shadow, TextStyle, TextWidthMode
from ..wave_shader import ShaderTransform, WaveShader

_logger = setup_logger(__name__)

WHITE: RGBA = (255, 255, 255, 255)
BLACK: RGBA = (0, 0, 0, 255)


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


class WaveLoader:
    """Circular wave-fill loader widget."""

    def __init__(
        self,
        config: LoaderConfig | Mapping[str, Any] | None = None,
        *,
        image: ImageSource = None,
        size: tuple[int, int] | None = None,
        on_redraw: Callable[["WaveLoader"], None] | None = None,
        logger: logging.Logger | None = None,
    ):
        """Initialize the loader.

        Args:
            config: LoaderConfig or mapping of construction options
            image: Optional image shown inside the circle
            size: Optional initial (width, height)
            on_redraw: Redraw-request sink, called on every state change
            logger: Diagnostic sink (defaults to the module logger)
        """
        self.logger = logger or _logger
        self.on_redraw = on_redraw
        self.needs_redraw = True

        self._width = 0
        self._height = 0

        # Loader state
        self._progress = 0
        self._amplitude_ratio = MAX_AMPLITUDE_RATIO
        self._wave_color: RGBA = BLACK
        self._border_width = 0.0
        self._wave_enabled = True
        self._active = False
        self._visible = True
        self.description = "Loading: 0 percent"

        # Primary text
        self._text: str | None = None
        self._text_size = 14.0
        self._text_color: RGBA = WHITE
        self._text_font_family: str | None = None
        self._text_style = FontStyle.NORMAL
        self._text_letter_spacing = 0.0
        self._text_offset_x = 0.0
        self._text_offset_y = 0.0
        self._text_width_mode = TextWidthMode.WRAP
        self._text_shadow = Shadow()

        # Progress text
        self._show_progress_text = False
        self._progress_text_format = "%d%%"
        self._bad_format: str | None = None

        # Subtitle
        self._subtitle_text: str | None = None
        self._subtitle_text_size = 12.0
        self._subtitle_text_color: RGBA = WHITE
        self._subtitle_font_family: str | None = None
        self._subtitle_text_style = FontStyle.NORMAL
        self._subtitle_offset_y = 0.0

        # Auto-size
        self._auto_size_text = False
        self._auto_size_min_text_size = 8.0
        self._fitted_text_size: float | None = None

        # Animation
        self._fill = FillLevelAnimator(1.0, on_change=self.invalidate)
        self._wave_loop = WaveShiftLoop(WaveShiftTween(), on_change=self.invalidate)

        # Cached drawing objects (replaced, never mutated, on input changes)
        self._images = ImagePipeline(self.logger)
        self._wave_shader: WaveShader | None = None
        self._wave_mask: pygame.Surface | None = None
        self._wave_mask_key: tuple | None = None
        self._layouts = LayoutCache()

        if image is not None:
            self._images.set_source(image)
        if size is not None:
            self.resize(*size)

        self.apply_config(config)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def apply_config(self, config: LoaderConfig | Mapping[str, Any] | None):
        """Apply every construction option through its setter.

        Progress is applied last so progress text sees the final settings.
        """
        if config is None:
            config = LoaderConfig()
        elif not isinstance(config, LoaderConfig):
            config = validate_config(dict(config))

        self.set_color(config.wave_color)
        self.set_amplitude_ratio(config.wave_amplitude)
        self.set_border_width(config.border_width if config.border else 0)
        self.set_wave_enabled(config.wave_enabled)
        self.set_wave_speed(config.wave_speed)

        self.set_text(config.text)
        self.set_text_size(config.text_size)
        self.set_text_color(config.text_color)
        self.set_text_font_family(config.text_font_family)
        self.set_text_style(config.text_style)
        self.set_text_letter_spacing(config.text_letter_spacing)
        self.set_text_offset_x(config.text_offset_x)
        self.set_text_offset_y(config.text_offset_y)
        self.set_text_width_mode(config.text_width_mode)
        self.set_text_shadow(
            config.text_shadow_radius,
            config.text_shadow_dx,
            config.text_shadow_dy,
            config.text_shadow_color,
        )

        self.set_show_progress_text(config.show_progress_text)
        self.set_progress_text_format(config.progress_text_format)

        self.set_subtitle_text(config.subtitle_text)
        self.set_subtitle_text_size(config.subtitle_text_size)
        self.set_subtitle_text_color(config.subtitle_text_color)
        self.set_subtitle_font_family(config.subtitle_font_family)
        self.set_subtitle_text_style(config.subtitle_text_style)
        self.set_subtitle_offset_y(config.subtitle_offset_y)

        self.set_auto_size_text(config.auto_size_text)
        self.set_auto_size_min_text_size(config.auto_size_min_text_size)

        self.set_progress(config.progress)

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------

    @property
    def size(self) -> tuple[int, int]:
        return (self._width, self._height)

    @property
    def progress(self) -> int:
        """Last committed progress (0-100)."""
        return self._progress

    @property
    def water_level_ratio(self) -> float:
        """Unfilled fraction of the circle (0 = full, 1 = empty)."""
        return self._fill.value

    @property
    def water_level_target(self) -> float:
        return self._fill.target

    @property
    def fill_state(self) -> AnimatorState:
        return self._fill.state

    @property
    def wave_shift_ratio(self) -> float:
        return self._wave_loop.ratio

    @property
    def wave_running(self) -> bool:
        return self._wave_loop.running

    @property
    def amplitude_ratio(self) -> float:
        return self._amplitude_ratio

    @property
    def wave_color(self) -> RGBA:
        return self._wave_color

    @property
    def border_width(self) -> float:
        return self._border_width

    @property
    def wave_enabled(self) -> bool:
        return self._wave_enabled

    @property
    def wave_speed(self) -> int:
        return int(self._wave_loop.period_ms)

    @property
    def effective_text_size(self) -> float:
        """Primary text size used by the last layout (auto-sized or configured)."""
        if self._auto_size_text and self._fitted_text_size is not None:
            return self._fitted_text_size
        return self._text_size

    @property
    def display_text(self) -> str | None:
        """Text to draw: explicit text, else progress text if enabled, else None."""
        if self._text is not None:
            return self._text
        if self._show_progress_text:
            return self._format_progress()
        return None

    def _format_progress(self) -> str:
        try:
            return self._progress_text_format % self._progress
        except (TypeError, ValueError) as e:
            if self._bad_format != self._progress_text_format:
                self._bad_format = self._progress_text_format
                self.logger.warning(
                    f"Invalid progress text format {self._progress_text_format!r}: {e}"
                )
            return str(self._progress)

    # ------------------------------------------------------------------
    # Host integration
    # ------------------------------------------------------------------

    def invalidate(self):
        """Request a redraw. Coalescing is up to the host."""
        self.needs_redraw = True
        if self.on_redraw is not None:
            self.on_redraw(self)

    def update(self, dt: float):
        """Advance both animations.

        Args:
            dt: Delta time in seconds
        """
        dt_ms = dt * 1000.0
        self._fill.advance(dt_ms)
        self._wave_loop.advance(dt_ms)

    def resize(self, width: int, height: int):
        """Set the widget size. Drops size-dependent caches."""
        width = max(0, int(width))
        height = max(0, int(height))
        if (width, height) == (self._width, self._height):
            return
        self._width = width
        self._height = height
        self._wave_shader = None
        self._wave_mask = None
        self._wave_mask_key = None
        self._layouts.invalidate()
        self.invalidate()

    def measure(self, available_width: int | None, available_height: int | None) -> int:
        """Side of the square this loader wants within the available space.

        None means the axis is unconstrained; it then follows the other axis.
        With both unconstrained the current size is kept.
        """
        if available_width is None and available_height is None:
            return min(self._width, self._height)
        if available_height is None:
            available_height = available_width
        elif available_width is None:
            available_width = available_height
        return max(0, min(int(available_width), int(available_height)))

    def on_activate(self):
        """Host attached the widget."""
        self._active = True
        self._sync_wave_loop()

    def on_deactivate(self):
        """Host detached the widget."""
        self._active = False
        self._sync_wave_loop()

    def on_visibility_change(self, visible: bool):
        self._visible = bool(visible)
        self._sync_wave_loop()

    def _sync_wave_loop(self):
        should_run = self._wave_enabled and self._active and self._visible
        if should_run and not self._wave_loop.running:
            self._wave_loop.start()
        elif not should_run and self._wave_loop.running:
            self._wave_loop.stop()

    def recycle(self):
        """Release cached resources so the instance can be reused.

        Stops the wave loop, settles the water level at the target of the
        current progress and drops the cropped image, wave shader and text
        layouts. Safe to call any number of times; the next draw rebuilds
        everything from the current property values.
        """
        self._wave_loop.stop()
        self._fill.animate_to(
            FillLevelTween(start=self._fill.value, end=1 - self._progress / 100, duration_ms=0)
        )
        self._images.release()
        self._wave_shader = None
        self._wave_mask = None
        self._wave_mask_key = None
        self._layouts.clear()
        self._fitted_text_size = None
        self.logger.debug("Loader recycled")
        self.invalidate()

    # ------------------------------------------------------------------
    # Public API - wave & loader
    # ------------------------------------------------------------------

    def set_progress(self, value: int, duration_ms: int = DEFAULT_FILL_DURATION_MS):
        """Animate the fill level to ``value``.

        Args:
            value: Target progress, clamped to 0-100. 0 = empty, 100 = full.
            duration_ms: Animation duration; 0 applies the level immediately.
        """
        value = int(_clamp(int(value), 0, 100))
        if value == 100 and self._progress != 100:
            log_event(self.logger, "loading_complete", {"duration_ms": duration_ms})
        self._progress = value

        if self._show_progress_text and self._text is None:
            self._layouts.invalidate(subtitle=False)

        self.description = f"Loading: {value} percent"

        self._fill.animate_to(
            FillLevelTween(
                start=self._fill.value,
                end=1 - value / 100,
                duration_ms=duration_ms,
            )
        )
        self.logger.debug(f"Progress set to {value} over {duration_ms}ms")
        self.invalidate()

    def set_color(self, color):
        """Set the wave and border color."""
        self._wave_color = to_rgba(color, BLACK)
        self._wave_shader = None
        self.invalidate()

    def set_border_width(self, width: float):
        """Set the border stroke width in pixels (0 hides the border)."""
        width = max(0.0, float(width))
        if width != self._border_width:
            self._border_width = width
            # The usable text width depends on the circle radius
            self._layouts.invalidate()
        self.invalidate()

    def set_amplitude_ratio(self, amplitude_ratio: float):
        """Set the wave height as a fraction of the widget height (0-0.05)."""
        amplitude_ratio = _clamp(float(amplitude_ratio), 0.0, MAX_AMPLITUDE_RATIO)
        if amplitude_ratio != self._amplitude_ratio:
            self._amplitude_ratio = amplitude_ratio
            self.invalidate()

    def set_wave_enabled(self, enabled: bool):
        """Start or freeze the wave motion."""
        self._wave_enabled = bool(enabled)
        self._sync_wave_loop()

    def set_wave_speed(self, duration_ms: int):
        """Set the duration of one wave cycle. Restarts a running loop."""
        duration_ms = max(1, int(duration_ms))
        self._wave_loop.set_tween(WaveShiftTween(period_ms=duration_ms))
        self._sync_wave_loop()

    def set_image(self, source: ImageSource):
        """Replace the image shown inside the circle."""
        self._images.set_source(source)
        self.invalidate()

    # ------------------------------------------------------------------
    # Public API - primary text
    # ------------------------------------------------------------------

    def _text_changed(self):
        self._layouts.invalidate(subtitle=False)
        self.invalidate()

    def set_text(self, text: str | None):
        """Set the primary text. None falls back to progress text if enabled."""
        self._text = text
        self._text_changed()

    def get_text(self) -> str | None:
        return self._text

    def set_text_size(self, size: float):
        self._text_size = max(0.0, float(size))
        self._text_changed()

    def set_text_color(self, color):
        self._text_color = to_rgba(color, WHITE)
        self._text_changed()

    def set_text_font_family(self, font_family: str | None):
        self._text_font_family = font_family
        self._text_changed()

    def set_text_style(self, style: FontStyle | str):
        self._text_style = self._font_style(style)
        self._text_changed()

    def set_text_letter_spacing(self, letter_spacing: float):
        """Set letter spacing in ems."""
        self._text_letter_spacing = float(letter_spacing)
        self._text_changed()

    def set_text_offset_x(self, offset_x: float):
        self._text_offset_x = float(offset_x)
        self._text_changed()

    def set_text_offset_y(self, offset_y: float):
        self._text_offset_y = float(offset_y)
        self._text_changed()

    def set_text_width_mode(self, mode: TextWidthMode | str):
        try:
            self._text_width_mode = TextWidthMode(mode)
        except ValueError:
            self.logger.warning(f"Unknown text width mode {mode!r}, using wrap")
            self._text_width_mode = TextWidthMode.WRAP
        self._text_changed()

    def set_text_shadow(self, radius: float, dx: float, dy: float, color):
        """Set the primary text shadow. A radius of 0 clears it."""
        self._text_shadow = Shadow(
            color=to_rgba(color),
            radius=max(0.0, float(radius)),
            dx=float(dx),
            dy=float(dy),
        )
        self._text_changed()

    # ------------------------------------------------------------------
    # Public API - progress text
    # ------------------------------------------------------------------

    def set_show_progress_text(self, show: bool):
        self._show_progress_text = bool(show)
        self._text_changed()

    def set_progress_text_format(self, fmt: str):
        """Set the progress text format; it must hold one integer placeholder."""
        self._progress_text_format = fmt
        self._text_changed()

    # ------------------------------------------------------------------
    # Public API - subtitle
    # ------------------------------------------------------------------

    def _subtitle_changed(self):
        self._layouts.invalidate(primary=False)
        self.invalidate()

    def set_subtitle_text(self, text: str | None):
        self._subtitle_text = text
        self._subtitle_changed()

    def get_subtitle_text(self) -> str | None:
        return self._subtitle_text

    def set_subtitle_text_size(self, size: float):
        self._subtitle_text_size = max(0.0, float(size))
        self._subtitle_changed()

    def set_subtitle_text_color(self, color):
        self._subtitle_text_color = to_rgba(color, WHITE)
        self._subtitle_changed()

    def set_subtitle_font_family(self, font_family: str | None):
        self._subtitle_font_family = font_family
        self._subtitle_changed()

    def set_subtitle_text_style(self, style: FontStyle | str):
        self._subtitle_text_style = self._font_style(style)
        self._subtitle_changed()

    def set_subtitle_offset_y(self, offset_y: float):
        """Extra gap between the primary text and the subtitle."""
        self._subtitle_offset_y = float(offset_y)
        self._subtitle_changed()

    # ------------------------------------------------------------------
    # Public API - auto-size
    # ------------------------------------------------------------------

    def set_auto_size_text(self, enabled: bool):
        self._auto_size_text = bool(enabled)
        self._text_changed()

    def set_auto_size_min_text_size(self, min_size: float):
        self._auto_size_min_text_size = max(0.0, float(min_size))
        self._text_changed()

    def _font_style(self, style: FontStyle | str) -> FontStyle:
        try:
            return FontStyle(style)
        except ValueError:
            self.logger.warning(f"Unknown text style {style!r}, using normal")
            return FontStyle.NORMAL

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def draw(self, surface: pygame.Surface, x: int = 0, y: int = 0) -> pygame.Rect:
        """Draw the loader with its top-left corner at (x, y).

        Order: circle image, border, wave, text.

        Args:
            surface: Surface to draw on
            x: X position
            y: Y position

        Returns:
            Rect of the component
        """
        self.needs_redraw = False
        rect = pygame.Rect(x, y, self._width, self._height)
        width, height = self._width, self._height
        if width <= 0 or height <= 0:
            return rect

        side = min(width, height)
        radius = side / 2 - self._border_width

        image = self._images.circle_image(side, radius)
        if image is not None:
            surface.blit(image, (x + (width - side) // 2, y + (height - side) // 2))
            self._draw_wave(surface, x, y, side, radius)

        self._draw_text_overlay(surface, x, y, radius)
        return rect

    def _ensure_wave_shader(self) -> WaveShader | None:
        if self._wave_shader is None:
            try:
                self._wave_shader = WaveShader.generate(self._width, self._height, self._wave_color)
            except (MemoryError, pygame.error) as e:
                self.logger.error(f"Failed to generate wave shader: {e!r}")
                self._wave_shader = None
        return self._wave_shader

    def _wave_circle_mask(self, radius: float) -> pygame.Surface:
        key = (self._width, self._height, radius)
        if self._wave_mask is None or self._wave_mask_key != key:
            self._wave_mask = circle_mask((self._width, self._height), radius)
            self._wave_mask_key = key
        return self._wave_mask

    def _draw_wave(self, surface: pygame.Surface, x: int, y: int, side: int, radius: float):
        shader = self._ensure_wave_shader()
        if shader is None:
            return

        width, height = self._width, self._height
        shader.set_local_transform(
            ShaderTransform.for_frame(
                width,
                height,
                self._amplitude_ratio,
                self._wave_loop.ratio,
                self._fill.value,
            )
        )

        border = self._border_width
        center = (x + width / 2, y + height / 2)
        if border > 0:
            pygame.draw.circle(
                surface,
                self._wave_color,
                center,
                side / 2 - 1,
                width=max(1, math.ceil(border)),
            )

        try:
            filled = shader.paint((width, height), self._wave_circle_mask(radius))
        except (MemoryError, pygame.error) as e:
            self.logger.error(f"Failed to paint wave: {e!r}")
            return
        surface.blit(filled, (x, y))

    def _primary_style(self) -> TextStyle:
        return TextStyle(
            size=self._text_size,
            color=self._text_color,
            font_family=self._text_font_family,
            font_style=self._text_style,
            letter_spacing=self._text_letter_spacing,
            shadow=self._text_shadow,
        )

    def _subtitle_style(self) -> TextStyle:
        return TextStyle(
            size=self._subtitle_text_size,
            color=self._subtitle_text_color,
            font_family=self._subtitle_font_family,
            font_style=self._subtitle_text_style,
        )

    def _build_primary(self, text: str, max_width: int) -> TextLayout | None:
        style = self._primary_style()
        if self._auto_size_text:
            fitted = auto_fit_text_size(text, style, max_width, self._auto_size_min_text_size)
            style = style.with_size(fitted)
            self._fitted_text_size = fitted
        else:
            self._fitted_text_size = None

        if self._text_width_mode == TextWidthMode.MATCH:
            layout_width = max_width
        else:
            layout_width = min(math.ceil(measure_text(text, style)), max_width)
        return build_layout(text, style, layout_width)

    def _build_subtitle(self, max_width: int) -> TextLayout | None:
        if self._subtitle_text is None:
            return None
        return build_layout(self._subtitle_text, self._subtitle_style(), max_width)

    def _draw_text_overlay(self, surface: pygame.Surface, x: int, y: int, radius: float):
        text = self.display_text
        if text is None:
            return

        max_width = max_text_width(radius)
        try:
            primary = self._layouts.primary(lambda: self._build_primary(text, max_width))
            if primary is None:
                return
            subtitle = self._layouts.subtitle(lambda: self._build_subtitle(max_width))
        except (MemoryError, pygame.error) as e:
            self.logger.error(f"Failed to build text layout: {e!r}")
            self._layouts.invalidate()
            return

        center_x, primary_top, subtitle_top = place_text_block(
            (x + self._width / 2, y + self._height / 2),
            primary,
            subtitle,
            offset=(self._text_offset_x, self._text_offset_y),
            subtitle_offset_y=self._subtitle_offset_y,
        )
        primary.draw(surface, center_x, primary_top)
        if subtitle is not None and subtitle_top is not None:
            subtitle.draw(surface, center_x, subtitle_top)

    def __repr__(self) -> str:
        return (
            f"WaveLoader(size={self.size}, progress={self._progress}, "
            f"water_level_ratio={self._fill.value:.3f}, wave_running={self._wave_loop.running})"
        )


def draw_wave_loader(
    surface: pygame.Surface,
    loader: WaveLoader,
    x: int,
    y: int,
    dt: float = 0.0,
) -> pygame.Rect:
    """Advance ``loader`` by ``dt`` seconds and draw it at (x, y).

    Convenience for scene draw loops that own a loader instance.
    """
    if dt > 0:
        loader.update(dt)
    return loader.draw(surface, x, y)
