#!/usr/bin/env python3
"""
Wave shader: two layered sine waves in an offscreen surface.

The surface is generated once per size/color and then treated like a bitmap
shader: it repeats horizontally, clamps vertically and is positioned every
frame through a local ShaderTransform. Animating the wave therefore only
changes the transform, never the pixels.
"""

import math
from dataclasses import dataclass

import numpy as np
import pygame

from .colors import RGBA, adjust_alpha

# Reference amplitude the surface is generated at; other amplitudes scale it
DEFAULT_AMPLITUDE_RATIO = 0.05
DEFAULT_WATER_LEVEL_RATIO = 0.5
DEFAULT_WAVE_LENGTH_RATIO = 1.0
BACK_WAVE_ALPHA = 0.3

# Scales below this are treated as a flat water line
_MIN_SCALE_Y = 1e-4


@dataclass(frozen=True)
class ShaderTransform:
    """Vertical scale about ``anchor_y`` followed by a translation."""

    scale_y: float = 1.0
    anchor_y: float = 0.0
    translate_x: float = 0.0
    translate_y: float = 0.0

    @classmethod
    def for_frame(
        cls,
        width: int,
        height: int,
        amplitude_ratio: float,
        wave_shift_ratio: float,
        water_level_ratio: float,
    ) -> "ShaderTransform":
        """Transform placing the wave for the current animation state."""
        return cls(
            scale_y=amplitude_ratio / DEFAULT_AMPLITUDE_RATIO,
            anchor_y=height * DEFAULT_WATER_LEVEL_RATIO,
            translate_x=wave_shift_ratio * width,
            translate_y=(DEFAULT_WATER_LEVEL_RATIO - water_level_ratio) * height,
        )

    def map_y(self, y: float) -> float:
        """Where shader row ``y`` lands on the target."""
        return self.anchor_y + (y - self.anchor_y) * self.scale_y + self.translate_y

    def as_matrix(self) -> np.ndarray:
        """3x3 affine matrix equivalent of this transform."""
        return np.array(
            [
                [1.0, 0.0, self.translate_x],
                [0.0, self.scale_y, self.anchor_y * (1 - self.scale_y) + self.translate_y],
                [0.0, 0.0, 1.0],
            ]
        )


def wave_profile(width: int, height: int) -> np.ndarray:
    """Crest height for every x in [0, width] at the reference amplitude."""
    angular_frequency = 2.0 * math.pi / DEFAULT_WAVE_LENGTH_RATIO / width
    amplitude = height * DEFAULT_AMPLITUDE_RATIO
    water_level = height * DEFAULT_WATER_LEVEL_RATIO
    xs = np.arange(width + 1)
    return water_level + amplitude * np.sin(xs * angular_frequency)


def wave_alpha(width: int, height: int, color: RGBA) -> np.ndarray:
    """Per-pixel alpha of the two composited wave layers, indexed [x, y].

    Layer one fills each column below the crest at 30% of the color alpha.
    Layer two uses the same crests shifted by a quarter wavelength and is
    composited over it at full color alpha.
    """
    crests = wave_profile(width, height)
    shift = width // 4
    columns = np.arange(width)
    back = np.floor(crests[columns])
    front = np.floor(crests[(columns + shift) % (width + 1)])

    rows = np.arange(height)[None, :]
    back_cover = rows >= back[:, None]
    front_cover = rows >= front[:, None]

    back_a = adjust_alpha(color, BACK_WAVE_ALPHA)[3] / 255.0
    front_a = color[3] / 255.0
    front_layer = front_cover * front_a
    combined = front_layer + back_cover * back_a * (1.0 - front_layer)
    return np.rint(combined * 255).astype(np.uint8)


class WaveShader:
    """A generated wave surface plus its per-frame local transform."""

    def __init__(self, surface: pygame.Surface):
        self.surface = surface
        self.width, self.height = surface.get_size()
        self.water_level = self.height * DEFAULT_WATER_LEVEL_RATIO
        self.local_transform = ShaderTransform(anchor_y=self.water_level)

        # Clamp colors for rows outside the surface
        self.top_color = tuple(surface.get_at((0, 0)))
        self.bottom_color = tuple(surface.get_at((0, self.height - 1)))

        self._scaled: pygame.Surface | None = None
        self._scaled_height = 0
        self._output: pygame.Surface | None = None

    @classmethod
    def generate(cls, width: int, height: int, color: RGBA) -> "WaveShader | None":
        """Render the two-layer wave surface.

        Args:
            width: Surface width (one wavelength)
            height: Surface height
            color: Wave color (RGBA)

        Returns:
            WaveShader, or None for an empty size
        """
        if width <= 0 or height <= 0:
            return None

        surface = pygame.Surface((width, height), pygame.SRCALPHA)
        surface.fill((color[0], color[1], color[2], 0))
        alpha = pygame.surfarray.pixels_alpha(surface)
        alpha[:, :] = wave_alpha(width, height, color)
        del alpha  # unlock the surface

        return cls(surface)

    def set_local_transform(self, transform: ShaderTransform):
        """Position the shader for the next paint."""
        self.local_transform = transform

    def _scaled_tile(self, scaled_height: int) -> pygame.Surface:
        if scaled_height == self.height:
            return self.surface
        if self._scaled is None or self._scaled_height != scaled_height:
            self._scaled = pygame.transform.smoothscale(self.surface, (self.width, scaled_height))
            self._scaled_height = scaled_height
        return self._scaled

    def paint(self, size: tuple[int, int], mask: pygame.Surface | None = None) -> pygame.Surface:
        """Sample the shader over a ``size`` area through the local transform.

        Args:
            size: Target area (width, height)
            mask: Optional alpha mask multiplied into the result

        Returns:
            Surface owned by the shader; valid until the next paint
        """
        width, height = size
        if self._output is None or self._output.get_size() != (width, height):
            self._output = pygame.Surface((width, height), pygame.SRCALPHA)
        out = self._output
        out.fill((0, 0, 0, 0))

        t = self.local_transform
        if t.scale_y < _MIN_SCALE_Y:
            top = bottom = round(t.map_y(self.water_level))
        else:
            scaled_height = max(1, round(self.height * t.scale_y))
            tile = self._scaled_tile(scaled_height)
            top = round(t.map_y(0))
            bottom = top + scaled_height

            x = round(t.translate_x) % self.width - self.width
            while x < width:
                # Tiles never overlap, so additive blending copies pixels unchanged
                out.blit(tile, (x, top), special_flags=pygame.BLEND_RGBA_ADD)
                x += self.width

        if top > 0:
            out.fill(self.top_color, pygame.Rect(0, 0, width, min(top, height)))
        if bottom < height:
            out.fill(self.bottom_color, pygame.Rect(0, max(bottom, 0), width, height - max(bottom, 0)))

        if mask is not None:
            out.blit(mask, (0, 0), special_flags=pygame.BLEND_RGBA_MULT)
        return out
