#!/usr/bin/env python3
"""
Image pipeline for the loader's circular image.

Crops the source image to a centered square, scales it to the widget side
and clips it to a circle. Results are cached until the source or the
geometry changes. Allocation failures degrade to "no image" so the render
path never raises.
"""

import logging
from pathlib import Path
from typing import Union

import pygame
from PIL import Image

from waveloader.core.logging_utils import setup_logger

ImageSource = Union[pygame.Surface, Image.Image, str, Path, None]

_logger = setup_logger(__name__)


def load_source(source: ImageSource) -> pygame.Surface | None:
    """Convert any supported image source into a pygame Surface.

    Args:
        source: Surface, PIL image, path to an image file, or None

    Returns:
        Surface, or None when there is no source

    Raises:
        OSError: If a path cannot be read or decoded
        TypeError: If the source type is not supported
    """
    if source is None:
        return None
    if isinstance(source, pygame.Surface):
        return source
    if isinstance(source, (str, Path)):
        with Image.open(source) as opened:
            source = opened.convert("RGBA")
    if isinstance(source, Image.Image):
        pil_img = source.convert("RGBA")
        return pygame.image.frombytes(pil_img.tobytes(), pil_img.size, "RGBA")
    raise TypeError(f"Unsupported image source: {type(source).__name__}")


def crop_rect(width: int, height: int) -> pygame.Rect:
    """Centered square of side min(width, height)."""
    if width >= height:
        return pygame.Rect(width // 2 - height // 2, 0, height, height)
    return pygame.Rect(0, height // 2 - width // 2, width, width)


def crop_to_square(
    source: ImageSource,
    side: int,
    logger: logging.Logger | None = None,
) -> pygame.Surface | None:
    """Crop ``source`` to its centered square and scale it to ``side``.

    With no source a blank, transparent square is produced instead.

    Args:
        source: Image source (see load_source)
        side: Target side length in pixels
        logger: Diagnostic sink (defaults to the module logger)

    Returns:
        side x side Surface, or None if side <= 0 or allocation/decoding fails
    """
    log = logger or _logger
    if side <= 0:
        return None

    try:
        image = load_source(source)
        if image is None:
            return pygame.Surface((side, side), pygame.SRCALPHA)

        rect = crop_rect(*image.get_size())
        if rect.width <= 0:
            return None

        square = pygame.Surface(rect.size, pygame.SRCALPHA)
        square.blit(image, (0, 0), area=rect)
        if rect.width != side:
            square = pygame.transform.smoothscale(square, (side, side))
        return square
    except MemoryError:
        log.error("Encountered MemoryError while generating bitmap!")
        return None
    except pygame.error as e:
        log.error(f"Failed to allocate image surface: {e}")
        return None
    except (OSError, TypeError) as e:
        log.error(f"Failed to load image source: {e}")
        return None


def circle_mask(size: tuple[int, int], radius: float) -> pygame.Surface:
    """Alpha mask with an opaque circle of ``radius`` centered in ``size``."""
    width, height = size
    mask = pygame.Surface((width, height), pygame.SRCALPHA)
    if radius > 0:
        pygame.draw.circle(mask, (255, 255, 255, 255), (width / 2, height / 2), radius)
    return mask


def clip_to_circle(surface: pygame.Surface, mask: pygame.Surface) -> pygame.Surface:
    """Return a copy of ``surface`` with everything outside ``mask`` cleared."""
    clipped = surface.copy()
    clipped.blit(mask, (0, 0), special_flags=pygame.BLEND_RGBA_MULT)
    return clipped


class ImagePipeline:
    """Caches the cropped and circle-clipped image for one widget."""

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or _logger
        self._source: ImageSource = None
        self._source_version = 0

        self._square: pygame.Surface | None = None
        self._square_key: tuple[int, int] | None = None
        self._circle: pygame.Surface | None = None
        self._circle_key: tuple | None = None

    @property
    def source(self) -> ImageSource:
        return self._source

    def set_source(self, source: ImageSource):
        """Replace the image source. The next request re-crops."""
        self._source = source
        self._source_version += 1

    def square(self, side: int) -> pygame.Surface | None:
        """Cropped square image at ``side``, recomputed only when needed."""
        key = (self._source_version, side)
        if self._square_key != key:
            self._square = crop_to_square(self._source, side, self.logger)
            self._square_key = key
        return self._square

    def circle_image(self, side: int, radius: float) -> pygame.Surface | None:
        """Cropped image clipped to a circle of ``radius``."""
        square = self.square(side)
        if square is None:
            return None
        key = (self._source_version, side, radius)
        if self._circle_key != key:
            try:
                self._circle = clip_to_circle(square, circle_mask((side, side), radius))
            except (MemoryError, pygame.error) as e:
                self.logger.error(f"Failed to allocate circle image: {e!r}")
                self._circle = None
            self._circle_key = key
        return self._circle

    def release(self):
        """Drop cached surfaces. The source is kept; surfaces are rebuilt on demand."""
        self._square = None
        self._square_key = None
        self._circle = None
        self._circle_key = None
