"""Test image cropping, circle clipping and caching."""

import pygame
from PIL import Image

from waveloader.ui.image_pipeline import ImagePipeline, crop_rect, crop_to_square


def test_crop_rect_is_centered_square():
    """Test the crop rectangle for landscape and portrait images."""
    assert crop_rect(200, 100) == pygame.Rect(50, 0, 100, 100)
    assert crop_rect(100, 200) == pygame.Rect(0, 50, 100, 100)
    assert crop_rect(64, 64) == pygame.Rect(0, 0, 64, 64)


def test_crop_to_square_scales_surface(red_image):
    """Test that a surface is cropped and scaled to the requested side."""
    square = crop_to_square(red_image, 50)

    assert square.get_size() == (50, 50)
    assert tuple(square.get_at((25, 25))) == (255, 0, 0, 255)


def test_crop_to_square_without_source_is_blank():
    """Test that no image yields a transparent square."""
    square = crop_to_square(None, 40)

    assert square.get_size() == (40, 40)
    assert square.get_at((20, 20)).a == 0


def test_crop_to_square_empty_side():
    """Test that a zero side yields nothing."""
    assert crop_to_square(None, 0) is None


def test_crop_to_square_accepts_pil_image():
    """Test PIL image sources."""
    image = Image.new("RGBA", (30, 60), (0, 255, 0, 255))
    square = crop_to_square(image, 20)

    assert square.get_size() == (20, 20)
    assert tuple(square.get_at((10, 10))) == (0, 255, 0, 255)


def test_crop_to_square_accepts_path(tmp_path):
    """Test image file sources."""
    path = tmp_path / "cover.png"
    Image.new("RGB", (16, 16), (0, 0, 255)).save(path)

    square = crop_to_square(path, 8)
    assert tuple(square.get_at((4, 4))) == (0, 0, 255, 255)


def test_crop_to_square_degrades_on_bad_source(tmp_path):
    """Test that unreadable or unsupported sources yield no image."""
    assert crop_to_square(tmp_path / "missing.png", 10) is None
    assert crop_to_square(42, 10) is None


def test_circle_image_clips_corners(red_image):
    """Test that the circle image is opaque inside and clear outside."""
    pipeline = ImagePipeline()
    pipeline.set_source(red_image)

    circle = pipeline.circle_image(100, 40)

    assert circle.get_at((50, 50)).a == 255
    assert circle.get_at((0, 0)).a == 0
    assert circle.get_at((50, 5)).a == 0


def test_circle_image_is_cached(red_image):
    """Test that unchanged inputs reuse the cached surface."""
    pipeline = ImagePipeline()
    pipeline.set_source(red_image)

    first = pipeline.circle_image(100, 40)
    assert pipeline.circle_image(100, 40) is first
    assert pipeline.circle_image(100, 30) is not first


def test_new_source_and_release_rebuild(red_image):
    """Test that a new source or a release forces a rebuild."""
    pipeline = ImagePipeline()
    pipeline.set_source(red_image)
    first = pipeline.circle_image(100, 40)

    pipeline.set_source(red_image)
    second = pipeline.circle_image(100, 40)
    assert second is not first

    pipeline.release()
    pipeline.release()
    assert pipeline.circle_image(100, 40) is not second
    assert pipeline.source is red_image
