"""Test text measurement, auto-size, wrapping and layout caching."""

import pytest

from waveloader.ui.text_layout import (
    LayoutCache,
    TextLayout,
    auto_fit_text_size,
    build_layout,
    max_text_width,
    measure_text,
    place_text_block,
    wrap_text,
)
from waveloader.ui.text_style import Shadow, TextStyle


def fake_measure(text, style, size):
    """Half an em per character."""
    return size * len(text) * 0.5


def test_max_text_width_uses_85_percent_of_diameter():
    """Test the usable text width inside the circle."""
    assert max_text_width(50) == 85
    assert max_text_width(0) == 0
    assert max_text_width(-5) == 0


def test_auto_fit_finds_largest_fitting_size():
    """Test that auto-size lands within one pixel of the largest fit."""
    style = TextStyle(size=100)
    size = auto_fit_text_size("abcd", style, 40, 8, measure=fake_measure)

    assert 19 <= size <= 20
    assert fake_measure("abcd", style, size) <= 40


def test_auto_fit_is_idempotent():
    """Test that fitting the same inputs twice gives the same size."""
    style = TextStyle(size=64)
    first = auto_fit_text_size("Loading", style, 90, 8, measure=fake_measure)
    second = auto_fit_text_size("Loading", style, 90, 8, measure=fake_measure)
    assert first == second


def test_auto_fit_returns_min_when_nothing_fits():
    """Test the lower bound when even the minimum size overflows."""
    style = TextStyle(size=40)
    assert auto_fit_text_size("abcd", style, 1, 8, measure=fake_measure) == 8


def test_auto_fit_returns_min_when_size_not_above_min():
    """Test that a configured size at or below the minimum yields the minimum."""
    assert auto_fit_text_size("abcd", TextStyle(size=8), 1000, 8, measure=fake_measure) == 8
    assert auto_fit_text_size("abcd", TextStyle(size=5), 1000, 8, measure=fake_measure) == 8


def test_auto_fit_with_real_font_fits():
    """Test auto-size against the default pygame font."""
    style = TextStyle(size=80)
    size = auto_fit_text_size("Loading everything", style, 150, 8)

    assert 8 <= size <= 80
    assert measure_text("Loading everything", style, size) <= 150


def test_measure_text_widest_line_and_spacing():
    """Test that measurement uses the widest line and honours letter spacing."""
    style = TextStyle(size=20)
    single = measure_text("wide line", style)
    assert measure_text("wide line\nab", style) == single

    spaced = TextStyle(size=20, letter_spacing=0.5)
    assert measure_text("wide line", spaced) > single


def test_wrap_text_breaks_between_words():
    """Test greedy word wrapping."""
    assert wrap_text("hello world foo", lambda s: len(s) <= 10) == ["hello", "world foo"]


def test_wrap_text_breaks_long_words():
    """Test that a word wider than the line is split between characters."""
    assert wrap_text("abcdefghijkl", lambda s: len(s) <= 5) == ["abcde", "fghij", "kl"]


def test_wrap_text_keeps_newlines():
    """Test that explicit newlines start new lines."""
    assert wrap_text("a\nb", lambda s: True) == ["a", "b"]


def test_build_layout_rejects_empty_width():
    """Test that no layout is compiled without room for text."""
    assert build_layout("Hello", TextStyle(), 0) is None


def test_build_layout_single_line():
    """Test compiling a line that fits."""
    layout = build_layout("Hello", TextStyle(size=20), 500)

    assert layout.lines == ["Hello"]
    assert len(layout.surfaces) == 1
    assert layout.line_height > 0
    assert layout.height == layout.line_height


def test_build_layout_wraps_to_width():
    """Test that lines never exceed the layout width."""
    style = TextStyle(size=20)
    width = int(measure_text("Loading", style)) + 2
    layout = build_layout("Loading all the things", style, width)

    assert len(layout.lines) > 1
    for line in layout.lines:
        assert measure_text(line, style) <= width


def test_build_layout_shadow_pads_surface():
    """Test that a shadow grows the line surface and keeps the line height."""
    plain = build_layout("Hi", TextStyle(size=20), 200)
    shadowed = build_layout(
        "Hi",
        TextStyle(size=20, shadow=Shadow(color=(0, 0, 0, 200), radius=3, dx=2, dy=2)),
        200,
    )

    assert shadowed.surfaces[0].get_width() > plain.surfaces[0].get_width()
    assert shadowed.line_height == plain.line_height


def test_place_text_block_centers_primary_and_subtitle():
    """Test vertical centering of the combined text block."""
    primary = TextLayout(lines=["a"], width=10, line_height=20)
    subtitle = TextLayout(lines=["b"], width=10, line_height=10)

    center_x, primary_top, subtitle_top = place_text_block(
        (100, 100), primary, subtitle, subtitle_offset_y=4
    )
    assert center_x == 100
    assert primary_top == pytest.approx(83)
    assert subtitle_top == pytest.approx(107)


def test_place_text_block_applies_offsets():
    """Test that text offsets shift the whole block."""
    primary = TextLayout(lines=["a"], width=10, line_height=20)

    center_x, primary_top, subtitle_top = place_text_block(
        (100, 100), primary, None, offset=(5, -3)
    )
    assert center_x == 105
    assert primary_top == pytest.approx(87)
    assert subtitle_top is None


def test_layout_cache_rebuilds_only_when_dirty():
    """Test the dirty-flag guarded rebuilds."""
    cache = LayoutCache()
    builds = []

    def build():
        builds.append(1)
        return TextLayout(lines=["x"], width=10, line_height=10)

    first = cache.primary(build)
    assert cache.primary(build) is first
    assert len(builds) == 1

    cache.invalidate(subtitle=False)
    assert cache.primary(build) is not first
    assert len(builds) == 2
    assert cache.subtitle_dirty


def test_layout_cache_clear_drops_layouts():
    """Test that clear forces both layouts to rebuild."""
    cache = LayoutCache()
    cache.primary(lambda: TextLayout(lines=["x"], width=10, line_height=10))
    cache.subtitle(lambda: None)

    cache.clear()

    assert cache.primary_dirty
    assert cache.subtitle_dirty
