"""
Group Image Cropper v1.0 - Crop Engine Tests
=============================================
Coordinate conversion, aspect selectors and field clamping
"""

import pytest
import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import config
import crop_engine as engine
from models import CropRect

# === CONVERSION ===

def test_to_display_and_back():
    assert engine.to_display(500, 1000, 500) == 250
    assert engine.to_actual(250, 1000, 500) == 500
    assert engine.to_display(333, 1000, 700) == 233
    assert engine.to_actual(233, 1000, 700) == 333

def test_zero_extent_guards():
    assert engine.to_display(10, 0, 500) == 0
    assert engine.to_actual(10, 1000, 0) == 0

@pytest.mark.parametrize("original,container", [
    (1000, 1000), (1000, 700), (4032, 700), (333, 200),
])
def test_round_trip_within_one_unit(original, container):
    for d in range(0, container + 1, 7):
        back = engine.to_display(engine.to_actual(d, original, container), original, container)
        assert abs(back - d) <= 1

def test_rect_to_display_uses_both_axes():
    rect = CropRect(100, 50, 400, 200)
    display = engine.rect_to_display(rect, (1000, 500), (500, 100))
    assert display == {'x': 50, 'y': 10, 'width': 200, 'height': 40}

def test_field_to_actual_axis():
    assert engine.field_to_actual('x', 50, (1000, 500), (500, 100)) == 100
    assert engine.field_to_actual('height', 40, (1000, 500), (500, 100)) == 200

# === ASPECT RATIO ===

def test_selector_to_aspect_ratio():
    assert engine.selector_to_aspect_ratio(config.ASPECT_FREE, (800, 600)) == 0
    assert engine.selector_to_aspect_ratio(config.ASPECT_SQUARE, (800, 600)) == 1
    assert engine.selector_to_aspect_ratio(config.ASPECT_ORIGINAL, (800, 600)) == pytest.approx(4 / 3)
    assert engine.selector_to_aspect_ratio(config.ASPECT_ORIGINAL, None) == 0

def test_aspect_ratio_to_selector():
    dims = (800, 600)
    assert engine.aspect_ratio_to_selector(1, dims) == config.ASPECT_SQUARE
    assert engine.aspect_ratio_to_selector(4 / 3, dims) == config.ASPECT_ORIGINAL
    assert engine.aspect_ratio_to_selector(4 / 3 + 5e-5, dims) == config.ASPECT_ORIGINAL
    assert engine.aspect_ratio_to_selector(4 / 3 + 1e-3, dims) == config.ASPECT_FREE
    assert engine.aspect_ratio_to_selector(0, dims) == config.ASPECT_FREE
    assert engine.aspect_ratio_to_selector(1.0001, dims) == config.ASPECT_FREE

def test_square_image_original_is_square():
    # An exact 1 always reads back as square
    assert engine.aspect_ratio_to_selector(1, (500, 500)) == config.ASPECT_SQUARE

def test_apply_aspect_ratio():
    rect = CropRect(10, 10, 300, 100)
    assert engine.apply_aspect_ratio(rect, 1) == CropRect(10, 10, 300, 300)
    assert engine.apply_aspect_ratio(rect, 0) == rect

# === DEFAULTS AND CLAMPING ===

def test_default_crop_settings():
    s = engine.default_crop_settings(1000, 500)
    assert (s.x, s.y, s.width, s.height, s.aspect_ratio) == (250, 125, 500, 250, 0)

def test_enforce_minimum():
    assert engine.enforce_minimum(CropRect(5, 5, 0.2, 40)) == CropRect(5, 5, 1, 40)
    rect = CropRect(0, 0, 10, 10)
    assert engine.enforce_minimum(rect) is rect

def test_clamp_width_zero_becomes_one():
    rect = engine.clamp_field('width', 0, CropRect(0, 0, 500, 300), 1000, 800)
    assert rect == CropRect(0, 0, 1, 300)

def test_clamp_width_to_remaining_extent():
    rect = engine.clamp_field('width', 5000, CropRect(200, 0, 500, 300), 1000, 800)
    assert rect.width == 800

def test_clamp_position():
    current = CropRect(100, 100, 400, 300)
    assert engine.clamp_field('x', -20, current, 1000, 800).x == 0
    assert engine.clamp_field('x', 900, current, 1000, 800).x == 600
    assert engine.clamp_field('y', 900, current, 1000, 800).y == 500
    assert engine.clamp_field('height', 0, current, 1000, 800).height == config.CROP_MIN

def test_clamp_unknown_field():
    with pytest.raises(ValueError):
        engine.clamp_field('depth', 1, CropRect(0, 0, 1, 1), 10, 10)
