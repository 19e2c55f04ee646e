"""
Group Image Cropper v1.0 - Crop Coordinate Engine
==================================================
Conversions between display space and image space

The crop surface works in image pixels while the numeric fields show
container-relative (scaled) values. All conversions round, so a
display -> image -> display round trip may drift by one unit.
"""

from typing import Dict, Optional, Tuple
import config
from models import CropRect, CropSettings

# Numeric field -> axis it is measured along
FIELD_AXIS = {
    'x': 'width',
    'y': 'height',
    'width': 'width',
    'height': 'height',
}

def to_display(actual: float, original_extent: float, container_extent: float) -> int:
    """Image-space magnitude -> display-space magnitude"""
    if original_extent <= 0:
        return 0
    return round(actual / original_extent * container_extent)

def to_actual(display: float, original_extent: float, container_extent: float) -> int:
    """Display-space magnitude -> image-space magnitude"""
    if container_extent <= 0:
        return 0
    return round(display / container_extent * original_extent)

def selector_to_aspect_ratio(selector: str, dimensions: Optional[Tuple[int, int]]) -> float:
    """
    Numeric aspect ratio for a selector value

    Args:
        selector: 'free', 'original' or '1:1'
        dimensions: (width, height) of the original image, if known

    Returns:
        Ratio width/height, 0 for free-form
    """
    if selector == config.ASPECT_ORIGINAL:
        if dimensions and dimensions[1]:
            return dimensions[0] / dimensions[1]
        return 0.0
    if selector == config.ASPECT_SQUARE:
        return 1.0
    return 0.0

def aspect_ratio_to_selector(ratio: float, dimensions: Optional[Tuple[int, int]]) -> str:
    """
    Selector value for a numeric ratio

    Only an exact 1 maps to square; the original ratio matches within
    ORIGINAL_RATIO_TOLERANCE; anything else is free-form.
    """
    if ratio == 1:
        return config.ASPECT_SQUARE
    if dimensions and dimensions[1]:
        original = dimensions[0] / dimensions[1]
        if abs(ratio - original) < config.ORIGINAL_RATIO_TOLERANCE:
            return config.ASPECT_ORIGINAL
    return config.ASPECT_FREE

def default_crop_settings(width: int, height: int) -> CropSettings:
    """Centered crop covering half of each extent"""
    return CropSettings(
        x=width / 4,
        y=height / 4,
        width=width / 2,
        height=height / 2,
        aspect_ratio=0.0
    )

def enforce_minimum(rect: CropRect, minimum: int = config.CROP_MIN) -> CropRect:
    """Grow a degenerate rectangle up to the minimum crop size"""
    if rect.width >= minimum and rect.height >= minimum:
        return rect
    return CropRect(rect.x, rect.y, max(rect.width, minimum), max(rect.height, minimum))

def apply_aspect_ratio(rect: CropRect, ratio: float) -> CropRect:
    """Recompute height from width for a locked ratio; free-form keeps height"""
    if not ratio:
        return rect
    return CropRect(rect.x, rect.y, rect.width, rect.width / ratio)

def clamp_field(key: str, value: float, current: CropRect, image_width: int, image_height: int) -> CropRect:
    """
    Apply a committed numeric edit in image space

    x, y are kept within [0, extent - current size];
    width, height within [CROP_MIN, extent - current origin].

    Returns:
        New rectangle with only the edited field changed
    """
    data: Dict[str, float] = current.as_dict()

    if key == 'x':
        data['x'] = max(0, min(image_width - current.width, value))
    elif key == 'y':
        data['y'] = max(0, min(image_height - current.height, value))
    elif key == 'width':
        data['width'] = max(config.CROP_MIN, min(image_width - current.x, value))
    elif key == 'height':
        data['height'] = max(config.CROP_MIN, min(image_height - current.y, value))
    else:
        raise ValueError(f"Unknown crop field: {key}")

    return CropRect.from_dict(data)

def rect_to_display(rect: CropRect, natural: Tuple[int, int], container: Tuple[float, float]) -> Dict[str, int]:
    """Convert all four fields of an image-space rectangle for the numeric inputs"""
    nat_w, nat_h = natural
    con_w, con_h = container
    return {
        'x': to_display(rect.x, nat_w, con_w),
        'y': to_display(rect.y, nat_h, con_h),
        'width': to_display(rect.width, nat_w, con_w),
        'height': to_display(rect.height, nat_h, con_h),
    }

def field_to_actual(key: str, display: float, natural: Tuple[int, int], container: Tuple[float, float]) -> int:
    """Convert one numeric field from display space to image space"""
    if FIELD_AXIS[key] == 'width':
        return to_actual(display, natural[0], container[0])
    return to_actual(display, natural[1], container[1])
