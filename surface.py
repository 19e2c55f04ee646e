"""
Group Image Cropper v1.0 - Crop Surface
========================================
Interactive crop surface contract and a Pillow-backed implementation
"""

import io
from typing import Callable, Dict, List, Optional, Tuple
from PIL import Image, ImageOps
import config
from logger import get_logger
from models import CropRect

logger = get_logger(__name__)

class SurfaceDestroyedError(RuntimeError):
    """Raised when a destroyed surface is used"""

class CropSurface:
    """
    Capability the crop manager drives.

    Rectangles are in image pixels. ``on('ready' | 'crop', callback)``
    registers lifecycle and interaction callbacks.
    """

    def get_data(self) -> CropRect:
        raise NotImplementedError

    def set_data(self, rect: CropRect) -> None:
        raise NotImplementedError

    def get_canvas_data(self) -> Dict[str, float]:
        raise NotImplementedError

    def set_canvas_data(self, geometry: Dict[str, float]) -> None:
        raise NotImplementedError

    def get_container_data(self) -> Dict[str, float]:
        raise NotImplementedError

    def set_aspect_ratio(self, ratio: float) -> None:
        raise NotImplementedError

    def get_cropped_region(self) -> Tuple[bytes, str]:
        """Encoded crop and its MIME type"""
        raise NotImplementedError

    def on(self, event: str, callback: Callable[[], None]) -> None:
        raise NotImplementedError

    def destroy(self) -> None:
        raise NotImplementedError

def create_proxy_size(width: int, height: int, target_width: int = None) -> Tuple[int, int]:
    """Size of the on-screen container for an image"""
    if target_width is None:
        target_width = config.PROXY_IMAGE_WIDTH

    if width <= target_width:
        return width, height

    ratio = target_width / width
    return target_width, max(1, int(height * ratio))

class PillowCropSurface(CropSurface):
    """
    Crop surface over a Pillow image.

    The rectangle is kept inside the image; with a locked aspect ratio
    ``set_data`` derives height from width and shrinks the box to fit.
    """

    EVENTS = ('ready', 'crop')

    def __init__(self, image_path: str, container_width: int = None):
        with Image.open(image_path) as img_temp:
            self._format = img_temp.format or 'PNG'
            self._image = ImageOps.exif_transpose(img_temp)
            self._image.load()

        self.natural_width, self.natural_height = self._image.size
        self._container = create_proxy_size(self.natural_width, self.natural_height, container_width)
        self._canvas: Dict[str, float] = {
            'left': 0.0,
            'top': 0.0,
            'width': float(self._container[0]),
            'height': float(self._container[1]),
            'naturalWidth': float(self.natural_width),
            'naturalHeight': float(self.natural_height),
        }
        self._aspect_ratio = 0.0
        self._rect = CropRect(0, 0, self.natural_width, self.natural_height)
        self._listeners: Dict[str, List[Callable[[], None]]] = {e: [] for e in self.EVENTS}
        self._destroyed = False
        self._ready = False

        logger.debug(
            f"Surface created: {self.natural_width}x{self.natural_height} "
            f"→ {self._container[0]}x{self._container[1]}"
        )

    def _check(self):
        if self._destroyed:
            raise SurfaceDestroyedError("Crop surface already destroyed")

    def _emit(self, event: str):
        for callback in list(self._listeners[event]):
            callback()

    def on(self, event: str, callback: Callable[[], None]) -> None:
        self._check()
        if event not in self._listeners:
            raise ValueError(f"Unknown surface event: {event}")
        self._listeners[event].append(callback)

    def mark_ready(self):
        """Signal the surface is mounted; fires 'ready' once"""
        self._check()
        if not self._ready:
            self._ready = True
            self._emit('ready')

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    @property
    def aspect_ratio(self) -> float:
        return self._aspect_ratio

    def get_data(self) -> CropRect:
        self._check()
        return self._rect

    def _fit(self, rect: CropRect) -> CropRect:
        max_w, max_h = self.natural_width, self.natural_height
        x = min(max(0.0, rect.x), max_w - 1)
        y = min(max(0.0, rect.y), max_h - 1)
        width = min(max(rect.width, config.CROP_MIN), max_w - x)
        height = min(max(rect.height, config.CROP_MIN), max_h - y)

        if self._aspect_ratio:
            height_changed = rect.height != self._rect.height and rect.width == self._rect.width
            x, y, width, height = self._fit_ratio(x, y, width, height, height_changed)

        return CropRect(x, y, width, height)

    def _fit_ratio(self, x: float, y: float, width: float, height: float,
                   height_changed: bool) -> Tuple[float, float, float, float]:
        """Derive the other side from the edited one, keep both >= CROP_MIN and inside the image"""
        ratio = self._aspect_ratio
        max_w, max_h = self.natural_width, self.natural_height

        if height_changed:
            width = height * ratio
        else:
            height = width / ratio

        # Smallest height whose derived width is also at least CROP_MIN
        min_h = max(config.CROP_MIN, config.CROP_MIN / ratio)
        if height < min_h:
            height = min_h
            width = height * ratio

        if x + width > max_w:
            width = max_w - x
            height = width / ratio
        if y + height > max_h:
            height = max_h - y
            width = height * ratio

        # Shrinking to the edge went below the minimum: move the origin instead
        if height < min_h or width < config.CROP_MIN:
            height = min(min_h, max_h, max_w / ratio)
            width = height * ratio
            x = max(0.0, min(x, max_w - width))
            y = max(0.0, min(y, max_h - height))

        return x, y, width, height

    def set_data(self, rect: CropRect) -> None:
        self._check()
        self._rect = self._fit(rect)
        self._emit('crop')

    def drag_to(self, rect: CropRect) -> None:
        """Apply a user gesture reported by the interactive widget"""
        self.set_data(rect)

    def get_canvas_data(self) -> Dict[str, float]:
        self._check()
        return dict(self._canvas)

    def set_canvas_data(self, geometry: Dict[str, float]) -> None:
        self._check()
        for key in ('left', 'top', 'width', 'height'):
            if key in geometry:
                self._canvas[key] = float(geometry[key])

    def get_container_data(self) -> Dict[str, float]:
        self._check()
        return {'width': float(self._container[0]), 'height': float(self._container[1])}

    def set_aspect_ratio(self, ratio: float) -> None:
        self._check()
        self._aspect_ratio = ratio or 0.0
        if self._aspect_ratio:
            self._rect = self._fit(self._rect)

    def get_proxy_image(self) -> Image.Image:
        """Downscaled copy shown by the interactive widget"""
        self._check()
        return self._image.resize(self._container, Image.Resampling.LANCZOS)

    def get_cropped_region(self) -> Tuple[bytes, str]:
        self._check()
        r = self._rect.rounded()
        region = self._image.crop((r.x, r.y, r.x + r.width, r.y + r.height))

        fmt = self._format if self._format in config.PIL_FORMAT_TO_MIME else 'PNG'
        if fmt == 'JPEG' and region.mode not in ('RGB', 'L'):
            region = region.convert('RGB')

        buf = io.BytesIO()
        save_kwargs = {"quality": 95} if fmt in ('JPEG', 'WEBP') else {}
        region.save(buf, fmt, **save_kwargs)
        return buf.getvalue(), config.PIL_FORMAT_TO_MIME[fmt]

    def destroy(self) -> None:
        if self._destroyed:
            return
        self._destroyed = True
        self._listeners = {e: [] for e in self.EVENTS}
        self._image.close()
        logger.debug("Surface destroyed")
