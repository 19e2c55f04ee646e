"""
Group Image Cropper v1.0 - Data Model
======================================
Crop rectangles, crop settings and gallery records
"""

import os
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

@dataclass(frozen=True)
class CropRect:
    """Crop rectangle in image pixels"""
    x: float
    y: float
    width: float
    height: float

    def rounded(self) -> "CropRect":
        return CropRect(round(self.x), round(self.y), round(self.width), round(self.height))

    def as_dict(self) -> Dict[str, float]:
        return {'x': self.x, 'y': self.y, 'width': self.width, 'height': self.height}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CropRect":
        return cls(data['x'], data['y'], data['width'], data['height'])

    def fits(self, image_width: int, image_height: int, minimum: int = 1) -> bool:
        """Check the rectangle lies inside the image and is at least minimum in size"""
        return (
            self.x >= 0 and self.y >= 0
            and self.width >= minimum and self.height >= minimum
            and self.x + self.width <= image_width
            and self.y + self.height <= image_height
        )

@dataclass(frozen=True)
class CropSettings:
    """Crop rectangle plus the aspect ratio it was chosen with (0 = free-form)"""
    x: float
    y: float
    width: float
    height: float
    aspect_ratio: float = 0.0

    @property
    def rect(self) -> CropRect:
        return CropRect(self.x, self.y, self.width, self.height)

    @classmethod
    def from_rect(cls, rect: CropRect, aspect_ratio: float) -> "CropSettings":
        return cls(rect.x, rect.y, rect.width, rect.height, aspect_ratio)

    def with_aspect_ratio(self, aspect_ratio: float) -> "CropSettings":
        return replace(self, aspect_ratio=aspect_ratio)

@dataclass(frozen=True)
class FileBlob:
    """Raw file handed to ingestion: name, declared MIME type, bytes"""
    name: str
    mime_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        return os.path.splitext(self.name)[1].lower()

    @classmethod
    def from_upload(cls, uploaded_file) -> "FileBlob":
        """Wrap a Streamlit UploadedFile"""
        return cls(
            name=uploaded_file.name,
            mime_type=uploaded_file.type or '',
            data=uploaded_file.getvalue()
        )

@dataclass
class ImageRecord:
    """
    One admitted image.

    ``crop_history`` is an append-only log of applied crops;
    ``crop_settings`` is the latest remembered rectangle and may be
    reset independently of the history.
    """
    id: str
    file: FileBlob
    display_path: str
    width: int = 0
    height: int = 0
    cropped: bool = False
    crop_history: List[CropRect] = field(default_factory=list)
    crop_settings: Optional[CropSettings] = None
    canvas_data: Optional[Dict[str, float]] = None

    @property
    def filename(self) -> str:
        return self.file.name

    def record_crop(self, rect: CropRect):
        """Append an applied crop (rounded) and mark the image cropped"""
        self.crop_history.append(rect.rounded())
        self.cropped = True

    def clear_crop_settings(self):
        self.crop_settings = None
        self.canvas_data = None
