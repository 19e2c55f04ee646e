"""
Group Image Cropper v1.0 - Crop Memory
=======================================
Where crop settings are remembered: per image or globally
"""

from typing import Dict, Optional
import config
from models import CropSettings
from session import Session

class PerImagePolicy:
    """Settings live on the image record"""

    name = config.MODE_PER_IMAGE

    def __init__(self, session: Session, image_id: str):
        self.session = session
        self.image_id = image_id

    def read(self) -> Optional[CropSettings]:
        return self.session.get(self.image_id).crop_settings

    def write(self, settings: CropSettings, canvas_data: Optional[Dict[str, float]] = None):
        record = self.session.get(self.image_id)
        record.crop_settings = settings
        if canvas_data is not None:
            record.canvas_data = canvas_data

    def clear(self):
        self.session.get(self.image_id).clear_crop_settings()

class GlobalPolicy:
    """Settings are shared by every image"""

    name = config.MODE_GLOBAL

    def __init__(self, session: Session):
        self.session = session

    def read(self) -> Optional[CropSettings]:
        return self.session.global_settings

    def write(self, settings: CropSettings, canvas_data: Optional[Dict[str, float]] = None):
        self.session.global_settings = settings

    def clear(self):
        # Shared state is not owned by one image
        pass

def policy_for(session: Session, image_id: str):
    """Policy for the session's current crop memory mode"""
    if session.is_per_image:
        return PerImagePolicy(session, image_id)
    return GlobalPolicy(session)
