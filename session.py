"""
Group Image Cropper v1.0 - Session Module
==========================================
Gallery of admitted images and crop memory
"""

import threading
import uuid
import weakref
from typing import Dict, List, Optional, Set
import config
from logger import get_logger
from models import CropSettings, FileBlob, ImageRecord
from resources import ResourceTracker

logger = get_logger(__name__)

class SessionFullError(RuntimeError):
    """Raised when adding to a session that has no free slots"""

class Session:
    """
    Admitted images plus the global crop memory.

    Records are shown ordered by filename. Each record owns one display
    resource, released when the record is deleted or the session is
    torn down.
    """

    def __init__(self, capacity: int = config.MAX_IMAGES, resources: Optional[ResourceTracker] = None):
        self.capacity = capacity
        self.resources = resources or ResourceTracker()
        self.global_settings: Optional[CropSettings] = None
        self.mode = config.MODE_PER_IMAGE
        self._records: Dict[str, ImageRecord] = {}
        self._lock = threading.RLock()
        # Closes the tracker when the session is collected, or at interpreter exit
        self._finalizer = weakref.finalize(self, self.resources.close)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, image_id: str) -> bool:
        with self._lock:
            return image_id in self._records

    @property
    def images(self) -> List[ImageRecord]:
        """Records ordered by filename"""
        with self._lock:
            return sorted(self._records.values(), key=lambda r: r.filename)

    @property
    def filenames(self) -> Set[str]:
        with self._lock:
            return {r.filename for r in self._records.values()}

    @property
    def remaining_slots(self) -> int:
        with self._lock:
            return max(0, self.capacity - len(self._records))

    @property
    def is_per_image(self) -> bool:
        return self.mode == config.MODE_PER_IMAGE

    def set_mode(self, mode: str):
        if mode not in (config.MODE_PER_IMAGE, config.MODE_GLOBAL):
            raise ValueError(f"Unknown crop memory mode: {mode}")
        if mode != self.mode:
            logger.info(f"Crop memory mode: {self.mode} → {mode}")
        self.mode = mode

    def get(self, image_id: str) -> ImageRecord:
        with self._lock:
            return self._records[image_id]

    def add(self, blob: FileBlob, width: int = 0, height: int = 0) -> ImageRecord:
        """
        Admit a validated file and create its display resource

        Raises:
            SessionFullError: If no slots are left
        """
        with self._lock:
            if len(self._records) >= self.capacity:
                raise SessionFullError(f"Session is full ({self.capacity} images)")

            image_id = f"{blob.name}-{uuid.uuid4().hex[:12]}"
            display_path = self.resources.create(blob.data, blob.name, prefix="img")
            record = ImageRecord(
                id=image_id,
                file=blob,
                display_path=display_path,
                width=width,
                height=height
            )
            self._records[image_id] = record

        logger.info(f"Image added: {blob.name} ({width}x{height})")
        return record

    def delete(self, image_id: str) -> bool:
        """Remove a record and release its display resource"""
        with self._lock:
            record = self._records.pop(image_id, None)

        if record is None:
            return False

        self.resources.release(record.display_path)
        logger.info(f"Image deleted: {record.filename}")
        return True

    def clear(self):
        """Delete every image; crop memory settings are kept"""
        with self._lock:
            ids = list(self._records)
        for image_id in ids:
            self.delete(image_id)

    def teardown(self):
        """End of session: drop records and force-release all resources"""
        with self._lock:
            self._records.clear()
        self._finalizer()
        logger.info("Session torn down")
