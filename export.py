"""
Group Image Cropper v1.0 - Export Module
=========================================
Saving cropped images: user-directed save with download fallback
"""

import os
from dataclasses import dataclass
from typing import List, Optional
import config
from logger import get_logger
from validators import sanitize_filename

logger = get_logger(__name__)

class SaveCancelled(Exception):
    """User dismissed the save; not an error"""

class SaveFailed(Exception):
    """Unexpected failure while saving"""

class SaveUnavailable(Exception):
    """User-directed save is not possible, use the download fallback"""

def export_filename(original_name: str) -> str:
    """Name of the exported crop for a source file"""
    return f"{config.EXPORT_PREFIX}{sanitize_filename(original_name)}"

class SaveCapability:
    """Persists a named blob somewhere the user chose"""

    def save(self, filename: str, data: bytes, mime_type: str) -> str:
        """
        Save bytes under a name

        Returns:
            Location of the saved file

        Raises:
            SaveUnavailable: Caller should fall back to a download
            SaveCancelled: User cancelled the save
            SaveFailed: Unexpected failure
        """
        raise NotImplementedError

class DirectorySave(SaveCapability):
    """User-directed save into a chosen folder"""

    def __init__(self, target_dir: Optional[str]):
        self.target_dir = (target_dir or '').strip()

    def save(self, filename: str, data: bytes, mime_type: str) -> str:
        if not self.target_dir:
            raise SaveUnavailable("No save folder chosen")

        if not os.path.isdir(self.target_dir):
            raise SaveFailed(f"Save folder does not exist: {self.target_dir}")

        path = os.path.join(self.target_dir, sanitize_filename(filename))
        try:
            with open(path, "wb") as f:
                f.write(data)
        except OSError as e:
            raise SaveFailed(f"Could not write {path}: {e}") from e

        logger.info(f"Crop saved: {path}")
        return path

@dataclass
class PendingDownload:
    filename: str
    data: bytes
    mime_type: str

class DownloadSave(SaveCapability):
    """Download fallback: stages the file for a browser download button"""

    def __init__(self):
        self.pending: List[PendingDownload] = []

    def save(self, filename: str, data: bytes, mime_type: str) -> str:
        self.pending.append(PendingDownload(filename, data, mime_type))
        logger.info(f"Crop staged for download: {filename}")
        return filename

    def take(self) -> List[PendingDownload]:
        """Hand out staged downloads once"""
        items, self.pending = self.pending, []
        return items

def save_with_fallback(primary: Optional[SaveCapability], fallback: SaveCapability,
                       filename: str, data: bytes, mime_type: str) -> str:
    """
    Try the user-directed save, fall back to a download when unavailable

    Raises:
        SaveCancelled, SaveFailed
    """
    if primary is not None:
        try:
            return primary.save(filename, data, mime_type)
        except SaveUnavailable as e:
            logger.debug(f"Falling back to download: {e}")

    return fallback.save(filename, data, mime_type)
