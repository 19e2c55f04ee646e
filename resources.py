"""
Group Image Cropper v1.0 - Resources Module
============================================
Temporary display resources (files on disk) with a single release list
"""

import os
import shutil
import tempfile
import threading
from typing import List, Optional
from logger import get_logger
from validators import sanitize_filename

logger = get_logger(__name__)

class ResourceTracker:
    """
    Owns every temporary file created for decoding, display and saving.

    A path is removed from the release list the moment it is released,
    so a second release of the same path is a no-op. ``release_all``
    force-releases whatever is still listed.
    """

    def __init__(self, base_dir: Optional[str] = None):
        self._owns_dir = base_dir is None
        self.base_dir = base_dir or tempfile.mkdtemp(prefix="group_cropper_")
        self._paths: List[str] = []
        self._lock = threading.Lock()
        self._counter = 0

    def create(self, data: bytes, filename: str = "", prefix: str = "res") -> str:
        """
        Write bytes into a new tracked file

        Args:
            data: File content
            filename: Original filename, keeps the extension readable
            prefix: Short tag for the resource purpose

        Returns:
            Path to the new resource
        """
        with self._lock:
            self._counter += 1
            name = f"{prefix}_{self._counter:04d}_{sanitize_filename(filename)}"
            path = os.path.join(self.base_dir, name)
            self._paths.append(path)

        with open(path, "wb") as f:
            f.write(data)
        logger.debug(f"Resource created: {name} ({len(data)} bytes)")
        return path

    def is_tracked(self, path: str) -> bool:
        with self._lock:
            return path in self._paths

    def release(self, path: str) -> bool:
        """
        Release a resource exactly once

        Returns:
            True if the path was tracked and is now released
        """
        with self._lock:
            if path not in self._paths:
                return False
            self._paths.remove(path)

        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"Failed to release resource {path}: {e}")
        return True

    def release_all(self) -> int:
        """Force-release every resource still tracked"""
        with self._lock:
            pending, self._paths = self._paths, []

        for path in pending:
            try:
                os.remove(path)
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.error(f"Failed to release resource {path}: {e}")

        if pending:
            logger.info(f"Released {len(pending)} leftover resources")
        return len(pending)

    def close(self):
        """Release everything and remove the owned directory"""
        self.release_all()
        if self._owns_dir:
            shutil.rmtree(self.base_dir, ignore_errors=True)

    def __len__(self) -> int:
        with self._lock:
            return len(self._paths)
