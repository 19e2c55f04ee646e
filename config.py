"""
Group Image Cropper v1.0 - Configuration Module
================================================
Centralized configuration and constants
"""

import os
from pathlib import Path

# === APPLICATION INFO ===
APP_VERSION = "1.0.0"
APP_NAME = "Group Image Cropper"

# === FILE SETTINGS ===
MAX_IMAGES = 10
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MB
MAX_FILENAME_LENGTH = 255

# MIME type -> accepted extensions
ACCEPTED_TYPES = {
    'image/jpeg': ['.jpg', '.jpeg'],
    'image/png': ['.png'],
    'image/gif': ['.gif'],
    'image/webp': ['.webp']
}

# Pillow format name -> MIME type, used when exporting crops
PIL_FORMAT_TO_MIME = {
    'JPEG': 'image/jpeg',
    'PNG': 'image/png',
    'GIF': 'image/gif',
    'WEBP': 'image/webp'
}

# === IMAGE VALIDATION ===
MIN_IMAGE_DIMENSION = 16
MAX_IMAGE_DIMENSION = 10000
VALIDATION_TIMEOUT = 10.0  # seconds

# === CROP ===
CROP_MIN = 1
CROP_MAX = 9999
ORIGINAL_RATIO_TOLERANCE = 1e-4
EXPORT_PREFIX = 'cropped-'
PROXY_IMAGE_WIDTH = 700

# === ASPECT RATIO SELECTOR ===
ASPECT_FREE = 'free'
ASPECT_ORIGINAL = 'original'
ASPECT_SQUARE = '1:1'
ASPECT_SELECTORS = [ASPECT_FREE, ASPECT_ORIGINAL, ASPECT_SQUARE]

# === CROP MEMORY ===
MODE_PER_IMAGE = 'per-image'
MODE_GLOBAL = 'global'

# === TIMING (seconds) ===
TIMING = {
    'DEBOUNCE': 0.05,
    'TOAST_DELAY': 0.3
}

# === UI ===
DEFAULT_LANGUAGE = 'en'
GALLERY_COLUMNS = 5
CAPTION_MAX_CHARS = 24

# === PATHS ===
def get_project_root() -> Path:
    """Get project root directory"""
    return Path(__file__).parent

# === LOGGING ===
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_LEVEL = os.environ.get('CROPPER_LOG_LEVEL', 'INFO').upper()
LOG_FILE = 'cropper.log'
LOG_TO_FILE = os.environ.get('CROPPER_LOG_TO_FILE', '1') != '0'
