"""
Group Image Cropper v1.0 - Validation Module
=============================================
Admission checks for untrusted image files
"""

import os
import re
import concurrent.futures
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple
from PIL import Image
import config
from logger import get_logger

logger = get_logger(__name__)

# Formats the decoder is allowed to try, whatever the file claims to be
DECODE_FORMATS = ['JPEG', 'PNG', 'GIF', 'WEBP']

class RejectReason(str, Enum):
    INVALID_TYPE = 'invalid_type'
    FILE_SIZE = 'file_size'
    MIME_MISMATCH = 'mime_mismatch'
    TOO_SMALL = 'too_small'
    TOO_LARGE = 'too_large'
    CORRUPT = 'corrupt'

class ValidationError(Exception):
    """Custom validation error"""

    def __init__(self, reason: RejectReason, message: str, filename: str = ""):
        super().__init__(message)
        self.reason = reason
        self.filename = filename

@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    reason: Optional[RejectReason] = None
    width: int = 0
    height: int = 0

    @classmethod
    def ok(cls, width: int, height: int) -> "ValidationResult":
        return cls(True, None, width, height)

    @classmethod
    def rejected(cls, reason: RejectReason, width: int = 0, height: int = 0) -> "ValidationResult":
        return cls(False, reason, width, height)

def get_file_extension(filename: str) -> str:
    """Lower-case extension with the dot, or '' if there is none"""
    return os.path.splitext(filename)[1].lower()

def check_file(name: str, mime_type: str, size: int) -> bool:
    """
    Validate declared type, file size and extension agreement

    Raises:
        ValidationError: If the file fails any of the checks
    """
    if mime_type not in config.ACCEPTED_TYPES:
        raise ValidationError(
            RejectReason.INVALID_TYPE,
            f"Unsupported type: {mime_type or 'unknown'}",
            name
        )

    if size > config.MAX_FILE_SIZE:
        size_mb = size / (1024 * 1024)
        max_mb = config.MAX_FILE_SIZE / (1024 * 1024)
        raise ValidationError(
            RejectReason.FILE_SIZE,
            f"File too large: {size_mb:.1f} MB (max: {max_mb:.1f} MB)",
            name
        )

    ext = get_file_extension(name)
    if ext not in config.ACCEPTED_TYPES[mime_type]:
        raise ValidationError(
            RejectReason.MIME_MISMATCH,
            f"Extension {ext or '(none)'} does not match {mime_type}",
            name
        )

    return True

def validate_dimensions(width: int, height: int) -> bool:
    """
    Validate natural image dimensions

    Raises:
        ValidationError: If dimensions are outside the allowed range
    """
    if width < config.MIN_IMAGE_DIMENSION or height < config.MIN_IMAGE_DIMENSION:
        raise ValidationError(
            RejectReason.TOO_SMALL,
            f"Dimensions too small: {width}x{height} "
            f"(min: {config.MIN_IMAGE_DIMENSION}px)"
        )

    if width > config.MAX_IMAGE_DIMENSION or height > config.MAX_IMAGE_DIMENSION:
        raise ValidationError(
            RejectReason.TOO_LARGE,
            f"Dimensions too large: {width}x{height} "
            f"(max: {config.MAX_IMAGE_DIMENSION}px)"
        )

    return True

class ImageCodec:
    """Decoder capability used by the validator"""

    def decode(self, path: str):
        """Open the image and return a handle exposing natural size"""
        raise NotImplementedError

    def size(self, decoded) -> Tuple[int, int]:
        raise NotImplementedError

    def sample(self, decoded) -> None:
        """Draw the image into a 1x1 sample and read it back; raise on failure"""
        raise NotImplementedError

    def close(self, decoded) -> None:
        pass

class PillowCodec(ImageCodec):
    """Pillow-backed codec"""

    def decode(self, path: str) -> Image.Image:
        return Image.open(path, formats=DECODE_FORMATS)

    def size(self, decoded: Image.Image) -> Tuple[int, int]:
        return decoded.size

    def sample(self, decoded: Image.Image) -> None:
        # load() decodes the full payload, so truncated data fails here
        decoded.load()
        sample = decoded.convert('RGBA').resize((1, 1))
        sample.getpixel((0, 0))

    def close(self, decoded: Image.Image) -> None:
        decoded.close()

class ImageValidator:
    """
    Decide whether a file is an admissible image.

    Decoding runs off a temporary resource on a worker thread and is
    bounded by ``timeout``; an elapsed timeout counts as corrupt.
    """

    def __init__(self, resources, codec: Optional[ImageCodec] = None, timeout: float = None):
        self.resources = resources
        self.codec = codec or PillowCodec()
        self.timeout = config.VALIDATION_TIMEOUT if timeout is None else timeout

    def _inspect(self, path: str) -> ValidationResult:
        try:
            decoded = self.codec.decode(path)
        except Image.DecompressionBombError as e:
            logger.info(f"Decoder refused oversized image: {e}")
            return ValidationResult.rejected(RejectReason.TOO_LARGE)
        except Exception as e:
            logger.warning(f"Decode failed: {e}")
            return ValidationResult.rejected(RejectReason.CORRUPT)

        try:
            width, height = self.codec.size(decoded)
            try:
                validate_dimensions(width, height)
            except ValidationError as e:
                logger.debug(str(e))
                return ValidationResult.rejected(e.reason, width, height)

            try:
                self.codec.sample(decoded)
            except Exception as e:
                logger.warning(f"Integrity check failed: {e}")
                return ValidationResult.rejected(RejectReason.CORRUPT, width, height)

            return ValidationResult.ok(width, height)
        finally:
            try:
                self.codec.close(decoded)
            except Exception as e:
                logger.error(f"Failed to close decoded image: {e}")

    def validate(self, name: str, data: bytes) -> ValidationResult:
        """
        Validate image content

        Args:
            name: Original filename
            data: File bytes

        Returns:
            ValidationResult; never raises
        """
        try:
            path = self.resources.create(data, name, prefix="check")
        except OSError as e:
            logger.error(f"Could not stage {name} for validation: {e}")
            return ValidationResult.rejected(RejectReason.CORRUPT)

        executor = concurrent.futures.ThreadPoolExecutor(max_workers=1)
        try:
            future = executor.submit(self._inspect, path)
            result = future.result(timeout=self.timeout)
        except concurrent.futures.TimeoutError:
            logger.warning(f"Validation timed out after {self.timeout}s: {name}")
            result = ValidationResult.rejected(RejectReason.CORRUPT)
        except Exception as e:
            logger.warning(f"Validation failed for {name}: {e}")
            result = ValidationResult.rejected(RejectReason.CORRUPT)
        finally:
            executor.shutdown(wait=False)
            self.resources.release(path)

        logger.debug(f"Validated {name}: {result}")
        return result

def sanitize_filename(filename: str) -> str:
    """
    Sanitize filename by removing dangerous characters

    Args:
        filename: Original filename

    Returns:
        Safe filename
    """
    if not filename:
        return "unnamed"

    # Keep only filename (remove path)
    filename = Path(filename.replace('\\', '/')).name

    # Remove dangerous characters
    filename = re.sub(r'[<>:"|?*\x00-\x1f]', '', filename)

    # Replace spaces with underscores
    filename = filename.replace(' ', '_')

    # Limit length
    if len(filename) > config.MAX_FILENAME_LENGTH:
        name, ext = os.path.splitext(filename)
        max_name_len = config.MAX_FILENAME_LENGTH - len(ext)
        filename = name[:max_name_len] + ext

    # Ensure not empty
    if not filename or filename in ('.', '..'):
        filename = "unnamed"

    return filename
