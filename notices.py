"""
Group Image Cropper v1.0 - Notices Module
==========================================
User-facing notices produced by ingestion and cropping
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional
import config
from translations import get_texts

class Severity(str, Enum):
    WARNING = 'warning'
    ERROR = 'error'
    SUCCESS = 'success'
    INFO = 'info'

class NoticeKind(str, Enum):
    LIMIT = 'limit'
    DUPLICATE = 'duplicate'
    INVALID_TYPE = 'invalid-type'
    FILE_SIZE = 'file-size'
    MIME_MISMATCH = 'mime-mismatch'
    INVALID_DIMENSIONS = 'invalid-dimensions'
    INVALID_IMAGE = 'invalid-image'
    LOAD_ERROR = 'load-error'
    SAVE_ERROR = 'save-error'

@dataclass(frozen=True)
class Notice:
    """Single message shown to the user"""
    kind: NoticeKind
    title: str
    description: str
    severity: Severity = Severity.WARNING

# Receives the ordered notices of one batch or action
NoticeSink = Callable[[List[Notice]], None]

def pluralize(form: tuple, count: int) -> str:
    """
    Pick the singular or plural form for a count

    Args:
        form: (singular, plural) pair; plural may contain {count}

    Returns:
        Selected form
    """
    singular, plural = form
    if count == 1:
        return singular
    return plural.format(count=count)

def build_notice(
    kind: NoticeKind,
    T: Optional[dict] = None,
    count: int = 0,
    filename: str = '',
    mime_type: str = '',
    added: Optional[int] = None,
    ignored: Optional[int] = None
) -> Notice:
    """
    Build a notice of the given kind from the text table

    Args:
        kind: Notice kind
        T: Translation dictionary (defaults to the configured language)
        count: Count for aggregate notices
        filename: Offending filename for per-file notices
        mime_type: Declared content type for mismatch notices
        added: Images added, selects the partial form of the limit notice
        ignored: Images ignored due to limit

    Returns:
        Notice
    """
    T = T or get_texts(config.DEFAULT_LANGUAGE)
    severity = Severity.WARNING

    if kind == NoticeKind.LIMIT:
        title = T['notice_limit_title']
        if ignored is None:
            description = T['notice_limit_at_limit'].format(
                count=count, images=pluralize(T['pl_image'], count)
            )
        else:
            added = added or 0
            description = T['notice_limit_partial'].format(
                first=pluralize(T['pl_first_image'], added),
                ignored=ignored,
                were=pluralize(T['pl_image_was'], ignored)
            )

    elif kind == NoticeKind.DUPLICATE:
        title = T['notice_duplicates_title']
        description = T['notice_duplicates_desc'].format(
            count=count, files=pluralize(T['pl_file'], count)
        )

    elif kind == NoticeKind.INVALID_TYPE:
        title = T['notice_invalid_type_title']
        accepted = ', '.join(ext for exts in config.ACCEPTED_TYPES.values() for ext in exts)
        description = T['notice_invalid_type_desc'].format(
            count=count, files=pluralize(T['pl_file'], count), accepted=accepted
        )

    elif kind == NoticeKind.FILE_SIZE:
        title = T['notice_file_size_title']
        description = T['notice_file_size_desc'].format(
            filename=filename, max_mb=config.MAX_FILE_SIZE // (1024 * 1024)
        )

    elif kind == NoticeKind.MIME_MISMATCH:
        title = T['notice_mime_mismatch_title']
        description = T['notice_mime_mismatch_desc'].format(
            filename=filename, mime_type=mime_type
        )

    elif kind == NoticeKind.INVALID_DIMENSIONS:
        title = T['notice_dimensions_title']
        description = T['notice_dimensions_desc'].format(
            count=count,
            images_are=pluralize(T['pl_image_is'], count),
            min=config.MIN_IMAGE_DIMENSION,
            max=config.MAX_IMAGE_DIMENSION
        )

    elif kind == NoticeKind.INVALID_IMAGE:
        severity = Severity.ERROR
        title = T['notice_invalid_images_title']
        description = T['notice_invalid_images_desc'].format(
            count=count, were=pluralize(T['pl_image_was'], count)
        )

    elif kind == NoticeKind.LOAD_ERROR:
        severity = Severity.ERROR
        title = T['notice_load_error_title']
        description = T['notice_load_error_desc']

    elif kind == NoticeKind.SAVE_ERROR:
        severity = Severity.ERROR
        title = T['notice_save_error_title']
        description = T['notice_save_error_desc'].format(filename=filename)

    else:
        raise ValueError(f"Unknown notice kind: {kind}")

    return Notice(kind=kind, title=title, description=description, severity=severity)
