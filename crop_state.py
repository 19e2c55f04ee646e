"""
Group Image Cropper v1.0 - Crop State Manager
==============================================
Active crop rectangle, crop memory and the editor lifecycle

Phases: CLOSED -> OPENING -> EDITING -> COMMITTING | CANCELLING -> CLOSED.
The crop surface is the source of truth for the rectangle; numeric
fields hold display-space values that are only pushed to the surface
on commit (blur / Enter).
"""

from enum import Enum
from typing import Callable, Dict, Optional, Tuple
from PIL import Image
import config
from logger import get_logger
from models import CropRect, CropSettings, ImageRecord
from notices import NoticeKind, NoticeSink, build_notice
from persistence import policy_for
from session import Session
from surface import CropSurface, PillowCropSurface
from translations import get_texts
from crop_engine import (
    apply_aspect_ratio, aspect_ratio_to_selector, clamp_field, default_crop_settings,
    enforce_minimum, field_to_actual, rect_to_display, selector_to_aspect_ratio
)
from export import (
    DownloadSave, SaveCancelled, SaveCapability, export_filename, save_with_fallback
)

logger = get_logger(__name__)

EXIF_ORIENTATION = 0x0112
FIELDS = ('x', 'y', 'width', 'height')

class CropPhase(str, Enum):
    CLOSED = 'closed'
    OPENING = 'opening'
    EDITING = 'editing'
    COMMITTING = 'committing'
    CANCELLING = 'cancelling'

class CommitOutcome(str, Enum):
    SAVED = 'saved'
    SAVE_CANCELLED = 'save_cancelled'
    SAVE_FAILED = 'save_failed'

class CropStateError(RuntimeError):
    """Operation not allowed in the current phase"""

def load_dimensions(path: str) -> Tuple[int, int]:
    """Natural (display-oriented) size of an image file"""
    with Image.open(path) as img:
        width, height = img.size
        if img.getexif().get(EXIF_ORIENTATION) in (5, 6, 7, 8):
            width, height = height, width
    return width, height

def pillow_surface_factory(record: ImageRecord) -> CropSurface:
    return PillowCropSurface(record.display_path)

class CropStateManager:
    """Drives one crop editor session at a time"""

    def __init__(
        self,
        session: Session,
        surface_factory: Callable[[ImageRecord], CropSurface] = pillow_surface_factory,
        saver: Optional[SaveCapability] = None,
        downloads: Optional[DownloadSave] = None,
        notify: Optional[NoticeSink] = None,
        T: Optional[dict] = None,
        loader: Callable[[str], Tuple[int, int]] = load_dimensions
    ):
        self.session = session
        self.surface_factory = surface_factory
        self.saver = saver
        self.downloads = downloads or DownloadSave()
        self.notify = notify
        self.T = T or get_texts(config.DEFAULT_LANGUAGE)
        self.loader = loader

        self.phase = CropPhase.CLOSED
        self.image_id: Optional[str] = None
        self.surface: Optional[CropSurface] = None
        self.dimensions: Optional[Tuple[int, int]] = None
        self.initial_settings: Optional[CropSettings] = None
        self.active_settings = CropSettings(0, 0, 0, 0, 0.0)
        self.display: Dict[str, float] = {k: 0 for k in FIELDS}
        self.selected_aspect = config.ASPECT_FREE
        self.save_on_cancel = False
        self._fixing = False

    # === HELPERS ===

    @property
    def current_image(self) -> Optional[ImageRecord]:
        if self.image_id is None or self.image_id not in self.session:
            return None
        return self.session.get(self.image_id)

    @property
    def is_editing(self) -> bool:
        return self.phase == CropPhase.EDITING and self.surface is not None

    def _policy(self):
        return policy_for(self.session, self.image_id)

    def _emit(self, kind: NoticeKind, **params):
        notice = build_notice(kind, self.T, **params)
        if self.notify:
            self.notify([notice])
        else:
            logger.warning(f"{notice.title}: {notice.description}")

    def _geometry(self) -> Tuple[Tuple[float, float], Tuple[float, float]]:
        canvas = self.surface.get_canvas_data()
        container = self.surface.get_container_data()
        natural = (canvas['naturalWidth'], canvas['naturalHeight'])
        return natural, (container['width'], container['height'])

    def _refresh_display(self, rect: CropRect):
        natural, container = self._geometry()
        self.display = rect_to_display(rect, natural, container)

    def _update_settings(self, rect: CropRect):
        """Record a rectangle reported by the surface as the active settings"""
        aspect_ratio = rect.width / rect.height if rect.height else 0.0
        settings = CropSettings.from_rect(rect.rounded(), aspect_ratio)
        self.active_settings = settings
        self._refresh_display(rect)
        self._policy().write(settings)

    # === OPEN ===

    def open(self, image_id: str) -> bool:
        """
        Open the editor for an image

        Returns:
            True when editing started; False after a load error
        """
        if self.phase != CropPhase.CLOSED:
            raise CropStateError(f"Cannot open editor while {self.phase.value}")

        self.phase = CropPhase.OPENING
        self.image_id = image_id
        logger.debug(f"Opening editor: {image_id}")

        try:
            record = self.session.get(image_id)
            self.dimensions = self.loader(record.display_path)
        except Exception as e:
            logger.error(f"Image load failed: {e}", exc_info=True)
            self._emit(NoticeKind.LOAD_ERROR)
            self._reset()
            return False

        width, height = self.dimensions
        initial = self._policy().read() or default_crop_settings(width, height)
        self.initial_settings = initial
        self.active_settings = initial
        self.selected_aspect = aspect_ratio_to_selector(initial.aspect_ratio, self.dimensions)

        try:
            surface = self.surface_factory(record)
        except Exception as e:
            logger.error(f"Crop surface failed to start: {e}", exc_info=True)
            self._emit(NoticeKind.LOAD_ERROR)
            self._reset()
            return False

        self.surface = surface
        surface.on('ready', self.handle_ready)
        surface.on('crop', self.handle_crop)
        self.phase = CropPhase.EDITING
        logger.info(f"Editing {record.filename} ({width}x{height}), aspect: {self.selected_aspect}")
        return True

    def handle_ready(self):
        """Seed the mounted surface with the initial settings"""
        if not self.is_editing or self.initial_settings is None:
            return

        record = self.current_image
        self.surface.set_aspect_ratio(selector_to_aspect_ratio(self.selected_aspect, self.dimensions))
        if record is not None and record.canvas_data:
            self.surface.set_canvas_data(record.canvas_data)

        self.surface.set_data(self.initial_settings.rect)
        self._update_settings(self.surface.get_data())

    # === EDITING ===

    def handle_crop(self):
        """Surface interaction: enforce the minimum size and remember the rectangle"""
        if not self.is_editing or self._fixing:
            return

        data = self.surface.get_data()
        fixed = enforce_minimum(data)
        if fixed != data:
            self._fixing = True
            try:
                self.surface.set_data(fixed)
            finally:
                self._fixing = False
            data = self.surface.get_data()

        self._update_settings(data)

    def edit_field(self, key: str, value) -> None:
        """
        Keystroke-level edit: only the displayed value changes

        Streamlit's number input reports only on blur / Enter, so the
        editor dialog goes straight to ``commit_field``; this entry point
        serves front ends that do see individual keystrokes.
        """
        if key not in FIELDS:
            raise ValueError(f"Unknown crop field: {key}")
        try:
            self.display[key] = min(float(value), config.CROP_MAX)
        except (TypeError, ValueError):
            pass

    def commit_field(self, key: str, value) -> None:
        """
        Commit-level edit (blur / Enter): convert, clamp, push to the surface
        and read the authoritative rectangle back
        """
        if key not in FIELDS:
            raise ValueError(f"Unknown crop field: {key}")
        if not self.is_editing:
            return

        try:
            num = min(float(value), config.CROP_MAX)
        except (TypeError, ValueError):
            self._refresh_display(self.surface.get_data())
            return

        natural, container = self._geometry()
        actual = field_to_actual(key, num, natural, container)
        current = self.surface.get_data()
        new_rect = clamp_field(key, actual, current, natural[0], natural[1])
        logger.debug(f"Field {key}={value} → {actual}px, rect {new_rect}")

        aspect_ratio = self.active_settings.aspect_ratio
        self.surface.set_data(new_rect)

        final = self.surface.get_data()
        self._refresh_display(final)
        settings = CropSettings.from_rect(final.rounded(), aspect_ratio)
        self.active_settings = settings
        self._policy().write(settings)

    def change_aspect(self, selector: str) -> None:
        """Switch the aspect-ratio selector mid-edit"""
        if selector not in config.ASPECT_SELECTORS:
            raise ValueError(f"Unknown aspect selector: {selector}")

        self.selected_aspect = selector
        if not self.is_editing:
            return

        ratio = selector_to_aspect_ratio(selector, self.dimensions)
        current = self.surface.get_data()
        self.surface.set_aspect_ratio(ratio)
        self.surface.set_data(apply_aspect_ratio(current, ratio))

        final = self.surface.get_data()
        settings = CropSettings.from_rect(final, ratio)
        self.active_settings = settings
        self._refresh_display(final)
        self._policy().write(settings)

    # === EXIT ===

    def commit(self) -> CommitOutcome:
        """Crop, save and record the result"""
        if not self.is_editing:
            raise CropStateError(f"Cannot commit while {self.phase.value}")

        self.phase = CropPhase.COMMITTING
        record = self.current_image
        rect = self.surface.get_data()
        canvas = self.surface.get_canvas_data()
        settings = CropSettings.from_rect(rect, self.active_settings.aspect_ratio)
        filename = export_filename(record.filename)

        try:
            data, mime_type = self.surface.get_cropped_region()
            save_with_fallback(self.saver, self.downloads, filename, data, mime_type)
            outcome = CommitOutcome.SAVED
        except SaveCancelled as e:
            logger.info(f"Save cancelled: {e}")
            outcome = CommitOutcome.SAVE_CANCELLED
        except Exception as e:
            logger.error(f"Save failed: {e}", exc_info=True)
            outcome = CommitOutcome.SAVE_FAILED

        # Remembered in both stores whatever the save outcome
        record.crop_settings = settings
        self.session.global_settings = settings

        if outcome != CommitOutcome.SAVE_FAILED:
            record.canvas_data = canvas
            record.record_crop(rect)
            logger.info(f"Crop applied to {record.filename}: {rect.rounded()}")
        else:
            self._emit(NoticeKind.SAVE_ERROR, filename=filename)

        self._close()
        return outcome

    def cancel(self) -> None:
        """Leave the editor without cropping"""
        if not self.is_editing:
            raise CropStateError(f"Cannot cancel while {self.phase.value}")

        self.phase = CropPhase.CANCELLING
        current = self.surface.get_data()
        canvas = self.surface.get_canvas_data()
        policy = self._policy()

        if self.save_on_cancel:
            ratio = selector_to_aspect_ratio(self.selected_aspect, self.dimensions)
            policy.write(CropSettings.from_rect(current, ratio), canvas)
        else:
            policy.clear()
            self.selected_aspect = config.ASPECT_FREE

        self._close()

    def abort(self) -> None:
        """Tear the editor down without touching any stored settings"""
        if self.phase != CropPhase.CLOSED:
            self._close()

    def _close(self):
        if self.surface is not None:
            try:
                self.surface.destroy()
            except Exception as e:
                logger.error(f"Failed to destroy crop surface: {e}")
        logger.debug(f"Editor closed from {self.phase.value}")
        self._reset()

    def _reset(self):
        self.surface = None
        self.image_id = None
        self.dimensions = None
        self.initial_settings = None
        self.phase = CropPhase.CLOSED
