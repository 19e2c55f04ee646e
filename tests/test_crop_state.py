"""
Group Image Cropper v1.0 - Crop State Tests
============================================
Editor lifecycle, crop memory modes and commit outcomes
"""

import pytest
import io
import os
import sys
from PIL import Image

# Add parent directory to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import config
from crop_state import CommitOutcome, CropPhase, CropStateError, CropStateManager
from export import DirectorySave, DownloadSave, SaveCancelled, SaveCapability, SaveFailed
from models import CropRect, CropSettings, FileBlob
from notices import NoticeKind
from resources import ResourceTracker
from session import Session
from surface import CropSurface, PillowCropSurface

NATURAL = (1000, 500)
CONTAINER = (500, 250)

# === FAKES ===

class FakeSurface(CropSurface):
    """In-memory surface that clamps like the real one, without an image"""

    def __init__(self, natural=NATURAL, container=CONTAINER):
        self.natural = natural
        self.container = container
        self.rect = CropRect(0, 0, natural[0], natural[1])
        self.ratio = 0.0
        self.canvas = {'left': 0.0, 'top': 0.0, 'width': float(container[0]),
                       'height': float(container[1]),
                       'naturalWidth': float(natural[0]), 'naturalHeight': float(natural[1])}
        self.listeners = {'ready': [], 'crop': []}
        self.destroyed = False
        self.set_calls = 0

    def _emit(self, event):
        for cb in self.listeners[event]:
            cb()

    def ready(self):
        self._emit('ready')

    def drag(self, rect):
        """Simulate a user gesture without any clamping"""
        self.rect = rect
        self._emit('crop')

    def get_data(self):
        return self.rect

    def set_data(self, rect):
        self.set_calls += 1
        w, h = self.natural
        x = min(max(0, rect.x), w - 1)
        y = min(max(0, rect.y), h - 1)
        width = min(max(rect.width, 1), w - x)
        height = min(max(rect.height, 1), h - y)
        if self.ratio:
            height = width / self.ratio
        self.rect = CropRect(x, y, width, height)
        self._emit('crop')

    def get_canvas_data(self):
        return dict(self.canvas)

    def set_canvas_data(self, geometry):
        self.canvas.update(geometry)

    def get_container_data(self):
        return {'width': float(self.container[0]), 'height': float(self.container[1])}

    def set_aspect_ratio(self, ratio):
        self.ratio = ratio

    def get_cropped_region(self):
        return b"cropped-bytes", "image/png"

    def on(self, event, callback):
        self.listeners[event].append(callback)

    def destroy(self):
        self.destroyed = True

class FakeSave(SaveCapability):
    def __init__(self, error=None):
        self.error = error
        self.saved = []

    def save(self, filename, data, mime_type):
        if self.error:
            raise self.error
        self.saved.append(filename)
        return filename

# === FIXTURES ===

def png_blob(name, size=NATURAL):
    buf = io.BytesIO()
    Image.new('RGB', size, color='gray').save(buf, 'PNG')
    return FileBlob(name, 'image/png', buf.getvalue())

@pytest.fixture
def session(tmp_path):
    s = Session(resources=ResourceTracker(str(tmp_path)))
    yield s
    s.teardown()

@pytest.fixture
def records(session):
    return [session.add(png_blob(n), *NATURAL) for n in ("a.png", "b.png")]

@pytest.fixture
def surfaces():
    return []

@pytest.fixture
def notices():
    return []

@pytest.fixture
def manager(session, surfaces, notices):
    def factory(record):
        surface = FakeSurface()
        surfaces.append(surface)
        return surface

    return CropStateManager(
        session,
        surface_factory=factory,
        downloads=DownloadSave(),
        notify=notices.extend,
        loader=lambda path: NATURAL
    )

def open_ready(manager, surfaces, image_id):
    assert manager.open(image_id)
    surfaces[-1].ready()
    return surfaces[-1]

# === OPEN ===

def test_open_seeds_default_rect(manager, surfaces, records):
    surface = open_ready(manager, surfaces, records[0].id)

    assert manager.phase == CropPhase.EDITING
    assert surface.rect == CropRect(250, 125, 500, 250)
    assert manager.selected_aspect == config.ASPECT_FREE
    assert manager.display == {'x': 125, 'y': 62, 'width': 250, 'height': 125}
    assert records[0].crop_settings.aspect_ratio == pytest.approx(2.0)

def test_open_twice_raises(manager, surfaces, records):
    open_ready(manager, surfaces, records[0].id)
    with pytest.raises(CropStateError):
        manager.open(records[1].id)

def test_load_error(session, records, notices):
    def broken(path):
        raise OSError("decode failed")

    manager = CropStateManager(session, surface_factory=lambda r: FakeSurface(),
                               notify=notices.extend, loader=broken)

    assert not manager.open(records[0].id)
    assert manager.phase == CropPhase.CLOSED
    assert manager.surface is None
    assert [n.kind for n in notices] == [NoticeKind.LOAD_ERROR]

def test_reopen_uses_remembered_settings(manager, surfaces, records):
    records[0].crop_settings = CropSettings(10, 20, 300, 300, 1.0)
    surface = open_ready(manager, surfaces, records[0].id)

    assert manager.selected_aspect == config.ASPECT_SQUARE
    assert surface.ratio == 1.0
    assert surface.rect == CropRect(10, 20, 300, 300)

def test_remembered_canvas_restored(manager, surfaces, records):
    records[0].canvas_data = {'left': 12.0, 'top': 3.0}
    surface = open_ready(manager, surfaces, records[0].id)
    assert surface.canvas['left'] == 12.0

def test_global_mode_reads_and_writes_shared(session, manager, surfaces, records):
    session.set_mode(config.MODE_GLOBAL)
    session.global_settings = CropSettings(0, 0, 200, 100, 0.0)

    surface = open_ready(manager, surfaces, records[0].id)
    assert surface.rect == CropRect(0, 0, 200, 100)

    surface.drag(CropRect(5, 5, 100, 50))
    assert session.global_settings.rect == CropRect(5, 5, 100, 50)
    assert records[0].crop_settings is None

# === EDITING ===

def test_minimum_size_enforced_on_crop(manager, surfaces, records):
    surface = open_ready(manager, surfaces, records[0].id)
    surface.drag(CropRect(100, 100, 0.3, 0.2))

    assert surface.rect.width == 1
    assert surface.rect.height == 1
    assert manager.active_settings.width == 1

def test_edit_field_only_updates_display(manager, surfaces, records):
    surface = open_ready(manager, surfaces, records[0].id)
    calls = surface.set_calls

    manager.edit_field('width', '123')
    assert manager.display['width'] == 123
    assert surface.set_calls == calls

    manager.edit_field('width', 'abc')
    assert manager.display['width'] == 123

def test_commit_width_zero_becomes_one(manager, surfaces, records):
    surface = open_ready(manager, surfaces, records[0].id)
    manager.commit_field('x', 0)
    manager.commit_field('width', 0)

    assert surface.rect.x == 0
    assert surface.rect.width == 1

def test_commit_field_converts_display_to_image(manager, surfaces, records):
    surface = open_ready(manager, surfaces, records[0].id)
    manager.commit_field('width', '100')

    assert surface.rect.width == 200
    assert manager.display['width'] == 100

def test_commit_field_clamps_position(manager, surfaces, records):
    surface = open_ready(manager, surfaces, records[0].id)
    manager.commit_field('x', 9999)

    # Current width 500 within a 1000px image
    assert surface.rect.x == 500

def test_commit_field_invalid_restores_display(manager, surfaces, records):
    surface = open_ready(manager, surfaces, records[0].id)
    manager.edit_field('x', 77)
    manager.commit_field('x', 'not a number')

    assert manager.display['x'] == 125
    assert surface.rect.x == 250

def test_change_aspect_square(manager, surfaces, records):
    surface = open_ready(manager, surfaces, records[0].id)
    manager.change_aspect(config.ASPECT_SQUARE)

    assert surface.rect.width == surface.rect.height
    assert manager.active_settings.aspect_ratio == 1.0
    assert records[0].crop_settings.aspect_ratio == 1.0

def test_change_aspect_free_keeps_height(manager, surfaces, records):
    surface = open_ready(manager, surfaces, records[0].id)
    before = surface.rect
    manager.change_aspect(config.ASPECT_FREE)
    assert surface.rect.height == before.height

def test_change_aspect_unknown(manager):
    with pytest.raises(ValueError):
        manager.change_aspect('16:9')

# === COMMIT ===

def test_commit_saved(session, manager, surfaces, records):
    saver = FakeSave()
    manager.saver = saver
    surface = open_ready(manager, surfaces, records[0].id)

    assert manager.commit() == CommitOutcome.SAVED
    record = records[0]
    assert saver.saved == ["cropped-a.png"]
    assert record.cropped
    assert record.crop_history == [CropRect(250, 125, 500, 250)]
    assert session.global_settings.rect == CropRect(250, 125, 500, 250)
    assert record.canvas_data is not None
    assert surface.destroyed
    assert manager.phase == CropPhase.CLOSED

def test_commit_without_saver_downloads(manager, surfaces, records):
    open_ready(manager, surfaces, records[0].id)
    manager.commit()

    items = manager.downloads.take()
    assert [i.filename for i in items] == ["cropped-a.png"]
    assert items[0].mime_type == "image/png"

def test_commit_save_cancelled_still_records(manager, surfaces, records):
    manager.saver = FakeSave(SaveCancelled("dismissed"))
    open_ready(manager, surfaces, records[0].id)

    assert manager.commit() == CommitOutcome.SAVE_CANCELLED
    assert len(records[0].crop_history) == 1
    assert records[0].cropped

def test_commit_save_failed(session, manager, surfaces, records, notices):
    manager.saver = FakeSave(SaveFailed("disk full"))
    surface = open_ready(manager, surfaces, records[0].id)
    surface.drag(CropRect(0, 0, 400, 200))

    assert manager.commit() == CommitOutcome.SAVE_FAILED
    record = records[0]
    assert record.crop_history == []
    assert not record.cropped
    assert record.crop_settings.rect == CropRect(0, 0, 400, 200)
    assert session.global_settings.rect == CropRect(0, 0, 400, 200)
    assert [n.kind for n in notices] == [NoticeKind.SAVE_ERROR]
    assert surface.destroyed

def test_history_is_append_only(manager, surfaces, records):
    open_ready(manager, surfaces, records[0].id)
    manager.commit()
    surface = open_ready(manager, surfaces, records[0].id)
    surface.drag(CropRect(0, 0, 100, 100))
    manager.commit()

    assert records[0].crop_history == [CropRect(250, 125, 500, 250), CropRect(0, 0, 100, 100)]

def test_commit_when_closed_raises(manager):
    with pytest.raises(CropStateError):
        manager.commit()

# === CANCEL ===

def test_cancel_without_save_clears_per_image(manager, surfaces, records):
    open_ready(manager, surfaces, records[0].id)
    manager.commit()
    surface = open_ready(manager, surfaces, records[0].id)
    manager.cancel()

    assert records[0].crop_settings is None
    assert len(records[0].crop_history) == 1
    assert manager.selected_aspect == config.ASPECT_FREE
    assert surface.destroyed

def test_cancel_with_save_keeps_rect(manager, surfaces, records):
    manager.save_on_cancel = True
    surface = open_ready(manager, surfaces, records[0].id)
    manager.change_aspect(config.ASPECT_SQUARE)
    surface.drag(CropRect(10, 10, 200, 200))
    manager.cancel()

    settings = records[0].crop_settings
    assert settings.rect == CropRect(10, 10, 200, 200)
    assert settings.aspect_ratio == 1.0
    assert records[0].canvas_data is not None
    assert records[0].crop_history == []

def test_cancel_global_keeps_shared_settings(session, manager, surfaces, records):
    session.set_mode(config.MODE_GLOBAL)
    open_ready(manager, surfaces, records[0].id)
    manager.cancel()
    assert session.global_settings is not None

def test_mode_switch_keeps_other_store(session, manager, surfaces, records):
    records[0].crop_settings = CropSettings(1, 2, 30, 40, 0.0)
    session.set_mode(config.MODE_GLOBAL)
    surface = open_ready(manager, surfaces, records[0].id)
    surface.drag(CropRect(0, 0, 60, 60))
    manager.abort()

    assert records[0].crop_settings == CropSettings(1, 2, 30, 40, 0.0)
    session.set_mode(config.MODE_PER_IMAGE)
    surface = open_ready(manager, surfaces, records[0].id)
    assert surface.rect == CropRect(1, 2, 30, 40)

def test_abort_destroys_surface(manager, surfaces, records):
    surface = open_ready(manager, surfaces, records[0].id)
    manager.abort()
    assert surface.destroyed
    assert manager.phase == CropPhase.CLOSED
    manager.abort()

def test_commit_to_missing_folder_is_not_applied(manager, surfaces, records, notices, tmp_path):
    manager.saver = DirectorySave(str(tmp_path / "typo_folder"))
    open_ready(manager, surfaces, records[0].id)

    assert manager.commit() == CommitOutcome.SAVE_FAILED
    assert records[0].crop_history == []
    assert not records[0].cropped
    assert manager.downloads.take() == []
    assert [n.kind for n in notices] == [NoticeKind.SAVE_ERROR]
    assert not (tmp_path / "typo_folder").exists()

def test_commit_field_stores_active_settings(manager, surfaces, records):
    open_ready(manager, surfaces, records[0].id)
    manager.commit_field('width', 100)

    assert records[0].crop_settings == manager.active_settings

# === PILLOW SURFACE ===

@pytest.fixture
def pillow_manager(session, notices):
    """Manager over real surfaces whose container matches the image size"""
    return CropStateManager(
        session,
        surface_factory=lambda r: PillowCropSurface(r.display_path, container_width=r.width),
        downloads=DownloadSave(),
        notify=notices.extend
    )

def test_height_commit_under_square_ratio(pillow_manager, records):
    assert pillow_manager.open(records[0].id)
    surface = pillow_manager.surface
    surface.mark_ready()
    pillow_manager.change_aspect(config.ASPECT_SQUARE)
    assert surface.get_data() == CropRect(250, 125, 375, 375)

    pillow_manager.commit_field('height', 100)

    assert surface.get_data() == CropRect(250, 125, 100, 100)
    assert pillow_manager.display['width'] == 100
    assert records[0].crop_settings == CropSettings(250, 125, 100, 100, 1.0)
    pillow_manager.abort()

def test_original_ratio_on_wide_image_keeps_minimum(session, pillow_manager, notices):
    record = session.add(png_blob("strip.png", (2000, 16)), 2000, 16)
    pillow_manager.saver = FakeSave()
    assert pillow_manager.open(record.id)
    surface = pillow_manager.surface
    surface.mark_ready()
    pillow_manager.change_aspect(config.ASPECT_ORIGINAL)

    surface.drag_to(CropRect(0, 0, 50, 10))

    assert surface.get_data() == CropRect(0, 0, 125, 1)
    assert pillow_manager.active_settings.height == 1
    assert record.crop_settings.height == 1

    assert pillow_manager.commit() == CommitOutcome.SAVED
    assert record.crop_history == [CropRect(0, 0, 125, 1)]
    assert notices == []
