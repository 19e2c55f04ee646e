"""
Group Image Cropper v1.0 - Export Tests
========================================
Save capabilities and the download fallback
"""

import pytest
import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from export import (
    DirectorySave, DownloadSave, SaveFailed, SaveUnavailable,
    export_filename, save_with_fallback
)

def test_export_filename():
    assert export_filename("photo.jpg") == "cropped-photo.jpg"
    assert export_filename("my photo.png") == "cropped-my_photo.png"

def test_directory_save_writes(tmp_path):
    path = DirectorySave(str(tmp_path)).save("cropped-a.png", b"abc", "image/png")
    assert path == os.path.join(str(tmp_path), "cropped-a.png")
    with open(path, "rb") as f:
        assert f.read() == b"abc"

def test_directory_save_without_folder():
    with pytest.raises(SaveUnavailable):
        DirectorySave("  ").save("a.png", b"x", "image/png")

def test_directory_save_missing_folder_fails(tmp_path):
    with pytest.raises(SaveFailed):
        DirectorySave(str(tmp_path / "nope")).save("a.png", b"x", "image/png")

def test_directory_save_write_error(tmp_path):
    # A directory where the file should go makes open() fail
    (tmp_path / "a.png").mkdir()
    with pytest.raises(SaveFailed):
        DirectorySave(str(tmp_path)).save("a.png", b"x", "image/png")

def test_download_take_once():
    downloads = DownloadSave()
    downloads.save("a.png", b"x", "image/png")
    items = downloads.take()
    assert [i.filename for i in items] == ["a.png"]
    assert downloads.take() == []

def test_fallback_when_unavailable():
    downloads = DownloadSave()
    save_with_fallback(DirectorySave(""), downloads, "a.png", b"x", "image/png")
    save_with_fallback(None, downloads, "b.png", b"x", "image/png")
    assert [i.filename for i in downloads.take()] == ["a.png", "b.png"]

def test_no_fallback_when_folder_missing(tmp_path):
    downloads = DownloadSave()
    with pytest.raises(SaveFailed):
        save_with_fallback(DirectorySave(str(tmp_path / "gone")), downloads, "a.png", b"x", "image/png")
    assert downloads.pending == []
