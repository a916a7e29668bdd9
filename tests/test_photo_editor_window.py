"""
Tests for the photo editor dialog wiring.

Runs on Qt's offscreen platform; no display is needed.
"""

import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt5.QtWidgets import QApplication  # noqa: E402

from PB_Libs.constants import MIN_CROP_SIZE  # noqa: E402
from PB_Libs.EditorLib.photo_editor_window import PhotoEditorDialog  # noqa: E402


@pytest.fixture(scope="module")
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


class TestPhotoEditorDialog:
    """Tests for PhotoEditorDialog."""

    def test_default_minimum_crop(self, qapp, make_frame):
        dialog = PhotoEditorDialog(make_frame(100, 80))

        assert dialog.session.min_crop_size == MIN_CROP_SIZE
        assert dialog.canvas.tool.min_size == MIN_CROP_SIZE

    def test_configured_minimum_crop(self, qapp, make_frame):
        dialog = PhotoEditorDialog(make_frame(100, 80), min_crop_size=30)

        assert dialog.session.min_crop_size == 30
        assert dialog.canvas.tool.min_size == 30

    def test_selection_below_configured_minimum_is_ignored(self, qapp, make_frame):
        dialog = PhotoEditorDialog(make_frame(100, 80), min_crop_size=30)

        dialog.on_crop_selected((0, 0), (20, 20), (100, 80))

        assert len(dialog.session.history) == 1
        assert not dialog.btn_undo.isEnabled()

    def test_selection_at_configured_minimum_crops(self, qapp, make_frame):
        dialog = PhotoEditorDialog(make_frame(100, 80), min_crop_size=30)

        dialog.on_crop_selected((0, 0), (30, 30), (100, 80))

        assert dialog.session.working_buffer.size == (30, 30)
        assert dialog.btn_undo.isEnabled()

    def test_save_without_store_returns_render(self, qapp, make_frame):
        dialog = PhotoEditorDialog(make_frame(100, 80))
        dialog.rotate()

        dialog.save()

        assert dialog.result_frame.size == (80, 100)
