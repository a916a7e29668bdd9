"""
Tests for the crop tool.

Tests cover:
- Display-to-buffer mapping with independent per-axis scale
- Minimum crop size measured in buffer pixels
- Clamping to the buffer
- Crop gesture tracking
- Sub-buffer extraction
"""

import numpy as np
import pytest

from PB_Libs.EditorLib.crop_tool import CropTool, crop_frame, map_selection_to_buffer
from PB_Libs.EditorLib.editor_history import CropArea
from PB_Libs.ImagingLib.frame_models import Frame


class TestMapSelection:
    """Tests for map_selection_to_buffer."""

    def test_scales_each_axis(self):
        area = map_selection_to_buffer((10, 10), (60, 35), (100, 100), (200, 400))
        assert area == CropArea(20, 40, 100, 100)

    def test_reversed_drag_is_normalized(self):
        forward = map_selection_to_buffer((10, 20), (50, 60), (100, 100), (100, 100))
        backward = map_selection_to_buffer((50, 60), (10, 20), (100, 100), (100, 100))
        assert forward == backward == CropArea(10, 20, 40, 40)

    def test_small_drag_is_ignored(self):
        assert map_selection_to_buffer((10, 10), (15, 40), (100, 100), (100, 100)) is None
        assert map_selection_to_buffer((10, 10), (40, 19), (100, 100), (100, 100)) is None

    def test_minimum_is_in_buffer_pixels(self):
        # 2 display pixels on a 10x downscaled preview are 20 buffer pixels
        area = map_selection_to_buffer((0, 0), (2, 2), (50, 50), (500, 500))
        assert area == CropArea(0, 0, 20, 20)

    def test_exact_minimum_accepted(self):
        area = map_selection_to_buffer((0, 0), (10, 10), (100, 100), (100, 100))
        assert area == CropArea(0, 0, 10, 10)

    def test_clamped_to_buffer(self):
        area = map_selection_to_buffer((50, 50), (120, 130), (100, 100), (100, 100))
        assert area == CropArea(50, 50, 50, 50)

    def test_clamped_selection_below_minimum_is_ignored(self):
        # Drags running past an edge keep only the on-image part
        assert map_selection_to_buffer((-20, 0), (3, 40), (100, 100), (100, 100)) is None
        assert map_selection_to_buffer((95, 0), (130, 40), (100, 100), (100, 100)) is None
        assert map_selection_to_buffer((0, 95), (40, 140), (100, 100), (100, 100)) is None

    def test_clamped_selection_at_minimum_accepted(self):
        area = map_selection_to_buffer((90, 0), (130, 40), (100, 100), (100, 100))
        assert area == CropArea(90, 0, 10, 40)

    def test_truncates_to_integers(self):
        area = map_selection_to_buffer((1, 1), (21, 21), (30, 30), (100, 100))
        assert area == CropArea(3, 3, 67, 67)

    def test_invalid_sizes(self):
        with pytest.raises(ValueError):
            map_selection_to_buffer((0, 0), (10, 10), (0, 100), (100, 100))
        with pytest.raises(ValueError):
            map_selection_to_buffer((0, 0), (10, 10), (100, 100), (100, -1))

    def test_custom_minimum(self):
        assert map_selection_to_buffer((0, 0), (15, 15), (100, 100), (100, 100), min_size=20) is None


class TestCropFrame:
    """Tests for crop_frame."""

    def test_extracts_region(self, gradient_frame):
        cropped = crop_frame(gradient_frame, CropArea(2, 3, 5, 4))
        assert cropped.size == (5, 4)
        np.testing.assert_array_equal(cropped.pixels, gradient_frame.pixels[3:7, 2:7])

    def test_result_is_standalone(self, gradient_frame):
        cropped = crop_frame(gradient_frame, CropArea(0, 0, 4, 4))
        cropped.pixels[0, 0] = (1, 2, 3, 4)
        assert tuple(gradient_frame.pixels[0, 0]) != (1, 2, 3, 4)

    def test_outside_frame(self):
        with pytest.raises(ValueError):
            crop_frame(Frame.solid(10, 10, (0, 0, 0, 255)), CropArea(5, 5, 10, 10))


class TestCropTool:
    """Tests for the crop gesture."""

    def test_full_gesture(self):
        tool = CropTool()
        tool.begin(10, 10)
        assert tool.dragging
        tool.drag(60, 35)
        area = tool.finish(display_size=(100, 100), buffer_size=(200, 400))

        assert area == CropArea(20, 40, 100, 100)
        assert not tool.dragging

    def test_selection_for_overlay(self):
        tool = CropTool()
        tool.begin(40, 30)
        tool.drag(10, 50)
        assert tool.selection == (10, 30, 30, 20)

    def test_click_without_drag(self):
        tool = CropTool()
        tool.begin(10, 10)
        assert tool.finish((100, 100), (100, 100)) is None

    def test_drag_without_begin_ignored(self):
        tool = CropTool()
        tool.drag(10, 10)
        assert tool.end is None
        assert tool.selection is None

    def test_cancel(self):
        tool = CropTool()
        tool.begin(0, 0)
        tool.drag(50, 50)
        tool.cancel()
        assert not tool.dragging
        assert tool.finish((100, 100), (100, 100)) is None
