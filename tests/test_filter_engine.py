"""
Tests for the filter engine.

Tests cover:
- Catalog contents and ordering
- Individual operations against hand-computed values
- Operation ordering and clamping
- Alpha preservation and purity
- Editor adjustment descriptors
"""

import unittest

import numpy as np

from PB_Libs.ImagingLib.filter_engine import (
    NO_FILTER,
    FilterDescriptor,
    FilterOperation,
    adjustment_descriptor,
    apply_filter,
    get_filter,
    list_filters,
)
from PB_Libs.ImagingLib.frame_models import Frame


def _pixel(frame):
    return tuple(int(v) for v in frame.pixels[0, 0])


def _one(kind, amount):
    return FilterDescriptor.from_pairs(kind, [(kind, amount)])


class TestFilterCatalog(unittest.TestCase):
    """Test the filter catalog."""

    def test_catalog_names_in_order(self):
        names = [descriptor.name for descriptor in list_filters()]
        self.assertEqual(
            names,
            ["None", "Sepia", "B&W", "Warm", "Cool", "Vintage", "Bright", "Dramatic"],
        )

    def test_catalog_operations(self):
        expected = {
            "None": [],
            "Sepia": [("sepia", 1.0)],
            "B&W": [("grayscale", 1.0)],
            "Warm": [("sepia", 0.4), ("saturate", 1.5)],
            "Cool": [("saturate", 0.8), ("hue_rotate", 20.0)],
            "Vintage": [("sepia", 0.5), ("contrast", 1.2), ("brightness", 0.9)],
            "Bright": [("brightness", 1.3), ("contrast", 1.1)],
            "Dramatic": [("contrast", 1.5), ("brightness", 0.85)],
        }
        for name, ops in expected.items():
            descriptor = get_filter(name)
            self.assertEqual(
                [(op.kind, op.amount) for op in descriptor.operations], ops, name
            )

    def test_unknown_filter(self):
        with self.assertRaises(ValueError):
            get_filter("Neon")

    def test_no_filter_is_identity(self):
        self.assertTrue(NO_FILTER.is_identity)
        self.assertFalse(get_filter("Sepia").is_identity)


class TestFilterOperation(unittest.TestCase):
    """Test operation validation."""

    def test_unknown_kind(self):
        with self.assertRaises(ValueError):
            FilterOperation("invert", 1.0)

    def test_negative_amount(self):
        with self.assertRaises(ValueError):
            FilterOperation("brightness", -0.5)

    def test_negative_hue_rotation_allowed(self):
        self.assertEqual(FilterOperation("hue_rotate", -30.0).amount, -30.0)


class TestApplyFilter(unittest.TestCase):
    """Test applying filters to frames."""

    def test_none_returns_identical_copy(self):
        frame = Frame.solid(3, 3, (12, 34, 56, 78))
        result = apply_filter(frame, NO_FILTER)
        self.assertIsNot(result, frame)
        self.assertTrue(result.same_pixels(frame))

    def test_sepia_on_white(self):
        frame = Frame.solid(2, 2, (255, 255, 255, 255))
        result = apply_filter(frame, get_filter("Sepia"))
        # Red and green rows sum above 1 and clamp; blue row sums to 0.937
        self.assertEqual(_pixel(result), (255, 255, 239, 255))

    def test_black_and_white_is_neutral(self):
        rng = np.random.default_rng(7)
        pixels = rng.integers(0, 256, size=(10, 10, 4), dtype=np.uint8)
        result = apply_filter(Frame(pixels), get_filter("B&W"))
        np.testing.assert_array_equal(result.pixels[:, :, 0], result.pixels[:, :, 1])
        np.testing.assert_array_equal(result.pixels[:, :, 1], result.pixels[:, :, 2])

    def test_grayscale_luminance(self):
        frame = Frame.solid(1, 1, (200, 50, 50, 255))
        result = apply_filter(frame, get_filter("B&W"))
        self.assertEqual(_pixel(result), (82, 82, 82, 255))

    def test_brightness(self):
        frame = Frame.solid(1, 1, (100, 0, 250, 255))
        result = apply_filter(frame, _one("brightness", 1.3))
        self.assertEqual(_pixel(result), (130, 0, 255, 255))

    def test_contrast_pivots_on_mid_gray(self):
        frame = Frame.solid(1, 1, (0, 128, 255, 255))
        result = apply_filter(frame, _one("contrast", 0.5))
        self.assertEqual(_pixel(result), (64, 128, 191, 255))

    def test_saturate_zero_is_gray(self):
        frame = Frame.solid(1, 1, (255, 0, 0, 255))
        result = apply_filter(frame, _one("saturate", 0.0))
        r, g, b, _ = _pixel(result)
        self.assertEqual(r, g)
        self.assertEqual(g, b)

    def test_hue_rotate_zero_is_identity(self):
        frame = Frame.solid(1, 1, (10, 120, 230, 255))
        result = apply_filter(frame, _one("hue_rotate", 0.0))
        self.assertEqual(_pixel(result), (10, 120, 230, 255))

    def test_bright_filter_order(self):
        # brightness 1.3 then contrast 1.1: 100/255*1.3*1.1 - 0.05 -> 130.25
        frame = Frame.solid(1, 1, (100, 100, 100, 255))
        result = apply_filter(frame, get_filter("Bright"))
        self.assertEqual(_pixel(result)[:3], (130, 130, 130))

    def test_dramatic_filter_order(self):
        # contrast 1.5 then brightness 0.85: (200/255*1.5 - 0.25)*0.85 -> 200.81
        frame = Frame.solid(1, 1, (200, 200, 200, 255))
        result = apply_filter(frame, get_filter("Dramatic"))
        self.assertEqual(_pixel(result)[:3], (201, 201, 201))

    def test_clamps_between_operations(self):
        # 255 * 2 clamps to 1.0 before halving; without clamping it would stay 255
        frame = Frame.solid(1, 1, (255, 255, 255, 255))
        descriptor = FilterDescriptor.from_pairs(
            "clamp", [("brightness", 2.0), ("brightness", 0.5)]
        )
        self.assertEqual(_pixel(apply_filter(frame, descriptor))[:3], (128, 128, 128))

    def test_alpha_untouched(self):
        frame = Frame.solid(2, 2, (90, 60, 30, 77))
        for descriptor in list_filters():
            result = apply_filter(frame, descriptor)
            self.assertEqual(int(result.pixels[1, 1, 3]), 77, descriptor.name)

    def test_input_not_modified(self):
        frame = Frame.solid(2, 2, (90, 60, 30, 255))
        before = frame.copy()
        apply_filter(frame, get_filter("Vintage"))
        self.assertTrue(frame.same_pixels(before))

    def test_output_size_matches(self):
        frame = Frame.solid(7, 3, (1, 2, 3, 255))
        for descriptor in list_filters():
            self.assertEqual(apply_filter(frame, descriptor).size, (7, 3))

    def test_rejects_non_frame(self):
        with self.assertRaises(TypeError):
            apply_filter("not_a_frame", NO_FILTER)


class TestAdjustmentDescriptor(unittest.TestCase):
    """Test the editor's brightness/contrast/saturation descriptor."""

    def test_defaults_are_identity(self):
        self.assertTrue(adjustment_descriptor(100, 100, 100).is_identity)

    def test_operation_order(self):
        descriptor = adjustment_descriptor(120, 80, 50)
        self.assertEqual(
            [(op.kind, op.amount) for op in descriptor.operations],
            [("brightness", 1.2), ("contrast", 0.8), ("saturate", 0.5)],
        )

    def test_skips_unchanged_values(self):
        descriptor = adjustment_descriptor(100, 150, 100)
        self.assertEqual([op.kind for op in descriptor.operations], ["contrast"])


if __name__ == "__main__":
    unittest.main()
