"""
Cosmetic color filters for Photo Booth.

Filters are described by a FilterDescriptor: a display name plus an ordered
tuple of color operations. Operations follow the W3C Filter Effects
definitions and are applied one after another in normalized [0, 1] RGB space,
clamping after every step. The alpha channel is never touched.

Operations:
    grayscale(a)   - luminance matrix, a in [0, 1]
    sepia(a)       - sepia tone matrix, a in [0, 1]
    saturate(s)    - saturation matrix, s >= 0 (1 = identity)
    hue_rotate(d)  - hue rotation matrix, d in degrees
    brightness(b)  - C * b
    contrast(c)    - C * c + 0.5 * (1 - c)

Functions:
    get_filter: Look up a catalog filter by name
    list_filters: All catalog filters in display order
    apply_filter: Apply a FilterDescriptor to a Frame
    adjustment_descriptor: Build the editor's brightness/contrast/saturation filter
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

import numpy as np

from PB_Libs.constants import (
    FILTER_CATALOG,
    FILTER_NONE,
    FILTER_OPERATION_KINDS,
    OP_BRIGHTNESS,
    OP_CONTRAST,
    OP_GRAYSCALE,
    OP_HUE_ROTATE,
    OP_SATURATE,
    OP_SEPIA,
)
from PB_Libs.ImagingLib.frame_models import Frame


@dataclass(frozen=True)
class FilterOperation:
    kind: str
    amount: float

    def __post_init__(self):
        if self.kind not in FILTER_OPERATION_KINDS:
            raise ValueError(
                f"Unknown filter operation: {self.kind}. "
                f"Valid operations: {', '.join(FILTER_OPERATION_KINDS)}"
            )
        if self.kind != OP_HUE_ROTATE and self.amount < 0:
            raise ValueError(f"{self.kind} amount must be >= 0, got {self.amount}")


@dataclass(frozen=True)
class FilterDescriptor:
    """Named, ordered list of color operations.

    Attributes:
        name: Display name shown in the filter selector
        operations: Operations applied in order
    """
    name: str
    operations: Tuple[FilterOperation, ...] = ()

    @property
    def is_identity(self) -> bool:
        return not self.operations

    @classmethod
    def from_pairs(cls, name: str, pairs: Sequence[Tuple[str, float]]) -> "FilterDescriptor":
        return cls(name, tuple(FilterOperation(kind, float(amount)) for kind, amount in pairs))


_CATALOG: Dict[str, FilterDescriptor] = {
    name: FilterDescriptor.from_pairs(name, pairs) for name, pairs in FILTER_CATALOG
}

NO_FILTER = _CATALOG[FILTER_NONE]


def get_filter(name: str) -> FilterDescriptor:
    """
    Look up a catalog filter by name.

    Raises:
        ValueError: If the name is not in the catalog
    """
    try:
        return _CATALOG[name]
    except KeyError:
        raise ValueError(
            f"Unknown filter: {name}. Valid filters: {', '.join(_CATALOG)}"
        ) from None


def list_filters() -> List[FilterDescriptor]:
    return [_CATALOG[name] for name, _ in FILTER_CATALOG]


def adjustment_descriptor(brightness: float, contrast: float, saturation: float) -> FilterDescriptor:
    """
    Build the editor's adjustment filter from slider percentages.

    Args:
        brightness: Brightness in percent (100 = unchanged)
        contrast: Contrast in percent (100 = unchanged)
        saturation: Saturation in percent (100 = unchanged)
    """
    pairs = []
    if brightness != 100:
        pairs.append((OP_BRIGHTNESS, brightness / 100.0))
    if contrast != 100:
        pairs.append((OP_CONTRAST, contrast / 100.0))
    if saturation != 100:
        pairs.append((OP_SATURATE, saturation / 100.0))
    return FilterDescriptor.from_pairs("Adjustments", pairs)


# ============================================================================
# Color matrices
# ============================================================================

def grayscale_matrix(amount: float) -> np.ndarray:
    a = 1.0 - min(1.0, amount)
    return np.array([
        [0.2126 + 0.7874 * a, 0.7152 - 0.7152 * a, 0.0722 - 0.0722 * a],
        [0.2126 - 0.2126 * a, 0.7152 + 0.2848 * a, 0.0722 - 0.0722 * a],
        [0.2126 - 0.2126 * a, 0.7152 - 0.7152 * a, 0.0722 + 0.9278 * a],
    ], dtype=np.float64)


def sepia_matrix(amount: float) -> np.ndarray:
    a = 1.0 - min(1.0, amount)
    return np.array([
        [0.393 + 0.607 * a, 0.769 - 0.769 * a, 0.189 - 0.189 * a],
        [0.349 - 0.349 * a, 0.686 + 0.314 * a, 0.168 - 0.168 * a],
        [0.272 - 0.272 * a, 0.534 - 0.534 * a, 0.131 + 0.869 * a],
    ], dtype=np.float64)


def saturate_matrix(amount: float) -> np.ndarray:
    s = amount
    return np.array([
        [0.213 + 0.787 * s, 0.715 - 0.715 * s, 0.072 - 0.072 * s],
        [0.213 - 0.213 * s, 0.715 + 0.285 * s, 0.072 - 0.072 * s],
        [0.213 - 0.213 * s, 0.715 - 0.715 * s, 0.072 + 0.928 * s],
    ], dtype=np.float64)


def hue_rotate_matrix(degrees: float) -> np.ndarray:
    angle = math.radians(degrees)
    c = math.cos(angle)
    s = math.sin(angle)
    return np.array([
        [0.213 + c * 0.787 - s * 0.213, 0.715 - c * 0.715 - s * 0.715, 0.072 - c * 0.072 + s * 0.928],
        [0.213 - c * 0.213 + s * 0.143, 0.715 + c * 0.285 + s * 0.140, 0.072 - c * 0.072 - s * 0.283],
        [0.213 - c * 0.213 - s * 0.787, 0.715 - c * 0.715 + s * 0.715, 0.072 + c * 0.928 + s * 0.072],
    ], dtype=np.float64)


_MATRIX_BUILDERS = {
    OP_GRAYSCALE: grayscale_matrix,
    OP_SEPIA: sepia_matrix,
    OP_SATURATE: saturate_matrix,
    OP_HUE_ROTATE: hue_rotate_matrix,
}


def _apply_operation(rgb: np.ndarray, operation: FilterOperation) -> np.ndarray:
    builder = _MATRIX_BUILDERS.get(operation.kind)
    if builder is not None:
        matrix = builder(operation.amount)
        red, green, blue = rgb[:, :, 0], rgb[:, :, 1], rgb[:, :, 2]
        result = np.stack(
            [red * row[0] + green * row[1] + blue * row[2] for row in matrix],
            axis=-1,
        )
    elif operation.kind == OP_BRIGHTNESS:
        result = rgb * operation.amount
    else:  # contrast
        result = rgb * operation.amount + 0.5 * (1.0 - operation.amount)
    return np.clip(result, 0.0, 1.0)


def apply_filter(frame: Frame, descriptor: FilterDescriptor) -> Frame:
    """
    Apply a filter to a frame.

    Args:
        frame: Source Frame (not modified)
        descriptor: Filter to apply; the identity filter returns a copy

    Returns:
        New filtered Frame with the source alpha channel

    Raises:
        TypeError: If frame is not a Frame
    """
    if not isinstance(frame, Frame):
        raise TypeError(f"Expected Frame, got {type(frame)}")

    if descriptor.is_identity:
        return frame.copy()

    rgb = frame.pixels[:, :, :3].astype(np.float64) / 255.0
    for operation in descriptor.operations:
        rgb = _apply_operation(rgb, operation)

    output = np.empty_like(frame.pixels)
    output[:, :, :3] = np.rint(rgb * 255.0).astype(np.uint8)
    output[:, :, 3] = frame.pixels[:, :, 3]
    return Frame(output)
