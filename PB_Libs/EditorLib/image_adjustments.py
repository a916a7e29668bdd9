"""
Non-destructive adjustments for the photo editor.

Functions:
    rotate_frame: Rotate a frame clockwise by a multiple of 90 degrees
    render_state: Derive the displayed image from a working buffer and a snapshot
"""

import numpy as np

from PB_Libs.constants import VALID_ROTATIONS
from PB_Libs.EditorLib.editor_history import EditorState
from PB_Libs.ImagingLib.filter_engine import adjustment_descriptor, apply_filter
from PB_Libs.ImagingLib.frame_models import Frame


def rotate_frame(frame: Frame, rotation: int) -> Frame:
    """
    Rotate clockwise.

    Raises:
        ValueError: If rotation is not 0, 90, 180 or 270
    """
    if rotation not in VALID_ROTATIONS:
        raise ValueError(f"rotation must be one of {VALID_ROTATIONS}, got {rotation}")
    if rotation == 0:
        return frame
    # np.rot90 turns counter-clockwise for positive k
    return Frame(np.ascontiguousarray(np.rot90(frame.pixels, k=-(rotation // 90))))


def render_state(source: Frame, state: EditorState) -> Frame:
    """
    Render a snapshot from its working buffer.

    Rotation and brightness/contrast/saturation are applied fresh to the
    source every time, so they never accumulate across snapshots.
    """
    rotated = rotate_frame(source, state.rotation)
    descriptor = adjustment_descriptor(state.brightness, state.contrast, state.saturation)
    return apply_filter(rotated, descriptor)
