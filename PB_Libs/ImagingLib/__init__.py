"""
ImagingLib - Pixel buffers and per-frame image operations

This module provides the frame models, blur, filter engine and compositor
used by the live render loop and the photo editor.
"""

from PB_Libs.ImagingLib.frame_models import (
    BackgroundSource,
    BlurBackground,
    Frame,
    ImageBackground,
    Mask,
    NoBackground,
    RgbaColor,
)
from PB_Libs.ImagingLib.filter_engine import (
    NO_FILTER,
    FilterDescriptor,
    FilterOperation,
    adjustment_descriptor,
    apply_filter,
    get_filter,
    list_filters,
)
from PB_Libs.ImagingLib.compositor import (
    Compositor,
    MaskMismatchError,
    composite,
    resize_to,
)

__all__ = [
    "BackgroundSource",
    "BlurBackground",
    "Frame",
    "ImageBackground",
    "Mask",
    "NoBackground",
    "RgbaColor",
    "NO_FILTER",
    "FilterDescriptor",
    "FilterOperation",
    "adjustment_descriptor",
    "apply_filter",
    "get_filter",
    "list_filters",
    "Compositor",
    "MaskMismatchError",
    "composite",
    "resize_to",
]
