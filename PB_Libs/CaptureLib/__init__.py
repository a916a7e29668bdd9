"""
CaptureLib - Live camera capture and the viewfinder render loop

This module provides video sources, the segmentation adapter, frame
schedulers and the render loop that drives the live viewfinder.
"""

from PB_Libs.CaptureLib.video_source import (
    CameraUnavailableError,
    FrameSequenceSource,
    OpenCVCamera,
    VideoSource,
)
from PB_Libs.CaptureLib.segmentation import (
    MediaPipeSelfieSegmenter,
    SegmentationAdapter,
    SegmentationEngine,
    SegmentationResult,
    load_segmentation_engine,
    refine_mask,
)
from PB_Libs.CaptureLib.frame_scheduler import (
    FrameScheduler,
    ManualFrameScheduler,
    QtFrameScheduler,
)
from PB_Libs.CaptureLib.render_loop import RenderHandle, RenderLoop, RenderParams

__all__ = [
    "CameraUnavailableError",
    "FrameSequenceSource",
    "OpenCVCamera",
    "VideoSource",
    "MediaPipeSelfieSegmenter",
    "SegmentationAdapter",
    "SegmentationEngine",
    "SegmentationResult",
    "load_segmentation_engine",
    "refine_mask",
    "FrameScheduler",
    "ManualFrameScheduler",
    "QtFrameScheduler",
    "RenderHandle",
    "RenderLoop",
    "RenderParams",
]
