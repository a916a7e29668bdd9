"""
Live viewfinder render loop.

One tick per display frame:

    1. read the newest camera frame (nothing ready -> no-op tick)
    2. if the background needs a person mask and segmentation is available,
       collect a finished segmentation result and fire the next request
       (while a request is in flight the previous output stays on screen)
    3. composite the segmented frame over the background, or draw the raw
       frame when no mask is needed, segmentation is unavailable, or the
       mask is missing/mismatched
    4. apply the active filter to the composited buffer (always last)
    5. present the buffer

The loop owns its camera handle for the lifetime of a RenderHandle; stop()
cancels the next tick and releases the camera, and no tick body runs after it
returns.

Classes:
    RenderParams: Background source + filter, swapped atomically
    RenderHandle: Token for one running session of the loop
    RenderLoop: The loop itself
"""

import itertools
import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Optional

from PB_Libs.ImagingLib.compositor import Compositor
from PB_Libs.ImagingLib.filter_engine import NO_FILTER, FilterDescriptor, apply_filter
from PB_Libs.ImagingLib.frame_models import BackgroundSource, Frame, NoBackground
from PB_Libs.CaptureLib.frame_scheduler import FrameScheduler
from PB_Libs.CaptureLib.segmentation import SegmentationAdapter, SegmentationResult
from PB_Libs.CaptureLib.video_source import VideoSource

logger = logging.getLogger(__name__)

PresentCallback = Callable[[Frame], None]


@dataclass(frozen=True)
class RenderParams:
    background: BackgroundSource = field(default_factory=NoBackground)
    filter: FilterDescriptor = NO_FILTER


class RenderHandle:
    """Token returned by RenderLoop.start(); pass it to stop()."""

    _ids = itertools.count(1)

    def __init__(self, video_source: VideoSource) -> None:
        self.handle_id = next(self._ids)
        self.video_source = video_source
        self.ticks = 0
        self.frames_presented = 0
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def __repr__(self) -> str:
        state = "active" if self._active else "stopped"
        return f"RenderHandle(id={self.handle_id}, {state}, presented={self.frames_presented})"


class RenderLoop:
    """
    Drives capture -> segment -> composite -> filter -> present.

    Args:
        segmenter: Segmentation adapter (may have no engine)
        scheduler: Display-paced scheduler that calls tick()
        present: Viewfinder callback receiving one Frame per presented tick
        compositor: Optional compositor (default settings if omitted)
    """

    def __init__(
        self,
        segmenter: SegmentationAdapter,
        scheduler: FrameScheduler,
        present: PresentCallback,
        compositor: Optional[Compositor] = None,
    ) -> None:
        self._segmenter = segmenter
        self._scheduler = scheduler
        self._present_callback = present
        self._compositor = compositor or Compositor()
        self._params = RenderParams()
        self._handle: Optional[RenderHandle] = None
        self._last_output: Optional[Frame] = None

    @property
    def params(self) -> RenderParams:
        return self._params

    @property
    def running(self) -> bool:
        return self._handle is not None and self._handle.active

    @property
    def last_output(self) -> Optional[Frame]:
        return self._last_output

    def start(self, video_source: VideoSource, initial_params: Optional[RenderParams] = None) -> RenderHandle:
        """
        Acquire the video source and schedule the first tick.

        Returns:
            Handle identifying this run

        Raises:
            CameraUnavailableError: If the video source cannot be opened; the
                                    source is released and the loop does not start
        """
        if self.running:
            self.stop(self._handle)

        try:
            video_source.open()
        except Exception:
            video_source.release()
            raise

        handle = RenderHandle(video_source)
        self._handle = handle
        self._params = initial_params or RenderParams()
        self._last_output = None

        try:
            self._scheduler.schedule(self.tick)
        except Exception:
            self.stop(handle)
            raise

        logger.info(f"Render loop started ({handle})")
        return handle

    def update_params(
        self,
        background: Optional[BackgroundSource] = None,
        filter_descriptor: Optional[FilterDescriptor] = None,
    ) -> RenderParams:
        """Swap the background and/or filter; observed on the next tick."""
        params = self._params
        if background is not None:
            params = replace(params, background=background)
        if filter_descriptor is not None:
            params = replace(params, filter=filter_descriptor)
        self._params = params
        return params

    def stop(self, handle: Optional[RenderHandle] = None) -> None:
        """Halt ticking and release the video source. Safe to call repeatedly."""
        handle = handle or self._handle
        if handle is None:
            return

        was_active = handle.active
        handle._active = False
        if handle is self._handle:
            self._scheduler.cancel()
            self._segmenter.discard_pending()
            self._handle = None

        handle.video_source.release()
        if was_active:
            logger.info(f"Render loop stopped ({handle})")

    def close(self) -> None:
        self.stop()
        self._segmenter.close()

    def capture(self) -> Optional[Frame]:
        """Copy of the most recently presented buffer, or None before the first frame."""
        if self._last_output is None:
            return None
        return self._last_output.copy()

    def tick(self) -> None:
        handle = self._handle
        if handle is None or not handle.active:
            return

        handle.ticks += 1
        try:
            self._render(handle)
        except Exception:
            logger.exception("Render tick failed")
        finally:
            if handle.active and handle is self._handle:
                self._scheduler.schedule(self.tick)

    # ------------------------------------------------------------------

    def _render(self, handle: RenderHandle) -> None:
        frame = handle.video_source.read()
        if frame is None:
            return

        params = self._params

        if params.background.needs_mask and self._segmenter.available:
            result = self._segmenter.poll()
            if result is not None:
                composed = self._composite_result(result, frame, params)
                self._present(handle, apply_filter(composed, params.filter))
            if not self._segmenter.busy:
                self._segmenter.request(frame)
            return

        if self._segmenter.busy:
            # Background switched away from replacement; drain the old request.
            self._segmenter.poll()

        self._present(handle, apply_filter(frame, params.filter))

    def _composite_result(self, result: SegmentationResult, frame: Frame, params: RenderParams) -> Frame:
        if result.frame.size != frame.size:
            logger.debug(f"Segmented frame {result.frame.size} is stale for {frame.size}")
            return frame

        composed = self._compositor.compose(result.frame, result.mask, params.background)
        if composed is None:
            return frame
        return composed

    def _present(self, handle: RenderHandle, buffer: Frame) -> None:
        self._last_output = buffer
        handle.frames_presented += 1
        self._present_callback(buffer)

    def __enter__(self) -> "RenderLoop":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
