"""
Person segmentation adapter.

Wraps an external segmentation engine that may be missing entirely (failed to
load) or slower than one display frame. The adapter runs at most one request
at a time on a single worker thread; the render loop fires a request, keeps
ticking, and polls for the result on later ticks.

Unavailability is never an error for the user: it only disables background
replacement.

Classes:
    SegmentationEngine: Protocol for engines (segment_person(frame) -> Mask)
    SegmentationResult: Finished request (frame it ran on + mask or None)
    SegmentationAdapter: Busy-flagged, fire-and-forget request runner
    MediaPipeSelfieSegmenter: Engine backed by MediaPipe selfie segmentation

Functions:
    refine_mask: Remove isolated speckles and pinholes from a binary mask
    load_segmentation_engine: Load the default engine asynchronously
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol, Union

import numpy as np
from scipy import ndimage

from PB_Libs.config import BoothConfig
from PB_Libs.constants import (
    DEFAULT_MASK_REFINE_ITERATIONS,
    DEFAULT_SEGMENTATION_MODEL,
    DEFAULT_SEGMENTATION_THRESHOLD,
)
from PB_Libs.ImagingLib.frame_models import Frame, Mask

logger = logging.getLogger(__name__)


class SegmentationEngine(Protocol):
    def segment_person(self, frame: Frame) -> Optional[Mask]:
        ...


@dataclass(frozen=True)
class SegmentationResult:
    """Outcome of one segmentation request.

    Attributes:
        frame: The frame the request ran on
        mask: Person mask, or None if the engine failed for this frame
        request_id: Sequence number of the request
    """
    frame: Frame
    mask: Optional[Mask]
    request_id: int

    @property
    def usable(self) -> bool:
        return self.mask is not None and self.mask.matches(self.frame)


EngineSource = Union[SegmentationEngine, "Future[Optional[SegmentationEngine]]", None]


class SegmentationAdapter:
    """
    Runs segmentation requests one at a time.

    Args:
        engine: An engine, a Future resolving to an engine (or None), or None
                for "no segmentation available"
        executor: Optional executor; by default a private single worker is used
    """

    def __init__(self, engine: EngineSource = None, executor: Optional[ThreadPoolExecutor] = None):
        self._engine: Optional[SegmentationEngine] = None
        self._engine_future: Optional[Future] = None
        if isinstance(engine, Future):
            self._engine_future = engine
        else:
            self._engine = engine

        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="segmentation"
        )
        self._in_flight: Optional[Future] = None
        self._discard_in_flight = False
        self._request_id = 0
        self._closed = False

    @property
    def available(self) -> bool:
        """True once an engine is present. Checks a pending load without waiting."""
        if self._closed:
            return False
        if self._engine is not None:
            return True

        future = self._engine_future
        if future is None or not future.done():
            return False

        self._engine_future = None
        engine = None
        if future.cancelled():
            logger.warning("Segmentation engine load was cancelled")
        elif future.exception() is not None:
            logger.warning(f"Segmentation engine failed to load: {future.exception()}")
        else:
            engine = future.result()

        if engine is None:
            logger.warning("Segmentation unavailable, background replacement disabled")
        else:
            logger.info("Segmentation engine ready")
        self._engine = engine
        return engine is not None

    @property
    def busy(self) -> bool:
        return self._in_flight is not None

    def attach(self, engine: Optional[SegmentationEngine]) -> None:
        """Replace the engine (None disables segmentation)."""
        self._engine_future = None
        self._engine = engine

    def request(self, frame: Frame) -> bool:
        """
        Start segmenting a frame in the background.

        Returns:
            True if a request was issued; False if busy or unavailable
        """
        if self.busy or not self.available:
            return False

        self._request_id += 1
        self._discard_in_flight = False
        self._in_flight = self._executor.submit(
            self._run, self._engine, frame, self._request_id
        )
        logger.debug(f"Segmentation request {self._request_id} issued for {frame.size}")
        return True

    @staticmethod
    def _run(engine: SegmentationEngine, frame: Frame, request_id: int) -> SegmentationResult:
        try:
            mask = engine.segment_person(frame)
        except Exception as exc:
            logger.warning(f"Segmentation request {request_id} failed: {exc}")
            mask = None
        return SegmentationResult(frame=frame, mask=mask, request_id=request_id)

    def poll(self) -> Optional[SegmentationResult]:
        """
        Collect a finished request.

        Returns:
            The result if the in-flight request finished (clears busy), else None
        """
        future = self._in_flight
        if future is None or not future.done():
            return None

        self._in_flight = None
        if self._discard_in_flight:
            self._discard_in_flight = False
            logger.debug("Discarded stale segmentation result")
            return None
        if future.cancelled():
            return None
        if future.exception() is not None:
            logger.warning(f"Segmentation worker error: {future.exception()}")
            return None
        return future.result()

    def discard_pending(self) -> None:
        """Drop the result of the in-flight request when it arrives."""
        if self._in_flight is not None:
            if self._in_flight.cancel():
                self._in_flight = None
            else:
                self._discard_in_flight = True

    def close(self) -> None:
        """
        Stop accepting requests and release the engine.

        A request already running on the worker keeps the engine until it
        finishes; the engine is closed from that request's done-callback.
        """
        self._closed = True
        in_flight = self._in_flight
        self._in_flight = None
        self._discard_in_flight = False
        if in_flight is not None:
            in_flight.cancel()
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)

        close_engine = getattr(self._engine, "close", None)
        self._engine = None
        if not callable(close_engine):
            return
        if in_flight is None or in_flight.done():
            close_engine()
        else:
            in_flight.add_done_callback(lambda _future: self._close_engine(close_engine))

    @staticmethod
    def _close_engine(close_engine: Callable[[], None]) -> None:
        try:
            close_engine()
        except Exception:
            logger.exception("Failed to close segmentation engine")


# ============================================================================
# Mask cleanup
# ============================================================================

def refine_mask(mask: Mask, iterations: int = 1) -> Mask:
    """
    Clean up a thresholded mask with binary morphology.

    An opening drops person specks smaller than the structuring element, then
    a closing fills pinholes of the same size inside the person.

    Args:
        mask: Binary person mask
        iterations: Size of the cleanup in pixels (0 returns the mask as is)

    Returns:
        New Mask of the same size with values in {0, 1}
    """
    if iterations <= 0:
        return mask
    # Edge padding keeps people touching the frame border from being eroded.
    pad = iterations + 1
    person = np.pad(mask.person_pixels(), pad, mode="edge")
    structure = np.ones((3, 3), dtype=bool)
    opened = ndimage.binary_opening(person, structure=structure, iterations=iterations)
    closed = ndimage.binary_closing(opened, structure=structure, iterations=iterations)
    return Mask(closed[pad:-pad, pad:-pad].astype(np.uint8))


# ============================================================================
# MediaPipe engine
# ============================================================================

class MediaPipeSelfieSegmenter:
    """
    Segmentation engine using MediaPipe's selfie segmentation model.

    Args:
        threshold: Confidence above which a pixel is classified as person
        model_selection: 0 = general model, 1 = landscape model (faster)
        refine_iterations: Mask cleanup strength passed to refine_mask

    Raises:
        ImportError: If mediapipe is not installed
        AttributeError: If the installed mediapipe has no selfie solution
    """

    def __init__(
        self,
        threshold: float = DEFAULT_SEGMENTATION_THRESHOLD,
        model_selection: int = DEFAULT_SEGMENTATION_MODEL,
        refine_iterations: int = DEFAULT_MASK_REFINE_ITERATIONS,
    ) -> None:
        import mediapipe as mp

        self.threshold = threshold
        self.refine_iterations = refine_iterations
        self._segmenter: Any = mp.solutions.selfie_segmentation.SelfieSegmentation(
            model_selection=model_selection
        )

    def segment_person(self, frame: Frame) -> Optional[Mask]:
        rgb = np.ascontiguousarray(frame.pixels[:, :, :3])
        results = self._segmenter.process(rgb)
        if results.segmentation_mask is None:
            return None
        mask = Mask.from_probabilities(results.segmentation_mask, self.threshold)
        return refine_mask(mask, self.refine_iterations)

    def close(self) -> None:
        self._segmenter.close()


def _create_default_engine(config: BoothConfig) -> Optional[SegmentationEngine]:
    try:
        engine = MediaPipeSelfieSegmenter(
            threshold=config.segmentation_threshold,
            model_selection=config.segmentation_model,
            refine_iterations=config.mask_refine_iterations,
        )
    except Exception as exc:
        logger.warning(f"Segmentation engine failed to load: {exc}")
        return None
    logger.info("MediaPipe selfie segmentation loaded")
    return engine


def load_segmentation_engine(config: BoothConfig) -> "Future[Optional[SegmentationEngine]]":
    """
    Load the segmentation engine without blocking the caller.

    Returns:
        Future resolving to the engine, or to None when it cannot be loaded
        (disabled in config, mediapipe missing, or initialization failure)
    """
    if not config.segmentation_enabled:
        future: Future = Future()
        future.set_result(None)
        return future

    loader = ThreadPoolExecutor(max_workers=1, thread_name_prefix="segmentation-load")
    future = loader.submit(_create_default_engine, config)
    loader.shutdown(wait=False)
    return future
