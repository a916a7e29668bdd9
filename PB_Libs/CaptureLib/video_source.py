"""
Video sources feeding the live render loop.

A video source is a scoped resource: open() acquires the device, release()
gives it back, and read() hands out the newest frame without blocking
(None when no new frame has arrived since the last read).

Classes:
    VideoSource: Protocol implemented by all sources
    CameraUnavailableError: Raised when the camera cannot be acquired
    OpenCVCamera: Webcam source backed by cv2.VideoCapture and a grabber thread
    FrameSequenceSource: Replays in-memory frames (demos, tests)
"""

import logging
import threading
from typing import List, Optional, Protocol, Sequence

import cv2

from PB_Libs.constants import (
    DEFAULT_CAMERA_INDEX,
    DEFAULT_CAPTURE_HEIGHT,
    DEFAULT_CAPTURE_WIDTH,
)
from PB_Libs.ImagingLib.frame_models import Frame

logger = logging.getLogger(__name__)


class CameraUnavailableError(RuntimeError):
    """The camera could not be opened (missing device or permission denied)."""


class VideoSource(Protocol):
    @property
    def is_open(self) -> bool:
        ...

    def open(self) -> None:
        ...

    def read(self) -> Optional[Frame]:
        ...

    def release(self) -> None:
        ...


class OpenCVCamera:
    """
    Webcam source.

    A daemon thread reads from cv2.VideoCapture as fast as the device
    delivers and keeps only the latest frame, so read() never waits on the
    camera.

    Example:
        >>> with OpenCVCamera(0) as camera:
        ...     frame = camera.read()
    """

    def __init__(
        self,
        camera_index: int = DEFAULT_CAMERA_INDEX,
        width: int = DEFAULT_CAPTURE_WIDTH,
        height: int = DEFAULT_CAPTURE_HEIGHT,
    ) -> None:
        self.camera_index = camera_index
        self.width = width
        self.height = height

        self._capture: Optional[cv2.VideoCapture] = None
        self._thread: Optional[threading.Thread] = None
        self._stopped = threading.Event()
        self._frame_lock = threading.Lock()
        self._latest_frame: Optional[Frame] = None
        self.frame_count = 0

    @property
    def is_open(self) -> bool:
        return self._capture is not None

    def open(self) -> None:
        """
        Acquire the camera and start the grabber thread.

        Raises:
            CameraUnavailableError: If the device cannot be opened
        """
        if self._capture is not None:
            return

        capture = cv2.VideoCapture(self.camera_index)
        try:
            if not capture.isOpened():
                raise CameraUnavailableError(
                    "Unable to access camera. Please allow camera permissions."
                )
            capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
            capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        except Exception:
            capture.release()
            raise

        self._capture = capture
        self._stopped.clear()
        self._thread = threading.Thread(
            target=self._run, name=f"camera-{self.camera_index}", daemon=True
        )
        self._thread.start()
        logger.info(f"Camera {self.camera_index} opened")

    def _run(self) -> None:
        capture = self._capture
        while capture is not None and not self._stopped.is_set():
            ok, bgr = capture.read()
            if not ok:
                if self._stopped.wait(0.01):
                    break
                continue
            frame = Frame(cv2.cvtColor(bgr, cv2.COLOR_BGR2RGBA))
            with self._frame_lock:
                self._latest_frame = frame
                self.frame_count += 1

    def read(self) -> Optional[Frame]:
        """Return the newest frame not yet read, or None."""
        with self._frame_lock:
            frame = self._latest_frame
            self._latest_frame = None
        return frame

    def release(self) -> None:
        """Stop the grabber thread and release the device. Safe to call twice."""
        self._stopped.set()
        thread = self._thread
        self._thread = None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=2.0)

        capture = self._capture
        self._capture = None
        if capture is not None:
            capture.release()
            logger.info(f"Camera {self.camera_index} released")

        with self._frame_lock:
            self._latest_frame = None

    def __enter__(self) -> "OpenCVCamera":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


class FrameSequenceSource:
    """Replays a fixed list of frames, one per read()."""

    def __init__(self, frames: Sequence[Frame], loop: bool = True) -> None:
        if not frames:
            raise ValueError("FrameSequenceSource requires at least one frame")
        self._frames: List[Frame] = list(frames)
        self.loop = loop
        self._position = 0
        self._open = False
        self.open_count = 0
        self.release_count = 0

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self) -> None:
        self._open = True
        self._position = 0
        self.open_count += 1

    def read(self) -> Optional[Frame]:
        if not self._open:
            return None
        if self._position >= len(self._frames):
            if not self.loop:
                return None
            self._position = 0
        frame = self._frames[self._position]
        self._position += 1
        return frame

    def release(self) -> None:
        if self._open:
            self.release_count += 1
        self._open = False

    def __enter__(self) -> "FrameSequenceSource":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
