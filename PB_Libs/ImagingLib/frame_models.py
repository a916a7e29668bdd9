"""
Pixel buffer data models for Photo Booth.

This module defines the core data structures passed between pipeline stages.

Classes:
    Frame: RGBA pixel buffer (height x width x 4, uint8)
    Mask: Per-pixel person/background classification aligned to a Frame
    NoBackground, BlurBackground, ImageBackground: Background source variants

Type Aliases:
    RgbaColor: A tuple of 4 integers representing RGBA color values (0-255)
    BackgroundSource: Union of the background source variants
"""

from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any, Optional, Tuple, Union

import numpy as np
from PIL import Image

from PB_Libs.constants import MASK_BACKGROUND, MASK_PERSON

RgbaColor = Tuple[int, int, int, int]


@dataclass(frozen=True, eq=False)
class Frame:
    """One RGBA pixel buffer captured or produced by the pipeline.

    Attributes:
        pixels: uint8 array of shape (height, width, 4)
    """
    pixels: np.ndarray

    def __post_init__(self):
        if not isinstance(self.pixels, np.ndarray):
            raise TypeError(f"Expected numpy array, got {type(self.pixels)}")
        if self.pixels.dtype != np.uint8:
            raise TypeError(f"Frame pixels must be uint8, got {self.pixels.dtype}")
        if self.pixels.ndim != 3 or self.pixels.shape[2] != 4:
            raise ValueError(f"Frame pixels must have shape (h, w, 4), got {self.pixels.shape}")
        if self.pixels.shape[0] == 0 or self.pixels.shape[1] == 0:
            raise ValueError("Frame must not be empty")

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def copy(self) -> "Frame":
        return Frame(self.pixels.copy())

    def tobytes(self) -> bytes:
        return self.pixels.tobytes()

    def to_image(self) -> Any:
        """Convert to a PIL Image in RGBA mode."""
        return Image.fromarray(np.ascontiguousarray(self.pixels))

    def same_pixels(self, other: "Frame") -> bool:
        return self.size == other.size and bool(np.array_equal(self.pixels, other.pixels))

    @classmethod
    def from_image(cls, image: Any) -> "Frame":
        """
        Build a Frame from a PIL Image.

        Args:
            image: PIL Image in any mode (converted to RGBA)

        Returns:
            New Frame owning a copy of the pixel data

        Raises:
            TypeError: If image is not a PIL Image
        """
        if not hasattr(image, "convert"):
            raise TypeError(f"Expected PIL Image, got {type(image)}")
        rgba = image.convert("RGBA") if image.mode != "RGBA" else image
        return cls(np.array(rgba, dtype=np.uint8))

    @classmethod
    def from_bytes(cls, width: int, height: int, data: bytes) -> "Frame":
        expected = width * height * 4
        if len(data) != expected:
            raise ValueError(f"Expected {expected} bytes for {width}x{height} RGBA, got {len(data)}")
        pixels = np.frombuffer(data, dtype=np.uint8).reshape((height, width, 4)).copy()
        return cls(pixels)

    @classmethod
    def solid(cls, width: int, height: int, color: RgbaColor) -> "Frame":
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[:, :] = color
        return cls(pixels)


@dataclass(frozen=True, eq=False)
class Mask:
    """Per-pixel classification: 0 = background, 1 = person."""
    data: np.ndarray

    def __post_init__(self):
        if not isinstance(self.data, np.ndarray):
            raise TypeError(f"Expected numpy array, got {type(self.data)}")
        if self.data.ndim != 2:
            raise ValueError(f"Mask must be 2-dimensional, got shape {self.data.shape}")

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def matches(self, frame: Frame) -> bool:
        return self.size == frame.size

    def person_pixels(self) -> np.ndarray:
        """Boolean array, True where the mask marks a person."""
        return self.data == MASK_PERSON

    @classmethod
    def full(cls, width: int, height: int, value: int = MASK_PERSON) -> "Mask":
        if value not in (MASK_BACKGROUND, MASK_PERSON):
            raise ValueError(f"Mask value must be 0 or 1, got {value}")
        return cls(np.full((height, width), value, dtype=np.uint8))

    @classmethod
    def from_probabilities(cls, probabilities: np.ndarray, threshold: float) -> "Mask":
        """Threshold a float confidence map into a binary mask."""
        return cls((np.asarray(probabilities) > threshold).astype(np.uint8))


# ============================================================================
# Background sources
# ============================================================================

@dataclass(frozen=True)
class NoBackground:
    """Live frame shown as captured."""

    @property
    def needs_mask(self) -> bool:
        return False


@dataclass(frozen=True)
class BlurBackground:
    """Background replaced by a blurred copy of the live frame.

    Attributes:
        radius: Blur radius in pixels, None to use the configured default
    """
    radius: Optional[float] = None

    def __post_init__(self):
        if self.radius is not None and self.radius <= 0:
            raise ValueError(f"radius must be > 0, got {self.radius}")

    @property
    def needs_mask(self) -> bool:
        return True


@dataclass(frozen=True, eq=False)
class ImageBackground:
    """Background replaced by a still image.

    Attributes:
        pending: Either a loaded Frame or a Future resolving to one
        name: Display name of the background record
    """
    pending: Union[Frame, "Future[Frame]"]
    name: str = ""

    @property
    def needs_mask(self) -> bool:
        return True

    @property
    def image(self) -> Optional[Frame]:
        """The loaded image, or None while loading or after a failed load."""
        if isinstance(self.pending, Frame):
            return self.pending
        if not self.pending.done() or self.pending.cancelled():
            return None
        if self.pending.exception() is not None:
            return None
        return self.pending.result()

    @property
    def load_failed(self) -> bool:
        if isinstance(self.pending, Frame):
            return False
        return self.pending.done() and (
            self.pending.cancelled() or self.pending.exception() is not None
        )


BackgroundSource = Union[NoBackground, BlurBackground, ImageBackground]
