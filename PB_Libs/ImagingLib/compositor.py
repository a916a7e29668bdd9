"""
Person/background compositor.

Merges a live frame with a background source according to a segmentation
mask: person pixels (mask == 1) come from the live frame at full opacity,
everything else comes from the background.

Background sources:
    NoBackground    - the live frame itself
    BlurBackground  - Gaussian-blurred copy of the live frame
    ImageBackground - still image stretched to the frame size, or a solid
                      fallback color while the image is still loading

Example:
    >>> compositor = Compositor()
    >>> mask = Mask.full(frame.width, frame.height, 0)
    >>> output = compositor.compose(frame, mask, BlurBackground())
"""

import logging
from typing import Dict, Optional, Tuple

from PIL import Image

from PB_Libs.constants import DEFAULT_BLUR_RADIUS, FALLBACK_BACKGROUND_COLOR
from PB_Libs.ImagingLib.blur_filter import apply_gaussian_blur
from PB_Libs.ImagingLib.frame_models import (
    BackgroundSource,
    BlurBackground,
    Frame,
    ImageBackground,
    Mask,
    NoBackground,
    RgbaColor,
)

logger = logging.getLogger(__name__)


class MaskMismatchError(ValueError):
    """Mask dimensions do not match the frame being composited."""


def resize_to(frame: Frame, width: int, height: int) -> Frame:
    """Stretch a frame to exactly width x height (aspect ratio is not kept)."""
    if frame.size == (width, height):
        return frame
    resized = frame.to_image().resize((width, height), Image.Resampling.BILINEAR)
    return Frame.from_image(resized)


def composite(live_frame: Frame, mask: Mask, background: Frame) -> Frame:
    """
    Composite a live frame over a background using a person mask.

    Args:
        live_frame: Camera frame
        mask: Person mask aligned to live_frame
        background: Background buffer, same size as live_frame

    Returns:
        New Frame: live pixels where mask == 1 (alpha 255), background elsewhere

    Raises:
        MaskMismatchError: If mask or background size differs from live_frame
    """
    if not mask.matches(live_frame):
        raise MaskMismatchError(
            f"Mask size {mask.size} does not match frame size {live_frame.size}"
        )
    if background.size != live_frame.size:
        raise MaskMismatchError(
            f"Background size {background.size} does not match frame size {live_frame.size}"
        )

    person = mask.person_pixels()
    output = background.pixels.copy()
    output[person, :3] = live_frame.pixels[person, :3]
    output[person, 3] = 255
    return Frame(output)


class Compositor:
    """Builds background buffers and composites live frames over them."""

    def __init__(
        self,
        blur_radius: float = DEFAULT_BLUR_RADIUS,
        fallback_color: RgbaColor = FALLBACK_BACKGROUND_COLOR,
    ) -> None:
        self.blur_radius = blur_radius
        self.fallback_color = tuple(fallback_color)
        self._resized_cache: Dict[Tuple[int, int], Tuple[Frame, Frame]] = {}

    def background_for(self, live_frame: Frame, source: BackgroundSource) -> Frame:
        """
        Produce the background buffer for a live frame.

        Returns:
            Frame with the same size as live_frame
        """
        width, height = live_frame.size

        if isinstance(source, BlurBackground):
            radius = source.radius if source.radius is not None else self.blur_radius
            return apply_gaussian_blur(live_frame, radius)

        if isinstance(source, ImageBackground):
            image = source.image
            if image is None:
                return Frame.solid(width, height, self.fallback_color)
            return self._resized(image, width, height)

        if isinstance(source, NoBackground):
            return live_frame

        raise TypeError(f"Unknown background source: {type(source)}")

    def compose(
        self,
        live_frame: Frame,
        mask: Optional[Mask],
        source: BackgroundSource,
    ) -> Optional[Frame]:
        """
        Composite a live frame over a background source.

        Returns:
            The composited Frame, or None when the mask is absent or does not
            match the frame (the caller falls back to drawing the raw frame)
        """
        if mask is None:
            return None

        if not mask.matches(live_frame):
            logger.debug(f"Dropping mask {mask.size} for frame {live_frame.size}")
            return None

        background = self.background_for(live_frame, source)
        try:
            return composite(live_frame, mask, background)
        except MaskMismatchError as exc:
            logger.warning(f"Compositing skipped: {exc}")
            return None

    def clear_cache(self) -> None:
        self._resized_cache.clear()

    def _resized(self, image: Frame, width: int, height: int) -> Frame:
        cached = self._resized_cache.get((width, height))
        if cached is not None and cached[0] is image:
            return cached[1]
        # One background is active at a time; keep only the current size.
        self._resized_cache.clear()
        resized = resize_to(image, width, height)
        self._resized_cache[(width, height)] = (image, resized)
        return resized
