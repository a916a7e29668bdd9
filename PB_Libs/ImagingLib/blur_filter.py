"""
Background blur for the "blurred room" background.

The live frame itself is blurred and placed behind the person, so the blur
has to run once per composited frame. Pillow's GaussianBlur is used for it.

Example:
    >>> blurred = apply_gaussian_blur(frame, radius=14)
"""

from PIL import ImageFilter

from PB_Libs.constants import DEFAULT_BLUR_RADIUS
from PB_Libs.ImagingLib.frame_models import Frame

MAX_BLUR_RADIUS = 100


def apply_gaussian_blur(frame: Frame, radius: float = DEFAULT_BLUR_RADIUS) -> Frame:
    """
    Return a Gaussian-blurred copy of a frame.

    Args:
        frame: Source Frame (left unchanged)
        radius: Blur radius in pixels, 0 < radius <= 100

    Returns:
        New Frame of the same size

    Raises:
        TypeError: If frame is not a Frame
        ValueError: If radius is out of range
    """
    if not isinstance(frame, Frame):
        raise TypeError(f"Expected Frame, got {type(frame)}")
    if not 0 < radius <= MAX_BLUR_RADIUS:
        raise ValueError(f"Blur radius must be in (0, {MAX_BLUR_RADIUS}], got {radius}")

    return Frame.from_image(frame.to_image().filter(ImageFilter.GaussianBlur(radius=radius)))
