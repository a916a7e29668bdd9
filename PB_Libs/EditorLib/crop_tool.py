"""
Interactive crop selection.

The user drags a rectangle over the displayed (scaled) image. The drag is
recorded in display coordinates and mapped into buffer pixels with an
independent scale factor per axis (buffer size / displayed size). Selections
smaller than the minimum size in buffer pixels are treated as accidental
clicks and dropped.

Functions:
    map_selection_to_buffer: Convert a display-space drag into a CropArea
    crop_frame: Extract a crop area into a standalone Frame

Classes:
    CropTool: Tracks one drag gesture
"""

from typing import Optional, Tuple

from PB_Libs.constants import MIN_CROP_SIZE
from PB_Libs.EditorLib.editor_history import CropArea
from PB_Libs.ImagingLib.frame_models import Frame

Point = Tuple[float, float]
Size = Tuple[float, float]


def map_selection_to_buffer(
    start: Point,
    end: Point,
    display_size: Size,
    buffer_size: Tuple[int, int],
    min_size: int = MIN_CROP_SIZE,
) -> Optional[CropArea]:
    """
    Map a drag from displayed coordinates to buffer pixels.

    Args:
        start: Drag start (x, y) in display coordinates
        end: Drag end (x, y) in display coordinates
        display_size: (width, height) the buffer is displayed at
        buffer_size: (width, height) of the underlying buffer
        min_size: Minimum crop width/height in buffer pixels

    Returns:
        CropArea clamped to the buffer, or None if the selection is too small

    Raises:
        ValueError: If a display or buffer dimension is not positive
    """
    display_w, display_h = display_size
    buffer_w, buffer_h = buffer_size
    if display_w <= 0 or display_h <= 0:
        raise ValueError(f"Display size must be positive, got {display_size}")
    if buffer_w <= 0 or buffer_h <= 0:
        raise ValueError(f"Buffer size must be positive, got {buffer_size}")

    scale_x = buffer_w / display_w
    scale_y = buffer_h / display_h

    x = min(start[0], end[0]) * scale_x
    y = min(start[1], end[1]) * scale_y
    w = abs(end[0] - start[0]) * scale_x
    h = abs(end[1] - start[1]) * scale_y

    if w < min_size or h < min_size:
        return None

    left = min(max(int(x), 0), buffer_w - 1)
    top = min(max(int(y), 0), buffer_h - 1)
    right = min(int(x + w), buffer_w)
    bottom = min(int(y + h), buffer_h)

    # Clamping to the buffer can shrink a selection that ran past the edge.
    if right - left < min_size or bottom - top < min_size:
        return None
    return CropArea(left, top, right - left, bottom - top)


def crop_frame(frame: Frame, area: CropArea) -> Frame:
    """
    Extract a region into a new standalone Frame.

    Raises:
        ValueError: If the area lies outside the frame
    """
    left, top, right, bottom = area.box
    if right > frame.width or bottom > frame.height:
        raise ValueError(f"Crop {area} exceeds frame size {frame.size}")
    return Frame(frame.pixels[top:bottom, left:right].copy())


class CropTool:
    """
    Tracks a crop drag gesture.

    Example:
        >>> tool = CropTool()
        >>> tool.begin(12, 30)
        >>> tool.drag(200, 180)
        >>> area = tool.finish(display_size=(400, 300), buffer_size=(1280, 960))
    """

    def __init__(self, min_size: int = MIN_CROP_SIZE) -> None:
        self.min_size = min_size
        self._start: Optional[Point] = None
        self._end: Optional[Point] = None

    @property
    def dragging(self) -> bool:
        return self._start is not None

    @property
    def start(self) -> Optional[Point]:
        return self._start

    @property
    def end(self) -> Optional[Point]:
        return self._end

    @property
    def selection(self) -> Optional[Tuple[float, float, float, float]]:
        """Current (x, y, w, h) in display coordinates, for drawing an overlay."""
        if self._start is None or self._end is None:
            return None
        x0, y0 = self._start
        x1, y1 = self._end
        return min(x0, x1), min(y0, y1), abs(x1 - x0), abs(y1 - y0)

    def begin(self, x: float, y: float) -> None:
        self._start = (x, y)
        self._end = None

    def drag(self, x: float, y: float) -> None:
        if self._start is None:
            return
        self._end = (x, y)

    def cancel(self) -> None:
        self._start = None
        self._end = None

    def finish(self, display_size: Size, buffer_size: Tuple[int, int]) -> Optional[CropArea]:
        """End the gesture; returns the buffer-space crop or None."""
        start, end = self._start, self._end
        self.cancel()
        if start is None or end is None:
            return None
        return map_selection_to_buffer(start, end, display_size, buffer_size, self.min_size)
