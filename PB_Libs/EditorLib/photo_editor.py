"""
Photo editing session for a captured still.

A PhotoEditorSession owns the captured still, the working buffers derived
from it by crops, and the undo/redo history. Adjustments (brightness,
contrast, saturation, rotation) are parameters of a snapshot and are
re-applied to the snapshot's working buffer on every render. Crop is the one
destructive edit: it produces a new working buffer, which later snapshots
render from.

Classes:
    PhotoEditorSession: Editing state machine for one still
"""

import logging
from typing import List, Optional, Tuple

from PB_Libs.constants import (
    BRIGHTNESS_RANGE,
    CONTRAST_RANGE,
    MIN_CROP_SIZE,
    ROTATION_STEP,
    SATURATION_RANGE,
)
from PB_Libs.EditorLib.crop_tool import crop_frame, map_selection_to_buffer
from PB_Libs.EditorLib.editor_history import EditorHistory, EditorState
from PB_Libs.EditorLib.image_adjustments import render_state, rotate_frame
from PB_Libs.ImagingLib.frame_models import Frame
from PB_Libs.StoreLib.photo_store import PhotoStore, encode_png

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


def _clamp(value: float, bounds: Tuple[int, int]) -> int:
    low, high = bounds
    return int(min(max(round(value), low), high))


class PhotoEditorSession:
    """
    Edits one captured still.

    Args:
        still: The captured Frame (copied; the caller keeps its own)
        min_crop_size: Smallest crop in buffer pixels

    Example:
        >>> session = PhotoEditorSession(captured)
        >>> session.set_brightness(130)
        >>> session.rotate()
        >>> session.undo()
        >>> png = session.export_png()
    """

    def __init__(self, still: Frame, min_crop_size: int = MIN_CROP_SIZE) -> None:
        if not isinstance(still, Frame):
            raise TypeError(f"Expected Frame, got {type(still)}")
        self.min_crop_size = min_crop_size
        self.history = EditorHistory()
        self._sources: List[Frame] = [still.copy()]

    @property
    def state(self) -> EditorState:
        return self.history.current()

    @property
    def original(self) -> Frame:
        return self._sources[0]

    @property
    def working_buffer(self) -> Frame:
        """Buffer the current snapshot renders from (the latest crop, or the still)."""
        return self._sources[self.state.source_index]

    @property
    def view_size(self) -> Tuple[int, int]:
        """Pixel size of the rendered image (rotation swaps the axes)."""
        width, height = self.working_buffer.size
        if self.state.rotation % 180:
            return height, width
        return width, height

    def render(self) -> Frame:
        return render_state(self.working_buffer, self.state)

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def _push_change(self, **changes) -> EditorState:
        state = self.state
        if all(getattr(state, name) == value for name, value in changes.items()):
            return state
        return self.history.push(state.with_changes(**changes))

    def set_brightness(self, value: float) -> EditorState:
        return self._push_change(brightness=_clamp(value, BRIGHTNESS_RANGE))

    def set_contrast(self, value: float) -> EditorState:
        return self._push_change(contrast=_clamp(value, CONTRAST_RANGE))

    def set_saturation(self, value: float) -> EditorState:
        return self._push_change(saturation=_clamp(value, SATURATION_RANGE))

    def rotate(self) -> EditorState:
        """Rotate a further 90 degrees clockwise."""
        state = self.state
        return self.history.push(
            state.with_changes(rotation=(state.rotation + ROTATION_STEP) % 360)
        )

    def apply_crop(self, start: Point, end: Point, display_size: Tuple[float, float]) -> bool:
        """
        Crop to a rectangle dragged over the displayed image.

        Args:
            start: Drag start in display coordinates
            end: Drag end in display coordinates
            display_size: Size the rendered image is displayed at

        Returns:
            True if a crop was applied, False for a too-small selection
        """
        state = self.state
        view = rotate_frame(self.working_buffer, state.rotation)
        area = map_selection_to_buffer(start, end, display_size, view.size, self.min_crop_size)
        if area is None:
            logger.debug(f"Crop selection {start} -> {end} below minimum size, ignored")
            return False

        cropped = crop_frame(view, area)
        self._drop_unreachable_sources()
        self._sources.append(cropped)
        self.history.push(state.with_changes(
            rotation=0,
            crop_area=area,
            source_index=len(self._sources) - 1,
        ))
        logger.debug(f"Cropped to {area}")
        return True

    def _drop_unreachable_sources(self) -> None:
        # Buffers created after the cursor are about to be cut from history.
        reachable = {
            snapshot.source_index
            for snapshot in self.history.snapshots()[: self.history.index + 1]
        }
        while len(self._sources) > 1 and (len(self._sources) - 1) not in reachable:
            self._sources.pop()

    def undo(self) -> EditorState:
        return self.history.undo()

    def redo(self) -> EditorState:
        return self.history.redo()

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def export_png(self) -> bytes:
        return encode_png(self.render())

    def save(self, store: PhotoStore, user_id: str, photo_id: Optional[str] = None) -> str:
        """
        Hand the final image to the photo store.

        Args:
            store: Destination store
            user_id: Author recorded for a new photo
            photo_id: Existing photo to overwrite, or None to create a new one

        Returns:
            The photo id
        """
        final = self.render()
        if photo_id is not None:
            store.update(photo_id, final)
            return photo_id
        return store.save(final, user_id)
