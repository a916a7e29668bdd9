"""
Editor snapshots and linear undo/redo history.

Every user-visible change in the photo editor produces a new immutable
EditorState. EditorHistory keeps them in order with a cursor:

    push(state)  drop everything after the cursor, append, move to the end
    undo()       step back (no-op at the first snapshot)
    redo()       step forward (no-op at the last snapshot)
    current()    snapshot at the cursor

The first snapshot is always the identity state, so undoing everything
returns to the photo as captured.
"""

from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from PB_Libs.constants import (
    BRIGHTNESS_RANGE,
    CONTRAST_RANGE,
    DEFAULT_ADJUSTMENT,
    SATURATION_RANGE,
    VALID_ROTATIONS,
)


@dataclass(frozen=True)
class CropArea:
    """Crop rectangle in buffer pixel coordinates."""
    x: int
    y: int
    w: int
    h: int

    def __post_init__(self):
        if self.x < 0 or self.y < 0:
            raise ValueError(f"Crop origin must be non-negative, got ({self.x}, {self.y})")
        if self.w <= 0 or self.h <= 0:
            raise ValueError(f"Crop size must be positive, got {self.w}x{self.h}")

    @property
    def box(self) -> Tuple[int, int, int, int]:
        """(left, top, right, bottom)"""
        return self.x, self.y, self.x + self.w, self.y + self.h


def _check_range(name: str, value: float, bounds: Tuple[int, int]) -> None:
    low, high = bounds
    if not (low <= value <= high):
        raise ValueError(f"{name} must be {low}-{high}, got {value}")


@dataclass(frozen=True)
class EditorState:
    """One point in edit history.

    Attributes:
        brightness: Brightness percent (20-200)
        contrast: Contrast percent (20-200)
        saturation: Saturation percent (0-200)
        rotation: Clockwise rotation in degrees (0, 90, 180, 270)
        crop_area: Last crop applied, in the pixel space it was selected in
        source_index: Working buffer this snapshot renders from
    """
    brightness: int = DEFAULT_ADJUSTMENT
    contrast: int = DEFAULT_ADJUSTMENT
    saturation: int = DEFAULT_ADJUSTMENT
    rotation: int = 0
    crop_area: Optional[CropArea] = None
    source_index: int = 0

    def __post_init__(self):
        _check_range("brightness", self.brightness, BRIGHTNESS_RANGE)
        _check_range("contrast", self.contrast, CONTRAST_RANGE)
        _check_range("saturation", self.saturation, SATURATION_RANGE)
        if self.rotation not in VALID_ROTATIONS:
            raise ValueError(f"rotation must be one of {VALID_ROTATIONS}, got {self.rotation}")
        if self.source_index < 0:
            raise ValueError(f"source_index must be >= 0, got {self.source_index}")

    def with_changes(self, **changes) -> "EditorState":
        return replace(self, **changes)


DEFAULT_EDITOR_STATE = EditorState()


class EditorHistory:
    """Ordered snapshots with a cursor."""

    def __init__(self, initial: EditorState = DEFAULT_EDITOR_STATE) -> None:
        self._states: List[EditorState] = [initial]
        self._index = 0

    @property
    def index(self) -> int:
        return self._index

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._states) - 1

    def __len__(self) -> int:
        return len(self._states)

    def snapshots(self) -> List[EditorState]:
        return list(self._states)

    def current(self) -> EditorState:
        return self._states[self._index]

    def push(self, state: EditorState) -> EditorState:
        if not isinstance(state, EditorState):
            raise TypeError(f"Expected EditorState, got {type(state)}")
        del self._states[self._index + 1:]
        self._states.append(state)
        self._index = len(self._states) - 1
        return state

    def undo(self) -> EditorState:
        if self._index > 0:
            self._index -= 1
        return self.current()

    def redo(self) -> EditorState:
        if self._index < len(self._states) - 1:
            self._index += 1
        return self.current()

    def referenced_sources(self) -> set:
        return {state.source_index for state in self._states}
