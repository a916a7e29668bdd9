"""
EditorLib - Post-capture photo editing

This module provides the editor snapshots and history, the crop tool,
the adjustment renderer and the editing session for a captured still.
"""

from PB_Libs.EditorLib.editor_history import (
    DEFAULT_EDITOR_STATE,
    CropArea,
    EditorHistory,
    EditorState,
)
from PB_Libs.EditorLib.crop_tool import CropTool, crop_frame, map_selection_to_buffer
from PB_Libs.EditorLib.image_adjustments import render_state, rotate_frame
from PB_Libs.EditorLib.photo_editor import PhotoEditorSession

__all__ = [
    "DEFAULT_EDITOR_STATE",
    "CropArea",
    "EditorHistory",
    "EditorState",
    "CropTool",
    "crop_frame",
    "map_selection_to_buffer",
    "render_state",
    "rotate_frame",
    "PhotoEditorSession",
]
