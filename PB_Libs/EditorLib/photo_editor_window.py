import logging
from typing import Optional

from PyQt5.QtCore import QPoint, QRect, QSize, Qt
from PyQt5.QtWidgets import (
    QDialog,
    QHBoxLayout,
    QLabel,
    QMessageBox,
    QPushButton,
    QRubberBand,
    QSlider,
    QVBoxLayout,
    QWidget,
)

from PB_Libs.constants import (
    BRIGHTNESS_RANGE,
    CONTRAST_RANGE,
    DEFAULT_EDITOR_HEIGHT,
    DEFAULT_EDITOR_WIDTH,
    MIN_CROP_SIZE,
    SATURATION_RANGE,
)
from PB_Libs.EditorLib.crop_tool import CropTool
from PB_Libs.EditorLib.photo_editor import PhotoEditorSession
from PB_Libs.ImagingLib.frame_models import Frame
from PB_Libs.StoreLib.photo_store import PhotoStore
from PB_Libs.qt_image import frame_to_pixmap

logger = logging.getLogger(__name__)


class CropCanvas(QLabel):
    """Preview label that turns mouse drags into crop selections.

    Coordinates handed to the session are relative to the displayed pixmap,
    which is centered in the label and scaled to fit.
    """

    def __init__(self, min_crop_size: int = MIN_CROP_SIZE, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setAlignment(Qt.AlignCenter)
        self.setMinimumSize(560, 560)
        self.setStyleSheet("border: 1px solid #888; background: #111;")
        self.crop_enabled = False
        self.tool = CropTool(min_crop_size)
        self.on_selection = None
        self._band = QRubberBand(QRubberBand.Rectangle, self)
        self._frame: Optional[Frame] = None

    def show_frame(self, frame: Frame) -> None:
        self._frame = frame
        self.setPixmap(frame_to_pixmap(frame, self.contentsRect().size()))

    def resizeEvent(self, event) -> None:
        super().resizeEvent(event)
        if self._frame is not None:
            self.show_frame(self._frame)

    def pixmap_rect(self) -> QRect:
        pixmap = self.pixmap()
        if pixmap is None or pixmap.isNull():
            return QRect()
        area = self.contentsRect()
        x = area.x() + (area.width() - pixmap.width()) // 2
        y = area.y() + (area.height() - pixmap.height()) // 2
        return QRect(x, y, pixmap.width(), pixmap.height())

    def _to_display(self, pos: QPoint):
        rect = self.pixmap_rect()
        x = min(max(pos.x() - rect.x(), 0), rect.width())
        y = min(max(pos.y() - rect.y(), 0), rect.height())
        return float(x), float(y)

    def mousePressEvent(self, event) -> None:
        if not self.crop_enabled or self.pixmap_rect().isEmpty():
            return super().mousePressEvent(event)
        self.tool.begin(*self._to_display(event.pos()))
        self._band.setGeometry(QRect(event.pos(), QSize()))
        self._band.show()

    def mouseMoveEvent(self, event) -> None:
        if not self.tool.dragging:
            return super().mouseMoveEvent(event)
        self.tool.drag(*self._to_display(event.pos()))
        x, y, w, h = self.tool.selection
        rect = self.pixmap_rect()
        self._band.setGeometry(QRect(int(rect.x() + x), int(rect.y() + y), int(w), int(h)))

    def mouseReleaseEvent(self, event) -> None:
        if not self.tool.dragging:
            return super().mouseReleaseEvent(event)
        self.tool.drag(*self._to_display(event.pos()))
        start, end = self.tool.start, self.tool.end
        self.tool.cancel()
        self._band.hide()
        rect = self.pixmap_rect()
        if self.on_selection is not None and end is not None:
            self.on_selection(start, end, (float(rect.width()), float(rect.height())))


class PhotoEditorDialog(QDialog):
    """Crop, rotate and adjust a captured photo before saving it."""

    def __init__(
        self,
        still: Frame,
        store: Optional[PhotoStore] = None,
        user_id: str = "",
        photo_id: Optional[str] = None,
        min_crop_size: int = MIN_CROP_SIZE,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Edit Photo")
        self.resize(DEFAULT_EDITOR_WIDTH, DEFAULT_EDITOR_HEIGHT)

        self.session = PhotoEditorSession(still, min_crop_size)
        self.store = store
        self.user_id = user_id
        self.photo_id = photo_id
        self.saved_photo_id: Optional[str] = None
        self.result_frame: Optional[Frame] = None

        self._build_ui()
        self._connect_signals()
        self.refresh()

    def _build_ui(self) -> None:
        root = QHBoxLayout(self)

        self.canvas = CropCanvas(self.session.min_crop_size, self)

        controls_col = QVBoxLayout()
        history_row = QHBoxLayout()
        transform_row = QHBoxLayout()

        self.btn_undo = QPushButton("Undo")
        self.btn_redo = QPushButton("Redo")
        self.btn_rotate = QPushButton("Rotate")
        self.btn_crop = QPushButton("Crop")
        self.btn_crop.setCheckable(True)
        self.btn_save = QPushButton("Save Changes")
        self.btn_cancel = QPushButton("Cancel")

        self.slider_brightness = self._make_slider(BRIGHTNESS_RANGE)
        self.slider_contrast = self._make_slider(CONTRAST_RANGE)
        self.slider_saturation = self._make_slider(SATURATION_RANGE)
        self.label_brightness = QLabel()
        self.label_contrast = QLabel()
        self.label_saturation = QLabel()
        self.label_crop_hint = QLabel("Drag on the image to select the crop area")
        self.label_crop_hint.setVisible(False)

        history_row.addWidget(self.btn_undo)
        history_row.addWidget(self.btn_redo)
        transform_row.addWidget(self.btn_rotate)
        transform_row.addWidget(self.btn_crop)

        controls_col.addLayout(history_row)
        controls_col.addLayout(transform_row)
        controls_col.addWidget(self.label_crop_hint)
        controls_col.addWidget(self.label_brightness)
        controls_col.addWidget(self.slider_brightness)
        controls_col.addWidget(self.label_contrast)
        controls_col.addWidget(self.slider_contrast)
        controls_col.addWidget(self.label_saturation)
        controls_col.addWidget(self.slider_saturation)
        controls_col.addStretch(1)
        controls_col.addWidget(self.btn_save)
        controls_col.addWidget(self.btn_cancel)

        root.addWidget(self.canvas, stretch=3)
        root.addLayout(controls_col, stretch=1)

    def _make_slider(self, bounds) -> QSlider:
        slider = QSlider(Qt.Horizontal)
        slider.setRange(*bounds)
        slider.setTracking(False)
        return slider

    def _connect_signals(self) -> None:
        self.btn_undo.clicked.connect(self.undo)
        self.btn_redo.clicked.connect(self.redo)
        self.btn_rotate.clicked.connect(self.rotate)
        self.btn_crop.toggled.connect(self.toggle_crop)
        self.btn_save.clicked.connect(self.save)
        self.btn_cancel.clicked.connect(self.reject)
        self.slider_brightness.valueChanged.connect(self.on_brightness_changed)
        self.slider_contrast.valueChanged.connect(self.on_contrast_changed)
        self.slider_saturation.valueChanged.connect(self.on_saturation_changed)
        self.canvas.on_selection = self.on_crop_selected

    def on_brightness_changed(self, value: int) -> None:
        self.session.set_brightness(value)
        self.refresh()

    def on_contrast_changed(self, value: int) -> None:
        self.session.set_contrast(value)
        self.refresh()

    def on_saturation_changed(self, value: int) -> None:
        self.session.set_saturation(value)
        self.refresh()

    def rotate(self) -> None:
        self.session.rotate()
        self.refresh()

    def undo(self) -> None:
        self.session.undo()
        self.refresh()

    def redo(self) -> None:
        self.session.redo()
        self.refresh()

    def toggle_crop(self, enabled: bool) -> None:
        self.canvas.crop_enabled = enabled
        self.label_crop_hint.setVisible(enabled)
        if not enabled:
            self.canvas.tool.cancel()

    def on_crop_selected(self, start, end, display_size) -> None:
        if self.session.apply_crop(start, end, display_size):
            self.btn_crop.setChecked(False)
        self.refresh()

    def refresh(self) -> None:
        state = self.session.state
        for slider, value in (
            (self.slider_brightness, state.brightness),
            (self.slider_contrast, state.contrast),
            (self.slider_saturation, state.saturation),
        ):
            slider.blockSignals(True)
            slider.setValue(value)
            slider.blockSignals(False)

        self.label_brightness.setText(f"Brightness: {state.brightness}%")
        self.label_contrast.setText(f"Contrast: {state.contrast}%")
        self.label_saturation.setText(f"Saturation: {state.saturation}%")
        self.btn_undo.setEnabled(self.session.history.can_undo)
        self.btn_redo.setEnabled(self.session.history.can_redo)
        self.canvas.show_frame(self.session.render())

    def save(self) -> None:
        self.result_frame = self.session.render()
        if self.store is not None:
            try:
                self.saved_photo_id = self.session.save(self.store, self.user_id, self.photo_id)
            except (OSError, KeyError) as exc:
                logger.error(f"Failed to save photo: {exc}")
                QMessageBox.critical(self, "Save Failed", f"Could not save photo:\n{exc}")
                return
        self.accept()
