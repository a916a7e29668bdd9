import logging
import time
from pathlib import Path
from typing import Dict, List, Optional

from PyQt5.QtCore import Qt
from PyQt5.QtWidgets import (
    QComboBox,
    QDialog,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from PB_Libs.config import BoothConfig
from PB_Libs.constants import (
    DEFAULT_WINDOW_HEIGHT,
    DEFAULT_WINDOW_WIDTH,
    DOWNLOAD_FILE_PREFIX,
    VIEWFINDER_MIN_HEIGHT,
    VIEWFINDER_MIN_WIDTH,
)
from PB_Libs.CaptureLib.frame_scheduler import QtFrameScheduler
from PB_Libs.CaptureLib.render_loop import RenderLoop, RenderParams
from PB_Libs.CaptureLib.segmentation import SegmentationAdapter
from PB_Libs.CaptureLib.video_source import CameraUnavailableError, OpenCVCamera
from PB_Libs.EditorLib.photo_editor_window import PhotoEditorDialog
from PB_Libs.ImagingLib.compositor import Compositor
from PB_Libs.ImagingLib.filter_engine import get_filter, list_filters
from PB_Libs.ImagingLib.frame_models import (
    BackgroundSource,
    BlurBackground,
    Frame,
    ImageBackground,
    NoBackground,
)
from PB_Libs.StoreLib.photo_store import (
    BackgroundRecord,
    BackgroundStore,
    PhotoStore,
    encode_png,
)
from PB_Libs.qt_image import frame_to_pixmap

logger = logging.getLogger(__name__)

BACKGROUND_NONE = "None"
BACKGROUND_BLUR = "Blur"


class PhotoBoothWindow(QMainWindow):
    def __init__(
        self,
        config: BoothConfig,
        segmenter: SegmentationAdapter,
        photo_store: PhotoStore,
        background_store: BackgroundStore,
    ) -> None:
        super().__init__()
        self.setWindowTitle("Photo Booth")
        self.resize(DEFAULT_WINDOW_WIDTH, DEFAULT_WINDOW_HEIGHT)

        self.config = config
        self.photo_store = photo_store
        self.background_store = background_store
        self.backgrounds: List[BackgroundRecord] = []
        self._loaded_backgrounds: Dict[str, ImageBackground] = {}
        self.captured: Optional[Frame] = None

        self.render_loop = RenderLoop(
            segmenter,
            QtFrameScheduler(self, fallback_rate_hz=config.refresh_rate_hz),
            self.show_frame,
            Compositor(config.blur_radius, config.fallback_color),
        )

        self._build_ui()
        self._connect_signals()
        self.populate_backgrounds()
        self.start_camera()

    def _build_ui(self) -> None:
        central = QWidget(self)
        self.setCentralWidget(central)

        root = QVBoxLayout(central)
        selectors_row = QHBoxLayout()
        actions_row = QHBoxLayout()
        error_row = QHBoxLayout()

        self.viewfinder = QLabel("Starting camera...")
        self.viewfinder.setAlignment(Qt.AlignCenter)
        self.viewfinder.setMinimumSize(VIEWFINDER_MIN_WIDTH, VIEWFINDER_MIN_HEIGHT)
        self.viewfinder.setStyleSheet("border: 1px solid #888; background: #000;")

        self.label_error = QLabel()
        self.label_error.setStyleSheet("color: #c0392b;")
        self.btn_retry = QPushButton("Try Again")
        error_row.addWidget(self.label_error, stretch=1)
        error_row.addWidget(self.btn_retry)
        self.error_panel = QWidget()
        self.error_panel.setLayout(error_row)
        self.error_panel.setVisible(False)

        self.combo_background = QComboBox()
        self.combo_filter = QComboBox()
        for descriptor in list_filters():
            self.combo_filter.addItem(descriptor.name)

        selectors_row.addWidget(QLabel("Background"))
        selectors_row.addWidget(self.combo_background, stretch=1)
        selectors_row.addWidget(QLabel("Filter"))
        selectors_row.addWidget(self.combo_filter, stretch=1)

        self.btn_capture = QPushButton("Capture")
        self.btn_retake = QPushButton("Retake")
        self.btn_download = QPushButton("Download")
        self.btn_edit = QPushButton("Edit")
        self.btn_save = QPushButton("Save to Gallery")

        for button in (self.btn_capture, self.btn_retake, self.btn_download, self.btn_edit, self.btn_save):
            actions_row.addWidget(button)

        root.addWidget(self.viewfinder, stretch=1)
        root.addWidget(self.error_panel)
        root.addLayout(selectors_row)
        root.addLayout(actions_row)
        self._update_actions()

    def _connect_signals(self) -> None:
        self.btn_retry.clicked.connect(self.start_camera)
        self.combo_background.currentIndexChanged.connect(self.on_background_selected)
        self.combo_filter.currentTextChanged.connect(self.on_filter_selected)
        self.btn_capture.clicked.connect(self.capture_photo)
        self.btn_retake.clicked.connect(self.retake)
        self.btn_download.clicked.connect(self.download_photo)
        self.btn_edit.clicked.connect(self.edit_photo)
        self.btn_save.clicked.connect(self.save_photo)

    # ------------------------------------------------------------------
    # Camera / render loop
    # ------------------------------------------------------------------

    def start_camera(self) -> None:
        self.error_panel.setVisible(False)
        camera = OpenCVCamera(
            self.config.camera_index,
            self.config.capture_width,
            self.config.capture_height,
        )
        params = RenderParams(
            background=self.current_background(),
            filter=get_filter(self.combo_filter.currentText()),
        )
        try:
            self.render_loop.start(camera, params)
        except CameraUnavailableError as exc:
            logger.warning(f"Camera unavailable: {exc}")
            self.label_error.setText(str(exc))
            self.error_panel.setVisible(True)
            self.viewfinder.setText("Camera unavailable")
        self._update_actions()

    def show_frame(self, frame: Frame) -> None:
        self.viewfinder.setPixmap(frame_to_pixmap(frame, self.viewfinder.contentsRect().size()))

    def populate_backgrounds(self) -> None:
        try:
            self.backgrounds = self.background_store.get_active()
        except ValueError as exc:
            logger.warning(f"Could not read backgrounds: {exc}")
            self.backgrounds = []

        self.combo_background.blockSignals(True)
        self.combo_background.clear()
        self.combo_background.addItem(BACKGROUND_NONE)
        self.combo_background.addItem(BACKGROUND_BLUR)
        for record in self.backgrounds:
            self.combo_background.addItem(record.name)
        self.combo_background.blockSignals(False)

    def current_background(self) -> BackgroundSource:
        index = self.combo_background.currentIndex()
        if index <= 0:
            return NoBackground()
        if index == 1:
            return BlurBackground()

        record = self.backgrounds[index - 2]
        background = self._loaded_backgrounds.get(record.id)
        if background is None or background.load_failed:
            background = ImageBackground(self.background_store.load(record), record.name)
            self._loaded_backgrounds[record.id] = background
        return background

    def on_background_selected(self, index: int) -> None:
        self.render_loop.update_params(background=self.current_background())

    def on_filter_selected(self, name: str) -> None:
        self.render_loop.update_params(filter_descriptor=get_filter(name))

    # ------------------------------------------------------------------
    # Captured photo
    # ------------------------------------------------------------------

    def capture_photo(self) -> None:
        frame = self.render_loop.capture()
        if frame is None:
            return
        self.captured = frame
        self.render_loop.stop()
        self.show_frame(frame)
        self._update_actions()

    def retake(self) -> None:
        self.captured = None
        self.start_camera()

    def download_photo(self) -> None:
        if self.captured is None:
            return

        default_name = f"{DOWNLOAD_FILE_PREFIX}{int(time.time() * 1000)}.png"
        save_path, _ = QFileDialog.getSaveFileName(
            self,
            "Download Photo",
            default_name,
            "PNG Images (*.png)",
        )
        if not save_path:
            return

        try:
            Path(save_path).write_bytes(encode_png(self.captured))
        except OSError as exc:
            QMessageBox.critical(self, "Download Failed", f"Could not write file:\n{exc}")

    def edit_photo(self) -> None:
        if self.captured is None:
            return

        dialog = PhotoEditorDialog(
            self.captured, min_crop_size=self.config.min_crop_size, parent=self
        )
        if dialog.exec_() == QDialog.Accepted and dialog.result_frame is not None:
            self.captured = dialog.result_frame
            self.show_frame(self.captured)

    def save_photo(self) -> None:
        if self.captured is None:
            return

        try:
            self.photo_store.save(self.captured, self.config.user_id)
        except OSError as exc:
            logger.error(f"Failed to save photo: {exc}")
            QMessageBox.critical(self, "Save Failed", f"Could not save photo:\n{exc}")
            return

        self._show_info("Saved", "Photo saved to your gallery.")
        self.retake()

    def _update_actions(self) -> None:
        has_photo = self.captured is not None
        self.btn_capture.setEnabled(not has_photo and self.render_loop.running)
        for button in (self.btn_retake, self.btn_download, self.btn_edit, self.btn_save):
            button.setEnabled(has_photo)

    def _show_info(self, title: str, message: str) -> None:
        QMessageBox.information(self, title, message)

    def closeEvent(self, event) -> None:
        self.render_loop.close()
        self.background_store.close()
        super().closeEvent(event)
