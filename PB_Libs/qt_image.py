"""
Conversions between Frames and Qt image types.

Functions:
    frame_to_qimage: Wrap a Frame's pixels in a QImage (deep copy)
    frame_to_pixmap: Frame -> QPixmap, optionally scaled to fit a size
"""

from typing import Optional

from PyQt5.QtCore import QSize, Qt
from PyQt5.QtGui import QImage, QPixmap

from PB_Libs.ImagingLib.frame_models import Frame


def frame_to_qimage(frame: Frame) -> QImage:
    data = frame.tobytes()
    image = QImage(data, frame.width, frame.height, frame.width * 4, QImage.Format_RGBA8888)
    # QImage does not own `data`; copy before it goes out of scope
    return image.copy()


def frame_to_pixmap(frame: Frame, fit: Optional[QSize] = None) -> QPixmap:
    pixmap = QPixmap.fromImage(frame_to_qimage(frame))
    if fit is None:
        return pixmap
    return pixmap.scaled(
        fit,
        Qt.AspectRatioMode.KeepAspectRatio,
        Qt.TransformationMode.SmoothTransformation,
    )
