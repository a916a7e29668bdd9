import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from PyQt5.QtWidgets import QApplication, QMessageBox

from PB_Libs.config import get_data_dir, load_config
from PB_Libs.constants import CONFIG_FILE_NAME
from PB_Libs.CaptureLib.booth_window import PhotoBoothWindow
from PB_Libs.CaptureLib.segmentation import SegmentationAdapter, load_segmentation_engine
from PB_Libs.StoreLib.photo_store import BackgroundStore, PhotoStore

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Photo Booth")
    parser.add_argument("--config", type=Path, default=None,
                        help=f"Config file (default: <data dir>/{CONFIG_FILE_NAME})")
    parser.add_argument("--data-dir", type=Path, default=None,
                        help="Directory for photos and backgrounds")
    parser.add_argument("--no-segmentation", action="store_true",
                        help="Do not load the person segmentation engine")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = QApplication(sys.argv)

    base_dir = args.data_dir
    config_path = args.config or (base_dir or Path.home()) / CONFIG_FILE_NAME
    try:
        config = load_config(config_path)
    except ValueError as exc:
        QMessageBox.critical(None, "Invalid Configuration", str(exc))
        sys.exit(1)

    if args.data_dir is not None:
        config.data_dir = str(args.data_dir)
    if args.no_segmentation:
        config.segmentation_enabled = False

    data_dir = get_data_dir(config)
    logger.info(f"Using data directory {data_dir}")

    segmenter = SegmentationAdapter(load_segmentation_engine(config))
    window = PhotoBoothWindow(
        config,
        segmenter,
        PhotoStore(data_dir),
        BackgroundStore(data_dir),
    )
    window.show()
    sys.exit(app.exec_())


if __name__ == "__main__":
    main()
