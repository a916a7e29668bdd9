"""
Booth configuration for Photo Booth.

Settings are stored as a small JSON document next to the booth's data
directory. Unknown keys are ignored and missing keys fall back to the
defaults in PB_Libs.constants, so older config files keep loading.

Classes:
    BoothConfig: Runtime settings for capture, segmentation and editing

Functions:
    load_config: Load a BoothConfig from a JSON file (defaults if missing)
    save_config: Write a BoothConfig to a JSON file
    get_data_dir: Resolve (and create) the booth's data directory
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from PB_Libs.constants import (
    DATA_DIR_NAME,
    DEFAULT_BLUR_RADIUS,
    DEFAULT_CAMERA_INDEX,
    DEFAULT_CAPTURE_HEIGHT,
    DEFAULT_CAPTURE_WIDTH,
    DEFAULT_MASK_REFINE_ITERATIONS,
    DEFAULT_REFRESH_RATE_HZ,
    DEFAULT_SEGMENTATION_MODEL,
    DEFAULT_SEGMENTATION_THRESHOLD,
    FALLBACK_BACKGROUND_COLOR,
    MIN_CROP_SIZE,
)

logger = logging.getLogger(__name__)


@dataclass
class BoothConfig:
    """Runtime settings.

    Attributes:
        camera_index: OpenCV device index of the camera
        capture_width: Requested capture width (the camera may pick another)
        capture_height: Requested capture height
        refresh_rate_hz: Display refresh used when the screen does not report one
        blur_radius: Radius of the "blur room" background
        fallback_color: Background color shown while an image background loads
        segmentation_enabled: Load the person segmentation engine at startup
        segmentation_threshold: Confidence above which a pixel counts as person
        segmentation_model: MediaPipe selfie model (0 = general, 1 = landscape)
        mask_refine_iterations: Mask cleanup strength (0 disables cleanup)
        min_crop_size: Smallest crop (buffer pixels) that is not treated as a click
        data_dir: Directory holding photos, backgrounds and the config file
        user_id: Identifier recorded as the author of saved photos
    """
    camera_index: int = DEFAULT_CAMERA_INDEX
    capture_width: int = DEFAULT_CAPTURE_WIDTH
    capture_height: int = DEFAULT_CAPTURE_HEIGHT
    refresh_rate_hz: float = DEFAULT_REFRESH_RATE_HZ
    blur_radius: float = DEFAULT_BLUR_RADIUS
    fallback_color: Tuple[int, int, int, int] = field(default=FALLBACK_BACKGROUND_COLOR)
    segmentation_enabled: bool = True
    segmentation_threshold: float = DEFAULT_SEGMENTATION_THRESHOLD
    segmentation_model: int = DEFAULT_SEGMENTATION_MODEL
    mask_refine_iterations: int = DEFAULT_MASK_REFINE_ITERATIONS
    min_crop_size: int = MIN_CROP_SIZE
    data_dir: Optional[str] = None
    user_id: str = "local-user"

    def __post_init__(self):
        self.fallback_color = tuple(int(v) for v in self.fallback_color)
        if len(self.fallback_color) != 4:
            raise ValueError(f"fallback_color must have 4 channels, got {self.fallback_color}")
        if self.capture_width <= 0 or self.capture_height <= 0:
            raise ValueError(
                f"Capture size must be positive, got {self.capture_width}x{self.capture_height}"
            )
        if not (0.0 < self.segmentation_threshold < 1.0):
            raise ValueError(
                f"segmentation_threshold must be 0 < t < 1, got {self.segmentation_threshold}"
            )
        if self.mask_refine_iterations < 0:
            raise ValueError(f"mask_refine_iterations must be >= 0, got {self.mask_refine_iterations}")
        if self.refresh_rate_hz <= 0:
            raise ValueError(f"refresh_rate_hz must be > 0, got {self.refresh_rate_hz}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data = asdict(self)
        data["fallback_color"] = list(self.fallback_color)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BoothConfig":
        """Create from dictionary."""
        filtered = {k: v for k, v in data.items()
                   if k in cls.__dataclass_fields__}
        return cls(**filtered)


def get_data_dir(config: BoothConfig, base_dir: Optional[Path] = None) -> Path:
    """
    Resolve the data directory, creating it if needed.

    Args:
        config: Booth configuration (data_dir wins when set)
        base_dir: Directory used when data_dir is unset (default: home directory)
    """
    if config.data_dir:
        data_dir = Path(config.data_dir)
    else:
        data_dir = (base_dir or Path.home()) / DATA_DIR_NAME
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def load_config(config_path: Path) -> BoothConfig:
    """
    Load configuration from a JSON file.

    Args:
        config_path: Path to the config file

    Returns:
        The loaded BoothConfig, or defaults if the file does not exist

    Raises:
        ValueError: If the file is not valid JSON or holds invalid values
    """
    if not config_path.exists():
        logger.info(f"No config at {config_path}, using defaults")
        return BoothConfig()

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid config file {config_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a JSON object: {config_path}")

    try:
        return BoothConfig.from_dict(data)
    except TypeError as exc:
        raise ValueError(f"Invalid config values in {config_path}: {exc}") from exc


def save_config(config: BoothConfig, config_path: Path) -> None:
    """
    Save configuration to a JSON file.

    Raises:
        OSError: If the file cannot be written
    """
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(config.to_dict(), indent=2), encoding="utf-8")
