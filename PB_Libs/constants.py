"""
Constants and configuration values for Photo Booth.

This module centralizes all constant values, magic numbers, and
configuration settings used throughout the application.
"""

# Camera capture
DEFAULT_CAMERA_INDEX = 0
DEFAULT_CAPTURE_WIDTH = 1280
DEFAULT_CAPTURE_HEIGHT = 720

# Display pacing
DEFAULT_REFRESH_RATE_HZ = 60.0

# Background replacement
DEFAULT_BLUR_RADIUS = 14.0
FALLBACK_BACKGROUND_COLOR = (26, 26, 46, 255)  # #1a1a2e
DEFAULT_SEGMENTATION_THRESHOLD = 0.7
DEFAULT_SEGMENTATION_MODEL = 1
DEFAULT_MASK_REFINE_ITERATIONS = 1

# Mask values
MASK_BACKGROUND = 0
MASK_PERSON = 1

# Editor ranges (percent / degrees)
BRIGHTNESS_RANGE = (20, 200)
CONTRAST_RANGE = (20, 200)
SATURATION_RANGE = (0, 200)
ROTATION_STEP = 90
VALID_ROTATIONS = (0, 90, 180, 270)
DEFAULT_ADJUSTMENT = 100

# Crop
MIN_CROP_SIZE = 10

# Filter operation kinds
OP_GRAYSCALE = "grayscale"
OP_SEPIA = "sepia"
OP_SATURATE = "saturate"
OP_HUE_ROTATE = "hue_rotate"
OP_BRIGHTNESS = "brightness"
OP_CONTRAST = "contrast"
FILTER_OPERATION_KINDS = (
    OP_GRAYSCALE,
    OP_SEPIA,
    OP_SATURATE,
    OP_HUE_ROTATE,
    OP_BRIGHTNESS,
    OP_CONTRAST,
)

# Filter catalog: name -> ordered (operation, amount) pairs
FILTER_NONE = "None"
FILTER_CATALOG = (
    (FILTER_NONE, ()),
    ("Sepia", ((OP_SEPIA, 1.0),)),
    ("B&W", ((OP_GRAYSCALE, 1.0),)),
    ("Warm", ((OP_SEPIA, 0.4), (OP_SATURATE, 1.5))),
    ("Cool", ((OP_SATURATE, 0.8), (OP_HUE_ROTATE, 20.0))),
    ("Vintage", ((OP_SEPIA, 0.5), (OP_CONTRAST, 1.2), (OP_BRIGHTNESS, 0.9))),
    ("Bright", ((OP_BRIGHTNESS, 1.3), (OP_CONTRAST, 1.1))),
    ("Dramatic", ((OP_CONTRAST, 1.5), (OP_BRIGHTNESS, 0.85))),
)

# Storage
DATA_DIR_NAME = "PhotoBoothData"
PHOTOS_DIR_NAME = "photos"
BACKGROUNDS_DIR_NAME = "backgrounds"
PHOTO_INDEX_FILE = "photos.json"
BACKGROUND_INDEX_FILE = "backgrounds.json"
CONFIG_FILE_NAME = "booth_config.json"
DEFAULT_OUTPUT_FORMAT = "PNG"
DOWNLOAD_FILE_PREFIX = "photobooth-"

# Record field names
FIELD_ID = "id"
FIELD_IMAGE_PATH = "image_path"
FIELD_IS_PUBLIC = "is_public"
FIELD_CREATED_DATE = "created_date"
FIELD_CREATED_BY = "created_by"
FIELD_NAME = "name"
FIELD_IS_ACTIVE = "is_active"

# UI constants
DEFAULT_WINDOW_WIDTH = 1100
DEFAULT_WINDOW_HEIGHT = 820
DEFAULT_EDITOR_WIDTH = 1000
DEFAULT_EDITOR_HEIGHT = 640
VIEWFINDER_MIN_WIDTH = 640
VIEWFINDER_MIN_HEIGHT = 360
