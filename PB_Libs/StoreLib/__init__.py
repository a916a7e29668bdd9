"""
StoreLib - Persistence for finished photos and selectable backgrounds

Functions and classes for handing final images to storage and loading
background images for the live viewfinder.
"""

from PB_Libs.StoreLib.photo_store import (
    BackgroundRecord,
    BackgroundStore,
    PhotoRecord,
    PhotoStore,
    decode_image,
    encode_png,
    load_image_file,
)

__all__ = [
    "BackgroundRecord",
    "BackgroundStore",
    "PhotoRecord",
    "PhotoStore",
    "decode_image",
    "encode_png",
    "load_image_file",
]
