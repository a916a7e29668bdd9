"""
PB_Libs - Photo Booth Library Modules

This package contains core functionality for the Photo Booth project,
organized into specialized sub-packages:

- ImagingLib: Frame models, blur, filter engine and compositor
- CaptureLib: Camera sources, segmentation adapter and the live render loop
- EditorLib: Editor history, crop tool and the photo editing session
- StoreLib: Photo and background persistence
"""

__version__ = "0.1.0"
