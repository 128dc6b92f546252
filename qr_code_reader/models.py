# SPDX-License-Identifier: GPL-2.0
# Copyright (C) 2025 Bardia Moshiri <bardia@furilabs.com>

import logging
import threading
from enum import Enum
from typing import List, NamedTuple, Optional, Tuple

from .aspect_ratio import AspectRatio

logger = logging.getLogger(__name__)

FORMAT_QR_CODE = 'QRCODE'

class LensFacing(Enum):
    FRONT = 'front'
    BACK = 'back'

    def opposite(self) -> 'LensFacing':
        return LensFacing.BACK if self is LensFacing.FRONT else LensFacing.FRONT

class Orientation(Enum):
    ROTATION_0 = 0
    ROTATION_90 = 90
    ROTATION_180 = 180
    ROTATION_270 = 270

class CameraConfiguration(NamedTuple):
    lens_facing: LensFacing
    aspect_ratio: AspectRatio
    rotation_degrees: int

class Frame:
    """One analysis frame, owned by whoever currently holds it.

    release() hands the buffer back to the capture pipeline and must happen
    exactly once; later calls are ignored.
    """

    def __init__(self, pixels, rotation_degrees: int):
        self.pixels = pixels
        self.rotation_degrees = rotation_degrees
        self._released = False
        self._release_lock = threading.Lock()

    @property
    def released(self) -> bool:
        return self._released

    def release(self):
        with self._release_lock:
            if self._released:
                logger.warning("Frame released more than once")
                return
            self._released = True
        self._on_release()

    def _on_release(self):
        self.pixels = None

class InputImage(NamedTuple):
    pixels: object
    orientation: Orientation

class Barcode:
    def __init__(self, raw_value: Optional[str], format_type: str = FORMAT_QR_CODE,
                 bbox: Optional[Tuple[int, int, int, int]] = None):
        self.raw_value = raw_value
        self.format_type = format_type
        self.bbox = bbox

    def __repr__(self):
        return f"Barcode({self.raw_value!r}, {self.format_type!r})"

class DecodeSuccess(NamedTuple):
    barcodes: List[Barcode]

class DecodeFailure(NamedTuple):
    error: BaseException

class CameraHandle:
    def __init__(self, camera, configuration: CameraConfiguration, preview_surface=None):
        self.camera = camera
        self.configuration = configuration
        self.preview_surface = preview_surface

    def __repr__(self):
        return f"CameraHandle({self.camera}, {self.configuration})"
