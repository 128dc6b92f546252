# SPDX-License-Identifier: GPL-2.0
# Copyright (C) 2025 Bardia Moshiri <bardia@furilabs.com>

from .errors import InvalidRotation
from .models import LensFacing, Orientation

SUPPORTED_ROTATIONS = (0, 90, 180, 270)

_ORIENTATIONS = {
    0: Orientation.ROTATION_0,
    90: Orientation.ROTATION_90,
    180: Orientation.ROTATION_180,
    270: Orientation.ROTATION_270,
}

def to_orientation(degrees: int) -> Orientation:
    # bool is an int, but True is not a rotation
    if isinstance(degrees, bool) or degrees not in _ORIENTATIONS:
        raise InvalidRotation(degrees)
    return _ORIENTATIONS[degrees]

def validate_rotation(degrees: int) -> int:
    return to_orientation(degrees).value

def relative_rotation(sensor_rotation: int, display_rotation: int, lens_facing: LensFacing) -> int:
    """Clockwise rotation that makes a sensor frame upright on this display.

    The front sensor is mirrored, so the display rotation adds to the sensor
    mount angle instead of cancelling it.
    """
    if lens_facing is LensFacing.FRONT:
        return (sensor_rotation + display_rotation) % 360
    return (sensor_rotation - display_rotation) % 360

def display_rotation(width: int, height: int) -> int:
    # Phones have a portrait natural orientation
    return 0 if height >= width else 90
