"""Tests for rotation to orientation mapping."""

import pytest

from qr_code_reader.errors import InvalidRotation
from qr_code_reader.models import LensFacing, Orientation
from qr_code_reader.rotation import (
    display_rotation, relative_rotation, to_orientation, validate_rotation
)


class TestToOrientation:

    @pytest.mark.parametrize("degrees,orientation", [
        (0, Orientation.ROTATION_0),
        (90, Orientation.ROTATION_90),
        (180, Orientation.ROTATION_180),
        (270, Orientation.ROTATION_270),
    ])
    def test_supported_rotations(self, degrees, orientation):
        assert to_orientation(degrees) is orientation

    def test_mapping_is_one_to_one(self):
        orientations = {to_orientation(degrees) for degrees in (0, 90, 180, 270)}
        assert orientations == set(Orientation)

    @pytest.mark.parametrize("degrees", [-90, 45, 360, 1, True, None, "90"])
    def test_rejects_anything_else(self, degrees):
        with pytest.raises(InvalidRotation) as exc_info:
            to_orientation(degrees)
        assert str(exc_info.value) == "Rotation must be 0, 90, 180, or 270."

    def test_invalid_rotation_is_a_value_error(self):
        with pytest.raises(ValueError):
            validate_rotation(45)

    def test_validate_returns_degrees(self):
        assert validate_rotation(270) == 270


class TestRelativeRotation:

    def test_front_lens_adds_display_rotation(self):
        assert relative_rotation(270, 90, LensFacing.FRONT) == 0

    def test_back_lens_subtracts_display_rotation(self):
        assert relative_rotation(90, 180, LensFacing.BACK) == 270

    def test_unrotated_display_keeps_sensor_rotation(self):
        assert relative_rotation(90, 0, LensFacing.FRONT) == 90
        assert relative_rotation(90, 0, LensFacing.BACK) == 90

    def test_odd_sensor_mount_is_not_a_valid_frame_rotation(self):
        with pytest.raises(InvalidRotation):
            to_orientation(relative_rotation(45, 0, LensFacing.BACK))


class TestDisplayRotation:

    def test_portrait(self):
        assert display_rotation(1080, 1920) == 0

    def test_landscape(self):
        assert display_rotation(1920, 1080) == 90
