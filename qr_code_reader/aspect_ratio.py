# SPDX-License-Identifier: GPL-2.0
# Copyright (C) 2025 Bardia Moshiri <bardia@furilabs.com>

from enum import Enum

RATIO_4_3_VALUE = 4.0 / 3.0
RATIO_16_9_VALUE = 16.0 / 9.0

class AspectRatio(Enum):
    RATIO_4_3 = (4, 3)
    RATIO_16_9 = (16, 9)

    @property
    def numerator(self) -> int:
        return self.value[0]

    @property
    def denominator(self) -> int:
        return self.value[1]

    def __str__(self):
        return f"{self.numerator}:{self.denominator}"

def nearest(width: int, height: int) -> AspectRatio:
    """Pick the supported preview ratio closest to the given screen size.

    Orientation does not matter: the long side is always divided by the
    short one. Ties go to 4:3.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Screen dimensions must be positive, got {width}x{height}")

    preview_ratio = max(width, height) / min(width, height)
    if abs(preview_ratio - RATIO_4_3_VALUE) <= abs(preview_ratio - RATIO_16_9_VALUE):
        return AspectRatio.RATIO_4_3
    return AspectRatio.RATIO_16_9
