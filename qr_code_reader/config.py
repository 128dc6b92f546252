# SPDX-License-Identifier: GPL-2.0
# Copyright (C) 2025 Bardia Moshiri <bardia@furilabs.com>

import logging

from .aspect_ratio import AspectRatio
from .models import FORMAT_QR_CODE, LensFacing

APPLICATION_ID = 'io.furios.QRCodeReader'
APPLICATION_NAME = 'QR Code Reader'

DEFAULT_LENS_FACING = LensFacing.FRONT

REQUIRED_PERMISSIONS = ('camera',)
REQUEST_CODE_PERMISSIONS = 10

# (width, height) of each stream before rotation
PREVIEW_SIZES = {
    AspectRatio.RATIO_4_3: (960, 720),
    AspectRatio.RATIO_16_9: (1280, 720),
}
ANALYSIS_SIZES = {
    AspectRatio.RATIO_4_3: (640, 480),
    AspectRatio.RATIO_16_9: (640, 360),
}

BARCODE_FORMATS = (FORMAT_QR_CODE,)
DECODER_WORKERS = 1

WINDOW_SIZE = (420, 760)
GTK_EVENT_INTERVAL = 1 / 160

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'
LOG_LEVEL = logging.INFO
