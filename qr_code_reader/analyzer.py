# SPDX-License-Identifier: GPL-2.0
# Copyright (C) 2025 Bardia Moshiri <bardia@furilabs.com>

import logging
from concurrent.futures import Future
from typing import Union

from .models import DecodeFailure, DecodeSuccess, Frame, InputImage
from .rotation import to_orientation

logger = logging.getLogger(__name__)

def join_raw_values(barcodes) -> str:
    return '\n'.join(barcode.raw_value for barcode in barcodes if barcode.raw_value)

def wait_for_outcome(future: Future) -> Union[DecodeSuccess, DecodeFailure]:
    try:
        return DecodeSuccess(list(future.result() or []))
    except Exception as e:
        return DecodeFailure(e)

class FrameAnalyzer:
    """Turns analysis frames into label text.

    Runs on the single analysis worker, one frame at a time, so results reach
    the display in frame order.
    """

    def __init__(self, decoder, display):
        self.decoder = decoder
        self.display = display

    def analyze(self, frame: Frame):
        try:
            orientation = to_orientation(frame.rotation_degrees)
            future = self.decoder.detect_in_image(InputImage(frame.pixels, orientation))
            self.apply(wait_for_outcome(future))
        finally:
            frame.release()

    def apply(self, outcome: Union[DecodeSuccess, DecodeFailure]):
        if isinstance(outcome, DecodeFailure):
            logger.warning(f"QR code recognition failed: {outcome.error}")
            self.display.set_text('')
            return

        if outcome.barcodes:
            logger.debug(f"Found {len(outcome.barcodes)} QR code(s)")
            self.display.set_text(join_raw_values(outcome.barcodes))
        else:
            self.display.set_text('')
