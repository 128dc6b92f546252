# SPDX-License-Identifier: GPL-2.0
# Copyright (C) 2025 Bardia Moshiri <bardia@furilabs.com>

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Iterable, List

import numpy as np
from PIL import Image
from pyzbar.pyzbar import ZBarSymbol, decode

from .config import BARCODE_FORMATS, DECODER_WORKERS
from .errors import DecodeError
from .models import Barcode, InputImage, Orientation

logger = logging.getLogger(__name__)

# Orientation is the clockwise rotation needed; PIL's ROTATE_* turn counter-clockwise
_UPRIGHT_TRANSPOSE = {
    Orientation.ROTATION_90: Image.Transpose.ROTATE_270,
    Orientation.ROTATION_180: Image.Transpose.ROTATE_180,
    Orientation.ROTATION_270: Image.Transpose.ROTATE_90,
}

def to_upright_gray(image: InputImage) -> Image.Image:
    pixels = image.pixels
    if isinstance(pixels, np.ndarray):
        pil_image = Image.fromarray(np.ascontiguousarray(pixels))
    else:
        pil_image = pixels

    if pil_image.mode != 'L':
        pil_image = pil_image.convert('L')

    transpose = _UPRIGHT_TRANSPOSE.get(image.orientation)
    if transpose is not None:
        pil_image = pil_image.transpose(transpose)
    return pil_image

def _symbols_for(formats: Iterable[str]) -> List[ZBarSymbol]:
    try:
        return [ZBarSymbol[name] for name in formats]
    except KeyError as e:
        raise DecodeError(f"Unsupported barcode format: {e.args[0]}") from e

def _to_barcode(symbol) -> Barcode:
    data = symbol.data
    if isinstance(data, bytes):
        try:
            data = data.decode('utf-8')
        except UnicodeDecodeError as e:
            logger.debug(f"Failed to decode QR code data: {e}")
            data = None

    bbox = None
    rect = getattr(symbol, 'rect', None)
    if rect is not None:
        bbox = (rect.left, rect.top, rect.width, rect.height)

    return Barcode(data, str(symbol.type), bbox)

class BarcodeDecoder:
    """zbar backed barcode detection running on its own worker threads.

    detect_in_image() never blocks the caller: it returns a Future that
    resolves to a list of Barcode objects or raises DecodeError.
    """

    def __init__(self, formats: Iterable[str] = BARCODE_FORMATS, max_workers: int = DECODER_WORKERS):
        self.symbols = _symbols_for(formats)
        self.executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='qr-decoder')

    def detect_in_image(self, image: InputImage) -> Future:
        return self.executor.submit(self._detect, image)

    def _detect(self, image: InputImage) -> List[Barcode]:
        try:
            upright = to_upright_gray(image)
            symbols = decode(upright, symbols=self.symbols)
        except Exception as e:
            raise DecodeError(f"QR code recognition failed: {e}") from e

        return [_to_barcode(symbol) for symbol in symbols]

    def close(self):
        self.executor.shutdown(wait=False, cancel_futures=True)
