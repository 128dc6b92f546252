"""Shared fakes for the capture pipeline, decoder and display.

None of these touch GTK or GStreamer, so the tests run headless.
"""

from concurrent.futures import Future

import numpy as np
import pytest

from qr_code_reader.errors import BindError
from qr_code_reader.models import Barcode, CameraHandle, Frame, LensFacing


class FakeFrame(Frame):
    def __init__(self, rotation_degrees=0, pixels=None):
        if pixels is None:
            pixels = np.zeros((4, 4, 3), dtype=np.uint8)
        super().__init__(pixels, rotation_degrees)
        self.release_calls = 0

    def release(self):
        self.release_calls += 1
        super().release()


class FakeDecoder:
    def __init__(self, values=(), error=None):
        self.values = list(values)
        self.error = error
        self.images = []

    def detect_in_image(self, image):
        self.images.append(image)
        future = Future()
        if self.error is not None:
            future.set_exception(self.error)
        else:
            future.set_result([Barcode(value) for value in self.values])
        return future


class FakeDisplay:
    def __init__(self):
        self.texts = []
        self.preview_targets = []

    @property
    def text(self):
        return self.texts[-1] if self.texts else None

    def set_text(self, text):
        self.texts.append(text)

    def set_preview_target(self, surface):
        self.preview_targets.append(surface)


class ManualExecutor:
    """Runs submitted jobs only when told to."""

    def __init__(self):
        self.jobs = []
        self.is_shutdown = False

    def submit(self, fn, *args):
        if self.is_shutdown:
            raise RuntimeError("cannot schedule new futures after shutdown")
        self.jobs.append((fn, args))

    def run_all(self):
        while self.jobs:
            fn, args = self.jobs.pop(0)
            fn(*args)

    def shutdown(self, wait=True, cancel_futures=False):
        self.is_shutdown = True


class FakeProvider:
    def __init__(self, fail_with=None, facings=(LensFacing.FRONT, LensFacing.BACK)):
        self.fail_with = fail_with
        self.facings = tuple(facings)
        self.bindings = []
        self.bind_calls = 0
        self.unbind_calls = 0
        self.unbind_error = None

    def has_camera(self, lens_facing):
        return lens_facing in self.facings

    def bind(self, configuration, frame_callback):
        self.bind_calls += 1
        if self.fail_with is not None:
            raise self.fail_with
        if configuration.lens_facing not in self.facings:
            raise BindError(f"No {configuration.lens_facing.value} facing camera available")
        handle = CameraHandle(f"{configuration.lens_facing.value}-camera", configuration,
                              preview_surface=f"surface-{self.bind_calls}")
        self.bindings.append((handle, frame_callback))
        return handle

    def unbind_all(self):
        self.unbind_calls += 1
        if self.unbind_error is not None:
            raise self.unbind_error
        self.bindings = []


@pytest.fixture
def display():
    return FakeDisplay()


@pytest.fixture
def executor():
    return ManualExecutor()


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def bind_error():
    return BindError("unsupported configuration")
