# SPDX-License-Identifier: GPL-2.0
# Copyright (C) 2025 Bardia Moshiri <bardia@furilabs.com>

import logging
from typing import Callable, Optional, Tuple

from . import aspect_ratio
from .config import DEFAULT_LENS_FACING
from .errors import BindError
from .models import CameraConfiguration, CameraHandle, LensFacing
from .rotation import validate_rotation
from .stream import AnalysisStream

logger = logging.getLogger(__name__)

class CameraSessionManager:
    """Binds the preview and analysis streams of one camera.

    Every start() unbinds whatever was bound before, so calling it again
    (rotation change, lens switch) leaves exactly one live configuration.
    """

    def __init__(self, provider_factory: Callable, analyzer, display, executor,
                 lens_facing: LensFacing = DEFAULT_LENS_FACING):
        self.provider_factory = provider_factory
        self.analyzer = analyzer
        self.display = display
        self.executor = executor
        self.lens_facing = lens_facing
        self.provider = None
        self.stream: Optional[AnalysisStream] = None
        self.handle: Optional[CameraHandle] = None
        self.screen_size: Optional[Tuple[int, int]] = None
        self.rotation = 0

    @property
    def is_bound(self) -> bool:
        return self.handle is not None

    def _get_provider(self):
        if self.provider is None:
            try:
                self.provider = self.provider_factory()
            except Exception as e:
                raise BindError("Camera initialization failed.") from e
            if self.provider is None:
                raise BindError("Camera initialization failed.")
        return self.provider

    def start(self, screen_width: int, screen_height: int, rotation: int) -> CameraHandle:
        rotation = validate_rotation(rotation)
        logger.debug(f"Screen metrics: {screen_width} x {screen_height}")

        try:
            screen_aspect_ratio = aspect_ratio.nearest(screen_width, screen_height)
        except ValueError as e:
            raise BindError(str(e)) from e
        logger.debug(f"Preview aspect ratio: {screen_aspect_ratio}")

        self.screen_size = (screen_width, screen_height)
        self.rotation = rotation
        configuration = CameraConfiguration(self.lens_facing, screen_aspect_ratio, rotation)

        provider = self._get_provider()
        try:
            self._unbind(provider)
        except Exception as e:
            raise BindError(f"Failed to unbind previous use cases: {e}") from e

        stream = AnalysisStream(self.analyzer, self.executor)
        try:
            handle = provider.bind(configuration, stream.deliver)
        except BindError:
            stream.close()
            raise
        except Exception as e:
            stream.close()
            raise BindError(f"Use case binding failed: {e}") from e

        self.stream = stream
        self.handle = handle
        try:
            self.display.set_preview_target(handle.preview_surface)
        except Exception as e:
            self.stop()
            raise BindError(f"Failed to attach preview: {e}") from e

        logger.info(f"Bound {handle.camera} ({configuration.lens_facing.value}, "
                    f"{configuration.aspect_ratio}, rotation {rotation})")
        return handle

    def rebind(self, rotation: Optional[int] = None) -> Optional[CameraHandle]:
        if self.screen_size is None:
            return None
        if rotation is None:
            rotation = self.rotation
        return self.start(*self.screen_size, rotation)

    def can_switch_lens(self) -> bool:
        if self.provider is None:
            return False
        return self.provider.has_camera(self.lens_facing.opposite())

    def switch_lens(self) -> Optional[CameraHandle]:
        """Flip between front and back lens.

        When the other lens cannot be bound the previous one is bound again,
        so the returned handle may still carry the old lens facing.
        """
        previous = self.lens_facing
        self.lens_facing = previous.opposite()
        logger.info(f"Switching to {self.lens_facing.value} camera")
        if self.screen_size is None:
            return None

        try:
            return self.rebind()
        except BindError as e:
            logger.warning(f"Could not switch to {self.lens_facing.value} camera: {e}")
            self.lens_facing = previous
            return self.rebind()

    def _unbind(self, provider):
        if self.stream is not None:
            self.stream.close()
            self.stream = None
        self.handle = None
        provider.unbind_all()

    def stop(self):
        if self.provider is None:
            return
        try:
            self._unbind(self.provider)
        except Exception:
            logger.exception("Error stopping camera session")
