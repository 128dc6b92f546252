# SPDX-License-Identifier: GPL-2.0
# Copyright (C) 2025 Bardia Moshiri <bardia@furilabs.com>

import logging
import threading
from typing import Optional

from .models import Frame

logger = logging.getLogger(__name__)

class AnalysisStream:
    """Keep-only-latest delivery of frames to a single analysis worker.

    deliver() is called from the capture thread and never waits for the
    analyzer. While the worker is busy only the newest frame is kept; the one
    it replaces is released without being analyzed.
    """

    def __init__(self, analyzer, executor):
        self.analyzer = analyzer
        self.executor = executor
        self.pending: Optional[Frame] = None
        self.draining = False
        self.closed = False
        self.dropped_frames = 0
        self.frame_lock = threading.Lock()

    def deliver(self, frame: Frame):
        dropped = None
        submit = False

        with self.frame_lock:
            if self.closed:
                dropped = frame
            else:
                if self.pending is not None:
                    dropped = self.pending
                    self.dropped_frames += 1
                self.pending = frame
                if not self.draining:
                    self.draining = True
                    submit = True

        if dropped is not None:
            dropped.release()

        if submit:
            try:
                self.executor.submit(self._drain)
            except RuntimeError as e:
                # Executor already shut down during teardown
                logger.debug(f"Analysis worker unavailable: {e}")
                with self.frame_lock:
                    self.draining = False
                self.close()

    def _drain(self):
        while True:
            with self.frame_lock:
                frame = self.pending
                self.pending = None
                if frame is None:
                    self.draining = False
                    return

            try:
                self.analyzer.analyze(frame)
            except Exception:
                logger.exception("Frame analysis failed")

    def close(self):
        with self.frame_lock:
            self.closed = True
            frame = self.pending
            self.pending = None

        if frame is not None:
            frame.release()

        if self.dropped_frames:
            logger.debug(f"Analysis stream closed, {self.dropped_frames} frame(s) dropped")
