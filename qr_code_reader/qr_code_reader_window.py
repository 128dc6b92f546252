# SPDX-License-Identifier: GPL-2.0
# Copyright (C) 2025 Bardia Moshiri <bardia@furilabs.com>

import logging
import signal
from concurrent.futures import ThreadPoolExecutor
from sys import exit

import gi

gi.require_version('Gtk', '4.0')
gi.require_version('Adw', '1')
from gi.repository import Adw, Gio, Gtk

from .analyzer import FrameAnalyzer
from .camera import GstCameraProvider
from .config import WINDOW_SIZE
from .decoder import BarcodeDecoder
from .errors import BindError, PermissionDenied
from .permission import PermissionGate
from .portal import CameraPortal
from .rotation import display_rotation
from .session import CameraSessionManager
from . import ui

logger = logging.getLogger(__name__)

class QRCodeReaderWindow(Adw.ApplicationWindow):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.connect("close-request", self.on_close_request)
        self.connect("map", self.on_map)
        self.set_default_size(*WINDOW_SIZE)

        self.inhibit_cookie = 0
        self.monitor = None
        self.monitor_handler = None
        self.cleaned_up = False
        self.started = False

        self.portal = CameraPortal()
        self.camera_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix='camera-analysis')
        self.decoder = BarcodeDecoder()

        self.toast_overlay, self.widgets = ui.create_main_window_layout()
        self.set_content(self.toast_overlay)
        self.display = ui.ViewfinderDisplay(
            self.widgets['viewfinder_frame'],
            self.widgets['viewfinder_placeholder'],
            self.widgets['qr_code_label']
        )

        self.analyzer = FrameAnalyzer(self.decoder, self.display)
        self.session = CameraSessionManager(
            self.create_camera_provider, self.analyzer, self.display, self.camera_executor
        )
        self.permission_gate = PermissionGate(
            self.portal, self.setup_camera, self.on_permission_denied
        )

        signal.signal(signal.SIGINT, self.signal_handler)
        signal.signal(signal.SIGTERM, self.signal_handler)

        self.setup_actions()

    def setup_actions(self):
        switch_action = Gio.SimpleAction.new("switch-camera", None)
        switch_action.connect("activate", lambda action, param: self.switch_camera())
        switch_action.set_enabled(False)
        self.add_action(switch_action)
        self.switch_action = switch_action

        copy_action = Gio.SimpleAction.new("copy", None)
        copy_action.connect("activate", lambda action, param: self.copy_text())
        self.add_action(copy_action)

    def on_map(self, window):
        if self.started:
            return
        self.started = True

        app = self.get_application()
        if app:
            self.inhibit_cookie = app.inhibit(self, Gtk.ApplicationInhibitFlags.IDLE,
                                              "Scanning QR codes")

        if not self.portal.is_camera_present():
            self.display.clear_preview("No camera found")
            return
        self.permission_gate.ensure()

    def show_toast(self, message: str):
        logger.info(f"Toast: {message}")
        self.toast_overlay.add_toast(Adw.Toast(title=message))

    def create_camera_provider(self):
        return GstCameraProvider(self.portal.open_pipewire_remote())

    def get_screen_metrics(self):
        display = self.get_display()
        surface = self.get_surface()
        monitor = display.get_monitor_at_surface(surface) if surface else None
        if monitor is None:
            monitors = display.get_monitors()
            monitor = monitors.get_item(0) if monitors.get_n_items() else None
        if monitor is None:
            raise BindError("No monitor available")

        geometry = monitor.get_geometry()
        scale = monitor.get_scale_factor()
        return monitor, geometry.width * scale, geometry.height * scale

    def setup_camera(self):
        try:
            monitor, width, height = self.get_screen_metrics()
        except BindError as e:
            logger.error(f"Use case binding failed: {e}")
            self.display.clear_preview("Camera unavailable")
            return

        self.watch_monitor(monitor)
        self.bind_camera_use_cases(lambda: self.session.start(width, height, display_rotation(width, height)))

    def bind_camera_use_cases(self, bind):
        try:
            handle = bind()
        except Exception:
            logger.exception("Use case binding failed")
            self.display.clear_preview("Camera unavailable")
            self.switch_action.set_enabled(False)
            return None

        if handle is not None:
            self.switch_action.set_enabled(self.session.can_switch_lens())
        return handle

    def watch_monitor(self, monitor):
        if self.monitor is monitor:
            return
        if self.monitor and self.monitor_handler:
            self.monitor.disconnect(self.monitor_handler)
        self.monitor = monitor
        self.monitor_handler = monitor.connect("notify::geometry", self.on_monitor_geometry_changed)

    def on_monitor_geometry_changed(self, monitor, pspec):
        geometry = monitor.get_geometry()
        rotation = display_rotation(geometry.width, geometry.height)
        if not self.session.is_bound or rotation == self.session.rotation:
            return
        logger.info(f"Display rotation changed to {rotation}, rebinding camera")
        self.bind_camera_use_cases(lambda: self.session.rebind(rotation))

    def on_permission_denied(self, error: PermissionDenied):
        self.display.clear_preview("Camera permission denied")
        self.show_toast("Camera access is required to scan QR codes")

    def switch_camera(self):
        requested = self.session.lens_facing.opposite()
        handle = self.bind_camera_use_cases(self.session.switch_lens)
        if handle is None:
            return
        if handle.configuration.lens_facing is requested:
            self.show_toast(f"Switched to: {handle.camera.name}")
        else:
            self.show_toast(f"No {requested.value} camera available")

    def copy_text(self):
        if not self.display.text:
            self.show_toast("No QR code to copy")
            return
        self.get_clipboard().set(self.display.text)
        self.show_toast("Text copied to clipboard")

    def cleanup(self):
        if self.cleaned_up:
            return
        self.cleaned_up = True
        logger.info("Cleaning up application resources...")

        self.session.stop()
        self.camera_executor.shutdown(wait=False, cancel_futures=True)
        self.decoder.close()

        if self.monitor and self.monitor_handler:
            self.monitor.disconnect(self.monitor_handler)
            self.monitor_handler = None

        app = self.get_application()
        if app and self.inhibit_cookie:
            app.uninhibit(self.inhibit_cookie)
            self.inhibit_cookie = 0
        logger.info("Application cleanup complete")

    def on_close_request(self, window):
        self.cleanup()
        app = self.get_application()
        if app:
            app.quit()
        return False

    def signal_handler(self, signum, frame):
        self.cleanup()
        exit(0)
