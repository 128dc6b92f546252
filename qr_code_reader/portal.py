# SPDX-License-Identifier: GPL-2.0
# Copyright (C) 2025 Bardia Moshiri <bardia@furilabs.com>

import logging
import os
import uuid
from typing import Callable, Optional, Sequence

from gi.repository import Gio, GLib

from .config import APPLICATION_ID
from .permission import PERMISSION_DENIED, PERMISSION_GRANTED

logger = logging.getLogger(__name__)

FLATPAK_INFO = '/.flatpak-info'

PORTAL_BUS_NAME = 'org.freedesktop.portal.Desktop'
PORTAL_OBJECT_PATH = '/org/freedesktop/portal/desktop'
CAMERA_INTERFACE = 'org.freedesktop.portal.Camera'
REQUEST_INTERFACE = 'org.freedesktop.portal.Request'
REQUEST_PATH_PREFIX = '/org/freedesktop/portal/desktop/request'

PERMISSION_STORE_BUS_NAME = 'org.freedesktop.impl.portal.PermissionStore'
PERMISSION_STORE_PATH = '/org/freedesktop/impl/portal/PermissionStore'
PERMISSION_STORE_INTERFACE = 'org.freedesktop.impl.portal.PermissionStore'

class CameraPortal:
    """Camera permission through the XDG desktop portal.

    Unsandboxed processes talk to PipeWire directly, so the camera is
    considered granted. Inside Flatpak the portal shows the prompt and hands
    out the PipeWire remote the capture pipeline has to use.
    """

    def __init__(self, app_id: str = APPLICATION_ID, sandboxed: Optional[bool] = None):
        self.app_id = app_id
        self.sandboxed = os.path.exists(FLATPAK_INFO) if sandboxed is None else sandboxed
        self.bus = None

    def _get_bus(self) -> Gio.DBusConnection:
        if self.bus is None:
            self.bus = Gio.bus_get_sync(Gio.BusType.SESSION, None)
        return self.bus

    def check(self, permission: str) -> bool:
        if permission != 'camera':
            return False
        if not self.sandboxed:
            return True

        try:
            result = self._get_bus().call_sync(
                PERMISSION_STORE_BUS_NAME,
                PERMISSION_STORE_PATH,
                PERMISSION_STORE_INTERFACE,
                'Lookup',
                GLib.Variant('(ss)', ('devices', 'camera')),
                GLib.VariantType.new('(a{sas}v)'),
                Gio.DBusCallFlags.NONE,
                -1,
                None
            )
            permissions, _data = result.unpack()
            return 'yes' in permissions.get(self.app_id, [])
        except GLib.Error as e:
            logger.debug(f"Permission store lookup failed: {e.message}")
            return False

    def request(self, permissions: Sequence[str], request_code: int,
                callback: Callable[[int, Sequence[int]], None]):
        if not self.sandboxed:
            GLib.idle_add(self._deliver, callback, request_code,
                          [PERMISSION_GRANTED] * len(permissions))
            return

        bus = self._get_bus()
        token = f"qr_code_reader_{uuid.uuid4().hex}"
        sender = bus.get_unique_name().lstrip(':').replace('.', '_')
        request_path = f"{REQUEST_PATH_PREFIX}/{sender}/{token}"
        subscription = {}

        def finish(grant):
            subscription_id = subscription.pop('id', None)
            if subscription_id is not None:
                bus.signal_unsubscribe(subscription_id)
            callback(request_code, [grant] * len(permissions))

        def on_response(connection, sender_name, object_path, interface_name,
                        signal_name, parameters, *args):
            response, _results = parameters.unpack()
            logger.debug(f"Camera portal response: {response}")
            finish(PERMISSION_GRANTED if response == 0 else PERMISSION_DENIED)

        def on_access_camera(source, res, *args):
            try:
                source.call_finish(res)
            except GLib.Error as e:
                logger.warning(f"Camera portal request failed: {e.message}")
                finish(PERMISSION_DENIED)

        # Subscribe before calling so a quick response is not missed
        subscription['id'] = bus.signal_subscribe(
            PORTAL_BUS_NAME,
            REQUEST_INTERFACE,
            'Response',
            request_path,
            None,
            Gio.DBusSignalFlags.NONE,
            on_response
        )

        bus.call(
            PORTAL_BUS_NAME,
            PORTAL_OBJECT_PATH,
            CAMERA_INTERFACE,
            'AccessCamera',
            GLib.Variant('(a{sv})', ({'handle_token': GLib.Variant('s', token)},)),
            GLib.VariantType.new('(o)'),
            Gio.DBusCallFlags.NONE,
            -1,
            None,
            on_access_camera
        )

    def _deliver(self, callback, request_code, grant_results):
        callback(request_code, grant_results)
        return False

    def is_camera_present(self) -> bool:
        if not self.sandboxed:
            return True
        try:
            proxy = Gio.DBusProxy.new_sync(
                self._get_bus(),
                Gio.DBusProxyFlags.NONE,
                None,
                PORTAL_BUS_NAME,
                PORTAL_OBJECT_PATH,
                CAMERA_INTERFACE,
                None
            )
            present = proxy.get_cached_property('IsCameraPresent')
            return bool(present and present.unpack())
        except GLib.Error as e:
            logger.warning(f"Could not query camera portal: {e.message}")
            return False

    def open_pipewire_remote(self) -> Optional[int]:
        if not self.sandboxed:
            return None

        try:
            result, fd_list = self._get_bus().call_with_unix_fd_list_sync(
                PORTAL_BUS_NAME,
                PORTAL_OBJECT_PATH,
                CAMERA_INTERFACE,
                'OpenPipeWireRemote',
                GLib.Variant('(a{sv})', ({},)),
                GLib.VariantType.new('(h)'),
                Gio.DBusCallFlags.NONE,
                -1,
                None,
                None
            )
            index = result.unpack()[0]
            return fd_list.get(index)
        except GLib.Error as e:
            logger.error(f"Failed to open PipeWire remote: {e.message}")
            return None
