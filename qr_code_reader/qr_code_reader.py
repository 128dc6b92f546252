# SPDX-License-Identifier: GPL-2.0
# Copyright (C) 2025 Bardia Moshiri <bardia@furilabs.com>

import gi
gi.require_version('Adw', '1')
from gi.repository import Adw

from qr_code_reader.config import APPLICATION_ID
from qr_code_reader.qr_code_reader_window import QRCodeReaderWindow

class QRCodeReaderApp(Adw.Application):
    def __init__(self):
        super().__init__(application_id=APPLICATION_ID)
        self.connect('activate', self.on_activate)

    def on_activate(self, app):
        self.win = QRCodeReaderWindow(application=app)
        self.win.present()
