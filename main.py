#!/usr/bin/env python3
# SPDX-License-Identifier: GPL-2.0
# Copyright (C) 2025 Bardia Moshiri <bardia@furilabs.com>

import logging
from asyncio import run, sleep
from sys import exit

from gi.repository import GLib, Gio

from qr_code_reader.config import GTK_EVENT_INTERVAL, LOG_FORMAT, LOG_LEVEL
from qr_code_reader.qr_code_reader import QRCodeReaderApp

async def pump_gtk_events():
    main_context = GLib.MainContext.default()
    app = QRCodeReaderApp()
    app.connect('shutdown', lambda _: exit(0))

    Gio.Application.set_default(app)
    app.register()
    app.activate()

    while True:
        while main_context.pending():
            main_context.iteration(False)
        await sleep(GTK_EVENT_INTERVAL)

def main():
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
    run(pump_gtk_events())

if __name__ == '__main__':
    main()
