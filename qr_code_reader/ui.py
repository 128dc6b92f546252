# SPDX-License-Identifier: GPL-2.0
# Copyright (C) 2025 Bardia Moshiri <bardia@furilabs.com>

import logging
from typing import Dict, Optional

import gi

gi.require_version('Gtk', '4.0')
gi.require_version('Adw', '1')
from gi.repository import Adw, Gio, GLib, Gtk

from .config import APPLICATION_NAME

logger = logging.getLogger(__name__)

PLACEHOLDER_TEXT = "Point the camera at a QR code"

def create_header_bar(title: str = APPLICATION_NAME) -> tuple[Adw.HeaderBar, Gtk.Button]:
    header = Adw.HeaderBar()
    header.set_title_widget(Adw.WindowTitle(title=title))

    switch_button = Gtk.Button()
    switch_button.set_icon_name("camera-switch-symbolic")
    switch_button.set_tooltip_text("Switch Camera")
    switch_button.set_action_name("win.switch-camera")
    header.pack_start(switch_button)

    menu_button = Gtk.MenuButton()
    menu_button.set_icon_name("open-menu-symbolic")
    menu_model = Gio.Menu()
    menu_model.append("Copy Text", "win.copy")
    menu_button.set_menu_model(menu_model)
    header.pack_end(menu_button)

    return header, switch_button

def create_viewfinder_frame() -> tuple[Gtk.Frame, Gtk.Label]:
    viewfinder_frame = Gtk.Frame()
    viewfinder_frame.set_vexpand(True)
    viewfinder_frame.set_hexpand(True)

    viewfinder_placeholder = Gtk.Label()
    viewfinder_placeholder.set_text("Starting camera...")
    viewfinder_placeholder.set_halign(Gtk.Align.CENTER)
    viewfinder_placeholder.set_valign(Gtk.Align.CENTER)
    viewfinder_placeholder.add_css_class("dim-label")
    viewfinder_frame.set_child(viewfinder_placeholder)

    return viewfinder_frame, viewfinder_placeholder

def create_qr_code_label() -> Gtk.Label:
    label = Gtk.Label()
    label.set_text(PLACEHOLDER_TEXT)
    label.set_wrap(True)
    label.set_selectable(True)
    label.set_justify(Gtk.Justification.CENTER)
    label.set_margin_top(12)
    label.set_margin_bottom(12)
    label.set_margin_start(12)
    label.set_margin_end(12)
    label.add_css_class("dim-label")
    return label

def create_viewfinder_widget(paintable) -> Gtk.Picture:
    picture = Gtk.Picture.new_for_paintable(paintable)
    picture.set_content_fit(Gtk.ContentFit.COVER)
    picture.set_can_shrink(True)
    return picture

def create_main_window_layout() -> tuple[Adw.ToastOverlay, Dict[str, Gtk.Widget]]:
    toast_overlay = Adw.ToastOverlay()
    header, switch_button = create_header_bar()
    viewfinder_frame, viewfinder_placeholder = create_viewfinder_frame()
    qr_code_label = create_qr_code_label()

    main_box = Gtk.Box(orientation=Gtk.Orientation.VERTICAL)
    main_box.append(header)
    main_box.append(viewfinder_frame)
    main_box.append(qr_code_label)

    toast_overlay.set_child(main_box)

    widgets = {
        'header': header,
        'switch_button': switch_button,
        'viewfinder_frame': viewfinder_frame,
        'viewfinder_placeholder': viewfinder_placeholder,
        'qr_code_label': qr_code_label,
    }
    return toast_overlay, widgets

class ViewfinderDisplay:
    """The live preview and decoded-text label.

    set_text() may be called from any thread; the label is only touched from
    the GTK main loop.
    """

    def __init__(self, viewfinder_frame: Gtk.Frame, viewfinder_placeholder: Gtk.Label,
                 qr_code_label: Gtk.Label):
        self.viewfinder_frame = viewfinder_frame
        self.viewfinder_placeholder = viewfinder_placeholder
        self.qr_code_label = qr_code_label
        self.text = ''

    def set_preview_target(self, paintable):
        self.viewfinder_frame.set_child(create_viewfinder_widget(paintable))

    def clear_preview(self, message: str):
        self.viewfinder_placeholder.set_text(message)
        self.viewfinder_frame.set_child(self.viewfinder_placeholder)

    def set_text(self, text: Optional[str]):
        GLib.idle_add(self._apply_text, text or '')

    def _apply_text(self, text: str):
        if text != self.text:
            logger.debug(f"Displayed text: {text[:50]!r}")
        self.text = text
        if text:
            self.qr_code_label.set_text(text)
            self.qr_code_label.remove_css_class("dim-label")
        else:
            self.qr_code_label.set_text(PLACEHOLDER_TEXT)
            self.qr_code_label.add_css_class("dim-label")
        return False
