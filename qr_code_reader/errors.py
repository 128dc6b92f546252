# SPDX-License-Identifier: GPL-2.0
# Copyright (C) 2025 Bardia Moshiri <bardia@furilabs.com>

class QRCodeReaderError(Exception):
    pass

class PermissionDenied(QRCodeReaderError):
    def __init__(self, permissions=()):
        self.permissions = tuple(permissions)
        super().__init__(f"Permission denied: {', '.join(self.permissions) or 'unknown'}")

class BindError(QRCodeReaderError):
    """Camera configuration could not be bound. Not retried automatically."""

class InvalidRotation(QRCodeReaderError, ValueError):
    def __init__(self, degrees):
        self.degrees = degrees
        super().__init__("Rotation must be 0, 90, 180, or 270.")

class DecodeError(QRCodeReaderError):
    pass
