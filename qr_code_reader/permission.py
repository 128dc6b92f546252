# SPDX-License-Identifier: GPL-2.0
# Copyright (C) 2025 Bardia Moshiri <bardia@furilabs.com>

import logging
from typing import Callable, Optional, Sequence

from .config import REQUEST_CODE_PERMISSIONS, REQUIRED_PERMISSIONS
from .errors import PermissionDenied

logger = logging.getLogger(__name__)

PERMISSION_GRANTED = 0
PERMISSION_DENIED = -1

class PermissionGate:
    """Gates camera startup behind the runtime camera permission.

    The backend provides check(permission) -> bool and
    request(permissions, request_code, callback); it answers a request by
    calling callback(request_code, grant_results) once.
    """

    def __init__(self, backend, on_granted: Callable[[], None],
                 on_denied: Optional[Callable[[PermissionDenied], None]] = None,
                 permissions: Sequence[str] = REQUIRED_PERMISSIONS):
        self.backend = backend
        self.on_granted = on_granted
        self.on_denied = on_denied
        self.permissions = tuple(permissions)
        self.denied = False

    def has_permission(self) -> bool:
        for permission in self.permissions:
            try:
                if not self.backend.check(permission):
                    return False
            except Exception as e:
                logger.warning(f"Could not check {permission} permission: {e}")
                return False
        return True

    def request_permission(self):
        logger.info(f"Requesting permissions: {', '.join(self.permissions)}")
        self.backend.request(self.permissions, REQUEST_CODE_PERMISSIONS,
                             self.on_request_permissions_result)

    def ensure(self):
        if self.has_permission():
            self.on_granted()
        else:
            self.request_permission()

    def on_request_permissions_result(self, request_code: int, grant_results: Sequence[int]):
        if request_code != REQUEST_CODE_PERMISSIONS:
            logger.debug(f"Ignoring permission result for request code {request_code}")
            return
        if self.denied:
            return

        granted = (len(grant_results) == len(self.permissions) and
                   all(result == PERMISSION_GRANTED for result in grant_results))
        if granted:
            logger.info("Camera permission granted")
            self.on_granted()
            return

        self.denied = True
        missing = [permission for permission, result in zip(self.permissions, grant_results)
                   if result != PERMISSION_GRANTED] or list(self.permissions)
        error = PermissionDenied(missing)
        logger.warning(str(error))
        if self.on_denied:
            self.on_denied(error)
