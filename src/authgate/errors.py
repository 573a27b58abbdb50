# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy.

User-facing errors (``ValidationError``, ``Unauthorized``, ``Conflict``) carry a
terse message that is safe to show in the UI. Store-level errors are raised by
the file-backed stores and are either mapped by the gate or left to propagate.
"""

from __future__ import annotations


class AuthGateError(Exception):
    """Base class for every error raised by authgate."""


class UserFacingError(AuthGateError):
    message = "Request rejected"

    def __init__(self, message: str | None = None) -> None:
        if message:
            self.message = message
        super().__init__(self.message)


class ValidationError(UserFacingError):
    message = "Username and password cannot be empty or contain spaces"


class Unauthorized(UserFacingError):
    message = "Invalid login"


class Conflict(UserFacingError):
    message = "An account is already registered"


class StorageError(AuthGateError):
    """A persisted record is missing, unreadable or corrupt."""


class NotFound(AuthGateError):
    pass


class AlreadyExists(AuthGateError):
    pass


class MalformedHash(AuthGateError):
    """The stored password hash cannot be parsed."""
