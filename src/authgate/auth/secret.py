# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import base64
import binascii
import logging
import os
import secrets
from pathlib import Path
from typing import Optional

from authgate.errors import StorageError

logger = logging.getLogger(__name__)

SECRET_FILENAME = "secret"
KEY_BYTES = 32


class SecretStore:
    """File-backed signing key: 32 random bytes, stored base64 encoded.

    The key is created once and never rotated. Delete the file to invalidate
    every issued session.
    """

    def __init__(self, data_dir: Path) -> None:
        self.path = Path(data_dir) / SECRET_FILENAME

    def ensure_key(self) -> bool:
        """Create the key file if missing. Returns True when it was created."""
        if self.path.exists():
            return False
        encoded = base64.b64encode(secrets.token_bytes(KEY_BYTES))
        try:
            fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
        except FileExistsError:
            return False
        except OSError as exc:
            raise StorageError(f"Could not create {self.path}") from exc
        with os.fdopen(fd, "wb") as f:
            f.write(encoded)
        logger.info("Initialized signing key at %s", self.path)
        return True

    def load_key(self) -> bytes:
        try:
            raw = self.path.read_bytes()
        except OSError as exc:
            raise StorageError(f"Cannot read signing key {self.path}") from exc
        try:
            key = base64.b64decode(raw.strip(), validate=True)
        except (binascii.Error, ValueError) as exc:
            raise StorageError(f"Signing key {self.path} is not valid base64") from exc
        if len(key) != KEY_BYTES:
            raise StorageError(f"Signing key {self.path} has the wrong length")
        return key


class MemorySecretStore:
    """In-process key for tests."""

    def __init__(self, key: Optional[bytes] = None) -> None:
        self._key = key

    def ensure_key(self) -> bool:
        if self._key is not None:
            return False
        self._key = secrets.token_bytes(KEY_BYTES)
        return True

    def load_key(self) -> bytes:
        if self._key is None:
            raise StorageError("Signing key not initialized")
        return self._key
