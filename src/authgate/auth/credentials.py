# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from authgate.errors import AlreadyExists, NotFound, StorageError

logger = logging.getLogger(__name__)

LOGIN_FILENAME = "login.json"
HASH_KEY = "password"
# Accepted when reading only.
HASH_KEY_ALIASES = ("passwordHash",)


@dataclass(frozen=True)
class Credential:
    username: str
    password_hash: str

    def to_dict(self) -> dict:
        return {"username": self.username, HASH_KEY: self.password_hash}


def parse_credential(raw: object) -> Credential:
    if not isinstance(raw, dict):
        raise StorageError("login.json must contain a JSON object")
    username = raw.get("username")
    password_hash = next((raw[k] for k in (HASH_KEY, *HASH_KEY_ALIASES) if k in raw), None)
    if not isinstance(username, str) or not isinstance(password_hash, str):
        raise StorageError("login.json: 'username' and 'password' must be strings")
    return Credential(username=username, password_hash=password_hash)


class CredentialStore:
    """The single registered account, persisted as login.json.

    ``create`` is an atomic create-if-absent: the record is fully written to a
    temp file and then hard-linked into place, which fails if another writer
    got there first. Readers never observe a partial record.
    """

    def __init__(self, data_dir: Path) -> None:
        self.path = Path(data_dir) / LOGIN_FILENAME

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> Credential:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise NotFound("No account registered") from exc
        except OSError as exc:
            raise StorageError(f"Cannot read {self.path}") from exc
        try:
            raw = json.loads(text)
        except ValueError as exc:
            raise StorageError(f"{self.path} is not valid JSON") from exc
        return parse_credential(raw)

    def create(self, username: str, password_hash: str) -> Credential:
        if self.exists():
            raise AlreadyExists("An account is already registered")

        cred = Credential(username=username, password_hash=password_hash)
        body = json.dumps(cred.to_dict()).encode("utf-8")

        parent = self.path.parent
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=".login-", suffix=".tmp", dir=str(parent))
        except OSError as exc:
            raise StorageError(f"Could not write to {parent}") from exc
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(body)
                f.flush()
                os.fsync(f.fileno())
            try:
                os.link(tmp_name, self.path)
            except FileExistsError as exc:
                raise AlreadyExists("An account is already registered") from exc
            except OSError as exc:
                raise StorageError(f"Could not create {self.path}") from exc
        finally:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass

        logger.info("Stored credential for %r at %s", username, self.path)
        return cred


class MemoryCredentialStore:
    """Same contract as CredentialStore, kept in process memory."""

    def __init__(self, credential: Optional[Credential] = None) -> None:
        self._credential = credential
        self._lock = threading.Lock()

    def exists(self) -> bool:
        return self._credential is not None

    def load(self) -> Credential:
        if self._credential is None:
            raise NotFound("No account registered")
        return self._credential

    def create(self, username: str, password_hash: str) -> Credential:
        with self._lock:
            if self._credential is not None:
                raise AlreadyExists("An account is already registered")
            self._credential = Credential(username=username, password_hash=password_hash)
            return self._credential
