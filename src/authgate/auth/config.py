# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Runtime cookie configuration (config.json).

The file is read again on every session issuance, so flipping
``secure_auth_cookie`` takes effect without a restart.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from authgate.errors import StorageError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.json"
CONFIG_KEY = "secure_auth_cookie"
# Accepted when reading only.
CONFIG_KEY_ALIASES = ("secureCookie",)


@dataclass(frozen=True)
class Config:
    secure_cookie: bool = True

    def to_dict(self) -> dict:
        return {CONFIG_KEY: self.secure_cookie}


def parse_config(raw: object) -> Config:
    if not isinstance(raw, dict):
        raise StorageError("config.json must contain a JSON object")
    for key in (CONFIG_KEY, *CONFIG_KEY_ALIASES):
        if key in raw:
            value = raw[key]
            if not isinstance(value, bool):
                raise StorageError(f"config.json: '{key}' must be true or false")
            return Config(secure_cookie=value)
    raise StorageError(f"config.json: missing '{CONFIG_KEY}'")


class ConfigStore:
    def __init__(self, data_dir: Path) -> None:
        self.path = Path(data_dir) / CONFIG_FILENAME

    def ensure(self) -> bool:
        """Write the default config if none exists. Returns True when created."""
        if self.path.exists():
            return False
        body = json.dumps(Config().to_dict(), indent=2).encode("utf-8")
        try:
            fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o644)
        except FileExistsError:
            return False
        except OSError as exc:
            raise StorageError(f"Could not create {self.path}") from exc
        with os.fdopen(fd, "wb") as f:
            f.write(body)
        logger.info("Initialized %s", self.path)
        return True

    def load(self) -> Config:
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Cannot read {self.path}") from exc
        try:
            raw = json.loads(text)
        except ValueError as exc:
            raise StorageError(f"{self.path} is not valid JSON") from exc
        return parse_config(raw)


class MemoryConfigStore:
    def __init__(self, secure_cookie: bool = True) -> None:
        self.secure_cookie = secure_cookie

    def ensure(self) -> bool:
        return False

    def load(self) -> Config:
        return Config(secure_cookie=self.secure_cookie)
