# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import os
from pathlib import Path

_TRUE = {"1", "true", "yes", "y"}

# Directory holding secret, config.json and login.json.
DATA_DIR = Path(os.getenv("AUTHGATE_DATA_DIR", ".")).resolve()

HOST = os.getenv("AUTHGATE_HOST", "0.0.0.0")
PORT = int(os.getenv("AUTHGATE_PORT", "3000"))
RELOAD = os.getenv("AUTHGATE_RELOAD", "false").lower() in _TRUE

# Threads reserved for argon2 hashing/verification.
HASH_WORKERS = int(os.getenv("AUTHGATE_HASH_WORKERS", "2"))

LOG_LEVEL = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)

SESSION_TTL_SECONDS = 60 * 60 * 24 * 7  # 7 days
