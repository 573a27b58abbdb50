# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import asyncio
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from authgate import settings
from authgate.errors import MalformedHash

_PH = PasswordHasher()

_POOL: Optional[ThreadPoolExecutor] = None


def hash_password(plain: str) -> str:
    if not plain:
        raise ValueError("Empty password")
    return _PH.hash(plain)


def verify_password(hash_value: str, plain: str) -> bool:
    """Check ``plain`` against an argon2 hash string.

    Returns False on a mismatch. Raises MalformedHash when ``hash_value`` is not
    something argon2 can parse.
    """
    if not plain:
        return False
    try:
        return _PH.verify(hash_value, plain)
    except VerificationError:
        # VerifyMismatchError included
        return False
    except (InvalidHashError, UnicodeEncodeError) as exc:
        raise MalformedHash("Stored password hash cannot be parsed") from exc


def _pool() -> ThreadPoolExecutor:
    global _POOL
    if _POOL is None:
        _POOL = ThreadPoolExecutor(
            max_workers=max(1, settings.HASH_WORKERS),
            thread_name_prefix="authgate-hash",
        )
    return _POOL


def shutdown_pool() -> None:
    global _POOL
    if _POOL is not None:
        _POOL.shutdown(wait=True)
        _POOL = None


async def hash_password_async(plain: str) -> str:
    # argon2 is CPU-bound; keep it off the event loop.
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(_pool(), hash_password, plain)


async def verify_password_async(hash_value: str, plain: str) -> bool:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(_pool(), verify_password, hash_value, plain)
