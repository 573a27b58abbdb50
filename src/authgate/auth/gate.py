# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import asyncio
import hmac
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from starlette.requests import Request

from authgate.auth.config import ConfigStore
from authgate.auth.credentials import CredentialStore
from authgate.auth.passwords import hash_password_async, verify_password_async
from authgate.auth.secret import SecretStore
from authgate.auth.session import SessionClaims, SessionTokenService
from authgate.auth.transport import build_cookie, extract_token
from authgate.errors import AlreadyExists, Conflict, MalformedHash, NotFound, Unauthorized, ValidationError

logger = logging.getLogger(__name__)

MSG_INVALID_FIELDS = "<p>Username and password cannot be empty or contain spaces</p>"
MSG_PASSWORD_MISMATCH = "<p>Passwords do not match</p>"
MSG_INVALID_LOGIN = "Invalid login"
MSG_ALREADY_REGISTERED = "An account is already registered"


@dataclass(frozen=True)
class IssuedSession:
    username: str
    token: str
    secure: bool

    @property
    def cookie(self) -> str:
        return build_cookie(self.token, secure=self.secure)


def _has_whitespace(value: str) -> bool:
    return any(ch.isspace() for ch in value)


def validate_credentials(username: str, password: str) -> None:
    username = username or ""
    password = password or ""
    if not username or not password or _has_whitespace(username) or _has_whitespace(password):
        raise ValidationError(MSG_INVALID_FIELDS)


class AuthGate:
    """Registration, login and per-request session checks.

    Stores are injected so tests can swap the file-backed ones for the
    in-memory variants.
    """

    def __init__(self, *, secret_store, credentials, config, tokens: SessionTokenService) -> None:
        self.secret_store = secret_store
        self.credentials = credentials
        self.config = config
        self.tokens = tokens
        self._register_lock = asyncio.Lock()

    @classmethod
    def from_data_dir(cls, data_dir: Path) -> "AuthGate":
        secret_store = SecretStore(data_dir)
        return cls(
            secret_store=secret_store,
            credentials=CredentialStore(data_dir),
            config=ConfigStore(data_dir),
            tokens=SessionTokenService(secret_store),
        )

    def bootstrap(self) -> None:
        """Create missing key/config files and make sure the key is usable.

        An unreadable key raises StorageError; the caller must not start
        serving in that case.
        """
        self.secret_store.ensure_key()
        self.config.ensure()
        self.secret_store.load_key()
        self.config.load()

    def is_registered(self) -> bool:
        return self.credentials.exists()

    def issue_session(self, username: str) -> IssuedSession:
        token = self.tokens.issue(username)
        # Re-read on purpose so edits to config.json apply to the next login.
        cfg = self.config.load()
        return IssuedSession(username=username, token=token, secure=cfg.secure_cookie)

    async def _blocking(self, fn, *args):
        # File I/O (fsync, key and config reads) stays off the event loop.
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, fn, *args)

    async def register(self, username: str, password: str, confirm_password: str) -> IssuedSession:
        if await self._blocking(self.credentials.exists):
            raise Conflict(MSG_ALREADY_REGISTERED)
        validate_credentials(username, password)
        if password != (confirm_password or ""):
            raise ValidationError(MSG_PASSWORD_MISMATCH)

        password_hash = await hash_password_async(password)

        async with self._register_lock:
            try:
                await self._blocking(self.credentials.create, username, password_hash)
            except AlreadyExists as exc:
                logger.warning("Registration rejected: an account already exists")
                raise Conflict(MSG_ALREADY_REGISTERED) from exc

        logger.info("Registered account %r", username)
        return await self._blocking(self.issue_session, username)

    async def login(self, username: str, password: str) -> IssuedSession:
        try:
            cred = await self._blocking(self.credentials.load)
        except NotFound as exc:
            # Same message as a bad password: no hint whether an account exists.
            raise Unauthorized(MSG_INVALID_LOGIN) from exc
        validate_credentials(username, password)

        user_ok = hmac.compare_digest(username.encode("utf-8"), cred.username.encode("utf-8"))
        try:
            pw_ok = await verify_password_async(cred.password_hash, password)
        except MalformedHash:
            logger.error("Stored password hash for %r cannot be parsed", cred.username)
            pw_ok = False

        if not (user_ok and pw_ok):
            logger.info("Failed login attempt")
            raise Unauthorized(MSG_INVALID_LOGIN)

        logger.info("Login for %r", username)
        return await self._blocking(self.issue_session, cred.username)

    def check(self, request: Request) -> Optional[SessionClaims]:
        """Claims for the request's session cookie, or None when unauthenticated."""
        return self.tokens.verify(extract_token(request))
