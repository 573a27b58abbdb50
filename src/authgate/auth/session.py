# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import hashlib
import time
import uuid
from dataclasses import dataclass
from typing import Callable, Optional

from itsdangerous import BadData, URLSafeSerializer

from authgate import settings

SESSION_SALT = "authgate.session.v1"


@dataclass(frozen=True)
class SessionClaims:
    subject: str
    username: str
    expires_at: int

    def to_payload(self) -> dict:
        return {"sub": self.subject, "un": self.username, "exp": self.expires_at}


def _claims_from_payload(data: object) -> Optional[SessionClaims]:
    if not isinstance(data, dict):
        return None
    sub = data.get("sub")
    un = data.get("un")
    exp = data.get("exp")
    if not isinstance(sub, str) or not sub:
        return None
    if not isinstance(un, str) or not un:
        return None
    # bool is an int subclass
    if not isinstance(exp, int) or isinstance(exp, bool):
        return None
    return SessionClaims(subject=sub, username=un, expires_at=exp)


class SessionTokenService:
    """Stateless session tokens signed with HMAC-SHA256.

    The signing key is pulled from the secret store on every call, so a
    StorageError there surfaces immediately instead of signing with a stale or
    empty key. Expiry is fixed at issuance; there is no renewal.
    """

    def __init__(
        self,
        secret_store,
        *,
        ttl_seconds: int = settings.SESSION_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.secret_store = secret_store
        self.ttl_seconds = ttl_seconds
        self.clock = clock

    def _serializer(self) -> URLSafeSerializer:
        return URLSafeSerializer(
            secret_key=self.secret_store.load_key(),
            salt=SESSION_SALT,
            signer_kwargs={"digest_method": hashlib.sha256},
        )

    def new_claims(self, username: str) -> SessionClaims:
        return SessionClaims(
            subject=str(uuid.uuid4()),
            username=username,
            expires_at=int(self.clock()) + self.ttl_seconds,
        )

    def issue(self, username: str) -> str:
        if not username:
            raise ValueError("Cannot issue a session without a username")
        s = self._serializer()
        return s.dumps(self.new_claims(username).to_payload())

    def verify(self, token: Optional[str]) -> Optional[SessionClaims]:
        if not token:
            return None
        s = self._serializer()
        try:
            data = s.loads(token)
        except BadData:
            return None
        claims = _claims_from_payload(data)
        if claims is None:
            return None
        if claims.expires_at <= int(self.clock()):
            return None
        return claims
