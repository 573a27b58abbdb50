# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, Request

from authgate.auth.gate import AuthGate
from authgate.auth.session import SessionClaims


def get_gate(request: Request) -> AuthGate:
    return request.app.state.gate


def current_session_optional(request: Request) -> Optional[SessionClaims]:
    sess = getattr(request.state, "session", None)
    if sess is not None:
        return sess
    sess = get_gate(request).check(request)
    request.state.session = sess
    return sess


def require_session(request: Request) -> SessionClaims:
    sess = current_session_optional(request)
    if sess:
        return sess
    raise HTTPException(status_code=303, headers={"Location": "/login"})
