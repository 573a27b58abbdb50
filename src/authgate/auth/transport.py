# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from typing import Optional

from starlette.requests import Request
from starlette.responses import Response

COOKIE_NAME = "AuthToken"


def cookie_settings(secure: bool) -> dict:
    # No max_age/expires: a browser-session cookie; the token carries its own expiry.
    return {"path": "/", "httponly": True, "samesite": "strict", "secure": bool(secure)}


def set_session_cookie(resp: Response, token: str, *, secure: bool) -> None:
    resp.set_cookie(COOKIE_NAME, token, **cookie_settings(secure))


def build_cookie(token: str, *, secure: bool) -> str:
    """Return the Set-Cookie header value Starlette emits for a session token."""
    resp = Response()
    set_session_cookie(resp, token, secure=secure)
    return resp.headers["set-cookie"]


def extract_token(request: Request) -> Optional[str]:
    token = request.cookies.get(COOKIE_NAME, "")
    token = token.strip()
    return token or None
