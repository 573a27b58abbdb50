# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, Form, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import FileResponse, HTMLResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates
from starlette.exceptions import HTTPException as StarletteHTTPException

from authgate import settings
from authgate.auth.gate import AuthGate, IssuedSession
from authgate.auth.passwords import shutdown_pool
from authgate.auth.transport import set_session_cookie
from authgate.errors import Conflict, Unauthorized, ValidationError
from authgate.permissions import get_gate, require_session

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
STATIC_DIR = BASE_DIR / "static"

templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))

STATIC_ASSETS = {
    "styles.css": "text/css",
    "app.js": "text/javascript",
    "spinner.svg": "image/svg+xml",
}


def _success(request: Request, issued: IssuedSession) -> Response:
    """Session established: async form posts get HX-Redirect, plain form posts a 303."""
    if request.headers.get("hx-request"):
        resp = Response(status_code=200, headers={"HX-Redirect": "/"})
    else:
        resp = RedirectResponse(url="/", status_code=303)
    set_session_cookie(resp, issued.token, secure=issued.secure)
    return resp


def _fragment(message: str) -> HTMLResponse:
    # Errors are 200s so app.js swaps them into the form.
    return HTMLResponse(message, status_code=200)


def _unauthorized() -> Response:
    return Response(status_code=401)


async def _not_found_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return templates.TemplateResponse(request, "404.html", {}, status_code=404)
    return await http_exception_handler(request, exc)


def create_app(data_dir: Optional[Path] = None, *, gate: Optional[AuthGate] = None) -> FastAPI:
    if gate is None:
        gate = AuthGate.from_data_dir(Path(data_dir or settings.DATA_DIR))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # StorageError here aborts startup: no key, no service.
        gate.bootstrap()
        logger.info("Auth gate ready (registered=%s)", gate.is_registered())
        try:
            yield
        finally:
            shutdown_pool()

    app = FastAPI(lifespan=lifespan, docs_url=None, redoc_url=None, openapi_url=None)
    app.state.gate = gate
    app.add_exception_handler(StarletteHTTPException, _not_found_handler)

    # ------------------ Routes ------------------

    @app.get("/", response_class=HTMLResponse)
    def index(request: Request, session=Depends(require_session)):
        return templates.TemplateResponse(request, "index.html", {"username": session.username})

    @app.get("/login", response_class=HTMLResponse)
    def login_get(request: Request, gate: AuthGate = Depends(get_gate)):
        if not gate.is_registered():
            return RedirectResponse(url="/login/create", status_code=303)
        return templates.TemplateResponse(request, "login.html", {})

    @app.post("/login")
    async def login_post(
        request: Request,
        username: str = Form(""),
        password: str = Form(""),
        gate: AuthGate = Depends(get_gate),
    ):
        if not await run_in_threadpool(gate.is_registered):
            return _unauthorized()
        try:
            issued = await gate.login(username, password)
        except (ValidationError, Unauthorized) as exc:
            return _fragment(exc.message)
        return _success(request, issued)

    @app.get("/login/create", response_class=HTMLResponse)
    def create_login_get(request: Request, gate: AuthGate = Depends(get_gate)):
        if gate.is_registered():
            return RedirectResponse(url="/login", status_code=303)
        return templates.TemplateResponse(request, "create_login.html", {})

    @app.post("/login/create")
    async def create_login_post(
        request: Request,
        username: str = Form(""),
        password: str = Form(""),
        confirm_password: str = Form(""),
        confirmPassword: str = Form(""),
        gate: AuthGate = Depends(get_gate),
    ):
        if await run_in_threadpool(gate.is_registered):
            return _unauthorized()
        try:
            issued = await gate.register(username, password, confirm_password or confirmPassword)
        except Conflict:
            return _unauthorized()
        except ValidationError as exc:
            return _fragment(exc.message)
        return _success(request, issued)

    # ------------------ Static ------------------

    def _asset_route(name: str, media_type: str):
        path = STATIC_DIR / name

        def _serve():
            return FileResponse(path, media_type=media_type)

        app.add_api_route(f"/{name}", _serve, methods=["GET"], include_in_schema=False)

    for name, media_type in STATIC_ASSETS.items():
        _asset_route(name, media_type)

    return app


app = create_app()
