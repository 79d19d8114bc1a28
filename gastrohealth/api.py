# -*- coding: utf-8 -*-
"""
GastroHealth AI API

Accounts, onboarding profile, symptom log and the Gemini proxy routes used by
the GastroHealth client.
"""

from __future__ import annotations

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .api_keys.api import router as api_keys_router
from .app_db import init_app_db
from .auth.api import router as auth_router
from .auth.security import get_current_user_from_request
from .config import settings
from .gemini.api import router as gemini_router
from .profile.api import router as profile_router
from .symptoms.api import router as symptoms_router

app = FastAPI(
    title="GastroHealth AI",
    description="Profile, symptom log and Gemini diet guidance for GI conditions",
    version=__version__,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

init_app_db(settings.app_db_path)


def _error_response(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


@app.exception_handler(StarletteHTTPException)
async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())[1:])
        problems.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return _error_response(400, "; ".join(problems) or "Invalid request")


_AUTH_EXEMPT_PATHS = (
    "/api/login",
    "/api/register",
    "/api/health",
    "/api/docs",
    "/api/redoc",
    "/api/openapi.json",
)


@app.middleware("http")
async def _auth_gate(request: Request, call_next):
    path = request.url.path
    if request.method != "OPTIONS" and path.startswith("/api") and not path.startswith(_AUTH_EXEMPT_PATHS):
        try:
            request.state.user = get_current_user_from_request(request)
        except HTTPException as exc:
            return _error_response(exc.status_code, str(exc.detail))
    return await call_next(request)


# CORS must wrap the auth gate so 401 responses carry CORS headers.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(auth_router)
app.include_router(api_keys_router)
app.include_router(profile_router)
app.include_router(symptoms_router)
app.include_router(gemini_router)


@app.get("/api/health")
def health() -> dict:
    return {"ok": True}


def run() -> None:
    """Console entry point (used by pyproject [project.scripts])."""
    import uvicorn

    uvicorn.run("gastrohealth.api:app", host=settings.host, port=settings.port, reload=False)
