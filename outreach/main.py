"""
main.py — Outreach Cadence API

App wiring only: logging, tables, middleware, error handlers, routers.
All behavior lives in services/.

Business Rules:
- Every response carries an 8-character X-Request-ID; log lines written
  while handling the request are tagged with it
- Errors come back as ErrorResponse {error, status_code, request_id, detail}
- Unhandled exceptions are logged with traceback and return 500 without
  internals

Called by: uvicorn (outreach.main:app)
Depends on: config, database, logging_config, routers/*
"""

import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from .logging_config import setup_logging
from .routers import activities, cadence, sessions
from .schemas.errors import ErrorResponse
from .startup import run_startup_migrations
from .timing_tables import reload_timing_tables

APP_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    run_startup_migrations()
    reload_timing_tables()
    logger.info("Outreach API ready", version=APP_VERSION)
    yield


app = FastAPI(title="Outreach Cadence", version=APP_VERSION, lifespan=lifespan)


# ── Request ID middleware ───────────────────────────────────────────────


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    request_id = uuid.uuid4().hex[:8]
    request.state.request_id = request_id
    with logger.contextualize(request_id=request_id):
        response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "")


# ── Error handlers ──────────────────────────────────────────────────────


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    body = ErrorResponse(
        error=str(exc.detail),
        status_code=exc.status_code,
        request_id=_request_id(request),
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    body = ErrorResponse(
        error="Validation error",
        status_code=422,
        request_id=_request_id(request),
        detail=[
            {"loc": list(e.get("loc", [])), "msg": e.get("msg", ""), "type": e.get("type", "")}
            for e in exc.errors()
        ],
    )
    return JSONResponse(status_code=422, content=body.model_dump())


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    request_id = _request_id(request)
    logger.opt(exception=exc).error(
        f"Unhandled error on {request.method} {request.url.path} [{request_id}]"
    )
    body = ErrorResponse(
        error="Internal server error", status_code=500, request_id=request_id
    )
    return JSONResponse(
        status_code=500,
        content=body.model_dump(),
        headers={"X-Request-ID": request_id} if request_id else None,
    )


# ── Routes ──────────────────────────────────────────────────────────────


@app.get("/health")
async def health():
    return {"status": "ok", "version": APP_VERSION}


app.include_router(cadence.router)
app.include_router(activities.router)
app.include_router(sessions.router)

