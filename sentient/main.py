"""FastAPI application for the Sentient meditation backend."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from .config.settings import settings
from .controllers import entries, meditation, moods, profile, sessions
from .database import dispose_engine, init_models
from .domain.errors import MeditationPipelineError, ValidationError
from .middleware import StructuredLoggingMiddleware, TelemetryMiddleware
from .services import credentials_available, get_llm_client

logger = logging.getLogger(__name__)

APP_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
PIPELINE_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"
PIPELINE_LOGGER = "sentient.services.meditation_pipeline"
REQUEST_LOGGER = "sentient.middleware.structured"
QUIET_LOGGERS = ("botocore", "boto3", "urllib3", "sqlalchemy.engine")

ROUTERS = (moods.router, entries.router, meditation.router, sessions.router, profile.router)


def _file_handler(path: str, max_bytes: int, fmt: str) -> RotatingFileHandler:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(target, maxBytes=max_bytes, backupCount=5, encoding="utf-8")
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def _stdout_handler(fmt: str) -> logging.StreamHandler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def configure_logging() -> None:
    """Root logs go to stdout and ``log_file``.

    Request lines are printed bare (they carry their own colour codes) and do
    not propagate. Script and narration events also land in
    ``pipeline_log_file`` so a failed preparation can be traced per entry.
    """

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(_stdout_handler(APP_FORMAT))
    root.addHandler(_file_handler(settings.log_file, 1_000_000, APP_FORMAT))
    root.setLevel(logging.DEBUG if settings.debug else logging.INFO)

    requests_log = logging.getLogger(REQUEST_LOGGER)
    requests_log.handlers = [_stdout_handler("%(message)s")]
    requests_log.setLevel(logging.INFO)
    requests_log.propagate = False

    pipeline_log = logging.getLogger(PIPELINE_LOGGER)
    pipeline_log.handlers = [_file_handler(settings.pipeline_log_file, 500_000, PIPELINE_FORMAT)]
    pipeline_log.setLevel(logging.INFO)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def _describe(error: dict) -> str:
    field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    return f"{field or 'body'}: {error.get('msg', 'invalid')}"


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(MeditationPipelineError)
    async def pipeline_error(request: Request, exc: MeditationPipelineError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed (%s): %s", request.method, request.url.path, exc.code, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        # The /api contract only knows 400, 502 and 500.
        if not request.url.path.startswith("/api/"):
            return await request_validation_exception_handler(request, exc)
        problems = "; ".join(_describe(error) for error in exc.errors())
        return await pipeline_error(request, ValidationError(f"Invalid request body: {problems}"))

    @app.exception_handler(HTTPException)
    async def http_error(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=exc.headers,
        )

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        description="Guided meditation journeys from a check-in mood to a destination mood",
    )

    app.add_middleware(TelemetryMiddleware)
    app.add_middleware(StructuredLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    for router in ROUTERS:
        app.include_router(router)
    _register_error_handlers(app)

    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, str]:
        return {"service": settings.app_name, "version": settings.app_version}

    @app.get("/health", include_in_schema=False)
    async def health() -> dict[str, object]:
        """Liveness plus whether script generation and narration can run."""

        return {
            "status": "healthy",
            "version": settings.app_version,
            "script_generation": get_llm_client().available,
            "narration": bool(settings.s3.bucket_name) and credentials_available(),
        }

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.on_event("startup")
    async def open_database() -> None:
        await init_models()

    @app.on_event("shutdown")
    async def close_database() -> None:
        await dispose_engine()

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("sentient.main:app", host=settings.host, port=settings.port, reload=settings.debug)
