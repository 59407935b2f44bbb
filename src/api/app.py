"""FastAPI application factory"""

import logging
import time

import sentry_sdk
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.error import ClientError
from src.api.routes import (
    billing,
    invoices,
    rentals,
    installments,
    esign,
    dashboard,
    customers,
    verification,
)

logger = logging.getLogger(__name__)


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": code, "message": message}},
    )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ClientError)
    async def client_error_handler(request: Request, exc: ClientError):
        if exc.status_code >= 500:
            logger.error(
                f"{request.method} {request.url.path} failed: {exc.error.code} "
                f"{exc.error.message} ({exc.error.reason})"
            )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else "Invalid request parameters"
        return _error_response(status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR", message)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "INTERNAL_ERROR",
            "An unexpected error occurred",
        )


def create_app(config) -> FastAPI:
    logging.basicConfig(
        level=getattr(logging, str(config.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if config.ENABLE_SENTRY and config.DSN_SENTRY:
        sentry_sdk.init(
            dsn=config.DSN_SENTRY,
            environment=config.SENTRY_ENVIRONMENT,
            traces_sample_rate=0.1,
        )
        logger.info(f"Sentry enabled for environment {config.SENTRY_ENVIRONMENT}")

    app = FastAPI(
        title="Rental Ledger Service",
        description="Payments, installments, refunds and agreement tracking for vehicle rentals",
        version="1.0.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=config.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if config.ENABLE_LOGGING_MIDDLEWARE:
        @app.middleware("http")
        async def log_requests(request: Request, call_next):
            started = time.perf_counter()
            response = await call_next(request)
            elapsed_ms = int((time.perf_counter() - started) * 1000)
            logger.info(
                f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms}ms)"
            )
            return response

    register_exception_handlers(app)

    for module in (billing, invoices, rentals, installments, esign, dashboard, customers, verification):
        app.include_router(module.router, prefix=config.API_PREFIX)

    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok"}

    return app
