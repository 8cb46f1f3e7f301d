# Use postponed evaluation of annotations so type hints stay as strings at runtime.
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

# `FastAPI` exposes the proxy endpoints; `Request` is needed by the exception handlers.
from fastapi import FastAPI, Request
# `RequestValidationError` is raised for malformed path/query params before our handlers run.
from fastapi.exceptions import RequestValidationError
# CORS is restricted to the configured frontend origins.
from fastapi.middleware.cors import CORSMiddleware
# `JSONResponse` renders our error envelope (`success/error/details`).
from fastapi.responses import JSONResponse
# `StaticFiles` serves the prebuilt frontend bundle when it exists on disk.
from fastapi.staticfiles import StaticFiles

# API routes live in their own module to keep the app factory small and testable.
from gbakaguides.api.routes import endpoint_manifest, router
# `GatewayService` holds the provider adapters; it is built once here, not per request.
from gbakaguides.api.service import GatewayError, GatewayService
# `AppConfig` is the typed, frozen config; nothing below reads environment variables directly.
from gbakaguides.config.models import AppConfig
# Central logging configuration keeps log lines consistent across the API and scripts.
from gbakaguides.utils.logging import configure_logging


logger = logging.getLogger(__name__)


def _error_body(config: AppConfig, message: str, details: Optional[Any]) -> dict[str, Any]:
    body: dict[str, Any] = {"success": False, "error": message}
    # Upstream diagnostics never leave the process in production.
    if details is not None and not config.app.is_production:
        body["details"] = details
    return body


def _parameter_name(error: Mapping[str, Any]) -> str:
    loc = [str(part) for part in error.get("loc", ()) if part not in ("path", "query")]
    return loc[-1] if loc else "request"


def _describe_validation_error(error: Mapping[str, Any]) -> str:
    return f"{_parameter_name(error)}: {error.get('msg', 'invalid value')}"


# This app factory builds the FastAPI application from a typed config.
# Keeping app construction in a function (instead of module-level globals) improves testability and reuse.
def create_app(config: AppConfig, *, service: Optional[GatewayService] = None) -> FastAPI:
    # Configure logging early so every subsequent log line follows the same format/level.
    configure_logging(config.logging, secrets=(config.providers.mapbox.access_token,))

    app = FastAPI(title=config.app.name, version=config.app.version)

    # Browsers may only call us from the configured frontend origins.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors.allowed_origins),
        allow_credentials=config.cors.allow_credentials,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
    )

    # Store the service on `app.state` so route handlers can reach it through `Depends`.
    app.state.gateway_service = service or GatewayService(config)
    app.state.api_prefix = config.web.api_prefix

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=_error_body(config, exc.message, exc.details))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        # Same envelope and status as the service's own parameter checks, instead of FastAPI's 422.
        problems = [_describe_validation_error(err) for err in exc.errors()]
        name = _parameter_name(exc.errors()[0]) if exc.errors() else "request"
        return JSONResponse(
            status_code=400,
            content=_error_body(config, f'Parameter "{name}" is invalid', problems),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        # Log the full traceback, answer with an opaque message.
        logger.error("Unhandled error on %s: %s", request.url.path, exc, exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body(config, "Internal server error", f"{type(exc).__name__}: {exc}"),
        )

    # Register all API endpoints under the prefix (default `/api`).
    app.include_router(router, prefix=config.web.api_prefix)

    # Unknown API paths get a JSON 404 listing what exists, instead of the frontend's index.html.
    if config.web.api_prefix:

        @app.api_route(
            f"{config.web.api_prefix}/{{path:path}}",
            methods=["GET", "POST", "PUT", "DELETE"],
            include_in_schema=False,
        )
        def api_not_found(request: Request, path: str) -> JSONResponse:
            return JSONResponse(
                status_code=404,
                content={"success": False, "error": "API route not found", "availableRoutes": endpoint_manifest(request)},
            )

    # The built frontend lives in `web.static_dir`; mount it last so API routes keep priority.
    static_dir = config.web.static_dir
    if static_dir.exists():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="frontend")
    else:
        logger.info("Frontend bundle not found at %s; serving API only", static_dir)

    logger.info(
        "%s %s ready (mode=%s, mapbox=%s)",
        config.app.name,
        config.app.version,
        config.app.mode,
        "configured" if config.provider_configured else "missing",
    )
    return app
