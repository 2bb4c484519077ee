"""HTTP surface (FastAPI).

Why in adapters:
- Routing, status codes and headers are infrastructure details.
- `create_app` owns exactly one cache, one admission controller and one
  service; tests build as many independent apps as they need.
"""

from __future__ import annotations

import logging
import math
import time
from datetime import timedelta

import uvicorn
from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from adapters.system_clock import SystemClock
from adapters.zoneinfo_oracle import ZoneInfoOracle
from core.config import AppSettings
from core.domain.errors import (
    InvalidInstantError,
    InvalidZoneError,
    MissingParameterError,
    OracleFailureError,
    RateLimitExceededError,
    TzClockError,
)
from core.domain.models import ErrorPayload
from core.interfaces.clock import Clock
from core.interfaces.zone_oracle import ZoneOracle
from core.logging_config import configure_logging
from core.services.admission import AdmissionControl, AdmissionDecision
from core.services.clock_service import ClockService
from core.services.response_cache import ResponseCache

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: dict[type[TzClockError], int] = {
    MissingParameterError: 400,
    InvalidZoneError: 400,
    InvalidInstantError: 400,
    RateLimitExceededError: 429,
    OracleFailureError: 500,
}

# Subset of helmet's defaults that matters for a JSON API.
_SECURITY_HEADERS: dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
}


def error_response(exc: TzClockError) -> JSONResponse:
    """Structured error body for a domain error."""

    status = _STATUS_BY_ERROR.get(type(exc), 500)
    payload = ErrorPayload(error=exc.user_message, kind=exc.kind)
    headers: dict[str, str] = {}
    if isinstance(exc, RateLimitExceededError):
        headers["Retry-After"] = str(max(1, math.ceil(exc.retry_after_seconds)))
    return JSONResponse(status_code=status, content=payload.model_dump(), headers=headers)


def _rate_limit_headers(decision: AdmissionDecision) -> dict[str, str]:
    return {
        "RateLimit-Limit": str(decision.limit),
        "RateLimit-Remaining": str(decision.remaining),
        "RateLimit-Reset": str(math.ceil(decision.reset_after_seconds)),
    }


def _client_id(request: Request) -> str:
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def _usage_text(service_name: str) -> str:
    return (
        f"{service_name}\n\n"
        "Endpoints:\n"
        "GET /time?zone=Africa/Lagos\n"
        "GET /timezones\n"
        "GET /convert?from=UTC&to=Asia/Tokyo&time=2025-10-19T14:00:00Z\n"
        "GET /health\n"
    )


def create_app(
    settings: AppSettings | None = None,
    *,
    oracle: ZoneOracle | None = None,
    clock: Clock | None = None,
) -> FastAPI:
    """Build the FastAPI application with its own cache and admission state."""

    settings = settings or AppSettings()
    oracle = oracle or ZoneInfoOracle()
    clock = clock or SystemClock()

    cache = ResponseCache(clock)
    admission = AdmissionControl(
        clock,
        window=timedelta(seconds=settings.rate_window_seconds),
        max_requests=settings.rate_max_requests,
        max_tracked_clients=settings.rate_max_tracked_clients,
    )
    service = ClockService.from_settings(settings, oracle=oracle, clock=clock, cache=cache)

    app = FastAPI(
        title=settings.service_name,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings
    app.state.cache = cache
    app.state.admission = admission
    app.state.service = service

    if settings.cors_enabled:
        app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["GET"])

    # Registered innermost first: the last one wraps all the others. Security
    # headers sit outside admission so 429 responses carry them too.
    @app.middleware("http")
    async def admission_control(request: Request, call_next) -> Response:
        client = _client_id(request)
        decision = admission.check(client)
        if not decision.allowed:
            exc = RateLimitExceededError(client, retry_after_seconds=decision.reset_after_seconds)
            response = error_response(exc)
            response.headers.update(_rate_limit_headers(decision))
            return response
        response = await call_next(request)
        response.headers.update(_rate_limit_headers(decision))
        return response

    @app.middleware("http")
    async def security_headers(request: Request, call_next) -> Response:
        response = await call_next(request)
        for name, value in _SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    @app.middleware("http")
    async def access_log(request: Request, call_next) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s %d %.1fms %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            _client_id(request),
        )
        return response

    @app.exception_handler(TzClockError)
    async def handle_domain_error(request: Request, exc: TzClockError) -> JSONResponse:
        if isinstance(exc, OracleFailureError):
            logger.error("Oracle failure on %s: %s", request.url.path, exc, exc_info=exc)
        else:
            logger.info("Rejected %s: %s", request.url.path, exc)
        return error_response(exc)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            payload = ErrorPayload(error="Not found", kind="NotFound")
        else:
            payload = ErrorPayload(error=str(exc.detail), kind="HTTPError")
        return JSONResponse(status_code=exc.status_code, content=payload.model_dump())

    @app.get("/", response_class=PlainTextResponse)
    def usage() -> str:
        return _usage_text(settings.service_name)

    @app.get("/health")
    def health() -> JSONResponse:
        return JSONResponse(service.health().model_dump(mode="json"))

    @app.get("/timezones")
    def timezones() -> JSONResponse:
        return JSONResponse(service.list_zones())

    @app.get("/time")
    def current_time(zone: str | None = None) -> JSONResponse:
        report = service.time_report(zone)
        return JSONResponse(report.model_dump(mode="json", by_alias=True))

    @app.get("/convert")
    def convert_time(
        from_zone: str | None = Query(default=None, alias="from"),
        to_zone: str | None = Query(default=None, alias="to"),
        time_value: str | None = Query(default=None, alias="time"),
    ) -> JSONResponse:
        report = service.convert(from_zone, to_zone, time_value)
        return JSONResponse(report.model_dump(mode="json", by_alias=True))

    return app


def serve(settings: AppSettings | None = None, *, host: str | None = None, port: int | None = None) -> None:
    """Run the API under uvicorn (blocking)."""

    settings = settings or AppSettings()
    configure_logging(settings.log_level)
    app = create_app(settings)
    bind_host = host or settings.host
    bind_port = port or settings.port
    logger.info("%s running on %s:%d", settings.service_name, bind_host, bind_port)
    uvicorn.run(app, host=bind_host, port=bind_port, log_config=None)
