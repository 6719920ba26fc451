"""Reference telemetry collector (FastAPI).

Request handling order for ``/log``:
    1. OPTIONS -> 200 with CORS allowances (before any other check)
    2. Non-POST -> 405
    3. Origin not allow-listed -> 403
    4. X-API-Key mismatch -> 401
    5. Body is not JSON -> 400
    6. Per-IP request cap exceeded -> 429 (when enabled)
    7. Enrich, validate (400 on failure), classify, alert, store
    8. Unexpected failure -> 500

Every response carries the CORS headers.

Usage:
    ```python
    from docguard.collector import create_app

    app = create_app(settings)
    ```
"""

import json
import secrets

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from docguard.core.clock import Clock, now_ms
from docguard.core.config import Settings
from docguard.core.result import Failure, Success
from docguard.domain.protocols import EventSinkProtocol, LoggerProtocol
from docguard.collector.ingestion import IngestionLimiter
from docguard.collector.middleware import TraceMiddleware
from docguard.collector.processing import EventProcessor, RequestContext

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, X-API-Key",
}

_ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def _text(body: str, status_code: int) -> PlainTextResponse:
    return PlainTextResponse(body, status_code=status_code, headers=CORS_HEADERS)


def create_app(
    settings: Settings | None = None,
    *,
    sink: EventSinkProtocol | None = None,
    logger: LoggerProtocol | None = None,
    clock: Clock = now_ms,
) -> FastAPI:
    """Build the collector application.

    Args:
        settings: Collector configuration (defaults to global settings).
        sink: Event storage and alerting (defaults to bounded in-memory).
        logger: Structured logger (defaults to the container logger).
        clock: Millisecond clock for enrichment and the ingestion cap.

    Returns:
        FastAPI application exposing ``/log`` and ``/health``.
    """
    from docguard.core import container

    if settings is None:
        settings = container.settings
    if logger is None:
        logger = container.get_logger()
    if sink is None:
        sink = container.get_event_sink(settings)

    processor = EventProcessor(sink, logger, clock=clock)
    per_minute = settings.collector_rate_limit_per_minute
    ingestion_limits = IngestionLimiter(per_minute, logger, clock=clock)
    allowed_origins = set(settings.collector_allowed_origins)

    app = FastAPI(
        title="docguard collector",
        description="Security telemetry collector",
        docs_url="/docs" if settings.is_development else None,
        redoc_url=None,
    )
    app.add_middleware(TraceMiddleware)
    app.state.sink = sink
    app.state.ingestion_limits = ingestion_limits

    @app.api_route("/log", methods=_ALL_METHODS, response_model=None)
    async def log_event(request: Request) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=status.HTTP_200_OK, headers=CORS_HEADERS)

        if request.method != "POST":
            return _text("Method not allowed", status.HTTP_405_METHOD_NOT_ALLOWED)

        origin = request.headers.get("Origin")
        if origin not in allowed_origins:
            logger.warning("collector_origin_rejected", origin=origin)
            return _text("Unauthorized origin", status.HTTP_403_FORBIDDEN)

        api_key = request.headers.get("X-API-Key") or ""
        if not secrets.compare_digest(
            api_key.encode(), settings.collector_api_key.encode()
        ):
            logger.warning("collector_api_key_rejected", origin=origin)
            return _text("Invalid API key", status.HTTP_401_UNAUTHORIZED)

        try:
            try:
                body = json.loads(await request.body())
            except (json.JSONDecodeError, UnicodeDecodeError):
                return _text("Invalid JSON body", status.HTTP_400_BAD_REQUEST)

            context = RequestContext(
                client_ip=request.headers.get("CF-Connecting-IP") or "unknown",
                user_agent=request.headers.get("User-Agent"),
                referer=request.headers.get("Referer"),
                country=request.headers.get("CF-IPCountry"),
            )

            if per_minute > 0:
                decision = ingestion_limits.check(context.client_ip)
                if not decision.allowed:
                    logger.warning(
                        "collector_rate_limited",
                        client_ip=context.client_ip,
                        retry_after_seconds=decision.retry_after_seconds,
                    )
                    response = _text(
                        "Rate limit exceeded", status.HTTP_429_TOO_MANY_REQUESTS
                    )
                    response.headers["Retry-After"] = str(decision.retry_after_seconds)
                    return response

            match await processor.ingest(body, context):
                case Failure(error=err):
                    logger.warning(
                        "collector_event_rejected",
                        error_code=err.code.value,
                        detail=err.message,
                    )
                    return _text("Invalid event structure", status.HTTP_400_BAD_REQUEST)
                case Success(value=accepted):
                    logger.info(
                        "collector_events_accepted",
                        event_count=len(accepted.event_ids),
                        batch_id=accepted.batch_id,
                        client_ip=context.client_ip,
                    )
                    if accepted.is_batch:
                        content = {
                            "success": True,
                            "batchId": accepted.batch_id,
                            "eventIds": accepted.event_ids,
                        }
                    else:
                        content = {"success": True, "eventId": accepted.event_ids[0]}
                    return JSONResponse(content=content, headers=CORS_HEADERS)
        except Exception as e:
            logger.error("collector_request_failed", error=e)
            return _text("Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Health check endpoint for monitoring and load balancers."""
        return {"status": "healthy"}

    return app
