"""
Module: main.py
Description: FastAPI application factory for the Sheet Webhook Relay.

Builds the application with its routes, error handlers and the
delivery pipeline (HTTP client, delivery client, queue, relay). The
pipeline is created in the lifespan handler so it is bound to the
serving event loop, and torn down on shutdown.

Run locally with:
    uvicorn sheethook.main:create_app --factory
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from sheethook.config.settings import Settings, load_settings
from sheethook.delivery.observer import DeliveryObserver, LoggingObserver
from sheethook.delivery.push import Sleep, WebhookDeliveryClient
from sheethook.delivery.queue import DeliveryQueue
from sheethook.handlers.notifications import router as notifications_router
from sheethook.ingest.builder import PayloadBuilder
from sheethook.ingest.relay import WebhookRelay
from sheethook.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    *,
    http_client: Optional[httpx.AsyncClient] = None,
    sleep: Sleep = asyncio.sleep,
    observer: Optional[DeliveryObserver] = None
) -> FastAPI:
    """
    Create the relay application.

    Args:
        settings: Settings to use (loaded from the environment if omitted)
        http_client: Outbound HTTP client (created per app if omitted)
        sleep: Async sleep primitive for retry delays and pacing
        observer: Delivery observation sink (logging if omitted)

    Returns:
        Configured FastAPI application

    Raises:
        ConfigurationError: If the endpoint or secret is missing or invalid
    """
    settings = settings or load_settings()
    configure_logging(settings.log_level)
    observer = observer or LoggingObserver()

    # Validates endpoint and secret before the app can start serving
    delivery_client = WebhookDeliveryClient(
        settings.webhook_endpoint,
        settings.webhook_secret,
        max_attempts=settings.max_attempts,
        base_delay_seconds=settings.base_delay_seconds,
        timeout_seconds=settings.delivery_timeout,
        http_client=http_client,
        sleep=sleep,
        observer=observer
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        queue = DeliveryQueue(
            delivery_client.deliver,
            pacing_interval_seconds=settings.pacing_interval_seconds,
            sleep=sleep,
            observer=observer
        )
        app.state.delivery_queue = queue
        app.state.relay = WebhookRelay(PayloadBuilder(settings.watched_column), queue)

        logger.info(
            "Starting webhook relay",
            version=settings.app_version,
            webhook_endpoint=settings.webhook_endpoint,
            watched_column=settings.watched_column,
            max_attempts=settings.max_attempts,
            pacing_interval_ms=settings.pacing_interval_ms
        )
        try:
            yield
        finally:
            logger.info("Shutting down webhook relay", pending=queue.pending_count)
            await queue.close()
            await delivery_client.close()

    app = FastAPI(
        title=settings.app_name,
        description="Relays sheet change notifications to a signed webhook",
        version=settings.app_version,
        lifespan=lifespan
    )
    app.state.settings = settings
    app.include_router(notifications_router)

    @app.get("/health")
    async def health_check():
        """Return basic application health information."""
        return {
            "status": "ok",
            "message": f"{settings.app_name} is healthy",
            "version": settings.app_version
        }

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Log HTTP exceptions and return structured error responses."""
        logger.warning(
            "HTTP exception occurred",
            status_code=exc.status_code,
            detail=exc.detail,
            path=request.url.path,
            method=request.method
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": {
                    "code": exc.status_code,
                    "message": exc.detail,
                    "type": "http_exception"
                }
            }
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Log unexpected exceptions and return a generic error response."""
        logger.error(
            "Unhandled exception occurred",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
            method=request.method
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": 500,
                    "message": "Internal server error",
                    "type": "internal_error"
                }
            }
        )

    return app
