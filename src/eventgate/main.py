"""FastAPI entrypoint."""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from eventgate.config import get_settings
from eventgate.context import IngestContext, build_ingest_context
from eventgate.errors import IngestError
from eventgate.ids import new_id
from eventgate.logging import bind_context, clear_context, configure_logging
from eventgate.routes.health import router as health_router
from eventgate.routes.ingest import is_ingest_path, limiter
from eventgate.routes.ingest import router as ingest_router
from eventgate.routes.responses import error_response, json_response

logger = logging.getLogger(__name__)


def create_app(context: IngestContext | None = None) -> FastAPI:
    """Build the ingest application.

    Without an explicit ``context`` the lifespan builds one from the
    environment and refuses to start when the configuration is invalid.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        settings = context.settings if context is not None else get_settings()
        configure_logging(settings.log_level, json_output=settings.app_env == "prod")
        app.state.ingest = context if context is not None else build_ingest_context(settings)
        logger.info("Accepting %s schema events", settings.schema_generation)
        yield

    app = FastAPI(title="Eventgate Ingest API", version="0.1.0", lifespan=lifespan)
    app.state.limiter = limiter

    @app.middleware("http")
    async def trace_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        trace_id = new_id("trc")
        clear_context()
        bind_context(trace_id=trace_id, method=request.method, path=request.url.path)
        try:
            if request.method == "OPTIONS":
                response: Response = json_response(200, {})
            else:
                response = await call_next(request)
        finally:
            clear_context()
        response.headers["X-Trace-Id"] = trace_id
        return response

    @app.exception_handler(IngestError)
    async def _ingest_error_handler(request: Request, exc: IngestError) -> Response:
        if exc.status_code >= 500:
            logger.error("Request failed: %s", exc)
        return error_response(exc.status_code, str(exc))

    @app.exception_handler(RateLimitExceeded)
    async def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> Response:
        return error_response(429, "rate limit exceeded")

    @app.exception_handler(Exception)
    async def _unhandled_error_handler(request: Request, exc: Exception) -> Response:
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return error_response(500, "Internal server error")

    @app.exception_handler(StarletteHTTPException)
    async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> Response:
        # the catch-all POST route turns unknown GET paths into 405s
        if exc.status_code == 404 or (exc.status_code == 405 and not is_ingest_path(request)):
            return error_response(404, "Not found")
        return error_response(exc.status_code, str(exc.detail))

    app.include_router(health_router)
    app.include_router(ingest_router)
    return app


app = create_app()
