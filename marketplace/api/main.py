"""FastAPI application entry point."""
import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager

import structlog
from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from marketplace.api.errors import register_error_handlers
from marketplace.api.routes import health, listings, tags, users
from marketplace.config import Settings, settings as default_settings
from marketplace.infrastructure.database.connection import (
    create_engine,
    create_schema,
    create_session_factory,
)
from marketplace.logging_config import configure_logging

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings
    engine = create_engine(settings.database_url, echo=settings.database_echo)
    if settings.create_schema_on_startup:
        await create_schema(engine)
    app.state.session_factory = create_session_factory(engine)
    logger.info("marketplace_starting")
    try:
        yield
    finally:
        await engine.dispose()
        logger.info("marketplace_stopping")


async def bind_request_context(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        request_id=request.headers.get("X-Request-Id") or str(uuid.uuid4()),
        method=request.method,
        path=request.url.path,
    )
    return await call_next(request)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.log_level, json_logs=settings.log_json)

    app = FastAPI(
        title="Marketplace",
        description="User profiles, listings, tags and ratings for a campus marketplace.",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=settings.cors_allow_headers,
    )
    app.middleware("http")(bind_request_context)
    register_error_handlers(app)

    api = APIRouter(prefix="/api")
    api.include_router(users.router)
    api.include_router(listings.router)
    api.include_router(tags.router)

    app.include_router(health.router)
    app.include_router(api)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=default_settings.host, port=default_settings.port)
