from __future__ import annotations

"""Application factory for FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers) so
tests can build isolated instances.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from analytics_api.adapters.db.sqlalchemy_executor import close_query_executor
from analytics_api.adapters.rate_limit.factory import reset_rate_limiters
from analytics_api.adapters.store.redis_store import close_counter_store
from analytics_api.api.routes import analytics_router, health_router
from analytics_api.core.config import settings
from analytics_api.core.exception_handlers import setup_exception_handlers
from analytics_api.core.logging import configure_logging
from analytics_api.core.middleware import request_id_middleware
from analytics_api.core.openapi import apply_openapi_customizations


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # Store and engine pools are created lazily by their first user.
    yield
    reset_rate_limiters()
    await close_counter_store()
    await close_query_executor()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Analytics API",
        description=(
            "Read-only hourly/daily event and stats reports plus points of "
            "interest. Every report endpoint is rate limited per client "
            "address; pick the throttling strategy with the `api` query "
            "parameter (1, 2 or 3)."
        ),
        version="0.1.0",
        license_info={
            "name": "MIT License",
            "url": "https://opensource.org/licenses/MIT",
        },
        lifespan=lifespan,
    )

    # Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.app.cors_origin_list,
        allow_methods=["GET"],
        allow_headers=["*"],
        expose_headers=["X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset"],
    )
    app.middleware("http")(request_id_middleware)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(health_router)
    app.include_router(analytics_router)

    apply_openapi_customizations(app)

    return app
