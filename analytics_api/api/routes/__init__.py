from __future__ import annotations

from analytics_api.api.routes.analytics import router as analytics_router
from analytics_api.api.routes.health import router as health_router

__all__ = ["analytics_router", "health_router"]
