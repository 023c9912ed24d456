from __future__ import annotations

from broker.api.routes.health import router as health_router
from broker.api.routes.submissions import router as submissions_router

__all__ = ["health_router", "submissions_router"]
