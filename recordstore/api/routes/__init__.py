from __future__ import annotations

from recordstore.api.routes.health import router as health_router
from recordstore.api.routes.records import router as records_router

__all__ = ["health_router", "records_router"]
