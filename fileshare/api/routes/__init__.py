from __future__ import annotations

from fileshare.api.routes.files import router as files_router
from fileshare.api.routes.health import router as health_router

__all__ = ["files_router", "health_router"]
