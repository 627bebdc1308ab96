from .logs import router as logs_router
from .routes_health import router as health_router
from .thumbnails import router as thumbnails_router
from .uploads import router as uploads_router

__all__ = ["health_router", "logs_router", "thumbnails_router", "uploads_router"]
