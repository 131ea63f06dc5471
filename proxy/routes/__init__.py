"""API routes package."""

from proxy.routes.file_routes import router as file_router
from proxy.routes.upload_routes import router as upload_router

__all__ = ["file_router", "upload_router"]
