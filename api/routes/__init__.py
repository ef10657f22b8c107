"""API routes."""

from api.routes.therapy import router as therapy_router

__all__ = ["therapy_router"]
