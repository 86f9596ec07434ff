"""
Shared FastAPI dependencies for the IIIF Image Server.
Centralizes access to the services stored in app state.
"""

import logging
from concurrent.futures import Executor
from typing import Optional
from urllib.parse import unquote

from fastapi import Depends, HTTPException, Request

from config import Settings, get_settings
from core.response_cache import ResponseCache
from services.image_service import ImageService
from services.info_service import InfoService

logger = logging.getLogger(__name__)


class Managers:
    """Container for all service instances."""

    def __init__(
        self,
        image_service: ImageService,
        info_service: InfoService,
        response_cache: ResponseCache,
    ):
        self.image_service = image_service
        self.info_service = info_service
        self.response_cache = response_cache


def get_managers(request: Request) -> Managers:
    """
    Get all service instances from app state.

    Args:
        request: FastAPI request object

    Returns:
        Managers container with all service instances

    Raises:
        HTTPException: If services not initialized
    """
    try:
        return Managers(
            image_service=request.app.state.image_service,
            info_service=request.app.state.info_service,
            response_cache=request.app.state.response_cache,
        )
    except AttributeError as e:
        logger.error(f"Services not initialized in app state: {e}")
        raise HTTPException(
            status_code=500, detail="Internal server error: Services not initialized"
        )


def get_image_service(managers: Managers = Depends(get_managers)) -> ImageService:
    """Get ImageService instance."""
    return managers.image_service


def get_info_service(managers: Managers = Depends(get_managers)) -> InfoService:
    """Get InfoService instance."""
    return managers.info_service


def get_response_cache(managers: Managers = Depends(get_managers)) -> ResponseCache:
    """Get ResponseCache instance."""
    return managers.response_cache


def get_render_executor(request: Request) -> Optional[Executor]:
    """Dedicated render pool; None falls back to the event loop's default executor."""
    return getattr(request.app.state, "render_executor", None)


def get_app_settings(request: Request) -> Settings:
    """Settings stored on the app, falling back to the environment."""
    return getattr(request.app.state, "settings", None) or get_settings()


def canonical_request(request: Request) -> str:
    """Decoded path plus decoded query string; the cache key input."""
    path = request.scope["path"]
    query = unquote(request.scope.get("query_string", b"").decode("latin-1"))
    return f"{path}?{query}" if query else path
