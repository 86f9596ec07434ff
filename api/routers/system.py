"""
System API Router - Status, cache statistics and configuration
"""

import logging
import time
from datetime import datetime

import psutil
from fastapi import APIRouter, Depends

from api.dependencies import get_app_settings, get_response_cache
from api.exceptions import safe_endpoint
from config import Settings
from schemas.system import CacheStatistics, DebugSettings, SystemStatus

logger = logging.getLogger(__name__)

router = APIRouter()

# Track start time
START_TIME = time.time()


@router.get("/status")
@safe_endpoint
async def get_status(response_cache=Depends(get_response_cache)) -> SystemStatus:
    """Get system status"""
    process = psutil.Process()
    memory_info = process.memory_info()
    virtual_memory = psutil.virtual_memory()

    return SystemStatus(
        status="healthy",
        uptime=time.time() - START_TIME,
        memory_usage={
            "process_mb": memory_info.rss / 1024 / 1024,
            "system_percent": virtual_memory.percent,
            "available_mb": virtual_memory.available / 1024 / 1024,
        },
        cache=CacheStatistics(**response_cache.get_statistics()),
    )


@router.get("/cache")
@safe_endpoint
async def get_cache_statistics(response_cache=Depends(get_response_cache)) -> CacheStatistics:
    """Get response cache statistics"""
    return CacheStatistics(**response_cache.get_statistics())


@router.post("/debug/{enable}")
@safe_endpoint
async def set_debug_mode(enable: bool) -> DebugSettings:
    """Enable or disable debug logging"""
    log_level = logging.DEBUG if enable else logging.INFO
    logging.getLogger().setLevel(log_level)

    logger.info(f"Debug mode {'enabled' if enable else 'disabled'}")

    return DebugSettings(enabled=enable, log_level=logging.getLevelName(log_level))


@router.get("/config")
@safe_endpoint
async def get_config(settings: Settings = Depends(get_app_settings)) -> dict:
    """Get current configuration"""
    return settings.to_dict()


@router.get("/health")
async def health_check() -> dict:
    """Simple health check"""
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}
