"""
System API models.

This module contains models for operational endpoints:
- Service status
- Response cache statistics
- Debug settings
"""

from typing import Dict

from pydantic import BaseModel


class CacheStatistics(BaseModel):
    """Response cache counters"""

    hits: int
    misses: int
    builds: int
    shared_waits: int
    read_failures: int
    write_failures: int
    in_flight: int
    hit_rate: float


class SystemStatus(BaseModel):
    """Service status"""

    status: str
    uptime: float
    memory_usage: Dict[str, float]
    cache: CacheStatistics


class DebugSettings(BaseModel):
    """Debug mode settings"""

    enabled: bool
    log_level: str
