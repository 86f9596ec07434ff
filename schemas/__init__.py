"""
Schemas Package

This package contains the Pydantic schemas for validation and serialization,
organized by domain:
- iiif: parsed image request (Region, Size, Rotation unions, ImageRequest)
- info: image information document (info.json)
- system: operational endpoint responses
"""

# Re-export enums from centralized location for convenience
from core.enums import OutputFormat, Quality

from .iiif import (
    ImageRequest,
    Region,
    RegionExact,
    RegionFull,
    RegionPercent,
    Rotation,
    RotationMirrored,
    RotationStandard,
    Size,
    SizeBestFit,
    SizeExact,
    SizeFull,
    SizeHeight,
    SizePercent,
    SizeWidth,
    SourceDimensions,
)
from .info import InfoDocument, ProfileDescription
from .system import CacheStatistics, DebugSettings, SystemStatus

__all__ = [
    # Request models
    "ImageRequest",
    "Region",
    "RegionFull",
    "RegionExact",
    "RegionPercent",
    "Size",
    "SizeFull",
    "SizeWidth",
    "SizeHeight",
    "SizeExact",
    "SizeBestFit",
    "SizePercent",
    "Rotation",
    "RotationStandard",
    "RotationMirrored",
    "SourceDimensions",
    # Info models
    "InfoDocument",
    "ProfileDescription",
    # System models
    "SystemStatus",
    "CacheStatistics",
    "DebugSettings",
    # Enums (re-exported from core.enums)
    "Quality",
    "OutputFormat",
]
