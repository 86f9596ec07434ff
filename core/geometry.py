"""
Geometry resolver for percentage regions.

Converts the x/y offsets of a percentage region into absolute pixels using
the source dimensions. Width and height stay percentages: convert accepts
percentage crop factors directly.
"""

import math
from dataclasses import dataclass

from schemas.iiif import RegionPercent, SourceDimensions


@dataclass(frozen=True)
class ResolvedPercentRegion:
    """Percentage crop with offsets resolved to pixels"""

    offset_x: int
    offset_y: int
    width_percent: float
    height_percent: float


def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero (2.5 -> 3, -2.5 -> -3)"""
    if value < 0:
        return int(math.ceil(value - 0.5))
    return int(math.floor(value + 0.5))


def resolve(region: RegionPercent, dims: SourceDimensions) -> ResolvedPercentRegion:
    """
    Resolve a percentage region against the source dimensions.

    Args:
        region: Percentage region from the parser
        dims: Native dimensions of the source image

    Returns:
        ResolvedPercentRegion with pixel offsets
    """
    return ResolvedPercentRegion(
        offset_x=round_half_away(dims.width * region.x / 100.0),
        offset_y=round_half_away(dims.height * region.y / 100.0),
        width_percent=region.width,
        height_percent=region.height,
    )
