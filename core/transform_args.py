"""
Argument synthesizer for the external transform tool (ImageMagick convert).

Builds an ordered argv list from a parsed ImageRequest. Each value is its
own list element and the list is handed to subprocess without a shell, so
nothing from the request is ever interpreted by a shell.

Clause order:
    crop, resize, mirror, rotate, colorspace, resource limit,
    input path, output sink
"""

import logging
from decimal import Decimal
from pathlib import Path
from typing import List, Optional, Union

from api.exceptions import UnrecognizedVariantException
from core.constants import ProcessConstants
from core.enums import Quality
from core.geometry import resolve
from schemas.iiif import (
    ImageRequest,
    RegionExact,
    RegionFull,
    RegionPercent,
    RotationMirrored,
    RotationStandard,
    SizeBestFit,
    SizeExact,
    SizeFull,
    SizeHeight,
    SizePercent,
    SizeWidth,
    SourceDimensions,
)

logger = logging.getLogger(__name__)


def format_number(value: float) -> str:
    """Render a float without a trailing .0 and never in exponent notation"""
    if float(value).is_integer():
        return str(int(value))
    return format(Decimal(repr(float(value))), "f")


def crop_args(request: ImageRequest, dims: Optional[SourceDimensions]) -> List[str]:
    region = request.region

    if isinstance(region, RegionFull):
        return []

    if isinstance(region, RegionExact):
        geometry = f"{region.width}x{region.height}{region.x:+d}{region.y:+d}"
        return ["-crop", geometry, "+repage"]

    if isinstance(region, RegionPercent):
        if dims is None:
            raise UnrecognizedVariantException("percent region without source dimensions", region)
        resolved = resolve(region, dims)
        geometry = (
            f"{format_number(resolved.width_percent)}%x"
            f"{format_number(resolved.height_percent)}"
            f"{resolved.offset_x:+d}{resolved.offset_y:+d}"
        )
        return ["-crop", geometry, "+repage"]

    raise UnrecognizedVariantException("region", region)


def resize_args(request: ImageRequest) -> List[str]:
    size = request.size

    if isinstance(size, SizeFull):
        return []
    if isinstance(size, SizeHeight):
        return ["-resize", f"x{size.height}"]
    if isinstance(size, SizeWidth):
        return ["-resize", f"{size.width}x"]
    if isinstance(size, SizeExact):
        # "!" forces the exact geometry, ignoring aspect ratio
        return ["-resize", f"{size.width}x{size.height}!"]
    if isinstance(size, SizePercent):
        return ["-resize", f"{format_number(size.percent)}%"]
    if isinstance(size, SizeBestFit):
        return ["-resize", f"{size.width}x{size.height}"]

    raise UnrecognizedVariantException("size", size)


def rotation_args(request: ImageRequest) -> List[str]:
    rotation = request.rotation

    if isinstance(rotation, RotationMirrored):
        args = ["-flop"]
    elif isinstance(rotation, RotationStandard):
        args = []
    else:
        raise UnrecognizedVariantException("rotation", rotation)

    if rotation.degrees != 0:
        args += ["-rotate", format_number(rotation.degrees)]
    return args


def quality_args(request: ImageRequest) -> List[str]:
    quality = request.quality

    if quality in (Quality.DEFAULT, Quality.COLOR):
        return []
    if quality == Quality.GRAY:
        return ["-colorspace", "Gray"]
    if quality == Quality.BITONAL:
        return ["-colorspace", "Gray", "-type", "Bilevel"]

    raise UnrecognizedVariantException("quality", quality)


def synthesize(
    request: ImageRequest,
    source_path: Union[str, Path],
    dims: Optional[SourceDimensions] = None,
    memory_limit: Optional[str] = None,
) -> List[str]:
    """
    Build the convert argument vector for a request.

    Args:
        request: Parsed image request
        source_path: Stored asset to read
        dims: Source dimensions; required only for percentage regions
        memory_limit: Optional ImageMagick memory ceiling (e.g. "256MiB")

    Returns:
        Ordered list of arguments, excluding the executable itself

    Raises:
        UnrecognizedVariantException: A value outside the known variants
    """
    args: List[str] = []
    args += crop_args(request, dims)
    args += resize_args(request)
    args += rotation_args(request)
    args += quality_args(request)

    if memory_limit:
        args += ["-limit", "memory", memory_limit]

    args.append(str(source_path))
    args.append(f"{request.format.value}:{ProcessConstants.STDOUT_SINK}")

    logger.debug(f"Synthesized convert args: {args}")
    return args
