"""
IIIF parameter parser.

Turns the raw URL path segments of an image request into typed values.
Every parser is a pure function of its input string: it either returns a
value or raises the ParseException subclass for that parameter.

Numbers follow a strict grammar. Integers are plain ASCII digits; floats
are decimal literals with an optional sign, fraction and exponent.
Whitespace, digit separators, ``nan`` and ``inf`` are rejected.
"""

import logging
import math
import re
from typing import List, Optional

from api.exceptions import (
    DegreesOutOfRangeException,
    InvalidFormatException,
    InvalidIdentifierException,
    InvalidQualityException,
    InvalidRegionException,
    InvalidRotationException,
    InvalidSizeException,
)
from core.constants import IIIFConstants
from core.enums import OutputFormat, Quality
from schemas.iiif import (
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
)

logger = logging.getLogger(__name__)

_INT_RE = re.compile(r"[0-9]+")
_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def _to_int(raw: str) -> Optional[int]:
    if not _INT_RE.fullmatch(raw):
        return None
    return int(raw)


def _to_float(raw: str) -> Optional[float]:
    if not _FLOAT_RE.fullmatch(raw):
        return None
    value = float(raw)
    # Exponents can still overflow to inf
    if not math.isfinite(value):
        return None
    return value


def _split_ints(raw: str, count: int) -> Optional[List[int]]:
    """Split on commas into exactly ``count`` integers; None on any bad part"""
    parts = raw.split(",")
    if len(parts) != count:
        return None
    values = [_to_int(p) for p in parts]
    if any(v is None for v in values):
        return None
    return values


def _split_floats(raw: str, count: int) -> Optional[List[float]]:
    parts = raw.split(",")
    if len(parts) != count:
        return None
    values = [_to_float(p) for p in parts]
    if any(v is None for v in values):
        return None
    return values


def parse_identifier(raw: str) -> str:
    """Validate an identifier; path, query, fragment, bracket, @ and % are illegal"""
    if not raw or any(c in IIIFConstants.IDENTIFIER_FORBIDDEN_CHARS for c in raw):
        raise InvalidIdentifierException(raw)
    return raw


def parse_region(raw: str) -> Region:
    """
    Parse the region segment.

    Accepts ``full``, ``pct:x,y,w,h`` (floats) and ``x,y,w,h`` (integers).
    """
    if raw == IIIFConstants.FULL:
        return RegionFull()

    if raw.startswith(IIIFConstants.PERCENT_PREFIX):
        values = _split_floats(raw[len(IIIFConstants.PERCENT_PREFIX):], 4)
        if values is None:
            raise InvalidRegionException(raw)
        x, y, w, h = values
        return RegionPercent(x=x, y=y, width=w, height=h)

    if "," in raw:
        values = _split_ints(raw, 4)
        if values is None:
            raise InvalidRegionException(raw)
        x, y, w, h = values
        return RegionExact(x=x, y=y, width=w, height=h)

    raise InvalidRegionException(raw)


def parse_size(raw: str) -> Size:
    """
    Parse the size segment.

    ``w,`` and ``,h`` keep the missing dimension absent rather than zero.
    """
    if raw == IIIFConstants.FULL:
        return SizeFull()

    if raw.startswith(IIIFConstants.PERCENT_PREFIX):
        percent = _to_float(raw[len(IIIFConstants.PERCENT_PREFIX):])
        if percent is None:
            raise InvalidSizeException(raw)
        return SizePercent(percent=percent)

    if raw.startswith(IIIFConstants.BANG_PREFIX):
        values = _split_ints(raw[len(IIIFConstants.BANG_PREFIX):], 2)
        if values is None:
            raise InvalidSizeException(raw)
        return SizeBestFit(width=values[0], height=values[1])

    if "," in raw:
        parts = raw.split(",")
        if len(parts) != 2:
            raise InvalidSizeException(raw)
        w_raw, h_raw = parts

        if w_raw and h_raw:
            w, h = _to_int(w_raw), _to_int(h_raw)
            if w is None or h is None:
                raise InvalidSizeException(raw)
            return SizeExact(width=w, height=h)

        if w_raw:
            w = _to_int(w_raw)
            if w is None:
                raise InvalidSizeException(raw)
            return SizeWidth(width=w)

        if h_raw:
            h = _to_int(h_raw)
            if h is None:
                raise InvalidSizeException(raw)
            return SizeHeight(height=h)

    raise InvalidSizeException(raw)


def parse_rotation(raw: str) -> Rotation:
    """Parse ``[!]degrees``; a leading ``!`` mirrors the image before rotating"""
    mirrored = raw.startswith(IIIFConstants.BANG_PREFIX)
    value = raw[len(IIIFConstants.BANG_PREFIX):] if mirrored else raw

    degrees = _to_float(value)
    if degrees is None:
        raise InvalidRotationException(raw)

    if degrees < 0 or degrees > 360:
        raise DegreesOutOfRangeException(degrees)

    # Normalize -0.0
    degrees = abs(degrees)

    if mirrored:
        return RotationMirrored(degrees=degrees)
    return RotationStandard(degrees=degrees)


def parse_quality(raw: str) -> Quality:
    """Exact, case-sensitive match against the quality enum"""
    try:
        return Quality(raw)
    except ValueError:
        raise InvalidQualityException(raw)


def parse_format(raw: str) -> OutputFormat:
    """Exact, case-sensitive match against the canonical format list"""
    try:
        return OutputFormat(raw)
    except ValueError:
        raise InvalidFormatException(raw)


def parse_image_request(
    identifier: str, region: str, size: str, rotation: str, quality: str, fmt: str
) -> ImageRequest:
    """
    Parse all path segments of an image request.

    Segments are parsed in URL order and the first failure is raised.

    Args:
        identifier: Raw identifier segment
        region: Raw region segment
        size: Raw size segment
        rotation: Raw rotation segment
        quality: Quality part of the last segment
        fmt: Format (extension) part of the last segment

    Returns:
        Immutable ImageRequest
    """
    request = ImageRequest(
        identifier=parse_identifier(identifier),
        region=parse_region(region),
        size=parse_size(size),
        rotation=parse_rotation(rotation),
        quality=parse_quality(quality),
        format=parse_format(fmt),
    )
    logger.debug(f"Parsed image request: {request}")
    return request
