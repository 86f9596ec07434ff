"""
Exception taxonomy and FastAPI exception handlers for the IIIF Image Server.

Every domain error derives from IIIFServerException and carries the HTTP
status it maps to. Routers let these propagate; the handler registered by
register_exception_handlers turns them into JSON error bodies.
"""

import functools
import logging
from typing import Any, Callable, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from core.constants import ErrorMessages

logger = logging.getLogger(__name__)


class IIIFServerException(Exception):
    """Base exception for all IIIF server errors"""

    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    @property
    def error_type(self) -> str:
        return type(self).__name__


# Parse errors (400) - terminal, never retried
class ParseException(IIIFServerException):
    status_code = 400


class InvalidIdentifierException(ParseException):
    def __init__(self, identifier: str):
        if identifier:
            detail = ErrorMessages.INVALID_IDENTIFIER.format(identifier=identifier)
        else:
            detail = ErrorMessages.EMPTY_IDENTIFIER
        super().__init__(detail)
        self.identifier = identifier


class InvalidRegionException(ParseException):
    def __init__(self, region: str):
        super().__init__(ErrorMessages.INVALID_REGION.format(region=region))
        self.region = region


class InvalidSizeException(ParseException):
    def __init__(self, size: str):
        super().__init__(ErrorMessages.INVALID_SIZE.format(size=size))
        self.size = size


class InvalidRotationException(ParseException):
    def __init__(self, rotation: str):
        super().__init__(ErrorMessages.INVALID_ROTATION.format(rotation=rotation))
        self.rotation = rotation


class DegreesOutOfRangeException(ParseException):
    def __init__(self, degrees: float):
        super().__init__(ErrorMessages.DEGREES_OUT_OF_RANGE.format(degrees=degrees))
        self.degrees = degrees


class InvalidQualityException(ParseException):
    def __init__(self, quality: str):
        super().__init__(ErrorMessages.INVALID_QUALITY.format(quality=quality))
        self.quality = quality


class InvalidFormatException(ParseException):
    def __init__(self, fmt: str):
        super().__init__(ErrorMessages.INVALID_FORMAT.format(format=fmt))
        self.format = fmt


# Resolution errors
class ResolutionException(IIIFServerException):
    status_code = 500


class SourceProbeFailedException(ResolutionException):
    def __init__(self, path: str, error: str):
        super().__init__(ErrorMessages.SOURCE_PROBE_FAILED.format(path=path, error=error))
        self.path = path


# Synthesis errors - internal invariant violations
class SynthesisException(IIIFServerException):
    status_code = 500


class UnrecognizedVariantException(SynthesisException):
    def __init__(self, kind: str, value: Any):
        super().__init__(ErrorMessages.UNRECOGNIZED_VARIANT.format(kind=kind, value=value))
        self.kind = kind


# Transform errors
class TransformException(IIIFServerException):
    status_code = 502


class ExternalProcessFailedException(TransformException):
    def __init__(self, binary: str, error: str, returncode: Optional[int] = None):
        super().__init__(ErrorMessages.PROCESS_FAILED.format(binary=binary, error=error))
        self.binary = binary
        self.returncode = returncode


# Cache errors - logged by the cache, never surfaced to clients
class CacheException(IIIFServerException):
    status_code = 500


class CacheReadFailedException(CacheException):
    pass


class CacheWriteFailedException(CacheException):
    pass


# Not found errors (404)
class NotFoundException(IIIFServerException):
    status_code = 404


class NoSupportedFormatException(NotFoundException):
    def __init__(self, identifier: str):
        super().__init__(ErrorMessages.NO_SUPPORTED_FORMAT.format(identifier=identifier))
        self.identifier = identifier


class ImageNotFoundException(NotFoundException):
    def __init__(self, identifier: str, fmt: str):
        super().__init__(ErrorMessages.IMAGE_NOT_FOUND.format(identifier=identifier, format=fmt))
        self.identifier = identifier
        self.format = fmt


def safe_endpoint(func: Callable) -> Callable:
    """
    Decorator for async route handlers.

    Domain exceptions and HTTPException propagate to their handlers;
    anything else is logged with a traceback and reported as a 500.
    """

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except (IIIFServerException, HTTPException):
            raise
        except Exception as e:
            logger.error(f"Unhandled error in {func.__name__}: {e}", exc_info=True)
            raise HTTPException(status_code=500, detail=f"Internal server error: {e}")

    return wrapper


async def iiif_exception_handler(request: Request, exc: IIIFServerException) -> JSONResponse:
    """Render a domain exception as a JSON error body"""
    if exc.status_code >= 500:
        logger.error(f"{exc.error_type} on {request.url.path}: {exc.detail}")
    else:
        logger.info(f"{exc.error_type} on {request.url.path}: {exc.detail}")

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.error_type, "detail": exc.detail},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register domain exception handlers on the application"""
    app.add_exception_handler(IIIFServerException, iiif_exception_handler)
