"""
Constants and configuration values for the IIIF Image Server.
Centralizes protocol URIs, the canonical format list and magic numbers.
"""


# IIIF Protocol Constants
class IIIFConstants:
    """IIIF Image API 2.x protocol values."""

    CONTEXT_URI = "http://iiif.io/api/image/2/context.json"
    PROTOCOL_URI = "http://iiif.io/api/image"
    COMPLIANCE_LEVEL_URI = "http://iiif.io/api/image/2/level2.json"
    PROFILE_LINK_HEADER = f'<{COMPLIANCE_LEVEL_URI}>;rel="profile"'

    # Characters that may never appear in an identifier
    IDENTIFIER_FORBIDDEN_CHARS = "/?#[]@%"

    FULL = "full"
    PERCENT_PREFIX = "pct:"
    BANG_PREFIX = "!"

    INFO_JSON = "info.json"


# Format Constants
class FormatConstants:
    """MIME types for the output formats (the canonical order lives in OutputFormat)."""

    MIME_TYPES = {
        "jpg": "image/jpeg",
        "tif": "image/tiff",
        "png": "image/png",
        "gif": "image/gif",
        "jp2": "image/jp2",
        "pdf": "application/pdf",
        "webp": "image/webp",
    }

    DEFAULT_MIME_TYPE = "application/octet-stream"


# External Process Constants
class ProcessConstants:
    """Constants for the ImageMagick collaborators."""

    DEFAULT_TIMEOUT_SECONDS = 30.0
    PROBE_FORMAT = "%w,%h\n"
    STDOUT_SINK = "-"
    # Cap on stderr echoed into logs and error details
    MAX_STDERR_CHARS = 500
    RENDER_THREAD_PREFIX = "iiif-render"


# Cache Constants
class CacheConstants:
    """Constants for the content-addressed response cache."""

    DEFAULT_CACHE_DIR = "iiifCache"
    SHARD_PREFIX_LENGTH = 2
    CONTENT_TYPE_SUFFIX = ".type"
    TEMP_SUFFIX = ".tmp"


# System Constants
class SystemConstants:
    """Constants for system operations."""

    SERVICE_NAME = "IIIF Image Server"
    VERSION = "1.0.0"
    LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


# Error Messages
class ErrorMessages:
    """Standard error messages."""

    INVALID_IDENTIFIER = "Identifier contains illegal characters: {identifier}"
    EMPTY_IDENTIFIER = "Identifier must not be empty"
    INVALID_REGION = "Couldn't parse region: {region}"
    INVALID_SIZE = "Couldn't parse size: {size}"
    INVALID_ROTATION = "Couldn't parse rotation: {rotation}"
    DEGREES_OUT_OF_RANGE = "Invalid rotation: degrees out of range [0, 360]: {degrees}"
    INVALID_QUALITY = "Invalid quality: {quality}"
    INVALID_FORMAT = "Invalid format: {format}"

    SOURCE_PROBE_FAILED = "Couldn't read dimensions of {path}: {error}"
    UNRECOGNIZED_VARIANT = "Unrecognized {kind}: {value!r}"
    PROCESS_FAILED = "{binary} failed: {error}"
    NO_SUPPORTED_FORMAT = "No image in a supported format for identifier {identifier}"
    IMAGE_NOT_FOUND = "No such image: {identifier}.{format}"
