"""
Centralized enums shared by the parser, synthesizer and schemas.
"""

from enum import Enum

from core.constants import FormatConstants


class Quality(str, Enum):
    """IIIF rendering quality"""

    DEFAULT = "default"
    COLOR = "color"
    GRAY = "gray"
    BITONAL = "bitonal"


class OutputFormat(str, Enum):
    """Supported output formats, declared in canonical order"""

    JPG = "jpg"
    TIF = "tif"
    PNG = "png"
    GIF = "gif"
    JP2 = "jp2"
    PDF = "pdf"
    WEBP = "webp"

    @property
    def mime_type(self) -> str:
        return FormatConstants.MIME_TYPES.get(self.value, FormatConstants.DEFAULT_MIME_TYPE)
