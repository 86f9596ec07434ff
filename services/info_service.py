"""
Info Service - builds IIIF image information documents.
"""

import logging

from api.exceptions import NoSupportedFormatException
from core.constants import IIIFConstants
from core.image_magick import ImageMagick
from core.image_store import ImageStore
from schemas.info import InfoDocument, ProfileDescription

logger = logging.getLogger(__name__)


class InfoService:
    """Discovers an identifier's formats and native size for info.json"""

    def __init__(self, image_store: ImageStore, image_magick: ImageMagick):
        self.image_store = image_store
        self.image_magick = image_magick

    def describe(self, identifier: str, id_base: str) -> InfoDocument:
        """
        Build the info document for an identifier.

        Formats are probed in canonical order and the dimensions are read
        from the first match.

        Args:
            identifier: Validated identifier
            id_base: URI prefix for "@id" (scheme, host and route prefix)

        Returns:
            InfoDocument

        Raises:
            NoSupportedFormatException: No stored asset in any supported format
            SourceProbeFailedException: Dimensions couldn't be read
        """
        formats = self.image_store.discover_formats(identifier)
        if not formats:
            raise NoSupportedFormatException(identifier)

        dims = self.image_magick.probe(self.image_store.path_for(identifier, formats[0]))

        return InfoDocument(
            context=IIIFConstants.CONTEXT_URI,
            id=f"{id_base.rstrip('/')}/{identifier}",
            protocol=IIIFConstants.PROTOCOL_URI,
            width=dims.width,
            height=dims.height,
            profile=[
                IIIFConstants.COMPLIANCE_LEVEL_URI,
                ProfileDescription(formats=[f.value for f in formats]),
            ],
        )
