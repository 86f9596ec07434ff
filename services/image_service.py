"""
Image Service - Business logic for rendering IIIF image requests.

This service orchestrates the request pipeline: cache lookup, source
existence check, dimension probing (percentage regions only), argument
synthesis and the external transform.
"""

import logging
from typing import Optional

from api.exceptions import ImageNotFoundException
from core.image_magick import ImageMagick
from core.image_store import ImageStore
from core.response_cache import CacheEntry, ResponseCache
from core.transform_args import synthesize
from core.utils.decorators import timer
from schemas.iiif import ImageRequest, RegionPercent, SourceDimensions

logger = logging.getLogger(__name__)


class ImageService:
    """
    Service for rendering image requests.

    Repeated identical requests are served from the response cache;
    concurrent identical misses share one transform.
    """

    def __init__(
        self,
        image_store: ImageStore,
        response_cache: ResponseCache,
        image_magick: ImageMagick,
        memory_limit: Optional[str] = None,
    ):
        """
        Initialize image service.

        Args:
            image_store: Source image lookup
            response_cache: Content-addressed cache for rendered output
            image_magick: External transform/probe collaborator
            memory_limit: Optional convert memory ceiling
        """
        self.image_store = image_store
        self.response_cache = response_cache
        self.image_magick = image_magick
        self.memory_limit = memory_limit

    def build(self, request: ImageRequest) -> CacheEntry:
        """
        Render a request without consulting the cache.

        Raises:
            ImageNotFoundException: No stored asset for identifier.format
            SourceProbeFailedException: Dimensions needed but unreadable
            ExternalProcessFailedException: convert failed or timed out
        """
        source_path = self.image_store.path_for(request.identifier, request.format)
        if not self.image_store.exists(source_path):
            logger.info(f"no such image: {source_path}")
            raise ImageNotFoundException(request.identifier, request.format.value)

        # Dimensions are only needed to resolve percentage offsets
        dims: Optional[SourceDimensions] = None
        if isinstance(request.region, RegionPercent):
            dims = self.image_magick.probe(source_path)

        args = synthesize(request, source_path, dims=dims, memory_limit=self.memory_limit)
        data = self.image_magick.transform(args)
        return CacheEntry(data=data, content_type=request.content_type)

    def render(self, raw_request: str, request: ImageRequest) -> CacheEntry:
        """
        Render a request, serving from cache when possible.

        Args:
            raw_request: Canonical request string (decoded path + query)
            request: Parsed image request

        Returns:
            CacheEntry with the encoded image and its content type
        """
        key = ResponseCache.key(raw_request)

        with timer() as t:
            entry = self.response_cache.get_or_build(key, lambda: self.build(request))

        logger.info(
            f"Rendered {request.identifier} ({len(entry.data)} bytes, "
            f"{entry.content_type}) in {t['ms']}ms"
        )
        return entry
