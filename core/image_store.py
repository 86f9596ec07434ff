"""
Image Store - source image lookup on the local filesystem.

Stored assets live flat under the image root as ``{identifier}.{format}``.
"""

import logging
from pathlib import Path
from typing import List, Union

from core.enums import OutputFormat

logger = logging.getLogger(__name__)


class ImageStore:
    """Resolves identifiers to stored asset paths"""

    def __init__(self, image_root: Union[str, Path] = "images"):
        """
        Initialize Image Store

        Args:
            image_root: Directory holding the source images
        """
        self.image_root = Path(image_root).resolve()
        logger.info(f"Image Store initialized at: {self.image_root}")

    def path_for(self, identifier: str, fmt: OutputFormat) -> Path:
        """Absolute path of the asset for an identifier in one format"""
        return self.image_root / f"{identifier}.{fmt.value}"

    def exists(self, path: Union[str, Path]) -> bool:
        return Path(path).is_file()

    def discover_formats(self, identifier: str) -> List[OutputFormat]:
        """
        Find the formats an identifier is stored in.

        Returns:
            Matching formats in canonical order (not filesystem order)
        """
        found = [fmt for fmt in OutputFormat if self.exists(self.path_for(identifier, fmt))]
        logger.debug(f"Formats for {identifier}: {[f.value for f in found]}")
        return found
