"""
API Routers for the IIIF Image Server
"""

from . import iiif, system

__all__ = ["iiif", "system"]
