"""
Pytest configuration and fixtures for IIIF Image Server tests
"""

import threading
from typing import Dict, List, Optional

import pytest

from api.exceptions import ExternalProcessFailedException, SourceProbeFailedException
from core.image_store import ImageStore
from core.response_cache import ResponseCache
from schemas.iiif import SourceDimensions
from services.image_service import ImageService
from services.info_service import InfoService


class FakeImageMagick:
    """
    Stand-in for the convert/identify collaborators.

    transform() returns bytes derived from the argument vector so tests can
    tell outputs apart; every call is recorded.
    """

    def __init__(self, dimensions: Optional[Dict[str, SourceDimensions]] = None):
        self.dimensions = dimensions or {}
        self.default_dimensions = SourceDimensions(width=1000, height=800)
        self.transform_calls: List[List[str]] = []
        self.probe_calls: List[str] = []
        self.fail_transform = False
        self.fail_probe = False
        # When set, transform blocks until the event is set
        self.gate: Optional[threading.Event] = None
        self.lock = threading.Lock()

    def transform(self, args: List[str]) -> bytes:
        with self.lock:
            self.transform_calls.append(list(args))
        if self.gate is not None:
            self.gate.wait(timeout=10)
        if self.fail_transform:
            raise ExternalProcessFailedException("convert", "exit status 1: boom", 1)
        return ("IMG:" + " ".join(args)).encode("utf-8")

    def probe(self, path) -> SourceDimensions:
        with self.lock:
            self.probe_calls.append(str(path))
        if self.fail_probe:
            raise SourceProbeFailedException(str(path), "identify exploded")
        name = str(path).rsplit("/", 1)[-1]
        return self.dimensions.get(name, self.default_dimensions)


@pytest.fixture
def image_root(tmp_path):
    """Image directory with a few stored assets"""
    root = tmp_path / "images"
    root.mkdir()
    (root / "cat.jpg").write_bytes(b"jpg-bytes")
    (root / "cat.png").write_bytes(b"png-bytes")
    (root / "dog.webp").write_bytes(b"webp-bytes")
    (root / "dog.tif").write_bytes(b"tif-bytes")
    return root


@pytest.fixture
def cache_dir(tmp_path):
    return tmp_path / "iiifCache"


@pytest.fixture
def fake_magick():
    """Fake ImageMagick with cat.jpg at 640x480"""
    return FakeImageMagick(dimensions={"cat.jpg": SourceDimensions(width=640, height=480)})


@pytest.fixture
def image_store(image_root):
    return ImageStore(image_root)


@pytest.fixture
def response_cache(cache_dir):
    return ResponseCache(cache_dir)


@pytest.fixture
def image_service(image_store, response_cache, fake_magick):
    """Create ImageService wired to the fake collaborator"""
    return ImageService(
        image_store=image_store,
        response_cache=response_cache,
        image_magick=fake_magick,
    )


@pytest.fixture
def info_service(image_store, fake_magick):
    """Create InfoService wired to the fake collaborator"""
    return InfoService(image_store=image_store, image_magick=fake_magick)
