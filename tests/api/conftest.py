"""
Pytest configuration for API integration tests
"""

from concurrent.futures import ThreadPoolExecutor

import pytest
from fastapi.testclient import TestClient

from config import Settings
from core.constants import ProcessConstants


@pytest.fixture
def app_settings(image_root, cache_dir):
    """Settings pointing at the temporary image and cache directories"""
    settings = Settings()
    settings.image.image_root = str(image_root)
    settings.image.cache_dir = str(cache_dir)
    return settings


@pytest.fixture
def render_executor():
    executor = ThreadPoolExecutor(
        max_workers=2, thread_name_prefix=ProcessConstants.RENDER_THREAD_PREFIX
    )
    yield executor
    executor.shutdown(wait=True)


@pytest.fixture(scope="function")
def client(app_settings, image_service, info_service, response_cache, render_executor):
    """
    Create a test client with properly initialized app state.
    Each test gets a fresh client to avoid state contamination.
    """
    from main import app

    # Set in app state; the services talk to the fake ImageMagick
    app.state.settings = app_settings
    app.state.response_cache = response_cache
    app.state.image_service = image_service
    app.state.info_service = info_service
    app.state.render_executor = render_executor

    # Create test client (no context manager, so lifespan doesn't replace the services)
    test_client = TestClient(app, raise_server_exceptions=False)

    yield test_client

    for name in ("settings", "response_cache", "image_service", "info_service", "render_executor"):
        if hasattr(app.state, name):
            delattr(app.state, name)
