"""
IIIF Image Server - Main FastAPI Application
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.exceptions import register_exception_handlers
from api.routers import iiif, system
from config import Settings, get_settings
from core.constants import ProcessConstants, SystemConstants
from core.image_magick import ImageMagick
from core.image_store import ImageStore
from core.response_cache import ResponseCache
from services.image_service import ImageService
from services.info_service import InfoService

# Get configuration
settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.system.log_level),
    format=SystemConstants.LOG_FORMAT,
)
logger = logging.getLogger(__name__)

# Suppress watchfiles debug messages
logging.getLogger("watchfiles").setLevel(logging.WARNING)


def init_services(app: FastAPI, settings: Settings) -> None:
    """Create the services and store them in app state for the routers"""
    image_store = ImageStore(settings.image.image_root)
    response_cache = ResponseCache(settings.image.cache_dir)
    image_magick = ImageMagick(
        convert_binary=settings.image.convert_binary,
        identify_binary=settings.image.identify_binary,
        timeout_seconds=settings.image.process_timeout_seconds,
    )

    app.state.settings = settings
    app.state.response_cache = response_cache
    app.state.image_service = ImageService(
        image_store=image_store,
        response_cache=response_cache,
        image_magick=image_magick,
        memory_limit=settings.image.convert_mem_limit,
    )
    app.state.info_service = InfoService(image_store=image_store, image_magick=image_magick)
    app.state.render_executor = ThreadPoolExecutor(
        max_workers=settings.image.render_workers,
        thread_name_prefix=ProcessConstants.RENDER_THREAD_PREFIX,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle"""
    # Startup
    logger.info(f"Starting {SystemConstants.SERVICE_NAME}...")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Debug mode: {settings.system.debug}")

    init_services(app, settings)
    logger.info("All services initialized successfully")

    yield

    # Shutdown
    app.state.render_executor.shutdown(wait=False)
    logger.info("Server shutdown complete")


# Create FastAPI app
app = FastAPI(
    title=SystemConstants.SERVICE_NAME,
    description="IIIF Image API 2.x server backed by ImageMagick",
    version=SystemConstants.VERSION,
    lifespan=lifespan,
)

if settings.api.cors_enabled:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """One log line per request: method, path, status, client, elapsed"""
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000

    client_ip = request.client.host if request.client else "-"
    logger.info(
        f"{request.method} {request.url.path} {response.status_code} "
        f"client={client_ip} elapsed={elapsed_ms:.1f}ms"
    )
    return response


# Register exception handlers
register_exception_handlers(app)

# Include routers; system first so its fixed paths win over the IIIF patterns
app.include_router(system.router, prefix="/api/system", tags=["System"])
app.include_router(iiif.router, tags=["IIIF"])


# Root endpoint
@app.get("/")
async def root():
    return {
        "name": SystemConstants.SERVICE_NAME,
        "status": "running",
        "version": SystemConstants.VERSION,
        "endpoints": {
            "info": "/{prefix}/{identifier}/info.json",
            "image": "/{prefix}/{identifier}/{region}/{size}/{rotation}/{quality}.{format}",
            "system": "/api/system",
            "docs": "/docs",
        },
    }


# Health check endpoint
@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "services": {
            "image_service": getattr(app.state, "image_service", None) is not None,
            "info_service": getattr(app.state, "info_service", None) is not None,
            "response_cache": getattr(app.state, "response_cache", None) is not None,
        },
    }


# Error handler
@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    logger.error(f"Global exception: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"detail": f"Internal server error: {str(exc)}"})


if __name__ == "__main__":
    server_config = uvicorn.Config(
        "main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.system.debug,
        log_level="info",
        loop="asyncio",
    )

    server = uvicorn.Server(server_config)

    try:
        server.run()
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")
    except Exception as e:
        logger.error(f"Server error: {e}")
    finally:
        logger.info("Server exiting...")
