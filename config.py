"""
Configuration for the IIIF Image Server.

Settings are grouped into sections (api, system, image, iiif) and populated
from environment variables, falling back to defaults suitable for local
development.
"""

import os
from functools import lru_cache
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class ApiSettings(BaseModel):
    """HTTP server settings"""

    host: str = "0.0.0.0"
    port: int = Field(8080, ge=1, le=65535)
    cors_enabled: bool = True
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])


class SystemSettings(BaseModel):
    """Runtime behaviour settings"""

    log_level: str = "INFO"
    debug: bool = False

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level


class ImageSettings(BaseModel):
    """Source images, response cache and external tool settings"""

    image_root: str = "images"
    cache_dir: str = "iiifCache"
    convert_binary: str = "convert"
    identify_binary: str = "identify"
    # Passed to convert as "-limit memory <value>", e.g. "256MiB"
    convert_mem_limit: Optional[str] = None
    process_timeout_seconds: float = Field(30.0, gt=0)
    # Threads for image renders; info.json and other routes use the default pool
    render_workers: int = Field(8, ge=1)


class IIIFSettings(BaseModel):
    """IIIF protocol settings"""

    # Base for info.json "@id"; derived from the request when unset
    base_url: Optional[str] = None

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: Optional[str]) -> Optional[str]:
        return v.rstrip("/") if v else v


class Settings(BaseModel):
    """Root settings object"""

    environment: str = "development"
    api: ApiSettings = Field(default_factory=ApiSettings)
    system: SystemSettings = Field(default_factory=SystemSettings)
    image: ImageSettings = Field(default_factory=ImageSettings)
    iiif: IIIFSettings = Field(default_factory=IIIFSettings)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables."""
        origins = os.getenv("CORS_ORIGINS", "*")
        return cls(
            environment=os.getenv("ENVIRONMENT", "development"),
            api=ApiSettings(
                host=os.getenv("HOST", "0.0.0.0"),
                port=int(os.getenv("PORT", "8080")),
                cors_enabled=_env_bool("CORS_ENABLED", True),
                cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            ),
            system=SystemSettings(
                log_level=os.getenv("LOG_LEVEL", "INFO"),
                debug=_env_bool("DEBUG", False),
            ),
            image=ImageSettings(
                image_root=os.getenv("IMAGE_ROOT", "images"),
                cache_dir=os.getenv("CACHE_DIR", "iiifCache"),
                convert_binary=os.getenv("CONVERT_BINARY", "convert"),
                identify_binary=os.getenv("IDENTIFY_BINARY", "identify"),
                convert_mem_limit=os.getenv("CONVERT_MEM_LIMIT") or None,
                process_timeout_seconds=float(os.getenv("PROCESS_TIMEOUT", "30")),
                render_workers=int(os.getenv("RENDER_WORKERS", "8")),
            ),
            iiif=IIIFSettings(base_url=os.getenv("IIIF_BASE_URL") or None),
        )

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings.from_env()
