"""
IIIF image request models.

Region, Size and Rotation are closed tagged unions: each variant carries a
literal ``kind`` discriminator so that pydantic (and isinstance checks in the
synthesizer) can tell variants with identical fields apart, e.g. exact and
best-fit sizes.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from core.enums import OutputFormat, Quality


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# Region variants
class RegionFull(_Frozen):
    """The whole source image"""

    kind: Literal["full"] = "full"


class RegionExact(_Frozen):
    """Absolute pixel rectangle"""

    kind: Literal["exact"] = "exact"
    x: int = Field(..., ge=0)
    y: int = Field(..., ge=0)
    width: int = Field(..., ge=0)
    height: int = Field(..., ge=0)


class RegionPercent(_Frozen):
    """Rectangle expressed as percentages of the source dimensions (not clamped)"""

    kind: Literal["pct"] = "pct"
    x: float
    y: float
    width: float
    height: float


Region = Annotated[Union[RegionFull, RegionExact, RegionPercent], Field(discriminator="kind")]


# Size variants
class SizeFull(_Frozen):
    kind: Literal["full"] = "full"


class SizeWidth(_Frozen):
    """Scale to width, height follows aspect ratio"""

    kind: Literal["width"] = "width"
    width: int = Field(..., ge=0)


class SizeHeight(_Frozen):
    """Scale to height, width follows aspect ratio"""

    kind: Literal["height"] = "height"
    height: int = Field(..., ge=0)


class SizeExact(_Frozen):
    """Exact width and height; may distort the aspect ratio"""

    kind: Literal["exact"] = "exact"
    width: int = Field(..., ge=0)
    height: int = Field(..., ge=0)


class SizeBestFit(_Frozen):
    """Largest size that fits within width x height, aspect ratio kept"""

    kind: Literal["best_fit"] = "best_fit"
    width: int = Field(..., ge=0)
    height: int = Field(..., ge=0)


class SizePercent(_Frozen):
    kind: Literal["pct"] = "pct"
    percent: float


Size = Annotated[
    Union[SizeFull, SizeWidth, SizeHeight, SizeExact, SizeBestFit, SizePercent],
    Field(discriminator="kind"),
]


# Rotation variants
class RotationStandard(_Frozen):
    kind: Literal["standard"] = "standard"
    degrees: float = Field(..., ge=0, le=360)


class RotationMirrored(_Frozen):
    """Horizontal flip, applied before the rotation"""

    kind: Literal["mirrored"] = "mirrored"
    degrees: float = Field(..., ge=0, le=360)


Rotation = Annotated[Union[RotationStandard, RotationMirrored], Field(discriminator="kind")]


class SourceDimensions(_Frozen):
    """Native pixel dimensions of a source image"""

    width: int = Field(..., ge=0)
    height: int = Field(..., ge=0)


class ImageRequest(_Frozen):
    """
    Fully parsed IIIF image request.

    One instance per inbound request; immutable once constructed.
    """

    identifier: str
    region: Region
    size: Size
    rotation: Rotation
    quality: Quality
    format: OutputFormat

    @property
    def content_type(self) -> str:
        return self.format.mime_type
