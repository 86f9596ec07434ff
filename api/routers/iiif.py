"""
IIIF API Router - image and image information requests

Paths:
    /{prefix}/{identifier}                                         -> info.json redirect
    /{prefix}/{identifier}/info.json                               -> image information
    /{prefix}/{identifier}/{region}/{size}/{rotation}/{quality}.{format} -> image
"""

import asyncio
import functools
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, RedirectResponse, Response

from api.dependencies import (
    canonical_request,
    get_app_settings,
    get_image_service,
    get_info_service,
    get_render_executor,
)
from api.exceptions import safe_endpoint
from config import Settings
from core.constants import IIIFConstants
from core.iiif_parser import parse_identifier, parse_image_request

logger = logging.getLogger(__name__)

router = APIRouter()

JSON_LD = "application/ld+json"
JSON = "application/json"


def _negotiate_info_media_type(request: Request) -> str:
    """JSON-LD only when the client's first preference asks for it"""
    accept = request.headers.get("accept")
    if not accept:
        return JSON
    first = accept.split(",")[0].split(";")[0].strip().lower()
    return JSON_LD if first == JSON_LD else JSON


@router.get("/{prefix}/{identifier}")
@safe_endpoint
async def base_redirect(prefix: str, identifier: str) -> RedirectResponse:
    """Redirect a bare identifier to its image information document"""
    parse_identifier(identifier)
    return RedirectResponse(
        url=f"/{prefix}/{identifier}/{IIIFConstants.INFO_JSON}", status_code=303
    )


@router.get("/{prefix}/{identifier}/info.json")
@safe_endpoint
async def get_image_info(
    prefix: str,
    identifier: str,
    request: Request,
    info_service=Depends(get_info_service),
    settings: Settings = Depends(get_app_settings),
) -> JSONResponse:
    """
    Image information request.

    Lists the formats the identifier is stored in and its native size.
    """
    identifier = parse_identifier(identifier)

    base = settings.iiif.base_url or str(request.base_url).rstrip("/")
    id_base = f"{base}/{prefix}"

    info = await asyncio.to_thread(info_service.describe, identifier, id_base)

    return JSONResponse(
        content=info.to_json(),
        media_type=_negotiate_info_media_type(request),
        headers={"Access-Control-Allow-Origin": "*"},
    )


@router.get("/{prefix}/{identifier}/{region}/{size}/{rotation}/{quality}.{fmt}")
@safe_endpoint
async def get_image(
    prefix: str,
    identifier: str,
    region: str,
    size: str,
    rotation: str,
    quality: str,
    fmt: str,
    request: Request,
    image_service=Depends(get_image_service),
    render_executor=Depends(get_render_executor),
) -> Response:
    """
    Image request.

    Parameters are validated before anything else happens. Rendering runs on
    the render pool: a render may block on a subprocess or on another
    caller's in-flight build of the same image.
    """
    image_request = parse_image_request(identifier, region, size, rotation, quality, fmt)

    entry = await asyncio.get_running_loop().run_in_executor(
        render_executor,
        functools.partial(image_service.render, canonical_request(request), image_request),
    )

    return Response(
        content=entry.data,
        media_type=entry.content_type,
        headers={"Link": IIIFConstants.PROFILE_LINK_HEADER},
    )
