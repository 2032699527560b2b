"""API routes implementation."""

import logging
from typing import List

from fastapi import APIRouter, HTTPException, Request, status

from .schemas import (
    ShortUrlRequest,
    ShortUrlResponse,
    ShortUrlStatsResponse,
    ErrorResponse,
)
from shortlinks.common.url_builder import build_shortlink

router = APIRouter()

logger = logging.getLogger("shortlinks.api")

NOT_FOUND_DETAIL = {
    "error": "Short URL not found",
    "message": "The requested short URL does not exist or has expired",
}


def _shortlink(request: Request, short_code: str) -> str:
    config = request.app.state.config
    return build_shortlink(
        short_code,
        headers=dict(request.headers),
        fallback_base_url=config.base_url,
        path_prefix=config.path_prefix,
        request_scheme=request.url.scheme,
        request_host=request.headers.get("host"),
    )


@router.post(
    "/shorturls",
    response_model=ShortUrlResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request"},
        409: {"model": ErrorResponse, "description": "Shortcode already exists"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
    summary="Create short URL",
    description="Create a shortened URL. Optionally provide a validity in minutes and a custom shortcode.",
)
async def create_short_url(request: Request, body: ShortUrlRequest):
    """Create a shortened URL."""
    service = request.app.state.service

    logger.info(f"POST /shorturls - Creating short URL for {body.url}")

    # RequestValidationFailed and CodeConflictError are rendered by the app's handlers
    record = await service.create_short_url(
        url=body.url,
        validity=body.validity,
        shortcode=body.shortcode,
    )

    shortlink = _shortlink(request, record.shortcode)
    logger.info(f"Successfully created short URL: {shortlink}")

    return ShortUrlResponse(shortlink=shortlink, expiry=record.expires_at)


@router.get(
    "/shorturls/{shortcode}",
    response_model=ShortUrlStatsResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Shortcode not found or expired"},
    },
    summary="Get short URL statistics",
    description="Get a short URL with its click count and every recorded click.",
)
async def get_short_url_stats(request: Request, shortcode: str):
    """Get statistics for a shortened URL."""
    service = request.app.state.service

    record = await service.get_stats(shortcode)

    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=NOT_FOUND_DETAIL,
        )

    response = ShortUrlStatsResponse.from_record(record, _shortlink(request, shortcode))
    logger.info(f"Retrieved statistics for shortcode: {shortcode} ({response.click_count} clicks)")
    return response


@router.get(
    "/shorturls",
    response_model=List[ShortUrlStatsResponse],
    summary="List short URLs",
    description="List every live short URL, newest first.",
)
async def list_short_urls(request: Request):
    """List all live short URLs."""
    service = request.app.state.service

    records = await service.list_short_urls()

    logger.info(f"Retrieved {len(records)} short URLs")
    return [
        ShortUrlStatsResponse.from_record(record, _shortlink(request, record.shortcode))
        for record in records
    ]
