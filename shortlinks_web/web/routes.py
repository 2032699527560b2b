"""Redirect and health routes."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import RedirectResponse

from shortlinks.common.headers import resolve_client_location
from shortlinks.store.models import ClickEvent
from ..api.routes import NOT_FOUND_DETAIL
from ..api.schemas import HealthResponse

router = APIRouter()

logger = logging.getLogger("shortlinks.web")


def _click_from_request(request: Request) -> ClickEvent:
    client_host = request.client.host if request.client else None
    return ClickEvent(
        timestamp=datetime.now(timezone.utc),
        referrer=request.headers.get("referer"),
        user_agent=request.headers.get("user-agent"),
        location=resolve_client_location(
            getattr(request.state, "forwarded_for", None),
            client_host,
        ),
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Liveness probe.",
)
async def health_check(request: Request):
    """Health check endpoint for load balancers."""
    service = request.app.state.service

    health = await service.health_check()

    return HealthResponse(
        status="healthy",
        records=health["records"],
        timestamp=datetime.now(timezone.utc),
    )


@router.get("/{shortcode}", include_in_schema=False)
async def redirect_to_url(request: Request, shortcode: str):
    """Redirect to the original URL and record the click."""
    service = request.app.state.service

    logger.info(f"Redirect request for shortcode: {shortcode}")

    record = await service.resolve(shortcode, _click_from_request(request))

    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=NOT_FOUND_DETAIL,
        )

    return RedirectResponse(url=record.original_url, status_code=status.HTTP_302_FOUND)
