from __future__ import annotations

from uuid import UUID

import structlog
from fastapi import HTTPException, Request

from app.core.config import get_settings
from app.paywall.geo.policy import parse_header_names, resolve_visitor_country

logger = structlog.get_logger(__name__)


def get_viewer_id(request: Request) -> UUID | None:
    """Identity is asserted upstream; a missing or malformed header means anonymous."""
    raw = request.headers.get(get_settings().identity_header)
    if raw is None or not raw.strip():
        return None
    try:
        return UUID(raw.strip())
    except ValueError:
        logger.info("identity_header_invalid")
        return None


def require_user_id(request: Request) -> UUID:
    viewer_id = get_viewer_id(request)
    if viewer_id is None:
        raise HTTPException(status_code=401, detail={"code": "E_UNAUTHENTICATED"})
    return viewer_id


def get_visitor_country(request: Request) -> str | None:
    return resolve_visitor_country(
        request.headers,
        header_names=parse_header_names(get_settings().geo_country_headers),
    )
