from __future__ import annotations

from app.paywall.entitlements.types import Visibility
from app.paywall.posts.errors import PostValidationError

MAX_TITLE_LENGTH = 200


def validate_visibility_price(*, visibility: str, price_cents: int) -> Visibility:
    try:
        resolved = Visibility(visibility.upper())
    except ValueError as exc:
        raise PostValidationError(f"unknown visibility: {visibility}") from exc

    if price_cents < 0:
        raise PostValidationError("price must not be negative")
    if resolved is Visibility.PPV and price_cents == 0:
        raise PostValidationError("ppv posts need a price")
    if resolved is not Visibility.PPV and price_cents > 0:
        raise PostValidationError("only ppv posts carry a price")
    return resolved


def validate_title(title: str | None) -> str | None:
    if title is None:
        return None
    cleaned = title.strip()
    if len(cleaned) > MAX_TITLE_LENGTH:
        raise PostValidationError("title too long")
    return cleaned or None
