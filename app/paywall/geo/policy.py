from __future__ import annotations

from collections.abc import Iterable, Mapping

# Edge providers emit these when the lookup failed or the client is on Tor.
UNRESOLVED_COUNTRY_CODES = frozenset({"XX", "T1", "ZZ"})


def normalize_country_code(value: str | None) -> str | None:
    if value is None:
        return None
    candidate = value.strip().upper()
    if len(candidate) != 2 or not candidate.isalpha():
        return None
    if candidate in UNRESOLVED_COUNTRY_CODES:
        return None
    return candidate


def is_blocked(blocked_countries: Iterable[str] | None, visitor_country: str | None) -> bool:
    """Return True when the visitor's country is on the creator's block list.

    Fails open: an empty list or an unknown visitor country never blocks.
    """
    if not blocked_countries:
        return False

    country = normalize_country_code(visitor_country)
    if country is None:
        return False

    return any(country == code.strip().upper() for code in blocked_countries if code)


def parse_header_names(raw: str) -> tuple[str, ...]:
    return tuple(name.strip().lower() for name in raw.split(",") if name.strip())


def resolve_visitor_country(
    headers: Mapping[str, str],
    *,
    header_names: Iterable[str],
) -> str | None:
    for name in header_names:
        country = normalize_country_code(headers.get(name))
        if country is not None:
            return country
    return None
