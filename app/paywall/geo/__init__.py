from app.paywall.geo.policy import is_blocked, normalize_country_code, resolve_visitor_country

__all__ = ["is_blocked", "normalize_country_code", "resolve_visitor_country"]
