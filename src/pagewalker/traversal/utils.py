"""Helpers that rebuild listing URLs from the query token."""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import parse_qs, urlparse

from ..core.models import PageLocation


def parse_page_number(url: str, page_param: str = "pageno") -> int:
    """Returns the page number carried by ``url``, 1 when absent or invalid.

    The query token may hold its parameters in the path (``/results/city=X``),
    so the raw URL is searched when the query string has no page parameter.
    """

    parsed = urlparse(url)
    values = parse_qs(parsed.query).get(page_param)
    raw: Optional[str] = values[-1] if values else None

    if raw is None:
        matches = re.findall(rf"[?&/]{re.escape(page_param)}=(\d+)", url)
        raw = matches[-1] if matches else None

    try:
        page = int(raw) if raw is not None else 1
    except ValueError:
        return 1
    return page if page >= 1 else 1


def build_listing_url(site_url: str, location: PageLocation, page_param: str = "pageno") -> str:
    """Composes the listing URL; page 1 maps to the bare token URL."""

    base = f"{site_url.rstrip('/')}/{location.base_path.strip('/')}/{location.query_token.lstrip('/')}"
    if location.page <= 1:
        return base

    separator = "&" if ("?" in location.query_token or "=" in location.query_token) else "?"
    return f"{base}{separator}{page_param}={location.page}"
