"""Page transitions computed from the URL, never from in-page controls."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from ..core.config import ConfigProvider, SiteLayout
from ..core.models import PageLocation, PaginationOutcome
from ..core.pacing import Pacer
from .navigation import NavigationController, NavigationError
from .utils import build_listing_url, parse_page_number

logger = logging.getLogger(__name__)

SETTLE_SECONDS = 2.0


@dataclass
class PaginationEngine:
    session: Any
    navigator: NavigationController
    provider: ConfigProvider
    pacer: Pacer
    site_url: str
    layout: SiteLayout = field(default_factory=SiteLayout)
    settle_seconds: float = SETTLE_SECONDS

    def listing_url(self, page: int = 1) -> str:
        """Rebuilds a listing URL with the query token as it is right now."""

        location = PageLocation(
            base_path=self.layout.listing_path,
            query_token=self.provider.query_token(),
            page=page,
        )
        return build_listing_url(self.site_url, location, self.layout.page_param)

    def advance(self, current_url: str) -> PaginationOutcome:
        current_page = parse_page_number(current_url, self.layout.page_param)
        next_url = self.listing_url(current_page + 1)

        if not self._has_next_page_link():
            logger.info("No next-page link on page %d - reached last page", current_page)
            return PaginationOutcome.exhausted(current_page)

        logger.info("Next-page link found - navigating to page %d", current_page + 1)
        try:
            self.navigator.navigate(next_url)
        except NavigationError as exc:
            logger.warning("Could not reach page %d, treating listing as exhausted: %s", current_page + 1, exc)
            return PaginationOutcome.exhausted(current_page)

        self.pacer.sleep(self.settle_seconds)
        actual_page = parse_page_number(self.session.current_url, self.layout.page_param)

        if actual_page == current_page:
            logger.warning("Still on page %d after navigation attempt - page loop detected", current_page)
            return PaginationOutcome.loop_detected(current_page)

        logger.info("Moved to page %d", actual_page)
        return PaginationOutcome.advanced(actual_page)

    def _has_next_page_link(self) -> bool:
        try:
            return bool(self.session.query_all(self.layout.next_page_selector))
        except Exception as exc:
            logger.warning("Next-page lookup failed: %s", exc)
            return False
