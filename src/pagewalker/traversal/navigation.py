"""Page loads with bounded retries."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ..core.models import NavigationOutcome
from ..core.pacing import Pacer

logger = logging.getLogger(__name__)

DEFAULT_ATTEMPTS = 3
NAVIGATION_TIMEOUT_MS = 60000
RETRY_BACKOFF_SECONDS = 3.0


class NavigationError(RuntimeError):
    """Raised when every navigation attempt for a URL failed."""

    def __init__(self, url: str, outcomes: list[NavigationOutcome]):
        self.url = url
        self.outcomes = outcomes
        last_reason = outcomes[-1].reason if outcomes else "no attempt made"
        super().__init__(f"Navigation to {url} failed after {len(outcomes)} attempt(s): {last_reason}")


@dataclass
class NavigationController:
    session: Any
    pacer: Pacer
    timeout_ms: int = NAVIGATION_TIMEOUT_MS
    backoff_seconds: float = RETRY_BACKOFF_SECONDS

    def navigate(self, url: str, max_attempts: int = DEFAULT_ATTEMPTS) -> NavigationOutcome:
        """Loads ``url`` waiting for ``domcontentloaded``.

        Returns the successful outcome or raises :class:`NavigationError`
        chained to the last underlying exception.
        """

        outcomes: list[NavigationOutcome] = []
        last_error: BaseException | None = None

        for attempt in range(1, max_attempts + 1):
            logger.info("Navigating to: %s (attempt %d/%d)", url, attempt, max_attempts)
            try:
                self.session.navigate(url, wait_until="domcontentloaded", timeout_ms=self.timeout_ms)
            except Exception as exc:
                last_error = exc
                outcomes.append(NavigationOutcome(url=url, attempt=attempt, reason=str(exc)))
                logger.warning("Navigation attempt %d failed: %s", attempt, exc)
                if attempt < max_attempts:
                    logger.info("Waiting %.0f seconds before retry...", self.backoff_seconds)
                    if not self.pacer.sleep(self.backoff_seconds):
                        break
                continue

            logger.info("Successfully navigated to: %s", url)
            return NavigationOutcome(url=url, attempt=attempt)

        raise NavigationError(url, outcomes) from last_error
