"""Per-page item activation."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from ..browser.diagnostics import Snapshotter
from ..core.config import SiteLayout
from ..core.pacing import Pacer

logger = logging.getLogger(__name__)

CONTAINER_TIMEOUT_MS = 10000
CLICK_TIMEOUT_MS = 5000
ITEM_DELAY_RANGE = (0.1, 0.3)

# Scheduled on the page's event loop; evaluate returns before the click runs.
DISMISS_MODAL_SCRIPT = """
(selector) => {
  setTimeout(() => {
    try {
      const link = document.querySelector(selector);
      if (link) link.click();
    } catch (e) {}
  }, 0);
}
"""


@dataclass(frozen=True)
class QueryStrategy:
    """A selector for qualifying items.

    ``excludes_activated`` is true when the selector itself filters out items
    that were already activated.
    """

    name: str
    selector: str
    excludes_activated: bool


@dataclass(frozen=True)
class ActivationTarget:
    element: Any
    position: int
    strategy: QueryStrategy

    @property
    def confirmed_qualifying(self) -> bool:
        return self.strategy.excludes_activated


@dataclass
class ActivationReport:
    strategy: Optional[str] = None
    attempted: int = 0
    activated: int = 0
    failures: list[str] = field(default_factory=list)


def build_strategies(layout: SiteLayout) -> tuple[QueryStrategy, ...]:
    strategies = []
    for index, selector in enumerate(layout.item_selectors):
        name = "primary" if index == 0 else f"fallback-{index}"
        strategies.append(QueryStrategy(name=name, selector=selector, excludes_activated=index == 0))
    return tuple(strategies)


@dataclass
class ActivationEngine:
    session: Any
    pacer: Pacer
    snapshotter: Optional[Snapshotter] = None
    layout: SiteLayout = field(default_factory=SiteLayout)
    container_timeout_ms: int = CONTAINER_TIMEOUT_MS
    click_timeout_ms: int = CLICK_TIMEOUT_MS
    delay_range: tuple[float, float] = ITEM_DELAY_RANGE
    clock: Callable[[], float] = time.monotonic

    def __post_init__(self) -> None:
        self.strategies = build_strategies(self.layout)

    def activate_current_page(self) -> int:
        """Activates every qualifying item and returns how many clicks landed."""

        return self.scan_and_activate().activated

    def scan_and_activate(self) -> ActivationReport:
        logger.info("Looking for items to activate...")
        self._snapshot("before-activation.png")
        self._wait_for_items()

        targets = self.find_targets()
        report = ActivationReport(strategy=targets[0].strategy.name if targets else None)
        last_click: Optional[float] = None

        for target in targets:
            report.attempted += 1
            label = f"{target.position}/{len(targets)}"
            if not target.confirmed_qualifying:
                label += " (state unconfirmed)"
            if last_click is not None:
                logger.info("Activating item %s - %.1f s", label, self.clock() - last_click)
            else:
                logger.info("Activating item %s", label)

            try:
                target.element.click(timeout=self.click_timeout_ms)
            except Exception as exc:
                report.failures.append(f"item {target.position}: {exc}")
                logger.warning("Failed to activate item %d: %s", target.position, exc)
            else:
                report.activated += 1
                last_click = self.clock()
                self._dismiss_modal()

            if not self.pacer.jitter(*self.delay_range):
                logger.info("Shutdown requested - leaving page after item %s", label)
                break

        self._snapshot("after-activation.png")
        logger.info(
            "Finished page - activated %d of %d item(s) via %s selector",
            report.activated,
            len(targets),
            report.strategy or "no",
        )
        return report

    def find_targets(self) -> list[ActivationTarget]:
        """Tries each strategy in order and returns the first non-empty match."""

        for strategy in self.strategies:
            try:
                elements = self.session.query_all(strategy.selector)
            except Exception as exc:
                logger.warning("Query for %s selector failed: %s", strategy.name, exc)
                elements = []

            logger.info("Found %d item(s) with %s selector", len(elements), strategy.name)
            if elements:
                return [
                    ActivationTarget(element=element, position=position, strategy=strategy)
                    for position, element in enumerate(elements, start=1)
                ]
        return []

    def _dismiss_modal(self) -> None:
        """Fire-and-forget close of the overlay opened by an activation.

        The click is scheduled inside the page and nothing waits for it. A
        blocking wait here would let the modal stall the next item, so keep it
        unobserved. Failures are absorbed.
        """

        try:
            self.session.evaluate(DISMISS_MODAL_SCRIPT, self.layout.modal_close_selector)
        except Exception:
            pass

    def _wait_for_items(self) -> None:
        try:
            self.session.wait_for_element(self.layout.item_container_selector, self.container_timeout_ms)
        except Exception as exc:
            logger.warning("Item container did not render, scanning anyway: %s", exc)

    def _snapshot(self, name: str) -> None:
        if self.snapshotter is not None:
            self.snapshotter.capture(name)
