"""Top level driver: login, then activate and paginate until stopped."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from ..auth.login import LoginResult, login_with_credentials
from ..browser.diagnostics import Snapshotter
from ..core.config import AppConfig
from ..core.models import PageIteration, PaginationStatus
from ..core.pacing import Pacer
from .activation import ActivationEngine
from .navigation import NavigationController
from .pagination import PaginationEngine
from .state import LOOP_RESET_THRESHOLD, Phase, ResetReason, TraversalState, apply_outcome
from .utils import parse_page_number

logger = logging.getLogger(__name__)

PAGE_DELAY_SECONDS = 2.0
RESET_SETTLE_SECONDS = 3.0


@dataclass
class TraversalStateMachine:
    """Runs until the pacer is cancelled; there is no terminal phase.

    Cancellation is checked between transitions, so a stop request takes
    effect once the current navigation, scan or delay returns.
    """

    session: Any
    config: AppConfig
    pacer: Pacer
    navigator: NavigationController
    pagination: PaginationEngine
    activation: ActivationEngine
    snapshotter: Optional[Snapshotter] = None
    page_delay_seconds: float = PAGE_DELAY_SECONDS
    reset_settle_seconds: float = RESET_SETTLE_SECONDS
    loop_threshold: int = LOOP_RESET_THRESHOLD
    state: TraversalState = field(default_factory=TraversalState)

    @classmethod
    def from_config(cls, session: Any, config: AppConfig, pacer: Pacer) -> "TraversalStateMachine":
        snapshotter = Snapshotter(session, config.screens_dir)
        navigator = NavigationController(session, pacer)
        pagination = PaginationEngine(
            session=session,
            navigator=navigator,
            provider=config.provider,
            pacer=pacer,
            site_url=config.site_url or "",
            layout=config.layout,
        )
        activation = ActivationEngine(
            session=session,
            pacer=pacer,
            snapshotter=snapshotter,
            layout=config.layout,
        )
        return cls(
            session=session,
            config=config,
            pacer=pacer,
            navigator=navigator,
            pagination=pagination,
            activation=activation,
            snapshotter=snapshotter,
        )

    def stop(self) -> None:
        self.pacer.cancel()

    def run(self) -> TraversalState:
        self.state = TraversalState()
        if self.pacer.cancelled:
            return self.state

        self.login()
        self.state = self.state.begin_reset(ResetReason.STARTUP)

        while not self.pacer.cancelled:
            self.state = self.step(self.state)

        logger.info(
            "Traversal stopped - %d item(s) activated over %d page(s), %d reset(s)",
            self.state.total_activation_count,
            self.state.pages_processed,
            self.state.reset_count,
        )
        return self.state

    def login(self) -> LoginResult:
        logger.info("Logging in at %s", self.config.login_url)
        return login_with_credentials(
            self.session,
            self.navigator,
            self.pacer,
            self.config.login_url,
            self.config.credentials,
            self.config.layout,
            self.snapshotter,
        )

    def step(self, state: TraversalState) -> TraversalState:
        """Performs one transition followed by its pacing delay."""

        try:
            if state.phase is Phase.RESETTING:
                state = self._reset(state)
                delay = self.reset_settle_seconds
            else:
                state = self._traverse(state)
                delay = self.page_delay_seconds
        except Exception:
            logger.exception("Unexpected error while on page %d - resetting", state.page)
            if state.phase is not Phase.RESETTING:
                state = state.begin_reset(ResetReason.ERROR)
            delay = self.page_delay_seconds

        self.pacer.sleep(delay)
        return state

    def process_page(self) -> PageIteration:
        """Activates the current page, then requests the next one."""

        activated = self.activation.activate_current_page()
        outcome = self.pagination.advance(self.session.current_url)
        return PageIteration(activated=activated, outcome=outcome)

    def reset_target(self, reason: Optional[ResetReason]) -> str:
        if reason is ResetReason.LOOP:
            return self.pagination.listing_url()
        return self.config.provider.entry_url()

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def _traverse(self, state: TraversalState) -> TraversalState:
        logger.info("=== Processing page %d ===", state.page)
        iteration = self.process_page()
        state = state.record_activations(iteration.activated)
        logger.info(
            "Items activated on this page: %d (total so far: %d)",
            iteration.activated,
            state.total_activation_count,
        )

        state = apply_outcome(state, iteration.outcome, self.loop_threshold)
        status = iteration.outcome.status
        if status is PaginationStatus.LOOP_DETECTED:
            logger.warning("Page loop detected! Consecutive loops: %d", state.consecutive_loop_count)
            if state.phase is Phase.RESETTING:
                logger.warning("Multiple page loops detected - restarting from page 1")
        elif status is PaginationStatus.EXHAUSTED:
            logger.info("No more pages available - restarting from entry URL")
        return state

    def _reset(self, state: TraversalState) -> TraversalState:
        target = self.reset_target(state.reset_reason)
        reason = state.reset_reason.value if state.reset_reason else "unknown"
        logger.info("Resetting (%s) - navigating to %s", reason, target)
        self.navigator.navigate(target)
        page = parse_page_number(self.session.current_url, self.config.layout.page_param)
        return state.complete_reset(page)
