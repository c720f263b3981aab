from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Optional

from ..core.models import PaginationOutcome, PaginationStatus

LOOP_RESET_THRESHOLD = 3


class Phase(Enum):
    LOGGING_IN = auto()
    TRAVERSING = auto()
    RESETTING = auto()


class ResetReason(Enum):
    STARTUP = "startup"
    LOOP = "loop"
    EXHAUSTED = "exhausted"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class TraversalState:
    """Bookkeeping owned by the state machine; transitions return a new value."""

    phase: Phase = Phase.LOGGING_IN
    page: int = 1
    consecutive_loop_count: int = 0
    total_activation_count: int = 0
    pages_processed: int = 0
    reset_count: int = 0
    reset_reason: Optional[ResetReason] = None

    def record_activations(self, count: int) -> "TraversalState":
        return replace(
            self,
            total_activation_count=self.total_activation_count + max(count, 0),
            pages_processed=self.pages_processed + 1,
        )

    def begin_reset(self, reason: ResetReason) -> "TraversalState":
        return replace(self, phase=Phase.RESETTING, reset_reason=reason)

    def complete_reset(self, page: int) -> "TraversalState":
        # the bootstrap navigation is not counted as a reset
        counted = 0 if self.reset_reason is ResetReason.STARTUP else 1
        return replace(
            self,
            phase=Phase.TRAVERSING,
            page=page,
            consecutive_loop_count=0,
            reset_count=self.reset_count + counted,
            reset_reason=None,
        )


def apply_outcome(
    state: TraversalState,
    outcome: PaginationOutcome,
    loop_threshold: int = LOOP_RESET_THRESHOLD,
) -> TraversalState:
    """Next state after a page-advance request."""

    if outcome.status is PaginationStatus.ADVANCED:
        return replace(state, phase=Phase.TRAVERSING, page=outcome.page, consecutive_loop_count=0)

    if outcome.status is PaginationStatus.LOOP_DETECTED:
        loops = state.consecutive_loop_count + 1
        looped = replace(state, page=outcome.page, consecutive_loop_count=loops)
        if loops >= loop_threshold:
            return looped.begin_reset(ResetReason.LOOP)
        return looped

    return state.begin_reset(ResetReason.EXHAUSTED)
