"""Shared data structures used across traversal components."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class PaginationStatus(Enum):
    ADVANCED = auto()
    EXHAUSTED = auto()
    LOOP_DETECTED = auto()


@dataclass(frozen=True)
class PaginationOutcome:
    """Result of a single page-advance request.

    ``page`` is the new page for ``ADVANCED`` and the page observed before the
    attempt for the other statuses.
    """

    status: PaginationStatus
    page: int

    @classmethod
    def advanced(cls, page: int) -> "PaginationOutcome":
        return cls(PaginationStatus.ADVANCED, page)

    @classmethod
    def exhausted(cls, page: int) -> "PaginationOutcome":
        return cls(PaginationStatus.EXHAUSTED, page)

    @classmethod
    def loop_detected(cls, page: int) -> "PaginationOutcome":
        return cls(PaginationStatus.LOOP_DETECTED, page)


@dataclass(frozen=True)
class NavigationOutcome:
    """Outcome of one navigation attempt."""

    url: str
    attempt: int
    reason: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.reason is None


@dataclass(frozen=True)
class PageLocation:
    """A listing page rebuilt from the query token and a page number."""

    base_path: str
    query_token: str
    page: int = 1


@dataclass(frozen=True)
class PageIteration:
    """What one traversal iteration did to the current page."""

    activated: int
    outcome: PaginationOutcome
