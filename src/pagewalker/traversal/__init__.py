"""Listing traversal: navigation, pagination, activation and the driver loop."""

from .activation import ActivationEngine
from .machine import TraversalStateMachine
from .navigation import NavigationController, NavigationError
from .pagination import PaginationEngine
from .state import Phase, ResetReason, TraversalState

__all__ = [
    "ActivationEngine",
    "NavigationController",
    "NavigationError",
    "PaginationEngine",
    "Phase",
    "ResetReason",
    "TraversalState",
    "TraversalStateMachine",
]
