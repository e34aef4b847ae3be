"""Best-first point-to-point route search."""

from .service import (
    PointToPointPlanner,
    SearchNode,
    SearchState,
    is_better_end_state,
    reduce_pool,
    search_priority,
)

__all__ = [
    "PointToPointPlanner",
    "SearchNode",
    "SearchState",
    "is_better_end_state",
    "reduce_pool",
    "search_priority",
]
