"""Two-phase greedy loop builder."""

from .service import LoopPlanner

__all__ = ["LoopPlanner"]
