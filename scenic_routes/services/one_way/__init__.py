"""Density-aware greedy planner for one-way walks."""

from .service import OneWayPlanner, selection_cap

__all__ = ["OneWayPlanner", "selection_cap"]
