"""Unit tests for the density-aware one-way planner."""

import pytest

from scenic_routes.services.one_way import OneWayPlanner, selection_cap
from scenic_routes.services.travel_cache import TravelCostCache
from scenic_routes.utils import decode_polyline
from tests.conftest import START, make_poi


class TestSelectionCap:
    @pytest.mark.parametrize("minutes,expected", [(0, 3), (10, 4), (60, 10), (136, 20), (480, 20)])
    def test_cap(self, minutes: int, expected: int) -> None:
        assert selection_cap(minutes) == expected


class TestSelect:
    """Tests for the greedy selection phase."""

    def test_proximity_bonus_beats_raw_score(self, cache: TravelCostCache) -> None:
        near = make_poi("Near", north_m=500, score=10.0)
        far = make_poi("Far", north_m=2000, score=100.0)

        selected = OneWayPlanner(cache).select(START, [far, near], 0)

        assert [p.name for p in selected] == ["Near", "Far"]

    def test_density_bonus_counts_unused_neighbours(self, cache: TravelCostCache) -> None:
        y = make_poi("Y", north_m=2000, score=80.0)
        z = make_poi("Z", north_m=2100, score=60.0)
        x = make_poi("X", east_m=2000, score=100.0)

        selected = OneWayPlanner(cache).select(START, [x, y, z], 0)

        # Y: 80 + 30 beats X: 100; once Y is used Z loses its bonus
        assert [p.name for p in selected] == ["Y", "X", "Z"]

    def test_respects_cap(self, cache: TravelCostCache) -> None:
        pois = [make_poi(f"P{i}", east_m=400 * i, score=float(i)) for i in range(10)]
        assert len(OneWayPlanner(cache).select(START, pois, 0)) == 3

    def test_empty(self, cache: TravelCostCache) -> None:
        assert OneWayPlanner(cache).select(START, [], 60) == []


class TestOrdering:
    def test_nearest_neighbor_from_start(self, cache: TravelCostCache) -> None:
        pois = [
            make_poi("Far", north_m=1000),
            make_poi("Near", north_m=300),
            make_poi("Mid", north_m=600),
        ]
        ordered = OneWayPlanner(cache).order_nearest_neighbor(START, pois)
        assert [p.name for p in ordered] == ["Near", "Mid", "Far"]

    def test_trim_keeps_strict_prefix(self, cache: TravelCostCache) -> None:
        a = make_poi("A", north_m=300)
        b = make_poi("B", north_m=3000)
        c = make_poi("C", north_m=310)

        kept = OneWayPlanner(cache).trim_to_budget(START, [a, b, c], 20)

        # C would fit after A but comes after the stop that doesn't
        assert [p.name for p in kept] == ["A"]


class TestOneWayPlanner:
    """Tests for complete one-way walks."""

    def test_plan(self, cache: TravelCostCache) -> None:
        near = make_poi("Near", north_m=500, score=10.0)
        far = make_poi("Far", north_m=2000, score=100.0)

        route = OneWayPlanner(cache).plan(START, [far, near], 60)

        assert [p.name for p in route.points] == ["Near", "Far"]
        # 7 + 19 walking, 5 dwell per stop
        assert route.total_time == 36
        assert route.total_score == 110.0
        assert len(decode_polyline(route.polyline)) == 3

    def test_nothing_fits(self, cache: TravelCostCache) -> None:
        far = make_poi("Far", north_m=3000)
        route = OneWayPlanner(cache).plan(START, [far], 10)

        assert route.points == []
        assert route.total_time == 0
        assert route.polyline == ""
