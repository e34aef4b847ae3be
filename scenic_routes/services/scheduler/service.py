"""Time-window sightseeing scheduler.

Builds a day plan from the most important attractions near the start:
one guaranteed stop per boosted category, then the nearest attraction that
still fits the window, with at most one lunch break.

Clock times are minutes since midnight internally and "HH:MM" strings on
the schedule; hour checks wrap at midnight.
"""

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Sequence

from scenic_routes.models import (
    POI,
    Break,
    BreakKind,
    Coordinates,
    InvalidTimeWindowError,
    PolylineShape,
    ScheduledStop,
    SightseeingAttraction,
    SightseeingSchedule,
    UserPreferences,
)
from scenic_routes.services.categories import is_excluded
from scenic_routes.services.heuristics import select_top_attractions
from scenic_routes.services.travel_cache import TravelCostCache

logger = logging.getLogger(__name__)

BOOST_THRESHOLD = 2.0
GUARANTEE_MAX_WALK_MINUTES = 30
MIN_REMAINING_MINUTES = 20

LUNCH_MINUTES = 60
LUNCH_EARLIEST_HOUR = 11
LUNCH_CROSSING_HOUR = 13
LUNCH_LATEST_HOUR = 15
FORCED_LUNCH_MIN_REMAINING = 80
LUNCH_SUGGESTION = "Restaurants nearby"

_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def parse_clock(value: str) -> int:
    """Parse "HH:MM" into minutes since midnight."""
    match = _CLOCK_RE.match(value.strip()) if isinstance(value, str) else None
    if match is None:
        raise InvalidTimeWindowError(f"Invalid clock time {value!r}, expected HH:MM")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise InvalidTimeWindowError(f"Invalid clock time {value!r}, expected HH:MM")
    return hours * 60 + minutes


def parse_time_window(start_time: str, end_time: str) -> tuple[int, int]:
    start = parse_clock(start_time)
    end = parse_clock(end_time)
    if end <= start:
        raise InvalidTimeWindowError(f"End time {end_time} must be after start time {start_time}")
    return start, end


def format_clock(minutes: int) -> str:
    minutes %= 24 * 60
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def hour_of(minutes: int) -> int:
    return (minutes % (24 * 60)) // 60


@dataclass
class _DayState:
    time: int
    lat: float
    lng: float
    include_lunch: bool
    had_lunch: bool = False
    stops: list[ScheduledStop] = field(default_factory=list)
    breaks: list[Break] = field(default_factory=list)

    @property
    def lunch_pending(self) -> bool:
        return self.include_lunch and not self.had_lunch

    def take_lunch(self) -> None:
        self.breaks.append(Break(
            start_time=format_clock(self.time),
            duration_minutes=LUNCH_MINUTES,
            kind=BreakKind.LUNCH,
            suggestion=LUNCH_SUGGESTION,
        ))
        self.time += LUNCH_MINUTES
        self.had_lunch = True


class SightseeingScheduler:
    """Plans a timed sightseeing day."""

    def __init__(self, cache: TravelCostCache) -> None:
        self._cache = cache

    def plan(
        self,
        start: Coordinates,
        pois: Sequence[POI],
        start_time: str,
        end_time: str,
        preferences: UserPreferences,
        include_lunch: bool = True,
    ) -> SightseeingSchedule:
        start_minute, end_minute = parse_time_window(start_time, end_time)
        candidates = select_top_attractions(pois, preferences)

        boosted: list[SightseeingAttraction] = []
        optional: list[SightseeingAttraction] = []
        for attraction in candidates:
            if is_excluded(attraction.poi, preferences):
                continue
            weight = preferences.weight(attraction.primary_category)
            if weight >= BOOST_THRESHOLD:
                boosted.append(attraction)
            elif weight > 0.0:
                optional.append(attraction)

        return self.build_schedule(
            start, boosted, optional, start_minute, end_minute, include_lunch
        )

    def _walk(self, lat: float, lng: float, attraction: SightseeingAttraction) -> float:
        return self._cache.time(lat, lng, attraction.lat, attraction.lng)

    def guaranteed_picks(
        self, start: Coordinates, boosted: list[SightseeingAttraction]
    ) -> list[SightseeingAttraction]:
        """One attraction per boosted category, preferring ones within walking reach.

        Each pick is checked against the previous pick, and the first against
        ``start``. Past :data:`GUARANTEE_MAX_WALK_MINUTES` the most important
        walkable alternative in the category is taken instead.
        """
        by_category: dict = {}
        for attraction in boosted:
            by_category.setdefault(attraction.primary_category, []).append(attraction)

        picks = []
        lat, lng = start.lat, start.lng
        for in_category in by_category.values():
            in_category = sorted(in_category, key=lambda a: a.importance, reverse=True)
            best = in_category[0]
            if self._walk(lat, lng, best) > GUARANTEE_MAX_WALK_MINUTES:
                for alternative in in_category:
                    if self._walk(lat, lng, alternative) <= GUARANTEE_MAX_WALK_MINUTES:
                        best = alternative
                        break
            picks.append(best)
            lat, lng = best.lat, best.lng
        return picks

    def build_schedule(
        self,
        start: Coordinates,
        boosted: list[SightseeingAttraction],
        optional: list[SightseeingAttraction],
        start_minute: int,
        end_minute: int,
        include_lunch: bool,
    ) -> SightseeingSchedule:
        guaranteed = self.guaranteed_picks(start, boosted)
        picked = {id(a) for a in guaranteed}
        to_schedule = guaranteed + [a for a in boosted if id(a) not in picked] + optional

        day = _DayState(time=start_minute, lat=start.lat, lng=start.lng, include_lunch=include_lunch)
        used: set[int] = set()

        while len(used) < len(to_schedule):
            time_left = end_minute - day.time
            if time_left < MIN_REMAINING_MINUTES:
                break

            nearest = None
            nearest_walk = math.inf
            for i, attraction in enumerate(to_schedule):
                if i in used:
                    continue
                walk = self._walk(day.lat, day.lng, attraction)
                if math.isinf(walk):
                    continue
                lunch_buffer = 0
                after_visit = day.time + walk + attraction.visit_minutes
                if day.lunch_pending and hour_of(after_visit) >= LUNCH_CROSSING_HOUR:
                    lunch_buffer = LUNCH_MINUTES
                if walk + attraction.visit_minutes + lunch_buffer <= time_left and walk < nearest_walk:
                    nearest = i
                    nearest_walk = walk

            if nearest is None:
                if (
                    day.lunch_pending
                    and hour_of(day.time) >= LUNCH_EARLIEST_HOUR
                    and time_left >= FORCED_LUNCH_MIN_REMAINING
                ):
                    day.take_lunch()
                    continue
                break

            attraction = to_schedule[nearest]
            walk = int(nearest_walk)
            arrival = day.time + walk
            if (
                day.lunch_pending
                and hour_of(arrival) >= LUNCH_EARLIEST_HOUR
                and hour_of(arrival + attraction.visit_minutes) >= LUNCH_CROSSING_HOUR
            ):
                # Lunch before the walk, so the visit starts after the break
                day.take_lunch()
                walk = int(self._walk(day.lat, day.lng, attraction))
                arrival = day.time + walk

            departure = arrival + attraction.visit_minutes
            day.stops.append(ScheduledStop(
                attraction=attraction,
                arrival_time=format_clock(arrival),
                departure_time=format_clock(departure),
                visit_minutes=attraction.visit_minutes,
                travel_minutes=walk,
            ))
            used.add(nearest)
            day.time = departure
            day.lat, day.lng = attraction.lat, attraction.lng

        if day.lunch_pending and hour_of(day.time) < LUNCH_LATEST_HOUR:
            day.take_lunch()

        polyline = None
        if day.stops:
            polyline = self._cache.polyline(
                start, [s.attraction.poi for s in day.stops], PolylineShape.WAYPOINTS
            )

        logger.info(
            f"[SCHEDULE] {len(day.stops)} stops ({len(guaranteed)} guaranteed), "
            f"{len(day.breaks)} break(s), {format_clock(start_minute)}-{format_clock(day.time)}"
        )
        return SightseeingSchedule(
            stops=day.stops,
            breaks=day.breaks,
            total_minutes=day.time - start_minute,
            polyline=polyline,
        )
