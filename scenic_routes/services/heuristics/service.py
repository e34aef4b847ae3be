"""Importance and visit-duration heuristics for sightseeing attractions.

Pure functions of a POI (plus preferences for selection). Importance decides
which attractions make it into a sightseeing day; visit duration decides how
long each stop lasts.
"""

import logging
import math
from typing import Iterable

from scenic_routes.models import POI, POICategory, SightseeingAttraction, UserPreferences
from scenic_routes.services.categories import primary_category

logger = logging.getLogger(__name__)

MIN_IMPORTANCE = 30
MAX_ATTRACTIONS = 15

# (threshold, bonus) bands, first matching band wins
REVIEW_BANDS = (
    (100000, 100),
    (50000, 80),
    (20000, 60),
    (10000, 40),
    (5000, 20),
    (2000, 10),
)
RATING_BANDS = (
    (4.7, 20),
    (4.5, 15),
    (4.3, 10),
    (4.0, 5),
)
LOW_RATING_PENALTY = -20

CATEGORY_IMPORTANCE = {
    POICategory.MUSEUM: 30,
    POICategory.AQUARIUM: 25,
    POICategory.ZOO: 25,
    POICategory.OBSERVATION_DECK: 20,
    POICategory.HISTORIC_SITE: 20,
}

TAG_IMPORTANCE = {
    "tourist_attraction": 20,
    "landmark": 15,
    "point_of_interest": 5,
}

# Each group counts once, whichever of its substrings matches
NAME_IMPORTANCE = (
    (("national",), 15),
    (("museum of",), 15),
    (("memorial",), 10),
    (("tower", "building"), 10),
    (("palace", "castle"), 15),
    (("cathedral", "basilica"), 10),
    (("park",), 5),
)

BASE_VISIT_MINUTES = {
    POICategory.MUSEUM: 120,
    POICategory.AQUARIUM: 90,
    POICategory.ZOO: 150,
    POICategory.OBSERVATION_DECK: 45,
    POICategory.HISTORIC_SITE: 45,
    POICategory.THEATER: 90,
    POICategory.CHURCH: 25,
    POICategory.LANDMARK: 20,
    POICategory.PARK: 30,
    POICategory.VIEWPOINT: 15,
    POICategory.SCULPTURE: 10,
    POICategory.STREET_ART: 10,
    POICategory.FOUNTAIN: 10,
    POICategory.SHOPPING: 45,
    POICategory.RESTAURANT: 60,
    POICategory.CAFE: 20,
    POICategory.TRENDING: 25,
    POICategory.HIDDEN_GEM: 20,
}
DEFAULT_VISIT_MINUTES = 15

MAJOR_ATTRACTIONS = frozenset({
    POICategory.MUSEUM,
    POICategory.AQUARIUM,
    POICategory.ZOO,
    POICategory.OBSERVATION_DECK,
    POICategory.HISTORIC_SITE,
})

VISIT_BOUNDS = {
    POICategory.MUSEUM: (60, 240),
    POICategory.AQUARIUM: (60, 210),
    POICategory.ZOO: (60, 210),
    POICategory.OBSERVATION_DECK: (30, 90),
    POICategory.HISTORIC_SITE: (30, 90),
}
DEFAULT_VISIT_BOUNDS = (10, 120)


def calculate_importance(poi: POI, category: POICategory | None = None) -> int:
    """Additive importance score for a POI, never below zero."""
    if category is None:
        category = primary_category(poi)

    score = 0
    for threshold, bonus in REVIEW_BANDS:
        if poi.review_count > threshold:
            score += bonus
            break

    for threshold, bonus in RATING_BANDS:
        if poi.rating >= threshold:
            score += bonus
            break
    else:
        score += LOW_RATING_PENALTY

    score += CATEGORY_IMPORTANCE.get(category, 0)

    for tag, bonus in TAG_IMPORTANCE.items():
        if poi.has_type(tag):
            score += bonus

    name = poi.name.lower()
    for substrings, bonus in NAME_IMPORTANCE:
        if any(s in name for s in substrings):
            score += bonus

    return max(0, score)


def _popularity_multiplier(category: POICategory, reviews: int, rating: float) -> float:
    if category == POICategory.MUSEUM:
        if reviews > 50000:
            multiplier = 1.5
        elif reviews > 20000:
            multiplier = 1.25
        elif reviews < 5000:
            multiplier = 0.75
        else:
            multiplier = 1.0
        if rating >= 4.7:
            multiplier *= 1.1
        return multiplier

    if category in (POICategory.ZOO, POICategory.AQUARIUM):
        if reviews > 30000:
            return 1.3
        if reviews > 10000:
            return 1.1
        return 0.8

    if category == POICategory.PARK:
        if reviews > 50000:
            return 2.0
        if reviews > 10000:
            return 1.5
        if reviews < 2000:
            return 0.7
        return 1.0

    if category == POICategory.LANDMARK:
        if reviews > 100000:
            return 1.5
        if reviews > 50000:
            return 1.25
        if reviews < 10000:
            return 0.75
        return 1.0

    if category == POICategory.OBSERVATION_DECK:
        if reviews > 50000:
            return 1.5
        if reviews > 10000:
            return 1.2
        return 1.0

    if category == POICategory.CHURCH:
        if reviews > 20000:
            return 1.4
        if reviews > 5000:
            return 1.1
        return 0.8

    if category == POICategory.HISTORIC_SITE:
        if reviews > 20000:
            return 1.5
        if reviews > 5000:
            return 1.2
        return 1.0

    if category == POICategory.HIDDEN_GEM:
        if rating >= 4.7:
            return 1.3
        if rating >= 4.5:
            return 1.1
        return 1.0

    return 1.0


def visit_bounds(category: POICategory | None) -> tuple[int, int]:
    """(min, max) visit minutes for a category."""
    return VISIT_BOUNDS.get(category, DEFAULT_VISIT_BOUNDS)


def visit_minutes(
    category: POICategory | None,
    review_count: int = 0,
    rating: float = 0.0,
    time_multiplier: float = 1.0,
) -> int:
    """Recommended visit length in minutes, clamped to the category's range."""
    if category is None:
        return DEFAULT_VISIT_MINUTES

    base = BASE_VISIT_MINUTES.get(category, DEFAULT_VISIT_MINUTES)
    multiplier = _popularity_multiplier(category, review_count, rating)
    # Halves round up
    minutes = math.floor(base * multiplier * time_multiplier + 0.5)

    low, high = visit_bounds(category)
    return max(low, min(high, minutes))


def is_major_attraction(category: POICategory | None) -> bool:
    return category in MAJOR_ATTRACTIONS


def build_attraction(poi: POI, time_multiplier: float = 1.0) -> SightseeingAttraction:
    """Wrap a POI with its primary category, importance and visit duration."""
    category = primary_category(poi)
    return SightseeingAttraction(
        poi=poi,
        importance=calculate_importance(poi, category),
        primary_category=category,
        visit_minutes=visit_minutes(category, poi.review_count, poi.rating, time_multiplier),
    )


def select_top_attractions(
    pois: Iterable[POI],
    preferences: UserPreferences,
    limit: int = MAX_ATTRACTIONS,
) -> list[SightseeingAttraction]:
    """Pick the most important attractions, boosted by category preferences.

    Attractions below :data:`MIN_IMPORTANCE` are dropped first. With custom
    preferences a boosted category multiplies importance by its weight and an
    excluded category zeroes it; zero-importance attractions are removed.
    The result is sorted by importance, highest first, and capped at ``limit``.
    """
    attractions = [build_attraction(poi) for poi in pois]
    attractions = [a for a in attractions if a.importance >= MIN_IMPORTANCE]

    if preferences.has_custom_preferences():
        adjusted = []
        for attraction in attractions:
            weight = preferences.weight(attraction.primary_category)
            if weight > 1.0:
                attraction = attraction.with_importance(int(attraction.importance * weight))
            elif weight == 0.0:
                attraction = attraction.with_importance(0)
            adjusted.append(attraction)
        attractions = adjusted

    attractions = [a for a in attractions if a.importance > 0]
    attractions.sort(key=lambda a: a.importance, reverse=True)

    logger.debug(f"[SCHEDULE] {len(attractions)} attractions above importance threshold")
    return attractions[:limit]
