"""POI categorization and preference scoring.

Every POI resolves to exactly one *primary* category, used by the
importance and visit-duration heuristics, and to a list of *all* matching
categories, used for preference weighting and exclusion.

Primary category resolution is an explicit, ordered rule list
(:data:`PRIMARY_CATEGORY_RULES`); the first rule that returns a category
wins and LANDMARK is the fallback.
"""

import logging
from typing import Callable, Iterable, Optional

from scenic_routes.models import POI, POICategory, UserPreferences

logger = logging.getLogger(__name__)

# Raw provider tags that map onto each category
CATEGORY_TAGS: dict[POICategory, frozenset[str]] = {
    POICategory.LANDMARK: frozenset({"landmark", "tourist_attraction", "point_of_interest"}),
    POICategory.PARK: frozenset({"park"}),
    POICategory.STREET_ART: frozenset({"public_art", "art_gallery"}),
    POICategory.VIEWPOINT: frozenset({"viewpoint", "observation_deck"}),
    POICategory.FOUNTAIN: frozenset({"fountain"}),
    POICategory.SCULPTURE: frozenset({"monument", "statue"}),
    POICategory.HISTORIC_SITE: frozenset({"historic_site", "heritage_site"}),
    POICategory.CHURCH: frozenset({"church", "place_of_worship", "synagogue", "mosque", "temple"}),
    POICategory.THEATER: frozenset({"theater", "performing_arts_theater"}),
    POICategory.SHOPPING: frozenset({"shopping_mall", "store", "clothing_store"}),
    POICategory.CITY_SQUARE: frozenset({"plaza", "town_square"}),
    POICategory.CAFE: frozenset({"cafe", "coffee_shop"}),
    POICategory.RESTAURANT: frozenset({"restaurant"}),
    POICategory.MUSEUM: frozenset({"museum"}),
    POICategory.AQUARIUM: frozenset({"aquarium"}),
    POICategory.ZOO: frozenset({"zoo"}),
    POICategory.OBSERVATION_DECK: frozenset({"observation_deck"}),
    POICategory.HIDDEN_GEM: frozenset({"hidden_gem"}),
    POICategory.TRENDING: frozenset({"trending"}),
}

# Order in which categories are tried against each raw tag for "all categories"
CATEGORY_MATCH_ORDER: tuple[POICategory, ...] = (
    POICategory.LANDMARK,
    POICategory.PARK,
    POICategory.STREET_ART,
    POICategory.VIEWPOINT,
    POICategory.FOUNTAIN,
    POICategory.SCULPTURE,
    POICategory.HISTORIC_SITE,
    POICategory.CHURCH,
    POICategory.THEATER,
    POICategory.SHOPPING,
    POICategory.CITY_SQUARE,
    POICategory.CAFE,
    POICategory.RESTAURANT,
    POICategory.MUSEUM,
    POICategory.AQUARIUM,
    POICategory.ZOO,
    POICategory.OBSERVATION_DECK,
    POICategory.HIDDEN_GEM,
    POICategory.TRENDING,
)

# Categories eligible in the "specific tag" rule, in priority order. Museum,
# zoo, aquarium, observation deck, landmark and the popularity categories are
# decided by their own rules.
SPECIFIC_CATEGORY_ORDER: tuple[POICategory, ...] = (
    POICategory.PARK,
    POICategory.STREET_ART,
    POICategory.VIEWPOINT,
    POICategory.FOUNTAIN,
    POICategory.SCULPTURE,
    POICategory.HISTORIC_SITE,
    POICategory.CHURCH,
    POICategory.THEATER,
    POICategory.SHOPPING,
    POICategory.CITY_SQUARE,
    POICategory.CAFE,
    POICategory.RESTAURANT,
)

GENERIC_TAGS = frozenset({"landmark", "tourist_attraction", "point_of_interest", "establishment"})

# Observation decks the places provider doesn't tag as such
OBSERVATION_DECK_NAMES = ("empire state building", "top of the rock", "one world observatory")

MAJOR_ATTRACTION_TAGS: tuple[tuple[str, POICategory], ...] = (
    ("museum", POICategory.MUSEUM),
    ("zoo", POICategory.ZOO),
    ("aquarium", POICategory.AQUARIUM),
)


def is_hidden_gem(poi: POI) -> bool:
    return 100 <= poi.review_count <= 2000 and poi.rating >= 4.5


def is_trending(poi: POI) -> bool:
    return poi.review_count > 10000


def _observation_deck_by_name(poi: POI) -> Optional[POICategory]:
    name = poi.name.lower()
    if any(deck in name for deck in OBSERVATION_DECK_NAMES) or "observation" in name:
        return POICategory.OBSERVATION_DECK
    return None


def _observation_deck_by_tag(poi: POI) -> Optional[POICategory]:
    if poi.has_type("observation_deck"):
        return POICategory.OBSERVATION_DECK
    return None


def _major_attraction_tag(poi: POI) -> Optional[POICategory]:
    # Tags are scanned in POI order; the first museum/zoo/aquarium tag wins
    lookup = dict(MAJOR_ATTRACTION_TAGS)
    for tag in poi.types:
        if tag in lookup:
            return lookup[tag]
    return None


def _specific_tag(poi: POI) -> Optional[POICategory]:
    for tag in poi.types:
        if tag in GENERIC_TAGS:
            continue
        for category in SPECIFIC_CATEGORY_ORDER:
            if tag in CATEGORY_TAGS[category]:
                return category
    return None


def _generic_landmark_tag(poi: POI) -> Optional[POICategory]:
    if poi.has_type("landmark") or poi.has_type("tourist_attraction"):
        return POICategory.LANDMARK
    return None


def _popularity(poi: POI) -> Optional[POICategory]:
    if is_hidden_gem(poi):
        return POICategory.HIDDEN_GEM
    if is_trending(poi):
        return POICategory.TRENDING
    return None


PRIMARY_CATEGORY_RULES: tuple[Callable[[POI], Optional[POICategory]], ...] = (
    _observation_deck_by_name,
    _observation_deck_by_tag,
    _major_attraction_tag,
    _specific_tag,
    _generic_landmark_tag,
    _popularity,
)


def primary_category(poi: POI) -> POICategory:
    """Resolve the single best-fit category for a POI."""
    for rule in PRIMARY_CATEGORY_RULES:
        category = rule(poi)
        if category is not None:
            return category
    return POICategory.LANDMARK


def all_categories(poi: POI) -> list[POICategory]:
    """Every category the POI belongs to, de-duplicated in order of first match."""
    categories: list[POICategory] = []
    if is_hidden_gem(poi):
        categories.append(POICategory.HIDDEN_GEM)
    if is_trending(poi):
        categories.append(POICategory.TRENDING)

    for tag in poi.types:
        for category in CATEGORY_MATCH_ORDER:
            if tag in CATEGORY_TAGS[category] and category not in categories:
                categories.append(category)
    return categories


def is_excluded(poi: POI, preferences: UserPreferences) -> bool:
    """True when any category of the POI has weight exactly 0."""
    return any(preferences.weight(c) == 0.0 for c in all_categories(poi))


def preference_multiplier(poi: POI, preferences: UserPreferences) -> float:
    """Highest explicitly set weight among the POI's categories.

    Categories without an entry in the preference map are ignored; 1.0 when
    none of them has one.
    """
    weights = [
        preferences.category_weights[c]
        for c in all_categories(poi)
        if c in preferences.category_weights
    ]
    return max(weights) if weights else 1.0


def boost_multiplier(poi: POI, preferences: UserPreferences) -> float:
    """Like :func:`preference_multiplier` but never below neutral."""
    weight = 1.0
    for category in all_categories(poi):
        weight = max(weight, preferences.weight(category))
    return weight


def apply_preference_scoring(pois: Iterable[POI], preferences: UserPreferences) -> list[POI]:
    """Drop excluded POIs and rescale the rest by their preference multiplier.

    Returns new POI instances; the input POIs are left untouched. With no
    custom weights the pool is returned as-is.
    """
    pois = list(pois)
    if not preferences.has_custom_preferences():
        return pois

    scored = []
    excluded = 0
    for poi in pois:
        if is_excluded(poi, preferences):
            excluded += 1
            continue
        scored.append(poi.with_score(poi.score * preference_multiplier(poi, preferences)))

    logger.debug(f"[PREFS] {len(scored)} POIs kept, {excluded} excluded by preferences")
    return scored
