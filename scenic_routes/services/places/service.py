"""Nearby POI discovery using the Google Places Nearby Search API.

Each place is scored from its rating, review count and type tags so the
planners get a single desirability number per POI.
"""

import logging
import math
import time
from abc import ABC, abstractmethod

import httpx
from pydantic import ValidationError

from scenic_routes.models import POI, Coordinates, ExternalServiceUnavailableError

logger = logging.getLogger(__name__)

NEARBY_SEARCH_URL = "https://maps.googleapis.com/maps/api/place/nearbysearch/json"
SEARCH_TYPES = "tourist_attraction|point_of_interest|landmark|park|museum|art_gallery|cafe|restaurant"

# ZERO_RESULTS is a normal empty answer
FAILED_STATUSES = frozenset({"REQUEST_DENIED", "OVER_QUERY_LIMIT", "UNKNOWN_ERROR"})

DEFAULT_RATING = 3.0
REVIEW_CAP = 50000


class PlacesProvider(ABC):
    """Abstract source of scored POIs around a location."""

    @abstractmethod
    def nearby_pois(self, lat: float, lng: float, include_museums: bool = False) -> list[POI]:
        """Return provider-scored POIs near (lat, lng).

        Museums are left out of short walking routes, so callers building a
        sightseeing day pass ``include_museums=True``.
        """
        pass


def score_place(rating: float, review_count: int, types: list[str] | tuple[str, ...]) -> float:
    """Desirability score for a place.

    rating x sqrt(capped reviews + 1), scaled by the strongest type
    multiplier, a popularity bonus and a hidden-gem boost.
    """
    base = rating * math.sqrt(min(review_count, REVIEW_CAP) + 1)

    type_multiplier = 1.0
    if "tourist_attraction" in types:
        type_multiplier = 1.5
    if "park" in types and review_count > 10000:
        type_multiplier = max(type_multiplier, 1.4)
    if "point_of_interest" in types:
        type_multiplier = max(type_multiplier, 1.2)
    if "landmark" in types:
        type_multiplier = max(type_multiplier, 1.4)
    if "museum" in types:
        type_multiplier = max(type_multiplier, 1.5)

    if review_count > 50000:
        popularity = 1.5
    elif review_count > 20000:
        popularity = 1.3
    elif review_count > 5000:
        popularity = 1.15
    else:
        popularity = 1.0

    hidden_gem = 3.0 if 100 <= review_count <= 2000 and rating >= 4.5 else 1.0

    return base * type_multiplier * popularity * hidden_gem


class GooglePlacesProvider(PlacesProvider):
    """Google Places Nearby Search, paged up to ``max_pages`` results pages."""

    # Google rejects a next_page_token used sooner than this
    PAGE_TOKEN_DELAY_SECONDS = 2.0

    def __init__(
        self,
        api_key: str,
        radius_m: int = 3000,
        max_pages: int = 3,
        timeout: float = 15.0,
        page_delay_seconds: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._api_key = api_key
        self._radius_m = radius_m
        self._max_pages = max_pages
        self._page_delay = (
            self.PAGE_TOKEN_DELAY_SECONDS if page_delay_seconds is None else page_delay_seconds
        )
        self._client = client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def _fetch_page(self, lat: float, lng: float, page_token: str | None) -> dict:
        params = {
            "location": f"{lat},{lng}",
            "radius": self._radius_m,
            "type": SEARCH_TYPES,
            "key": self._api_key,
        }
        if page_token:
            params["pagetoken"] = page_token

        try:
            response = self._client.get(NEARBY_SEARCH_URL, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            logger.warning(f"[PLACES] Nearby search failed: {e}")
            raise ExternalServiceUnavailableError(f"Google Places request failed: {e}") from e

        status = data.get("status", "OK")
        if status in FAILED_STATUSES:
            logger.warning(f"[PLACES] Nearby search returned {status}: {data.get('error_message', '')}")
            raise ExternalServiceUnavailableError(f"Google Places returned status {status}")
        return data

    def nearby_pois(self, lat: float, lng: float, include_museums: bool = False) -> list[POI]:
        pois: list[POI] = []
        page_token = None
        pages = 0

        while True:
            data = self._fetch_page(lat, lng, page_token)
            pois.extend(self._parse_results(data.get("results", []), include_museums))

            page_token = data.get("next_page_token")
            pages += 1
            if not page_token or pages >= self._max_pages:
                break
            time.sleep(self._page_delay)

        logger.info(f"[PLACES] {len(pois)} POIs near ({lat:.4f}, {lng:.4f}) from {pages} page(s)")
        return pois

    def _parse_results(self, results: list[dict], include_museums: bool) -> list[POI]:
        pois = []
        for place in results:
            try:
                poi = self._parse_place(place)
            except (KeyError, TypeError, ValueError, ValidationError):
                logger.debug(f"[PLACES] Skipping malformed result: {place!r:.120}")
                continue

            # Museums take too long for a quick walk
            if not include_museums and poi.has_type("museum"):
                continue
            pois.append(poi)
        return pois

    @staticmethod
    def _parse_place(place: dict) -> POI:
        location = place["geometry"]["location"]
        types = tuple(place.get("types", []))
        rating = float(place.get("rating", DEFAULT_RATING))
        review_count = int(place.get("user_ratings_total", 0))

        photo_reference = None
        photos = place.get("photos") or []
        if photos:
            photo_reference = photos[0].get("photo_reference")

        return POI(
            name=place["name"],
            coordinates=Coordinates(lat=location["lat"], lng=location["lng"]),
            score=score_place(rating, review_count, types),
            types=types,
            review_count=review_count,
            rating=rating,
            photo_reference=photo_reference,
        )
