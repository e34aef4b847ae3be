"""POI categorization and preference scoring."""

from .service import (
    CATEGORY_TAGS,
    PRIMARY_CATEGORY_RULES,
    all_categories,
    apply_preference_scoring,
    boost_multiplier,
    is_excluded,
    is_hidden_gem,
    is_trending,
    preference_multiplier,
    primary_category,
)

__all__ = [
    "CATEGORY_TAGS",
    "PRIMARY_CATEGORY_RULES",
    "all_categories",
    "apply_preference_scoring",
    "boost_multiplier",
    "is_excluded",
    "is_hidden_gem",
    "is_trending",
    "preference_multiplier",
    "primary_category",
]
