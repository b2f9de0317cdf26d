"""
Certificate Scoring

Turns an ordered list of rated categories into an average score and a
localized qualitative label. Pure functions, no I/O.
"""

import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from volugram.core.errors import InvalidInputError
from volugram.core.languages import Language, resolve_language


@dataclass(frozen=True)
class ReviewCategory:
    """A single rated category (self-review or reviewer review)."""

    name: str
    rating: float

    @classmethod
    def from_raw(cls, raw: "ReviewCategory | Mapping[str, Any]") -> "ReviewCategory":
        """
        Build a category from a mapping such as a decoded JSON object.

        Raises:
            ValueError: If name or rating is missing or the rating is not a
                finite number
        """
        if isinstance(raw, ReviewCategory):
            return raw
        if not isinstance(raw, Mapping):
            raise ValueError(f"Review category must be an object, got {type(raw).__name__}")

        name = raw.get("name")
        rating = raw.get("rating")
        if not isinstance(name, str) or not name:
            raise ValueError("Review category is missing a name")
        if isinstance(rating, bool) or not isinstance(rating, (int, float)):
            raise ValueError(f"Review category {name!r} has a non-numeric rating")
        if not math.isfinite(rating):
            raise ValueError(f"Review category {name!r} has a non-finite rating")
        return cls(name=name, rating=float(rating))


def to_categories(raw: Iterable[Any]) -> list[ReviewCategory]:
    """Convert an iterable of mappings to ReviewCategory objects, preserving order."""
    return [ReviewCategory.from_raw(item) for item in raw]


# Bands are checked high to low with strict ">" comparisons
SCORE_BANDS: tuple[tuple[float, str], ...] = (
    (4.5, "outstanding"),
    (3.5, "exceedsExpectations"),
    (2.5, "meetsExpectations"),
    (1.5, "needsImprovement"),
)
LOWEST_BAND = "doesNotMeetExpectations"

SCORE_LABELS: dict[Language, dict[str, str]] = {
    Language.EN: {
        "outstanding": "Outstanding",
        "exceedsExpectations": "Exceeds expectations",
        "meetsExpectations": "Meets expectations",
        "needsImprovement": "Needs improvement",
        "doesNotMeetExpectations": "Does not meet expectations",
    },
    Language.DE: {
        "outstanding": "Hervorragend",
        "exceedsExpectations": "Übertrifft Erwartungen",
        "meetsExpectations": "Entspricht den Erwartungen",
        "needsImprovement": "Bedarf Verbesserung",
        "doesNotMeetExpectations": "Entspricht nicht den Erwartungen",
    },
    Language.ET: {
        "outstanding": "Väga hea",
        "exceedsExpectations": "Ületab ootusi",
        "meetsExpectations": "Vastab ootustele",
        "needsImprovement": "Vajab parendamist",
        "doesNotMeetExpectations": "Ei vasta ootustele",
    },
    Language.NO: {
        "outstanding": "Utmerket",
        "exceedsExpectations": "Overgår forventningene",
        "meetsExpectations": "Møter forventningene",
        "needsImprovement": "Trenger forbedring",
        "doesNotMeetExpectations": "Møter ikke forventningene",
    },
}


def average_rating(categories: Sequence[ReviewCategory]) -> float:
    """
    Arithmetic mean of the category ratings.

    Args:
        categories: Non-empty list of rated categories

    Returns:
        The mean rating

    Raises:
        InvalidInputError: If the list is empty
    """
    if not categories:
        raise InvalidInputError("Cannot compute a score without any review categories")
    return sum(category.rating for category in categories) / len(categories)


def score_label_key(score: float) -> str:
    """Return the band key for a score (e.g. 'meetsExpectations')."""
    for threshold, key in SCORE_BANDS:
        if score > threshold:
            return key
    return LOWEST_BAND


def describe(score: float, language: Language | str) -> str:
    """
    Localized qualitative label for a score.

    Raises:
        UnsupportedLocaleError: If the language is not supported
    """
    lang = resolve_language(language)
    return SCORE_LABELS[lang][score_label_key(score)]
