"""Numeric range filtering over resident vector features.

Filters are plain predicates evaluated at render time.  Changing the range
therefore only changes which already-decoded features are drawn; it never
touches the tile cache or the network.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from .config import FILTER_ATTRIBUTE
from .features import VectorFeature

FeaturePredicate = Callable[[VectorFeature], bool]


@dataclass(frozen=True)
class FilterRange:
    """Inclusive ``[min, max]`` interval."""

    min: float
    max: float

    def __post_init__(self) -> None:
        if math.isnan(self.min) or math.isnan(self.max):
            raise ValueError("Filter bounds must be numbers, got NaN")

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max


def extract_value(feature: Any, attribute: str = FILTER_ATTRIBUTE) -> float | None:
    """Return the numeric attribute of ``feature`` or ``None`` when unusable.

    Booleans, strings and NaN are not treated as numbers.  GeoJSON style
    mappings are read through their ``properties`` key.
    """

    properties = getattr(feature, "properties", None)
    if properties is None and isinstance(feature, Mapping):
        properties = feature.get("properties")
    if not isinstance(properties, Mapping):
        return None
    value = properties.get(attribute)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    value = float(value)
    if math.isnan(value):
        return None
    return value


def is_visible(feature: Any, value_range: FilterRange, attribute: str = FILTER_ATTRIBUTE) -> bool:
    value = extract_value(feature, attribute)
    if value is None:
        return False
    return value_range.contains(value)


@dataclass(frozen=True)
class RangeFilter:
    """Predicate keeping features whose ``attribute`` lies within ``value_range``."""

    value_range: FilterRange
    attribute: str = FILTER_ATTRIBUTE

    def __call__(self, feature: VectorFeature) -> bool:
        return is_visible(feature, self.value_range, self.attribute)


__all__ = [
    "FeaturePredicate",
    "FilterRange",
    "RangeFilter",
    "extract_value",
    "is_visible",
]
