"""Attribute driven fill colors for vector features.

A :class:`FeatureStylist` is an ordered list of ``(predicate, color)`` rules
plus a default color.  The first rule whose predicate accepts the attribute
value wins; anything else, including missing values, gets the default.
Category keys are compared exactly: no case folding, no whitespace
trimming, and no coercion between strings and numbers.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from .config import CLASSIFY_ATTRIBUTE
from .primitives import Color

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClassificationRule:
    predicate: Callable[[Any], bool]
    color: Color
    label: str = ""


def exact(key: Any) -> Callable[[Any], bool]:
    """Return a predicate matching values equal to ``key`` and of the same type."""

    def matches(value: Any) -> bool:
        return type(value) is type(key) and value == key

    return matches


class FeatureStylist:
    """Map one feature attribute onto a fill color."""

    def __init__(self, attribute: str, rules: Sequence[ClassificationRule], default: Color) -> None:
        self.attribute = attribute
        self._rules = tuple(rules)
        self.default = tuple(default)

    # ------------------------------------------------------------------
    @classmethod
    def from_categories(cls, attribute: str, categories: Mapping[Any, Color], default: Color) -> FeatureStylist:
        """Build a stylist from a ``{category: color}`` mapping, keeping its order."""

        rules = [ClassificationRule(exact(key), tuple(color), str(key)) for key, color in categories.items()]
        return cls(attribute, rules, default)

    # ------------------------------------------------------------------
    @classmethod
    def from_match_expression(cls, expression: Sequence[Any]) -> FeatureStylist:
        """Build a stylist from a MapLibre ``match`` expression.

        The supported shape is ``["match", ["get", attribute], key1, color1,
        ..., default]`` where each key may also be a list of alternatives.
        """

        if len(expression) < 5 or expression[0] != "match" or len(expression) % 2 == 0:
            raise ValueError(f"Unsupported match expression: {expression!r}")
        getter = expression[1]
        if not (isinstance(getter, Sequence) and len(getter) == 2 and getter[0] == "get"):
            raise ValueError(f"Match input must be a ['get', attribute] expression, got {getter!r}")

        rules: list[ClassificationRule] = []
        for index in range(2, len(expression) - 1, 2):
            keys = expression[index]
            color = tuple(expression[index + 1])
            alternatives = keys if isinstance(keys, list) else [keys]
            for key in alternatives:
                rules.append(ClassificationRule(exact(key), color, str(key)))
        return cls(str(getter[1]), rules, tuple(expression[-1]))

    # ------------------------------------------------------------------
    @property
    def rules(self) -> tuple[ClassificationRule, ...]:
        return self._rules

    # ------------------------------------------------------------------
    @property
    def palette(self) -> set[Color]:
        """Every color the stylist can return."""

        return {rule.color for rule in self._rules} | {self.default}

    # ------------------------------------------------------------------
    def classify(self, value: Any) -> Color:
        for rule in self._rules:
            try:
                if rule.predicate(value):
                    return rule.color
            except (TypeError, ValueError) as exc:
                _LOGGER.debug("Rule %r rejected value %r: %s", rule.label, value, exc)
        return self.default

    # ------------------------------------------------------------------
    def color_for(self, feature: Any) -> Color:
        """Return the fill color for ``feature`` (anything with ``properties``)."""

        properties = getattr(feature, "properties", None)
        if properties is None and isinstance(feature, Mapping):
            properties = feature.get("properties")
        if not isinstance(properties, Mapping):
            return self.default
        return self.classify(properties.get(self.attribute))


# The "falsen Agricultural" label is reproduced exactly as it appears in the
# source data.
AGRI_GRADE_COLORS: dict[str, Color] = {
    "falsen Agricultural": (200, 250, 55),
    "Grade 1": (200, 220, 200),
    "Grade 2": (130, 140, 30),
    "Grade 3": (30, 20, 230),
    "Grade 4": (230, 24, 20),
    "Grade 5": (130, 240, 20),
    "urban": (230, 110, 20),
}
AGRI_GRADE_DEFAULT: Color = (130, 110, 220)

AGRI_GRADE_STYLIST = FeatureStylist.from_categories(CLASSIFY_ATTRIBUTE, AGRI_GRADE_COLORS, AGRI_GRADE_DEFAULT)


__all__ = [
    "AGRI_GRADE_COLORS",
    "AGRI_GRADE_DEFAULT",
    "AGRI_GRADE_STYLIST",
    "ClassificationRule",
    "FeatureStylist",
    "exact",
]
