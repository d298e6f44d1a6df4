"""Tests for attribute driven feature classification."""

from __future__ import annotations

import pytest

from maplayers.features import VectorFeature
from maplayers.stylist import (
    AGRI_GRADE_COLORS,
    AGRI_GRADE_DEFAULT,
    AGRI_GRADE_STYLIST,
    FeatureStylist,
)


def _feature(**properties) -> VectorFeature:
    return VectorFeature(geometry={"type": "Point", "coordinates": (0.0, 0.0)}, properties=properties)


class TestAgriGrade:
    def test_grade_three(self):
        assert AGRI_GRADE_STYLIST.color_for(_feature(Agri_Grade="Grade 3")) == (30, 20, 230)

    def test_unmapped_value_gets_default(self):
        assert AGRI_GRADE_STYLIST.color_for(_feature(Agri_Grade="unmapped-value")) == (130, 110, 220)

    @pytest.mark.parametrize(("label", "color"), list(AGRI_GRADE_COLORS.items()))
    def test_every_category(self, label, color):
        assert AGRI_GRADE_STYLIST.color_for(_feature(Agri_Grade=label)) == color

    @pytest.mark.parametrize("value", ["grade 3", "Grade 3 ", "GRADE 3", "Urban", "Non Agricultural"])
    def test_matching_is_exact(self, value):
        assert AGRI_GRADE_STYLIST.classify(value) == AGRI_GRADE_DEFAULT

    def test_literal_data_label_is_kept(self):
        assert AGRI_GRADE_STYLIST.classify("falsen Agricultural") == (200, 250, 55)

    @pytest.mark.parametrize("value", [None, 3, 3.0, True, ["Grade 3"]])
    def test_non_string_values_get_default(self, value):
        assert AGRI_GRADE_STYLIST.classify(value) == AGRI_GRADE_DEFAULT

    def test_missing_attribute_gets_default(self):
        assert AGRI_GRADE_STYLIST.color_for(_feature(Area_Ha=10)) == AGRI_GRADE_DEFAULT

    def test_mapping_features_are_accepted(self):
        assert AGRI_GRADE_STYLIST.color_for({"properties": {"Agri_Grade": "urban"}}) == (230, 110, 20)
        assert AGRI_GRADE_STYLIST.color_for(object()) == AGRI_GRADE_DEFAULT

    def test_palette_is_finite(self):
        assert AGRI_GRADE_STYLIST.palette == set(AGRI_GRADE_COLORS.values()) | {AGRI_GRADE_DEFAULT}


class TestMatchExpression:
    def test_builds_rules_in_order(self):
        stylist = FeatureStylist.from_match_expression(
            ["match", ["get", "kind"], "a", [1, 1, 1], ["b", "c"], [2, 2, 2], [0, 0, 0]]
        )
        assert stylist.attribute == "kind"
        assert stylist.classify("a") == (1, 1, 1)
        assert stylist.classify("c") == (2, 2, 2)
        assert stylist.classify("d") == (0, 0, 0)
        assert [rule.label for rule in stylist.rules] == ["a", "b", "c"]

    def test_numeric_keys_do_not_match_strings(self):
        stylist = FeatureStylist.from_match_expression(["match", ["get", "n"], 1, [1, 1, 1], [0, 0, 0]])
        assert stylist.classify(1) == (1, 1, 1)
        assert stylist.classify("1") == (0, 0, 0)

    @pytest.mark.parametrize(
        "expression",
        [
            ["case", ["get", "x"], "a", [1, 1, 1], [0, 0, 0]],
            ["match", "x", "a", [1, 1, 1], [0, 0, 0]],
            ["match", ["get", "x"], "a", [1, 1, 1]],
        ],
    )
    def test_rejects_unsupported_shapes(self, expression):
        with pytest.raises(ValueError):
            FeatureStylist.from_match_expression(expression)


def test_custom_categories() -> None:
    stylist = FeatureStylist.from_categories("zone", {"A": (1, 2, 3)}, (9, 9, 9))
    assert stylist.color_for(_feature(zone="A")) == (1, 2, 3)
    assert stylist.color_for(_feature(zone="B")) == (9, 9, 9)
