"""Tests for the settings schema and loader."""

from __future__ import annotations

import json
import sys

import pytest
from jsonschema import ValidationError

from maplayers.errors import SettingsLoadError, SettingsValidationError
from maplayers.settings import DEFAULT_SETTINGS, default_settings_path, load_settings, merge_with_defaults


def test_defaults_validate() -> None:
    merged = merge_with_defaults(None)
    assert merged == DEFAULT_SETTINGS
    assert merged is not DEFAULT_SETTINGS


def test_default_values() -> None:
    settings = merge_with_defaults({})
    assert settings["initial_view"]["zoom"] == 10.5
    assert settings["basemap"]["max_requests"] == 20
    assert settings["vector"]["filter_range"] == [0.0, 300.0]
    assert settings["vector"]["classes"]["Grade 3"] == [30, 20, 230]
    assert settings["hexagons"]["fill_color"] == [255, 250, 0]


def test_sections_merge_key_by_key() -> None:
    settings = merge_with_defaults({"basemap": {"show_outline": True}})
    assert settings["basemap"]["show_outline"] is True
    assert settings["basemap"]["tile_size"] == 256


def test_merge_does_not_mutate_defaults() -> None:
    merge_with_defaults({"vector": {"filter_range": [5, 6]}})
    assert DEFAULT_SETTINGS["vector"]["filter_range"] == [0.0, 300.0]


@pytest.mark.parametrize(
    "payload",
    [
        {"schema": "maplayers/settings@2"},
        {"initial_view": {"zoom": -1}},
        {"initial_view": {"altitude": 3}},
        {"vector": {"filter_range": [0]}},
        {"hexagons": {"fill_color": [300, 0, 0]}},
        {"basemap": {"urls": []}},
        {"basemap": {"min_zoom": 10, "max_zoom": 5}},
        {"vector": {"min_zoom": 12, "max_zoom": 8}},
        {"vector": {"min_zoom": 25}},
        {"initial_view": {"min_zoom": 14, "max_zoom": 4}},
    ],
)
def test_invalid_payloads(payload) -> None:
    with pytest.raises(ValidationError):
        merge_with_defaults(payload)


class TestLoadSettings:
    def test_reads_file(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"initial_view": {"latitude": 48.85, "longitude": 2.35, "zoom": 12}}))
        settings = load_settings(path)
        assert settings["initial_view"]["latitude"] == 48.85
        assert settings["basemap"]["tile_size"] == 256

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(SettingsLoadError):
            load_settings(tmp_path / "absent.json")

    def test_missing_default_file_falls_back(self, tmp_path, monkeypatch):
        monkeypatch.setattr("maplayers.settings.loader.default_settings_path", lambda: tmp_path / "none.json")
        assert load_settings() == DEFAULT_SETTINGS

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{not json")
        with pytest.raises(SettingsLoadError):
            load_settings(path)

    def test_non_object_payload(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("[1, 2]")
        with pytest.raises(SettingsLoadError):
            load_settings(path)

    def test_schema_violation(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"basemap": {"max_requests": 0}}))
        with pytest.raises(SettingsValidationError):
            load_settings(path)

    def test_inverted_zoom_range(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"basemap": {"min_zoom": 10, "max_zoom": 5}}))
        with pytest.raises(SettingsValidationError, match="basemap.min_zoom 10 exceeds basemap.max_zoom 5"):
            load_settings(path)


@pytest.mark.skipif(sys.platform in ("win32", "darwin"), reason="XDG layout only applies on Linux")
def test_default_path_honours_xdg(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    assert default_settings_path() == tmp_path / "maplayers" / "settings.json"
