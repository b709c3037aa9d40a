"""Tests pour le fichier de sélection JSON."""

from __future__ import annotations

import json
from datetime import timedelta
from pathlib import Path

import pytest

from splash.config.splash_config_paths import DEFAULT_THEME
from splash.config.splash_config_selection import (
    load_selection,
    save_selection,
    selection_from_dict,
    selection_to_dict,
)
from splash.models.splash_models_build import Selection
from splash.splash_exceptions import SplashConfigError, SplashValidationError


class TestSelectionFromDict:
    """Tests pour selection_from_dict."""

    def test_defaults(self, tmp_path):
        selection = selection_from_dict({}, base_dir=tmp_path)

        assert selection.theme == DEFAULT_THEME
        assert selection.show_delay == timedelta(0)
        assert selection.device_timeout == timedelta(seconds=8)
        assert selection.extra_config == []
        assert selection.theme_packages == []

    def test_relative_paths_resolved_against_base_dir(self, tmp_path):
        selection = selection_from_dict(
            {"logo": "logo.png", "font": "/abs/font.ttf", "theme_packages": ["pkgs/breeze"]},
            base_dir=tmp_path,
        )

        assert selection.logo == tmp_path / "logo.png"
        assert selection.font == Path("/abs/font.ttf")
        assert selection.theme_packages == [tmp_path / "pkgs/breeze"]

    def test_extra_config_string_is_split(self, tmp_path):
        selection = selection_from_dict({"extra_config": "DeviceScale=2\nUseFirmwareBackground=false"}, tmp_path)
        assert selection.extra_config == ["DeviceScale=2", "UseFirmwareBackground=false"]

    @pytest.mark.parametrize(
        "data",
        [
            {"show_delay": -1},
            {"device_timeout": "8"},
            {"show_delay": True},
            {"theme": ""},
            {"logo": 3},
            {"extra_config": [1, 2]},
            {"theme_packages": "/nix/store/x"},
        ],
    )
    def test_invalid_values(self, tmp_path, data):
        with pytest.raises(SplashValidationError):
            selection_from_dict(data, base_dir=tmp_path)

    def test_not_an_object(self):
        with pytest.raises(SplashValidationError):
            selection_from_dict(["bgrt"])  # type: ignore[arg-type]

    def test_unknown_keys_warn(self, tmp_path, log_output):
        selection_from_dict({"theme": "spinner", "colour": "red"}, base_dir=tmp_path)
        assert "Clés inconnues ignorées: colour" in log_output.getvalue()


class TestSelectionPersistence:
    """Tests pour load_selection/save_selection."""

    def test_save_then_load(self, tmp_path):
        selection = Selection(
            theme="spinner",
            logo=tmp_path / "logo.png",
            font=tmp_path / "font.ttf",
            show_delay=timedelta(seconds=2),
            extra_config=["DeviceScale=2"],
            theme_packages=[tmp_path / "breeze"],
        )
        path = tmp_path / "conf" / "selection.json"

        save_selection(selection, path)

        assert json.loads(path.read_text(encoding="utf-8"))["show_delay"] == 2.0
        assert load_selection(path) == selection

    def test_to_dict(self, tmp_path):
        data = selection_to_dict(Selection(theme="details", logo=tmp_path / "l.png"))
        assert data["theme"] == "details"
        assert data["logo"] == str(tmp_path / "l.png")
        assert data["device_timeout"] == 8.0

    def test_missing_file(self, tmp_path):
        with pytest.raises(SplashConfigError, match="Sélection illisible"):
            load_selection(tmp_path / "absent.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "selection.json"
        path.write_text("{theme: bgrt", encoding="utf-8")

        with pytest.raises(SplashConfigError):
            load_selection(path)
