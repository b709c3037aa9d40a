"""Lecture/écriture du fichier de sélection (JSON).

Format:

    {
      "theme": "bgrt",
      "logo": "logo.png",
      "font": "/usr/share/fonts/truetype/DejaVuSans.ttf",
      "show_delay": 0,
      "device_timeout": 8,
      "extra_config": ["DeviceScale=2"],
      "theme_packages": ["/nix/store/...-breeze-plymouth"]
    }

Les clés absentes prennent les valeurs par défaut. Les chemins relatifs sont
résolus par rapport au répertoire du fichier de sélection.
"""

from __future__ import annotations

import json
from datetime import timedelta
from pathlib import Path
from typing import Any

from loguru import logger

from ..models.splash_models_build import Selection
from ..splash_exceptions import SplashConfigError, SplashValidationError

_KNOWN_KEYS = frozenset(
    {"theme", "logo", "font", "show_delay", "device_timeout", "extra_config", "theme_packages"}
)


def _duration(data: dict[str, Any], key: str, default: timedelta) -> timedelta:
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SplashValidationError(f"'{key}' doit être un nombre de secondes (reçu: {value!r})")
    if value < 0:
        raise SplashValidationError(f"'{key}' doit être >= 0 (reçu: {value})")
    return timedelta(seconds=value)


def _path(value: Any, key: str, base_dir: Path) -> Path:
    if not isinstance(value, str) or not value:
        raise SplashValidationError(f"'{key}' doit être un chemin non vide (reçu: {value!r})")
    path = Path(value)
    return path if path.is_absolute() else base_dir / path


def _extra_config(value: Any) -> list[str]:
    if value is None:
        return []
    # Un bloc multi-lignes est accepté tel quel, découpé en lignes.
    if isinstance(value, str):
        return value.splitlines()
    if isinstance(value, list) and all(isinstance(line, str) for line in value):
        return list(value)
    raise SplashValidationError(f"'extra_config' doit être une chaîne ou une liste de chaînes (reçu: {value!r})")


def selection_from_dict(data: dict[str, Any], base_dir: Path | None = None) -> Selection:
    """Construit une Selection depuis un dictionnaire JSON.

    Raises:
        SplashValidationError: valeur de type ou de plage invalide
    """
    if not isinstance(data, dict):
        raise SplashValidationError("La sélection doit être un objet JSON")
    base_dir = base_dir or Path.cwd()
    defaults = Selection()

    unknown = sorted(set(data) - _KNOWN_KEYS)
    if unknown:
        logger.warning(f"[selection_from_dict] Clés inconnues ignorées: {', '.join(unknown)}")

    theme = data.get("theme", defaults.theme)
    if not isinstance(theme, str) or not theme:
        raise SplashValidationError(f"'theme' doit être un nom non vide (reçu: {theme!r})")

    packages = data.get("theme_packages") or []
    if not isinstance(packages, list):
        raise SplashValidationError("'theme_packages' doit être une liste de chemins")

    return Selection(
        theme=theme,
        logo=_path(data["logo"], "logo", base_dir) if "logo" in data else defaults.logo,
        font=_path(data["font"], "font", base_dir) if "font" in data else defaults.font,
        show_delay=_duration(data, "show_delay", defaults.show_delay),
        device_timeout=_duration(data, "device_timeout", defaults.device_timeout),
        extra_config=_extra_config(data.get("extra_config")),
        theme_packages=[_path(item, "theme_packages", base_dir) for item in packages],
    )


def selection_to_dict(selection: Selection) -> dict[str, Any]:
    """Convertit une Selection en dictionnaire pour JSON."""
    return {
        "theme": selection.theme,
        "logo": str(selection.logo),
        "font": str(selection.font),
        "show_delay": selection.show_delay.total_seconds(),
        "device_timeout": selection.device_timeout.total_seconds(),
        "extra_config": list(selection.extra_config),
        "theme_packages": [str(package) for package in selection.theme_packages],
    }


def load_selection(path: Path) -> Selection:
    """Charge le fichier de sélection.

    Raises:
        SplashConfigError: fichier illisible ou JSON invalide
        SplashValidationError: contenu invalide
    """
    logger.debug(f"[load_selection] Lecture {path}")
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"[load_selection] ERREUR: {e}")
        raise SplashConfigError(f"Sélection illisible: {path} ({e})") from e

    selection = selection_from_dict(data, base_dir=path.parent)
    logger.info(f"[load_selection] Sélection chargée: thème {selection.theme}")
    return selection


def save_selection(selection: Selection, path: Path) -> None:
    """Sauvegarde la sélection au format JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(selection_to_dict(selection), f, indent=2, ensure_ascii=False)
    logger.info(f"[save_selection] Sélection sauvegardée: {path}")
