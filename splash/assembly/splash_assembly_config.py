"""Génération des fichiers de configuration de l'arborescence."""

from __future__ import annotations

from datetime import timedelta
from pathlib import PurePosixPath

from ..models.splash_models_build import ConfigOptions

CONFIG_SECTION = "[Daemon]"


def _seconds(value: timedelta) -> int:
    return int(value.total_seconds())


def render_config(options: ConfigOptions) -> bytes:
    """Rend plymouthd.conf.

    Les champs structurés sont écrits dans un ordre fixe, puis les lignes
    brutes `extra_lines` telles quelles, dans l'ordre reçu.
    """
    lines = [
        CONFIG_SECTION,
        f"ShowDelay={_seconds(options.show_delay)}",
        f"DeviceTimeout={_seconds(options.device_timeout)}",
        f"Theme={options.theme}",
        *options.extra_lines,
    ]
    return ("\n".join(lines) + "\n").encode("utf-8")


def render_fontconfig(font_dir: PurePosixPath) -> bytes:
    """Rend un fonts.conf minimal qui ne déclare que le répertoire des polices du splash."""
    return (
        '<?xml version="1.0"?>\n'
        '<!DOCTYPE fontconfig SYSTEM "urn:fontconfig:fonts.dtd">\n'
        "<fontconfig>\n"
        f"    <dir>{font_dir}</dir>\n"
        "</fontconfig>\n"
    ).encode("utf-8")


def strip_loginctl_rules(text: str) -> str:
    """Retire les règles udev qui appellent loginctl (absent de l'initrd)."""
    kept = [line for line in text.splitlines(keepends=True) if "loginctl" not in line]
    return "".join(kept)
