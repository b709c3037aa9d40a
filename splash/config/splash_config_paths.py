"""Chemins et constantes de disposition.

Module séparé pour éviter les dépendances circulaires: il ne dépend de rien
d'autre dans le package.
"""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Final

# Disposition des paquets sources (démon et paquets de thèmes)
PACKAGE_THEMES_SUBDIR: Final[str] = "share/plymouth/themes"
PACKAGE_PLUGINS_SUBDIR: Final[str] = "lib/plymouth"
PACKAGE_RENDERERS_SUBDIR: Final[str] = "lib/plymouth/renderers"
PACKAGE_DEFAULTS_FILE: Final[str] = "share/plymouth/plymouthd.defaults"
PACKAGE_UNITS_SUBDIR: Final[str] = "lib/systemd/system"
# plymouthd est installé dans bin/ ou sbin/ selon les distributions.
PACKAGE_BINARIES: Final[dict[str, tuple[str, ...]]] = {
    "plymouth": ("bin/plymouth",),
    "plymouthd": ("bin/plymouthd", "sbin/plymouthd"),
}

DESCRIPTOR_SUFFIX: Final[str] = ".plymouth"
PLUGIN_SUFFIX: Final[str] = ".so"
# Inutilisable avant l'affichage graphique, plusieurs Mo dans l'initrd.
WINDOWING_RENDERER: Final[str] = "x11.so"

# Disposition des arborescences produites (relative à la racine)
ETC_PLYMOUTH: Final[PurePosixPath] = PurePosixPath("etc/plymouth")
CONFIG_FILE: Final[PurePosixPath] = ETC_PLYMOUTH / "plymouthd.conf"
DEFAULTS_FILE: Final[PurePosixPath] = ETC_PLYMOUTH / "plymouthd.defaults"
LOGO_FILE: Final[PurePosixPath] = ETC_PLYMOUTH / "logo.png"
THEMES_DIR: Final[PurePosixPath] = ETC_PLYMOUTH / "themes"
PLUGINS_DIR: Final[PurePosixPath] = ETC_PLYMOUTH / "plugins"
RENDERERS_DIR: Final[PurePosixPath] = PLUGINS_DIR / "renderers"
FONTS_DIR: Final[PurePosixPath] = ETC_PLYMOUTH / "fonts"
FONTCONFIG_DIR: Final[PurePosixPath] = PurePosixPath("etc/fonts")
FONTCONFIG_FILE: Final[PurePosixPath] = FONTCONFIG_DIR / "fonts.conf"
UDEV_RULES_DIR: Final[PurePosixPath] = PurePosixPath("etc/udev/rules.d")
BIN_DIR: Final[PurePosixPath] = PurePosixPath("bin")

# Règles udev nécessaires au seat dans l'initrd (logind y est absent).
UDEV_RULES: Final[tuple[str, ...]] = ("70-uaccess.rules", "71-seat.rules")

# Le logo est exposé sous des noms propres à certains thèmes.
# spinner/watermark.png sert au thème bgrt (qui réutilise l'ImageDir de spinner).
LOGO_ALIASES: Final[dict[str, str]] = {
    "spinner": "watermark.png",
    "spinfinity": "header-image.png",
}

RUNTIME_DIR: Final[PurePosixPath] = PurePosixPath("/run/plymouth")
RUNTIME_PID_FILE: Final[PurePosixPath] = RUNTIME_DIR / "pid"
SYSTEM_ROOT: Final[PurePosixPath] = PurePosixPath("/")

DEFAULT_STORE_DIR: Final[str] = "/nix/store"
DEFAULT_THEME: Final[str] = "bgrt"
DEFAULT_SHOW_DELAY_SECONDS: Final[int] = 0
DEFAULT_DEVICE_TIMEOUT_SECONDS: Final[int] = 8
DEFAULT_LOGO: Final[str] = "/usr/share/icons/hicolor/48x48/apps/nix-snowflake-white.png"
DEFAULT_FONT: Final[str] = "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"

KERNEL_PARAMS: Final[tuple[str, ...]] = ("splash",)

FULL_TREE_NAME: Final[str] = "full"
MINIMAL_TREE_NAME: Final[str] = "initrd"
MANIFEST_FILE: Final[str] = "manifest.json"
