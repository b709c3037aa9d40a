"""Rattachement des unités systemd du démon aux cibles d'init.

Les tables de ce module sont la seule source de vérité pour les cibles; elles
reprennent les unités activées par les distributions courantes.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Final

from loguru import logger

from ..config.splash_config_paths import PACKAGE_UNITS_SUBDIR
from ..models.splash_models_build import TargetEnvironment
from ..models.splash_models_lifecycle import LifecycleBinding

UNIT_SUFFIXES: Final[tuple[str, ...]] = (".service", ".path")

START_UNIT: Final[str] = "plymouth-start.service"

FULL_UNIT_TARGETS: Final[dict[str, frozenset[str]]] = {
    "plymouth-kexec.service": frozenset({"kexec.target"}),
    "plymouth-halt.service": frozenset({"halt.target"}),
    "plymouth-quit-wait.service": frozenset({"multi-user.target"}),
    "plymouth-quit.service": frozenset({"multi-user.target"}),
    "plymouth-poweroff.service": frozenset({"poweroff.target"}),
    "plymouth-reboot.service": frozenset({"reboot.target"}),
    "plymouth-read-write.service": frozenset({"sysinit.target"}),
    "systemd-ask-password-plymouth.service": frozenset({"multi-user.target"}),
    "systemd-ask-password-plymouth.path": frozenset({"multi-user.target"}),
}

MINIMAL_UNIT_TARGETS: Final[dict[str, frozenset[str]]] = {
    "plymouth-halt.service": frozenset({"halt.target"}),
    "plymouth-kexec.service": frozenset({"kexec.target"}),
    "plymouth-poweroff.service": frozenset({"poweroff.target"}),
    "plymouth-quit-wait.service": frozenset({"multi-user.target"}),
    "plymouth-quit.service": frozenset({"multi-user.target"}),
    "plymouth-read-write.service": frozenset({"sysinit.target"}),
    "plymouth-reboot.service": frozenset({"reboot.target"}),
    START_UNIT: frozenset({"initrd-switch-root.target", "sysinit.target"}),
    "plymouth-switch-root-initramfs.service": frozenset(
        {
            "halt.target",
            "kexec.target",
            "plymouth-switch-root-initramfs.service",
            "poweroff.target",
            "reboot.target",
        }
    ),
    "plymouth-switch-root.service": frozenset({"initrd-switch-root.target"}),
}

# Empêche le splash de reprendre l'écran lors d'une mise à jour du système.
NO_RESTART_UNITS: Final[dict[TargetEnvironment, frozenset[str]]] = {
    TargetEnvironment.FULL: frozenset({START_UNIT}),
    TargetEnvironment.MINIMAL: frozenset(),
}


def unit_targets(environment: TargetEnvironment) -> dict[str, frozenset[str]]:
    """Table unité -> cibles de l'environnement."""
    return FULL_UNIT_TARGETS if environment is TargetEnvironment.FULL else MINIMAL_UNIT_TARGETS


def discover_units(daemon_package: Path) -> list[str]:
    """Liste les unités livrées par le démon (`lib/systemd/system`)."""
    units_dir = daemon_package / PACKAGE_UNITS_SUBDIR
    if not units_dir.is_dir():
        logger.warning(f"[discover_units] Aucun répertoire d'unités: {units_dir}")
        return []
    units = sorted(item.name for item in units_dir.iterdir() if item.suffix in UNIT_SUFFIXES)
    logger.debug(f"[discover_units] {len(units)} unité(s) trouvée(s)")
    return units


def build_bindings(units: Iterable[str], environment: TargetEnvironment) -> list[LifecycleBinding]:
    """Construit un LifecycleBinding par unité livrée.

    Une unité absente de la table est rattachée à aucune cible. Une unité de la
    table qui n'est pas livrée est signalée et ignorée.
    """
    table = unit_targets(environment)
    no_restart = NO_RESTART_UNITS[environment]

    shipped: list[str] = []
    for unit in units:
        if unit not in shipped:
            shipped.append(unit)

    bindings = [
        LifecycleBinding(
            unit_name=unit,
            targets=table.get(unit, frozenset()),
            restart_if_changed=unit not in no_restart,
        )
        for unit in shipped
    ]

    for unit in sorted(set(table) - set(shipped)):
        logger.warning(f"[build_bindings] Unité {unit} attendue pour {environment.value} mais non livrée")

    logger.debug(f"[build_bindings] {environment.value}: {len(bindings)} rattachement(s)")
    return bindings
