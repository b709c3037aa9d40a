"""Liens d'exécution et hooks de démarrage.

Décrit, sans rien exécuter, comment les fichiers statiques de l'arborescence
sont liés dans `/run/plymouth` avant le démarrage du démon.
"""

from __future__ import annotations

import shlex
from collections.abc import Iterable
from pathlib import PurePosixPath

from loguru import logger

from ..config.splash_config_paths import (
    BIN_DIR,
    CONFIG_FILE,
    DEFAULTS_FILE,
    ETC_PLYMOUTH,
    FONTCONFIG_DIR,
    KERNEL_PARAMS,
    LOGO_FILE,
    PLUGINS_DIR,
    RUNTIME_DIR,
    RUNTIME_PID_FILE,
    SYSTEM_ROOT,
    THEMES_DIR,
)
from ..models.splash_models_build import BuildContext, TargetEnvironment
from ..models.splash_models_lifecycle import BootHook, LifecyclePlan, LinkStep, RuntimeLink
from .splash_lifecycle_bindings import START_UNIT, build_bindings


def _runtime_links_from(prefix: PurePosixPath) -> tuple[RuntimeLink, ...]:
    return (
        RuntimeLink(RUNTIME_DIR / DEFAULTS_FILE.name, prefix / DEFAULTS_FILE),
        RuntimeLink(RUNTIME_DIR / THEMES_DIR.name, prefix / THEMES_DIR),
        RuntimeLink(RUNTIME_DIR / PLUGINS_DIR.name, prefix / PLUGINS_DIR),
    )


def runtime_link_step(environment: TargetEnvironment, context: BuildContext) -> LinkStep:
    """Étape de liaison propre à l'environnement.

    - Full: règles tmpfiles vers le préfixe Full (`/etc/plymouth` par défaut).
    - Minimal avec systemd: avant plymouth-start.service, même préfixe par défaut.
    - Minimal sans systemd: avant LVM, depuis le préfixe de l'arborescence initrd.
    """
    # Même préfixe que celui utilisé pour réécrire les thèmes.
    prefix = context.prefix_for(environment)

    if environment is TargetEnvironment.FULL:
        return LinkStep(
            stage="tmpfiles",
            directories=(RUNTIME_DIR,),
            links=_runtime_links_from(prefix),
        )

    if context.managed_init:
        return LinkStep(
            stage="pre-start",
            before_unit=START_UNIT,
            directories=(RUNTIME_DIR,),
            links=_runtime_links_from(prefix),
        )

    logger.debug(f"[runtime_link_step] Init non géré, liens depuis {prefix}")
    return LinkStep(
        stage="pre-lvm",
        directories=(SYSTEM_ROOT / ETC_PLYMOUTH, RUNTIME_DIR),
        links=(
            RuntimeLink(SYSTEM_ROOT / LOGO_FILE, prefix / LOGO_FILE),
            RuntimeLink(SYSTEM_ROOT / CONFIG_FILE, prefix / CONFIG_FILE),
            *_runtime_links_from(prefix),
            RuntimeLink(SYSTEM_ROOT / FONTCONFIG_DIR, prefix / FONTCONFIG_DIR),
        ),
    )


def boot_hooks(context: BuildContext) -> tuple[BootHook, ...]:
    """Commandes de l'initrd sans systemd (démarrage, pivot, échec)."""
    if context.managed_init:
        return ()

    bin_dir = context.prefix_for(TargetEnvironment.MINIMAL) / BIN_DIR
    plymouth = shlex.quote(str(bin_dir / "plymouth"))
    plymouthd = shlex.quote(str(bin_dir / "plymouthd"))
    return (
        BootHook(
            stage="pre-lvm",
            commands=(
                f"{plymouthd} --mode=boot --pid-file={RUNTIME_PID_FILE} --attach-to-session",
                f"{plymouth} show-splash",
            ),
        ),
        BootHook(stage="post-mount", commands=(f'{plymouth} update-root-fs --new-root-dir="$targetRoot"',)),
        BootHook(stage="pre-fail", commands=(f"{plymouth} quit --wait",)),
    )


def plan_lifecycle(environment: TargetEnvironment, context: BuildContext, units: Iterable[str]) -> LifecyclePlan:
    """Rattachement complet d'un environnement (unités, liens, hooks)."""
    hooks = boot_hooks(context) if environment is TargetEnvironment.MINIMAL else ()
    return LifecyclePlan(
        environment=environment,
        bindings=tuple(build_bindings(units, environment)),
        link_step=runtime_link_step(environment, context),
        hooks=hooks,
        kernel_params=KERNEL_PARAMS,
    )


def render_tmpfiles(step: LinkStep) -> str:
    """Rend une étape au format tmpfiles.d."""
    lines = [f"d {directory} 0755 root root 0 -" for directory in step.directories]
    lines.extend(f"L+ {link.link} - - - - {link.target}" for link in step.links)
    return "\n".join(lines) + "\n"


def render_shell(step: LinkStep) -> str:
    """Rend une étape sous forme de commandes shell."""
    lines = [f"mkdir -p {shlex.quote(str(directory))}" for directory in step.directories]
    lines.extend(f"ln -sfn {shlex.quote(str(link.target))} {shlex.quote(str(link.link))}" for link in step.links)
    return "\n".join(lines) + "\n"
