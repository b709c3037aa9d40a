"""Modèles déclaratifs du cycle de vie (unités, liens d'exécution, hooks).

Ces structures ne démarrent aucun processus: elles sont interprétées par le
système d'init externe.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import PurePosixPath

from .splash_models_build import TargetEnvironment


@dataclass(frozen=True)
class LifecycleBinding:
    """Cibles d'init auxquelles une unité est rattachée."""

    unit_name: str
    targets: frozenset[str] = frozenset()
    # False: ne pas redémarrer l'unité lors d'un changement de configuration
    restart_if_changed: bool = True


@dataclass(frozen=True)
class RuntimeLink:
    """Lien symbolique `link -> target` créé au démarrage."""

    link: PurePosixPath
    target: PurePosixPath


@dataclass(frozen=True)
class LinkStep:
    """Étape de liaison des fichiers vers le répertoire d'exécution.

    `before_unit` désigne l'unité avant laquelle l'étape s'exécute (None
    lorsque l'init n'est pas géré par systemd).
    """

    stage: str
    links: tuple[RuntimeLink, ...]
    directories: tuple[PurePosixPath, ...] = ()
    before_unit: str | None = None


@dataclass(frozen=True)
class BootHook:
    """Commandes shell rattachées à une étape de l'initrd sans systemd."""

    stage: str
    commands: tuple[str, ...]


@dataclass(frozen=True)
class LifecyclePlan:
    """Rattachement complet d'un environnement."""

    environment: TargetEnvironment
    bindings: tuple[LifecycleBinding, ...]
    link_step: LinkStep | None = None
    hooks: tuple[BootHook, ...] = ()
    kernel_params: tuple[str, ...] = field(default=())

    def binding_for(self, unit_name: str) -> LifecycleBinding | None:
        for binding in self.bindings:
            if binding.unit_name == unit_name:
                return binding
        return None
