"""Orchestration du build: index, résolution, assemblage et rattachement.

Chaque environnement est assemblé indépendamment (racines disjointes). Un
échec dans l'un n'interrompt pas l'autre; la première erreur est relevée une
fois tous les environnements terminés.
"""

from __future__ import annotations

import json
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from loguru import logger

from .assembly.splash_assembly_assembler import AssetAssembler
from .lifecycle.splash_lifecycle_bindings import discover_units
from .lifecycle.splash_lifecycle_links import plan_lifecycle, render_shell, render_tmpfiles
from .models.splash_models_build import (
    AssemblyResult,
    BuildContext,
    ConfigOptions,
    Selection,
    TargetEnvironment,
)
from .models.splash_models_lifecycle import LifecyclePlan
from .models.splash_models_theme import ThemeSet
from .splash_exceptions import SplashError
from .themes.splash_themes_index import ThemeRepositoryIndex
from .themes.splash_themes_resolver import resolve_theme_set

ALL_ENVIRONMENTS: tuple[TargetEnvironment, ...] = (TargetEnvironment.FULL, TargetEnvironment.MINIMAL)


@dataclass(frozen=True)
class BuildResult:
    """Résultat complet d'un build."""

    theme_set: ThemeSet
    options: ConfigOptions
    assemblies: dict[TargetEnvironment, AssemblyResult]
    lifecycle: dict[TargetEnvironment, LifecyclePlan]


class SplashBuilder:
    """Point d'entrée du build à partir d'une sélection."""

    def __init__(self, context: BuildContext):
        """Initialise le builder avec un contexte explicite."""
        self.context = context
        logger.debug(f"[SplashBuilder] Initialisé (démon: {context.daemon_package})")

    def build_index(self, selection: Selection) -> ThemeRepositoryIndex:
        """Index du démon puis des paquets de thèmes additionnels."""
        return ThemeRepositoryIndex.from_packages([self.context.daemon_package, *selection.theme_packages])

    def build(
        self,
        selection: Selection,
        environments: tuple[TargetEnvironment, ...] = ALL_ENVIRONMENTS,
    ) -> BuildResult:
        """Construit les arborescences demandées.

        Raises:
            ThemeNotFoundError: thème sélectionné absent (aucune arborescence écrite)
            SplashError: première erreur d'assemblage rencontrée
        """
        logger.info(f"[SplashBuilder] Build du thème {selection.theme} pour {[env.value for env in environments]}")
        index = self.build_index(selection)
        theme_set = resolve_theme_set(selection.theme, index)
        options = selection.to_config_options()
        assembler = AssetAssembler(self.context, index)

        def run(environment: TargetEnvironment) -> AssemblyResult:
            return assembler.assemble(theme_set, environment, options, selection.font, selection.logo)

        assemblies: dict[TargetEnvironment, AssemblyResult] = {}
        errors: list[tuple[TargetEnvironment, SplashError]] = []

        if self.context.parallel and len(environments) > 1:
            with ThreadPoolExecutor(max_workers=len(environments)) as pool:
                futures = {environment: pool.submit(run, environment) for environment in environments}
                for environment, future in futures.items():
                    try:
                        assemblies[environment] = future.result()
                    except SplashError as e:
                        errors.append((environment, e))
        else:
            for environment in environments:
                try:
                    assemblies[environment] = run(environment)
                except SplashError as e:
                    errors.append((environment, e))

        if errors:
            for environment, error in errors:
                logger.error(f"[SplashBuilder] Échec {environment.value}: {error}")
            raise errors[0][1]

        units = discover_units(self.context.daemon_package)
        lifecycle = {environment: plan_lifecycle(environment, self.context, units) for environment in environments}

        logger.success(f"[SplashBuilder] Build terminé: {theme_set.names()}")
        return BuildResult(theme_set=theme_set, options=options, assemblies=assemblies, lifecycle=lifecycle)


def manifest_dict(result: BuildResult) -> dict[str, Any]:
    """Description JSON du build (artefacts, rattachements, liens, hooks)."""
    environments: dict[str, Any] = {}
    for environment, assembly in result.assemblies.items():
        plan = result.lifecycle.get(environment)
        entry: dict[str, Any] = {
            "root": str(assembly.root),
            "artifacts": [
                {
                    "destination": str(artifact.destination),
                    "kind": artifact.kind.value,
                    "source": str(artifact.source) if artifact.source else None,
                }
                for artifact in assembly.artifacts
            ],
            "rewritten": [str(path) for path in assembly.rewritten],
        }
        if plan is not None:
            entry["bindings"] = {
                binding.unit_name: {
                    "targets": sorted(binding.targets),
                    "restart_if_changed": binding.restart_if_changed,
                }
                for binding in plan.bindings
            }
            if plan.link_step is not None:
                step = plan.link_step
                entry["link_step"] = {
                    "stage": step.stage,
                    "before_unit": step.before_unit,
                    "script": render_tmpfiles(step) if step.stage == "tmpfiles" else render_shell(step),
                }
            entry["hooks"] = {hook.stage: list(hook.commands) for hook in plan.hooks}
            entry["kernel_params"] = list(plan.kernel_params)
        environments[environment.value] = entry

    return {
        "theme": result.options.theme,
        "themes": result.theme_set.names(),
        "missing_dependencies": [
            {"theme": missing.theme, "referenced_by": missing.referenced_by} for missing in result.theme_set.missing
        ],
        "environments": environments,
    }


def write_manifest(result: BuildResult, path: Path) -> None:
    """Écrit le manifeste JSON du build."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(manifest_dict(result), f, indent=2, ensure_ascii=False)
    logger.info(f"[write_manifest] Manifeste écrit: {path}")
