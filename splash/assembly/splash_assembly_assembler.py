"""Assemblage d'une arborescence de splash pour un environnement cible.

Full: tous les thèmes résolus, tous les plugins et renderers, logo lié.
Minimal (initrd): modules `.so` uniquement, sans renderer X11, logo copié,
plus fontconfig, règles udev et binaires du démon.
"""

from __future__ import annotations

import os
import shutil
import stat
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path, PurePosixPath

from loguru import logger

from ..config.splash_config_paths import (
    BIN_DIR,
    CONFIG_FILE,
    DEFAULTS_FILE,
    FONTCONFIG_FILE,
    FONTS_DIR,
    LOGO_ALIASES,
    LOGO_FILE,
    PACKAGE_BINARIES,
    PACKAGE_DEFAULTS_FILE,
    PACKAGE_PLUGINS_SUBDIR,
    PACKAGE_RENDERERS_SUBDIR,
    PLUGIN_SUFFIX,
    PLUGINS_DIR,
    RENDERERS_DIR,
    THEMES_DIR,
    UDEV_RULES,
    UDEV_RULES_DIR,
    WINDOWING_RENDERER,
)
from ..models.splash_models_build import (
    Artifact,
    ArtifactKind,
    AssemblyResult,
    BuildContext,
    ConfigOptions,
    TargetEnvironment,
)
from ..models.splash_models_theme import ThemeSet
from ..splash_exceptions import AssemblyIOError, SplashConfigError, ThemeNotFoundError
from ..themes.splash_themes_index import ThemeRepositoryIndex
from .splash_assembly_config import render_config, render_fontconfig, strip_loginctl_rules
from .splash_assembly_rewriter import PathRewriter
from .splash_assembly_staging import StagingTree


def _make_writable(root: Path) -> None:
    """Ajoute le droit d'écriture utilisateur (copies depuis un stockage en lecture seule)."""
    for dirpath, dirnames, filenames in os.walk(root):
        for name in [*dirnames, *filenames]:
            path = Path(dirpath) / name
            if path.is_symlink():
                continue
            mode = path.stat().st_mode
            if not mode & stat.S_IWUSR:
                path.chmod(mode | stat.S_IWUSR)
    mode = root.stat().st_mode
    if not mode & stat.S_IWUSR:
        root.chmod(mode | stat.S_IWUSR)


class AssetAssembler:
    """Planifie puis écrit les artefacts d'un environnement."""

    def __init__(self, context: BuildContext, index: ThemeRepositoryIndex):
        """Initialise l'assembleur.

        Args:
            context: Contexte du build
            index: Index des thèmes (lecture seule)
        """
        self.context = context
        self.index = index
        logger.debug("[AssetAssembler] Initialisé")

    # ------------------------------------------------------------------
    # Planification
    # ------------------------------------------------------------------

    def plan(
        self,
        theme_set: ThemeSet,
        environment: TargetEnvironment,
        options: ConfigOptions,
        font: Path,
        logo: Path,
    ) -> list[Artifact]:
        """Calcule la liste des artefacts sans rien écrire.

        Raises:
            ThemeNotFoundError: thème sélectionné absent de l'index
            SplashConfigError: logo ou police introuvable
            AssemblyIOError: lecture d'une source impossible
        """
        root_theme = self.index.get(theme_set.root.name)
        if root_theme is None or not root_theme.asset_dir.is_dir():
            logger.error(f"[AssetAssembler] Thème sélectionné absent: {theme_set.root.name}")
            raise ThemeNotFoundError(theme_set.root.name)
        for option, path in (("logo", logo), ("font", font)):
            if not path.is_file():
                raise SplashConfigError(f"Fichier introuvable pour l'option '{option}': {path}")

        full = environment is TargetEnvironment.FULL
        linked = ArtifactKind.SYMLINK if full else ArtifactKind.FILE
        logo = logo.absolute()

        planned: dict[PurePosixPath, Artifact] = {}

        def add(artifact: Artifact) -> None:
            planned[artifact.destination] = artifact

        add(Artifact(CONFIG_FILE, ArtifactKind.CONTENT, content=render_config(options)))
        add(Artifact(DEFAULTS_FILE, ArtifactKind.FILE, source=self.context.daemon_package / PACKAGE_DEFAULTS_FILE))
        add(Artifact(LOGO_FILE, linked, source=logo))

        for theme in theme_set:
            add(Artifact(THEMES_DIR / theme.name, ArtifactKind.TREE, source=theme.asset_dir))
        for theme_name, alias in LOGO_ALIASES.items():
            if theme_name in theme_set:
                add(Artifact(THEMES_DIR / theme_name / alias, linked, source=logo))

        for artifact in self._plan_plugins(environment):
            add(artifact)

        add(Artifact(FONTS_DIR / font.name, ArtifactKind.FILE, source=font))

        if not full:
            fonts_runtime = self.context.runtime_path(environment, FONTS_DIR)
            add(Artifact(FONTCONFIG_FILE, ArtifactKind.CONTENT, content=render_fontconfig(fonts_runtime)))
            for artifact in [*self._plan_udev_rules(), *self._plan_binaries()]:
                add(artifact)

        artifacts = list(planned.values())
        logger.debug(f"[AssetAssembler] {len(artifacts)} artefact(s) planifié(s) pour {environment.value}")
        return artifacts

    def _plan_plugins(self, environment: TargetEnvironment) -> list[Artifact]:
        full = environment is TargetEnvironment.FULL
        artifacts: list[Artifact] = []

        # Le module d'un thème peut venir d'un paquet de thèmes.
        for package in self.index.packages:
            plugins_dir = package / PACKAGE_PLUGINS_SUBDIR
            if not plugins_dir.is_dir():
                continue
            for item in sorted(plugins_dir.iterdir()):
                if not item.is_file():
                    continue
                if not full and item.suffix != PLUGIN_SUFFIX:
                    continue
                artifacts.append(Artifact(PLUGINS_DIR / item.name, ArtifactKind.FILE, source=item))

        renderers_dir = self.context.daemon_package / PACKAGE_RENDERERS_SUBDIR
        if renderers_dir.is_dir():
            for item in sorted(renderers_dir.glob(f"*{PLUGIN_SUFFIX}")):
                if not full and item.name == WINDOWING_RENDERER:
                    logger.debug(f"[AssetAssembler] Renderer {WINDOWING_RENDERER} exclu de l'initrd")
                    continue
                artifacts.append(Artifact(RENDERERS_DIR / item.name, ArtifactKind.FILE, source=item))
        else:
            logger.warning(f"[AssetAssembler] Aucun renderer dans {renderers_dir}")
        return artifacts

    def _plan_udev_rules(self) -> list[Artifact]:
        rules_dir = self.context.udev_rules_dir
        if rules_dir is None:
            logger.debug("[AssetAssembler] Pas de répertoire de règles udev, étape ignorée")
            return []

        artifacts = []
        for rule in UDEV_RULES:
            source = rules_dir / rule
            try:
                text = source.read_text(encoding="utf-8")
            except OSError as e:
                raise AssemblyIOError(
                    f"Règle udev illisible: {e}", path=str(source), environment=TargetEnvironment.MINIMAL.value
                ) from e
            content = strip_loginctl_rules(text).encode("utf-8")
            artifacts.append(Artifact(UDEV_RULES_DIR / rule, ArtifactKind.CONTENT, content=content))
        return artifacts

    def _plan_binaries(self) -> list[Artifact]:
        artifacts = []
        for name, candidates in PACKAGE_BINARIES.items():
            for candidate in candidates:
                source = self.context.daemon_package / candidate
                if source.is_file():
                    artifacts.append(Artifact(BIN_DIR / name, ArtifactKind.FILE, source=source))
                    break
            else:
                logger.warning(f"[AssetAssembler] Binaire {name} absent du démon ({', '.join(candidates)})")
        return artifacts

    # ------------------------------------------------------------------
    # Écriture
    # ------------------------------------------------------------------

    def assemble(
        self,
        theme_set: ThemeSet,
        environment: TargetEnvironment,
        options: ConfigOptions,
        font: Path,
        logo: Path,
    ) -> AssemblyResult:
        """Assemble et publie l'arborescence de `environment`.

        Rien n'est publié si une étape échoue.
        """
        logger.info(f"[AssetAssembler] Assemblage {environment.value}: thèmes {theme_set.names()}")
        artifacts = self.plan(theme_set, environment, options, font, logo)
        rewriter = PathRewriter(self.context.store_dir, self.context.runtime_path(environment, THEMES_DIR))
        final_root = self.context.root_for(environment)

        with StagingTree(final_root, environment=environment.value) as staging:
            self._materialize_all(staging.path, artifacts, environment)
            self._check_module(staging.path, theme_set)
            try:
                changed = rewriter.rewrite_tree(staging.path / Path(THEMES_DIR))
            except OSError as e:
                raise AssemblyIOError(
                    f"Réécriture des chemins échouée: {e}", path=str(THEMES_DIR), environment=environment.value
                ) from e
            staging.publish()

        rewritten = tuple(PurePosixPath(path.relative_to(staging.path).as_posix()) for path in changed)
        logger.success(f"[AssetAssembler] {environment.value}: {len(artifacts)} artefact(s) dans {final_root}")
        return AssemblyResult(
            environment=environment,
            root=final_root,
            theme_set=theme_set,
            artifacts=tuple(artifacts),
            rewritten=rewritten,
        )

    def _materialize_all(self, root: Path, artifacts: list[Artifact], environment: TargetEnvironment) -> None:
        # Les thèmes d'abord: les alias du logo sont écrits dans leurs répertoires.
        trees = [artifact for artifact in artifacts if artifact.kind is ArtifactKind.TREE]
        others = [artifact for artifact in artifacts if artifact.kind is not ArtifactKind.TREE]

        if self.context.parallel and len(trees) > 1:
            with ThreadPoolExecutor(max_workers=self.context.max_workers) as pool:
                futures = [pool.submit(self._materialize, root, artifact, environment) for artifact in trees]
                for future in futures:
                    future.result()
        else:
            for artifact in trees:
                self._materialize(root, artifact, environment)

        for artifact in others:
            self._materialize(root, artifact, environment)

    def _materialize(self, root: Path, artifact: Artifact, environment: TargetEnvironment) -> None:
        dest = root / Path(artifact.destination)
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            if artifact.kind is not ArtifactKind.TREE and (dest.is_symlink() or dest.exists()):
                dest.unlink()

            if artifact.kind is ArtifactKind.CONTENT:
                assert artifact.content is not None
                dest.write_bytes(artifact.content)
                return

            assert artifact.source is not None
            if artifact.kind is ArtifactKind.TREE:
                shutil.copytree(artifact.source, dest, symlinks=False, dirs_exist_ok=True)
                _make_writable(dest)
            elif artifact.kind is ArtifactKind.SYMLINK:
                dest.symlink_to(artifact.source)
            else:
                shutil.copy2(artifact.source, dest)
                dest.chmod(dest.stat().st_mode | stat.S_IWUSR)
        except OSError as e:
            logger.error(f"[AssetAssembler] ERREUR: {artifact.destination} - {e}")
            raise AssemblyIOError(
                f"Écriture de {artifact.destination} échouée: {e}",
                path=str(artifact.source or artifact.destination),
                environment=environment.value,
            ) from e

    @staticmethod
    def _check_module(root: Path, theme_set: ThemeSet) -> None:
        module = root / Path(PLUGINS_DIR) / f"{theme_set.root.module_name}{PLUGIN_SUFFIX}"
        if not module.exists():
            logger.warning(
                f"[AssetAssembler] Module {theme_set.root.module_name} du thème {theme_set.root.name} "
                f"absent des plugins"
            )
