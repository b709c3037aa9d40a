"""Modèles du build: environnements cibles, options, sélection et contexte."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from pathlib import Path, PurePosixPath

from ..config.splash_config_paths import (
    DEFAULT_DEVICE_TIMEOUT_SECONDS,
    DEFAULT_FONT,
    DEFAULT_LOGO,
    DEFAULT_SHOW_DELAY_SECONDS,
    DEFAULT_STORE_DIR,
    DEFAULT_THEME,
    FULL_TREE_NAME,
    MINIMAL_TREE_NAME,
    SYSTEM_ROOT,
)
from ..splash_exceptions import SplashValidationError
from .splash_models_theme import ThemeSet


class TargetEnvironment(Enum):
    """Environnement de destination d'une arborescence."""

    FULL = "full"
    MINIMAL = "minimal"


@dataclass(frozen=True)
class ConfigOptions:
    """Options du fichier plymouthd.conf.

    `extra_lines` est un passage brut: chaque ligne est recopiée telle quelle
    après les champs structurés.
    """

    show_delay: timedelta
    device_timeout: timedelta
    theme: str
    extra_lines: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # Accepte une liste en entrée, stocke un tuple (dataclass figée).
        object.__setattr__(self, "extra_lines", tuple(self.extra_lines))
        if not self.theme:
            raise SplashValidationError("Le nom de thème ne peut pas être vide")
        for label, value in (("ShowDelay", self.show_delay), ("DeviceTimeout", self.device_timeout)):
            if value < timedelta(0):
                raise SplashValidationError(f"{label} doit être >= 0 (reçu: {value})")


@dataclass
class Selection:
    """Sélection de l'opérateur (entrée du build)."""

    # pylint: disable=too-many-instance-attributes

    theme: str = DEFAULT_THEME
    logo: Path = Path(DEFAULT_LOGO)
    font: Path = Path(DEFAULT_FONT)
    show_delay: timedelta = timedelta(seconds=DEFAULT_SHOW_DELAY_SECONDS)
    device_timeout: timedelta = timedelta(seconds=DEFAULT_DEVICE_TIMEOUT_SECONDS)

    # Lignes brutes ajoutées à plymouthd.conf (non validées)
    extra_config: list[str] = field(default_factory=list)

    # Paquets de thèmes fusionnés dans l'index, après le démon
    theme_packages: list[Path] = field(default_factory=list)

    def to_config_options(self) -> ConfigOptions:
        """Construit les options du fichier de configuration du démon."""
        return ConfigOptions(
            show_delay=self.show_delay,
            device_timeout=self.device_timeout,
            theme=self.theme,
            extra_lines=tuple(self.extra_config),
        )


@dataclass(frozen=True)
class BuildContext:
    """Contexte explicite d'un build, transmis à chaque composant.

    Les préfixes (`full_prefix`, `minimal_prefix`) indiquent où chaque
    arborescence sera visible à l'exécution. À défaut, Full et l'initrd géré
    par systemd sont installés à la racine (`/etc/plymouth`); l'initrd sans
    systemd reste sous sa racine de destination.
    """

    # pylint: disable=too-many-instance-attributes

    daemon_package: Path
    full_root: Path
    minimal_root: Path
    store_dir: Path = Path(DEFAULT_STORE_DIR)
    full_prefix: PurePosixPath | None = None
    minimal_prefix: PurePosixPath | None = None
    udev_rules_dir: Path | None = None
    managed_init: bool = True
    parallel: bool = True
    max_workers: int = 4

    def __post_init__(self) -> None:
        if self.full_root.resolve() == self.minimal_root.resolve():
            raise SplashValidationError("Les racines Full et Minimal doivent être distinctes")
        if self.max_workers < 1:
            raise SplashValidationError("max_workers doit être >= 1")

    @classmethod
    def for_output(cls, output_dir: Path, daemon_package: Path, **kwargs) -> BuildContext:
        """Contexte avec les deux arborescences sous un même répertoire de sortie."""
        return cls(
            daemon_package=daemon_package,
            full_root=output_dir / FULL_TREE_NAME,
            minimal_root=output_dir / MINIMAL_TREE_NAME,
            **kwargs,
        )

    def root_for(self, environment: TargetEnvironment) -> Path:
        """Racine de destination de l'environnement."""
        return self.full_root if environment is TargetEnvironment.FULL else self.minimal_root

    def prefix_for(self, environment: TargetEnvironment) -> PurePosixPath:
        """Chemin sous lequel l'arborescence est visible à l'exécution."""
        prefix = self.full_prefix if environment is TargetEnvironment.FULL else self.minimal_prefix
        if prefix is not None:
            return PurePosixPath(prefix)
        if environment is TargetEnvironment.FULL or self.managed_init:
            return SYSTEM_ROOT
        return PurePosixPath(self.root_for(environment).absolute().as_posix())

    def runtime_path(self, environment: TargetEnvironment, relative: PurePosixPath) -> PurePosixPath:
        """Chemin d'exécution d'un élément relatif à la racine de l'arborescence."""
        return self.prefix_for(environment) / relative


class ArtifactKind(Enum):
    """Nature d'un artefact planifié."""

    FILE = "file"
    TREE = "tree"
    SYMLINK = "symlink"
    CONTENT = "content"


@dataclass(frozen=True)
class Artifact:
    """Élément de l'arborescence: destination relative + source ou contenu."""

    destination: PurePosixPath
    kind: ArtifactKind
    source: Path | None = None
    content: bytes | None = None

    def __post_init__(self) -> None:
        if self.destination.is_absolute():
            raise ValueError(f"Destination relative attendue: {self.destination}")
        if self.kind is ArtifactKind.CONTENT:
            if self.content is None or self.source is not None:
                raise ValueError("Un artefact CONTENT porte un contenu et aucune source")
        elif self.source is None or self.content is not None:
            raise ValueError(f"Un artefact {self.kind.value} porte une source et aucun contenu")


@dataclass(frozen=True)
class AssemblyResult:
    """Résultat de l'assemblage d'un environnement."""

    environment: TargetEnvironment
    root: Path
    theme_set: ThemeSet
    artifacts: tuple[Artifact, ...]
    rewritten: tuple[PurePosixPath, ...] = ()

    def destinations(self) -> list[PurePosixPath]:
        return [artifact.destination for artifact in self.artifacts]
