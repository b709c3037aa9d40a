"""Index des thèmes disponibles dans le démon et les paquets de thèmes."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from loguru import logger

from ..config.splash_config_paths import DESCRIPTOR_SUFFIX, PACKAGE_THEMES_SUBDIR
from ..models.splash_models_theme import Theme
from ..splash_exceptions import DescriptorParsingError
from .splash_themes_descriptor import read_descriptor


class ThemeRepositoryIndex:
    """Catalogue nom -> thème, construit à partir de paquets.

    Les paquets sont fusionnés dans l'ordre d'ajout: en cas de conflit de nom,
    le dernier paquet ajouté l'emporte.
    """

    def __init__(self) -> None:
        """Initialise un index vide."""
        self._themes: dict[str, Theme] = {}
        self._packages: list[Path] = []
        logger.debug("[ThemeRepositoryIndex] Initialisé")

    @classmethod
    def from_packages(cls, packages: Iterable[Path]) -> ThemeRepositoryIndex:
        """Construit l'index à partir d'une liste ordonnée de paquets."""
        index = cls()
        for package in packages:
            index.add_package(package)
        logger.info(f"[ThemeRepositoryIndex] {len(index)} thème(s) indexé(s) depuis {len(index.packages)} paquet(s)")
        return index

    @property
    def packages(self) -> tuple[Path, ...]:
        """Paquets fusionnés, dans l'ordre d'ajout."""
        return tuple(self._packages)

    def add_package(self, package: Path) -> list[str]:
        """Scanne `<package>/share/plymouth/themes` et fusionne les thèmes trouvés.

        Returns:
            Noms des thèmes ajoutés ou remplacés
        """
        self._packages.append(package)
        themes_dir = package / PACKAGE_THEMES_SUBDIR
        if not themes_dir.is_dir():
            logger.debug(f"[ThemeRepositoryIndex] Aucun répertoire de thèmes dans {package}")
            return []

        added: list[str] = []
        for item in sorted(themes_dir.iterdir()):
            if not item.is_dir():
                continue
            try:
                theme = self.discover_theme(item)
            except DescriptorParsingError as e:
                logger.warning(f"[ThemeRepositoryIndex] Thème ignoré {item.name}: {e}")
                continue

            previous = self._themes.get(theme.name)
            if previous is not None:
                logger.warning(
                    f"[ThemeRepositoryIndex] Thème {theme.name} remplacé: {previous.asset_dir} -> {theme.asset_dir}"
                )
            self._themes[theme.name] = theme
            added.append(theme.name)
            logger.debug(f"[ThemeRepositoryIndex] Thème trouvé: {theme.name} (module {theme.module_name})")
        return added

    @staticmethod
    def discover_theme(theme_dir: Path) -> Theme:
        """Construit un Theme depuis son répertoire d'assets.

        Raises:
            DescriptorParsingError: descripteur absent, multiple ou sans ModuleName.
        """
        descriptors = sorted(theme_dir.glob(f"*{DESCRIPTOR_SUFFIX}"))
        if len(descriptors) != 1:
            raise DescriptorParsingError(
                f"{len(descriptors)} descripteur(s) {DESCRIPTOR_SUFFIX} dans {theme_dir}, exactement 1 attendu"
            )

        descriptor_file = descriptors[0]
        descriptor = read_descriptor(descriptor_file)
        module_name = descriptor.module_name
        if not module_name:
            raise DescriptorParsingError(f"ModuleName absent de {descriptor_file}")

        return Theme(
            name=theme_dir.name,
            module_name=module_name,
            asset_dir=theme_dir,
            descriptor_file=descriptor_file,
            references=tuple(name for name in descriptor.references() if name != theme_dir.name),
        )

    def get(self, name: str) -> Theme | None:
        return self._themes.get(name)

    def names(self) -> list[str]:
        return sorted(self._themes)

    def __contains__(self, name: object) -> bool:
        return name in self._themes

    def __len__(self) -> int:
        return len(self._themes)
