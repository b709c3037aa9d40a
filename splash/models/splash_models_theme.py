"""Modèles de données pour les thèmes plymouth."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class Theme:
    """Thème découvert dans un paquet.

    `asset_dir` contient exactement un descripteur `.plymouth` qui déclare
    `module_name`. `references` liste, dans l'ordre du descripteur, les noms
    des autres thèmes référencés.
    """

    name: str
    module_name: str
    asset_dir: Path
    descriptor_file: Path
    references: tuple[str, ...] = ()


@dataclass(frozen=True)
class MissingDependency:
    """Thème référencé mais absent de l'index (toléré, référence pendante)."""

    theme: str
    referenced_by: str


@dataclass(frozen=True)
class ThemeSet:
    """Ensemble ordonné et fermé de thèmes.

    Le premier thème est la racine sélectionnée; les suivants apparaissent dans
    l'ordre de découverte (parcours en largeur).
    """

    themes: tuple[Theme, ...]
    missing: tuple[MissingDependency, ...] = field(default=())

    def __post_init__(self) -> None:
        if not self.themes:
            raise ValueError("Un ThemeSet contient au moins le thème racine")
        names = [theme.name for theme in self.themes]
        if len(names) != len(set(names)):
            raise ValueError(f"Thèmes dupliqués dans le ThemeSet: {names}")

    @property
    def root(self) -> Theme:
        """Thème sélectionné."""
        return self.themes[0]

    def names(self) -> list[str]:
        """Noms des thèmes, dans l'ordre."""
        return [theme.name for theme in self.themes]

    def get(self, name: str) -> Theme | None:
        for theme in self.themes:
            if theme.name == name:
                return theme
        return None

    def __contains__(self, name: object) -> bool:
        return any(theme.name == name for theme in self.themes)

    def __iter__(self) -> Iterator[Theme]:
        return iter(self.themes)

    def __len__(self) -> int:
        return len(self.themes)
