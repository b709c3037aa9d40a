"""Résolution de la fermeture transitive des thèmes requis."""

from __future__ import annotations

from collections import deque

from loguru import logger

from ..models.splash_models_theme import MissingDependency, Theme, ThemeSet
from ..splash_exceptions import ThemeNotFoundError
from .splash_themes_index import ThemeRepositoryIndex


def resolve_theme_set(root: str, index: ThemeRepositoryIndex, *, option: str = "theme") -> ThemeSet:
    """Calcule le ThemeSet du thème `root` (parcours en largeur).

    Un thème référencé mais absent de l'index n'est pas fatal: il est signalé
    par un avertissement et enregistré dans `ThemeSet.missing`. La référence
    reste pendante dans l'arborescence produite.

    Args:
        root: Nom du thème sélectionné
        index: Index des thèmes disponibles
        option: Option de sélection désignant le thème (pour le diagnostic)

    Returns:
        ThemeSet fermé, racine en tête

    Raises:
        ThemeNotFoundError: si `root` est absent de l'index
    """
    root_theme = index.get(root)
    if root_theme is None:
        logger.error(f"[resolve_theme_set] Thème demandé introuvable: {root}")
        raise ThemeNotFoundError(root, option)

    ordered: list[Theme] = [root_theme]
    visited: set[str] = {root}
    missing: list[MissingDependency] = []
    queue: deque[Theme] = deque([root_theme])

    while queue:
        current = queue.popleft()
        for name in current.references:
            if name in visited:
                continue
            visited.add(name)

            theme = index.get(name)
            if theme is None:
                logger.warning(f"Missing theme dependency: {name} (référencé par {current.name})")
                missing.append(MissingDependency(theme=name, referenced_by=current.name))
                continue

            logger.info(f"[resolve_theme_set] Adding dependent theme: {name}")
            ordered.append(theme)
            queue.append(theme)

    theme_set = ThemeSet(themes=tuple(ordered), missing=tuple(missing))
    logger.debug(f"[resolve_theme_set] {root} -> {theme_set.names()}")
    return theme_set
