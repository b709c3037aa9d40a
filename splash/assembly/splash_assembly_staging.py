"""Publication tout-ou-rien d'une arborescence.

L'arborescence est construite dans un répertoire de staging voisin de la
destination, puis publiée par renommage. En cas d'échec, le staging est
supprimé et l'arborescence précédente (si elle existe) reste en place.
"""

from __future__ import annotations

import shutil
import uuid
from pathlib import Path

from loguru import logger

from ..splash_exceptions import AssemblyIOError


class StagingTree:
    """Répertoire de staging publié atomiquement à la place de `final_root`."""

    def __init__(self, final_root: Path, *, environment: str | None = None):
        """Initialise le staging (aucune écriture avant `__enter__`)."""
        self.final_root = final_root
        self.environment = environment
        token = uuid.uuid4().hex
        self.path = final_root.parent / f".{final_root.name}.staging-{token}"
        self._backup = final_root.parent / f".{final_root.name}.old-{token}"
        self.published = False

    def __enter__(self) -> StagingTree:
        try:
            self.path.mkdir(parents=True)
        except OSError as e:
            raise AssemblyIOError(
                f"Impossible de créer le staging: {e}", path=str(self.path), environment=self.environment
            ) from e
        logger.debug(f"[StagingTree] Staging créé: {self.path}")
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if not self.published:
            logger.warning(f"[StagingTree] Abandon du staging {self.path}")
            shutil.rmtree(self.path, ignore_errors=True)
        return False

    def publish(self) -> Path:
        """Remplace `final_root` par le staging.

        Returns:
            La racine publiée
        """
        had_previous = self.final_root.exists() or self.final_root.is_symlink()
        try:
            if had_previous:
                self.final_root.rename(self._backup)
            try:
                self.path.rename(self.final_root)
            except OSError:
                if had_previous:
                    self._backup.rename(self.final_root)
                raise
        except OSError as e:
            logger.error(f"[StagingTree] ERREUR: publication impossible - {e}")
            raise AssemblyIOError(
                f"Publication impossible: {e}", path=str(self.final_root), environment=self.environment
            ) from e

        self.published = True
        if had_previous:
            # Best-effort: l'arborescence est déjà publiée.
            shutil.rmtree(self._backup, ignore_errors=True)
        logger.success(f"[StagingTree] Arborescence publiée: {self.final_root}")
        return self.final_root
