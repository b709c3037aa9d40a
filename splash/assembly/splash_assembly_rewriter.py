"""Réécriture des chemins de stockage de build dans les thèmes copiés.

Les descripteurs `.plymouth` sont réécrits de façon structurée (valeurs des
entrées, puis lignes libres telles que les commentaires; clés et sections
intactes). Les autres fichiers texte (formats tiers opaques,
par exemple les `.script`) passent par une substitution textuelle limitée au
motif de stockage. Les fichiers binaires et les liens symboliques sont ignorés.
"""

from __future__ import annotations

import os
import re
import stat
from pathlib import Path, PurePosixPath

from loguru import logger

from ..config.splash_config_paths import DESCRIPTOR_SUFFIX, PACKAGE_THEMES_SUBDIR
from ..splash_exceptions import SplashConfigError
from ..themes.splash_themes_descriptor import format_descriptor, parse_descriptor

# Taille lue pour détecter un fichier binaire (octet NUL)
_BINARY_PROBE_SIZE = 8192


def build_store_pattern(store_dir: Path | str) -> re.Pattern[str]:
    """Motif `<store>/<entrée>/share/plymouth/themes`."""
    store = str(store_dir).rstrip("/")
    return re.compile(re.escape(store) + r"/[^/\s\"']+/" + re.escape(PACKAGE_THEMES_SUBDIR))


class PathRewriter:
    """Remplace les références au stockage de build par le chemin d'exécution."""

    def __init__(self, store_dir: Path | str, replacement: PurePosixPath | str):
        """Initialise le réécrivain.

        Un remplacement situé dans le stockage (initrd sans systemd) est
        accepté tant qu'il ne correspond pas lui-même au motif.

        Raises:
            SplashConfigError: si le remplacement correspond au motif de
                stockage (la réécriture ne serait plus idempotente).
        """
        self.pattern = build_store_pattern(store_dir)
        self.replacement = str(replacement).rstrip("/")
        if self.pattern.search(self.replacement):
            raise SplashConfigError(
                f"Le chemin de destination {self.replacement} ne doit pas contenir "
                f"<stockage>/<entrée>/{PACKAGE_THEMES_SUBDIR}"
            )

    def rewrite_text(self, text: str) -> str:
        """Substitution textuelle (formats opaques)."""
        return self.pattern.sub(lambda _match: self.replacement, text)

    def rewrite_descriptor(self, text: str) -> str:
        """Réécriture structurée d'un descripteur `.plymouth`."""
        descriptor = parse_descriptor(text)
        # Commentaires compris.
        return format_descriptor(descriptor.map_values(self.rewrite_text).map_free_lines(self.rewrite_text))

    def rewrite_file(self, path: Path) -> bool:
        """Réécrit un fichier en place.

        Returns:
            True si le contenu a changé
        """
        data = path.read_bytes()
        if b"\0" in data[:_BINARY_PROBE_SIZE]:
            return False
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            logger.debug(f"[PathRewriter] Fichier non UTF-8 ignoré: {path}")
            return False

        if path.suffix == DESCRIPTOR_SUFFIX:
            new_text = self.rewrite_descriptor(text)
        else:
            new_text = self.rewrite_text(text)
        if new_text == text:
            return False

        # Les fichiers copiés depuis le stockage sont souvent en lecture seule.
        mode = path.stat().st_mode
        if not mode & stat.S_IWUSR:
            path.chmod(mode | stat.S_IWUSR)
        path.write_text(new_text, encoding="utf-8")
        return True

    def rewrite_tree(self, themes_dir: Path) -> list[Path]:
        """Réécrit tous les fichiers texte sous `themes_dir`.

        Returns:
            Fichiers modifiés (triés)
        """
        logger.debug(f"[PathRewriter] Réécriture de {themes_dir} -> {self.replacement}")
        changed: list[Path] = []
        for dirpath, _dirnames, filenames in os.walk(themes_dir):
            for filename in filenames:
                path = Path(dirpath) / filename
                if path.is_symlink() or not path.is_file():
                    continue
                if self.rewrite_file(path):
                    changed.append(path)
        changed.sort()
        logger.info(f"[PathRewriter] {len(changed)} fichier(s) réécrit(s) sous {themes_dir}")
        return changed
