"""Lecture/écriture des descripteurs de thème (format `.plymouth`).

Le descripteur est un fichier à sections `[Section]` et lignes `Clé=Valeur`.
Le parsing conserve chaque ligne brute pour pouvoir réécrire uniquement les
valeurs modifiées, à l'octet près pour le reste.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Final

from loguru import logger

from ..splash_exceptions import DescriptorParsingError

MODULE_SECTION: Final[str] = "Plymouth Theme"
MODULE_KEY: Final[str] = "ModuleName"

_SECTION_RE: Final = re.compile(r"^\s*\[([^\]]+)\]\s*$")
# Cas: "Clé=Valeur", "Clé = Valeur" (l'espacement autour de '=' est conservé)
_ENTRY_RE: Final = re.compile(r"^(\s*)([^=\s#;][^=]*?)(\s*=\s*)(.*?)(\s*)$")
# Un nom de thème est le segment qui suit le répertoire des thèmes.
THEME_REFERENCE_RE: Final = re.compile(r"/share/plymouth/themes/([^/\s\"']+)")


@dataclass(frozen=True)
class DescriptorLine:
    """Ligne du descripteur (section, entrée ou ligne libre)."""

    raw: str
    ending: str
    section: str | None
    key: str | None = None
    value: str | None = None
    prefix: str = ""
    suffix: str = ""

    @property
    def is_entry(self) -> bool:
        return self.key is not None

    def render(self) -> str:
        if self.key is None or self.value is None:
            return self.raw + self.ending
        return self.prefix + self.value + self.suffix + self.ending


@dataclass(frozen=True)
class ThemeDescriptor:
    """Descripteur parsé, sous forme d'enregistrements ordonnés."""

    lines: tuple[DescriptorLine, ...]

    def entries(self) -> Iterator[DescriptorLine]:
        return (line for line in self.lines if line.is_entry)

    def get(self, section: str, key: str) -> str | None:
        for line in self.entries():
            if line.section == section and line.key == key:
                return line.value
        return None

    @property
    def module_name(self) -> str | None:
        """Nom du module déclaré (section [Plymouth Theme] en priorité)."""
        value = self.get(MODULE_SECTION, MODULE_KEY)
        if value:
            return value
        # Certains thèmes tiers placent ModuleName hors de la section attendue.
        for line in self.entries():
            if line.key == MODULE_KEY and line.value:
                return line.value
        return None

    def references(self) -> tuple[str, ...]:
        """Noms des thèmes référencés par les valeurs, sans doublon, dans l'ordre."""
        found: list[str] = []
        for line in self.entries():
            for name in theme_references(line.value or ""):
                if name not in found:
                    found.append(name)
        return tuple(found)

    def map_values(self, transform: Callable[[str], str]) -> ThemeDescriptor:
        """Retourne un nouveau descripteur dont les valeurs sont transformées."""
        lines = []
        for line in self.lines:
            if line.is_entry and line.value is not None:
                new_value = transform(line.value)
                if new_value != line.value:
                    line = replace(line, value=new_value)
            lines.append(line)
        return ThemeDescriptor(tuple(lines))

    def map_free_lines(self, transform: Callable[[str], str]) -> ThemeDescriptor:
        """Transforme le texte brut des lignes hors entrées (commentaires, sections)."""
        lines = []
        for line in self.lines:
            if not line.is_entry:
                new_raw = transform(line.raw)
                if new_raw != line.raw:
                    line = replace(line, raw=new_raw)
            lines.append(line)
        return ThemeDescriptor(tuple(lines))


def theme_references(text: str) -> list[str]:
    """Extrait les noms de thèmes référencés dans un texte quelconque."""
    return THEME_REFERENCE_RE.findall(text)


def parse_descriptor(text: str) -> ThemeDescriptor:
    """Parse le contenu brut d'un descripteur `.plymouth`."""
    lines: list[DescriptorLine] = []
    section: str | None = None
    for physical in text.splitlines(keepends=True):
        raw = physical.rstrip("\r\n")
        ending = physical[len(raw) :]

        section_match = _SECTION_RE.match(raw)
        if section_match:
            section = section_match.group(1).strip()
            lines.append(DescriptorLine(raw=raw, ending=ending, section=section))
            continue

        entry_match = _ENTRY_RE.match(raw)
        if entry_match:
            indent, key, separator, value, trailing = entry_match.groups()
            lines.append(
                DescriptorLine(
                    raw=raw,
                    ending=ending,
                    section=section,
                    key=key.strip(),
                    value=value,
                    prefix=indent + key + separator,
                    suffix=trailing,
                )
            )
            continue

        lines.append(DescriptorLine(raw=raw, ending=ending, section=section))
    return ThemeDescriptor(tuple(lines))


def format_descriptor(descriptor: ThemeDescriptor) -> str:
    """Reconstruit le texte du descripteur."""
    return "".join(line.render() for line in descriptor.lines)


def read_descriptor(path: Path) -> ThemeDescriptor:
    """Lit et parse un descripteur.

    Raises:
        DescriptorParsingError: fichier illisible ou non UTF-8.
    """
    logger.debug(f"[read_descriptor] Lecture {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise DescriptorParsingError(f"Descripteur illisible: {path} ({e})") from e
    return parse_descriptor(text)
