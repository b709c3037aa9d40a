"""Configuration du système de logging avec Loguru.

Fournit une configuration avec niveaux de verbosité ajustables. Le fichier de
log rotatif est optionnel: un build non interactif n'en a généralement pas besoin.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Final

from loguru import logger

# Niveaux de logging
DEBUG: Final[str] = "DEBUG"
INFO: Final[str] = "INFO"
WARNING: Final[str] = "WARNING"
ERROR: Final[str] = "ERROR"

# Répertoire des logs
LOG_DIR: Final[Path] = Path.home() / ".config" / "splash_assembler" / "logs"


def configure_logging(level: str = INFO, *, enable_file_logging: bool = False) -> None:
    """Configure le système de logging.

    Args:
        level: Niveau de logging (DEBUG, INFO, WARNING, ERROR)
        enable_file_logging: Si True, active la sortie vers fichier
    """
    # Supprimer les handlers par défaut
    logger.remove()

    # Format simplifié hors debug, détaillé en debug
    if level == DEBUG:
        log_format = (
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        )
    else:
        log_format = "<green>{time:HH:mm:ss}</green> | <level>{level: <7}</level> | <level>{message}</level>"

    logger.add(
        sys.stderr,
        format=log_format,
        level=level,
        colorize=True,
        backtrace=(level == DEBUG),
        diagnose=(level == DEBUG),
    )

    if enable_file_logging:
        LOG_DIR.mkdir(parents=True, exist_ok=True)

        logger.add(
            LOG_DIR / "splash_assembler_{time:YYYY-MM-DD}.log",
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}",
            level=level,
            rotation="10 MB",
            retention="7 days",
            compression="zip",
            encoding="utf-8",
        )

    logger.debug(f"[Logging] Configuration appliquée: niveau={level}, fichier={enable_file_logging}")
