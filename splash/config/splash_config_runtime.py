"""Utilities for CLI entry points.

This module centralizes shared runtime helpers used by `main.py`
(verbosity flags and logging level selection).
"""

from __future__ import annotations

from .splash_config_logging import DEBUG, INFO, WARNING, configure_logging


def configure_cli_logging(*, debug: bool, verbose: bool = False, log_file: bool = False) -> None:
    """Configure Loguru for the whole process.

    Politique:
    - Sans flag: WARNING (les avertissements de dépendance restent visibles).
    - --verbose: INFO.
    - --debug: DEBUG (+ backtrace/diagnose).
    """
    if debug:
        level = DEBUG
    elif verbose:
        level = INFO
    else:
        level = WARNING
    configure_logging(level, enable_file_logging=log_file)


def parse_verbosity_flags(argv: list[str]) -> tuple[bool, bool, list[str]]:
    """Parse argv et extrait `--verbose` et `--debug`.

    Returns:
        (debug_enabled, verbose_enabled, remaining_argv)
    """
    debug = False
    verbose = False
    remaining: list[str] = []
    for arg in argv:
        if arg == "--debug":
            debug = True
        elif arg == "--verbose":
            verbose = True
        else:
            remaining.append(arg)
    return debug, verbose, remaining
