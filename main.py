"""Point d'entrée principal (build).

Ce lanceur configure le logging, charge la sélection puis construit les
arborescences Full et initrd et leur manifeste.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path, PurePosixPath

from loguru import logger

from splash.config.splash_config_paths import DEFAULT_STORE_DIR, MANIFEST_FILE
from splash.config.splash_config_runtime import configure_cli_logging, parse_verbosity_flags
from splash.config.splash_config_selection import load_selection
from splash.models.splash_models_build import BuildContext, Selection, TargetEnvironment
from splash.splash_build import ALL_ENVIRONMENTS, SplashBuilder, write_manifest
from splash.splash_exceptions import SplashError

# Loguru installe un handler par défaut (niveau DEBUG) dès l'import.
# On le retire ici, avant l'appel explicite à configure_cli_logging().
try:
    logger.remove()
except (TypeError, ValueError):
    pass


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="splash-assembler", description="Assemble les arborescences plymouth.")
    parser.add_argument("--selection", type=Path, help="Fichier de sélection JSON (défauts si absent)")
    parser.add_argument("--daemon", type=Path, required=True, help="Paquet du démon plymouth")
    parser.add_argument("--output", type=Path, required=True, help="Répertoire de sortie")
    parser.add_argument("--store-dir", type=Path, default=Path(DEFAULT_STORE_DIR), help="Racine du stockage de build")
    parser.add_argument("--udev-rules", type=Path, help="Répertoire des règles udev de systemd")
    parser.add_argument("--system-prefix", help="Chemin d'exécution de l'arborescence Full (ex: /)")
    parser.add_argument("--initrd-prefix", help="Chemin d'exécution de l'arborescence initrd")
    parser.add_argument(
        "--no-managed-init", action="store_true", help="Initrd sans systemd (liens et hooks shell)"
    )
    parser.add_argument(
        "--environment",
        choices=["all", *(env.value for env in TargetEnvironment)],
        default="all",
        help="Environnement(s) à construire",
    )
    parser.add_argument("--serial", action="store_true", help="Désactive la construction parallèle")
    parser.add_argument("--log-file", action="store_true", help="Active le fichier de log rotatif")
    return parser


def _run_main(argv: list[str]) -> int:
    """Exécute le build et retourne un code de sortie."""
    debug, verbose, remaining_argv = parse_verbosity_flags(argv)
    args = _build_parser().parse_args(remaining_argv)

    configure_cli_logging(debug=debug, verbose=verbose, log_file=args.log_file)
    logger.debug(f"[main] Debug mode: {debug}, verbose: {verbose}, args: {args}")

    selection = load_selection(args.selection) if args.selection else Selection()
    context = BuildContext.for_output(
        args.output,
        args.daemon,
        store_dir=args.store_dir,
        full_prefix=PurePosixPath(args.system_prefix) if args.system_prefix else None,
        minimal_prefix=PurePosixPath(args.initrd_prefix) if args.initrd_prefix else None,
        udev_rules_dir=args.udev_rules,
        managed_init=not args.no_managed_init,
        parallel=not args.serial,
    )
    environments = ALL_ENVIRONMENTS if args.environment == "all" else (TargetEnvironment(args.environment),)

    result = SplashBuilder(context).build(selection, environments)
    write_manifest(result, args.output / MANIFEST_FILE)
    logger.success(f"[main] Arborescences prêtes dans {args.output}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Point d'entrée Python: retourne 0 en cas de succès, 1 sur erreur fatale."""
    try:
        return _run_main(sys.argv[1:] if argv is None else argv)
    except SplashError as exc:
        logger.error(f"[main] {exc}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
