"""Configuration pytest: faux paquets plymouth et sécurité.

Active:
- Blocage subprocess (aucune commande système pendant les tests)
- Loguru sans enqueue
- Fabrique de paquets (démon, thèmes, plugins) dans tmp_path
"""

import subprocess
import sys
from io import StringIO
from pathlib import Path

import pytest
from loguru import logger

# Ajouter le dossier racine du projet au PYTHONPATH
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from splash.models.splash_models_build import BuildContext, Selection  # noqa: E402

DAEMON_NAME = "0abc-plymouth-24.004"

UNITS = (
    "plymouth-halt.service",
    "plymouth-kexec.service",
    "plymouth-poweroff.service",
    "plymouth-quit-wait.service",
    "plymouth-quit.service",
    "plymouth-read-write.service",
    "plymouth-reboot.service",
    "plymouth-start.service",
    "plymouth-switch-root-initramfs.service",
    "plymouth-switch-root.service",
    "systemd-ask-password-plymouth.path",
    "systemd-ask-password-plymouth.service",
)


def descriptor_text(name: str, module: str, body: str = "") -> str:
    """Descripteur .plymouth minimal."""
    return (
        "[Plymouth Theme]\n"
        f"Name={name}\n"
        f"Description={name} test theme\n"
        f"ModuleName={module}\n"
        "\n"
        f"[{module}]\n"
        f"{body}"
    )


def make_package(
    store: Path,
    name: str,
    *,
    themes: dict[str, str] | None = None,
    plugins: tuple[str, ...] = (),
    renderers: tuple[str, ...] = (),
    defaults: bool = False,
    units: tuple[str, ...] = (),
    binaries: tuple[str, ...] = (),
) -> Path:
    """Crée un paquet `<store>/<name>` avec la disposition plymouth."""
    package = store / name
    package.mkdir(parents=True)
    for theme, text in (themes or {}).items():
        theme_dir = package / "share/plymouth/themes" / theme
        theme_dir.mkdir(parents=True)
        (theme_dir / f"{theme}.plymouth").write_text(text, encoding="utf-8")
    for plugin in plugins:
        path = package / "lib/plymouth" / plugin
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"\x7fELF plugin " + plugin.encode())
    for renderer in renderers:
        path = package / "lib/plymouth/renderers" / renderer
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"\x7fELF renderer " + renderer.encode())
    if defaults:
        path = package / "share/plymouth/plymouthd.defaults"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("[Daemon]\nTheme=spinner\nShowDelay=0\nDeviceTimeout=8\n", encoding="utf-8")
    for unit in units:
        path = package / "lib/systemd/system" / unit
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("[Unit]\n", encoding="utf-8")
    for binary in binaries:
        path = package / binary
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"\x7fELF binary")
    return package


def pytest_configure(config):
    """Configuration globale de pytest."""
    del config
    # Stabiliser Loguru pendant les tests: pas d'enqueue (thread/queue).
    logger.remove()
    logger.add(sys.stderr, enqueue=False)


@pytest.fixture(autouse=True)
def secure_subprocess(monkeypatch):
    """Empêche les appels subprocess réels pendant les tests."""

    def mocked_run(*args, **kwargs):
        cmd = args[0] if args else kwargs.get("args")
        raise RuntimeError(f"SÉCURITÉ : Appel subprocess non autorisé dans les tests : {cmd}")

    monkeypatch.setattr(subprocess, "run", mocked_run)
    monkeypatch.setattr(subprocess, "Popen", mocked_run)
    monkeypatch.setattr(subprocess, "call", mocked_run)
    monkeypatch.setattr(subprocess, "check_call", mocked_run)
    monkeypatch.setattr(subprocess, "check_output", mocked_run)

    yield


@pytest.fixture
def log_output():
    """Capture la sortie Loguru (niveau DEBUG) dans un StringIO."""
    output = StringIO()
    handler_id = logger.add(output, level="DEBUG", format="{level} | {message}")
    yield output
    logger.remove(handler_id)


@pytest.fixture
def package_factory():
    """Fabrique de paquets (voir make_package)."""
    return make_package


@pytest.fixture
def descriptor_factory():
    """Fabrique de descripteurs (voir descriptor_text)."""
    return descriptor_text


@pytest.fixture
def store(tmp_path):
    """Racine du faux stockage de build."""
    path = tmp_path / "store"
    path.mkdir()
    return path


@pytest.fixture
def daemon(store):
    """Paquet du démon: bgrt (dépend de spinner), spinner, spinfinity, details."""
    spinner_ref = f"{store}/{DAEMON_NAME}/share/plymouth/themes/spinner"
    package = make_package(
        store,
        DAEMON_NAME,
        themes={
            "bgrt": descriptor_text(
                "BGRT",
                "two-step",
                f"Font=Cantarell 12\nImageDir={spinner_ref}\nDialogVerticalAlignment=.382\n",
            ),
            "spinner": descriptor_text(
                "Spinner",
                "two-step",
                f"ImageDir={store}/{DAEMON_NAME}/share/plymouth/themes/spinner\n",
            ),
            "spinfinity": descriptor_text("Spinfinity", "throbgress"),
            "details": descriptor_text("Details", "details"),
        },
        plugins=("two-step.so", "details.so", "script.so", "label-freetype.so", "README.plugins"),
        renderers=("drm.so", "frame-buffer.so", "x11.so"),
        defaults=True,
        units=UNITS,
        binaries=("bin/plymouth", "sbin/plymouthd"),
    )
    (package / "share/plymouth/themes/spinner/throbber-0001.png").write_bytes(b"\x89PNG\r\n\x1a\n\0\0data")
    return package


@pytest.fixture
def logo(tmp_path):
    path = tmp_path / "inputs" / "logo.png"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"\x89PNG\r\n\x1a\nlogo")
    return path


@pytest.fixture
def font(tmp_path):
    path = tmp_path / "inputs" / "DejaVuSans.ttf"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"\0\1\0\0font")
    return path


@pytest.fixture
def context(tmp_path, daemon, store):
    """Contexte de build séquentiel, sorties sous tmp_path/out."""
    return BuildContext.for_output(tmp_path / "out", daemon, store_dir=store, parallel=False)


@pytest.fixture
def selection(logo, font):
    return Selection(theme="bgrt", logo=logo, font=font)


def pytest_sessionfinish(session, exitstatus):
    """Arrête proprement les handlers Loguru en fin de session."""
    del session, exitstatus
    logger.remove()
