"""Tests de bout en bout pour SplashBuilder et le manifeste."""

from __future__ import annotations

import json
import os
from dataclasses import replace
from datetime import timedelta
from pathlib import PurePosixPath

import pytest

from splash.assembly.splash_assembly_config import render_config
from splash.models.splash_models_build import ConfigOptions, TargetEnvironment
from splash.splash_build import SplashBuilder, manifest_dict, write_manifest
from splash.splash_exceptions import AssemblyIOError, ThemeNotFoundError

FULL = TargetEnvironment.FULL
MINIMAL = TargetEnvironment.MINIMAL


class TestScenarios:
    """Scénarios de bout en bout."""

    def test_selected_theme_and_dependency(self, context, selection, logo):
        result = SplashBuilder(context).build(selection)

        assert result.theme_set.names() == ["bgrt", "spinner"]
        watermark = context.full_root / "etc/plymouth/themes/spinner/watermark.png"
        assert watermark.is_symlink()
        assert os.readlink(watermark) == str(logo.absolute())
        assert (context.minimal_root / "etc/plymouth/themes/spinner/watermark.png").is_file()
        assert set(result.assemblies) == {FULL, MINIMAL}

    def test_unknown_theme_writes_nothing(self, context, selection):
        selection.theme = "breeze"

        with pytest.raises(ThemeNotFoundError, match="breeze"):
            SplashBuilder(context).build(selection)

        assert not context.full_root.exists()
        assert not context.minimal_root.exists()

    def test_config_rendering(self):
        options = ConfigOptions(
            show_delay=timedelta(0),
            device_timeout=timedelta(seconds=8),
            theme="bgrt",
            extra_lines=["ExtraOpt=1"],
        )
        assert render_config(options) == b"[Daemon]\nShowDelay=0\nDeviceTimeout=8\nTheme=bgrt\nExtraOpt=1\n"


class TestSplashBuilder:
    """Tests du builder."""

    def test_theme_packages_indexed_after_daemon(self, context, selection, store, package_factory, descriptor_factory):
        breeze = package_factory(
            store,
            "9xyz-breeze-plymouth",
            themes={"breeze": descriptor_factory("Breeze", "script")},
            plugins=("script.so",),
        )
        selection.theme = "breeze"
        selection.theme_packages = [breeze]

        result = SplashBuilder(context).build(selection, (FULL,))

        assert result.theme_set.names() == ["breeze"]
        assert (context.full_root / "etc/plymouth/themes/breeze/breeze.plymouth").is_file()
        assert not context.minimal_root.exists()

    def test_parallel_build(self, context, selection):
        result = SplashBuilder(replace(context, parallel=True)).build(selection)

        assert (context.full_root / "etc/plymouth/plymouthd.conf").is_file()
        assert (context.minimal_root / "etc/plymouth/plymouthd.conf").is_file()
        assert result.lifecycle[MINIMAL].link_step.stage == "pre-start"

    @pytest.mark.parametrize("managed_init", [True, False])
    def test_rewritten_paths_follow_runtime_links(self, context, selection, store, managed_init):
        """Les chemins réécrits pointent là où /run/plymouth/themes est lié au démarrage."""
        minimal_prefix = None if managed_init else PurePosixPath(f"{store}/xyz-initrd-splash")
        context = replace(context, managed_init=managed_init, minimal_prefix=minimal_prefix)

        result = SplashBuilder(context).build(selection)

        for environment in (FULL, MINIMAL):
            step = result.lifecycle[environment].link_step
            themes_target = {str(link.link): str(link.target) for link in step.links}["/run/plymouth/themes"]
            root = context.root_for(environment)
            descriptor = (root / "etc/plymouth/themes/bgrt/bgrt.plymouth").read_text(encoding="utf-8")
            image_dir = next(line for line in descriptor.splitlines() if line.startswith("ImageDir="))
            assert image_dir == f"ImageDir={themes_target}/spinner"

    def test_one_environment_failure_does_not_block_the_other(self, context, selection, tmp_path, log_output):
        context = replace(context, udev_rules_dir=tmp_path / "absent")

        with pytest.raises(AssemblyIOError):
            SplashBuilder(context).build(selection)

        assert (context.full_root / "etc/plymouth/plymouthd.conf").is_file()
        assert not context.minimal_root.exists()
        assert "Échec minimal" in log_output.getvalue()


class TestManifest:
    """Tests du manifeste JSON."""

    def test_manifest_content(self, context, selection, tmp_path):
        result = SplashBuilder(context).build(selection)
        path = tmp_path / "out" / "manifest.json"

        write_manifest(result, path)
        data = json.loads(path.read_text(encoding="utf-8"))

        assert data == json.loads(json.dumps(manifest_dict(result)))
        assert data["theme"] == "bgrt"
        assert data["themes"] == ["bgrt", "spinner"]
        assert data["missing_dependencies"] == []
        full = data["environments"]["full"]
        assert full["link_step"]["stage"] == "tmpfiles"
        assert full["link_step"]["script"].startswith("d /run/plymouth 0755 root root 0 -\n")
        assert full["bindings"]["plymouth-start.service"]["restart_if_changed"] is False
        assert full["kernel_params"] == ["splash"]
        assert {"destination": "etc/plymouth/plymouthd.conf", "kind": "content", "source": None} in full["artifacts"]
        minimal = data["environments"]["minimal"]
        assert minimal["bindings"]["plymouth-start.service"]["targets"] == [
            "initrd-switch-root.target",
            "sysinit.target",
        ]
        assert minimal["hooks"] == {}
