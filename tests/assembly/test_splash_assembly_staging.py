"""Tests pour StagingTree (publication tout-ou-rien)."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from splash.assembly.splash_assembly_staging import StagingTree
from splash.splash_exceptions import AssemblyIOError


def test_publish_replaces_previous_tree(tmp_path) -> None:
    final = tmp_path / "out" / "full"
    final.mkdir(parents=True)
    (final / "stale.txt").write_text("old", encoding="utf-8")

    with StagingTree(final, environment="full") as staging:
        assert staging.path.parent == final.parent
        (staging.path / "new.txt").write_text("new", encoding="utf-8")
        assert staging.publish() == final

    assert (final / "new.txt").read_text(encoding="utf-8") == "new"
    assert not (final / "stale.txt").exists()
    assert sorted(p.name for p in final.parent.iterdir()) == ["full"]


def test_failure_keeps_previous_tree(tmp_path) -> None:
    final = tmp_path / "initrd"
    final.mkdir()
    (final / "kept.txt").write_text("kept", encoding="utf-8")

    with pytest.raises(RuntimeError):
        with StagingTree(final) as staging:
            (staging.path / "partial.txt").write_text("x", encoding="utf-8")
            raise RuntimeError("boom")

    assert not staging.path.exists()
    assert (final / "kept.txt").exists()
    assert sorted(p.name for p in tmp_path.iterdir()) == ["initrd"]


def test_publish_failure_restores_backup(tmp_path) -> None:
    final = tmp_path / "full"
    final.mkdir()
    (final / "kept.txt").write_text("kept", encoding="utf-8")
    real_rename = Path.rename

    def failing_rename(self, target):
        if ".staging-" in self.name:
            raise OSError("disque plein")
        return real_rename(self, target)

    with pytest.raises(AssemblyIOError, match="Publication impossible") as excinfo:
        with StagingTree(final, environment="full") as staging:
            with patch.object(Path, "rename", failing_rename):
                staging.publish()

    assert excinfo.value.environment == "full"
    assert (final / "kept.txt").exists()
    assert not staging.path.exists()


def test_enter_failure_is_wrapped(tmp_path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")

    with pytest.raises(AssemblyIOError):
        with StagingTree(blocker / "full"):
            pass
