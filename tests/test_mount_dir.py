from __future__ import annotations

import os
from pathlib import Path

import pytest

from snapdirs.mount_dir import (
    ALT_SNAP_MOUNT_DIR,
    SNAP_MOUNT_DIR_UNRESOLVED_PLACEHOLDER,
    MountDirDetectionError,
    MountDirProbeError,
    is_inside_base_snap,
    probe_snap_mount_dir,
    resolve_snap_mount_dir,
)
from snapdirs.release import ReleaseInfo

_UBUNTU = ReleaseInfo(id="ubuntu", id_like=("debian",))


def test_probe_uses_default_when_it_is_a_directory(tmp_path: Path) -> None:
    (tmp_path / "snap").mkdir()
    assert probe_snap_mount_dir(root_dir=str(tmp_path), release=_UBUNTU) == f"{tmp_path}/snap"


def test_probe_uses_alternate_when_default_is_missing(tmp_path: Path) -> None:
    assert (
        probe_snap_mount_dir(root_dir=str(tmp_path), release=_UBUNTU)
        == f"{tmp_path}/var/lib/snapd/snap"
    )


@pytest.mark.parametrize(
    "target",
    ["/var/lib/snapd/snap", "var/lib/snapd/snap", None],
    ids=["absolute", "relative", "under-root"],
)
def test_probe_uses_alternate_when_default_links_to_it(tmp_path: Path, target) -> None:
    alt_dir = f"{tmp_path}{ALT_SNAP_MOUNT_DIR}"
    os.symlink(target or alt_dir, tmp_path / "snap")

    assert probe_snap_mount_dir(root_dir=str(tmp_path), release=_UBUNTU) == alt_dir


def test_probe_rejects_symlink_to_unrelated_target(tmp_path: Path) -> None:
    os.symlink("/opt/snaps", tmp_path / "snap")

    with pytest.raises(MountDirProbeError, match="must be a symbolic link to /var/lib/snapd/snap"):
        probe_snap_mount_dir(root_dir=str(tmp_path), release=_UBUNTU)


def test_probe_skips_filesystem_on_special_distro(tmp_path: Path, monkeypatch) -> None:
    def _fail(*args, **kwargs):
        raise AssertionError("filesystem must not be probed")

    monkeypatch.setattr("snapdirs.mount_dir.os.lstat", _fail)
    release = ReleaseInfo(id="ubuntucoreinitramfs", on_classic=False)

    assert probe_snap_mount_dir(root_dir=str(tmp_path), release=release) == f"{tmp_path}/snap"


def test_probe_propagates_stat_errors(tmp_path: Path, monkeypatch) -> None:
    def _denied(path, *args, **kwargs):
        raise PermissionError(13, "Permission denied", path)

    monkeypatch.setattr("snapdirs.mount_dir.os.lstat", _denied)

    with pytest.raises(PermissionError):
        probe_snap_mount_dir(root_dir=str(tmp_path), release=_UBUNTU)


def test_probe_rejects_regular_file_at_default_location(tmp_path: Path) -> None:
    (tmp_path / "snap").write_text("", encoding="utf-8")

    with pytest.raises(MountDirProbeError, match="unresolved snap mount dir"):
        probe_snap_mount_dir(root_dir=str(tmp_path), release=_UBUNTU)


def test_is_inside_base_snap_checks_marker(tmp_path: Path) -> None:
    marker = tmp_path / "snap.yaml"
    assert not is_inside_base_snap(meta_snap_path=str(marker))
    marker.write_text("name: core22\n", encoding="utf-8")
    assert is_inside_base_snap(meta_snap_path=str(marker))


def test_resolve_forces_default_inside_base_snap(tmp_path: Path) -> None:
    marker = tmp_path / "snap.yaml"
    marker.write_text("name: core22\n", encoding="utf-8")
    # would otherwise be a detection failure
    os.symlink("/opt/snaps", tmp_path / "snap")

    outcome = resolve_snap_mount_dir(
        root_dir=str(tmp_path), release=_UBUNTU, meta_snap_path=str(marker)
    )
    assert outcome.resolved
    assert outcome.path == f"{tmp_path}/snap"


def test_resolve_records_failure_and_publishes_placeholder(tmp_path: Path) -> None:
    os.symlink("/opt/snaps", tmp_path / "snap")

    outcome = resolve_snap_mount_dir(
        root_dir=str(tmp_path), release=_UBUNTU, meta_snap_path=str(tmp_path / "missing")
    )
    assert not outcome.resolved
    assert outcome.path == SNAP_MOUNT_DIR_UNRESOLVED_PLACEHOLDER
    assert isinstance(outcome.error, MountDirDetectionError)
    assert isinstance(outcome.error.__cause__, MountDirProbeError)
    assert str(outcome.error).startswith("cannot resolve snap mount directory: ")


def test_resolve_records_failure_for_fifo_at_default_location(tmp_path: Path) -> None:
    os.mkfifo(tmp_path / "snap")

    outcome = resolve_snap_mount_dir(
        root_dir=str(tmp_path), release=_UBUNTU, meta_snap_path=str(tmp_path / "missing")
    )
    assert outcome.path == SNAP_MOUNT_DIR_UNRESOLVED_PLACEHOLDER
    assert isinstance(outcome.error, MountDirDetectionError)
