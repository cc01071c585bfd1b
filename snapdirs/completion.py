"""Locations of snapd's bash completion helpers.

Inside a non-classic snap the helpers live in /usr/lib/snapd; outside they
come from the core snap, the snapd snap or the distribution package.
"""

from __future__ import annotations

import os
import posixpath

from snapdirs.path_utils import join
from snapdirs.snap_paths import SnapPaths


def libexec_outside(paths: SnapPaths, base: str) -> str:
    """Returns the libexec dir seen outside a snap using ``base``.

    Without a base the core snap provides it. With a base it comes from the
    snapd snap if that is installed, otherwise from the distribution.
    """

    if not base:
        return join(paths.snap_mount_dir, "core/current/usr/lib/snapd")
    snapd_snap_dir = join(paths.snap_mount_dir, "snapd/current/usr/lib/snapd")
    if os.path.isdir(snapd_snap_dir):
        return snapd_snap_dir
    return paths.distro_libexec_dir


def complete_sh_path(paths: SnapPaths, base: str) -> str:
    return join(libexec_outside(paths, base), "complete.sh")


def is_complete_sh_symlink(completer_path: str) -> bool:
    """Returns True if ``completer_path`` is a symlink to snapd's complete.sh."""

    try:
        target = os.readlink(completer_path)
    except OSError:
        return False
    return (
        posixpath.basename(posixpath.dirname(target)) == "snapd"
        and posixpath.basename(target) == "complete.sh"
    )
