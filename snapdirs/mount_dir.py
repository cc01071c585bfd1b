"""Snap mount directory detection.

Distributions package snapd in one of two ways: snaps are mounted under
``/snap`` (the default) or under ``/var/lib/snapd/snap`` (the alternate), in
which case ``/snap`` is either absent or a symlink to the alternate location.
The layout in use is inferred from the live filesystem below the root
directory, using only ``lstat`` and ``readlink``.
"""

from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass

from snapdirs.path_utils import join
from snapdirs.release import ReleaseInfo

DEFAULT_SNAP_MOUNT_DIR = "/snap"
ALT_SNAP_MOUNT_DIR = "/var/lib/snapd/snap"

# Distributions known to use /snap but packaged in a way probing cannot see.
SPECIAL_DEFAULT_DIR_DISTROS: tuple[str, ...] = ("ubuntucoreinitramfs",)

# Published when detection fails. Being relative, no filesystem operation can
# succeed on it by accident.
SNAP_MOUNT_DIR_UNRESOLVED_PLACEHOLDER = "mount-dir-is-unset"

# Present at the root of every base and os snap.
META_SNAP_PATH = "/meta/snap.yaml"

_logger = logging.getLogger(__name__)


class MountDirProbeError(RuntimeError):
    """Raised when the default mount directory is in an unexpected state."""


class MountDirDetectionError(RuntimeError):
    """Recorded when the snap mount directory could not be resolved."""


@dataclass(frozen=True)
class MountDirOutcome:
    """Result of resolving the snap mount directory.

    Attributes:
        path: The resolved directory, or the unresolved placeholder.
        error: None on success, otherwise the reason detection failed.
    """

    path: str
    error: MountDirDetectionError | None = None

    @property
    def resolved(self) -> bool:
        return self.error is None


def is_inside_base_snap(*, meta_snap_path: str = META_SNAP_PATH) -> bool:
    """Returns True if the process runs inside a base or os snap mounted at /.

    Raises:
        OSError: If the marker cannot be checked for reasons other than absence.
    """

    try:
        os.stat(meta_snap_path)
    except FileNotFoundError:
        return False
    return True


def probe_snap_mount_dir(*, root_dir: str, release: ReleaseInfo) -> str:
    """Determines the snap mount directory in use below ``root_dir``.

    Returns:
        The default or the alternate mount directory, joined with ``root_dir``.

    Raises:
        MountDirProbeError: If the default location is a symlink pointing
            anywhere but the alternate location, or is neither a
            symlink nor a directory.
        OSError: If the default location cannot be inspected.
    """

    default_dir = join(root_dir, DEFAULT_SNAP_MOUNT_DIR)
    alt_dir = join(root_dir, ALT_SNAP_MOUNT_DIR)

    if release.distro_like(*SPECIAL_DEFAULT_DIR_DISTROS):
        _logger.debug("special distribution, using default mount dir: %s", default_dir)
        return default_dir

    try:
        mode = os.lstat(default_dir).st_mode
    except FileNotFoundError:
        # Unknown distribution whose packaging does not ship the default
        # location at all.
        _logger.debug("default mount dir missing, using alternate: %s", alt_dir)
        return alt_dir

    if stat.S_ISLNK(mode):
        # Only read the link. Resolving it would need intermediate directories
        # to exist. The target may be relative, with or without a leading "/".
        target = os.readlink(default_dir)
        if target not in (ALT_SNAP_MOUNT_DIR, ALT_SNAP_MOUNT_DIR[1:], alt_dir):
            raise MountDirProbeError(
                f"{default_dir} must be a symbolic link to {ALT_SNAP_MOUNT_DIR}"
            )
        _logger.debug("default mount dir links to alternate: %s -> %s", default_dir, target)
        return alt_dir
    if stat.S_ISDIR(mode):
        return default_dir

    # fifo, socket, device or regular file
    raise MountDirProbeError("internal error: unresolved snap mount dir")


def resolve_snap_mount_dir(
    *,
    root_dir: str,
    release: ReleaseInfo,
    meta_snap_path: str = META_SNAP_PATH,
) -> MountDirOutcome:
    """Resolves the snap mount directory, never failing.

    Inside a base snap the mount directory is always the default one. Otherwise
    the filesystem is probed; a failed probe yields the unresolved placeholder
    together with the error that caused it.
    """

    try:
        inside_base = is_inside_base_snap(meta_snap_path=meta_snap_path)
    except OSError as exc:
        _logger.debug("cannot check for base snap marker: path=%s error=%s", meta_snap_path, exc)
        inside_base = False
    if inside_base:
        return MountDirOutcome(path=join(root_dir, DEFAULT_SNAP_MOUNT_DIR))

    try:
        path = probe_snap_mount_dir(root_dir=root_dir, release=release)
    except (MountDirProbeError, OSError) as exc:
        error = MountDirDetectionError(f"cannot resolve snap mount directory: {exc}")
        error.__cause__ = exc
        return MountDirOutcome(path=SNAP_MOUNT_DIR_UNRESOLVED_PLACEHOLDER, error=error)
    return MountDirOutcome(path=path)
