"""The global root directory and everything derived from it.

``RootContext`` is the single source of truth for where snapd reads and writes
its files. Changing the root recomputes the whole layout, resets the home
directories and then notifies subscribers registered by dependent components.

Changing the root is not synchronized against concurrent readers of
``paths``; it is expected to happen at startup or in exclusive test setup.
"""

from __future__ import annotations

import functools
import logging
import os
import stat

from snapdirs.callbacks import RootDirCallback, RootDirCallbacks
from snapdirs.config import DirsSettings
from snapdirs.home_dirs import HomeDirs, SnapDirOptions
from snapdirs.mount_dir import (
    DEFAULT_SNAP_MOUNT_DIR,
    META_SNAP_PATH,
    MountDirDetectionError,
    resolve_snap_mount_dir,
)
from snapdirs.path_utils import join, strip_root_dir
from snapdirs.release import ReleaseInfo, load_release_info
from snapdirs.snap_paths import SnapPaths, build_snap_paths


class RootContext:
    """Global root directory with its derived snapd layout."""

    _logger = logging.getLogger(__name__)

    def __init__(
        self,
        *,
        release: ReleaseInfo,
        root_dir: str | None = None,
        callbacks: RootDirCallbacks | None = None,
        meta_snap_path: str = META_SNAP_PATH,
    ) -> None:
        self._release = release
        self._callbacks = callbacks if callbacks is not None else RootDirCallbacks()
        self._meta_snap_path = meta_snap_path
        self._home_dirs = HomeDirs()
        self._root_dir = "/"
        self._mount_dir_detection_error: MountDirDetectionError | None = None
        self._paths: SnapPaths
        self.set_root_dir(root_dir or "")

    @property
    def root_dir(self) -> str:
        """Returns the current global root directory."""

        return self._root_dir

    @property
    def release(self) -> ReleaseInfo:
        return self._release

    @property
    def paths(self) -> SnapPaths:
        """Returns the layout computed for the current root directory."""

        return self._paths

    @property
    def mount_dir_detection_error(self) -> MountDirDetectionError | None:
        """Returns why the snap mount dir could not be resolved, if it could not.

        Paths derived from the snap mount directory are placeholders while this
        is not None.
        """

        return self._mount_dir_detection_error

    def set_root_dir(self, root_dir: str) -> None:
        """Sets a new global root directory, e.g. for chroot operations.

        An empty ``root_dir`` means ``/``. The layout is always recomputed in
        full, even if the snap mount directory cannot be resolved. Callbacks run
        last, in registration order.
        """

        if not root_dir:
            root_dir = "/"

        outcome = resolve_snap_mount_dir(
            root_dir=root_dir,
            release=self._release,
            meta_snap_path=self._meta_snap_path,
        )
        if outcome.error is not None:
            self._logger.warning("snap mount dir detection failed: %s", outcome.error)
        paths = build_snap_paths(
            root_dir=root_dir,
            snap_mount_dir=outcome.path,
            release=self._release,
        )

        # root, layout and detection outcome always change together
        self._root_dir = root_dir
        self._paths = paths
        self._mount_dir_detection_error = outcome.error
        self._home_dirs.reset(root_dir=root_dir)
        self._logger.info(
            "global root dir set: root_dir=%s snap_mount_dir=%s", root_dir, outcome.path
        )

        self._callbacks.notify(root_dir)

    def strip_root_dir(self, path: str) -> str:
        """Strips the global root directory from an absolute ``path`` below it.

        Raises:
            ValueError: If ``path`` is not absolute or not below the root.
        """

        return strip_root_dir(path, root_dir=self._root_dir)

    def add_root_dir_callback(self, callback: RootDirCallback) -> None:
        """Registers ``callback`` to be called with the new root on every change.

        This lets dependent components refresh paths they derive from the
        layout. ``callback`` must not change the root directory itself.
        """

        self._callbacks.add(callback)

    def set_snap_home_dirs(self, homedirs: str) -> list[str]:
        """Sets the home directories from a comma separated list.

        ``root_dir + /home`` is always part of the result.
        """

        return self._home_dirs.set(homedirs)

    def snap_home_dirs(self) -> list[str]:
        return self._home_dirs.get()

    def data_home_globs(self, opts: SnapDirOptions | None = None) -> list[str]:
        """Returns globs matching per-user snap data dirs, one per home dir."""

        return self._home_dirs.data_home_globs(opts)

    def supports_classic_confinement(self) -> bool:
        """Returns True if the directory layout supports classic confinement.

        Core systems never do, as a policy decision. Classic systems do when
        snaps are mounted under /snap, or under the alternate location with
        /snap symlinked to it.
        """

        if not self._release.on_classic:
            return False

        default_dir = join(self._root_dir, DEFAULT_SNAP_MOUNT_DIR)
        snap_mount_dir = self.paths.snap_mount_dir
        if snap_mount_dir == default_dir:
            return True
        try:
            if not stat.S_ISLNK(os.lstat(default_dir).st_mode):
                return False
            target = os.path.realpath(default_dir, strict=True)
        except OSError:
            return False
        return target == snap_mount_dir


@functools.lru_cache(maxsize=1)
def get_default_root_context() -> RootContext:
    """Returns the process-wide context.

    Built on first use from ``SNAPPY_GLOBAL_ROOT`` and the host's os-release.
    """

    settings = DirsSettings()
    return RootContext(release=load_release_info(), root_dir=settings.snappy_global_root)
