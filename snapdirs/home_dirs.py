"""User home directories that may hold snap data.

The set is configurable at runtime (``homedirs`` system option) and is read
concurrently from many places, so it is kept as an immutable snapshot behind
a lock. Writers build a new snapshot and swap it in; readers always see a
complete one.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass

from snapdirs.path_utils import clean, join, root_prefix
from snapdirs.snap_paths import HIDDEN_SNAP_DATA_HOME_DIR, USER_HOME_SNAP_DIR

DEFAULT_HOME_DIR = "/home"


@dataclass(frozen=True)
class SnapDirOptions:
    """Per-snap data directory layout.

    Attributes:
        hidden_snap_data_dir: Snap data lives in ~/.snap/data instead of ~/snap.
        migrated_to_exposed_home: ~/Snap has been initialized with the contents
            of the snap's previous home.
    """

    hidden_snap_data_dir: bool = False
    migrated_to_exposed_home: bool = False


@dataclass(frozen=True)
class _HomeDirsSnapshot:
    home_dirs: tuple[str, ...]
    data_home_globs: tuple[str, ...]
    hidden_data_home_globs: tuple[str, ...]


def _build_snapshot(home_dirs: list[str]) -> _HomeDirsSnapshot:
    return _HomeDirsSnapshot(
        home_dirs=tuple(home_dirs),
        data_home_globs=tuple(join(d, "*", USER_HOME_SNAP_DIR) for d in home_dirs),
        hidden_data_home_globs=tuple(join(d, "*", HIDDEN_SNAP_DATA_HOME_DIR) for d in home_dirs),
    )


def parse_home_dirs(homedirs: str, *, root_dir: str) -> list[str]:
    """Parses a comma separated list of home directories.

    Each entry is cleaned and re-rooted under ``root_dir`` unless it already
    lies below it. ``root_dir + /home`` is appended if missing. The root
    directory itself only becomes a home directory when given explicitly, e.g.
    as ``.``.
    """

    default_home = join(root_dir, DEFAULT_HOME_DIR)
    prefix = root_prefix(root_dir)

    dirs: list[str] = []
    if homedirs:
        for entry in homedirs.split(","):
            path = clean(entry)
            if not path.startswith(prefix):
                path = join(root_dir, path)
            dirs.append(path)

    if default_home not in dirs:
        dirs.append(default_home)
    return dirs


class HomeDirs:
    """Thread-safe set of home directories with their data globs."""

    def __init__(self, *, root_dir: str = "/") -> None:
        self._lock = threading.Lock()
        self._root_dir = root_dir
        self._snapshot = _build_snapshot([])

    def reset(self, *, root_dir: str) -> list[str]:
        """Resets to the single default home directory under ``root_dir``."""

        with self._lock:
            self._root_dir = root_dir
            return self._set_locked(DEFAULT_HOME_DIR)

    def set(self, homedirs: str) -> list[str]:
        """Replaces the set from a comma separated list.

        Expected to be called by the configuration layer with the user
        supplied option value.

        Returns:
            The resulting home directories, in order.
        """

        with self._lock:
            return self._set_locked(homedirs)

    def _set_locked(self, homedirs: str) -> list[str]:
        home_dirs = parse_home_dirs(homedirs, root_dir=self._root_dir)
        self._snapshot = _build_snapshot(home_dirs)
        return list(home_dirs)

    def get(self) -> list[str]:
        """Returns a copy of the configured home directories.

        Never empty: if nothing was configured yet the default home directory
        under the current root is reported.
        """

        with self._lock:
            if not self._snapshot.home_dirs:
                return [join(self._root_dir, DEFAULT_HOME_DIR)]
            return list(self._snapshot.home_dirs)

    def data_home_globs(self, opts: SnapDirOptions | None = None) -> list[str]:
        """Returns one glob per home directory matching users' snap data dirs."""

        with self._lock:
            if opts is not None and opts.hidden_snap_data_dir:
                return list(self._snapshot.hidden_data_home_globs)
            return list(self._snapshot.data_home_globs)
