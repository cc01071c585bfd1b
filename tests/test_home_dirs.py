from __future__ import annotations

import threading

from snapdirs.home_dirs import HomeDirs, SnapDirOptions, parse_home_dirs


def test_set_empty_yields_only_default_home() -> None:
    home_dirs = HomeDirs(root_dir="/x")
    assert home_dirs.set("") == ["/x/home"]
    assert home_dirs.get() == ["/x/home"]
    assert home_dirs.data_home_globs() == ["/x/home/*/snap"]
    assert home_dirs.data_home_globs(SnapDirOptions(hidden_snap_data_dir=True)) == [
        "/x/home/*/.snap/data"
    ]


def test_set_reroots_entries_and_appends_default_last() -> None:
    home_dirs = HomeDirs(root_dir="/x")
    assert home_dirs.set("/a,/b") == ["/x/a", "/x/b", "/x/home"]
    assert home_dirs.data_home_globs() == ["/x/a/*/snap", "/x/b/*/snap", "/x/home/*/snap"]
    assert home_dirs.data_home_globs(SnapDirOptions(hidden_snap_data_dir=True)) == [
        "/x/a/*/.snap/data",
        "/x/b/*/.snap/data",
        "/x/home/*/.snap/data",
    ]


def test_set_keeps_explicit_default_in_place() -> None:
    home_dirs = HomeDirs(root_dir="/")
    assert home_dirs.set("/home,/srv/homes/") == ["/home", "/srv/homes"]
    assert home_dirs.data_home_globs() == ["/home/*/snap", "/srv/homes/*/snap"]


def test_set_does_not_reroot_entries_already_under_root() -> None:
    assert parse_home_dirs("/x/users", root_dir="/x") == ["/x/users", "/x/home"]
    # a sibling sharing the prefix is not under the root
    assert parse_home_dirs("/xusers", root_dir="/x") == ["/x/xusers", "/x/home"]


def test_set_tolerates_empty_entries() -> None:
    assert parse_home_dirs("/a,,/b", root_dir="/") == ["/a", "/", "/b", "/home"]
    assert parse_home_dirs(".", root_dir="/x") == ["/x", "/x/home"]


def test_set_replaces_previous_set() -> None:
    home_dirs = HomeDirs(root_dir="/")
    home_dirs.set("/a,/b")
    home_dirs.set("/c")
    assert home_dirs.get() == ["/c", "/home"]
    assert home_dirs.data_home_globs() == ["/c/*/snap", "/home/*/snap"]


def test_get_reports_default_when_never_set() -> None:
    home_dirs = HomeDirs(root_dir="/x")
    assert home_dirs.get() == ["/x/home"]
    assert home_dirs.data_home_globs() == []


def test_get_returns_a_copy() -> None:
    home_dirs = HomeDirs(root_dir="/")
    home_dirs.set("/a")
    home_dirs.get().append("/mutated")
    home_dirs.data_home_globs().clear()
    assert home_dirs.get() == ["/a", "/home"]
    assert home_dirs.data_home_globs() == ["/a/*/snap", "/home/*/snap"]


def test_reset_switches_root() -> None:
    home_dirs = HomeDirs(root_dir="/")
    home_dirs.set("/a")
    assert home_dirs.reset(root_dir="/y") == ["/y/home"]
    assert home_dirs.set("/a") == ["/y/a", "/y/home"]


def test_concurrent_readers_see_consistent_snapshots() -> None:
    home_dirs = HomeDirs(root_dir="/")
    home_dirs.set("")
    inconsistencies: list[tuple[int, int]] = []
    stop = threading.Event()

    def _reader() -> None:
        while not stop.is_set():
            dirs = home_dirs.get()
            globs = home_dirs.data_home_globs()
            # each call is atomic on its own, lengths only ever take two values
            if len(dirs) not in (1, 3) or len(globs) not in (1, 3):
                inconsistencies.append((len(dirs), len(globs)))

    readers = [threading.Thread(target=_reader) for _ in range(4)]
    for reader in readers:
        reader.start()
    for i in range(500):
        home_dirs.set("/a,/b" if i % 2 == 0 else "")
    stop.set()
    for reader in readers:
        reader.join()

    assert inconsistencies == []
