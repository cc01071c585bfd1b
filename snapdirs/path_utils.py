"""Path helpers shared by the directory layout code.

All helpers operate on plain ``str`` paths with POSIX semantics. Joining never
lets an absolute element reset the result, which is what root-relative layouts
need: ``join("/tmp/root", "/run")`` is ``/tmp/root/run``.
"""

from __future__ import annotations

import posixpath


def join(*elems: str) -> str:
    """Joins path elements and cleans the result.

    Empty elements are ignored. The result is lexically cleaned (``.`` and
    ``..`` resolved, duplicate and trailing separators removed). Joining only
    empty elements returns an empty string.
    """

    joined = "/".join(elem for elem in elems if elem)
    if not joined:
        return ""
    return clean(joined)


def clean(path: str) -> str:
    """Returns the shortest lexically equivalent form of ``path``."""

    cleaned = posixpath.normpath(path)
    # POSIX allows a leading "//" to be special; a filesystem layout never wants it.
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


def root_prefix(root_dir: str) -> str:
    """Returns ``root_dir`` with exactly one trailing separator."""

    if root_dir.endswith("/"):
        return root_dir
    return root_dir + "/"


def is_under_root(path: str, *, root_dir: str) -> bool:
    """Returns True if ``path`` is ``root_dir`` itself or lies below it.

    The check is lexical and runs on cleaned paths: ``/rootfoo`` and
    ``/root/../etc`` are not under ``/root``.
    """

    if not posixpath.isabs(path):
        return False
    cleaned_path = clean(path)
    cleaned_root = clean(root_dir)
    if cleaned_path == cleaned_root:
        return True
    return cleaned_path.startswith(root_prefix(cleaned_root))


def strip_root_dir(path: str, *, root_dir: str) -> str:
    """Strips ``root_dir`` from an absolute ``path`` below it.

    The result always starts with a single ``/``.

    Raises:
        ValueError: If ``path`` is not absolute or does not lie under
            ``root_dir``. Both are caller bugs and are never handled here.
    """

    if not posixpath.isabs(path):
        raise ValueError(f"supplied path is not absolute {path!r}")
    if not is_under_root(path, root_dir=root_dir):
        raise ValueError(f"supplied path is not related to global root {path!r}")
    relative = posixpath.relpath(path, root_dir)
    return join("/", relative)
