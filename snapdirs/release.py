"""Release information for the running system.

The directory layout needs two facts about the host: whether it is a classic
(general purpose) installation or an Ubuntu Core image, and which distribution
family it belongs to. Both come from os-release(5).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from pydantic import BaseModel, Field

from snapdirs.config import unquote

DEFAULT_OS_RELEASE_PATHS: tuple[str, ...] = ("/etc/os-release", "/usr/lib/os-release")

# ID of the minimal, image based system. Everything else is classic.
CORE_RELEASE_ID = "ubuntu-core"

_logger = logging.getLogger(__name__)


class OsRelease(BaseModel):
    """Subset of os-release(5) fields used by the directory layout."""

    id: str = Field(default="linux", description="Lower-case distribution id.")
    id_like: list[str] = Field(default_factory=list)
    version_id: str = ""


@dataclass(frozen=True)
class ReleaseInfo:
    """Facts about the running system consumed by the directory layout."""

    id: str
    id_like: tuple[str, ...] = ()
    version_id: str = ""
    on_classic: bool = True

    def distro_like(self, *names: str) -> bool:
        """Returns True if the distribution or one it derives from is in ``names``."""

        if self.id in names:
            return True
        return any(like in names for like in self.id_like)

    @classmethod
    def from_os_release(cls, os_release: OsRelease) -> ReleaseInfo:
        """Builds release info from a parsed os-release file."""

        return cls(
            id=os_release.id,
            id_like=tuple(os_release.id_like),
            version_id=os_release.version_id,
            on_classic=os_release.id != CORE_RELEASE_ID,
        )


def parse_os_release(lines: Iterable[str]) -> OsRelease:
    """Parses os-release(5) ``KEY=value`` lines.

    Blank lines, comments and malformed lines are skipped.
    """

    fields: dict[str, str] = {}
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        fields[key.strip().upper()] = unquote(value)

    payload: dict[str, object] = {}
    if fields.get("ID"):
        payload["id"] = fields["ID"].lower()
    if fields.get("ID_LIKE"):
        payload["id_like"] = fields["ID_LIKE"].lower().split()
    if "VERSION_ID" in fields:
        payload["version_id"] = fields["VERSION_ID"]
    return OsRelease.model_validate(payload)


def load_release_info(*, paths: Sequence[str] = DEFAULT_OS_RELEASE_PATHS) -> ReleaseInfo:
    """Loads release info from the first readable os-release file.

    If none of ``paths`` can be read, a generic classic ``linux`` system is
    assumed.
    """

    for path in paths:
        try:
            with open(path, encoding="utf-8") as handle:
                os_release = parse_os_release(handle)
        except OSError as exc:
            _logger.debug("cannot read os-release: path=%s error=%s", path, exc)
            continue
        return ReleaseInfo.from_os_release(os_release)
    _logger.warning("no os-release file found, assuming generic linux: paths=%s", list(paths))
    return ReleaseInfo.from_os_release(OsRelease())
