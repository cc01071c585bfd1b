"""Directory layout configuration.

The only process-level override is the global root directory, read from
``SNAPPY_GLOBAL_ROOT``. It is used for chroot-style execution, image building
and tests.
"""

from __future__ import annotations

from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DirsSettings(BaseSettings):
    """Settings for the directory layout."""

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Global root directory. If unset or empty, "/" is used.
    snappy_global_root: str | None = None

    @field_validator("snappy_global_root", mode="before")
    @classmethod
    def _normalize_root_dir(cls, value: Any) -> Any:
        """Maps a blank or quoted root directory to its plain form.

        A quoted value would otherwise be taken as a relative path and every
        derived location would end up relative to the working directory. A
        blank value means no override.
        """

        if not isinstance(value, str):
            return value
        return unquote(value) or None


def unquote(value: str) -> str:
    """Strips outer whitespace and one pair of matching quotes from ``value``."""

    text = value.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'":
        text = text[1:-1].strip()
    return text
