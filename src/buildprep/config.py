"""Configuration management for buildprep."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .constants import AUTH_FILE_ENV_VAR, DEFAULT_AUTH_FILE, DEFAULT_CONTEXT_DIR


def get_default_auth_file() -> Path:
    """Get the registry authentication file path.

    BUILDPREP_AUTH_FILE overrides the per-user ~/.docker/config.json.
    """
    override = os.environ.get(AUTH_FILE_ENV_VAR, "").strip()
    if override:
        return Path(os.path.expanduser(override))
    return Path(os.path.expanduser(DEFAULT_AUTH_FILE))


@dataclass(frozen=True)
class ResolveConfig:
    """Inputs for one resolution run.

    Bundles CLI arguments so resolver calls take a single object.
    """

    # Build file discovery
    source: str = ""
    context: str = DEFAULT_CONTEXT_DIR
    containerfile: str = ""

    # Build secrets
    secret_dirs: tuple[str, ...] = ()

    # Registry auth
    auth_file: str | None = None

    @classmethod
    def from_cli(
        cls,
        *,
        source: str = "",
        context: str | None = None,
        containerfile: str | None = None,
        secret_dirs: tuple[str, ...] | list[str] = (),
        authfile: str | None = None,
    ) -> ResolveConfig:
        """Create ResolveConfig from CLI arguments.

        Empty context falls back to the default; None containerfile means auto-detect.
        """
        return cls(
            source=source,
            context=context or DEFAULT_CONTEXT_DIR,
            containerfile=containerfile or "",
            secret_dirs=tuple(secret_dirs),
            auth_file=authfile,
        )

    def resolved_auth_file(self) -> Path:
        """Auth file to use: explicit value, else the default location."""
        if self.auth_file:
            return Path(os.path.expanduser(self.auth_file))
        return get_default_auth_file()
