"""Containerfile/Dockerfile discovery under a source directory."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .constants import DEFAULT_BUILD_FILES, DEFAULT_CONTEXT_DIR
from .errors import EscapeDetectedError, MissingSourceDirectoryError, SymlinkResolutionError
from .logging import component_logger, get_logger
from .paths import is_contained, join_under, resolve_path

_logger = get_logger(__name__)


@dataclass(frozen=True)
class DockerfileSearchOpts:
    """Where to look for the build file."""

    # Directory containing the application source code
    source_dir: str
    # Build context directory within the source
    context_dir: str = DEFAULT_CONTEXT_DIR
    # Build file within the source; empty means Containerfile, then Dockerfile
    dockerfile: str = ""


def _search(
    source: Path, context_dir: str, dockerfile: str, logger: logging.Logger
) -> Path | None:
    """Look for dockerfile in the context directory, then in the source root."""
    candidates = (
        join_under(source, context_dir, dockerfile),
        join_under(source, dockerfile),
    )
    for candidate in candidates:
        resolved = resolve_path(candidate)
        if resolved is None:
            logger.debug("Build file candidate does not exist: %s", candidate)
            continue
        if not is_contained(resolved, source):
            raise EscapeDetectedError(str(resolved), str(source))
        return resolved
    return None


def search_dockerfile(
    opts: DockerfileSearchOpts, *, logger: logging.Logger | None = None
) -> Path | None:
    """Search the build file under the source directory.

    The build file must be present under the source directory, preferably
    under the build context. A source directory that is itself a symlink is
    accepted; anything resolving outside of its canonical form is not.

    Without an explicit file, ./Containerfile is searched first and
    ./Dockerfile second.

    Args:
        opts: Source, context and optional build file name.
        logger: Logger for diagnostics (defaults to the module logger).

    Returns:
        Canonical path of the build file, or None when nothing is found.

    Raises:
        MissingSourceDirectoryError: If opts.source_dir is empty.
        SymlinkResolutionError: If a path cannot be evaluated.
        EscapeDetectedError: If the build file resolves outside the source.
    """
    log = component_logger(logger, _logger)
    if not opts.source_dir:
        raise MissingSourceDirectoryError("Missing source directory")

    context_dir = opts.context_dir or DEFAULT_CONTEXT_DIR
    abs_source = os.path.abspath(opts.source_dir)
    source = resolve_path(abs_source)
    if source is None:
        raise SymlinkResolutionError(f"Source directory does not exist: {abs_source}")
    log.debug("Searching build file under %s (context %s)", source, context_dir)

    names = (opts.dockerfile,) if opts.dockerfile else DEFAULT_BUILD_FILES
    for name in names:
        found = _search(source, context_dir, name, log)
        if found is not None:
            log.debug("Found build file: %s", found)
            return found

    log.debug("No build file found under %s", source)
    return None
