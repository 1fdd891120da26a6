"""Path resolution and containment checks.

Symlinks are resolved against the filesystem as it is at call time, so a
concurrent writer can change the outcome between resolution and use.
"""

from __future__ import annotations

import os
from pathlib import Path

from .errors import SymlinkResolutionError


def resolve_path(path: str | Path) -> Path | None:
    """Resolve all symlinks in path.

    Args:
        path: Path to canonicalize. Relative paths are taken from the cwd.

    Returns:
        Canonical absolute path, or None if the path does not exist.

    Raises:
        SymlinkResolutionError: On any failure other than non-existence.
    """
    try:
        return Path(path).resolve(strict=True)
    except FileNotFoundError:
        return None
    except (OSError, RuntimeError) as e:
        # RuntimeError: symlink loop on Python < 3.13
        raise SymlinkResolutionError(f"Error on evaluating symlink for {path}: {e}") from e


def is_contained(candidate: str | Path, boundary: str | Path) -> bool:
    """Check that candidate is boundary itself or lies below it.

    Both arguments are expected to be canonical already (see resolve_path).
    """
    try:
        Path(candidate).relative_to(Path(boundary))
    except ValueError:
        return False
    return True


def join_under(base: str | Path, *parts: str) -> str:
    """Join parts below base and clean the result lexically.

    Empty parts are skipped and a leading separator in a part does not
    restart from the filesystem root:

        >>> join_under("/src", ".", "/Dockerfile")
        '/src/Dockerfile'
        >>> join_under("/src", "ctx", "../Dockerfile")
        '/src/Dockerfile'
    """
    elements = [str(base), *(p for p in parts if p)]
    return os.path.normpath(os.sep.join(elements))
