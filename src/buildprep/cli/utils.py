"""CLI utilities for buildprep.

Console setup and error conversion for click commands.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import click
from rich.console import Console

from ..constants import ENV_PREFIX
from ..errors import BuildPrepError
from ..logging import get_logger

logger = get_logger(__name__)

# Results go to stdout, notices to stderr so output can be piped
console = Console(highlight=False, emoji=False, soft_wrap=True)
err_console = Console(stderr=True, highlight=False, emoji=False, soft_wrap=True)


@contextmanager
def cli_errors() -> Iterator[None]:
    """Convert buildprep errors into click errors (exit status 1)."""
    try:
        yield
    except BuildPrepError as e:
        logger.debug("Command failed: %r", e)
        raise click.ClickException(str(e)) from e


def env_name(command: str, option: str) -> str:
    """Environment variable backing a command option, e.g. BUILDPREP_DOCKERFILE_SOURCE."""
    return f"{ENV_PREFIX}_{command}_{option}".upper().replace("-", "_")
