"""Build secrets from secret directories.

Each file in a secret directory becomes one build secret with the id
``<name-or-dir-basename>/<filename>``, usable in the build file as
``RUN --mount=type=secret,id=<id>``.
"""

from __future__ import annotations

import logging
import os
import posixpath
import stat
from collections.abc import Iterable
from dataclasses import dataclass

from .errors import (
    DuplicateSecretIDError,
    InvalidAttributeError,
    InvalidOptionalValueError,
    SecretDirUnreadableError,
)
from .logging import component_logger, get_logger

_logger = get_logger(__name__)


@dataclass(frozen=True)
class SecretDir:
    """A parsed --secret-dirs value."""

    src: str = ""
    name: str = ""  # Id prefix; defaults to basename of src
    optional: bool = False


@dataclass(frozen=True)
class BuildSecret:
    """A single file exposed to the build as a secret."""

    src: str
    id: str

    def to_arg(self) -> str:
        """Render as a builder --secret argument."""
        return f"--secret=src={self.src},id={self.id}"


def parse_secret_dir(arg: str) -> SecretDir:
    """Parse one ``src=DIR[,name=ALIAS][,optional=true|false]`` value.

    A bare token without '=' is shorthand for src=<token>.

    Raises:
        InvalidAttributeError: On an unknown key.
        InvalidOptionalValueError: If optional is not exactly true or false.
    """
    src = ""
    name = ""
    optional = False

    for kv in arg.split(","):
        key, sep, value = kv.partition("=")
        key = key.strip()
        value = value.strip()
        if not sep:
            key, value = "src", key

        if key == "src":
            src = value
        elif key == "name":
            name = value
        elif key == "optional":
            if value == "true":
                optional = True
            elif value == "false":
                optional = False
            else:
                raise InvalidOptionalValueError(
                    f"invalid argument: optional={value} (expected true|false)"
                )
        else:
            raise InvalidAttributeError(f"invalid attribute: {key}")

    return SecretDir(src=src, name=name, optional=optional)


def parse_secret_dirs(args: Iterable[str]) -> list[SecretDir]:
    """Parse every --secret-dirs value, keeping input order."""
    return [parse_secret_dir(arg) for arg in args]


def _is_regular_file(entry: os.DirEntry[str]) -> bool:
    """Regular file, or a symlink whose target is a regular file.

    Directories and symlinks to directories (e.g. the ``..data`` links of
    Kubernetes secret volumes) are not.
    """
    if entry.is_file(follow_symlinks=False):
        return True
    if not entry.is_symlink():
        return False
    try:
        st = os.stat(entry.path)
    except OSError as e:
        raise SecretDirUnreadableError(f"failed to stat {entry.path}: {e}") from e
    return stat.S_ISREG(st.st_mode)


def _secret_id(prefix: str, filename: str) -> str:
    """Join prefix and filename into a clean slash-separated id."""
    return posixpath.normpath(posixpath.join(prefix, filename))


def _list_dir(src: str) -> list[os.DirEntry[str]]:
    with os.scandir(src) as it:
        return sorted(it, key=lambda entry: entry.name)


def resolve_secret_dirs(
    secret_dirs: Iterable[SecretDir], *, logger: logging.Logger | None = None
) -> list[BuildSecret]:
    """Turn secret directories into build secrets.

    Directories are processed in the given order, files in name order.

    Args:
        secret_dirs: Parsed secret directory specs.
        logger: Logger for diagnostics (defaults to the module logger).

    Returns:
        One BuildSecret per regular file.

    Raises:
        SecretDirUnreadableError: If a non-optional directory cannot be listed.
        DuplicateSecretIDError: If two files produce the same secret id.
    """
    log = component_logger(logger, _logger)
    secrets: list[BuildSecret] = []
    used_ids: set[str] = set()

    for secret_dir in secret_dirs:
        id_prefix = secret_dir.name or os.path.basename(os.path.normpath(secret_dir.src))

        try:
            entries = _list_dir(secret_dir.src)
        except FileNotFoundError as e:
            if secret_dir.optional:
                log.debug(
                    "secret directory %s doesn't exist but is marked optional, skipping",
                    secret_dir.src,
                )
                continue
            raise SecretDirUnreadableError(
                f"failed to read secret directory {secret_dir.src}: {e}"
            ) from e
        except OSError as e:
            raise SecretDirUnreadableError(
                f"failed to read secret directory {secret_dir.src}: {e}"
            ) from e

        abs_src = os.path.abspath(secret_dir.src)
        for entry in entries:
            if not _is_regular_file(entry):
                continue

            secret_id = _secret_id(id_prefix, entry.name)
            if secret_id in used_ids:
                raise DuplicateSecretIDError(secret_id)
            used_ids.add(secret_id)

            secrets.append(BuildSecret(src=os.path.join(abs_src, entry.name), id=secret_id))
            log.info(
                "Adding secret %s to the build, available with 'RUN --mount=type=secret,id=%s'",
                secret_id,
                secret_id,
            )

    return secrets


def secret_build_args(secrets: Iterable[BuildSecret]) -> list[str]:
    """Render one --secret argument per build secret."""
    return [secret.to_arg() for secret in secrets]


def resolve_secret_args(
    args: Iterable[str], *, logger: logging.Logger | None = None
) -> list[BuildSecret]:
    """Parse and resolve raw --secret-dirs values in one step."""
    return resolve_secret_dirs(parse_secret_dirs(args), logger=logger)
