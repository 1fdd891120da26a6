"""Registry credential selection from a multi-registry auth file.

Auth files like ~/.docker/config.json may hold repository-scoped tokens
(written by e.g. buildah or Kubernetes) next to registry-wide ones, while
some clients only understand the latter. Selecting the most specific token
for a repository here lets those clients use repository-scoped credentials.
"""

from __future__ import annotations

import base64
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .config import get_default_auth_file
from .constants import REGISTRY_DOCKER_IO, REGISTRY_INDEX_DOCKER_IO
from .errors import (
    AuthFileError,
    AuthNotConfiguredError,
    CredentialFormatError,
    InvalidImageReferenceError,
)
from .image_ref import get_image_name
from .logging import component_logger, get_logger

_logger = get_logger(__name__)


@dataclass(frozen=True)
class RegistryAuth:
    """Selected credential for a registry."""

    registry: str
    token: str

    def to_auth_config(self) -> dict[str, Any]:
        """Auth file content holding only this credential, keyed by registry."""
        return {"auths": {self.registry: {"auth": self.token}}}


def load_auth_file(auth_file: str | Path) -> dict[str, str]:
    """Load scope -> token mapping from an auth file.

    Raises:
        AuthFileError: If the file cannot be read, is not valid JSON, or an
            entry does not have the {"auth": "<token>"} shape.
    """
    try:
        data = json.loads(Path(auth_file).read_text(encoding="utf-8"))
    except OSError as e:
        raise AuthFileError(f"Cannot read authentication file {auth_file}: {e}") from e
    except json.JSONDecodeError as e:
        raise AuthFileError(f"Invalid authentication file {auth_file}: {e}") from e

    if not isinstance(data, dict):
        raise AuthFileError(f"Invalid authentication file {auth_file}: not a JSON object")
    auths = data.get("auths") or {}
    if not isinstance(auths, dict):
        raise AuthFileError(f"Invalid authentication file {auth_file}: 'auths' is not an object")

    store: dict[str, str] = {}
    for scope, entry in auths.items():
        if entry is None:
            entry = {}
        if not isinstance(entry, dict):
            raise AuthFileError(
                f"Invalid authentication file {auth_file}: entry for '{scope}' is not an object"
            )
        token = entry.get("auth")
        if token is None:
            token = ""
        if not isinstance(token, str):
            raise AuthFileError(
                f"Invalid authentication file {auth_file}: 'auth' of '{scope}' is not a string"
            )
        store[scope] = token
    return store


def write_auth_config(registry_auth: RegistryAuth, path: str | Path) -> None:
    """Write an auth file holding only registry_auth, readable by the owner alone.

    Raises:
        AuthFileError: If the file cannot be written.
    """
    content = json.dumps(registry_auth.to_auth_config())
    try:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
    except OSError as e:
        raise AuthFileError(f"Cannot write authentication file {path}: {e}") from e


def find_auth(auths: dict[str, str], image_repo: str) -> str:
    """Find the token of the longest scope matching image_repo.

    Scopes are tried from the full repository path down to the registry,
    one '/' segment at a time. Returns an empty string if nothing matches.
    """
    scope = image_repo
    while True:
        if scope in auths:
            return auths[scope]
        index = scope.rfind("/")
        if index < 0:
            break
        scope = scope[:index]

    registry = image_repo.split("/")[0]
    if registry == REGISTRY_DOCKER_IO:
        return auths.get(REGISTRY_INDEX_DOCKER_IO, "")
    return ""


def select_registry_auth(
    image_ref: str, auth_file: str | Path, *, logger: logging.Logger | None = None
) -> RegistryAuth:
    """Select the registry credential for an image.

    Args:
        image_ref: Image repository, optionally with tag and/or digest.
        auth_file: Path to the authentication file.
        logger: Logger for diagnostics (defaults to the module logger).

    Returns:
        RegistryAuth with the registry host and the matching token.

    Raises:
        InvalidImageReferenceError: If image_ref has no repository part.
        AuthFileError: If the auth file cannot be loaded.
        AuthNotConfiguredError: If no scope matches.
    """
    log = component_logger(logger, _logger)
    image_repo = get_image_name(image_ref)
    if not image_repo:
        raise InvalidImageReferenceError(f"Invalid image reference '{image_ref}'")

    log.debug("Selecting registry authentication for %s from %s", image_repo, auth_file)
    token = find_auth(load_auth_file(auth_file), image_repo)
    if not token:
        raise AuthNotConfiguredError(image_repo)

    return RegistryAuth(registry=image_repo.split("/")[0], token=token)


def select_registry_auth_from_default_auth_file(
    image_ref: str, *, logger: logging.Logger | None = None
) -> RegistryAuth:
    """select_registry_auth against the default auth file."""
    return select_registry_auth(image_ref, get_default_auth_file(), logger=logger)


def extract_credentials(token: str) -> tuple[str, str]:
    """Split a base64 'username:password' token.

    Either part may be empty. Bytes that are not UTF-8 are kept as
    surrogate escapes, so they round-trip through
    ``.encode("utf-8", "surrogateescape")``.

    Raises:
        CredentialFormatError: If token is not valid base64 or has no ':'.
    """
    try:
        decoded = base64.b64decode(token, validate=True)
    except ValueError as e:
        # binascii.Error, or a str token with non-ASCII characters
        raise CredentialFormatError(f"failed to decode token: {e}") from e

    username, sep, password = decoded.partition(b":")
    if not sep:
        raise CredentialFormatError("invalid credential format: expected 'username:password'")
    return (
        username.decode("utf-8", "surrogateescape"),
        password.decode("utf-8", "surrogateescape"),
    )
