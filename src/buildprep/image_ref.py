"""Image reference parsing and validation."""

from __future__ import annotations

import re

from .constants import CONTAINERFILE_ARTIFACT_TAG_SUFFIX, MAX_TAG_SUFFIX_LENGTH
from .errors import ValidationError

_DIGEST_SUFFIX_RE = re.compile(r"@sha256:[a-fA-F0-9]{64}\Z")
_TAG_SUFFIX_RE = re.compile(r":[a-zA-Z0-9_][a-zA-Z0-9_.-]{0,127}\Z")

_NAME_PART_RE = re.compile(r"[a-z0-9](?:[a-z0-9_.-]*[a-z0-9])?")
_REGISTRY_PART_RE = re.compile(r"([a-z0-9](?:[a-z0-9_.-]*[a-z0-9])?)(?::(\d+))?")
_TAG_RE = re.compile(r"[a-zA-Z0-9_][a-zA-Z0-9_.-]{0,127}")
_DIGEST_RE = re.compile(r"sha256:[a-f0-9]{64}")

MAX_IMAGE_NAME_LENGTH = 128
MAX_PORT = 65535

# Separator combinations not allowed anywhere in an image name
_BAD_SEPARATORS = ("___", "//", "..", "--", "_.", "._", "-.", ".-", "-_", "_-")


def get_image_name(image_ref: str) -> str:
    """Strip digest and/or tag from an image reference.

    Examples:
        >>> get_image_name("quay.io/ns/app:v1@sha256:" + "a" * 64)
        'quay.io/ns/app'
        >>> get_image_name("localhost:5000/app")
        'localhost:5000/app'
    """
    without_digest = _DIGEST_SUFFIX_RE.sub("", image_ref)
    return _TAG_SUFFIX_RE.sub("", without_digest)


def is_image_name_valid(name: str) -> bool:
    """Validate an image name without tag and digest.

    Parts are lowercase letters and digits joined by single '.', '_' or '-'
    (or a double underscore), separated by '/'. The first part may carry a
    registry port.
    """
    if not name or len(name) > MAX_IMAGE_NAME_LENGTH:
        return False
    if any(sep in name for sep in _BAD_SEPARATORS):
        return False

    parts = name.split("/")
    if len(parts) == 1:
        return _NAME_PART_RE.fullmatch(parts[0]) is not None

    match = _REGISTRY_PART_RE.fullmatch(parts[0])
    if match is None:
        return False
    port = match.group(2)
    if port is not None and int(port) > MAX_PORT:
        return False

    return all(_NAME_PART_RE.fullmatch(part) for part in parts[1:])


def is_image_tag_valid(tag: str) -> bool:
    """Letters, digits, '_', '.', '-'; not starting with '.' or '-'; max 128 chars."""
    return _TAG_RE.fullmatch(tag) is not None


def is_image_digest_valid(digest: str) -> bool:
    return _DIGEST_RE.fullmatch(digest) is not None


def containerfile_artifact_tag(
    digest: str, suffix: str = CONTAINERFILE_ARTIFACT_TAG_SUFFIX
) -> str:
    """Tag under which a Containerfile is pushed next to its image.

    The image digest becomes the tag prefix (``sha256:abc`` -> ``sha256-abc``).

    Raises:
        ValidationError: If digest or suffix is invalid.
    """
    if not is_image_digest_valid(digest):
        raise ValidationError(f"image digest '{digest}' is invalid")
    tag = digest.replace(":", "-", 1) + suffix
    # The digest part is 71 characters, so a valid tag bounds the suffix length
    if not suffix or not is_image_tag_valid(tag):
        raise ValidationError(
            "Tag suffix includes invalid characters or exceeds the max length of "
            f"{MAX_TAG_SUFFIX_LENGTH} characters"
        )
    return tag
