"""Unified exception hierarchy for buildprep.

All custom exceptions inherit from BuildPrepError for consistent error handling.
CLI catches these and converts to user-friendly messages via click.ClickException.

Dependency direction:
    This module has NO internal dependencies (leaf module).
    It may be imported by: all other buildprep modules.
    It should NOT import from any other buildprep modules.
"""

from __future__ import annotations


class BuildPrepError(Exception):
    """Base exception for all buildprep errors.

    All buildprep-specific exceptions should inherit from this class.
    This enables consistent error handling at the CLI layer.
    """


class PathError(BuildPrepError):
    """Path validation and access errors.

    Examples:
        - Missing source directory
        - Symlink evaluation failures
        - Path outside allowed boundaries
    """


class MissingSourceDirectoryError(PathError):
    """Raised when no source directory is given."""


class SymlinkResolutionError(PathError):
    """Raised when a path cannot be canonicalized for a reason other than absence."""


class EscapeDetectedError(PathError):
    """Raised when a resolved build file lies outside the source directory."""

    def __init__(self, path: str, boundary: str) -> None:
        super().__init__(f"{path} is not present under source '{boundary}'")
        self.path = path
        self.boundary = boundary


class SecretDirError(BuildPrepError):
    """Secret directory specification and resolution errors."""


class InvalidAttributeError(SecretDirError):
    """Raised when a secret directory value uses an unknown key."""


class InvalidOptionalValueError(SecretDirError):
    """Raised when optional= is neither 'true' nor 'false'."""


class SecretDirUnreadableError(SecretDirError):
    """Raised when a required secret directory or one of its entries cannot be read."""


class DuplicateSecretIDError(SecretDirError):
    """Raised when two secret files resolve to the same secret id."""

    def __init__(self, secret_id: str) -> None:
        super().__init__(
            f"duplicate secret ID '{secret_id}': ensure unique basename/filename combinations"
        )
        self.secret_id = secret_id


class RegistryAuthError(BuildPrepError):
    """Registry credential selection errors."""


class InvalidImageReferenceError(RegistryAuthError):
    """Raised when an image reference has no repository part."""


class AuthFileError(RegistryAuthError):
    """Raised when the authentication file cannot be read or parsed."""


class AuthNotConfiguredError(RegistryAuthError):
    """Raised when no auth scope matches the image repository."""

    def __init__(self, repository: str) -> None:
        super().__init__(f"Registry authentication is not configured for {repository}")
        self.repository = repository


class CredentialFormatError(RegistryAuthError):
    """Raised when an auth token is not base64 of 'username:password'."""


class PackageInputError(BuildPrepError):
    """Dependency prefetch input errors."""


class EntitlementError(PackageInputError):
    """Raised when entitlement certificate files are missing."""


class ValidationError(BuildPrepError):
    """Input validation errors.

    Examples:
        - Invalid image name
        - Invalid image digest
        - Invalid tag suffix
    """
