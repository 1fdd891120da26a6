"""Constants module for buildprep.

All shared names and default values are defined here (SSOT).
"""

from __future__ import annotations

# === Logging ===
LOGGER_NAMESPACE = "buildprep"
DEBUG_ENV_VAR = "BUILDPREP_DEBUG"
LOG_LEVEL_ENV_VAR = "BUILDPREP_LOG_LEVEL"
ENV_PREFIX = "BUILDPREP"

# === Build file discovery ===
DEFAULT_CONTEXT_DIR = "."
# Search order when no build file is given: Containerfile wins
DEFAULT_BUILD_FILES = ("./Containerfile", "./Dockerfile")

# === Registry authentication ===
REGISTRY_DOCKER_IO = "docker.io"
# Scope some clients write on docker.io login
REGISTRY_INDEX_DOCKER_IO = "https://index.docker.io/v1/"
AUTH_FILE_ENV_VAR = "BUILDPREP_AUTH_FILE"
DEFAULT_AUTH_FILE = "~/.docker/config.json"

# === Containerfile artifacts ===
CONTAINERFILE_ARTIFACT_TAG_SUFFIX = ".containerfile"
# 128 (max tag length) - 71 (length of "sha256-<64 hex>")
MAX_TAG_SUFFIX_LENGTH = 57

# === Dependency prefetch ===
RPM_PACKAGE_TYPE = "rpm"
SUMMARY_IN_SBOM_FIELD = "include_summary_in_sbom"
ENTITLEMENT_DIR = "/etc/pki/entitlement"
RHSM_CA_BUNDLE = "/etc/rhsm/ca/redhat-uep.pem"
