"""Dependency prefetch input handling.

The prefetch input names the package managers to fetch for and comes in a
few shapes:

    rpm                                       plain string
    {"type": "rpm"}                           single package object
    [{"type": "rpm"}, {"type": "pip"}]        list of package objects
    {"packages": [{"type": "rpm"}], ...}      object with a package list

The input is held as a small tree of ArrayNode/ObjectNode/ScalarNode values.
Transformations return a new tree and leave their input untouched.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Union

from .constants import ENTITLEMENT_DIR, RHSM_CA_BUNDLE, RPM_PACKAGE_TYPE, SUMMARY_IN_SBOM_FIELD
from .errors import EntitlementError
from .logging import component_logger, get_logger

_logger = get_logger(__name__)

Scalar = Union[str, int, float, bool, None]


@dataclass(frozen=True)
class ScalarNode:
    value: Scalar


@dataclass(frozen=True)
class ArrayNode:
    items: tuple[PackageNode, ...]


@dataclass(frozen=True)
class ObjectNode:
    """JSON object; field order is preserved."""

    fields: dict[str, PackageNode]

    def get(self, key: str) -> PackageNode | None:
        return self.fields.get(key)

    def with_field(self, key: str, node: PackageNode) -> ObjectNode:
        """Copy of this object with key set to node."""
        return ObjectNode({**self.fields, key: node})


PackageNode = Union[ScalarNode, ArrayNode, ObjectNode]
Predicate = Callable[[ObjectNode], bool]
Mutation = Callable[[ObjectNode], ObjectNode]


def from_json(value: Any) -> PackageNode:
    """Wrap a decoded JSON value."""
    if isinstance(value, list):
        return ArrayNode(tuple(from_json(item) for item in value))
    if isinstance(value, dict):
        return ObjectNode({str(key): from_json(item) for key, item in value.items()})
    return ScalarNode(value)


def to_json(node: PackageNode) -> Any:
    """Unwrap a node into plain JSON-compatible values."""
    if isinstance(node, ArrayNode):
        return [to_json(item) for item in node.items]
    if isinstance(node, ObjectNode):
        return {key: to_json(item) for key, item in node.fields.items()}
    return node.value


def parse_input(raw: str) -> PackageNode:
    """Parse user input; text that is not JSON is taken as a package type."""
    try:
        return from_json(json.loads(raw))
    except json.JSONDecodeError:
        return ObjectNode({"type": ScalarNode(raw)})


def render_input(node: PackageNode) -> str:
    """Serialize for the prefetch tool command line."""
    return json.dumps(to_json(node), separators=(",", ":"))


def _package_list(obj: ObjectNode) -> ArrayNode | None:
    packages = obj.get("packages")
    return packages if isinstance(packages, ArrayNode) else None


def has_type(package_type: str) -> Predicate:
    """Predicate matching objects whose "type" is package_type."""

    def _matches(obj: ObjectNode) -> bool:
        return obj.get("type") == ScalarNode(package_type)

    return _matches


def contains_type(node: PackageNode, package_type: str) -> bool:
    """Check whether the input requests package_type anywhere."""
    if isinstance(node, ArrayNode):
        return any(contains_type(item, package_type) for item in node.items)
    if isinstance(node, ObjectNode):
        packages = _package_list(node)
        if packages is not None and contains_type(packages, package_type):
            return True
        return has_type(package_type)(node)
    return False


def inject_field(node: PackageNode, predicate: Predicate, mutation: Mutation) -> PackageNode:
    """Apply mutation to every package object matching predicate.

    Arrays are mapped element by element. An object with a "packages" array
    is a package list: only that array is rewritten. Other objects are
    mutated when they match; everything else is returned as is.
    """
    if isinstance(node, ArrayNode):
        return ArrayNode(tuple(inject_field(item, predicate, mutation) for item in node.items))
    if isinstance(node, ObjectNode):
        packages = _package_list(node)
        if packages is not None:
            return node.with_field("packages", inject_field(packages, predicate, mutation))
        if predicate(node):
            return mutation(node)
    return node


def inject_summary_in_sbom(
    node: PackageNode, package_type: str = RPM_PACKAGE_TYPE
) -> PackageNode:
    """Set include_summary_in_sbom on every package of package_type."""
    return inject_field(
        node,
        has_type(package_type),
        lambda obj: obj.with_field(SUMMARY_IN_SBOM_FIELD, ScalarNode(True)),
    )


def inject_ssl_options(
    node: PackageNode, ssl: Mapping[str, Any], package_type: str = RPM_PACKAGE_TYPE
) -> PackageNode:
    """Add SSL options to every package of package_type.

    Keys of an existing options.ssl object are kept unless ssl sets them too.
    """
    ssl_node = ObjectNode({key: from_json(value) for key, value in ssl.items()})

    def _add_ssl(obj: ObjectNode) -> ObjectNode:
        options = obj.get("options")
        if not isinstance(options, ObjectNode):
            return obj.with_field("options", ObjectNode({"ssl": ssl_node}))
        existing = options.get("ssl")
        merged = ssl_node
        if isinstance(existing, ObjectNode):
            merged = ObjectNode({**existing.fields, **ssl_node.fields})
        return obj.with_field("options", options.with_field("ssl", merged))

    return inject_field(node, has_type(package_type), _add_ssl)


def inject_rpm_input(
    node: PackageNode,
    ssl: Mapping[str, Any] | None = None,
    *,
    package_type: str = RPM_PACKAGE_TYPE,
    logger: logging.Logger | None = None,
) -> PackageNode:
    """Prepare RPM package entries for prefetching.

    Always requests package summaries in the SBOM; adds SSL client options
    when ssl is given (e.g. from find_entitlement_ssl_options).
    """
    log = component_logger(logger, _logger)
    result = inject_summary_in_sbom(node, package_type)
    if ssl is None:
        log.debug("No SSL options for %s packages", package_type)
        return result
    log.debug("Injecting SSL options for %s packages: %s", package_type, sorted(ssl))
    return inject_ssl_options(result, ssl, package_type)


def find_entitlement_ssl_options(
    entitlement_dir: str | Path = ENTITLEMENT_DIR,
    ca_bundle: str = RHSM_CA_BUNDLE,
    *,
    logger: logging.Logger | None = None,
) -> dict[str, str]:
    """Build RPM SSL options from entitlement certificates.

    Expects one ``*-key.pem`` client key and one other ``*.pem`` client
    certificate in entitlement_dir.

    Raises:
        EntitlementError: If the key or the certificate is missing.
    """
    log = component_logger(logger, _logger)
    client_key = ""
    client_cert = ""
    for pem in sorted(Path(entitlement_dir).glob("*.pem")):
        if pem.name.endswith("-key.pem"):
            client_key = str(pem)
        else:
            client_cert = str(pem)

    if not client_key or not client_cert:
        raise EntitlementError(f"no entitlement certificate files found in {entitlement_dir}")

    log.debug("Using entitlement key %s and certificate %s", client_key, client_cert)
    return {"client_key": client_key, "client_cert": client_cert, "ca_bundle": ca_bundle}
