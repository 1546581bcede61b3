"""
Capability Module for vcdkit.

Decides whether the connected server supports a versioned OpenAPI endpoint
before the endpoint is called, and which API version to call it with.

Design Principles:
- Fail fast: an unsupported endpoint raises before any request is sent
- Static registry: endpoint -> minimum version is configuration, append-only
- Use the minimum: calls are made with the endpoint's minimum version, never
  the server's own maximum
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional

from vcdkit.modules.errors import UnknownEndpointError, UnsupportedEndpointError
from vcdkit.modules.session import VcdSession, compare_versions

logger = logging.getLogger("vcdkit.capability")

OPENAPI_PATH_VERSION_1_0_0 = "1.0.0/"

ENDPOINT_RIGHTS = "rights/"
ENDPOINT_ROLES = "roles/"
ENDPOINT_GLOBAL_ROLES = "globalRoles/"
ENDPOINT_AUDIT_TRAIL = "auditTrail/"
ENDPOINT_EXTERNAL_NETWORKS = "externalNetworks/"
ENDPOINT_EDGE_GATEWAYS = "edgeGateways/"
ENDPOINT_ORG_VDC_NETWORKS = "orgVdcNetworks/"
ENDPOINT_VDC_COMPUTE_POLICIES = "vdcComputePolicies/"
ENDPOINT_VDC_ASSIGNED_COMPUTE_POLICIES = "vdcs/%s/computePolicies"
ENDPOINT_VDC_CAPABILITIES = "vdcs/%s/capabilities"
ENDPOINT_SESSION_CURRENT = "sessions/current"

# Endpoint -> minimum API version. Entries are only ever added.
ENDPOINT_MIN_API_VERSIONS: Dict[str, str] = {
    OPENAPI_PATH_VERSION_1_0_0 + ENDPOINT_RIGHTS: "31.0",
    OPENAPI_PATH_VERSION_1_0_0 + ENDPOINT_ROLES: "31.0",
    OPENAPI_PATH_VERSION_1_0_0 + ENDPOINT_GLOBAL_ROLES: "31.0",
    OPENAPI_PATH_VERSION_1_0_0 + ENDPOINT_AUDIT_TRAIL: "33.0",
    OPENAPI_PATH_VERSION_1_0_0 + ENDPOINT_EXTERNAL_NETWORKS: "32.0",
    OPENAPI_PATH_VERSION_1_0_0 + ENDPOINT_EDGE_GATEWAYS: "34.0",
    OPENAPI_PATH_VERSION_1_0_0 + ENDPOINT_ORG_VDC_NETWORKS: "32.0",
    OPENAPI_PATH_VERSION_1_0_0 + ENDPOINT_VDC_COMPUTE_POLICIES: "32.0",
    OPENAPI_PATH_VERSION_1_0_0 + ENDPOINT_VDC_ASSIGNED_COMPUTE_POLICIES: "33.0",
    OPENAPI_PATH_VERSION_1_0_0 + ENDPOINT_VDC_CAPABILITIES: "32.0",
    OPENAPI_PATH_VERSION_1_0_0 + ENDPOINT_SESSION_CURRENT: "34.0",
}


def register_endpoint(
    endpoint: str, minimum_version: str, registry: Optional[Dict[str, str]] = None
) -> None:
    """
    Add an endpoint to a registry (the shared one by default).

    Raises:
        ValueError: if the endpoint is already registered with another version
    """
    target = ENDPOINT_MIN_API_VERSIONS if registry is None else registry
    existing = target.get(endpoint)
    if existing is not None and existing != minimum_version:
        raise ValueError(
            f"endpoint {endpoint!r} already requires {existing}, refusing to change it to {minimum_version}"
        )
    target[endpoint] = minimum_version


@dataclass(frozen=True)
class CapabilityRecord:
    """Negotiation outcome for one endpoint on one connected server."""

    endpoint: str
    minimum_version: str
    server_version: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging or display."""
        return asdict(self)


class CapabilityModule:
    """
    Gates versioned endpoints for one session.

    Follows the same pattern as the other modules:
    - Receives its collaborator (the session) in __init__
    - Keeps a per-endpoint cache that is recomputed idempotently
    """

    def __init__(
        self,
        session: VcdSession,
        registry: Optional[Mapping[str, str]] = None,
    ):
        """
        Initialize capability module.

        Args:
            session: Session of the connected server
            registry: Endpoint -> minimum version map (default: shared registry)
        """
        self.session = session
        self.registry = ENDPOINT_MIN_API_VERSIONS if registry is None else registry
        self._records: Dict[str, CapabilityRecord] = {}

    def minimum_version(self, endpoint: str) -> str:
        """
        Minimum API version registered for an endpoint.

        Raises:
            UnknownEndpointError: if the endpoint is not registered
        """
        version = self.registry.get(endpoint)
        if version is None:
            raise UnknownEndpointError(endpoint)
        return version

    async def check_endpoint_compatibility(self, endpoint: str) -> str:
        """
        Confirm the server supports an endpoint.

        Args:
            endpoint: Registry key, e.g. "1.0.0/vdcs/%s/capabilities"

        Returns:
            The API version to use for the call (the endpoint's minimum)

        Raises:
            UnknownEndpointError: endpoint missing from the registry
            UnsupportedEndpointError: server older than the minimum
            TransportError: version probe failed
        """
        record = self._records.get(endpoint)
        if record is not None:
            return record.minimum_version

        minimum = self.minimum_version(endpoint)
        server_version = await self.session.server_version()

        if compare_versions(server_version, minimum) < 0:
            logger.debug(
                f"Endpoint {endpoint} needs API {minimum}, server supports {server_version}"
            )
            raise UnsupportedEndpointError(endpoint, minimum, server_version)

        record = CapabilityRecord(
            endpoint=endpoint, minimum_version=minimum, server_version=server_version
        )
        self._records[endpoint] = record
        logger.debug(f"Endpoint {endpoint} negotiated at API {minimum}")
        return minimum

    async def supports(self, endpoint: str) -> bool:
        """True when the endpoint is registered and the server is new enough."""
        try:
            await self.check_endpoint_compatibility(endpoint)
        except (UnknownEndpointError, UnsupportedEndpointError):
            return False
        return True

    def get_record(self, endpoint: str) -> Optional[CapabilityRecord]:
        """Cached negotiation outcome for an endpoint, if any."""
        return self._records.get(endpoint)

    def invalidate(self) -> None:
        """Drop cached records and the session's server version."""
        self._records.clear()
        self.session.reset()
