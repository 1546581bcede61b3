"""
Capability Module - Black Box Interface

Purpose: Confirm the connected server supports a versioned endpoint
Interface: check_endpoint_compatibility(), supports(), register_endpoint()
Hidden: Version comparison, per-endpoint caching

Callers consult it before invoking a versioned operation and use the
returned minimum version for the call.
"""

from .capability import (
    ENDPOINT_AUDIT_TRAIL,
    ENDPOINT_EDGE_GATEWAYS,
    ENDPOINT_EXTERNAL_NETWORKS,
    ENDPOINT_GLOBAL_ROLES,
    ENDPOINT_MIN_API_VERSIONS,
    ENDPOINT_ORG_VDC_NETWORKS,
    ENDPOINT_RIGHTS,
    ENDPOINT_ROLES,
    ENDPOINT_SESSION_CURRENT,
    ENDPOINT_VDC_ASSIGNED_COMPUTE_POLICIES,
    ENDPOINT_VDC_CAPABILITIES,
    ENDPOINT_VDC_COMPUTE_POLICIES,
    OPENAPI_PATH_VERSION_1_0_0,
    CapabilityModule,
    CapabilityRecord,
    register_endpoint,
)

__all__ = [
    "CapabilityModule",
    "CapabilityRecord",
    "register_endpoint",
    "ENDPOINT_MIN_API_VERSIONS",
    "OPENAPI_PATH_VERSION_1_0_0",
    "ENDPOINT_RIGHTS",
    "ENDPOINT_ROLES",
    "ENDPOINT_GLOBAL_ROLES",
    "ENDPOINT_AUDIT_TRAIL",
    "ENDPOINT_EXTERNAL_NETWORKS",
    "ENDPOINT_EDGE_GATEWAYS",
    "ENDPOINT_ORG_VDC_NETWORKS",
    "ENDPOINT_VDC_COMPUTE_POLICIES",
    "ENDPOINT_VDC_ASSIGNED_COMPUTE_POLICIES",
    "ENDPOINT_VDC_CAPABILITIES",
    "ENDPOINT_SESSION_CURRENT",
]
