"""
Session Module - Black Box Interface

Purpose: Carry the per-connection context every operation needs
Interface: server_version(), reset(), build_openapi_endpoint(), is_sys_admin
Hidden: Version probing, single-flight caching

There is no global client: create one VcdSession per connected server.
"""

from .session import VcdSession, compare_versions, parse_version

__all__ = ["VcdSession", "compare_versions", "parse_version"]
