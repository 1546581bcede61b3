"""
Entities Module - Black Box Interface

Purpose: Domain callers of the core (organizations, VDCs and their children)
Interface: Org, Vdc, Catalog, VApp, Vm, EdgeGateway, OrgVdcNetwork
Hidden: Link walking, query records, media types

Every lookup goes through the resolver; every asynchronous change returns a Task.
"""

from .base import Catalog, EdgeGateway, Entity, OrgVdcNetwork, VApp, Vm
from .org import Org
from .vdc import NETWORK_PROVIDER_NSXT, NETWORK_PROVIDER_NSXV, Vdc

__all__ = [
    "Entity",
    "Org",
    "Vdc",
    "Catalog",
    "VApp",
    "Vm",
    "EdgeGateway",
    "OrgVdcNetwork",
    "NETWORK_PROVIDER_NSXT",
    "NETWORK_PROVIDER_NSXV",
]
