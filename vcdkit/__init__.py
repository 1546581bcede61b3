"""
vcdkit - Cloud Director client core

An asyncio client library for a cloud-infrastructure management API
(organizations, virtual datacenters, catalogs, vApps, virtual machines).

Architecture:
- Each module is self-contained with clear interfaces
- Modules are completely replaceable
- No module knows the internals of another
- All communication through defined interfaces
- No global client: a session value is passed explicitly

Modules:
- transport: HTTP transport contract and httpx implementation
- session: Connected-server context and version probing
- capability: Endpoint/version negotiation
- retry: Narrowly scoped retry of flaky reads
- task: Asynchronous task completion tracking
- resolver: Name-or-ID entity resolution
- entities: Org and VDC callers of the core
"""

__version__ = "1.0.0"
