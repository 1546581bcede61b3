"""
Organization entity.

Catalogs and VDCs are located through the organization's links. Name
lookups refuse to pick between same-named links; ID lookups accept any of
the URN, UUID or href shapes.

VDC compute policies are read through the OpenAPI endpoint, which is the
same for tenant and system administrator sessions.
"""

import logging
from typing import Any, List, Mapping, Optional
from urllib.parse import quote

from vcdkit.modules.api.models import VdcComputePolicy
from vcdkit.modules.capability import ENDPOINT_VDC_COMPUTE_POLICIES, OPENAPI_PATH_VERSION_1_0_0
from vcdkit.modules.resolver import equal_ids

from .base import MIME_CATALOG, MIME_VDC, Catalog, Entity, single_match, with_query
from .vdc import Vdc

logger = logging.getLogger("vcdkit.entities.org")


class Org(Entity):
    kind = "org"

    # Catalogs

    async def get_catalog_by_href(self, href: str) -> Catalog:
        document = await self.client.session.transport.fetch(href)
        return Catalog(self.client, document)

    async def get_catalog_by_name(self, name: str, refresh: bool = False) -> Catalog:
        if refresh:
            await self.refresh()
        link = single_match(
            [l for l in self.links if l.name == name and l.type == MIME_CATALOG],
            name,
            "catalog",
        )
        return await self.get_catalog_by_href(link.href)

    async def get_catalog_by_id(self, catalog_id: str, refresh: bool = False) -> Catalog:
        if refresh:
            await self.refresh()
        link = single_match(
            [
                l
                for l in self.links
                if l.type == MIME_CATALOG and equal_ids(catalog_id, l.id or "", l.href)
            ],
            catalog_id,
            "catalog",
        )
        return await self.get_catalog_by_href(link.href)

    async def get_catalog_by_name_or_id(self, identifier: str, refresh: bool = False) -> Catalog:
        return await self.client.resolver.resolve_by_name_or_id(
            identifier, refresh, self.get_catalog_by_name, self.get_catalog_by_id
        )

    # VDCs

    async def get_vdc_by_href(self, href: str) -> Vdc:
        document = await self.client.session.transport.fetch(href)
        return Vdc(self.client, document)

    async def get_vdc_by_name(self, name: str, refresh: bool = False) -> Vdc:
        if refresh:
            await self.refresh()
        link = single_match(
            [l for l in self.links if l.name == name and l.type == MIME_VDC],
            name,
            "vdc",
        )
        return await self.get_vdc_by_href(link.href)

    async def get_vdc_by_id(self, vdc_id: str, refresh: bool = False) -> Vdc:
        if refresh:
            await self.refresh()
        link = single_match(
            [
                l
                for l in self.links
                if l.type == MIME_VDC and equal_ids(vdc_id, l.id or "", l.href)
            ],
            vdc_id,
            "vdc",
        )
        return await self.get_vdc_by_href(link.href)

    async def get_vdc_by_name_or_id(self, identifier: str, refresh: bool = False) -> Vdc:
        logger.debug(f"Looking up VDC {identifier!r} in org {self.name}")
        return await self.client.resolver.resolve_by_name_or_id(
            identifier, refresh, self.get_vdc_by_name, self.get_vdc_by_id
        )

    # VDC compute policies

    async def get_vdc_compute_policy_by_id(self, policy_id: str) -> VdcComputePolicy:
        """
        Fetch one VDC compute policy.

        Raises:
            UnsupportedEndpointError: server older than the compute policy endpoint
            ValueError: policy_id is empty
        """
        endpoint = OPENAPI_PATH_VERSION_1_0_0 + ENDPOINT_VDC_COMPUTE_POLICIES
        api_version = await self.client.capabilities.check_endpoint_compatibility(endpoint)
        if not policy_id:
            raise ValueError("empty VDC compute policy id")

        session = self.client.session
        reference = session.build_openapi_endpoint(endpoint, quote(policy_id, safe=""))
        document = await session.transport.fetch(reference, api_version=api_version)
        return VdcComputePolicy.model_validate(document)

    async def get_all_vdc_compute_policies(
        self, query_parameters: Optional[Mapping[str, Any]] = None
    ) -> List[VdcComputePolicy]:
        """VDC compute policies, optionally filtered (e.g. {"filter": "name==small"})."""
        endpoint = OPENAPI_PATH_VERSION_1_0_0 + ENDPOINT_VDC_COMPUTE_POLICIES
        api_version = await self.client.capabilities.check_endpoint_compatibility(endpoint)

        session = self.client.session
        reference = with_query(session.build_openapi_endpoint(endpoint), query_parameters)
        document = await session.transport.fetch(reference, api_version=api_version)
        return [VdcComputePolicy.model_validate(item) for item in document.get("values") or []]
