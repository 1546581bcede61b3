"""
Virtual datacenter entity.

Shows how the core is used by domain code:
- deletion and VM creation return Tasks driven by the task module
- vApp, VM, network and edge gateway lookups go through the name-or-ID resolver
- edge gateway reads run under the edgeGateway retry policy
- the capabilities and compute policy endpoints are gated by the capability module
"""

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import quote

from vcdkit.modules.api.models import Task, VdcCapability, VdcComputePolicy
from vcdkit.modules.capability import (
    ENDPOINT_VDC_ASSIGNED_COMPUTE_POLICIES,
    ENDPOINT_VDC_CAPABILITIES,
    OPENAPI_PATH_VERSION_1_0_0,
)
from vcdkit.modules.errors import AmbiguousEntityError, EntityNotFoundError, VcdError
from vcdkit.modules.resolver import equal_ids
from vcdkit.modules.retry import retry_on_transient

from .base import (
    MIME_CREATE_VM_PARAMS,
    MIME_QUERY_RECORDS,
    MIME_VAPP,
    QUERY_TYPE_ADMIN_VM,
    QUERY_TYPE_VM,
    EdgeGateway,
    Entity,
    OrgVdcNetwork,
    VApp,
    Vm,
    single_match,
    task_from_response,
    with_query,
)

logger = logging.getLogger("vcdkit.entities.vdc")

NETWORK_PROVIDER_NSXT = "NSX_T"
NETWORK_PROVIDER_NSXV = "NSX_V"


class Vdc(Entity):
    kind = "vdc"

    # Deletion

    async def delete(self, force: bool = False, recursive: bool = False) -> Task:
        """Start deleting this VDC. Returns the server task."""
        reference = f"{self.href}?force={str(force).lower()}&recursive={str(recursive).lower()}"
        logger.info(f"Deleting VDC {self.name} (force={force}, recursive={recursive})")
        document = await self.client.session.transport.delete(reference)
        return task_from_response(document, f"deleting VDC {self.name}")

    async def delete_wait(
        self,
        force: bool = False,
        recursive: bool = False,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> Task:
        task = await self.delete(force=force, recursive=recursive)
        return await self.client.tasks.wait_until_complete(task, cancel_event=cancel_event)

    # vApps

    def _vapp_references(self) -> List[Dict[str, Any]]:
        entities = (self.document.get("resourceEntities") or {}).get("resourceEntity") or []
        return [e for e in entities if e.get("type") == MIME_VAPP]

    async def get_vapp_by_href(self, href: str) -> VApp:
        document = await self.client.session.transport.fetch(href)
        return VApp(self.client, document)

    async def get_vapp_by_name(self, name: str, refresh: bool = False) -> VApp:
        if refresh:
            await self.refresh()
        ref = single_match(
            [r for r in self._vapp_references() if r.get("name") == name], name, "vApp"
        )
        return await self.get_vapp_by_href(ref["href"])

    async def get_vapp_by_id(self, vapp_id: str, refresh: bool = False) -> VApp:
        if refresh:
            await self.refresh()
        ref = single_match(
            [
                r
                for r in self._vapp_references()
                if equal_ids(vapp_id, r.get("id", ""), r.get("href", ""))
            ],
            vapp_id,
            "vApp",
        )
        return await self.get_vapp_by_href(ref["href"])

    async def get_vapp_by_name_or_id(self, identifier: str, refresh: bool = False) -> VApp:
        return await self.client.resolver.resolve_by_name_or_id(
            identifier, refresh, self.get_vapp_by_name, self.get_vapp_by_id
        )

    # Org VDC networks

    def _network_references(self) -> List[Dict[str, Any]]:
        available = self.document.get("availableNetworks") or {}
        # One availableNetworks block, or a list of them, each holding network references.
        blocks = available if isinstance(available, list) else [available]
        references = []
        for block in blocks:
            references.extend((block or {}).get("network") or [])
        return references

    async def get_org_vdc_network_by_href(self, href: str) -> OrgVdcNetwork:
        document = await self.client.session.transport.fetch(href)
        return OrgVdcNetwork(self.client, document)

    async def get_org_vdc_network_by_name(
        self, name: str, refresh: bool = False
    ) -> OrgVdcNetwork:
        if refresh:
            await self.refresh()
        ref = single_match(
            [r for r in self._network_references() if r.get("name") == name],
            name,
            "orgVdcNetwork",
        )
        return await self.get_org_vdc_network_by_href(ref["href"])

    async def get_org_vdc_network_by_id(
        self, network_id: str, refresh: bool = False
    ) -> OrgVdcNetwork:
        if refresh:
            await self.refresh()
        # Some server versions omit the ID in network references.
        ref = single_match(
            [
                r
                for r in self._network_references()
                if equal_ids(network_id, r.get("id", ""), r.get("href", ""))
            ],
            network_id,
            "orgVdcNetwork",
        )
        return await self.get_org_vdc_network_by_href(ref["href"])

    async def get_org_vdc_network_by_name_or_id(
        self, identifier: str, refresh: bool = False
    ) -> OrgVdcNetwork:
        return await self.client.resolver.resolve_by_name_or_id(
            identifier, refresh, self.get_org_vdc_network_by_name, self.get_org_vdc_network_by_id
        )

    # Edge gateways

    async def get_edge_gateway_records(self, refresh: bool = False) -> List[Dict[str, Any]]:
        """Edge gateway query records linked from this VDC."""
        if refresh:
            await self.refresh()
        link = self.find_link("edgeGateways", MIME_QUERY_RECORDS)
        if link is None:
            raise VcdError(f"no edge gateway query link found in VDC {self.name}")
        document = await self.client.session.transport.fetch(link.href)
        return list(document.get("record") or [])

    async def get_edge_gateway_by_href(self, href: str) -> EdgeGateway:
        """
        Fetch an edge gateway.

        This read is known to fail spuriously with a server error, so it runs
        under the edgeGateway retry policy.
        """
        if not href:
            raise ValueError("empty edge gateway href")
        transport = self.client.session.transport
        document = await retry_on_transient(
            lambda: transport.fetch(href),
            self.client.retry_policy("edgeGateway"),
        )
        return EdgeGateway(self.client, document)

    async def get_edge_gateway_by_name(self, name: str, refresh: bool = False) -> EdgeGateway:
        records = await self.get_edge_gateway_records(refresh)
        record = single_match([r for r in records if r.get("name") == name], name, "edgeGateway")
        return await self.get_edge_gateway_by_href(record["href"])

    async def get_edge_gateway_by_id(self, gateway_id: str, refresh: bool = False) -> EdgeGateway:
        records = await self.get_edge_gateway_records(refresh)
        # Query records carry no ID, only the href.
        record = single_match(
            [r for r in records if equal_ids(gateway_id, "", r.get("href", ""))],
            gateway_id,
            "edgeGateway",
        )
        return await self.get_edge_gateway_by_href(record["href"])

    async def get_edge_gateway_by_name_or_id(
        self, identifier: str, refresh: bool = False
    ) -> EdgeGateway:
        return await self.client.resolver.resolve_by_name_or_id(
            identifier, refresh, self.get_edge_gateway_by_name, self.get_edge_gateway_by_id
        )

    # VMs

    async def query_vm_list(self) -> List[Dict[str, Any]]:
        """VM query records in this VDC (first page only)."""
        query_type = QUERY_TYPE_ADMIN_VM if self.client.session.is_sys_admin else QUERY_TYPE_VM
        filter_text = quote(f"vdc=={self.href}", safe="")
        reference = f"/api/query?type={query_type}&format=records&filter={filter_text}"
        document = await self.client.session.transport.fetch(reference)
        return list(document.get("record") or [])

    async def get_vm_by_href(self, href: str) -> Vm:
        document = await self.client.session.transport.fetch(href)
        return Vm(self.client, document)

    async def query_vm_by_name(self, name: str) -> Vm:
        """Fails when no VM or more than one VM carries the name."""
        records = await self.query_vm_list()
        record = single_match([r for r in records if r.get("name") == name], name, "vm")
        return await self.get_vm_by_href(record["href"])

    async def query_vm_by_id(self, vm_id: str) -> Vm:
        records = await self.query_vm_list()
        record = single_match(
            [r for r in records if equal_ids(vm_id, r.get("id", ""), r.get("href", ""))],
            vm_id,
            "vm",
        )
        return await self.get_vm_by_href(record["href"])

    async def create_standalone_vm_async(self, params: Dict[str, Any]) -> Task:
        """Start creating a standalone VM. Returns the server task."""
        link = self.find_link("add", MIME_CREATE_VM_PARAMS)
        if link is None:
            raise VcdError(f"VDC {self.name} has no link for creating standalone VMs")
        logger.info(f"Creating standalone VM {params.get('name')} in VDC {self.name}")
        document = await self.client.session.transport.post(
            link.href, params, content_type=MIME_CREATE_VM_PARAMS.replace("+xml", "+json")
        )
        return task_from_response(document, f"creating VM {params.get('name')}")

    async def create_standalone_vm(
        self,
        params: Dict[str, Any],
        cancel_event: Optional[asyncio.Event] = None,
    ) -> Vm:
        task = await self.create_standalone_vm_async(params)
        finished = await self.client.tasks.wait_until_complete(task, cancel_event=cancel_event)
        return await self.get_vm_from_task(finished, params.get("name", ""))

    async def get_vm_from_task(self, task: Task, name: str) -> Vm:
        """
        Find the VM created by a standalone VM task.

        The task owner is the hidden vApp wrapping the new VM.
        """
        if task.owner is None or not task.owner.href:
            raise VcdError(f"task owner is null for VM {name}")
        vapp = await self.get_vapp_by_href(task.owner.href)
        children = vapp.vm_references
        if not children:
            if "children" not in vapp.document:
                raise EntityNotFoundError(name, kind="vm")
            raise VcdError(f"vApp {vapp.name} contains no VMs")
        if len(children) > 1:
            raise AmbiguousEntityError(name, len(children), kind="vm")
        return await self.get_vm_by_href(children[0]["href"])

    # Capabilities

    async def get_capabilities(self) -> List[VdcCapability]:
        """VDC capabilities; requires a server that supports the endpoint."""
        if not self.id:
            raise ValueError("VDC ID must be set to get capabilities")
        endpoint = OPENAPI_PATH_VERSION_1_0_0 + ENDPOINT_VDC_CAPABILITIES
        api_version = await self.client.capabilities.check_endpoint_compatibility(endpoint)
        reference = self.client.session.build_openapi_endpoint(endpoint, quote(self.id, safe=""))
        document = await self.client.session.transport.fetch(reference, api_version=api_version)
        return [VdcCapability.model_validate(item) for item in document.get("values") or []]

    async def _network_provider(self) -> str:
        try:
            capabilities = await self.get_capabilities()
        except (VcdError, ValueError) as e:
            logger.debug(f"Could not read capabilities of VDC {self.name}: {e}")
            return ""
        for capability in capabilities:
            if capability.name == "networkProvider":
                return str(capability.value)
        return ""

    async def is_nsxt(self) -> bool:
        """True when backed by NSX-T. Errors read as False."""
        return await self._network_provider() == NETWORK_PROVIDER_NSXT

    async def is_nsxv(self) -> bool:
        """True when backed by NSX-V. Errors read as False."""
        return await self._network_provider() == NETWORK_PROVIDER_NSXV

    # Compute policies

    async def get_all_assigned_vdc_compute_policies(
        self, query_parameters: Optional[Mapping[str, Any]] = None
    ) -> List[VdcComputePolicy]:
        """Compute policies assigned to this VDC."""
        endpoint = OPENAPI_PATH_VERSION_1_0_0 + ENDPOINT_VDC_ASSIGNED_COMPUTE_POLICIES
        api_version = await self.client.capabilities.check_endpoint_compatibility(endpoint)
        if not self.id:
            raise ValueError("VDC ID must be set to get assigned compute policies")

        session = self.client.session
        reference = with_query(
            session.build_openapi_endpoint(endpoint, quote(self.id, safe="")), query_parameters
        )
        document = await session.transport.fetch(reference, api_version=api_version)
        return [VdcComputePolicy.model_validate(item) for item in document.get("values") or []]
