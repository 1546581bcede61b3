"""
Tests for the org and VDC entities wired through a client.

Covers how entity code drives the core: name-or-ID lookups, task waits,
edge gateway retries and capability-gated endpoints.
"""

from unittest.mock import AsyncMock, patch
from urllib.parse import quote

import pytest

from conftest import TASK_HREF, task_document, versions_document
from vcdkit.modules.api.models import Task
from vcdkit.modules.entities import Org, Vdc
from vcdkit.modules.entities.base import (
    MIME_CATALOG,
    MIME_CREATE_VM_PARAMS,
    MIME_QUERY_RECORDS,
    MIME_VAPP,
    MIME_VDC,
)
from vcdkit.modules.errors import (
    AmbiguousEntityError,
    EntityNotFoundError,
    TaskFailedError,
    TransportError,
    UnsupportedEndpointError,
    VcdError,
)

API = "https://vcd.example.com/api"
ORG_HREF = f"{API}/org/11111111-1111-4111-8111-111111111111"
VDC_UUID = "3d2e8c7a-0d4c-4e51-9e1a-0b8d6a0f3b11"
VDC_URN = f"urn:vcloud:vdc:{VDC_UUID}"
VDC_HREF = f"{API}/vdc/{VDC_UUID}"
CATALOG_UUID = "22222222-2222-4222-8222-222222222222"
CATALOG_HREF = f"{API}/catalog/{CATALOG_UUID}"
EDGE_UUID = "44444444-4444-4444-8444-444444444444"
EDGE_HREF = f"{API}/admin/edgeGateway/{EDGE_UUID}"
EDGE_QUERY_HREF = f"{API}/admin/vdc/{VDC_UUID}/edgeGateways"
VAPP_HREF = f"{API}/vApp/vapp-55555555-5555-4555-8555-555555555555"
VM_HREF = f"{API}/vApp/vm-66666666-6666-4666-8666-666666666666"
NET_UUID = "77777777-7777-4777-8777-777777777777"
NET_HREF = f"{API}/network/{NET_UUID}"
VERSIONS = "/api/versions"


def org_document(*extra_links):
    return {
        "name": "acme",
        "id": "urn:vcloud:org:11111111-1111-4111-8111-111111111111",
        "href": ORG_HREF,
        "link": [
            {"rel": "down", "type": MIME_CATALOG, "name": "templates", "href": CATALOG_HREF},
            {"rel": "down", "type": MIME_VDC, "name": "prod", "href": VDC_HREF},
            *extra_links,
        ],
    }


def vdc_document(**extra):
    document = {
        "name": "prod",
        "id": VDC_URN,
        "href": VDC_HREF,
        "link": [
            {"rel": "edgeGateways", "type": MIME_QUERY_RECORDS, "href": EDGE_QUERY_HREF},
            {
                "rel": "add",
                "type": MIME_CREATE_VM_PARAMS,
                "href": f"{VDC_HREF}/action/instantiateVmFromTemplate",
            },
        ],
        "resourceEntities": {
            "resourceEntity": [
                {"type": MIME_VAPP, "name": "web", "href": VAPP_HREF},
            ]
        },
        "availableNetworks": {"network": [{"name": "web-net", "href": NET_HREF}]},
    }
    document.update(extra)
    return document


@pytest.fixture
def org(client):
    return Org(client, org_document())


@pytest.fixture
def vdc(client):
    return Vdc(client, vdc_document())


# =============================================================================
# Org lookups
# =============================================================================


class TestOrgLookups:
    @pytest.mark.asyncio
    async def test_catalog_by_name(self, org, fake_transport):
        fake_transport.register(CATALOG_HREF, {"name": "templates", "href": CATALOG_HREF})

        catalog = await org.get_catalog_by_name_or_id("templates")

        assert catalog.name == "templates"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "identifier", [f"urn:vcloud:catalog:{CATALOG_UUID}", CATALOG_UUID, CATALOG_HREF]
    )
    async def test_catalog_by_any_id_shape(self, org, fake_transport, identifier):
        fake_transport.register(CATALOG_HREF, {"name": "templates", "href": CATALOG_HREF})

        catalog = await org.get_catalog_by_name_or_id(identifier)

        assert catalog.href == CATALOG_HREF

    @pytest.mark.asyncio
    async def test_duplicate_names_are_ambiguous(self, client, fake_transport):
        duplicate = {
            "rel": "down",
            "type": MIME_CATALOG,
            "name": "templates",
            "href": f"{API}/catalog/33333333-3333-4333-8333-333333333333",
        }
        org = Org(client, org_document(duplicate))

        with pytest.raises(AmbiguousEntityError) as exc_info:
            await org.get_catalog_by_name_or_id("templates")

        assert exc_info.value.count == 2
        assert fake_transport.calls == []

    @pytest.mark.asyncio
    async def test_missing_vdc(self, org):
        with pytest.raises(EntityNotFoundError):
            await org.get_vdc_by_name_or_id("staging")

    @pytest.mark.asyncio
    async def test_refresh_refetches_org(self, org, fake_transport):
        fake_transport.register(ORG_HREF, org_document())
        fake_transport.register(VDC_HREF, vdc_document())

        vdc = await org.get_vdc_by_name_or_id(VDC_URN, refresh=True)

        assert vdc.id == VDC_URN
        assert fake_transport.call_count("GET", ORG_HREF) == 1


# =============================================================================
# VDC deletion and VM creation
# =============================================================================


class TestVdcTasks:
    @pytest.mark.asyncio
    async def test_delete_wait(self, vdc, fake_transport):
        fake_transport.register(
            f"{VDC_HREF}?force=true&recursive=true", task_document("queued"), method="DELETE"
        )
        fake_transport.register(TASK_HREF, task_document("running"), task_document("success"))

        result = await vdc.delete_wait(force=True, recursive=True)

        assert result.is_success
        assert fake_transport.call_count("GET", TASK_HREF) == 2

    @pytest.mark.asyncio
    async def test_delete_failure_surfaces_task_message(self, vdc, fake_transport):
        fake_transport.register(
            f"{VDC_HREF}?force=false&recursive=false", task_document("queued"), method="DELETE"
        )
        fake_transport.register(
            TASK_HREF, task_document("error", error={"message": "VDC is not empty"})
        )

        with pytest.raises(TaskFailedError, match="VDC is not empty"):
            await vdc.delete_wait()

    @pytest.mark.asyncio
    async def test_delete_without_task_in_response(self, vdc, fake_transport):
        fake_transport.register(
            f"{VDC_HREF}?force=false&recursive=false", {}, method="DELETE"
        )

        with pytest.raises(VcdError, match="no task"):
            await vdc.delete_wait()

        assert fake_transport.call_count("GET", TASK_HREF) == 0

    @pytest.mark.asyncio
    async def test_create_standalone_vm(self, vdc, fake_transport):
        fake_transport.register(
            f"{VDC_HREF}/action/instantiateVmFromTemplate",
            task_document("queued"),
            method="POST",
        )
        fake_transport.register(
            TASK_HREF, task_document("success", owner={"href": VAPP_HREF, "name": "vm-1"})
        )
        fake_transport.register(VAPP_HREF, {"name": "vm-1", "children": {"vm": [{"href": VM_HREF}]}})
        fake_transport.register(VM_HREF, {"name": "vm-1", "href": VM_HREF})

        vm = await vdc.create_standalone_vm({"name": "vm-1"})

        assert vm.href == VM_HREF
        post = next(c for c in fake_transport.calls if c.method == "POST")
        assert post.body == {"name": "vm-1"}

    @pytest.mark.asyncio
    async def test_vm_from_task_without_owner(self, vdc):
        task = Task.from_document(task_document("success"))
        with pytest.raises(VcdError, match="owner"):
            await vdc.get_vm_from_task(task, "vm-1")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "vapp,error",
        [
            ({"name": "vm-1"}, EntityNotFoundError),
            ({"name": "vm-1", "children": {"vm": []}}, VcdError),
            (
                {"name": "vm-1", "children": {"vm": [{"href": VM_HREF}, {"href": VM_HREF + "2"}]}},
                AmbiguousEntityError,
            ),
        ],
    )
    async def test_vm_from_task_bad_vapp(self, vdc, fake_transport, vapp, error):
        fake_transport.register(VAPP_HREF, vapp)
        task = Task.from_document(task_document("success", owner={"href": VAPP_HREF}))

        with pytest.raises(error):
            await vdc.get_vm_from_task(task, "vm-1")


# =============================================================================
# Name-or-ID lookups inside a VDC
# =============================================================================


class TestVdcLookups:
    @pytest.mark.asyncio
    async def test_vapp_by_name(self, vdc, fake_transport):
        fake_transport.register(VAPP_HREF, {"name": "web", "href": VAPP_HREF})

        vapp = await vdc.get_vapp_by_name_or_id("web")

        assert vapp.name == "web"

    @pytest.mark.asyncio
    async def test_vm_query_uses_admin_type_for_sys_admin(self, vdc, fake_transport):
        vdc.client.session.is_sys_admin = True
        reference = (
            f"/api/query?type=adminVM&format=records&filter={quote('vdc==' + VDC_HREF, safe='')}"
        )
        fake_transport.register(reference, {"record": [{"name": "db", "href": VM_HREF}]})
        fake_transport.register(VM_HREF, {"name": "db", "href": VM_HREF})

        vm = await vdc.query_vm_by_name("db")

        assert vm.name == "db"


class TestOrgVdcNetworks:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("identifier", ["web-net", f"urn:vcloud:network:{NET_UUID}", NET_UUID])
    async def test_by_name_or_id(self, vdc, fake_transport, identifier):
        fake_transport.register(NET_HREF, {"name": "web-net", "href": NET_HREF})

        network = await vdc.get_org_vdc_network_by_name_or_id(identifier)

        assert network.href == NET_HREF

    @pytest.mark.asyncio
    async def test_same_name_in_two_blocks_is_ambiguous(self, client, fake_transport):
        other = f"{API}/network/88888888-8888-4888-8888-888888888888"
        vdc = Vdc(
            client,
            vdc_document(
                availableNetworks=[
                    {"network": [{"name": "web-net", "href": NET_HREF}]},
                    {"network": [{"name": "web-net", "href": other}]},
                ]
            ),
        )

        with pytest.raises(AmbiguousEntityError):
            await vdc.get_org_vdc_network_by_name_or_id("web-net")

        assert fake_transport.calls == []

    @pytest.mark.asyncio
    async def test_missing_network(self, vdc):
        with pytest.raises(EntityNotFoundError):
            await vdc.get_org_vdc_network_by_name_or_id(
                "urn:vcloud:network:99999999-9999-4999-8999-999999999999"
            )


class TestEdgeGateways:
    @pytest.fixture
    def no_sleep(self):
        with patch("vcdkit.modules.retry.retry.asyncio.sleep", new_callable=AsyncMock) as sleep:
            yield sleep

    @pytest.mark.asyncio
    async def test_transient_read_is_retried(self, vdc, fake_transport, no_sleep):
        fake_transport.register(EDGE_QUERY_HREF, {"record": [{"name": "edge-1", "href": EDGE_HREF}]})
        fake_transport.register(
            EDGE_HREF,
            TransportError("internal error", status_code=500),
            TransportError("internal error", status_code=500),
            {"name": "edge-1", "href": EDGE_HREF},
        )

        gateway = await vdc.get_edge_gateway_by_name_or_id("edge-1")

        assert gateway.name == "edge-1"
        assert fake_transport.call_count("GET", EDGE_HREF) == 3
        assert no_sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_lookup_by_urn_matches_href(self, vdc, fake_transport, no_sleep):
        fake_transport.register(EDGE_QUERY_HREF, {"record": [{"name": "edge-1", "href": EDGE_HREF}]})
        fake_transport.register(EDGE_HREF, {"name": "edge-1", "href": EDGE_HREF})

        gateway = await vdc.get_edge_gateway_by_name_or_id(f"urn:vcloud:gateway:{EDGE_UUID}")

        assert gateway.href == EDGE_HREF
        no_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_gives_up_after_four_attempts(self, vdc, fake_transport, no_sleep):
        fake_transport.register(EDGE_HREF, TransportError("internal error", status_code=500))

        with pytest.raises(TransportError):
            await vdc.get_edge_gateway_by_href(EDGE_HREF)

        assert fake_transport.call_count("GET", EDGE_HREF) == 4

    @pytest.mark.asyncio
    async def test_other_reads_are_not_retried(self, vdc, fake_transport):
        fake_transport.register(VAPP_HREF, TransportError("internal error", status_code=500))

        with pytest.raises(TransportError):
            await vdc.get_vapp_by_name_or_id("web")

        assert fake_transport.call_count("GET", VAPP_HREF) == 1


# =============================================================================
# Capability-gated endpoints
# =============================================================================


CAPABILITIES_REF = f"/cloudapi/1.0.0/vdcs/{quote(VDC_URN, safe='')}/capabilities"


class TestCapabilities:
    @pytest.mark.asyncio
    async def test_nsxt_vdc(self, vdc, fake_transport):
        fake_transport.register(VERSIONS, versions_document("36.0"))
        fake_transport.register(
            CAPABILITIES_REF,
            {"values": [{"name": "networkProvider", "value": "NSX_T", "type": "String"}]},
        )

        assert await vdc.is_nsxt()
        assert not await vdc.is_nsxv()
        calls = [c for c in fake_transport.calls if c.reference == CAPABILITIES_REF]
        assert {c.api_version for c in calls} == {"32.0"}

    @pytest.mark.asyncio
    async def test_old_server(self, vdc, fake_transport):
        fake_transport.register(VERSIONS, versions_document("31.0"))

        with pytest.raises(UnsupportedEndpointError):
            await vdc.get_capabilities()

        assert not await vdc.is_nsxt()
        assert fake_transport.call_count("GET", CAPABILITIES_REF) == 0

    @pytest.mark.asyncio
    async def test_vdc_without_id(self, client):
        with pytest.raises(ValueError):
            await Vdc(client, {"name": "prod"}).get_capabilities()

    @pytest.mark.asyncio
    async def test_errors_read_as_not_nsxt(self, client, fake_transport):
        """A VDC without an ID cannot report its provider; the check reads False."""
        vdc = Vdc(client, {"name": "prod"})

        assert not await vdc.is_nsxt()
        assert not await vdc.is_nsxv()
        assert fake_transport.calls == []

    @pytest.mark.asyncio
    async def test_pre_release_server_version(self, vdc, fake_transport):
        fake_transport.register(VERSIONS, {"versionInfo": [{"version": "36.0-beta"}]})
        fake_transport.register(
            CAPABILITIES_REF, {"values": [{"name": "networkProvider", "value": "NSX_V"}]}
        )

        assert await vdc.is_nsxv()


# =============================================================================
# Compute policies
# =============================================================================


POLICY_URN = "urn:vcloud:vdcComputePolicy:99999999-1111-4111-8111-999999999999"
POLICIES_REF = "/cloudapi/1.0.0/vdcComputePolicies/"
ASSIGNED_REF = f"/cloudapi/1.0.0/vdcs/{quote(VDC_URN, safe='')}/computePolicies"


def policy_document(name="small", **extra):
    document = {"id": POLICY_URN, "name": name, "cpuCount": 2, "memory": 2048, "isSizingOnly": True}
    document.update(extra)
    return document


class TestComputePolicies:
    @pytest.mark.asyncio
    async def test_policy_by_id(self, org, fake_transport):
        reference = f"/cloudapi/1.0.0/vdcComputePolicies/{quote(POLICY_URN, safe='')}"
        fake_transport.register(VERSIONS, versions_document("36.0"))
        fake_transport.register(reference, policy_document())

        policy = await org.get_vdc_compute_policy_by_id(POLICY_URN)

        assert policy.name == "small"
        assert policy.cpu_count == 2
        assert policy.is_sizing_only
        assert fake_transport.calls[-1].api_version == "32.0"

    @pytest.mark.asyncio
    async def test_empty_policy_id(self, org, fake_transport):
        fake_transport.register(VERSIONS, versions_document("36.0"))

        with pytest.raises(ValueError):
            await org.get_vdc_compute_policy_by_id("")

    @pytest.mark.asyncio
    async def test_old_server_is_rejected_before_any_read(self, org, fake_transport):
        fake_transport.register(VERSIONS, versions_document("31.0"))

        with pytest.raises(UnsupportedEndpointError):
            await org.get_all_vdc_compute_policies()

        assert [c.reference for c in fake_transport.calls] == [VERSIONS]

    @pytest.mark.asyncio
    async def test_all_policies_with_filter(self, org, fake_transport):
        reference = f"{POLICIES_REF}?filter=name%3D%3Dsmall"
        fake_transport.register(VERSIONS, versions_document("36.0"))
        fake_transport.register(reference, {"values": [policy_document()]})

        policies = await org.get_all_vdc_compute_policies({"filter": "name==small"})

        assert [p.id for p in policies] == [POLICY_URN]

    @pytest.mark.asyncio
    async def test_assigned_policies(self, vdc, fake_transport):
        fake_transport.register(VERSIONS, versions_document("36.0"))
        fake_transport.register(
            ASSIGNED_REF, {"values": [policy_document(), policy_document(name="large", id=None)]}
        )

        policies = await vdc.get_all_assigned_vdc_compute_policies()

        assert [p.name for p in policies] == ["small", "large"]
        assert fake_transport.calls[-1].api_version == "33.0"
