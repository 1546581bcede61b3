"""Shared entity plumbing: document wrapper, media types and list helpers."""

from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional
from urllib.parse import urlencode

from vcdkit.modules.api.models import Link, Task, parse_links
from vcdkit.modules.errors import AmbiguousEntityError, EntityNotFoundError, VcdError

if TYPE_CHECKING:
    from vcdkit.client import VcdClient

MIME_CATALOG = "application/vnd.vmware.vcloud.catalog+xml"
MIME_VDC = "application/vnd.vmware.vcloud.vdc+xml"
MIME_VAPP = "application/vnd.vmware.vcloud.vApp+xml"
MIME_QUERY_RECORDS = "application/vnd.vmware.vcloud.query.records+xml"
MIME_CREATE_VM_PARAMS = "application/vnd.vmware.vcloud.CreateVmParams+xml"

QUERY_TYPE_VM = "vm"
QUERY_TYPE_ADMIN_VM = "adminVM"


class Entity:
    """A fetched document plus the client it came from."""

    kind = "entity"

    def __init__(self, client: "VcdClient", document: Dict[str, Any]):
        self.client = client
        self.document = document

    @property
    def name(self) -> str:
        return self.document.get("name", "")

    @property
    def id(self) -> str:
        return self.document.get("id", "")

    @property
    def href(self) -> str:
        return self.document.get("href", "")

    @property
    def links(self) -> List[Link]:
        return parse_links(self.document)

    def find_link(self, rel: str, media_type: Optional[str] = None) -> Optional[Link]:
        for link in self.links:
            if link.rel == rel and (media_type is None or link.type == media_type):
                return link
        return None

    async def refresh(self) -> None:
        """Re-fetch this entity's document."""
        if not self.href:
            raise ValueError(f"cannot refresh {self.kind} without href")
        self.document = await self.client.session.transport.fetch(self.href)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, href={self.href!r})"


class Catalog(Entity):
    kind = "catalog"


class VApp(Entity):
    kind = "vApp"

    @property
    def vm_references(self) -> List[Dict[str, Any]]:
        children = self.document.get("children") or {}
        return list(children.get("vm") or [])


class Vm(Entity):
    kind = "vm"


class EdgeGateway(Entity):
    kind = "edgeGateway"


class OrgVdcNetwork(Entity):
    kind = "orgVdcNetwork"


def single_match(matches: List[Any], identifier: str, kind: str) -> Any:
    """
    Exactly one element of matches.

    Raises:
        EntityNotFoundError: no matches
        AmbiguousEntityError: more than one match
    """
    if not matches:
        raise EntityNotFoundError(identifier, kind=kind)
    if len(matches) > 1:
        raise AmbiguousEntityError(identifier, len(matches), kind=kind)
    return matches[0]


def task_from_response(document: Dict[str, Any], action: str) -> Task:
    """Task returned by a mutating call; VcdError when the body carries none."""
    if not document or not document.get("href"):
        raise VcdError(f"server returned no task for {action}")
    return Task.from_document(document)


def with_query(reference: str, query_parameters: Optional[Mapping[str, Any]] = None) -> str:
    """Append URL-encoded query parameters to a reference."""
    if not query_parameters:
        return reference
    separator = "&" if "?" in reference else "?"
    return f"{reference}{separator}{urlencode(query_parameters, doseq=True)}"
