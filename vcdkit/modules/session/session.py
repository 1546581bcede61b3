"""
Connected-server session.

The session is the explicit context value handed to every core operation.
It owns the transport, the caller's privilege flag and the server version,
which is probed lazily and at most once per connection.
"""

import asyncio
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from vcdkit.modules.api.models import VersionInfo
from vcdkit.modules.errors import InvalidVersionError, TransportError
from vcdkit.modules.transport import Transport

logger = logging.getLogger("vcdkit.session")

OPENAPI_ROOT = "cloudapi"

_VERSION_PATTERN = re.compile(r"^(\d+(?:\.\d+)*)(?:-([0-9A-Za-z.-]+))?$")


def parse_version(version: str) -> Tuple[Tuple[int, ...], str]:
    """
    Split "37.0.0-alpha-1" into ((37, 0, 0), "alpha-1").

    The second element is empty for a release version.

    Raises:
        InvalidVersionError: if the string is not a dotted version
    """
    match = _VERSION_PATTERN.match(version.strip())
    if not match:
        raise InvalidVersionError(version)
    numbers = tuple(int(part) for part in match.group(1).split("."))
    return numbers, match.group(2) or ""


def compare_versions(left: str, right: str) -> int:
    """Return -1, 0 or 1 as left is older, equal or newer than right."""
    a, a_pre = parse_version(left)
    b, b_pre = parse_version(right)
    width = max(len(a), len(b))
    a = a + (0,) * (width - len(a))
    b = b + (0,) * (width - len(b))
    if a != b:
        return (a > b) - (a < b)
    # A pre-release sorts before the release it leads up to.
    if a_pre == b_pre:
        return 0
    if not a_pre:
        return 1
    if not b_pre:
        return -1
    return (a_pre > b_pre) - (a_pre < b_pre)


class VcdSession:
    """Explicit per-connection context shared read-only by all operations."""

    def __init__(
        self,
        transport: Transport,
        is_sys_admin: bool = False,
        versions_href: str = "/api/versions",
    ):
        """
        Initialize session.

        Args:
            transport: Transport bound to one server
            is_sys_admin: True when logged in as system administrator; callers
                use it to pick between the admin and tenant document shapes
            versions_href: Reference of the supported versions document
        """
        self.transport = transport
        self.is_sys_admin = is_sys_admin
        self.versions_href = versions_href
        self._server_version: Optional[str] = None
        self._version_lock = asyncio.Lock()

    async def server_version(self) -> str:
        """
        Highest non-deprecated API version supported by the server.

        The probe runs once; concurrent first callers wait on the same lock
        and reuse the cached value.
        """
        if self._server_version is not None:
            return self._server_version

        async with self._version_lock:
            if self._server_version is None:
                self._server_version = await self._probe_server_version()
            return self._server_version

    async def _probe_server_version(self) -> str:
        logger.debug(f"Probing supported API versions at {self.versions_href}")
        document = await self.transport.fetch(self.versions_href)
        versions = self._supported_versions(document)
        if not versions:
            raise TransportError(
                "server reported no supported API versions", reference=self.versions_href
            )

        highest = versions[0]
        for candidate in versions[1:]:
            if compare_versions(candidate, highest) > 0:
                highest = candidate

        logger.info(f"Connected server supports API version up to {highest}")
        return highest

    @staticmethod
    def _supported_versions(document: Dict[str, Any]) -> List[str]:
        entries = document.get("versionInfo") or []
        supported = []
        for entry in entries:
            info = VersionInfo.model_validate(entry)
            if info.deprecated:
                continue
            try:
                parse_version(info.version)
            except InvalidVersionError:
                logger.warning(f"Ignoring unparseable API version {info.version!r}")
                continue
            supported.append(info.version)
        return supported

    def reset(self) -> None:
        """Forget the cached server version, e.g. after reconnecting elsewhere."""
        self._server_version = None

    def build_openapi_endpoint(self, endpoint: str, *args: str) -> str:
        """
        Build the reference of an OpenAPI endpoint.

        Args:
            endpoint: Registry key such as "1.0.0/vdcs/%s/capabilities"
            args: Values substituted into %s placeholders; any left over are
                appended as path segments (e.g. an entity ID)
        """
        placeholders = endpoint.count("%s")
        path = endpoint % tuple(args[:placeholders]) if placeholders else endpoint
        extra = "/".join(args[placeholders:])
        if extra:
            path = path.rstrip("/") + "/" + extra
        return f"/{OPENAPI_ROOT}/{path}"
