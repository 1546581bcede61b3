"""
Client context for vcdkit.

VcdClient bundles one session with the core modules bound to it. It is an
ordinary value handed to entity code; nothing in vcdkit keeps a global one.
"""

import logging
from dataclasses import replace
from typing import Dict, Optional

from vcdkit.config.provider import ClientConfig, ConfigProvider, RetryConfig, TaskConfig
from vcdkit.modules.capability import CapabilityModule
from vcdkit.modules.entities import Org, Vdc
from vcdkit.modules.resolver import ResolverModule
from vcdkit.modules.retry import (
    EDGE_GATEWAY_READ,
    TRANSIENT_READ_POLICIES,
    RetryPolicy,
    get_retry_policy,
)
from vcdkit.modules.session import VcdSession
from vcdkit.modules.task import DEFAULT_POLL_INTERVAL, TaskModule
from vcdkit.modules.transport import HttpxTransport, Transport

logger = logging.getLogger("vcdkit.client")


class VcdClient:
    """Session plus the task, capability, resolver and retry modules bound to it."""

    def __init__(
        self,
        session: VcdSession,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        task_timeout: Optional[float] = None,
        resolver: Optional[ResolverModule] = None,
        retry_policies: Optional[Dict[str, RetryPolicy]] = None,
    ):
        self.session = session
        self.tasks = TaskModule(session.transport, poll_interval=poll_interval, timeout=task_timeout)
        self.capabilities = CapabilityModule(session)
        self.resolver = resolver or ResolverModule()
        self.retry_policies = dict(TRANSIENT_READ_POLICIES if retry_policies is None else retry_policies)

    @classmethod
    def from_transport(cls, transport: Transport, is_sys_admin: bool = False, **kwargs) -> "VcdClient":
        return cls(VcdSession(transport, is_sys_admin=is_sys_admin), **kwargs)

    @classmethod
    def from_config(
        cls,
        client_config: ClientConfig,
        task_config: Optional[TaskConfig] = None,
        retry_config: Optional[RetryConfig] = None,
    ) -> "VcdClient":
        """Build a client with an httpx transport from configuration objects."""
        transport = HttpxTransport(
            client_config.url,
            token=client_config.token,
            verify_ssl=client_config.verify_ssl,
            timeout=client_config.timeout,
            default_api_version=client_config.api_version,
        )
        kwargs = {}
        if task_config is not None:
            kwargs["poll_interval"] = task_config.poll_interval
            kwargs["task_timeout"] = task_config.timeout
        if retry_config is not None:
            policies = dict(TRANSIENT_READ_POLICIES)
            policies[EDGE_GATEWAY_READ.name] = replace(
                EDGE_GATEWAY_READ,
                max_attempts=retry_config.edge_gateway_max_attempts,
                backoff=retry_config.edge_gateway_backoff,
            )
            kwargs["retry_policies"] = policies

        logger.info(f"vcdkit client configured for {client_config.url}")
        return cls(
            VcdSession(transport, is_sys_admin=client_config.is_sys_admin),
            **kwargs,
        )

    @classmethod
    def from_provider(cls, provider: ConfigProvider) -> "VcdClient":
        return cls.from_config(
            provider.get_client_config(),
            provider.get_task_config(),
            provider.get_retry_config(),
        )

    def retry_policy(self, kind: str) -> RetryPolicy:
        """Retry policy for an operation kind; NO_RETRY when not allow-listed."""
        return get_retry_policy(kind, self.retry_policies)

    async def get_org_by_href(self, href: str) -> Org:
        document = await self.session.transport.fetch(href)
        return Org(self, document)

    async def get_vdc_by_href(self, href: str) -> Vdc:
        document = await self.session.transport.fetch(href)
        return Vdc(self, document)

    async def aclose(self) -> None:
        await self.session.transport.aclose()

    async def __aenter__(self) -> "VcdClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
