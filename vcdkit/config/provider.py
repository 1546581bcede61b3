"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass
class ClientConfig:
    """Connection configuration."""
    url: str
    token: Optional[str]
    verify_ssl: bool
    timeout: float
    api_version: Optional[str]
    is_sys_admin: bool


@dataclass
class TaskConfig:
    """Task polling configuration."""
    poll_interval: float
    timeout: Optional[float]


@dataclass
class RetryConfig:
    """Edge gateway read retry configuration."""
    edge_gateway_max_attempts: int
    edge_gateway_backoff: float


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_client_config(self) -> ClientConfig:
        """Get connection configuration."""
        ...

    def get_task_config(self) -> TaskConfig:
        """Get task polling configuration."""
        ...

    def get_retry_config(self) -> RetryConfig:
        """Get retry configuration."""
        ...


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_client_config(self) -> ClientConfig:
        """Get connection configuration from environment variables."""
        url = os.getenv("VCD_URL")
        if not url:
            raise ValueError(
                "VCD_URL environment variable is required. "
                "Example: https://vcd.example.com"
            )

        return ClientConfig(
            url=url.rstrip("/"),
            token=os.getenv("VCD_TOKEN") or None,
            verify_ssl=os.getenv("VCD_SSL_VERIFY", "true").lower() == "true",
            timeout=float(os.getenv("VCD_HTTP_TIMEOUT", "30")),
            api_version=os.getenv("VCD_API_VERSION") or None,
            is_sys_admin=os.getenv("VCD_SYS_ADMIN", "false").lower() == "true",
        )

    def get_task_config(self) -> TaskConfig:
        """Get task polling configuration from environment variables."""
        timeout = os.getenv("VCD_TASK_TIMEOUT")
        return TaskConfig(
            poll_interval=float(os.getenv("VCD_TASK_POLL_INTERVAL", "3")),
            timeout=float(timeout) if timeout else None,
        )

    def get_retry_config(self) -> RetryConfig:
        """Get retry configuration from environment variables."""
        return RetryConfig(
            edge_gateway_max_attempts=int(os.getenv("VCD_EDGE_GATEWAY_RETRY_ATTEMPTS", "4")),
            edge_gateway_backoff=float(os.getenv("VCD_EDGE_GATEWAY_RETRY_BACKOFF", "0.2")),
        )
