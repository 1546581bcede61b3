"""
vcdkit shared data models.

These models define the documents exchanged with the transport. They are
frozen: every poll of a task yields a new snapshot instead of mutating an
old one.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

# Enums


class TaskStatus(str, Enum):
    """Task status labels reported by the server.

    The server treats this as an open enumeration; unknown labels are kept
    as plain strings on the Task and considered non-terminal.
    """

    QUEUED = "queued"
    PRE_RUNNING = "preRunning"
    RUNNING = "running"
    SUCCESS = "success"
    ERROR = "error"
    ABORTED = "aborted"


TERMINAL_STATUSES = frozenset(
    {TaskStatus.SUCCESS.value, TaskStatus.ERROR.value, TaskStatus.ABORTED.value}
)
FAILED_STATUSES = frozenset({TaskStatus.ERROR.value, TaskStatus.ABORTED.value})


class _Document(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


# Reference documents


class Reference(_Document):
    """Pointer to another entity."""

    href: str = ""
    id: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None


class Link(Reference):
    """Typed relation from one document to another."""

    rel: Optional[str] = None


# Task documents


class TaskError(_Document):
    """Error block attached to a failed task."""

    message: str = ""
    major_error_code: Optional[int] = Field(None, alias="majorErrorCode")
    minor_error_code: Optional[str] = Field(None, alias="minorErrorCode")


class Task(_Document):
    """One snapshot of a server-tracked asynchronous operation."""

    href: str
    id: Optional[str] = None
    name: Optional[str] = None
    operation: Optional[str] = None
    operation_name: Optional[str] = Field(None, alias="operationName")
    description: Optional[str] = None
    status: str = TaskStatus.QUEUED.value
    error: Optional[TaskError] = None
    owner: Optional[Reference] = None

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "Task":
        return cls.model_validate(document)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def is_success(self) -> bool:
        return self.status == TaskStatus.SUCCESS.value

    @property
    def is_failed(self) -> bool:
        return self.status in FAILED_STATUSES

    @property
    def failure_message(self) -> str:
        """Server-reported reason for a failed task, unmodified."""
        if self.error is not None and self.error.message:
            return self.error.message
        if self.description:
            return self.description
        return f"task {self.href} finished with status {self.status!r}"


# Version and capability documents


class VersionInfo(_Document):
    """One entry of the server's supported versions document."""

    version: str
    login_url: Optional[str] = Field(None, alias="loginUrl")
    deprecated: bool = False


class VdcCapability(_Document):
    """One capability reported for a VDC (for example networkProvider)."""

    name: str
    value: Any = None
    type: Optional[str] = None
    category: Optional[str] = None


# Compute policy documents


class VdcComputePolicy(_Document):
    """VM sizing policy as returned by the OpenAPI compute policy endpoints."""

    id: Optional[str] = None
    name: str = ""
    description: Optional[str] = None
    cpu_speed: Optional[int] = Field(None, alias="cpuSpeed")
    cpu_count: Optional[int] = Field(None, alias="cpuCount")
    cores_per_socket: Optional[int] = Field(None, alias="coresPerSocket")
    memory: Optional[int] = None
    cpu_reservation_guaranteed: Optional[float] = Field(None, alias="cpuReservationGuaranteed")
    memory_reservation_guaranteed: Optional[float] = Field(
        None, alias="memoryReservationGuaranteed"
    )
    is_sizing_only: bool = Field(False, alias="isSizingOnly")


def parse_links(document: Dict[str, Any]) -> List[Link]:
    """Return the links of a raw document as Link models."""
    return [Link.model_validate(item) for item in document.get("link", []) or []]
