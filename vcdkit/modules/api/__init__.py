"""
API Module - Black Box Interface

Purpose: Typed documents exchanged with the transport
Interface: Task, Reference, Link, TaskError, VersionInfo, VdcCapability,
           VdcComputePolicy
Hidden: Field aliasing and validation

Entity documents beyond these stay as plain dictionaries owned by callers.
"""

from .models import (
    FAILED_STATUSES,
    TERMINAL_STATUSES,
    Link,
    Reference,
    Task,
    TaskError,
    TaskStatus,
    VdcCapability,
    VdcComputePolicy,
    VersionInfo,
    parse_links,
)

__all__ = [
    "Task",
    "TaskError",
    "TaskStatus",
    "TERMINAL_STATUSES",
    "FAILED_STATUSES",
    "Reference",
    "Link",
    "VersionInfo",
    "VdcCapability",
    "VdcComputePolicy",
    "parse_links",
]
