"""
Errors Module - Black Box Interface

Purpose: Shared failure vocabulary for every vcdkit module
Interface: VcdError and its subclasses
Hidden: Message formatting

NotFound and Ambiguous are the normal outcomes of a lookup, not bugs.
"""

from .errors import (
    AmbiguousEntityError,
    EntityNotFoundError,
    InvalidVersionError,
    TaskFailedError,
    TaskTimeoutError,
    TaskWaitCancelledError,
    TransportError,
    UnknownEndpointError,
    UnsupportedEndpointError,
    VcdError,
)

__all__ = [
    "VcdError",
    "EntityNotFoundError",
    "AmbiguousEntityError",
    "TaskFailedError",
    "TaskWaitCancelledError",
    "TaskTimeoutError",
    "InvalidVersionError",
    "UnknownEndpointError",
    "UnsupportedEndpointError",
    "TransportError",
]
