"""
Error taxonomy for vcdkit.

Every failure the core can surface is a subclass of VcdError. Errors are
raised to the immediate caller; nothing in the core logs and swallows them.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from vcdkit.modules.api.models import Task


class VcdError(Exception):
    """Base class for all vcdkit errors."""


class EntityNotFoundError(VcdError):
    """A resolution strategy found zero matches."""

    def __init__(self, identifier: str = "", kind: Optional[str] = None):
        self.identifier = identifier
        self.kind = kind
        what = f"{kind} " if kind else ""
        super().__init__(f"[ENF] {what}entity not found: {identifier!r}")


class AmbiguousEntityError(VcdError):
    """More than one entity matched a lookup that requires exactly one."""

    def __init__(self, identifier: str, count: int, kind: Optional[str] = None):
        self.identifier = identifier
        self.count = count
        self.kind = kind
        what = f"{kind} " if kind else ""
        super().__init__(
            f"more than one {what}entity found with name {identifier!r} ({count} matches)"
        )


class TaskFailedError(VcdError):
    """A task reached the error or aborted terminal state."""

    def __init__(self, message: str, task: Optional["Task"] = None):
        self.message = message
        self.task = task
        super().__init__(message)


class TaskWaitCancelledError(VcdError):
    """The caller's cancel signal fired before the task finished."""

    def __init__(self, task: Optional["Task"] = None):
        self.task = task
        href = task.href if task is not None else "unknown task"
        super().__init__(f"wait for {href} cancelled before completion")


class TaskTimeoutError(VcdError):
    """The optional wait deadline elapsed before the task finished."""

    def __init__(self, task: Optional["Task"], timeout: float):
        self.task = task
        self.timeout = timeout
        href = task.href if task is not None else "unknown task"
        super().__init__(f"task {href} did not finish within {timeout}s")


class InvalidVersionError(VcdError, ValueError):
    """An API version string could not be parsed."""

    def __init__(self, version: str):
        self.version = version
        super().__init__(f"invalid API version: {version!r}")


class UnknownEndpointError(VcdError):
    """No minimum API version is registered for the endpoint."""

    def __init__(self, endpoint: str):
        self.endpoint = endpoint
        super().__init__(f"minimum API version for endpoint {endpoint!r} is not defined")


class UnsupportedEndpointError(VcdError):
    """The connected server is older than the endpoint requires."""

    def __init__(self, endpoint: str, required_version: str, server_version: str):
        self.endpoint = endpoint
        self.required_version = required_version
        self.server_version = server_version
        super().__init__(
            f"endpoint {endpoint!r} requires API version to support at least "
            f"{required_version!r}. Maximum supported version in this instance: "
            f"{server_version!r}"
        )


class TransportError(VcdError):
    """Opaque pass-through of a transport failure."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        reference: Optional[str] = None,
        major_error_code: Optional[int] = None,
        minor_error_code: Optional[str] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.reference = reference
        self.major_error_code = major_error_code
        self.minor_error_code = minor_error_code
        super().__init__(message)

    @property
    def is_server_error(self) -> bool:
        return self.status_code is not None and self.status_code >= 500

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404
