"""Transport interfaces following Black Box Design principles."""
from typing import Any, Dict, Optional, Protocol


class Transport(Protocol):
    """Protocol for the HTTP transport the core consumes."""

    async def fetch(self, reference: str, api_version: Optional[str] = None) -> Dict[str, Any]:
        """
        Retrieve the current representation of a reference.

        Raises:
            TransportError: on any HTTP or network failure
        """
        ...

    async def post(
        self,
        reference: str,
        body: Any,
        content_type: Optional[str] = None,
        api_version: Optional[str] = None,
    ) -> Dict[str, Any]:
        ...

    async def put(
        self,
        reference: str,
        body: Any,
        content_type: Optional[str] = None,
        api_version: Optional[str] = None,
    ) -> Dict[str, Any]:
        ...

    async def delete(self, reference: str, api_version: Optional[str] = None) -> Dict[str, Any]:
        ...

    async def aclose(self) -> None:
        ...
