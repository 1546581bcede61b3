"""
httpx-backed JSON transport.

Maps the Transport protocol onto httpx.AsyncClient. Authentication is not
performed here: callers hand in a token they already obtained.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from vcdkit.modules.errors import TransportError

logger = logging.getLogger("vcdkit.transport")

JSON_MEDIA_TYPE = "application/*+json"


class HttpxTransport:
    """JSON transport over httpx.AsyncClient."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        verify_ssl: bool = True,
        timeout: float = 30.0,
        default_api_version: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize transport.

        Args:
            base_url: Root of the server, e.g. https://vcd.example.com
            token: Pre-obtained bearer token (optional)
            verify_ssl: Verify TLS certificates
            timeout: Per-request timeout in seconds
            default_api_version: Version sent when a call does not specify one
            client: Existing AsyncClient to reuse (tests inject one with a MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.default_api_version = default_api_version
        headers = {}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        if base_url.startswith("http://") and verify_ssl:
            logger.warning("Using HTTP without TLS - this should only be used for local development")

        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            verify=verify_ssl,
            timeout=timeout,
        )
        if client is not None and headers:
            self._client.headers.update(headers)

    async def fetch(self, reference: str, api_version: Optional[str] = None) -> Dict[str, Any]:
        return await self._request("GET", reference, api_version=api_version)

    async def post(
        self,
        reference: str,
        body: Any,
        content_type: Optional[str] = None,
        api_version: Optional[str] = None,
    ) -> Dict[str, Any]:
        return await self._request(
            "POST", reference, body=body, content_type=content_type, api_version=api_version
        )

    async def put(
        self,
        reference: str,
        body: Any,
        content_type: Optional[str] = None,
        api_version: Optional[str] = None,
    ) -> Dict[str, Any]:
        return await self._request(
            "PUT", reference, body=body, content_type=content_type, api_version=api_version
        )

    async def delete(self, reference: str, api_version: Optional[str] = None) -> Dict[str, Any]:
        return await self._request("DELETE", reference, api_version=api_version)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpxTransport":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def _url(self, reference: str) -> str:
        if reference.startswith(("http://", "https://")):
            return reference
        return f"{self.base_url}/{reference.lstrip('/')}"

    def _headers(self, api_version: Optional[str], content_type: Optional[str]) -> Dict[str, str]:
        version = api_version or self.default_api_version
        accept = f"{JSON_MEDIA_TYPE};version={version}" if version else JSON_MEDIA_TYPE
        headers = {"Accept": accept}
        if content_type:
            headers["Content-Type"] = content_type
        return headers

    async def _request(
        self,
        method: str,
        reference: str,
        body: Any = None,
        content_type: Optional[str] = None,
        api_version: Optional[str] = None,
    ) -> Dict[str, Any]:
        url = self._url(reference)
        headers = self._headers(api_version, content_type)
        logger.debug(f"{method} {url}")

        try:
            response = await self._client.request(
                method,
                url,
                headers=headers,
                json=body,
            )
        except httpx.RequestError as e:
            raise TransportError(
                f"error calling {method} {url}: {e}", reference=url
            ) from e

        if response.is_error:
            raise self._error_from_response(method, url, response)

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(
                f"invalid JSON in response to {method} {url}: {e}",
                status_code=response.status_code,
                reference=url,
            ) from e

    def _error_from_response(self, method: str, url: str, response: httpx.Response) -> TransportError:
        """Build a TransportError from the server's error document when present."""
        message = response.reason_phrase or "request failed"
        major = None
        minor = None
        try:
            document = response.json()
        except ValueError:
            document = None

        if isinstance(document, dict):
            message = document.get("message") or message
            major = document.get("majorErrorCode")
            minor = document.get("minorErrorCode")

        return TransportError(
            f"{method} {url} returned {response.status_code}: {message}",
            status_code=response.status_code,
            reference=url,
            major_error_code=major,
            minor_error_code=minor,
        )
