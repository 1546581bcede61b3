"""
Shared pytest fixtures for vcdkit tests.

This module provides common fixtures including:
- FakeTransport: scripted transport responses with call history
- Session and client fixtures wired to the fake transport
- Document builders for tasks and versions
"""

import os
import sys
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from vcdkit.client import VcdClient
from vcdkit.modules.session import VcdSession


# =============================================================================
# Transport Mocking Infrastructure
# =============================================================================

Response = Union[Dict[str, Any], Exception]


@dataclass
class TransportCall:
    """Record of a transport call made during testing."""
    method: str
    reference: str
    body: Any = None
    api_version: Optional[str] = None


class FakeTransport:
    """
    Transport double with per-reference scripted responses.

    Responses registered for a reference are consumed in order; the last one
    repeats once the script runs out. Exceptions in a script are raised.

    Usage:
        def test_poll(fake_transport):
            fake_transport.register("/api/task/1", running, running, success)
            ...
            assert fake_transport.call_count("GET", "/api/task/1") == 3
    """

    def __init__(self):
        self._scripts: Dict[tuple, List[Response]] = {}
        self.calls: List[TransportCall] = []
        self.closed = False

    def register(self, reference: str, *responses: Response, method: str = "GET") -> "FakeTransport":
        self._scripts[(method, reference)] = list(responses)
        return self

    def _respond(self, method: str, reference: str) -> Dict[str, Any]:
        script = self._scripts.get((method, reference))
        if not script:
            raise AssertionError(f"no response registered for {method} {reference}")
        response = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(response, Exception):
            raise response
        return response

    async def fetch(self, reference: str, api_version: Optional[str] = None) -> Dict[str, Any]:
        self.calls.append(TransportCall("GET", reference, api_version=api_version))
        return self._respond("GET", reference)

    async def post(self, reference, body, content_type=None, api_version=None):
        self.calls.append(TransportCall("POST", reference, body=body, api_version=api_version))
        return self._respond("POST", reference)

    async def put(self, reference, body, content_type=None, api_version=None):
        self.calls.append(TransportCall("PUT", reference, body=body, api_version=api_version))
        return self._respond("PUT", reference)

    async def delete(self, reference, api_version=None):
        self.calls.append(TransportCall("DELETE", reference, api_version=api_version))
        return self._respond("DELETE", reference)

    async def aclose(self) -> None:
        self.closed = True

    def call_count(self, method: str, reference: str) -> int:
        return sum(1 for c in self.calls if c.method == method and c.reference == reference)


# =============================================================================
# Document builders
# =============================================================================

TASK_HREF = "https://vcd.example.com/api/task/5a1b2c3d-0000-4000-8000-000000000001"


def task_document(status: str, href: str = TASK_HREF, **extra: Any) -> Dict[str, Any]:
    document = {
        "href": href,
        "id": "urn:vcloud:task:5a1b2c3d-0000-4000-8000-000000000001",
        "name": "task",
        "operationName": "vdcDeleteVdc",
        "status": status,
    }
    document.update(extra)
    return document


def versions_document(*versions: str, deprecated: tuple = ()) -> Dict[str, Any]:
    return {
        "versionInfo": [
            {"version": v, "deprecated": v in deprecated} for v in versions
        ]
    }


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def fake_transport():
    """Fresh FakeTransport for each test."""
    return FakeTransport()


@pytest.fixture
def session(fake_transport):
    """Session bound to the fake transport."""
    return VcdSession(fake_transport)


@pytest.fixture
def client(session):
    """Client with zero poll interval so waits run instantly."""
    return VcdClient(session, poll_interval=0)


# =============================================================================
# Test Markers Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: Integration tests requiring a live server"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that take a long time to run"
    )
