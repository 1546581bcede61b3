"""
Transport Module - Black Box Interface

Purpose: Issue HTTP calls and return decoded documents
Interface: fetch(), post(), put(), delete(), aclose()
Hidden: httpx client, headers, error document parsing

Any object satisfying the Transport protocol can replace HttpxTransport.
"""

from .interfaces import Transport
from .transport import HttpxTransport

__all__ = ["Transport", "HttpxTransport"]
