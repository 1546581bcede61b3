"""
Resolver Module - Black Box Interface

Purpose: Resolve a caller-supplied name or ID to exactly one entity
Interface: resolve_by_name_or_id(), equal_ids(), looks_like_id()
Hidden: Identifier shape matching, dispatch

The resolver only dispatches. Strategies own matching and ambiguity checks.
"""

from .ids import equal_ids, extract_uuid, looks_like_id
from .resolver import ResolutionRequest, ResolverModule, resolve_by_name_or_id

__all__ = [
    "ResolverModule",
    "ResolutionRequest",
    "resolve_by_name_or_id",
    "equal_ids",
    "extract_uuid",
    "looks_like_id",
]
