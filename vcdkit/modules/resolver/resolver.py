"""
Name-or-ID entity resolution.

Callers pass two strategies, one searching by display name and one by
identifier. The resolver picks exactly one of them using a single shared
shape predicate, runs it, and reports absence as EntityNotFoundError.
Ambiguity is detected by the strategies themselves and always propagates.
"""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from vcdkit.modules.errors import EntityNotFoundError

from .ids import looks_like_id

logger = logging.getLogger("vcdkit.resolver")

T = TypeVar("T")

Strategy = Callable[[str, bool], Awaitable[Optional[T]]]


@dataclass(frozen=True)
class ResolutionRequest(Generic[T]):
    """One name-or-ID lookup; lives only for the duration of the call."""

    identifier: str
    refresh: bool
    by_name: Strategy
    by_id: Strategy


class ResolverModule:
    """Dispatches name-or-ID lookups to the matching strategy."""

    def __init__(self, id_predicate: Callable[[str], bool] = looks_like_id):
        """
        Args:
            id_predicate: Decides whether an identifier is ID-shaped. Shared by
                every entity kind so both admin and tenant callers agree.
        """
        self.id_predicate = id_predicate

    async def resolve(self, request: ResolutionRequest[T]) -> T:
        if not request.identifier:
            raise ValueError("empty identifier")

        if self.id_predicate(request.identifier):
            strategy_name, strategy = "id", request.by_id
        else:
            strategy_name, strategy = "name", request.by_name

        logger.debug(f"Resolving {request.identifier!r} by {strategy_name}")
        entity = await strategy(request.identifier, request.refresh)
        if entity is None:
            raise EntityNotFoundError(request.identifier)
        return entity

    async def resolve_by_name_or_id(
        self,
        identifier: str,
        refresh: bool,
        by_name: Strategy,
        by_id: Strategy,
    ) -> T:
        """
        Resolve an identifier that may be a display name or an ID.

        Args:
            identifier: Non-empty name, URN, UUID or href
            refresh: Passed to the strategy; asks it to re-fetch parent listings
            by_name: async (name, refresh) -> entity
            by_id: async (id, refresh) -> entity

        Returns:
            The single resolved entity

        Raises:
            ValueError: identifier is empty
            EntityNotFoundError: the chosen strategy found nothing
            AmbiguousEntityError: raised by a strategy, propagated unchanged
            TransportError: raised by a strategy, propagated unchanged
        """
        return await self.resolve(
            ResolutionRequest(
                identifier=identifier, refresh=refresh, by_name=by_name, by_id=by_id
            )
        )


_default_resolver = ResolverModule()


async def resolve_by_name_or_id(
    identifier: str,
    refresh: bool,
    by_name: Strategy,
    by_id: Strategy,
) -> T:
    """Resolve with the default shape predicate."""
    return await _default_resolver.resolve_by_name_or_id(identifier, refresh, by_name, by_id)
