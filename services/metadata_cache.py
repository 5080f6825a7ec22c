# ============================================================================
# METADATA CACHE
# ============================================================================
# STATUS: Business logic - Per data source variable catalog cache
# PURPOSE: Cache-aside catalog lookup backed by the shared state store
# EXPORTS: MetadataCache
# DEPENDENCIES: infrastructure.shared_state, services.schema_query
# ============================================================================
"""
Metadata Cache.

Variable catalogs are expensive to build (three queries) and do not change
during a session, so the first consumer that needs a data source's catalog
builds it and stores it in the shared state store, where every other
consumer finds it:

    shared_state["gwf-default.cache.availableVariablesByDataSource"]["rivers"]

Population is cache-aside and, by default, unguarded: two consumers that
ask for an uncached data source at the same time both run the queries and
the one that finishes last overwrites the other's (equivalent) result.
With single_flight enabled, concurrent callers on the same MetadataCache
await one shared build instead.

A cached catalog is complete and never refreshed implicitly. invalidate()
and clear() are the only ways to drop an entry.
"""

import asyncio
from typing import Dict, List, Optional

from config import get_config
from core.models.catalog import Variable
from infrastructure.shared_state import SharedStateStore
from services.schema_query import SchemaQueryService
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.CACHE, "MetadataCache")


class MetadataCache:
    """
    Variable catalog cache stored in shared state.

    Args:
        state: Shared state store holding the cache mapping
        schema: Schema query service used to build missing catalogs
        single_flight: Deduplicate concurrent builds (config default when None)
    """

    def __init__(
        self,
        state: SharedStateStore,
        schema: Optional[SchemaQueryService] = None,
        single_flight: Optional[bool] = None
    ):
        self.state = state
        self.schema = schema
        if single_flight is None:
            single_flight = get_config().state.single_flight
        self.single_flight = single_flight
        self._in_flight: Dict[str, "asyncio.Task[Optional[List[Variable]]]"] = {}

    @property
    def can_query(self) -> bool:
        return self.schema is not None and self.schema.gateway is not None

    def is_cached(self, data_source: str) -> bool:
        return self.state.cached_variables(data_source) is not None

    async def get_variables(self, data_source: Optional[str]) -> Optional[List[Variable]]:
        """
        Catalog for a data source, building and caching it on first access.

        Returns:
            The cached list (same object on every call once cached), or None
            when the data source is missing, no gateway is available, or the
            gateway returned no result for the data source (not cached)
        """
        if not data_source:
            return None

        cached = self.state.cached_variables(data_source)
        if cached is not None:
            logger.debug(f"Catalog cache hit for '{data_source}'")
            return cached

        if not self.can_query:
            logger.debug(f"Catalog cache miss for '{data_source}' but no query gateway available")
            return None

        logger.debug(f"Catalog cache miss for '{data_source}'")
        if self.single_flight:
            return await self._populate_single_flight(data_source)
        return await self._populate(data_source)

    async def _populate(self, data_source: str) -> Optional[List[Variable]]:
        variables = await self.schema.build_variable_catalog(data_source)
        if variables is None:
            # Unknown to the gateway (yet); leave the entry absent so the next call retries
            logger.debug(f"Nothing cached for '{data_source}': gateway returned no variable result")
            return None
        cache = self.state.variable_cache()
        if data_source in cache:
            # Another consumer finished first; last writer wins
            logger.debug(f"Overwriting catalog for '{data_source}' written by a concurrent build")
        cache[data_source] = variables
        logger.info(f"Cached catalog for '{data_source}' ({len(variables)} variables)")
        return variables

    async def _populate_single_flight(self, data_source: str) -> Optional[List[Variable]]:
        task = self._in_flight.get(data_source)
        if task is None:
            task = asyncio.ensure_future(self._populate(data_source))
            self._in_flight[data_source] = task
            task.add_done_callback(lambda done: self._forget(data_source, done))
        else:
            logger.debug(f"Joining in-flight catalog build for '{data_source}'")
        # A cancelled waiter must not cancel the build other callers await
        return await asyncio.shield(task)

    def _forget(self, data_source: str, task: "asyncio.Task[Optional[List[Variable]]]") -> None:
        if self._in_flight.get(data_source) is task:
            del self._in_flight[data_source]

    def invalidate(self, data_source: str) -> bool:
        """
        Drop one cached catalog.

        Returns:
            True if an entry was removed
        """
        cache = self.state.get(self.state.config.variable_cache_key)
        if not cache or data_source not in cache:
            return False
        del cache[data_source]
        logger.info(f"Invalidated catalog for '{data_source}'")
        return True

    def clear(self) -> None:
        """Drop every cached catalog (in place, so all holders see it)."""
        cache = self.state.get(self.state.config.variable_cache_key)
        if cache:
            cache.clear()
            logger.info("Cleared all cached catalogs")
