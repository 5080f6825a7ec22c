# ============================================================================
# CONTEXT RESOLVER
# ============================================================================
# STATUS: Business logic - Effective data source / variable / color scheme
# PURPOSE: Layer per-consumer overrides over the ambient shared selection
# EXPORTS: ContextResolver, build_context_resolver, lookup_color_scheme
# DEPENDENCIES: services.metadata_cache, services.schema_query, infrastructure
# ============================================================================
"""
Context Resolver.

Answers "which data source, which variable, which color scheme apply right
now" for one consumer (legend, map layer). Every answer is built from an
ordered list of strategies; the first strategy that yields a value wins:

    data source:   override.data_source
                   -> shared state currentDataSource

    variable:      override.variable_name looked up by name in the catalog
                   -> shared state currentVariableId looked up by id

    color scheme:  table[data_source][variable.name]
                   -> table[data_source][""]
                   -> table[""]

Missing inputs never raise: each resolution returns None and dependent
steps are skipped. Overrides are authored with names, the shared state
carries ids, so a pinned consumer can still inherit source-level or global
color defaults.

Usage:
    resolver = build_context_resolver(host_states, query_data_delegate)

    data_source = await resolver.resolve_data_source(data_from)
    variable = await resolver.resolve_variable(data_source, data_from)
    scheme = await resolver.resolve_color_scheme(
        data_source, variable, data_from, color_scheme_table
    )
"""

from collections.abc import Mapping
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple, Union

from config import AppConfig, get_config
from core.models.catalog import Location, Variable
from core.models.results import DataContext, MinMax
from core.models.selection import (
    ColorSchemeDefinition,
    ColorSchemeTable,
    DataFrom,
    DEFAULT_KEY,
)
from exceptions import ContractViolationError
from infrastructure.query_gateway import CallableQueryGateway, QueryGateway
from infrastructure.shared_state import SharedStateStore
from services.metadata_cache import MetadataCache
from services.schema_query import SchemaQueryService
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.RESOLVER, "ContextResolver")


Strategy = Tuple[str, Callable[[], Awaitable[Any]]]


async def _first_resolved(subject: str, strategies: Sequence[Strategy]) -> Any:
    """Run strategies in order, return the first non-None value."""
    for label, strategy in strategies:
        value = await strategy()
        if value is not None:
            logger.debug(f"{subject} resolved via {label}")
            return value
    logger.debug(f"{subject} unresolved")
    return None


def _coerce_color_scheme(value: Any) -> ColorSchemeDefinition:
    if isinstance(value, ColorSchemeDefinition):
        return value
    if isinstance(value, Mapping):
        return ColorSchemeDefinition.model_validate(dict(value))
    raise ContractViolationError(
        f"Color scheme entry must be a ColorSchemeDefinition or mapping, got {type(value).__name__}"
    )


def lookup_color_scheme(
    table: Optional[ColorSchemeTable],
    data_source: str,
    variable_name: str
) -> Optional[ColorSchemeDefinition]:
    """
    Three-tier color scheme lookup.

        table[data_source][variable_name] -> table[data_source][""] -> table[""]

    A missing key (or None value) at a tier falls through to the next.
    """
    if not table:
        return None
    source_table = table.get(data_source)
    if not isinstance(source_table, Mapping):
        source_table = {}

    tiers = (
        source_table.get(variable_name),
        source_table.get(DEFAULT_KEY),
        table.get(DEFAULT_KEY),
    )
    for entry in tiers:
        if entry is not None:
            return _coerce_color_scheme(entry)
    return None


def _as_data_from(override: Union[DataFrom, Dict[str, Any], None]) -> Optional[DataFrom]:
    if override is None or isinstance(override, DataFrom):
        return override
    if isinstance(override, Mapping):
        return DataFrom.model_validate(dict(override))
    raise ContractViolationError(
        f"override must be a DataFrom or mapping, got {type(override).__name__}"
    )


class ContextResolver:
    """
    Resolution facade handed to rendering components.

    Args:
        state: Shared state store (ambient selection + catalog cache)
        cache: Metadata cache over the same store
        schema: Schema query service (defaults to the cache's)
    """

    def __init__(
        self,
        state: SharedStateStore,
        cache: MetadataCache,
        schema: Optional[SchemaQueryService] = None
    ):
        self.state = state
        self.cache = cache
        self.schema = schema or cache.schema or SchemaQueryService()

    def _ambient(self, state: Union[SharedStateStore, Mapping, None]) -> SharedStateStore:
        """Store to read ambient selections from; a host dict is wrapped, not copied."""
        if state is None:
            return self.state
        if isinstance(state, SharedStateStore):
            return state
        if isinstance(state, Mapping):
            return SharedStateStore(state, self.state.config)
        raise ContractViolationError(
            f"state must be a SharedStateStore or mapping, got {type(state).__name__}"
        )

    # =========================================================================
    # CATALOG LOOKUPS
    # =========================================================================

    async def get_variables(self, data_source: Optional[str]) -> Optional[List[Variable]]:
        return await self.cache.get_variables(data_source)

    async def find_variable_by_name(
        self,
        data_source: Optional[str],
        variable_name: Optional[str]
    ) -> Optional[Variable]:
        if not data_source or not variable_name:
            return None
        variables = await self.cache.get_variables(data_source)
        return next((v for v in variables or [] if v.name == variable_name), None)

    async def find_variable_by_id(
        self,
        data_source: Optional[str],
        variable_id: Optional[int]
    ) -> Optional[Variable]:
        if not data_source or variable_id is None:
            return None
        variables = await self.cache.get_variables(data_source)
        return next((v for v in variables or [] if v.id == variable_id), None)

    # =========================================================================
    # RESOLUTION
    # =========================================================================

    async def resolve_data_source(
        self,
        override: Union[DataFrom, Dict[str, Any], None] = None,
        state: Union[SharedStateStore, Mapping, None] = None
    ) -> Optional[str]:
        """Override's data source, else the ambient currentDataSource."""
        override = _as_data_from(override)
        ambient = self._ambient(state)

        async def from_override():
            return override.data_source if override else None

        async def from_ambient():
            return ambient.current_data_source

        return await _first_resolved("data source", [
            ("override", from_override),
            ("ambient state", from_ambient),
        ])

    async def resolve_variable(
        self,
        data_source: Optional[str] = None,
        override: Union[DataFrom, Dict[str, Any], None] = None,
        state: Union[SharedStateStore, Mapping, None] = None
    ) -> Optional[Variable]:
        """
        Override's variable name looked up by name, else the ambient id.

        A name match is returned without consulting the ambient id.
        """
        override = _as_data_from(override)
        ambient = self._ambient(state)
        if data_source is None:
            data_source = await self.resolve_data_source(override, ambient)

        async def by_override_name():
            name = override.variable_name if override else None
            return await self.find_variable_by_name(data_source, name)

        async def by_ambient_id():
            return await self.find_variable_by_id(data_source, ambient.current_variable_id)

        return await _first_resolved("variable", [
            ("override name", by_override_name),
            ("ambient id", by_ambient_id),
        ])

    async def resolve_color_scheme(
        self,
        data_source: Optional[str] = None,
        variable: Optional[Variable] = None,
        override: Union[DataFrom, Dict[str, Any], None] = None,
        scheme_table: Optional[ColorSchemeTable] = None,
        state: Union[SharedStateStore, Mapping, None] = None
    ) -> Optional[ColorSchemeDefinition]:
        """
        Color scheme for the resolved data source and variable.

        None when the data source or variable cannot be resolved, or no
        tier of the table has an entry.
        """
        override = _as_data_from(override)
        ambient = self._ambient(state)
        if data_source is None:
            data_source = await self.resolve_data_source(override, ambient)
        if variable is None:
            variable = await self.resolve_variable(data_source, override, ambient)
        if not data_source or variable is None:
            return None
        return lookup_color_scheme(scheme_table, data_source, variable.name)

    async def resolve_data_context(
        self,
        override: Union[DataFrom, Dict[str, Any], None] = None,
        scheme_table: Optional[ColorSchemeTable] = None,
        state: Union[SharedStateStore, Mapping, None] = None
    ) -> DataContext:
        """
        Data source, variable, color scheme and value range in one call.

        The range is only queried when both data source and variable resolve.
        """
        override = _as_data_from(override)
        ambient = self._ambient(state)
        data_source = await self.resolve_data_source(override, ambient)
        variable = await self.resolve_variable(data_source, override, ambient)
        color_scheme = await self.resolve_color_scheme(
            data_source, variable, override, scheme_table, ambient
        )

        extent = None
        if data_source and variable is not None:
            extent = await self.query_min_max(data_source, variable.id)

        return DataContext(
            data_source=data_source,
            variable=variable,
            color_scheme=color_scheme,
            min=extent.min if extent else None,
            max=extent.max if extent else None,
        )

    # =========================================================================
    # ON-DEMAND QUERIES
    # =========================================================================

    async def query_locations(self, data_source: Optional[str]) -> Optional[List[Location]]:
        return await self.schema.query_locations(data_source)

    async def query_min_max(
        self,
        data_source: Optional[str],
        variable_id: Optional[int]
    ) -> Optional[MinMax]:
        return await self.schema.query_min_max(data_source, variable_id)


def build_context_resolver(
    states: Union[SharedStateStore, Dict[str, Any], None] = None,
    gateway: Union[QueryGateway, Callable[[str, str], Any], None] = None,
    config: Optional[AppConfig] = None
) -> ContextResolver:
    """
    Wire store, gateway, schema service, cache and resolver together.

    Args:
        states: Host shared state dict (or a SharedStateStore); new dict when None
        gateway: QueryGateway, a host query callable, or None
        config: Configuration (singleton when None)

    Returns:
        ContextResolver sharing one MetadataCache
    """
    config = config or get_config()
    if isinstance(states, SharedStateStore):
        store = states
    else:
        store = SharedStateStore(states, config.state)

    if gateway is not None and not isinstance(gateway, QueryGateway):
        gateway = CallableQueryGateway(gateway)

    schema = SchemaQueryService(gateway)
    cache = MetadataCache(store, schema, single_flight=config.state.single_flight)
    logger.debug(
        f"Context resolver wired (namespace={store.config.namespace}, "
        f"gateway={type(gateway).__name__ if gateway else None}, "
        f"single_flight={cache.single_flight})"
    )
    return ContextResolver(store, cache, schema)
