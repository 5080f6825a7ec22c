# ============================================================================
# SCHEMA QUERY SERVICE
# ============================================================================
# STATUS: Business logic - Catalog assembly and on-demand metadata queries
# PURPOSE: Issue the catalog SELECTs and assemble variables with their dimensions
# EXPORTS: SchemaQueryService
# DEPENDENCIES: infrastructure.query_gateway, infrastructure.sql_builder, core.decoders
# ============================================================================
"""
Schema Query Service.

Builds the variable catalog of one data source from three dependent queries:

    1. SELECT id, name, unit, description FROM variable
    2. SELECT id, name, size, description, value_labels FROM dimension
    3. SELECT variable, dimension FROM variable_dimension

and attaches each dimension to the variables that reference it. The data
source is treated as read-only and consistent for the duration; there is
no transaction around the three queries.

Also issues uncached on-demand queries:
    - locations (geometry / metadata decoded from JSON text)
    - MAX/MIN of value for one variable (NaN when there is no data)

Usage:
    service = SchemaQueryService(gateway)
    catalog = await service.build_variable_catalog("rivers")
    extent = await service.query_min_max("rivers", catalog[0].id)
"""

from typing import Dict, List, Optional

from core.decoders import (
    VARIABLE_DECODER,
    DIMENSION_DECODER,
    LOCATION_DECODER,
    VARIABLE_DIMENSION_DECODER,
    VariableDimensionLink,
    coerce_number,
)
from core.models.catalog import Dimension, Location, Variable
from core.models.results import MinMax, QueryResult
from infrastructure.query_gateway import QueryGateway
from infrastructure.sql_builder import CatalogStatements
from util_logger import LoggerFactory, ComponentType, log_exceptions

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "SchemaQueryService")


class SchemaQueryService:
    """
    Catalog and aggregate queries against one gateway.

    The gateway may be None (host has not provided a query capability);
    on-demand queries then return None. Building a catalog without a
    gateway is the metadata cache's job to prevent.
    """

    def __init__(self, gateway: Optional[QueryGateway] = None):
        self.gateway = gateway

    async def _query(self, data_source: str, statement: str) -> Optional[QueryResult]:
        logger.debug(f"Query [{data_source}]: {statement}")
        result = await self.gateway.query_data(data_source, statement)
        if result is not None:
            logger.debug(f"Query [{data_source}] returned {len(result.rows)} rows")
        return result

    # =========================================================================
    # CATALOG QUERIES
    # =========================================================================

    async def query_variables(self, data_source: str) -> Optional[List[Variable]]:
        """Variables of a data source; None when the gateway has no result."""
        result = await self._query(data_source, CatalogStatements.variables())
        if result is None:
            return None
        return VARIABLE_DECODER.decode(result)

    async def query_dimensions(self, data_source: str) -> List[Dimension]:
        result = await self._query(data_source, CatalogStatements.dimensions())
        return DIMENSION_DECODER.decode(result)

    async def query_variable_dimensions(self, data_source: str) -> List[VariableDimensionLink]:
        result = await self._query(data_source, CatalogStatements.variable_dimensions())
        return VARIABLE_DIMENSION_DECODER.decode(result)

    @staticmethod
    def attach_dimensions(
        variables: List[Variable],
        dimensions: List[Dimension],
        links: List[VariableDimensionLink]
    ) -> int:
        """
        Append each linked dimension to its variable's dimensions list.

        Links to an unknown variable id are dropped. Links to an unknown
        dimension id still create the variable's (empty) dimensions list
        but append nothing.

        Returns:
            Number of links dropped because the variable id is unknown
        """
        variables_by_id: Dict[int, Variable] = {}
        for variable in variables:
            variables_by_id.setdefault(variable.id, variable)
        dimensions_by_id: Dict[int, Dimension] = {}
        for dimension in dimensions:
            dimensions_by_id.setdefault(dimension.id, dimension)

        dropped = 0
        for link in links:
            variable = variables_by_id.get(link.variable_id)
            if variable is None:
                dropped += 1
                continue
            if variable.dimensions is None:
                variable.dimensions = []
            dimension = dimensions_by_id.get(link.dimension_id)
            if dimension is not None:
                variable.dimensions.append(dimension)
        return dropped

    @log_exceptions(ComponentType.SERVICE, "SchemaQueryService")
    async def build_variable_catalog(self, data_source: str) -> Optional[List[Variable]]:
        """
        Full catalog for a data source: every variable with its dimensions.

        Returns:
            The catalog (empty when the variable table is empty), or None
            when the gateway has no result for the variable query
            (data source unknown to it)

        Raises:
            QueryGatewayError: Gateway failed (propagated, not retried)
            RowDecodeError: A result could not be decoded
        """
        variables = await self.query_variables(data_source)
        if variables is None:
            logger.info(f"No variable table available for '{data_source}'; catalog not built")
            return None
        dimensions = await self.query_dimensions(data_source)
        links = await self.query_variable_dimensions(data_source)

        dropped = self.attach_dimensions(variables, dimensions, links)
        if dropped:
            logger.debug(
                f"Dropped {dropped} variable_dimension rows referencing unknown variables "
                f"in '{data_source}'"
            )

        logger.info(
            f"Built catalog for '{data_source}': {len(variables)} variables, "
            f"{len(dimensions)} dimensions, {len(links)} associations",
            extra={'custom_dimensions': {
                'data_source': data_source,
                'variable_count': len(variables),
                'dimension_count': len(dimensions),
                'association_count': len(links),
            }}
        )
        return variables

    # =========================================================================
    # ON-DEMAND QUERIES (NOT CACHED)
    # =========================================================================

    async def query_locations(self, data_source: Optional[str]) -> Optional[List[Location]]:
        """All locations of a data source, or None when nothing can be queried."""
        if not data_source or self.gateway is None:
            return None
        result = await self._query(data_source, CatalogStatements.locations())
        return LOCATION_DECODER.decode(result)

    async def query_min_max(
        self,
        data_source: Optional[str],
        variable_id: Optional[int]
    ) -> Optional[MinMax]:
        """
        MAX and MIN of value for one variable.

        Returns None for missing inputs. An empty or null aggregate (no
        matching rows, no result at all) yields NaN for both bounds.
        """
        if not data_source or variable_id is None or self.gateway is None:
            return None
        result = await self._query(data_source, CatalogStatements.min_max(variable_id))
        row = result.first_row() if result is not None else None
        row = row or []
        max_value = row[0] if len(row) > 0 else None
        min_value = row[1] if len(row) > 1 else None
        return MinMax(max=coerce_number(max_value), min=coerce_number(min_value))
