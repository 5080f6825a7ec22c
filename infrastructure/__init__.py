"""
Infrastructure Package - Lazy Loading Implementation.

Provides the query gateways, the shared state store, and the SQL statement
builder. Imports are deferred until first attribute access.

Exports:
    QueryGateway: Gateway interface
    CallableQueryGateway: Adapter for a host query callback
    DuckDBQueryGateway: DuckDB file backed gateway
    normalize_result: Raw gateway output -> QueryResult
    SharedStateStore: Typed view over the host's shared state dict
    StatementBuilder, Identifier, IntegerLiteral, CatalogStatements: SELECT composition
"""

from typing import TYPE_CHECKING

# For type checking only - doesn't actually import at runtime
if TYPE_CHECKING:
    from .query_gateway import QueryGateway as _QueryGateway
    from .query_gateway import CallableQueryGateway as _CallableQueryGateway
    from .query_gateway import DuckDBQueryGateway as _DuckDBQueryGateway
    from .shared_state import SharedStateStore as _SharedStateStore
    from .sql_builder import StatementBuilder as _StatementBuilder


_GATEWAY_EXPORTS = {"QueryGateway", "CallableQueryGateway", "DuckDBQueryGateway", "normalize_result"}
_SQL_EXPORTS = {"StatementBuilder", "Identifier", "IntegerLiteral", "CatalogStatements"}


def __getattr__(name: str):
    """
    Lazy import mechanism - only imports when actually accessed.
    """
    if name in _GATEWAY_EXPORTS:
        from . import query_gateway
        return getattr(query_gateway, name)
    elif name == "SharedStateStore":
        from .shared_state import SharedStateStore
        return SharedStateStore
    elif name in _SQL_EXPORTS:
        from . import sql_builder
        return getattr(sql_builder, name)
    raise AttributeError(f"module 'infrastructure' has no attribute '{name}'")


__all__ = sorted(_GATEWAY_EXPORTS | _SQL_EXPORTS | {"SharedStateStore"})
