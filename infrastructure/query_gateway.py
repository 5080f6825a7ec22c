# ============================================================================
# QUERY GATEWAY
# ============================================================================
# STATUS: Infrastructure - Tabular query execution against named data sources
# PURPOSE: Gateway contract + host callback adapter + DuckDB file gateway
# EXPORTS: QueryGateway, CallableQueryGateway, DuckDBQueryGateway, normalize_result
# DEPENDENCIES: duckdb, pydantic (QueryResult), util_logger
# ============================================================================
"""
Query Gateway.

The data layer never talks to storage directly. It issues SELECT text against
a named data source through a gateway and receives a tabular result:

    await gateway.query_data("rivers", "SELECT id, name FROM variable")
    # QueryResult(columns=["id", "name"], rows=[[1, "tempC"], ...])

Implementations:
    - CallableQueryGateway: wraps the host-supplied query callback. Accepts
      sync or async callables and the sql.js result shape
      ({"columns": [...], "values": [[...]]}).
    - DuckDBQueryGateway: serves data sources from DuckDB files, one file
      per data source, running queries in the default executor.

A gateway returns None when it has nothing to query (unknown data source).
Failures raise QueryGatewayError; malformed results raise
QueryResultShapeError. Neither is caught by the services layer.
"""

# ============================================================================
# IMPORTS - Top of file for fail-fast behavior
# ============================================================================

import asyncio
import inspect
import threading
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from pydantic import ValidationError

try:
    import duckdb
except ImportError:
    raise ImportError(
        "duckdb is required for DuckDBQueryGateway. "
        "Install with: pip install duckdb"
    )

from config.gateway_config import GatewayConfig
from core.models.results import QueryResult
from exceptions import (
    BusinessLogicError,
    ContractViolationError,
    QueryGatewayError,
    QueryResultShapeError,
)
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.GATEWAY, __name__)


QueryCallable = Callable[[str, str], Union[Any, Awaitable[Any]]]


def normalize_result(raw: Any) -> Optional[QueryResult]:
    """
    Coerce whatever a gateway produced into a QueryResult.

    Accepted shapes:
        None                                   -> None
        QueryResult                            -> unchanged
        {"columns": [...], "rows"|"values": [...]} (missing rows -> no rows)
        object with .columns and .rows/.values attributes

    Raises:
        QueryResultShapeError: Anything else, or rows not matching columns
    """
    if raw is None:
        return None
    if isinstance(raw, QueryResult):
        return raw

    if isinstance(raw, Mapping):
        columns = raw.get("columns")
        rows = raw.get("rows")
        if rows is None:
            rows = raw.get("values")
    elif hasattr(raw, "columns"):
        columns = getattr(raw, "columns")
        rows = getattr(raw, "rows", None)
        if rows is None:
            rows = getattr(raw, "values", None)
    else:
        raise QueryResultShapeError(
            f"Gateway returned {type(raw).__name__}, expected a tabular result"
        )

    if columns is None:
        raise QueryResultShapeError("Gateway result has no 'columns'")

    try:
        return QueryResult(
            columns=list(columns),
            rows=[list(row) for row in (rows or [])]
        )
    except (TypeError, ValidationError) as e:
        raise QueryResultShapeError(f"Malformed gateway result: {e}") from e


# ============================================================================
# GATEWAY INTERFACE
# ============================================================================

class QueryGateway(ABC):
    """
    Interface for tabular query execution.

    Enables dependency injection and testing/mocking of the host's query
    capability.
    """

    @abstractmethod
    async def query_data(self, data_source: str, query: str) -> Optional[QueryResult]:
        """Run one SELECT against a data source."""
        pass


# ============================================================================
# HOST CALLBACK ADAPTER
# ============================================================================

class CallableQueryGateway(QueryGateway):
    """
    Adapter for a host-supplied query callback.

    Example:
        async def query_data_delegate(data_source, sql):
            ...
        gateway = CallableQueryGateway(query_data_delegate)
    """

    def __init__(self, query_func: QueryCallable):
        if not callable(query_func):
            raise ContractViolationError(
                f"CallableQueryGateway requires a callable, got {type(query_func).__name__}"
            )
        self._query_func = query_func

    async def query_data(self, data_source: str, query: str) -> Optional[QueryResult]:
        try:
            raw = self._query_func(data_source, query)
            if inspect.isawaitable(raw):
                raw = await raw
        except BusinessLogicError:
            raise
        except Exception as e:
            logger.error(
                f"Host query failed for data source '{data_source}': {e}",
                extra={'custom_dimensions': {'data_source': data_source, 'sql': query}}
            )
            raise QueryGatewayError(
                f"Query against '{data_source}' failed: {e}",
                data_source=data_source,
                query=query
            ) from e
        return normalize_result(raw)


# ============================================================================
# DUCKDB GATEWAY
# ============================================================================

class DuckDBQueryGateway(QueryGateway):
    """
    Query gateway over DuckDB database files.

    Data sources are resolved through an explicit registry first, then
    through GatewayConfig.data_dir ("{data_dir}/{data_source}.duckdb").
    One connection is opened per data source on first use and reused; each
    query runs on its own cursor in the default executor.

    Thread Safety:
        - Connection registry guarded by a lock
        - Cursor per query (DuckDB connections are not shared across threads)
    """

    def __init__(
        self,
        config: Optional[GatewayConfig] = None,
        paths: Optional[Dict[str, Union[str, Path]]] = None
    ):
        self.config = config or GatewayConfig()
        self._paths: Dict[str, Path] = {
            name: Path(path) for name, path in (paths or {}).items()
        }
        self._connections: Dict[str, "duckdb.DuckDBPyConnection"] = {}
        self._lock = threading.Lock()
        logger.debug(
            f"DuckDBQueryGateway initialized - data_dir: {self.config.data_dir}, "
            f"registered: {sorted(self._paths)}"
        )

    @classmethod
    def from_config(cls, config: GatewayConfig) -> "DuckDBQueryGateway":
        return cls(config=config)

    def register(self, data_source: str, path: Union[str, Path]) -> None:
        """Map a data source id to a DuckDB file, replacing any open connection."""
        with self._lock:
            self._paths[data_source] = Path(path)
            conn = self._connections.pop(data_source, None)
        if conn is not None:
            conn.close()
        logger.info(f"Registered data source '{data_source}' -> {path}")

    def resolve_path(self, data_source: str) -> Optional[Path]:
        """File backing a data source, or None if unknown / missing on disk."""
        path = self._paths.get(data_source) or self.config.resolve_path(data_source)
        if path is None or not path.is_file():
            return None
        return path

    def _get_connection(self, data_source: str, path: Path) -> "duckdb.DuckDBPyConnection":
        with self._lock:
            conn = self._connections.get(data_source)
            if conn is None:
                conn = duckdb.connect(
                    str(path),
                    read_only=self.config.read_only,
                    config={'threads': self.config.threads}
                )
                self._connections[data_source] = conn
                logger.info(
                    f"Opened DuckDB data source '{data_source}' "
                    f"({path}, read_only={self.config.read_only})"
                )
            return conn

    def _execute(self, data_source: str, path: Path, query: str) -> QueryResult:
        cursor = self._get_connection(data_source, path).cursor()
        try:
            cursor.execute(query)
            columns = [column[0] for column in (cursor.description or [])]
            rows = [list(row) for row in cursor.fetchall()] if columns else []
        finally:
            cursor.close()
        return QueryResult(columns=columns, rows=rows)

    async def query_data(self, data_source: str, query: str) -> Optional[QueryResult]:
        if not data_source:
            return None
        path = self.resolve_path(data_source)
        if path is None:
            logger.warning(f"Unknown data source '{data_source}' - no DuckDB file registered or found")
            return None

        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, self._execute, data_source, path, query)
        except duckdb.Error as e:
            logger.error(
                f"DuckDB query failed for '{data_source}': {e}",
                extra={'custom_dimensions': {'data_source': data_source, 'sql': query}}
            )
            raise QueryGatewayError(
                f"Query against '{data_source}' failed: {e}",
                data_source=data_source,
                query=query
            ) from e

    def close(self) -> None:
        """Close every open connection."""
        with self._lock:
            connections = list(self._connections.items())
            self._connections.clear()
        for data_source, conn in connections:
            try:
                conn.close()
                logger.info(f"DuckDB connection closed for '{data_source}'")
            except duckdb.Error as e:
                logger.warning(f"Error closing connection for '{data_source}': {e}")
