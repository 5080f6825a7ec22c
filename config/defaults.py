"""
Configuration Defaults - Single source of truth for all default values.

Every default here is safe for any deployment. A host only needs to set
environment variables to change behaviour (for example to point the DuckDB
gateway at a directory of data source files).

Organization:
    - StateDefaults: Shared state key namespace and reserved key names
    - CatalogDefaults: Metadata cache behaviour
    - GatewayDefaults: DuckDB query gateway
    - AppDefaults: Logging and environment

Usage:
    from config.defaults import StateDefaults, parse_bool

    # In Pydantic Field definitions:
    namespace: str = Field(default=StateDefaults.NAMESPACE, ...)
"""


def parse_bool(value: str) -> bool:
    """Parse boolean from environment variable."""
    return str(value).strip().lower() in ("true", "1", "yes")


# =============================================================================
# SHARED STATE DEFAULTS
# =============================================================================

class StateDefaults:
    """
    Shared state key layout.

    Full key = "{NAMESPACE}.{KEY}", e.g. "gwf-default.currentDataSource".
    The namespace matches the one the gwf-vis host uses for its default
    plugins, so state written by the host is visible here unchanged.
    """

    NAMESPACE = "gwf-default"

    # Consumed (written by the host when the user picks a data source/variable)
    CURRENT_DATA_SOURCE_KEY = "currentDataSource"
    CURRENT_VARIABLE_ID_KEY = "currentVariableId"

    # Produced (metadata cache, data source -> list of variables)
    VARIABLE_CACHE_KEY = "cache.availableVariablesByDataSource"


# =============================================================================
# CATALOG / CACHE DEFAULTS
# =============================================================================

class CatalogDefaults:
    """
    Metadata cache defaults.

    SINGLE_FLIGHT off keeps the cache-aside behaviour of the host plugins:
    concurrent first accesses may each run the catalog queries and the last
    one to finish wins.
    """

    SINGLE_FLIGHT = False


# =============================================================================
# QUERY GATEWAY DEFAULTS (DuckDB)
# =============================================================================

class GatewayDefaults:
    """
    DuckDB query gateway defaults.

    Data sources are resolved to "{DATA_DIR}/{data_source}{FILE_SUFFIX}".
    """

    DATA_DIR = None
    FILE_SUFFIX = ".duckdb"
    READ_ONLY = True
    THREADS = 2
    MIN_THREADS = 1
    MAX_THREADS = 16


# =============================================================================
# APPLICATION DEFAULTS
# =============================================================================

class AppDefaults:
    """
    Application-wide defaults.

    Controls environment naming. Log levels are read by util_logger
    from DEBUG_LOGGING and LOG_LEVEL directly.
    """

    ENVIRONMENT = "dev"
