# ============================================================================
# EXCEPTIONS
# ============================================================================
# STATUS: Shared - used by infrastructure and services layers
# PURPOSE: Exception hierarchy separating contract violations from runtime failures
# EXPORTS: ContractViolationError, BusinessLogicError, QueryGatewayError,
#          QueryResultShapeError, RowDecodeError, ConfigurationError
# DEPENDENCIES: None (standard library only)
# ============================================================================

"""
Custom Exception Hierarchy

Distinguishes between:
1. Contract Violations (programming bugs that need fixing)
2. Business Logic Failures (expected runtime issues)

Missing inputs (no data source, no variable, no gateway) are NOT errors in
this package - resolvers and caches return None for them. Exceptions are
reserved for gateway failures and malformed results, which propagate to the
consumer that issued the call.
"""


class ContractViolationError(TypeError):
    """
    Raised when component contracts are violated (programming bugs).

    These indicate:
    - Wrong types passed to functions
    - Invalid SQL identifiers handed to the statement builder

    These should NEVER be caught and handled - they indicate bugs
    that need to be fixed in the code.

    Examples:
        - Statement builder receives a string where a variable id is expected
        - Gateway adapter wraps something that is not a coroutine function
    """
    pass


class BusinessLogicError(Exception):
    """
    Base class for expected runtime failures.

    These are normal failures that occur during system operation and
    are handled by the consumer (plugin) that triggered the query.
    """
    pass


class QueryGatewayError(BusinessLogicError):
    """
    Query gateway failures.

    Examples:
        - Data source file could not be opened
        - SQL execution failed (missing table, syntax error)
        - Host query callback raised
    """

    def __init__(self, message: str, data_source: str = None, query: str = None):
        super().__init__(message)
        self.data_source = data_source
        self.query = query


class QueryResultShapeError(BusinessLogicError):
    """
    Gateway returned something that is not a tabular result.

    Examples:
        - Result without a columns sequence
        - Row length does not match the number of columns
        - Scalar or string returned instead of a result object
    """
    pass


class RowDecodeError(BusinessLogicError):
    """
    Tabular result could not be decoded into a record.

    Examples:
        - Required column (id, name) missing from the result
        - value_labels column holds text that is not a JSON array
        - id column holds a non-integer value
    """

    def __init__(self, message: str, shape: str = None, column: str = None):
        super().__init__(message)
        self.shape = shape
        self.column = column


class ConfigurationError(Exception):
    """
    System configuration error.

    Examples:
        - DUCKDB_THREADS outside the allowed range
        - DUCKDB_DATA_DIR pointing at a file instead of a directory
    """
    pass
