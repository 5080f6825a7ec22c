# ============================================================================
# SQL STATEMENT BUILDER
# ============================================================================
# STATUS: Infrastructure - SELECT composition for query gateway text
# PURPOSE: Safe composition of the catalog / aggregate SELECT statements
# EXPORTS: Identifier, IntegerLiteral, StatementBuilder, CatalogStatements
# DEPENDENCIES: re, dataclasses
# ============================================================================

"""
SQL Statement Composition for the Query Gateway

The gateway contract is text-only: query_data(data_source, query_text). There
is no parameter binding, so every value placed into a statement must be safe
to inline. This module composes statements from validated parts:

    - Identifier: table/column names (alphanumeric + underscore)
    - IntegerLiteral: integer values (booleans and strings rejected)
    - str: static SQL keywords written in this module

Example Usage:
    ```python
    from infrastructure.sql_builder import StatementBuilder, Identifier, IntegerLiteral

    sb = StatementBuilder()
    sb.append(
        "SELECT MAX(value), MIN(value) FROM", Identifier('value'),
        "WHERE", Identifier('variable'), "=", IntegerLiteral(3)
    )
    sb.build()
    # "SELECT MAX(value), MIN(value) FROM value WHERE variable = 3"
    ```
"""

import re
from dataclasses import dataclass
from typing import List, Sequence

from exceptions import ContractViolationError


_IDENTIFIER_PATTERN = re.compile(r'^[a-zA-Z_][a-zA-Z0-9_]*$')


@dataclass
class Identifier:
    """
    Validated SQL identifier (table, column).

    Example:
        Identifier('variable_dimension')  # Valid
        Identifier('value labels')        # INVALID (space not allowed)

    Raises:
        ContractViolationError: If identifier doesn't match SQL naming conventions
    """
    name: str

    def __post_init__(self):
        if not isinstance(self.name, str) or not _IDENTIFIER_PATTERN.match(self.name):
            raise ContractViolationError(
                f"Invalid identifier: '{self.name}'. "
                f"Must start with letter/underscore and contain only "
                f"alphanumeric characters and underscores."
            )

    def __str__(self):
        return self.name


@dataclass
class IntegerLiteral:
    """
    Integer value inlined into statement text.

    Raises:
        ContractViolationError: If value is not an int (bool is rejected too)
    """
    value: int

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ContractViolationError(
                f"IntegerLiteral requires int, got {type(self.value).__name__}: {self.value!r}"
            )

    def __str__(self):
        return str(self.value)


class StatementBuilder:
    """
    Compose one statement from validated parts.

    Not thread-safe. Create separate instances per statement.
    """

    def __init__(self):
        self.parts: List[str] = []

    def append(self, *items) -> 'StatementBuilder':
        """
        Add parts to the statement.

        Accepts Identifier, IntegerLiteral, or str (static SQL only).

        Raises:
            ContractViolationError: If item type is not supported
        """
        for item in items:
            if isinstance(item, (Identifier, IntegerLiteral)):
                self.parts.append(str(item))
            elif isinstance(item, str):
                self.parts.append(item)
            else:
                raise ContractViolationError(
                    f"Unsupported statement part type: {type(item).__name__}. "
                    f"Use Identifier, IntegerLiteral, or str."
                )
        return self

    def append_column_list(self, columns: Sequence[str]) -> 'StatementBuilder':
        """Append 'a, b, c' from validated column names."""
        self.parts.append(', '.join(str(Identifier(c)) for c in columns))
        return self

    def build(self) -> str:
        return ' '.join(self.parts)

    def __str__(self):
        return self.build()


class CatalogStatements:
    """
    The fixed set of SELECTs issued against a data source.

    Tables:
        variable(id, name, unit, description)
        dimension(id, name, size, description, value_labels)
        variable_dimension(variable, dimension)
        location(id, geometry, metadata)
        value(variable, location, value, ...)
    """

    VARIABLE_COLUMNS = ("id", "name", "unit", "description")
    DIMENSION_COLUMNS = ("id", "name", "size", "description", "value_labels")
    VARIABLE_DIMENSION_COLUMNS = ("variable", "dimension")
    LOCATION_COLUMNS = ("id", "geometry", "metadata")

    @staticmethod
    def select_all(table: str, columns: Sequence[str]) -> str:
        return (
            StatementBuilder()
            .append("SELECT")
            .append_column_list(columns)
            .append("FROM", Identifier(table))
            .build()
        )

    @classmethod
    def variables(cls) -> str:
        return cls.select_all("variable", cls.VARIABLE_COLUMNS)

    @classmethod
    def dimensions(cls) -> str:
        return cls.select_all("dimension", cls.DIMENSION_COLUMNS)

    @classmethod
    def variable_dimensions(cls) -> str:
        return cls.select_all("variable_dimension", cls.VARIABLE_DIMENSION_COLUMNS)

    @classmethod
    def locations(cls) -> str:
        return cls.select_all("location", cls.LOCATION_COLUMNS)

    @staticmethod
    def min_max(variable_id: int) -> str:
        """MAX then MIN of value for one variable."""
        return StatementBuilder().append(
            "SELECT MAX(value), MIN(value) FROM", Identifier("value"),
            "WHERE", Identifier("variable"), "=", IntegerLiteral(variable_id)
        ).build()
