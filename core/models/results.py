"""
Query Result Data Models.

Represents what comes back from the query gateway and what the resolver
hands to rendering components. No business logic - pure data structures.

Exports:
    QueryResult: Tabular gateway result (ordered columns, ordered rows)
    MinMax: Aggregate range of a variable's values (NaN when no data)
    DataContext: Resolved data source / variable / color scheme / range bundle
"""

import math
from typing import Any, List, Optional
from pydantic import BaseModel, Field, model_validator

from .catalog import Variable
from .selection import ColorSchemeDefinition


class QueryResult(BaseModel):
    """
    Result of one SELECT through the query gateway.

    Rows are positional; columns name each position. Every row must have
    exactly len(columns) values.
    """

    columns: List[str] = Field(default_factory=list)
    rows: List[List[Any]] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_row_width(self) -> "QueryResult":
        width = len(self.columns)
        for index, row in enumerate(self.rows):
            if len(row) != width:
                raise ValueError(
                    f"row {index} has {len(row)} values, expected {width} "
                    f"(columns: {self.columns})"
                )
        return self

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def first_row(self) -> Optional[List[Any]]:
        return self.rows[0] if self.rows else None


class MinMax(BaseModel):
    """Max/min of a variable's values; NaN marks "no data"."""

    max: float = math.nan
    min: float = math.nan

    @property
    def has_data(self) -> bool:
        return not (math.isnan(self.max) or math.isnan(self.min))


class DataContext(BaseModel):
    """
    Everything a legend needs to describe the current selection.

    Each field is None when it cannot be resolved.
    """

    data_source: Optional[str] = None
    variable: Optional[Variable] = None
    color_scheme: Optional[ColorSchemeDefinition] = None
    min: Optional[float] = None
    max: Optional[float] = None
