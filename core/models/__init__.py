"""
Core Data Models Package.

Contains pure data structures without business logic.

Exports:
    Variable, Dimension, Location, Value: Catalog records
    DataFrom, ColorSchemeDefinition, ColorSchemeType, ColorSchemeTable: Consumer selection
    QueryResult, MinMax, DataContext: Gateway and resolver results
"""

# Catalog records
from .catalog import (
    Dimension,
    Variable,
    Location,
    Value
)

# Consumer selection
from .selection import (
    DataFrom,
    ColorSchemeDefinition,
    ColorSchemeType,
    ColorSchemeTable,
    DEFAULT_KEY
)

# Results
from .results import (
    QueryResult,
    MinMax,
    DataContext
)

__all__ = [
    'Dimension',
    'Variable',
    'Location',
    'Value',
    'DataFrom',
    'ColorSchemeDefinition',
    'ColorSchemeType',
    'ColorSchemeTable',
    'DEFAULT_KEY',
    'QueryResult',
    'MinMax',
    'DataContext',
]
