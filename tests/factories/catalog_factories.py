"""
Randomized catalog factories: anti-overfitting design.

Every factory call generates randomized non-identity fields (units,
descriptions, name suffixes) so tests cannot rely on specific values.
Results are in the sql.js shape the host returns:
{"columns": [...], "values": [[...], ...]}.
"""

import json
import random
import string

from infrastructure.sql_builder import CatalogStatements


def _random_suffix(length: int = 6) -> str:
    """Generate random alphanumeric suffix."""
    return "".join(random.choices(string.ascii_lowercase + string.digits, k=length))


def make_variable_row(variable_id: int, name: str = None, **overrides):
    """
    Build one variable row dict.

    Returns:
        dict with id, name, unit, description
    """
    suffix = _random_suffix()
    base = {
        "id": variable_id,
        "name": name or f"var_{suffix}",
        "unit": random.choice(["degC", "mm", "m3/s", None]),
        "description": f"variable {suffix}",
    }
    base.update(overrides)
    return base


def make_dimension_row(dimension_id: int, size: int = None, labels=None, **overrides):
    """
    Build one dimension row dict; value_labels is JSON text (or None).
    """
    suffix = _random_suffix()
    size = size if size is not None else random.randint(1, 5)
    if labels is None:
        labels = [f"{suffix}-{index}" for index in range(size)]
    base = {
        "id": dimension_id,
        "name": f"dim_{suffix}",
        "size": size,
        "description": random.choice([None, f"dimension {suffix}"]),
        "value_labels": json.dumps(labels) if labels is not False else None,
    }
    base.update(overrides)
    return base


def make_location_row(location_id: int, **overrides):
    """Build one location row dict with GeoJSON point geometry text."""
    lon = round(random.uniform(-120, -100), 4)
    lat = round(random.uniform(45, 60), 4)
    base = {
        "id": location_id,
        "geometry": json.dumps({"type": "Point", "coordinates": [lon, lat]}),
        "metadata": json.dumps({"station": _random_suffix()}),
    }
    base.update(overrides)
    return base


def to_result(rows, columns, shuffle_columns: bool = False):
    """
    Turn row dicts into the sql.js result shape.

    Args:
        rows: Row dicts
        columns: Column order
        shuffle_columns: Emit columns in random order
    """
    columns = list(columns)
    if shuffle_columns:
        random.shuffle(columns)
    return {
        "columns": columns,
        "values": [[row.get(column) for column in columns] for row in rows],
    }


def make_source_tables(
    variables,
    dimensions=(),
    links=(),
    locations=(),
    min_max=None,
    shuffle_columns: bool = False
):
    """
    Build a statement -> result map for one data source.

    Args:
        variables: Variable row dicts
        dimensions: Dimension row dicts
        links: (variable_id, dimension_id) pairs
        locations: Location row dicts
        min_max: {variable_id: (max, min)} aggregate answers

    Returns:
        dict keyed by the exact SELECT text the services issue
    """
    tables = {
        CatalogStatements.variables(): to_result(
            variables, CatalogStatements.VARIABLE_COLUMNS, shuffle_columns
        ),
        CatalogStatements.dimensions(): to_result(
            dimensions, CatalogStatements.DIMENSION_COLUMNS, shuffle_columns
        ),
        CatalogStatements.variable_dimensions(): {
            "columns": ["variable", "dimension"],
            "values": [list(pair) for pair in links],
        },
        CatalogStatements.locations(): to_result(
            locations, CatalogStatements.LOCATION_COLUMNS, shuffle_columns
        ),
    }
    for variable_id, (max_value, min_value) in (min_max or {}).items():
        tables[CatalogStatements.min_max(variable_id)] = {
            "columns": ["MAX(value)", "MIN(value)"],
            "values": [[max_value, min_value]],
        }
    return tables
