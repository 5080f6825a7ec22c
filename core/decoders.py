# ============================================================================
# ROW DECODERS
# ============================================================================
# STATUS: Core - QueryResult -> typed records
# PURPOSE: One explicit decoder per query shape (column name -> field + converter)
# EXPORTS: ColumnSpec, RowDecoder, VariableDimensionLink, VARIABLE_DECODER,
#          DIMENSION_DECODER, LOCATION_DECODER, VARIABLE_DIMENSION_DECODER,
#          parse_json_text, parse_value_labels, coerce_number
# DEPENDENCIES: pydantic (via models), util_logger
# ============================================================================
"""
Row Decoders.

The gateway returns rows positionally with a separate list of column names.
Each decoder maps the columns it expects onto model fields by NAME, so the
order of columns in the result does not matter.

Column handling:
    - required column missing      -> RowDecodeError
    - optional column missing      -> field left at None (logged at DEBUG)
    - unexpected column present    -> ignored (logged at WARNING)

Usage:
    from core.decoders import VARIABLE_DECODER

    variables = VARIABLE_DECODER.decode(result)
"""

import json
import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Sequence

from exceptions import RowDecodeError
from util_logger import LoggerFactory, ComponentType
from .models.catalog import Variable, Dimension, Location
from .models.results import QueryResult

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "RowDecoder")


# ============================================================================
# VALUE CONVERTERS
# ============================================================================

def parse_json_text(value: Any) -> Any:
    """
    Decode a JSON text column.

    None and empty text decode to None. Values that are already decoded
    (dict/list, as some gateways return them) pass through unchanged.

    Raises:
        ValueError: If the text is not valid JSON
    """
    if value is None:
        return None
    if isinstance(value, (dict, list)):
        return value
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str) and not value.strip():
        return None
    try:
        return json.loads(value)
    except (TypeError, json.JSONDecodeError) as e:
        raise ValueError(f"invalid JSON text: {e}") from e


def parse_value_labels(value: Any) -> Optional[List[str]]:
    """
    Decode dimension.value_labels into a list of strings.

    Raises:
        ValueError: If the decoded JSON is not an array
    """
    labels = parse_json_text(value)
    if labels is None:
        return None
    if not isinstance(labels, list):
        raise ValueError(f"value_labels must be a JSON array, got {type(labels).__name__}")
    return [str(label) for label in labels]


def optional_int(value: Any) -> Optional[int]:
    """Integer or None; used for foreign keys that may be null."""
    if value is None:
        return None
    return int(value)


def coerce_number(value: Any) -> float:
    """
    Numeric coercion for aggregate results.

    None, booleans, and anything float() rejects become NaN instead of
    raising, so "no data" never crashes a caller.
    """
    if value is None or isinstance(value, bool):
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


# ============================================================================
# DECODER
# ============================================================================

@dataclass(frozen=True)
class ColumnSpec:
    """Expected column -> model field mapping."""
    column: str
    field: Optional[str] = None
    required: bool = False
    convert: Optional[Callable[[Any], Any]] = None

    @property
    def field_name(self) -> str:
        return self.field or self.column


class RowDecoder:
    """
    Decode one query shape into records.

    Args:
        shape: Name used in logs and errors (e.g. "variable")
        build: Callable receiving field keyword arguments (a model class)
        columns: Expected columns
    """

    def __init__(self, shape: str, build: Callable[..., Any], columns: Sequence[ColumnSpec]):
        self.shape = shape
        self.build = build
        self.columns = tuple(columns)
        self._expected = {spec.column for spec in self.columns}

    def _column_positions(self, result: QueryResult) -> Dict[str, int]:
        positions = {name: index for index, name in enumerate(result.columns)}

        unexpected = [name for name in result.columns if name not in self._expected]
        if unexpected:
            logger.warning(
                f"Ignoring unexpected columns in {self.shape} result: {unexpected}",
                extra={'custom_dimensions': {'shape': self.shape, 'unexpected_columns': unexpected}}
            )

        for spec in self.columns:
            if spec.column in positions:
                continue
            if spec.required:
                raise RowDecodeError(
                    f"{self.shape} result is missing required column '{spec.column}' "
                    f"(got: {result.columns})",
                    shape=self.shape,
                    column=spec.column
                )
            logger.debug(f"Optional column '{spec.column}' absent from {self.shape} result")

        return positions

    def decode(self, result: Optional[QueryResult]) -> List[Any]:
        """
        Decode every row of a result.

        A None result (gateway had nothing to return) decodes to [].

        Raises:
            RowDecodeError: Missing required column or undecodable value
        """
        if result is None:
            return []

        positions = self._column_positions(result)
        records = []
        for row_index, row in enumerate(result.rows):
            data = {}
            for spec in self.columns:
                position = positions.get(spec.column)
                raw = row[position] if position is not None else None
                if spec.convert is not None:
                    try:
                        raw = spec.convert(raw)
                    except (TypeError, ValueError) as e:
                        raise RowDecodeError(
                            f"{self.shape} row {row_index}: cannot decode column "
                            f"'{spec.column}': {e}",
                            shape=self.shape,
                            column=spec.column
                        ) from e
                data[spec.field_name] = raw
            try:
                records.append(self.build(**data))
            except (TypeError, ValueError) as e:
                raise RowDecodeError(
                    f"{self.shape} row {row_index} is invalid: {e}",
                    shape=self.shape
                ) from e
        return records


class VariableDimensionLink(NamedTuple):
    """One variable_dimension association row."""
    variable_id: Optional[int]
    dimension_id: Optional[int]


# ============================================================================
# QUERY SHAPES
# ============================================================================

VARIABLE_DECODER = RowDecoder("variable", Variable, [
    ColumnSpec("id", required=True),
    ColumnSpec("name", required=True),
    ColumnSpec("unit"),
    ColumnSpec("description"),
])

DIMENSION_DECODER = RowDecoder("dimension", Dimension, [
    ColumnSpec("id", required=True),
    ColumnSpec("name", required=True),
    ColumnSpec("size", required=True),
    ColumnSpec("description"),
    ColumnSpec("value_labels", convert=parse_value_labels),
])

LOCATION_DECODER = RowDecoder("location", Location, [
    ColumnSpec("id", required=True),
    ColumnSpec("geometry", convert=parse_json_text),
    ColumnSpec("metadata", convert=parse_json_text),
])

VARIABLE_DIMENSION_DECODER = RowDecoder("variable_dimension", VariableDimensionLink, [
    ColumnSpec("variable", field="variable_id", required=True, convert=optional_int),
    ColumnSpec("dimension", field="dimension_id", required=True, convert=optional_int),
])
