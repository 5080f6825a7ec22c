"""
Row decoder tests.

Columns are mapped by name, so every decoder is exercised with shuffled
column order as well as the canonical one.
"""

import json
import math

import pytest

from core.decoders import (
    DIMENSION_DECODER,
    LOCATION_DECODER,
    VARIABLE_DECODER,
    VARIABLE_DIMENSION_DECODER,
    coerce_number,
    parse_json_text,
    parse_value_labels,
)
from core.models.results import QueryResult
from exceptions import RowDecodeError
from tests.factories.catalog_factories import (
    make_dimension_row,
    make_location_row,
    make_variable_row,
    to_result,
)
from infrastructure.sql_builder import CatalogStatements


def _result(raw):
    return QueryResult(columns=raw["columns"], rows=raw["values"])


class TestParseJsonText:

    @pytest.mark.parametrize("value", [None, "", "   ", b""])
    def test_empty_decodes_to_none(self, value):
        assert parse_json_text(value) is None

    def test_text_is_parsed(self):
        assert parse_json_text('{"a": [1, 2]}') == {"a": [1, 2]}

    def test_bytes_are_parsed(self):
        assert parse_json_text(b'["x"]') == ["x"]

    def test_decoded_values_pass_through(self):
        value = {"type": "Point", "coordinates": [1, 2]}
        assert parse_json_text(value) is value

    def test_invalid_json_raises_value_error(self):
        with pytest.raises(ValueError):
            parse_json_text("{not json")


class TestParseValueLabels:

    def test_labels_become_strings(self):
        assert parse_value_labels(json.dumps(["a", 2, 3.5])) == ["a", "2", "3.5"]

    def test_null_labels(self):
        assert parse_value_labels(None) is None

    def test_non_array_rejected(self):
        with pytest.raises(ValueError):
            parse_value_labels('{"a": 1}')


class TestCoerceNumber:

    @pytest.mark.parametrize("value", [None, True, False, "abc", object()])
    def test_non_numeric_is_nan(self, value):
        assert math.isnan(coerce_number(value))

    @pytest.mark.parametrize("value,expected", [(3, 3.0), ("2.5", 2.5), (-1.25, -1.25)])
    def test_numeric(self, value, expected):
        assert coerce_number(value) == expected


class TestVariableDecoder:

    @pytest.mark.parametrize("shuffle", [False, True])
    def test_decodes_by_column_name(self, shuffle):
        rows = [make_variable_row(1, name="tempC"), make_variable_row(2, name="flow")]
        result = _result(to_result(rows, CatalogStatements.VARIABLE_COLUMNS, shuffle))

        variables = VARIABLE_DECODER.decode(result)

        assert [v.id for v in variables] == [1, 2]
        assert [v.name for v in variables] == ["tempC", "flow"]
        assert variables[0].unit == rows[0]["unit"]
        assert variables[0].description == rows[0]["description"]
        assert all(v.dimensions is None for v in variables)

    def test_none_result_decodes_to_empty(self):
        assert VARIABLE_DECODER.decode(None) == []

    def test_missing_required_column_raises(self):
        result = QueryResult(columns=["id", "unit"], rows=[[1, "mm"]])
        with pytest.raises(RowDecodeError) as exc_info:
            VARIABLE_DECODER.decode(result)
        assert exc_info.value.column == "name"
        assert exc_info.value.shape == "variable"

    def test_missing_optional_column_left_none(self):
        result = QueryResult(columns=["id", "name"], rows=[[4, "depth"]])
        variable = VARIABLE_DECODER.decode(result)[0]
        assert variable.unit is None
        assert variable.description is None

    def test_unexpected_column_is_ignored_and_logged(self, caplog):
        result = QueryResult(columns=["id", "name", "colour"], rows=[[1, "tempC", "red"]])
        with caplog.at_level("WARNING"):
            variables = VARIABLE_DECODER.decode(result)
        assert variables[0].name == "tempC"
        assert "colour" in caplog.text


class TestDimensionDecoder:

    def test_value_labels_are_decoded(self):
        row = make_dimension_row(10, size=2, labels=["low", "high"])
        result = _result(to_result([row], CatalogStatements.DIMENSION_COLUMNS, True))

        dimension = DIMENSION_DECODER.decode(result)[0]

        assert dimension.id == 10
        assert dimension.size == 2
        assert dimension.value_labels == ["low", "high"]

    def test_null_value_labels(self):
        row = make_dimension_row(11, size=4, labels=False)
        result = _result(to_result([row], CatalogStatements.DIMENSION_COLUMNS))
        assert DIMENSION_DECODER.decode(result)[0].value_labels is None

    def test_bad_value_labels_raise(self):
        row = make_dimension_row(12, value_labels="[broken")
        result = _result(to_result([row], CatalogStatements.DIMENSION_COLUMNS))
        with pytest.raises(RowDecodeError) as exc_info:
            DIMENSION_DECODER.decode(result)
        assert exc_info.value.column == "value_labels"


class TestLocationDecoder:

    def test_geometry_and_metadata_parsed(self):
        row = make_location_row(5)
        result = _result(to_result([row], CatalogStatements.LOCATION_COLUMNS, True))

        location = LOCATION_DECODER.decode(result)[0]

        assert location.id == 5
        assert location.geometry == json.loads(row["geometry"])
        assert location.metadata == json.loads(row["metadata"])

    def test_empty_geometry_and_metadata(self):
        result = QueryResult(columns=["id", "geometry", "metadata"], rows=[[6, None, ""]])
        location = LOCATION_DECODER.decode(result)[0]
        assert location.geometry is None
        assert location.metadata is None


class TestVariableDimensionDecoder:

    def test_links_decoded(self):
        result = QueryResult(columns=["dimension", "variable"], rows=[[10, 1], [11, 2]])
        links = VARIABLE_DIMENSION_DECODER.decode(result)
        assert [(l.variable_id, l.dimension_id) for l in links] == [(1, 10), (2, 11)]

    def test_missing_dimension_column_raises(self):
        result = QueryResult(columns=["variable"], rows=[[1]])
        with pytest.raises(RowDecodeError):
            VARIABLE_DIMENSION_DECODER.decode(result)
