"""
Unit test fixtures: factory-built catalogs and wired services.
"""

import pytest

from infrastructure.shared_state import SharedStateStore
from services import build_context_resolver
from tests.factories.catalog_factories import (
    make_dimension_row,
    make_location_row,
    make_source_tables,
    make_variable_row,
)
from tests.factories.gateway_factories import RecordingGateway


@pytest.fixture
def rivers_tables():
    """
    Data source 'rivers':
        variable 1 'tempC'     -> dimension 10
        variable 2 'discharge' -> dimensions 10, 11
        variable 3 'depth'     -> no dimensions
    """
    variables = [
        make_variable_row(1, name="tempC"),
        make_variable_row(2, name="discharge"),
        make_variable_row(3, name="depth"),
    ]
    dimensions = [
        make_dimension_row(10, size=3),
        make_dimension_row(11, size=2, labels=False),
    ]
    links = [(1, 10), (2, 10), (2, 11)]
    locations = [make_location_row(100), make_location_row(101)]
    return make_source_tables(
        variables,
        dimensions,
        links,
        locations,
        min_max={1: (30.5, -4.25), 2: (None, None)},
    )


@pytest.fixture
def lakes_tables():
    """Data source 'lakes': variable 7 'tempC', variable 8 'chl'."""
    return make_source_tables(
        [make_variable_row(7, name="tempC"), make_variable_row(8, name="chl")],
        min_max={7: (22, 3)},
    )


@pytest.fixture
def gateway(rivers_tables, lakes_tables):
    return RecordingGateway({"rivers": rivers_tables, "lakes": lakes_tables})


@pytest.fixture
def resolver(shared_states, gateway):
    return build_context_resolver(shared_states, gateway)


@pytest.fixture
def fresh_store():
    return SharedStateStore({})
