"""
Metadata cache tests.

Concurrency is simulated with asyncio.gather against a gateway that yields
to the event loop before every answer, so two first-time lookups overlap.
"""

import asyncio

import pytest

from exceptions import QueryGatewayError
from infrastructure.shared_state import SharedStateStore
from infrastructure.sql_builder import CatalogStatements
from services.metadata_cache import MetadataCache
from services.schema_query import SchemaQueryService
from tests.factories.catalog_factories import make_source_tables
from tests.factories.gateway_factories import FailingGateway, RecordingGateway


CACHE_KEY = "gwf-default.cache.availableVariablesByDataSource"
CATALOG_QUERIES = 3


def _cache(store, gateway, single_flight=None):
    return MetadataCache(store, SchemaQueryService(gateway), single_flight=single_flight)


class TestGetVariables:

    def test_first_access_builds_and_stores(self, shared_states, state_store, gateway):
        cache = _cache(state_store, gateway)

        variables = asyncio.run(cache.get_variables("rivers"))

        assert [v.name for v in variables] == ["tempC", "discharge", "depth"]
        assert shared_states[CACHE_KEY]["rivers"] is variables
        assert cache.is_cached("rivers")
        assert not cache.is_cached("lakes")

    def test_repeat_access_returns_same_object(self, state_store, gateway):
        cache = _cache(state_store, gateway)

        first = asyncio.run(cache.get_variables("rivers"))
        second = asyncio.run(cache.get_variables("rivers"))

        assert first is second
        assert len(gateway.calls) == CATALOG_QUERIES

    def test_catalogs_kept_per_data_source(self, shared_states, state_store, gateway):
        cache = _cache(state_store, gateway)
        asyncio.run(cache.get_variables("rivers"))
        asyncio.run(cache.get_variables("lakes"))
        assert sorted(shared_states[CACHE_KEY]) == ["lakes", "rivers"]

    def test_cache_shared_between_instances_on_same_state(self, shared_states, gateway):
        first = _cache(SharedStateStore(shared_states), gateway)
        second = _cache(SharedStateStore(shared_states), gateway)

        built = asyncio.run(first.get_variables("rivers"))
        found = asyncio.run(second.get_variables("rivers"))

        assert found is built
        assert len(gateway.calls) == CATALOG_QUERIES

    def test_empty_variable_table_is_cached(self, state_store):
        gateway = RecordingGateway({"empty": make_source_tables([])})
        cache = _cache(state_store, gateway)
        assert asyncio.run(cache.get_variables("empty")) == []
        assert asyncio.run(cache.get_variables("empty")) == []
        assert cache.is_cached("empty")
        assert len(gateway.calls) == CATALOG_QUERIES

    def test_unknown_data_source_not_cached(self, shared_states, state_store, gateway):
        cache = _cache(state_store, gateway)
        assert asyncio.run(cache.get_variables("ponds")) is None
        assert asyncio.run(cache.get_variables("ponds")) is None
        assert not cache.is_cached("ponds")
        assert "ponds" not in shared_states.get(CACHE_KEY, {})
        # each call asks the gateway again
        assert gateway.calls_for("ponds") == [CatalogStatements.variables()] * 2

    def test_data_source_known_later_is_built(self, state_store, gateway, rivers_tables):
        cache = _cache(state_store, gateway)
        assert asyncio.run(cache.get_variables("ponds")) is None

        gateway.sources["ponds"] = rivers_tables
        variables = asyncio.run(cache.get_variables("ponds"))

        assert [v.name for v in variables] == ["tempC", "discharge", "depth"]
        assert cache.is_cached("ponds")

    @pytest.mark.parametrize("data_source", [None, ""])
    def test_missing_data_source(self, state_store, gateway, data_source):
        assert asyncio.run(_cache(state_store, gateway).get_variables(data_source)) is None
        assert gateway.calls == []

    def test_no_gateway_returns_none(self, state_store):
        cache = MetadataCache(state_store, SchemaQueryService(None))
        assert not cache.can_query
        assert asyncio.run(cache.get_variables("rivers")) is None

    def test_no_gateway_still_serves_cached(self, state_store):
        state_store.variable_cache()["rivers"] = ["preloaded"]
        cache = MetadataCache(state_store, None)
        assert asyncio.run(cache.get_variables("rivers")) == ["preloaded"]

    def test_failure_not_cached(self, shared_states, state_store):
        cache = _cache(state_store, FailingGateway())
        with pytest.raises(QueryGatewayError):
            asyncio.run(cache.get_variables("rivers"))
        assert not cache.is_cached("rivers")

    def test_single_flight_default_from_config(self, monkeypatch, state_store, gateway):
        from config import reset_config

        monkeypatch.setenv("CATALOG_SINGLE_FLIGHT", "true")
        reset_config()
        assert MetadataCache(state_store, SchemaQueryService(gateway)).single_flight is True


class TestConcurrentFirstAccess:

    @staticmethod
    async def _two_consumers(cache):
        return await asyncio.gather(
            cache.get_variables("rivers"),
            cache.get_variables("rivers"),
        )

    def test_unguarded_builds_twice_last_writer_wins(self, shared_states, state_store, gateway):
        cache = _cache(state_store, gateway, single_flight=False)

        first, second = asyncio.run(self._two_consumers(cache))

        assert len(gateway.calls) == 2 * CATALOG_QUERIES
        assert [v.model_dump() for v in first] == [v.model_dump() for v in second]
        stored = shared_states[CACHE_KEY]["rivers"]
        assert stored is first or stored is second

    def test_single_flight_builds_once(self, shared_states, state_store, gateway):
        cache = _cache(state_store, gateway, single_flight=True)

        first, second = asyncio.run(self._two_consumers(cache))

        assert len(gateway.calls) == CATALOG_QUERIES
        assert first is second
        assert shared_states[CACHE_KEY]["rivers"] is first
        assert cache._in_flight == {}

    def test_single_flight_failure_reaches_every_waiter(self, state_store):
        cache = _cache(state_store, FailingGateway(), single_flight=True)

        async def run():
            return await asyncio.gather(
                cache.get_variables("rivers"),
                cache.get_variables("rivers"),
                return_exceptions=True,
            )

        results = asyncio.run(run())
        assert all(isinstance(r, QueryGatewayError) for r in results)
        assert cache._in_flight == {}


class TestInvalidation:

    def test_invalidate_forces_rebuild(self, state_store, gateway):
        cache = _cache(state_store, gateway)
        first = asyncio.run(cache.get_variables("rivers"))

        assert cache.invalidate("rivers") is True
        assert cache.invalidate("rivers") is False
        second = asyncio.run(cache.get_variables("rivers"))

        assert second is not first
        assert len(gateway.calls) == 2 * CATALOG_QUERIES

    def test_invalidate_without_cache(self, state_store, gateway):
        assert _cache(state_store, gateway).invalidate("rivers") is False

    def test_clear_in_place(self, shared_states, state_store, gateway):
        cache = _cache(state_store, gateway)
        asyncio.run(cache.get_variables("rivers"))
        asyncio.run(cache.get_variables("lakes"))
        mapping = shared_states[CACHE_KEY]

        cache.clear()

        assert shared_states[CACHE_KEY] is mapping
        assert mapping == {}
