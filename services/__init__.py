"""
Services Package - Data context resolution and metadata caching.

Layers (leaf first):
    schema_query.py     SchemaQueryService - catalog SELECTs, locations, min/max
    metadata_cache.py   MetadataCache - per data source catalog cache in shared state
    context_resolver.py ContextResolver - data source / variable / color scheme resolution

Usage:
    from services import build_context_resolver

    resolver = build_context_resolver(host_states, query_data_delegate)
    context = await resolver.resolve_data_context(data_from, color_scheme_table)
"""

from .schema_query import SchemaQueryService
from .metadata_cache import MetadataCache
from .context_resolver import ContextResolver, build_context_resolver, lookup_color_scheme

__all__ = [
    'SchemaQueryService',
    'MetadataCache',
    'ContextResolver',
    'build_context_resolver',
    'lookup_color_scheme',
]
