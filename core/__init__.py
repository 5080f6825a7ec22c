"""
Core Components.

Structure:
    models/: Pure data structures (no business logic)
    decoders.py: Per-query-shape row decoders (QueryResult -> models)

Exports:
    models: Data model subpackage
    decoders: Row decoder module
"""

from . import models
from . import decoders

__all__ = [
    'models',
    'decoders'
]
