# ============================================================================
# SHARED STATE STORE
# ============================================================================
# STATUS: Infrastructure - Process-wide key/value bag shared by all consumers
# PURPOSE: Typed access to the reserved ambient-selection and cache keys
# EXPORTS: SharedStateStore
# DEPENDENCIES: config.state_config
# ============================================================================
"""
Shared State Store.

The host keeps one mutable dict for the whole page session and hands it to
every plugin. This class wraps that dict (or a fresh one) without copying
it, so writes made through the store are visible to the host and to every
other consumer holding the same dict.

Reserved keys (namespace "gwf-default" by default):

    gwf-default.currentDataSource                      read   Optional[str]
    gwf-default.currentVariableId                      read   Optional[int]
    gwf-default.cache.availableVariablesByDataSource   write  Dict[str, List[Variable]]

Semantics:
    - Last writer wins. There is no locking and no transactional update.
    - Readers see whatever is stored at the moment they read.

Usage:
    store = SharedStateStore(host_states)
    store.current_data_source = "rivers"
    store.variable_cache()["rivers"] = catalog
"""

from collections.abc import MutableMapping
from typing import Any, Dict, Iterator, List, Optional

from config.state_config import StateConfig


class SharedStateStore(MutableMapping):
    """
    Mutable mapping view over the host's shared state dict.

    Args:
        states: Existing host dict to share (a new dict when None)
        config: Key layout (namespace); defaults to StateConfig()
    """

    def __init__(self, states: Optional[Dict[str, Any]] = None, config: Optional[StateConfig] = None):
        self._states = states if states is not None else {}
        self.config = config or StateConfig()

    # =========================================================================
    # MUTABLE MAPPING
    # =========================================================================

    def __getitem__(self, key: str) -> Any:
        return self._states[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._states[key] = value

    def __delitem__(self, key: str) -> None:
        del self._states[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._states)

    def __len__(self) -> int:
        return len(self._states)

    def __repr__(self) -> str:
        return f"SharedStateStore(namespace={self.config.namespace!r}, keys={sorted(self._states)})"

    @property
    def raw(self) -> Dict[str, Any]:
        """The underlying dict shared with the host."""
        return self._states

    def snapshot(self) -> Dict[str, Any]:
        """Shallow copy of the current state."""
        return dict(self._states)

    # =========================================================================
    # AMBIENT SELECTION
    # =========================================================================

    @property
    def current_data_source(self) -> Optional[str]:
        return self._states.get(self.config.current_data_source_key)

    @current_data_source.setter
    def current_data_source(self, value: Optional[str]) -> None:
        self._states[self.config.current_data_source_key] = value

    @property
    def current_variable_id(self) -> Optional[int]:
        return self._states.get(self.config.current_variable_id_key)

    @current_variable_id.setter
    def current_variable_id(self, value: Optional[int]) -> None:
        self._states[self.config.current_variable_id_key] = value

    # =========================================================================
    # VARIABLE CATALOG CACHE
    # =========================================================================

    def variable_cache(self) -> Dict[str, List[Any]]:
        """
        Data source -> catalog mapping, created on first access.

        The returned dict is the one stored in shared state; mutating it
        mutates the shared cache.
        """
        key = self.config.variable_cache_key
        cache = self._states.get(key)
        if cache is None:
            cache = self._states[key] = {}
        return cache

    def cached_variables(self, data_source: str) -> Optional[List[Any]]:
        """Cached catalog for a data source without creating the cache mapping."""
        cache = self._states.get(self.config.variable_cache_key)
        if not cache:
            return None
        return cache.get(data_source)
