"""
Shared state and metadata cache configuration.

Controls where the data layer reads the ambient selection from and where it
writes the variable catalog cache inside the host's shared state bag, plus
whether catalog builds are deduplicated across concurrent callers.

Environment Variables:
    GWFVIS_STATE_NAMESPACE: Key prefix for reserved shared state keys (default: "gwf-default")
    CATALOG_SINGLE_FLIGHT: "true" to share one in-flight catalog build per data source (default: "false")
"""

import os
from pydantic import BaseModel, Field, field_validator

from .defaults import StateDefaults, CatalogDefaults, parse_bool


class StateConfig(BaseModel):
    """
    Shared state key layout and cache behaviour.

    The three reserved keys are derived from the namespace:
        {namespace}.currentDataSource
        {namespace}.currentVariableId
        {namespace}.cache.availableVariablesByDataSource
    """

    namespace: str = Field(
        default=StateDefaults.NAMESPACE,
        description="Prefix for reserved shared state keys"
    )

    single_flight: bool = Field(
        default=CatalogDefaults.SINGLE_FLIGHT,
        description="Deduplicate concurrent catalog builds for the same data source"
    )

    @field_validator("namespace")
    @classmethod
    def validate_namespace(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("namespace must not be empty")
        if v.endswith("."):
            raise ValueError("namespace must not end with '.'")
        return v

    @property
    def current_data_source_key(self) -> str:
        return f"{self.namespace}.{StateDefaults.CURRENT_DATA_SOURCE_KEY}"

    @property
    def current_variable_id_key(self) -> str:
        return f"{self.namespace}.{StateDefaults.CURRENT_VARIABLE_ID_KEY}"

    @property
    def variable_cache_key(self) -> str:
        return f"{self.namespace}.{StateDefaults.VARIABLE_CACHE_KEY}"

    def debug_dict(self) -> dict:
        """Debug output for logging."""
        return {
            "namespace": self.namespace,
            "single_flight": self.single_flight,
            "current_data_source_key": self.current_data_source_key,
            "current_variable_id_key": self.current_variable_id_key,
            "variable_cache_key": self.variable_cache_key,
        }

    @classmethod
    def from_environment(cls) -> "StateConfig":
        """Load shared state configuration from environment variables."""
        return cls(
            namespace=os.environ.get("GWFVIS_STATE_NAMESPACE", StateDefaults.NAMESPACE),
            single_flight=parse_bool(
                os.environ.get("CATALOG_SINGLE_FLIGHT", str(CatalogDefaults.SINGLE_FLIGHT).lower())
            ),
        )
