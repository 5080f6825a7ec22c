"""
Main Application Configuration.

Composes domain-specific configuration modules:
    - StateConfig (shared state keys, metadata cache behaviour)
    - GatewayConfig (DuckDB query gateway)

Exports:
    AppConfig: Main configuration class

Dependencies:
    pydantic: BaseModel for configuration validation
    config.state_config: StateConfig
    config.gateway_config: GatewayConfig
    config.defaults: Default value constants

Pattern:
    Composition over inheritance - domain configs are composed, not inherited.
"""

import os
from pydantic import BaseModel, Field, ValidationError

from exceptions import ConfigurationError
from .state_config import StateConfig
from .gateway_config import GatewayConfig
from .defaults import AppDefaults


# ============================================================================
# APPLICATION CONFIGURATION
# ============================================================================

class AppConfig(BaseModel):
    """
    Application configuration - composition of domain configs.

    Usage:
        config = get_config()
        key = config.state.current_data_source_key
        data_dir = config.gateway.data_dir
    """

    environment: str = Field(
        default=AppDefaults.ENVIRONMENT,
        description="Deployment environment name"
    )

    state: StateConfig = Field(default_factory=StateConfig)
    gateway: GatewayConfig = Field(default_factory=GatewayConfig)

    @classmethod
    def from_environment(cls) -> "AppConfig":
        """
        Load all configs from environment.

        Raises:
            ConfigurationError: If any environment value fails validation
        """
        try:
            return cls(
                environment=os.environ.get("ENVIRONMENT", AppDefaults.ENVIRONMENT),
                state=StateConfig.from_environment(),
                gateway=GatewayConfig.from_environment(),
            )
        except (ValidationError, ValueError) as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e
