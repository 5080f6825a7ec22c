"""
Query gateway configuration - DuckDB backed data sources.

The host normally supplies its own query callback. When the data layer runs
outside the browser host (batch legend rendering, tests against real files),
DuckDBQueryGateway serves data sources from a directory of DuckDB files:

    {data_dir}/{data_source}.duckdb

Example Usage:
-------------
```python
from config import get_config
from infrastructure.query_gateway import DuckDBQueryGateway

gateway = DuckDBQueryGateway.from_config(get_config().gateway)
result = await gateway.query_data("rivers", "SELECT id, name FROM variable")
```
"""

import os
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field

from .defaults import GatewayDefaults, parse_bool


class GatewayConfig(BaseModel):
    """
    DuckDB query gateway configuration.

    Configuration Fields:
    ---------------------
    data_dir: Directory holding one DuckDB file per data source (optional)
    file_suffix: File name suffix appended to the data source id
    read_only: Open data source files read-only
    threads: DuckDB worker threads per connection
    """

    data_dir: Optional[str] = Field(
        default=GatewayDefaults.DATA_DIR,
        description="Directory of '<data_source>.duckdb' files"
    )

    file_suffix: str = Field(
        default=GatewayDefaults.FILE_SUFFIX,
        description="Suffix appended to the data source id to build the file name"
    )

    read_only: bool = Field(
        default=GatewayDefaults.READ_ONLY,
        description="Open data source files read-only"
    )

    threads: int = Field(
        default=GatewayDefaults.THREADS,
        ge=GatewayDefaults.MIN_THREADS,
        le=GatewayDefaults.MAX_THREADS,
        description="Number of DuckDB threads per connection (1-16)"
    )

    def resolve_path(self, data_source: str) -> Optional[Path]:
        """
        Map a data source id to its DuckDB file.

        Returns:
            Path when data_dir is configured, else None
        """
        if not self.data_dir:
            return None
        return Path(self.data_dir) / f"{data_source}{self.file_suffix}"

    def debug_dict(self) -> dict:
        """Debug output for logging."""
        return {
            "data_dir": self.data_dir,
            "file_suffix": self.file_suffix,
            "read_only": self.read_only,
            "threads": self.threads,
        }

    @classmethod
    def from_environment(cls) -> "GatewayConfig":
        """
        Load gateway configuration from environment variables.

        Environment Variables:
        ---------------------
        DUCKDB_DATA_DIR: Directory of data source files (default: unset)
        DUCKDB_FILE_SUFFIX: File suffix (default: ".duckdb")
        DUCKDB_READ_ONLY: "true" or "false" (default: "true")
        DUCKDB_THREADS: Number of threads (default: 2)
        """
        return cls(
            data_dir=os.environ.get("DUCKDB_DATA_DIR") or GatewayDefaults.DATA_DIR,
            file_suffix=os.environ.get("DUCKDB_FILE_SUFFIX", GatewayDefaults.FILE_SUFFIX),
            read_only=parse_bool(
                os.environ.get("DUCKDB_READ_ONLY", str(GatewayDefaults.READ_ONLY).lower())
            ),
            threads=int(os.environ.get("DUCKDB_THREADS", str(GatewayDefaults.THREADS))),
        )
