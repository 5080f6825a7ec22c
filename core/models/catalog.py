# ============================================================================
# CATALOG MODELS
# ============================================================================
# STATUS: Core - Records decoded from the variable / dimension / location tables
# PURPOSE: Pydantic models for one data source's metadata catalog
# EXPORTS: Dimension, Variable, Location, Value
# DEPENDENCIES: pydantic
# ============================================================================
"""
Catalog Models.

Every data source exposes the same conceptual schema:

    variable(id, name, unit, description)
    dimension(id, name, size, description, value_labels)
    variable_dimension(variable, dimension)
    location(id, geometry, metadata)
    value(variable, location, value, ...)

A Variable together with its attached Dimensions is what the metadata cache
stores per data source (the "catalog"). Variable ids and names are both unique
within one data source; ids are what the host writes into shared state,
names are what plugin configuration refers to.

Usage:
    from core.models.catalog import Variable, Dimension

    depth = Dimension(id=10, name="depth", size=3, value_labels=["0m", "5m", "10m"])
    temp = Variable(id=1, name="tempC", unit="degC", dimensions=[depth])
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, ConfigDict


class Dimension(BaseModel):
    """
    Axis a variable's values are indexed by (time, depth, ensemble member...).

    value_labels, when present, names each index; its length is expected
    to equal size but this is not enforced.
    """
    model_config = ConfigDict(extra='ignore')

    id: int = Field(..., description="Dimension id, unique within the data source")
    name: str = Field(..., description="Dimension name")
    size: int = Field(..., description="Number of coordinate values along the dimension")
    description: Optional[str] = Field(default=None)
    value_labels: Optional[List[str]] = Field(
        default=None,
        description="Per-index labels decoded from the JSON text column"
    )


class Variable(BaseModel):
    """
    Observed or simulated quantity stored in the value table.

    dimensions stays None until the first variable_dimension row for the
    variable is attached while building the catalog.
    """
    model_config = ConfigDict(extra='ignore')

    id: int = Field(..., description="Variable id, unique within the data source")
    name: str = Field(..., description="Variable name, unique within the data source")
    unit: Optional[str] = Field(default=None)
    description: Optional[str] = Field(default=None)
    dimensions: Optional[List[Dimension]] = Field(
        default=None,
        description="Dimensions attached from the variable_dimension table"
    )

    def dimension_by_name(self, name: str) -> Optional[Dimension]:
        """Find an attached dimension by name."""
        for dimension in self.dimensions or []:
            if dimension.name == name:
                return dimension
        return None


class Location(BaseModel):
    """Point or area a value is recorded for; geometry is a GeoJSON geometry object."""
    model_config = ConfigDict(extra='ignore')

    id: int
    geometry: Optional[Dict[str, Any]] = None
    metadata: Any = None


class Value(BaseModel):
    """
    One scalar observation.

    dimension_selections maps dimension id -> chosen coordinate index
    (None when the dimension is left unselected).
    """
    location: Location
    value: float
    variable: Variable
    dimension_selections: Dict[int, Optional[int]] = Field(default_factory=dict)
