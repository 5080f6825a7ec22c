"""
Selection Models.

Per-consumer configuration that feeds context resolution:

    DataFrom: optional pinning of a plugin instance to a data source,
              variable (by name) and dimension indices.
    ColorSchemeDefinition: one color scheme entry; the interpolation code
              that consumes it lives in the rendering layer.
    ColorSchemeTable: data source -> variable name -> definition, with the
              empty string as the "default" key at both levels.

Host configuration is authored in camelCase (dataSource, variableName,
dimensionValueDict); the models accept both that and the snake_case names.

Exports:
    DataFrom, ColorSchemeDefinition, ColorSchemeType, ColorSchemeTable, DEFAULT_KEY
"""

from enum import Enum
from typing import Any, Dict, Optional, Union
from pydantic import BaseModel, Field, ConfigDict


# Key used at both table levels for "default for this source" / "global default"
DEFAULT_KEY = ""


class ColorSchemeType(str, Enum):
    """Scale kinds the legend knows how to draw."""
    SEQUENTIAL = "sequential"
    QUANTIZE = "quantize"


class DataFrom(BaseModel):
    """
    Per-instance override of the ambient selection.

    Any field left as None falls back to the shared state.
    """
    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    data_source: Optional[str] = Field(default=None, alias="dataSource")
    variable_name: Optional[str] = Field(default=None, alias="variableName")
    dimension_selections: Optional[Dict[str, int]] = Field(
        default=None,
        alias="dimensionValueDict",
        description="Dimension name -> selected index"
    )


class ColorSchemeDefinition(BaseModel):
    """
    Color scheme entry, opaque to resolution.

    Fields are not constrained: the renderer owns their meaning, so any
    type name or scheme value the host authored is carried through. Unknown
    keys are kept as well.
    """
    model_config = ConfigDict(extra='allow')

    type: Optional[str] = Field(
        default=ColorSchemeType.SEQUENTIAL.value,
        description="Scale kind, e.g. 'sequential' or 'quantize'"
    )
    scheme: Any = Field(default=None, description="Named scheme or list of colors")
    colors: Any = Field(default=None, description="Explicit color stops")
    domain: Any = Field(default=None, description="Explicit value domain")

    @property
    def is_known_type(self) -> bool:
        """True when the legend has a built-in drawing for this scale kind."""
        return self.type in {kind.value for kind in ColorSchemeType}


# table[data_source][variable_name] -> definition, table[""] -> global default
ColorSchemeTable = Dict[
    str,
    Union[Dict[str, Union[ColorSchemeDefinition, dict]], ColorSchemeDefinition, dict]
]
