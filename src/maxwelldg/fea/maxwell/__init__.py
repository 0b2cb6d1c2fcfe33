from maxwelldg.fea.maxwell.types import (
    BdrCond,
    Direction,
    FaceKind,
    FieldType,
    FluxCoefficient,
    FluxType,
    alt_field,
)
from maxwelldg.fea.maxwell.flux import flux_coefficient

__all__ = [
    "BdrCond",
    "Direction",
    "FaceKind",
    "FieldType",
    "FluxCoefficient",
    "FluxType",
    "alt_field",
    "flux_coefficient",
]
