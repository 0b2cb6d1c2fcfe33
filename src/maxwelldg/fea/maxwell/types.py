"""
Maxwell Vocabulary
==================
Enumerations and small value types shared by the flux policy, the operator
builders and the evolution operator.

``FieldType`` and ``Direction`` are integer enums so they can index the
operator bank and the blocks of the field state vector directly.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, StrEnum

from maxwelldg.exceptions import (
    InvalidFieldReference,
    UnsupportedBoundaryCondition,
    UnsupportedFluxType,
)


class FieldType(IntEnum):
    E = 0
    H = 1


class Direction(IntEnum):
    X = 0
    Y = 1
    Z = 2


class BdrCond(StrEnum):
    PEC = "PEC"  # perfect electric conductor
    PMC = "PMC"  # perfect magnetic conductor
    SMA = "SMA"  # Silver-Muller absorbing


class FluxType(StrEnum):
    CENTERED = "Centered"
    UPWIND = "Upwind"


class FaceKind(StrEnum):
    INTERIOR = "Interior"
    BOUNDARY = "Boundary"


@dataclass(frozen=True)
class FluxCoefficient:
    """Weights of the trace average (alpha) and of the trace jump (beta)."""
    alpha: float
    beta: float


def as_field_type(field: FieldType | int) -> FieldType:
    """
    Normalize a field reference to a ``FieldType``.

    Raises:
        InvalidFieldReference: If ``field`` is neither E nor H.
    """
    if isinstance(field, FieldType):
        return field
    if isinstance(field, int) and not isinstance(field, bool):
        try:
            return FieldType(field)
        except ValueError:
            pass
    raise InvalidFieldReference(f"Invalid field reference {field!r}: expected FieldType.E or FieldType.H.")


def as_flux_type(flux_type: FluxType | str) -> FluxType:
    """Normalize a flux type, accepting the enum or its value ("Centered", "Upwind")."""
    try:
        return FluxType(flux_type)
    except ValueError:
        raise UnsupportedFluxType(
            f"Unsupported flux type {flux_type!r}. Available flux types: {[f.value for f in FluxType]}."
        ) from None


def as_bdr_cond(bdr_cond: BdrCond | str) -> BdrCond:
    """Normalize a boundary condition, accepting the enum or its value ("PEC", "PMC", "SMA")."""
    try:
        return BdrCond(bdr_cond)
    except ValueError:
        raise UnsupportedBoundaryCondition(
            f"Unsupported boundary condition {bdr_cond!r}. Available conditions: {[b.value for b in BdrCond]}."
        ) from None


def alt_field(field: FieldType | int) -> FieldType:
    """
    Return the field coupled to ``field`` by the curl equations.

    Args:
        field: FieldType.E or FieldType.H.

    Raises:
        InvalidFieldReference: For any other input.

    Returns:
        FieldType.H for E and FieldType.E for H.
    """
    field = as_field_type(field)
    return FieldType.H if field == FieldType.E else FieldType.E
