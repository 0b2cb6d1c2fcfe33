"""
Flux Coefficient Policy
=======================
Maps a face (interior or boundary), a penalty flag, the flux type, the field
receiving the flux and the boundary condition to the (alpha, beta) weights
used by the face trace integrator.

The non-penalty boundary weights encode the ghost state of each boundary
condition: a weight of 2 doubles the inner trace (the ghost state is its
negative), a weight of 0 cancels the face term (the ghost state mirrors the
inner trace) and a weight of 1 keeps only the inner trace (no incoming wave).

The module is stateless, every function is a pure lookup.
"""
from __future__ import annotations

from maxwelldg.fea.maxwell.types import (
    BdrCond,
    FaceKind,
    FieldType,
    FluxCoefficient,
    FluxType,
    as_bdr_cond,
    as_field_type,
    as_flux_type,
)
from maxwelldg.exceptions import UnsupportedBoundaryCondition, UnsupportedPolicy

ZERO = FluxCoefficient(alpha=0.0, beta=0.0)

_INTERIOR = FluxCoefficient(alpha=1.0, beta=0.0)

_INTERIOR_PENALTY: dict[FluxType, FluxCoefficient] = {
    FluxType.CENTERED: ZERO,
    FluxType.UPWIND: FluxCoefficient(alpha=0.0, beta=0.5),
}

_BOUNDARY: dict[BdrCond, dict[FieldType, FluxCoefficient]] = {
    BdrCond.PEC: {
        FieldType.E: FluxCoefficient(alpha=0.0, beta=0.0),
        FieldType.H: FluxCoefficient(alpha=2.0, beta=0.0),
    },
    BdrCond.PMC: {
        FieldType.E: FluxCoefficient(alpha=2.0, beta=0.0),
        FieldType.H: FluxCoefficient(alpha=0.0, beta=0.0),
    },
    BdrCond.SMA: {
        FieldType.E: FluxCoefficient(alpha=1.0, beta=0.0),
        FieldType.H: FluxCoefficient(alpha=1.0, beta=0.0),
    },
}

_BOUNDARY_UPWIND_PENALTY: dict[BdrCond, dict[FieldType, FluxCoefficient]] = {
    BdrCond.PEC: {FieldType.E: ZERO, FieldType.H: ZERO},
    BdrCond.PMC: {FieldType.E: ZERO, FieldType.H: ZERO},
    BdrCond.SMA: {
        FieldType.E: FluxCoefficient(alpha=-1.0, beta=0.0),
        FieldType.H: FluxCoefficient(alpha=-1.0, beta=0.0),
    },
}


def interior_flux_coefficient() -> FluxCoefficient:
    """Central flux through interior faces, independent of the flux type."""
    return _INTERIOR


def interior_penalty_flux_coefficient(flux_type: FluxType | str) -> FluxCoefficient:
    """
    Penalty weights on interior faces.

    Raises:
        UnsupportedFluxType: If ``flux_type`` is not a known flux type.
    """
    return _INTERIOR_PENALTY[as_flux_type(flux_type)]


def boundary_flux_coefficient(field: FieldType | int, bdr_cond: BdrCond | str) -> FluxCoefficient:
    """
    Non-penalty weights on a boundary face for the equation of ``field``.

    Raises:
        InvalidFieldReference: If ``field`` is not E or H.
        UnsupportedBoundaryCondition: If ``bdr_cond`` is not a known condition.
    """
    return _BOUNDARY[as_bdr_cond(bdr_cond)][as_field_type(field)]


def boundary_penalty_flux_coefficient(
    field: FieldType | int,
    bdr_cond: BdrCond | str,
    flux_type: FluxType | str,
) -> FluxCoefficient:
    """
    Penalty weights on a boundary face for the equation of ``field``.

    Centered fluxes carry no penalty on any boundary. Upwind fluxes only
    penalize absorbing (SMA) boundaries.

    Raises:
        UnsupportedFluxType: If ``flux_type`` is not a known flux type.
        UnsupportedBoundaryCondition: If ``bdr_cond`` is not a known condition.
        InvalidFieldReference: If ``field`` is not E or H.
    """
    flux_type = as_flux_type(flux_type)
    bdr_cond = as_bdr_cond(bdr_cond)
    field = as_field_type(field)
    if flux_type == FluxType.CENTERED:
        return ZERO
    return _BOUNDARY_UPWIND_PENALTY[bdr_cond][field]


def flux_coefficient(
    kind: FaceKind | str,
    penalty: bool,
    flux_type: FluxType | str,
    field: FieldType | int | None = None,
    bdr_cond: BdrCond | str | None = None,
) -> FluxCoefficient:
    """
    Look up the flux weights of one face kind.

    Args:
        kind: Interior or boundary face.
        penalty: Whether the penalty (upwinding) weights are requested.
        flux_type: Centered or upwind.
        field: Field whose evolution equation receives the flux. Required for boundary faces.
        bdr_cond: Boundary condition of the face. Required for boundary faces.

    Raises:
        UnsupportedPolicy: If ``kind`` is unknown.
        UnsupportedFluxType: If ``flux_type`` is unknown.
        UnsupportedBoundaryCondition: If ``bdr_cond`` is unknown or missing on a boundary face.
        InvalidFieldReference: If ``field`` is invalid or missing on a boundary face.

    Returns:
        The (alpha, beta) pair.
    """
    try:
        kind = FaceKind(kind)
    except ValueError:
        raise UnsupportedPolicy(f"Unknown face kind {kind!r}.") from None

    if kind == FaceKind.INTERIOR:
        if penalty:
            return interior_penalty_flux_coefficient(flux_type)
        as_flux_type(flux_type)
        return interior_flux_coefficient()

    if bdr_cond is None:
        raise UnsupportedBoundaryCondition("Boundary flux requested without a boundary condition.")
    if field is None:
        # as_field_type raises InvalidFieldReference with a consistent message
        as_field_type(field)
    if penalty:
        return boundary_penalty_flux_coefficient(field, bdr_cond, flux_type)
    as_flux_type(flux_type)
    return boundary_flux_coefficient(field, bdr_cond)
