import pytest

from maxwelldg.exceptions import (
    InvalidFieldReference,
    UnsupportedBoundaryCondition,
    UnsupportedFluxType,
    UnsupportedPolicy,
)
from maxwelldg.fea.maxwell import flux
from maxwelldg.fea.maxwell.types import BdrCond, FaceKind, FieldType, FluxCoefficient, FluxType, alt_field

E, H = FieldType.E, FieldType.H


@pytest.mark.parametrize("flux_type", list(FluxType))
def test_interior_flux_is_central_for_every_flux_type(flux_type):
    assert flux.flux_coefficient(FaceKind.INTERIOR, False, flux_type) == FluxCoefficient(1.0, 0.0)


@pytest.mark.parametrize(
    "flux_type, expected",
    [
        (FluxType.CENTERED, FluxCoefficient(0.0, 0.0)),
        (FluxType.UPWIND, FluxCoefficient(0.0, 0.5)),
    ],
)
def test_interior_penalty(flux_type, expected):
    assert flux.flux_coefficient(FaceKind.INTERIOR, True, flux_type) == expected
    assert flux.interior_penalty_flux_coefficient(flux_type) == expected


@pytest.mark.parametrize(
    "bdr_cond, field, expected",
    [
        (BdrCond.PEC, E, FluxCoefficient(0.0, 0.0)),
        (BdrCond.PEC, H, FluxCoefficient(2.0, 0.0)),
        (BdrCond.PMC, E, FluxCoefficient(2.0, 0.0)),
        (BdrCond.PMC, H, FluxCoefficient(0.0, 0.0)),
        (BdrCond.SMA, E, FluxCoefficient(1.0, 0.0)),
        (BdrCond.SMA, H, FluxCoefficient(1.0, 0.0)),
    ],
)
@pytest.mark.parametrize("flux_type", list(FluxType))
def test_boundary_flux(bdr_cond, field, expected, flux_type):
    assert flux.flux_coefficient(FaceKind.BOUNDARY, False, flux_type, field, bdr_cond) == expected


@pytest.mark.parametrize("bdr_cond", list(BdrCond))
@pytest.mark.parametrize("field", list(FieldType))
def test_boundary_penalty_centered_is_zero(bdr_cond, field):
    coefficient = flux.flux_coefficient(FaceKind.BOUNDARY, True, FluxType.CENTERED, field, bdr_cond)
    assert coefficient == FluxCoefficient(0.0, 0.0)


@pytest.mark.parametrize(
    "bdr_cond, field, expected",
    [
        (BdrCond.PEC, E, FluxCoefficient(0.0, 0.0)),
        (BdrCond.PEC, H, FluxCoefficient(0.0, 0.0)),
        (BdrCond.PMC, E, FluxCoefficient(0.0, 0.0)),
        (BdrCond.PMC, H, FluxCoefficient(0.0, 0.0)),
        (BdrCond.SMA, E, FluxCoefficient(-1.0, 0.0)),
        (BdrCond.SMA, H, FluxCoefficient(-1.0, 0.0)),
    ],
)
def test_boundary_penalty_upwind(bdr_cond, field, expected):
    assert flux.flux_coefficient(FaceKind.BOUNDARY, True, FluxType.UPWIND, field, bdr_cond) == expected


def test_string_values_are_accepted():
    assert flux.flux_coefficient("Boundary", True, "Upwind", E, "SMA") == FluxCoefficient(-1.0, 0.0)


@pytest.mark.parametrize("penalty", [False, True])
def test_unknown_flux_type(penalty):
    with pytest.raises(UnsupportedFluxType):
        flux.flux_coefficient(FaceKind.INTERIOR, penalty, "Lax-Friedrichs")
    with pytest.raises(UnsupportedPolicy):
        flux.flux_coefficient(FaceKind.BOUNDARY, penalty, "Lax-Friedrichs", E, BdrCond.PEC)


@pytest.mark.parametrize("penalty", [False, True])
def test_unknown_boundary_condition(penalty):
    with pytest.raises(UnsupportedBoundaryCondition):
        flux.flux_coefficient(FaceKind.BOUNDARY, penalty, FluxType.UPWIND, E, "TFSF")
    with pytest.raises(UnsupportedBoundaryCondition):
        flux.flux_coefficient(FaceKind.BOUNDARY, penalty, FluxType.UPWIND, E, None)


def test_boundary_flux_needs_a_valid_field():
    with pytest.raises(InvalidFieldReference):
        flux.flux_coefficient(FaceKind.BOUNDARY, False, FluxType.UPWIND, None, BdrCond.PEC)
    with pytest.raises(InvalidFieldReference):
        flux.boundary_flux_coefficient(7, BdrCond.PEC)


def test_unknown_face_kind():
    with pytest.raises(UnsupportedPolicy):
        flux.flux_coefficient("Periodic", False, FluxType.UPWIND)


def test_alt_field():
    assert alt_field(E) == H
    assert alt_field(H) == E
    assert alt_field(0) == H
    assert alt_field(alt_field(E)) == E


@pytest.mark.parametrize("field", [2, -1, "E", None, 1.0])
def test_alt_field_rejects_invalid_fields(field):
    with pytest.raises(InvalidFieldReference):
        alt_field(field)
