"""
Operator Builders
=================
Assembled sparse operators of the Maxwell DG scheme.

Every builder returns an assembled ``BilinearForm``. Operators acting along a
direction the mesh does not have are returned as exact zero operators so the
evolution operator can treat 1D, 2D and out-of-plane terms uniformly.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

from maxwelldg.config import MaxwellEvolOptions
from maxwelldg.fea.analysis.bilinear_form import BilinearForm
from maxwelldg.fea.analysis.integrators import (
    DerivativeIntegrator,
    InverseIntegrator,
    MassIntegrator,
    MaxwellDGTraceIntegrator,
    PiecewiseConstantCoefficient,
)
from maxwelldg.fea.maxwell import flux
from maxwelldg.fea.maxwell.types import Direction, FaceKind, FieldType, as_field_type

if TYPE_CHECKING:
    from maxwelldg.fea.analysis.model import Model
    from maxwelldg.fea.analysis.space import FiniteElementSpace

logger = logging.getLogger(__name__)


def _material_coefficient(field: FieldType, model: Model) -> PiecewiseConstantCoefficient:
    return PiecewiseConstantCoefficient(model.build_piecewise_arg_vector(field))


def build_mass_matrix(field: FieldType, model: Model, space: FiniteElementSpace) -> BilinearForm:
    """Mass operator weighted by the permittivity (E) or permeability (H) of each element."""
    form = BilinearForm(space)
    form.add_domain_integrator(MassIntegrator(_material_coefficient(as_field_type(field), model)))
    return form.assemble()


def build_inverse_mass_matrix(field: FieldType, model: Model, space: FiniteElementSpace) -> BilinearForm:
    """
    Inverse of the material-weighted mass operator.

    The mass operator is block diagonal in a DG space, so the inverse is
    assembled element by element.

    Raises:
        InvalidFieldReference: If ``field`` is not E or H.
    """
    form = BilinearForm(space)
    form.add_domain_integrator(InverseIntegrator(MassIntegrator(_material_coefficient(as_field_type(field), model))))
    return form.assemble()


def build_derivative_operator(direction: Direction, space: FiniteElementSpace) -> BilinearForm:
    """
    Stiffness operator S_ij = (phi_i, d phi_j / dx_direction).

    Returns an exact zero operator when ``direction`` is not a mesh direction.
    """
    direction = Direction(direction)
    if direction >= space.dimension:
        return BilinearForm.zero(space)
    form = BilinearForm(space)
    form.add_domain_integrator(DerivativeIntegrator(direction))
    return form.assemble()


def build_flux_operator(
    field: FieldType,
    directions: Sequence[Direction],
    use_penalty: bool,
    model: Model,
    space: FiniteElementSpace,
    options: MaxwellEvolOptions | None = None,
) -> BilinearForm:
    """
    Interior and boundary flux operator for the evolution equation of ``field``.

    Interior faces use the interior coefficients, each boundary condition of
    the model gets its own boundary integrator restricted to its attributes.

    Args:
        field: Field whose equation receives the flux.
        directions: Zero, one or two normal directions.
        use_penalty: Whether penalty coefficients are used.
        model: Boundary conditions and materials.
        space: The DG space.
        options: Flux type, upwind by default.

    Raises:
        InvalidFieldReference: If ``field`` is not E or H.
        UnsupportedFluxType: If the flux type is unknown.
        UnsupportedBoundaryCondition: If a boundary condition is unknown.

    Returns:
        The assembled operator, exactly zero if a direction is beyond the mesh dimension.
    """
    field = as_field_type(field)
    directions = tuple(Direction(d) for d in directions)
    options = options or MaxwellEvolOptions()
    if any(d >= space.dimension for d in directions):
        return BilinearForm.zero(space)

    form = BilinearForm(space)
    interior = flux.flux_coefficient(FaceKind.INTERIOR, use_penalty, options.flux_type)
    if interior != flux.ZERO:
        form.add_interior_face_integrator(MaxwellDGTraceIntegrator(directions, interior.alpha, interior.beta))

    for bdr_cond, attributes in model.get_boundary_to_marker().items():
        coefficient = flux.flux_coefficient(FaceKind.BOUNDARY, use_penalty, options.flux_type, field, bdr_cond)
        if coefficient == flux.ZERO:
            continue
        form.add_boundary_face_integrator(
            MaxwellDGTraceIntegrator(directions, coefficient.alpha, coefficient.beta),
            attributes,
        )
    return form.assemble()


def build_penalty_operator(
    field: FieldType,
    directions: Sequence[Direction],
    model: Model,
    space: FiniteElementSpace,
    options: MaxwellEvolOptions | None = None,
) -> BilinearForm:
    """Flux operator with penalty coefficients, see ``build_flux_operator``."""
    return build_flux_operator(field, directions, True, model, space, options)


def build_by_mult(op1: BilinearForm, op2: BilinearForm, space: FiniteElementSpace) -> BilinearForm:
    """Standalone operator op1 * op2; both operands are left untouched."""
    return BilinearForm.from_matrix(space, op1.sparse_matrix @ op2.sparse_matrix)
