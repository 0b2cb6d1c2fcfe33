"""
Maxwell Evolution Operator
==========================
Semi-discrete right-hand side of the 2D Maxwell equations for the
(Ez, Hx, Hy) polarization:

    dHx/dt = -dEz/dy
    dHy/dt =  dEz/dx
    dEz/dt =  dHy/dx - dHx/dy

The operator bank is assembled once at construction. Each entry already
carries the inverse mass matrix of the field whose equation it contributes
to, so evaluating the right-hand side is a sequence of sparse products.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from maxwelldg.config import MaxwellEvolOptions
from maxwelldg.exceptions import DimensionMismatch
from maxwelldg.fea.maxwell.operators import (
    build_by_mult,
    build_derivative_operator,
    build_flux_operator,
    build_inverse_mass_matrix,
    build_penalty_operator,
)
from maxwelldg.fea.maxwell.types import Direction, FieldType

if TYPE_CHECKING:
    import numpy.typing as npt

    from maxwelldg.fea.analysis.bilinear_form import BilinearForm
    from maxwelldg.fea.analysis.model import Model
    from maxwelldg.fea.analysis.space import FiniteElementSpace

logger = logging.getLogger(__name__)

E, H = FieldType.E, FieldType.H
X, Y, Z = Direction.X, Direction.Y, Direction.Z


class MaxwellEvolution2D:
    """
    Linear map from the field state to its time derivative.

    The state holds the six blocks (Ex, Ey, Ez, Hx, Hy, Hz), each ``n_dofs``
    long. Only Ez, Hx and Hy evolve; the rates of Ex, Ey and Hz are zero.

    Bank (f, f2 field types, d, d2 directions):
        MP[f]                 inverse mass x penalty flux without direction
        MS[f][d]              inverse mass x stiffness along d
        MFN[f][f2][d]         inverse mass x flux with normal component d
        MFNN[f][f2][d][d2]    inverse mass x flux with normal components d, d2

    Fluxes coupling a field to itself (f2 == f) use the penalty coefficients,
    fluxes coupling E and H use the central ones.
    """

    number_of_field_components = 2
    number_of_max_dimensions = 3

    def __init__(self, space: FiniteElementSpace, model: Model, options: MaxwellEvolOptions | None = None) -> None:
        """
        Assemble the operator bank.

        Args:
            space: DG space shared by all field components.
            model: Boundary conditions and materials.
            options: Flux type, upwind by default.

        Raises:
            DimensionMismatch: If the mesh is not two-dimensional.
            UnsupportedBoundaryCondition: If a boundary condition has no flux policy.
        """
        if space.dimension != 2:
            raise DimensionMismatch(f"MaxwellEvolution2D needs a 2D mesh, got a {space.dimension}D mesh.")
        self.space = space
        self.model = model
        self.options = options or MaxwellEvolOptions()
        self.n_dofs = space.n_dofs
        self.size = self.number_of_field_components * self.number_of_max_dimensions * self.n_dofs

        logger.info(
            f"Assembling Maxwell operator bank: {self.n_dofs} dofs per component, "
            f"{self.options.flux_type.value} flux."
        )
        inverse_mass = {f: build_inverse_mass_matrix(f, model, space) for f in FieldType}
        stiffness = {d: build_derivative_operator(d, space) for d in Direction}

        self.MP: tuple[BilinearForm, ...] = tuple(
            build_by_mult(inverse_mass[f], build_penalty_operator(f, [], model, space, self.options), space)
            for f in FieldType
        )
        self.MS: tuple[tuple[BilinearForm, ...], ...] = tuple(
            tuple(build_by_mult(inverse_mass[f], stiffness[d], space) for d in Direction)
            for f in FieldType
        )
        self.MFN: tuple[tuple[tuple[BilinearForm, ...], ...], ...] = tuple(
            tuple(
                tuple(
                    build_by_mult(
                        inverse_mass[f],
                        build_flux_operator(f, [d], f2 == f, model, space, self.options),
                        space,
                    )
                    for d in Direction
                )
                for f2 in FieldType
            )
            for f in FieldType
        )
        self.MFNN: tuple[tuple[tuple[tuple[BilinearForm, ...], ...], ...], ...] = tuple(
            tuple(
                tuple(
                    tuple(
                        build_by_mult(
                            inverse_mass[f],
                            build_flux_operator(f, [d, d2], f2 == f, model, space, self.options),
                            space,
                        )
                        for d2 in Direction
                    )
                    for d in Direction
                )
                for f2 in FieldType
            )
            for f in FieldType
        )
        logger.info("Maxwell operator bank assembled.")

    def __repr__(self) -> str:
        return f"MaxwellEvolution2D(size={self.size}, flux_type='{self.options.flux_type.value}')"

    def block(self, field: FieldType, direction: Direction) -> slice:
        """Slice of the state vector holding component ``direction`` of ``field``."""
        start = (self.number_of_max_dimensions * FieldType(field) + Direction(direction)) * self.n_dofs
        return slice(start, start + self.n_dofs)

    def mult(self, state: npt.NDArray[np.float64], out: npt.NDArray[np.float64]) -> None:
        """
        Write the time derivative of ``state`` into ``out``.

        Raises:
            DimensionMismatch: If ``state`` or ``out`` does not have ``size`` entries.
        """
        if state.shape != (self.size,) or out.shape != (self.size,):
            raise DimensionMismatch(
                f"State vectors must have {self.size} entries, got {state.shape} and {out.shape}."
            )
        MP, MS, MFN, MFNN = self.MP, self.MS, self.MFN, self.MFNN

        ez = state[self.block(E, Z)]
        hx = state[self.block(H, X)]
        hy = state[self.block(H, Y)]

        out[:] = 0.0
        ez_new = out[self.block(E, Z)]
        hx_new = out[self.block(H, X)]
        hy_new = out[self.block(H, Y)]

        # Hx
        MFNN[H][H][X][X].mult(hx, hx_new)
        MFNN[H][H][Y][X].add_mult(hy, hx_new)
        MP[H].add_mult(hx, hx_new, -1.0)
        MFN[H][E][Y].add_mult(ez, hx_new)
        hx_new *= 0.5
        MS[H][Y].add_mult(ez, hx_new, -1.0)

        # Hy
        MFNN[H][H][X][Y].mult(hx, hy_new)
        MFNN[H][H][Y][Y].add_mult(hy, hy_new)
        MP[H].add_mult(hy, hy_new, -1.0)
        MFN[H][E][X].add_mult(ez, hy_new, -1.0)
        hy_new *= 0.5
        MS[H][X].add_mult(ez, hy_new)

        # Ez
        MFN[E][H][Y].mult(hx, ez_new)
        MFN[E][H][X].add_mult(hy, ez_new, -1.0)
        MP[E].add_mult(ez, ez_new, -1.0)
        ez_new *= 0.5
        MS[E][X].add_mult(hy, ez_new)
        MS[E][Y].add_mult(hx, ez_new, -1.0)

    def evaluate(self, state: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """
        Time derivative of ``state``.

        Returns:
            A new vector of the same length as ``state``.
        """
        state = np.asarray(state, dtype=np.float64)
        out = np.empty(self.size, dtype=np.float64)
        if state.shape != (self.size,):
            raise DimensionMismatch(f"State vector must have {self.size} entries, got shape {state.shape}.")
        self.mult(state, out)
        return out

    def __call__(self, t: float, state: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """Autonomous right-hand side with the (t, y) signature of scipy.integrate.solve_ivp."""
        return self.evaluate(state)
