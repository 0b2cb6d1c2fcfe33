"""
Bilinear Form Integrators
=========================
Local matrices assembled by ``BilinearForm``: element (domain) integrators and
face integrators, plus the coefficients they are weighted with.

Face integrators return a dense matrix over the degrees of freedom of element
1 followed by those of element 2 (element 1 only on boundary faces), test
functions in rows and trial functions in columns.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Mapping, Sequence

import numpy as np

from maxwelldg.fea.analysis.finite_elements import integrate_product
from maxwelldg.fea.maxwell.types import Direction

if TYPE_CHECKING:
    import numpy.typing as npt

    from maxwelldg.fea.analysis.finite_elements import Face, FiniteElement


class Coefficient(ABC):
    @abstractmethod
    def eval(self, element: FiniteElement, points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """Values at physical points of ``element``, shape (n_points, )."""
        pass


class ConstantCoefficient(Coefficient):
    def __init__(self, value: float = 1.0) -> None:
        self.value = float(value)

    def eval(self, element: FiniteElement, points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        return np.full(len(points), self.value)


class PiecewiseConstantCoefficient(Coefficient):
    """Constant per element attribute."""

    def __init__(self, values: Mapping[int, float]) -> None:
        self.values = {int(k): float(v) for k, v in values.items()}

    def eval(self, element: FiniteElement, points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        try:
            value = self.values[element.attribute]
        except KeyError:
            raise ValueError(f"No coefficient value for element attribute {element.attribute}.") from None
        return np.full(len(points), value)


class DomainIntegrator(ABC):
    @abstractmethod
    def assemble_element_matrix(self, element: FiniteElement) -> npt.NDArray[np.float64]:
        pass


class FaceIntegrator(ABC):
    @abstractmethod
    def assemble_face_matrix(self, face: Face) -> npt.NDArray[np.float64]:
        pass


class MassIntegrator(DomainIntegrator):
    def __init__(self, coefficient: Coefficient | None = None) -> None:
        self.coefficient = coefficient

    def assemble_element_matrix(self, element: FiniteElement) -> npt.NDArray[np.float64]:
        return element.get_mass_matrix(self.coefficient)


class InverseIntegrator(DomainIntegrator):
    """Inverse of the element matrix of another domain integrator."""

    def __init__(self, integrator: DomainIntegrator) -> None:
        self.integrator = integrator

    def assemble_element_matrix(self, element: FiniteElement) -> npt.NDArray[np.float64]:
        return np.linalg.inv(self.integrator.assemble_element_matrix(element))


class DerivativeIntegrator(DomainIntegrator):
    """(c phi_i, d phi_j / dx_direction); zero for directions beyond the element dimension."""

    def __init__(self, direction: Direction, coefficient: Coefficient | None = None) -> None:
        self.direction = Direction(direction)
        self.coefficient = coefficient

    def assemble_element_matrix(self, element: FiniteElement) -> npt.NDArray[np.float64]:
        return element.get_derivative_matrix(int(self.direction), self.coefficient)


class MaxwellDGTraceIntegrator(FaceIntegrator):
    """
    Face term of the Maxwell DG fluxes for zero, one or two normal directions.

    With n the unit normal out of element 1, [w] = w1 - w2 the trial jump and
    <v> = v1 + v2 the test trace sum (v1 alone on boundary faces):

    * no direction: beta [v][w]
    * one direction d: alpha n_d <v>[w] + beta |n_d| [v][w]
    * two directions (d1, d2): alpha n_d1 n_d2 <v>[w] + beta n_d1 n_d2 [v][w]

    The average enters unnormalised, so interior faces use alpha = 1 for the
    central flux and boundary weights 0, 1 or 2 describe the ghost state of the
    boundary condition directly. A direction beyond the mesh dimension has a
    zero normal component and yields a zero matrix.
    """

    def __init__(
        self,
        directions: Sequence[Direction],
        alpha: float,
        beta: float,
        coefficient: Coefficient | None = None,
    ) -> None:
        """
        Initialize the integrator.

        Args:
            directions: Zero, one or two directions.
            alpha: Weight of the average term.
            beta: Weight of the jump term.
            coefficient: Optional material weight evaluated on element 1.

        Raises:
            ValueError: If more than two directions are given.
        """
        if len(directions) > 2:
            raise ValueError(f"At most two directions are supported, got {len(directions)}.")
        self.directions = tuple(Direction(d) for d in directions)
        self.alpha = float(alpha)
        self.beta = float(beta)
        self.coefficient = coefficient

    def __repr__(self) -> str:
        names = ", ".join(d.name for d in self.directions)
        return f"MaxwellDGTraceIntegrator(directions=({names}), alpha={self.alpha}, beta={self.beta})"

    def _term_weights(self, normal: npt.NDArray[np.float64]) -> tuple[float, float]:
        if not self.directions:
            return 0.0, self.beta
        if len(self.directions) == 1:
            n_d = normal[self.directions[0]]
            return self.alpha * n_d, self.beta * abs(n_d)
        n_dd = normal[self.directions[0]] * normal[self.directions[1]]
        return self.alpha * n_dd, self.beta * n_dd

    @staticmethod
    def quadrature_order(face: Face) -> int:
        element = face.element1
        return element.weight_order + 2 * element.order

    def assemble_face_matrix(self, face: Face) -> npt.NDArray[np.float64]:
        quadrature = face.quadrature(self.quadrature_order(face))
        weights = quadrature.weights
        if self.coefficient is not None:
            weights = weights * self.coefficient.eval(face.element1, quadrature.points)

        if face.is_interior:
            test_sum = np.hstack([quadrature.trace1, quadrature.trace2])
            jump = np.hstack([quadrature.trace1, -quadrature.trace2])
        else:
            test_sum = quadrature.trace1
            jump = quadrature.trace1

        n = jump.shape[1]
        matrix = np.zeros((n, n), dtype=np.float64)
        average_weight, jump_weight = self._term_weights(quadrature.normal)
        if average_weight != 0.0:
            matrix += integrate_product(test_sum, jump, np.ascontiguousarray(weights * average_weight))
        if jump_weight != 0.0:
            matrix += integrate_product(jump, jump, np.ascontiguousarray(weights * jump_weight))
        return matrix
