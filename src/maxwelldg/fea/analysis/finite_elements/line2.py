from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

import numpy as np

from maxwelldg.fea.analysis.finite_elements.finite_element import FiniteElement
import maxwelldg.fea.analysis.gauss as gauss

if TYPE_CHECKING:
    import numpy.typing as npt


@lru_cache(maxsize=None)
def _lagrange_coefficients(order: int) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """
    Legendre coefficients of the Lagrange polynomials on the Gauss-Lobatto nodes.

    Column j holds the expansion of the j-th Lagrange polynomial, i.e. the
    inverse of the Legendre Vandermonde matrix.
    """
    nodes = gauss.gauss_lobatto_points(order + 1)
    vandermonde = np.polynomial.legendre.legvander(nodes, order)
    return nodes, np.linalg.inv(vandermonde)


def lagrange_1d(order: int, x: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Gauss-Lobatto Lagrange polynomials at ``x`` on [-1, 1], shape (len(x), order + 1)."""
    _, coefficients = _lagrange_coefficients(order)
    return np.polynomial.legendre.legvander(np.asarray(x, dtype=np.float64), order) @ coefficients


def lagrange_1d_derivative(order: int, x: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Derivatives of the Gauss-Lobatto Lagrange polynomials at ``x``, shape (len(x), order + 1)."""
    x = np.asarray(x, dtype=np.float64)
    if order == 0:
        return np.zeros((len(x), 1), dtype=np.float64)
    _, coefficients = _lagrange_coefficients(order)
    d_coefficients = np.polynomial.legendre.legder(coefficients, axis=0)
    return np.polynomial.legendre.legvander(x, order - 1) @ d_coefficients


class Line2(FiniteElement):
    """
    Segment with two vertices on the reference interval [-1, 1].

    Local face 0 is the vertex at xi = -1, local face 1 the vertex at xi = +1.
    """

    dim = 1
    geometry = "line"
    weight_order = 0
    reference_vertices = np.array([[-1.0], [1.0]])
    local_faces = ((0,), (1,))

    @classmethod
    @lru_cache(maxsize=None)
    def reference_nodes(cls, order: int) -> npt.NDArray[np.float64]:
        nodes, _ = _lagrange_coefficients(order)
        return nodes.reshape(-1, 1)

    @classmethod
    def basis(cls, order: int, points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        return lagrange_1d(order, np.asarray(points).reshape(-1))

    @classmethod
    def basis_derivatives(cls, order: int, points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        return lagrange_1d_derivative(order, np.asarray(points).reshape(-1))[:, :, np.newaxis]

    @staticmethod
    def geometric_shape_functions(points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        xi = np.asarray(points, dtype=np.float64).reshape(-1)
        return np.column_stack([0.5 * (1.0 - xi), 0.5 * (1.0 + xi)])

    @staticmethod
    def geometric_shape_derivatives(points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        n_points = np.asarray(points).reshape(-1).size
        d_n = np.empty((n_points, 2, 1), dtype=np.float64)
        d_n[:, 0, 0] = -0.5
        d_n[:, 1, 0] = 0.5
        return d_n

    @staticmethod
    def integration_rule(order: int) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        points, weights = gauss.gauss_points_weights_edge(gauss.n_points_for_order(order))
        return points.reshape(-1, 1), weights

    def length(self) -> float:
        return float(abs(self.vertices[1, 0] - self.vertices[0, 0]))
