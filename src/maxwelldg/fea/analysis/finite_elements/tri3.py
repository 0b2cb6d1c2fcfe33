from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

import numpy as np

from maxwelldg.fea.analysis.finite_elements.finite_element import FiniteElement
import maxwelldg.fea.analysis.gauss as gauss

if TYPE_CHECKING:
    import numpy.typing as npt


# B_N = [
#   [dN1(r,s)/dr, dN2(r,s)/dr, dN3(r,s)/dr],
#   [dN1(r,s)/ds, dN2(r,s)/ds, dN3(r,s)/ds]
# ]
B_N = np.array([
    [-1.0, 1.0, 0.0],
    [-1.0, 0.0, 1.0],
])


@lru_cache(maxsize=None)
def _exponents(order: int) -> tuple[tuple[int, int], ...]:
    return tuple((a, b) for b in range(order + 1) for a in range(order + 1 - b))


def _monomials(order: int, points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    r = points[:, [0]]
    s = points[:, [1]]
    a, b = np.array(_exponents(order)).T
    return r ** a * s ** b


def _monomial_derivatives(order: int, points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    r = points[:, [0]]
    s = points[:, [1]]
    a, b = np.array(_exponents(order)).T
    d_r = np.where(a > 0, a * r ** np.maximum(a - 1, 0), 0.0) * s ** b
    d_s = r ** a * np.where(b > 0, b * s ** np.maximum(b - 1, 0), 0.0)
    return np.stack([d_r, d_s], axis=-1)


@lru_cache(maxsize=None)
def _nodes_and_coefficients(order: int) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    if order == 0:
        nodes = np.array([[1.0 / 3.0, 1.0 / 3.0]])
    else:
        nodes = np.array([(i / order, j / order) for j in range(order + 1) for i in range(order + 1 - j)])
    return nodes, np.linalg.inv(_monomials(order, nodes))


class Tri3(FiniteElement):
    """
    Three-vertex triangle with an equispaced Lagrange nodal basis.

    Nodes are numbered row by row from the edge s = 0. The monomial
    Vandermonde matrix is well conditioned for the low orders used in practice.
    """

    dim = 2
    geometry = "triangle"
    weight_order = 0
    reference_vertices = np.array([
        [0.0, 0.0],
        [1.0, 0.0],
        [0.0, 1.0],
    ])
    local_faces = ((0, 1), (1, 2), (2, 0))

    @classmethod
    @lru_cache(maxsize=None)
    def reference_nodes(cls, order: int) -> npt.NDArray[np.float64]:
        nodes, _ = _nodes_and_coefficients(order)
        return nodes

    @classmethod
    def basis(cls, order: int, points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        _, coefficients = _nodes_and_coefficients(order)
        return _monomials(order, np.atleast_2d(points)) @ coefficients

    @classmethod
    def basis_derivatives(cls, order: int, points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        _, coefficients = _nodes_and_coefficients(order)
        d_mono = _monomial_derivatives(order, np.atleast_2d(points))
        return np.einsum("qmd,mn->qnd", d_mono, coefficients)

    @staticmethod
    def geometric_shape_functions(points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        points = np.atleast_2d(points)
        r = points[:, 0]
        s = points[:, 1]
        return np.column_stack([1.0 - r - s, r, s])

    @staticmethod
    def geometric_shape_derivatives(points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        n_points = len(np.atleast_2d(points))
        return np.broadcast_to(B_N.T, (n_points, 3, 2)).copy()

    @staticmethod
    def integration_rule(order: int) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        # the collapsed rule needs one extra degree for the Duffy Jacobian
        return gauss.gauss_points_weights_triangle(gauss.n_points_for_order(order + 1))

    def area(self) -> float:
        (x1, y1), (x2, y2), (x3, y3) = self.vertices
        return 0.5 * abs((x2 - x1) * (y3 - y1) - (x3 - x1) * (y2 - y1))
