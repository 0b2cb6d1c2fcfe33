from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

import numpy as np

from maxwelldg.fea.analysis.finite_elements.finite_element import FiniteElement
from maxwelldg.fea.analysis.finite_elements.line2 import lagrange_1d, lagrange_1d_derivative
import maxwelldg.fea.analysis.gauss as gauss

if TYPE_CHECKING:
    import numpy.typing as npt


# Reference vertices, counter-clockwise:
#   3 ----- 2
#   |       |
#   0 ----- 1
VERTICES = np.array([
    [-1.0, -1.0],
    [1.0, -1.0],
    [1.0, 1.0],
    [-1.0, 1.0],
])


class Quad4(FiniteElement):
    """
    Four-vertex quadrilateral with a tensor-product Gauss-Lobatto nodal basis.

    Nodes are numbered lexicographically with xi running fastest, so node
    (i, j) has index i + (order + 1) * j.
    """

    dim = 2
    geometry = "quad"
    weight_order = 1
    reference_vertices = VERTICES
    local_faces = ((0, 1), (1, 2), (2, 3), (3, 0))

    @classmethod
    @lru_cache(maxsize=None)
    def reference_nodes(cls, order: int) -> npt.NDArray[np.float64]:
        nodes_1d = gauss.gauss_lobatto_points(order + 1)
        xi, eta = np.meshgrid(nodes_1d, nodes_1d, indexing="xy")
        return np.column_stack([xi.ravel(), eta.ravel()])

    @classmethod
    def basis(cls, order: int, points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        points = np.atleast_2d(points)
        l_xi = lagrange_1d(order, points[:, 0])
        l_eta = lagrange_1d(order, points[:, 1])
        return np.einsum("qj,qi->qji", l_eta, l_xi).reshape(len(points), -1)

    @classmethod
    def basis_derivatives(cls, order: int, points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        points = np.atleast_2d(points)
        n_points = len(points)
        l_xi = lagrange_1d(order, points[:, 0])
        l_eta = lagrange_1d(order, points[:, 1])
        dl_xi = lagrange_1d_derivative(order, points[:, 0])
        dl_eta = lagrange_1d_derivative(order, points[:, 1])
        d_xi = np.einsum("qj,qi->qji", l_eta, dl_xi).reshape(n_points, -1)
        d_eta = np.einsum("qj,qi->qji", dl_eta, l_xi).reshape(n_points, -1)
        return np.stack([d_xi, d_eta], axis=-1)

    @staticmethod
    def geometric_shape_functions(points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        points = np.atleast_2d(points)
        xi = points[:, [0]]
        eta = points[:, [1]]
        return 0.25 * (1.0 + xi * VERTICES[:, 0]) * (1.0 + eta * VERTICES[:, 1])

    @staticmethod
    def geometric_shape_derivatives(points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        points = np.atleast_2d(points)
        xi = points[:, [0]]
        eta = points[:, [1]]
        d_xi = 0.25 * VERTICES[:, 0] * (1.0 + eta * VERTICES[:, 1])
        d_eta = 0.25 * VERTICES[:, 1] * (1.0 + xi * VERTICES[:, 0])
        return np.stack([d_xi, d_eta], axis=-1)

    @staticmethod
    def integration_rule(order: int) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        return gauss.gauss_points_weights_quadrilateral(gauss.n_points_for_order(order))

    def area(self) -> float:
        """Shoelace area of the element."""
        x = self.vertices[:, 0]
        y = self.vertices[:, 1]
        return 0.5 * float(abs(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1))))
