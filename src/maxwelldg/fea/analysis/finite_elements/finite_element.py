from __future__ import annotations

from abc import ABC, abstractmethod

from typing import TYPE_CHECKING

import numpy as np
import numba as nb

if TYPE_CHECKING:
    import numpy.typing as npt
    from maxwelldg.fea.analysis.integrators import Coefficient


@nb.jit(cache=True, fastmath=True)
def integrate_product(
    test: npt.NDArray[np.float64],
    trial: npt.NDArray[np.float64],
    weights: npt.NDArray[np.float64],
) -> npt.NDArray[np.float64]:
    """
    Quadrature of the products of test and trial functions.

    Args:
        test: (n_points, n_test) values of the test functions at the integration points.
        trial: (n_points, n_trial) values of the trial functions at the integration points.
        weights: (n_points, ) integration weights including the Jacobian and any coefficient.

    Returns:
        (n_test, n_trial) matrix with entries sum_q w_q * test[q, i] * trial[q, j].
    """
    n_points, n_test = test.shape
    n_trial = trial.shape[1]
    out = np.zeros((n_test, n_trial), dtype=np.float64)
    for q in range(n_points):
        w = weights[q]
        if w == 0.0:
            continue
        for i in range(n_test):
            tw = test[q, i] * w
            for j in range(n_trial):
                out[i, j] += tw * trial[q, j]
    return out


class FiniteElement(ABC):
    """
    Abstract base class for discontinuous nodal finite elements.

    Each element owns a contiguous block of degrees of freedom: the nodal values
    of its Lagrange basis. The geometry is described by the element vertices and
    the linear (or bilinear) map from the reference element.
    """

    dim: int
    geometry: str
    weight_order: int  # polynomial order of det(J) on the reference element
    reference_vertices: npt.NDArray[np.float64]
    local_faces: tuple[tuple[int, ...], ...]

    def __init__(
        self,
        index: int,
        attribute: int,
        vertex_ids: npt.NDArray[np.int64],
        vertices: npt.NDArray[np.float64],
        order: int,
    ) -> None:
        """
        Initialize the finite element.

        Args:
            index: Element index in the mesh.
            attribute: Element attribute selecting the material.
            vertex_ids: Global indices of the element vertices.
            vertices: (n_vertices, dim) coordinates of the element vertices.
            order: Polynomial order of the nodal basis.
        """
        self.id = index
        self.attribute = int(attribute)
        self.vertex_ids = np.asarray(vertex_ids, dtype=np.int64)
        self.vertices = np.asarray(vertices, dtype=np.float64).reshape(len(self.vertex_ids), self.dim)
        self.order = order
        self.global_dofs: npt.NDArray[np.int64] = np.zeros(0, dtype=np.int64)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id}, attribute={self.attribute}, order={self.order})"

    @classmethod
    @abstractmethod
    def reference_nodes(cls, order: int) -> npt.NDArray[np.float64]:
        """Nodal points of the basis on the reference element, shape (n_dofs, dim)."""
        pass

    @classmethod
    @abstractmethod
    def basis(cls, order: int, points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """Nodal basis functions at reference points, shape (n_points, n_dofs)."""
        pass

    @classmethod
    @abstractmethod
    def basis_derivatives(cls, order: int, points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """Reference gradients of the nodal basis, shape (n_points, n_dofs, dim)."""
        pass

    @staticmethod
    @abstractmethod
    def geometric_shape_functions(points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """Vertex shape functions of the geometric map, shape (n_points, n_vertices)."""
        pass

    @staticmethod
    @abstractmethod
    def geometric_shape_derivatives(points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """Reference gradients of the vertex shape functions, shape (n_points, n_vertices, dim)."""
        pass

    @staticmethod
    @abstractmethod
    def integration_rule(order: int) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """Reference points and weights integrating polynomials of degree ``order`` exactly."""
        pass

    @property
    def number_of_dofs(self) -> int:
        return len(type(self).reference_nodes(self.order))

    def get_integration_scheme(self, order: int | None = None) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """
        Get the integration scheme for the finite element.

        Args:
            order: Polynomial degree to integrate exactly. Defaults to the degree of a mass integrand.

        Returns:
            Tuple of Gauss points and weights for numerical integration.
        """
        if order is None:
            order = 2 * self.order + self.weight_order
        return self.integration_rule(order)

    def shape_functions(self, points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        return type(self).basis(self.order, points)

    def map_to_physical(self, points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """Physical coordinates of reference points, shape (n_points, dim)."""
        return self.geometric_shape_functions(points) @ self.vertices

    def jacobian_matrices(self, points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """
        Jacobian matrices J[q, a, b] = dx_a / dxi_b of the geometric map.

        Returns:
            Array of shape (n_points, dim, dim).
        """
        d_n = self.geometric_shape_derivatives(points)
        return np.einsum("qvb,va->qab", d_n, self.vertices)

    def jacobian_determinants(self, points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        return np.linalg.det(self.jacobian_matrices(points))

    def physical_shape_derivatives(self, points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """
        Physical gradients of the nodal basis.

        Returns:
            Array of shape (n_points, n_dofs, dim).
        """
        inv_j = np.linalg.inv(self.jacobian_matrices(points))
        d_ref = type(self).basis_derivatives(self.order, points)
        return np.einsum("qnb,qba->qna", d_ref, inv_j)

    @property
    def dof_coordinates(self) -> npt.NDArray[np.float64]:
        """Physical coordinates of the nodal points, shape (n_dofs, dim)."""
        return self.map_to_physical(type(self).reference_nodes(self.order))

    def _weights(
        self,
        points: npt.NDArray[np.float64],
        weights: npt.NDArray[np.float64],
        coefficient: Coefficient | None,
    ) -> npt.NDArray[np.float64]:
        w = weights * np.abs(self.jacobian_determinants(points))
        if coefficient is not None:
            w = w * coefficient.eval(self, self.map_to_physical(points))
        return np.ascontiguousarray(w, dtype=np.float64)

    def get_mass_matrix(self, coefficient: Coefficient | None = None) -> npt.NDArray[np.float64]:
        """
        Calculate the mass matrix [M] with M_ij = (c phi_i, phi_j).

        Args:
            coefficient: Optional coefficient c, unit when omitted.

        Returns:
            Mass matrix for the element.
        """
        points, weights = self.get_integration_scheme(2 * self.order + self.weight_order)
        phi = np.ascontiguousarray(self.shape_functions(points))
        return integrate_product(phi, phi, self._weights(points, weights, coefficient))

    def get_derivative_matrix(self, direction: int, coefficient: Coefficient | None = None) -> npt.NDArray[np.float64]:
        """
        Calculate the stiffness matrix [S] with S_ij = (c phi_i, d phi_j / dx_direction).

        A direction outside the element dimension gives a zero matrix.

        Args:
            direction: Spatial direction of the derivative (0, 1 or 2).
            coefficient: Optional coefficient c, unit when omitted.

        Returns:
            Stiffness matrix for the element (test functions in rows).
        """
        n = self.number_of_dofs
        if direction >= self.dim:
            return np.zeros((n, n), dtype=np.float64)
        points, weights = self.get_integration_scheme(2 * self.order + self.weight_order)
        phi = np.ascontiguousarray(self.shape_functions(points))
        d_phi = np.ascontiguousarray(self.physical_shape_derivatives(points)[:, :, direction])
        return integrate_product(phi, d_phi, self._weights(points, weights, coefficient))
