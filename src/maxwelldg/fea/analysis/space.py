from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

import numpy as np

from maxwelldg.exceptions import InvalidConfiguration
from maxwelldg.fea.analysis.finite_elements import ELEMENT_TYPE_MAP, Face

if TYPE_CHECKING:
    import numpy.typing as npt

    from maxwelldg.fea.pre.mesh import Mesh
    from maxwelldg.fea.analysis.finite_elements import FiniteElement

logger = logging.getLogger(__name__)


class FiniteElementSpace:
    """
    Discontinuous nodal finite-element space of one scalar field.

    Element ``e`` owns the contiguous degrees of freedom
    ``e * n_local, ..., (e + 1) * n_local - 1``.
    """

    def __init__(self, mesh: Mesh, order: int) -> None:
        """
        Build the elements and faces of the space.

        Args:
            mesh: The mesh.
            order: Polynomial order of the nodal basis.

        Raises:
            InvalidConfiguration: If ``order`` is negative.
        """
        if order < 0:
            raise InvalidConfiguration(f"Polynomial order must be non-negative, got {order}.")
        self.mesh = mesh
        self.order = order

        element_class = ELEMENT_TYPE_MAP[mesh.cell_type]
        self.elements: list[FiniteElement] = [
            element_class(
                index=e,
                attribute=attribute,
                vertex_ids=cell,
                vertices=mesh.vertices[cell],
                order=order,
            )
            for e, (cell, attribute) in enumerate(zip(mesh.cells, mesh.attributes))
        ]
        self.n_local_dofs = self.elements[0].number_of_dofs
        for element in self.elements:
            start = element.id * self.n_local_dofs
            element.global_dofs = np.arange(start, start + self.n_local_dofs, dtype=np.int64)

        self.interior_faces = [
            Face(i, self.elements[e1], lf1, self.elements[e2], lf2)
            for i, (e1, lf1, e2, lf2) in enumerate(mesh.interior_faces)
        ]
        self.boundary_faces = [
            Face(i, self.elements[e], lf, attribute=attribute)
            for i, (e, lf, attribute) in enumerate(mesh.boundary_faces)
        ]
        logger.debug(
            f"Space of order {order}: {len(self.elements)} elements, {self.n_dofs} dofs, "
            f"{len(self.interior_faces)} interior and {len(self.boundary_faces)} boundary faces."
        )

    def __repr__(self) -> str:
        return f"FiniteElementSpace(order={self.order}, n_dofs={self.n_dofs})"

    @property
    def dimension(self) -> int:
        return self.mesh.dimension

    @property
    def n_dofs(self) -> int:
        return self.n_local_dofs * len(self.elements)

    @property
    def dof_coordinates(self) -> npt.NDArray[np.float64]:
        """Physical coordinates of all nodal points, shape (n_dofs, dim)."""
        return np.vstack([element.dof_coordinates for element in self.elements])

    def project(self, function: Callable[[npt.NDArray[np.float64]], npt.NDArray[np.float64]]) -> npt.NDArray[np.float64]:
        """
        Nodal interpolation of ``function``.

        Args:
            function: Vectorized function of physical points (n_points, dim).

        Returns:
            Vector of nodal values of length ``n_dofs``.
        """
        values = np.asarray(function(self.dof_coordinates), dtype=np.float64)
        return np.broadcast_to(values, (self.n_dofs,)).copy()

    def evaluate(
        self,
        values: npt.NDArray[np.float64],
        reference_points: npt.NDArray[np.float64],
    ) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """
        Evaluate a field at the same reference points of every element.

        Args:
            values: Nodal values of length ``n_dofs``.
            reference_points: (n_points, dim) points on the reference element.

        Returns:
            Physical points of shape (n_elements * n_points, dim) and the field values there.
        """
        phi = self.elements[0].shape_functions(reference_points)
        local = np.asarray(values).reshape(len(self.elements), self.n_local_dofs)
        points = np.vstack([element.map_to_physical(reference_points) for element in self.elements])
        return points, (local @ phi.T).ravel()
