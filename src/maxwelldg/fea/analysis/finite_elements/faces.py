from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

import maxwelldg.fea.analysis.gauss as gauss

if TYPE_CHECKING:
    import numpy.typing as npt
    from maxwelldg.fea.analysis.finite_elements.finite_element import FiniteElement


@dataclass(frozen=True)
class FaceQuadrature:
    """
    Integration data of one face.

    Attributes:
        points: (n_points, dim) physical integration points.
        weights: (n_points, ) weights including the face measure.
        normal: (3, ) unit normal pointing out of element 1, zero beyond the mesh dimension.
        trace1: (n_points, n_dofs1) basis of element 1 at the points.
        trace2: (n_points, n_dofs2) basis of element 2 at the points, None on boundary faces.
    """
    points: npt.NDArray[np.float64]
    weights: npt.NDArray[np.float64]
    normal: npt.NDArray[np.float64]
    trace1: npt.NDArray[np.float64]
    trace2: npt.NDArray[np.float64] | None


class Face:
    """
    Face shared by two elements (interior) or owned by one element (boundary).

    Element 1 is the "minus" side: the face normal points out of it and jumps
    are taken as trace of element 1 minus trace of element 2.
    """

    def __init__(
        self,
        index: int,
        element1: FiniteElement,
        local_face1: int,
        element2: FiniteElement | None = None,
        local_face2: int | None = None,
        attribute: int = 0,
    ) -> None:
        """
        Initialize the face.

        Args:
            index: Face index within its group (interior or boundary).
            element1: Element on the minus side.
            local_face1: Local face number in element 1.
            element2: Element on the plus side, None for boundary faces.
            local_face2: Local face number in element 2.
            attribute: Boundary attribute, 0 for interior faces.
        """
        self.id = index
        self.element1 = element1
        self.local_face1 = local_face1
        self.element2 = element2
        self.local_face2 = local_face2
        self.attribute = int(attribute)
        self._quadrature: dict[int, FaceQuadrature] = {}

    def __repr__(self) -> str:
        other = None if self.element2 is None else self.element2.id
        return f"Face(id={self.id}, elements=({self.element1.id}, {other}), attribute={self.attribute})"

    @property
    def is_interior(self) -> bool:
        return self.element2 is not None

    @property
    def vertex_ids(self) -> npt.NDArray[np.int64]:
        """Global vertex indices in the orientation of element 1."""
        local = self.element1.local_faces[self.local_face1]
        return self.element1.vertex_ids[list(local)]

    def _reference_points(
        self,
        element: FiniteElement,
        t: npt.NDArray[np.float64],
    ) -> npt.NDArray[np.float64]:
        """Reference coordinates in ``element`` of the face points with parameter ``t`` in [-1, 1]."""
        ids = list(element.vertex_ids)
        local = [ids.index(v) for v in self.vertex_ids]
        ref = element.reference_vertices[local]
        if len(local) == 1:
            return np.repeat(ref, len(t), axis=0)
        return np.outer(0.5 * (1.0 - t), ref[0]) + np.outer(0.5 * (1.0 + t), ref[1])

    def quadrature(self, order: int) -> FaceQuadrature:
        """
        Integration data exact for polynomials of degree ``order`` along the face.

        Results are cached per order since the geometry never changes.
        """
        if order in self._quadrature:
            return self._quadrature[order]

        element = self.element1
        normal = np.zeros(3, dtype=np.float64)
        if element.dim == 1:
            t = np.zeros(1)
            weights = np.ones(1)
            # outward reference normal is the sign of the reference vertex
            ref_sign = element.reference_vertices[element.local_faces[self.local_face1][0], 0]
            normal[0] = ref_sign * np.sign(element.vertices[1, 0] - element.vertices[0, 0])
        else:
            t, w = gauss.gauss_points_weights_edge(gauss.n_points_for_order(order))
            a, b = element.vertices[list(element.local_faces[self.local_face1])]
            tangent = b - a
            length = float(np.hypot(tangent[0], tangent[1]))
            # element 1 is counter-clockwise, so the outward normal is the tangent rotated clockwise
            normal[0] = tangent[1] / length
            normal[1] = -tangent[0] / length
            weights = w * 0.5 * length

        ref1 = self._reference_points(element, t)
        trace1 = np.ascontiguousarray(element.shape_functions(ref1))
        trace2 = None
        if self.element2 is not None:
            ref2 = self._reference_points(self.element2, t)
            trace2 = np.ascontiguousarray(self.element2.shape_functions(ref2))

        quadrature = FaceQuadrature(
            points=element.map_to_physical(ref1),
            weights=np.ascontiguousarray(weights, dtype=np.float64),
            normal=normal,
            trace1=trace1,
            trace2=trace2,
        )
        self._quadrature[order] = quadrature
        return quadrature
