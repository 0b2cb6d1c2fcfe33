from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

import numpy as np
import scipy as sp

if TYPE_CHECKING:
    import numpy.typing as npt

    from maxwelldg.fea.analysis.space import FiniteElementSpace
    from maxwelldg.fea.analysis.integrators import DomainIntegrator, FaceIntegrator

logger = logging.getLogger(__name__)


class BilinearForm:
    """
    Sparse bilinear form on a DG space.

    Integrators are collected first and assembled once into a CSR matrix.
    After assembly the form is a read-only linear operator: further
    integrators are rejected and only products are offered.
    """

    def __init__(self, space: FiniteElementSpace) -> None:
        self.space = space
        self._domain_integrators: list[DomainIntegrator] = []
        self._interior_face_integrators: list[FaceIntegrator] = []
        self._boundary_face_integrators: list[tuple[FaceIntegrator, frozenset[int] | None]] = []
        self._matrix: sp.sparse.csr_matrix | None = None

    def __repr__(self) -> str:
        state = f"nnz={self._matrix.nnz}" if self._matrix is not None else "not assembled"
        return f"BilinearForm(shape={self.shape}, {state})"

    @classmethod
    def from_matrix(cls, space: FiniteElementSpace, matrix: sp.sparse.spmatrix) -> BilinearForm:
        """Wrap an already assembled sparse matrix."""
        form = cls(space)
        if matrix.shape != (space.n_dofs, space.n_dofs):
            raise ValueError(f"Matrix of shape {matrix.shape} does not match a space with {space.n_dofs} dofs.")
        form._matrix = sp.sparse.csr_matrix(matrix)
        return form

    @classmethod
    def zero(cls, space: FiniteElementSpace) -> BilinearForm:
        """Operator that is exactly zero for every input."""
        return cls.from_matrix(space, sp.sparse.csr_matrix((space.n_dofs, space.n_dofs), dtype=np.float64))

    def _check_not_assembled(self) -> None:
        if self._matrix is not None:
            raise RuntimeError("Integrators cannot be added to an assembled bilinear form.")

    def add_domain_integrator(self, integrator: DomainIntegrator) -> None:
        self._check_not_assembled()
        self._domain_integrators.append(integrator)

    def add_interior_face_integrator(self, integrator: FaceIntegrator) -> None:
        self._check_not_assembled()
        self._interior_face_integrators.append(integrator)

    def add_boundary_face_integrator(self, integrator: FaceIntegrator, attributes: Iterable[int] | None = None) -> None:
        """
        Add a boundary face integrator.

        Args:
            integrator: The face integrator.
            attributes: Boundary attributes the integrator acts on, all boundary faces when omitted.
        """
        self._check_not_assembled()
        marker = None if attributes is None else frozenset(int(a) for a in attributes)
        self._boundary_face_integrators.append((integrator, marker))

    def _local_matrices(self) -> Iterable[tuple[npt.NDArray[np.int64], npt.NDArray[np.float64]]]:
        """Yield (dofs, local matrix) pairs of every integrator."""
        if self._domain_integrators:
            for element in self.space.elements:
                for integrator in self._domain_integrators:
                    yield element.global_dofs, integrator.assemble_element_matrix(element)

        if self._interior_face_integrators:
            for face in self.space.interior_faces:
                dofs = np.concatenate([face.element1.global_dofs, face.element2.global_dofs])
                for integrator in self._interior_face_integrators:
                    yield dofs, integrator.assemble_face_matrix(face)

        for integrator, marker in self._boundary_face_integrators:
            for face in self.space.boundary_faces:
                if marker is None or face.attribute in marker:
                    yield face.element1.global_dofs, integrator.assemble_face_matrix(face)

    def assemble(self) -> BilinearForm:
        """
        Assemble the global matrix from COO triplets of all local matrices.

        Duplicated entries are summed, so overlapping contributions add up.

        Returns:
            The form itself, to allow chaining.
        """
        self._check_not_assembled()
        n = self.space.n_dofs

        row_parts: list[npt.NDArray[np.int64]] = []
        col_parts: list[npt.NDArray[np.int64]] = []
        data_parts: list[npt.NDArray[np.float64]] = []
        for dofs, local in self._local_matrices():
            n_local = dofs.size
            row_parts.append(np.repeat(dofs, n_local))
            col_parts.append(np.tile(dofs, n_local))
            data_parts.append(local.ravel(order="C"))

        if row_parts:
            rows = np.concatenate(row_parts)
            cols = np.concatenate(col_parts)
            data = np.concatenate(data_parts)
        else:
            rows = cols = np.zeros(0, dtype=np.int64)
            data = np.zeros(0, dtype=np.float64)

        coo = sp.sparse.coo_matrix((data, (rows, cols)), shape=(n, n))
        self._matrix = coo.tocsr()
        self._matrix.sum_duplicates()
        logger.debug(f"Assembled {n}x{n} bilinear form with {self._matrix.nnz} stored entries.")
        return self

    @property
    def is_assembled(self) -> bool:
        return self._matrix is not None

    @property
    def sparse_matrix(self) -> sp.sparse.csr_matrix:
        if self._matrix is None:
            raise RuntimeError("Bilinear form has not been assembled.")
        return self._matrix

    @property
    def shape(self) -> tuple[int, int]:
        return self.space.n_dofs, self.space.n_dofs

    @property
    def is_zero(self) -> bool:
        matrix = self.sparse_matrix
        return matrix.nnz == 0 or not np.any(matrix.data)

    def to_dense(self) -> npt.NDArray[np.float64]:
        return self.sparse_matrix.toarray()

    def mult(self, x: npt.NDArray[np.float64], out: npt.NDArray[np.float64] | None = None) -> npt.NDArray[np.float64]:
        """
        Matrix-vector product A x.

        Args:
            x: Input vector.
            out: Optional output buffer, overwritten.
        """
        y = self.sparse_matrix @ x
        if out is None:
            return y
        out[:] = y
        return out

    def add_mult(self, x: npt.NDArray[np.float64], y: npt.NDArray[np.float64], a: float = 1.0) -> None:
        """In-place y += a * A x."""
        y += a * (self.sparse_matrix @ x)

    def __matmul__(self, x: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        return self.mult(x)
