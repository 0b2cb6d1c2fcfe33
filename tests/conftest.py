import numpy as np
import pytest

from maxwelldg.fea.analysis import FiniteElementSpace, Model
from maxwelldg.fea.maxwell.types import BdrCond
from maxwelldg.fea.pre import Mesh


def make_model(mesh: Mesh, bdr_cond: BdrCond = BdrCond.PEC) -> Model:
    """Model with the same boundary condition on every boundary attribute."""
    return Model(mesh, {attribute: bdr_cond for attribute in mesh.boundary_attribute_set})


def expected_jump_matrix_1d(n_elements: int, order: int) -> np.ndarray:
    """[v][w] on the interior faces of a uniform 1D mesh with a Gauss-Lobatto basis."""
    n_local = order + 1
    matrix = np.zeros((n_elements * n_local, n_elements * n_local))
    for e in range(n_elements - 1):
        a = e * n_local + order
        b = (e + 1) * n_local
        matrix[a, a] += 1.0
        matrix[a, b] -= 1.0
        matrix[b, a] -= 1.0
        matrix[b, b] += 1.0
    return matrix


def expected_sum_jump_matrix_1d(n_elements: int, order: int) -> np.ndarray:
    """n_x (v1 + v2)[w] on the interior faces of a uniform 1D mesh."""
    n_local = order + 1
    matrix = np.zeros((n_elements * n_local, n_elements * n_local))
    for e in range(n_elements - 1):
        a = e * n_local + order
        b = (e + 1) * n_local
        matrix[a, a] += 1.0
        matrix[a, b] -= 1.0
        matrix[b, a] += 1.0
        matrix[b, b] -= 1.0
    return matrix


@pytest.fixture
def rng():
    return np.random.default_rng(12345)


@pytest.fixture
def space_1d():
    def factory(n_elements: int = 3, order: int = 2, bdr_cond: BdrCond = BdrCond.PEC):
        mesh = Mesh.make_cartesian_1d(n_elements)
        return FiniteElementSpace(mesh, order), make_model(mesh, bdr_cond)
    return factory


@pytest.fixture
def space_2d():
    def factory(
        nx: int = 3,
        ny: int = 3,
        order: int = 2,
        bdr_cond: BdrCond = BdrCond.PEC,
        cell_type: str = "quad",
    ):
        mesh = Mesh.make_cartesian_2d(nx, ny, cell_type=cell_type)
        return FiniteElementSpace(mesh, order), make_model(mesh, bdr_cond)
    return factory
