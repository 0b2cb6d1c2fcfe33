import numpy as np
import pytest

from conftest import make_model
from maxwelldg.config import MaxwellEvolOptions
from maxwelldg.exceptions import DimensionMismatch
from maxwelldg.fea.analysis import FiniteElementSpace
from maxwelldg.fea.maxwell.evolution import MaxwellEvolution2D
from maxwelldg.fea.maxwell.operators import build_mass_matrix
from maxwelldg.fea.maxwell.types import BdrCond, Direction, FieldType, FluxType
from maxwelldg.fea.pre import Mesh

E, H = FieldType.E, FieldType.H
X, Y, Z = Direction.X, Direction.Y, Direction.Z


def build_evolution(space_2d, flux_type=FluxType.UPWIND, **kwargs):
    space, model = space_2d(**kwargs)
    evolution = MaxwellEvolution2D(space, model, MaxwellEvolOptions(flux_type=flux_type))
    return evolution, model


def energy_rate(evolution, model, state):
    """Return (q^T M dq/dt, sum of |q| |M dq/dt| per component)."""
    rate = evolution.evaluate(state)
    total = 0.0
    scale = 0.0
    for f in FieldType:
        mass = build_mass_matrix(f, model, evolution.space).sparse_matrix
        for d in Direction:
            block = evolution.block(f, d)
            weighted = mass @ rate[block]
            total += float(state[block] @ weighted)
            scale += float(np.linalg.norm(state[block]) * np.linalg.norm(weighted))
    return total, scale


def test_requires_2d_mesh():
    mesh = Mesh.make_cartesian_1d(3)
    space = FiniteElementSpace(mesh, 2)
    with pytest.raises(DimensionMismatch):
        MaxwellEvolution2D(space, make_model(mesh))


def test_state_layout(space_2d):
    evolution, _ = build_evolution(space_2d, nx=2, ny=2, order=1)
    n = evolution.n_dofs
    assert evolution.size == 6 * n
    assert evolution.block(E, X) == slice(0, n)
    assert evolution.block(E, Z) == slice(2 * n, 3 * n)
    assert evolution.block(H, X) == slice(3 * n, 4 * n)
    assert evolution.block(H, Z) == slice(5 * n, 6 * n)


def test_zero_state_has_zero_rate(space_2d):
    evolution, _ = build_evolution(space_2d, nx=2, ny=2, order=2)
    rate = evolution.evaluate(np.zeros(evolution.size))
    assert rate.shape == (evolution.size,)
    assert np.all(rate == 0.0)


def test_only_ez_hx_hy_evolve(space_2d, rng):
    evolution, _ = build_evolution(space_2d, nx=2, ny=2, order=2)
    rate = evolution.evaluate(rng.normal(size=evolution.size))
    for f, d in [(E, X), (E, Y), (H, Z)]:
        assert np.all(rate[evolution.block(f, d)] == 0.0)
    for f, d in [(E, Z), (H, X), (H, Y)]:
        assert np.linalg.norm(rate[evolution.block(f, d)]) > 0.0


def test_rate_is_linear(space_2d, rng):
    evolution, _ = build_evolution(space_2d, nx=2, ny=3, order=2)
    a = rng.normal(size=evolution.size)
    b = rng.normal(size=evolution.size)
    np.testing.assert_allclose(
        evolution.evaluate(2.0 * a - b),
        2.0 * evolution.evaluate(a) - evolution.evaluate(b),
        atol=1e-9,
    )
    np.testing.assert_array_equal(evolution(0.5, a), evolution.evaluate(a))


def test_wrong_state_length_is_rejected(space_2d):
    evolution, _ = build_evolution(space_2d, nx=1, ny=1, order=1)
    with pytest.raises(DimensionMismatch):
        evolution.evaluate(np.zeros(evolution.size - 1))
    with pytest.raises(DimensionMismatch):
        evolution.mult(np.zeros(evolution.size), np.zeros(3))


def test_bank_shape_and_out_of_plane_entries(space_2d):
    evolution, _ = build_evolution(space_2d, nx=2, ny=2, order=1)
    assert len(evolution.MP) == 2
    assert all(len(row) == 3 for row in evolution.MS)
    assert all(len(evolution.MFN[f][f2]) == 3 for f in FieldType for f2 in FieldType)
    assert all(len(evolution.MFNN[f][f2][d]) == 3 for f in FieldType for f2 in FieldType for d in Direction)

    for f in FieldType:
        assert evolution.MS[f][Z].is_zero
        assert not evolution.MS[f][X].is_zero
        for f2 in FieldType:
            assert evolution.MFN[f][f2][Z].is_zero
            for d in Direction:
                assert evolution.MFNN[f][f2][Z][d].is_zero
                assert evolution.MFNN[f][f2][d][Z].is_zero
    assert not evolution.MFN[H][E][X].is_zero
    assert not evolution.MFN[E][H][Y].is_zero


def test_centered_flux_has_no_penalty_terms(space_2d):
    evolution, _ = build_evolution(space_2d, FluxType.CENTERED, nx=2, ny=2, order=2, bdr_cond=BdrCond.SMA)
    for f in FieldType:
        assert evolution.MP[f].is_zero
        for d in Direction:
            for d2 in Direction:
                assert evolution.MFNN[f][f][d][d2].is_zero


def test_upwind_flux_has_penalty_terms(space_2d):
    evolution, _ = build_evolution(space_2d, FluxType.UPWIND, nx=2, ny=2, order=2)
    for f in FieldType:
        assert not evolution.MP[f].is_zero
    assert not evolution.MFNN[H][H][X][X].is_zero


@pytest.mark.parametrize("bdr_cond", list(BdrCond))
@pytest.mark.parametrize("cell_type", ["quad", "triangle"])
def test_centered_flux_conserves_energy(space_2d, rng, bdr_cond, cell_type):
    evolution, model = build_evolution(
        space_2d, FluxType.CENTERED, nx=3, ny=2, order=2, bdr_cond=bdr_cond, cell_type=cell_type
    )
    total, scale = energy_rate(evolution, model, rng.normal(size=evolution.size))
    assert abs(total) <= 1e-10 * scale


@pytest.mark.parametrize("bdr_cond", list(BdrCond))
@pytest.mark.parametrize("cell_type", ["quad", "triangle"])
def test_upwind_flux_dissipates_energy(space_2d, rng, bdr_cond, cell_type):
    evolution, model = build_evolution(
        space_2d, FluxType.UPWIND, nx=3, ny=2, order=2, bdr_cond=bdr_cond, cell_type=cell_type
    )
    total, scale = energy_rate(evolution, model, rng.normal(size=evolution.size))
    assert total < 0.0
    assert total <= 1e-10 * scale


def test_smooth_pec_mode_has_analytic_rate(space_2d):
    # Ez = sin(pi x) sin(pi y) at rest: dHx/dt = -dEz/dy, dHy/dt = dEz/dx, dEz/dt = 0
    evolution, _ = build_evolution(space_2d, nx=4, ny=4, order=6)
    space = evolution.space
    x, y = space.dof_coordinates.T
    state = np.zeros(evolution.size)
    state[evolution.block(E, Z)] = np.sin(np.pi * x) * np.sin(np.pi * y)

    rate = evolution.evaluate(state)
    np.testing.assert_allclose(rate[evolution.block(H, X)], -np.pi * np.sin(np.pi * x) * np.cos(np.pi * y), atol=5e-3)
    np.testing.assert_allclose(rate[evolution.block(H, Y)], np.pi * np.cos(np.pi * x) * np.sin(np.pi * y), atol=5e-3)
    np.testing.assert_allclose(rate[evolution.block(E, Z)], 0.0, atol=5e-3)
