import numpy as np
import pytest

from conftest import make_model
from maxwelldg.config import MaxwellEvolOptions, SolverOptions
from maxwelldg.exceptions import DimensionMismatch, InvalidConfiguration
from maxwelldg.fea.maxwell.types import BdrCond, Direction, FieldType, FluxType
from maxwelldg.fea.pre import GaussianInitialField, Mesh, ResonantModeInitialField
from maxwelldg.fea.solvers.solver import Solver


class RecordingExporter:
    def __init__(self):
        self.saved = []

    def save(self, cycle, time, fields):
        self.saved.append((cycle, time, sorted(fields)))


def make_solver(nx=4, ny=4, bdr_cond=BdrCond.PEC, flux_type=FluxType.UPWIND, **options):
    mesh = Mesh.make_cartesian_2d(nx, ny)
    evolution = MaxwellEvolOptions(flux_type=flux_type)
    return Solver(make_model(mesh, bdr_cond), SolverOptions(evolution=evolution, **options))


@pytest.mark.parametrize(
    "kwargs",
    [
        {"order": -1},
        {"t_final": -0.1},
        {"dt": 0.0},
        {"dt": -1e-3},
        {"vis_steps": 0},
        {"precision": 0},
    ],
)
def test_invalid_solver_options(kwargs):
    with pytest.raises(InvalidConfiguration):
        SolverOptions(**kwargs)


def test_invalid_flux_type():
    with pytest.raises(InvalidConfiguration):
        MaxwellEvolOptions(flux_type="Foo")
    assert MaxwellEvolOptions(flux_type="Centered").flux_type is FluxType.CENTERED


def test_options_round_trip_through_dict():
    options = SolverOptions(order=3, dt=0.01, evolution=MaxwellEvolOptions(FluxType.CENTERED))
    assert SolverOptions.from_dict(options.to_dict()) == options


def test_solver_requires_2d_mesh():
    mesh = Mesh.make_cartesian_1d(4)
    with pytest.raises(DimensionMismatch):
        Solver(make_model(mesh))


def test_gaussian_validation():
    with pytest.raises(InvalidConfiguration):
        GaussianInitialField(FieldType.E, Direction.Z, spread=0.0)
    source = GaussianInitialField(FieldType.E, Direction.Z, center=[0.5, 0.5, 0.5])
    with pytest.raises(DimensionMismatch):
        source(np.array([[0.0, 0.0]]))


def test_gaussian_peak_at_center():
    source = GaussianInitialField(FieldType.E, Direction.Z, spread=0.1, normalization=3.0, center=[0.5, 0.5])
    values = source(np.array([[0.5, 0.5], [0.9, 0.5]]))
    assert values[0] == pytest.approx(3.0)
    assert values[1] < 1e-2


def test_zero_state_stays_zero():
    solver = make_solver(nx=2, ny=2, order=2, t_final=0.05, dt=0.01)
    history = solver.run()
    assert np.all(solver.state == 0.0)
    assert all(energy == 0.0 for _, energy in history)


def test_export_cadence():
    solver = make_solver(nx=2, ny=2, order=1, t_final=0.1, dt=0.01, vis_steps=3)
    solver.add_sources([GaussianInitialField(FieldType.E, Direction.Z, spread=0.2, center=[0.5, 0.5])])
    exporter = RecordingExporter()
    history = solver.run([exporter])

    assert [cycle for cycle, _, _ in exporter.saved] == [0, 3, 6, 9, 10]
    assert exporter.saved[-1][1] == pytest.approx(0.1)
    assert exporter.saved[0][2] == ["Ez", "Hx", "Hy"]
    assert len(history) == 5


def test_last_step_is_shortened_to_final_time():
    solver = make_solver(nx=1, ny=1, order=1, t_final=0.025, dt=0.01)
    solver.run()
    assert solver.cycle == 3
    assert solver.time == pytest.approx(0.025)


def test_cavity_mode_matches_analytic_solution():
    mode = ResonantModeInitialField()
    solver = make_solver(order=3, t_final=0.25, dt=0.005)
    solver.add_sources([mode])
    solver.run()

    x, y = solver.space.dof_coordinates.T
    exact = np.sin(np.pi * x) * np.sin(np.pi * y) * np.cos(mode.angular_frequency * solver.time)
    assert np.max(np.abs(solver.field(FieldType.E, Direction.Z) - exact)) < 1e-2


def test_upwind_energy_does_not_grow():
    solver = make_solver(order=2, t_final=0.2, dt=0.005, vis_steps=5)
    solver.add_sources([GaussianInitialField(FieldType.E, Direction.Z, spread=0.1, center=[0.4, 0.6])])
    energies = [energy for _, energy in solver.run()]
    assert energies[0] > 0.0
    assert all(b <= a * (1.0 + 1e-6) for a, b in zip(energies, energies[1:]))
    assert energies[-1] < energies[0]


@pytest.mark.parametrize("bdr_cond", [BdrCond.PEC, BdrCond.PMC])
def test_centered_energy_is_conserved(bdr_cond):
    solver = make_solver(order=3, t_final=0.2, dt=0.002, bdr_cond=bdr_cond, flux_type=FluxType.CENTERED)
    solver.add_sources([ResonantModeInitialField()])
    history = solver.run()
    initial = history[0][1]
    assert abs(history[-1][1] - initial) / initial < 1e-4


def test_sma_boundary_does_not_create_energy():
    solver = make_solver(order=2, t_final=0.5, dt=0.005, vis_steps=10, bdr_cond=BdrCond.SMA)
    solver.add_sources([GaussianInitialField(FieldType.E, Direction.Z, spread=0.1, center=[0.5, 0.5])])
    energies = [energy for _, energy in solver.run()]
    assert all(b <= a * (1.0 + 1e-6) for a, b in zip(energies, energies[1:]))
