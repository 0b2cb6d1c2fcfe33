from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Protocol, Sequence

import numpy as np

from maxwelldg.config import SolverOptions
from maxwelldg.exceptions import DimensionMismatch
from maxwelldg.fea.analysis.space import FiniteElementSpace
from maxwelldg.fea.maxwell.evolution import MaxwellEvolution2D
from maxwelldg.fea.maxwell.operators import build_mass_matrix
from maxwelldg.fea.maxwell.types import Direction, FieldType, as_field_type

if TYPE_CHECKING:
    import numpy.typing as npt

    from maxwelldg.fea.analysis.model import Model
    from maxwelldg.fea.pre.sources import InitialField

logger = logging.getLogger(__name__)

# Five-stage fourth-order low-storage Runge-Kutta coefficients (Carpenter & Kennedy)
RK4A = np.array([
    0.0,
    -567301805773.0 / 1357537059087.0,
    -2404267990393.0 / 2016746695238.0,
    -3550918686646.0 / 2091501179385.0,
    -1275806237668.0 / 842570457699.0,
])
RK4B = np.array([
    1432997174477.0 / 9575080441755.0,
    5161836677717.0 / 13612068292357.0,
    1720146321549.0 / 2090206949498.0,
    3134564353537.0 / 4481467310338.0,
    2277821191437.0 / 14882151754819.0,
])

# Components evolved by the 2D operator, in export order
EVOLVED_COMPONENTS: tuple[tuple[str, FieldType, Direction], ...] = (
    ("Ez", FieldType.E, Direction.Z),
    ("Hx", FieldType.H, Direction.X),
    ("Hy", FieldType.H, Direction.Y),
)


class Exporter(Protocol):
    def save(self, cycle: int, time: float, fields: dict[str, npt.NDArray[np.float64]]) -> None:
        ...


class Solver:
    """
    Explicit time-domain solver for the 2D Maxwell equations.
    """

    def __init__(self, model: Model, options: SolverOptions | None = None) -> None:
        """
        Initialize the solver and assemble the evolution operator.

        Args:
            model: The model to be solved.
            options: Order, time stepping and output options.

        Raises:
            DimensionMismatch: If the mesh is not two-dimensional.
        """
        self.options = options or SolverOptions()
        if model.mesh.dimension != 2:
            raise DimensionMismatch(f"The Maxwell solver needs a 2D mesh, got a {model.mesh.dimension}D mesh.")
        self.model = model

        self.space = FiniteElementSpace(model.mesh, self.options.order)
        self.evolution = MaxwellEvolution2D(self.space, model, self.options.evolution)
        self._mass = {f: build_mass_matrix(f, model, self.space) for f in FieldType}

        self.state = np.zeros(self.evolution.size, dtype=np.float64)
        self.time = 0.0
        self.cycle = 0

    def field(self, field_type: FieldType, direction: Direction) -> npt.NDArray[np.float64]:
        """Writable view of one field component in the state vector."""
        return self.state[self.evolution.block(as_field_type(field_type), Direction(direction))]

    def set_initial_field(
        self,
        field_type: FieldType,
        direction: Direction,
        function: Callable[[npt.NDArray[np.float64]], npt.NDArray[np.float64]],
    ) -> None:
        """Interpolate ``function`` into one field component."""
        self.field(field_type, direction)[:] = self.space.project(function)

    def add_sources(self, sources: Sequence[InitialField]) -> None:
        """Add the projection of every initial field source to the current state."""
        for source in sources:
            self.field(source.field_type, source.direction)[:] += self.space.project(source)

    def snapshot(self) -> dict[str, npt.NDArray[np.float64]]:
        """Copies of the evolved components keyed by name."""
        return {name: self.field(f, d).copy() for name, f, d in EVOLVED_COMPONENTS}

    def energy(self) -> float:
        """
        Discrete electromagnetic energy 1/2 sum over components of q^T M q.

        The mass matrices are weighted by permittivity (E) and permeability (H).
        """
        total = 0.0
        for f in FieldType:
            mass = self._mass[f].sparse_matrix
            for d in Direction:
                q = self.field(f, d)
                total += float(q @ (mass @ q))
        return 0.5 * total

    def step(self, dt: float) -> None:
        """Advance the state by one low-storage RK4 step."""
        residual = np.zeros_like(self.state)
        rate = np.empty_like(self.state)
        for a, b in zip(RK4A, RK4B):
            self.evolution.mult(self.state, rate)
            residual *= a
            residual += dt * rate
            self.state += b * residual
        self.time += dt
        self.cycle += 1

    def run(
        self,
        exporters: Sequence[Exporter] = (),
        callback: Callable[[Solver], None] | None = None,
    ) -> list[tuple[float, float]]:
        """
        Integrate up to the final time.

        Snapshots are passed to ``exporters`` at the start, every ``vis_steps``
        cycles and at the final time. The last step is shortened to hit the
        final time exactly.

        Args:
            exporters: Objects with a ``save(cycle, time, fields)`` method.
            callback: Called after every step with the solver.

        Returns:
            History of (time, energy) at every exported cycle.

        Raises:
            FloatingPointError: If the state stops being finite.
        """
        t_final = self.options.t_final
        dt = self.options.dt
        vis_steps = self.options.vis_steps
        tolerance = 1e-12 * max(t_final, 1.0)

        history: list[tuple[float, float]] = []

        def export() -> None:
            energy = self.energy()
            history.append((self.time, energy))
            fields = self.snapshot()
            for exporter in exporters:
                exporter.save(self.cycle, self.time, fields)
            logger.info(f"Cycle {self.cycle} - Time: {self.time:.6g} - Energy: {energy:.8e}")

        export()
        while self.time < t_final - tolerance:
            self.step(min(dt, t_final - self.time))
            if not np.all(np.isfinite(self.state)):
                raise FloatingPointError(
                    f"Non-finite field values at time {self.time:.6g} (cycle {self.cycle}); reduce the time step."
                )
            if callback is not None:
                callback(self)
            done = self.time >= t_final - tolerance
            if done or self.cycle % vis_steps == 0:
                export()

        return history
