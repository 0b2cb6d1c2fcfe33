"""
Demo run: the fundamental mode of a square PEC cavity.

Writes ParaView snapshots to ``ParaView/`` and the field history to
``cavity.h5`` in the working directory. The log level is read from the
``MAXWELLDG_LOG_LEVEL`` environment variable (INFO by default).
"""
import logging
import os

from maxwelldg.config import MaxwellEvolOptions, SolverOptions
from maxwelldg.logging_config import setup_logging
from maxwelldg.fea.maxwell.types import BdrCond, FluxType
from maxwelldg.fea.pre import Mesh, ResonantModeInitialField
from maxwelldg.fea.analysis import Model
from maxwelldg.fea.solvers import Solver
from maxwelldg.fea.post import ParaViewExporter, ResultStore

logger = logging.getLogger(__name__)


def main() -> None:
    setup_logging(os.environ.get("MAXWELLDG_LOG_LEVEL", "INFO"))

    mesh = Mesh.make_cartesian_2d(8, 8, cell_type="quad")
    model = Model(
        mesh=mesh,
        boundary_conditions={attribute: BdrCond.PEC for attribute in mesh.boundary_attribute_set},
    )
    options = SolverOptions(
        order=3,
        t_final=2.0,
        dt=2e-3,
        vis_steps=50,
        evolution=MaxwellEvolOptions(flux_type=FluxType.UPWIND),
    )

    solver = Solver(model, options)
    mode = ResonantModeInitialField()
    solver.add_sources([mode])
    logger.info(f"Cavity mode angular frequency: {mode.angular_frequency:.6f}")

    paraview = ParaViewExporter(solver.space, "ParaView", name="cavity", precision=options.precision)
    with ResultStore("cavity.h5", solver.space) as store:
        history = solver.run(exporters=[paraview, store])

    e0, e1 = history[0][1], history[-1][1]
    logger.info(f"Relative energy change over the run: {(e1 - e0) / e0:.3e}")


if __name__ == "__main__":
    main()
