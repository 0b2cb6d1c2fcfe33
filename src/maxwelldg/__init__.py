"""Discontinuous-Galerkin time-domain solver for the 2D Maxwell equations."""
from maxwelldg.config import MaxwellEvolOptions, SolverOptions
from maxwelldg.fea.maxwell import BdrCond, Direction, FieldType, FluxType
from maxwelldg.fea.pre import GaussianInitialField, Material, Mesh, ResonantModeInitialField
from maxwelldg.fea.analysis import FiniteElementSpace, Model
from maxwelldg.fea.maxwell.evolution import MaxwellEvolution2D
from maxwelldg.fea.solvers import Solver

__all__ = [
    "BdrCond",
    "Direction",
    "FieldType",
    "FiniteElementSpace",
    "FluxType",
    "GaussianInitialField",
    "Material",
    "MaxwellEvolOptions",
    "MaxwellEvolution2D",
    "Mesh",
    "Model",
    "ResonantModeInitialField",
    "Solver",
    "SolverOptions",
]
