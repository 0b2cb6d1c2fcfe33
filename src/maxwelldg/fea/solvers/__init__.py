from maxwelldg.fea.solvers.solver import Solver

__all__ = ["Solver"]
