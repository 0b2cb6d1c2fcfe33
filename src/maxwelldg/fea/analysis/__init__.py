from maxwelldg.fea.analysis.bilinear_form import BilinearForm
from maxwelldg.fea.analysis.model import Model
from maxwelldg.fea.analysis.space import FiniteElementSpace

__all__ = [
    "BilinearForm",
    "FiniteElementSpace",
    "Model",
]
