from maxwelldg.fea.analysis.finite_elements.finite_element import FiniteElement, integrate_product
from maxwelldg.fea.analysis.finite_elements.line2 import Line2
from maxwelldg.fea.analysis.finite_elements.quad4 import Quad4
from maxwelldg.fea.analysis.finite_elements.tri3 import Tri3
from maxwelldg.fea.analysis.finite_elements.faces import Face, FaceQuadrature

ELEMENT_TYPE_MAP: dict[str, type[FiniteElement]] = {
    "line": Line2,
    "triangle": Tri3,
    "quad": Quad4,
}

__all__ = [
    "ELEMENT_TYPE_MAP",
    "Face",
    "FaceQuadrature",
    "FiniteElement",
    "Line2",
    "Quad4",
    "Tri3",
    "integrate_product",
]
