from maxwelldg.fea.pre.mesh import Mesh
from maxwelldg.fea.pre.material import Material
from maxwelldg.fea.pre.mesher import MeshStats, generate_rectangle_mesh
from maxwelldg.fea.pre.sources import GaussianInitialField, InitialField, ResonantModeInitialField

__all__ = [
    "GaussianInitialField",
    "InitialField",
    "Material",
    "Mesh",
    "MeshStats",
    "ResonantModeInitialField",
    "generate_rectangle_mesh",
]
