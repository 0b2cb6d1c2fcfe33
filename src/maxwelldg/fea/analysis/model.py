from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Mapping

from maxwelldg.exceptions import UnsupportedBoundaryCondition
from maxwelldg.fea.maxwell.types import BdrCond, FieldType, as_bdr_cond, as_field_type
from maxwelldg.fea.pre.material import Material

if TYPE_CHECKING:
    from maxwelldg.fea.pre.mesh import Mesh

logger = logging.getLogger(__name__)


class Model:
    """
    Mesh together with its boundary conditions and materials.

    Every boundary attribute present in the mesh must have a boundary
    condition. Element attributes without a material are vacuum.
    """

    def __init__(
        self,
        mesh: Mesh,
        boundary_conditions: Mapping[int, BdrCond | str],
        materials: Mapping[int, Material] | None = None,
    ) -> None:
        """
        Initialize the model.

        Args:
            mesh: The mesh.
            boundary_conditions: Boundary attribute -> boundary condition.
            materials: Element attribute -> material.

        Raises:
            UnsupportedBoundaryCondition: If a condition is unknown or a mesh boundary attribute has none.
        """
        self.mesh = mesh
        self.boundary_conditions: dict[int, BdrCond] = {
            int(attribute): as_bdr_cond(bdr_cond) for attribute, bdr_cond in boundary_conditions.items()
        }

        missing = sorted(mesh.boundary_attribute_set - set(self.boundary_conditions))
        if missing:
            raise UnsupportedBoundaryCondition(
                f"Boundary attributes {missing} have no registered boundary condition. "
                f"Registered attributes: {sorted(self.boundary_conditions)}."
            )
        unused = sorted(set(self.boundary_conditions) - mesh.boundary_attribute_set)
        if unused:
            logger.warning(f"Boundary conditions for attributes {unused} do not match any boundary face.")

        materials = dict(materials or {})
        self.materials: dict[int, Material] = {
            attribute: materials.get(attribute, Material.vacuum()) for attribute in sorted(mesh.element_attribute_set)
        }

    def __repr__(self) -> str:
        bcs = {k: v.value for k, v in self.boundary_conditions.items()}
        return f"Model(mesh={self.mesh!r}, boundary_conditions={bcs})"

    def get_boundary_to_marker(self) -> dict[BdrCond, list[int]]:
        """Group the boundary attributes by boundary condition."""
        marker: dict[BdrCond, list[int]] = {}
        for attribute, bdr_cond in sorted(self.boundary_conditions.items()):
            marker.setdefault(bdr_cond, []).append(attribute)
        return marker

    def build_piecewise_arg_vector(self, field: FieldType) -> dict[int, float]:
        """
        Mass weight of ``field`` per element attribute.

        Returns:
            Element attribute -> relative permittivity (E) or relative permeability (H).
        """
        field = as_field_type(field)
        return {attribute: material.coefficient(field) for attribute, material in self.materials.items()}
