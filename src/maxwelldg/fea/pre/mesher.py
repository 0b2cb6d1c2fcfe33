"""
Mesh Generation (Gmsh Adapter)
==============================
Generates rectangular cavity meshes with named boundary groups as .msh files
that ``Mesh.from_file`` reads back.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Physical group names of the rectangle sides, in gmsh curve order
RECTANGLE_SIDES = ("Bottom", "Right", "Top", "Left")


@dataclass
class MeshStats:
    """Return object containing mesh metadata."""
    filepath: str
    num_nodes: int
    num_elements: int


def generate_rectangle_mesh(
    filepath: str,
    sx: float = 1.0,
    sy: float = 1.0,
    nx: int = 4,
    ny: int = 4,
    recombine: bool = True,
) -> MeshStats:
    """
    Write a structured mesh of the rectangle [0, sx] x [0, sy].

    The sides form the physical groups "Bottom", "Right", "Top" and "Left",
    the surface the group "Domain".

    Args:
        filepath: Output .msh path.
        sx, sy: Rectangle size.
        nx, ny: Number of elements per direction.
        recombine: Quadrilaterals when True, triangles otherwise.

    Returns:
        Path and size of the generated mesh.
    """
    import gmsh

    gmsh.initialize()
    try:
        gmsh.option.set_number("General.Terminal", 0)
        gmsh.model.add("rectangle")

        gmsh.model.geo.add_point(0.0, 0.0, 0.0, tag=1)
        gmsh.model.geo.add_point(sx, 0.0, 0.0, tag=2)
        gmsh.model.geo.add_point(sx, sy, 0.0, tag=3)
        gmsh.model.geo.add_point(0.0, sy, 0.0, tag=4)

        for tag, (start, end) in enumerate([(1, 2), (2, 3), (3, 4), (4, 1)], start=1):
            gmsh.model.geo.add_line(start, end, tag)

        # transfinite curves take the number of nodes
        gmsh.model.geo.mesh.set_transfinite_curve(1, nx + 1)
        gmsh.model.geo.mesh.set_transfinite_curve(2, ny + 1)
        gmsh.model.geo.mesh.set_transfinite_curve(3, nx + 1)
        gmsh.model.geo.mesh.set_transfinite_curve(4, ny + 1)

        gmsh.model.geo.add_curve_loop([1, 2, 3, 4], 1)
        gmsh.model.geo.add_plane_surface([1], 1)
        gmsh.model.geo.mesh.set_transfinite_surface(1, "Left", [1, 2, 3, 4])
        if recombine:
            gmsh.model.geo.mesh.set_recombine(2, 1)

        gmsh.model.geo.synchronize()
        for tag, name in enumerate(RECTANGLE_SIDES, start=1):
            gmsh.model.add_physical_group(1, [tag], tag=tag, name=name)
        gmsh.model.add_physical_group(2, [1], tag=1, name="Domain")

        gmsh.model.mesh.generate(2)

        node_tags, _, _ = gmsh.model.mesh.get_nodes()
        _, element_tags, _ = gmsh.model.mesh.get_elements(2)
        num_elements = sum(len(tags) for tags in element_tags)

        gmsh.write(filepath)
    finally:
        gmsh.finalize()

    logger.info(f"Rectangle mesh written to {filepath}: {len(node_tags)} nodes, {num_elements} elements.")
    return MeshStats(filepath=filepath, num_nodes=len(node_tags), num_elements=num_elements)
