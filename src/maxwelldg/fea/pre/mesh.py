from __future__ import annotations

import logging
from collections import defaultdict
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

# gmsh element type -> (cell type, number of vertices)
GMSH_ELEMENT_TYPE_MAP = {
    1: ("line", 2),  # 2-node line
    2: ("triangle", 3),  # 3-node triangle
    3: ("quad", 4),  # 4-node quadrangle
    15: ("vertex", 1),  # 1-node point
}

CELL_DIMENSION = {
    "line": 1,
    "triangle": 2,
    "quad": 2,
}

# Local faces as tuples of local vertex indices, counter-clockwise for 2D cells
LOCAL_FACES = {
    "line": ((0,), (1,)),
    "triangle": ((0, 1), (1, 2), (2, 0)),
    "quad": ((0, 1), (1, 2), (2, 3), (3, 0)),
}

# Cartesian boundary attributes
LEFT_1D, RIGHT_1D = 1, 2
BOTTOM, RIGHT, TOP, LEFT = 1, 2, 3, 4


class Mesh:
    """
    Conforming mesh of segments (1D) or of triangles or quadrilaterals (2D).

    Cells carry an integer attribute selecting their material, boundary faces
    carry an integer attribute selecting their boundary condition. Boundary
    faces without a label get attribute 0.
    """

    def __init__(
        self,
        vertices: npt.ArrayLike,
        cells: npt.ArrayLike,
        cell_type: str,
        attributes: npt.ArrayLike | None = None,
        boundary_cells: npt.ArrayLike | None = None,
        boundary_attributes: npt.ArrayLike | None = None,
        filename: str | None = None,
        attribute_names: dict[str, int] | None = None,
        boundary_names: dict[str, int] | None = None,
    ) -> None:
        """
        Initialize the Mesh class.

        Args:
            vertices: (n_vertices, dim) vertex coordinates, a flat array for 1D meshes.
            cells: (n_cells, n_vertices_per_cell) vertex indices.
            cell_type: "line", "triangle" or "quad".
            attributes: (n_cells, ) cell attributes, all 1 when omitted.
            boundary_cells: (n_boundary, n_face_vertices) vertex indices of labelled boundary faces.
            boundary_attributes: (n_boundary, ) attributes of the labelled boundary faces.
            filename: Source file, if the mesh was loaded from disk.
            attribute_names: Optional physical names of the cell attributes.
            boundary_names: Optional physical names of the boundary attributes.

        Raises:
            ValueError: For unknown cell types, inconsistent array shapes or non-manifold faces.
        """
        if cell_type not in CELL_DIMENSION:
            raise ValueError(f"Unsupported cell type '{cell_type}'. Available types: {list(CELL_DIMENSION)}.")
        self.cell_type = cell_type
        self.dimension = CELL_DIMENSION[cell_type]

        self.vertices = np.asarray(vertices, dtype=np.float64).reshape(-1, self.dimension)
        self.cells = np.array(cells, dtype=np.int64, ndmin=2)
        n_cell_vertices = len(LOCAL_FACES[cell_type]) if self.dimension == 2 else 2
        if self.cells.shape[1] != n_cell_vertices:
            raise ValueError(
                f"Cells of type '{cell_type}' need {n_cell_vertices} vertices, got {self.cells.shape[1]}."
            )

        if attributes is None:
            self.attributes = np.ones(len(self.cells), dtype=np.int64)
        else:
            self.attributes = np.asarray(attributes, dtype=np.int64).reshape(-1)
        if len(self.attributes) != len(self.cells):
            raise ValueError(f"Expected {len(self.cells)} cell attributes, got {len(self.attributes)}.")

        n_face_vertices = 1 if self.dimension == 1 else 2
        if boundary_cells is None:
            self.boundary_cells = np.zeros((0, n_face_vertices), dtype=np.int64)
            self.boundary_attributes = np.zeros(0, dtype=np.int64)
        else:
            self.boundary_cells = np.asarray(boundary_cells, dtype=np.int64).reshape(-1, n_face_vertices)
            self.boundary_attributes = np.asarray(boundary_attributes, dtype=np.int64).reshape(-1)
        if len(self.boundary_cells) != len(self.boundary_attributes):
            raise ValueError("Every boundary cell needs exactly one boundary attribute.")

        self.filename = filename
        self.attribute_names = attribute_names or {}
        self.boundary_names = boundary_names or {}

        if self.dimension == 2:
            self._orient_counter_clockwise()
        self.interior_faces, self.boundary_faces = self._build_faces()

    def __repr__(self) -> str:
        return (
            f"Mesh(dimension={self.dimension}, cell_type='{self.cell_type}', "
            f"n_vertices={self.number_of_vertices}, n_elements={self.number_of_elements})"
        )

    @property
    def number_of_vertices(self) -> int:
        return len(self.vertices)

    @property
    def number_of_elements(self) -> int:
        return len(self.cells)

    @property
    def element_attribute_set(self) -> set[int]:
        return {int(a) for a in np.unique(self.attributes)}

    @property
    def boundary_attribute_set(self) -> set[int]:
        """Attributes of all boundary faces, 0 included when some face is unlabelled."""
        return {attribute for _, _, attribute in self.boundary_faces}

    def _orient_counter_clockwise(self) -> None:
        x = self.vertices[self.cells, 0]
        y = self.vertices[self.cells, 1]
        signed_area = 0.5 * np.sum(x * np.roll(y, -1, axis=1) - y * np.roll(x, -1, axis=1), axis=1)
        clockwise = signed_area < 0.0
        if np.any(clockwise):
            logger.debug(f"Reordering {int(clockwise.sum())} clockwise cells.")
            self.cells[clockwise] = self.cells[clockwise, ::-1]

    def _build_faces(self) -> tuple[list[tuple[int, int, int, int]], list[tuple[int, int, int]]]:
        """
        Derive the face topology from the cells.

        Returns:
            Interior faces as (element 1, local face 1, element 2, local face 2), element 1
            being the lower element index, and boundary faces as (element, local face, attribute).
        """
        face_owners: dict[tuple[int, ...], list[tuple[int, int]]] = defaultdict(list)
        for e, cell in enumerate(self.cells):
            for lf, local in enumerate(LOCAL_FACES[self.cell_type]):
                key = tuple(sorted(int(v) for v in cell[list(local)]))
                face_owners[key].append((e, lf))

        labels = {
            tuple(sorted(int(v) for v in face)): int(attribute)
            for face, attribute in zip(self.boundary_cells, self.boundary_attributes)
        }

        interior: list[tuple[int, int, int, int]] = []
        boundary: list[tuple[int, int, int]] = []
        for key, owners in face_owners.items():
            if len(owners) == 1:
                e, lf = owners[0]
                boundary.append((e, lf, labels.get(key, 0)))
            elif len(owners) == 2:
                (e1, lf1), (e2, lf2) = owners
                interior.append((e1, lf1, e2, lf2))
            else:
                raise ValueError(f"Face with vertices {key} is shared by {len(owners)} cells.")

        n_unlabelled = sum(1 for _, _, attribute in boundary if attribute == 0)
        if n_unlabelled:
            logger.warning(f"{n_unlabelled} boundary faces have no boundary attribute.")
        return interior, boundary

    @classmethod
    def make_cartesian_1d(cls, n: int, length: float = 1.0) -> Mesh:
        """
        Uniform segment mesh of [0, length].

        The left end gets boundary attribute 1, the right end attribute 2.
        """
        if n < 1:
            raise ValueError(f"A 1D mesh needs at least one element, got {n}.")
        vertices = np.linspace(0.0, length, n + 1)
        cells = np.column_stack([np.arange(n), np.arange(1, n + 1)])
        return cls(
            vertices=vertices,
            cells=cells,
            cell_type="line",
            boundary_cells=[[0], [n]],
            boundary_attributes=[LEFT_1D, RIGHT_1D],
        )

    @classmethod
    def make_cartesian_2d(
        cls,
        nx: int,
        ny: int,
        cell_type: str = "quad",
        sx: float = 1.0,
        sy: float = 1.0,
    ) -> Mesh:
        """
        Structured mesh of the rectangle [0, sx] x [0, sy].

        Vertex (i, j) has index i + (nx + 1) * j. Quadrilateral (i, j) has vertices
        {v(i, j), v(i+1, j), v(i+1, j+1), v(i, j+1)}; with ``cell_type="triangle"``
        every quadrilateral is split along its diagonal from v(i, j) to v(i+1, j+1).

        Boundary attributes: bottom 1, right 2, top 3, left 4.
        """
        if nx < 1 or ny < 1:
            raise ValueError(f"A 2D mesh needs at least one element per direction, got {nx} x {ny}.")
        if cell_type not in ("quad", "triangle"):
            raise ValueError(f"Unsupported 2D cell type '{cell_type}'.")

        x, y = np.meshgrid(np.linspace(0.0, sx, nx + 1), np.linspace(0.0, sy, ny + 1), indexing="xy")
        vertices = np.column_stack([x.ravel(), y.ravel()])

        def v(i: int, j: int) -> int:
            return i + (nx + 1) * j

        cells = []
        for j in range(ny):
            for i in range(nx):
                if cell_type == "quad":
                    cells.append([v(i, j), v(i + 1, j), v(i + 1, j + 1), v(i, j + 1)])
                else:
                    cells.append([v(i, j), v(i + 1, j), v(i + 1, j + 1)])
                    cells.append([v(i, j), v(i + 1, j + 1), v(i, j + 1)])

        boundary_cells = []
        boundary_attributes = []
        for i in range(nx):
            boundary_cells.append([v(i, 0), v(i + 1, 0)])
            boundary_attributes.append(BOTTOM)
        for j in range(ny):
            boundary_cells.append([v(nx, j), v(nx, j + 1)])
            boundary_attributes.append(RIGHT)
        for i in range(nx):
            boundary_cells.append([v(i + 1, ny), v(i, ny)])
            boundary_attributes.append(TOP)
        for j in range(ny):
            boundary_cells.append([v(0, j + 1), v(0, j)])
            boundary_attributes.append(LEFT)

        return cls(
            vertices=vertices,
            cells=cells,
            cell_type=cell_type,
            boundary_cells=boundary_cells,
            boundary_attributes=boundary_attributes,
            boundary_names={"Bottom": BOTTOM, "Right": RIGHT, "Top": TOP, "Left": LEFT},
        )

    def uniform_refinement(self) -> Mesh:
        """
        Split every cell into 2 (segments) or 4 (triangles, quadrilaterals) children.

        Children are stored consecutively and inherit the attribute of their parent;
        boundary faces are split likewise.
        """
        vertices = [tuple(v) for v in self.vertices]
        midpoints: dict[tuple[int, ...], int] = {}

        def midpoint(*ids: int) -> int:
            key = tuple(sorted(ids))
            if key not in midpoints:
                midpoints[key] = len(vertices)
                vertices.append(tuple(self.vertices[list(key)].mean(axis=0)))
            return midpoints[key]

        cells = []
        attributes = []
        for cell, attribute in zip(self.cells, self.attributes):
            cell = [int(v) for v in cell]
            if self.cell_type == "line":
                a, b = cell
                m = midpoint(a, b)
                children = [[a, m], [m, b]]
            elif self.cell_type == "triangle":
                v0, v1, v2 = cell
                m01, m12, m20 = midpoint(v0, v1), midpoint(v1, v2), midpoint(v2, v0)
                children = [[v0, m01, m20], [m01, v1, m12], [m20, m12, v2], [m01, m12, m20]]
            else:
                v0, v1, v2, v3 = cell
                m01, m12, m23, m30 = midpoint(v0, v1), midpoint(v1, v2), midpoint(v2, v3), midpoint(v3, v0)
                c = midpoint(v0, v1, v2, v3)
                children = [[v0, m01, c, m30], [m01, v1, m12, c], [c, m12, v2, m23], [m30, c, m23, v3]]
            cells.extend(children)
            attributes.extend([int(attribute)] * len(children))

        if self.dimension == 1:
            boundary_cells = self.boundary_cells.tolist()
            boundary_attributes = self.boundary_attributes.tolist()
        else:
            boundary_cells = []
            boundary_attributes = []
            for (a, b), attribute in zip(self.boundary_cells, self.boundary_attributes):
                m = midpoint(int(a), int(b))
                boundary_cells.extend([[int(a), m], [m, int(b)]])
                boundary_attributes.extend([int(attribute)] * 2)

        return Mesh(
            vertices=np.array(vertices),
            cells=cells,
            cell_type=self.cell_type,
            attributes=attributes,
            boundary_cells=boundary_cells,
            boundary_attributes=boundary_attributes,
            attribute_names=dict(self.attribute_names),
            boundary_names=dict(self.boundary_names),
        )

    @classmethod
    def from_file(cls, filename: str) -> Mesh:
        """
        Load a gmsh mesh whose cells and boundary faces belong to physical groups.

        Cell attributes are the physical tags of the highest-dimensional groups,
        boundary attributes the physical tags of the groups one dimension lower.
        Physical names are kept in ``attribute_names`` and ``boundary_names``.

        Raises:
            ValueError: If the mesh has no cells in physical groups or mixes cell types.
        """
        import gmsh

        gmsh.initialize()
        try:
            gmsh.open(filename)
            dim = gmsh.model.get_dimension()

            node_tags, flat_coords, _ = gmsh.model.mesh.get_nodes()
            coords = flat_coords.reshape(-1, 3)[:, :dim]
            tag_to_index = {int(tag): i for i, tag in enumerate(node_tags)}

            def read_groups(group_dim: int) -> tuple[dict[str, list], dict[str, list], dict[str, int]]:
                cells_by_type: dict[str, list] = defaultdict(list)
                attributes_by_type: dict[str, list] = defaultdict(list)
                names: dict[str, int] = {}
                for _, physical_tag in gmsh.model.get_physical_groups(group_dim):
                    name = gmsh.model.get_physical_name(group_dim, physical_tag)
                    if name:
                        names[name] = int(physical_tag)
                    for entity in gmsh.model.get_entities_for_physical_group(group_dim, physical_tag):
                        types, _, element_nodes = gmsh.model.mesh.get_elements(group_dim, entity)
                        for element_type, nodes in zip(types, element_nodes):
                            if element_type not in GMSH_ELEMENT_TYPE_MAP:
                                raise ValueError(f"Unsupported gmsh element type {element_type} in '{filename}'.")
                            cell_type, n_vertices = GMSH_ELEMENT_TYPE_MAP[element_type]
                            connectivity = [tag_to_index[int(t)] for t in nodes]
                            block = np.array(connectivity, dtype=np.int64).reshape(-1, n_vertices)
                            cells_by_type[cell_type].extend(block.tolist())
                            attributes_by_type[cell_type].extend([int(physical_tag)] * len(block))
                return cells_by_type, attributes_by_type, names

            cells_by_type, attributes_by_type, attribute_names = read_groups(dim)
            if not cells_by_type:
                raise ValueError(f"Mesh '{filename}' has no {dim}D cells in physical groups.")
            if len(cells_by_type) > 1:
                raise ValueError(f"Mesh '{filename}' mixes cell types {sorted(cells_by_type)}.")
            ((cell_type, cells),) = cells_by_type.items()

            boundary_by_type, boundary_attributes_by_type, boundary_names = read_groups(dim - 1)
            boundary_cells = [c for block in boundary_by_type.values() for c in block]
            boundary_attributes = [a for block in boundary_attributes_by_type.values() for a in block]
        finally:
            gmsh.finalize()

        logger.info(f"Loaded {len(cells)} {cell_type} cells and {len(boundary_cells)} boundary faces from '{filename}'.")
        return cls(
            vertices=coords,
            cells=cells,
            cell_type=cell_type,
            attributes=attributes_by_type[cell_type],
            boundary_cells=boundary_cells if boundary_cells else None,
            boundary_attributes=boundary_attributes if boundary_cells else None,
            filename=filename,
            attribute_names=attribute_names,
            boundary_names=boundary_names,
        )

    def plot(self, show: bool = True):
        """
        Plot the cells coloured by attribute and the boundary faces coloured by boundary attribute.

        Returns:
            The matplotlib figure.
        """
        import matplotlib.pyplot as plt
        from matplotlib.collections import LineCollection, PolyCollection

        fig, ax = plt.subplots()
        if self.dimension == 1:
            x = self.vertices[:, 0]
            for attribute in sorted(self.element_attribute_set):
                segments = [[(x[a], 0.0), (x[b], 0.0)] for a, b in self.cells[self.attributes == attribute]]
                ax.add_collection(LineCollection(segments, linewidths=3, label=f"attribute {attribute}",
                                                 color=f"C{attribute % 10}"))
            ax.plot(x, np.zeros_like(x), "k|", markersize=12)
            ax.set_ylim(-1.0, 1.0)
        else:
            polygons = self.vertices[self.cells]
            colors = [f"C{a % 10}" for a in self.attributes]
            ax.add_collection(PolyCollection(polygons, facecolors=colors, edgecolors="k", linewidths=0.5, alpha=0.4))
            for attribute in sorted(set(self.boundary_attributes.tolist())):
                segments = self.vertices[self.boundary_cells[self.boundary_attributes == attribute]]
                ax.add_collection(LineCollection(segments, linewidths=2.5, color=f"C{attribute % 10}",
                                                 label=f"boundary {attribute}"))
            ax.set_aspect("equal")
        ax.autoscale_view()
        ax.legend(loc="best", fontsize="small")
        ax.set_title(f"{self.number_of_elements} {self.cell_type} elements")
        if show:
            plt.show()
        return fig
