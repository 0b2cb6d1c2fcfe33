"""
ParaView Export
===============
Writes DG fields as VTU snapshots (through meshio) plus a ``.pvd`` collection
that ParaView opens as a time series.

DG fields are discontinuous, so every element is written with its own points:
the element is split into a lattice of linear sub-cells and the fields are
evaluated at the lattice points.
"""
from __future__ import annotations

import logging
import os
import xml.etree.ElementTree as ET
from functools import lru_cache
from typing import TYPE_CHECKING

import meshio
import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt

    from maxwelldg.fea.analysis.space import FiniteElementSpace

logger = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def reference_lattice(geometry: str, n: int) -> tuple[npt.NDArray[np.float64], str, npt.NDArray[np.int64]]:
    """
    Equispaced lattice on a reference element and its linear sub-cells.

    Args:
        geometry: "line", "quad" or "triangle".
        n: Number of subdivisions per edge.

    Returns:
        Reference points (n_points, dim), the meshio cell type of the sub-cells and their connectivity.
    """
    if geometry == "line":
        points = np.linspace(-1.0, 1.0, n + 1).reshape(-1, 1)
        cells = np.column_stack([np.arange(n), np.arange(1, n + 1)])
        return points, "line", cells

    if geometry == "quad":
        t = np.linspace(-1.0, 1.0, n + 1)
        xi, eta = np.meshgrid(t, t, indexing="xy")
        points = np.column_stack([xi.ravel(), eta.ravel()])
        cells = [
            [i + (n + 1) * j, i + 1 + (n + 1) * j, i + 1 + (n + 1) * (j + 1), i + (n + 1) * (j + 1)]
            for j in range(n) for i in range(n)
        ]
        return points, "quad", np.array(cells, dtype=np.int64)

    if geometry == "triangle":
        index = {}
        points = []
        for j in range(n + 1):
            for i in range(n + 1 - j):
                index[i, j] = len(points)
                points.append((i / n, j / n))
        cells = []
        for j in range(n):
            for i in range(n - j):
                cells.append([index[i, j], index[i + 1, j], index[i, j + 1]])
                if i + j < n - 1:
                    cells.append([index[i + 1, j], index[i + 1, j + 1], index[i, j + 1]])
        return np.array(points), "triangle", np.array(cells, dtype=np.int64)

    raise ValueError(f"Unsupported geometry '{geometry}'.")


class ParaViewExporter:
    """
    Time series of VTU files with a ``<name>.pvd`` collection.

    Args:
        space: DG space of the exported fields.
        directory: Output directory, created if missing.
        name: Prefix of the output files.
        precision: Significant digits of the time stamps in the collection file.
        subdivisions: Lattice subdivisions per element edge, the polynomial order by default.
    """

    def __init__(
        self,
        space: FiniteElementSpace,
        directory: str,
        name: str = "maxwelldg",
        precision: int = 8,
        subdivisions: int | None = None,
    ) -> None:
        self.space = space
        self.directory = directory
        self.name = name
        self.precision = precision
        n = subdivisions if subdivisions is not None else max(space.order, 1)

        element = space.elements[0]
        self._reference_points, self._cell_type, sub_cells = reference_lattice(element.geometry, n)
        n_points = len(self._reference_points)
        offsets = np.arange(len(space.elements), dtype=np.int64) * n_points
        self._cells = (sub_cells[np.newaxis, :, :] + offsets[:, np.newaxis, np.newaxis]).reshape(-1, sub_cells.shape[1])

        points, _ = space.evaluate(np.zeros(space.n_dofs), self._reference_points)
        self._points = np.zeros((len(points), 3), dtype=np.float64)
        self._points[:, :points.shape[1]] = points
        self._attributes = np.repeat([e.attribute for e in space.elements], len(sub_cells))

        self._collection: list[tuple[float, str]] = []
        os.makedirs(directory, exist_ok=True)

    @property
    def collection_path(self) -> str:
        return os.path.join(self.directory, f"{self.name}.pvd")

    def save(self, cycle: int, time: float, fields: dict[str, npt.NDArray[np.float64]]) -> str:
        """
        Write one snapshot and update the collection file.

        Returns:
            Path of the written VTU file.
        """
        point_data = {
            name: self.space.evaluate(values, self._reference_points)[1]
            for name, values in fields.items()
        }
        filename = f"{self.name}_{cycle:06d}.vtu"
        path = os.path.join(self.directory, filename)
        mesh = meshio.Mesh(
            points=self._points,
            cells=[(self._cell_type, self._cells)],
            point_data=point_data,
            cell_data={"attribute": [self._attributes]},
        )
        try:
            meshio.write(path, mesh)
        except Exception:
            logger.exception(f"Failed to write snapshot '{path}'.")
            raise
        self._collection.append((time, filename))
        self._write_collection()
        logger.debug(f"Snapshot of cycle {cycle} written to {path}")
        return path

    def _write_collection(self) -> None:
        root = ET.Element("VTKFile", type="Collection", version="0.1")
        collection = ET.SubElement(root, "Collection")
        for time, filename in self._collection:
            ET.SubElement(
                collection,
                "DataSet",
                timestep=f"{time:.{self.precision}g}",
                group="",
                part="0",
                file=filename,
            )
        ET.ElementTree(root).write(self.collection_path, xml_declaration=True, encoding="utf-8")
