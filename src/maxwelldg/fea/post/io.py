"""
Result Storage (HDF5)
Stores the time history of the evolved field components in a single .h5 file.
"""
from __future__ import annotations

import logging
from importlib.metadata import PackageNotFoundError, version
from typing import TYPE_CHECKING

import h5py
import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt

    from maxwelldg.fea.analysis.space import FiniteElementSpace

logger = logging.getLogger(__name__)

try:
    APP_VERSION = version("maxwelldg")
except PackageNotFoundError:
    APP_VERSION = "0.0.0-dev"


class ResultStore:
    """
    Append-only HDF5 history of field snapshots.

    Layout::

        /mesh/vertices, /mesh/cells, /mesh/attributes
        /dof_coordinates
        /time, /cycle            (n_snapshots, )
        /fields/<name>           (n_snapshots, n_dofs)
    """

    def __init__(self, filepath: str, space: FiniteElementSpace) -> None:
        self.filepath = filepath
        self.space = space
        logger.info(f"Opening result store: {filepath}")
        self._file = h5py.File(filepath, "w")
        self._file.attrs["version"] = APP_VERSION
        self._file.attrs["order"] = space.order
        self._file.attrs["cell_type"] = space.mesh.cell_type

        grp_mesh = self._file.create_group("mesh")
        grp_mesh.create_dataset("vertices", data=space.mesh.vertices)
        grp_mesh.create_dataset("cells", data=space.mesh.cells)
        grp_mesh.create_dataset("attributes", data=space.mesh.attributes)
        self._file.create_dataset("dof_coordinates", data=space.dof_coordinates, compression="gzip")

        self._file.create_dataset("time", shape=(0,), maxshape=(None,), dtype="f8", chunks=True)
        self._file.create_dataset("cycle", shape=(0,), maxshape=(None,), dtype="i8", chunks=True)
        self._fields = self._file.create_group("fields")

    def __enter__(self) -> ResultStore:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def save(self, cycle: int, time: float, fields: dict[str, npt.NDArray[np.float64]]) -> None:
        """
        Append one snapshot.

        Every snapshot must carry the fields of the first one with the same
        sizes, so all datasets keep one row per stored time.

        Raises:
            ValueError: If the field names or sizes differ from the first snapshot.
        """
        n = self._file["time"].shape[0]
        fields = {name: np.asarray(values, dtype=np.float64).ravel() for name, values in fields.items()}
        if n > 0:
            expected = set(self._fields)
            if set(fields) != expected:
                raise ValueError(
                    f"Snapshot fields {sorted(fields)} differ from the stored fields {sorted(expected)}."
                )
            for name, values in fields.items():
                size = self._fields[name].shape[1]
                if values.size != size:
                    raise ValueError(f"Field '{name}' has {values.size} values, expected {size}.")
        else:
            for name, values in fields.items():
                self._fields.create_dataset(
                    name,
                    shape=(0, values.size),
                    maxshape=(None, values.size),
                    dtype="f8",
                    chunks=True,
                    compression="gzip",
                )

        self._file["time"].resize(n + 1, axis=0)
        self._file["time"][n] = time
        self._file["cycle"].resize(n + 1, axis=0)
        self._file["cycle"][n] = cycle
        for name, values in fields.items():
            dataset = self._fields[name]
            dataset.resize(n + 1, axis=0)
            dataset[n] = values

    def close(self) -> None:
        if self._file.id.valid:
            self._file.flush()
            self._file.close()
            logger.info(f"Result store closed: {self.filepath}")


def load_results(filepath: str) -> dict[str, npt.NDArray[np.float64]]:
    """
    Read a result store back into memory.

    Returns:
        Dictionary with "time", "cycle", "dof_coordinates" and one (n_snapshots, n_dofs) array per field.
    """
    logger.info(f"Loading results from: {filepath}")
    try:
        with h5py.File(filepath, "r") as f:
            results = {
                "time": f["time"][:],
                "cycle": f["cycle"][:],
                "dof_coordinates": f["dof_coordinates"][:],
            }
            for name, dataset in f["fields"].items():
                results[name] = dataset[:]
    except (OSError, KeyError) as e:
        logger.error(f"Failed to load results from '{filepath}': {e}")
        raise
    return results
