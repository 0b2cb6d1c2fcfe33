import xml.etree.ElementTree as ET

import meshio
import numpy as np
import pytest

from maxwelldg.fea.post.exporter import ParaViewExporter, reference_lattice
from maxwelldg.fea.post.io import ResultStore, load_results


@pytest.mark.parametrize(
    "geometry, n, n_points, n_cells",
    [("line", 3, 4, 3), ("quad", 2, 9, 4), ("triangle", 2, 6, 4), ("triangle", 3, 10, 9)],
)
def test_reference_lattice_sizes(geometry, n, n_points, n_cells):
    points, _, cells = reference_lattice(geometry, n)
    assert points.shape[0] == n_points
    assert cells.shape[0] == n_cells
    assert cells.max() == n_points - 1


def test_reference_lattice_rejects_unknown_geometry():
    with pytest.raises(ValueError):
        reference_lattice("hexahedron", 2)


def test_paraview_exporter_writes_series(space_2d, tmp_path):
    space, _ = space_2d(2, 2, order=2)
    exporter = ParaViewExporter(space, str(tmp_path), name="run")
    x, y = space.dof_coordinates.T
    fields = {"Ez": x + y, "Hx": np.zeros(space.n_dofs)}

    first = exporter.save(0, 0.0, fields)
    exporter.save(5, 0.25, fields)

    mesh = meshio.read(first)
    assert mesh.points.shape == (4 * 9, 3)
    assert mesh.cells[0].type == "quad"
    assert len(mesh.cells[0].data) == 4 * 4
    # x + y is linear, so the lattice samples are exact
    np.testing.assert_allclose(mesh.point_data["Ez"], mesh.points[:, 0] + mesh.points[:, 1], atol=1e-12)

    root = ET.parse(exporter.collection_path).getroot()
    datasets = root.find("Collection").findall("DataSet")
    assert [d.get("file") for d in datasets] == ["run_000000.vtu", "run_000005.vtu"]
    assert float(datasets[1].get("timestep")) == pytest.approx(0.25)


def test_result_store_round_trip(space_2d, tmp_path, rng):
    space, _ = space_2d(2, 1, order=1)
    path = str(tmp_path / "history.h5")
    snapshots = [{"Ez": rng.normal(size=space.n_dofs), "Hx": rng.normal(size=space.n_dofs)} for _ in range(3)]

    with ResultStore(path, space) as store:
        for cycle, fields in enumerate(snapshots):
            store.save(cycle * 10, cycle * 0.1, fields)

    results = load_results(path)
    np.testing.assert_allclose(results["time"], [0.0, 0.1, 0.2])
    np.testing.assert_array_equal(results["cycle"], [0, 10, 20])
    assert results["Ez"].shape == (3, space.n_dofs)
    np.testing.assert_array_equal(results["Hx"][2], snapshots[2]["Hx"])
    np.testing.assert_allclose(results["dof_coordinates"], space.dof_coordinates)


def test_result_store_rejects_mismatched_snapshots(space_2d, tmp_path):
    space, _ = space_2d(1, 1, order=1)
    path = str(tmp_path / "bad.h5")
    with ResultStore(path, space) as store:
        store.save(0, 0.0, {"Ez": np.ones(space.n_dofs), "Hx": np.zeros(space.n_dofs)})
        with pytest.raises(ValueError):
            store.save(1, 0.1, {"Ez": np.ones(space.n_dofs), "Hx": np.zeros(space.n_dofs), "Hy": np.zeros(space.n_dofs)})
        with pytest.raises(ValueError):
            store.save(2, 0.2, {"Ez": np.ones(space.n_dofs)})
        with pytest.raises(ValueError):
            store.save(3, 0.3, {"Ez": np.ones(space.n_dofs + 1), "Hx": np.zeros(space.n_dofs)})
        store.save(4, 0.4, {"Ez": 2.0 * np.ones(space.n_dofs), "Hx": np.zeros(space.n_dofs)})

    # rejected snapshots leave no trace, every dataset keeps one row per stored time
    results = load_results(path)
    np.testing.assert_array_equal(results["cycle"], [0, 4])
    assert results["time"].shape == (2,)
    assert results["Ez"].shape == (2, space.n_dofs)
    assert results["Hx"].shape == (2, space.n_dofs)
    np.testing.assert_array_equal(results["Ez"][1], 2.0)


def test_load_results_missing_file(tmp_path):
    with pytest.raises(OSError):
        load_results(str(tmp_path / "missing.h5"))
