import numpy as np
import pytest

from maxwelldg.fea.pre import Mesh


def test_cartesian_1d():
    mesh = Mesh.make_cartesian_1d(4, length=2.0)
    assert mesh.dimension == 1
    assert mesh.number_of_elements == 4
    assert mesh.number_of_vertices == 5
    np.testing.assert_allclose(mesh.vertices[:, 0], [0.0, 0.5, 1.0, 1.5, 2.0])
    assert len(mesh.interior_faces) == 3
    assert mesh.boundary_attribute_set == {1, 2}
    assert sorted((e, attribute) for e, _, attribute in mesh.boundary_faces) == [(0, 1), (3, 2)]


def test_cartesian_1d_interior_faces_point_left_to_right():
    mesh = Mesh.make_cartesian_1d(3)
    assert sorted(mesh.interior_faces) == [(0, 1, 1, 0), (1, 1, 2, 0)]


def test_cartesian_2d_quads():
    nx, ny = 3, 2
    mesh = Mesh.make_cartesian_2d(nx, ny)
    assert mesh.dimension == 2
    assert mesh.cell_type == "quad"
    assert mesh.number_of_vertices == (nx + 1) * (ny + 1)
    assert mesh.number_of_elements == nx * ny
    np.testing.assert_array_equal(mesh.cells[0], [0, 1, nx + 2, nx + 1])
    np.testing.assert_allclose(mesh.vertices[nx + 2], [1.0 / nx, 1.0 / ny])
    assert len(mesh.boundary_faces) == 2 * (nx + ny)
    assert len(mesh.interior_faces) == nx * (ny - 1) + ny * (nx - 1)
    assert mesh.boundary_attribute_set == {1, 2, 3, 4}
    assert mesh.boundary_names == {"Bottom": 1, "Right": 2, "Top": 3, "Left": 4}


def test_cartesian_2d_triangles_are_counter_clockwise():
    mesh = Mesh.make_cartesian_2d(2, 3, cell_type="triangle", sx=2.0, sy=3.0)
    assert mesh.number_of_elements == 12
    x = mesh.vertices[mesh.cells, 0]
    y = mesh.vertices[mesh.cells, 1]
    signed_area = 0.5 * np.sum(x * np.roll(y, -1, axis=1) - y * np.roll(x, -1, axis=1), axis=1)
    np.testing.assert_allclose(signed_area, 0.5)
    assert len(mesh.interior_faces) == (3 * 12 - 10) // 2


def test_clockwise_cells_are_reoriented():
    vertices = [[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]]
    mesh = Mesh(vertices, [[0, 3, 2, 1]], "quad")
    np.testing.assert_array_equal(mesh.cells[0], [1, 2, 3, 0])


def test_unlabelled_boundary_gets_attribute_zero():
    mesh = Mesh([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]], [[0, 1, 2]], "triangle",
                boundary_cells=[[0, 1]], boundary_attributes=[5])
    assert sorted(attribute for _, _, attribute in mesh.boundary_faces) == [0, 0, 5]
    assert mesh.boundary_attribute_set == {0, 5}


def test_invalid_meshes():
    with pytest.raises(ValueError):
        Mesh([0.0, 1.0], [[0, 1]], "hexahedron")
    with pytest.raises(ValueError):
        Mesh([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]], [[0, 1, 2]], "quad")
    with pytest.raises(ValueError):
        Mesh.make_cartesian_1d(0)
    with pytest.raises(ValueError):
        Mesh([0.0, 1.0], [[0, 1]], "line", attributes=[1, 2])


def test_two_attribute_mesh_survives_refinement():
    mesh = Mesh([0.0, 0.5, 1.0], [[0, 1], [1, 2]], "line", attributes=[1, 2],
                boundary_cells=[[0], [2]], boundary_attributes=[1, 2])
    for _ in range(3):
        mesh = mesh.uniform_refinement()
    assert mesh.number_of_elements == 16
    assert np.count_nonzero(mesh.attributes == 1) == 8
    assert np.count_nonzero(mesh.attributes == 2) == 8
    centers = mesh.vertices[mesh.cells, 0].mean(axis=1)
    assert np.all(centers[mesh.attributes == 1] < 0.5)
    assert np.all(centers[mesh.attributes == 2] > 0.5)
    assert mesh.boundary_attribute_set == {1, 2}


@pytest.mark.parametrize("cell_type", ["quad", "triangle"])
def test_2d_refinement(cell_type):
    mesh = Mesh.make_cartesian_2d(2, 2, cell_type=cell_type)
    fine = mesh.uniform_refinement()
    assert fine.number_of_elements == 4 * mesh.number_of_elements
    assert len(fine.boundary_faces) == 2 * len(mesh.boundary_faces)
    assert fine.boundary_attribute_set == {1, 2, 3, 4}
    reference = Mesh.make_cartesian_2d(4, 4, cell_type=cell_type)
    assert fine.number_of_vertices == reference.number_of_vertices
    assert len(fine.interior_faces) == len(reference.interior_faces)


def test_plot_returns_figure():
    matplotlib = pytest.importorskip("matplotlib")
    matplotlib.use("Agg")
    fig = Mesh.make_cartesian_2d(2, 2).plot(show=False)
    assert fig.axes
    fig_1d = Mesh.make_cartesian_1d(3).plot(show=False)
    assert fig_1d.axes


def _import_gmsh():
    try:
        import gmsh  # noqa: F401
    except (ImportError, OSError) as e:
        pytest.skip(f"gmsh is not usable: {e}")


@pytest.mark.parametrize("recombine, cell_type", [(True, "quad"), (False, "triangle")])
def test_gmsh_rectangle_round_trip(tmp_path, recombine, cell_type):
    _import_gmsh()
    from maxwelldg.fea.pre import generate_rectangle_mesh

    path = str(tmp_path / "rectangle.msh")
    stats = generate_rectangle_mesh(path, sx=2.0, sy=1.0, nx=4, ny=2, recombine=recombine)
    mesh = Mesh.from_file(path)

    assert mesh.cell_type == cell_type
    assert mesh.number_of_elements == stats.num_elements
    assert mesh.boundary_names == {"Bottom": 1, "Right": 2, "Top": 3, "Left": 4}
    assert mesh.attribute_names == {"Domain": 1}
    assert mesh.boundary_attribute_set == {1, 2, 3, 4}
    np.testing.assert_allclose(mesh.vertices.max(axis=0), [2.0, 1.0])
