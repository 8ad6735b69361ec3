import numpy as np
import pytest
import trimesh

from turbinegen.grid import Grid
from turbinegen.multipart import (MultiPartMesh, apply_rigid_transform, apply_transform,
                                  copy_mesh, scale_mesh)
from turbinegen.transforms import RigidTransform, rotation_matrix


def make_grid():
    return Grid([0, 0, 0], [1, 2, 0], [1, 2, 0])


def test_rotation_matrix_axes():
    assert np.allclose(rotation_matrix(90, 0, 0) @ [1, 0, 0], [0, 1, 0])
    assert np.allclose(rotation_matrix(0, 90, 0) @ [1, 0, 0], [0, 0, -1])
    assert np.allclose(rotation_matrix(0, 0, 90) @ [0, 1, 0], [0, 0, 1])


@pytest.mark.parametrize("angles", [(0, 0, 0), (30, -45, 120), (200, 10, -75)])
def test_rotation_matrix_is_proper(angles):
    rot = rotation_matrix(*angles)
    assert np.allclose(rot @ rot.T, np.eye(3))
    assert np.linalg.det(rot) == pytest.approx(1.0)


def test_rotation_matrix_order():
    expected = rotation_matrix(30, 0, 0) @ rotation_matrix(0, 20, 0) @ rotation_matrix(0, 0, 10)
    assert np.allclose(rotation_matrix(30, 20, 10), expected)


def test_rigid_transform_inverse_and_composition():
    transform = RigidTransform.from_angles(30, 15, -60, translation=[1, 2, 3])
    points = np.random.default_rng(0).normal(size=(10, 3))

    moved = transform.apply(points)
    assert np.allclose(transform.inverse().apply(moved), points)
    assert np.allclose(transform.then(transform.inverse()).apply(points), points)

    other = RigidTransform.from_angles(yaw=90, translation=[0, 0, 5])
    assert np.allclose(transform.then(other).apply(points), other.apply(moved))


def test_rigid_transform_rejects_bad_shapes():
    with pytest.raises(ValueError):
        RigidTransform(np.eye(2))
    with pytest.raises(ValueError):
        RigidTransform(translation=[1, 2])


def test_add_part_rejects_duplicates():
    mesh = MultiPartMesh()
    first = make_grid()
    mesh.add_part("tower", first)

    with pytest.raises(ValueError, match="tower"):
        mesh.add_part("tower", make_grid())

    assert len(mesh) == 1
    assert mesh.get_part("tower") is first


def test_add_part_rejects_unknown_types():
    mesh = MultiPartMesh()
    with pytest.raises(TypeError):
        mesh.add_part("points", np.zeros((3, 3)))
    assert "points" not in mesh


def test_leaves_are_named_by_path():
    rotor = MultiPartMesh()
    rotor.add_part("hub", trimesh.creation.box())
    rotor.add_part("blade1", make_grid())
    turbine = MultiPartMesh()
    turbine.add_part("tower", make_grid())
    turbine.add_part("rotor", rotor)

    assert [name for name, _ in turbine.leaves()] == ["tower", "rotor_hub", "rotor_blade1"]
    assert turbine.names() == ["tower", "rotor"]
    assert turbine["rotor"] is rotor
    assert turbine.nodes().shape == (6 + 8 + 6, 3)


def test_transforms_reach_every_part():
    rotor = MultiPartMesh()
    rotor.add_part("hub", trimesh.creation.box())
    rotor.add_part("blade1", make_grid())
    turbine = MultiPartMesh()
    turbine.add_part("rotor", rotor)
    before = turbine.nodes().copy()

    rot = rotation_matrix(45, 0, 0)
    apply_rigid_transform(turbine, rot, [10, 0, 0])

    assert np.allclose(turbine.nodes(), before @ rot.T + [10, 0, 0])


def test_apply_transform_grid():
    grid = make_grid()
    apply_transform(grid, RigidTransform(translation=[0, 0, 1]))
    assert np.allclose(grid.nodes[:, 2], 1)

    planar = Grid([0, 0], [1, 1], [1, 1])
    with pytest.raises(ValueError):
        apply_transform(planar, RigidTransform())


def test_copy_is_deep():
    parts = MultiPartMesh()
    parts.add_part("box", trimesh.creation.box())
    parts.add_part("grid", make_grid())

    clone = copy_mesh(parts)
    scale_mesh(clone, 3.0)

    assert np.allclose(clone.nodes(), 3.0 * parts.nodes())
    assert clone["box"] is not parts["box"]
    assert np.allclose(parts["grid"].get_node((1, 2, 0)), [1, 2, 0])


def test_unsupported_mesh_type():
    with pytest.raises(TypeError):
        scale_mesh("mesh", 2.0)
    with pytest.raises(TypeError):
        copy_mesh(None)
