import os

import numpy as np
import pytest
import trimesh

from turbinegen import airfoils, io
from turbinegen.grid import Grid
from turbinegen.loft import generate_blade
from turbinegen.multipart import MultiPartMesh


def write_csv(path, header, rows):
    with open(path, 'w', encoding='utf-8') as f:
        f.write(",".join(header) + "\n")
        for row in rows:
            f.write(",".join(str(v) for v in row) + "\n")



def test_load_blade_tables(blade_dir):
    tables = io.load_blade_tables("TEST", blade_dir)

    assert tables.chords.shape == (3, 2)
    assert tables.twists[0, 1] == 12.0
    assert tables.tilt_z is None
    assert [pos for pos, _ in tables.sections] == [0.0, 1.0]
    assert np.allclose(tables.sections[1][1], airfoils.naca4_profile("2412", 8))

    blade = generate_blade(2.0, 0.2, 5, tables)
    assert len(blade.vertices) == 15 * 6


def test_load_blade_tables_with_tilt(blade_dir):
    write_csv(os.path.join(blade_dir, "TEST_tiltz.csv"), ["r/R", "tilt"], [(0.0, 0.0), (1.0, 3.0)])
    tables = io.load_blade_tables("TEST", blade_dir)
    assert np.allclose(tables.tilt_z, [(0.0, 0.0), (1.0, 3.0)])


def test_missing_blade_file(blade_dir):
    with pytest.raises(OSError):
        io.load_blade_tables("OTHER", blade_dir)


def test_load_table_errors(tmp_path):
    empty = tmp_path / "empty.csv"
    write_csv(empty, ["a", "b"], [])
    with pytest.raises(ValueError, match="No data"):
        io.load_table(str(empty))

    text = tmp_path / "text.csv"
    write_csv(text, ["a", "b"], [(1, "abc")])
    with pytest.raises(ValueError, match="Non-numeric"):
        io.load_table(str(text))


def test_load_layout(tmp_path):
    path = tmp_path / "layout.csv"
    write_csv(path, io.LAYOUT_COLUMNS, [(126, 90, 3, 0, 0, 0, 0), (126, 90, 3.0, 500, 0, 0, 30)])

    layout = io.load_layout(str(path))

    assert layout['N'] == [3, 3]
    assert all(isinstance(n, int) for n in layout['N'])
    assert layout['x'] == [0.0, 500.0]
    assert layout['yaw'][1] == 30.0
    assert 'blade' not in layout


def test_load_layout_blade_column(tmp_path):
    path = tmp_path / "layout.csv"
    write_csv(path, io.LAYOUT_COLUMNS + ("blade",),
              [(126, 90, 3, 0, 0, 0, 0, "TEST"), (80, 70, 3, 500, 0, 0, 0, " WIDE ")])

    layout = io.load_layout(str(path))

    assert layout["blade"] == ["TEST", "WIDE"]
    assert layout["D"] == [126.0, 80.0]


def test_load_layout_errors(tmp_path):
    missing = tmp_path / "missing.csv"
    write_csv(missing, ["D", "H", "N", "x", "y", "z"], [(126, 90, 3, 0, 0, 0)])
    with pytest.raises(ValueError, match="yaw"):
        io.load_layout(str(missing))

    empty = tmp_path / "empty.csv"
    write_csv(empty, io.LAYOUT_COLUMNS, [])
    with pytest.raises(ValueError, match="no turbines"):
        io.load_layout(str(empty))


def test_save_multipart(tmp_path):
    grid = Grid([0, 0, 0], [1, 1, 1], [1, 1, 1])
    grid.calculate_field(lambda X: X[2], "height", "scalar")
    inner = MultiPartMesh()
    inner.add_part("box", trimesh.creation.box())
    mesh = MultiPartMesh()
    mesh.add_part("part", inner)
    mesh.add_part("domain", grid)

    out = tmp_path / "out"
    written = io.save_multipart(mesh, "farm", str(out))

    assert written == [str(out / "farm_part_box.stl"), str(out / "farm_domain.npz")]
    assert all(os.path.isfile(path) for path in written)

    loaded = trimesh.load(written[0])
    assert len(loaded.faces) == 12

    with np.load(written[1]) as archive:
        assert np.allclose(archive["nodes"], grid.nodes)
        assert archive["node_counts"].tolist() == [2, 2, 2]
        assert np.allclose(archive["field_height"], grid.nodes[:, 2])


def test_save_mesh_rejects_unknown_type(tmp_path):
    with pytest.raises(TypeError):
        io.save_mesh("mesh", str(tmp_path / "x"))
