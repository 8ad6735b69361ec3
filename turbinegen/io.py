"""
Loaders and Writers

Reads tabulated blade geometry, farm layouts and perimeters from CSV files and
writes finished meshes. The data directory is always passed explicitly.

Blade data layout inside `data_path` (one header row per file):

    <blade>_chord.csv            y/R, c/R
    <blade>_twist.csv            y/R, twist (deg)
    <blade>_lex.csv              y/R, x/R of the leading edge
    <blade>_lez.csv              y/R, z/R of the leading edge
    <blade>_tiltz.csv            y/R, tilt (deg)        (optional)
    <blade>_airfoilsections.csv  y/R, contour file name
    airfoils/<blade>_<contour file name>   x/c, y/c
"""
import csv
import logging
import os
from typing import Dict, List

import numpy as np
import trimesh

from turbinegen.grid import Grid
from turbinegen.loft import BladeTables

logger = logging.getLogger(__name__)

LAYOUT_COLUMNS = ("D", "H", "N", "x", "y", "z", "yaw")
LAYOUT_OPTIONAL_COLUMNS = ("blade",)


def _read_rows(path: str) -> List[List[str]]:
    with open(path, 'r', encoding='utf-8', newline='') as f:
        reader = csv.reader(f)
        next(reader, None)  # Header
        return [row for row in reader if row and any(cell.strip() for cell in row)]


def load_table(path: str, columns: int = 2) -> np.ndarray:
    """
    Load the first `columns` numeric columns of a CSV file with a header row.

    Returns:
        Float array of shape (rows, columns)
    """
    rows = _read_rows(path)
    if not rows:
        raise ValueError(f"No data rows in {path}")
    try:
        return np.array([[float(cell) for cell in row[:columns]] for row in rows])
    except ValueError as e:
        raise ValueError(f"Non-numeric entry in {path}: {e}") from e


def load_distribution(path: str) -> np.ndarray:
    """Load a (position, value) distribution table."""
    return load_table(path, 2)


def load_contour(path: str) -> np.ndarray:
    """Load a 2D contour as an (n, 2) array of points."""
    return load_table(path, 2)


def load_blade_tables(blade_name: str, data_path: str) -> BladeTables:
    """
    Read all tabulated geometry of a blade.

    Args:
        blade_name: Blade geometry identifier (file name prefix)
        data_path: Directory holding the blade files
    """
    def path(suffix):
        return os.path.join(data_path, f"{blade_name}_{suffix}.csv")

    sections = []
    for row in _read_rows(path("airfoilsections")):
        pos, file_name = float(row[0]), row[1].strip()
        contour_path = os.path.join(data_path, "airfoils", f"{blade_name}_{file_name}")
        sections.append((pos, load_contour(contour_path)))

    tilt_path = path("tiltz")
    tilt_z = load_distribution(tilt_path) if os.path.isfile(tilt_path) else None

    logger.info("Loaded blade %r from %s (%d cross sections)", blade_name, data_path, len(sections))

    return BladeTables(
        chords=load_distribution(path("chord")),
        twists=load_distribution(path("twist")),
        le_x=load_distribution(path("lex")),
        le_z=load_distribution(path("lez")),
        sections=sections,
        tilt_z=tilt_z,
    )


def load_layout(csv_file: str) -> Dict[str, list]:
    """
    Load a farm layout with one turbine per row.

    Columns: D (rotor diameter), H (tower height), N (blades), x, y, z (base
    position) and yaw (degrees). An optional 'blade' column names the blade
    data of every turbine.

    Returns:
        Dictionary mapping every column name to a list of values
    """
    with open(csv_file, 'r', encoding='utf-8', newline='') as f:
        reader = csv.DictReader(f)
        missing = [c for c in LAYOUT_COLUMNS if c not in (reader.fieldnames or [])]
        if missing:
            raise ValueError(f"Layout file {csv_file} is missing columns {missing}")

        columns = LAYOUT_COLUMNS + tuple(c for c in LAYOUT_OPTIONAL_COLUMNS if c in reader.fieldnames)
        layout = {c: [] for c in columns}
        for row in reader:
            for key in LAYOUT_OPTIONAL_COLUMNS:
                if key in layout:
                    layout[key].append(row[key].strip())
            for key in LAYOUT_COLUMNS:
                value = row[key]
                if key == 'N':
                    layout[key].append(int(float(value)))
                else:
                    layout[key].append(float(value))

    if not layout['D']:
        raise ValueError(f"Layout file {csv_file} has no turbines")
    return layout


def save_mesh(mesh, path_prefix: str, file_format: str = "stl") -> str:
    """
    Write one mesh. Triangle meshes go through trimesh; grids are stored as
    .npz archives of their nodes and fields.

    Returns:
        The path written
    """
    if isinstance(mesh, Grid):
        path = path_prefix + ".npz"
        arrays = {"nodes": mesh.nodes,
                  "node_counts": np.array(mesh.get_node_counts())}
        for name, field in mesh.fields.items():
            arrays[f"field_{name}"] = field["field_data"]
        np.savez(path, **arrays)
    elif isinstance(mesh, trimesh.Trimesh):
        path = f"{path_prefix}.{file_format}"
        mesh.export(path)
    else:
        raise TypeError(f"Cannot save mesh of type {type(mesh).__name__}")
    return path


def save_multipart(mesh, file_name: str, save_path: str, file_format: str = "stl") -> List[str]:
    """
    Write every leaf part of a MultiPartMesh to its own file.

    Files are named <file_name>_<part path>, e.g. 'farm_turbine1_rotor_blade2.stl'.
    """
    os.makedirs(save_path, exist_ok=True)
    written = []
    for part_name, part in mesh.leaves():
        prefix = os.path.join(save_path, f"{file_name}_{part_name}")
        written.append(save_mesh(part, prefix, file_format))
    logger.info("Wrote %d files to %s", len(written), save_path)
    return written
