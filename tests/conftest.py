import os

import numpy as np
import pytest

from turbinegen import airfoils
from turbinegen.turbine import TurbineParts


def _write_csv(path, header, rows):
    with open(path, 'w', encoding='utf-8') as f:
        f.write(",".join(header) + "\n")
        for row in rows:
            f.write(",".join(str(v) for v in row) + "\n")


def _write_blade(directory, name, chord_scale=1.0):
    chords = [(0.0, 0.08 * chord_scale), (0.5, 0.07 * chord_scale), (1.0, 0.03 * chord_scale)]
    _write_csv(os.path.join(directory, f"{name}_chord.csv"), ["r/R", "c/R"], chords)
    _write_csv(os.path.join(directory, f"{name}_twist.csv"), ["r/R", "twist"], [(0.0, 12.0), (1.0, 0.0)])
    _write_csv(os.path.join(directory, f"{name}_lex.csv"), ["r/R", "x/R"], [(0.0, -0.02), (1.0, -0.01)])
    _write_csv(os.path.join(directory, f"{name}_lez.csv"), ["r/R", "z/R"], [(0.0, 0.0), (1.0, 0.0)])
    _write_csv(os.path.join(directory, f"{name}_airfoilsections.csv"), ["r/R", "file"],
               [(0.0, "circle.csv"), (1.0, "naca.csv")])

    airfoil_dir = os.path.join(directory, "airfoils")
    os.makedirs(airfoil_dir, exist_ok=True)
    _write_csv(os.path.join(airfoil_dir, f"{name}_circle.csv"), ["x/c", "y/c"],
               airfoils.circle_profile(8).tolist())
    _write_csv(os.path.join(airfoil_dir, f"{name}_naca.csv"), ["x/c", "y/c"],
               airfoils.naca4_profile("2412", 8).tolist())


@pytest.fixture(scope="session")
def small_parts():
    """Coarse built-in parts to keep assembly tests fast."""
    return TurbineParts.default(blade_ndivs=6, n_points=6)


@pytest.fixture
def circle():
    theta = np.linspace(0.3, 0.3 + 2 * np.pi, 200, endpoint=False)
    return np.column_stack([np.cos(theta), np.sin(theta)])


@pytest.fixture
def blade_dir(tmp_path):
    """Data directory with two tabulated blades: 'TEST' and the wider 'WIDE'."""
    data_path = tmp_path / "data"
    os.makedirs(data_path)
    _write_blade(str(data_path), "TEST")
    _write_blade(str(data_path), "WIDE", chord_scale=2.0)
    return str(data_path)
