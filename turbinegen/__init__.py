"""
Wind turbine and wind farm mesh generation.

Lofts blades from tabulated cross sections and distributions, assembles
hubs, blades and towers into turbines, places turbines into farm layouts,
and grids the fluid domain inside a farm perimeter.
"""
import logging

from turbinegen.farm import generate_layout, generate_perimetergrid, generate_windfarm
from turbinegen.grid import Grid, triangulate
from turbinegen.loft import BladeTables, LoftTransform, generate_blade, generate_loft
from turbinegen.multipart import MultiPartMesh, apply_rigid_transform
from turbinegen.transforms import RigidTransform, rotation_matrix
from turbinegen.turbine import TurbineParts, generate_windturbine

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
