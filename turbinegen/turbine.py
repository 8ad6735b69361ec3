"""
Wind Turbine Assembly

Builds the parts of a horizontal-axis wind turbine (blade, hub, tower) and
assembles them into a MultiPartMesh:

    turbine
    ├── tower
    └── rotor
        ├── hub
        ├── blade1
        ├── ...
        └── bladeN

The rotor axis is x and the tower stands along z. Part templates are
normalized by the tip radius and are never mutated by the assembly: every
placed part is an independent copy.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
import trimesh

from turbinegen import airfoils, config
from turbinegen.config import SplineOptions
from turbinegen.loft import BladeTables, generate_blade, generate_loft
from turbinegen.multipart import (MultiPartMesh, apply_rigid_transform, copy_mesh,
                                  scale_mesh)
from turbinegen.transforms import rotation_matrix

logger = logging.getLogger(__name__)

# Points per side of the built-in cross sections
PROFILE_POINTS = 25
BLADE_NDIVS = 40
HUB_SECTIONS = 32
TOWER_POINTS = 13
TOWER_NDIVS = 10

# The built-in distributions are smooth already; fit them almost exactly
DEFAULT_BLADE_SPLINE = SplineOptions(degree=3, smoothing=1e-8)


def default_blade_tables(n_points: int = PROFILE_POINTS) -> BladeTables:
    """
    Built-in blade geometry loosely following a 5 MW reference blade.

    Positions and lengths are normalized by the tip radius; twists in degrees.
    The root is a circle that blends into thick cambered airfoils outboard.
    """
    chords = np.array([
        [0.00, 0.0563],
        [0.10, 0.0620],
        [0.20, 0.0730],
        [0.30, 0.0690],
        [0.50, 0.0560],
        [0.70, 0.0440],
        [0.90, 0.0330],
        [1.00, 0.0225],
    ])
    twists = np.array([
        [0.00, 13.3],
        [0.20, 13.3],
        [0.40, 9.0],
        [0.60, 5.4],
        [0.80, 2.3],
        [1.00, 0.1],
    ])
    # Leading edge a quarter chord ahead of the pitch axis
    le_x = np.column_stack([chords[:, 0], -0.25 * chords[:, 1]])
    le_z = np.array([[0.0, 0.0], [1.0, 0.0]])

    circle = airfoils.circle_profile(n_points)
    sections = [
        (0.00, circle),
        (0.08, circle),
        (0.25, airfoils.naca4_profile("4430", n_points)),
        (0.50, airfoils.naca4_profile("4421", n_points)),
        (0.75, airfoils.naca4_profile("4415", n_points)),
        (1.00, airfoils.naca4_profile("4412", n_points)),
    ]

    return BladeTables(chords=chords, twists=twists, le_x=le_x, le_z=le_z,
                       sections=sections)


def generate_hub(radius: float, thickness: float, sections: int = HUB_SECTIONS) -> trimesh.Trimesh:
    """
    Create a cylindrical hub centered at the origin along the Z axis.

    The assembly aligns it with the rotor axis.
    """
    return trimesh.creation.cylinder(radius=radius, height=thickness, sections=sections)


def generate_tower(height: float, base_radius: float, top_radius: float,
                   n_points: int = TOWER_POINTS, ndivs=TOWER_NDIVS) -> trimesh.Trimesh:
    """
    Loft a tapered tower of circular sections along +Y, from 0 to height.

    Args:
        height: Tower height
        base_radius: Radius at the ground
        top_radius: Radius at the top
        n_points: Points per side of the circular section
        ndivs: Divisions along the height (count or multi-section descriptor)
    """
    circle = airfoils.centered(airfoils.circle_profile(n_points))
    chords = [[0.0, 2 * base_radius / height], [1.0, 2 * top_radius / height]]
    flat = [[0.0, 0.0], [1.0, 0.0]]

    return generate_loft(height, 0.0, 1.0, ndivs, chords, flat, flat, flat,
                         [(0.0, circle)], spline=SplineOptions(degree=1, smoothing=0.0))


@dataclass
class TurbineParts:
    """
    Part templates of a turbine, normalized by the tip radius.

    Attributes:
        blade: Blade surface lofted along +Y from the hub radius to 1
        hub: Hub surface along Z, centered at the origin
        hub_radius: Hub radius
        hub_thickness: Hub length along the rotor axis
        tower_base_radius: Tower radius at the ground
        tower_top_radius: Tower radius at the top
    """
    blade: object
    hub: object
    hub_radius: float = config.HUB_RADIUS
    hub_thickness: float = config.HUB_THICKNESS
    tower_base_radius: float = config.TOWER_BASE_RADIUS
    tower_top_radius: float = config.TOWER_TOP_RADIUS

    @classmethod
    def from_tables(cls, tables: BladeTables, blade_ndivs=BLADE_NDIVS,
                    spline: Optional[SplineOptions] = None) -> "TurbineParts":
        """
        Parts with a blade lofted from tabulated geometry and the built-in hub.

        Args:
            tables: Blade geometry normalized by the tip radius
            blade_ndivs: Divisions along the blade
            spline: Spline options for the blade distributions
        """
        blade = generate_blade(1.0, config.HUB_RADIUS, blade_ndivs, tables, spline=spline)
        hub = generate_hub(config.HUB_RADIUS, config.HUB_THICKNESS)
        return cls(blade=blade, hub=hub)

    @classmethod
    def default(cls, blade_ndivs=BLADE_NDIVS, n_points: int = PROFILE_POINTS) -> "TurbineParts":
        """Parts built from the built-in blade tables and hub dimensions."""
        return cls.from_tables(default_blade_tables(n_points), blade_ndivs,
                               spline=DEFAULT_BLADE_SPLINE)


def rotor_center(rtip: float, height: float, parts: TurbineParts) -> np.ndarray:
    """Position of the rotor origin, atop the tower and slightly upwind of it."""
    rhub = parts.hub_radius * rtip
    thub = parts.hub_thickness * rtip
    return np.array([thub * 2 / 6, 0.0, height + rhub / 2])


def generate_rotor(rtip: float, nblades: int, parts: TurbineParts) -> MultiPartMesh:
    """
    Assemble hub and blades around the x axis, centered at the origin.

    Blade k (1-based) is placed at an azimuth of exactly (k - 1) * 360 / nblades
    degrees.
    """
    if nblades < 1:
        raise ValueError(f"A rotor needs at least one blade, got {nblades}")

    thub = parts.hub_thickness * rtip
    rotor = MultiPartMesh()

    # Aligns the hub with the rotor axis
    hub = scale_mesh(copy_mesh(parts.hub), rtip)
    apply_rigid_transform(hub, rotation_matrix(0, 90, 0))
    rotor.add_part("hub", hub)

    # Points the blade template down before distributing it around the axis
    blade = scale_mesh(copy_mesh(parts.blade), rtip)
    apply_rigid_transform(blade, rotation_matrix(0, 0, -90))

    for k in range(nblades):
        this_blade = copy_mesh(blade)
        azimuth = k * 360.0 / nblades
        apply_rigid_transform(this_blade, rotation_matrix(0, 0, azimuth), [-thub * 5 / 6, 0, 0])
        rotor.add_part(f"blade{k + 1}", this_blade)

    return rotor


def generate_windturbine(rtip: float, height: float, nblades: int = 3,
                         parts: Optional[TurbineParts] = None) -> MultiPartMesh:
    """
    Generate a complete wind turbine standing at the origin.

    Args:
        rtip: Blade tip radius (half the rotor diameter)
        height: Tower height
        nblades: Number of blades
        parts: Part templates normalized by rtip; built-in parts when None

    Returns:
        MultiPartMesh with a 'tower' part and a 'rotor' MultiPartMesh
    """
    parts = parts or TurbineParts.default()

    rotor = generate_rotor(rtip, nblades, parts)

    windturbine = MultiPartMesh()

    tower = generate_tower(height, parts.tower_base_radius * rtip, parts.tower_top_radius * rtip)
    apply_rigid_transform(tower, rotation_matrix(0, 0, 90))
    windturbine.add_part("tower", tower)

    apply_rigid_transform(rotor, np.eye(3), rotor_center(rtip, height, parts))
    windturbine.add_part("rotor", rotor)

    logger.debug("Assembled turbine: rtip=%g, height=%g, %d blades", rtip, height, nblades)
    return windturbine
