"""
Wind Farm Layouts and Fluid Domains

Places turbines at their base positions and yaw angles, grids the inside of
the farm perimeter, and builds the volumetric fluid domain above it.
"""
import logging
from typing import Callable, Optional, Sequence, Tuple, Union

import numpy as np

from turbinegen import contour
from turbinegen.config import FluidDomainOptions, SplineOptions
from turbinegen.grid import Grid
from turbinegen.multipart import MultiPartMesh, apply_rigid_transform
from turbinegen.transforms import rotation_matrix
from turbinegen.turbine import TurbineParts, generate_windturbine

logger = logging.getLogger(__name__)


def _check_turbine_arrays(diameters, heights, blade_counts, x, y, z, yaws, parts=None) -> int:
    """Number of turbines; raises ValueError when the per-turbine arrays disagree."""
    columns = [diameters, heights, blade_counts, x, y, z, yaws]
    if parts is not None and not isinstance(parts, TurbineParts):
        columns.append(parts)
    n_turbines = len(diameters)
    if any(len(col) != n_turbines for col in columns):
        raise ValueError(f"Turbine arrays must all have the same length, got "
                         f"{[len(col) for col in columns]}")
    return n_turbines


def generate_layout(diameters: Sequence[float], heights: Sequence[float],
                    blade_counts: Sequence[int], x: Sequence[float], y: Sequence[float],
                    z: Sequence[float], yaws: Sequence[float],
                    parts: Union[None, TurbineParts, Sequence[TurbineParts]] = None) -> MultiPartMesh:
    """
    Generate a wind farm layout with one turbine per entry.

    Args:
        diameters: Rotor diameter of every turbine
        heights: Tower height of every turbine
        blade_counts: Number of blades of every turbine
        x, y, z: Position of every turbine base
        yaws: Angle of every plane of rotation relative to the global x axis,
              in degrees, applied about the vertical axis
        parts: Part templates, either one TurbineParts shared by all turbines
               or one per turbine; built-in parts when None

    Returns:
        MultiPartMesh with parts 'turbine1' ... 'turbineN'
    """
    n_turbines = _check_turbine_arrays(diameters, heights, blade_counts, x, y, z, yaws, parts)

    if parts is None or isinstance(parts, TurbineParts):
        parts = [parts or TurbineParts.default()] * n_turbines

    windfarm = MultiPartMesh()

    for i in range(n_turbines):
        turbine = generate_windturbine(diameters[i] / 2, heights[i], int(blade_counts[i]),
                                       parts=parts[i])

        # Places it at its location and orientation
        apply_rigid_transform(turbine, rotation_matrix(yaws[i], 0, 0), [x[i], y[i], z[i]])
        windfarm.add_part(f"turbine{i + 1}", turbine)

    logger.info("Generated layout with %d turbines", n_turbines)
    return windfarm


def reparameterize_perimeter(perimeter, ndivs,
                             spline: Optional[SplineOptions] = None) -> Tuple[np.ndarray, np.ndarray]:
    """
    Resample both sides of a closed perimeter with the same arclength divisions.

    Returns:
        (upper, lower) arrays of shape (divisions + 1, 2), both running from
        the minimum-x to the maximum-x point of the perimeter
    """
    spline = spline or SplineOptions()
    upper, lower = contour.split_contour(perimeter)

    # spline.degree is a cap here; short chains lower it automatically
    fun_upper = contour.parameterize(upper, degree=spline.degree,
                                     smoothing=spline.smoothing, boundary=spline.boundary)
    fun_lower = contour.parameterize(lower, degree=spline.degree,
                                     smoothing=spline.smoothing, boundary=spline.boundary)

    new_upper = contour.discretize_divisions(fun_upper, 0.0, 1.0, ndivs)
    new_lower = contour.discretize_divisions(fun_lower, 0.0, 1.0, ndivs)
    return new_upper, new_lower


def generate_perimetergrid(perimeter, ndivs_x, ndivs_y, ndivs_z,
                           z_min: float = 0.0, z_max: float = 0.0,
                           spline: Optional[SplineOptions] = None) -> Grid:
    """
    Grid the inside of a closed perimeter.

    Args:
        perimeter: (n, 2) points of the closed contour
        ndivs_x: Divisions along the perimeter arclength
        ndivs_y: Divisions across, from the lower to the upper side
        ndivs_z: Layers between z_min and z_max; 0 gives a flat surface grid
        z_min, z_max: Vertical bounds of a volumetric grid
        spline: Spline options of the perimeter parameterization

    Every ndivs argument is a division count or a multi-section descriptor.

    Returns:
        Grid whose nodes are physical (x, y, z) points
    """
    # Validate every descriptor before doing any work
    for ndivs in (ndivs_x, ndivs_y, ndivs_z):
        contour.resolve_divisions(ndivs)
    nz = contour.division_count(ndivs_z)

    new_upper, new_lower = reparameterize_perimeter(perimeter, ndivs_x, spline)

    grid = Grid([0.0, 0.0, 0.0], [1.0, 1.0, 1.0 * (nz != 0)], [ndivs_x, ndivs_y, ndivs_z])

    def space_transform(X, inds):
        i = inds[0]                       # Arclength point
        w = X[1]                          # Weight between the sides
        point = new_lower[i] + w * (new_upper[i] - new_lower[i])
        return np.array([point[0], point[1], z_min + X[2] * (z_max - z_min)])

    grid.apply_transform(space_transform)
    logger.info("Perimeter grid: divisions %s, %d nodes",
                grid.get_division_counts(), grid.node_count)
    return grid


def generate_windfarm(diameters, heights, blade_counts, x, y, z, yaws, perimeter,
                      wake: Optional[Callable[[np.ndarray], Sequence[float]]] = None,
                      options: Optional[FluidDomainOptions] = None,
                      parts: Union[None, TurbineParts, Sequence[TurbineParts]] = None):
    """
    Generate the turbines, the perimeter surface grid and the fluid domain.

    Args:
        diameters, heights, blade_counts, x, y, z, yaws: Per-turbine arrays,
            see `generate_layout`
        perimeter: (n, 2) points of the closed farm perimeter
        wake: Optional function of a node position returning a velocity
              vector; attached to the fluid domain as the 'wake' node field
        options: Perimeter and fluid domain discretization
        parts: Part templates, shared or one per turbine (see `generate_layout`)

    Returns:
        (windfarm, perimeter_grid, fluid_domain)
    """
    _check_turbine_arrays(diameters, heights, blade_counts, x, y, z, yaws, parts)
    options = options or FluidDomainOptions()

    perimeter_grid = generate_perimetergrid(perimeter, options.ndivs_x, options.ndivs_y, 0,
                                            spline=options.spline)

    z_min, z_max = options.resolve(heights, diameters)
    fluid_domain = generate_perimetergrid(perimeter, options.ndivs_x, options.ndivs_y,
                                          options.ndivs_z, z_min=z_min, z_max=z_max,
                                          spline=options.spline)

    if wake is not None:
        fluid_domain.calculate_field(wake, "wake", "vector")

    windfarm = generate_layout(diameters, heights, blade_counts, x, y, z, yaws, parts=parts)

    return windfarm, perimeter_grid, fluid_domain
