"""
Configuration Options
=====================
Option records shared by the loft, perimeter and farm generators, plus the
dimensions of the built-in turbine geometry.

All lengths of the built-in geometry are normalized by the blade tip radius,
except where noted. Nothing here is mutable process state: data paths and
output locations are always passed explicitly to the functions that need them.
"""
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple, Union

# A plain division count, or a multi-section descriptor
# [(length_fraction, count, stretching, reverse), ...]
Divisions = Union[int, Sequence[Tuple[float, int, float, bool]]]

# Boundary policies understood by the spline interpolator
SPLINE_BOUNDARY_POLICIES = ("extrapolate", "zero", "error", "nearest", "clamp")

# Built-in turbine dimensions (normalized by the tip radius)
HUB_RADIUS = 0.0238       # Spinner radius
HUB_THICKNESS = 0.0714    # Spinner length along the rotor axis
TOWER_BASE_RADIUS = 0.0476
TOWER_TOP_RADIUS = 0.0307

# Fluid domain height above the tallest tower, in multiples of the largest radius
DOMAIN_TOP_CLEARANCE = 1.25


@dataclass(frozen=True)
class SplineOptions:
    """
    Options used whenever a tabulated distribution is turned into a spline.

    Attributes:
        degree: Requested spline degree. Lowered to (points - 1) for short tables.
        smoothing: Smoothing factor handed to the spline fit (0 interpolates).
        boundary: Behavior outside the fitted range, one of
                  SPLINE_BOUNDARY_POLICIES.
    """
    degree: int = 5
    smoothing: float = 0.001
    boundary: str = "extrapolate"


@dataclass(frozen=True)
class FluidDomainOptions:
    """
    Discretization of the perimeter surface grid and the fluid domain volume.

    z_min and z_max are optional; when omitted they are derived from the farm
    geometry by `resolve`.
    """
    ndivs_x: Divisions = 50
    ndivs_y: Divisions = 50
    ndivs_z: Divisions = 50
    z_min: Optional[float] = None
    z_max: Optional[float] = None
    spline: SplineOptions = field(default_factory=SplineOptions)

    def resolve(self, heights: Sequence[float], diameters: Sequence[float]) -> Tuple[float, float]:
        """
        Returns the vertical bounds of the fluid domain.

        Defaults: z_min = 0 and z_max = max(heights) + 1.25 * max(diameters) / 2.
        """
        z_min = 0.0 if self.z_min is None else float(self.z_min)
        if self.z_max is None:
            z_max = max(heights) + DOMAIN_TOP_CLEARANCE * max(diameters) / 2.0
        else:
            z_max = float(self.z_max)
        return z_min, float(z_max)
