"""
Lofted Surfaces

Generates blade/wing surfaces by interpolating cross-section contours along a
span. A quasi two-dimensional parametric grid (arclength x span) is mapped
onto the physical surface by `LoftTransform`, which blends the bounding cross
sections, scales them by the chord distribution, twists and tilts them, and
places them relative to the leading-edge line.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np
import trimesh

from turbinegen import splines
from turbinegen.config import SplineOptions
from turbinegen.grid import Grid, triangulate
from turbinegen.transforms import rotation_matrix

logger = logging.getLogger(__name__)

# Grid dimension along which loft quads are split into triangles
LOFT_SPLIT_DIM = 1


def validate_sections(sections) -> List[Tuple[float, np.ndarray]]:
    """
    Check a cross-section table and convert it to (position, (m, 2) array) pairs.

    Raises:
        ValueError: If the table is empty, a contour is not an (m, 2) array,
                    contours differ in point count, or positions decrease.
    """
    if len(sections) == 0:
        raise ValueError("Cross-section table is empty")

    table = []
    for pos, contour in sections:
        points = np.asarray(contour, dtype=float)
        if points.ndim != 2 or points.shape[1] != 2:
            raise ValueError(f"Cross section at {pos} must be an (m, 2) array, got shape {points.shape}")
        table.append((float(pos), points))

    n_points = table[0][1].shape[0]
    for pos, points in table:
        if points.shape[0] != n_points:
            raise ValueError(f"All cross sections must have the same number of points: section at "
                             f"{pos} has {points.shape[0]}, expected {n_points}")

    positions = [pos for pos, _ in table]
    if any(b < a for a, b in zip(positions[:-1], positions[1:])):
        raise ValueError(f"Cross-section positions must be sorted, got {positions}")

    return table


def signed_area(contour) -> float:
    """Shoelace area of a closed 2D contour; positive when counterclockwise."""
    x, y = np.asarray(contour, dtype=float).T
    return 0.5 * float(np.sum(x * np.roll(y, -1) - np.roll(x, -1) * y))


def find_bounding_sections(positions: Sequence[float], span: float) -> Tuple[float, int, int]:
    """
    Find the pair of cross sections bracketing a span position.

    Scans the sorted positions for the first one at or beyond |span|.

    Returns:
        (weight, i_in, i_out) with weight clamped to [0, 1], so that a blended
        value is weight * value[i_out] + (1 - weight) * value[i_in]
    """
    if len(positions) == 1:
        return 0.0, 0, 0

    target = abs(span)
    i_out = 0
    for i in range(1, len(positions)):
        i_out = i
        if positions[i] >= target:
            break
    i_in = i_out - 1

    pos_in, pos_out = positions[i_in], positions[i_out]
    if pos_out == pos_in:
        weight = 1.0 if target >= pos_out else 0.0
    else:
        weight = (target - pos_in) / (pos_out - pos_in)

    return min(max(weight, 0.0), 1.0), i_in, i_out


@dataclass
class BladeTables:
    """
    Tabulated geometry of a blade, normalized by the span scale.

    Distributions are (n, 2) tables of (y/bscale, value); twist and tilt are in
    degrees. `sections` is the cross-section table [(y/bscale, contour)].
    """
    chords: np.ndarray
    twists: np.ndarray
    le_x: np.ndarray
    le_z: np.ndarray
    sections: list
    tilt_z: Optional[np.ndarray] = None


class LoftTransform:
    """
    Space transformation from (arclength, span, dummy) grid coordinates to
    points on a lofted surface.

    Args:
        bscale: Span scale applied to the whole result
        chords, twists, le_x, le_z: Distribution tables [(y/bscale, value)]
        sections: Cross-section table [(y/bscale, contour)]
        tilt_z: Optional tilt distribution [(y/bscale, deg)]
        spline: Spline options used for every distribution
    """

    def __init__(self, bscale: float, chords, twists, le_x, le_z, sections,
                 tilt_z=None, spline: Optional[SplineOptions] = None):
        self.sections = validate_sections(sections)
        self.positions = [pos for pos, _ in self.sections]
        self.bscale = float(bscale)

        spline = spline or SplineOptions()
        self.spl_chord = splines.fit_with(chords, spline)
        self.spl_twist = splines.fit_with(twists, spline)
        self.spl_le_x = splines.fit_with(le_x, spline)
        self.spl_le_z = splines.fit_with(le_z, spline)
        self.spl_tilt_z = None if tilt_z is None else splines.fit_with(tilt_z, spline)

    @property
    def contour_divisions(self) -> int:
        """Arclength divisions implied by the cross-section point count."""
        return self.sections[0][1].shape[0] - 1

    def distributions(self, span: float) -> dict:
        """Spline-evaluated distributions at a span position."""
        s = abs(span)
        return {
            "chord": self.spl_chord(s),
            "twist": self.spl_twist(s),
            "le_x": self.spl_le_x(s),
            "le_z": self.spl_le_z(s),
            "tilt_z": 0.0 if self.spl_tilt_z is None else self.spl_tilt_z(s),
        }

    def blend_contour_point(self, span: float, i: int) -> np.ndarray:
        """The i-th contour point blended between the bounding cross sections."""
        weight, i_in, i_out = find_bounding_sections(self.positions, span)
        contour_in = self.sections[i_in][1]
        contour_out = self.sections[i_out][1]
        return weight * contour_out[i] + (1 - weight) * contour_in[i]

    def __call__(self, X: np.ndarray, inds: Tuple[int, ...]) -> np.ndarray:
        span = X[1]
        dist = self.distributions(span)

        point = np.append(self.blend_contour_point(span, inds[0]), 0.0)

        # Scale by the normalized chord, then twist and tilt
        point = dist["chord"] * point
        point = rotation_matrix(-dist["twist"], -dist["tilt_z"], 0) @ point

        # Place relative to the leading edge and scale by the span scale
        return np.array([point[0] + dist["le_x"],
                         span + point[2],
                         point[1] + dist["le_z"]]) * self.bscale


def loft_grid(transform: LoftTransform, b_low: float, b_up: float, b_ndivs) -> Grid:
    """Parametric grid for a loft, already transformed onto the surface."""
    grid = Grid([0.0, b_low, 0.0], [1.0, b_up, 0.0],
                [transform.contour_divisions, b_ndivs, 0], loop_dim=0)
    grid.apply_transform(transform)
    return grid


def generate_loft(bscale: float, b_low: float, b_up: float, b_ndivs,
                  chords, twists, le_x, le_z, sections, tilt_z=None,
                  spline: Optional[SplineOptions] = None) -> trimesh.Trimesh:
    """
    Generate a lofted triangle surface.

    Args:
        bscale: Span scale
        b_low: Scaled lower bound of the span (-1 with b_up=1 gives a
               symmetric wing; 0 gives a semi-span)
        b_up: Scaled upper bound of the span
        b_ndivs: Divisions along the span (count or multi-section descriptor)
        chords: Chord distribution [(y/bscale, c/bscale)]
        twists: Twist distribution [(y/bscale, deg)]
        le_x: Chordwise leading-edge position [(y/bscale, x/bscale)]
        le_z: Dihedral-wise leading-edge position [(y/bscale, z/bscale)]
        sections: Cross sections [(y/bscale, contour)], equal point counts
        tilt_z: Optional tilt of every cross section [(y/bscale, deg)]
        spline: Spline options for the distributions

    Returns:
        trimesh.Trimesh of the lofted surface with outward-facing normals
    """
    transform = LoftTransform(bscale, chords, twists, le_x, le_z, sections,
                              tilt_z=tilt_z, spline=spline)
    grid = loft_grid(transform, b_low, b_up, b_ndivs)
    surface = triangulate(grid, LOFT_SPLIT_DIM)

    # Sections land in the (x, z) plane with the span along +y, which mirrors
    # their 2D orientation: counterclockwise sections lofted toward +y face in
    orientation = signed_area(transform.sections[0][1]) * (b_up - b_low) * transform.bscale
    if orientation > 0:
        surface.invert()
    logger.info("Lofted surface: %d vertices, %d faces",
                len(surface.vertices), len(surface.faces))
    return surface


def generate_blade(rtip: float, rhub: float, r_ndivs, tables: BladeTables,
                   spline: Optional[SplineOptions] = None) -> trimesh.Trimesh:
    """
    Loft a blade from its tabulated geometry, from the hub radius to the tip.

    Args:
        rtip: Blade (tip) radius
        rhub: Hub radius
        r_ndivs: Divisions along the blade
        tables: Blade geometry normalized by rtip
    """
    return generate_loft(rtip, rhub / rtip, 1.0, r_ndivs,
                         tables.chords, tables.twists, tables.le_x, tables.le_z,
                         tables.sections, tilt_z=tables.tilt_z, spline=spline)
