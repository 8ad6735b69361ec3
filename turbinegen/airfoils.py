"""
Cross-Section Profiles

Closed 2D profiles used as loft cross sections: NACA 4-digit airfoils for
blades and circles for blade roots and towers. Every profile built with the
same n_points has the same point count (2 * n_points - 1), starts at the
trailing edge (x = 1), runs over the upper side to the leading edge (x = 0)
and returns along the lower side, so profiles can be blended point by point.
"""
from typing import Tuple

import numpy as np


def parse_naca4(code: str) -> Tuple[float, float, float]:
    """
    Parse a 4-digit NACA code into its components.

    Args:
        code: 4-digit NACA code as string (e.g., "2412")

    Returns:
        Tuple of (m, p, t) where:
            m = maximum camber as fraction of chord
            p = position of maximum camber as fraction of chord
            t = maximum thickness as fraction of chord
    """
    s = str(code).strip()
    if len(s) != 4 or not s.isdigit():
        raise ValueError(f"NACA code must be 4 digits, got: {code}")

    m = int(s[0]) / 100.0  # Maximum camber
    p = int(s[1]) / 10.0   # Position of maximum camber
    t = int(s[2:]) / 100.0 # Maximum thickness

    return m, p, t


def _chord_stations(n_points: int) -> Tuple[np.ndarray, np.ndarray]:
    if n_points < 3:
        raise ValueError(f"Profiles need at least 3 points per side, got {n_points}")
    # Cosine spacing for better resolution at leading/trailing edges
    beta = np.linspace(0, np.pi, n_points)
    return beta, 0.5 * (1.0 - np.cos(beta))


def naca4_profile(code: str, n_points: int = 50) -> np.ndarray:
    """
    Generate a NACA 4-digit airfoil with a closed trailing edge.

    Args:
        code: 4-digit NACA code
        n_points: Number of points per side (upper/lower)

    Returns:
        Array of shape (2 * n_points - 1, 2) with (x, y) coordinates; the
        first and last points are both the trailing edge (1, 0)
    """
    m, p, t = parse_naca4(code)
    _, x = _chord_stations(n_points)

    # Thickness distribution, last coefficient chosen for a closed trailing edge
    yt = 5.0 * t * (0.2969 * np.sqrt(x) - 0.1260 * x - 0.3516 * x**2
                    + 0.2843 * x**3 - 0.1036 * x**4)

    if m == 0.0 or p == 0.0:
        yc = np.zeros_like(x)
        dyc_dx = np.zeros_like(x)
    else:
        yc = np.where(
            x < p,
            (m / (p * p)) * (2.0 * p * x - x * x),
            (m / ((1.0 - p) ** 2)) * ((1.0 - 2.0 * p) + 2.0 * p * x - x * x)
        )
        dyc_dx = np.where(
            x < p,
            (2.0 * m / (p * p)) * (p - x),
            (2.0 * m / ((1.0 - p) ** 2)) * (p - x)
        )

    theta_c = np.arctan(dyc_dx)

    xu = x - yt * np.sin(theta_c)
    yu = yc + yt * np.cos(theta_c)
    xl = x + yt * np.sin(theta_c)
    yl = yc - yt * np.cos(theta_c)

    upper = np.column_stack([xu[::-1], yu[::-1]])
    lower = np.column_stack([xl[1:], yl[1:]])  # Skip the shared leading edge point

    profile = np.vstack([upper, lower])
    # Pin both ends exactly on the trailing edge
    profile[0] = profile[-1] = (1.0, yc[-1])
    return profile


def circle_profile(n_points: int = 50) -> np.ndarray:
    """
    Circle of unit diameter centered at (0.5, 0), laid out like an airfoil.

    The chordwise stations match `naca4_profile` so a circle blends smoothly
    into an airfoil section.
    """
    beta, _ = _chord_stations(n_points)
    x = 0.5 * (1.0 - np.cos(beta))
    y = 0.5 * np.sin(beta)

    upper = np.column_stack([x[::-1], y[::-1]])
    lower = np.column_stack([x[1:], -y[1:]])

    profile = np.vstack([upper, lower])
    profile[0] = profile[-1] = (1.0, 0.0)
    return profile


def centered(profile: np.ndarray) -> np.ndarray:
    """Shift a unit-chord profile so its chord midpoint sits at the origin."""
    shifted = np.array(profile, dtype=float)
    shifted[:, 0] -= 0.5
    return shifted
