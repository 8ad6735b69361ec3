"""
Rotations and Rigid Transforms
"""
import math
from typing import Sequence

import numpy as np


def rotation_matrix(yaw: float, pitch: float, roll: float) -> np.ndarray:
    """
    Rotation matrix from yaw, pitch and roll angles given in degrees.

    Naming follows the aircraft convention: yaw rotates about z, pitch about y
    and roll about x. The result is Rz(yaw) @ Ry(pitch) @ Rx(roll).
    """
    a, b, g = math.radians(yaw), math.radians(pitch), math.radians(roll)
    ca, sa = math.cos(a), math.sin(a)
    cb, sb = math.cos(b), math.sin(b)
    cg, sg = math.cos(g), math.sin(g)

    rz = np.array([[ca, -sa, 0], [sa, ca, 0], [0, 0, 1]])
    ry = np.array([[cb, 0, sb], [0, 1, 0], [-sb, 0, cb]])
    rx = np.array([[1, 0, 0], [0, cg, -sg], [0, sg, cg]])

    return rz @ ry @ rx


class RigidTransform:
    """
    A rotation followed by a translation: p -> rotation @ p + translation.
    """

    def __init__(self, rotation=None, translation=None):
        self.rotation = np.eye(3) if rotation is None else np.asarray(rotation, dtype=float)
        self.translation = (np.zeros(3) if translation is None
                            else np.asarray(translation, dtype=float))
        if self.rotation.shape != (3, 3):
            raise ValueError(f"Rotation must be 3x3, got shape {self.rotation.shape}")
        if self.translation.shape != (3,):
            raise ValueError(f"Translation must be a 3-vector, got shape {self.translation.shape}")

    @classmethod
    def from_angles(cls, yaw: float = 0.0, pitch: float = 0.0, roll: float = 0.0,
                    translation: Sequence[float] = (0.0, 0.0, 0.0)) -> "RigidTransform":
        return cls(rotation_matrix(yaw, pitch, roll), translation)

    def apply(self, points: np.ndarray) -> np.ndarray:
        """Transform an (n, 3) array of points."""
        return np.asarray(points, dtype=float) @ self.rotation.T + self.translation

    def inverse(self) -> "RigidTransform":
        rot_t = self.rotation.T
        return RigidTransform(rot_t, -rot_t @ self.translation)

    def then(self, other: "RigidTransform") -> "RigidTransform":
        """The transform applying self first and other second."""
        return RigidTransform(other.rotation @ self.rotation,
                              other.rotation @ self.translation + other.translation)

    def matrix(self) -> np.ndarray:
        """4x4 homogeneous matrix, as used by trimesh."""
        m = np.eye(4)
        m[:3, :3] = self.rotation
        m[:3, 3] = self.translation
        return m

    def __repr__(self):
        return f"RigidTransform(rotation={self.rotation.tolist()}, translation={self.translation.tolist()})"
