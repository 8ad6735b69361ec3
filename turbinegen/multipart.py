"""
Multi-Part Meshes

A MultiPartMesh is a compound mesh made of independently named and
independently transformable sub-meshes: grids, triangle meshes, or other
multi-part meshes (blade -> rotor -> turbine -> farm).
"""
from collections import OrderedDict
from typing import Iterator, Tuple, Union

import numpy as np
import trimesh

from turbinegen.grid import Grid
from turbinegen.transforms import RigidTransform


class MultiPartMesh:
    """Ordered collection of uniquely named sub-meshes."""

    def __init__(self):
        self._parts = OrderedDict()

    def add_part(self, name: str, mesh) -> None:
        """
        Insert a sub-mesh under a unique name.

        Raises:
            ValueError: If a part with that name already exists
            TypeError: If mesh is not a Grid, Trimesh or MultiPartMesh
        """
        if name in self._parts:
            raise ValueError(f"Part {name!r} already exists in this mesh")
        if not isinstance(mesh, (Grid, trimesh.Trimesh, MultiPartMesh)):
            raise TypeError(f"Cannot add part of type {type(mesh).__name__}")
        self._parts[name] = mesh

    def get_part(self, name: str):
        return self._parts[name]

    def __getitem__(self, name: str):
        return self._parts[name]

    def __contains__(self, name: str) -> bool:
        return name in self._parts

    def __len__(self) -> int:
        return len(self._parts)

    def names(self):
        return list(self._parts.keys())

    def items(self):
        return self._parts.items()

    def leaves(self, separator: str = "_") -> Iterator[Tuple[str, Union[Grid, trimesh.Trimesh]]]:
        """
        Yield (path, mesh) for every non-compound part, depth first.

        Paths join part names with the separator, e.g. 'turbine1_rotor_blade2'.
        """
        for name, part in self._parts.items():
            if isinstance(part, MultiPartMesh):
                for sub_name, sub_part in part.leaves(separator):
                    yield name + separator + sub_name, sub_part
            else:
                yield name, part

    def nodes(self) -> np.ndarray:
        """All node coordinates of all leaf parts, stacked in leaf order."""
        arrays = [node_array(part) for _, part in self.leaves()]
        if not arrays:
            return np.zeros((0, 3))
        return np.vstack(arrays)

    def copy(self) -> "MultiPartMesh":
        new = MultiPartMesh()
        for name, part in self._parts.items():
            new.add_part(name, copy_mesh(part))
        return new

    def __repr__(self):
        return f"MultiPartMesh({self.names()})"


def node_array(mesh) -> np.ndarray:
    """Node coordinates of a leaf mesh."""
    if isinstance(mesh, Grid):
        return mesh.nodes
    if isinstance(mesh, trimesh.Trimesh):
        return np.asarray(mesh.vertices)
    if isinstance(mesh, MultiPartMesh):
        return mesh.nodes()
    raise TypeError(f"Unsupported mesh type {type(mesh).__name__}")


def copy_mesh(mesh):
    """Independent copy of a mesh; no node buffer is shared with the source."""
    if isinstance(mesh, Grid):
        return mesh.copy()
    if isinstance(mesh, trimesh.Trimesh):
        return mesh.copy()
    if isinstance(mesh, MultiPartMesh):
        return mesh.copy()
    raise TypeError(f"Unsupported mesh type {type(mesh).__name__}")


def apply_rigid_transform(target, rotation, translation=(0.0, 0.0, 0.0)):
    """
    Rotate then translate every node of a mesh, in place.

    Args:
        target: Grid, Trimesh or MultiPartMesh (transformed recursively)
        rotation: 3x3 rotation matrix
        translation: 3-vector applied after the rotation

    Returns:
        The target, for chaining
    """
    transform = RigidTransform(rotation, translation)
    return apply_transform(target, transform)


def apply_transform(target, transform: RigidTransform):
    """Apply a RigidTransform to a mesh in place."""
    if isinstance(target, Grid):
        if target.nodes.shape[1] != 3:
            raise ValueError("Rigid transforms need 3D node coordinates")
        target.nodes = transform.apply(target.nodes)
    elif isinstance(target, trimesh.Trimesh):
        target.apply_transform(transform.matrix())
    elif isinstance(target, MultiPartMesh):
        for _, part in target.items():
            apply_transform(part, transform)
    else:
        raise TypeError(f"Unsupported mesh type {type(target).__name__}")
    return target


def scale_mesh(target, factor: float):
    """Scale every node of a mesh about the origin, in place."""
    if isinstance(target, Grid):
        target.nodes = target.nodes * factor
    elif isinstance(target, trimesh.Trimesh):
        target.apply_scale(factor)
    elif isinstance(target, MultiPartMesh):
        for _, part in target.items():
            scale_mesh(part, factor)
    else:
        raise TypeError(f"Unsupported mesh type {type(target).__name__}")
    return target
