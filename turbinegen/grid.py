"""
Parametric Grids

A Grid is an N-dimensional rectilinear index space whose nodes start out at
their parametric coordinates and are later overwritten in place with physical
coordinates by a space transformation (see `Grid.apply_transform`). Surface
grids are turned into triangle meshes by `triangulate`.
"""
import copy
import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
import trimesh

from turbinegen import contour

logger = logging.getLogger(__name__)

FIELD_TYPES = ("scalar", "vector")
ENTRY_TYPES = ("node",)

Index = Union[int, Sequence[int]]


class Grid:
    """
    Rectilinear grid between p_min and p_max.

    Args:
        p_min: Lower parametric bound of every dimension
        p_max: Upper parametric bound of every dimension
        ndivs: Divisions of every dimension, each a plain count or a
               multi-section descriptor. A dimension with 0 divisions holds a
               single node at p_min.
        loop_dim: Optional dimension that is periodic for topology purposes:
                  its last node is identified with its first.
    """

    def __init__(self, p_min: Sequence[float], p_max: Sequence[float],
                 ndivs: Sequence, loop_dim: Optional[int] = None):
        if not (len(p_min) == len(p_max) == len(ndivs)):
            raise ValueError(f"p_min, p_max and ndivs must have the same length, got "
                             f"{len(p_min)}, {len(p_max)} and {len(ndivs)}")
        if loop_dim is not None and not 0 <= loop_dim < len(ndivs):
            raise ValueError(f"loop_dim {loop_dim} out of range for a {len(ndivs)}-D grid")

        self.p_min = np.asarray(p_min, dtype=float)
        self.p_max = np.asarray(p_max, dtype=float)
        self.ndivs = [contour.resolve_divisions(n) for n in ndivs]
        self.loop_dim = loop_dim
        self.fields: Dict[str, dict] = {}

        if loop_dim is not None and self.get_division_counts()[loop_dim] < 1:
            raise ValueError("A looped dimension needs at least one division")

        axes = [contour.spacing_for(lo, hi, n)
                for lo, hi, n in zip(self.p_min, self.p_max, self.ndivs)]
        mesh = np.meshgrid(*axes, indexing="ij")
        self.nodes = np.stack([m.ravel() for m in mesh], axis=-1)

    @property
    def dims(self) -> int:
        return len(self.ndivs)

    @property
    def node_count(self) -> int:
        return self.nodes.shape[0]

    def get_division_counts(self) -> Tuple[int, ...]:
        """Number of divisions (cells) along every dimension."""
        return tuple(n if isinstance(n, int) else sum(sec.count for sec in n)
                     for n in self.ndivs)

    def get_node_counts(self) -> Tuple[int, ...]:
        """Number of nodes along every dimension."""
        return tuple(n + 1 for n in self.get_division_counts())

    def linear_index(self, index: Index) -> int:
        if np.ndim(index) == 0:
            lin = int(index)
            if not 0 <= lin < self.node_count:
                raise IndexError(f"Node {lin} out of range ({self.node_count} nodes)")
            return lin
        if len(index) != self.dims:
            raise IndexError(f"Expected a {self.dims}-D index, got {tuple(index)}")
        return int(np.ravel_multi_index(tuple(index), self.get_node_counts()))

    def multi_index(self, lin: int) -> Tuple[int, ...]:
        return tuple(int(i) for i in np.unravel_index(lin, self.get_node_counts()))

    def get_node(self, index: Index) -> np.ndarray:
        """Coordinates of a node given by its multi-index or linear index."""
        return self.nodes[self.linear_index(index)].copy()

    def neighbor(self, index: Sequence[int], dim: int, step: int = 1) -> Optional[Tuple[int, ...]]:
        """
        Multi-index of the node `step` positions away along `dim`.

        Along the looped dimension the index wraps (node `divisions` is the
        same topological node as node 0); along any other dimension None is
        returned when the neighbor falls outside the grid.
        """
        index = list(index)
        target = index[dim] + step
        if dim == self.loop_dim:
            index[dim] = target % self.get_division_counts()[dim]
        elif 0 <= target < self.get_node_counts()[dim]:
            index[dim] = target
        else:
            return None
        return tuple(index)

    def apply_transform(self, fun: Callable[[np.ndarray, Tuple[int, ...]], Sequence[float]]):
        """
        Overwrite every node with fun(coordinates, multi_index).

        Nodes are visited in C order of the node-count shape. The returned
        coordinates must have the same length as the grid dimension.
        """
        shape = self.get_node_counts()
        new_nodes = np.empty_like(self.nodes)
        for lin, inds in enumerate(np.ndindex(*shape)):
            point = np.asarray(fun(self.nodes[lin].copy(), inds), dtype=float)
            if point.shape != (self.dims,):
                raise ValueError(f"Space transform returned shape {point.shape} at node {inds}, "
                                 f"expected ({self.dims},)")
            new_nodes[lin] = point
        self.nodes = new_nodes
        logger.debug("Transformed %d grid nodes", self.node_count)
        return self

    def add_field(self, name: str, field_type: str, data, entry_type: str = "node"):
        """Attach per-node data to the grid under `name`."""
        if field_type not in FIELD_TYPES:
            raise ValueError(f"Unknown field type {field_type!r}, expected one of {FIELD_TYPES}")
        if entry_type not in ENTRY_TYPES:
            raise ValueError(f"Unsupported field entry type {entry_type!r}, expected one of {ENTRY_TYPES}")

        values = np.asarray(data, dtype=float)
        if values.shape[0] != self.node_count:
            raise ValueError(f"Field {name!r} has {values.shape[0]} entries, grid has "
                             f"{self.node_count} nodes")
        if field_type == "scalar" and values.ndim != 1:
            raise ValueError(f"Scalar field {name!r} must be one value per node")
        if field_type == "vector" and values.ndim != 2:
            raise ValueError(f"Vector field {name!r} must be one vector per node")

        self.fields[name] = {
            "field_name": name,
            "field_type": field_type,
            "entry_type": entry_type,
            "field_data": values,
        }

    def calculate_field(self, fun: Callable[[np.ndarray], object], name: str,
                        field_type: str, entry_type: str = "node"):
        """Evaluate fun at every node and attach the result as a field."""
        values = [fun(node) for node in self.nodes]
        self.add_field(name, field_type, values, entry_type)

    def get_field(self, name: str) -> np.ndarray:
        return self.fields[name]["field_data"]

    def copy(self) -> "Grid":
        return copy.deepcopy(self)

    def __repr__(self):
        return (f"Grid(dims={self.dims}, divisions={self.get_division_counts()}, "
                f"loop_dim={self.loop_dim})")


def surface_dims(grid: Grid) -> List[int]:
    """Dimensions of a grid that carry divisions."""
    return [d for d, n in enumerate(grid.get_division_counts()) if n > 0]


def triangulate(grid: Grid, split_dim: int = 1) -> trimesh.Trimesh:
    """
    Split every quadrilateral cell of a surface grid into two triangles.

    The grid must have exactly two dimensions with divisions (other dimensions
    hold a single node). For a quad with corners a=(i, j), b=(i+1, j),
    c=(i+1, j+1), d=(i, j+1) the triangles follow the quad winding a-b-c-d,
    split along a-c when `split_dim` is the second surface dimension and along
    b-d otherwise.

    Args:
        grid: Transformed grid with 3D nodes
        split_dim: Index (0 or 1) of the surface dimension to split along

    Returns:
        trimesh.Trimesh with one vertex per grid node and 2 * a * b faces
    """
    dims = surface_dims(grid)
    if len(dims) != 2:
        raise ValueError(f"Triangulation needs a grid with exactly two divided dimensions, "
                         f"got divisions {grid.get_division_counts()}")
    if split_dim not in (0, 1):
        raise ValueError(f"split_dim must be 0 or 1, got {split_dim}")
    if grid.nodes.shape[1] != 3:
        raise ValueError("Triangulation needs 3D node coordinates")

    shape = grid.get_node_counts()
    ids = np.arange(grid.node_count).reshape(shape)
    # Collapse the single-node dimensions
    ids = ids.reshape(shape[dims[0]], shape[dims[1]])

    a = ids[:-1, :-1].ravel()
    b = ids[1:, :-1].ravel()
    c = ids[1:, 1:].ravel()
    d = ids[:-1, 1:].ravel()

    if split_dim == 1:
        faces = np.concatenate([np.column_stack([a, b, c]), np.column_stack([a, c, d])])
    else:
        faces = np.concatenate([np.column_stack([a, b, d]), np.column_stack([b, c, d])])

    # Interleave so the two triangles of a cell sit next to each other
    n_cells = len(a)
    order = np.arange(2 * n_cells).reshape(2, n_cells).T.ravel()
    faces = faces[order]

    return trimesh.Trimesh(vertices=grid.nodes.copy(), faces=faces, process=False)
