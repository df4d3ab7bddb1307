"""Regular grid mesh of a water surface tile and its staging into a byte buffer."""

from __future__ import annotations

from typing import Any

import numpy as np

MIN_TILE_SIZE = 16
MAX_TILE_SIZE = 1024

VERTEX_DTYPE = np.dtype([("pos", np.float32, (3,)), ("uv", np.float32, (2,))])
"""Layout of one vertex: position (x, y, z) followed by texture coordinates (u, v)."""

INDEX_DTYPE = np.dtype(np.uint32)

_INDICES_PER_TRIANGLE = 3
_TRIANGLES_PER_QUAD = 2


def align_size(size: int, alignment: int) -> int:
    """Round ``size`` up to a multiple of ``alignment``, a power of two."""
    if alignment <= 0 or alignment & (alignment - 1):
        raise ValueError("alignment must be a positive power of two")
    if size < 0:
        raise ValueError("size must not be negative")
    return (size + alignment - 1) & ~(alignment - 1)


def total_vertex_count(tile_size: int) -> int:
    """Number of vertices of a grid with ``tile_size`` quads per side."""
    return (tile_size + 1) * (tile_size + 1)


def total_index_count(vertex_count: int) -> int:
    """Index capacity reserved for a grid of ``vertex_count`` vertices."""
    return vertex_count * _INDICES_PER_TRIANGLE * _TRIANGLES_PER_QUAD


MAX_VERTEX_COUNT = total_vertex_count(MAX_TILE_SIZE)
MAX_INDEX_COUNT = total_index_count(MAX_VERTEX_COUNT)


def grid_vertices(tile_size: int, scale: float) -> np.ndarray:
    """Vertices of a flat grid centred on the origin in the xz plane.

    Rows run along z, from ``-tile_size // 2`` to ``tile_size // 2``; within a row
    x runs the same range. Positions are multiplied by ``scale`` and texture
    coordinates span [0, 1] over the tile.
    """
    if tile_size <= 0:
        raise ValueError("tile size must be positive")

    half = tile_size // 2
    steps = np.arange(-half, half + 1, dtype=np.float64)
    zs, xs = np.meshgrid(steps, steps, indexing="ij")

    vertices = np.zeros(zs.size, dtype=VERTEX_DTYPE)
    vertices["pos"][:, 0] = xs.ravel() * scale
    vertices["pos"][:, 2] = zs.ravel() * scale
    vertices["uv"][:, 0] = (xs.ravel() + half) / tile_size
    vertices["uv"][:, 1] = (zs.ravel() + half) / tile_size
    return vertices


def grid_indices(tile_size: int) -> np.ndarray:
    """Triangle list indices of a grid with ``tile_size`` quads per side.

    Each quad gives two triangles: (v, v+w, v+1) and (v+1, v+w, v+w+1), where
    ``w`` is the number of vertices in a row.
    """
    if tile_size <= 0:
        raise ValueError("tile size must be positive")

    row = tile_size + 1
    ys, xs = np.meshgrid(
        np.arange(tile_size, dtype=np.int64),
        np.arange(tile_size, dtype=np.int64),
        indexing="ij",
    )
    base = (ys * row + xs).ravel()
    quads = np.stack(
        (base, base + row, base + 1, base + 1, base + row, base + row + 1), axis=-1
    )
    return quads.ravel().astype(INDEX_DTYPE)


class Mesh:
    """Vertices and indices kept in host memory, staged on demand.

    Staging writes the vertices, then the indices, one after the other into a
    writable byte buffer. A mesh is staged again only after it has changed.
    """

    def __init__(self, vertices: Any = None, indices: Any = None) -> None:
        self._vertices = np.zeros(0, dtype=VERTEX_DTYPE)
        self._indices = np.zeros(0, dtype=INDEX_DTYPE)
        self._staged = False
        if vertices is not None:
            self.set_vertices(vertices)
        if indices is not None:
            self.set_indices(indices)

    def set_vertices(self, vertices: Any) -> None:
        self._vertices = np.ascontiguousarray(vertices, dtype=VERTEX_DTYPE)
        self._staged = False

    def set_indices(self, indices: Any) -> None:
        self._indices = np.ascontiguousarray(indices, dtype=INDEX_DTYPE).ravel()
        self._staged = False

    @property
    def vertices(self) -> np.ndarray:
        return self._vertices

    @property
    def indices(self) -> np.ndarray:
        return self._indices

    @property
    def vertex_count(self) -> int:
        return len(self._vertices)

    @property
    def index_count(self) -> int:
        return len(self._indices)

    @property
    def vertices_size(self) -> int:
        """Size of the vertices in bytes."""
        return VERTEX_DTYPE.itemsize * self.vertex_count

    @property
    def indices_size(self) -> int:
        """Size of the indices in bytes."""
        return INDEX_DTYPE.itemsize * self.index_count

    @property
    def is_staged(self) -> bool:
        """Whether the latest vertices and indices have been staged."""
        return self._staged

    @staticmethod
    def _byte_view(staging: Any) -> memoryview:
        view = memoryview(staging)
        if view.readonly:
            raise ValueError("staging buffer must be writable")
        return view.cast("B")

    def stage_vertices(self, staging: Any) -> None:
        """Copy the vertices to the start of ``staging``."""
        if self.vertex_count == 0:
            raise ValueError("mesh has no vertices")
        view = self._byte_view(staging)
        if len(view) < self.vertices_size:
            raise ValueError("staging buffer is too small for the vertices")
        view[: self.vertices_size] = self._vertices.tobytes()

    def stage_indices(self, staging: Any) -> None:
        """Copy the indices into ``staging`` right after the vertices."""
        if self.index_count == 0:
            raise ValueError("mesh has no indices")
        view = self._byte_view(staging)
        start = self.vertices_size
        end = start + self.indices_size
        if len(view) < end:
            raise ValueError("staging buffer is too small for the indices")
        view[start:end] = self._indices.tobytes()

    def stage(self, staging: Any) -> bool:
        """Stage vertices and indices if they changed; return whether anything was written."""
        if self._staged:
            return False
        self.stage_vertices(staging)
        self.stage_indices(staging)
        self._staged = True
        return True