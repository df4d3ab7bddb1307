import numpy as np
import pytest

from oceansurf.grid import (
    INDEX_DTYPE,
    VERTEX_DTYPE,
    Mesh,
    align_size,
    grid_indices,
    grid_vertices,
    total_index_count,
    total_vertex_count,
)


@pytest.mark.parametrize("size,alignment", [(1, 4), (5, 4), (8, 8), (20, 16), (100, 64)])
def test_align_size_invariants(size, alignment):
    result = align_size(size, alignment)
    assert result % alignment == 0
    assert size <= result < size + alignment


def test_align_size_keeps_aligned_value():
    assert align_size(64, 16) == 64


@pytest.mark.parametrize("alignment", [0, 3, 12, -4])
def test_align_size_rejects_non_power_of_two(alignment):
    with pytest.raises(ValueError):
        align_size(10, alignment)


def test_vertex_layout_matches_packed_struct():
    vertices = grid_vertices(1, 1.0)
    indices = grid_indices(1)
    assert vertices.dtype.itemsize == 20
    assert vertices.nbytes == 20 * total_vertex_count(1)
    assert indices.dtype.itemsize == 4
    assert indices.nbytes == 4 * len(indices)


@pytest.mark.parametrize("tile", [1, 2, 4, 16])
def test_vertex_count_matches_grid(tile):
    assert len(grid_vertices(tile, 1.0)) == total_vertex_count(tile)


def test_total_index_count_reserves_six_per_vertex():
    assert total_index_count(total_vertex_count(2)) == total_vertex_count(2) * 6


def test_grid_vertices_corners():
    vertices = grid_vertices(4, 2.5)
    assert np.allclose(vertices["pos"][0], [-2 * 2.5, 0.0, -2 * 2.5])
    assert np.allclose(vertices["pos"][-1], [2 * 2.5, 0.0, 2 * 2.5])
    assert np.allclose(vertices["uv"][0], [0.0, 0.0])
    assert np.allclose(vertices["uv"][-1], [1.0, 1.0])
    assert np.all(vertices["pos"][:, 1] == 0.0)


def test_grid_vertices_row_major_along_x():
    vertices = grid_vertices(2, 1.0)
    # Second vertex advances in x within the first row.
    assert vertices["pos"][1][0] > vertices["pos"][0][0]
    assert vertices["pos"][1][2] == vertices["pos"][0][2]


def test_grid_indices_single_quad():
    assert grid_indices(1).tolist() == [0, 2, 1, 1, 2, 3]


@pytest.mark.parametrize("tile", [1, 2, 8])
def test_grid_indices_invariants(tile):
    indices = grid_indices(tile)
    assert indices.dtype == INDEX_DTYPE
    assert len(indices) % 6 == 0
    assert len(indices) <= total_index_count(total_vertex_count(tile))
    assert int(indices.max()) == total_vertex_count(tile) - 1
    assert int(indices.min()) == 0


@pytest.mark.parametrize("func", [grid_indices, lambda n: grid_vertices(n, 1.0)])
def test_grid_rejects_non_positive_size(func):
    with pytest.raises(ValueError):
        func(0)


def _grid_mesh(tile=2):
    return Mesh(grid_vertices(tile, 1.0), grid_indices(tile))


def test_mesh_sizes():
    mesh = _grid_mesh(2)
    assert mesh.vertex_count == total_vertex_count(2)
    assert mesh.vertices_size == VERTEX_DTYPE.itemsize * mesh.vertex_count
    assert mesh.indices_size == INDEX_DTYPE.itemsize * mesh.index_count


def test_mesh_stage_writes_vertices_then_indices():
    mesh = _grid_mesh(2)
    staging = bytearray(mesh.vertices_size + mesh.indices_size + 8)
    assert mesh.stage(staging) is True
    assert bytes(staging[: mesh.vertices_size]) == mesh.vertices.tobytes()
    end = mesh.vertices_size + mesh.indices_size
    assert bytes(staging[mesh.vertices_size : end]) == mesh.indices.tobytes()
    assert bytes(staging[end:]) == bytes(8)


def test_mesh_stage_only_after_change():
    mesh = _grid_mesh(2)
    staging = bytearray(mesh.vertices_size + mesh.indices_size)
    assert mesh.stage(staging) is True
    assert mesh.is_staged
    assert mesh.stage(staging) is False
    mesh.set_indices(grid_indices(2))
    assert not mesh.is_staged
    assert mesh.stage(staging) is True


def test_mesh_stage_into_numpy_buffer():
    mesh = _grid_mesh(1)
    staging = np.zeros(mesh.vertices_size + mesh.indices_size, dtype=np.uint8)
    mesh.stage(staging)
    restored = np.frombuffer(staging[mesh.vertices_size :].tobytes(), dtype=INDEX_DTYPE)
    assert np.array_equal(restored, mesh.indices)


def test_mesh_stage_rejects_small_buffer():
    mesh = _grid_mesh(2)
    staging = bytearray(mesh.vertices_size + mesh.indices_size - 1)
    with pytest.raises(ValueError):
        mesh.stage(staging)
    assert not mesh.is_staged


def test_mesh_stage_rejects_empty_mesh():
    with pytest.raises(ValueError):
        Mesh().stage(bytearray(64))


def test_mesh_stage_rejects_readonly_buffer():
    mesh = _grid_mesh(1)
    with pytest.raises(ValueError):
        mesh.stage(bytes(mesh.vertices_size + mesh.indices_size))