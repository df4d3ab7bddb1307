import numpy as np
import pytest

from oceansurf.grid import INDEX_DTYPE, VERTEX_DTYPE, align_size, total_vertex_count
from oceansurf.optics import (
    SCATTER_COEF_LAMBDA0,
    WATER_TYPES_COEFFS_ACCURATE,
    backscattering_coefficient,
    pigment_backscattering_coefficient,
    scattering_coefficient,
)
from oceansurf.skymodel import SkyParams
from oceansurf.watersurface import (
    MAP_TEXEL_BYTES,
    WaterSurface,
    WaterSurfaceParams,
)


def _small_settings(ws, tile_size=16, choppiness=-1.0):
    return ws.apply_settings(
        tile_size=tile_size,
        tile_length=100.0,
        wind_dir=(1.0, 1.0),
        wind_speed=30.0,
        animation_period=200.0,
        phillips_const=3e-7,
        damping=0.1,
        choppiness=choppiness,
    )


def _same_settings(ws, choppiness):
    model = ws.model
    return ws.apply_settings(
        tile_size=model.tile_size,
        tile_length=model.tile_length,
        wind_dir=model.wind_dir,
        wind_speed=model.wind_speed,
        animation_period=model.animation_period,
        phillips_const=model.phillips_const,
        damping=model.damping,
        choppiness=choppiness,
    )


@pytest.fixture
def surface():
    ws = WaterSurface(rng=np.random.default_rng(7))
    _small_settings(ws)
    ws.apply_mesh_settings(16, 1.0, 1.0)
    ws.prepare()
    return ws


def test_maps_hold_model_data_after_prepare(surface):
    size = surface.model.tile_size
    np.testing.assert_array_equal(
        surface.displacement_map, surface.model.displacements.reshape(size, size, 4)
    )
    np.testing.assert_array_equal(
        surface.normal_map, surface.model.normals.reshape(size, size, 4)
    )


def test_staging_layout(surface):
    data = surface.staging_bytes()
    mesh = surface.mesh
    vsize = mesh.vertex_count * VERTEX_DTYPE.itemsize
    isize = mesh.index_count * INDEX_DTYPE.itemsize
    assert data[:vsize] == mesh.vertices.tobytes()
    assert data[vsize : vsize + isize] == mesh.indices.tobytes()

    offset = align_size(vsize + isize, MAP_TEXEL_BYTES)
    disp = surface.model.displacements.tobytes()
    norms = surface.model.normals.tobytes()
    assert data[offset : offset + len(disp)] == disp
    assert data[offset + len(disp) :] == norms


def test_height_amplitude_matches_model(surface):
    model = surface.model
    expected = max(abs(model.min_height), abs(model.max_height))
    assert surface.vertex_uniforms.ws_height_amp == pytest.approx(expected)
    assert np.max(np.abs(model.displacements[:, 1])) <= 1.0 + 1e-6


def test_update_advances_time(surface):
    surface.update(0.5)
    assert surface.time == pytest.approx(0.5 * surface.animation_speed)


def test_update_paused_keeps_state(surface):
    surface.play_animation = False
    before = surface.model.displacements.copy()
    surface.update(1.0)
    assert surface.time == 0.0
    np.testing.assert_array_equal(surface.model.displacements, before)


def test_prepare_render_fills_uniforms(surface):
    view = np.arange(16, dtype=float).reshape(4, 4)
    proj = np.diag([2.0, 3.0, 4.0, 1.0])
    sky = SkyParams()
    surface.prepare_render(view, proj, (1.0, 2.0, 3.0), sky)

    u = surface.vertex_uniforms
    np.testing.assert_array_equal(u.view, view)
    assert u.proj[1, 1] == -proj[1, 1]
    assert u.proj[0, 0] == proj[0, 0]
    assert proj[1, 1] == 3.0
    np.testing.assert_array_equal(u.model, np.identity(4))
    assert u.ws_choppy == surface.model.lambda_
    assert surface.params.sky is sky
    np.testing.assert_array_equal(surface.params.cam_pos, [1.0, 2.0, 3.0])


def test_prepare_render_clamps_height(surface):
    surface.params.height = 0.0
    surface.prepare_render(np.identity(4), np.identity(4), (0, 0, 0), SkyParams())
    assert surface.params.height == pytest.approx(abs(surface.model.min_height))


def test_prepare_render_without_clamp_keeps_height(surface):
    surface.clamp_height = False
    surface.params.height = 0.0
    surface.prepare_render(np.identity(4), np.identity(4), (0, 0, 0), SkyParams())
    assert surface.params.height == 0.0


def test_prepare_render_before_prepare_raises():
    ws = WaterSurface(rng=np.random.default_rng(1))
    with pytest.raises(RuntimeError):
        ws.prepare_render(np.identity(4), np.identity(4), (0, 0, 0), SkyParams())


def test_prepare_render_rejects_bad_shapes(surface):
    with pytest.raises(ValueError):
        surface.prepare_render(np.identity(3), np.identity(4), (0, 0, 0), SkyParams())


def test_unchanged_settings_only_set_choppiness(surface):
    assert _same_settings(surface, choppiness=2.5) is False
    assert surface.model.lambda_ == 2.5
    assert surface.frame_map_needs_update is False


def test_changed_settings_reprepare_and_flag_maps(surface):
    surface.play_animation = False
    changed = surface.apply_settings(
        tile_size=16,
        tile_length=100.0,
        wind_dir=surface.model.wind_dir,
        wind_speed=10.0,
        animation_period=200.0,
        phillips_const=3e-7,
        damping=0.1,
        choppiness=-1.0,
    )
    assert changed is True
    assert surface.model.wind_speed == 10.0
    assert surface.frame_map_needs_update is True

    surface.update(0.1)
    surface.prepare_render(np.identity(4), np.identity(4), (0, 0, 0), SkyParams())
    assert surface.frame_map_needs_update is False
    np.testing.assert_array_equal(
        surface.displacement_map, surface.model.displacements.reshape(16, 16, 4)
    )


def test_tile_size_change_switches_maps(surface):
    assert _small_settings(surface, tile_size=32) is True
    assert surface.model.tile_size == 32
    assert surface.displacement_map.shape == (32, 32, 4)

    surface.update(0.2)
    surface.prepare_render(np.identity(4), np.identity(4), (0, 0, 0), SkyParams())
    np.testing.assert_array_equal(
        surface.normal_map, surface.model.normals.reshape(32, 32, 4)
    )


def test_invalid_tile_size_raises(surface):
    with pytest.raises(ValueError):
        _small_settings(surface, tile_size=100)
    with pytest.raises(ValueError):
        surface.apply_mesh_settings(100, 1.0, 1.0)


def test_mesh_settings_regenerate(surface):
    assert surface.apply_mesh_settings(16, 1.0, 2.0) is False
    assert surface.vertex_uniforms.scale == 2.0

    assert surface.apply_mesh_settings(32, 1.0, 1.0) is True
    assert surface.tile_size == 32
    assert surface.mesh.vertex_count == total_vertex_count(32)
    assert surface.mesh.is_staged is False

    surface.prepare_render(np.identity(4), np.identity(4), (0, 0, 0), SkyParams())
    assert surface.mesh.is_staged is True
    data = surface.staging_bytes()
    assert data[: surface.mesh.vertices_size] == surface.mesh.vertices.tobytes()


def test_default_params():
    params = WaterSurfaceParams()
    np.testing.assert_allclose(params.absorp_coef, WATER_TYPES_COEFFS_ACCURATE[0])
    np.testing.assert_allclose(
        params.scatter_coef, scattering_coefficient(SCATTER_COEF_LAMBDA0[0])
    )
    np.testing.assert_allclose(
        params.backscatter_coef, backscattering_coefficient(params.scatter_coef)
    )
    assert params.height == 50.0
    assert params.specular_highlights == 32.0


def test_set_water_type():
    params = WaterSurfaceParams()
    params.set_water_type(3, 2)
    np.testing.assert_allclose(params.absorp_coef, WATER_TYPES_COEFFS_ACCURATE[3])
    np.testing.assert_allclose(
        params.scatter_coef, scattering_coefficient(SCATTER_COEF_LAMBDA0[2])
    )
    np.testing.assert_allclose(
        params.backscatter_coef, backscattering_coefficient(params.scatter_coef)
    )

    params.set_water_type(0, 0, pigment_concentration=1.5)
    np.testing.assert_allclose(
        params.backscatter_coef, pigment_backscattering_coefficient(1.5)
    )

    with pytest.raises(IndexError):
        params.set_water_type(len(WATER_TYPES_COEFFS_ACCURATE), 0)
    with pytest.raises(IndexError):
        params.set_water_type(0, -1)