"""Water surface rendered as a displaced grid mesh.

The wave model produces per-point displacements and normals on the CPU. They
are written into a staging buffer after the grid's vertices and indices, and
from there copied into the displacement and normal maps of the current
resolution:

    | vertices | indices | (padding) | displacements | normals |
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from oceansurf.grid import Mesh, align_size, grid_indices, grid_vertices
from oceansurf.optics import (
    SCATTER_COEF_LAMBDA0,
    WATER_TYPES_COEFFS_ACCURATE,
    WS_RESOLUTIONS,
    backscattering_coefficient,
    pigment_backscattering_coefficient,
    scattering_coefficient,
)
from oceansurf.skymodel import SkyParams
from oceansurf.spectrum import DEFAULT_TILE_LENGTH, DEFAULT_TILE_SIZE
from oceansurf.tessendorf import WSTessendorf

Vector = Sequence[float] | np.ndarray

MAP_TEXEL_BYTES = 16
"""Bytes of one texel of a displacement or normal map: four 32-bit floats."""

SHADER_PATHS = ("shaders/WaterSurfaceMesh.vert", "shaders/WaterSurfaceMesh.frag")

DEFAULT_HEIGHT = 50.0
DEFAULT_TERRAIN_COLOR = (0.964, 1.0, 0.824)
DEFAULT_ANIM_SPEED = 3.0

_TILE_LENGTH_EPS = 0.001
_WIND_EPS = 0.001
_PERIOD_EPS = 0.001
_PHILLIPS_EPS = 1e-8
_DAMPING_EPS = 0.001
_VERTEX_DISTANCE_EPS = 1e-3


def _default_scatter() -> np.ndarray:
    return scattering_coefficient(SCATTER_COEF_LAMBDA0[0])


@dataclass
class WaterSurfaceParams:
    """Lighting and water properties handed to the water fragment shader."""

    cam_pos: np.ndarray = field(default_factory=lambda: np.zeros(3))
    height: float = DEFAULT_HEIGHT
    absorp_coef: np.ndarray = field(
        default_factory=lambda: np.array(WATER_TYPES_COEFFS_ACCURATE[0])
    )
    scatter_coef: np.ndarray = field(default_factory=_default_scatter)
    backscatter_coef: np.ndarray = field(
        default_factory=lambda: backscattering_coefficient(_default_scatter())
    )
    terrain_color: np.ndarray = field(
        default_factory=lambda: np.array(DEFAULT_TERRAIN_COLOR)
    )
    sky_intensity: float = 1.0
    specular_intensity: float = 1.0
    specular_highlights: float = 32.0
    sky: SkyParams = field(default_factory=SkyParams)

    def set_water_type(
        self,
        absorption: int,
        scattering: int,
        pigment_concentration: float | None = None,
    ) -> None:
        """Pick the absorption and scattering water types by table position.

        With a pigment concentration the backscattering follows the pigment
        model; otherwise it is derived from the scattering coefficient.
        """
        if not 0 <= absorption < len(WATER_TYPES_COEFFS_ACCURATE):
            raise IndexError("absorption type out of range")
        if not 0 <= scattering < len(SCATTER_COEF_LAMBDA0):
            raise IndexError("scattering type out of range")

        self.absorp_coef = np.array(WATER_TYPES_COEFFS_ACCURATE[absorption])
        self.scatter_coef = scattering_coefficient(SCATTER_COEF_LAMBDA0[scattering])
        if pigment_concentration is None:
            self.backscatter_coef = backscattering_coefficient(self.scatter_coef)
        else:
            self.backscatter_coef = pigment_backscattering_coefficient(
                pigment_concentration
            )


@dataclass
class VertexUniforms:
    """Per-frame data handed to the water vertex shader."""

    model: np.ndarray = field(default_factory=lambda: np.identity(4))
    view: np.ndarray = field(default_factory=lambda: np.identity(4))
    proj: np.ndarray = field(default_factory=lambda: np.identity(4))
    ws_height_amp: float = 0.0
    ws_choppy: float = 0.0
    scale: float = 1.0


@dataclass
class _FrameMaps:
    size: int
    displacement: np.ndarray
    normal: np.ndarray

    @classmethod
    def create(cls, size: int) -> "_FrameMaps":
        return cls(
            size=size,
            displacement=np.zeros((size, size, 4), dtype=np.float32),
            normal=np.zeros((size, size, 4), dtype=np.float32),
        )


class WaterSurface:
    """A water surface tile: wave model, grid mesh and the maps it renders with.

    Call :meth:`prepare` once before :meth:`update` and :meth:`prepare_render`.
    """

    def __init__(self, rng: np.random.Generator | None = None) -> None:
        self._model = WSTessendorf(DEFAULT_TILE_SIZE, DEFAULT_TILE_LENGTH, rng)
        self._mesh = Mesh()
        self._staging = bytearray()

        self._tile_size = DEFAULT_TILE_SIZE
        self._vertex_distance = DEFAULT_TILE_LENGTH / float(DEFAULT_TILE_SIZE)

        self.play_animation = True
        self.animation_speed = DEFAULT_ANIM_SPEED
        self.clamp_height = True
        self._time = 0.0

        self._frame_maps: dict[int, _FrameMaps] = {}
        self._current_maps: _FrameMaps | None = None
        self._frame_map_needs_update = False

        self.vertex_uniforms = VertexUniforms()
        self.params = WaterSurfaceParams()

    # ------------------------------------------------------------------
    # State

    @property
    def model(self) -> WSTessendorf:
        return self._model

    @property
    def mesh(self) -> Mesh:
        return self._mesh

    @property
    def time(self) -> float:
        return self._time

    @property
    def tile_size(self) -> int:
        """Number of quads per side of the rendered grid."""
        return self._tile_size

    @property
    def vertex_distance(self) -> float:
        return self._vertex_distance

    @property
    def frame_map_needs_update(self) -> bool:
        return self._frame_map_needs_update

    @property
    def displacement_map(self) -> np.ndarray:
        return self._require_maps().displacement

    @property
    def normal_map(self) -> np.ndarray:
        return self._require_maps().normal

    def _require_maps(self) -> _FrameMaps:
        if self._current_maps is None:
            raise RuntimeError("prepare() must be called first")
        return self._current_maps

    # ------------------------------------------------------------------
    # Preparation

    def prepare(self) -> None:
        """Create the maps, compute the first wave frame and build the mesh."""
        self._frame_maps = {size: _FrameMaps.create(size) for size in WS_RESOLUTIONS}
        self._current_maps = self._frame_maps[self._model.tile_size]

        self._model.prepare()
        self.vertex_uniforms.ws_height_amp = self._model.compute_waves(self._time)
        self._copy_model_to_staging()
        self._update_frame_maps(self._current_maps)

        self._generate_mesh()
        self._update_mesh_buffers()

    def _generate_mesh(self) -> None:
        self._mesh.set_vertices(grid_vertices(self._tile_size, self._vertex_distance))
        self._mesh.set_indices(grid_indices(self._tile_size))

    # ------------------------------------------------------------------
    # Staging buffer

    def _reserve(self, size: int) -> None:
        if len(self._staging) < size:
            grown = bytearray(size)
            grown[: len(self._staging)] = self._staging
            self._staging = grown

    def _maps_offset(self) -> int:
        return align_size(
            self._mesh.vertices_size + self._mesh.indices_size, MAP_TEXEL_BYTES
        )

    def _update_mesh_buffers(self) -> bool:
        self._reserve(self._mesh.vertices_size + self._mesh.indices_size)
        return self._mesh.stage(self._staging)

    def _copy_model_to_staging(self) -> None:
        offset = self._maps_offset()
        displacements = self._model.displacements.astype(np.float32, copy=False).tobytes()
        normals = self._model.normals.astype(np.float32, copy=False).tobytes()

        normals_start = offset + len(displacements)
        end = normals_start + len(normals)
        self._reserve(end)
        self._staging[offset:normals_start] = displacements
        self._staging[normals_start:end] = normals

    def _update_frame_maps(self, maps: _FrameMaps) -> None:
        offset = self._maps_offset()
        count = maps.size * maps.size * 4
        map_bytes = maps.size * maps.size * MAP_TEXEL_BYTES
        self._reserve(offset + 2 * map_bytes)

        maps.displacement[...] = np.frombuffer(
            self._staging, dtype=np.float32, count=count, offset=offset
        ).reshape(maps.size, maps.size, 4)
        maps.normal[...] = np.frombuffer(
            self._staging, dtype=np.float32, count=count, offset=offset + map_bytes
        ).reshape(maps.size, maps.size, 4)

    def staging_bytes(self) -> bytes:
        """Used part of the staging buffer: mesh, padding, displacements, normals."""
        used = (
            self._maps_offset()
            + MAP_TEXEL_BYTES * self._model.displacement_count
            + MAP_TEXEL_BYTES * self._model.normal_count
        )
        self._reserve(used)
        return bytes(self._staging[:used])

    # ------------------------------------------------------------------
    # Frame

    def update(self, dt: float) -> None:
        """Advance the animation by ``dt`` seconds and recompute the waves."""
        if self.play_animation or self._frame_map_needs_update:
            self._time += dt * self.animation_speed
            self.vertex_uniforms.ws_height_amp = self._model.compute_waves(self._time)
            self._copy_model_to_staging()

    def prepare_render(
        self,
        view: np.ndarray,
        proj: np.ndarray,
        cam_pos: Vector,
        sky_params: SkyParams,
    ) -> None:
        """Fill the uniforms for this frame and refresh mesh and maps as needed."""
        maps = self._require_maps()

        view = np.asarray(view, dtype=float)
        proj = np.array(proj, dtype=float)
        if view.shape != (4, 4) or proj.shape != (4, 4):
            raise ValueError("view and projection must be 4x4 matrices")
        pos = np.asarray(cam_pos, dtype=float)
        if pos.shape != (3,):
            raise ValueError("camera position must have three components")

        self.vertex_uniforms.model = np.identity(4)
        self.vertex_uniforms.view = view.copy()
        # The target clip space has Y pointing down.
        proj[1, 1] *= -1.0
        self.vertex_uniforms.proj = proj
        self.vertex_uniforms.ws_choppy = self._model.lambda_

        self.params.cam_pos = pos.copy()
        if self.clamp_height:
            self.params.height = max(self.params.height, abs(self._model.min_height))
        self.params.sky = sky_params

        if self._update_mesh_buffers():
            # The mesh moved the map region; put the wave data back behind it.
            self._copy_model_to_staging()

        if self.play_animation or self._frame_map_needs_update:
            self._update_frame_maps(maps)
            self._frame_map_needs_update = False

    # ------------------------------------------------------------------
    # Settings

    def apply_settings(
        self,
        tile_size: int,
        tile_length: float,
        wind_dir: Vector,
        wind_speed: float,
        animation_period: float,
        phillips_const: float,
        damping: float,
        choppiness: float,
    ) -> bool:
        """Apply wave model settings; return whether the model was prepared anew."""
        WS_RESOLUTIONS.index(tile_size)
        model = self._model
        wind = np.asarray(wind_dir, dtype=float)

        tile_size_changed = tile_size != model.tile_size
        needs_prepare = (
            tile_size_changed
            or abs(tile_length - model.tile_length) > _TILE_LENGTH_EPS
            or bool(np.any(np.abs(wind - model.wind_dir) > _WIND_EPS))
            or abs(wind_speed - model.wind_speed) > _WIND_EPS
            or abs(animation_period - model.animation_period) > _PERIOD_EPS
            or abs(phillips_const - model.phillips_const) > _PHILLIPS_EPS
            or abs(damping - model.damping) > _DAMPING_EPS
        )

        if tile_size_changed:
            model.tile_size = tile_size
            if self._frame_maps:
                self._current_maps = self._frame_maps[model.tile_size]

        if needs_prepare:
            model.tile_size = tile_size
            model.tile_length = tile_length
            model.set_wind_direction(wind)
            model.wind_speed = wind_speed
            model.set_animation_period(animation_period)
            model.phillips_const = phillips_const
            model.damping = damping

            model.prepare()
            self._frame_map_needs_update = True

        model.lambda_ = float(choppiness)
        return needs_prepare

    def apply_mesh_settings(
        self, tile_size: int, vertex_distance: float, texture_scale: float
    ) -> bool:
        """Apply grid settings; return whether the grid was regenerated."""
        WS_RESOLUTIONS.index(tile_size)
        if vertex_distance <= 0.0:
            raise ValueError("vertex distance must be positive")

        needs_regeneration = (
            tile_size != self._tile_size
            or abs(vertex_distance - self._vertex_distance) > _VERTEX_DISTANCE_EPS
        )
        if needs_regeneration:
            self._tile_size = int(tile_size)
            self._vertex_distance = float(vertex_distance)
            self._generate_mesh()

        self.vertex_uniforms.scale = float(texture_scale)
        return needs_regeneration