"""FFT-based ocean surface: displacements and normals of a square tile.

The surface is built as in Tessendorf, "Simulating Ocean Water": a random
height field is drawn in the Fourier domain from the Phillips spectrum and
animated with the deep-water dispersion relation.

A tile holds ``tile_size`` x ``tile_size`` points and as many waves; the size
must be a power of two.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from oceansurf.spectrum import (
    DEFAULT_ANIM_PERIOD,
    DEFAULT_PHILLIPS_CONST,
    DEFAULT_PHILLIPS_DAMPING,
    DEFAULT_TILE_LENGTH,
    DEFAULT_TILE_SIZE,
    DEFAULT_WIND_DIR,
    DEFAULT_WIND_SPEED,
    MIN_WIND_SPEED,
    SpectrumParams,
    quantized_dispersion,
    wave_height_ft,
    wave_vectors,
)

_WAVE_VECTOR_EPSILON = 0.00001
_FLOAT_TINY = float(np.finfo(np.float32).tiny)
_FLOAT_MAX = float(np.finfo(np.float32).max)


def _is_power_of_two(size: int) -> bool:
    return size > 0 and (size & (size - 1)) == 0


class WSTessendorf:
    """Generates per-point displacements and normals of a water surface tile.

    Call :meth:`prepare` after changing parameters, then :meth:`compute_waves`
    for each moment of time.

    Each displacement row is ``(dx, height, dz, 1)``; each normal row is
    ``(slope_x, slope_z, d(dx)/dx, d(dz)/dz)``.
    """

    def __init__(
        self,
        tile_size: int = DEFAULT_TILE_SIZE,
        tile_length: float = DEFAULT_TILE_LENGTH,
        rng: np.random.Generator | None = None,
    ) -> None:
        self._rng = rng if rng is not None else np.random.default_rng()

        self._tile_size = DEFAULT_TILE_SIZE
        self._tile_length = DEFAULT_TILE_LENGTH
        self.tile_size = tile_size
        self.tile_length = tile_length

        self._spectrum = SpectrumParams(
            wind_dir=np.array(DEFAULT_WIND_DIR),
            wind_speed=DEFAULT_WIND_SPEED,
            phillips_const=DEFAULT_PHILLIPS_CONST,
            damping=DEFAULT_PHILLIPS_DAMPING,
        )
        self._animation_period = DEFAULT_ANIM_PERIOD
        self._base_freq = 1.0
        self.set_animation_period(DEFAULT_ANIM_PERIOD)

        self.lambda_ = -1.0
        """Importance of the horizontal displacement (choppiness)."""

        self._min_height = -1.0
        self._max_height = 1.0

        self._displacements = np.zeros((0, 4), dtype=np.float32)
        self._normals = np.zeros((0, 4), dtype=np.float32)

        self._prepared_size: int | None = None
        self._wave_vecs = np.zeros((0, 2))
        self._wave_units = np.zeros((0, 2))
        self._height_amp = np.zeros(0, dtype=complex)
        self._height_amp_conj = np.zeros(0, dtype=complex)
        self._dispersion = np.zeros(0)
        self._signs = np.zeros((0, 0))

    # ------------------------------------------------------------------
    # Parameters

    @property
    def tile_size(self) -> int:
        return self._tile_size

    @tile_size.setter
    def tile_size(self, size: int) -> None:
        size = int(size)
        if not _is_power_of_two(size):
            raise ValueError("tile size must be a positive power of two")
        self._tile_size = size

    @property
    def tile_length(self) -> float:
        return self._tile_length

    @tile_length.setter
    def tile_length(self, length: float) -> None:
        if length <= 0.0:
            raise ValueError("tile length must be positive")
        self._tile_length = float(length)

    @property
    def wind_dir(self) -> np.ndarray:
        return self._spectrum.wind_dir.copy()

    def set_wind_direction(self, w: Sequence[float] | np.ndarray) -> None:
        """Set the direction the wind blows in; it is stored normalized."""
        direction = np.asarray(w, dtype=float)
        length = float(np.linalg.norm(direction))
        if length == 0.0:
            raise ValueError("wind direction must be a non-zero vector")
        self._spectrum.wind_dir = direction / length

    @property
    def wind_speed(self) -> float:
        return self._spectrum.wind_speed

    @wind_speed.setter
    def wind_speed(self, v: float) -> None:
        self._spectrum.wind_speed = max(MIN_WIND_SPEED, float(v))

    @property
    def animation_period(self) -> float:
        return self._animation_period

    @property
    def base_freq(self) -> float:
        return self._base_freq

    def set_animation_period(self, period: float) -> None:
        """Set the period after which the animation repeats itself."""
        if period <= 0.0:
            raise ValueError("animation period must be positive")
        self._animation_period = float(period)
        self._base_freq = 2.0 * math.pi / self._animation_period

    @property
    def phillips_const(self) -> float:
        return self._spectrum.phillips_const

    @phillips_const.setter
    def phillips_const(self, a: float) -> None:
        self._spectrum.phillips_const = float(a)

    @property
    def damping(self) -> float:
        return self._spectrum.damping

    @damping.setter
    def damping(self, damping: float) -> None:
        self._spectrum.damping = float(damping)

    # ------------------------------------------------------------------
    # Results

    @property
    def min_height(self) -> float:
        return self._min_height

    @property
    def max_height(self) -> float:
        return self._max_height

    @property
    def displacements(self) -> np.ndarray:
        return self._displacements

    @property
    def normals(self) -> np.ndarray:
        return self._normals

    @property
    def displacement_count(self) -> int:
        return len(self._displacements)

    @property
    def normal_count(self) -> int:
        return len(self._normals)

    # ------------------------------------------------------------------
    # Computation

    def prepare(self) -> None:
        """Recompute wave vectors and the base height field for the current parameters."""
        size = self._tile_size
        count = size * size

        self._wave_vecs, self._wave_units = wave_vectors(size, self._tile_length)

        gauss = self._rng.standard_normal(count) + 1j * self._rng.standard_normal(count)
        self._compute_base_wave_heights(gauss)

        self._displacements = np.zeros((count, 4), dtype=np.float32)
        self._normals = np.zeros((count, 4), dtype=np.float32)
        self._normals[:, 1] = 1.0

        rows, cols = np.indices((size, size))
        self._signs = np.where((rows + cols) % 2 == 0, 1.0, -1.0)
        self._prepared_size = size

    def _compute_base_wave_heights(self, gauss: np.ndarray) -> None:
        count = len(self._wave_vecs)
        k = np.linalg.norm(self._wave_vecs, axis=-1)
        mask = k > _WAVE_VECTOR_EPSILON

        self._height_amp = np.zeros(count, dtype=complex)
        self._height_amp_conj = np.zeros(count, dtype=complex)
        self._dispersion = np.zeros(count)

        units = self._wave_units[mask]
        ks = k[mask]
        self._height_amp[mask] = self._spectrum.base_wave_height(gauss[mask], units, ks)
        self._height_amp_conj[mask] = np.conj(
            self._spectrum.base_wave_height(gauss[mask], -units, ks)
        )
        self._dispersion[mask] = quantized_dispersion(ks, self._base_freq)

    def compute_waves(self, t: float) -> float:
        """Compute heights, displacements and normals at time ``t`` seconds.

        Heights are normalized into [-1, 1]; the returned amplitude restores them.
        """
        if self._prepared_size is None:
            raise RuntimeError("prepare() must be called before compute_waves()")

        size = self._prepared_size
        shape = (size, size)

        height = wave_height_ft(
            self._height_amp, self._height_amp_conj, self._dispersion, t
        )
        kx = self._wave_vecs[:, 0]
        kz = self._wave_vecs[:, 1]
        ux = self._wave_units[:, 0]
        uz = self._wave_units[:, 1]

        slope_x = 1j * kx * height
        slope_z = 1j * kz * height
        disp_x = -1j * ux * height
        disp_z = -1j * uz * height
        dx_disp_x = 1j * kx * disp_x
        dz_disp_z = 1j * kz * disp_z

        def spatial(field: np.ndarray) -> np.ndarray:
            # Unnormalized backward transform, e^{+i...} kernel.
            return np.fft.ifft2(field.reshape(shape), norm="forward").real

        signs = self._signs
        h = spatial(height) * signs

        max_height = max(float(h.max()), _FLOAT_TINY)
        min_height = min(float(h.min()), _FLOAT_MAX)

        displacements = np.empty((size * size, 4))
        displacements[:, 0] = (signs * self.lambda_ * spatial(disp_x)).ravel()
        displacements[:, 1] = h.ravel()
        displacements[:, 2] = (signs * self.lambda_ * spatial(disp_z)).ravel()
        displacements[:, 3] = 1.0

        normals = np.empty((size * size, 4))
        normals[:, 0] = (signs * spatial(slope_x)).ravel()
        normals[:, 1] = (signs * spatial(slope_z)).ravel()
        normals[:, 2] = (signs * spatial(dx_disp_x)).ravel()
        normals[:, 3] = (signs * spatial(dz_disp_z)).ravel()

        amplitude = self._normalize_heights(displacements, min_height, max_height)
        self._displacements = displacements.astype(np.float32)
        self._normals = normals.astype(np.float32)
        return amplitude

    def _normalize_heights(
        self, displacements: np.ndarray, min_height: float, max_height: float
    ) -> float:
        self._min_height = min_height
        self._max_height = max_height
        amplitude = max(abs(min_height), abs(max_height))
        displacements[:, 1] *= 1.0 / amplitude
        return amplitude