"""Ocean wave spectrum: Phillips spectrum, dispersion relations and wave vectors.

Based on the statistical wave model of Tessendorf, "Simulating Ocean Water".
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

G = 9.81
"""Gravitational acceleration in m/s^2."""

ONE_OVER_SQRT2 = 1.0 / math.sqrt(2.0)

DEFAULT_TILE_SIZE = 512
DEFAULT_TILE_LENGTH = 1000.0
DEFAULT_WIND_DIR = (1.0, 1.0)
DEFAULT_WIND_SPEED = 30.0
DEFAULT_ANIM_PERIOD = 200.0
DEFAULT_PHILLIPS_CONST = 3e-7
DEFAULT_PHILLIPS_DAMPING = 0.1

MIN_WIND_SPEED = 0.0001

_WAVE_VECTOR_EPSILON = 0.00001

ArrayLike = float | Sequence[float] | np.ndarray


def _unit(v: Sequence[float] | np.ndarray) -> np.ndarray:
    vec = np.asarray(v, dtype=float)
    length = float(np.linalg.norm(vec))
    if length == 0.0:
        raise ValueError("direction must be a non-zero vector")
    return vec / length


@dataclass
class SpectrumParams:
    """Wind and Phillips spectrum parameters.

    ``wind_dir`` is normalized and ``wind_speed`` is kept strictly positive.
    """

    wind_dir: np.ndarray = field(default_factory=lambda: np.array(DEFAULT_WIND_DIR))
    wind_speed: float = DEFAULT_WIND_SPEED
    phillips_const: float = DEFAULT_PHILLIPS_CONST
    damping: float = DEFAULT_PHILLIPS_DAMPING

    def __post_init__(self) -> None:
        self.wind_dir = _unit(self.wind_dir)
        self.wind_speed = max(MIN_WIND_SPEED, float(self.wind_speed))
        self.phillips_const = float(self.phillips_const)
        self.damping = float(self.damping)

    def phillips(self, unit_wave_vec: ArrayLike, k: ArrayLike) -> float | np.ndarray:
        """Phillips spectrum for wind-driven waves larger than capillary waves.

        ``unit_wave_vec`` has a trailing axis of length 2; ``k`` is the wave
        vector magnitude and must be non-zero.
        """
        unit = np.asarray(unit_wave_vec, dtype=float)
        k = np.asarray(k, dtype=float)
        k2 = k * k
        k4 = k2 * k2

        cos_fact = np.sum(unit * self.wind_dir, axis=-1)
        cos_fact = cos_fact * cos_fact

        big_l = self.wind_speed * self.wind_speed / G
        big_l2 = big_l * big_l

        result = (
            self.phillips_const
            * np.exp(-1.0 / (k2 * big_l2))
            / k4
            * cos_fact
            * np.exp(-k2 * self.damping * self.damping)
        )
        return float(result) if np.ndim(result) == 0 else result

    def base_wave_height(
        self, gauss_random: complex | np.ndarray, unit_wave_vec: ArrayLike, k: ArrayLike
    ) -> complex | np.ndarray:
        """Fourier amplitude of the base wave height field."""
        amplitude = ONE_OVER_SQRT2 * np.asarray(gauss_random) * np.sqrt(
            self.phillips(unit_wave_vec, k)
        )
        return complex(amplitude) if np.ndim(amplitude) == 0 else amplitude


def dispersion_deep(k: ArrayLike) -> float | np.ndarray:
    """Dispersion relation for deep water, where the bottom may be ignored."""
    result = np.sqrt(G * np.asarray(k, dtype=float))
    return float(result) if np.ndim(result) == 0 else result


def dispersion_transitional(k: ArrayLike, depth: float) -> float | np.ndarray:
    """Dispersion relation for water of ``depth`` below the mean level."""
    k = np.asarray(k, dtype=float)
    result = np.sqrt(G * k * np.tanh(k * depth))
    return float(result) if np.ndim(result) == 0 else result


def dispersion_small(k: ArrayLike, wavelength: float) -> float | np.ndarray:
    """Dispersion relation for very small waves of the given wavelength."""
    k = np.asarray(k, dtype=float)
    result = np.sqrt(G * k * (1.0 + k * k * wavelength * wavelength))
    return float(result) if np.ndim(result) == 0 else result


def quantized_dispersion(k: ArrayLike, base_freq: float) -> float | np.ndarray:
    """Deep-water dispersion rounded down to a multiple of ``base_freq``."""
    if base_freq <= 0.0:
        raise ValueError("base frequency must be positive")
    result = np.floor(np.asarray(dispersion_deep(k)) / base_freq) * base_freq
    return float(result) if np.ndim(result) == 0 else result


def wave_height_ft(
    height_amp: complex | np.ndarray,
    height_amp_conj: complex | np.ndarray,
    dispersion: ArrayLike,
    t: float,
) -> complex | np.ndarray:
    """Fourier amplitude of the wave height at time ``t``."""
    omega_t = np.asarray(dispersion, dtype=float) * t
    rotation = np.cos(omega_t) + 1j * np.sin(omega_t)
    result = np.asarray(height_amp) * rotation + np.asarray(height_amp_conj) * np.conj(
        rotation
    )
    return complex(result) if np.ndim(result) == 0 else result


def wave_vectors(tile_size: int, tile_length: float) -> tuple[np.ndarray, np.ndarray]:
    """Wave vectors of a square tile and their unit directions.

    Both arrays have shape ``(tile_size * tile_size, 2)`` in row-major order:
    the row index ``m`` gives the second component, the column ``n`` the first.
    Vectors shorter than a small epsilon get a zero unit direction.
    """
    if tile_size <= 0:
        raise ValueError("tile size must be positive")
    if tile_length <= 0.0:
        raise ValueError("tile length must be positive")

    steps = math.pi * (2.0 * np.arange(tile_size) - tile_size) / tile_length
    kz, kx = np.meshgrid(steps, steps, indexing="ij")
    vecs = np.stack((kx.ravel(), kz.ravel()), axis=-1)

    lengths = np.linalg.norm(vecs, axis=-1)
    units = np.zeros_like(vecs)
    nonzero = lengths > _WAVE_VECTOR_EPSILON
    units[nonzero] = vecs[nonzero] / lengths[nonzero, np.newaxis]
    return vecs, units