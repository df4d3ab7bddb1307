"""Optical properties of water and labelled lookup tables.

Coefficients follow Premože and Ashikhmin, "Rendering Natural Waters" (2001).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterator

import numpy as np


@dataclass(frozen=True)
class LabeledValues:
    """An ordered table of values, each with a display label."""

    values: tuple[Any, ...]
    labels: tuple[str, ...]

    def __post_init__(self) -> None:
        if len(self.values) != len(self.labels):
            raise ValueError("every value needs exactly one label")

    def __len__(self) -> int:
        return len(self.values)

    def __getitem__(self, i: int) -> Any:
        return self.values[i]

    def __iter__(self) -> Iterator[Any]:
        return iter(self.values)

    def items(self) -> Iterator[tuple[Any, str]]:
        """Pairs of value and label, in table order."""
        return zip(self.values, self.labels)

    def index(self, value: Any) -> int:
        """Position of ``value`` in the table; raises ValueError if absent."""
        target = np.asarray(value)
        for position, candidate in enumerate(self.values):
            if np.array_equal(np.asarray(candidate), target):
                return position
        raise ValueError(f"{value!r} is not in the table")


def _vec(*components: float) -> np.ndarray:
    v = np.array(components, dtype=float)
    v.setflags(write=False)
    return v


WS_RESOLUTIONS = LabeledValues(
    (16, 32, 64, 128, 256, 512, 1024),
    ("16", "32", "64", "128", "256", "512", "1024"),
)

WAVELENGTHS_RGB_M = _vec(680e-9, 550e-9, 440e-9)
WAVELENGTHS_RGB_NM = _vec(680.0, 550.0, 440.0)

WAVELENGTHS_DATA_M = _vec(675e-9, 550e-9, 450e-9)
WAVELENGTHS_DATA_NM = _vec(675.0, 550.0, 450.0)

_JERLOV_LABELS = (
    "I: Clearest open ocean",
    "II: Clear open ocean",
    "III: Turbid open ocean",
    "1: Clearest coastal waters",
    "3: Clear coastal waters",
    "5: Semi-clear coastal waters",
    "7: Turbid coastal waters",
    "9: Most turbid coastal waters",
)

WATER_TYPES_COEFFS_APPROX = LabeledValues(
    (
        _vec(0.448, 0.063, 0.0202),
        _vec(0.494, 0.089, 0.0732),
        _vec(0.548, 0.120, 0.145),
        _vec(0.538, 0.120, 0.294),
        _vec(0.590, 0.190, 0.450),
        _vec(0.680, 0.300, 0.648),
        _vec(0.808, 0.460, 1.014),
        _vec(0.956, 0.630, 1.720),
    ),
    _JERLOV_LABELS,
)
"""Diffuse attenuation K_d (1/m) interpolated at 680, 550 and 440 nm."""

WATER_TYPES_COEFFS_ACCURATE = LabeledValues(
    (
        _vec(0.420, 0.063, 0.019),
        _vec(0.465, 0.089, 0.068),
        _vec(0.520, 0.120, 0.135),
        _vec(0.510, 0.120, 0.250),
        _vec(0.560, 0.190, 0.390),
        _vec(0.650, 0.300, 0.560),
        _vec(0.780, 0.460, 0.890),
        _vec(0.920, 0.630, 1.600),
    ),
    _JERLOV_LABELS,
)
"""Measured diffuse attenuation K_d (1/m) at 675, 550 and 450 nm."""

SCATTER_COEF_LAMBDA0 = LabeledValues(
    (0.037, 0.219, 1.824),
    ("I: Clear ocean", "1: Coastal ocean", "9: Turbid harbor"),
)
"""Scattering coefficient (1/m) at 514 nm for several water types."""

_PURE_WATER_SCATTERING = _vec(0.0007, 0.00173, 0.005)


def scattering_coefficient(b_lambda0: float) -> np.ndarray:
    """Scattering coefficient per RGB wavelength from its value at 514 nm."""
    return b_lambda0 * (
        (-0.00113 * WAVELENGTHS_RGB_NM + 1.62517) / (-0.00113 * 514.0 + 1.62517)
    )


def backscattering_coefficient(b: np.ndarray | float) -> np.ndarray:
    """Backscattering coefficient from the scattering coefficient ``b``."""
    return 0.01829 * np.asarray(b, dtype=float) + 0.00006


def pigment_backscattering_coefficient(concentration: float) -> np.ndarray:
    """Backscattering coefficient for open water with a pigment concentration.

    ``concentration`` is in mg/m^3 and must be positive.
    """
    if concentration <= 0.0:
        raise ValueError("pigment concentration must be positive")

    ratio = 0.002 + 0.02 * (0.5 - 0.25 * math.log10(concentration)) * (
        550.0 / WAVELENGTHS_RGB_NM
    )
    pigment_scattering = 0.3 * concentration**0.62
    return 0.5 * _PURE_WATER_SCATTERING + ratio * pigment_scattering