"""Preetham analytic daylight sky model."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

DEFAULT_TURBIDITY = 2.5

_NORMAL_UP = np.array([0.0, 1.0, 0.0])


def _zeros() -> np.ndarray:
    return np.zeros(3)


@dataclass
class SkyProps:
    """Properties of the sky model as consumed by the sky shader."""

    sun_dir: np.ndarray = field(default_factory=_zeros)
    turbidity: float = DEFAULT_TURBIDITY
    A: np.ndarray = field(default_factory=_zeros)
    B: np.ndarray = field(default_factory=_zeros)
    C: np.ndarray = field(default_factory=_zeros)
    D: np.ndarray = field(default_factory=_zeros)
    E: np.ndarray = field(default_factory=_zeros)
    zenith_lum: np.ndarray = field(default_factory=_zeros)
    zero_theta_sun: np.ndarray = field(default_factory=_zeros)


class SkyPreetham:
    """Computes Perez distribution coefficients and zenith luminance (Yxy)."""

    DEFAULT_TURBIDITY = DEFAULT_TURBIDITY

    def __init__(
        self,
        sun_dir: Sequence[float] | np.ndarray,
        turbidity: float = DEFAULT_TURBIDITY,
    ) -> None:
        self.props = SkyProps()
        self.set_sun_direction(sun_dir)
        self.turbidity = turbidity
        self.update()

    @property
    def sun_direction(self) -> np.ndarray:
        return self.props.sun_dir.copy()

    def set_sun_direction(self, sun_dir: Sequence[float] | np.ndarray) -> None:
        """Store the normalized direction towards the sun."""
        direction = np.asarray(sun_dir, dtype=float)
        length = float(np.linalg.norm(direction))
        if length == 0.0:
            raise ValueError("sun direction must be a non-zero vector")
        self.props.sun_dir = direction / length

    @property
    def turbidity(self) -> float:
        return self.props.turbidity

    @turbidity.setter
    def turbidity(self, value: float) -> None:
        self.props.turbidity = float(value)

    def update(self) -> None:
        """Recompute the properties after the parameters have changed."""
        self._compute_perez_distribution()
        cos_theta = max(float(np.dot(self.props.sun_dir, _NORMAL_UP)), 0.0)
        theta_sun = math.acos(min(cos_theta, 1.0))
        self._compute_zenith_luminance(theta_sun)
        self._compute_perez_luminance(theta_sun)

    def _compute_perez_distribution(self) -> None:
        t = self.props.turbidity
        p = self.props
        p.A = np.array([0.1787 * t - 1.4630, -0.0193 * t - 0.2592, -0.0167 * t - 0.2608])
        p.B = np.array([-0.3554 * t + 0.4275, -0.0665 * t + 0.0008, -0.0950 * t + 0.0092])
        p.C = np.array([-0.0227 * t + 5.3251, -0.0004 * t + 0.2125, -0.0079 * t + 0.2102])
        p.D = np.array([0.1206 * t - 2.5771, -0.0641 * t - 0.8989, -0.0441 * t - 1.6537])
        p.E = np.array([-0.0670 * t + 0.3703, -0.0033 * t + 0.0452, -0.0109 * t + 0.0529])

    def _compute_zenith_luminance(self, theta_sun: float) -> None:
        t = self.props.turbidity
        chi = (4.0 / 9.0 - t / 120.0) * (math.pi - 2.0 * theta_sun)
        big_y = (4.0453 * t - 4.9710) * math.tan(chi) - 0.2155 * t + 2.4192

        theta2 = theta_sun * theta_sun
        theta3 = theta2 * theta_sun
        t2 = t * t

        x = (
            (0.00165 * theta3 - 0.00375 * theta2 + 0.00209 * theta_sun) * t2
            + (-0.02903 * theta3 + 0.06377 * theta2 - 0.03202 * theta_sun + 0.00394) * t
            + (0.11693 * theta3 - 0.21196 * theta2 + 0.06052 * theta_sun + 0.25886)
        )
        y = (
            (0.00275 * theta3 - 0.00610 * theta2 + 0.00317 * theta_sun) * t2
            + (-0.04214 * theta3 + 0.08970 * theta2 - 0.04153 * theta_sun + 0.00516) * t
            + (0.15346 * theta3 - 0.26756 * theta2 + 0.06670 * theta_sun + 0.26688)
        )
        self.props.zenith_lum = np.array([big_y, x, y])

    def _compute_perez_luminance(self, gamma: float) -> None:
        p = self.props
        cos_gamma = math.cos(gamma)
        p.zero_theta_sun = (1.0 + p.A * np.exp(p.B / math.cos(0.0))) * (
            1.0 + p.C * np.exp(p.D * gamma) + p.E * cos_gamma * cos_gamma
        )