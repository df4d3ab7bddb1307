"""Sky rendered as a full-screen pass driven by the Preetham sky model."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Sequence

import numpy as np

from oceansurf.sky import SkyPreetham, SkyProps

Vector = Sequence[float] | np.ndarray

DEFAULT_SUN_AZIMUTH = math.radians(90.0)
DEFAULT_SUN_INCLINATION = math.radians(60.0)

MIN_TURBIDITY = 2.0
MAX_TURBIDITY = 6.0

SHADER_PATHS = ("shaders/FullScreenQuad.vert", "shaders/SkyPreetham.frag")


def _copy_props(props: SkyProps) -> SkyProps:
    return replace(
        props,
        sun_dir=props.sun_dir.copy(),
        A=props.A.copy(),
        B=props.B.copy(),
        C=props.C.copy(),
        D=props.D.copy(),
        E=props.E.copy(),
        zenith_lum=props.zenith_lum.copy(),
        zero_theta_sun=props.zero_theta_sun.copy(),
    )


def sun_direction_from_angles(inclination: float, azimuth: float) -> np.ndarray:
    """Unit direction towards the sun; inclination is measured from the zenith."""
    direction = np.array(
        [
            math.sin(inclination) * math.cos(azimuth),
            math.cos(inclination),
            math.sin(inclination) * math.sin(azimuth),
        ]
    )
    return direction / float(np.linalg.norm(direction))


@dataclass
class SkyParams:
    """Sun and sky parameters shared by the sky and the water shaders."""

    sun_color: np.ndarray = field(default_factory=lambda: np.ones(3))
    sun_intensity: float = 1.0
    props: SkyProps = field(default_factory=SkyProps)


@dataclass
class SkyUniforms:
    """Per-frame data handed to the sky shader."""

    resolution: tuple[int, int]
    cam_view_rows: np.ndarray
    cam_pos: np.ndarray
    cam_fov: float
    params: SkyParams


class SkyModel:
    """Keeps the sky model and the parameters the sky pass renders with."""

    def __init__(self, sun_dir: Vector) -> None:
        self._sky = SkyPreetham(sun_dir)
        self.params = SkyParams()
        self._uniforms: SkyUniforms | None = None
        self._update_params()

    @property
    def sun_direction(self) -> np.ndarray:
        return self._sky.sun_direction

    @property
    def turbidity(self) -> float:
        return self._sky.turbidity

    @property
    def uniforms(self) -> SkyUniforms | None:
        """Data of the latest :meth:`prepare_render`, or None before the first."""
        return self._uniforms

    def _update_params(self) -> None:
        self.params.props = _copy_props(self._sky.props)

    def set_sun(self, direction: Vector, turbidity: float | None = None) -> None:
        """Move the sun, optionally change turbidity, and recompute the sky."""
        self._sky.set_sun_direction(direction)
        if turbidity is not None:
            self._sky.turbidity = turbidity
        self._sky.update()
        self._update_params()

    def prepare_render(
        self,
        resolution: Sequence[int],
        cam_pos: Vector,
        cam_view: np.ndarray,
        cam_fov: float,
    ) -> SkyUniforms:
        """Collect the frame data for the sky pass.

        ``cam_view`` is the camera rotation whose columns are right, up and front.
        """
        res = tuple(int(r) for r in resolution)
        if len(res) != 2:
            raise ValueError("resolution must have two components")
        view = np.asarray(cam_view, dtype=float)
        if view.shape != (3, 3):
            raise ValueError("camera view must be a 3x3 matrix")
        pos = np.asarray(cam_pos, dtype=float)
        if pos.shape != (3,):
            raise ValueError("camera position must have three components")

        self._uniforms = SkyUniforms(
            resolution=(res[0], res[1]),
            cam_view_rows=view.T.copy(),
            cam_pos=pos.copy(),
            cam_fov=float(cam_fov),
            params=self.params,
        )
        return self._uniforms