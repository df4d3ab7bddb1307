"""First-person camera with perspective projection.

Angles are in radians unless a name ends in ``deg``.
"""

from __future__ import annotations

import math
from enum import IntEnum
from typing import Sequence

import numpy as np

Vector = Sequence[float] | np.ndarray


def _normalize(v: np.ndarray) -> np.ndarray:
    length = float(np.linalg.norm(v))
    if length == 0.0:
        raise ValueError("cannot normalize a zero-length vector")
    return v / length


def look_at(eye: Vector, center: Vector, up: Vector) -> np.ndarray:
    """Right-handed view matrix looking from ``eye`` towards ``center``."""
    eye = np.asarray(eye, dtype=float)
    center = np.asarray(center, dtype=float)
    up = np.asarray(up, dtype=float)

    f = _normalize(center - eye)
    s = _normalize(np.cross(f, up))
    u = np.cross(s, f)

    return np.array(
        [
            [s[0], s[1], s[2], -float(np.dot(s, eye))],
            [u[0], u[1], u[2], -float(np.dot(u, eye))],
            [-f[0], -f[1], -f[2], float(np.dot(f, eye))],
            [0.0, 0.0, 0.0, 1.0],
        ]
    )


def perspective(fov: float, aspect: float, near: float, far: float) -> np.ndarray:
    """Right-handed perspective projection with clip depth in [-1, 1]."""
    tan_half = math.tan(fov / 2.0)
    result = np.zeros((4, 4))
    result[0, 0] = 1.0 / (aspect * tan_half)
    result[1, 1] = 1.0 / tan_half
    result[2, 2] = -(far + near) / (far - near)
    result[2, 3] = -(2.0 * far * near) / (far - near)
    result[3, 2] = -1.0
    return result


def orthographic(
    left: float, right: float, bottom: float, top: float, near: float, far: float
) -> np.ndarray:
    """Orthographic projection with a downward Y axis and depth in [0, 1]."""
    return np.array(
        [
            [2.0 / (right - left), 0.0, 0.0, -(right + left) / (right - left)],
            [0.0, 2.0 / (bottom - top), 0.0, -(bottom + top) / (bottom - top)],
            [0.0, 0.0, 1.0 / (near - far), near / (near - far)],
            [0.0, 0.0, 0.0, 1.0],
        ]
    )


class Key(IntEnum):
    """Keyboard keys that control the camera."""

    FORWARD = 87  # W
    LEFT = 65  # A
    BACKWARD = 83  # S
    RIGHT = 68  # D
    SPEEDUP = 340  # left shift
    RESET = 256  # escape


class Camera:
    """FPS camera; uses a perspective projection."""

    WORLD_UP = np.array([0.0, 1.0, 0.0])

    DEFAULT_PITCH = 0.0
    DEFAULT_YAW = 0.0
    DEFAULT_FOV = math.radians(60.0)
    DEFAULT_NEAR = 0.1
    DEFAULT_FAR = 1000.0

    MIN_PITCH = math.radians(-89.0)
    MAX_PITCH = math.radians(89.0)
    MAX_YAW = math.radians(360.0)

    MOVE_SPEED = 25.0
    SPEEDUP_MULTIPLIER = 3.0
    MOUSE_SENSITIVITY = 0.1

    def __init__(
        self,
        aspect_ratio: float,
        position: Vector = (0.0, 0.0, 0.0),
        pitch: float = DEFAULT_PITCH,
        yaw: float = DEFAULT_YAW,
    ) -> None:
        self._position = np.asarray(position, dtype=float).copy()
        self._front = np.zeros(3)
        self._up = np.zeros(3)
        self._right = np.zeros(3)
        self._pitch = float(pitch)
        self._yaw = float(yaw)

        self._aspect_ratio = float(aspect_ratio)
        self._fov = self.DEFAULT_FOV
        self._near = self.DEFAULT_NEAR
        self._far = self.DEFAULT_FAR

        self._view = np.identity(4)
        self._proj = np.identity(4)

        self._last_x = 0
        self._last_y = 0
        self._first_cursor = True
        self._active: set[Key] = set()
        self._buttons: set[int] = set()

        self.update_vectors()
        self._update_view()
        self._update_proj()

    # ------------------------------------------------------------------
    # Derived state

    def update_vectors(self) -> None:
        """Recompute front, right and up from the current yaw and pitch."""
        cos_pitch = math.cos(self._pitch)
        self._front = _normalize(
            np.array(
                [
                    math.cos(self._yaw) * cos_pitch,
                    math.sin(self._pitch),
                    math.sin(self._yaw) * cos_pitch,
                ]
            )
        )
        self._right = _normalize(np.cross(self._front, self.WORLD_UP))
        self._up = _normalize(np.cross(self._right, self._front))

    def _update_view(self) -> None:
        self._view = look_at(self._position, self._position + self._front, self._up)

    def _update_proj(self) -> None:
        self._proj = perspective(self._fov, self._aspect_ratio, self._near, self._far)

    def update(self, dt: float) -> None:
        """Move the camera according to the held keys over ``dt`` seconds."""
        velocity = self.MOVE_SPEED * dt
        if Key.SPEEDUP in self._active:
            velocity += velocity * self.SPEEDUP_MULTIPLIER

        moves = {
            Key.FORWARD: self._front,
            Key.BACKWARD: -self._front,
            Key.RIGHT: self._right,
            Key.LEFT: -self._right,
        }
        for key, direction in moves.items():
            if key in self._active:
                self._position = self._position + direction * velocity

        self._update_view()

    def view_rotation(self) -> np.ndarray:
        """View rotation without translation: columns are right, up, front."""
        return np.column_stack((self._right, self._up, self._front))

    # ------------------------------------------------------------------
    # Vectors and angles

    @property
    def position(self) -> np.ndarray:
        return self._position.copy()

    @position.setter
    def position(self, value: Vector) -> None:
        self._position = np.asarray(value, dtype=float).copy()

    @property
    def front(self) -> np.ndarray:
        return self._front.copy()

    @front.setter
    def front(self, value: Vector) -> None:
        self._front = np.asarray(value, dtype=float).copy()

    @property
    def up(self) -> np.ndarray:
        return self._up.copy()

    @property
    def right(self) -> np.ndarray:
        return self._right.copy()

    @property
    def pitch(self) -> float:
        return self._pitch

    @pitch.setter
    def pitch(self, rad: float) -> None:
        # Keeps the camera from flipping over the vertical axis.
        self._pitch = min(max(float(rad), self.MIN_PITCH), self.MAX_PITCH)

    @property
    def yaw(self) -> float:
        return self._yaw

    @yaw.setter
    def yaw(self, rad: float) -> None:
        self._yaw = float(rad) % self.MAX_YAW

    @property
    def pitch_deg(self) -> float:
        return math.degrees(self._pitch)

    @property
    def yaw_deg(self) -> float:
        return math.degrees(self._yaw)

    def set_pitch_deg(self, deg: float) -> None:
        self.pitch = math.radians(deg)

    def set_yaw_deg(self, deg: float) -> None:
        self.yaw = math.radians(deg)

    # ------------------------------------------------------------------
    # Projection; every setter here rebuilds the projection matrix

    @property
    def aspect_ratio(self) -> float:
        return self._aspect_ratio

    @aspect_ratio.setter
    def aspect_ratio(self, aspect: float) -> None:
        self._aspect_ratio = float(aspect)
        self._update_proj()

    @property
    def fov(self) -> float:
        return self._fov

    @fov.setter
    def fov(self, rad: float) -> None:
        self._fov = float(rad)
        self._update_proj()

    @property
    def fov_deg(self) -> float:
        return math.degrees(self._fov)

    def set_fov_deg(self, deg: float) -> None:
        self.fov = math.radians(deg)

    @property
    def near(self) -> float:
        return self._near

    @near.setter
    def near(self, dist: float) -> None:
        self._near = float(dist)
        self._update_proj()

    @property
    def far(self) -> float:
        return self._far

    @far.setter
    def far(self, dist: float) -> None:
        self._far = float(dist)
        self._update_proj()

    def set_perspective(
        self, fov: float, near: float, far: float, aspect_ratio: float | None = None
    ) -> None:
        """Set all projection parameters at once; keeps the aspect if omitted."""
        if aspect_ratio is not None:
            self._aspect_ratio = float(aspect_ratio)
        self._fov = float(fov)
        self._near = float(near)
        self._far = float(far)
        self._update_proj()

    @property
    def view_matrix(self) -> np.ndarray:
        return self._view.copy()

    @property
    def proj_matrix(self) -> np.ndarray:
        return self._proj.copy()

    # ------------------------------------------------------------------
    # Input handlers

    @property
    def pressed_buttons(self) -> frozenset[int]:
        """Mouse buttons currently held down."""
        return frozenset(self._buttons)

    def on_mouse_move(self, x: float, y: float) -> None:
        """Turn the camera by the cursor offset since the previous event."""
        if self._first_cursor:
            # Avoids a sudden jump the first time the cursor is seen.
            self._last_x = int(x)
            self._last_y = int(y)
            self._first_cursor = False

        dx = (x - self._last_x) * self.MOUSE_SENSITIVITY
        dy = (self._last_y - y) * self.MOUSE_SENSITIVITY

        self._last_x = int(x)
        self._last_y = int(y)

        self.pitch = self._pitch + math.radians(dy)
        self.yaw = self._yaw + math.radians(dx)

        self.update_vectors()
        self._update_view()

    def on_mouse_button(self, button: int, action: int, mods: int) -> None:
        """Record a mouse button event; buttons do not steer the camera."""
        if action:
            self._buttons.add(int(button))
        else:
            self._buttons.discard(int(button))

    def on_key_pressed(self, key: int, action: int) -> None:
        """Handle a key event; ``action`` 0 means released, anything else pressed."""
        try:
            control = Key(key)
        except ValueError:
            return

        if control is Key.RESET:
            self._first_cursor = True
            self._active.clear()
        elif action:
            self._active.add(control)
        else:
            self._active.discard(control)

    def on_cursor_entered(self, entered: int) -> None:
        self._first_cursor = bool(entered)