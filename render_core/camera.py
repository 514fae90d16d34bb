"""Orbit camera producing the inverse-view basis for primary ray generation.

Notes
-----
The camera looks from ``position`` toward ``target``. Its basis is the
right-handed triple

    w     = normalize(position − target)     (opposite the viewing direction)
    right = normalize(up × w)
    v     = w × right

where ``up`` is ``world_up`` unless |w · world_up| exceeds the gimbal
threshold, in which case ``fallback_up`` is used. The inverse-view matrix
is ``create_base_matrix(right, v, w, position)``; it maps camera-space
rays ``(x·tan(fov/2)·aspect, y·tan(fov/2), −1)`` to world space.

:meth:`Camera.move_to` places the eye on the sphere of radius
``|position − target|`` (fixed at construction) around the target, with
the polar angle measured from +Y.
"""

from __future__ import annotations

import logging

import numpy as np

from render_core import layout
from render_core.constants import CameraConfig
from render_core.vectors import (
    as_vec3,
    create_base_matrix,
    cross,
    dot,
    invert,
    length,
    normalize,
    to_column_major,
)

logger = logging.getLogger(__name__)

_DEFAULT_FOV_DEG: float = 45.0
_DEFAULT_GIMBAL_THRESHOLD: float = 0.999


class Camera:
    """Eye-position driven camera.

    Parameters
    ----------
    position : array-like
        Eye position in UCS coordinates. Must differ from ``target``.
    fov_deg : float
        Full vertical field of view [deg], in (0, 180).
    target : array-like
        Orbit center the camera looks at.
    world_up : array-like
        Preferred up direction.
    fallback_up : array-like
        Up direction used near gimbal lock.
    gimbal_threshold : float
        |w · world_up| above which ``fallback_up`` is used.
    """

    def __init__(
        self,
        position=(0.0, 0.0, -1.0),
        fov_deg: float = _DEFAULT_FOV_DEG,
        target=(0.0, 0.0, 0.0),
        world_up=(0.0, 1.0, 0.0),
        fallback_up=(0.0, 0.0, 1.0),
        gimbal_threshold: float = _DEFAULT_GIMBAL_THRESHOLD,
    ) -> None:
        if not (0.0 < fov_deg < 180.0):
            raise ValueError(f"Field of view must be in (0, 180) deg, got {fov_deg}")

        self.target = as_vec3(target)
        self.position = as_vec3(position)
        self.fov_deg = float(fov_deg)
        self.tan_half_fov = float(np.tan(np.radians(fov_deg) / 2.0))
        self._world_up = normalize(as_vec3(world_up))
        self._fallback_up = normalize(as_vec3(fallback_up))
        self._gimbal_threshold = float(gimbal_threshold)

        self.orbit_radius = length(self.position - self.target)
        if self.orbit_radius == 0.0:
            raise ValueError(
                f"Camera position {self.position} coincides with target {self.target}"
            )

        self.view_inverse = np.eye(4)
        self.view = np.eye(4)
        self._rebuild_basis()

    @classmethod
    def from_config(cls, config: CameraConfig) -> Camera:
        """Create a camera looking at the origin from the configured position."""
        return cls(
            position=config.position,
            fov_deg=config.fov_deg,
            world_up=config.world_up,
            fallback_up=config.fallback_up,
            gimbal_threshold=config.gimbal_threshold,
        )

    def _rebuild_basis(self) -> None:
        w = normalize(self.position - self.target)

        up = self._world_up
        if abs(dot(w, up)) > self._gimbal_threshold:
            logger.debug("Camera near gimbal lock (w=%s); using fallback up", w)
            up = self._fallback_up

        right = normalize(cross(up, w))
        v = cross(w, right)

        self.view_inverse = create_base_matrix(right, v, w, self.position)
        self.view = invert(self.view_inverse)

    @property
    def right(self) -> np.ndarray:
        return self.view_inverse[:3, 0].copy()

    @property
    def up(self) -> np.ndarray:
        return self.view_inverse[:3, 1].copy()

    @property
    def w(self) -> np.ndarray:
        return self.view_inverse[:3, 2].copy()

    def move_to(self, azimuth: float, polar: float) -> None:
        """Reposition the eye on the orbit sphere and rebuild the basis.

        Parameters
        ----------
        azimuth : float
            Angle around +Y [rad], 0 on +X, increasing toward +Z.
        polar : float
            Angle from +Y [rad].
        """
        direction = np.array([
            np.sin(polar) * np.cos(azimuth),
            np.cos(polar),
            np.sin(polar) * np.sin(azimuth),
        ])
        self.position = self.target + self.orbit_radius * direction
        self._rebuild_basis()
        logger.debug(
            "Camera moved to azimuth=%.3f, polar=%.3f -> %s",
            azimuth,
            polar,
            self.position,
        )

    def serialize(self) -> np.ndarray:
        """Pack into the 20-float camera record.

        Layout: inverse-view matrix (16, column-major), eye position (3),
        tan(fov/2) (1).
        """
        record = np.empty(layout.CAMERA_RECORD_SIZE, dtype=np.float32)
        record[0:16] = to_column_major(self.view_inverse)
        record[16:19] = self.position
        record[19] = self.tan_half_fov
        return record

    def __repr__(self) -> str:
        return (
            f"Camera(position={self.position}, target={self.target}, "
            f"fov_deg={self.fov_deg})"
        )
