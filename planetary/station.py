"""Surface stations and the line-of-sight link heuristic.

Placement
---------
A station at (polar θ, azimuth φ) on a body is computed in the body-local
frame (x = equator direction, y = axis × equator, z = axis):

    local = Rz(φ) · Rx(θ) · (0, 0, 1)
          = (sin θ sin φ, −sin θ cos φ, cos θ)

i.e. the axis tip is first tilted by θ about the equator direction, then
swept by φ about the axis. θ = 0 is the axis tip, θ = π the opposite
pole. The point is scaled by the body radius and mapped to the UCS with
the body basis.

Tangent frame
-------------
    normal    = normalize(position − center)
    longitude = normalize(axis × normal)
    latitude  = normal × longitude

At the poles ``axis × normal`` vanishes; the longitude tangent is then
its limit for θ → 0⁺ (or π⁻), ``Rz(φ)·(1, 0, 0)`` in body-local
coordinates.

Link heuristic
--------------
The outgoing direction a → b is rotated into a's tangent frame. A
negative component along a's outward normal means the link leaves a
below its local horizon and may pass through the body. This is a
directional hint, not a ray/sphere intersection.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from planetary.body import PlanetaryBody
from render_core.vectors import (
    create_base_matrix,
    cross,
    invert,
    length,
    normalize,
    rotate_x,
    rotate_z,
    subtract,
    transform_direction,
    transform_point,
    vec3,
)

logger = logging.getLogger(__name__)

_POLE_EPSILON: float = 1e-12


class Station:
    """A point fixed to a body's surface with its own tangent frame.

    Parameters
    ----------
    polar : float
        Angle from the body axis [rad].
    azimuth : float
        Angle about the body axis from the equator direction [rad].
    body : PlanetaryBody
        Body the station sits on (not owned).
    """

    def __init__(self, polar: float, azimuth: float, body: PlanetaryBody) -> None:
        self.polar = float(polar)
        self.azimuth = float(azimuth)
        self.body = body

        local = rotate_z(rotate_x(vec3(0.0, 0.0, 1.0), self.polar), self.azimuth)
        self.position = transform_point(body.basis_matrix, body.radius * local)

        self.normal = normalize(subtract(self.position, body.center))

        longitude = cross(body.unit_axis, self.normal)
        if length(longitude) < _POLE_EPSILON:
            longitude = transform_direction(
                body.basis_matrix, rotate_z(vec3(1.0, 0.0, 0.0), self.azimuth)
            )
        self.longitude_tangent = normalize(longitude)
        self.latitude_tangent = cross(self.normal, self.longitude_tangent)

        self.basis_matrix = create_base_matrix(
            self.longitude_tangent,
            self.latitude_tangent,
            self.normal,
            self.position,
        )

    def to_local_direction(self, direction: np.ndarray) -> np.ndarray:
        """Express a UCS direction in this station's tangent frame."""
        return transform_direction(invert(self.basis_matrix), direction)

    def __repr__(self) -> str:
        return (
            f"Station(polar={self.polar:.6f}, azimuth={self.azimuth:.6f}, "
            f"position={np.round(self.position, 6)}, normal={np.round(self.normal, 6)})"
        )


@dataclass(frozen=True)
class LinkReport:
    """Geometry of a link between two stations.

    Attributes
    ----------
    distance : float
        Straight-line distance between the stations.
    direction_from_a : np.ndarray
        Unit direction a → b in a's tangent frame. Shape: (3,).
    direction_from_b : np.ndarray
        Unit direction b → a in b's tangent frame. Shape: (3,).
    a_may_pass_through_body : bool
        The link leaves a below a's local horizon.
    b_may_pass_through_body : bool
        The link leaves b below b's local horizon.
    """

    distance: float
    direction_from_a: np.ndarray
    direction_from_b: np.ndarray
    a_may_pass_through_body: bool
    b_may_pass_through_body: bool

    @property
    def may_pass_through_body(self) -> bool:
        return self.a_may_pass_through_body or self.b_may_pass_through_body


def establish_link(a: Station, b: Station) -> LinkReport:
    """Compute the link geometry between two stations.

    Parameters
    ----------
    a, b : Station
        Link endpoints; they may sit on different bodies.

    Returns
    -------
    LinkReport
        Local outgoing directions and the pass-through hints.

    Raises
    ------
    ValueError
        If the stations coincide.
    """
    offset = subtract(b.position, a.position)
    distance = length(offset)
    a_to_b = normalize(offset)

    local_a = a.to_local_direction(a_to_b)
    local_b = b.to_local_direction(-a_to_b)

    a_blocked = bool(local_a[2] < 0.0)
    b_blocked = bool(local_b[2] < 0.0)

    if a_blocked:
        logger.warning(
            "Link %r -> %r may pass through the body (local z=%.6f)", a, b, local_a[2]
        )
    if b_blocked:
        logger.warning(
            "Link %r -> %r may pass through the body (local z=%.6f)", b, a, local_b[2]
        )

    logger.debug(
        "Link established: distance=%.6f, from_a=%s, from_b=%s",
        distance,
        local_a,
        local_b,
    )

    return LinkReport(
        distance=distance,
        direction_from_a=local_a,
        direction_from_b=local_b,
        a_may_pass_through_body=a_blocked,
        b_may_pass_through_body=b_blocked,
    )
