"""Planetary body: axis/equator frame derived from center, axis and reference.

Notes
-----
A body is given by its UCS center, an axis vector whose length is the
body **diameter**, and a reference point on the surface. Construction:

1. Validate ``| |axis|/2 − |reference − center| | ≤ tolerance``.
2. ``d = reference − center``
3. ``aux = d × axis``
4. ``equator = normalize(axis × aux)``

``axis × (d × axis) = d·|axis|² − axis·(axis·d)`` is the component of d
perpendicular to the axis, so the equator direction is orthogonal to the
axis and points toward the reference's side of it. If the reference lies
on the axis line, ``aux`` vanishes and the body is rejected.

The body-local frame is ``(equator, axis × equator, axis)`` translated by
the center; longitude zero is the equator direction.
"""

from __future__ import annotations

import logging

import numpy as np

from render_core.vectors import (
    as_vec3,
    create_base_matrix,
    cross,
    length,
    normalize,
    subtract,
)

logger = logging.getLogger(__name__)

# Maximum absolute error between |axis|/2 and |reference − center|
RADIUS_TOLERANCE: float = 1e-6

# sin(angle between d and axis) below which the reference is on the axis
_COLINEAR_EPSILON: float = 1e-9


class PlanetaryBody:
    """Sphere with an orientation: rotation axis and longitude-zero direction.

    Parameters
    ----------
    center : array-like
        UCS center.
    axis : array-like
        Rotation axis; direction and length (= diameter) both matter.
    reference : array-like
        UCS point on the surface defining longitude zero.
    tolerance : float
        Maximum absolute radius mismatch.

    Raises
    ------
    ValueError
        If the reference is not at radius distance from the center, or if
        it lies on the axis line.
    """

    def __init__(self, center, axis, reference, tolerance: float = RADIUS_TOLERANCE) -> None:
        self.center = as_vec3(center)
        self.axis = as_vec3(axis)
        self.reference = as_vec3(reference)

        self.radius = length(self.axis) / 2.0
        d = subtract(self.reference, self.center)
        error = abs(self.radius - length(d))
        if error > tolerance:
            raise ValueError(
                "Invalid planetary body: reference is not at radius distance "
                f"from the center (error {error:.3e} > {tolerance:.0e}); "
                f"center={self.center}, axis={self.axis}, reference={self.reference}"
            )

        aux = cross(d, self.axis)
        if length(aux) <= _COLINEAR_EPSILON * length(d) * length(self.axis):
            raise ValueError(
                "Invalid planetary body: reference lies on the axis, equator "
                f"direction is undefined; center={self.center}, axis={self.axis}, "
                f"reference={self.reference}"
            )

        self.unit_axis = normalize(self.axis)
        self.equator_direction = normalize(cross(self.axis, aux))
        self.meridian_normal = cross(self.unit_axis, self.equator_direction)

        self.basis_matrix = create_base_matrix(
            self.equator_direction,
            self.meridian_normal,
            self.unit_axis,
            self.center,
        )

        logger.debug("Created %r", self)

    def __repr__(self) -> str:
        return (
            f"PlanetaryBody(center={self.center}, axis={self.axis}, "
            f"reference={self.reference}, equator={np.round(self.equator_direction, 6)})"
        )
