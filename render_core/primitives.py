"""Geometric primitives and materials with their serialization contract.

Sphere, Plane, Triangle and Quad are immutable value entities placed in
the UCS. Material carries the optical parameters consumed by the shading
stage of the rendering program.

Notes
-----
Every spatial primitive exposes ``serialize(material_index)`` returning a
float32 record whose last slot holds the material index as an int32 bit
pattern (see :mod:`render_core.layout`). ``Material.serialize()`` returns
its 16-slot record.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

from render_core import layout
from render_core.vectors import as_vec3, cross, dot, length, normalize, subtract

logger = logging.getLogger(__name__)

# Default upper bound for albedo + specular + subsurface per channel
_MAX_CHANNEL_SUM: float = 1.0

# Slack for floating-point noise in the channel-sum check
_CHANNEL_SUM_SLACK: float = 1e-9

# Sine of the vertex-0 angle at or below which a triangle is degenerate
DEGENERATE_SINE: float = 1e-9


def is_degenerate(v0, v1, v2) -> np.ndarray:
    """Flag colinear or coincident vertices, independent of scale.

    A face is degenerate when ``|e1 × e2| ≤ DEGENERATE_SINE · |e1| · |e2|``
    with ``e1 = v1 − v0`` and ``e2 = v2 − v0``. Accepts single vertices,
    shape (3,), or stacked faces, shape (N, 3).
    """
    e1 = np.asarray(v1, dtype=np.float64) - v0
    e2 = np.asarray(v2, dtype=np.float64) - v0
    twice_area = np.linalg.norm(np.cross(e1, e2), axis=-1)
    bound = DEGENERATE_SINE * np.linalg.norm(e1, axis=-1) * np.linalg.norm(e2, axis=-1)
    return twice_area <= bound


# ---------------------------------------------------------------------------
# Material
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class Material:
    """Optical material.

    Attributes
    ----------
    albedo : np.ndarray
        Diffuse reflectance per RGB channel. Shape: (3,).
    emission : float
        Emitted radiance scale (0 for non-emitters).
    specular : np.ndarray
        Specular reflectance per channel. Shape: (3,).
    subsurface : np.ndarray
        Subsurface transmission color per channel. Shape: (3,).
    ior : float
        Index of refraction.
    max_channel_sum : float
        Bound used by the energy-conservation warning.
    lobe_weights : np.ndarray
        Derived. Normalized relative magnitudes of (albedo, specular,
        subsurface), used for lobe importance sampling. Shape: (3,).
    """

    albedo: np.ndarray
    emission: float = 0.0
    specular: np.ndarray = field(default_factory=lambda: np.zeros(3))
    subsurface: np.ndarray = field(default_factory=lambda: np.zeros(3))
    ior: float = 1.0
    max_channel_sum: float = _MAX_CHANNEL_SUM
    lobe_weights: np.ndarray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        # frozen dataclass: normalize inputs through object.__setattr__
        object.__setattr__(self, "albedo", as_vec3(self.albedo))
        object.__setattr__(self, "specular", as_vec3(self.specular))
        object.__setattr__(self, "subsurface", as_vec3(self.subsurface))
        object.__setattr__(self, "emission", float(self.emission))
        object.__setattr__(self, "ior", float(self.ior))

        if self.ior <= 0.0:
            raise ValueError(f"Index of refraction must be positive, got {self.ior}")

        channel_sum = self.albedo + self.specular + self.subsurface
        if np.any(channel_sum > self.max_channel_sum + _CHANNEL_SUM_SLACK):
            logger.warning(
                "Material is not energy conserving: albedo+specular+subsurface "
                "= %s exceeds %.3f per channel",
                np.array2string(channel_sum, precision=3),
                self.max_channel_sum,
            )

        object.__setattr__(self, "lobe_weights", self._compute_lobe_weights())

    def _compute_lobe_weights(self) -> np.ndarray:
        magnitudes = np.array([
            np.linalg.norm(self.albedo),
            np.linalg.norm(self.specular),
            np.linalg.norm(self.subsurface),
        ])
        total = magnitudes.sum()
        if total == 0.0:
            # Black surface: sample the diffuse lobe only
            return np.array([1.0, 0.0, 0.0])
        return magnitudes / total

    def serialize(self) -> np.ndarray:
        """Pack into a 16-slot float32 record."""
        record = np.zeros(layout.MATERIAL_STRIDE, dtype=np.float32)
        record[0:3] = self.albedo
        record[3] = self.emission
        record[4:7] = self.specular
        record[8:11] = self.subsurface
        record[11] = self.ior
        record[12:15] = self.lobe_weights
        return record


# ---------------------------------------------------------------------------
# Sphere
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class Sphere:
    """Sphere given by its UCS center and radius (≥ 0)."""

    center: np.ndarray
    radius: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "center", as_vec3(self.center))
        object.__setattr__(self, "radius", float(self.radius))
        if not self.radius >= 0.0:
            raise ValueError(f"Sphere radius must be >= 0, got {self.radius}")

    def serialize(self, material_index: int) -> np.ndarray:
        """Pack into an 8-slot float32 record."""
        record = np.zeros(layout.SPHERE_STRIDE, dtype=np.float32)
        record[0:3] = self.center
        record[3] = self.radius
        layout.embed_index(record, layout.SPHERE_INDEX_SLOT, layout.check_index(material_index))
        return record


# ---------------------------------------------------------------------------
# Plane
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class Plane:
    """Plane ``{p : normal · p = distance}``; the normal is stored unit-length."""

    normal: np.ndarray
    distance: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "normal", normalize(as_vec3(self.normal)))
        object.__setattr__(self, "distance", float(self.distance))

    @classmethod
    def from_point_normal(cls, point, normal) -> Plane:
        """Plane through ``point`` with the given normal direction."""
        n = normalize(as_vec3(normal))
        return cls(n, dot(n, as_vec3(point)))

    def serialize(self, material_index: int) -> np.ndarray:
        """Pack into an 8-slot float32 record."""
        record = np.zeros(layout.PLANE_STRIDE, dtype=np.float32)
        record[0:3] = self.normal
        record[3] = self.distance
        layout.embed_index(record, layout.PLANE_INDEX_SLOT, layout.check_index(material_index))
        return record


# ---------------------------------------------------------------------------
# Triangle
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class Triangle:
    """Triangle with counter-clockwise vertices and derived unit face normal.

    The normal is ``normalize((v1 − v0) × (v2 − v0))``.

    Raises
    ------
    ValueError
        If the vertices are coincident or colinear.
    """

    v0: np.ndarray
    v1: np.ndarray
    v2: np.ndarray
    normal: np.ndarray = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "v0", as_vec3(self.v0))
        object.__setattr__(self, "v1", as_vec3(self.v1))
        object.__setattr__(self, "v2", as_vec3(self.v2))

        if is_degenerate(self.v0, self.v1, self.v2):
            raise ValueError(
                f"Degenerate triangle (colinear or coincident vertices): "
                f"v0={self.v0}, v1={self.v1}, v2={self.v2}"
            )
        n = cross(subtract(self.v1, self.v0), subtract(self.v2, self.v0))
        object.__setattr__(self, "normal", n / length(n))

    @property
    def vertices(self) -> np.ndarray:
        """Vertices stacked row-wise. Shape: (3, 3)."""
        return np.stack([self.v0, self.v1, self.v2])

    def serialize(self, material_index: int) -> np.ndarray:
        """Pack into a 13-slot float32 record."""
        record = np.zeros(layout.TRIANGLE_STRIDE, dtype=np.float32)
        record[0:3] = self.v0
        record[3:6] = self.v1
        record[6:9] = self.v2
        record[9:12] = self.normal
        layout.embed_index(record, layout.TRIANGLE_INDEX_SLOT, layout.check_index(material_index))
        return record


# ---------------------------------------------------------------------------
# Quad
# ---------------------------------------------------------------------------


class Quad:
    """Planar quadrilateral split along the v0–v2 diagonal.

    ``t1 = (v0, v1, v2)`` and ``t2 = (v0, v2, v3)`` share the winding of the
    input, so both halves face the same side.

    Raises
    ------
    ValueError
        If either half is degenerate or the halves face opposite sides
        (self-intersecting "bow-tie" input).
    """

    __slots__ = ("t1", "t2")

    def __init__(self, v0, v1, v2, v3) -> None:
        self.t1 = Triangle(v0, v1, v2)
        self.t2 = Triangle(v0, v2, v3)
        if dot(self.t1.normal, self.t2.normal) <= 0.0:
            raise ValueError(
                f"Quad halves have opposite winding: v0={self.t1.v0}, v1={self.t1.v1}, "
                f"v2={self.t1.v2}, v3={self.t2.v2}"
            )

    @property
    def triangles(self) -> tuple[Triangle, Triangle]:
        return self.t1, self.t2

    def serialize(self, material_index: int) -> np.ndarray:
        """Pack both halves into two consecutive triangle records."""
        return np.concatenate([
            self.t1.serialize(material_index),
            self.t2.serialize(material_index),
        ])

    def __repr__(self) -> str:
        return f"Quad(t1={self.t1!r}, t2={self.t2!r})"
