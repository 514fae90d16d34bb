"""Serialization of the scene registry into the static GPU block.

Packs every registry collection into fixed-stride float32 records and
concatenates the segments in the fixed order materials, spheres, planes,
triangles. The material index of each spatial record is written as an
int32 bit pattern through an ``int32`` view of the record memory.

Design Notes
------------
- **Strides** (float32 slots): material 16, sphere 8, plane 8, triangle 13
  (see :mod:`render_core.layout`).
- **Counts**: the block carries the registry's live counts. They are the
  single source of truth for the rendering program's array sizes and
  must be communicated before upload (see
  :mod:`scene_registry.shader_counts`).
- **Triangles** are the only collection that grows with mesh size; their
  vertex/normal slots are packed by a Numba kernel from stacked arrays.
- An empty collection yields a zero-length segment.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
from numba import njit

from render_core import layout
from scene_registry.registry import EntityCounts, SceneRegistry

logger = logging.getLogger(__name__)

SEGMENT_ORDER: tuple[str, ...] = ("materials", "spheres", "planes", "triangles")

STRIDES: dict[str, int] = {
    "materials": layout.MATERIAL_STRIDE,
    "spheres": layout.SPHERE_STRIDE,
    "planes": layout.PLANE_STRIDE,
    "triangles": layout.TRIANGLE_STRIDE,
}

INDEX_SLOTS: dict[str, int] = {
    "spheres": layout.SPHERE_INDEX_SLOT,
    "planes": layout.PLANE_INDEX_SLOT,
    "triangles": layout.TRIANGLE_INDEX_SLOT,
}


# ===================================================================
# SERIALIZED BLOCK
# ===================================================================


@dataclass
class SerializedBlock:
    """Flat float32 buffer partitioned into per-kind record segments.

    Attributes
    ----------
    data : np.ndarray
        The whole block. Shape: (total_floats,), dtype: float32.
    counts : EntityCounts
        Number of records per kind.
    offsets : dict[str, int]
        Float offset of each segment inside ``data``.
    revision : int
        Registry revision the block was built from.
    """

    data: np.ndarray
    counts: EntityCounts
    offsets: dict[str, int]
    revision: int

    @property
    def nbytes(self) -> int:
        return int(self.data.nbytes)

    def segment(self, kind: str) -> np.ndarray:
        """Records of one kind as a (count, stride) view into ``data``."""
        if kind not in STRIDES:
            raise KeyError(f"Unknown record kind '{kind}', expected one of {SEGMENT_ORDER}")
        count = getattr(self.counts, kind)
        stride = STRIDES[kind]
        start = self.offsets[kind]
        return self.data[start:start + count * stride].reshape(count, stride)

    def material_indices(self, kind: str) -> np.ndarray:
        """Material indices stored in the records of a spatial kind."""
        if kind not in INDEX_SLOTS:
            raise KeyError(f"Record kind '{kind}' carries no material index")
        return layout.read_index(self.segment(kind), INDEX_SLOTS[kind])


# ===================================================================
# TRIANGLE PACKING (Numba JIT)
# ===================================================================


@njit(cache=True)
def _pack_triangle_records(
    tri_verts: np.ndarray,
    normals: np.ndarray,
    out: np.ndarray,
) -> None:
    """Write vertex and normal slots of triangle records.

    Parameters
    ----------
    tri_verts : np.ndarray
        Triangle vertices. Shape: (N, 3, 3), dtype: float64.
    normals : np.ndarray
        Unit face normals. Shape: (N, 3), dtype: float64.
    out : np.ndarray
        Output records, modified in place. Shape: (N, 13), dtype: float32.
        The material slot (12) is left untouched.
    """
    for i in range(tri_verts.shape[0]):
        for k in range(3):
            for d in range(3):
                out[i, 3 * k + d] = tri_verts[i, k, d]
        for d in range(3):
            out[i, 9 + d] = normals[i, d]


# ===================================================================
# PER-KIND SERIALIZATION
# ===================================================================


def serialize_materials(registry: SceneRegistry) -> np.ndarray:
    """Material segment, shape (N * 16,)."""
    materials = registry.materials
    if not materials:
        return np.zeros(0, dtype=np.float32)
    return np.concatenate([m.serialize() for m in materials])


def serialize_spheres(registry: SceneRegistry) -> np.ndarray:
    """Sphere segment, shape (N * 8,)."""
    spheres = registry.spheres
    if not spheres:
        return np.zeros(0, dtype=np.float32)
    return np.concatenate([s.primitive.serialize(s.material_index) for s in spheres])


def serialize_planes(registry: SceneRegistry) -> np.ndarray:
    """Plane segment, shape (N * 8,)."""
    planes = registry.planes
    if not planes:
        return np.zeros(0, dtype=np.float32)
    return np.concatenate([p.primitive.serialize(p.material_index) for p in planes])


def serialize_triangles(registry: SceneRegistry) -> np.ndarray:
    """Triangle segment, shape (N * 13,).

    Produces the same records as ``Triangle.serialize`` for each entry.
    """
    triangles = registry.triangles
    n = len(triangles)
    if n == 0:
        return np.zeros(0, dtype=np.float32)

    tri_verts = np.empty((n, 3, 3), dtype=np.float64)
    normals = np.empty((n, 3), dtype=np.float64)
    indices = np.empty(n, dtype=np.int32)
    for i, placed in enumerate(triangles):
        tri = placed.primitive
        tri_verts[i, 0] = tri.v0
        tri_verts[i, 1] = tri.v1
        tri_verts[i, 2] = tri.v2
        normals[i] = tri.normal
        indices[i] = placed.material_index

    records = np.zeros((n, layout.TRIANGLE_STRIDE), dtype=np.float32)
    _pack_triangle_records(tri_verts, normals, records)
    layout.embed_index(records, layout.TRIANGLE_INDEX_SLOT, indices)
    return records.ravel()


# ===================================================================
# HIGH-LEVEL API
# ===================================================================


def serialize_scene(registry: SceneRegistry) -> SerializedBlock:
    """Pack the whole registry into one static block.

    Parameters
    ----------
    registry : SceneRegistry
        Scene to serialize.

    Returns
    -------
    SerializedBlock
        Concatenated segments with counts and offsets.
    """
    segments = {
        "materials": serialize_materials(registry),
        "spheres": serialize_spheres(registry),
        "planes": serialize_planes(registry),
        "triangles": serialize_triangles(registry),
    }

    offsets: dict[str, int] = {}
    position = 0
    for kind in SEGMENT_ORDER:
        offsets[kind] = position
        position += segments[kind].size

    data = np.concatenate([segments[kind] for kind in SEGMENT_ORDER]).astype(
        np.float32, copy=False
    )
    counts = registry.counts()

    for kind in SEGMENT_ORDER:
        logger.debug(
            "Serialized %s: %d records, %d floats",
            kind,
            getattr(counts, kind),
            segments[kind].size,
        )

    logger.info(
        "Static block serialized: %d materials, %d spheres, %d planes, "
        "%d triangles -> %d floats (%.1f KB)",
        counts.materials,
        counts.spheres,
        counts.planes,
        counts.triangles,
        data.size,
        data.nbytes / 1024.0,
    )

    return SerializedBlock(
        data=data,
        counts=counts,
        offsets=offsets,
        revision=registry.revision,
    )
