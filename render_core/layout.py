"""Record layout shared with the rendering program.

Defines the stride (in float32 slots) of every serialized record kind
and the slot that carries the material index. The index is stored as the
raw bit pattern of an int32, written and read through an ``int32`` view
of the same memory; it is never converted numerically to float.

Layout (float32 slots)
----------------------
    Material  16: albedo.xyz, emission | specular.xyz, pad
                  subsurface.xyz, ior  | lobe_weights.xyz, pad
    Sphere     8: center.xyz, radius   | pad, pad, pad, material
    Plane      8: normal.xyz, distance | pad, pad, pad, material
    Triangle  13: v0.xyz, v1.xyz, v2.xyz, normal.xyz, material
"""

from __future__ import annotations

import numpy as np

MATERIAL_STRIDE: int = 16
SPHERE_STRIDE: int = 8
PLANE_STRIDE: int = 8
TRIANGLE_STRIDE: int = 13

SPHERE_INDEX_SLOT: int = SPHERE_STRIDE - 1
PLANE_INDEX_SLOT: int = PLANE_STRIDE - 1
TRIANGLE_INDEX_SLOT: int = TRIANGLE_STRIDE - 1

CAMERA_RECORD_SIZE: int = 20  # 16 inverse view + 3 eye + 1 tan(fov/2)

_INT32_MIN = np.iinfo(np.int32).min
_INT32_MAX = np.iinfo(np.int32).max


def check_index(index: int) -> int:
    """Return ``index`` as a Python int if it fits in an int32 slot."""
    if isinstance(index, bool) or not isinstance(index, (int, np.integer)):
        raise TypeError(f"Material index must be an integer, got {index!r}")
    if not (_INT32_MIN <= int(index) <= _INT32_MAX):
        raise ValueError(f"Material index {index} does not fit in int32")
    return int(index)


def embed_index(records: np.ndarray, slot: int, indices) -> None:
    """Write int32 bit patterns into column ``slot`` of float32 records.

    Parameters
    ----------
    records : np.ndarray
        float32 records, shape (stride,) or (N, stride). Modified in place.
    slot : int
        Slot index inside a record.
    indices : int or array-like
        Material index (or one per record).
    """
    if records.dtype != np.float32:
        raise TypeError(f"Records must be float32, got {records.dtype}")
    as_int = records.view(np.int32)
    as_int[..., slot] = np.asarray(indices, dtype=np.int32)


def read_index(records: np.ndarray, slot: int) -> np.ndarray:
    """Read the int32 bit patterns stored in column ``slot``."""
    return records.view(np.int32)[..., slot].copy()
