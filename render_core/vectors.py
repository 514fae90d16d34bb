"""3D vector algebra and 4×4 homogeneous basis matrices.

All vectors are ``np.ndarray`` of shape (3,) and dtype float64. Every
operation returns a new array; nothing is modified in place.

Notes
-----
Basis matrices are stored in mathematical (row, column) form, with the
basis vectors as **columns**:

    | u.x  v.x  w.x  o.x |
    | u.y  v.y  w.y  o.y |
    | u.z  v.z  w.z  o.z |
    |  0    0    0    1  |

The rendering program reads matrices column-major, so the GPU memory
order is ``M.T.ravel()`` (see :func:`to_column_major`).
"""

from __future__ import annotations

import logging

import numpy as np

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Norm below which a vector is treated as zero-length
ZERO_LENGTH_EPSILON: float = 1e-12

# |det| below which a 4×4 matrix is treated as singular
_SINGULAR_EPSILON: float = 1e-12

X_AXIS = 0
Y_AXIS = 1
Z_AXIS = 2


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def vec3(x: float, y: float, z: float) -> np.ndarray:
    """Create a float64 vector (x, y, z)."""
    return np.array([x, y, z], dtype=np.float64)


def as_vec3(v) -> np.ndarray:
    """Copy any 3-element sequence into a float64 vector.

    Raises
    ------
    ValueError
        If ``v`` does not hold exactly three finite components.
    """
    arr = np.array(v, dtype=np.float64).reshape(-1)
    if arr.shape != (3,):
        raise ValueError(f"Expected a 3-component vector, got shape {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"Vector components must be finite, got {arr}")
    return arr


# ---------------------------------------------------------------------------
# Algebra
# ---------------------------------------------------------------------------


def add(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return np.add(a, b)


def subtract(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return np.subtract(a, b)


def scale(a: np.ndarray, s: float) -> np.ndarray:
    return np.multiply(a, s)


def cross(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return np.cross(a, b)


def dot(a: np.ndarray, b: np.ndarray) -> float:
    return float(np.dot(a, b))


def length(a: np.ndarray) -> float:
    return float(np.linalg.norm(a))


def normalize(a: np.ndarray) -> np.ndarray:
    """Return ``a / |a|``.

    Raises
    ------
    ValueError
        If ``a`` is zero-length (norm below 1e-12) or not finite.
    """
    n = np.linalg.norm(a)
    if not np.isfinite(n) or n < ZERO_LENGTH_EPSILON:
        raise ValueError(f"Cannot normalize zero-length vector {a}")
    return np.asarray(a, dtype=np.float64) / n


# ---------------------------------------------------------------------------
# Rotation about a principal axis
# ---------------------------------------------------------------------------


def rotation_matrix(axis: int, radians: float) -> np.ndarray:
    """3×3 right-handed rotation matrix about the X, Y or Z axis.

    Parameters
    ----------
    axis : int
        0 = X, 1 = Y, 2 = Z.
    radians : float
        Rotation angle; positive is counter-clockwise looking down the axis.

    Returns
    -------
    np.ndarray
        Rotation matrix. Shape: (3, 3).
    """
    c = np.cos(radians)
    s = np.sin(radians)
    if axis == X_AXIS:
        return np.array([[1.0, 0.0, 0.0], [0.0, c, -s], [0.0, s, c]])
    if axis == Y_AXIS:
        return np.array([[c, 0.0, s], [0.0, 1.0, 0.0], [-s, 0.0, c]])
    if axis == Z_AXIS:
        return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])
    raise ValueError(f"Principal axis must be 0, 1 or 2, got {axis}")


def rotate_x(v: np.ndarray, radians: float) -> np.ndarray:
    return rotation_matrix(X_AXIS, radians) @ v


def rotate_y(v: np.ndarray, radians: float) -> np.ndarray:
    return rotation_matrix(Y_AXIS, radians) @ v


def rotate_z(v: np.ndarray, radians: float) -> np.ndarray:
    return rotation_matrix(Z_AXIS, radians) @ v


# ---------------------------------------------------------------------------
# 4×4 basis matrices
# ---------------------------------------------------------------------------


def create_base_matrix(
    u: np.ndarray,
    v: np.ndarray,
    w: np.ndarray,
    origin: np.ndarray,
) -> np.ndarray:
    """Build the homogeneous transform with columns u, v, w, origin.

    Maps local coordinates (a, b, c) to ``origin + a·u + b·v + c·w``.

    Parameters
    ----------
    u, v, w : np.ndarray
        Basis vectors. Shape: (3,) each.
    origin : np.ndarray
        Translation. Shape: (3,).

    Returns
    -------
    np.ndarray
        Transform matrix. Shape: (4, 4), dtype: float64.
    """
    m = np.eye(4, dtype=np.float64)
    m[:3, 0] = u
    m[:3, 1] = v
    m[:3, 2] = w
    m[:3, 3] = origin
    return m


def invert(m: np.ndarray) -> np.ndarray:
    """Invert a 4×4 transform built from a basis.

    Raises
    ------
    ValueError
        If the matrix is singular.
    """
    det = np.linalg.det(m)
    if abs(det) < _SINGULAR_EPSILON:
        raise ValueError(f"Cannot invert singular matrix (det={det:.3e}):\n{m}")
    return np.linalg.inv(m)


def transform_point(m: np.ndarray, p: np.ndarray) -> np.ndarray:
    """Apply ``m`` to a point (w = 1)."""
    return m[:3, :3] @ p + m[:3, 3]


def transform_direction(m: np.ndarray, d: np.ndarray) -> np.ndarray:
    """Apply ``m`` to a direction (w = 0, translation ignored)."""
    return m[:3, :3] @ d


def to_column_major(m: np.ndarray) -> np.ndarray:
    """Flatten a 4×4 matrix into the consumer's column-major float32 order."""
    return np.ascontiguousarray(m.T, dtype=np.float32).ravel()
