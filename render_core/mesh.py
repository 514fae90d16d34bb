"""Indexed triangle mesh → registry triangles.

Wraps the vertex/face arrays produced by the (external) mesh-file
loaders, computes face normals, face areas and face centroids, and
expands the mesh into :class:`~render_core.primitives.Triangle` objects
for insertion into the scene registry.

Notes
-----
A mesh of F faces produces at most F triangles. Faces with colinear or
coincident vertices (the scale-independent test of
:func:`~render_core.primitives.is_degenerate`) are counted in the
metadata and dropped with a warning by :meth:`TriangleMesh.to_triangles`;
a Triangle cannot be built without a well-defined normal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

from render_core.primitives import Triangle, is_degenerate

logger = logging.getLogger(__name__)


@dataclass
class TriangleMesh:
    """Indexed triangle mesh.

    Attributes
    ----------
    name : str
        Human-readable mesh name (e.g., source file stem).
    vertices : np.ndarray
        Vertex positions. Shape: (num_vertices, 3), dtype: float64.
    triangles : np.ndarray
        Triangle vertex indices. Shape: (num_triangles, 3), dtype: int64.
        Each row contains three indices into the vertices array.
    face_normals : np.ndarray
        Unit normal vectors for each face, following the vertex winding.
        Shape: (num_triangles, 3), dtype: float64.
    face_areas : np.ndarray
        Area of each face. Shape: (num_triangles,), dtype: float64.
    face_centroids : np.ndarray
        Centroid of each face. Shape: (num_triangles, 3), dtype: float64.
    metadata : dict
        Mesh statistics.
    """

    name: str
    vertices: np.ndarray
    triangles: np.ndarray
    face_normals: np.ndarray
    face_areas: np.ndarray
    face_centroids: np.ndarray
    metadata: dict = field(default_factory=dict)

    @classmethod
    def from_arrays(
        cls,
        vertices: np.ndarray,
        triangles: np.ndarray,
        name: str = "mesh",
    ) -> TriangleMesh:
        """Build a mesh from vertex and face index arrays.

        Parameters
        ----------
        vertices : np.ndarray
            Vertex positions, shape (V, 3).
        triangles : np.ndarray
            Face vertex indices, shape (F, 3).
        name : str
            Mesh name.

        Raises
        ------
        ValueError
            If the arrays have the wrong shape or a face references a
            vertex that does not exist.
        """
        vertices = np.asarray(vertices, dtype=np.float64).reshape(-1, 3)
        triangles = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)

        if triangles.size and (triangles.min() < 0 or triangles.max() >= len(vertices)):
            raise ValueError(
                f"Mesh '{name}' references vertex indices outside [0, {len(vertices)})"
            )

        face_normals, face_areas, face_centroids = _compute_face_properties(
            vertices, triangles
        )

        degenerate_count = int(np.sum(_degenerate_faces(vertices, triangles)))
        metadata = {
            "num_vertices": int(vertices.shape[0]),
            "num_triangles": int(triangles.shape[0]),
            "degenerate_triangles": degenerate_count,
            "total_surface_area": float(face_areas.sum()),
        }

        logger.debug(
            "Mesh '%s': %d vertices, %d triangles (%d degenerate)",
            name,
            metadata["num_vertices"],
            metadata["num_triangles"],
            degenerate_count,
        )

        return cls(
            name=name,
            vertices=vertices,
            triangles=triangles,
            face_normals=face_normals,
            face_areas=face_areas,
            face_centroids=face_centroids,
            metadata=metadata,
        )

    @property
    def num_triangles(self) -> int:
        return int(self.triangles.shape[0])

    def translate(self, offset) -> TriangleMesh:
        """Return a copy moved by ``offset``."""
        offset = np.asarray(offset, dtype=np.float64).reshape(3)
        return TriangleMesh.from_arrays(self.vertices + offset, self.triangles, self.name)

    def scale(self, factors) -> TriangleMesh:
        """Return a copy scaled per axis about the origin.

        ``factors`` is a scalar or a 3-vector.
        """
        factors = np.broadcast_to(np.asarray(factors, dtype=np.float64), (3,))
        return TriangleMesh.from_arrays(self.vertices * factors, self.triangles, self.name)

    def to_triangles(self) -> list[Triangle]:
        """Expand into Triangle objects, dropping degenerate faces."""
        keep = ~_degenerate_faces(self.vertices, self.triangles)
        dropped = int((~keep).sum())
        if dropped:
            logger.warning(
                "Mesh '%s': dropping %d degenerate triangles (colinear or coincident vertices)",
                self.name,
                dropped,
            )

        corners = self.vertices[self.triangles[keep]]  # (K, 3, 3)
        return [Triangle(c[0], c[1], c[2]) for c in corners]


def _compute_face_properties(
    vertices: np.ndarray,
    triangles: np.ndarray,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Compute face normals, areas, and centroids for all triangles.

    Parameters
    ----------
    vertices : np.ndarray
        Vertex positions, shape (num_vertices, 3).
    triangles : np.ndarray
        Triangle vertex indices, shape (num_triangles, 3).

    Returns
    -------
    normals : np.ndarray
        Unit normals, shape (num_triangles, 3). Zero for degenerate faces.
    areas : np.ndarray
        Triangle areas, shape (num_triangles,).
    centroids : np.ndarray
        Triangle centroids, shape (num_triangles, 3).
    """
    v0 = vertices[triangles[:, 0]]  # (N, 3)
    v1 = vertices[triangles[:, 1]]  # (N, 3)
    v2 = vertices[triangles[:, 2]]  # (N, 3)

    # Cross product gives normal direction with magnitude = 2 * area
    cross = np.cross(v1 - v0, v2 - v0)  # (N, 3)
    norms = np.linalg.norm(cross, axis=1, keepdims=True)  # (N, 1)

    safe_norms = np.where(norms > 1e-30, norms, 1.0)
    normals = np.where(norms > 1e-30, cross / safe_norms, 0.0)

    areas = 0.5 * norms.ravel()
    centroids = (v0 + v1 + v2) / 3.0

    return normals, areas, centroids


def _degenerate_faces(vertices: np.ndarray, triangles: np.ndarray) -> np.ndarray:
    """Boolean mask of faces a Triangle would reject. Shape: (num_triangles,)."""
    if triangles.shape[0] == 0:
        return np.zeros(0, dtype=bool)
    corners = vertices[triangles]  # (N, 3, 3)
    return is_degenerate(corners[:, 0], corners[:, 1], corners[:, 2])
