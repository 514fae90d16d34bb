"""Tests for triangle meshes.
"""

from __future__ import annotations

import logging

import numpy as np
import pytest

from render_core.mesh import TriangleMesh


@pytest.fixture
def square_mesh() -> TriangleMesh:
    """Unit square in the XY plane made of two CCW triangles."""
    vertices = np.array([
        [0.0, 0.0, 0.0],
        [1.0, 0.0, 0.0],
        [1.0, 1.0, 0.0],
        [0.0, 1.0, 0.0],
    ])
    triangles = np.array([[0, 1, 2], [0, 2, 3]])
    return TriangleMesh.from_arrays(vertices, triangles, name="square")


class TestTriangleMesh:
    """Face properties, transforms and triangle expansion."""

    def test_face_properties(self, square_mesh: TriangleMesh) -> None:
        assert square_mesh.num_triangles == 2
        np.testing.assert_allclose(square_mesh.face_areas, [0.5, 0.5])
        np.testing.assert_allclose(square_mesh.face_normals, [[0, 0, 1], [0, 0, 1]])
        assert square_mesh.metadata["total_surface_area"] == pytest.approx(1.0)

    def test_translate_returns_copy(self, square_mesh: TriangleMesh) -> None:
        moved = square_mesh.translate((20.0, 0.0, 0.0))
        np.testing.assert_allclose(moved.vertices[:, 0], [20.0, 21.0, 21.0, 20.0])
        np.testing.assert_allclose(square_mesh.vertices[0], [0.0, 0.0, 0.0])
        np.testing.assert_allclose(moved.face_areas, square_mesh.face_areas)

    def test_uniform_scale(self, square_mesh: TriangleMesh) -> None:
        big = square_mesh.scale(2.0)
        np.testing.assert_allclose(big.face_areas, [2.0, 2.0])

    def test_per_axis_scale(self, square_mesh: TriangleMesh) -> None:
        stretched = square_mesh.scale((3.0, 1.0, 1.0))
        np.testing.assert_allclose(stretched.vertices[2], [3.0, 1.0, 0.0])

    def test_to_triangles(self, square_mesh: TriangleMesh) -> None:
        tris = square_mesh.to_triangles()
        assert len(tris) == 2
        np.testing.assert_allclose(tris[1].v2, [0.0, 1.0, 0.0])

    def test_degenerate_faces_dropped(self, caplog: pytest.LogCaptureFixture) -> None:
        vertices = np.array([
            [0.0, 0.0, 0.0],
            [1.0, 0.0, 0.0],
            [0.0, 1.0, 0.0],
            [2.0, 0.0, 0.0],
        ])
        # Second face is colinear along X
        mesh = TriangleMesh.from_arrays(vertices, [[0, 1, 2], [0, 1, 3]])
        assert mesh.metadata["degenerate_triangles"] == 1
        with caplog.at_level(logging.WARNING, logger="render_core.mesh"):
            tris = mesh.to_triangles()
        assert len(tris) == 1
        assert "degenerate" in caplog.text

    def test_small_scale_keeps_faces(self, square_mesh: TriangleMesh) -> None:
        tiny = square_mesh.scale(1e-7)
        assert tiny.metadata["degenerate_triangles"] == 0
        tris = tiny.to_triangles()
        assert len(tris) == 2
        np.testing.assert_allclose(tris[0].normal, [0.0, 0.0, 1.0], atol=1e-12)

    def test_out_of_range_index_raises(self) -> None:
        with pytest.raises(ValueError, match="vertex indices"):
            TriangleMesh.from_arrays(np.zeros((3, 3)), [[0, 1, 3]])

    def test_empty_mesh(self) -> None:
        mesh = TriangleMesh.from_arrays(np.zeros((0, 3)), np.zeros((0, 3), dtype=int))
        assert mesh.num_triangles == 0
        assert mesh.to_triangles() == []
