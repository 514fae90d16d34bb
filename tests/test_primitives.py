"""Tests for primitives, materials and the record layout helpers.
"""

from __future__ import annotations

import logging

import numpy as np
import pytest

from render_core import layout
from render_core.primitives import Material, Plane, Quad, Sphere, Triangle


# ===================================================================
# FIXTURES
# ===================================================================


@pytest.fixture
def unit_square() -> Quad:
    """Counter-clockwise unit square in the XY plane."""
    return Quad((0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0))


# ===================================================================
# LAYOUT
# ===================================================================


class TestLayout:
    """Material indices are stored as int32 bit patterns."""

    def test_index_bits_not_numeric_value(self) -> None:
        record = np.zeros(layout.SPHERE_STRIDE, dtype=np.float32)
        layout.embed_index(record, layout.SPHERE_INDEX_SLOT, 3)
        assert record.view(np.int32)[layout.SPHERE_INDEX_SLOT] == 3
        assert record[layout.SPHERE_INDEX_SLOT] != 3.0

    def test_read_index_batch(self) -> None:
        records = np.zeros((4, layout.TRIANGLE_STRIDE), dtype=np.float32)
        layout.embed_index(records, layout.TRIANGLE_INDEX_SLOT, [0, 7, 2, 1])
        np.testing.assert_array_equal(
            layout.read_index(records, layout.TRIANGLE_INDEX_SLOT), [0, 7, 2, 1]
        )

    def test_embed_requires_float32(self) -> None:
        with pytest.raises(TypeError):
            layout.embed_index(np.zeros(8), 7, 1)

    def test_check_index_rejects_bool(self) -> None:
        with pytest.raises(TypeError):
            layout.check_index(True)

    def test_check_index_rejects_overflow(self) -> None:
        with pytest.raises(ValueError, match="int32"):
            layout.check_index(2**31)

    def test_index_slots_are_last(self) -> None:
        assert layout.SPHERE_INDEX_SLOT == layout.SPHERE_STRIDE - 1
        assert layout.PLANE_INDEX_SLOT == layout.PLANE_STRIDE - 1
        assert layout.TRIANGLE_INDEX_SLOT == layout.TRIANGLE_STRIDE - 1


# ===================================================================
# MATERIAL
# ===================================================================


class TestMaterial:
    """Material record, lobe weights and the energy-conservation warning."""

    def test_record_layout(self) -> None:
        m = Material(
            albedo=(0.2, 0.3, 0.4),
            emission=2.0,
            specular=(0.1, 0.1, 0.1),
            subsurface=(0.05, 0.0, 0.0),
            ior=1.5,
        )
        rec = m.serialize()
        assert rec.shape == (layout.MATERIAL_STRIDE,)
        assert rec.dtype == np.float32
        np.testing.assert_allclose(rec[0:3], [0.2, 0.3, 0.4], rtol=1e-6)
        assert rec[3] == pytest.approx(2.0)
        np.testing.assert_allclose(rec[4:7], [0.1, 0.1, 0.1], rtol=1e-6)
        assert rec[7] == 0.0
        np.testing.assert_allclose(rec[8:11], [0.05, 0.0, 0.0], rtol=1e-6)
        assert rec[11] == pytest.approx(1.5)
        np.testing.assert_allclose(rec[12:15], m.lobe_weights, rtol=1e-6)
        assert rec[15] == 0.0

    def test_lobe_weights_sum_to_one(self) -> None:
        m = Material((0.5, 0.2, 0.1), specular=(0.3, 0.3, 0.3))
        assert m.lobe_weights.sum() == pytest.approx(1.0)
        assert np.all(m.lobe_weights >= 0.0)

    def test_black_material_samples_diffuse(self) -> None:
        m = Material((0.0, 0.0, 0.0), emission=5.0)
        np.testing.assert_array_equal(m.lobe_weights, [1.0, 0.0, 0.0])

    def test_channel_sum_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="render_core.primitives"):
            m = Material((0.8, 0.2, 0.2), specular=(0.5, 0.0, 0.0))
        assert "energy conserving" in caplog.text
        assert m.serialize().shape == (layout.MATERIAL_STRIDE,)

    def test_conserving_material_no_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="render_core.primitives"):
            Material((0.5, 0.5, 0.5), specular=(0.5, 0.5, 0.5))
        assert "energy conserving" not in caplog.text

    def test_non_positive_ior_raises(self) -> None:
        with pytest.raises(ValueError, match="refraction"):
            Material((0.5, 0.5, 0.5), ior=0.0)


# ===================================================================
# SPATIAL PRIMITIVES
# ===================================================================


class TestSphere:
    """Sphere radius validation and record."""

    def test_record(self) -> None:
        rec = Sphere((1.0, 2.0, 3.0), 0.5).serialize(4)
        np.testing.assert_allclose(rec[0:4], [1.0, 2.0, 3.0, 0.5])
        np.testing.assert_array_equal(rec[4:7], [0.0, 0.0, 0.0])
        assert rec.view(np.int32)[7] == 4

    def test_zero_radius_allowed(self) -> None:
        assert Sphere((0, 0, 0), 0.0).radius == 0.0

    def test_negative_radius_raises(self) -> None:
        with pytest.raises(ValueError, match="radius"):
            Sphere((0, 0, 0), -1.0)


class TestPlane:
    """Plane normal is stored unit-length."""

    def test_normal_normalized(self) -> None:
        p = Plane((0.0, 2.0, 0.0), 1.0)
        np.testing.assert_allclose(p.normal, [0.0, 1.0, 0.0])
        assert p.distance == 1.0

    def test_from_point_normal(self) -> None:
        p = Plane.from_point_normal((0.0, -1.0, 0.0), (0.0, 3.0, 0.0))
        assert p.distance == pytest.approx(-1.0)

    def test_record(self) -> None:
        rec = Plane((0.0, 0.0, 1.0), -2.0).serialize(1)
        np.testing.assert_allclose(rec[0:4], [0.0, 0.0, 1.0, -2.0])
        assert rec.view(np.int32)[layout.PLANE_INDEX_SLOT] == 1

    def test_zero_normal_raises(self) -> None:
        with pytest.raises(ValueError):
            Plane((0.0, 0.0, 0.0), 1.0)


class TestTriangle:
    """Triangle face normal and degenerate guard."""

    def test_ccw_normal(self) -> None:
        t = Triangle((0, 0, 0), (1, 0, 0), (0, 1, 0))
        np.testing.assert_allclose(t.normal, [0.0, 0.0, 1.0])

    def test_record_layout(self) -> None:
        t = Triangle((0, 0, 0), (2, 0, 0), (0, 2, 0))
        rec = t.serialize(9)
        assert rec.shape == (layout.TRIANGLE_STRIDE,)
        np.testing.assert_allclose(rec[0:9], t.vertices.ravel())
        np.testing.assert_allclose(rec[9:12], [0.0, 0.0, 1.0])
        assert rec.view(np.int32)[12] == 9

    def test_colinear_raises(self) -> None:
        with pytest.raises(ValueError, match="Degenerate"):
            Triangle((0, 0, 0), (1, 1, 1), (2, 2, 2))

    def test_coincident_raises(self) -> None:
        with pytest.raises(ValueError, match="Degenerate"):
            Triangle((1, 1, 1), (1, 1, 1), (0, 0, 0))

    def test_small_triangle_accepted(self) -> None:
        tri = Triangle((0.0, 0.0, 0.0), (1e-7, 0.0, 0.0), (0.0, 1e-7, 0.0))
        np.testing.assert_allclose(tri.normal, [0.0, 0.0, 1.0], atol=1e-12)

    def test_large_near_colinear_raises(self) -> None:
        # Offset of 1e-12 over edges of 1e6 is colinear to double precision
        with pytest.raises(ValueError, match="Degenerate"):
            Triangle((0.0, 0.0, 0.0), (1e6, 0.0, 0.0), (2e6, 1e-12, 0.0))


class TestQuad:
    """Quad splits along the v0–v2 diagonal."""

    def test_shared_diagonal(self, unit_square: Quad) -> None:
        t1, t2 = unit_square.triangles
        np.testing.assert_array_equal(t1.v0, t2.v0)
        np.testing.assert_array_equal(t1.v2, t2.v1)

    def test_halves_face_same_side(self, unit_square: Quad) -> None:
        t1, t2 = unit_square.triangles
        np.testing.assert_allclose(t1.normal, t2.normal)

    def test_serialize_two_records(self, unit_square: Quad) -> None:
        rec = unit_square.serialize(2)
        assert rec.shape == (2 * layout.TRIANGLE_STRIDE,)
        records = rec.reshape(2, layout.TRIANGLE_STRIDE)
        np.testing.assert_array_equal(
            layout.read_index(records, layout.TRIANGLE_INDEX_SLOT), [2, 2]
        )

    def test_bow_tie_raises(self) -> None:
        with pytest.raises(ValueError, match="opposite winding"):
            Quad((0, 0, 0), (1, 0, 0), (0, 1, 0), (1, 1, 0))
