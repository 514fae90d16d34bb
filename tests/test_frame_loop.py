"""Tests for frame counters and the per-frame driver.
"""

from __future__ import annotations

import numpy as np
import pytest

from frame_loop.frame_state import FrameCounters
from frame_loop.runner import FrameDriver, FramePacket
from render_core.primitives import Sphere
from scene_registry.presets import build_basic_scene


# ===================================================================
# FIXTURES
# ===================================================================


@pytest.fixture
def driver(scene_config) -> FrameDriver:
    """Driver over the basic preset without declared counts."""
    scene = build_basic_scene(scene_config)
    return FrameDriver(scene.registry, scene.camera, scene_config.render)


class PacketRecorder:
    """Consumer that keeps every packet it receives."""

    def __init__(self) -> None:
        self.packets: list[FramePacket] = []

    def __call__(self, packet: FramePacket) -> None:
        self.packets.append(packet)


# ===================================================================
# COUNTERS
# ===================================================================


class TestFrameCounters:
    """Monotonic counters with explicit accumulation reset."""

    def test_tick(self) -> None:
        c = FrameCounters()
        for _ in range(3):
            c.tick()
        assert c.frames_rendered == 3
        assert c.frames_accumulated == 3

    def test_reset_only_accumulation(self) -> None:
        c = FrameCounters()
        c.tick()
        c.tick()
        c.reset_accumulation()
        c.tick()
        assert c.frames_rendered == 3
        assert c.frames_accumulated == 1


# ===================================================================
# DRIVER
# ===================================================================


class TestFrameDriver:
    """Sequential per-frame cycle."""

    def test_block_uploaded_once(self, driver: FrameDriver) -> None:
        rec = PacketRecorder()
        driver.run(4, rec)
        assert rec.packets[0].block is not None
        assert all(p.block is None for p in rec.packets[1:])

    def test_uniforms_before_tick(self, driver: FrameDriver, scene_config) -> None:
        rec = PacketRecorder()
        driver.run(3, rec, dt_s=0.5)
        u = rec.packets[2].uniforms
        assert u.frame_count == 2
        assert u.frames_accumulated == 2
        assert u.time_s == pytest.approx(1.0)
        render = scene_config.render
        assert u.resolution == (
            float(render.width),
            float(render.height),
            pytest.approx(render.width / render.height),
        )
        assert u.samples_per_pixel == render.samples_per_pixel
        assert u.russian_roulette_chance == render.russian_roulette_chance
        assert driver.counters.frames_rendered == 3

    def test_camera_record_each_frame(self, driver: FrameDriver) -> None:
        packet = driver.step(0.0, lambda p: None)
        assert packet.camera.shape == (20,)
        assert packet.camera.dtype == np.float32

    def test_move_camera_resets_accumulation(self, driver: FrameDriver) -> None:
        rec = PacketRecorder()
        driver.run(5, rec)
        driver.move_camera(0.5, 1.0)
        packet = driver.step(1.0, rec)
        assert packet.uniforms.frames_accumulated == 0
        assert packet.uniforms.frame_count == 5
        assert packet.block is None
        np.testing.assert_allclose(packet.camera[16:19], driver.camera.position, rtol=1e-6)

    def test_registry_change_reuploads(self, driver: FrameDriver) -> None:
        rec = PacketRecorder()
        driver.run(3, rec)
        driver.registry.add_sphere(Sphere((0.0, 3.0, 0.0), 0.5), 0)
        assert driver.is_dirty
        packet = driver.step(1.0, rec)
        assert packet.block is not None
        assert packet.block.counts.spheres == 4
        assert packet.uniforms.frames_accumulated == 0
        assert not driver.is_dirty

    def test_mark_scene_dirty(self, driver: FrameDriver) -> None:
        driver.run(2, lambda p: None)
        driver.mark_scene_dirty()
        assert driver.step(0.0, lambda p: None).block is not None

    def test_declared_counts_verified(self, scene_config) -> None:
        scene = build_basic_scene(scene_config)
        declared = scene.registry.counts().as_dict()
        drv = FrameDriver(scene.registry, scene.camera, scene_config.render, declared)
        drv.step(0.0, lambda p: None)
        scene.registry.add_sphere(Sphere((0.0, 3.0, 0.0), 0.5), 0)
        with pytest.raises(ValueError, match="spheres"):
            drv.step(0.1, lambda p: None)

    def test_negative_frame_count_raises(self, driver: FrameDriver) -> None:
        with pytest.raises(ValueError):
            driver.run(-1, lambda p: None)
