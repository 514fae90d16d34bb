"""Frame driver — the sequential per-frame cycle feeding the rendering host.

Each frame:
1. Update state (time, uniforms)
2. Serialize the static block if the registry changed since the last upload
3. Hand a FramePacket to the consumer (the external rendering-program host)
4. Increment the frame counters

Notes
-----
The driver performs no scheduling of its own; an external loop calls
:meth:`FrameDriver.step` once per displayed frame. :meth:`FrameDriver.run`
is a fixed-timestep convenience for headless runs and tests.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Mapping, Optional

import numpy as np

from frame_loop.frame_state import FrameCounters
from render_core.camera import Camera
from render_core.constants import RenderConfig
from scene_registry.registry import SceneRegistry
from scene_registry.serializer import SerializedBlock, serialize_scene
from scene_registry.shader_counts import verify_declared_counts

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Per-frame data
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FrameUniforms:
    """Per-frame uniform values.

    Attributes
    ----------
    time_s : float
        Scene time [s].
    frame_count : int
        Frames rendered before this one.
    frames_accumulated : int
        Frames in the running average before this one.
    resolution : tuple[float, float, float]
        (width, height, aspect).
    samples_per_pixel : int
        Paths traced per pixel per frame.
    russian_roulette_chance : float
        Path survival probability.
    """

    time_s: float
    frame_count: int
    frames_accumulated: int
    resolution: tuple[float, float, float]
    samples_per_pixel: int
    russian_roulette_chance: float


@dataclass(frozen=True)
class FramePacket:
    """Everything the rendering host receives for one frame.

    Attributes
    ----------
    block : SerializedBlock or None
        Static block to upload, or ``None`` when the previous upload is
        still current.
    camera : np.ndarray
        20-float camera record. Shape: (20,), dtype: float32.
    uniforms : FrameUniforms
        Per-frame uniforms.
    """

    block: Optional[SerializedBlock]
    camera: np.ndarray
    uniforms: FrameUniforms


FrameConsumer = Callable[[FramePacket], None]


# ---------------------------------------------------------------------------
# Driver
# ---------------------------------------------------------------------------


class FrameDriver:
    """Runs the per-frame cycle over an owned registry and camera.

    Parameters
    ----------
    registry : SceneRegistry
        Scene to render.
    camera : Camera
        Navigable camera.
    render_config : RenderConfig
        Resolution and sampling settings.
    declared_counts : Mapping[str, int], optional
        Array sizes compiled into the rendering program. When given, they
        are verified against the registry before every block upload.
    """

    def __init__(
        self,
        registry: SceneRegistry,
        camera: Camera,
        render_config: RenderConfig,
        declared_counts: Optional[Mapping[str, int]] = None,
    ) -> None:
        self.registry = registry
        self.camera = camera
        self.counters = FrameCounters()
        self._render = render_config
        self._declared_counts = declared_counts
        self._uploaded_revision: Optional[int] = None

        logger.info(
            "FrameDriver initialized: %dx%d, spp=%d, rr=%.2f",
            render_config.width,
            render_config.height,
            render_config.samples_per_pixel,
            render_config.russian_roulette_chance,
        )

    @property
    def is_dirty(self) -> bool:
        return self._uploaded_revision != self.registry.revision

    def mark_scene_dirty(self) -> None:
        """Force a re-upload of the static block on the next frame."""
        self._uploaded_revision = None
        self.counters.reset_accumulation()

    def move_camera(self, azimuth: float, polar: float) -> None:
        """Orbit the camera and restart accumulation."""
        self.camera.move_to(azimuth, polar)
        self.counters.reset_accumulation()

    def _uniforms(self, time_s: float) -> FrameUniforms:
        return FrameUniforms(
            time_s=float(time_s),
            frame_count=self.counters.frames_rendered,
            frames_accumulated=self.counters.frames_accumulated,
            resolution=(
                float(self._render.width),
                float(self._render.height),
                self._render.aspect,
            ),
            samples_per_pixel=self._render.samples_per_pixel,
            russian_roulette_chance=self._render.russian_roulette_chance,
        )

    def step(self, time_s: float, consumer: FrameConsumer) -> FramePacket:
        """Run one frame and return the packet handed to ``consumer``.

        Raises
        ------
        ValueError
            If declared counts were given and differ from the registry.
        """
        uniforms = self._uniforms(time_s)

        block = None
        if self.is_dirty:
            if self._declared_counts is not None:
                verify_declared_counts(self._declared_counts, self.registry.counts())
            block = serialize_scene(self.registry)
            if self._uploaded_revision is not None:
                # Scene content changed under the running average
                self.counters.reset_accumulation()
                uniforms = self._uniforms(time_s)

        packet = FramePacket(block=block, camera=self.camera.serialize(), uniforms=uniforms)
        consumer(packet)

        if block is not None:
            self._uploaded_revision = block.revision
        self.counters.tick()
        return packet

    def run(
        self,
        n_frames: int,
        consumer: FrameConsumer,
        dt_s: float = 1.0 / 60.0,
        start_time_s: float = 0.0,
    ) -> FrameCounters:
        """Run ``n_frames`` frames at a fixed timestep.

        Returns
        -------
        FrameCounters
            The driver's counters after the last frame.
        """
        if n_frames < 0:
            raise ValueError(f"Frame count must be >= 0, got {n_frames}")

        wall_start = time.perf_counter()
        for i in range(n_frames):
            self.step(start_time_s + i * dt_s, consumer)

            if i % max(1, n_frames // 10) == 0:
                logger.info(
                    "  Frame %d/%d: accumulated=%d",
                    i + 1,
                    n_frames,
                    self.counters.frames_accumulated,
                )

        wall_elapsed = time.perf_counter() - wall_start
        logger.info(
            "Ran %d frames in %.3f s wall time (%r)",
            n_frames,
            wall_elapsed,
            self.counters,
        )
        return self.counters
