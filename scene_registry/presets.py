"""Scene presets: ready-made registries for the demo entry point and tests.

Presets
-------
- ``basic``   : three spheres, one triangle, a ground plane.
- ``cornell`` : Cornell box of five quads with an emissive ceiling and two
  small spheres.
- ``planets`` : two planetary bodies with one station each, the link
  between the stations, bodies rendered as spheres and stations as small
  emissive spheres.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field

import numpy as np

from planetary.body import PlanetaryBody
from planetary.station import LinkReport, Station, establish_link
from render_core.camera import Camera
from render_core.constants import SceneConfig
from render_core.primitives import Material, Plane, Quad, Sphere, Triangle
from scene_registry.registry import SceneRegistry

logger = logging.getLogger(__name__)

# Station marker radius relative to its body radius
_STATION_MARKER_SCALE: float = 0.05


@dataclass
class PresetScene:
    """A built scene: registry, camera and any link analysis.

    Attributes
    ----------
    name : str
        Preset name.
    registry : SceneRegistry
        Populated registry.
    camera : Camera
        Camera framing the scene.
    links : list[LinkReport]
        Station link reports (empty for scenes without stations).
    """

    name: str
    registry: SceneRegistry
    camera: Camera
    links: list[LinkReport] = field(default_factory=list)


def _material(config: SceneConfig, albedo, **kwargs) -> Material:
    return Material(albedo, max_channel_sum=config.geometry.max_channel_sum, **kwargs)


def build_basic_scene(config: SceneConfig) -> PresetScene:
    """Spheres, a free triangle and a ground plane at y = −1."""
    registry = SceneRegistry()
    red = registry.add_material(_material(config, (1.0, 0.0, 0.0)))
    green = registry.add_material(_material(config, (0.0, 1.0, 0.0)))
    sky = registry.add_material(_material(config, (0.0, 0.5, 1.0)))
    yellow = registry.add_material(_material(config, (0.9, 0.9, 0.0)))

    registry.add_sphere(Sphere((0.0, 0.0, 0.0), 1.0), red)
    registry.add_sphere(Sphere((4.0, 1.0, 3.0), 2.0), green)
    registry.add_sphere(Sphere((4.0, 1.0, -6.0), 2.0), green)
    registry.add_triangle(
        Triangle((-3.0, 0.5, 2.0), (-6.0, 0.0, 0.0), (-4.5, 2.5, -2.0)),
        yellow,
    )
    registry.add_plane(Plane.from_point_normal((0.0, -1.0, 0.0), (0.0, 1.0, 0.0)), sky)

    camera = Camera.from_config(config.camera)
    logger.info("Built preset 'basic': %r", registry)
    return PresetScene("basic", registry, camera)


def build_cornell_box(config: SceneConfig) -> PresetScene:
    """Unit Cornell box spanning [−1, 1]³, open toward +Z."""
    registry = SceneRegistry()
    red = registry.add_material(_material(config, (1.0, 0.0, 0.0)))
    green = registry.add_material(_material(config, (0.0, 1.0, 0.0)))
    blue = registry.add_material(_material(config, (0.0, 0.0, 1.0)))
    white = registry.add_material(_material(config, (1.0, 1.0, 1.0)))
    yellow = registry.add_material(_material(config, (1.0, 1.0, 0.0)))
    light = registry.add_material(_material(config, (1.0, 1.0, 1.0), emission=4.0))

    walls = [
        # floor
        (Quad((-1, -1, -1), (-1, -1, 1), (1, -1, 1), (1, -1, -1)), white),
        # back
        (Quad((-1, -1, -1), (-1, 1, -1), (1, 1, -1), (1, -1, -1)), white),
        # ceiling
        (Quad((-1, 1, -1), (-1, 1, 1), (1, 1, 1), (1, 1, -1)), light),
        # left
        (Quad((-1, -1, 1), (-1, 1, 1), (-1, 1, -1), (-1, -1, -1)), red),
        # right
        (Quad((1, -1, 1), (1, 1, 1), (1, 1, -1), (1, -1, -1)), green),
    ]
    for quad, material_index in walls:
        registry.add_quad(quad, material_index)

    registry.add_sphere(Sphere((0.5, -0.7, -0.25), 0.3), yellow)
    registry.add_sphere(Sphere((-0.5, -0.7, 0.25), 0.3), blue)

    camera_config = dataclasses.replace(config.camera, position=(0.0, 0.0, 3.5))
    camera = Camera.from_config(camera_config)
    logger.info("Built preset 'cornell': %r", registry)
    return PresetScene("cornell", registry, camera)


def build_planet_scene(config: SceneConfig) -> PresetScene:
    """Two bodies with one station each and the link between them."""
    tolerance = config.geometry.radius_tolerance
    half_sqrt2 = np.sqrt(0.5)

    home = PlanetaryBody(
        center=(0.0, 0.0, 0.0),
        axis=(0.0, 0.0, 2.0),
        reference=(0.0, half_sqrt2, half_sqrt2),
        tolerance=tolerance,
    )
    remote = PlanetaryBody(
        center=(0.0, 10.0, 0.0),
        axis=(0.0, 0.0, 4.0),
        reference=(2.0, 10.0, 0.0),
        tolerance=tolerance,
    )
    uplink = Station(np.pi / 4, np.pi / 4, home)
    downlink = Station(0.0, -np.pi / 2, remote)
    link = establish_link(uplink, downlink)

    registry = SceneRegistry()
    rock = registry.add_material(_material(config, (0.6, 0.6, 0.6)))
    ice = registry.add_material(_material(config, (0.7, 0.8, 0.9)))
    beacon = registry.add_material(_material(config, (1.0, 0.2, 0.1), emission=8.0))

    registry.add_sphere(Sphere(home.center, home.radius), rock)
    registry.add_sphere(Sphere(remote.center, remote.radius), ice)
    for station in (uplink, downlink):
        marker = Sphere(station.position, _STATION_MARKER_SCALE * station.body.radius)
        registry.add_sphere(marker, beacon)

    midpoint = 0.5 * (home.center + remote.center)
    camera = Camera(
        position=midpoint + np.array([0.0, 0.0, 25.0]),
        fov_deg=config.camera.fov_deg,
        target=midpoint,
        world_up=config.camera.world_up,
        fallback_up=config.camera.fallback_up,
        gimbal_threshold=config.camera.gimbal_threshold,
    )

    logger.info(
        "Built preset 'planets': %r, link distance %.4f (through body: %s)",
        registry,
        link.distance,
        link.may_pass_through_body,
    )
    return PresetScene("planets", registry, camera, [link])


PRESETS = {
    "basic": build_basic_scene,
    "cornell": build_cornell_box,
    "planets": build_planet_scene,
}
