"""Scene pipeline configuration loader and conventions registry.

Numerical tolerances, camera defaults and per-frame render settings are
loaded from YAML configuration files. Library modules keep compile-time
defaults only; this module provides a typed, validated interface to the
configuration that callers inject.
"""

from __future__ import annotations

import hashlib
import logging
import platform
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import numba
import numpy as np
import yaml

from render_core import layout
from render_core.vectors import ZERO_LENGTH_EPSILON

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Configuration Data Classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CameraConfig:
    """Initial camera placement.

    Attributes
    ----------
    position : tuple[float, float, float]
        Eye position in UCS coordinates. Its length is the orbit radius.
    fov_deg : float
        Full vertical field of view [deg].
    world_up : tuple[float, float, float]
        Preferred up direction for the view basis.
    fallback_up : tuple[float, float, float]
        Up direction substituted when the view direction is nearly
        parallel to ``world_up``.
    gimbal_threshold : float
        |w · world_up| above which ``fallback_up`` is used.
    """

    position: tuple[float, float, float]
    fov_deg: float
    world_up: tuple[float, float, float]
    fallback_up: tuple[float, float, float]
    gimbal_threshold: float


@dataclass(frozen=True)
class GeometryConfig:
    """Geometric validation settings.

    Attributes
    ----------
    radius_tolerance : float
        Absolute error allowed between |axis|/2 and |reference − center|.
    max_channel_sum : float
        Upper bound for albedo + specular + subsurface per color channel.
    """

    radius_tolerance: float
    max_channel_sum: float


@dataclass(frozen=True)
class RenderConfig:
    """Per-frame settings forwarded to the rendering program.

    Attributes
    ----------
    width, height : int
        Output resolution [px].
    samples_per_pixel : int
        Paths traced per pixel per frame.
    russian_roulette_chance : float
        Survival probability for path termination, in (0, 1].
    """

    width: int
    height: int
    samples_per_pixel: int
    russian_roulette_chance: float

    @property
    def aspect(self) -> float:
        """Width over height."""
        return self.width / self.height


@dataclass(frozen=True)
class Convention:
    """A fixed geometric or layout convention shared with the consumer.

    Attributes
    ----------
    name : str
        Short name of the convention.
    value : str
        The convention as applied by this code base.
    """

    name: str
    value: str


@dataclass
class SceneConfig:
    """Top-level configuration loaded from YAML.

    Attributes
    ----------
    camera : CameraConfig
        Initial camera placement.
    geometry : GeometryConfig
        Geometric validation tolerances.
    render : RenderConfig
        Per-frame render settings.
    conventions : list[Convention]
        Registry of conventions the consumer program must agree with.
    """

    camera: CameraConfig
    geometry: GeometryConfig
    render: RenderConfig
    conventions: list[Convention] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Configuration Loader
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path) -> SceneConfig:
    """Load and validate a scene configuration from a YAML file.

    Parameters
    ----------
    config_path : str or Path
        Path to the YAML configuration file.

    Returns
    -------
    SceneConfig
        Fully populated, typed configuration object.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist.
    ValueError
        If required configuration keys are missing or values are invalid.
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        raw: dict[str, Any] = yaml.safe_load(f)

    logger.info("Loading configuration from: %s", config_path)

    try:
        cam = raw["camera"]
        camera = CameraConfig(
            position=_triple(cam["position"]),
            fov_deg=float(cam["fov_deg"]),
            world_up=_triple(cam["world_up"]),
            fallback_up=_triple(cam["fallback_up"]),
            gimbal_threshold=float(cam["gimbal_threshold"]),
        )

        geo = raw["geometry"]
        geometry = GeometryConfig(
            radius_tolerance=float(geo["radius_tolerance"]),
            max_channel_sum=float(geo["max_channel_sum"]),
        )

        ren = raw["render"]
        render = RenderConfig(
            width=int(ren["width"]),
            height=int(ren["height"]),
            samples_per_pixel=int(ren["samples_per_pixel"]),
            russian_roulette_chance=float(ren["russian_roulette_chance"]),
        )
    except KeyError as e:
        raise ValueError(f"Missing configuration key {e} in {config_path}") from e

    config = SceneConfig(
        camera=camera,
        geometry=geometry,
        render=render,
        conventions=_build_conventions_registry(),
    )

    _validate_config(config)
    logger.info(
        "Configuration loaded successfully. %d conventions registered.",
        len(config.conventions),
    )

    return config


def _triple(values: Any) -> tuple[float, float, float]:
    """Convert a YAML sequence to a 3-tuple of floats."""
    if len(values) != 3:
        raise ValueError(f"Expected 3 components, got {values!r}")
    return (float(values[0]), float(values[1]), float(values[2]))


def _build_conventions_registry() -> list[Convention]:
    """Build the registry of conventions shared with the rendering program."""
    return [
        Convention("Station placement", "(0,0,1) rotated by polar about X, then azimuth about Z"),
        Convention("Body basis", "(equator, axis x equator, axis) + center"),
        Convention("Station frame", "(longitude tangent, latitude tangent, normal) + position"),
        Convention("Camera basis", "right-handed (right, up, normalize(eye - target))"),
        Convention("Matrix memory order", "column-major"),
        Convention("Material index", "int32 bit pattern in the last float slot"),
        Convention(
            "Record strides",
            f"material={layout.MATERIAL_STRIDE} sphere={layout.SPHERE_STRIDE} "
            f"plane={layout.PLANE_STRIDE} triangle={layout.TRIANGLE_STRIDE}",
        ),
        Convention("Block order", "materials, spheres, planes, triangles"),
    ]


def _validate_config(config: SceneConfig) -> None:
    """Validate constraints on configuration values.

    Parameters
    ----------
    config : SceneConfig
        Configuration to validate.

    Raises
    ------
    ValueError
        If any value is invalid.
    """
    cam = config.camera
    if not (0.0 < cam.fov_deg < 180.0):
        raise ValueError(f"Field of view must be in (0, 180) deg, got {cam.fov_deg}")
    if np.linalg.norm(cam.position) < ZERO_LENGTH_EPSILON:
        raise ValueError("Camera position must not coincide with the orbit center.")
    if (
        np.linalg.norm(cam.world_up) < ZERO_LENGTH_EPSILON
        or np.linalg.norm(cam.fallback_up) < ZERO_LENGTH_EPSILON
    ):
        raise ValueError("Camera up vectors must be non-zero.")
    if not (0.0 < cam.gimbal_threshold < 1.0):
        raise ValueError(
            f"Gimbal threshold must be in (0, 1), got {cam.gimbal_threshold}"
        )
    if config.geometry.radius_tolerance <= 0.0:
        raise ValueError("Radius tolerance must be positive.")
    if config.geometry.max_channel_sum <= 0.0:
        raise ValueError("Maximum channel sum must be positive.")
    if config.render.width <= 0 or config.render.height <= 0:
        raise ValueError("Render resolution must be positive.")
    if config.render.samples_per_pixel < 1:
        raise ValueError("Samples per pixel must be >= 1.")
    if not (0.0 < config.render.russian_roulette_chance <= 1.0):
        raise ValueError(
            "Russian roulette chance must be in (0, 1], "
            f"got {config.render.russian_roulette_chance}"
        )

    logger.debug("Configuration validation passed.")


def log_conventions(config: SceneConfig) -> None:
    """Log all shared conventions to the logger.

    Parameters
    ----------
    config : SceneConfig
        Configuration with populated conventions registry.
    """
    logger.info("=" * 70)
    logger.info("CONVENTIONS REGISTRY")
    logger.info("=" * 70)
    for i, c in enumerate(config.conventions, 1):
        logger.info("  [%02d] %-20s = %s", i, c.name, c.value)
    logger.info("=" * 70)


def log_platform_info() -> None:
    """Log platform and library version information for reproducibility."""
    logger.info("=" * 70)
    logger.info("PLATFORM INFORMATION (for reproducibility)")
    logger.info("=" * 70)
    logger.info("  Python:    %s", sys.version)
    logger.info("  Platform:  %s", platform.platform())
    logger.info("  NumPy:     %s", np.__version__)
    logger.info("  Numba:     %s", numba.__version__)
    logger.info("  Float32 eps: %e", np.finfo(np.float32).eps)
    logger.info("=" * 70)


def hash_array(arr: np.ndarray) -> str:
    """Compute SHA-256 hash of a NumPy array for reproducibility verification.

    Parameters
    ----------
    arr : np.ndarray
        Array to hash.

    Returns
    -------
    str
        Hex digest of the SHA-256 hash.
    """
    return hashlib.sha256(arr.tobytes()).hexdigest()
