"""Scene-to-GPU pipeline — CLI entry point.

Builds a preset scene, serializes it and drives the per-frame cycle
headlessly with a logging consumer in place of the rendering host.

Usage
-----
    python main.py --scene cornell --frames 10
    python main.py --scene planets --log-level DEBUG
    python main.py --scene basic --frames 120 --orbit 3
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import numpy as np


def setup_logging(level: str = "INFO") -> None:
    """Configure structured logging."""
    fmt = "%(name)s [%(levelname)s] %(message)s"
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=fmt,
        stream=sys.stdout,
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        prog="scenepipe",
        description="Scene registry, planetary geometry and GPU buffer serialization",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python main.py --scene basic\n"
            "  python main.py --scene cornell --frames 30\n"
            "  python main.py --scene planets --log-level DEBUG\n"
            "  python main.py --scene basic --frames 120 --orbit 3\n"
        ),
    )
    parser.add_argument(
        "--config",
        type=str,
        default="config/default_config.yaml",
        help="Path to scene config YAML (default: config/default_config.yaml)",
    )
    parser.add_argument(
        "--scene",
        type=str,
        default="basic",
        choices=["basic", "cornell", "planets"],
        help="Preset scene to build (default: basic)",
    )
    parser.add_argument(
        "--frames",
        type=int,
        default=10,
        help="Number of frames to drive (default: 10)",
    )
    parser.add_argument(
        "--orbit",
        type=float,
        default=0.0,
        help="Camera azimuth step per frame in degrees; 0 keeps it still (default: 0)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO)",
    )

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(args.log_level)

    logger = logging.getLogger("scenepipe")
    logger.info("=" * 60)
    logger.info("  Scene-to-GPU pipeline")
    logger.info("=" * 60)

    from frame_loop.runner import FrameDriver, FramePacket
    from render_core.constants import (
        hash_array,
        load_config,
        log_conventions,
        log_platform_info,
    )
    from scene_registry.presets import PRESETS

    config_path = Path(args.config)
    logger.info("Loading config: %s", config_path)
    config = load_config(config_path)
    log_platform_info()
    log_conventions(config)

    scene = PRESETS[args.scene](config)
    for i, link in enumerate(scene.links, 1):
        logger.info(
            "  Link %d: distance=%.6f, from_a=%s, from_b=%s, through body=%s",
            i,
            link.distance,
            np.round(link.direction_from_a, 6),
            np.round(link.direction_from_b, 6),
            link.may_pass_through_body,
        )

    # The host compiles its program against the counts of the built scene
    declared = scene.registry.counts().as_dict()
    driver = FrameDriver(scene.registry, scene.camera, config.render, declared)

    uploads: list[str] = []

    def consumer(packet: FramePacket) -> None:
        if packet.block is not None:
            digest = hash_array(packet.block.data)
            uploads.append(digest)
            logger.info(
                "Upload: %d floats (%d bytes), sha256=%s",
                packet.block.data.size,
                packet.block.nbytes,
                digest,
            )
        logger.debug(
            "Frame %d: t=%.4f s, accumulated=%d, eye=%s",
            packet.uniforms.frame_count,
            packet.uniforms.time_s,
            packet.uniforms.frames_accumulated,
            np.round(packet.camera[16:19], 4),
        )

    if args.orbit:
        azimuth0 = float(np.arctan2(scene.camera.w[2], scene.camera.w[0]))
        polar = float(np.arccos(np.clip(scene.camera.w[1], -1.0, 1.0)))
        step = np.radians(args.orbit)
        for i in range(args.frames):
            if i > 0:
                driver.move_camera(azimuth0 + i * step, polar)
            driver.step(i / 60.0, consumer)
    else:
        driver.run(args.frames, consumer)

    counts = scene.registry.counts()
    logger.info("=" * 60)
    logger.info("  RUN COMPLETE")
    logger.info("=" * 60)
    logger.info("  Scene: %s", scene.name)
    for kind, n in counts.as_dict().items():
        logger.info("    %-10s %d", kind, n)
    logger.info("  Block uploads: %d", len(uploads))
    logger.info("  Camera record: %s", np.round(scene.camera.serialize(), 4))
    logger.info("  %r", driver.counters)
    logger.info("=" * 60)

    return 0


if __name__ == "__main__":
    sys.exit(main())
