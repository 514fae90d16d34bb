"""Tests for configuration loading and reproducibility helpers.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
import yaml

from render_core.constants import (
    SceneConfig,
    hash_array,
    load_config,
    log_conventions,
)


def _write_config(tmp_path: Path, config_path: Path, section: str, key: str, value) -> Path:
    with open(config_path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    raw[section][key] = value
    out = tmp_path / "config.yaml"
    with open(out, "w", encoding="utf-8") as f:
        yaml.safe_dump(raw, f)
    return out


class TestLoadConfig:
    """YAML parsing and validation."""

    def test_default_config(self, scene_config: SceneConfig) -> None:
        assert scene_config.camera.position == (0.0, 0.0, 10.0)
        assert scene_config.camera.gimbal_threshold == pytest.approx(0.999)
        assert scene_config.geometry.radius_tolerance == pytest.approx(1e-6)
        assert scene_config.render.samples_per_pixel == 3
        assert scene_config.render.russian_roulette_chance == pytest.approx(0.8)
        assert scene_config.render.aspect == pytest.approx(800 / 600)

    def test_conventions_registered(self, scene_config: SceneConfig) -> None:
        names = {c.name for c in scene_config.conventions}
        assert "Record strides" in names
        assert "Block order" in names

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_missing_key(self, tmp_path: Path) -> None:
        path = tmp_path / "partial.yaml"
        path.write_text("camera:\n  fov_deg: 45\n", encoding="utf-8")
        with pytest.raises(ValueError, match="Missing configuration key"):
            load_config(path)

    @pytest.mark.parametrize(
        "section,key,value",
        [
            ("camera", "fov_deg", 0.0),
            ("camera", "fov_deg", 180.0),
            ("camera", "gimbal_threshold", 1.0),
            ("camera", "world_up", [0.0, 0.0, 0.0]),
            ("camera", "position", [1e-13, 0.0, 0.0]),
            ("camera", "fallback_up", [0.0, 1e-13, 0.0]),
            ("geometry", "radius_tolerance", 0.0),
            ("render", "samples_per_pixel", 0),
            ("render", "russian_roulette_chance", 1.5),
            ("render", "width", 0),
        ],
    )
    def test_invalid_values(
        self, tmp_path: Path, config_path: Path, section: str, key: str, value
    ) -> None:
        path = _write_config(tmp_path, config_path, section, key, value)
        with pytest.raises(ValueError):
            load_config(path)

    def test_log_conventions(
        self, scene_config: SceneConfig, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level("INFO", logger="render_core.constants"):
            log_conventions(scene_config)
        assert "CONVENTIONS REGISTRY" in caplog.text


class TestHashArray:
    """SHA-256 digest of buffers."""

    def test_deterministic(self) -> None:
        a = np.arange(10, dtype=np.float32)
        assert hash_array(a) == hash_array(a.copy())

    def test_sensitive_to_content(self) -> None:
        a = np.arange(10, dtype=np.float32)
        b = a.copy()
        b[3] = 99.0
        assert hash_array(a) != hash_array(b)
