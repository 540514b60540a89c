"""Unit tests for environment configuration."""

from __future__ import annotations

from pathlib import Path

import pytest

from face_search.config import Config

ENV_VARS = [
    "IMAGE_DIR",
    "THRESH",
    "BACKEND",
    "DETECTOR_MODEL",
    "EMBEDDER_MODEL",
    "UPSAMPLE",
    "NUM_JITTERS",
    "MAX_WORKERS",
    "LOG_LEVEL",
    "HOST",
    "PORT",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Remove all face search variables from the environment."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    """Test default configuration values."""
    config = Config.from_env()

    assert config.thresh == 0.5
    assert config.backend == "dlib"
    assert config.detector_model == "hog"
    assert config.embedder_model == "large"
    assert config.upsample == 1
    assert config.num_jitters == 1
    assert config.max_workers == 1
    assert config.log_level == "INFO"
    assert config.port == 8000
    assert config.image_dir.name == "images"


def test_overrides(clean_env, tmp_path):
    """Test values read from the environment."""
    clean_env.setenv("IMAGE_DIR", str(tmp_path))
    clean_env.setenv("THRESH", "0.45")
    clean_env.setenv("DETECTOR_MODEL", "CNN")
    clean_env.setenv("MAX_WORKERS", "4")
    clean_env.setenv("LOG_LEVEL", "debug")

    config = Config.from_env()

    assert config.image_dir == Path(tmp_path)
    assert config.thresh == 0.45
    assert config.detector_model == "cnn"
    assert config.max_workers == 4
    assert config.log_level == "DEBUG"
    assert "Threshold: 0.45" in repr(config)


@pytest.mark.parametrize(
    "name, value",
    [
        ("THRESH", "0"),
        ("THRESH", "-1"),
        ("THRESH", "nan"),
        ("THRESH", "inf"),
        ("BACKEND", "insightface"),
        ("DETECTOR_MODEL", "mtcnn"),
        ("EMBEDDER_MODEL", "huge"),
        ("UPSAMPLE", "-1"),
        ("NUM_JITTERS", "0"),
        ("MAX_WORKERS", "0"),
        ("LOG_LEVEL", "LOUD"),
        ("PORT", "70000"),
    ],
)
def test_invalid_values(clean_env, name, value):
    """Test that invalid values raise ValueError naming the variable."""
    clean_env.setenv(name, value)

    with pytest.raises(ValueError, match=name):
        Config.from_env()
