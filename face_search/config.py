"""Configuration management for the face search service.

This module loads configuration from environment variables (.env file) and
provides a centralized Config class for accessing application settings.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

VALID_BACKENDS = ["dlib"]
VALID_DETECTOR_MODELS = ["hog", "cnn"]
VALID_EMBEDDER_MODELS = ["large", "small"]
VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@dataclass
class Config:
    """Application configuration loaded from environment variables.

    Attributes:
        image_dir: Directory holding the searchable image corpus
        thresh: Euclidean distance threshold; pairs strictly below it match
        backend: Descriptor backend name
        detector_model: dlib detector ("hog" or "cnn")
        embedder_model: dlib landmark/encoding model ("large" or "small")
        upsample: Number of times to upsample before detection
        num_jitters: Re-samples per face when computing a descriptor
        max_workers: Candidate evaluation pool size (1 = sequential)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        host: HTTP bind address
        port: HTTP port
    """

    image_dir: Path
    thresh: float
    backend: str
    detector_model: str
    embedder_model: str
    upsample: int
    num_jitters: int
    max_workers: int
    log_level: str
    host: str
    port: int

    @classmethod
    def from_env(cls) -> Config:
        """Load configuration from environment variables.

        Returns:
            Config instance with values from environment or defaults.

        Raises:
            ValueError: If environment variables are invalid.
        """
        # Get project root (parent of face_search/)
        project_root = Path(__file__).parent.parent

        image_dir = Path(os.getenv("IMAGE_DIR", str(project_root / "images")))

        # Match threshold (Euclidean distance, dlib scale)
        thresh = float(os.getenv("THRESH", "0.5"))
        if not (math.isfinite(thresh) and thresh > 0.0):
            raise ValueError(f"THRESH must be a finite number > 0, got {thresh}")

        backend = os.getenv("BACKEND", "dlib").lower()
        if backend not in VALID_BACKENDS:
            raise ValueError(f"BACKEND must be one of {VALID_BACKENDS}, got {backend}")

        detector_model = os.getenv("DETECTOR_MODEL", "hog").lower()
        if detector_model not in VALID_DETECTOR_MODELS:
            raise ValueError(
                f"DETECTOR_MODEL must be one of {VALID_DETECTOR_MODELS}, "
                f"got {detector_model}"
            )

        embedder_model = os.getenv("EMBEDDER_MODEL", "large").lower()
        if embedder_model not in VALID_EMBEDDER_MODELS:
            raise ValueError(
                f"EMBEDDER_MODEL must be one of {VALID_EMBEDDER_MODELS}, "
                f"got {embedder_model}"
            )

        upsample = int(os.getenv("UPSAMPLE", "1"))
        if upsample < 0:
            raise ValueError(f"UPSAMPLE must be >= 0, got {upsample}")

        num_jitters = int(os.getenv("NUM_JITTERS", "1"))
        if num_jitters < 1:
            raise ValueError(f"NUM_JITTERS must be >= 1, got {num_jitters}")

        max_workers = int(os.getenv("MAX_WORKERS", "1"))
        if max_workers < 1:
            raise ValueError(f"MAX_WORKERS must be >= 1, got {max_workers}")

        log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        if log_level not in VALID_LOG_LEVELS:
            raise ValueError(
                f"LOG_LEVEL must be one of {VALID_LOG_LEVELS}, got {log_level}"
            )

        host = os.getenv("HOST", "0.0.0.0")
        port = int(os.getenv("PORT", "8000"))
        if not 1 <= port <= 65535:
            raise ValueError(f"PORT must be between 1 and 65535, got {port}")

        return cls(
            image_dir=image_dir,
            thresh=thresh,
            backend=backend,
            detector_model=detector_model,
            embedder_model=embedder_model,
            upsample=upsample,
            num_jitters=num_jitters,
            max_workers=max_workers,
            log_level=log_level,
            host=host,
            port=port,
        )

    def __repr__(self) -> str:
        """Return string representation of config."""
        return (
            f"Config(\n"
            f"  Images: {self.image_dir},\n"
            f"  Threshold: {self.thresh},\n"
            f"  Backend: {self.backend} "
            f"({self.detector_model}/{self.embedder_model}),\n"
            f"  Upsample: {self.upsample},\n"
            f"  Jitters: {self.num_jitters},\n"
            f"  Workers: {self.max_workers},\n"
            f"  Log Level: {self.log_level},\n"
            f"  Bind: {self.host}:{self.port}\n"
            f")"
        )


# Global config instance (lazy-loaded)
_config: Config | None = None


def get_config() -> Config:
    """Get global config instance (singleton pattern).

    Returns:
        Config instance loaded from environment.
    """
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config
