"""Backend factory for the face search service.

Creates the descriptor source for a configured backend. Backend modules
are imported lazily so that the engine and its tests do not load model
libraries unless a real backend is requested.

Usage:
    source = create_descriptor_source("dlib", config)
    source = create_descriptor_source("dlib", config, detector_model="cnn")
"""

from __future__ import annotations

from typing import Any, Literal

from face_search.config import Config
from face_search.interfaces import DescriptorSource
from face_search.logging_config import get_logger

logger = get_logger(__name__)

# Backend type alias
BackendType = Literal["dlib"]


def create_descriptor_source(
    backend_type: BackendType = "dlib",
    config: Config | None = None,
    **overrides: Any,
) -> DescriptorSource:
    """Create a descriptor source for the specified backend.

    Args:
        backend_type: Backend to use (currently only "dlib")
        config: Configuration object. If None, loads from .env
        **overrides: Keyword arguments that take precedence over config
                     values (detector_model, embedder_model, upsample, num_jitters)

    Returns:
        DescriptorSource instance.

    Raises:
        ValueError: If the backend is unknown.

    Example:
        >>> from face_search.config import get_config
        >>> source = create_descriptor_source("dlib", get_config())
    """
    if backend_type != "dlib":
        raise ValueError(
            f"Unknown backend: '{backend_type}'. Supported backends: 'dlib'"
        )

    if config is None:
        from face_search.config import get_config
        config = get_config()

    return _create_dlib_source(config, **overrides)


def _create_dlib_source(config: Config, **overrides: Any) -> DescriptorSource:
    """Create the dlib descriptor source (face_recognition)."""
    from face_search.backends.dlib.descriptor_source import DlibDescriptorSource

    options = {
        "detector_model": config.detector_model,
        "embedder_model": config.embedder_model,
        "upsample": config.upsample,
        "num_jitters": config.num_jitters,
    }
    options.update(overrides)

    logger.info(f"Creating dlib backend (detector={options['detector_model']})...")
    return DlibDescriptorSource(**options)
