"""Face Search API

Upload a photo and get back every stored image that contains a matching
face, ranked by similarity.

Endpoints:
- POST /search - Search the image corpus with an uploaded photo
- GET /health - Service status
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, File, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from face_search import __version__
from face_search.backends import create_descriptor_source
from face_search.config import Config, get_config
from face_search.corpus import DirectoryCorpus
from face_search.errors import QueryDecodeError
from face_search.logging_config import get_logger
from face_search.schemas import ErrorResponse, SearchResponse
from face_search.services.search import SearchService

logger = get_logger(__name__)

API_TITLE = "Face Search API"


def build_service(config: Config) -> SearchService:
    """Build the search service from configuration."""
    return SearchService(
        descriptor_source=create_descriptor_source(config.backend, config),
        corpus=DirectoryCorpus(config.image_dir),
        threshold=config.thresh,
        max_workers=config.max_workers,
    )


def _error(status_code: int, error: str, details: Optional[str] = None) -> JSONResponse:
    body = ErrorResponse(error=error, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def create_app(
    service: Optional[SearchService] = None,
    config: Optional[Config] = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        service: Pre-built search service. If None, one is built from
                 config when the application starts.
        config: Configuration. If None, loads from .env

    Returns:
        FastAPI application.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events."""
        logger.info(f"Starting {API_TITLE}...")

        if app.state.service is None:
            app.state.service = build_service(config or get_config())

        app.state.service.startup()
        logger.info(f"Serving {app.state.service}")
        yield

        app.state.service.shutdown()
        logger.info(f"Shutting down {API_TITLE}...")

    app = FastAPI(title=API_TITLE, version=__version__, lifespan=lifespan)
    app.state.service = service

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        current: Optional[SearchService] = app.state.service
        if current is None:
            return {"status": "starting"}

        return {
            "status": "ok",
            "threshold": current.threshold,
            "backend": repr(current.descriptor_source),
        }

    @app.post(
        "/search",
        response_model=SearchResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Missing or undecodable image"},
            500: {"model": ErrorResponse, "description": "Face matching failed"},
        },
        summary="Search stored images for a matching face",
    )
    async def search(image: Optional[UploadFile] = File(None, description="Query image")):
        """Match every face in the upload against the stored images."""
        current: Optional[SearchService] = app.state.service
        if current is None:
            return _error(503, "Search service is not ready")

        if image is None:
            return _error(400, "No image uploaded")

        try:
            image_bytes = await image.read()
        except Exception as e:
            return _error(400, "Failed to read image", str(e))

        if not image_bytes:
            return _error(400, "No image uploaded")

        try:
            outcome = await run_in_threadpool(current.search, image_bytes)
            # Render inside the try so an unencodable field maps to the 500 body
            return JSONResponse(content=SearchResponse.from_outcome(outcome).to_payload())
        except QueryDecodeError as e:
            logger.warning(f"Rejected upload {image.filename!r}: {e}")
            return _error(400, "Could not decode uploaded image", str(e))
        except Exception as e:
            logger.error(f"Search error: {e}", exc_info=True)
            return _error(500, "Face matching failed", str(e))

    return app


if __name__ == "__main__":
    import uvicorn

    from face_search.logging_config import setup_logging

    settings = get_config()
    setup_logging("face_search", level=settings.log_level)
    uvicorn.run(create_app(config=settings), host=settings.host, port=settings.port)
