"""Main application entry point for the menu extractor service.

This module provides the FastAPI application factory and configuration
for running the service locally or in production.
"""

import logging
import os

from fastapi import FastAPI

from menu_extractor_service.adapters.colorthief_quantizer import ColorThiefQuantizer
from menu_extractor_service.adapters.gemini_extractor import DEFAULT_MODEL, GeminiExtractionClient
from menu_extractor_service.handlers.api_handler import create_app
from menu_extractor_service.models.pipeline_models import MAX_IMAGE_BYTES
from menu_extractor_service.observability import configure_logging, setup_observability
from menu_extractor_service.services.pipeline_service import MenuPipeline
from menu_extractor_service.services.theme_service import MAX_PALETTE_SIZE

logger = logging.getLogger(__name__)


def create_extraction_client() -> GeminiExtractionClient:
    """Create the Gemini extraction client from environment variables.

    A missing API key does not prevent startup; extraction requests then
    fail with a missing-credentials error.

    Returns:
        Configured GeminiExtractionClient
    """
    api_key = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")
    model = os.getenv("GEMINI_MODEL", DEFAULT_MODEL)

    if not api_key:
        logger.warning("GEMINI_API_KEY not configured - menu extraction will fail")

    return GeminiExtractionClient(api_key=api_key, model=model)


def create_pipeline() -> MenuPipeline:
    """Create the menu pipeline with its extraction client and quantizer.

    Returns:
        Configured MenuPipeline
    """
    max_image_bytes = int(os.getenv("MAX_IMAGE_BYTES", str(MAX_IMAGE_BYTES)))
    palette_size = int(os.getenv("PALETTE_SIZE", str(MAX_PALETTE_SIZE)))

    pipeline = MenuPipeline(
        extraction_client=create_extraction_client(),
        quantizer=ColorThiefQuantizer(),
        max_image_bytes=max_image_bytes,
        palette_size=palette_size,
    )
    logger.info(
        f"Menu pipeline configured - max image size: {max_image_bytes} bytes, "
        f"palette size: {palette_size}"
    )
    return pipeline


def create_application() -> FastAPI:
    """Create and configure the FastAPI application with all dependencies.

    This factory function:
    1. Configures logging
    2. Creates the extraction client and the pipeline
    3. Creates the FastAPI app with the menu endpoints
    4. Sets up observability

    Returns:
        Configured FastAPI application instance
    """
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))

    logger.info("Initializing menu extractor service...")

    app = create_app(pipeline=create_pipeline())
    setup_observability(app)

    logger.info("Menu extractor service initialized successfully")
    return app


# The application is not created during test collection
if os.getenv("ENVIRONMENT") != "test":  # noqa: SIM108
    app = create_application()
else:
    app = FastAPI()


if __name__ == "__main__":
    """Run the application with uvicorn when executed directly."""
    import uvicorn

    port = int(os.getenv("PORT", "8001"))
    host = os.getenv("HOST", "0.0.0.0")

    logger.info(f"Starting development server on {host}:{port}")
    logger.info(f"API documentation available at http://{host}:{port}/docs")

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=True,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
