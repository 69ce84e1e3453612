"""FastAPI application for the menu extraction session endpoints."""

import logging
from typing import Any
from urllib.parse import quote

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.responses import HTMLResponse
from pydantic import BaseModel

from menu_extractor_service.errors import (
    ExtractionFormatError,
    ExtractionServiceError,
    InputError,
)
from menu_extractor_service.models.edit_models import DocumentEditRequest
from menu_extractor_service.models.pipeline_models import ImageUpload
from menu_extractor_service.services.pipeline_service import MenuPipeline

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str


class ImageIngestResponse(BaseModel):
    """Response model for image uploads."""

    image_id: str
    filename: str | None = None
    size: int


class ClipboardResponse(BaseModel):
    """Response model for the clipboard copy target."""

    filename: str
    html: str


def _to_http_exception(error: Exception) -> HTTPException:
    """Map a pipeline error to an HTTP error with a user-facing detail."""
    if isinstance(error, InputError):
        return HTTPException(status_code=400, detail=error.user_message)
    if isinstance(error, ExtractionFormatError):
        return HTTPException(status_code=422, detail=error.user_message)
    if isinstance(error, ExtractionServiceError):
        return HTTPException(
            status_code=502,
            detail={"kind": error.kind.value, "message": error.user_message},
        )
    return HTTPException(status_code=500, detail="Internal server error")


def create_app(pipeline: MenuPipeline) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        pipeline: The menu pipeline owning the session state

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Menu Extractor API",
        description="Turn a photographed menu into an editable document and export it as HTML",
        version="1.0.0",
    )

    app.state.pipeline = pipeline

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="healthy")

    @app.post("/menu/image", response_model=ImageIngestResponse, tags=["Menu"])
    async def upload_image(file: UploadFile = File(...)) -> ImageIngestResponse:
        """Upload a new menu image, discarding any previous menu.

        Args:
            file: PNG, JPEG, GIF or WEBP image up to 10 MB

        Returns:
            Identity of the ingested image
        """
        data = await file.read()
        upload = ImageUpload(
            data=data,
            mime_type=file.content_type or "",
            filename=file.filename,
        )
        try:
            image_id = await app.state.pipeline.ingest_image(upload)
        except InputError as e:
            logger.warning(f"Rejected image upload {file.filename}: {e}")
            raise _to_http_exception(e) from e

        return ImageIngestResponse(
            image_id=image_id,
            filename=file.filename,
            size=len(data),
        )

    @app.post("/menu/extract", tags=["Menu"])
    async def extract_menu() -> dict[str, Any]:
        """Run extraction on the current image and return the new state."""
        try:
            await app.state.pipeline.extract()
        except (InputError, ExtractionFormatError, ExtractionServiceError) as e:
            raise _to_http_exception(e) from e
        return app.state.pipeline.snapshot().to_wire()

    @app.get("/menu", tags=["Menu"])
    async def get_menu() -> dict[str, Any]:
        """Return the current document, theme, statuses and rendered HTML."""
        return app.state.pipeline.snapshot().to_wire()

    @app.post("/menu/edits", tags=["Menu"])
    async def apply_edit(request: DocumentEditRequest) -> dict[str, Any]:
        """Apply a document edit and return the re-rendered state."""
        return app.state.pipeline.apply_edit(request.root).to_wire()

    @app.get("/menu/export", response_class=HTMLResponse, tags=["Export"])
    async def download_export() -> HTMLResponse:
        """Download the standalone HTML menu."""
        try:
            exported = app.state.pipeline.export()
        except InputError as e:
            raise HTTPException(status_code=404, detail=e.user_message) from e

        return HTMLResponse(
            content=exported.html,
            headers={
                "Content-Disposition": f"attachment; filename*=UTF-8''{quote(exported.filename)}"
            },
        )

    @app.get("/menu/export/clipboard", response_model=ClipboardResponse, tags=["Export"])
    async def clipboard_export() -> ClipboardResponse:
        """Return the standalone HTML menu as a copy target."""
        try:
            exported = app.state.pipeline.export()
        except InputError as e:
            raise HTTPException(status_code=404, detail=e.user_message) from e
        return ClipboardResponse(filename=exported.filename, html=exported.html)

    @app.delete("/menu/error", status_code=204, tags=["Menu"])
    async def dismiss_error() -> None:
        """Dismiss the current error and advisory messages."""
        app.state.pipeline.clear_error()

    @app.delete("/menu", status_code=204, tags=["Menu"])
    async def reset_menu() -> None:
        """Discard the image, document, theme and rendered output."""
        app.state.pipeline.reset()

    return app
