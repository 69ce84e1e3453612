"""Pipeline service orchestrating menu extraction and editing.

The pipeline owns the single current image, document, theme and rendered
output. Theme derivation and extraction run independently; the document is
rendered as soon as it exists, with the fallback theme until the derived
theme arrives. Ingesting a new image or resetting discards everything
derived from the previous image, and late results for an older image are
ignored.
"""

import asyncio
import logging
import time

from menu_extractor_service.adapters.base_extractor import ExtractionClient
from menu_extractor_service.adapters.base_quantizer import ColorQuantizer
from menu_extractor_service.errors import (
    ColorDerivationError,
    ExtractionFormatError,
    ExtractionServiceError,
    InputError,
)
from menu_extractor_service.ids import new_id
from menu_extractor_service.models.edit_models import DocumentEdit
from menu_extractor_service.models.menu_models import FALLBACK_THEME, ColorTheme, MenuDocument
from menu_extractor_service.models.pipeline_models import (
    MAX_IMAGE_BYTES,
    ColorStatusEnum,
    ExportedMenu,
    ExtractionStatusEnum,
    ImageUpload,
    PipelineSnapshot,
)
from menu_extractor_service.observability import traced
from menu_extractor_service.observability.metrics import (
    record_edit,
    record_export,
    record_extraction_duration,
    record_extraction_failure,
    record_extraction_success,
)
from menu_extractor_service.services import document_service
from menu_extractor_service.services.image_input import validate_upload
from menu_extractor_service.services.normalizer import normalize
from menu_extractor_service.services.renderer import (
    build_export_document,
    export_filename,
    render,
)
from menu_extractor_service.services.theme_service import (
    MAX_PALETTE_SIZE,
    derive_theme_with_status,
)

logger = logging.getLogger(__name__)


class MenuPipeline:
    """Service for turning a menu image into an editable, rendered document.

    This service coordinates image ingestion, theme derivation, the
    extraction call, normalization, document edits and rendering. All state
    changes replace whole values, so no locking is needed on the event loop.
    """

    def __init__(
        self,
        extraction_client: ExtractionClient,
        quantizer: ColorQuantizer | None,
        max_image_bytes: int = MAX_IMAGE_BYTES,
        palette_size: int = MAX_PALETTE_SIZE,
    ) -> None:
        """Initialize the MenuPipeline.

        Args:
            extraction_client: Client for the extraction service
            quantizer: Color quantizer; None always yields the fallback theme
            max_image_bytes: Maximum accepted upload size
            palette_size: Number of palette colors to derive
        """
        self.extraction_client = extraction_client
        self.quantizer = quantizer
        self.max_image_bytes = max_image_bytes
        self.palette_size = palette_size

        self._image: ImageUpload | None = None
        self._image_id: str | None = None
        self._theme_task: asyncio.Task[None] | None = None
        self._color_status = ColorStatusEnum.EMPTY
        self._extraction_status = ExtractionStatusEnum.EMPTY
        self._document: MenuDocument | None = None
        self._theme: ColorTheme | None = None
        self._html: str | None = None
        self._error: str | None = None
        self._advisory: str | None = None

    @property
    def document(self) -> MenuDocument | None:
        return self._document

    @property
    def theme(self) -> ColorTheme | None:
        return self._theme

    @property
    def current_theme(self) -> ColorTheme:
        """The derived theme, or the fallback theme while derivation is pending or failed."""
        return self._theme or FALLBACK_THEME

    @property
    def html(self) -> str | None:
        return self._html

    def snapshot(self) -> PipelineSnapshot:
        """Return a read-only view of the current state."""
        return PipelineSnapshot(
            image_id=self._image_id,
            color_status=self._color_status,
            extraction_status=self._extraction_status,
            document=self._document,
            theme=self._theme,
            html=self._html,
            error=self._error,
            advisory=self._advisory,
        )

    async def ingest_image(self, upload: ImageUpload) -> str:
        """Accept a new image and start deriving its theme.

        Everything derived from a previous image is discarded. Theme
        derivation runs in the background; use `wait_for_theme` to await it.

        Args:
            upload: The uploaded image

        Returns:
            Identity of the ingested image

        Raises:
            InputError: If the image is too large or of an unsupported type;
                the pipeline state is left unchanged
        """
        upload = validate_upload(upload, self.max_image_bytes)

        self._discard()
        self._image = upload
        self._image_id = new_id()
        self._color_status = ColorStatusEnum.PENDING

        image_id = self._image_id
        self._theme_task = asyncio.create_task(self._derive_theme(image_id, upload.data))
        logger.info(
            f"Ingested image {image_id} ({upload.mime_type}, {upload.size} bytes)"
        )
        return image_id

    async def _derive_theme(self, image_id: str, data: bytes) -> None:
        theme, used_fallback = await derive_theme_with_status(
            data, self.quantizer, self.palette_size
        )

        if image_id != self._image_id:
            logger.debug(f"Discarding theme for stale image {image_id}")
            return

        self._theme = theme
        if used_fallback:
            self._color_status = ColorStatusEnum.FALLBACK
            self._advisory = ColorDerivationError.ADVISORY
        else:
            self._color_status = ColorStatusEnum.READY
        self._rerender()

    async def wait_for_theme(self) -> ColorTheme:
        """Wait for a pending theme derivation and return the current theme."""
        task = self._theme_task
        if task is not None and not task.done():
            await asyncio.shield(task)
        return self.current_theme

    @traced("pipeline.extract")
    async def extract(self) -> MenuDocument | None:
        """Extract, normalize and render the menu of the current image.

        Returns:
            The new document, or None if the image changed while the
            extraction was in flight

        Raises:
            InputError: If no image has been ingested
            ExtractionServiceError: If the extraction service call failed
            ExtractionFormatError: If the response could not be normalized
        """
        if self._image is None or self._image_id is None:
            raise InputError("Please upload an image first.")

        image = self._image
        image_id = self._image_id
        self._extraction_status = ExtractionStatusEnum.PENDING
        self._document = None
        self._html = None
        self._error = None

        start = time.perf_counter()
        try:
            text = await self.extraction_client.extract_menu_text(image.data, image.mime_type)
            document = normalize(text)
        except (ExtractionServiceError, ExtractionFormatError) as e:
            record_extraction_failure(
                e.kind.value if isinstance(e, ExtractionServiceError) else type(e).__name__
            )
            if image_id != self._image_id:
                logger.debug(f"Ignoring extraction failure for stale image {image_id}")
                raise
            logger.error(f"Menu extraction failed for image {image_id}: {e}")
            self._extraction_status = ExtractionStatusEnum.FAILED
            self._document = None
            self._html = None
            self._error = e.user_message
            raise
        finally:
            record_extraction_duration(time.perf_counter() - start)

        if image_id != self._image_id:
            logger.debug(f"Discarding extraction result for stale image {image_id}")
            return None

        self._document = document
        self._extraction_status = ExtractionStatusEnum.READY
        self._rerender()
        record_extraction_success(document.item_count)
        logger.info(
            f"Extracted menu for image {image_id}: "
            f"{len(document.categories)} categories, {document.item_count} items"
        )
        return document

    async def process(self, upload: ImageUpload) -> PipelineSnapshot:
        """Ingest an image and extract its menu, deriving the theme concurrently.

        Args:
            upload: The uploaded image

        Returns:
            Snapshot after extraction completes
        """
        await self.ingest_image(upload)
        await self.extract()
        return self.snapshot()

    def apply_edit(self, edit: DocumentEdit) -> PipelineSnapshot:
        """Apply a document edit and re-render. Never re-extracts.

        Args:
            edit: The edit to apply

        Returns:
            Snapshot after the edit
        """
        updated = document_service.apply_edit(self._document, edit)
        if updated is not self._document:
            self._document = updated
            record_edit(edit.op)
        self._rerender()
        return self.snapshot()

    def export(self) -> ExportedMenu:
        """Build the standalone HTML document and its file name.

        Raises:
            InputError: If there is no rendered content to export
        """
        if self._document is None or self._html is None:
            raise InputError("There is no content to export.")

        record_export()
        return ExportedMenu(
            filename=export_filename(self._document.restaurant_name),
            html=build_export_document(self._document, self.current_theme),
        )

    def clear_error(self) -> None:
        """Dismiss the current error and advisory messages."""
        self._error = None
        self._advisory = None

    def reset(self) -> None:
        """Discard the image and everything derived from it."""
        self._discard()
        logger.info("Pipeline reset")

    def _discard(self) -> None:
        if self._theme_task is not None and not self._theme_task.done():
            self._theme_task.cancel()
        self._theme_task = None
        self._image = None
        self._image_id = None
        self._color_status = ColorStatusEnum.EMPTY
        self._extraction_status = ExtractionStatusEnum.EMPTY
        self._document = None
        self._theme = None
        self._html = None
        self._error = None
        self._advisory = None

    def _rerender(self) -> None:
        self._html = (
            render(self._document, self.current_theme) if self._document is not None else None
        )
