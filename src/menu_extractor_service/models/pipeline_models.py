"""Pipeline state models.

These models describe an uploaded image, the progress of the two
independent asynchronous stages (theme derivation and extraction), and
the read-only snapshot of pipeline state returned to callers.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from menu_extractor_service.models.menu_models import ColorTheme, MenuDocument

MAX_IMAGE_BYTES = 10 * 1024 * 1024

SUPPORTED_MIME_TYPES = frozenset({"image/png", "image/jpeg", "image/gif", "image/webp"})


class ColorStatusEnum(str, Enum):
    """Enumeration of theme derivation states."""

    EMPTY = "empty"
    PENDING = "pending"
    READY = "ready"
    FALLBACK = "fallback"


class ExtractionStatusEnum(str, Enum):
    """Enumeration of menu extraction states."""

    EMPTY = "empty"
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


class ImageUpload(BaseModel):
    """An uploaded menu image."""

    model_config = ConfigDict(frozen=True)

    data: bytes = Field(..., description="Raw image bytes")
    mime_type: str = Field(..., description="Declared MIME type, e.g. 'image/jpeg'")
    filename: str | None = Field(None, description="Original file name, if known")

    @property
    def size(self) -> int:
        """Size of the image in bytes."""
        return len(self.data)


class PipelineSnapshot(BaseModel):
    """Read-only view of the current pipeline state."""

    model_config = ConfigDict(frozen=True)

    image_id: str | None = Field(None, description="Identity of the current image")
    color_status: ColorStatusEnum = Field(ColorStatusEnum.EMPTY, description="Theme stage")
    extraction_status: ExtractionStatusEnum = Field(
        ExtractionStatusEnum.EMPTY, description="Extraction stage"
    )
    document: MenuDocument | None = Field(None, description="Current editable document")
    theme: ColorTheme | None = Field(None, description="Derived theme, once available")
    html: str | None = Field(None, description="Rendered editable projection")
    error: str | None = Field(None, description="Dismissible blocking error message")
    advisory: str | None = Field(None, description="Transient advisory message")

    def to_wire(self) -> dict:
        """Serialize with camelCase document fields for API responses."""
        return self.model_dump(by_alias=True, mode="json")


class ExportedMenu(BaseModel):
    """Standalone HTML export and its download file name."""

    model_config = ConfigDict(frozen=True)

    filename: str
    html: str
