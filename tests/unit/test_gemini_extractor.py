"""Unit tests for the Gemini extraction client and error taxonomy."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from menu_extractor_service.adapters.base_extractor import EXTRACTION_PROMPT, ExtractionClient
from menu_extractor_service.adapters.gemini_extractor import (
    DEFAULT_MODEL,
    GeminiExtractionClient,
    classify_service_error,
)
from menu_extractor_service.errors import (
    ColorDerivationError,
    ExtractionServiceError,
    ExtractionServiceErrorKind,
)


class _FakeAPIError(Exception):
    """Stand-in for SDK errors exposing code, status and message."""

    def __init__(self, code: int, status: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.status = status
        self.message = message


def _response(text: str | None, block_reason: str | None = None) -> MagicMock:
    response = MagicMock()
    response.text = text
    if block_reason is None:
        response.prompt_feedback = None
    else:
        response.prompt_feedback = MagicMock()
        response.prompt_feedback.block_reason = MagicMock(value=block_reason)
        response.prompt_feedback.block_reason_message = "Unsafe content"
    return response


@pytest.mark.unit
class TestClassifyServiceError:
    """Test suite for upstream error classification."""

    def test_invalid_api_key(self) -> None:
        """Test that invalid key messages map to INVALID_CREDENTIALS."""
        error = classify_service_error(
            _FakeAPIError(400, "INVALID_ARGUMENT", "API key not valid. Please pass a valid API key.")
        )

        assert error.kind == ExtractionServiceErrorKind.INVALID_CREDENTIALS

    def test_permission_denied(self) -> None:
        """Test that 403 errors map to PERMISSION_DENIED."""
        error = classify_service_error(_FakeAPIError(403, "PERMISSION_DENIED", "Forbidden"))

        assert error.kind == ExtractionServiceErrorKind.PERMISSION_DENIED

    def test_permission_denied_by_message(self) -> None:
        """Test that a 'permission denied' message is recognised without a status."""
        error = classify_service_error(RuntimeError("permission denied for model"))

        assert error.kind == ExtractionServiceErrorKind.PERMISSION_DENIED

    def test_generic_failure(self) -> None:
        """Test that other failures map to GENERIC and keep the message."""
        error = classify_service_error(_FakeAPIError(500, "INTERNAL", "backend unavailable"))

        assert error.kind == ExtractionServiceErrorKind.GENERIC
        assert "backend unavailable" in error.user_message


@pytest.mark.unit
class TestUserMessages:
    """Test suite for user-facing error messages."""

    def test_each_kind_has_a_distinct_message(self) -> None:
        """Test that every failure kind is shown differently."""
        messages = {
            ExtractionServiceError("boom", kind=kind).user_message
            for kind in ExtractionServiceErrorKind
        }

        assert len(messages) == len(ExtractionServiceErrorKind)

    def test_blocked_message_includes_reason(self) -> None:
        """Test that a safety block message includes reason and message."""
        error = ExtractionServiceError(
            "blocked",
            kind=ExtractionServiceErrorKind.BLOCKED,
            block_reason="SAFETY",
            block_message="Unsafe content",
        )

        assert "SAFETY" in error.user_message
        assert "Unsafe content" in error.user_message

    def test_color_derivation_advisory(self) -> None:
        """Test the advisory text for color derivation failures."""
        assert ColorDerivationError("x").user_message == ColorDerivationError.ADVISORY


@pytest.mark.unit
class TestGeminiExtractionClient:
    """Test suite for GeminiExtractionClient."""

    @pytest.fixture
    def mock_genai_client(self) -> MagicMock:
        """Create a mock genai.Client with an async generate_content."""
        client = MagicMock()
        client.aio.models.generate_content = AsyncMock(
            return_value=_response('{"restaurantName": "A", "categories": []}')
        )
        return client

    def test_is_an_extraction_client(self) -> None:
        """Test the default configuration."""
        client = GeminiExtractionClient(api_key="key")

        assert isinstance(client, ExtractionClient)
        assert client.model == DEFAULT_MODEL

    @pytest.mark.asyncio
    async def test_missing_api_key(self) -> None:
        """Test that a missing key fails with MISSING_CREDENTIALS."""
        client = GeminiExtractionClient(api_key=None)

        with pytest.raises(ExtractionServiceError) as exc_info:
            await client.extract_menu_text(b"img", "image/png")

        assert exc_info.value.kind == ExtractionServiceErrorKind.MISSING_CREDENTIALS

    @pytest.mark.asyncio
    async def test_returns_response_text(self, mock_genai_client: MagicMock) -> None:
        """Test that the prompt and image are sent and the text returned."""
        with patch(
            "menu_extractor_service.adapters.gemini_extractor.genai.Client",
            return_value=mock_genai_client,
        ) as mock_client_cls:
            client = GeminiExtractionClient(api_key="key", model="gemini-test")
            text = await client.extract_menu_text(b"img-bytes", "image/jpeg")

        assert text == '{"restaurantName": "A", "categories": []}'
        mock_client_cls.assert_called_once_with(api_key="key")

        kwargs = mock_genai_client.aio.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-test"
        prompt_part, image_part = kwargs["contents"]
        assert prompt_part.text == EXTRACTION_PROMPT
        assert image_part.inline_data.data == b"img-bytes"
        assert image_part.inline_data.mime_type == "image/jpeg"
        assert kwargs["config"].response_mime_type == "application/json"

    @pytest.mark.asyncio
    async def test_blocked_response(self, mock_genai_client: MagicMock) -> None:
        """Test that a safety block raises BLOCKED with the reason."""
        mock_genai_client.aio.models.generate_content.return_value = _response(
            None, block_reason="SAFETY"
        )

        with patch(
            "menu_extractor_service.adapters.gemini_extractor.genai.Client",
            return_value=mock_genai_client,
        ):
            client = GeminiExtractionClient(api_key="key")
            with pytest.raises(ExtractionServiceError) as exc_info:
                await client.extract_menu_text(b"img", "image/png")

        assert exc_info.value.kind == ExtractionServiceErrorKind.BLOCKED
        assert exc_info.value.block_reason == "SAFETY"
        assert exc_info.value.block_message == "Unsafe content"

    @pytest.mark.asyncio
    async def test_empty_response(self, mock_genai_client: MagicMock) -> None:
        """Test that an empty response is a generic failure."""
        mock_genai_client.aio.models.generate_content.return_value = _response("")

        with patch(
            "menu_extractor_service.adapters.gemini_extractor.genai.Client",
            return_value=mock_genai_client,
        ):
            client = GeminiExtractionClient(api_key="key")
            with pytest.raises(ExtractionServiceError) as exc_info:
                await client.extract_menu_text(b"img", "image/png")

        assert exc_info.value.kind == ExtractionServiceErrorKind.GENERIC

    @pytest.mark.asyncio
    async def test_transport_error_is_classified(self, mock_genai_client: MagicMock) -> None:
        """Test that SDK exceptions are mapped to ExtractionServiceError."""
        mock_genai_client.aio.models.generate_content.side_effect = _FakeAPIError(
            400, "INVALID_ARGUMENT", "API key not valid."
        )

        with patch(
            "menu_extractor_service.adapters.gemini_extractor.genai.Client",
            return_value=mock_genai_client,
        ):
            client = GeminiExtractionClient(api_key="bad")
            with pytest.raises(ExtractionServiceError) as exc_info:
                await client.extract_menu_text(b"img", "image/png")

        assert exc_info.value.kind == ExtractionServiceErrorKind.INVALID_CREDENTIALS

    @pytest.mark.asyncio
    async def test_client_is_reused(self, mock_genai_client: MagicMock) -> None:
        """Test that the SDK client is created once per extraction client."""
        with patch(
            "menu_extractor_service.adapters.gemini_extractor.genai.Client",
            return_value=mock_genai_client,
        ) as mock_client_cls:
            client = GeminiExtractionClient(api_key="key")
            await client.extract_menu_text(b"img", "image/png")
            await client.extract_menu_text(b"img", "image/png")

        mock_client_cls.assert_called_once()
