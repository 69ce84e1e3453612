"""Gemini extraction client.

Sends the menu image and the instruction prompt to a Gemini model through
the google-genai SDK and maps upstream failures onto
ExtractionServiceErrorKind.
"""

import logging

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from menu_extractor_service.adapters.base_extractor import EXTRACTION_PROMPT, ExtractionClient
from menu_extractor_service.errors import ExtractionServiceError, ExtractionServiceErrorKind
from menu_extractor_service.observability import traced

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"


def classify_service_error(error: Exception) -> ExtractionServiceError:
    """Map an upstream exception to an ExtractionServiceError.

    Args:
        error: Exception raised by the SDK or the transport

    Returns:
        ExtractionServiceError with the matching kind
    """
    message = getattr(error, "message", None) or str(error) or type(error).__name__
    status = str(getattr(error, "status", "") or "")
    code = getattr(error, "code", None)
    lowered = message.lower()

    if "api key not valid" in lowered or "api_key_invalid" in lowered:
        return ExtractionServiceError(message, kind=ExtractionServiceErrorKind.INVALID_CREDENTIALS)
    if "permission denied" in lowered or status == "PERMISSION_DENIED" or code == 403:
        return ExtractionServiceError(message, kind=ExtractionServiceErrorKind.PERMISSION_DENIED)
    return ExtractionServiceError(message, kind=ExtractionServiceErrorKind.GENERIC)


def _blocked_error(response: types.GenerateContentResponse) -> ExtractionServiceError | None:
    feedback = response.prompt_feedback
    if feedback is None or feedback.block_reason is None:
        return None

    reason = getattr(feedback.block_reason, "value", None) or str(feedback.block_reason)
    return ExtractionServiceError(
        f"request blocked: {reason}",
        kind=ExtractionServiceErrorKind.BLOCKED,
        block_reason=reason,
        block_message=feedback.block_reason_message,
    )


class GeminiExtractionClient(ExtractionClient):
    """Extraction client backed by the Gemini API."""

    def __init__(self, api_key: str | None, model: str = DEFAULT_MODEL) -> None:
        """Initialize the Gemini client.

        Args:
            api_key: Gemini API key; a missing key fails each extraction
                with a missing-credentials error
            model: Gemini model name
        """
        self.api_key = api_key
        self.model = model
        self._client: genai.Client | None = None

    def _get_client(self) -> genai.Client:
        if not self.api_key:
            raise ExtractionServiceError(
                "Gemini API key is not configured",
                kind=ExtractionServiceErrorKind.MISSING_CREDENTIALS,
            )
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    @traced("gemini.extract_menu_text")
    async def extract_menu_text(self, image_bytes: bytes, mime_type: str) -> str:
        """Send the image to Gemini and return the raw JSON text.

        Args:
            image_bytes: Raw image bytes
            mime_type: MIME type of the image

        Returns:
            The model's response text

        Raises:
            ExtractionServiceError: On missing or invalid credentials, permission
                errors, safety blocks, empty responses or any other upstream failure
        """
        client = self._get_client()

        try:
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=[
                    types.Part.from_text(text=EXTRACTION_PROMPT),
                    types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
                ],
                config=types.GenerateContentConfig(response_mime_type="application/json"),
            )
        except genai_errors.APIError as e:
            logger.error(f"Gemini API error ({e.code}): {e.message}")
            raise classify_service_error(e) from e
        except Exception as e:
            logger.error(f"Gemini request failed: {e}")
            raise classify_service_error(e) from e

        blocked = _blocked_error(response)
        if blocked is not None:
            logger.warning(f"Gemini blocked the request: {blocked.block_reason}")
            raise blocked

        text = response.text
        if not text:
            raise ExtractionServiceError(
                "empty response from Gemini", kind=ExtractionServiceErrorKind.GENERIC
            )

        logger.info(f"Received {len(text)} characters from Gemini model {self.model}")
        return text
