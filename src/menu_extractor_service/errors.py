"""Error taxonomy for the menu extraction pipeline.

Blocking errors (input, format, upstream service) abort the current
operation and carry a user-facing message. Color derivation errors are
recovered inside the theme deriver and never reach callers.
"""

from enum import Enum

SNIPPET_LENGTH = 500


class MenuExtractorError(Exception):
    """Base class for all pipeline errors."""

    @property
    def user_message(self) -> str:
        """Human-readable message suitable for an error notification."""
        return str(self)


class InputError(MenuExtractorError):
    """Rejected input: oversized or unsupported image, or nothing to act on."""


class ExtractionFormatError(MenuExtractorError):
    """The extraction response could not be parsed or has an invalid top-level shape.

    Attributes:
        snippet: The first characters of the offending text, for diagnostics
    """

    def __init__(self, message: str, snippet: str | None = None) -> None:
        super().__init__(message)
        self.snippet = snippet[:SNIPPET_LENGTH] if snippet is not None else None

    @property
    def user_message(self) -> str:
        if self.snippet:
            return f"Could not parse the menu data returned by the server: {self}. Received: {self.snippet}"
        return f"Could not parse the menu data returned by the server: {self}"


class ExtractionServiceErrorKind(str, Enum):
    """Upstream extraction failure categories."""

    MISSING_CREDENTIALS = "missing_credentials"
    INVALID_CREDENTIALS = "invalid_credentials"
    PERMISSION_DENIED = "permission_denied"
    BLOCKED = "blocked"
    GENERIC = "generic"


class ExtractionServiceError(MenuExtractorError):
    """The extraction service call failed.

    Attributes:
        kind: Failure category used to pick the user-facing message
        block_reason: Safety block reason reported by the service, if blocked
        block_message: Safety block message reported by the service, if any
    """

    def __init__(
        self,
        message: str,
        kind: ExtractionServiceErrorKind = ExtractionServiceErrorKind.GENERIC,
        block_reason: str | None = None,
        block_message: str | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.block_reason = block_reason
        self.block_message = block_message

    @property
    def user_message(self) -> str:
        if self.kind == ExtractionServiceErrorKind.MISSING_CREDENTIALS:
            return "The extraction service API key is not configured."
        if self.kind == ExtractionServiceErrorKind.INVALID_CREDENTIALS:
            return "Extraction service error: invalid API key. Please check your API key."
        if self.kind == ExtractionServiceErrorKind.PERMISSION_DENIED:
            return (
                "Extraction service error: permission denied. "
                "Check your API key and the model permissions."
            )
        if self.kind == ExtractionServiceErrorKind.BLOCKED:
            message = self.block_message or "No specific message."
            return (
                f"The request was blocked by the extraction service. "
                f"Reason: {self.block_reason}. Message: {message}"
            )
        return f"Extraction service error: {self}"


class ColorDerivationError(MenuExtractorError):
    """Color theme derivation failed; always downgraded to the fallback theme."""

    ADVISORY = "Could not extract colors from the image. Using default colors."

    @property
    def user_message(self) -> str:
        return self.ADVISORY
