"""Base interface for menu extraction services.

An extraction client sends a menu image together with a fixed instruction
prompt and returns the raw response text. Parsing and repair of that text
belong to the normalizer, not to the client.
"""

from abc import ABC, abstractmethod

EXTRACTION_PROMPT = """Analyze the image of this restaurant menu. Extract the restaurant name, the categories (for example Starters, Main Courses, Desserts, Drinks), and for each category the list of dishes with their name, a short description if available, and their price.
Structure the output STRICTLY in the following JSON format:
{
  "restaurantName": "string (restaurant name)",
  "categories": [
    {
      "categoryName": "string (category name, e.g. Starters)",
      "items": [
        {
          "name": "string (dish name)",
          "description": "string (dish description, MUST be an empty string \\"\\" if not available, NOT null or missing)",
          "price": "string (dish price, e.g. €12.50 or $15)"
        }
      ]
    }
  ]
}
Make sure the description is an empty string ("") if it is not explicitly present on the menu.
Do NOT return any explanatory text, any comments, or any markdown (such as ```json) outside the JSON object itself. The response must be ONLY the valid JSON object."""


class ExtractionClient(ABC):
    """Abstract base class for extraction service clients.

    Implementations raise ExtractionServiceError for upstream failures,
    mapped to a failure kind so callers can show a specific message.
    """

    @abstractmethod
    async def extract_menu_text(self, image_bytes: bytes, mime_type: str) -> str:
        """Request structured menu text for an image.

        Args:
            image_bytes: Raw image bytes
            mime_type: MIME type of the image

        Returns:
            Raw response text, expected to be the JSON described by EXTRACTION_PROMPT

        Raises:
            ExtractionServiceError: On credential, permission, safety-block or
                other upstream failures
        """
        pass
