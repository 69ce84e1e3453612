"""ColorThief color quantizer.

ColorThief runs modified median cut quantization over the pixels of an
image it opens itself, so the decoded bitmap is handed over as an
in-memory PNG.
"""

import io
import logging

from colorthief import ColorThief
from PIL import Image

from menu_extractor_service.adapters.base_quantizer import RGB, ColorQuantizer

logger = logging.getLogger(__name__)


class ColorThiefQuantizer(ColorQuantizer):
    """Quantizer backed by the colorthief library."""

    def __init__(self, quality: int = 10) -> None:
        """Initialize the quantizer.

        Args:
            quality: Pixel sampling step; 1 is the most accurate and the slowest
        """
        self.quality = quality

    def quantize(self, image: Image.Image, color_count: int) -> tuple[RGB, list[RGB]]:
        """Compute the dominant color and palette with ColorThief.

        Args:
            image: A fully decoded image
            color_count: Requested palette size (ColorThief may return one more or less)

        Returns:
            Tuple of (dominant RGB triple, palette RGB triples)
        """
        buffer = io.BytesIO()
        image.convert("RGBA").save(buffer, format="PNG")
        buffer.seek(0)

        color_thief = ColorThief(buffer)
        dominant = color_thief.get_color(quality=self.quality)
        palette = color_thief.get_palette(color_count=color_count, quality=self.quality)
        logger.debug(f"ColorThief returned dominant {dominant} and {len(palette)} palette colors")
        return tuple(dominant), [tuple(color) for color in palette]  # type: ignore[return-value]
