"""Base interface for color quantization backends.

The quantizer is a black box: given a fully decoded bitmap it returns a
dominant color and a small palette, or raises. The theme deriver owns the
fallback policy, so implementations are free to let exceptions escape.
"""

from abc import ABC, abstractmethod

from PIL import Image

RGB = tuple[int, int, int]


class ColorQuantizer(ABC):
    """Abstract base class for color quantizers."""

    @abstractmethod
    def quantize(self, image: Image.Image, color_count: int) -> tuple[RGB, list[RGB]]:
        """Compute the dominant color and a palette for an image.

        This is a blocking call; the theme deriver runs it off the event loop.

        Args:
            image: A fully decoded image
            color_count: Requested palette size

        Returns:
            Tuple of (dominant RGB triple, palette RGB triples)
        """
        pass
