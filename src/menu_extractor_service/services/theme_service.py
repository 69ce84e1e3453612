"""Color theme derivation.

The quantizer itself is a black box; this module owns waiting for the
image to decode, converting RGB triples to hex, capping the palette, and
the fallback policy. Theme derivation never fails: every error resolves
to FALLBACK_THEME so menu display is never blocked on colors.
"""

import asyncio
import logging
from collections.abc import Sequence

from PIL import Image

from menu_extractor_service.adapters.base_quantizer import ColorQuantizer
from menu_extractor_service.errors import ColorDerivationError
from menu_extractor_service.models.menu_models import FALLBACK_THEME, ColorTheme
from menu_extractor_service.observability import traced
from menu_extractor_service.observability.metrics import record_theme_fallback
from menu_extractor_service.services.image_input import load_image

logger = logging.getLogger(__name__)

MAX_PALETTE_SIZE = 5


def rgb_to_hex(rgb: Sequence[int]) -> str:
    """Convert an RGB triple to a #rrggbb string.

    Example:
        >>> rgb_to_hex((59, 130, 246))
        '#3b82f6'
    """
    if len(rgb) < 3:
        raise ValueError(f"expected an RGB triple, got {rgb!r}")
    return "#" + "".join(f"{max(0, min(255, int(channel))):02x}" for channel in rgb[:3])


async def _derive(
    image: bytes | Image.Image,
    quantizer: ColorQuantizer | None,
    palette_size: int,
) -> ColorTheme:
    if quantizer is None:
        raise ColorDerivationError("no color quantizer is available")

    try:
        bitmap = image if isinstance(image, Image.Image) else await load_image(image)
        dominant, palette = await asyncio.to_thread(quantizer.quantize, bitmap, palette_size)
        return ColorTheme(
            dominant=rgb_to_hex(dominant),
            palette=tuple(rgb_to_hex(color) for color in list(palette)[:palette_size]),
        )
    except ColorDerivationError:
        raise
    except Exception as e:
        raise ColorDerivationError(f"color derivation failed: {e}") from e


@traced("theme.derive")
async def derive_theme_with_status(
    image: bytes | Image.Image,
    quantizer: ColorQuantizer | None,
    palette_size: int = MAX_PALETTE_SIZE,
) -> tuple[ColorTheme, bool]:
    """Derive a theme, reporting whether the fallback theme was used.

    Args:
        image: Raw image bytes (decoded off the event loop) or a decoded image
        quantizer: Quantizer to use; None means no quantizer is available
        palette_size: Maximum palette length, capped at MAX_PALETTE_SIZE

    Returns:
        Tuple of (theme, used_fallback)
    """
    palette_size = max(0, min(palette_size, MAX_PALETTE_SIZE))

    try:
        theme = await _derive(image, quantizer, palette_size)
    except ColorDerivationError as e:
        logger.warning(f"Theme derivation failed, using fallback theme: {e}")
        record_theme_fallback(type(e.__cause__ or e).__name__)
        return FALLBACK_THEME, True

    logger.info(f"Derived theme with dominant {theme.dominant} and {len(theme.palette)} colors")
    return theme, False


async def derive_theme(
    image: bytes | Image.Image,
    quantizer: ColorQuantizer | None,
    palette_size: int = MAX_PALETTE_SIZE,
) -> ColorTheme:
    """Derive a color theme from an image, falling back to FALLBACK_THEME on any failure.

    Args:
        image: Raw image bytes or a decoded image
        quantizer: Quantizer to use; None means no quantizer is available
        palette_size: Maximum palette length

    Returns:
        The derived theme, or FALLBACK_THEME
    """
    theme, _ = await derive_theme_with_status(image, quantizer, palette_size)
    return theme
