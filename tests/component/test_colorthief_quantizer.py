"""Component tests for the ColorThief quantizer and theme derivation."""

import re

import pytest
from PIL import Image

from menu_extractor_service.adapters.colorthief_quantizer import ColorThiefQuantizer
from menu_extractor_service.models.menu_models import FALLBACK_THEME
from menu_extractor_service.services.theme_service import derive_theme_with_status

HEX_COLOR = re.compile(r"^#[0-9a-f]{6}$")

RED = (200, 30, 30)
BLUE = (30, 30, 200)


def _close_to(color: tuple[int, int, int], expected: tuple[int, int, int], tolerance: int = 12) -> bool:
    return all(abs(a - b) <= tolerance for a, b in zip(color, expected))


def _hex_to_rgb(value: str) -> tuple[int, int, int]:
    return int(value[1:3], 16), int(value[3:5], 16), int(value[5:7], 16)


@pytest.mark.component
class TestColorThiefQuantizer:
    """Test suite for ColorThiefQuantizer against real images."""

    @pytest.fixture
    def quantizer(self) -> ColorThiefQuantizer:
        """Create a quantizer sampling every pixel."""
        return ColorThiefQuantizer(quality=1)

    def test_dominant_color_of_mostly_red_image(self, quantizer: ColorThiefQuantizer) -> None:
        """Test that the majority color is reported as dominant."""
        image = Image.new("RGB", (60, 60), RED)
        for x in range(45, 60):
            for y in range(60):
                image.putpixel((x, y), BLUE)

        dominant, palette = quantizer.quantize(image, 5)

        assert _close_to(dominant, RED)
        assert palette
        assert any(_close_to(color, BLUE) for color in palette)

    def test_accepts_non_rgb_modes(self, quantizer: ColorThiefQuantizer) -> None:
        """Test that palette-mode images are converted before quantizing."""
        image = Image.new("RGB", (30, 30), RED).convert("P")

        dominant, _ = quantizer.quantize(image, 3)

        assert _close_to(dominant, RED)

    @pytest.mark.asyncio
    async def test_derive_theme_from_png_bytes(
        self, quantizer: ColorThiefQuantizer, png_bytes: bytes
    ) -> None:
        """Test theme derivation end to end from encoded bytes."""
        theme, used_fallback = await derive_theme_with_status(png_bytes, quantizer)

        assert used_fallback is False
        assert theme != FALLBACK_THEME
        assert HEX_COLOR.match(theme.dominant)
        assert 1 <= len(theme.palette) <= 5
        assert all(HEX_COLOR.match(color) for color in theme.palette)
        assert _close_to(_hex_to_rgb(theme.dominant), RED) or _close_to(
            _hex_to_rgb(theme.dominant), BLUE
        )
