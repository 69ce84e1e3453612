"""Shared pytest fixtures and configuration for all tests."""

import io
import os

os.environ.setdefault("ENVIRONMENT", "test")

import pytest  # noqa: E402
from PIL import Image  # noqa: E402

from menu_extractor_service.models.menu_models import (  # noqa: E402
    ColorTheme,
    MenuCategory,
    MenuDocument,
    MenuItem,
)
from menu_extractor_service.models.pipeline_models import ImageUpload  # noqa: E402


@pytest.fixture
def fenced_response_text() -> str:
    """Fixture providing an extraction response wrapped in a json code fence."""
    return (
        '```json\n{"restaurantName":"Café Test","categories":[{"categoryName":"Entrées",'
        '"items":[{"name":"Soupe","price":"5€"}]}]}\n```'
    )


@pytest.fixture
def raw_menu_response() -> dict:
    """Fixture providing a well-formed parsed extraction response."""
    return {
        "restaurantName": "Le Petit Bistro",
        "categories": [
            {
                "categoryName": "Starters",
                "items": [
                    {"name": "Onion Soup", "description": "Gratinated", "price": "€8.50"},
                    {"name": "Escargots", "description": "", "price": "€12"},
                ],
            },
            {
                "categoryName": "Desserts",
                "items": [
                    {"name": "Crème brûlée", "description": "Vanilla", "price": "€7"},
                ],
            },
        ],
    }


@pytest.fixture
def sample_document() -> MenuDocument:
    """Fixture providing a small document with fixed ids."""
    return MenuDocument(
        restaurant_name="Le Petit Bistro",
        categories=(
            MenuCategory(
                id="cat_1",
                category_name="Starters",
                items=(
                    MenuItem(id="item_1", name="Onion Soup", description="Gratinated", price="€8.50"),
                    MenuItem(id="item_2", name="Escargots", description="", price="€12"),
                ),
            ),
            MenuCategory(
                id="cat_2",
                category_name="Desserts",
                items=(
                    MenuItem(id="item_3", name="Crème brûlée", description="Vanilla", price="€7"),
                ),
            ),
        ),
    )


@pytest.fixture
def sample_theme() -> ColorTheme:
    """Fixture providing a fully populated theme."""
    return ColorTheme(
        dominant="#aa0000",
        palette=("#110000", "#220000", "#330000", "#440000", "#550000"),
    )


@pytest.fixture
def png_bytes() -> bytes:
    """Fixture providing a small two-color PNG image."""
    image = Image.new("RGB", (40, 40), (200, 30, 30))
    for x in range(20, 40):
        for y in range(40):
            image.putpixel((x, y), (30, 30, 200))
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_upload(png_bytes: bytes) -> ImageUpload:
    """Fixture providing a PNG upload."""
    return ImageUpload(data=png_bytes, mime_type="image/png", filename="menu.png")
