"""Menu document models.

These models represent the editable menu document produced from an
extraction response and the color theme derived from the source image.
All models are frozen: edits produce new values instead of mutating
existing ones, so a document reference can be shared freely.
"""

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_DOMINANT_COLOR = "#3B82F6"


class MenuItem(BaseModel):
    """Menu item model."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., description="Unique identifier for the item within its category")
    name: str = Field(..., description="Item name")
    description: str = Field(default="", description="Item description, empty if unknown")
    price: str = Field(..., description="Free-form price text, e.g. '12.50 €'")


class MenuCategory(BaseModel):
    """Menu category model."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., description="Unique identifier for the category")
    category_name: str = Field(..., alias="categoryName", description="Category name")
    items: tuple[MenuItem, ...] = Field(default=(), description="Items in display order")

    def find_item(self, item_id: str) -> MenuItem | None:
        """Find an item of this category by id.

        Args:
            item_id: The item id to look up

        Returns:
            MenuItem if found, None otherwise
        """
        for item in self.items:
            if item.id == item_id:
                return item
        return None


class MenuDocument(BaseModel):
    """Editable menu document.

    A document with zero categories is valid and represents an empty menu.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    restaurant_name: str = Field(..., alias="restaurantName", description="Restaurant name")
    categories: tuple[MenuCategory, ...] = Field(
        default=(), description="Categories in display order"
    )

    @property
    def item_count(self) -> int:
        """Total number of items across all categories."""
        return sum(len(category.items) for category in self.categories)

    def find_category(self, category_id: str) -> MenuCategory | None:
        """Find a category by id.

        Args:
            category_id: The category id to look up

        Returns:
            MenuCategory if found, None otherwise
        """
        for category in self.categories:
            if category.id == category_id:
                return category
        return None

    def to_wire(self) -> dict:
        """Serialize to the camelCase shape used by the extraction prompt and the API."""
        return self.model_dump(by_alias=True, mode="json")


class ColorTheme(BaseModel):
    """Color theme derived from the source image.

    The palette may hold fewer than five entries; callers resolve missing
    entries with `color_for`, which falls back to a per-role default.
    """

    model_config = ConfigDict(frozen=True)

    dominant: str = Field(default=DEFAULT_DOMINANT_COLOR, description="Dominant #RRGGBB color")
    palette: tuple[str, ...] = Field(default=(), description="Ordered palette colors")

    def color_for(self, index: int, default: str) -> str:
        """Return the palette color at `index`, or `default` when absent or empty."""
        if 0 <= index < len(self.palette) and self.palette[index]:
            return self.palette[index]
        return default


FALLBACK_THEME = ColorTheme(
    dominant=DEFAULT_DOMINANT_COLOR,
    palette=("#60A5FA", "#93C5FD", "#BFDBFE", "#DBEAFE"),
)
