"""Document edit models.

Each edit is a tagged record identified by its `op` field. The pipeline
applies them through the pure document operations, and the API accepts
them as JSON bodies.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, RootModel


class CategoryPatch(BaseModel):
    """Partial update for a category. Unset fields are left unchanged."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    category_name: str | None = Field(None, alias="categoryName", description="New category name")


class ItemPatch(BaseModel):
    """Partial update for an item. Unset fields are left unchanged."""

    model_config = ConfigDict(frozen=True)

    name: str | None = Field(None, description="New item name")
    description: str | None = Field(None, description="New item description")
    price: str | None = Field(None, description="New free-form price")


class _Edit(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class RenameRestaurant(_Edit):
    op: Literal["rename_restaurant"] = "rename_restaurant"
    name: str


class EditCategory(_Edit):
    op: Literal["edit_category"] = "edit_category"
    category_id: str = Field(..., alias="categoryId")
    patch: CategoryPatch


class EditItem(_Edit):
    op: Literal["edit_item"] = "edit_item"
    category_id: str = Field(..., alias="categoryId")
    item_id: str = Field(..., alias="itemId")
    patch: ItemPatch


class AddCategory(_Edit):
    op: Literal["add_category"] = "add_category"


class RemoveCategory(_Edit):
    op: Literal["remove_category"] = "remove_category"
    category_id: str = Field(..., alias="categoryId")


class AddItem(_Edit):
    op: Literal["add_item"] = "add_item"
    category_id: str = Field(..., alias="categoryId")


class RemoveItem(_Edit):
    op: Literal["remove_item"] = "remove_item"
    category_id: str = Field(..., alias="categoryId")
    item_id: str = Field(..., alias="itemId")


DocumentEdit = Annotated[
    RenameRestaurant
    | EditCategory
    | EditItem
    | AddCategory
    | RemoveCategory
    | AddItem
    | RemoveItem,
    Field(discriminator="op"),
]


class DocumentEditRequest(RootModel[DocumentEdit]):
    """JSON body carrying a single document edit."""
