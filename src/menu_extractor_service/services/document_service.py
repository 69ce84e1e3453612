"""Pure edit operations on menu documents.

Every operation takes a document and returns a new one; the input is never
modified. Unknown ids are not errors: the operation returns the input
document unchanged, since the editing surface only presents ids that exist.
Unaffected categories and items are reused as-is.
"""

import logging
from collections.abc import Mapping
from typing import Any

from menu_extractor_service.ids import new_id
from menu_extractor_service.models.edit_models import (
    AddCategory,
    AddItem,
    CategoryPatch,
    DocumentEdit,
    EditCategory,
    EditItem,
    ItemPatch,
    RemoveCategory,
    RemoveItem,
    RenameRestaurant,
)
from menu_extractor_service.models.menu_models import MenuCategory, MenuDocument, MenuItem

logger = logging.getLogger(__name__)

DEFAULT_RESTAURANT_NAME = "New Menu"
DEFAULT_CATEGORY_NAME = "New Category"
DEFAULT_ITEM_NAME = "New Item"
DEFAULT_ITEM_PRICE = "0.00"


def _category_patch(patch: CategoryPatch | Mapping[str, Any]) -> dict[str, Any]:
    if not isinstance(patch, CategoryPatch):
        patch = CategoryPatch.model_validate(dict(patch))
    return patch.model_dump(exclude_none=True)


def _item_patch(patch: ItemPatch | Mapping[str, Any]) -> dict[str, Any]:
    if not isinstance(patch, ItemPatch):
        patch = ItemPatch.model_validate(dict(patch))
    return patch.model_dump(exclude_none=True)


def _replace_category(
    doc: MenuDocument, category_id: str, updated: MenuCategory
) -> MenuDocument:
    return doc.model_copy(
        update={
            "categories": tuple(
                updated if category.id == category_id else category
                for category in doc.categories
            )
        }
    )


def rename_restaurant(doc: MenuDocument, name: str) -> MenuDocument:
    """Return a copy of the document with a new restaurant name."""
    return doc.model_copy(update={"restaurant_name": name})


def edit_category(
    doc: MenuDocument, category_id: str, patch: CategoryPatch | Mapping[str, Any]
) -> MenuDocument:
    """Apply a partial update to a category.

    Args:
        doc: The current document
        category_id: The category to update
        patch: CategoryPatch or mapping with `categoryName`/`category_name`

    Returns:
        Updated document, or `doc` itself if the category does not exist
    """
    category = doc.find_category(category_id)
    if category is None:
        return doc

    changes = _category_patch(patch)
    if not changes:
        return doc
    return _replace_category(doc, category_id, category.model_copy(update=changes))


def edit_item(
    doc: MenuDocument,
    category_id: str,
    item_id: str,
    patch: ItemPatch | Mapping[str, Any],
) -> MenuDocument:
    """Apply a partial update to an item.

    Args:
        doc: The current document
        category_id: The category holding the item
        item_id: The item to update
        patch: ItemPatch or mapping with any of `name`, `description`, `price`

    Returns:
        Updated document, or `doc` itself if either id does not exist
    """
    category = doc.find_category(category_id)
    if category is None:
        return doc
    item = category.find_item(item_id)
    if item is None:
        return doc

    changes = _item_patch(patch)
    if not changes:
        return doc

    updated_item = item.model_copy(update=changes)
    updated_category = category.model_copy(
        update={
            "items": tuple(
                updated_item if existing.id == item_id else existing
                for existing in category.items
            )
        }
    )
    return _replace_category(doc, category_id, updated_category)


def add_category(doc: MenuDocument | None) -> MenuDocument:
    """Append a new empty category.

    When there is no document yet, a new one is created holding only the
    new category.

    Args:
        doc: The current document, or None

    Returns:
        Document with the new category appended
    """
    category = MenuCategory(id=new_id(), category_name=DEFAULT_CATEGORY_NAME, items=())
    if doc is None:
        logger.debug("Creating a new document for the first category")
        return MenuDocument(restaurant_name=DEFAULT_RESTAURANT_NAME, categories=(category,))
    return doc.model_copy(update={"categories": (*doc.categories, category)})


def remove_category(doc: MenuDocument, category_id: str) -> MenuDocument:
    """Remove a category by id, or return `doc` unchanged if it does not exist."""
    if doc.find_category(category_id) is None:
        return doc
    return doc.model_copy(
        update={
            "categories": tuple(
                category for category in doc.categories if category.id != category_id
            )
        }
    )


def add_item(doc: MenuDocument, category_id: str) -> MenuDocument:
    """Append a default item to a category, or return `doc` unchanged if it does not exist."""
    category = doc.find_category(category_id)
    if category is None:
        return doc

    item = MenuItem(id=new_id(), name=DEFAULT_ITEM_NAME, description="", price=DEFAULT_ITEM_PRICE)
    return _replace_category(
        doc, category_id, category.model_copy(update={"items": (*category.items, item)})
    )


def remove_item(doc: MenuDocument, category_id: str, item_id: str) -> MenuDocument:
    """Remove an item by id, or return `doc` unchanged if either id does not exist."""
    category = doc.find_category(category_id)
    if category is None or category.find_item(item_id) is None:
        return doc

    return _replace_category(
        doc,
        category_id,
        category.model_copy(
            update={"items": tuple(item for item in category.items if item.id != item_id)}
        ),
    )


def apply_edit(doc: MenuDocument | None, edit: DocumentEdit) -> MenuDocument | None:
    """Apply a tagged edit to a document.

    Only `AddCategory` can act on a missing document; every other edit on
    `None` returns `None`.

    Args:
        doc: The current document, or None
        edit: The edit to apply

    Returns:
        The resulting document
    """
    if isinstance(edit, AddCategory):
        return add_category(doc)
    if doc is None:
        return None

    if isinstance(edit, RenameRestaurant):
        return rename_restaurant(doc, edit.name)
    if isinstance(edit, EditCategory):
        return edit_category(doc, edit.category_id, edit.patch)
    if isinstance(edit, EditItem):
        return edit_item(doc, edit.category_id, edit.item_id, edit.patch)
    if isinstance(edit, RemoveCategory):
        return remove_category(doc, edit.category_id)
    if isinstance(edit, AddItem):
        return add_item(doc, edit.category_id)
    if isinstance(edit, RemoveItem):
        return remove_item(doc, edit.category_id, edit.item_id)

    raise TypeError(f"Unsupported document edit: {type(edit).__name__}")
