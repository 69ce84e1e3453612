"""Normalization of extraction service responses into menu documents.

The extraction service is asked for bare JSON but may still wrap it in a
fenced code block, omit fields, or use the wrong types. Only the two
top-level fields are required; every leaf problem is repaired in place so
the user gets a partial, well-typed document instead of an aborted
extraction.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any

from menu_extractor_service.errors import SNIPPET_LENGTH, ExtractionFormatError
from menu_extractor_service.ids import new_id
from menu_extractor_service.models.menu_models import MenuCategory, MenuDocument, MenuItem
from menu_extractor_service.observability import traced

logger = logging.getLogger(__name__)

UNKNOWN_CATEGORY_NAME = "Unknown category"
UNKNOWN_ITEM_NAME = "Unknown item"
UNKNOWN_PRICE = "N/A"

_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*\n?(.*?)\n?\s*```$", re.DOTALL | re.IGNORECASE)


@dataclass
class NormalizationReport:
    """Record of the leaf fields repaired during normalization.

    Attributes:
        repaired_fields: Dotted paths of repaired fields, e.g. "categories[0].items[1].price"
    """

    repaired_fields: list[str] = field(default_factory=list)

    @property
    def has_repairs(self) -> bool:
        return bool(self.repaired_fields)


def strip_code_fence(text: str) -> str:
    """Remove one enclosing ``` or ```json fence, if present.

    Args:
        text: Raw response text

    Returns:
        The fenced content, or the stripped text when there is no fence
    """
    stripped = text.strip()
    match = _FENCE_PATTERN.match(stripped)
    if match and match.group(1):
        return match.group(1).strip()
    return stripped


def parse_response_text(text: str | bytes) -> Any:
    """Parse extraction response text as JSON.

    Args:
        text: Raw response text, optionally wrapped in a code fence

    Returns:
        The parsed JSON value

    Raises:
        ExtractionFormatError: If the text is not valid JSON
    """
    if isinstance(text, bytes):
        text = text.decode("utf-8", errors="replace")

    json_text = strip_code_fence(text)
    try:
        return json.loads(json_text)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse extraction response: {e}")
        raise ExtractionFormatError(
            f"invalid JSON ({e.msg})", snippet=json_text[:SNIPPET_LENGTH]
        ) from e


def _string_or(value: Any, default: str, path: str, report: NormalizationReport) -> str:
    if isinstance(value, str):
        return value
    report.repaired_fields.append(path)
    return default


def _as_object(value: Any, path: str, report: NormalizationReport) -> dict[str, Any]:
    if isinstance(value, dict):
        return value
    report.repaired_fields.append(path)
    return {}


def _normalize_item(raw_item: Any, path: str, report: NormalizationReport) -> MenuItem:
    data = _as_object(raw_item, path, report)
    return MenuItem(
        id=new_id(),
        name=_string_or(data.get("name"), UNKNOWN_ITEM_NAME, f"{path}.name", report),
        description=_string_or(data.get("description"), "", f"{path}.description", report),
        price=_string_or(data.get("price"), UNKNOWN_PRICE, f"{path}.price", report),
    )


def _normalize_category(
    raw_category: Any, path: str, report: NormalizationReport
) -> MenuCategory:
    data = _as_object(raw_category, path, report)

    raw_items = data.get("items")
    if not isinstance(raw_items, list):
        report.repaired_fields.append(f"{path}.items")
        raw_items = []

    return MenuCategory(
        id=new_id(),
        category_name=_string_or(
            data.get("categoryName"), UNKNOWN_CATEGORY_NAME, f"{path}.categoryName", report
        ),
        items=tuple(
            _normalize_item(raw_item, f"{path}.items[{index}]", report)
            for index, raw_item in enumerate(raw_items)
        ),
    )


def normalize_with_report(raw: Any) -> tuple[MenuDocument, NormalizationReport]:
    """Validate and repair an extraction response, reporting the repairs made.

    Args:
        raw: Response text, a parsed JSON value, or an existing MenuDocument

    Returns:
        Tuple of (document with freshly assigned ids, repair report)

    Raises:
        ExtractionFormatError: If the text is not JSON, or `restaurantName` is
            not a string, or `categories` is not a list
    """
    if isinstance(raw, MenuDocument):
        raw = raw.to_wire()
    elif isinstance(raw, str | bytes):
        raw = parse_response_text(raw)

    if not isinstance(raw, dict):
        logger.error(f"Unexpected extraction response type: {type(raw).__name__}")
        raise ExtractionFormatError(
            "the menu data structure is incorrect", snippet=json.dumps(raw, default=str)
        )

    restaurant_name = raw.get("restaurantName")
    categories = raw.get("categories")
    if not isinstance(restaurant_name, str) or not isinstance(categories, list):
        logger.error("Extraction response is missing restaurantName or categories")
        raise ExtractionFormatError(
            "the menu data structure is incorrect",
            snippet=json.dumps(raw, default=str, ensure_ascii=False),
        )

    report = NormalizationReport()
    document = MenuDocument(
        restaurant_name=restaurant_name,
        categories=tuple(
            _normalize_category(raw_category, f"categories[{index}]", report)
            for index, raw_category in enumerate(categories)
        ),
    )

    if report.has_repairs:
        logger.info(
            f"Repaired {len(report.repaired_fields)} field(s) in extraction response: "
            f"{', '.join(report.repaired_fields[:10])}"
        )

    return document, report


@traced("menu.normalize")
def normalize(raw: Any) -> MenuDocument:
    """Validate and repair an extraction response into a menu document.

    Args:
        raw: Response text, a parsed JSON value, or an existing MenuDocument

    Returns:
        MenuDocument with a fresh id on every category and item

    Raises:
        ExtractionFormatError: On unparseable text or an invalid top-level shape
    """
    document, _ = normalize_with_report(raw)
    return document
