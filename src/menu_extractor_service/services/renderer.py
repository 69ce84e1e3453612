"""HTML rendering of menu documents.

Rendering is a pure function of the document and the theme. The editable
projection shows every category, even empty ones, and tags sections and
articles with their ids. The static variant used for export skips
categories without a name or without items.
"""

import re

from menu_extractor_service.models.menu_models import (
    DEFAULT_DOMINANT_COLOR,
    ColorTheme,
    MenuCategory,
    MenuDocument,
    MenuItem,
)
from menu_extractor_service.observability import traced

DEFAULT_SECONDARY_COLOR = "#1D4ED8"
DEFAULT_TEXT_COLOR = "#1F2937"
DEFAULT_MUTED_COLOR = "#4B5563"
BACKGROUND_COLOR = "#FFFFFF"

RESTAURANT_NAME_PLACEHOLDER = "Restaurant Menu"
ITEM_NAME_PLACEHOLDER = "Unnamed item"
FOOTER_TEXT = "Menu generated by AI."

_HTML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#039;",
}
_HTML_ESCAPE_PATTERN = re.compile(r"[&<>\"']")
_WHITESPACE_PATTERN = re.compile(r"\s+")

_EXPORT_SHELL = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>
    <script src="https://cdn.tailwindcss.com"></script>
    <link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600;700&display=swap" rel="stylesheet">
    <style>body {{ font-family: 'Inter', sans-serif; }}</style>
</head>
<body class="bg-slate-100 p-4 sm:p-8">
    {content}
</body>
</html>"""


def escape_html(value: object) -> str:
    """Escape the five HTML-sensitive characters; non-strings render as empty."""
    if not isinstance(value, str):
        return ""
    return _HTML_ESCAPE_PATTERN.sub(lambda match: _HTML_ESCAPES[match.group(0)], value)


class _Palette:
    """Semantic color roles resolved from a theme."""

    def __init__(self, theme: ColorTheme) -> None:
        self.primary = theme.dominant or DEFAULT_DOMINANT_COLOR
        self.secondary = theme.color_for(1, DEFAULT_SECONDARY_COLOR)
        self.text = theme.color_for(2, DEFAULT_TEXT_COLOR)
        self.muted = theme.color_for(3, DEFAULT_MUTED_COLOR)


def _render_item(item: MenuItem, colors: _Palette, editable: bool) -> str:
    item_attr = f' data-item-id="{escape_html(item.id)}"' if editable else ""
    parts = [
        f'<article class="flex justify-between items-start py-3 border-b border-gray-200 last:border-b-0"{item_attr}>',
        '<div class="mr-4 flex-grow">',
        f'<h3 class="text-xl font-medium" style="color: {colors.text};">'
        f"{escape_html(item.name) or ITEM_NAME_PLACEHOLDER}</h3>",
    ]
    if item.description:
        parts.append(
            f'<p class="text-sm mt-1" style="color: {colors.muted};">{escape_html(item.description)}</p>'
        )
    parts.append("</div>")
    parts.append(
        f'<p class="text-xl font-semibold whitespace-nowrap" style="color: {colors.primary};">'
        f"{escape_html(item.price)}</p>"
    )
    parts.append("</article>")
    return "".join(parts)


def _render_category(category: MenuCategory, colors: _Palette, editable: bool) -> str:
    category_attr = f' data-category-id="{escape_html(category.id)}"' if editable else ""
    items_html = "".join(_render_item(item, colors, editable) for item in category.items)
    return (
        f'<section class="mb-10"{category_attr}>'
        f'<h2 class="text-3xl font-semibold mb-6 border-l-4 pl-3" '
        f'style="color: {colors.secondary}; border-color: {colors.secondary};">'
        f"{escape_html(category.category_name)}</h2>"
        f'<div class="space-y-6">{items_html}</div>'
        f"</section>"
    )


def _render(doc: MenuDocument, theme: ColorTheme, editable: bool) -> str:
    colors = _Palette(theme)
    restaurant_name = escape_html(doc.restaurant_name) or RESTAURANT_NAME_PLACEHOLDER

    parts = [
        f'<div class="max-w-3xl mx-auto p-4 sm:p-6 lg:p-8 rounded-xl shadow-2xl" '
        f'style="background-color: {BACKGROUND_COLOR};">',
        f'<header class="text-center mb-10 border-b-2 pb-6" style="border-color: {colors.primary};">',
        f'<h1 class="text-4xl font-bold tracking-tight sm:text-5xl" style="color: {colors.primary};">'
        f"{restaurant_name}</h1>",
        "</header>",
    ]

    for category in doc.categories:
        if not editable and not (category.category_name and category.items):
            continue
        parts.append(_render_category(category, colors, editable))

    parts.append(
        f'<footer class="mt-12 pt-6 border-t text-center text-xs" '
        f'style="border-color: {colors.primary}; color: {colors.muted};">'
        f"<p>{FOOTER_TEXT}</p></footer>"
    )
    parts.append("</div>")
    return "".join(parts)


@traced("menu.render")
def render(doc: MenuDocument, theme: ColorTheme) -> str:
    """Render the editable projection of a document.

    Args:
        doc: The menu document
        theme: The color theme to style with

    Returns:
        HTML fragment containing every category, empty ones included
    """
    return _render(doc, theme, editable=True)


def render_static(doc: MenuDocument, theme: ColorTheme) -> str:
    """Render the export variant, skipping unnamed or empty categories."""
    return _render(doc, theme, editable=False)


def build_export_document(doc: MenuDocument, theme: ColorTheme) -> str:
    """Wrap the static rendering in a standalone HTML page.

    Args:
        doc: The menu document
        theme: The color theme to style with

    Returns:
        Complete HTML document suitable for download or the clipboard
    """
    return _EXPORT_SHELL.format(
        title=escape_html(doc.restaurant_name) or "Menu",
        content=render_static(doc, theme),
    )


def export_filename(restaurant_name: str | None) -> str:
    """Derive the download file name from the restaurant name.

    Example:
        >>> export_filename("Le Petit  Bistro")
        'le_petit_bistro_menu.html'
    """
    base = restaurant_name or "menu"
    return f"{_WHITESPACE_PATTERN.sub('_', base.lower())}_menu.html"
