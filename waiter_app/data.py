"""Static menu data."""

from __future__ import annotations

from waiter_app.constant import CATEGORY_TITLES, MENU_CATEGORIES, MENU_ROWS_BY_CATEGORY
from waiter_app.models import MenuItem

MENU_BY_CATEGORY: dict[str, list[MenuItem]] = {
    category: [
        MenuItem(
            item_id=int(row["id"]),
            name=str(row["name"]),
            price=int(row["price"]),
            category=category,
        )
        for row in MENU_ROWS_BY_CATEGORY.get(category, [])
    ]
    for category in MENU_CATEGORIES
}

MENU_BY_ID: dict[int, MenuItem] = {
    item.item_id: item for items in MENU_BY_CATEGORY.values() for item in items
}

# Flat menu in display order; the UI cursor indexes into this list.
MENU_ITEMS: list[MenuItem] = [item for category in MENU_CATEGORIES for item in MENU_BY_CATEGORY[category]]


def menu_item(item_id: int) -> MenuItem:
    """Look up a menu item by id."""
    return MENU_BY_ID[item_id]


def category_title(category: str) -> str:
    return CATEGORY_TITLES.get(category, category.title())
