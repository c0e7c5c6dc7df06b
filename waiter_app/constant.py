"""Editable static menu configuration."""

from __future__ import annotations

MENU_CATEGORIES: list[str] = ["starters", "main", "drinks", "desserts"]

CATEGORY_TITLES: dict[str, str] = {
    "starters": "Starters",
    "main": "Main Course",
    "drinks": "Drinks",
    "desserts": "Desserts",
}

# Canonical menu rows consumed by waiter_app.data (which wraps these into MenuItem instances).
MENU_ROWS_BY_CATEGORY: dict[str, list[dict[str, int | str]]] = {
    "starters": [
        {"id": 1, "name": "Chicken Wings", "price": 180},
        {"id": 2, "name": "Paneer Tikka", "price": 160},
        {"id": 3, "name": "Spring Rolls", "price": 120},
        {"id": 4, "name": "Garlic Bread", "price": 100},
    ],
    "main": [
        {"id": 5, "name": "Butter Chicken", "price": 280},
        {"id": 6, "name": "Paneer Butter Masala", "price": 240},
        {"id": 7, "name": "Biryani", "price": 220},
        {"id": 8, "name": "Pasta Alfredo", "price": 200},
    ],
    "drinks": [
        {"id": 9, "name": "Coke", "price": 60},
        {"id": 10, "name": "Fresh Lime Soda", "price": 50},
        {"id": 11, "name": "Mango Lassi", "price": 80},
        {"id": 12, "name": "Coffee", "price": 70},
    ],
    "desserts": [
        {"id": 13, "name": "Ice Cream", "price": 90},
        {"id": 14, "name": "Gulab Jamun", "price": 70},
        {"id": 15, "name": "Brownie", "price": 110},
        {"id": 16, "name": "Fruit Salad", "price": 100},
    ],
}

STATUS_FILTERS: list[str] = ["all", "pending", "preparing", "ready", "served"]
