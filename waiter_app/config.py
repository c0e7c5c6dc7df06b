"""Runtime configuration defaults for persistence, reporting and printing."""

from __future__ import annotations

import os


def _env(name: str, default: str) -> str:
    value = os.environ.get(name, "").strip()
    return value or default


DB_PATH = _env("WAITER_DB_PATH", "data/waiter.db")
REPORT_DIR = _env("WAITER_REPORT_DIR", "reports")
DEBUG_LOG_PATH = _env("WAITER_DEBUG_LOG", "/tmp/waiter-debug.log")

TABLE_COUNT = int(_env("WAITER_TABLE_COUNT", "8"))
CURRENCY_SYMBOL = "₹"

# Hex SHA-256 digest of the admin password. Unset means every admin check fails.
ADMIN_PASSWORD_SHA256_ENV = "WAITER_ADMIN_PASSWORD_SHA256"

PRINTER_USB_VENDOR_ID = 0x28E9
PRINTER_USB_PRODUCT_ID = 0x0289
PRINTER_WIDTH_PX = 384
PRINTER_FONT_SIZE = 28
PRINTER_FONT_PATH = "/System/Library/Fonts/SFNS.ttf"
PRINTER_FONT_ENV = "WAITER_PRINTER_FONT_PATH"
PRINTER_LEFT_INDENT_PX = 16
PRINTER_TAIL_SPACER_PX = 70
