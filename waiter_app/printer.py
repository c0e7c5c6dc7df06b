"""Thermal printer output for settled bills."""

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path

from waiter_app.config import (
    PRINTER_FONT_ENV,
    PRINTER_FONT_PATH,
    PRINTER_FONT_SIZE,
    PRINTER_LEFT_INDENT_PX,
    PRINTER_TAIL_SPACER_PX,
    PRINTER_USB_PRODUCT_ID,
    PRINTER_USB_VENDOR_ID,
    PRINTER_WIDTH_PX,
)
from waiter_app.models import Bill

logger = logging.getLogger(__name__)

_RIGHT_GUTTER_PX = 8
_LINE_EXTRA_PX = 10
_RULE_HEIGHT_PX = 12
_RULE_THICKNESS_PX = 3
_LINUX_FONT_FALLBACKS = (
    "/usr/share/fonts/TTF/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/noto/NotoSans-Regular.ttf",
    "/usr/share/fonts/liberation/LiberationSans-Regular.ttf",
)

# Ticket rows are (left, right) pairs; RULE marks a horizontal separator.
RULE = ("---", "---")


def _font_candidates() -> list[str]:
    override = os.environ.get(PRINTER_FONT_ENV, "").strip()
    ordered = [override, PRINTER_FONT_PATH, *_LINUX_FONT_FALLBACKS]
    return list(dict.fromkeys(path for path in ordered if path))


def resolve_printer_font_path() -> str:
    """Return the first font file found: env override, configured path, then common Linux fonts."""
    candidates = _font_candidates()
    found = next((path for path in candidates if Path(path).is_file()), None)
    if found is None:
        raise RuntimeError(
            f"No usable printer font found. Set {PRINTER_FONT_ENV} to a .ttf/.otf file "
            f"(looked at {', '.join(candidates)})"
        )
    return found


def check_printer_dependencies() -> tuple[bool, str]:
    """Check whether printer dependencies are importable."""
    try:
        from escpos.printer import Usb  # noqa: F401
        from PIL import ImageFont

        font_path = resolve_printer_font_path()
        ImageFont.truetype(font_path, PRINTER_FONT_SIZE)
    except Exception as exc:
        return (False, f"Printer unavailable: {exc}")
    return (True, "Printer ready")


def bill_ticket_rows(bill: Bill) -> list[tuple[str, str]]:
    """Lay out a bill as printable (left, right) text rows."""
    settled_at = datetime.fromtimestamp(bill.timestamp / 1000)
    rows: list[tuple[str, str]] = [
        (f"Table {bill.table}", f"#{bill.bill_id}"),
        (settled_at.strftime("%d %b %Y"), settled_at.strftime("%H:%M")),
        RULE,
    ]
    for line in bill.items:
        rows.append((f"{line.name} x{line.quantity}", f"Rs.{line.line_total}"))
    rows.append(RULE)
    rows.append(("TOTAL", f"Rs.{bill.grand_total}"))
    return rows


def _render_row(left: str, right: str, font: object) -> object:
    from PIL import Image, ImageDraw

    canvas_height = PRINTER_FONT_SIZE + _LINE_EXTRA_PX
    img = Image.new("1", (PRINTER_WIDTH_PX, canvas_height), color=1)
    draw = ImageDraw.Draw(img)

    right_bbox = draw.textbbox((0, 0), right, font=font)
    right_width = right_bbox[2] - right_bbox[0]
    max_left_px = PRINTER_WIDTH_PX - PRINTER_LEFT_INDENT_PX - _RIGHT_GUTTER_PX - right_width - 12
    left = _truncate_to_width(left, font, max_left_px)

    left_bbox = draw.textbbox((0, 0), left, font=font)
    text_height = left_bbox[3] - left_bbox[1]
    # Offset by bbox top so descenders are not clipped.
    y = (canvas_height - text_height) // 2 - left_bbox[1]
    draw.text((PRINTER_LEFT_INDENT_PX, y), left, font=font, fill=0)
    draw.text((PRINTER_WIDTH_PX - _RIGHT_GUTTER_PX - right_width - right_bbox[0], y), right, font=font, fill=0)
    return img


def _render_rule() -> object:
    from PIL import Image, ImageDraw

    img = Image.new("1", (PRINTER_WIDTH_PX, _RULE_HEIGHT_PX), color=1)
    draw = ImageDraw.Draw(img)
    top = (_RULE_HEIGHT_PX - _RULE_THICKNESS_PX) // 2
    draw.rectangle((0, top, PRINTER_WIDTH_PX - 1, top + _RULE_THICKNESS_PX - 1), fill=0)
    return img


def _render_spacer(height_px: int) -> object:
    from PIL import Image

    return Image.new("1", (PRINTER_WIDTH_PX, max(1, height_px)), color=1)


def _truncate_to_width(text: str, font: object, max_width_px: int) -> str:
    if font.getlength(text) <= max_width_px:
        return text
    for end in range(len(text) - 1, 0, -1):
        candidate = f"{text[:end].rstrip()}..."
        if font.getlength(candidate) <= max_width_px:
            return candidate
    return "..."


def print_bill(bill: Bill) -> None:
    """Print one settled bill and cut the ticket."""
    try:
        from escpos.printer import Usb
        from PIL import ImageFont
    except Exception as exc:
        raise RuntimeError(f"Printer dependencies unavailable: {exc}") from exc

    printer = Usb(PRINTER_USB_VENDOR_ID, PRINTER_USB_PRODUCT_ID)
    font = ImageFont.truetype(resolve_printer_font_path(), PRINTER_FONT_SIZE)

    for row in bill_ticket_rows(bill):
        if row == RULE:
            printer.image(_render_rule())
            continue
        printer.image(_render_row(row[0], row[1], font))

    printer.image(_render_spacer(PRINTER_TAIL_SPACER_PX))
    printer.cut()
    logger.info("bill_printed id=%s table=%s", bill.bill_id, bill.table)
