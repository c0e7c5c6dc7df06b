"""Ledger queries and the daily sales report."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from pathlib import Path
from typing import Iterable

from waiter_app.errors import NoBillsForDate
from waiter_app.models import Bill, BillLine, newest_first_key

logger = logging.getLogger(__name__)

# A4 at 150 dpi; layout coordinates below are in millimetres.
_PAGE_SIZE_PX = (1240, 1754)
_PX_PER_MM = _PAGE_SIZE_PX[0] / 210
_ITEM_BREAK_MM = 270
_TABLE_BREAK_MM = 260
_TOP_MARGIN_MM = 15


@dataclass(frozen=True)
class TableReport:
    table: int
    bills: tuple[Bill, ...]
    subtotal: int

    @property
    def lines(self) -> list[BillLine]:
        return [line for bill in self.bills for line in bill.items]


@dataclass(frozen=True)
class DailyReport:
    day: date
    tables: tuple[TableReport, ...]
    grand_total: int

    @property
    def filename(self) -> str:
        return f"Daily_Report_{self.day.isoformat()}.pdf"


def bills_in_range(bills: Iterable[Bill], start: int, end: int) -> list[Bill]:
    """Bills whose timestamp lies in [start, end], inclusive."""
    return [bill for bill in bills if start <= bill.timestamp <= end]


def group_bills_by_table(bills: Iterable[Bill]) -> list[tuple[int, list[Bill]]]:
    groups: dict[int, list[Bill]] = {}
    for bill in bills:
        groups.setdefault(bill.table, []).append(bill)
    return [
        (table, sorted(groups[table], key=lambda bill: newest_first_key(bill.timestamp, bill.bill_id)))
        for table in sorted(groups)
    ]


def day_bounds(day: date) -> tuple[int, int]:
    """Local-time start and end of a day in epoch milliseconds."""
    start = datetime.combine(day, time.min)
    end = datetime.combine(day, time(23, 59, 59, 999000))
    return (int(start.timestamp() * 1000), int(end.timestamp() * 1000))


def build_daily_report(bills: Iterable[Bill], day: date) -> DailyReport:
    start, end = day_bounds(day)
    day_bills = bills_in_range(bills, start, end)
    if not day_bills:
        raise NoBillsForDate(f"No bills found for {day.isoformat()}")

    tables = tuple(
        TableReport(
            table=table,
            bills=tuple(table_bills),
            subtotal=sum(line.line_total for bill in table_bills for line in bill.items),
        )
        for table, table_bills in group_bills_by_table(day_bills)
    )
    return DailyReport(day=day, tables=tables, grand_total=sum(table.subtotal for table in tables))


def _mm(value: float) -> int:
    return int(round(value * _PX_PER_MM))


def _load_font(size_px: int) -> object:
    from PIL import ImageFont

    from waiter_app.printer import resolve_printer_font_path

    try:
        return ImageFont.truetype(resolve_printer_font_path(), size_px)
    except (RuntimeError, OSError):
        return ImageFont.load_default()


class _PdfCanvas:
    """Page-aware text drawing with a millimetre cursor."""

    def __init__(self) -> None:
        self.pages: list[object] = []
        self.y = 0.0
        self._draw = None
        self.add_page()

    def add_page(self) -> None:
        from PIL import Image, ImageDraw

        page = Image.new("L", _PAGE_SIZE_PX, color=255)
        self.pages.append(page)
        self._draw = ImageDraw.Draw(page)
        self.y = _TOP_MARGIN_MM

    def text(self, text: str, x_mm: float, font: object, align: str = "left") -> None:
        bbox = self._draw.textbbox((0, 0), text, font=font)
        width = bbox[2] - bbox[0]
        height = bbox[3] - bbox[1]
        x = _mm(x_mm)
        if align == "right":
            x -= width
        elif align == "center":
            x -= width // 2
        # self.y marks the bottom edge of the text.
        self._draw.text((x, _mm(self.y) - height - bbox[1]), text, font=font, fill=0)

    def line(self, x0_mm: float, x1_mm: float) -> None:
        y = _mm(self.y)
        self._draw.line((_mm(x0_mm), y, _mm(x1_mm), y), fill=0, width=2)


def layout_daily_report(report: DailyReport) -> list[object]:
    """Draw the report onto A4 page images."""
    title_font = _load_font(_mm(6))
    subtitle_font = _load_font(_mm(4))
    table_font = _load_font(_mm(5))
    item_font = _load_font(_mm(3.5))

    canvas = _PdfCanvas()
    canvas.text("Daily Sales Report", 105, title_font, align="center")
    canvas.y = 23
    canvas.text(f"{report.day.day} {report.day:%B %Y}", 105, subtitle_font, align="center")
    canvas.y = 35

    for table_report in report.tables:
        canvas.text(f"Table {table_report.table}", 15, table_font)
        canvas.y += 7

        for line in table_report.lines:
            canvas.text(f"{line.name} x{line.quantity}", 20, item_font)
            canvas.text(f"Rs.{line.line_total}", 180, item_font, align="right")
            canvas.y += 5
            if canvas.y > _ITEM_BREAK_MM:
                canvas.add_page()

        canvas.text("Subtotal:", 20, item_font)
        canvas.text(f"Rs.{table_report.subtotal}", 180, item_font, align="right")
        canvas.y += 8
        if canvas.y > _TABLE_BREAK_MM:
            canvas.add_page()

    canvas.y += 5
    canvas.line(15, 195)
    canvas.y += 7
    canvas.text("GRAND TOTAL:", 15, table_font)
    canvas.text(f"Rs.{report.grand_total}", 180, table_font, align="right")
    return canvas.pages


def render_daily_report_pdf(report: DailyReport, directory: str | Path) -> Path:
    """Write the report as a multi-page PDF and return its path."""
    pages = layout_daily_report(report)
    out_dir = Path(directory)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / report.filename
    first, *rest = pages
    first.save(path, "PDF", save_all=True, append_images=rest, resolution=150.0)
    logger.info("daily_report_written path=%s tables=%s total=%s", path, len(report.tables), report.grand_total)
    return path
