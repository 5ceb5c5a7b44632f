"""Build per-customer (or per-selection) .xlsx order reports."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from io import BytesIO
from typing import Any, Iterable, Sequence

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from agro_admin.api.schemas.order import OrderRead
from agro_admin.core.i18n import Translator

logger = logging.getLogger(__name__)

HEADERS = (
    "Order №",
    "Customer",
    "Product code",
    "Product",
    "Quantity",
    "Unit",
    "Catalog price",
    "Charged price",
    "Date",
)
HEADER_FILL = "15803D"
MAX_COLUMN_WIDTH = 50
# Excel's limit for sheet titles
MAX_SHEET_TITLE = 31

_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\s]+')
_THIN = Side(style="thin")
_BORDER = Border(left=_THIN, right=_THIN, top=_THIN, bottom=_THIN)


@dataclass(frozen=True)
class ExportRow:
    order_number: str
    customer: str
    product_code: str
    product_name: str
    quantity: int
    unit: str
    catalog_price: Decimal | None
    charged_price: Decimal
    order_date: str

    def values(self) -> tuple[Any, ...]:
        return (
            self.order_number,
            self.customer,
            self.product_code,
            self.product_name,
            self.quantity,
            self.unit,
            self.catalog_price,
            self.charged_price,
            self.order_date,
        )


@dataclass(frozen=True)
class ExportFile:
    filename: str
    content: bytes
    row_count: int


def safe_filename(name: str, fallback: str = "customer") -> str:
    """Replace characters that are not allowed (or awkward) in file names with ``_``."""
    cleaned = _UNSAFE_FILENAME_CHARS.sub("_", (name or "").strip()).strip("._")
    return cleaned or fallback


def _date_stamp(value: date | str | None, today: date) -> str:
    if value is None or value == "":
        return today.isoformat()
    if isinstance(value, (date, datetime)):
        return value.isoformat()[:10]
    return str(value)


class OrderExportService:
    """One row per order line; one file per customer or one for a selection.

    Exporting nothing is a silent no-op: no file is produced and no error raised.
    """

    def __init__(self, translator: Translator | None = None, date_format: str = "%d.%m.%Y"):
        self.translator = translator or Translator()
        self.date_format = date_format

    def build_rows(self, orders: Iterable[OrderRead]) -> list[ExportRow]:
        rows: list[ExportRow] = []
        for order in orders:
            order_date = order.created_at.strftime(self.date_format) if order.created_at else ""
            for item in order.items:
                rows.append(
                    ExportRow(
                        order_number=order.display_number,
                        customer=order.customer_name,
                        product_code=item.product_code,
                        product_name=item.product_name,
                        quantity=item.quantity,
                        unit=item.unit,
                        catalog_price=item.catalog_price,
                        charged_price=item.unit_price,
                        order_date=order_date,
                    )
                )
        return rows

    def export(
        self,
        orders: Sequence[OrderRead],
        selected_ids: Iterable[Any] | None = None,
        date_filter: date | str | None = None,
        today: date | None = None,
    ) -> list[ExportFile]:
        """Render the workbooks for ``orders``.

        Args:
            orders: Orders in display order, already filtered by the caller
            selected_ids: Explicit selection; when given, one file holds only these orders
            date_filter: Active date filter, used in per-customer file names
            today: Date stamp for file names (defaults to the current date)

        Returns:
            Generated files; empty when there is nothing to export
        """
        today = today or date.today()

        if selected_ids is not None:
            wanted = {str(order_id) for order_id in selected_ids}
            rows = self.build_rows(order for order in orders if str(order.id) in wanted)
            if not rows:
                logger.info("Export skipped, selection has no order lines")
                return []
            filename = f"orders_{today.isoformat()}.xlsx"
            return [ExportFile(filename, self.render_workbook(rows, self.translator.t("Orders")), len(rows))]

        groups: dict[str, list[OrderRead]] = {}
        for order in orders:
            groups.setdefault(order.customer_name.strip(), []).append(order)

        stamp = _date_stamp(date_filter, today)
        files: list[ExportFile] = []
        for customer, customer_orders in groups.items():
            rows = self.build_rows(customer_orders)
            if not rows:
                continue
            filename = f"{safe_filename(customer)}_{safe_filename(stamp, 'date')}.xlsx"
            title = customer or self.translator.t("Orders")
            files.append(ExportFile(filename, self.render_workbook(rows, title), len(rows)))

        logger.info(f"Prepared {len(files)} export file(s) from {len(orders)} order(s)")
        return files

    def render_workbook(self, rows: Sequence[ExportRow], title: str) -> bytes:
        """Serialize rows to an .xlsx blob: styled header row, then one row per line item."""
        wb = Workbook()
        ws = wb.active
        ws.title = re.sub(r"[\\/*?:\[\]]", "_", title)[:MAX_SHEET_TITLE] or "Sheet1"

        headers = [self.translator.t(header) for header in HEADERS]
        for column, header in enumerate(headers, start=1):
            cell = ws.cell(row=1, column=column, value=header)
            cell.font = Font(bold=True, color="FFFFFF")
            cell.fill = PatternFill("solid", fgColor=HEADER_FILL)
            cell.alignment = Alignment(horizontal="center")
            cell.border = _BORDER

        for row_index, row in enumerate(rows, start=2):
            for column, value in enumerate(row.values(), start=1):
                cell = ws.cell(row=row_index, column=column, value=value)
                cell.border = _BORDER

        for column in range(1, len(headers) + 1):
            letter = get_column_letter(column)
            width = max(len("" if cell.value is None else str(cell.value)) for cell in ws[letter])
            ws.column_dimensions[letter].width = min(width + 2, MAX_COLUMN_WIDTH)
        ws.freeze_panes = "A2"

        buffer = BytesIO()
        wb.save(buffer)
        return buffer.getvalue()
