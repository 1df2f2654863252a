from __future__ import annotations

from decimal import Decimal
from io import BytesIO
from typing import Iterable, List, Sequence

from django.http import HttpResponse
from django.utils import timezone

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.table import Table, TableStyleInfo

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def sanitize_value(raw: object) -> object:
    """
    Prepare a value for XLSX cells while preserving numeric types.

    - Keep ints/floats/Decimals numeric so Excel treats them as numbers.
    - Strip illegal control chars from text.
    - Booleans render as Yes/No for readability.
    """
    if raw is None:
        return ""
    if isinstance(raw, bool):
        return "Yes" if raw else "No"
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        # Preserve integers without a trailing .0 where possible
        return int(raw) if raw.is_integer() else raw
    if isinstance(raw, Decimal):
        if not raw.is_finite():
            return str(raw)
        if raw == raw.to_integral_value():
            return int(raw)
        return float(raw)
    return ILLEGAL_CHARACTERS_RE.sub("", str(raw))


def base_styles():
    """Return the shared style objects used across XLSX exports."""
    thin_side = Side(style="thin", color="FFE5E7EB")
    return {
        "title_font": Font(name="Calibri", bold=True, size=14),
        "header_font": Font(name="Calibri", bold=True, size=11),
        "cell_font": Font(name="Calibri", size=11),
        "center_header": Alignment(horizontal="center", vertical="center", wrap_text=True),
        "left_cell": Alignment(horizontal="left", vertical="center", wrap_text=True),
        "center_cell": Alignment(horizontal="center", vertical="center", wrap_text=True),
        "header_fill": PatternFill("solid", fgColor="FFF9FAFB"),
        "border": Border(left=thin_side, right=thin_side, top=thin_side, bottom=thin_side),
    }


def _safe_table_name(base: str, existing: set[str]) -> str:
    cleaned = "".join(ch if ch.isalnum() else "_" for ch in (base or "Table"))
    if not cleaned:
        cleaned = "Table"
    if cleaned[0].isdigit():
        cleaned = f"T{cleaned}"
    candidate = cleaned
    counter = 1
    while candidate in existing:
        candidate = f"{cleaned}_{counter}"
        counter += 1
    return candidate


def write_table(
    ws,
    headers: Sequence[str],
    rows: Iterable[Sequence[object]],
    *,
    start_row: int = 1,
    column_widths: Sequence[int] | None = None,
    table_name: str | None = None,
    add_table: bool = True,
):
    """Write a styled table (header + rows) and optionally add an Excel table style."""
    styles = base_styles()
    header_row_idx = start_row

    def is_text_column(label: str) -> bool:
        """Name/description columns stay left-aligned."""
        needle = str(label).lower()
        return any(word in needle for word in ("name", "customer", "item", "description", "notes"))

    # Header
    for col_idx, label in enumerate(headers, start=1):
        c = ws.cell(row=header_row_idx, column=col_idx, value=label)
        c.font = styles["header_font"]
        c.alignment = styles["center_header"]
        c.fill = styles["header_fill"]
        c.border = styles["border"]

    # Data rows
    row_idx = header_row_idx + 1
    for data_row in rows:
        for col_idx, raw_value in enumerate(data_row, start=1):
            c = ws.cell(row=row_idx, column=col_idx, value=sanitize_value(raw_value))
            c.font = styles["cell_font"]
            if is_text_column(headers[col_idx - 1]):
                c.alignment = styles["left_cell"]
            else:
                c.alignment = styles["center_cell"]
            c.border = styles["border"]
        row_idx += 1

    # Column widths
    widths = column_widths or []
    default_width = 18
    for col_idx in range(1, len(headers) + 1):
        letter = get_column_letter(col_idx)
        width = widths[col_idx - 1] if col_idx - 1 < len(widths) else default_width
        ws.column_dimensions[letter].width = width

    data_end = row_idx - 1
    # Excel rejects a table without data rows
    if add_table and data_end > header_row_idx:
        existing = set(ws.tables.keys())
        name = _safe_table_name(table_name or f"Table{len(existing) + 1}", existing)
        ref = f"A{header_row_idx}:{get_column_letter(len(headers))}{data_end}"
        table = Table(displayName=name, ref=ref)
        table.tableStyleInfo = TableStyleInfo(
            name="TableStyleMedium9",
            showFirstColumn=False,
            showLastColumn=False,
            showRowStripes=True,
            showColumnStripes=False,
        )
        ws.add_table(table)

    return header_row_idx, data_end


def workbook_response(wb: Workbook, filename: str) -> HttpResponse:
    """Save a workbook to an HTTP attachment response."""
    bio = BytesIO()
    wb.save(bio)
    resp = HttpResponse(bio.getvalue(), content_type=XLSX_CONTENT_TYPE)
    resp["Content-Disposition"] = f"attachment; filename={filename}"
    return resp


def build_table_response(
    *,
    sheet_title: str,
    report_title: str | None,
    headers: List[str],
    rows: Iterable[Sequence[object]],
    filename: str,
    column_widths: Sequence[int] | None = None,
    subtitle: str | None = None,
    include_timestamp: bool = True,
    table_name: str | None = None,
    right_to_left: bool = False,
):
    """
    Build a single-sheet XLSX response with a styled data table.

    Adds a merged title row, optional timestamp subtitle and a banded Excel table
    so the exported sheet looks like a proper grid.
    """
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_title or "Report"
    if right_to_left:
        ws.sheet_view.rightToLeft = True

    styles = base_styles()
    row_idx = 1

    if report_title:
        ws.merge_cells(start_row=row_idx, start_column=1, end_row=row_idx, end_column=len(headers))
        c = ws.cell(row=row_idx, column=1, value=report_title)
        c.font = styles["title_font"]
        c.alignment = styles["center_header"]
        row_idx += 1

    ts_text = subtitle
    if include_timestamp and not subtitle:
        ts_text = f"Generated: {timezone.localtime(timezone.now()).strftime('%Y-%m-%d %H:%M')}"
    if ts_text:
        ws.merge_cells(start_row=row_idx, start_column=1, end_row=row_idx, end_column=len(headers))
        c = ws.cell(row=row_idx, column=1, value=ts_text)
        c.font = styles["cell_font"]
        c.alignment = styles["left_cell"]
        row_idx += 1

    write_table(
        ws,
        headers=headers,
        rows=rows,
        start_row=row_idx,
        column_widths=column_widths,
        table_name=table_name,
        add_table=True,
    )
    return workbook_response(wb, filename)
