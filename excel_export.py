"""
Excel export functionality for Trip Tracker
"""
from __future__ import annotations

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

from computations import RECONCILE_EPS
from models import STATUS_PAID, STATUS_PARTIAL, DashboardSnapshot

MONEY_FORMAT = "#,##0.00"

_STATUS_FILL = {
    STATUS_PAID: "C6EFCE",
    STATUS_PARTIAL: "FFEB9C",
}
_PENDING_FILL = "FFC7CE"


def _style_header(ws, row=1):
    """Apply header styling to worksheet row"""
    header_font = Font(bold=True, color="FFFFFF")
    fill = PatternFill("solid", fgColor="10B981")
    align = Alignment(horizontal="center", vertical="center")
    thin = Side(style="thin", color="A0A0A0")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    for cell in ws[row]:
        cell.font = header_font
        cell.fill = fill
        cell.alignment = align
        cell.border = border


def _autosize_columns(ws, min_width=10, max_width=45):
    """Auto-size columns based on content"""
    for col in range(1, ws.max_column + 1):
        letter = get_column_letter(col)
        max_len = 0
        for cell in ws[letter]:
            v = cell.value
            if v is None:
                continue
            max_len = max(max_len, len(str(v)))
        ws.column_dimensions[letter].width = max(min_width, min(max_width, max_len + 2))


def export_dashboard(snap: DashboardSnapshot, filepath: str) -> None:
    """
    Export a dashboard snapshot to an Excel file with three sheets:
    - Overview: trip figures, countdown and reconciliation
    - Expenses: breakdown with a TOTAL formula row
    - Members: paid amount, status and amount due per member
    """
    wb = Workbook()
    # remove default sheet
    wb.remove(wb.active)

    trip = snap.trip
    cd = snap.countdown

    # Overview
    ws = wb.create_sheet("Overview")
    ws.append(["Item", "Value"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    ws.append(["Trip", trip.trip_name])
    ws.append(["Start date", trip.start_date])
    ws.append(["Total planned cost", trip.total_cost])
    ws.append(["Per head contribution", trip.per_head])
    ws.append(["Members", snap.member_count])
    ws.append(["Total expenses", snap.total_expenses])
    ws.append(["Per member split", snap.per_member_split])
    ws.append(["Planned minus spent", snap.reconciliation_gap])
    if cd.is_past:
        ws.append(["Countdown", "Trip is underway"])
    else:
        ws.append(["Countdown", f"{cd.days}d {cd.hours:02d}h {cd.minutes:02d}m {cd.seconds:02d}s"])
    for key, value in trip.extras.items():
        ws.append([key, value])
    for r in range(2, ws.max_row + 1):
        if isinstance(ws.cell(r, 2).value, float):
            ws.cell(r, 2).number_format = MONEY_FORMAT
    if snap.expenses and abs(snap.reconciliation_gap) >= RECONCILE_EPS:
        ws.append(["Warning", "Expense breakdown does not match the planned total"])
        ws.cell(ws.max_row, 1).font = Font(bold=True, color="C00000")
    _autosize_columns(ws)

    # Expenses
    ws = wb.create_sheet("Expenses")
    ws.append(["Category", "Amount", "Date", "Notes"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for e in snap.expenses:
        ws.append([e.category, e.cost, e.date, e.notes])
    last_data_row = ws.max_row
    ws.append(["TOTAL", f"=SUM(B2:B{last_data_row})" if last_data_row >= 2 else 0])
    ws.cell(ws.max_row, 1).font = Font(bold=True)
    for r in range(2, ws.max_row + 1):
        ws.cell(r, 2).number_format = MONEY_FORMAT
    _autosize_columns(ws)

    # Members
    ws = wb.create_sheet("Members")
    ws.append(["Member", "Paid", "Status", "Amount Due"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for m in snap.members:
        ws.append([m.name, m.paid, m.status, m.amount_due])
        row = ws.max_row
        ws.cell(row, 3).fill = PatternFill("solid", fgColor=_STATUS_FILL.get(m.status, _PENDING_FILL))
        if m.is_current_user:
            ws.cell(row, 1).font = Font(bold=True)
    for r in range(2, ws.max_row + 1):
        ws.cell(r, 2).number_format = MONEY_FORMAT
        ws.cell(r, 4).number_format = MONEY_FORMAT
    _autosize_columns(ws)

    wb.save(filepath)
