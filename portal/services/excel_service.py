"""
Excel Report Generation Service
Creates .xlsx files from the filtered report view
"""
from __future__ import annotations
from datetime import date, datetime, timezone, tzinfo
from typing import Dict, List
import json
from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side
from openpyxl.utils import get_column_letter

from portal.services.csv_export import (
    EmptyExportError, export_columns, is_date_like, is_identifier_column,
)
from portal.services.records import normalize_date


class ExcelReportService:
    """Service for generating Excel reports"""

    # Color scheme
    HEADER_FILL = PatternFill(start_color="2E7D32", end_color="2E7D32", fill_type="solid")
    HEADER_FONT = Font(bold=True, color="FFFFFF", size=12)
    PASS_FONT = Font(color="1B5E20", bold=True)
    FAIL_FONT = Font(color="B71C1C", bold=True)

    BORDER = Border(
        left=Side(style='thin'),
        right=Side(style='thin'),
        top=Side(style='thin'),
        bottom=Side(style='thin')
    )

    @staticmethod
    def cell_value(column: str, value, tz: tzinfo = timezone.utc):
        """Native cell value; identifier columns stay text"""
        if value is None:
            return None
        if is_date_like(value):
            if isinstance(value, date) and not isinstance(value, datetime):
                return value
            return normalize_date(value).astimezone(tz).date()
        if isinstance(value, (dict, list)):
            return json.dumps(value, default=str)
        if is_identifier_column(column):
            return str(value)
        if isinstance(value, (int, float, bool, str)):
            return value
        return str(value)

    @staticmethod
    def create_report(records: List[Dict], tz: tzinfo = timezone.utc) -> bytes:
        """
        Create Excel workbook from the report view.

        Args:
            records: Filtered test records

        Returns:
            Excel file as bytes
        """
        if not records:
            raise EmptyExportError("No records to export.")

        wb = Workbook()
        ws = wb.active
        ws.title = "Test Reports"

        columns = export_columns(records)
        for col, header in enumerate(columns, 1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.font = ExcelReportService.HEADER_FONT
            cell.fill = ExcelReportService.HEADER_FILL
            cell.border = ExcelReportService.BORDER
            cell.alignment = Alignment(horizontal='center', vertical='center')
        ws.row_dimensions[1].height = 20
        ws.freeze_panes = 'A2'

        for row, record in enumerate(records, 2):
            for col, column in enumerate(columns, 1):
                value = ExcelReportService.cell_value(column, record.get(column), tz)
                cell = ws.cell(row=row, column=col, value=value)
                cell.border = ExcelReportService.BORDER
                if isinstance(value, date):
                    cell.number_format = 'yyyy-mm-dd'
                elif is_identifier_column(column):
                    cell.number_format = '@'
                if column == 'testResult':
                    if value == 'Pass':
                        cell.font = ExcelReportService.PASS_FONT
                    elif value == 'Fail':
                        cell.font = ExcelReportService.FAIL_FONT

        # Column widths
        for col, column in enumerate(columns, 1):
            ws.column_dimensions[get_column_letter(col)].width = max(12, min(40, len(column) + 4))

        output = BytesIO()
        wb.save(output)
        output.seek(0)
        return output.getvalue()
