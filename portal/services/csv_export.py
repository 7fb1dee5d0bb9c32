"""
CSV export of the filtered report view

Columns are the union of every record's keys with the identifying fields
first. Phone numbers and vehicle identifiers are written as ``="value"``
so spreadsheet applications keep leading zeros and never switch to
scientific notation.
"""
from __future__ import annotations

import json
import re
from datetime import date, datetime, timezone, tzinfo
from typing import Any, Dict, List

from portal.services.records import normalize_date

PRIORITY_COLUMNS = [
    'id', 'date', 'testDate', 'createdAt', 'expiryDate',
    'vehicleNumber', 'ownerName', 'name', 'email', 'mobileNumber', 'phone',
    'testResult', 'vehicleType', 'fuelType',
]

IDENTIFIER_COLUMNS = {'vehicleNumber', 'chassisNumber', 'engineNumber', 'registrationNumber'}

_LONG_OR_ZERO_PADDED = re.compile(r'^(0\d+|\d{12,})$')


class EmptyExportError(ValueError):
    """Raised when there is nothing to export"""


def export_columns(records: List[Dict]) -> List[str]:
    """Union of record keys: priority columns first, the rest alphabetical"""
    keys = set()
    for record in records:
        keys.update(record.keys())
    remaining = sorted(keys)
    leading = [col for col in PRIORITY_COLUMNS if col in keys]
    return leading + [col for col in remaining if col not in leading]


def is_identifier_column(column: str) -> bool:
    lowered = column.lower()
    return column in IDENTIFIER_COLUMNS or 'phone' in lowered or 'mobile' in lowered


def is_date_like(value: Any) -> bool:
    if isinstance(value, (datetime, date)):
        return True
    if isinstance(value, dict):
        return 'seconds' in value or '_seconds' in value
    if isinstance(value, (str, int, float, bool, list)):
        return False
    return hasattr(value, 'seconds') or callable(getattr(value, 'to_datetime', None))


def escape_csv_field(text: str) -> str:
    if any(ch in text for ch in (',', '"', '\n', '\r')):
        return '"' + text.replace('"', '""') + '"'
    return text


def formula_text(text: str) -> str:
    """Wrap a value as a spreadsheet text formula"""
    cell = '="' + text.replace('"', '""') + '"'
    if any(ch in text for ch in (',', '"', '\n', '\r')):
        return escape_csv_field(cell)
    return cell


def format_value(column: str, value: Any, tz: tzinfo = timezone.utc) -> str:
    """One CSV cell, already escaped"""
    if value is None:
        return ''
    if is_date_like(value):
        if isinstance(value, date) and not isinstance(value, datetime):
            return value.isoformat()
        return normalize_date(value).astimezone(tz).strftime('%Y-%m-%d')

    if isinstance(value, (dict, list)):
        text = json.dumps(value, default=str)
    else:
        text = str(value)

    if text and (is_identifier_column(column) or _LONG_OR_ZERO_PADDED.match(text)):
        return formula_text(text)
    return escape_csv_field(text)


def build_csv(records: List[Dict], tz: tzinfo = timezone.utc) -> str:
    """
    Serialize records to CSV text.

    Raises:
        EmptyExportError: the view holds no records
    """
    if not records:
        raise EmptyExportError("No records to export.")

    columns = export_columns(records)
    lines = [','.join(escape_csv_field(col) for col in columns)]
    for record in records:
        lines.append(','.join(format_value(col, record.get(col), tz) for col in columns))
    return '\n'.join(lines)


def export_filename(today: date, extension: str = 'csv') -> str:
    return f"pollution_reports_{today.isoformat()}.{extension}"
