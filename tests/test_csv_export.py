import csv
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from portal.services.csv_export import (
    EmptyExportError, build_csv, export_columns, export_filename, format_value,
)


def _record(**fields):
    base = {
        'id': 'T1',
        'date': datetime(2024, 2, 14, 10, 0, tzinfo=timezone.utc),
        'vehicleNumber': 'TN-01-AB-1234',
        'ownerName': 'Ravi Kumar',
        'mobileNumber': '9876543210',
        'testResult': 'Pass',
        'fuelType': 'petrol',
    }
    base.update(fields)
    return base


def test_header_puts_priority_columns_first_then_alphabetical():
    records = [_record(notes='ok', co2=0.45), _record(id='T2', location='Salem')]
    header = build_csv(records).split('\n')[0]
    assert header == 'id,date,vehicleNumber,ownerName,mobileNumber,testResult,fuelType,co2,location,notes'


def test_columns_are_union_of_record_keys():
    columns = export_columns([{'b': 1}, {'a': 2, 'id': 'x'}, {'vehicleNumber': 'V'}])
    assert columns == ['id', 'vehicleNumber', 'a', 'b']


def test_identifier_and_phone_values_are_text_formulas():
    line = build_csv([_record()]).split('\n')[1]
    assert '="TN-01-AB-1234"' in line
    assert '="9876543210"' in line
    # dates are written as the calendar day
    assert line.startswith('T1,2024-02-14,')


def test_row_values_are_escaped():
    csv_text = build_csv([_record(location='Erode, TN', notes='said "ok"')])
    row = csv_text.split('\n')[1]
    assert '"Erode, TN"' in row
    assert '"said ""ok"""' in row


def test_missing_values_are_empty_cells():
    csv_text = build_csv([_record(co2=1.2), _record(id='T2')])
    lines = csv_text.split('\n')
    assert len(lines) == 3
    assert lines[2].endswith(',')


def test_long_and_zero_padded_numbers_keep_their_digits():
    assert format_value('reference', '012345') == '="012345"'
    assert format_value('reference', '123456789012') == '="123456789012"'
    assert format_value('reference', '12345') == '12345'
    assert format_value('co2', 0.45) == '0.45'


def test_formula_cell_containing_a_comma_is_quoted():
    assert format_value('vehicleNumber', 'TN 01, AB') == '"=""TN 01, AB"""'


def test_formula_cell_containing_a_quote_is_quoted():
    field = format_value('vehicleNumber', 'AB"1')
    assert field == '"=""AB""""1"""'
    assert next(csv.reader([field])) == ['="AB""1"']


def test_date_values_use_reporting_timezone():
    value = datetime(2024, 2, 13, 20, 0, tzinfo=timezone.utc)
    assert format_value('testDate', value) == '2024-02-13'
    assert format_value('testDate', value, ZoneInfo('Asia/Kolkata')) == '2024-02-14'
    assert format_value('expiryDate', {'_seconds': 0}) == '1970-01-01'
    assert format_value('issued', date(2024, 1, 5)) == '2024-01-05'


def test_nested_values_are_serialized_as_json():
    assert format_value('readings', {'co': 0.3}) == '"{""co"": 0.3}"'


def test_empty_view_raises():
    with pytest.raises(EmptyExportError, match='No records to export.'):
        build_csv([])


def test_export_filename():
    assert export_filename(date(2024, 2, 14)) == 'pollution_reports_2024-02-14.csv'
    assert export_filename(date(2024, 2, 14), 'xlsx') == 'pollution_reports_2024-02-14.xlsx'
