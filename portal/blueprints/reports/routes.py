from __future__ import annotations

from datetime import date, datetime

from flask import render_template, request, Response, flash, redirect, url_for, jsonify, current_app
from flask_login import login_required, current_user

from portal.services.authz import staff_required
from portal.services.csv_export import EmptyExportError, build_csv, export_filename
from portal.services.excel_service import ExcelReportService
from portal.services.filters import (
    FilterState, derive_view, configured_timezone, local_today,
    STATUSES, VEHICLE_TYPES, FUEL_TYPES, PERIODS, PERIOD_LABELS,
)
from portal.services.pagination import get_page_args, paginate_sequence
from portal.services.records import fetch_test_records
from portal.services.repository import get_repository
from portal.services.security import log_security_event

from . import reports_bp

XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


def _current_view():
    """Fetch all records and derive the view for the request's filter arguments"""
    tz = configured_timezone()
    state = FilterState.from_args(request.args, tz=tz)
    records = fetch_test_records(get_repository())
    return state, derive_view(records, state, tz), len(records), tz


@reports_bp.route("/")
@login_required
@staff_required
def index():
    """Filterable test report table"""
    state, view, total_records, tz = _current_view()
    page, per_page = get_page_args(default_per_page=current_app.config.get('REPORTS_PER_PAGE', 50))

    return render_template(
        "reports/index.html",
        filters=state,
        filter_args=state.to_args(),
        results=paginate_sequence(view, page, per_page),
        total_records=total_records,
        statuses=STATUSES,
        vehicle_types=VEHICLE_TYPES,
        fuel_types=FUEL_TYPES,
        periods=PERIODS,
        period_labels=PERIOD_LABELS,
    )


@reports_bp.route("/export")
@login_required
@staff_required
def export():
    """Download the current filtered view as CSV (default) or XLSX"""
    fmt = request.args.get("format", "csv")
    state, view, _, tz = _current_view()
    today = local_today(tz=tz)

    try:
        if fmt == "xlsx":
            body = ExcelReportService.create_report(view, tz)
            filename = export_filename(today, "xlsx")
            mimetype = XLSX_MIMETYPE
        else:
            body = build_csv(view, tz)
            filename = export_filename(today)
            mimetype = "text/csv"
    except EmptyExportError as e:
        flash(str(e), "warning")
        return redirect(url_for("reports.index", **state.to_args()))

    log_security_event('report_export', user_id=current_user.id, email=current_user.email,
                       details=f"{fmt}: {len(view)} records")
    return Response(body, mimetype=mimetype, headers={
        "Content-Disposition": f"attachment; filename={filename}"
    })


@reports_bp.route("/data")
@login_required
@staff_required
def data():
    """Filtered view as JSON"""
    state, view, _, _ = _current_view()
    records = []
    for record in view:
        records.append({
            key: value.isoformat() if isinstance(value, (datetime, date)) else value
            for key, value in record.items()
        })

    return jsonify({
        'filters': state.to_args(),
        'period': state.period,
        'count': len(records),
        'records': records,
    })
