"""
Dashboard routes (overview statistics, vehicle history, profile)
"""
from flask import render_template, request
from flask_login import login_required, current_user

from portal.blueprints.dashboard import dashboard_bp
from portal.services.dashboard_stats import summarize, vehicle_history
from portal.services.filters import PERIODS, PERIOD_LABELS, configured_timezone
from portal.services.records import fetch_test_records
from portal.services.repository import get_repository


@dashboard_bp.route('/')
@login_required
def home():
    """Staff overview, or the owner's own vehicle history"""
    records = fetch_test_records(get_repository())

    if not current_user.has_role('staff'):
        return render_template(
            'dashboard/user_home.html',
            tests=vehicle_history(records, current_user.vehicle_number)
        )

    period = request.args.get('period', 'all')
    if period not in PERIODS:
        period = 'all'

    stats = summarize(records, period, tz=configured_timezone())
    return render_template(
        'dashboard/home.html',
        stats=stats,
        periods=PERIODS,
        period_labels=PERIOD_LABELS,
        active_period=period
    )


@dashboard_bp.route('/profile')
@login_required
def profile():
    """Current account details"""
    doc = get_repository().get_user(current_user.id) or {}
    return render_template('dashboard/profile.html', user=current_user, profile=doc)
