"""
Dashboard statistics for a period preset
"""
from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone, tzinfo
from typing import Dict, List, Optional

from portal.services.filters import FilterState, day_key, derive_view, period_range

RECENT_LIMIT = 5


def _breakdown(records: List[Dict], field: str) -> List[Dict]:
    counts = Counter(record.get(field) or 'Unknown' for record in records)
    return [{'name': name, 'value': value} for name, value in counts.items()]


def summarize(records: List[Dict], period: str = 'all', now: Optional[datetime] = None,
              tz: tzinfo = timezone.utc) -> Dict:
    """
    Totals, pass/fail counts, type breakdowns and recent tests for one period.

    ``today`` always counts over the full record set so it stays a live metric.
    """
    state = FilterState()
    state.apply_period(period, now, tz)
    view = derive_view(records, state, tz)

    passed = sum(1 for r in view if r.get('testResult') == 'Pass')
    failed = sum(1 for r in view if r.get('testResult') == 'Fail')
    today = period_range('today', now, tz)[0]
    tests_today = sum(1 for r in records if day_key(r['date'], tz) == today)

    return {
        'period': period,
        'total': len(view),
        'passed': passed,
        'failed': failed,
        'today': tests_today,
        'pass_fail': [{'name': 'Pass', 'value': passed}, {'name': 'Fail', 'value': failed}],
        'vehicle_types': _breakdown(view, 'vehicleType'),
        'fuel_types': _breakdown(view, 'fuelType'),
        'recent': view[:RECENT_LIMIT],
    }


def vehicle_history(records: List[Dict], vehicle_number: str) -> List[Dict]:
    """Tests recorded for one vehicle, keeping the newest-first order"""
    if not vehicle_number:
        return []
    wanted = vehicle_number.strip().upper()
    return [r for r in records if str(r.get('vehicleNumber') or '').strip().upper() == wanted]
