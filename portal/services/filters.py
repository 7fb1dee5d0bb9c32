"""
Report filters

``FilterState`` holds the user's current constraints and ``derive_view``
recomputes the whole filtered view from the full record set on every call.
Date bounds are ``YYYY-MM-DD`` strings compared against each record's
normalized date truncated to a calendar day in the reporting timezone, so
both bounds are inclusive regardless of time of day.
"""
from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone, tzinfo
from typing import Dict, Iterable, List, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from portal.services.records import record_date

logger = logging.getLogger(__name__)

ALL = 'all'
CUSTOM = 'custom'

STATUSES = ('Pass', 'Fail')
VEHICLE_TYPES = ('bike', 'car', 'auto', 'truck', 'bus')
FUEL_TYPES = ('petrol', 'diesel', 'cng', 'electric')
PERIODS = ('all', 'today', 'month', 'year')

PERIOD_LABELS = {
    'all': 'All Time',
    'today': 'Today',
    'month': 'This Month',
    'year': 'This Year',
}


def resolve_timezone(name: Optional[str]) -> tzinfo:
    """Timezone for day boundaries; unknown names fall back to UTC"""
    if not name or name.upper() == 'UTC':
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown REPORT_TIMEZONE '{name}', using UTC")
        return timezone.utc


def day_key(value: datetime, tz: tzinfo = timezone.utc) -> str:
    """Calendar day of a normalized date as YYYY-MM-DD"""
    return value.astimezone(tz).date().isoformat()


def local_today(now: Optional[datetime] = None, tz: tzinfo = timezone.utc) -> date:
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(tz).date()


def parse_day(value) -> str:
    """Validate a YYYY-MM-DD input; anything else means no bound"""
    if not value:
        return ''
    try:
        return date.fromisoformat(str(value).strip()).isoformat()
    except ValueError:
        return ''


def period_range(period: str, now: Optional[datetime] = None, tz: tzinfo = timezone.utc) -> Tuple[str, str]:
    """Concrete (start_date, end_date) bounds of a period preset"""
    if period not in PERIODS:
        raise ValueError(f"Unknown period preset: {period}")
    if period == ALL:
        return '', ''

    today = local_today(now, tz)
    if period == 'today':
        start = end = today
    elif period == 'month':
        start = today.replace(day=1)
        end = today.replace(day=calendar.monthrange(today.year, today.month)[1])
    else:
        start = date(today.year, 1, 1)
        end = date(today.year, 12, 31)
    return start.isoformat(), end.isoformat()


def _choice(value, allowed: Iterable[str]) -> str:
    return value if value in allowed else ALL


@dataclass
class FilterState:
    status: str = ALL
    vehicle_type: str = ALL
    fuel_type: str = ALL
    start_date: str = ''
    end_date: str = ''
    period: str = ALL

    def apply_period(self, period: str, now: Optional[datetime] = None, tz: tzinfo = timezone.utc) -> None:
        """Select a preset; it overwrites any custom date inputs"""
        self.start_date, self.end_date = period_range(period, now, tz)
        self.period = period

    def set_date_range(self, start_date: str = '', end_date: str = '') -> None:
        """Manual date entry; leaves preset mode"""
        self.start_date = parse_day(start_date)
        self.end_date = parse_day(end_date)
        self.period = CUSTOM if (self.start_date or self.end_date) else ALL

    @property
    def is_constrained(self) -> bool:
        return any((
            self.status != ALL,
            self.vehicle_type != ALL,
            self.fuel_type != ALL,
            self.start_date,
            self.end_date,
        ))

    def matches(self, record: Dict, tz: tzinfo = timezone.utc) -> bool:
        if self.status != ALL and record.get('testResult') != self.status:
            return False
        if self.vehicle_type != ALL and record.get('vehicleType') != self.vehicle_type:
            return False
        if self.fuel_type != ALL and record.get('fuelType') != self.fuel_type:
            return False
        if self.start_date or self.end_date:
            when = record.get('date')
            if not isinstance(when, datetime):
                when = record_date(record)
            day = day_key(when, tz)
            if self.start_date and day < self.start_date:
                return False
            if self.end_date and day > self.end_date:
                return False
        return True

    @classmethod
    def from_args(cls, args, now: Optional[datetime] = None, tz: tzinfo = timezone.utc) -> 'FilterState':
        """
        Build state from request query arguments.

        A clicked preset (``period``) wins over submitted dates. Otherwise the
        preset that was active when the form rendered (``active_period``) is
        kept as long as the submitted dates still equal its range; any edited
        date switches to a custom range.
        """
        state = cls(
            status=_choice(args.get('status'), STATUSES),
            vehicle_type=_choice(args.get('vehicle_type'), VEHICLE_TYPES),
            fuel_type=_choice(args.get('fuel_type'), FUEL_TYPES),
        )
        period = args.get('period', '')
        if period in PERIODS:
            state.apply_period(period, now, tz)
            return state

        start_date = parse_day(args.get('start_date', ''))
        end_date = parse_day(args.get('end_date', ''))
        active = args.get('active_period', '')
        if active in PERIODS and (start_date, end_date) == period_range(active, now, tz):
            state.apply_period(active, now, tz)
        else:
            state.set_date_range(start_date, end_date)
        return state

    def to_args(self) -> Dict[str, str]:
        """Non-default fields as query arguments"""
        args = {}
        if self.status != ALL:
            args['status'] = self.status
        if self.vehicle_type != ALL:
            args['vehicle_type'] = self.vehicle_type
        if self.fuel_type != ALL:
            args['fuel_type'] = self.fuel_type
        if self.period in PERIODS:
            if self.period != ALL:
                args['period'] = self.period
        else:
            if self.start_date:
                args['start_date'] = self.start_date
            if self.end_date:
                args['end_date'] = self.end_date
        return args


def derive_view(records: List[Dict], state: FilterState, tz: tzinfo = timezone.utc) -> List[Dict]:
    """Records satisfying every active constraint, in their original order"""
    return [record for record in records if state.matches(record, tz)]


def configured_timezone() -> tzinfo:
    """REPORT_TIMEZONE of the current app"""
    from flask import current_app
    return resolve_timezone(current_app.config.get('REPORT_TIMEZONE'))
