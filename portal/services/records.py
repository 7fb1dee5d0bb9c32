"""
Test record retrieval and date normalization

Stored dates arrive as Firestore timestamps, native datetimes, ISO strings,
epoch numbers or serialized ``{"_seconds": ...}`` maps depending on which
client wrote the document. ``normalize_date`` turns all of them into one
timezone-aware UTC ``datetime``; nothing past this module branches on the raw
representation.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

# Sentinel for "unknown date"; sorts as the oldest possible record
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _from_seconds(seconds: Any, nanos: Any = 0) -> datetime:
    return datetime.fromtimestamp(float(seconds) + float(nanos or 0) / 1e9, tz=timezone.utc)


def normalize_date(value: Any) -> datetime:
    """
    Convert any stored date representation to an aware UTC datetime.

    Unparseable or missing values return ``EPOCH`` instead of raising.
    """
    if value is None or value == '':
        return EPOCH

    try:
        # Provider timestamps exposing a conversion (protobuf, api-core)
        for method in ('to_datetime', 'ToDatetime'):
            convert = getattr(value, method, None)
            if callable(convert):
                return _as_utc(convert())

        if isinstance(value, datetime):
            return _as_utc(value)
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

        if isinstance(value, dict):
            for key in ('seconds', '_seconds'):
                if key in value:
                    return _from_seconds(value[key], value.get(key.replace('seconds', 'nanoseconds')))
            return EPOCH

        seconds = getattr(value, 'seconds', None)
        if seconds is not None and not isinstance(value, (int, float, str)):
            return _from_seconds(seconds, getattr(value, 'nanos', 0) or getattr(value, 'nanoseconds', 0))

        if isinstance(value, bool):
            return EPOCH
        if isinstance(value, (int, float)):
            # Numbers are epoch milliseconds, as written by browser clients
            return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)

        if isinstance(value, str):
            text = value.strip()
            if text.endswith('Z'):
                text = text[:-1] + '+00:00'
            return _as_utc(datetime.fromisoformat(text))
    except (ValueError, TypeError, OverflowError, OSError):
        logger.debug(f"Unparseable date value {value!r}; using epoch")
        return EPOCH

    return EPOCH


def record_date(doc: Dict) -> datetime:
    """Normalized date of a record: testDate, else createdAt, else EPOCH"""
    raw = doc.get('testDate')
    if raw is None or raw == '':
        raw = doc.get('createdAt')
    return normalize_date(raw)


def fetch_test_records(repository) -> List[Dict]:
    """
    Load every test record, attach its normalized ``date`` and sort newest first.

    A failing store is logged and reported as an empty list so pages still render.
    """
    try:
        docs = repository.list_tests()
    except Exception:
        logger.exception("Error fetching test records")
        return []

    records = []
    for doc in docs:
        record = dict(doc)
        record['date'] = record_date(doc)
        records.append(record)

    records.sort(key=lambda r: r['date'], reverse=True)
    return records
