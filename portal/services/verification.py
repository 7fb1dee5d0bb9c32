"""
Certificate verification by vehicle number
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Optional

from portal.services.records import normalize_date


@dataclass
class CertificateStatus:
    record: Dict
    test_date: datetime
    expiry_date: datetime
    is_valid: bool

    @property
    def status_label(self) -> str:
        return 'VALID' if self.is_valid else 'EXPIRED'


def normalize_vehicle_number(value) -> str:
    return (value or '').strip().upper()


def certificate_status(record: Dict, now: Optional[datetime] = None) -> CertificateStatus:
    """Validity of one test: the expiry date must lie after ``now``"""
    if now is None:
        now = datetime.now(timezone.utc)
    expiry = normalize_date(record.get('expiryDate'))
    return CertificateStatus(
        record=record,
        test_date=normalize_date(record.get('testDate')),
        expiry_date=expiry,
        is_valid=expiry > now,
    )


def lookup_certificate(repository, vehicle_number: str, now: Optional[datetime] = None) -> Optional[CertificateStatus]:
    """
    Latest test of a vehicle and whether its certificate is still valid.

    Returns None when the vehicle has no tests. Store errors propagate.
    """
    vehicle_number = normalize_vehicle_number(vehicle_number)
    if not vehicle_number:
        return None

    docs = repository.find_tests_by_vehicle(vehicle_number)
    if not docs:
        return None

    latest = max(docs, key=lambda doc: normalize_date(doc.get('testDate')))
    return certificate_status(latest, now)
