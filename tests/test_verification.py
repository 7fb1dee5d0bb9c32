from datetime import datetime, timedelta, timezone

import pytest

from portal.services.repository import MemoryRepository
from portal.services.verification import certificate_status, lookup_certificate

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)


@pytest.fixture()
def repository():
    repo = MemoryRepository()
    repo.add_test({
        'id': 'older',
        'vehicleNumber': 'TN-01-AB-1234',
        'testDate': '2023-06-01T10:00:00Z',
        'expiryDate': '2023-12-01T10:00:00Z',
        'testResult': 'Pass',
    })
    repo.add_test({
        'id': 'latest',
        'vehicleNumber': 'TN-01-AB-1234',
        'testDate': NOW - timedelta(days=10),
        'expiryDate': NOW + timedelta(days=170),
        'testResult': 'Pass',
    })
    repo.add_test({
        'id': 'expired',
        'vehicleNumber': 'TN-33-CD-5678',
        'testDate': '2023-01-15T10:30:00Z',
        'expiryDate': '2023-07-15T00:00:00Z',
        'testResult': 'Fail',
    })
    return repo


def test_lookup_returns_latest_test(repository):
    status = lookup_certificate(repository, 'tn-01-ab-1234 ', now=NOW)
    assert status.record['id'] == 'latest'
    assert status.is_valid
    assert status.status_label == 'VALID'
    assert status.test_date == NOW - timedelta(days=10)


def test_lookup_reports_expired_certificate(repository):
    status = lookup_certificate(repository, 'TN-33-CD-5678', now=NOW)
    assert status.record['id'] == 'expired'
    assert not status.is_valid
    assert status.status_label == 'EXPIRED'


def test_lookup_unknown_or_blank_vehicle(repository):
    assert lookup_certificate(repository, 'XX-00-ZZ-0000', now=NOW) is None
    assert lookup_certificate(repository, '   ', now=NOW) is None


def test_missing_expiry_is_never_valid():
    status = certificate_status({'testDate': NOW}, now=NOW)
    assert not status.is_valid


def test_expiry_must_be_strictly_after_now():
    assert not certificate_status({'expiryDate': NOW}, now=NOW).is_valid
    assert certificate_status({'expiryDate': NOW + timedelta(seconds=1)}, now=NOW).is_valid


def test_store_errors_propagate():
    class Broken(MemoryRepository):
        def find_tests_by_vehicle(self, vehicle_number):
            raise ConnectionError('down')

    with pytest.raises(ConnectionError):
        lookup_certificate(Broken(), 'TN-01', now=NOW)
