import logging
from datetime import datetime, timedelta, timezone

from portal.models.user import User
from portal.services.security import (
    RateLimiter, is_valid_email, is_valid_mobile_number, is_valid_password, log_security_event,
    sanitize_input,
)


def test_validators():
    assert is_valid_email('owner@example.com')
    assert not is_valid_email('owner@example')
    assert not is_valid_email(None)

    assert is_valid_password('secret')
    assert not is_valid_password('short')
    assert is_valid_password('abc', min_length=3)

    assert is_valid_mobile_number('+919876543210')
    assert not is_valid_mobile_number('98765')


def test_sanitize_input():
    assert sanitize_input('  TN-01\x00 ') == 'TN-01'
    assert sanitize_input('abcdef', max_length=3) == 'abc'
    assert sanitize_input(None) is None


def test_rate_limiter_window():
    limiter = RateLimiter()
    for _ in range(3):
        assert limiter.is_allowed('ip', max_attempts=3)[0]
    allowed, remaining, reset = limiter.is_allowed('ip', max_attempts=3)
    assert not allowed
    assert remaining == 0
    assert limiter.is_allowed('other-ip', max_attempts=3)[0]


def test_rate_limiter_forgets_idle_identifiers():
    limiter = RateLimiter()
    limiter.is_allowed('a', window_seconds=60)
    limiter.attempts['a'] = [(datetime.now(timezone.utc) - timedelta(minutes=5), 1)]
    limiter.attempts['empty'] = []

    assert limiter.is_allowed('b', window_seconds=60)[0]
    assert set(limiter.attempts) == {'b'}


def test_roles():
    admin = User(id='1', email='a@example.com', role='admin')
    staff = User(id='2', email='s@example.com', role='staff')
    owner = User(id='3', email='o@example.com', role='user')
    unknown = User(id='4', email='x@example.com', role='superuser')

    assert admin.has_role('staff') and admin.has_role('admin')
    assert staff.has_role('staff') and not staff.has_role('admin')
    assert not owner.has_role('staff')
    assert unknown.role == 'user'


def test_user_document_mapping():
    user = User(id=None, email='o@example.com', name='Owner', vehicle_number='TN-01')
    user.set_password('secret1')
    doc = dict(user.to_document(), id='abc')

    loaded = User.from_document(doc)
    assert loaded.get_id() == 'abc'
    assert loaded.vehicle_number == 'TN-01'
    assert loaded.check_password('secret1')
    assert not loaded.check_password('wrong')
    assert loaded.is_active
    assert not User.from_document(dict(doc, isActive=False)).is_active


def test_security_event_timestamp_is_utc(app, caplog):
    with app.test_request_context('/'), caplog.at_level(logging.WARNING):
        log_security_event('report_export', email='staff@example.com')
    assert "'event_type': 'report_export'" in caplog.text
    assert "+00:00'" in caplog.text
